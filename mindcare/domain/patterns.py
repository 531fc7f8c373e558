from __future__ import annotations

import logging
import re
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from mindcare.exceptions import CorpusLoadError
from mindcare.infra.yaml_io import load_yaml_section

from .types import PatternTables

logger = logging.getLogger(__name__)


def _normalize_keyword(w: str) -> str:
    # 공백 여러 개를 하나로, 양끝 공백 제거, 소문자
    return re.sub(r"\s+", " ", w.strip()).lower()


def _keyword_tuple(values: Any, where: str) -> Tuple[str, ...]:
    if values is None:
        return ()
    if not isinstance(values, list):
        raise CorpusLoadError(f"{where}: expected a list of keywords")

    out: List[str] = []
    for v in values:
        if not isinstance(v, str):
            raise CorpusLoadError(f"{where}: keyword {v!r} is not a string")
        w = _normalize_keyword(v)
        if w and w not in out:
            out.append(w)
    # empty list = matches nothing
    return tuple(out)


def _keyword_table(raw: Any, where: str) -> Mapping[str, Tuple[str, ...]]:
    if raw is None:
        return MappingProxyType({})
    if not isinstance(raw, dict):
        raise CorpusLoadError(f"{where}: expected a mapping")
    # dict keeps YAML key order; that order decides ties
    return MappingProxyType(
        {str(name): _keyword_tuple(words, f"{where}.{name}") for name, words in raw.items()}
    )


def build_patterns(
    languages: Dict[str, Dict[str, List[str]]],
    crisis_keywords: List[str],
    high_severity_keywords: List[str],
    complex_patterns: Optional[Dict[str, List[str]]] = None,
    fallback_language: str = "en",
) -> PatternTables:
    """Validate raw keyword lists and freeze them into PatternTables."""
    if not isinstance(languages, dict):
        raise CorpusLoadError("emotions: expected a mapping of language tables")

    tables = MappingProxyType(
        {
            str(code).lower(): _keyword_table(table, f"emotions.{code}")
            for code, table in languages.items()
        }
    )
    if tables and fallback_language not in tables:
        raise CorpusLoadError(f"fallback language '{fallback_language}' has no emotion table")

    return PatternTables(
        languages=tables,
        crisis_keywords=_keyword_tuple(crisis_keywords, "crisis_keywords"),
        high_severity_keywords=_keyword_tuple(high_severity_keywords, "high_severity_keywords"),
        complex_patterns=_keyword_table(complex_patterns or {}, "complex_patterns"),
        fallback_language=fallback_language,
    )


def load_patterns(path: Path) -> PatternTables:
    """
    Load emotion / crisis / severity / complex-emotion keyword tables.

    Expected shape:
        emotion_patterns:
          fallback_language: en
          emotions: {<lang>: {<emotion>: [words...]}}
          crisis_keywords: [...]
          high_severity_keywords: [...]
          complex_patterns: {<label>: [phrases...]}
    """
    section = load_yaml_section(path, "emotion_patterns")
    patterns = build_patterns(
        languages=section.get("emotions") or {},
        crisis_keywords=section.get("crisis_keywords") or [],
        high_severity_keywords=section.get("high_severity_keywords") or [],
        complex_patterns=section.get("complex_patterns") or {},
        fallback_language=str(section.get("fallback_language") or "en"),
    )
    logger.info(
        "pattern tables loaded: languages=%s crisis=%d high=%d complex=%d",
        ",".join(patterns.languages.keys()),
        len(patterns.crisis_keywords),
        len(patterns.high_severity_keywords),
        len(patterns.complex_patterns),
    )
    return patterns
