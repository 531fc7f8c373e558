from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from mindcare.exceptions import CorpusLoadError
from mindcare.infra.yaml_io import load_yaml_section

from .types import SEVERITY_LEVELS, SUPPORT_TYPES, CorpusEntry

logger = logging.getLogger(__name__)

_REQUIRED_TEXT_FIELDS = ("category", "sample_input", "response", "coping_strategy")


class EmotionalCorpus:
    """Read-only, ordered collection of CorpusEntry records.

    Position in the corpus is meaningful: similarity ties and every
    "first entry" fallback resolve by insertion order.
    """

    def __init__(self, entries: Iterable[CorpusEntry] = ()):
        self._entries: Tuple[CorpusEntry, ...] = tuple(entries)
        self._by_id: Dict[int, CorpusEntry] = {}
        for entry in self._entries:
            if entry.id in self._by_id:
                raise CorpusLoadError(f"duplicate corpus id: {entry.id}")
            if entry.severity_level == "crisis" and entry.support_type != "intervention":
                raise CorpusLoadError(
                    f"corpus id {entry.id}: crisis entries must use support_type 'intervention'"
                )
            self._by_id[entry.id] = entry

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CorpusEntry]:
        return iter(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    @property
    def entries(self) -> Tuple[CorpusEntry, ...]:
        return self._entries

    def get(self, entry_id: int) -> Optional[CorpusEntry]:
        return self._by_id.get(entry_id)

    def first(self) -> Optional[CorpusEntry]:
        return self._entries[0] if self._entries else None

    def crisis_entries(self) -> List[CorpusEntry]:
        return self.by_severity("crisis")

    def by_category(self, category: str) -> List[CorpusEntry]:
        return [e for e in self._entries if e.category == category]

    def by_severity(self, level: str) -> List[CorpusEntry]:
        return [e for e in self._entries if e.severity_level == level]

    def categories(self) -> List[str]:
        """Unique categories in first-seen order."""
        return list(dict.fromkeys(e.category for e in self._entries))

    def tags(self) -> List[str]:
        """Unique emotion tags in first-seen order."""
        return list(dict.fromkeys(t for e in self._entries for t in e.emotion_tags))

    def first_with_tag(self, tag: str) -> Optional[CorpusEntry]:
        for entry in self._entries:
            if tag in entry.emotion_tags:
                return entry
        return None


def _entry_from_raw(raw: Any, index: int) -> CorpusEntry:
    if not isinstance(raw, dict):
        raise CorpusLoadError(f"corpus entry #{index} is not a mapping")

    entry_id = raw.get("id")
    if not isinstance(entry_id, int) or isinstance(entry_id, bool):
        raise CorpusLoadError(f"corpus entry #{index}: 'id' must be an integer")

    for name in _REQUIRED_TEXT_FIELDS:
        value = raw.get(name)
        if not isinstance(value, str) or not value.strip():
            raise CorpusLoadError(f"corpus id {entry_id}: '{name}' must be a non-empty string")

    severity = raw.get("severity_level")
    if severity not in SEVERITY_LEVELS:
        raise CorpusLoadError(f"corpus id {entry_id}: unknown severity_level {severity!r}")

    support = raw.get("support_type")
    if support not in SUPPORT_TYPES:
        raise CorpusLoadError(f"corpus id {entry_id}: unknown support_type {support!r}")

    tags_raw = raw.get("emotion_tags") or []
    if not isinstance(tags_raw, list):
        raise CorpusLoadError(f"corpus id {entry_id}: 'emotion_tags' must be a list")
    # dedup(순서 유지)
    tags = tuple(dict.fromkeys(str(t).strip() for t in tags_raw if str(t).strip()))

    return CorpusEntry(
        id=entry_id,
        category=raw["category"].strip(),
        sample_input=raw["sample_input"].strip(),
        response=raw["response"].strip(),
        coping_strategy=raw["coping_strategy"].strip(),
        emotion_tags=tags,
        severity_level=severity,
        support_type=support,
    )


def build_corpus(raw_entries: Sequence[Any]) -> EmotionalCorpus:
    """Validate raw mappings (YAML shape) and build a corpus from them."""
    return EmotionalCorpus(_entry_from_raw(raw, i) for i, raw in enumerate(raw_entries))


def load_corpus(path: Path) -> EmotionalCorpus:
    """
    Load the labeled support corpus YAML.

    Expected shape:
        emotional_corpus:
          entries:
            - {id, category, sample_input, response, coping_strategy,
               emotion_tags, severity_level, support_type}
    """
    section = load_yaml_section(path, "emotional_corpus")
    raw_entries = section.get("entries") or []
    if not isinstance(raw_entries, list):
        raise CorpusLoadError(f"{path}: 'entries' must be a list")

    corpus = build_corpus(raw_entries)
    logger.info(
        "corpus loaded: %d entries, %d crisis (%s)",
        len(corpus),
        len(corpus.crisis_entries()),
        path.name,
    )
    return corpus
