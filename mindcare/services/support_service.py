from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

from mindcare.core.config import EngineSettings, load_settings
from mindcare.domain.classifier import EmotionClassifier
from mindcare.domain.complex_detector import detect_complex as _detect_complex
from mindcare.domain.composer import ResponseComposer, load_phrase_book
from mindcare.domain.corpus import load_corpus
from mindcare.domain.memory import analyze_mood_pattern, build_memory_entry, memory_from_mood_entries
from mindcare.domain.patterns import load_patterns
from mindcare.domain.types import AnalysisResult, CorpusEntry
from mindcare.exceptions import AnalysisError, ConfigError, CorpusLoadError, InputDataError
from mindcare.infra import memory_repo
from mindcare.infra.paths import CORPUS_PATH, DATA_DIR, PATTERNS_PATH, PHRASES_PATH

logger = logging.getLogger(__name__)

MAX_TEXT_LENGTH = 5000

_ENGINE: Optional["SupportEngine"] = None


@dataclass
class SupportEngine:
    """Classifier + composer sharing the same read-only corpus and tables."""

    classifier: EmotionClassifier
    composer: ResponseComposer
    settings: EngineSettings

    def complex_emotions(self, text: str) -> List[str]:
        return _detect_complex(text, self.classifier.patterns.complex_patterns)


def _build_engine() -> SupportEngine:
    if not DATA_DIR.is_dir():
        raise ConfigError(f"data directory not found: {DATA_DIR} (check MINDCARE_DATA_DIR)")

    settings = load_settings()
    corpus = load_corpus(CORPUS_PATH)
    patterns = load_patterns(PATTERNS_PATH)
    phrases = load_phrase_book(PHRASES_PATH)

    eng = SupportEngine(
        classifier=EmotionClassifier(corpus, patterns, settings),
        composer=ResponseComposer(phrases, seed=settings.response_seed),
        settings=settings,
    )
    logger.info("support engine ready (corpus=%d entries)", len(corpus))
    return eng


def get_engine() -> SupportEngine:
    """
    프로세스 전역 엔진 (1회 로드, 요청마다 로드 금지).

    Corpus, pattern tables and phrase book are loaded from the data
    directory on first use and stay read-only afterwards.
    """
    global _ENGINE
    if _ENGINE is None:
        _ENGINE = _build_engine()
    return _ENGINE


def reset_engine() -> None:
    """Drop the cached engine so the next call reloads data files."""
    global _ENGINE
    _ENGINE = None


# ---------------------------
# narrow call boundary
# ---------------------------

def engine() -> SupportEngine:
    """get_engine() for request paths: data problems surface as AnalysisError."""
    try:
        return get_engine()
    except (ConfigError, CorpusLoadError) as e:
        logger.error("support engine failed to load: %s", e)
        raise AnalysisError(f"emotion engine unavailable: {e}") from e


def classify(text: str, language_code: str = "", recent_history: Sequence[Any] = ()) -> AnalysisResult:
    eng = engine()
    return eng.classifier.classify(
        text,
        language_code or eng.settings.default_language,
        recent_history,
    )


def detect_complex(text: str) -> List[str]:
    return engine().complex_emotions(text)


def find_similar(text: str, limit: int = 5) -> List[CorpusEntry]:
    return engine().classifier.find_similar(text, limit)


# ---------------------------
# chat use (memory + composed reply)
# ---------------------------

def _validate_input(user_id: str, text: str) -> None:
    if not user_id or not user_id.strip():
        raise InputDataError("user_id is required.")
    if not text or not text.strip():
        raise InputDataError("text is required.")
    if len(text) > MAX_TEXT_LENGTH:
        raise InputDataError(f"text is longer than {MAX_TEXT_LENGTH} characters.")


def chat(
    user_id: str,
    text: str,
    language: str = "",
    is_voice: bool = False,
    support: Optional[SupportEngine] = None,
    save_memory: bool = True,
    mood_entries: Optional[Sequence[Mapping[str, Any]]] = None,
) -> Dict[str, Any]:
    """
    One chat turn.

    - load the user's emotional memory; a user with no stored memory is
      seeded from ``mood_entries`` (mood tracker records, most recent first)
    - classify with it as context, detect complex emotions
    - compose the reply and next-step suggestion
    - prepend the turn to memory (capped at settings.memory_limit)
    """
    _validate_input(user_id, text)
    eng = support or engine()
    language = language or eng.settings.default_language

    history = memory_repo.load_history(user_id)
    if not history and mood_entries:
        history = memory_from_mood_entries(mood_entries)
    analysis = eng.classifier.classify(text, language, history)
    complex_emotions = eng.complex_emotions(text)

    reply = eng.composer.compose_chat_reply(
        analysis,
        history=history,
        complex_emotions=complex_emotions,
        language=language,
        is_voice=is_voice,
    )
    suggestion = eng.composer.suggest_next_step(analysis.detected_emotion, analysis, language)

    if save_memory:
        try:
            history = memory_repo.append_history(
                user_id,
                build_memory_entry(text, analysis, complex_emotions),
                limit=eng.settings.memory_limit,
            )
        except OSError as e:
            logger.warning("memory save failed: %s", e)

    return {
        "reply": reply,
        "suggestion": suggestion,
        "analysis": analysis.to_dict(),
        "complex_emotions": complex_emotions,
        "mood_pattern": analyze_mood_pattern(history),
    }
