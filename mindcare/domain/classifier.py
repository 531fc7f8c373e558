from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from mindcare.core.config import EngineSettings

from .corpus import EmotionalCorpus
from .crisis import build_crisis_result, matched_crisis_keywords
from .matcher import find_similar
from .types import (
    NEUTRAL_EMOTION,
    AnalysisResult,
    CorpusEntry,
    EmotionalMemoryEntry,
    PatternTables,
)

logger = logging.getLogger(__name__)

# used only when the corpus is empty
DEFAULT_RESPONSE = "I hear you, and I want you to know that your feelings are valid."
DEFAULT_COPING = "Take some deep breaths and be gentle with yourself."
DEFAULT_SUPPORT_TYPE = "validation"

SAD_TO_ANGRY_PREFIX = (
    "I notice you've been feeling sad, and now there's anger too. "
    "Sometimes sadness can transform into anger - both feelings are valid. "
)
STILL_STRUGGLING_PREFIX = (
    "I see you're still struggling with these feelings. That must feel overwhelming. "
)

# escalations (previous emotion, current emotion) that get a transition sentence
_TRANSITION_PREFIXES: Dict[Tuple[str, str], str] = {
    ("sad", "angry"): SAD_TO_ANGRY_PREFIX,
}


def count_keywords(text_lower: str, table: Mapping[str, Sequence[str]]) -> Dict[str, int]:
    """Keyword hits per emotion; each keyword counts at most once."""
    return {
        emotion: sum(1 for k in keywords if k and k in text_lower)
        for emotion, keywords in table.items()
    }


def pick_emotion(scores: Mapping[str, int]) -> Tuple[str, int]:
    """
    Highest-scoring emotion. Ties go to the emotion listed last among the
    tied ones, so table key order is part of the classification contract.
    No hits at all yields ('neutral', 0).
    """
    best_emotion, best_count = NEUTRAL_EMOTION, 0
    for emotion, count in scores.items():
        if count > 0 and count >= best_count:
            best_emotion, best_count = emotion, count
    return best_emotion, best_count


def contextual_prefix(detected_emotion: str, history: Sequence[Any]) -> str:
    """Framing sentence derived from the most recent history entry ('' if none)."""
    if not history:
        return ""

    recent = EmotionalMemoryEntry.from_raw(history[0]).emotion
    if recent is None or detected_emotion == NEUTRAL_EMOTION:
        return ""

    transition = _TRANSITION_PREFIXES.get((recent, detected_emotion))
    if transition:
        return transition
    if recent == detected_emotion:
        return STILL_STRUGGLING_PREFIX
    return ""


class EmotionClassifier:
    """
    Rule-based emotion classifier.

    Combines crisis detection, keyword pattern counting and corpus similarity
    into one AnalysisResult. Holds only read-only data, so one instance can be
    shared by concurrent callers.
    """

    def __init__(
        self,
        corpus: EmotionalCorpus,
        patterns: PatternTables,
        settings: Optional[EngineSettings] = None,
    ):
        self.corpus = corpus
        self.patterns = patterns
        self.settings = settings or EngineSettings()

    def find_similar(self, text: str, limit: Optional[int] = None) -> list:
        return find_similar(
            self.corpus,
            text,
            self.settings.similar_limit if limit is None else limit,
        )

    def _best_entry(self, similar: Sequence[CorpusEntry], emotion: str) -> Optional[CorpusEntry]:
        if similar:
            return similar[0]
        tagged = self.corpus.first_with_tag(emotion)
        if tagged is not None:
            return tagged
        return self.corpus.first()

    def classify(
        self,
        text: str,
        language: str = "en",
        history: Sequence[Any] = (),
    ) -> AnalysisResult:
        """
        Analyse one message.

        Args:
            text: raw user text (any string, empty allowed)
            language: short language code; unknown codes use the English table
            history: recent EmotionalMemoryEntry records (or dicts), most recent first

        Returns:
            a fresh AnalysisResult; never raises for string input
        """
        text = text if isinstance(text, str) else ""
        history = history or ()
        text_lower = text.lower()

        # 1) crisis 우선 (short-circuit)
        crisis_hits = matched_crisis_keywords(text, self.patterns.crisis_keywords)
        if crisis_hits:
            logger.warning("crisis keywords matched: %s", ", ".join(crisis_hits))
            return build_crisis_result(
                text,
                self.corpus.crisis_entries(),
                confidence=self.settings.crisis_confidence,
                result_limit=self.settings.result_limit,
            )

        # 2) similar corpus entries
        similar = self.find_similar(text) if text.strip() else []

        # 3) + 4) keyword pattern scoring
        table = self.patterns.table_for(language)
        scores = count_keywords(text_lower, table)
        detected_emotion, keyword_count = pick_emotion(scores)

        # 5) severity
        if any(k in text_lower for k in self.patterns.high_severity_keywords):
            severity = "high"
        elif keyword_count >= 2:
            severity = "moderate"
        else:
            severity = "low"

        # 6) best entry: similar -> tagged -> first
        best_entry = self._best_entry(similar, detected_emotion)

        # 7) history context
        prefix = contextual_prefix(detected_emotion, history)

        # 8) confidence
        confidence = min(
            0.95,
            max(
                0.3,
                0.3 * keyword_count
                + (0.4 if similar else 0.0)
                + (0.3 if best_entry is not None else 0.0),
            ),
        )

        logger.debug(
            "classified emotion=%s count=%d severity=%s similar=%s confidence=%.2f",
            detected_emotion,
            keyword_count,
            severity,
            [e.id for e in similar],
            confidence,
        )

        if best_entry is not None:
            response = best_entry.response
            coping = best_entry.coping_strategy
            support_type = best_entry.support_type
            tags = list(best_entry.emotion_tags)
        else:
            response = DEFAULT_RESPONSE
            coping = DEFAULT_COPING
            support_type = DEFAULT_SUPPORT_TYPE
            tags = [detected_emotion]

        return AnalysisResult(
            detected_emotion=detected_emotion,
            severity=severity,
            confidence=confidence,
            suggested_response=prefix + response,
            coping_strategy=coping,
            support_type=support_type,
            is_crisis=False,
            similar_entries=list(similar[: self.settings.result_limit]),
            emotion_tags=tags,
            keyword_count=keyword_count,
        )
