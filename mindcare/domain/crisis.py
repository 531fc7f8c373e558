from __future__ import annotations

from typing import Iterable, List, Sequence

from .types import CRISIS_EMOTION, AnalysisResult, CorpusEntry

HOTLINE_SENTENCE = (
    "Please reach out to a crisis hotline immediately: "
    "988 (US) or your local emergency services."
)
IMMEDIATE_HELP_PREFIX = "Immediate professional help needed. "
CRISIS_TAGS = ("crisis", "emergency", "intervention-needed")

# used when the corpus holds no crisis entries at all
GENERIC_CRISIS_RESPONSE = (
    "I'm really concerned about what you're sharing, and I'm glad you told me. "
    "You don't have to go through this alone."
)
GENERIC_CRISIS_COPING = "Contact a crisis hotline or a trusted person right now."

# leading characters of a crisis sample_input that must appear in the input
_SAMPLE_PREFIX_LEN = 10


def matched_crisis_keywords(text: str, keywords: Iterable[str]) -> List[str]:
    """Crisis keywords occurring in the lowercased text, in table order."""
    text_lower = (text or "").lower()
    return [k for k in keywords if k and k in text_lower]


def detect_crisis(text: str, keywords: Iterable[str]) -> bool:
    text_lower = (text or "").lower()
    return any(k and k in text_lower for k in keywords)


def select_crisis_entry(text: str, crisis_entries: Sequence[CorpusEntry]) -> CorpusEntry:
    """First crisis entry whose opening characters appear in the input, else the first one."""
    text_lower = (text or "").lower()
    for entry in crisis_entries:
        if entry.sample_input.lower()[:_SAMPLE_PREFIX_LEN] in text_lower:
            return entry
    return crisis_entries[0]


def build_crisis_result(
    text: str,
    crisis_entries: Sequence[CorpusEntry],
    *,
    confidence: float = 0.95,
    result_limit: int = 3,
) -> AnalysisResult:
    """AnalysisResult for the crisis path. The response is never empty."""
    if crisis_entries:
        entry = select_crisis_entry(text, crisis_entries)
        response = entry.response
        coping = entry.coping_strategy
    else:
        response = GENERIC_CRISIS_RESPONSE
        coping = GENERIC_CRISIS_COPING

    return AnalysisResult(
        detected_emotion=CRISIS_EMOTION,
        severity="crisis",
        confidence=confidence,
        suggested_response=f"{response} {HOTLINE_SENTENCE}",
        coping_strategy=IMMEDIATE_HELP_PREFIX + coping,
        support_type="intervention",
        is_crisis=True,
        similar_entries=list(crisis_entries[:result_limit]),
        emotion_tags=list(CRISIS_TAGS),
        keyword_count=0,
    )
