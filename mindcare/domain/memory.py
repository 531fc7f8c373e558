from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .types import AnalysisResult, EmotionalMemoryEntry

NEGATIVE_EMOTIONS = ("sad", "anxious", "stressed", "angry")

_MOOD_BY_EMOTION: Dict[str, str] = {
    "happy": "good",
    "excited": "excellent",
    "sad": "low",
    "anxious": "low",
    "stressed": "moderate",
    "angry": "low",
    "neutral": "moderate",
}


def mood_label(score: float) -> str:
    """Mood tracker overall score (1~10) to a label."""
    if score <= 3:
        return "low"
    if score <= 6:
        return "moderate"
    if score <= 8:
        return "good"
    return "excellent"


def emotion_from_mood(mood: Mapping[str, Any]) -> str:
    """
    Dominant emotion of a mood tracker entry.

    Keys (1~10 scales): overall, energy, stress. Missing values count as
    the scale midpoint.
    """

    def _get(name: str) -> float:
        try:
            return float(mood.get(name, 5))
        except (TypeError, ValueError):
            return 5.0

    if _get("stress") > 7:
        return "stressed"
    if _get("overall") < 4:
        return "sad"
    if _get("energy") < 4:
        return "tired"
    if _get("overall") > 7:
        return "happy"
    return "neutral"


def mood_from_emotion(emotion: Optional[str]) -> str:
    return _MOOD_BY_EMOTION.get(emotion or "", "moderate")


def analyze_mood_pattern(history: Sequence[Any], window: int = 7) -> str:
    """
    Trend over the most recent ``window`` entries.

    - insufficient_data: fewer than 3 entries
    - concerning_pattern: 5+ negative emotions
    - mixed_pattern: 3+ negative emotions
    - stable_pattern: otherwise
    """
    if len(history) < 3:
        return "insufficient_data"

    recent = [EmotionalMemoryEntry.from_raw(h) for h in list(history)[:window]]
    negative = sum(1 for e in recent if e.emotion in NEGATIVE_EMOTIONS)

    if negative >= 5:
        return "concerning_pattern"
    if negative >= 3:
        return "mixed_pattern"
    return "stable_pattern"


def memory_from_mood_entries(moods: Sequence[Mapping[str, Any]], limit: int = 7) -> List[EmotionalMemoryEntry]:
    """Mood tracker records (most recent first) to memory entries."""
    out: List[EmotionalMemoryEntry] = []
    for mood in list(moods)[:limit]:
        try:
            overall = float(mood.get("overall", 5))
        except (TypeError, ValueError):
            overall = 5.0
        out.append(
            EmotionalMemoryEntry(
                date=str(mood.get("date") or ""),
                mood=mood_label(overall),
                emotion=emotion_from_mood(mood),
                context=str(mood.get("notes") or "No additional context"),
            )
        )
    return out


def build_memory_entry(
    text: str,
    analysis: AnalysisResult,
    complex_emotions: Sequence[str] = (),
    now: Optional[datetime] = None,
) -> EmotionalMemoryEntry:
    """Memory record for a freshly analysed message."""
    ts = (now or datetime.now()).isoformat()
    return EmotionalMemoryEntry(
        date=ts,
        mood=mood_from_emotion(analysis.detected_emotion),
        emotion=analysis.detected_emotion,
        context=text,
        analysis={
            "severity": analysis.severity,
            "confidence": analysis.confidence,
            "support_type": analysis.support_type,
            "complex_emotions": list(complex_emotions),
        },
    )
