from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

SEVERITY_LEVELS: Tuple[str, ...] = ("low", "moderate", "high", "crisis")
SUPPORT_TYPES: Tuple[str, ...] = ("validation", "guidance", "intervention", "encouragement")

NEUTRAL_EMOTION = "neutral"
CRISIS_EMOTION = "crisis"


def severity_rank(level: str) -> int:
    """Ordinal of a severity level (low=0 ... crisis=3), -1 if unknown."""
    try:
        return SEVERITY_LEVELS.index(level)
    except ValueError:
        return -1


@dataclass(frozen=True)
class CorpusEntry:
    """One labeled (input, response, strategy) record of the support corpus.

    - id: unique integer
    - category: grouping label (예: 'Academic Stress', 'Crisis')
    - sample_input: canonical utterance the entry represents
    - response: canned supportive reply
    - coping_strategy: short actionable suggestion
    - emotion_tags: free-form tags, insertion order kept
    - severity_level: one of SEVERITY_LEVELS
    - support_type: one of SUPPORT_TYPES

    crisis entries always carry support_type 'intervention'.
    """

    id: int
    category: str
    sample_input: str
    response: str
    coping_strategy: str
    emotion_tags: Tuple[str, ...]
    severity_level: str
    support_type: str

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["emotion_tags"] = list(self.emotion_tags)
        return d


@dataclass(frozen=True)
class PatternTables:
    """Keyword tables used by the classifier and the complex detector.

    - languages: language -> emotion -> trigger words (lowercased, key order kept)
    - crisis_keywords: phrases that force the crisis path
    - high_severity_keywords: phrases that raise severity to 'high'
    - complex_patterns: compound state label -> trigger phrases
    - fallback_language: table used for unknown language codes
    """

    languages: Mapping[str, Mapping[str, Tuple[str, ...]]]
    crisis_keywords: Tuple[str, ...]
    high_severity_keywords: Tuple[str, ...]
    complex_patterns: Mapping[str, Tuple[str, ...]]
    fallback_language: str = "en"

    def table_for(self, language: Optional[str]) -> Mapping[str, Tuple[str, ...]]:
        """Emotion table of ``language``; unknown or empty codes get the fallback table."""
        code = (language or "").strip().lower()
        if code in self.languages:
            return self.languages[code]
        return self.languages.get(self.fallback_language, {})


@dataclass
class AnalysisResult:
    """Structured output of one classify() call.

    - detected_emotion: pattern table key, 'neutral' or 'crisis'
    - severity: one of SEVERITY_LEVELS
    - confidence: 0.3~0.95 (non-crisis) or the crisis constant
    - suggested_response: contextual prefix + corpus response
    - similar_entries: best match first, at most result_limit
    - keyword_count: keyword hits of the winning emotion
    """

    detected_emotion: str
    severity: str
    confidence: float
    suggested_response: str
    coping_strategy: str
    support_type: str
    is_crisis: bool
    similar_entries: List[CorpusEntry] = field(default_factory=list)
    emotion_tags: List[str] = field(default_factory=list)
    keyword_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "detected_emotion": self.detected_emotion,
            "severity": self.severity,
            "confidence": self.confidence,
            "suggested_response": self.suggested_response,
            "coping_strategy": self.coping_strategy,
            "support_type": self.support_type,
            "is_crisis": self.is_crisis,
            "similar_entries": [e.to_dict() for e in self.similar_entries],
            "emotion_tags": list(self.emotion_tags),
            "keyword_count": self.keyword_count,
        }


@dataclass(frozen=True)
class EmotionalMemoryEntry:
    """Caller-owned record of a past interaction (most recent first in history).

    emotion is None when the raw record had no usable emotion; such entries
    count as absent context.
    """

    date: str = ""
    mood: str = ""
    emotion: Optional[str] = None
    context: str = ""
    analysis: Optional[Dict[str, Any]] = None

    @classmethod
    def from_raw(cls, raw: Any) -> "EmotionalMemoryEntry":
        """Coerce a dict / entry / anything else into an entry without raising."""
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, Mapping):
            return cls()

        emotion = raw.get("emotion")
        if not isinstance(emotion, str) or not emotion.strip():
            emotion = None

        analysis = raw.get("analysis")
        return cls(
            date=str(raw.get("date") or ""),
            mood=str(raw.get("mood") or ""),
            emotion=emotion.strip() if emotion else None,
            context=str(raw.get("context") or ""),
            analysis=dict(analysis) if isinstance(analysis, Mapping) else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "date": self.date,
            "mood": self.mood,
            "emotion": self.emotion,
            "context": self.context,
        }
        if self.analysis is not None:
            d["analysis"] = dict(self.analysis)
        return d
