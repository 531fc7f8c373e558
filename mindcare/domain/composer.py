from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

from mindcare.exceptions import CorpusLoadError
from mindcare.infra.yaml_io import load_yaml_section

from .classifier import SAD_TO_ANGRY_PREFIX, STILL_STRUGGLING_PREFIX
from .crisis import GENERIC_CRISIS_RESPONSE, HOTLINE_SENTENCE
from .types import AnalysisResult, EmotionalMemoryEntry

logger = logging.getLogger(__name__)

# severity -> opener pool. crisis never reaches the opener path.
SEVERITY_POOLS: Dict[str, str] = {
    "high": "validation",
    "moderate": "guidance",
    "low": "encouragement",
}
_FALLBACK_LANGUAGE = "en"
_FALLBACK_EMOTION = "sad"
_MEMORY_WINDOW = 3


class ChoiceSource(Protocol):
    """Anything with random.Random-style choice(); injected for deterministic tests."""

    def choice(self, seq: Sequence[str]) -> str: ...


@dataclass(frozen=True)
class PhraseBook:
    """Static phrase tables used by ResponseComposer.

    - openers: pool name -> generic therapeutic openers
    - emotion_specific: language -> emotion -> elaboration sentence
    - complex_note: template with a {labels} placeholder
    - crisis_hotline_block: appended to crisis chat replies
    - support_closings: support type -> closing line
    - voice_additions: language -> empathy sentence for voice messages
    - severity_notes / platform_suggestions / basic_suggestions: next-step hints
    """

    openers: Mapping[str, Tuple[str, ...]]
    emotion_specific: Mapping[str, Mapping[str, str]]
    complex_note: str = "This seems to touch on {labels}."
    crisis_hotline_block: str = HOTLINE_SENTENCE
    support_closings: Mapping[str, str] = field(default_factory=dict)
    voice_additions: Mapping[str, str] = field(default_factory=dict)
    severity_notes: Mapping[str, str] = field(default_factory=dict)
    platform_suggestions: Mapping[str, str] = field(default_factory=dict)
    basic_suggestions: Mapping[str, Mapping[str, str]] = field(default_factory=dict)


def _str_map(raw: Any, where: str) -> Mapping[str, str]:
    if raw is None:
        return MappingProxyType({})
    if not isinstance(raw, dict) or not all(isinstance(v, str) for v in raw.values()):
        raise CorpusLoadError(f"{where}: expected a mapping of strings")
    return MappingProxyType({str(k): v.strip() for k, v in raw.items()})


def load_phrase_book(path: Path) -> PhraseBook:
    """Load therapeutic phrase tables from YAML (section 'therapeutic_phrases')."""
    section = load_yaml_section(path, "therapeutic_phrases")

    openers_raw = section.get("openers")
    if not isinstance(openers_raw, dict):
        raise CorpusLoadError(f"{path}: 'openers' must be a mapping")
    openers: Dict[str, Tuple[str, ...]] = {}
    for pool, phrases in openers_raw.items():
        if not isinstance(phrases, list) or not phrases:
            raise CorpusLoadError(f"{path}: opener pool '{pool}' must be a non-empty list")
        openers[str(pool)] = tuple(str(p).strip() for p in phrases)
    for pool in SEVERITY_POOLS.values():
        if pool not in openers:
            raise CorpusLoadError(f"{path}: missing opener pool '{pool}'")

    emotion_raw = section.get("emotion_specific") or {}
    if not isinstance(emotion_raw, dict):
        raise CorpusLoadError(f"{path}: 'emotion_specific' must be a mapping")
    emotion_specific = MappingProxyType(
        {str(lang): _str_map(table, f"emotion_specific.{lang}") for lang, table in emotion_raw.items()}
    )

    basic_raw = section.get("basic_suggestions") or {}
    if not isinstance(basic_raw, dict):
        raise CorpusLoadError(f"{path}: 'basic_suggestions' must be a mapping")

    book = PhraseBook(
        openers=MappingProxyType(openers),
        emotion_specific=emotion_specific,
        complex_note=str(section.get("complex_note") or PhraseBook.complex_note),
        crisis_hotline_block=str(section.get("crisis_hotline_block") or HOTLINE_SENTENCE),
        support_closings=_str_map(section.get("support_closings"), "support_closings"),
        voice_additions=_str_map(section.get("voice_additions"), "voice_additions"),
        severity_notes=_str_map(section.get("severity_notes"), "severity_notes"),
        platform_suggestions=_str_map(section.get("platform_suggestions"), "platform_suggestions"),
        basic_suggestions=MappingProxyType(
            {str(lang): _str_map(t, f"basic_suggestions.{lang}") for lang, t in basic_raw.items()}
        ),
    )
    logger.info("phrase book loaded: pools=%s languages=%s", list(openers), list(emotion_specific))
    return book


class ResponseComposer:
    """
    Builds user-facing text from an analysis.

    The opener pick is the only non-deterministic step; pass ``rng`` (e.g. a
    seeded random.Random) to make it reproducible.
    """

    def __init__(self, phrases: PhraseBook, rng: Optional[ChoiceSource] = None, seed: Optional[int] = None):
        self.phrases = phrases
        self.rng: ChoiceSource = rng if rng is not None else random.Random(seed)

    # ---------------------------
    # building blocks
    # ---------------------------

    def opener(self, severity: str, support_type: str = "") -> str:
        pool_name = SEVERITY_POOLS.get(severity)
        if pool_name is None:
            pool_name = support_type if support_type in self.phrases.openers else "encouragement"
        pool = self.phrases.openers.get(pool_name) or ()
        return self.rng.choice(pool) if pool else ""

    def emotion_sentence(self, emotion: str, language: str = "en") -> str:
        """Elaboration for ``emotion``: language table, then English, then the 'sad' line."""
        tables = self.phrases.emotion_specific
        lang_table = tables.get((language or "").lower()) or {}
        if emotion in lang_table:
            return lang_table[emotion]

        en_table = tables.get(_FALLBACK_LANGUAGE) or {}
        if emotion in en_table:
            return en_table[emotion]
        return lang_table.get(_FALLBACK_EMOTION) or en_table.get(_FALLBACK_EMOTION, "")

    def complex_sentence(self, complex_emotions: Sequence[str]) -> str:
        if not complex_emotions:
            return ""
        return self.phrases.complex_note.format(labels=", ".join(complex_emotions))

    # ---------------------------
    # public API
    # ---------------------------

    def compose(
        self,
        emotion: str,
        severity: str,
        support_type: str,
        analysis: Optional[AnalysisResult] = None,
        complex_emotions: Sequence[str] = (),
        language: str = "en",
    ) -> str:
        """
        Therapeutic message: opener + emotion elaboration (+ complex-emotion note).

        Crisis severity takes the intervention path: the crisis response of the
        analysis is returned as is (or a generic crisis message with hotline).
        """
        if severity == "crisis":
            if analysis is not None and analysis.suggested_response:
                return analysis.suggested_response
            return f"{GENERIC_CRISIS_RESPONSE} {HOTLINE_SENTENCE}"

        parts = [
            self.opener(severity, support_type),
            self.emotion_sentence(emotion, language),
            self.complex_sentence(complex_emotions),
        ]
        return " ".join(p for p in parts if p)

    def compose_chat_reply(
        self,
        analysis: AnalysisResult,
        history: Sequence[Any] = (),
        complex_emotions: Sequence[str] = (),
        language: str = "en",
        is_voice: bool = False,
    ) -> str:
        """
        Full chat reply for a classified message.

        - crisis: crisis response + hotline block, nothing else
        - otherwise: memory pattern framing (last 3 entries), classifier response,
          complex-emotion note, voice empathy line, support-type closing
        """
        if analysis.is_crisis:
            return f"{analysis.suggested_response}\n\n{self.phrases.crisis_hotline_block}"

        response = analysis.suggested_response
        response = self._memory_framing(analysis, history) + response

        note = self.complex_sentence(complex_emotions)
        if note:
            response += "\n\n" + note

        if is_voice:
            voice = self.phrases.voice_additions.get((language or "").lower()) or self.phrases.voice_additions.get(
                _FALLBACK_LANGUAGE, ""
            )
            if voice:
                response += " " + voice

        closing = self.phrases.support_closings.get(analysis.support_type)
        if closing:
            response += "\n\n" + closing
        return response

    def suggest_next_step(
        self,
        emotion: str,
        analysis: Optional[AnalysisResult] = None,
        language: str = "en",
    ) -> str:
        """Coping suggestion shown beside a reply."""
        if analysis is not None:
            if analysis.severity == "crisis":
                return self.phrases.severity_notes.get("crisis", analysis.coping_strategy)

            parts = [analysis.coping_strategy]
            if analysis.severity == "high" and self.phrases.severity_notes.get("high"):
                parts.append(self.phrases.severity_notes["high"])
            platform = self.phrases.platform_suggestions.get(emotion) or self.phrases.platform_suggestions.get(
                _FALLBACK_EMOTION
            )
            if platform:
                parts.append(platform)
            return " ".join(p for p in parts if p)

        table = self.phrases.basic_suggestions.get((language or "").lower()) or self.phrases.basic_suggestions.get(
            _FALLBACK_LANGUAGE, {}
        )
        return table.get(emotion) or table.get(_FALLBACK_EMOTION, "")

    # ---------------------------
    # helpers
    # ---------------------------

    @staticmethod
    def _memory_framing(analysis: AnalysisResult, history: Sequence[Any]) -> str:
        """Pattern sentence over the last few history entries.

        Skipped when the classifier already framed the response from history.
        """
        if not history:
            return ""
        if analysis.suggested_response.startswith((SAD_TO_ANGRY_PREFIX, STILL_STRUGGLING_PREFIX)):
            return ""

        recent: List[str] = [
            e.emotion
            for e in (EmotionalMemoryEntry.from_raw(h) for h in list(history)[:_MEMORY_WINDOW])
            if e.emotion
        ]
        if not recent:
            return ""

        emotion = analysis.detected_emotion
        if "sad" in recent and emotion == "angry":
            return (
                f"I notice you've been feeling {' → '.join(recent)}. "
                "Sometimes sadness can transform into anger - both feelings are valid. "
            )
        if recent.count(emotion) >= 2:
            return (
                f"I see you're still working through feelings of {emotion}. "
                "That persistence of emotion can feel overwhelming. "
            )
        return ""
