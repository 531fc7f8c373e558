from __future__ import annotations

import pytest

from mindcare.core.config import EngineSettings
from mindcare.domain.classifier import EmotionClassifier
from mindcare.domain.composer import load_phrase_book
from mindcare.domain.corpus import EmotionalCorpus, load_corpus
from mindcare.domain.patterns import build_patterns, load_patterns
from mindcare.domain.types import CorpusEntry
from mindcare.infra.paths import CORPUS_PATH, PATTERNS_PATH, PHRASES_PATH


class FirstChoice:
    """Deterministic stand-in for random.Random: always the first option."""

    def choice(self, seq):
        return seq[0]


def make_entry(entry_id, sample, tags=(), severity="moderate", support="validation", category="Test"):
    return CorpusEntry(
        id=entry_id,
        category=category,
        sample_input=sample,
        response=f"response {entry_id}",
        coping_strategy=f"coping {entry_id}",
        emotion_tags=tuple(tags),
        severity_level=severity,
        support_type=support,
    )


@pytest.fixture(scope="session")
def corpus():
    return load_corpus(CORPUS_PATH)


@pytest.fixture(scope="session")
def patterns():
    return load_patterns(PATTERNS_PATH)


@pytest.fixture(scope="session")
def phrases():
    return load_phrase_book(PHRASES_PATH)


@pytest.fixture(scope="session")
def classifier(corpus, patterns):
    return EmotionClassifier(corpus, patterns, EngineSettings())


@pytest.fixture
def small_corpus():
    return EmotionalCorpus(
        [
            make_entry(1, "I can't handle the pressure", ("overwhelmed", "pressure", "stress")),
            make_entry(2, "I'm scared of exams", ("anxiety", "exams", "fear"), support="guidance"),
            make_entry(3, "I feel empty inside", ("emptiness", "depression", "numb"), severity="high"),
            make_entry(4, "Nobody gets it", ("angry", "isolation"), support="encouragement"),
            make_entry(5, "I see no way out", ("trapped", "crisis"), severity="crisis", support="intervention"),
        ]
    )


@pytest.fixture
def small_patterns():
    return build_patterns(
        languages={
            "en": {
                "sad": ["sad", "down"],
                "angry": ["angry", "mad", "furious"],
                "anxious": ["anxious", "scared"],
            },
            "es": {"sad": ["triste"]},
        },
        crisis_keywords=["want to die", "see no way out"],
        high_severity_keywords=["overwhelmed", "can't cope"],
        complex_patterns={"anger-at-self": ["hate myself"]},
    )
