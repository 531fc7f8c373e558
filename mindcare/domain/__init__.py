"""Rule-based emotion analysis core.

Public entrypoints:
- EmotionClassifier(corpus, patterns, settings).classify(text, language, history)
- detect_complex(text, complex_patterns)
- find_similar(corpus, text, limit)
- ResponseComposer(phrases, rng)
"""

from .classifier import EmotionClassifier
from .complex_detector import detect_complex
from .composer import PhraseBook, ResponseComposer, load_phrase_book
from .corpus import EmotionalCorpus, build_corpus, load_corpus
from .matcher import find_similar, score_entry
from .patterns import build_patterns, load_patterns
from .types import (
    SEVERITY_LEVELS,
    SUPPORT_TYPES,
    AnalysisResult,
    CorpusEntry,
    EmotionalMemoryEntry,
    PatternTables,
)

__all__ = [
    "EmotionClassifier",
    "detect_complex",
    "PhraseBook",
    "ResponseComposer",
    "load_phrase_book",
    "EmotionalCorpus",
    "build_corpus",
    "load_corpus",
    "find_similar",
    "score_entry",
    "build_patterns",
    "load_patterns",
    "SEVERITY_LEVELS",
    "SUPPORT_TYPES",
    "AnalysisResult",
    "CorpusEntry",
    "EmotionalMemoryEntry",
    "PatternTables",
]
