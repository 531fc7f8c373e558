from __future__ import annotations

from typing import Iterable, List, Tuple

from .types import CorpusEntry

PHRASE_SCORE = 10
TOKEN_SCORE = 3
TAG_SCORE = 2
MIN_TOKEN_LEN = 3


def _tokens(text_lower: str) -> List[str]:
    """Whitespace tokens longer than 2 chars. Punctuation stays attached."""
    return [w for w in text_lower.split() if len(w) >= MIN_TOKEN_LEN]


def score_entry(entry: CorpusEntry, text: str) -> int:
    """
    Composite substring score of ``text`` against one corpus entry.

    - +10 if sample_input contains the whole input or vice versa
    - +3 per token found inside sample_input
    - +2 per (token, tag) pair where one contains the other

    Plain substring heuristics: no stemming, no punctuation stripping.
    """
    text_lower = (text or "").strip().lower()
    if not text_lower:
        return 0

    sample = entry.sample_input.lower()
    score = 0

    if text_lower in sample or sample in text_lower:
        score += PHRASE_SCORE

    for word in _tokens(text_lower):
        if word in sample:
            score += TOKEN_SCORE
        for tag in entry.emotion_tags:
            tag_lower = tag.lower()
            if tag_lower in word or word in tag_lower:
                score += TAG_SCORE

    return score


def rank_entries(entries: Iterable[CorpusEntry], text: str) -> List[Tuple[CorpusEntry, int]]:
    """(entry, score) pairs with score > 0, best first; ties keep corpus order."""
    scored = [(entry, score_entry(entry, text)) for entry in entries]
    # sorted() is stable, so equal scores stay in insertion order
    ranked = sorted(scored, key=lambda x: x[1], reverse=True)
    return [(entry, score) for entry, score in ranked if score > 0]


def find_similar(entries: Iterable[CorpusEntry], text: str, limit: int = 5) -> List[CorpusEntry]:
    """
    Up to ``limit`` corpus entries ranked by score_entry().

    Entries scoring 0 are never returned, so when nothing matches the result
    is an empty list and default-entry selection is left to the classifier.
    """
    if limit <= 0:
        return []
    return [entry for entry, _ in rank_entries(entries, text)[:limit]]
