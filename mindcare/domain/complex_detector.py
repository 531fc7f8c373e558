from __future__ import annotations

from typing import List, Mapping, Sequence


def detect_complex(text: str, complex_patterns: Mapping[str, Sequence[str]]) -> List[str]:
    """
    Compound emotional states present in ``text``.

    Every label with at least one trigger phrase inside the lowercased text is
    returned, in table order. Independent of the primary classification; an
    empty list is a normal result.
    """
    text_lower = (text or "").lower()
    if not text_lower.strip():
        return []

    detected: List[str] = []
    for label, phrases in complex_patterns.items():
        if any(p and p in text_lower for p in phrases):
            detected.append(label)
    return detected
