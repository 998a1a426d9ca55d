"""
Terminology Extractor — classifies whitespace tokens as technical terms and
counts them into a TerminologyProfile (term → occurrences).

Recognition is a fixed whole-token pattern set; there is no stemming and no
punctuation stripping, so "api," is not the term "api".
"""

from __future__ import annotations

import re
from collections import Counter
from typing import Dict, Iterable, List, Pattern

TerminologyProfile = Dict[str, int]

TECHNICAL_PATTERNS: List[Pattern[str]] = [
    re.compile(r"^(api|sdk|cli|gui|ui|ux)$", re.IGNORECASE),
    re.compile(r"^(async|sync|await|promise)$", re.IGNORECASE),
    re.compile(r"^(function|method|class|interface)$", re.IGNORECASE),
    re.compile(r"^(database|query|index|schema)$", re.IGNORECASE),
    re.compile(r"^(agent|protocol|orchestrat)$", re.IGNORECASE),
    re.compile(r"^(semantic|cognitive|drift|overload)$", re.IGNORECASE),
]


def is_technical_term(word: str) -> bool:
    return any(p.match(word) for p in TECHNICAL_PATTERNS)


def extract_terminology(samples: Iterable[str]) -> TerminologyProfile:
    """Count technical terms across all *samples* (lower-cased)."""
    counts: Counter = Counter()
    for sample in samples:
        for word in sample.lower().split():
            if is_technical_term(word):
                counts[word] += 1
    return dict(counts)


def profile_drift(baseline: TerminologyProfile, current: TerminologyProfile) -> float:
    """
    1 - (sum of per-term minima / sum of per-term maxima) over the term union.

    An empty union scores 0: text with no recognized vocabulary is treated as
    "nothing to compare", not as maximal drift.
    """
    similarity = 0
    total = 0
    for term in set(baseline) | set(current):
        b = baseline.get(term, 0)
        c = current.get(term, 0)
        similarity += min(b, c)
        total += max(b, c)
    if total == 0:
        return 0.0
    return 1.0 - similarity / total
