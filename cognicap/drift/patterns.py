"""
Response Patterns — structural fingerprint of an agent's baseline samples.

Captured alongside the terminology profile when a baseline is established:
  avg_length       — mean sample length in characters
  structure_types  — markdown structures present (code blocks, lists, headers)
  common_phrases   — word trigrams repeated more than twice, most frequent first
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass, field
from typing import List, Sequence

_NUMBERED = re.compile(r"^\d+\.", re.MULTILINE)
_BULLET = re.compile(r"^[-*]", re.MULTILINE)
_HEADER = re.compile(r"^#{1,6}\s", re.MULTILINE)

MAX_PHRASES = 10
MIN_PHRASE_COUNT = 3


@dataclass(frozen=True)
class ResponsePatterns:
    avg_length: float = 0.0
    structure_types: List[str] = field(default_factory=list)
    common_phrases: List[str] = field(default_factory=list)


def analyze_patterns(samples: Sequence[str]) -> ResponsePatterns:
    if not samples:
        return ResponsePatterns()
    return ResponsePatterns(
        avg_length=sum(len(s) for s in samples) / len(samples),
        structure_types=identify_structures(samples),
        common_phrases=common_phrases(samples),
    )


def identify_structures(samples: Sequence[str]) -> List[str]:
    found: List[str] = []
    for sample in samples:
        if "```" in sample:
            found.append("code_block")
        if _NUMBERED.search(sample):
            found.append("numbered_list")
        if _BULLET.search(sample):
            found.append("bullet_list")
        if _HEADER.search(sample):
            found.append("headers")
    # de-duplicate, first occurrence wins
    return list(dict.fromkeys(found))


def common_phrases(samples: Sequence[str]) -> List[str]:
    counts: Counter = Counter()
    for sample in samples:
        words = sample.split()
        for i in range(len(words) - 2):
            counts[" ".join(words[i:i + 3]).lower()] += 1
    # Counter.most_common keeps insertion order among equal counts
    return [
        phrase
        for phrase, n in counts.most_common()
        if n >= MIN_PHRASE_COUNT
    ][:MAX_PHRASES]
