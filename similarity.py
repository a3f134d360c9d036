"""
similarity.py — overlap score between two token collections.
"""
from __future__ import annotations

import math
from typing import Iterable


def similarity(a: Iterable[str], b: Iterable[str]) -> float:
    """
    |A ∩ B| / sqrt(|A| · |B|) over the de-duplicated sets, in [0, 1].

    Not Jaccard: a small set fully contained in a much larger one scores
    below 1.0. The denominator is floored at 1 so two empty sets give 0.
    """
    set_a, set_b = set(a), set(b)
    shared = len(set_a & set_b)
    denominator = max(1.0, math.sqrt(len(set_a) * len(set_b)))
    return shared / denominator
