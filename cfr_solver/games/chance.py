"""
Chance-outcome enumeration and sampling helpers.

Training cycles deterministically through small outcome spaces so that every
deal is visited equally often:

    next_permutation(seq)  — lexicographic successor, wrapping to sorted order
    ordered_pairs(items)   — every ordered pair of distinct items
    die_pairs(num_sides)   — every ordered (die_p1, die_p2) roll

Random sampling uses an explicit numpy Generator so runs are reproducible.
"""

from __future__ import annotations

import itertools
from collections.abc import Sequence

import numpy as np


def next_permutation(seq: Sequence[int]) -> tuple[int, ...]:
    """Return the next lexicographic permutation of *seq*.

    The last permutation (descending order) wraps around to the first
    (ascending order), so repeated application cycles through every
    permutation.

    Examples:
        >>> next_permutation((1, 2, 3))
        (1, 3, 2)
        >>> next_permutation((3, 2, 1))
        (1, 2, 3)
    """
    items = list(seq)
    i = len(items) - 2
    while i >= 0 and items[i] >= items[i + 1]:
        i -= 1
    if i < 0:
        return tuple(sorted(items))
    j = len(items) - 1
    while items[j] <= items[i]:
        j -= 1
    items[i], items[j] = items[j], items[i]
    items[i + 1 :] = reversed(items[i + 1 :])
    return tuple(items)


def ordered_pairs(items: Sequence[int]) -> list[tuple[int, int]]:
    """Return every ordered pair of distinct *items*, in lexicographic order.

    Raises:
        ValueError: If *items* contains duplicates.

    Examples:
        >>> ordered_pairs((3, 1, 2))
        [(1, 2), (1, 3), (2, 1), (2, 3), (3, 1), (3, 2)]
    """
    if len(set(items)) != len(items):
        raise ValueError(f"Items must be unique, got {tuple(items)}")
    return list(itertools.permutations(sorted(items), 2))


def die_pairs(num_sides: int) -> list[tuple[int, int]]:
    """Return every ordered pair of die faces, faces numbered 1..num_sides.

    Examples:
        >>> die_pairs(2)
        [(1, 1), (1, 2), (2, 1), (2, 2)]
    """
    if num_sides < 2:
        raise ValueError(f"A die needs at least 2 sides, got {num_sides}")
    return [(a, b) for a in range(1, num_sides + 1) for b in range(1, num_sides + 1)]


def sample_index(rng: np.random.Generator, probs: Sequence[float]) -> int:
    """Draw an index with probability proportional to *probs*.

    Raises:
        ValueError: If *probs* is empty or has no positive mass.
    """
    p = np.asarray(probs, dtype=np.float64)
    if p.size == 0:
        raise ValueError("Cannot sample from an empty distribution.")
    total = p.sum()
    if total <= 0.0:
        raise ValueError("Cannot sample from a distribution with zero mass.")
    return int(rng.choice(p.size, p=p / total))
