"""Enumeration of permutations for exact permutation tests."""

from __future__ import annotations

from itertools import permutations as _permutations
from typing import Iterator
import numpy as np

CHUNK_SIZE = 100_000


def permutations(n: int) -> np.ndarray:
    """All permutations of 1..n in lexicographic order, one per row."""
    if n < 1:
        raise ValueError(f"n must be >= 1, got {n}")
    return np.array(list(_permutations(range(1, n + 1))), dtype=np.int64)


def permutation_chunks(n: int, chunk_size: int = CHUNK_SIZE) -> Iterator[np.ndarray]:
    """Yield the zero-based permutations of range(n) in blocks of rows."""
    block = []
    for perm in _permutations(range(n)):
        block.append(perm)
        if len(block) == chunk_size:
            yield np.array(block, dtype=np.int64)
            block = []
    if block:
        yield np.array(block, dtype=np.int64)
