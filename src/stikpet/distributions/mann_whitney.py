"""Exact distribution of the Mann-Whitney U statistic."""

from __future__ import annotations

from typing import List
from scipy.special import comb


def mann_whitney_frequencies(n1: int, n2: int) -> List[int]:
    """Number of orderings of n1 and n2 scores for each U = 0..n1*n2.

    The counts are the coefficients of the Gaussian binomial coefficient,
    built one factor (1 - q^(n2 + i)) / (1 - q^i) at a time. Terms above
    q^(n1 * n2) are dropped since the final polynomial has that degree.
    """
    size = n1 * n2 + 1
    freqs = [0] * size
    freqs[0] = 1
    for i in range(1, n1 + 1):
        shift = n2 + i
        for u in range(size - 1, shift - 1, -1):
            freqs[u] -= freqs[u - shift]
        for u in range(i, size):
            freqs[u] += freqs[u - i]
    return freqs


def mann_whitney_count(u: int, n1: int, n2: int) -> int:
    """Number of orderings of n1 and n2 scores that give U = u."""
    if u < 0 or u > n1 * n2:
        return 0
    return mann_whitney_frequencies(n1, n2)[int(u)]


def mann_whitney_pmf(u: int, n1: int, n2: int) -> float:
    """P(U = u) without ties."""
    return mann_whitney_count(int(u), n1, n2) / comb(n1 + n2, n1, exact=True)


def mann_whitney_cdf(u: int, n1: int, n2: int) -> float:
    """P(U <= u) without ties."""
    if u < 0:
        return 0.0
    total = sum(mann_whitney_frequencies(n1, n2)[: int(u) + 1])
    return total / comb(n1 + n2, n1, exact=True)
