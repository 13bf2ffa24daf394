"""Exact distribution of the Wilcoxon signed rank statistic."""

from __future__ import annotations

from itertools import product
import numpy as np

WILCOXON_METHODS = ["shift", "recursive", "enumerate"]


def _signed_rank_counts(n: int) -> np.ndarray:
    memo = {}

    def count(t: int, m: int) -> int:
        if t < 0 or t > m * (m + 1) // 2:
            return 0
        if m == 0:
            return 1
        if (t, m) not in memo:
            memo[(t, m)] = count(t - m, m - 1) + count(t, m - 1)
        return memo[(t, m)]

    return np.array([count(t, n) for t in range(n * (n + 1) // 2 + 1)], dtype=np.float64)


def signed_rank_frequencies(n: int, method: str = "shift") -> np.ndarray:
    """Number of sign assignments giving each rank sum T = 0..n(n+1)/2.

    Args:
        n: Number of non-zero differences
        method: "shift" adds a shifted copy of the frequencies for every rank,
            "recursive" uses the counting recursion, "enumerate" lists all
            2^n sign assignments
    """
    if method not in WILCOXON_METHODS:
        raise ValueError(f"method must be one of {WILCOXON_METHODS}, got {method}")
    max_rank = n * (n + 1) // 2
    if method == "shift":
        freqs = np.zeros(max_rank + 1, dtype=np.float64)
        freqs[0] = 1
        for i in range(1, n + 1):
            shifted = np.zeros_like(freqs)
            shifted[i:] = freqs[:-i]
            freqs = freqs + shifted
        return freqs
    if method == "recursive":
        return _signed_rank_counts(n)
    ranks = np.arange(1, n + 1)
    sums = [int(np.dot(signs, ranks)) for signs in product((0, 1), repeat=n)]
    return np.bincount(sums, minlength=max_rank + 1).astype(np.float64)


def wilcoxon_pmf(t: int, n: int, method: str = "shift") -> float:
    """P(T = t) for the signed rank statistic of n differences."""
    freqs = signed_rank_frequencies(n, method)
    if t < 0 or t >= len(freqs):
        return 0.0
    return float(freqs[int(t)] / freqs.sum())


def wilcoxon_cdf(t: int, n: int, method: str = "shift") -> float:
    """P(T <= t) for the signed rank statistic of n differences."""
    freqs = signed_rank_frequencies(n, method)
    if t < 0:
        return 0.0
    return float(freqs[: int(t) + 1].sum() / freqs.sum())
