"""Multinomial probabilities for the exact goodness-of-fit test."""

from __future__ import annotations

import math
from typing import List, Sequence
import numpy as np
from scipy.special import gamma, gammaln

MULTINOMIAL_METHODS = ["loggamma", "gamma", "factorial", "mprob"]


def multinomial_pmf(f: Sequence[int], p: Sequence[float], method: str = "loggamma") -> float:
    """Probability of observing counts f under category probabilities p.

    Args:
        f: Counts per category
        p: Probabilities per category (summing to 1)
        method: "loggamma" (default, stable for large n), "gamma",
            "factorial", or "mprob" (sequential product without large
            intermediate numbers)

    Returns:
        The multinomial probability
    """
    f = np.asarray(f, dtype=float)
    p = np.asarray(p, dtype=float)
    n = f.sum()
    if method == "loggamma":
        with np.errstate(divide="ignore", invalid="ignore"):
            terms = np.where(f > 0, f * np.log(p), 0.0)
        return float(np.exp(gammaln(n + 1) + np.sum(terms - gammaln(f + 1))))
    if method == "gamma":
        return float(gamma(n + 1) / np.prod(gamma(f + 1)) * np.prod(p**f))
    if method == "factorial":
        denom = np.prod([math.factorial(int(x)) for x in f])
        return float(math.factorial(int(n)) / denom * np.prod(p**f))
    if method == "mprob":
        return _mprob(f, p)
    raise ValueError(f"method must be one of {MULTINOMIAL_METHODS}, got {method}")


def _mprob(f: np.ndarray, p: np.ndarray) -> float:
    order = np.argsort(-f, kind="stable")
    f = f[order].astype(int)
    p = p[order]
    prob = 1.0
    m = f[0]
    used = 0
    t = p[0]
    # spread the f[0] factors of p[0] over the multiplications
    for i in range(1, len(f)):
        for r in range(1, f[i] + 1):
            used += 1
            if used > f[0]:
                t = 1.0
            prob = prob * t * p[i] * (r + m) / r
        m += f[i]
    for _ in range(used, f[0]):
        prob = prob * p[0]
    return float(prob)


def find_combinations(n: int, k: int) -> List[List[int]]:
    """All ways to distribute n cases over k categories (compositions)."""
    if k == 1:
        return [[n]]
    result = []
    for i in range(n + 1):
        for rest in find_combinations(n - i, k - 1):
            result.append([i] + rest)
    return result


def multinomial_cdf(f: Sequence[int], p: Sequence[float], method: str = "loggamma") -> float:
    """Sum of the probabilities of all outcomes no more likely than f.

    This is the p-value of the exact multinomial goodness-of-fit test.
    """
    f = np.asarray(f, dtype=int)
    observed = multinomial_pmf(f, p, method)
    total = 0.0
    for combo in find_combinations(int(f.sum()), len(f)):
        prob = multinomial_pmf(combo, p, method)
        # relative tolerance against rounding in equally likely outcomes
        if prob <= observed * (1 + 1e-9):
            total += prob
    return min(1.0, total)
