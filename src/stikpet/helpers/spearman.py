"""Null distribution of Spearman's sum of squared rank differences."""

from __future__ import annotations

import logging
import math
import numpy as np
from scipy import stats

from stikpet.config import get_config
from stikpet.helpers.permutations import permutation_chunks, permutations

logger = logging.getLogger(__name__)


def as89(n: int, s: float) -> float:
    """Upper tail probability P(D >= s) of D = sum of squared rank differences.

    Algorithm AS 89 (Best & Roberts, 1975): exact enumeration for n <= 6 and an
    Edgeworth series for larger n.

    Args:
        n: Number of pairs
        s: Observed sum of squared rank differences

    Returns:
        Upper tail probability
    """
    if n <= 1 or s <= 0:
        return 1.0
    if s > n * (n * n - 1) / 3:
        return 0.0

    js = s
    if js % 2 != 0:
        js = js + 1

    if n > 6:
        b = 1 / n
        x = (6 * (js - 1) * b / (1 / (b * b) - 1) - 1) * math.sqrt(1 / b - 1)
        y = x * x
        u = x * b * (
            0.2274 + b * (0.2531 + 0.1745 * b)
            + y * (
                -0.0758 + b * (0.1033 + 0.3932 * b)
                - y * b * (0.0879 + 0.0151 * b - y * (0.0072 - 0.0831 * b + y * b * (0.0131 - 0.00046 * y)))
            )
        )
        p = u / math.exp(y / 2) + stats.norm.sf(x)
        return float(min(max(p, 0.0), 1.0))

    perms = permutations(n)
    ranks = np.arange(1, n + 1)
    d = np.sum((ranks - perms) ** 2, axis=1)
    return float(np.mean(d >= js))


def spearman_permutation_pvalue(ord1, ord2) -> float:
    """Two-sided permutation p-value for Spearman's rho.

    Twice the proportion of permutations of ord1 whose rho exceeds the
    observed rho, capped at 1.

    Raises:
        ValueError: If n exceeds the configured ``exact_max_n``
    """
    rx = stats.rankdata(ord1)
    ry = stats.rankdata(ord2)
    n = len(rx)
    if n > get_config().exact_max_n:
        raise ValueError(f"Full permutation test needs n <= {get_config().exact_max_n}, got {n}")

    rho = np.corrcoef(rx, ry)[0, 1]
    above = 0
    for block in permutation_chunks(n):
        rho_perm = 1 - 6 * np.sum((rx[block] - ry) ** 2, axis=1) / (n**3 - n)
        above += int(np.sum(rho_perm > rho))
    logger.debug(f"Spearman permutation test: {above} of {math.factorial(n)} permutations above rho={rho:.4f}")
    return min(1.0, 2 * above / math.factorial(n))
