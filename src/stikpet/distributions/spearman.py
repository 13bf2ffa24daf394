"""Significance of Spearman's rho."""

from __future__ import annotations

import logging
import math
from typing import Optional
import numpy as np
import pandas as pd
from scipy import stats

from stikpet.config import get_config
from stikpet.helpers.permutations import permutation_chunks
from stikpet.helpers.search import bisect_pvalue
from stikpet.helpers.spearman import as89

logger = logging.getLogger(__name__)

SPEARMAN_METHODS = ["t", "z-fieller", "z-olds", "iman-conover", "as89", "exact"]


def _exact_tails(n: int, s: float):
    """Exact P(D <= s) and P(D >= s) by enumerating all permutations."""
    if n > get_config().exact_max_n:
        raise ValueError(f"Exact Spearman distribution needs n <= {get_config().exact_max_n}, got {n}")
    ranks = np.arange(n)
    low = high = 0
    for block in permutation_chunks(n):
        d = np.sum((block - ranks) ** 2, axis=1)
        low += int(np.sum(d <= s + 1e-9))
        high += int(np.sum(d >= s - 1e-9))
    total = math.factorial(n)
    return low / total, high / total


def spearman_cdf(n: int, rs: float, method: str = "t", max_iter: Optional[int] = None) -> pd.DataFrame:
    """Two-sided test of Spearman's rho against zero.

    Args:
        n: Number of pairs
        rs: Observed rho
        method: "t" (Student t), "z-fieller", "z-olds", "iman-conover"
            (average of the t and normal critical values, solved by
            bisection), "as89" or "exact" (full permutation distribution)
        max_iter: Bisection cap for iman-conover (default: configured max_iter)

    Returns:
        One-row DataFrame with statistic, df (where relevant) and p-value
    """
    if method not in SPEARMAN_METHODS:
        raise ValueError(f"method must be one of {SPEARMAN_METHODS}, got {method}")
    df = n - 2

    if method == "t":
        ts = rs * math.sqrt((n - 2) / (1 - rs**2))
        p = 2 * stats.t.sf(abs(ts), df)
        return pd.DataFrame({"statistic": [ts], "df": [df], "p-value": [p]})

    if method == "z-fieller":
        zs = math.atanh(rs) / math.sqrt(1.06 / (n - 3))
        return pd.DataFrame({"statistic": [zs], "p-value": [2 * stats.norm.sf(abs(zs))]})

    if method == "z-olds":
        s = (n**3 - n) * (1 - rs) / 6
        x = s / 2 - (n**3 - n) / 12
        ase = math.sqrt(n - 1) * (n * (n + 1) / 12)
        z = x / ase
        return pd.DataFrame({"statistic": [z], "p-value": [2 * stats.norm.sf(abs(z))]})

    if method == "iman-conover":
        j = abs(rs) / 2 * (math.sqrt(n - 1) + math.sqrt((n - 2) / (1 - abs(rs) ** 2)))

        def critical(p):
            return (stats.norm.isf(p / 2) + stats.t.isf(p / 2, df)) / 2

        p = bisect_pvalue(critical, j, max_iter=max_iter)
        return pd.DataFrame({"statistic": [j], "df": [df], "p-value": [p]})

    s = (n**3 - n) * (1 - rs) / 6
    if method == "as89":
        statistic = s
        if s < (n**3 - n) / 6:
            s = (n**3 - n) / 3 - s
        p = as89(n, round(s))
        p = 2 * (1 - p) if p > 0.5 else 2 * p
        return pd.DataFrame({"statistic": [statistic], "p-value": [min(1.0, p)]})

    low, high = _exact_tails(n, s)
    p = high if s > (n**3 - n) / 6 else low
    return pd.DataFrame({"statistic": [s], "p-value": [min(1.0, 2 * p)]})
