"""Bisection search for the p-value that matches an observed statistic."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from stikpet.config import get_config

logger = logging.getLogger(__name__)


def bisect_pvalue(
    critical: Callable[[float], float],
    statistic: float,
    max_iter: Optional[int] = None,
    tol: float = 1e-12,
    start: float = 0.05,
) -> float:
    """Find p such that critical(p) equals the statistic.

    The critical value must decrease as p increases, as the upper-tail
    critical value of a test does.

    Args:
        critical: Function from a p-value to a critical value
        statistic: Observed test statistic
        max_iter: Iteration cap (default: configured ``max_iter``)
        tol: Absolute tolerance on the critical value
        start: First p-value tried

    Returns:
        The p-value found. If the cap is reached a warning is logged and
        the last estimate is returned.
    """
    if max_iter is None:
        max_iter = get_config().max_iter
    p_low, p_high, p = 0.0, 1.0, start
    for _ in range(max_iter):
        crit = critical(p)
        if abs(crit - statistic) <= tol:
            return p
        if crit < statistic:
            p_high = p
            p = (p_low + p) / 2
        else:
            p_low = p
            p = (p_high + p) / 2
        if p_high - p_low <= tol:
            return p
    logger.warning(f"p-value search stopped after {max_iter} iterations without convergence (p={p:.6g})")
    return p
