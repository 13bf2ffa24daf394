"""Multiple comparison adjustment of p-values."""

from __future__ import annotations

from typing import Optional, Sequence
import numpy as np
from statsmodels.stats.multitest import multipletests

from stikpet.config import VALID_ADJUSTMENTS, get_config

# Names used here mapped to the statsmodels method names
STATSMODELS_METHODS = {
    "bonferroni": "bonferroni",
    "sidak": "sidak",
    "holm": "holm",
    "holm-sidak": "holm-sidak",
    "hochberg": "simes-hochberg",
    "hommel": "hommel",
    "bh": "fdr_bh",
    "by": "fdr_by",
}


def _hommel_original(p: np.ndarray, alpha: float) -> np.ndarray:
    """Hommel (1988): multiply every p-value by the largest i that is not rejected.

    i is the largest size for which p_(k-i+j) > j * alpha / i for all j = 1..i.
    When no such i exists every hypothesis is rejected and the p-values are
    left as they are.
    """
    k = len(p)
    ps = np.sort(p)
    i_hommel = None
    for i in range(1, k + 1):
        j = np.arange(1, i + 1)
        c_min = min(1.0, np.min(ps[k - i + j - 1] * i / j))
        if c_min > alpha:
            i_hommel = i
    if i_hommel is None:
        return p.copy()
    return np.minimum(1.0, p * i_hommel)


def p_adjust(p_values: Sequence[float], method: Optional[str] = None, alpha: Optional[float] = None) -> np.ndarray:
    """Adjust p-values for multiple comparisons.

    Args:
        p_values: Unadjusted p-values
        method: none, bonferroni, sidak, holm, holm-sidak, hochberg, hommel,
            bh (Benjamini-Hochberg), by (Benjamini-Yekutieli) or
            hommel-original (default: configured ``p_adjust``)
        alpha: Significance level, only used by hommel-original
            (default: configured ``alpha``)

    Returns:
        Adjusted p-values in the original order

    Raises:
        ValueError: If the method is unknown
    """
    cfg = get_config()
    method = cfg.p_adjust if method is None else method
    alpha = cfg.alpha if alpha is None else alpha
    if method not in VALID_ADJUSTMENTS:
        raise ValueError(f"method must be one of {VALID_ADJUSTMENTS}, got {method}")

    p = np.asarray(p_values, dtype=float)
    if method == "none" or len(p) == 0:
        return p.copy()
    if method == "hommel-original":
        return _hommel_original(p, alpha)

    _, p_adj, _, _ = multipletests(p, alpha=alpha, method=STATSMODELS_METHODS[method])
    return np.minimum(1.0, p_adj)
