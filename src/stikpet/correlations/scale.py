"""Pearson correlation and conversions of test statistics to r."""

from __future__ import annotations

import numpy as np
import pandas as pd
from scipy import stats
from scipy.special import hyp2f1

from stikpet.preprocess import paired

PEARSON_CORRECTIONS = [
    "none", "wherry", "fisher", "olkin-pratt-1", "olkin-pratt-2", "olkin-pratt-3",
    "smith", "cattin", "pratt", "herzberg", "ezekiel", "claudy",
]


def pearson(field1, field2, corr: str = "none", test: str = "t") -> pd.DataFrame:
    """Pearson product-moment correlation with optional bias correction.

    Args:
        field1, field2: Paired scale scores
        corr: Correction of r, one of ``PEARSON_CORRECTIONS``
        test: "t" (Student t with n - 2 df) or "z" (Fisher z)

    Returns:
        One-row DataFrame with r, statistic, df, p-value
    """
    if corr not in PEARSON_CORRECTIONS:
        raise ValueError(f"corr must be one of {PEARSON_CORRECTIONS}, got {corr}")
    if test not in ("t", "z"):
        raise ValueError(f"test must be 't' or 'z', got {test}")

    x, y = paired(field1, field2)
    n = len(x)
    sxy = np.sum((x - x.mean()) * (y - y.mean()))
    r = sxy / ((n - 1) * np.sqrt(np.var(x, ddof=1) * np.var(y, ddof=1)))
    r2c = 1 - r**2

    if corr == "fisher":
        r = r * (1 + r2c / (2 * n))
    elif corr == "smith":
        r = np.sqrt(1 - n / (n - 2) * r2c)
    elif corr == "wherry":
        r = np.sqrt(1 - (n - 1) / (n - 2) * r2c)
    elif corr == "ezekiel":
        r = np.sqrt(1 - (n - 1) / (n - 3) * r2c)
    elif corr == "olkin-pratt-1":
        r = r * hyp2f1(1 / 2, 1 / 2, (n - 1) / 2, r2c)
    elif corr == "olkin-pratt-2":
        r = r * (1 + r2c / (2 * (n - 3)))
    elif corr == "olkin-pratt-3":
        r = np.sqrt(1 - r2c * hyp2f1(1, 1, (n - 1) / 2, r2c))
    elif corr == "cattin":
        r = np.sqrt(1 - r2c * (1 + 2 * r2c / (n - 1) + 8 * r2c**2 / ((n - 3) * (n + 1))))
    elif corr == "pratt":
        r = np.sqrt(1 - r2c * (1 + 2 * r2c / (n - 4.3)))
    elif corr == "herzberg":
        r = np.sqrt(1 - r2c * (1 + 2 * r2c / (n - 1)))
    elif corr == "claudy":
        r = np.sqrt(1 - (n - 4) * r2c / (n - 3) * (1 + 2 * r2c / (n - 1)))

    if test == "t":
        df = n - 2
        statistic = r * np.sqrt((n - 2) / (1 - r**2))
        pvalue = 2 * stats.t.sf(abs(statistic), df)
    else:
        df = np.nan
        statistic = abs(np.arctanh(r)) * np.sqrt(n - 3)
        pvalue = 2 * stats.norm.sf(statistic)

    return pd.DataFrame({"r": [r], "statistic": [statistic], "df": [df], "p-value": [pvalue]})


def point_biserial(t: float, df: float) -> float:
    """Point-biserial correlation from an independent samples t-value."""
    return float(np.sqrt(t**2 / (t**2 + df)))


def rosenthal(z: float, n: int) -> float:
    """Rosenthal correlation r = z / sqrt(n)."""
    return float(z / np.sqrt(n))
