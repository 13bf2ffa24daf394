"""Standard bivariate normal probabilities."""

from __future__ import annotations

import numpy as np
from scipy import stats


def bivariate_normal_cdf(h: float, k: float, r: float) -> float:
    """P(X <= h, Y <= k) for standard normals with correlation r.

    Infinite limits are handled without calling the multivariate routine.
    """
    if h == -np.inf or k == -np.inf:
        return 0.0
    if h == np.inf:
        return float(stats.norm.cdf(k))
    if k == np.inf:
        return float(stats.norm.cdf(h))
    cov = [[1.0, r], [r, 1.0]]
    return float(stats.multivariate_normal.cdf([h, k], mean=[0.0, 0.0], cov=cov))


def bivariate_normal_pdf(h: float, k: float, r: float) -> float:
    """Density of the standard bivariate normal with correlation r at (h, k)."""
    return float(np.exp(-(h**2 - 2 * r * h * k + k**2) / (2 * (1 - r**2))) / (2 * np.pi * np.sqrt(1 - r**2)))
