"""Correlations of latent normal variables behind categorical data."""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence
import numpy as np
from scipy import optimize, stats

from stikpet.helpers.bivariate import bivariate_normal_cdf, bivariate_normal_pdf
from stikpet.preprocess import apply_levels, paired
from stikpet.tables import tab_cross

logger = logging.getLogger(__name__)

TETRACHORIC_METHODS = ["divgi", "search", "kirk", "brown"]
R_LIMIT = 0.9999


def polychoric(
    ord_field1,
    ord_field2,
    levels1: Optional[Sequence[Any]] = None,
    levels2: Optional[Sequence[Any]] = None,
) -> float:
    """Polychoric correlation by two-step maximum likelihood.

    The thresholds come from the cumulative marginal proportions; the
    correlation then maximises the multinomial likelihood of the table
    under a bivariate normal model.
    """
    x, y = paired(apply_levels(ord_field1, levels1), apply_levels(ord_field2, levels2))
    ct = tab_cross(x, y).to_numpy(dtype=float)
    n = ct.sum()
    row_cuts = stats.norm.ppf(np.cumsum(ct.sum(axis=1))[:-1] / n)
    col_cuts = stats.norm.ppf(np.cumsum(ct.sum(axis=0))[:-1] / n)
    a = np.concatenate([[-np.inf], row_cuts, [np.inf]])
    b = np.concatenate([[-np.inf], col_cuts, [np.inf]])

    def neg_loglik(rho: float) -> float:
        cdf = np.array([[bivariate_normal_cdf(ai, bj, rho) for bj in b] for ai in a])
        probs = cdf[1:, 1:] - cdf[:-1, 1:] - cdf[1:, :-1] + cdf[:-1, :-1]
        probs = np.clip(probs, 1e-300, None)
        return -float(np.sum(ct * np.log(probs)))

    res = optimize.minimize_scalar(neg_loglik, bounds=(-R_LIMIT, R_LIMIT), method="bounded")
    if not res.success:
        logger.warning(f"Polychoric optimisation did not converge: {res.message}")
    return float(res.x)


def tetrachoric(
    field1,
    field2,
    categories1: Optional[Sequence[Any]] = None,
    categories2: Optional[Sequence[Any]] = None,
    method: str = "divgi",
) -> float:
    """Tetrachoric correlation of two binary variables.

    Args:
        field1, field2: Binary (or first two selected) categories
        categories1, categories2: Optional order of the two categories
        method: "divgi" (Divgi's approximation refined by Newton steps),
            "search" (digit-by-digit search), "kirk" (Newton iteration on the
            Gauss-Legendre integral of the bivariate density) or "brown"
            (zero-cell adjusted root of the bivariate normal equation)
    """
    if method not in TETRACHORIC_METHODS:
        raise ValueError(f"method must be one of {TETRACHORIC_METHODS}, got {method}")
    ct = tab_cross(field1, field2, order1=categories1, order2=categories2).to_numpy(dtype=float)
    if ct.shape != (2, 2):
        raise ValueError(f"Tetrachoric correlation needs a 2x2 table, got shape {ct.shape}")
    a, b, c, d = ct[0, 0], ct[0, 1], ct[1, 0], ct[1, 1]
    if method == "divgi":
        return _tetrachoric_divgi(a, b, c, d)
    if method == "search":
        return _tetrachoric_search(a, b, c, d)
    if method == "kirk":
        return _tetrachoric_kirk(a, b, c, d)
    return _tetrachoric_brown(a, b, c, d)


def _tetrachoric_search(a, b, c, d, n_decimals: int = 10) -> float:
    n = a + b + c + d
    h = stats.norm.ppf((a + b) / n)
    k = stats.norm.ppf((a + c) / n)
    p = a / n
    rt = -1.0
    for nd in range(1, n_decimals + 1):
        step = 10.0 ** -nd
        prt = 0.0
        while prt < p and rt + step < 1:
            rt += step
            prt = bivariate_normal_cdf(h, k, min(rt, R_LIMIT))
        rt -= step
    return float(rt)


def _tetrachoric_divgi(a, b, c, d, n_newton: int = 10) -> float:
    n = a + b + c + d
    h = stats.norm.ppf((a + b) / n)
    k = stats.norm.ppf((a + c) / n)
    h_adj = max(abs(h), abs(k))
    k_adj = min(abs(h), abs(k))
    odds = a * d / (b * c)
    hk = np.sqrt(h_adj**2 + k_adj**2)
    if hk == 0:
        # both splits at the median: P(a) = 1/4 + arcsin(r) / (2 pi)
        return float(np.sin(2 * np.pi * (a / n - 0.25)))

    d_a = 0.5 / (1 + (h_adj**2 + k_adj**2) * (0.12454 - 0.27102 * (1 - h_adj / hk)))
    d_b = 0.5 / (1 + (h_adj**2 + k_adj**2) * (0.82281 - 1.03514 * k_adj / hk))
    d_c = 0.07557 * h_adj + (h_adj - k_adj) ** 2 * (0.51141 / (h_adj + 2.05793) - 0.07557 / h_adj)
    d_d = k_adj * (0.79289 + 4.28981 / (1 + 3.30231 * h_adj))
    alpha = d_a + d_b * (-1 + 1 / (1 + d_c * (np.log(odds) - d_d) ** 2))
    r = np.cos(np.pi / (1 + odds**alpha))

    for _ in range(n_newton):
        r = float(np.clip(r, -R_LIMIT, R_LIMIT))
        r = r - (bivariate_normal_cdf(h, k, r) - a / n) / bivariate_normal_pdf(h, k, r)
    return float(np.clip(r, -1, 1))


def _tetrachoric_kirk(a, b, c, d, max_iter: int = 20, eps: float = 1e-4) -> float:
    n = a + b + c + d
    p1 = (a + b) / n
    p2 = (a + c) / n
    h = stats.norm.ppf(p1)
    k = stats.norm.ppf(p2)
    target = 2 * np.pi * (a / n - p1 * p2)
    nodes, weights = np.polynomial.legendre.leggauss(8)
    t = (nodes + 1) / 2
    w = weights / 2

    def integrand(rho):
        return np.exp(-(h**2 + k**2 - 2 * h * k * rho) / (2 * (1 - rho**2))) / np.sqrt(1 - rho**2)

    zhk = np.exp(-(h**2 + k**2) / 2)
    hk2 = 2 * h * k
    if abs(hk2) <= 1e-8:
        r = target / zhk
    else:
        r = 2 * (np.sqrt(abs(hk2 * target / zhk + 1)) - 1) / hk2
    if abs(r) > 0.8:
        r = 0.8 * np.sign(target)

    for _ in range(max_iter):
        value = r * np.sum(w * integrand(r * t))
        r_new = r - (value - target) / integrand(r)
        r_new = float(np.clip(r_new, -R_LIMIT, R_LIMIT))
        if abs(r_new - r) <= eps:
            return r_new
        r = r_new
    logger.warning(f"Kirk tetrachoric iteration stopped after {max_iter} steps")
    return float(r)


def _tetrachoric_brown(a, b, c, d) -> float:
    zero_ad = a == 0 or d == 0
    zero_bc = b == 0 or c == 0
    if zero_ad and zero_bc:
        logger.warning("A row or column total is zero, tetrachoric correlation undefined")
        return np.nan
    delta = 0.0
    if zero_ad:
        if a == 0 and d == 0:
            return -1.0
        delta = 0.5
    elif zero_bc:
        if b == 0 and c == 0:
            return 1.0
        delta = -0.5

    aa, bb, cc, dd = a + delta, b - delta, c - delta, d + delta
    tot = aa + bb + cc + dd
    if aa * dd == bb * cc:
        return 0.0
    if a == d and b == c:
        return float(np.cos(np.pi * bb / (aa + bb)))

    h = stats.norm.ppf((aa + bb) / tot)
    k = stats.norm.ppf((aa + cc) / tot)

    def excess(rho):
        return bivariate_normal_cdf(h, k, rho) - aa / tot

    return float(optimize.brentq(excess, -R_LIMIT, R_LIMIT, xtol=1e-10))
