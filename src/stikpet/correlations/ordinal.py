"""Rank and ordinal association coefficients."""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence, Union
import numpy as np
import pandas as pd
from scipy import stats

from stikpet.distributions.kendall import kendall_tau_dist
from stikpet.distributions.spearman import SPEARMAN_METHODS, spearman_cdf
from stikpet.helpers.concordance import concordance_matrices, ordinal_table
from stikpet.preprocess import apply_levels, paired, two_groups

logger = logging.getLogger(__name__)

KENDALL_TESTS = ["kendall-appr", "bb", "as71", "kendall-exact"]


def _ordinal_pairs(field1, field2, levels1, levels2):
    a = apply_levels(field1, levels1)
    b = apply_levels(field2, levels2)
    return paired(a, b)


def goodman_kruskal_gamma(
    ord_field1,
    ord_field2,
    levels1: Optional[Sequence[Any]] = None,
    levels2: Optional[Sequence[Any]] = None,
    ase: Union[str, int] = "appr",
) -> pd.DataFrame:
    """Goodman-Kruskal gamma with a normal approximation test.

    Args:
        ord_field1: Ordinal scores of the first variable (table rows)
        ord_field2: Ordinal scores of the second variable (table columns)
        levels1, levels2: Optional ordered labels
        ase: "appr" for the approximation z = G sqrt((P + Q) / (n (1 - G^2))),
            0 for the standard error under the null, 1 for the standard
            error in general

    Returns:
        One-row DataFrame with gamma, statistic, p-value
    """
    x, y = _ordinal_pairs(ord_field1, ord_field2, levels1, levels2)
    ct = ordinal_table(x, y)
    conc, disc = concordance_matrices(ct)
    p = np.sum(ct * conc)
    q = np.sum(ct * disc)
    n = ct.sum()
    g = (p - q) / (p + q)

    if ase == "appr":
        z = g * ((p + q) / (n * (1 - g**2))) ** 0.5
    elif ase == 0:
        se = 4 * np.sqrt(np.sum(ct * (q * conc - p * disc) ** 2)) / (p + q) ** 2
        z = g / se
    elif ase == 1:
        se = 2 * np.sqrt(np.sum(ct * (conc - disc) ** 2) - (p - q) ** 2 / n) / (p + q)
        z = g / se
    else:
        raise ValueError(f"ase must be 'appr', 0 or 1, got {ase}")

    pvalue = 2 * stats.norm.sf(abs(z))
    return pd.DataFrame({"gamma": [g], "statistic": [z], "p-value": [pvalue]})


def kendall_tau(
    ord_field1,
    ord_field2,
    levels1: Optional[Sequence[Any]] = None,
    levels2: Optional[Sequence[Any]] = None,
    version: str = "b",
    test: str = "kendall-appr",
    cc: bool = False,
) -> pd.DataFrame:
    """Kendall tau-a or tau-b with a significance test.

    Args:
        ord_field1, ord_field2: Ordinal scores
        levels1, levels2: Optional ordered labels
        version: "a" or "b" (tau-b corrects for ties)
        test: For tau-b: "kendall-appr" (normal approximation with tie
            correction), "bb" (Brown-Benedetti), "as71" or "kendall-exact".
            Tau-a always uses the normal approximation.
        cc: Apply a continuity correction

    Returns:
        One-row DataFrame with the tau column (``Kendall Tau-a`` or
        ``Kendall Tau-b``), statistic, p-value and test

    Notes:
        The exact tests assume no ties. With ties they are replaced by the
        normal approximation and a warning is logged.
    """
    if version not in ("a", "b"):
        raise ValueError(f"version must be 'a' or 'b', got {version}")
    if test not in KENDALL_TESTS:
        raise ValueError(f"test must be one of {KENDALL_TESTS}, got {test}")

    x, y = _ordinal_pairs(ord_field1, ord_field2, levels1, levels2)
    n = len(x)
    ct = ordinal_table(x, y)
    conc, disc = concordance_matrices(ct)
    p = np.sum(ct * conc)
    q = np.sum(ct * disc)
    n_c = p / 2
    n_d = q / 2

    if version == "a":
        tau = (n_c - n_d) / (n * (n - 1) / 2)
        tau_test = abs(tau) - 2 / (n * (n - 1)) if cc else tau
        z = 3 * tau_test * np.sqrt(n * (n - 1)) / np.sqrt(2 * (2 * n + 5))
        pvalue = 2 * stats.norm.sf(abs(z))
        statistic = -abs(z) if tau < 0 else z
        return pd.DataFrame({
            "Kendall Tau-a": [tau], "statistic": [statistic], "p-value": [pvalue],
            "test": ["Kendall approximation"],
        })

    t1 = pd.Series(x).value_counts().to_numpy(dtype=float)
    t2 = pd.Series(y).value_counts().to_numpy(dtype=float)
    if (t1.max() > 1 or t2.max() > 1) and test in ("as71", "kendall-exact"):
        logger.warning("Ties present, switching the Kendall tau test to the normal approximation")
        test = "kendall-appr"

    dr = n**2 - np.sum(t1**2)
    dc = n**2 - np.sum(t2**2)
    tau = (p - q) / np.sqrt(dr * dc)

    if test == "bb":
        ase0 = 2 * np.sqrt((np.sum(ct * (conc - disc) ** 2) - (p - q) ** 2 / n) / (dr * dc))
        tau_test = abs(tau) - 2 / (n * (n - 1)) if cc else tau
        z = tau_test / ase0
        pvalue = 2 * stats.norm.sf(abs(z))
        statistic = -abs(z) if tau < 0 else z
        test_used = "Brown and Benedetti approximation"
    elif test == "kendall-appr":
        v0 = n * (n - 1) * (2 * n + 5)
        vt1 = np.sum(t1 * (t1 - 1) * (2 * t1 + 5))
        vt2 = np.sum(t2 * (t2 - 1) * (2 * t2 + 5))
        v1 = np.sum(t1 * (t1 - 1)) * np.sum(t2 * (t2 - 1)) / (2 * n * (n - 1))
        v2 = np.sum(t1 * (t1 - 1) * (t1 - 2)) * np.sum(t2 * (t2 - 1) * (t2 - 2)) / (9 * n * (n - 1) * (n - 2))
        v = (v0 - vt1 - vt2) / 18 + v1 + v2
        z = (abs(n_c - n_d) - 1) / np.sqrt(v) if cc else (n_c - n_d) / np.sqrt(v)
        pvalue = 2 * stats.norm.sf(abs(z))
        statistic = -abs(z) if tau < 0 else z
        test_used = "Kendall approximation"
    elif test == "as71":
        statistic = n * (n - 1) / 2 * abs(tau)
        pvalue = kendall_tau_dist(n, tau, method="as71")
        test_used = "exact with AS71 algorithm"
    else:
        statistic = n_c
        pvalue = kendall_tau_dist(n, tau, method="kendall")
        test_used = "Kendall exact"

    return pd.DataFrame({
        "Kendall Tau-b": [tau], "statistic": [statistic], "p-value": [min(1.0, pvalue)], "test": [test_used],
    })


def somers_d(
    ord_field1,
    ord_field2,
    levels1: Optional[Sequence[Any]] = None,
    levels2: Optional[Sequence[Any]] = None,
    direction: str = "rows",
) -> pd.DataFrame:
    """Somers' d with asymptotic standard errors.

    Args:
        ord_field1: Ordinal scores of the row variable
        ord_field2: Ordinal scores of the column variable
        levels1, levels2: Optional ordered labels
        direction: "rows" ((P - Q) / Dc, column ties in the denominator),
            "columns" ((P - Q) / Dr) or "both" (symmetric d)

    Returns:
        One-row DataFrame with d, ASE_1 (general standard error), ASE_0
        (standard error under the null), statistic and p-value
    """
    if direction not in ("rows", "columns", "both"):
        raise ValueError(f"direction must be 'rows', 'columns' or 'both', got {direction}")
    x, y = _ordinal_pairs(ord_field1, ord_field2, levels1, levels2)
    ct = ordinal_table(x, y)
    conc, disc = concordance_matrices(ct)
    p = np.sum(ct * conc)
    q = np.sum(ct * disc)
    n = ct.sum()
    rs = ct.sum(axis=1)
    cs = ct.sum(axis=0)
    dr = n**2 - np.sum(rs**2)
    dc = n**2 - np.sum(cs**2)
    s = np.sqrt(np.sum(ct * (conc - disc) ** 2) - (p - q) ** 2 / n)

    if direction == "columns":
        d = (p - q) / dr
        ase1 = 2 * np.sqrt(np.sum(ct * (dr * (conc - disc) - (p - q) * (n - rs[:, None])) ** 2)) / dr**2
        ase0 = 2 * s / dr
    elif direction == "rows":
        d = (p - q) / dc
        ase1 = 2 * np.sqrt(np.sum(ct * (dc * (conc - disc) - (p - q) * (n - cs[None, :])) ** 2)) / dc**2
        ase0 = 2 * s / dc
    else:
        d = (p - q) / (0.5 * (dr + dc))
        tau_b = (p - q) / np.sqrt(dr * dc)
        v = rs[:, None] * dc + cs[None, :] * dr
        ase_tau = np.sum(ct * (2 * np.sqrt(dr * dc) * (conc - disc) + tau_b * v) ** 2)
        ase_tau = np.sqrt(ase_tau - n**3 * tau_b**2 * (dr + dc) ** 2) / (dr * dc)
        ase1 = 2 * ase_tau / (dr + dc) * np.sqrt(dr * dc)
        ase0 = 4 * s / (dc + dr)

    z = d / ase0
    pvalue = 2 * stats.norm.sf(abs(z))
    return pd.DataFrame({"d": [d], "ASE_1": [ase1], "ASE_0": [ase0], "statistic": [z], "p-value": [pvalue]})


def stuart_tau(
    ord_field1,
    ord_field2,
    levels1: Optional[Sequence[Any]] = None,
    levels2: Optional[Sequence[Any]] = None,
    cc: bool = False,
) -> pd.DataFrame:
    """Stuart-Kendall tau-c with its asymptotic standard error under the null.

    Returns:
        One-row DataFrame with tau, ASE0, statistic, p-value
    """
    x, y = _ordinal_pairs(ord_field1, ord_field2, levels1, levels2)
    ct = ordinal_table(x, y)
    conc, disc = concordance_matrices(ct)
    p = np.sum(ct * conc)
    q = np.sum(ct * disc)
    n = ct.sum()
    m = min(ct.shape)

    tau = (p - q) / (n**2 * (m - 1) / m)
    tau_test = abs(tau) - 2 / (n * (n - 1)) if cc else tau
    var0 = 4 * m**2 / ((m - 1) ** 2 * n**4) * (np.sum(ct * (conc - disc) ** 2) - (p - q) ** 2 / n)
    ase0 = np.sqrt(var0)
    z = tau_test / ase0
    pvalue = 2 * stats.norm.sf(abs(z))
    return pd.DataFrame({"tau": [tau], "ASE0": [ase0], "statistic": [z], "p-value": [pvalue]})


def spearman_rho(
    ord_field1,
    ord_field2,
    levels1: Optional[Sequence[Any]] = None,
    levels2: Optional[Sequence[Any]] = None,
    test: str = "t",
    cc: bool = False,
) -> pd.DataFrame:
    """Spearman rank correlation with a significance test.

    Args:
        ord_field1, ord_field2: Ordinal or scale scores
        levels1, levels2: Optional ordered labels
        test: "t", "z-fieller", "z-olds", "iman-conover", "as89", "exact"
            or "none" for the coefficient only
        cc: Continuity correction (rho moved 6 / (n^3 - n) towards zero
            before testing; not used with the exact test)

    Returns:
        One-row DataFrame with rho, p-value and, depending on the test,
        statistic and df
    """
    if test != "none" and test not in SPEARMAN_METHODS:
        raise ValueError(f"test must be 'none' or one of {SPEARMAN_METHODS}, got {test}")
    x, y = _ordinal_pairs(ord_field1, ord_field2, levels1, levels2)
    rx = stats.rankdata(x)
    ry = stats.rankdata(y)
    n = len(rx)
    rs = np.sum((rx - rx.mean()) * (ry - ry.mean())) / np.sqrt(np.sum((rx - rx.mean()) ** 2) * np.sum((ry - ry.mean()) ** 2))
    if test == "none":
        return pd.DataFrame({"rho": [rs]})

    rs_test = rs
    if cc and test != "exact":
        rs_test = np.sign(rs) * (abs(rs) - 6 / (n**3 - n))
    res = spearman_cdf(n, rs_test, method=test)
    res.insert(0, "rho", rs)
    return res


def rank_biserial_is(
    cat_field,
    ord_field,
    categories: Optional[Sequence[Any]] = None,
    levels: Optional[Sequence[Any]] = None,
    version: str = "cureton",
) -> float:
    """Rank biserial correlation for two independent samples.

    Args:
        cat_field: Group labels
        ord_field: Ordinal or scale scores
        categories: Optional two categories to compare (default: first two
            in sorted order)
        levels: Optional ordered labels for the scores
        version: "glass" (2 (mean rank 1 - mean rank 2) / n) or "cureton"
            (corrects the maximum for ties between the groups)
    """
    x, y, _, _ = two_groups(cat_field, ord_field, categories, levels)
    n1, n2 = len(x), len(y)
    n = n1 + n2
    ranks = stats.rankdata(np.concatenate([x, y]))
    r1, r2 = ranks[:n1], ranks[n1:]

    if version == "glass":
        return float(2 * (r1.mean() - r2.mean()) / n)
    if version == "cureton":
        b = sum(np.sum(r2 == v) * np.sum(r1 == v) for v in np.unique(r1))
        return float((r1.mean() - (n + 1) / 2) / (n2 / 2 - (b / 2) / n1))
    raise ValueError(f"version must be 'glass' or 'cureton', got {version}")


def rank_biserial_os(data, levels: Optional[Sequence[Any]] = None, mu: Optional[float] = None) -> pd.DataFrame:
    """One-sample rank biserial correlation (matched-pairs rank biserial).

    Scores equal to mu are removed; the absolute deviations from mu are
    ranked and rb = (R+ - R-) / (R+ + R-).

    Args:
        data: Ordinal or scale scores
        levels: Optional ordered labels
        mu: Hypothesized location (default: midrange of the scores)

    Returns:
        One-row DataFrame with mu and rb
    """
    x = apply_levels(data, levels).dropna().to_numpy(dtype=float)
    if mu is None:
        mu = (x.min() + x.max()) / 2
    x = x[x != mu]
    ranks = stats.rankdata(np.abs(x - mu))
    r_plus = ranks[x > mu].sum()
    r_neg = ranks[x < mu].sum()
    rb = (r_plus - r_neg) / (r_plus + r_neg)
    return pd.DataFrame({"mu": [mu], "rb": [rb]})
