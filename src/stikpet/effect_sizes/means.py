"""Standardized mean differences."""

from __future__ import annotations

from typing import Any, Optional, Sequence
import numpy as np
import pandas as pd
from scipy import stats
from scipy.special import gammaln

from stikpet.preprocess import drop_missing, group_summary, paired, two_groups

G_CORRECTIONS = ["exact", "hedges", "durlak", "xue"]


def _xue_factor(df: float) -> float:
    return (
        1 - 9 / df + 69 / (2 * df**2) - 72 / df**3 + 687 / (8 * df**4)
        - 441 / (8 * df**5) + 247 / (16 * df**6)
    ) ** (1 / 12)


def _exact_factor(df: float) -> float:
    """Gamma(m) / (Gamma(m - 1/2) sqrt(m)) with m = df / 2, on the log scale."""
    m = df / 2
    return float(np.exp(gammaln(m) - gammaln(m - 0.5)) / np.sqrt(m))


def cohen_d(nom_field, scale_field, categories: Optional[Sequence[Any]] = None) -> float:
    """Cohen's d for two (or more) independent groups.

    The largest minus the smallest group mean, divided by the pooled
    within-group standard deviation sqrt(SSw / n).
    """
    summary = group_summary(nom_field, scale_field, categories)
    ssw = np.sum(summary["var"] * (summary["n"] - 1))
    n = summary["n"].sum()
    return float((summary["mean"].max() - summary["mean"].min()) / np.sqrt(ssw / n))


def cohen_d_os(data, mu: Optional[float] = None) -> float:
    """One-sample Cohen's d: (mean - mu) / s.

    Args:
        data: Scale scores
        mu: Hypothesized mean (default: midrange of the data)
    """
    x = drop_missing(data).to_numpy(dtype=float)
    if mu is None:
        mu = (x.min() + x.max()) / 2
    return float((x.mean() - mu) / np.std(x, ddof=1))


def cohen_d_ps(field1, field2, within: bool = True) -> float:
    """Paired samples Cohen's d (d_z, or d_rm when ``within``).

    Args:
        field1, field2: Paired scale scores
        within: Correct the standard deviation of the differences for the
            correlation between the measurements, s / sqrt(2 (1 - r))
    """
    x, y = paired(field1, field2)
    d = x - y
    s = np.std(d, ddof=1)
    if within:
        r = np.corrcoef(x, y)[0, 1]
        s = s / np.sqrt(2 * (1 - r))
    return float(d.mean() / s)


def hedges_g_is(
    cat_field,
    scale_field,
    categories: Optional[Sequence[Any]] = None,
    dmu: float = 0,
    var_weighted: bool = True,
    corr: Optional[str] = None,
) -> pd.DataFrame:
    """Hedges' g for two independent samples.

    Args:
        cat_field: Group labels
        scale_field: Scale scores
        categories: Optional two categories to compare
        dmu: Hypothesized difference in means
        var_weighted: Pool the variances weighted by their df (else average them)
        corr: None for Cohen d_s, or the small sample correction "exact",
            "hedges", "durlak" or "xue"

    Returns:
        One-row DataFrame with g and version
    """
    if corr is not None and corr not in G_CORRECTIONS:
        raise ValueError(f"corr must be None or one of {G_CORRECTIONS}, got {corr}")
    x, y, _, _ = two_groups(cat_field, scale_field, categories)
    n1, n2 = len(x), len(y)
    n = n1 + n2
    var1, var2 = np.var(x, ddof=1), np.var(y, ddof=1)
    if var_weighted:
        se = np.sqrt(((n1 - 1) * var1 + (n2 - 1) * var2) / (n - 2))
    else:
        se = np.sqrt((var1 + var2) / 2)
    g = (x.mean() - y.mean() - dmu) / se

    c = 1.0
    version = "Cohen ds (Hedges g uncorrected)"
    if corr == "exact":
        c = _exact_factor(n - 2)
        version = "Hedges g (exact method)"
    elif corr == "hedges":
        c = 1 - 3 / (4 * (n - 2) - 9)
        version = "Hedges g (approximation)"
    elif corr == "durlak":
        c = (n - 3) / (n - 2.25) * np.sqrt((n - 2) / n)
        version = "Hedges g with Durlak approximation"
    elif corr == "xue":
        c = _xue_factor(n - 2)
        version = "Hedges g with Xue approximation"

    return pd.DataFrame({"g": [g * c], "version": [version]})


def hedges_g_os(data, mu: Optional[float] = None, appr: Optional[str] = None) -> pd.DataFrame:
    """One-sample Hedges' g.

    Args:
        data: Scale scores
        mu: Hypothesized mean (default: midrange of the data)
        appr: None for the exact gamma-function correction, or "hedges",
            "durlak", "xue"

    Returns:
        One-row DataFrame with mu, g and version
    """
    x = drop_missing(data).to_numpy(dtype=float)
    if mu is None:
        mu = (x.min() + x.max()) / 2
    n = len(x)
    df = n - 1
    d = (x.mean() - mu) / np.std(x, ddof=1)

    if appr is None:
        g, version = d * _exact_factor(df), "exact"
    elif appr == "hedges":
        g, version = d * (1 - 3 / (4 * df - 1)), "Hedges approximation"
    elif appr == "durlak":
        g, version = d * (n - 3) / (n - 2.25) * np.sqrt((n - 2) / n), "Durlak approximation"
    elif appr == "xue":
        g, version = d * _xue_factor(df), "Xue approximation"
    else:
        raise ValueError(f"appr must be None, 'hedges', 'durlak' or 'xue', got {appr}")
    return pd.DataFrame({"mu": [mu], "g": [g], "version": [version]})


def hedges_g_ps(field1, field2, dmu: float = 0, appr: str = "none", within: bool = True) -> pd.DataFrame:
    """Paired samples Hedges' g.

    Args:
        field1, field2: Paired scale scores
        dmu: Hypothesized mean difference
        appr: "none" (exact correction), "hedges", "durlak" or "xue"
        within: Correct the standard deviation for the correlation

    Returns:
        One-row DataFrame with g and version
    """
    x, y = paired(field1, field2)
    n = len(x)
    d = x - y
    s = np.std(d, ddof=1)
    suffix = ""
    if within:
        s = s / np.sqrt(2 * (1 - np.corrcoef(x, y)[0, 1]))
        suffix = ", with correlation correction"
    dz = (d.mean() - dmu) / s
    df = n - 1

    if appr == "none":
        g, version = dz * _exact_factor(df), "exact"
    elif appr == "hedges":
        g, version = dz * (1 - 3 / (4 * df - 1)), "Hedges approximation"
    elif appr == "durlak":
        g, version = dz * (n - 3) / (n - 2.25) * np.sqrt((n - 2) / n), "Durlak approximation"
    elif appr == "xue":
        g, version = dz * _xue_factor(df), "Xue approximation"
    else:
        raise ValueError(f"appr must be 'none', 'hedges', 'durlak' or 'xue', got {appr}")
    return pd.DataFrame({"g": [g], "version": [version + suffix]})


def glass_delta(
    cat_field,
    scale_field,
    categories: Optional[Sequence[Any]] = None,
    control: Optional[Any] = None,
) -> float:
    """Glass' delta: mean difference divided by the control group's standard deviation.

    Args:
        cat_field: Group labels
        scale_field: Scale scores
        categories: Optional two categories to compare
        control: Category used as control (default: the second category)
    """
    x, y, cat1, _ = two_groups(cat_field, scale_field, categories)
    s = np.std(x, ddof=1) if control is not None and control == cat1 else np.std(y, ddof=1)
    return float((x.mean() - y.mean()) / s)


def cohen_u(d: float, version: str = "u3") -> float:
    """Cohen's U1, U2 or U3 non-overlap measure from Cohen's d."""
    if version == "u3":
        return float(stats.norm.cdf(d))
    if version in ("u1", "u2"):
        u = stats.norm.cdf(d / 2)
        if version == "u1":
            u = (2 * u - 1) / u
        return float(u)
    raise ValueError(f"version must be 'u1', 'u2' or 'u3', got {version}")
