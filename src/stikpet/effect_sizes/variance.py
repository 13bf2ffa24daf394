"""Variance-explained effect sizes for one-way designs."""

from __future__ import annotations

from typing import Any, Optional, Sequence, Tuple
import numpy as np
from scipy import stats

from stikpet.preprocess import select_categories

OMEGA_VERSIONS = ["hays1", "hays2"]


def _sums_of_squares(
    nom_field,
    scale_field,
    categories: Optional[Sequence[Any]] = None,
    levels: Optional[Sequence[Any]] = None,
    use_ranks: bool = False,
) -> Tuple[int, int, float, float, float]:
    """Return (n, k, SSb, SSw, SSt) of the scores split by group."""
    df = select_categories(nom_field, scale_field, categories, levels)
    if use_ranks:
        df["score"] = stats.rankdata(df["score"])
    grouped = df.groupby("group")["score"].agg(["count", "mean"])
    n = len(df)
    k = len(grouped)
    grand_mean = df["score"].mean()
    ssb = float(np.sum(grouped["count"] * (grouped["mean"] - grand_mean) ** 2))
    sst = float(np.sum((df["score"] - grand_mean) ** 2))
    return n, k, ssb, sst - ssb, sst


def eta_sq(
    nom_field,
    scale_field,
    categories: Optional[Sequence[Any]] = None,
    levels: Optional[Sequence[Any]] = None,
    use_ranks: bool = False,
) -> float:
    """Eta squared, SSb / SSt.

    Args:
        nom_field: Group labels
        scale_field: Scores
        categories: Optional groups to use
        levels: Optional order of ordinal score labels
        use_ranks: Compute on the ranks of the scores
    """
    _, _, ssb, _, sst = _sums_of_squares(nom_field, scale_field, categories, levels, use_ranks)
    return ssb / sst


def epsilon_sq(
    nom_field,
    scale_field,
    categories: Optional[Sequence[Any]] = None,
    levels: Optional[Sequence[Any]] = None,
    use_ranks: bool = False,
) -> float:
    """Epsilon squared, eta squared adjusted for the degrees of freedom."""
    n, k, ssb, _, sst = _sums_of_squares(nom_field, scale_field, categories, levels, use_ranks)
    e2 = ssb / sst
    return (n * e2 - k + (1 - e2)) / (n - k)


def omega_sq(nom_field, scale_field, categories: Optional[Sequence[Any]] = None, version: str = "hays1") -> float:
    """Omega squared.

    Args:
        nom_field: Group labels
        scale_field: Scale scores
        categories: Optional groups to use
        version: "hays1" (from sums of squares) or "hays2" (from the F value)
    """
    if version not in OMEGA_VERSIONS:
        raise ValueError(f"version must be one of {OMEGA_VERSIONS}, got {version}")
    n, k, ssb, ssw, sst = _sums_of_squares(nom_field, scale_field, categories)
    dfb = k - 1
    dfw = n - k
    msw = ssw / dfw
    if version == "hays1":
        return (ssb - dfb * msw) / (sst + msw)
    f_value = (ssb / dfb) / msw
    return ((dfw - 2) * f_value / dfw - 1) / ((dfw + 1) / dfb + (dfw - 2) * f_value / dfw)


def cohen_f(nom_field, scale_field, categories: Optional[Sequence[Any]] = None) -> float:
    """Cohen's f, sqrt(SSb / SSw)."""
    _, _, ssb, ssw, _ = _sums_of_squares(nom_field, scale_field, categories)
    return float(np.sqrt(ssb / ssw))


def cohen_d_ow(nom_field, scale_field, categories: Optional[Sequence[Any]] = None) -> float:
    """Cohen's d for a one-way design: mean range divided by sqrt(SSw / n)."""
    df = select_categories(nom_field, scale_field, categories)
    summary = df.groupby("group")["score"].agg(["count", "mean", "var"])
    ssw = np.sum(summary["var"] * (summary["count"] - 1))
    return float((summary["mean"].max() - summary["mean"].min()) / np.sqrt(ssw / len(df)))


def rmsse(nom_field, scale_field, categories: Optional[Sequence[Any]] = None) -> float:
    """Root mean square standardized effect (Steiger's Psi)."""
    n, k, ssb, ssw, _ = _sums_of_squares(nom_field, scale_field, categories)
    msw = ssw / (n - k)
    df = select_categories(nom_field, scale_field, categories)
    means = df.groupby("group")["score"].mean()
    return float(np.sqrt(np.sum((means - df["score"].mean()) ** 2) / ((k - 1) * msw)))


def eta_sq_kw(h: float, n: int, k: int) -> float:
    """Eta squared from a Kruskal-Wallis H."""
    return (h - k + 1) / (n - k)


def epsilon_sq_kw(h: float, n: int) -> float:
    """Epsilon squared from a Kruskal-Wallis H."""
    return h / (n - 1)


def eta_sq_mc(q: float, n: int, k: int) -> float:
    """Eta squared from a Friedman or Cochran Q statistic."""
    return q / (n * (k - 1))


def kendall_w(q: float, n: int, k: int) -> float:
    """Kendall's W (coefficient of concordance) from a Friedman statistic."""
    return q / (n * (k - 1))
