"""Effect sizes for ordinal data and stochastic superiority."""

from __future__ import annotations

import itertools
from typing import Any, Optional, Sequence
import numpy as np
import pandas as pd
from scipy import stats

from stikpet.correlations.ordinal import rank_biserial_is, rank_biserial_os
from stikpet.correlations.scale import rosenthal
from stikpet.effect_sizes.means import cohen_d_os
from stikpet.posthoc.rank import dunn
from stikpet.preprocess import apply_levels, paired, select_categories, sorted_categories, two_groups
from stikpet.tables import tab_cross

CLE_IS_METHODS = ["brute", "brute-it", "vda", "appr"]
CLE_OS_METHODS = ["brute", "brute-it", "rb", "normal"]


def vargha_delaney_a(
    cat_field,
    ord_field,
    categories: Optional[Sequence[Any]] = None,
    levels: Optional[Sequence[Any]] = None,
) -> pd.DataFrame:
    """Vargha-Delaney A for both groups.

    A for the first group is the probability that a random score of that
    group exceeds one of the second group, counting ties as one half.

    Returns:
        One-row DataFrame with columns ``A-<cat1>`` and ``A-<cat2>``
    """
    x, y, cat1, cat2 = two_groups(cat_field, ord_field, categories, levels)
    n1, n2 = len(x), len(y)
    ranks = stats.rankdata(np.concatenate([x, y]))
    a1 = (ranks[:n1].sum() / n1 - (n1 + 1) / 2) / n2
    a2 = (ranks[n1:].sum() / n2 - (n2 + 1) / 2) / n1
    return pd.DataFrame({f"A-{cat1}": [a1], f"A-{cat2}": [a2]})


def common_language_is(
    cat_field,
    scores,
    categories: Optional[Sequence[Any]] = None,
    levels: Optional[Sequence[Any]] = None,
    dmu: float = 0,
    method: str = "brute",
) -> pd.DataFrame:
    """Common language effect size for two independent samples.

    Args:
        cat_field: Group labels
        scores: Ordinal or scale scores
        categories: Optional two categories to compare
        levels: Optional ordered labels for the scores
        dmu: Hypothesized difference, only used by "appr"
        method: "brute" (pairs, ties count half), "brute-it" (ties ignored),
            "vda" (from the rank sums) or "appr" (McGraw-Wong normal
            approximation)

    Returns:
        One-row DataFrame with ``CLE <cat1>`` and ``CLE <cat2>``
    """
    if method not in CLE_IS_METHODS:
        raise ValueError(f"method must be one of {CLE_IS_METHODS}, got {method}")
    x, y, cat1, cat2 = two_groups(cat_field, scores, categories, levels)

    if method == "appr":
        z = (x.mean() - y.mean() - dmu) / np.sqrt(np.var(x, ddof=1) + np.var(y, ddof=1))
        c1 = stats.norm.cdf(z)
        c2 = 1 - c1
    elif method == "vda":
        res = vargha_delaney_a(cat_field, scores, [cat1, cat2], levels)
        c1, c2 = res.iloc[0, 0], res.iloc[0, 1]
    else:
        diff = x[:, None] - y[None, :]
        n_pairs = diff.size
        if method == "brute":
            c1 = (np.sum(diff > 0) + np.sum(diff == 0) / 2) / n_pairs
            c2 = 1 - c1
        else:
            c1 = np.sum(diff > 0) / n_pairs
            c2 = np.sum(diff < 0) / n_pairs
    return pd.DataFrame({f"CLE {cat1}": [c1], f"CLE {cat2}": [c2]})


def common_language_os(
    scores,
    levels: Optional[Sequence[Any]] = None,
    mu: Optional[float] = None,
    version: str = "brute",
) -> float:
    """One-sample common language effect size, P(X > mu).

    Args:
        scores: Ordinal or scale scores
        levels: Optional ordered labels
        mu: Hypothesized value (default: midrange)
        version: "brute" (ties count half), "brute-it" (ties ignored),
            "rb" (from the rank biserial) or "normal" (from Cohen's d)
    """
    if version not in CLE_OS_METHODS:
        raise ValueError(f"version must be one of {CLE_OS_METHODS}, got {version}")
    x = apply_levels(scores, levels).dropna().to_numpy(dtype=float)
    if mu is None:
        mu = (x.min() + x.max()) / 2
    n = len(x)
    if version == "brute-it":
        return float(np.sum(x > mu) / n)
    if version == "brute":
        return float(np.sum(x > mu) / n + np.sum(x == mu) / (2 * n))
    if version == "rb":
        rb = rank_biserial_os(x, mu=mu)["rb"].iloc[0]
        return float((1 + rb) / 2)
    return float(stats.norm.cdf(cohen_d_os(x, mu=mu) / np.sqrt(2)))


def common_language_ps(field1, field2, dmu: float = 0, method: str = "dunlap") -> float:
    """Common language effect size for paired samples.

    Args:
        field1, field2: Paired scale scores
        dmu: Hypothesized difference ("mcgraw-wong" only)
        method: "dunlap" (arcsine of r) or "mcgraw-wong" (normal approximation)
    """
    x, y = paired(field1, field2)
    r = np.corrcoef(x, y)[0, 1]
    if method == "dunlap":
        return float(np.arcsin(r) / np.pi + 0.5)
    if method == "mcgraw-wong":
        sx, sy = np.std(x, ddof=1), np.std(y, ddof=1)
        se = np.sqrt(sx**2 + sy**2 - 2 * r * sx * sy)
        return float(stats.norm.cdf((abs(x.mean() - y.mean()) - dmu) / se))
    raise ValueError(f"method must be 'dunlap' or 'mcgraw-wong', got {method}")


def dominance(data, levels: Optional[Sequence[Any]] = None, mu: Optional[float] = None, out: str = "dominance") -> pd.DataFrame:
    """Dominance: proportion above mu minus proportion below mu.

    Args:
        data: Ordinal or scale scores
        levels: Optional ordered labels
        mu: Hypothesized value (default: midrange)
        out: "dominance" or "vda" for the rescaled (d + 1) / 2 value

    Returns:
        One-row DataFrame with mu and the dominance (or VDA-like) value
    """
    if out not in ("dominance", "vda"):
        raise ValueError(f"out must be 'dominance' or 'vda', got {out}")
    x = apply_levels(data, levels).dropna().to_numpy(dtype=float)
    if mu is None:
        mu = (x.min() + x.max()) / 2
    d = np.mean(x > mu) - np.mean(x < mu)
    if out == "vda":
        return pd.DataFrame({"mu": [mu], "VDA-like": [(d + 1) / 2]})
    return pd.DataFrame({"mu": [mu], "dominance": [d]})


def freeman_theta(
    cat_field,
    ord_field,
    categories: Optional[Sequence[Any]] = None,
    levels: Optional[Sequence[Any]] = None,
) -> float:
    """Freeman's theta for an ordinal variable across k groups."""
    ct = tab_cross(cat_field, ord_field, order1=categories, order2=levels).to_numpy(dtype=float)
    k = ct.shape[0]
    d = 0.0
    t = 0.0
    for x, y in itertools.combinations(range(k), 2):
        below = np.cumsum(ct[y]) - ct[y]
        above = ct[y].sum() - np.cumsum(ct[y])
        d += abs(np.sum(ct[x] * above) - np.sum(ct[x] * below))
        t += ct[x].sum() * ct[y].sum()
    return float(d / t)


def hodges_lehmann_is(
    cat_field,
    scores,
    categories: Optional[Sequence[Any]] = None,
    levels: Optional[Sequence[Any]] = None,
) -> float:
    """Hodges-Lehmann estimator: the median of all pairwise differences x - y."""
    x, y, _, _ = two_groups(cat_field, scores, categories, levels)
    return float(np.median(np.subtract.outer(x, y)))


def pairwise_bin_ord(
    cat_field,
    ord_field,
    categories: Optional[Sequence[Any]] = None,
    levels: Optional[Sequence[Any]] = None,
    es: str = "cle",
) -> pd.DataFrame:
    """Effect size for every pair of groups on an ordinal variable.

    Args:
        cat_field: Group labels
        ord_field: Ordinal scores
        categories: Optional groups to use
        levels: Optional ordered labels for the scores
        es: "cle" (Vargha-Delaney based CLE), "rb" (rank biserial) or
            "rosenthal" (from Dunn's post-hoc z values)

    Returns:
        DataFrame with one row per pair of groups
    """
    if es not in ("cle", "rb", "rosenthal"):
        raise ValueError(f"es must be 'cle', 'rb' or 'rosenthal', got {es}")
    if es == "rosenthal":
        ph = dunn(cat_field, ord_field, categories=categories, levels=levels)
        n = ph["n1"] + ph["n2"]
        values = [rosenthal(z, m) for z, m in zip(ph["statistic"], n)]
        return pd.DataFrame({"cat. 1": ph["cat. 1"], "cat. 2": ph["cat. 2"], "Rosenthal Correlation": values})

    df = select_categories(cat_field, ord_field, categories, levels)
    cats = list(categories) if categories is not None else sorted_categories(df["group"])
    cats = [c for c in cats if c in set(df["group"])]
    rows = []
    for cat1, cat2 in itertools.combinations(cats, 2):
        if es == "cle":
            res = common_language_is(df["group"], df["score"], categories=[cat1, cat2], method="vda")
            rows.append([cat1, cat2, res.iloc[0, 0], res.iloc[0, 1]])
        else:
            rows.append([cat1, cat2, rank_biserial_is(df["group"], df["score"], categories=[cat1, cat2])])
    columns = ["cat. 1", "cat. 2", "CLE 1", "CLE 2"] if es == "cle" else ["cat. 1", "cat. 2", "rb"]
    return pd.DataFrame(rows, columns=columns)
