"""Post-hoc analyses for rank-based tests (Kruskal-Wallis, Friedman, Cochran Q)."""

from __future__ import annotations

import logging
from itertools import combinations
from typing import Any, List, Optional, Sequence
import numpy as np
import pandas as pd
import scikit_posthocs as sp
from scipy import stats

from stikpet.hypothesis_tests.two_sample import fligner_policello
from stikpet.hypothesis_tests.two_sample import mann_whitney as mann_whitney_test
from stikpet.hypothesis_tests.two_sample import mood_median as mood_median_test
from stikpet.p_adjustments import p_adjust
from stikpet.preprocess import apply_levels, as_series, select_categories, sorted_categories

logger = logging.getLogger(__name__)

NEMENYI_VERSIONS = ["auto", "exact", "sh", "sh-ties"]
FRIEDMAN_METHODS = ["dunn", "conover", "nemenyi"]
ISO_TESTS = ["mann-whitney", "mood", "fligner-policello"]


def _ranked(cat_field, ord_field, categories=None, levels=None):
    """Rank all scores together and summarise the ranks per group.

    Returns:
        Tuple of (ranked frame, group names, group sizes, rank sums)
    """
    df = select_categories(cat_field, ord_field, categories, levels)
    df["r"] = stats.rankdata(df["score"])
    names = list(categories) if categories is not None else sorted_categories(df["group"])
    names = [c for c in names if (df["group"] == c).any()]
    if len(names) < 2:
        raise ValueError(f"At least two groups are needed, found {names}")
    grouped = df.groupby("group")["r"]
    sizes = grouped.count().reindex(names).to_numpy(dtype=float)
    sums = grouped.sum().reindex(names).to_numpy(dtype=float)
    return df, names, sizes, sums


def _tie_sum(ranks) -> float:
    _, counts = np.unique(ranks, return_counts=True)
    return float(np.sum(counts.astype(float) ** 3 - counts))


def _mean_rank_frame(names: List[Any], sizes, sums, extra) -> pd.DataFrame:
    rows = []
    for i, j in combinations(range(len(names)), 2):
        row = {
            "cat. 1": names[i],
            "cat. 2": names[j],
            "n1": sizes[i],
            "n2": sizes[j],
            "mean rank 1": sums[i] / sizes[i],
            "mean rank 2": sums[j] / sizes[j],
        }
        row.update(extra(i, j))
        rows.append(row)
    return pd.DataFrame(rows)


def dunn(
    cat_field,
    ord_field,
    categories: Optional[Sequence[Any]] = None,
    levels: Optional[Sequence[Any]] = None,
    mtc: Optional[str] = None,
) -> pd.DataFrame:
    """Dunn pairwise z-tests on the mean ranks, after a Kruskal-Wallis test.

    Args:
        cat_field: Group labels
        ord_field: Ordinal or scale scores
        categories: Optional groups to use (and their order)
        levels: Optional ordered labels for the scores
        mtc: Multiple comparison adjustment (default: configured ``p_adjust``)

    Returns:
        DataFrame with cat. 1, cat. 2, n1, n2, mean rank 1, mean rank 2,
        statistic, p-value, adj. p-value
    """
    df, names, sizes, sums = _ranked(cat_field, ord_field, categories, levels)
    n = len(df)
    a = n * (n + 1) / 12 - _tie_sum(df["r"]) / (12 * (n - 1))
    pvalues = sp.posthoc_dunn(df[["group", "score"]], val_col="score", group_col="group")

    def z_test(i, j):
        z = (sums[i] / sizes[i] - sums[j] / sizes[j]) / np.sqrt(a * (1 / sizes[i] + 1 / sizes[j]))
        return {"statistic": z, "p-value": float(pvalues.loc[names[i], names[j]])}

    res = _mean_rank_frame(names, sizes, sums, z_test)
    res["adj. p-value"] = p_adjust(res["p-value"].to_numpy(), mtc)
    return res


def conover_iman(
    cat_field,
    ord_field,
    categories: Optional[Sequence[Any]] = None,
    levels: Optional[Sequence[Any]] = None,
    mtc: Optional[str] = None,
) -> pd.DataFrame:
    """Conover-Iman pairwise t-tests on the mean ranks, after a Kruskal-Wallis test.

    Returns:
        DataFrame with cat. 1, cat. 2, n1, n2, mean rank 1, mean rank 2,
        statistic, df, p-value, adj. p-value
    """
    df, names, sizes, sums = _ranked(cat_field, ord_field, categories, levels)
    n = len(df)
    k = len(names)
    ff = n * (n + 1) ** 2 / 4
    s2 = (np.sum(df["r"] ** 2) - ff) / (n - 1)
    h = (np.sum(sums**2 / sizes) - ff) / s2
    var = s2 * (n - 1 - h) / (n - k)
    dof = n - k
    pvalues = sp.posthoc_conover(df[["group", "score"]], val_col="score", group_col="group")

    def t_test(i, j):
        t = (sums[i] / sizes[i] - sums[j] / sizes[j]) / np.sqrt(var * (1 / sizes[i] + 1 / sizes[j]))
        return {"statistic": t, "df": dof, "p-value": float(pvalues.loc[names[i], names[j]])}

    res = _mean_rank_frame(names, sizes, sums, t_test)
    res["adj. p-value"] = p_adjust(res["p-value"].to_numpy(), mtc)
    return res


def nemenyi(
    cat_field,
    ord_field,
    categories: Optional[Sequence[Any]] = None,
    levels: Optional[Sequence[Any]] = None,
    version: str = "auto",
) -> pd.DataFrame:
    """Nemenyi pairwise tests on the mean ranks, after a Kruskal-Wallis test.

    Args:
        cat_field: Group labels
        ord_field: Ordinal or scale scores
        categories: Optional groups to use (and their order)
        levels: Optional ordered labels for the scores
        version: "exact" (studentized range), "sh" (chi-square, as in
            Sachs) or "sh-ties" (chi-square with ties correction). "auto"
            uses "exact" for equal group sizes without ties, "sh-ties" when
            ties are present and "sh" otherwise.

    Returns:
        DataFrame with cat. 1, cat. 2, n1, n2, mean rank 1, mean rank 2,
        se, statistic, p-value
    """
    if version not in NEMENYI_VERSIONS:
        raise ValueError(f"version must be one of {NEMENYI_VERSIONS}, got {version}")
    df, names, sizes, sums = _ranked(cat_field, ord_field, categories, levels)
    n = len(df)
    k = len(names)
    t = _tie_sum(df["r"]) / (n**3 - n)
    if version == "auto":
        if t > 0:
            version = "sh-ties"
        elif np.all(sizes == sizes[0]):
            version = "exact"
        else:
            version = "sh"
        logger.debug(f"Nemenyi version selected: {version}")

    ff = n * (n + 1) / 24 if version == "exact" else n * (n + 1) / 12
    if version == "sh-ties":
        ff *= 1 - t
    pvalues = None
    if version != "sh":
        # scikit-posthocs always applies the ties correction to the chi-square version
        dist = "tukey" if version == "exact" else "chi"
        pvalues = sp.posthoc_nemenyi(df[["group", "score"]], val_col="score", group_col="group", dist=dist)

    def compare(i, j):
        se = np.sqrt(ff * (1 / sizes[i] + 1 / sizes[j]))
        d = sums[i] / sizes[i] - sums[j] / sizes[j]
        if version == "exact":
            stat = d / se
        else:
            stat = (d / se) ** 2
        if pvalues is None:
            pvalue = stats.chi2.sf(stat, k - 1)
        else:
            pvalue = pvalues.loc[names[i], names[j]]
        return {"se": se, "statistic": stat, "p-value": min(1.0, float(pvalue))}

    return _mean_rank_frame(names, sizes, sums, compare)


def sdcf(
    cat_field,
    ord_field,
    categories: Optional[Sequence[Any]] = None,
    levels: Optional[Sequence[Any]] = None,
) -> pd.DataFrame:
    """Steel-Dwass-Critchlow-Fligner pairwise comparisons.

    Each pair is re-ranked on its own; the standardized rank sum times
    sqrt(2) is compared with the studentized range distribution.

    Returns:
        DataFrame with cat. 1, cat. 2, n1, n2, mean rank 1, mean rank 2,
        statistic, std. statistic, p-value
    """
    df, names, _, _ = _ranked(cat_field, ord_field, categories, levels)
    k = len(names)
    rows = []
    for cat1, cat2 in combinations(names, 2):
        pair = df[df["group"].isin([cat1, cat2])]
        r = stats.rankdata(pair["score"])
        n_pair = len(pair)
        in1 = (pair["group"] == cat1).to_numpy()
        n1, n2 = in1.sum(), (~in1).sum()
        r1, r2 = r[in1].sum(), r[~in1].sum()
        s2 = n1 * n2 / 12 * (n_pair + 1 - _tie_sum(r) / (n_pair * (n_pair - 1)))
        q = (r1 - n1 * (n_pair + 1) / 2) / np.sqrt(s2)
        rows.append(
            {
                "cat. 1": cat1,
                "cat. 2": cat2,
                "n1": n1,
                "n2": n2,
                "mean rank 1": r1 / n1,
                "mean rank 2": r2 / n2,
                "statistic": q,
                "std. statistic": q * np.sqrt(2),
                "p-value": float(stats.studentized_range.sf(abs(q) * np.sqrt(2), k, np.inf)),
            }
        )
    return pd.DataFrame(rows)


def pairwise_iso(
    cat_field,
    ord_field,
    categories: Optional[Sequence[Any]] = None,
    levels: Optional[Sequence[Any]] = None,
    iso_test: str = "mann-whitney",
    mtc: Optional[str] = None,
    **kwargs,
) -> pd.DataFrame:
    """Pairwise two-sample tests for each pair of groups.

    Args:
        cat_field: Group labels
        ord_field: Ordinal or scale scores
        categories: Optional groups to use (and their order)
        levels: Optional ordered labels for the scores
        iso_test: "mann-whitney", "mood" (Mood median) or "fligner-policello"
        mtc: Multiple comparison adjustment (default: configured ``p_adjust``)
        **kwargs: Passed on to the two-sample test

    Returns:
        DataFrame with category 1, category 2, statistic, (df for the Mood
        median test), p-value, adj. p-value, test
    """
    if iso_test not in ISO_TESTS:
        raise ValueError(f"iso_test must be one of {ISO_TESTS}, got {iso_test}")
    tests = {"mann-whitney": mann_whitney_test, "mood": mood_median_test, "fligner-policello": fligner_policello}
    df = select_categories(cat_field, ord_field, categories, levels)
    names = list(categories) if categories is not None else sorted_categories(df["group"])
    rows = []
    for cat1, cat2 in combinations(names, 2):
        res = tests[iso_test](df["group"], df["score"], categories=[cat1, cat2], **kwargs)
        row = {"category 1": cat1, "category 2": cat2, "statistic": res["statistic"].iloc[0] if "statistic" in res else np.nan}
        if iso_test == "mood":
            row["df"] = res["df"].iloc[0] if "df" in res else np.nan
        row["p-value"] = float(res["p-value"].iloc[0])
        row["test"] = res["test"].iloc[0]
        rows.append(row)
    res = pd.DataFrame(rows)
    res.insert(res.columns.get_loc("p-value") + 1, "adj. p-value", p_adjust(res["p-value"].to_numpy(), mtc))
    return res


def mann_whitney(
    cat_field,
    ord_field,
    categories: Optional[Sequence[Any]] = None,
    levels: Optional[Sequence[Any]] = None,
    method: str = "approx",
    cc: bool = True,
    mtc: Optional[str] = None,
) -> pd.DataFrame:
    """Pairwise Mann-Whitney U tests, after a Kruskal-Wallis test."""
    return pairwise_iso(cat_field, ord_field, categories, levels, "mann-whitney", mtc, method=method, cc=cc)


def mood_median(
    cat_field,
    ord_field,
    categories: Optional[Sequence[Any]] = None,
    levels: Optional[Sequence[Any]] = None,
    test: str = "pearson",
    cc: str = "none",
    lambd=2 / 3,
    mtc: Optional[str] = None,
) -> pd.DataFrame:
    """Pairwise Mood median tests, after a Mood median test on all groups."""
    return pairwise_iso(cat_field, ord_field, categories, levels, "mood", mtc, test=test, cc=cc, lambd=lambd)


def _binary_matrix(data: pd.DataFrame, success: Any):
    df = pd.DataFrame(data).dropna()
    if df.shape[1] < 2:
        raise ValueError(f"At least two columns are needed, got {df.shape[1]}")
    if success is None:
        success = df.iloc[0, 0]
    return df, (df == success).to_numpy(dtype=float)


def dunn_q(data: pd.DataFrame, success: Any = None, mtc: Optional[str] = None) -> pd.DataFrame:
    """Dunn pairwise comparisons after a Cochran Q test.

    Args:
        data: DataFrame with one binary column per condition
        success: Value counted as a success (default: the first value)
        mtc: Multiple comparison adjustment (default: configured ``p_adjust``)

    Returns:
        DataFrame with category 1, category 2, n suc. 1, n suc. 2,
        statistic, z-value, p-value, adj. p-value
    """
    df, x = _binary_matrix(data, success)
    n, k = x.shape
    row_sums = x.sum(axis=1)
    se = np.sqrt(2 * (k * row_sums.sum() - np.sum(row_sums**2)) / (k * (k - 1) * n**2))
    col_sums = x.sum(axis=0)
    rows = []
    for i, j in combinations(range(k), 2):
        t = (col_sums[i] - col_sums[j]) / n
        z = t / se
        rows.append(
            {
                "category 1": df.columns[i],
                "category 2": df.columns[j],
                "n suc. 1": col_sums[i],
                "n suc. 2": col_sums[j],
                "statistic": t,
                "z-value": z,
                "p-value": 2 * stats.norm.sf(abs(z)),
            }
        )
    res = pd.DataFrame(rows)
    res["adj. p-value"] = p_adjust(res["p-value"].to_numpy(), mtc)
    return res


def friedman(
    data: pd.DataFrame, levels: Optional[Sequence[Any]] = None, method: str = "dunn", mtc: Optional[str] = None
) -> pd.DataFrame:
    """Pairwise comparisons after a Friedman test.

    Args:
        data: DataFrame with one column per condition and one row per case
        levels: Optional ordered labels for text scores
        method: "dunn" (z-test), "conover" (t-test) or "nemenyi"
            (studentized range)
        mtc: Multiple comparison adjustment (default: configured ``p_adjust``)

    Returns:
        DataFrame with category 1, category 2, n, statistic, df, p-value,
        adj. p-value
    """
    if method not in FRIEDMAN_METHODS:
        raise ValueError(f"method must be one of {FRIEDMAN_METHODS}, got {method}")
    df = pd.DataFrame(data).dropna()
    scores = np.column_stack([apply_levels(as_series(df[c].to_numpy()), levels) for c in df.columns])
    n, k = scores.shape
    ranks = np.apply_along_axis(stats.rankdata, 1, scores)
    rmj = ranks.mean(axis=0)

    if method == "conover":
        se = np.sqrt(2 * (n * np.sum(ranks**2) - np.sum((rmj * n) ** 2)) / ((n - 1) * (k - 1)))
        dof = (n - 1) * (k - 1)
    else:
        se = np.sqrt(k * (k + 1) / (6 * n))
        dof = np.nan if method == "dunn" else np.inf
    if method == "nemenyi":
        pvalues = sp.posthoc_nemenyi_friedman(pd.DataFrame(scores, columns=df.columns))

    rows = []
    for i, j in combinations(range(k), 2):
        if method == "dunn":
            stat = (rmj[i] - rmj[j]) / se
            pvalue = 2 * stats.norm.sf(abs(stat))
        elif method == "conover":
            stat = (rmj[i] - rmj[j]) * n / se
            pvalue = 2 * stats.t.sf(abs(stat), dof)
        else:
            stat = (rmj[i] - rmj[j]) / se * np.sqrt(2)
            pvalue = pvalues.loc[df.columns[i], df.columns[j]]
        rows.append(
            {
                "category 1": df.columns[i],
                "category 2": df.columns[j],
                "n": n,
                "statistic": stat,
                "df": dof,
                "p-value": float(pvalue),
            }
        )
    res = pd.DataFrame(rows)
    res["adj. p-value"] = p_adjust(res["p-value"].to_numpy(), mtc)
    return res
