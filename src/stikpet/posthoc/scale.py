"""Post-hoc analyses for scale data and paired samples."""

from __future__ import annotations

from itertools import combinations
from typing import Any, Optional, Sequence
import numpy as np
import pandas as pd
from scipy import stats

from stikpet.hypothesis_tests.paired import sign_ps, trinomial_ps, wilcoxon_ps
from stikpet.hypothesis_tests.two_sample import student_t_is, trimmed_mean_is, welch_t_is, z_is
from stikpet.p_adjustments import p_adjust
from stikpet.preprocess import group_summary

IS_TESTS = ["student", "welch", "trimmed", "yuen", "z"]
PS_TESTS = ["sign", "wilcoxon", "trinomial"]

MEAN_COLUMNS = ["category 1", "category 2", "n1", "n2", "mean 1", "mean 2", "sample diff.", "hyp diff.",
                "statistic", "df", "p-value", "adj. p-value", "test"]


def _is_test(nom_field, scale_field, pair, is_test: str, trim: float) -> pd.DataFrame:
    if is_test == "student":
        return student_t_is(nom_field, scale_field, pair)
    if is_test == "welch":
        return welch_t_is(nom_field, scale_field, pair)
    if is_test == "trimmed":
        return trimmed_mean_is(nom_field, scale_field, pair, trim=trim, se="wilcox")
    if is_test == "yuen":
        return trimmed_mean_is(nom_field, scale_field, pair, trim=trim, se="yuen")
    return z_is(nom_field, scale_field, pair)


def pairwise_is(
    nom_field,
    scale_field,
    categories: Optional[Sequence[Any]] = None,
    is_test: str = "student",
    trim: float = 0.1,
    mtc: Optional[str] = None,
) -> pd.DataFrame:
    """Pairwise independent samples tests after a one-way ANOVA.

    Args:
        nom_field: Group labels
        scale_field: Scores
        categories: Optional groups to use (and their order)
        is_test: "student", "welch", "trimmed" (pooled trimmed mean test),
            "yuen" (Yuen-Welch) or "z"
        trim: Proportion trimmed from each side, for the trimmed mean tests
        mtc: Multiple comparison adjustment (default: configured ``p_adjust``)

    Returns:
        DataFrame with category 1, category 2, n1, n2, mean 1, mean 2,
        sample diff., hyp diff., statistic, df, p-value, adj. p-value, test.
        The means are trimmed means for the trimmed mean tests.
    """
    if is_test not in IS_TESTS:
        raise ValueError(f"is_test must be one of {IS_TESTS}, got {is_test}")
    summary = group_summary(nom_field, scale_field, categories)
    rows = []
    for cat1, cat2 in combinations(summary.index, 2):
        res = _is_test(nom_field, scale_field, [cat1, cat2], is_test, trim)
        if is_test == "z":
            n1, n2 = summary.loc[cat1, "n"], summary.loc[cat2, "n"]
            m1, m2 = summary.loc[cat1, "mean"], summary.loc[cat2, "mean"]
            df = np.nan
        else:
            n1, n2, m1, m2 = res.iloc[0, :4]
            df = res["df"].iloc[0]
        rows.append(
            {
                "category 1": cat1,
                "category 2": cat2,
                "n1": n1,
                "n2": n2,
                "mean 1": m1,
                "mean 2": m2,
                "sample diff.": m1 - m2,
                "hyp diff.": 0,
                "statistic": res["statistic"].iloc[0],
                "df": df,
                "p-value": float(res["p-value"].iloc[0]),
                "test": res["test"].iloc[0],
            }
        )
    res = pd.DataFrame(rows)
    res["adj. p-value"] = p_adjust(res["p-value"].to_numpy(), mtc)
    return res[MEAN_COLUMNS]


def pairwise_t(
    nom_field, scale_field, categories: Optional[Sequence[Any]] = None, mtc: Optional[str] = None
) -> pd.DataFrame:
    """Pairwise t-tests using the pooled within-group variance of all groups (Winer).

    Returns:
        DataFrame with the columns of ``pairwise_is``
    """
    summary = group_summary(nom_field, scale_field, categories)
    n = summary["n"].sum()
    k = len(summary)
    ssw = np.sum((summary["n"] - 1) * summary["var"])
    dfw = n - k
    msw = ssw / dfw
    rows = []
    for cat1, cat2 in combinations(summary.index, 2):
        n1, n2 = summary.loc[cat1, "n"], summary.loc[cat2, "n"]
        m1, m2 = summary.loc[cat1, "mean"], summary.loc[cat2, "mean"]
        t = (m1 - m2) / np.sqrt(msw * (1 / n1 + 1 / n2))
        rows.append(
            {
                "category 1": cat1,
                "category 2": cat2,
                "n1": n1,
                "n2": n2,
                "mean 1": m1,
                "mean 2": m2,
                "sample diff.": m1 - m2,
                "hyp diff.": 0,
                "statistic": t,
                "df": dfw,
                "p-value": 2 * stats.t.sf(abs(t), dfw),
                "test": "Winer pairwise t",
            }
        )
    res = pd.DataFrame(rows)
    res["adj. p-value"] = p_adjust(res["p-value"].to_numpy(), mtc)
    return res[MEAN_COLUMNS]


def pairwise_ps(
    data: pd.DataFrame,
    levels: Optional[Sequence[Any]] = None,
    test: str = "sign",
    appr: Optional[str] = None,
    eq_med: str = "wilcoxon",
    ties: bool = True,
    cc: bool = False,
    mtc: Optional[str] = None,
) -> pd.DataFrame:
    """Pairwise paired-sample tests after a Friedman test.

    Args:
        data: DataFrame with one column per condition and one row per case
        levels: Optional ordered labels for text scores
        test: "sign", "wilcoxon" or "trinomial"
        appr: Approximation; "exact" or "appr" for the sign test (default
            "appr"), one of ``WILCOXON_APPR`` for the Wilcoxon test
            (default "wilcoxon")
        eq_med: Treatment of zero differences for the Wilcoxon test
        ties: Ties correction for the Wilcoxon test
        cc: Continuity correction for the Wilcoxon test
        mtc: Multiple comparison adjustment (default: configured ``p_adjust``)

    Returns:
        DataFrame with var 1, var 2, the columns of the paired test used
        (without test), p-value, adj. p-value
    """
    if test not in PS_TESTS:
        raise ValueError(f"test must be one of {PS_TESTS}, got {test}")
    df = pd.DataFrame(data).dropna()
    rows = []
    for col1, col2 in combinations(df.columns, 2):
        if test == "sign":
            res = sign_ps(df[col1], df[col2], levels=levels, method=appr or "appr")
        elif test == "wilcoxon":
            res = wilcoxon_ps(df[col1], df[col2], levels=levels, ties=ties, appr=appr or "wilcoxon", eq_med=eq_med, cc=cc)
        else:
            res = trinomial_ps(df[col1], df[col2], levels=levels)
        row = {"var 1": col1, "var 2": col2}
        row.update(res.drop(columns="test").iloc[0].to_dict())
        rows.append(row)
    res = pd.DataFrame(rows)
    res["adj. p-value"] = p_adjust(res["p-value"].to_numpy(), mtc)
    return res
