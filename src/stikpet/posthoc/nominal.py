"""Post-hoc analyses for nominal data: pairwise and residual tests."""

from __future__ import annotations

from itertools import combinations
from typing import Any, Optional, Sequence
import numpy as np
import pandas as pd
from scipy import stats

from stikpet.hypothesis_tests.goodness_of_fit import (
    freeman_tukey_gof,
    freeman_tukey_read,
    g_gof,
    mod_log_likelihood_gof,
    multinomial_gof,
    neyman_gof,
    pearson_gof,
    powerdivergence_gof,
)
from stikpet.hypothesis_tests.one_sample import binomial_os, score_os, wald_os
from stikpet.p_adjustments import p_adjust
from stikpet.preprocess import ExpectedCounts, gof_counts
from stikpet.tables import tab_cross

GOF_TESTS = {
    "pearson": pearson_gof,
    "freeman-tukey": freeman_tukey_gof,
    "freeman-tukey-read": freeman_tukey_read,
    "g": g_gof,
    "mod-log-g": mod_log_likelihood_gof,
    "neyman": neyman_gof,
    "powerdivergence": powerdivergence_gof,
    "multinomial": multinomial_gof,
}

BIN_TESTS = {"binomial": binomial_os, "wald": wald_os, "score": score_os}

RESIDUAL_TESTS = ["std-residual", "adj-residual"] + list(BIN_TESTS)

OTHER = "all other"


def _check(test: str, valid) -> None:
    if test not in valid:
        raise ValueError(f"test must be one of {list(valid)}, got {test}")


def _binary_test(data, codes, p0: float, test: str, **kwargs):
    """Return (statistic, p-value, description) of a one-sample binary test."""
    res = BIN_TESTS[test](data, codes=codes, p0=p0, **kwargs)
    statistic = res["statistic"].iloc[0] if "statistic" in res.columns else np.nan
    return statistic, float(res["p-value"].iloc[0]), res["test"].iloc[0]


def _gof_row(res: pd.DataFrame, multinomial: bool) -> dict:
    if multinomial:
        keys = ["p obs", "n combs.", "p-value"]
    else:
        keys = ["statistic", "df", "p-value", "minExp", "propBelow5"]
    row = {key: res[key].iloc[0] for key in keys}
    row["test"] = res["test"].iloc[0]
    return row


def _adjusted(rows, columns, mtc: Optional[str]) -> pd.DataFrame:
    res = pd.DataFrame(rows)
    res["adj. p-value"] = p_adjust(res["p-value"].to_numpy(), mtc)
    return res[columns]


def pairwise_bin(
    data, test: str = "binomial", exp_counts: ExpectedCounts = None, mtc: Optional[str] = None, **kwargs
) -> pd.DataFrame:
    """Pairwise binary tests after a goodness-of-fit test.

    Each pair of categories is tested with a one-sample binomial, Wald or
    score test, using only the scores in the two categories. The expected
    proportion of the first category is its share of the two expected
    counts.

    Args:
        data: Nominal observations
        test: "binomial", "wald" or "score"
        exp_counts: Optional expected counts per category (default: equal)
        mtc: Multiple comparison adjustment (default: configured ``p_adjust``)
        **kwargs: Passed on to the one-sample test

    Returns:
        DataFrame with one row per pair: category 1, category 2, n1, n2,
        n pair, obs. prop. 1, exp. prop. 1, statistic, p-value,
        adj. p-value, test
    """
    _check(test, BIN_TESTS)
    cats, observed, expected = gof_counts(data, exp_counts)
    rows = []
    for i, j in combinations(range(len(cats)), 2):
        n1, n2 = observed[i], observed[j]
        p0 = expected[i] / (expected[i] + expected[j])
        statistic, pvalue, desc = _binary_test(data, [cats[i], cats[j]], p0, test, **kwargs)
        rows.append(
            {
                "category 1": cats[i],
                "category 2": cats[j],
                "n1": n1,
                "n2": n2,
                "n pair": n1 + n2,
                "obs. prop. 1": n1 / (n1 + n2),
                "exp. prop. 1": p0,
                "statistic": statistic,
                "p-value": pvalue,
                "test": desc,
            }
        )
    columns = ["category 1", "category 2", "n1", "n2", "n pair", "obs. prop. 1", "exp. prop. 1",
               "statistic", "p-value", "adj. p-value", "test"]
    return _adjusted(rows, columns, mtc)


def binomial(
    data, exp_counts: ExpectedCounts = None, two_sided_method: str = "eqdist", mtc: Optional[str] = None
) -> pd.DataFrame:
    """Pairwise binomial tests after a goodness-of-fit test.

    Returns:
        DataFrame with category 1, category 2, n1, n2, obs. prop. 1,
        exp. prop. 1, p-value, adj. p-value, test
    """
    res = pairwise_bin(data, "binomial", exp_counts, mtc, two_sided_method=two_sided_method)
    return res.drop(columns=["n pair", "statistic"])


def pairwise_gof(
    data, test: str = "pearson", exp_counts: ExpectedCounts = None, mtc: Optional[str] = None, **kwargs
) -> pd.DataFrame:
    """Pairwise goodness-of-fit tests after a goodness-of-fit test.

    Each pair of categories gets its own goodness-of-fit test with the
    expected counts rescaled to the size of the pair.

    Args:
        data: Nominal observations
        test: One of ``GOF_TESTS``
        exp_counts: Optional expected counts per category (default: equal)
        mtc: Multiple comparison adjustment (default: configured ``p_adjust``)
        **kwargs: Passed on to the goodness-of-fit test

    Returns:
        DataFrame with one row per pair. Columns category 1, category 2, n1,
        n2, obs. prop. 1, exp. prop. 1, then statistic, df, p-value,
        adj. p-value, minExp, propBelow5 (or p obs, n combs., p-value,
        adj. p-value for the multinomial test), test
    """
    _check(test, GOF_TESTS)
    multinomial = test == "multinomial"
    cats, observed, expected = gof_counts(data, exp_counts)
    rows = []
    for i, j in combinations(range(len(cats)), 2):
        n1, n2 = observed[i], observed[j]
        res = GOF_TESTS[test](data, exp_counts={cats[i]: expected[i], cats[j]: expected[j]}, **kwargs)
        row = {
            "category 1": cats[i],
            "category 2": cats[j],
            "n1": n1,
            "n2": n2,
            "obs. prop. 1": n1 / (n1 + n2),
            "exp. prop. 1": expected[i] / (expected[i] + expected[j]),
        }
        row.update(_gof_row(res, multinomial))
        rows.append(row)
    head = ["category 1", "category 2", "n1", "n2", "obs. prop. 1", "exp. prop. 1"]
    if multinomial:
        columns = head + ["p obs", "n combs.", "p-value", "adj. p-value", "test"]
    else:
        columns = head + ["statistic", "df", "p-value", "adj. p-value", "minExp", "propBelow5", "test"]
    return _adjusted(rows, columns, mtc)


def _one_vs_rest(cat: Any, n_cat: float, n: float) -> pd.Series:
    return pd.Series([cat] * int(n_cat) + [OTHER] * int(n - n_cat), dtype=object)


def residual_gof_bin(
    data, test: str = "std-residual", exp_counts: ExpectedCounts = None, mtc: Optional[str] = None, **kwargs
) -> pd.DataFrame:
    """Test each category against all other categories after a goodness-of-fit test.

    Args:
        data: Nominal observations
        test: "std-residual" ((O - E) / sqrt(E)), "adj-residual"
            ((O - E) / sqrt(E (1 - E/n))), or a binary test "binomial",
            "wald" or "score" of the category against the rest
        exp_counts: Optional expected counts per category (default: equal)
        mtc: Multiple comparison adjustment (default: configured ``p_adjust``)
        **kwargs: Passed on to the binary test

    Returns:
        DataFrame with category, obs. count, exp. count, statistic, p-value,
        adj. p-value, test
    """
    _check(test, RESIDUAL_TESTS)
    cats, observed, expected = gof_counts(data, exp_counts)
    n = observed.sum()
    rows = []
    for cat, obs, exp in zip(cats, observed, expected):
        if test == "std-residual":
            statistic = (obs - exp) / np.sqrt(exp)
            pvalue = 2 * stats.norm.sf(abs(statistic))
            desc = "standardized residuals z-test"
        elif test == "adj-residual":
            statistic = (obs - exp) / np.sqrt(exp * (1 - exp / n))
            pvalue = 2 * stats.norm.sf(abs(statistic))
            desc = "adjusted residuals z-test"
        else:
            statistic, pvalue, desc = _binary_test(_one_vs_rest(cat, obs, n), [cat, OTHER], exp / n, test, **kwargs)
        rows.append(
            {"category": cat, "obs. count": obs, "exp. count": exp, "statistic": statistic, "p-value": pvalue, "test": desc}
        )
    columns = ["category", "obs. count", "exp. count", "statistic", "p-value", "adj. p-value", "test"]
    return _adjusted(rows, columns, mtc)


def residual_gof(data, exp_counts: ExpectedCounts = None, mtc: Optional[str] = None) -> pd.DataFrame:
    """Standardized residual z-test per category after a goodness-of-fit test."""
    return residual_gof_bin(data, "std-residual", exp_counts, mtc)


def residual_gof_gof(
    data, test: str = "pearson", exp_counts: ExpectedCounts = None, mtc: Optional[str] = None, **kwargs
) -> pd.DataFrame:
    """Goodness-of-fit test of each category against all other categories.

    Args:
        data: Nominal observations
        test: One of ``GOF_TESTS``
        exp_counts: Optional expected counts per category (default: equal)
        mtc: Multiple comparison adjustment (default: configured ``p_adjust``)
        **kwargs: Passed on to the goodness-of-fit test

    Returns:
        DataFrame with category, obs. count, exp. count, then statistic, df,
        p-value, adj. p-value, minExp, propBelow5 (or p obs, n combs.,
        p-value, adj. p-value for the multinomial test), test
    """
    _check(test, GOF_TESTS)
    multinomial = test == "multinomial"
    cats, observed, expected = gof_counts(data, exp_counts)
    n = observed.sum()
    rows = []
    for cat, obs, exp in zip(cats, observed, expected):
        res = GOF_TESTS[test](_one_vs_rest(cat, obs, n), exp_counts={cat: exp, OTHER: n - exp}, **kwargs)
        row = {"category": cat, "obs. count": obs, "exp. count": exp}
        row.update(_gof_row(res, multinomial))
        rows.append(row)
    head = ["category", "obs. count", "exp. count"]
    if multinomial:
        columns = head + ["p obs", "n combs.", "p-value", "adj. p-value", "test"]
    else:
        columns = head + ["statistic", "df", "p-value", "adj. p-value", "minExp", "propBelow5", "test"]
    return _adjusted(rows, columns, mtc)


def residual(
    field1,
    field2,
    categories1: Optional[Sequence[Any]] = None,
    categories2: Optional[Sequence[Any]] = None,
    residual: str = "adjusted",
    mtc: Optional[str] = None,
) -> pd.DataFrame:
    """Residual z-tests per cell of a cross table.

    Args:
        field1, field2: Nominal fields
        categories1, categories2: Optional categories to use (and their order)
        residual: "adjusted" or "standardized"
        mtc: Multiple comparison adjustment (default: configured ``p_adjust``)

    Returns:
        DataFrame with one row per cell: field1, field2, observed, expected,
        residual, st. residual (or adj. st. residual), p-value, adj. p-value
    """
    if residual not in ("adjusted", "standardized"):
        raise ValueError(f"residual must be 'adjusted' or 'standardized', got {residual}")
    ct = tab_cross(field1, field2, order1=categories1, order2=categories2)
    obs = ct.to_numpy(dtype=float)
    n = obs.sum()
    row_tot = obs.sum(axis=1, keepdims=True)
    col_tot = obs.sum(axis=0, keepdims=True)
    expected = row_tot * col_tot / n
    if residual == "standardized":
        se = np.sqrt(expected)
        label = "st. residual"
    else:
        se = np.sqrt(expected * (1 - row_tot / n) * (1 - col_tot / n))
        label = "adj. st. residual"
    z = (obs - expected) / se

    rows, cols = np.meshgrid(np.arange(obs.shape[0]), np.arange(obs.shape[1]), indexing="ij")
    res = pd.DataFrame(
        {
            "field1": ct.index.to_numpy()[rows.ravel()],
            "field2": ct.columns.to_numpy()[cols.ravel()],
            "observed": obs.ravel(),
            "expected": expected.ravel(),
            "residual": (obs - expected).ravel(),
            label: z.ravel(),
            "p-value": 2 * stats.norm.sf(np.abs(z.ravel())),
        }
    )
    res["adj. p-value"] = p_adjust(res["p-value"].to_numpy(), mtc)
    return res


def column_proportion(
    field1,
    field2,
    categories1: Optional[Sequence[Any]] = None,
    categories2: Optional[Sequence[Any]] = None,
    se_method: str = "spss",
    mtc: Optional[str] = None,
) -> pd.DataFrame:
    """Column proportion z-tests: per row, compare the column proportions pairwise.

    Args:
        field1: Row field
        field2: Column field
        categories1, categories2: Optional categories to use (and their order)
        se_method: "spss" (pooled proportion) or "marascuilo" (unpooled)
        mtc: Multiple comparison adjustment, applied within each row
            (default: configured ``p_adjust``)

    Returns:
        DataFrame with field1, field2-1, field2-2, col. prop. 1,
        col. prop. 2, difference, statistic, p-value, adj. p-value
    """
    if se_method not in ("spss", "marascuilo"):
        raise ValueError(f"se_method must be 'spss' or 'marascuilo', got {se_method}")
    ct = tab_cross(field1, field2, order1=categories1, order2=categories2)
    obs = ct.to_numpy(dtype=float)
    col_tot = obs.sum(axis=0)
    frames = []
    for i, row_cat in enumerate(ct.index):
        rows = []
        for j, k in combinations(range(obs.shape[1]), 2):
            p1 = obs[i, j] / col_tot[j]
            p2 = obs[i, k] / col_tot[k]
            if se_method == "spss":
                p = (obs[i, j] + obs[i, k]) / (col_tot[j] + col_tot[k])
                se = np.sqrt(p * (1 - p) * (1 / col_tot[j] + 1 / col_tot[k]))
            else:
                se = np.sqrt(p1 * (1 - p2) / col_tot[j] + p2 * (1 - p1) / col_tot[k])
            z = (p1 - p2) / se
            rows.append(
                {
                    "field1": row_cat,
                    "field2-1": ct.columns[j],
                    "field2-2": ct.columns[k],
                    "col. prop. 1": p1,
                    "col. prop. 2": p2,
                    "difference": p1 - p2,
                    "statistic": z,
                    "p-value": 2 * stats.norm.sf(abs(z)),
                }
            )
        frame = pd.DataFrame(rows)
        frame["adj. p-value"] = p_adjust(frame["p-value"].to_numpy(), mtc)
        frames.append(frame)
    return pd.concat(frames, ignore_index=True)


def _mcnemar(b: float, c: float, exact: bool, cc: bool):
    """Return (statistic, df, p-value) for the off-diagonal counts b and c."""
    if exact:
        m = int(b + c)
        low = int(min(b, c))
        pvalue = 2 * stats.binom.cdf(low, m, 0.5)
        if cc:
            pvalue -= stats.binom.pmf(low, m, 0.5)
        return np.nan, np.nan, min(1.0, float(pvalue))
    diff = abs(b - c) - 1 if cc else abs(b - c)
    statistic = diff**2 / (b + c)
    return statistic, 1, float(stats.chi2.sf(statistic, 1))


def _square(field1, field2, categories):
    if categories is None:
        categories = sorted(set(pd.Series(field1).dropna()) | set(pd.Series(field2).dropna()))
    return tab_cross(field1, field2, order1=categories, order2=categories)


def mcnemar_co(
    field1, field2, categories: Optional[Sequence[Any]] = None, exact: bool = False, cc: bool = False,
    mtc: Optional[str] = None,
) -> pd.DataFrame:
    """McNemar test for each category against all others, after a Bowker test.

    Args:
        field1, field2: Paired nominal fields
        categories: Optional categories to use (and their order)
        exact: Use the exact binomial test instead of the chi-square test
        cc: Continuity correction (mid-p for the exact test)
        mtc: Multiple comparison adjustment (default: configured ``p_adjust``)

    Returns:
        DataFrame with category, n, statistic, df, p-value, adj. p-value
    """
    ct = _square(field1, field2, categories)
    obs = ct.to_numpy(dtype=float)
    n = obs.sum()
    rows = []
    for i, cat in enumerate(ct.index):
        a = obs[i, i]
        b = obs[i, :].sum() - a
        c = obs[:, i].sum() - a
        statistic, df, pvalue = _mcnemar(b, c, exact, cc)
        rows.append({"category": cat, "n": n, "statistic": statistic, "df": df, "p-value": pvalue})
    return _adjusted(rows, ["category", "n", "statistic", "df", "p-value", "adj. p-value"], mtc)


def mcnemar_pw(
    field1, field2, categories: Optional[Sequence[Any]] = None, exact: bool = False, cc: bool = False,
    mtc: Optional[str] = None,
) -> pd.DataFrame:
    """Pairwise McNemar tests, after a Bowker test.

    Each pair of categories is tested on the cases that fall in those two
    categories in both fields.

    Returns:
        DataFrame with field1, field2, n, statistic, df, p-value, adj. p-value
    """
    ct = _square(field1, field2, categories)
    obs = ct.to_numpy(dtype=float)
    rows = []
    for i, j in combinations(range(len(ct.index)), 2):
        b, c = obs[i, j], obs[j, i]
        statistic, df, pvalue = _mcnemar(b, c, exact, cc)
        n = obs[i, i] + obs[j, j] + b + c
        rows.append(
            {"field1": ct.index[i], "field2": ct.index[j], "n": n, "statistic": statistic, "df": df, "p-value": pvalue}
        )
    return _adjusted(rows, ["field1", "field2", "n", "statistic", "df", "p-value", "adj. p-value"], mtc)
