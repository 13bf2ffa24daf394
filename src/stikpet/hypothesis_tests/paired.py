"""Paired-sample and repeated-measures tests."""

from __future__ import annotations

from typing import Any, Optional, Sequence
import numpy as np
import pandas as pd
from scipy import stats
from statsmodels.stats.contingency_tables import SquareTable, cochrans_q

from stikpet.hypothesis_tests.one_sample import (
    WILCOXON_APPR,
    WILCOXON_EQMED,
    signed_rank_test,
    trinomial_pvalue,
)
from stikpet.preprocess import apply_levels, as_series, paired, sorted_categories
from stikpet.tables import tab_cross

FRIEDMAN_DIST = ["chi", "f", "normal"]


def _differences(field1, field2, levels=None) -> np.ndarray:
    x, y = paired(field1, field2, levels)
    if len(x) == 0:
        raise ValueError("No valid pairs after removing missing values")
    return x - y


def sign_ps(field1, field2, levels: Optional[Sequence[Any]] = None, dmu: float = 0, method: str = "exact") -> pd.DataFrame:
    """Paired-sample sign test.

    Args:
        field1, field2: Paired ordinal or scale scores
        levels: Optional ordered labels for text scores
        dmu: Hypothesized difference
        method: "exact" (binomial) or "appr" (normal with continuity correction)

    Returns:
        One-row DataFrame with n pos, n neg, statistic, p-value, test
    """
    if method not in ("exact", "appr"):
        raise ValueError(f"method must be 'exact' or 'appr', got {method}")
    d = _differences(field1, field2, levels)
    pos = int(np.sum(d > dmu))
    neg = int(np.sum(d < dmu))
    n_adj = pos + neg
    if method == "exact":
        z = np.nan
        pvalue = 2 * stats.binom.cdf(min(pos, neg), n_adj, 0.5)
        test = "paired-sample sign test, exact"
    else:
        z = (max(pos, neg) - 0.5 * n_adj - 0.5) / (0.5 * np.sqrt(n_adj))
        pvalue = 2 * stats.norm.sf(abs(z))
        test = "paired-sample sign test, normal approximation"
    return pd.DataFrame(
        {"n pos": [pos], "n neg": [neg], "statistic": [z], "p-value": [min(1.0, pvalue)], "test": [test]}
    )


def trinomial_ps(field1, field2, levels: Optional[Sequence[Any]] = None, dmu: float = 0) -> pd.DataFrame:
    """Paired-sample trinomial test; keeps the pairs without a difference.

    Returns:
        One-row DataFrame with n pos, n neg, n 0, p-value, test
    """
    d = _differences(field1, field2, levels)
    pos = int(np.sum(d > dmu))
    neg = int(np.sum(d < dmu))
    ties = int(np.sum(d == dmu))
    return pd.DataFrame(
        {
            "n pos": [pos],
            "n neg": [neg],
            "n 0": [ties],
            "p-value": [trinomial_pvalue(pos, neg, ties)],
            "test": ["paired-sample trinomial test"],
        }
    )


def student_t_ps(field1, field2, dmu: float = 0) -> pd.DataFrame:
    """Paired-sample Student t-test on the differences.

    Returns:
        One-row DataFrame with statistic, df, p-value, test
    """
    d = _differences(field1, field2)
    res = stats.ttest_1samp(d, dmu)
    return pd.DataFrame(
        {
            "statistic": [float(res.statistic)],
            "df": [len(d) - 1],
            "p-value": [float(res.pvalue)],
            "test": ["paired-sample Student t"],
        }
    )


def z_ps(field1, field2, dmu: float = 0, dsigma: Optional[float] = None) -> pd.DataFrame:
    """Paired-sample z-test; dsigma defaults to the standard deviation of the differences.

    Returns:
        One-row DataFrame with statistic, p-value, test
    """
    d = _differences(field1, field2)
    sigma = np.std(d, ddof=1) if dsigma is None else dsigma
    z = (d.mean() - dmu) / (sigma / np.sqrt(len(d)))
    return pd.DataFrame({"statistic": [z], "p-value": [2 * stats.norm.sf(abs(z))], "test": ["paired-sample z"]})


def wilcoxon_ps(
    field1,
    field2,
    levels: Optional[Sequence[Any]] = None,
    dmu: float = 0,
    ties: bool = True,
    appr: str = "wilcoxon",
    eq_med: str = "wilcoxon",
    cc: bool = False,
) -> pd.DataFrame:
    """Paired-sample Wilcoxon signed rank test.

    The options are those of ``wilcoxon_os``, applied to the differences.

    Returns:
        One-row DataFrame with W, statistic, df, p-value, test
    """
    if appr not in WILCOXON_APPR:
        raise ValueError(f"appr must be one of {WILCOXON_APPR}, got {appr}")
    if eq_med not in WILCOXON_EQMED:
        raise ValueError(f"eq_med must be one of {WILCOXON_EQMED}, got {eq_med}")
    d = _differences(field1, field2, levels)
    res = signed_rank_test(d - dmu, dmu, ties, appr, eq_med, cc, "paired")
    return res.drop(columns="mu")


def _square_table(field1, field2, categories: Optional[Sequence[Any]] = None) -> np.ndarray:
    if categories is None:
        categories = sorted(set(sorted_categories(field1)) | set(sorted_categories(field2)))
    return tab_cross(field1, field2, order1=categories, order2=categories).to_numpy(dtype=float)


def mcnemar_bowker(field1, field2, categories: Optional[Sequence[Any]] = None) -> pd.DataFrame:
    """McNemar-Bowker test of symmetry (McNemar test for a 2x2 table).

    Returns:
        One-row DataFrame with statistic, df, p-value, test
    """
    res = SquareTable(_square_table(field1, field2, categories), shift_zeros=False).symmetry(method="bowker")
    return pd.DataFrame(
        {
            "statistic": [float(res.statistic)],
            "df": [int(res.df)],
            "p-value": [float(res.pvalue)],
            "test": ["McNemar-Bowker test of symmetry"],
        }
    )


def _marginal_homogeneity(ct: np.ndarray, bhapkar: bool):
    n = ct.sum()
    p = ct / n
    rs = p.sum(axis=1)
    cs = p.sum(axis=0)
    d = (rs - cs)[:-1]
    pr = p[:-1, :-1]
    s = -(pr + pr.T)
    if bhapkar:
        s -= np.outer(d, d)
    idx = np.diag_indices(len(d))
    s[idx] = rs[:-1] + cs[:-1] - 2 * np.diag(pr)
    if bhapkar:
        s[idx] -= d**2
    statistic = float(n * d @ np.linalg.solve(s, d))
    df = len(d)
    return n, statistic, df, float(stats.chi2.sf(statistic, df))


def stuart_maxwell(field1, field2, categories: Optional[Sequence[Any]] = None) -> pd.DataFrame:
    """Stuart-Maxwell test of marginal homogeneity.

    Returns:
        One-row DataFrame with n, statistic, df, p-value, test
    """
    n, statistic, df, pvalue = _marginal_homogeneity(_square_table(field1, field2, categories), bhapkar=False)
    return pd.DataFrame(
        {"n": [n], "statistic": [statistic], "df": [df], "p-value": [pvalue], "test": ["Stuart-Maxwell test"]}
    )


def bhapkar(field1, field2, categories: Optional[Sequence[Any]] = None) -> pd.DataFrame:
    """Bhapkar test of marginal homogeneity.

    Returns:
        One-row DataFrame with n, statistic, df, p-value, test
    """
    n, statistic, df, pvalue = _marginal_homogeneity(_square_table(field1, field2, categories), bhapkar=True)
    return pd.DataFrame({"n": [n], "statistic": [statistic], "df": [df], "p-value": [pvalue], "test": ["Bhapkar test"]})


def cochran_q(data: pd.DataFrame, success: Any = None) -> pd.DataFrame:
    """Cochran Q test for k paired binary variables.

    Args:
        data: DataFrame with one column per condition and one row per case
        success: Value counted as a success (default: the first value)

    Returns:
        One-row DataFrame with n, statistic, df, p-value, test
    """
    df = pd.DataFrame(data).dropna()
    if df.shape[1] < 2:
        raise ValueError(f"Cochran Q needs at least two columns, got {df.shape[1]}")
    if success is None:
        success = df.iloc[0, 0]
    x = (df == success).to_numpy(dtype=int)
    res = cochrans_q(x)
    return pd.DataFrame(
        {
            "n": [len(df)],
            "statistic": [float(res.statistic)],
            "df": [int(res.df)],
            "p-value": [float(res.pvalue)],
            "test": ["Cochran Q test"],
        }
    )


def friedman(data: pd.DataFrame, levels: Optional[Sequence[Any]] = None, ties: bool = True, dist: str = "chi") -> pd.DataFrame:
    """Friedman test for k related ordinal samples.

    Args:
        data: DataFrame with one column per condition and one row per case
        levels: Optional ordered labels for text scores
        ties: Use the tie-corrected statistic
        dist: "chi" (chi-square), "f" (Iman-Davenport F) or "normal"

    Returns:
        One-row DataFrame with n, statistic, df (df1 and df2 for "f"),
        p-value, test
    """
    if dist not in FRIEDMAN_DIST:
        raise ValueError(f"dist must be one of {FRIEDMAN_DIST}, got {dist}")
    df = pd.DataFrame(data).dropna()
    scores = np.column_stack([apply_levels(as_series(df[c].to_numpy()), levels) for c in df.columns])
    n, k = scores.shape
    ranks = np.apply_along_axis(stats.rankdata, 1, scores)
    rm = ranks.mean()
    rmj = ranks.mean(axis=0)
    if ties:
        sst = n * np.sum((rmj - rm) ** 2)
        sse = np.sum((ranks - rm) ** 2) / (n * (k - 1))
        q = sst / sse
    else:
        q = 12 / (n * k * (k + 1)) * np.sum((rmj * n) ** 2) - 3 * n * (k + 1)

    if dist == "f":
        f = (n - 1) * q / (n * (k - 1) - q)
        df1, df2 = k - 1, (k - 1) * (n - 1)
        return pd.DataFrame(
            {
                "n": [n], "statistic": [f], "df1": [df1], "df2": [df2],
                "p-value": [float(stats.f.sf(f, df1, df2))], "test": ["Friedman test, F distribution"],
            }
        )
    if dist == "normal":
        z = (q - (k - 1)) / np.sqrt(2 * (n - 1) / n * (k - 1))
        return pd.DataFrame(
            {"n": [n], "statistic": [z], "p-value": [2 * stats.norm.sf(abs(z))], "test": ["Friedman test, normal approximation"]}
        )
    return pd.DataFrame(
        {"n": [n], "statistic": [q], "df": [k - 1], "p-value": [float(stats.chi2.sf(q, k - 1))], "test": ["Friedman test"]}
    )
