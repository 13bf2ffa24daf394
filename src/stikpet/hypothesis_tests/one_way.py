"""One-way tests for k independent groups (ANOVA and its robust relatives)."""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence
import numpy as np
import pandas as pd
from scipy import stats

from stikpet.helpers.search import bisect_pvalue
from stikpet.preprocess import group_summary, select_categories

logger = logging.getLogger(__name__)

KW_METHODS = [
    "chi2",
    "kw-gamma",
    "kw-gamma-chi2",
    "kw-beta",
    "kw-beta-f",
    "wallace-I-beta",
    "wallace-II-beta",
    "wallace-III-beta",
    "wallace-I-f",
    "wallace-II-f",
    "wallace-III-f",
    "iman",
]


def _groups(nom_field, scale_field, categories):
    summary = group_summary(nom_field, scale_field, categories)
    if len(summary) < 2:
        raise ValueError(f"At least two groups are needed, got {len(summary)}")
    n = summary["n"].to_numpy(dtype=float)
    return n, summary["mean"].to_numpy(dtype=float), summary["var"].to_numpy(dtype=float)


def _weighted(n, m, v):
    """Cochran weights n/var, their proportions and the weighted mean."""
    w = n / v
    h = w / w.sum()
    return w, h, np.sum(h * m)


def fisher_owa(nom_field, scale_field, categories: Optional[Sequence[Any]] = None) -> pd.DataFrame:
    """Classic one-way ANOVA.

    Returns:
        ANOVA table with rows between, within and total and columns
        variance, SS, df, MS, F, p-value
    """
    df = select_categories(nom_field, scale_field, categories)
    n_i, m, _ = _groups(nom_field, scale_field, categories)
    n = len(df)
    k = len(n_i)
    ss_b = np.sum(n_i * (m - df["score"].mean()) ** 2)
    ss_t = df["score"].var() * (n - 1)
    ss_w = ss_t - ss_b
    df1, df2 = k - 1, n - k
    msb, msw = ss_b / df1, ss_w / df2
    f = msb / msw
    return pd.DataFrame(
        {
            "variance": ["between", "within", "total"],
            "SS": [ss_b, ss_w, ss_t],
            "df": [df1, df2, n - 1],
            "MS": [msb, msw, np.nan],
            "F": [f, np.nan, np.nan],
            "p-value": [float(stats.f.sf(f, df1, df2)), np.nan, np.nan],
        }
    )


def welch_owa(nom_field, scale_field, categories: Optional[Sequence[Any]] = None) -> pd.DataFrame:
    """Welch one-way ANOVA for unequal variances.

    Returns:
        One-row DataFrame with n, statistic, df1, df2, p-value, test
    """
    n, m, v = _groups(nom_field, scale_field, categories)
    k = len(n)
    w, h, yw = _weighted(n, m, v)
    lamb = np.sum((1 - h) ** 2 / (n - 1))
    f = (np.sum(w * (m - yw) ** 2) / (k - 1)) / (1 + 2 * (k - 2) / (k**2 - 1) * lamb)
    df1, df2 = k - 1, (k**2 - 1) / (3 * lamb)
    return pd.DataFrame(
        {
            "n": [n.sum()], "statistic": [f], "df1": [df1], "df2": [df2],
            "p-value": [float(stats.f.sf(f, df1, df2))], "test": ["Welch one-way ANOVA"],
        }
    )


def cochran_owa(nom_field, scale_field, categories: Optional[Sequence[Any]] = None) -> pd.DataFrame:
    """Cochran one-way test: weighted sum of squares against a chi-square.

    Returns:
        One-row DataFrame with n, statistic, df, p-value, test
    """
    n, m, v = _groups(nom_field, scale_field, categories)
    w, _, yw = _weighted(n, m, v)
    chi2 = np.sum(w * (m - yw) ** 2)
    df = len(n) - 1
    return pd.DataFrame(
        {"n": [n.sum()], "statistic": [chi2], "df": [df], "p-value": [float(stats.chi2.sf(chi2, df))], "test": ["Cochran one-way test"]}
    )


def _james_second_order_critical(c: float, k: int, h: np.ndarray, v: np.ndarray) -> float:
    lamb = np.sum((1 - h) ** 2 / v)
    r = {(s, t): np.sum(h**t / v**s) for s in (1, 2) for t in range(4)}
    r10, r11, r12 = r[(1, 0)], r[(1, 1)], r[(1, 2)]
    r20, r21, r22, r23 = r[(2, 0)], r[(2, 1)], r[(2, 2)], r[(2, 3)]
    c2 = c / (k - 1)
    c4 = c2 * c / (k + 1)
    c6 = c4 * c / (k + 3)
    c8 = c6 * c / (k + 5)
    return (
        c
        + 0.5 * (3 * c4 + c2) * lamb
        + 1 / 16 * (3 * c4 + c2) ** 2 * (1 - (k - 3) / c) * lamb**2
        + 0.5 * (3 * c4 + c2) * (
            (8 * r23 - 10 * r22 + 4 * r21 - 6 * r12**2 + 8 * r12 * r11 - 4 * r11**2)
            + (2 * r23 - 4 * r22 + 2 * r21 - 2 * r12**2 + 4 * r12 * r11 - 2 * r11**2) * (c2 - 1)
            + 0.25 * (-r12**2 + 4 * r12 * r11 - 2 * r12 * r10 - 4 * r11**2 + 4 * r11 * r10 - r10**2) * (3 * c4 - 2 * c2 - 1)
        )
        + (r23 - 3 * r22 + 3 * r21 - r20) * (5 * c6 + 2 * c4 + c2)
        + 3 / 16 * (r12**2 - 4 * r23 + 6 * r22 - 4 * r21 + r20) * (35 * c8 + 15 * c6 + 9 * c4 + 5 * c2)
        + 1 / 16 * (-2 * r22**2 + 4 * r21 - r20 + 2 * r12 * r10 - 4 * r11 * r10 + r10**2) * (9 * c8 - 3 * c6 - 5 * c4 - c2)
        + 0.25 * (-r22 + r11**2) * (27 * c8 + 3 * c6 + c4 + c2)
        + 0.25 * (r23 - r12 * r11) * (45 * c8 + 9 * c6 + 7 * c4 + 3 * c2)
    )


def james_owa(
    nom_field,
    scale_field,
    categories: Optional[Sequence[Any]] = None,
    order: int = 2,
    ddof: int = 2,
) -> pd.DataFrame:
    """James test for k means with unequal variances.

    The statistic is Cochran's weighted sum of squares. Its p-value comes
    from a chi-square (order 0), or from searching the p-value whose
    first or second order James critical value equals the statistic.

    Args:
        nom_field: Group labels
        scale_field: Scores
        categories: Optional groups to use
        order: 0, 1 or 2
        ddof: Offset for the second order degrees of freedom n - ddof

    Returns:
        One-row DataFrame with n, statistic, J critical (critical value at
        alpha 0.05, orders 1 and 2), df, p-value, test
    """
    if order not in (0, 1, 2):
        raise ValueError(f"order must be 0, 1 or 2, got {order}")
    n, m, v = _groups(nom_field, scale_field, categories)
    k = len(n)
    df = k - 1
    w, h, yw = _weighted(n, m, v)
    j = float(np.sum(w * (m - yw) ** 2))

    if order == 0:
        return pd.DataFrame(
            {
                "n": [n.sum()], "statistic": [j], "J critical": [np.nan], "df": [df],
                "p-value": [float(stats.chi2.sf(j, df))], "test": ["James large-sample approximation"],
            }
        )

    if order == 1:
        lamb = np.sum((1 - h) ** 2 / (n - 1))

        def critical(p: float) -> float:
            c = stats.chi2.isf(p, df)
            return c * (1 + (3 * c + k + 1) / (2 * (k**2 - 1)) * lamb)

        test = "James first-order"
    else:
        dof = n - ddof

        def critical(p: float) -> float:
            return _james_second_order_critical(stats.chi2.isf(p, df), k, h, dof)

        test = "James second order"

    return pd.DataFrame(
        {
            "n": [n.sum()], "statistic": [j], "J critical": [critical(0.05)], "df": [df],
            "p-value": [bisect_pvalue(critical, j)], "test": [test],
        }
    )


def alexander_govern_owa(nom_field, scale_field, categories: Optional[Sequence[Any]] = None) -> pd.DataFrame:
    """Alexander-Govern test with the normalizing z transformation.

    Returns:
        One-row DataFrame with n, statistic, df, p-value, test
    """
    n, m, v = _groups(nom_field, scale_field, categories)
    se = np.sqrt(v / n)
    w = (1 / se**2) / np.sum(1 / se**2)
    t = (m - np.sum(w * m)) / se
    nu = n - 1
    a = nu - 0.5
    b = 48 * a**2
    c = np.sqrt(a * np.log(1 + t**2 / nu))
    z = c + (c**3 + 3 * c) / b - (4 * c**7 + 33 * c**5 + 240 * c**3 + 855 * c) / (10 * b**2 + 8 * b * c**4 + 1000 * b)
    a_stat = float(np.sum(z**2))
    df = len(n) - 1
    return pd.DataFrame(
        {
            "n": [n.sum()], "statistic": [a_stat], "df": [df],
            "p-value": [float(stats.chi2.sf(a_stat, df))], "test": ["Alexander-Govern test"],
        }
    )


def box_owa(nom_field, scale_field, categories: Optional[Sequence[Any]] = None) -> pd.DataFrame:
    """Box correction of the one-way ANOVA F for unequal variances.

    Returns:
        One-row DataFrame with n, k, statistic, df1, df2, p-value, test
    """
    df = select_categories(nom_field, scale_field, categories)
    n_i, m, v = _groups(nom_field, scale_field, categories)
    k = len(n_i)
    n = n_i.sum()
    b = (n - k) / (n * (k - 1)) * np.sum((n - n_i) * v) / np.sum((n_i - 1) * v)
    f = (n - k) / (k - 1) * np.sum(n_i * (m - df["score"].mean()) ** 2) / np.sum((n_i - 1) * v)
    f_adj = f / b
    df1 = np.sum((n - n_i) * v) ** 2 / (np.sum(n_i * v) ** 2 + n * np.sum((n - 2 * n_i) * v**2))
    df2 = np.sum((n_i - 1) * v) ** 2 / np.sum((n_i - 1) * v**2)
    return pd.DataFrame(
        {
            "n": [n], "k": [k], "statistic": [f_adj], "df1": [df1], "df2": [df2],
            "p-value": [float(stats.f.sf(f_adj, df1, df2))], "test": ["Box corrected F test"],
        }
    )


def _brown_forsythe_f(n_i, m, v):
    n = n_i.sum()
    xbar = np.sum(n_i * m) / n
    return np.sum(n_i * (m - xbar) ** 2) / np.sum((1 - n_i / n) * v)


def brown_forsythe_owa(nom_field, scale_field, categories: Optional[Sequence[Any]] = None) -> pd.DataFrame:
    """Brown-Forsythe test for means.

    Returns:
        One-row DataFrame with n, k, statistic, df1, df2, p-value, test
    """
    n_i, m, v = _groups(nom_field, scale_field, categories)
    n = n_i.sum()
    k = len(n_i)
    f = _brown_forsythe_f(n_i, m, v)
    c = (1 - n_i / n) * v
    df1 = k - 1
    df2 = 1 / np.sum((c / c.sum()) ** 2 / (n_i - 1))
    return pd.DataFrame(
        {
            "n": [n], "k": [k], "statistic": [f], "df1": [df1], "df2": [df2],
            "p-value": [float(stats.f.sf(f, df1, df2))], "test": ["Brown-Forsythe test of means"],
        }
    )


def mehrotra_owa(nom_field, scale_field, categories: Optional[Sequence[Any]] = None) -> pd.DataFrame:
    """Mehrotra modification of the Brown-Forsythe test (adjusted df1).

    Returns:
        One-row DataFrame with n, k, statistic, df1, df2, p-value, test
    """
    n_i, m, v = _groups(nom_field, scale_field, categories)
    n = n_i.sum()
    k = len(n_i)
    f = _brown_forsythe_f(n_i, m, v)
    nv = np.sum(n_i * v) / n
    df1 = (v.sum() - nv) ** 2 / (np.sum(v**2) + nv**2 - 2 * np.sum(n_i * v**2) / n)
    df2 = np.sum((1 - n_i / n) * v) ** 2 / np.sum((1 - n_i / n) ** 2 * v**2 / (n_i - 1))
    return pd.DataFrame(
        {
            "n": [n], "k": [k], "statistic": [f], "df1": [df1], "df2": [df2],
            "p-value": [float(stats.f.sf(f, df1, df2))], "test": ["Mehrotra modified Brown-Forsythe test"],
        }
    )


def hartung_agac_makabi_owa(
    nom_field, scale_field, categories: Optional[Sequence[Any]] = None, version: int = 1
) -> pd.DataFrame:
    """Hartung-Agac-Makabi adjusted Welch test.

    Args:
        nom_field: Group labels
        scale_field: Scores
        categories: Optional groups to use
        version: 1 for phi = (n + 2)/(n + 1), 2 for phi = (n - 1)/(n - 3)

    Returns:
        One-row DataFrame with n, k, statistic, df1, df2, p-value, test
    """
    if version not in (1, 2):
        raise ValueError(f"version must be 1 or 2, got {version}")
    n_i, m, v = _groups(nom_field, scale_field, categories)
    k = len(n_i)
    phi = (n_i + 2) / (n_i + 1) if version == 1 else (n_i - 1) / (n_i - 3)
    w = n_i / (phi * v)
    h = w / w.sum()
    lamb = np.sum((1 - h) ** 2 / (n_i - 1))
    stat = np.sum(w * (m - np.sum(h * m)) ** 2) / ((k - 1) + 2 * (k - 2) / (k + 1) * lamb)
    df1, df2 = k - 1, (k**2 - 1) / (3 * lamb)
    return pd.DataFrame(
        {
            "n": [n_i.sum()], "k": [k], "statistic": [stat], "df1": [df1], "df2": [df2],
            "p-value": [float(stats.f.sf(stat, df1, df2))], "test": ["Hartung-Agac-Makabi adjusted Welch test"],
        }
    )


def ozdemir_kurt_owa(nom_field, scale_field, categories: Optional[Sequence[Any]] = None) -> pd.DataFrame:
    """Özdemir-Kurt B2 test.

    B2 depends on the critical z of the p-value, so the p-value is found by
    bisection: the p where B2 equals the chi-square critical value.

    Returns:
        One-row DataFrame with n, statistic, df, p-value, test
    """
    n, m, v = _groups(nom_field, scale_field, categories)
    se = np.sqrt(v / n)
    w = (1 / se**2) / np.sum(1 / se**2)
    t = (m - np.sum(w * m)) / se
    nu = n - 1
    df = len(n) - 1

    def b2(p: float) -> float:
        z = stats.norm.isf(p / 2)
        c = (4 * nu**2 + 5 * (2 * z**2 + 3) / 24) / (4 * nu**2 + nu + (4 * z**2 + 9) / 12) * np.sqrt(nu)
        return float(np.sum((c * np.sqrt(np.log(1 + t**2 / nu))) ** 2))

    pvalue = bisect_pvalue(lambda p: stats.chi2.isf(p, df) - b2(p), 0.0)
    return pd.DataFrame(
        {"n": [n.sum()], "statistic": [b2(pvalue)], "df": [df], "p-value": [pvalue], "test": ["Özdemir-Kurt B2 test"]}
    )


def wilcox_owa(nom_field, scale_field, categories: Optional[Sequence[Any]] = None) -> pd.DataFrame:
    """Wilcox H test with the Hochberg two-stage weights.

    Returns:
        One-row DataFrame with n, statistic, df, p-value, test
    """
    df = select_categories(nom_field, scale_field, categories)
    agg = df.groupby("group")["score"].agg(["count", "var", "max", "sum"])
    if categories is not None:
        agg = agg.reindex([c for c in categories if c in agg.index])
    n = agg["count"].to_numpy(dtype=float)
    v = agg["var"].to_numpy(dtype=float)
    k = len(n)
    d = np.max(v / n)
    b = (1 + np.sqrt((n - 1) * (n * d - v) / v)) / n
    # the largest score weighs b, the other n - 1 share 1 - b
    wj = b * agg["max"].to_numpy() + (1 - b) / (n - 1) * (agg["sum"].to_numpy() - agg["max"].to_numpy())
    h = np.sum((wj - wj.mean()) ** 2) / d
    return pd.DataFrame(
        {"n": [n.sum()], "statistic": [h], "df": [k - 1], "p-value": [float(stats.chi2.sf(h, k - 1))], "test": ["Wilcox H test"]}
    )


def kruskal_wallis(
    cat_field,
    ord_field,
    categories: Optional[Sequence[Any]] = None,
    levels: Optional[Sequence[Any]] = None,
    ties: bool = True,
    method: str = "chi2",
) -> pd.DataFrame:
    """Kruskal-Wallis H test.

    Args:
        cat_field: Group labels
        ord_field: Ordinal or scale scores
        categories: Optional groups to use
        levels: Optional ordered labels for the scores
        ties: Apply the ties correction to H
        method: Distribution used, one of ``KW_METHODS``: chi-square,
            Kruskal-Wallis gamma or beta approximations, Wallace beta or F
            approximations, or Iman's F

    Returns:
        One-row DataFrame with n, H, statistic, the distribution
        parameters (df, df1/df2 or alpha/beta), p-value and test
    """
    if method not in KW_METHODS:
        raise ValueError(f"method must be one of {KW_METHODS}, got {method}")
    df = select_categories(cat_field, ord_field, categories, levels)
    df["r"] = stats.rankdata(df["score"])
    n = len(df)
    grouped = df.groupby("group")["r"]
    rc = grouped.sum().to_numpy()
    nc = grouped.count().to_numpy(dtype=float)
    k = len(nc)
    h = 12 / (n * (n + 1)) * np.sum(rc**2 / nc) - 3 * (n + 1)
    if ties:
        _, t = np.unique(df["r"], return_counts=True)
        h = h / (1 - np.sum(t**3 - t) / (n**3 - n))

    out = {"n": [n], "H": [h]}
    if method == "chi2":
        out.update({"statistic": [h], "df": [k - 1], "p-value": [float(stats.chi2.sf(h, k - 1))]})
        out["test"] = ["Kruskal-Wallis H test"]
        return pd.DataFrame(out)

    e = k - 1
    var = 2 * (k - 1) - 2 * (3 * k**2 - 6 * k + n * (2 * k**2 - 6 * k + 1)) / (5 * n * (n + 1)) - 6 / 5 * np.sum(1 / nc)
    mx = (n**3 - np.sum(nc**3)) / (n * (n + 1))

    if method == "kw-gamma":
        alpha, beta = e**2 / var, var / e
        out.update({"statistic": [h], "alpha": [alpha], "beta": [beta], "p-value": [float(stats.gamma.sf(h, alpha, scale=beta))]})
    elif method == "kw-gamma-chi2":
        chi = 2 * h * e / var
        df_a = 2 * e**2 / var
        out.update({"statistic": [chi], "df": [df_a], "p-value": [float(stats.chi2.sf(chi, df_a))]})
    elif method in ("kw-beta", "kw-beta-f"):
        f1 = e * ((e * (mx - e) - var) / (0.5 * mx * var))
        f2 = (mx - e) / e * f1
        if method == "kw-beta":
            b = h / mx
            out.update({"statistic": [b], "alpha": [0.5 * f1], "beta": [0.5 * f2], "p-value": [float(stats.beta.sf(b, 0.5 * f1, 0.5 * f2))]})
        else:
            f = h * (mx - e) / (e * (mx - h))
            out.update({"statistic": [f], "df1": [f1], "df2": [f2], "p-value": [float(stats.f.sf(f, f1, f2))]})
    else:
        if method.startswith("wallace-III") or method == "iman":
            d = 1.0
        elif method.startswith("wallace-II"):
            d = 1 - 6 / 5 * (n + 1) / (n - 1) / (n + 1.2)
        else:
            d = ((n - k) * (k - 1) - var) / (0.5 * (n - 1) * var)
        df1, df2 = (k - 1) * d, (n - k) * d
        if method.endswith("beta"):
            b = h / (n - 1)
            out.update({"statistic": [b], "alpha": [0.5 * df1], "beta": [0.5 * df2], "p-value": [float(stats.beta.sf(b, 0.5 * df1, 0.5 * df2))]})
        else:
            f = (n - k) * h / ((k - 1) * (n - 1 - h))
            if method == "iman":
                avg = grouped.transform("mean")
                vi = ((df["r"] - avg) ** 2).groupby(df["group"]).sum().to_numpy() / (nc - 1)
                df1 = k - 1
                df2 = np.sum((nc - 1) * vi) ** 2 / np.sum(((nc - 1) * vi) ** 2 / (nc - 1))
            out.update({"statistic": [f], "df1": [df1], "df2": [df2], "p-value": [float(stats.f.sf(f, df1, df2))]})

    out["test"] = [f"Kruskal-Wallis H test, {method} approximation"]
    return pd.DataFrame(out)
