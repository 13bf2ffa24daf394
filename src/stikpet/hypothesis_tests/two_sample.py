"""Tests comparing two independent samples."""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence, Union
import numpy as np
import pandas as pd
from scipy import stats

from stikpet.config import get_config
from stikpet.distributions.mann_whitney import mann_whitney_cdf
from stikpet.hypothesis_tests.independence import (
    fisher,
    freeman_tukey_ind,
    g_ind,
    mod_log_likelihood_ind,
    neyman_ind,
    pearson_ind,
    powerdivergence_ind,
)
from stikpet.preprocess import select_categories, two_groups

logger = logging.getLogger(__name__)

MOOD_TESTS = ["pearson", "fisher", "freeman-tukey", "g", "mod-log", "neyman", "power"]


def _mean_result(cat1, cat2, n1, n2, m1, m2, dmu, statistic, df, pvalue, test, label="mean") -> pd.DataFrame:
    return pd.DataFrame(
        {
            f"n {cat1}": [n1],
            f"n {cat2}": [n2],
            f"{label} {cat1}": [m1],
            f"{label} {cat2}": [m2],
            "diff.": [m1 - m2],
            "hyp. diff.": [dmu],
            "statistic": [statistic],
            "df": [df],
            "p-value": [pvalue],
            "test": [test],
        }
    )


def student_t_is(cat_field, scale_field, categories: Optional[Sequence[Any]] = None, dmu: float = 0) -> pd.DataFrame:
    """Student t-test for two independent samples (pooled variance).

    Args:
        cat_field: Group labels
        scale_field: Scores
        categories: Optional two categories to compare (default: first two sorted)
        dmu: Hypothesized difference of the means

    Returns:
        One-row DataFrame with n and mean per group, diff., hyp. diff.,
        statistic, df, p-value, test
    """
    x, y, cat1, cat2 = two_groups(cat_field, scale_field, categories)
    n1, n2 = len(x), len(y)
    sp = np.sqrt(((n1 - 1) * np.var(x, ddof=1) + (n2 - 1) * np.var(y, ddof=1)) / (n1 + n2 - 2))
    t = (x.mean() - y.mean() - dmu) / (sp * np.sqrt(1 / n1 + 1 / n2))
    df = n1 + n2 - 2
    return _mean_result(
        cat1, cat2, n1, n2, x.mean(), y.mean(), dmu, t, df, 2 * stats.t.sf(abs(t), df),
        "Student independent samples t-test",
    )


def welch_t_is(cat_field, scale_field, categories: Optional[Sequence[Any]] = None, dmu: float = 0) -> pd.DataFrame:
    """Welch t-test for two independent samples (unequal variances).

    Returns:
        One-row DataFrame with the columns of ``student_t_is``
    """
    x, y, cat1, cat2 = two_groups(cat_field, scale_field, categories)
    n1, n2 = len(x), len(y)
    v1, v2 = np.var(x, ddof=1), np.var(y, ddof=1)
    sse = v1 / n1 + v2 / n2
    t = (x.mean() - y.mean() - dmu) / np.sqrt(sse)
    df = sse**2 / (v1**2 / (n1**2 * (n1 - 1)) + v2**2 / (n2**2 * (n2 - 1)))
    return _mean_result(
        cat1, cat2, n1, n2, x.mean(), y.mean(), dmu, t, df, 2 * stats.t.sf(abs(t), df),
        "Welch independent samples t-test",
    )


def _trim(x: np.ndarray, trim: float):
    """Trimmed mean, winsorized variance and trimmed size with floor(n * trim) cut per side."""
    n = len(x)
    g = int(np.floor(n * trim))
    xs = np.sort(x)
    mean_t = xs[g:n - g].mean()
    var_w = np.var(np.clip(x, xs[g], xs[n - g - 1]), ddof=1)
    return mean_t, var_w, n - 2 * g


def trimmed_mean_is(
    cat_field,
    scale_field,
    categories: Optional[Sequence[Any]] = None,
    dmu: float = 0,
    trim: float = 0.1,
    se: str = "yuen",
) -> pd.DataFrame:
    """Trimmed mean test for two independent samples.

    Args:
        cat_field: Group labels
        scale_field: Scores
        categories: Optional two categories to compare
        dmu: Hypothesized difference of the trimmed means
        trim: Proportion trimmed from each side of each group
        se: "yuen" (Yuen-Welch, unequal variances) or "wilcox" (pooled)

    Returns:
        One-row DataFrame with n and trim mean per group, diff., hyp. diff.,
        statistic, df, p-value, test
    """
    if se not in ("yuen", "wilcox"):
        raise ValueError(f"se must be 'yuen' or 'wilcox', got {se}")
    x, y, cat1, cat2 = two_groups(cat_field, scale_field, categories)
    n1, n2 = len(x), len(y)
    m1, var1, h1 = _trim(x, trim)
    m2, var2, h2 = _trim(y, trim)
    if se == "yuen":
        d1 = var1 * (n1 - 1) / (h1 * (h1 - 1))
        d2 = var2 * (n2 - 1) / (h2 * (h2 - 1))
        se_value = np.sqrt(d1 + d2)
        c = d1 / (d1 + d2)
        df = 1 / (c**2 / (h1 - 1) + (1 - c) ** 2 / (h2 - 1))
        test = "Yuen-Welch independent samples t-test"
    else:
        s2 = ((n1 - 1) * var1 + (n2 - 1) * var2) / ((h1 - 1) + (h2 - 1))
        se_value = np.sqrt(s2 * (1 / h1 + 1 / h2))
        df = h1 + h2 - 2
        test = "Trimmed Mean independent samples t-test"
    t = (m1 - m2 - dmu) / se_value
    return _mean_result(cat1, cat2, n1, n2, m1, m2, dmu, t, df, 2 * stats.t.sf(abs(t), df), test, label="trim mean")


def z_is(
    cat_field,
    scale_field,
    categories: Optional[Sequence[Any]] = None,
    dmu: float = 0,
    sigma1: Optional[float] = None,
    sigma2: Optional[float] = None,
) -> pd.DataFrame:
    """Z-test for two independent samples; sigmas default to the sample values.

    Returns:
        One-row DataFrame with statistic, p-value, test
    """
    x, y, _, _ = two_groups(cat_field, scale_field, categories)
    v1 = np.var(x, ddof=1) if sigma1 is None else sigma1**2
    v2 = np.var(y, ddof=1) if sigma2 is None else sigma2**2
    z = (x.mean() - y.mean() - dmu) / np.sqrt(v1 / len(x) + v2 / len(y))
    return pd.DataFrame(
        {"statistic": [z], "p-value": [2 * stats.norm.sf(abs(z))], "test": ["independent samples z-test"]}
    )


def mann_whitney(
    cat_field,
    ord_field,
    categories: Optional[Sequence[Any]] = None,
    levels: Optional[Sequence[Any]] = None,
    method: str = "exact",
    cc: bool = True,
) -> pd.DataFrame:
    """Mann-Whitney U test.

    Args:
        cat_field: Group labels
        ord_field: Ordinal or scale scores
        categories: Optional two categories to compare
        levels: Optional ordered labels for the scores
        method: "exact" or "approx". The exact distribution assumes no
            ties; with ties the normal approximation is used instead.
        cc: Continuity correction for the normal approximation

    Returns:
        One-row DataFrame with U, statistic, p-value, test
    """
    if method not in ("exact", "approx"):
        raise ValueError(f"method must be 'exact' or 'approx', got {method}")
    x, y, _, _ = two_groups(cat_field, ord_field, categories, levels)
    n1, n2 = len(x), len(y)
    n = n1 + n2
    ranks = stats.rankdata(np.concatenate([x, y]))
    r1 = ranks[:n1].sum()
    u1 = n1 * n2 + n1 * (n1 + 1) / 2 - r1
    u = min(u1, n1 * n2 - u1)

    if method == "exact" and len(np.unique(ranks)) < n:
        logger.warning("Ties present, cannot use exact method; using the normal approximation")
        method = "approx"

    if method == "exact":
        pvalue = min(1.0, 2 * mann_whitney_cdf(int(u), n1, n2))
        return pd.DataFrame({"U": [u], "statistic": [np.nan], "p-value": [pvalue], "test": ["Mann-Whitney U exact"]})

    _, counts = np.unique(ranks, return_counts=True)
    t = np.sum(counts**3 - counts) / 12
    se = np.sqrt(n1 * n2 / (n * (n - 1)) * ((n**3 - n) / 12 - t))
    z = (u - n1 * n2 / 2) / se
    z_abs = abs(z)
    test = "Mann-Whitney U normal approximation"
    if cc:
        z_abs -= 0.5 / se
        test += ", with continuity correction"
    return pd.DataFrame({"U": [u], "statistic": [z], "p-value": [2 * stats.norm.sf(z_abs)], "test": [test]})


def _bm_statistic(x: np.ndarray, y: np.ndarray):
    """Brunner-Munzel W, its variance estimate and the two component variances."""
    n1, n2 = len(x), len(y)
    n = n1 + n2
    ranks = stats.rankdata(np.concatenate([x, y]))
    rp1, rp2 = ranks[:n1], ranks[n1:]
    var1 = np.var(rp1 - stats.rankdata(x), ddof=1) / (n - n1) ** 2
    var2 = np.var(rp2 - stats.rankdata(y), ddof=1) / (n - n2) ** 2
    var = n * (var1 / n1 + var2 / n2)
    w = (rp2.mean() - rp1.mean()) / np.sqrt(n * var)
    return w, var, var1, var2


def brunner_munzel(
    cat_field,
    ord_field,
    categories: Optional[Sequence[Any]] = None,
    levels: Optional[Sequence[Any]] = None,
    distribution: str = "t",
) -> pd.DataFrame:
    """Brunner-Munzel test.

    Args:
        cat_field: Group labels
        ord_field: Ordinal or scale scores
        categories: Optional two categories to compare
        levels: Optional ordered labels for the scores
        distribution: "t" (recommended from 10 per group) or "z"
            (recommended from 50 per group)

    Returns:
        One-row DataFrame with var. est., min n, statistic, df, p-value,
        categories, test
    """
    if distribution not in ("t", "z"):
        raise ValueError(f"distribution must be 't' or 'z', got {distribution}")
    x, y, cat1, cat2 = two_groups(cat_field, ord_field, categories, levels)
    n1, n2 = len(x), len(y)
    n = n1 + n2
    min_n = min(n1, n2)
    w, var, var1, var2 = _bm_statistic(x, y)
    if distribution == "t":
        df = var**2 / (n**2 * (var1**2 / ((n1 - 1) * n1**2) + var2**2 / ((n2 - 1) * n2**2)))
        pvalue = 2 * stats.t.sf(abs(w), df)
        test = "Brunner-Munzel with t distribution"
        recommended = min_n >= 10
    else:
        df = np.nan
        pvalue = 2 * stats.norm.sf(abs(w))
        test = "Brunner-Munzel with standard normal distribution"
        recommended = min_n >= 50
    if not recommended:
        logger.info(f"Brunner-Munzel with {distribution} distribution is not recommended for a group of {min_n}")
        test += " (not recommended)"
    return pd.DataFrame(
        {
            "var. est.": [var],
            "min n": [min_n],
            "statistic": [w],
            "df": [df],
            "p-value": [pvalue],
            "categories": [f"{cat1}, {cat2}"],
            "test": [test],
        }
    )


def brunner_munzel_perm(
    cat_field,
    ord_field,
    categories: Optional[Sequence[Any]] = None,
    levels: Optional[Sequence[Any]] = None,
    n_iter: Optional[int] = None,
    seed: Optional[int] = None,
) -> pd.DataFrame:
    """Permutation version of the Brunner-Munzel test.

    Args:
        cat_field: Group labels
        ord_field: Ordinal or scale scores
        categories: Optional two categories to compare
        levels: Optional ordered labels for the scores
        n_iter: Number of random permutations (default: config n_iter)
        seed: Random seed (default: config seed)

    Returns:
        One-row DataFrame with iters, observed, n above, n below, p-value
    """
    cfg = get_config()
    n_iter = cfg.n_iter if n_iter is None else n_iter
    rng = np.random.default_rng(cfg.seed if seed is None else seed)
    x, y, _, _ = two_groups(cat_field, ord_field, categories, levels)
    n1 = len(x)
    pooled = np.concatenate([x, y])
    observed = _bm_statistic(x, y)[0]
    perm = np.empty(n_iter)
    for i in range(n_iter):
        shuffled = rng.permutation(pooled)
        perm[i] = _bm_statistic(shuffled[:n1], shuffled[n1:])[0]
    n_above = int(np.sum(perm > observed))
    n_below = int(np.sum(perm < observed))
    return pd.DataFrame(
        {
            "iters": [n_iter],
            "observed": [observed],
            "n above": [n_above],
            "n below": [n_below],
            "p-value": [min(1.0, 2 * min(n_above, n_below) / n_iter)],
        }
    )


def c_square(
    cat_field,
    ord_field,
    categories: Optional[Sequence[Any]] = None,
    levels: Optional[Sequence[Any]] = None,
) -> pd.DataFrame:
    """Schüürhuis-Tent-Van Zwet C-square test for stochastic equality.

    Returns:
        One-row DataFrame with var. est., statistic, df, p-value, categories
    """
    x, y, cat1, cat2 = two_groups(cat_field, ord_field, categories, levels)
    n1, n2 = len(x), len(y)
    a = np.concatenate([x, y])
    rik = stats.rankdata(a)
    rik_min = stats.rankdata(a, method="min")
    rik_max = stats.rankdata(a, method="max")
    r_ast1 = rik[:n1] - stats.rankdata(x)
    r_ast2 = rik[n1:] - stats.rankdata(y)

    theta = (rik[n1:].mean() - (n2 + 1) / 2) / n1
    tau = (
        rik_max[n1:].mean() - rik_min[n1:].mean()
        - (stats.rankdata(y, method="max").mean() - stats.rankdata(y, method="min").mean())
    ) / n1
    ss = np.sum((r_ast1 - r_ast1.mean()) ** 2) + np.sum((r_ast2 - r_ast2.mean()) ** 2)
    var = (ss - n1 * n2 * (theta * (1 - theta) - tau / 4)) / (n1 * (n1 - 1) * n2 * (n2 - 1))
    c2 = 4 * theta * (1 - theta) * (theta - 0.5) ** 2 / var
    return pd.DataFrame(
        {
            "var. est.": [var],
            "statistic": [c2],
            "df": [1],
            "p-value": [float(stats.chi2.sf(c2, 1))],
            "categories": [f"{cat1}, {cat2}"],
        }
    )


def cliff_delta_is(
    cat_field,
    ord_field,
    categories: Optional[Sequence[Any]] = None,
    levels: Optional[Sequence[Any]] = None,
    var_ver: str = "unbiased",
    test_ver: str = "cliff",
    round_df: bool = False,
) -> pd.DataFrame:
    """Cliff delta test.

    Args:
        cat_field: Group labels
        ord_field: Ordinal or scale scores
        categories: Optional two categories to compare
        levels: Optional ordered labels for the scores
        var_ver: Variance estimate, "unbiased" or "consistent"
        test_ver: "cliff" (standard normal), "fligner-policello"/"fp" or
            "brunner-munzel"/"bm" (t distribution with those df)
        round_df: Round the degrees of freedom

    Returns:
        One-row DataFrame with var, statistic, df, p-value, categories,
        var used, test
    """
    if var_ver not in ("unbiased", "consistent"):
        raise ValueError(f"var_ver must be 'unbiased' or 'consistent', got {var_ver}")
    if test_ver not in ("cliff", "fligner-policello", "fp", "brunner-munzel", "bm"):
        raise ValueError(f"test_ver must be 'cliff', 'fligner-policello' or 'brunner-munzel', got {test_ver}")
    x, y, cat1, cat2 = two_groups(cat_field, ord_field, categories, levels)
    n1, n2 = len(x), len(y)
    s = np.sign(np.subtract.outer(x, y))
    di1 = s.mean(axis=1)
    dj2 = s.mean(axis=0)
    d = di1.mean()
    ssd1 = np.sum((di1 - d) ** 2)
    ssd2 = np.sum((dj2 - d) ** 2)
    ssd = np.sum((s - d) ** 2)
    if var_ver == "unbiased":
        var = (n2**2 * ssd1 + n1**2 * ssd2 - ssd) / (n1 * n2 * (n1 - 1) * (n2 - 1))
        var = max(var, (1 - d**2) / (n1 * n2 - 1))
    else:
        var = ((n2 - 1) * ssd1 / (n1 - 1) + (n1 - 1) * ssd2 / (n2 - 1) + ssd / ((n1 - 1) * (n2 - 1))) / (n1 * n2)
    c = d / np.sqrt(var)

    if test_ver == "cliff":
        df = np.nan
        pvalue = 2 * stats.norm.sf(abs(c))
        test = "Cliff Delta test with standard normal distribution"
    else:
        r_ast1 = np.sum(s == 1, axis=1) + 0.5 * np.sum(s == 0, axis=1)
        r_ast2 = np.sum(s == -1, axis=0) + 0.5 * np.sum(s == 0, axis=0)
        v1, v2 = np.var(r_ast1, ddof=1), np.var(r_ast2, ddof=1)
        if test_ver in ("fligner-policello", "fp"):
            a, b = v1 / n1, v2 / n2
            test = "Cliff Delta test with t distribution, and Fligner-Policello df"
        else:
            a, b = v1 / (n1 * n2**2), v2 / (n2 * n1**2)
            test = "Cliff Delta test with t distribution, and Brunner-Munzel df"
        df = (a + b) ** 2 / (a**2 / (n1 - 1) + b**2 / (n2 - 1))
        if round_df:
            df = round(df)
        pvalue = 2 * stats.t.sf(abs(c), df)
    return pd.DataFrame(
        {
            "var": [var],
            "statistic": [c],
            "df": [df],
            "p-value": [pvalue],
            "categories": [f"{cat1}, {cat2}"],
            "var used": [var_ver],
            "test": [test],
        }
    )


def fligner_policello(
    cat_field,
    ord_field,
    categories: Optional[Sequence[Any]] = None,
    levels: Optional[Sequence[Any]] = None,
    ties: bool = True,
    cc: bool = False,
) -> pd.DataFrame:
    """Fligner-Policello robust rank order test.

    Each score is placed against the other group: the number of scores
    below it, plus half the number equal to it when ``ties`` is set.

    Returns:
        One-row DataFrame with n, statistic, p-value, test
    """
    x, y, _, _ = two_groups(cat_field, ord_field, categories, levels)
    tie_weight = 0.5 if ties else 0.0
    px = np.sum(y[None, :] < x[:, None], axis=1) + tie_weight * np.sum(y[None, :] == x[:, None], axis=1)
    py = np.sum(x[None, :] < y[:, None], axis=1) + tie_weight * np.sum(x[None, :] == y[:, None], axis=1)
    nx, ny = px.sum(), py.sum()
    mx, my = px.mean(), py.mean()
    ssx = np.sum((px - mx) ** 2)
    ssy = np.sum((py - my) ** 2)
    num = abs(nx - ny) - 0.5 if cc else nx - ny
    z = num / (2 * np.sqrt(ssx + ssy + mx * my))

    test = "Fligner-Policello test"
    if cc and ties:
        test += ", with continuity and ties correction"
    elif cc:
        test += ", with continuity correction"
    elif ties:
        test += ", with ties correction"
    return pd.DataFrame(
        {"n": [len(x) + len(y)], "statistic": [z], "p-value": [2 * stats.norm.sf(abs(z))], "test": [test]}
    )


def mood_median(
    cat_field,
    ord_field,
    categories: Optional[Sequence[Any]] = None,
    levels: Optional[Sequence[Any]] = None,
    test: str = "pearson",
    cc: str = "none",
    lambd: Union[str, float] = 2 / 3,
) -> pd.DataFrame:
    """Mood median test for two or more groups.

    Scores are split into above the overall median and not above it; the
    groups by split table is then tested for independence.

    Args:
        cat_field: Group labels
        ord_field: Ordinal or scale scores
        categories: Optional groups to use
        levels: Optional ordered labels for the scores
        test: Independence test: "pearson", "fisher" (two groups only,
            otherwise Pearson), "freeman-tukey", "g", "mod-log", "neyman"
            or "power"
        cc: Correction passed to the independence test
        lambd: Lambda for the power divergence test

    Returns:
        Result of the independence test
    """
    if test not in MOOD_TESTS:
        raise ValueError(f"test must be one of {MOOD_TESTS}, got {test}")
    df = select_categories(cat_field, ord_field, categories, levels)
    med = df["score"].median()
    split = np.where(df["score"] > med, "above", "not above")
    groups = df["group"]
    n_groups = groups.nunique()
    if test == "fisher" and n_groups > 2:
        logger.info(f"Fisher exact test needs two groups, got {n_groups}; using Pearson chi-square")
        test = "pearson"
    if test == "fisher":
        return fisher(groups, split)
    if test == "power":
        return powerdivergence_ind(groups, split, cc=cc, lambd=lambd)
    tests = {
        "pearson": pearson_ind,
        "freeman-tukey": freeman_tukey_ind,
        "g": g_ind,
        "mod-log": mod_log_likelihood_ind,
        "neyman": neyman_ind,
    }
    return tests[test](groups, split, cc=cc)
