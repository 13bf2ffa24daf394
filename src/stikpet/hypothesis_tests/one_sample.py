"""One-sample tests for binary, ordinal and scale data."""

from __future__ import annotations

from typing import Any, Optional, Sequence, Tuple
import numpy as np
import pandas as pd
from scipy import stats

from stikpet.distributions.wilcoxon import wilcoxon_cdf
from stikpet.preprocess import apply_levels, drop_missing, sorted_categories

TWO_SIDED_METHODS = ["eqdist", "double", "smallp"]
WILCOXON_APPR = ["wilcoxon", "none", "imanz", "imant"]
WILCOXON_EQMED = ["wilcoxon", "zsplit", "pratt"]


def _scores(data, levels: Optional[Sequence[Any]] = None, mu: Optional[float] = None) -> Tuple[np.ndarray, float]:
    """Numeric scores without missing values and mu (default: the midrange)."""
    x = apply_levels(data, levels).dropna().to_numpy(dtype=float)
    if len(x) == 0:
        raise ValueError("No valid scores after removing missing values")
    if mu is None:
        mu = (x.min() + x.max()) / 2
    return x, mu


def _binary_counts(data, codes: Optional[Sequence[Any]], p0: float, swap_large_p0: bool):
    """Return (n1, n2, label) with n1 the count of the category p0 refers to."""
    s = drop_missing(data)
    if codes is not None:
        return int((s == codes[0]).sum()), int((s == codes[1]).sum()), f"(with p0 for {codes[0]})"
    cats = sorted_categories(s)
    n1 = int((s == cats[0]).sum())
    n2 = len(s) - n1
    label = cats[0]
    if swap_large_p0 and p0 > 0.5 and n1 < n2 and len(cats) > 1:
        n1, n2 = n2, n1
        label = cats[1]
    return n1, n2, f"(assuming p0 for {label})"


def binomial_os(data, codes: Optional[Sequence[Any]] = None, p0: float = 0.5, two_sided_method: str = "eqdist") -> pd.DataFrame:
    """One-sample binomial test.

    Args:
        data: Binary nominal data
        codes: Optional two categories; p0 refers to the first
        p0: Expected proportion
        two_sided_method: How the other tail is found: "eqdist" (same
            distance from the expected count), "double" (twice the one-sided
            value) or "smallp" (all outcomes with a smaller probability)

    Returns:
        One-row DataFrame with p-value and test
    """
    if two_sided_method not in TWO_SIDED_METHODS:
        raise ValueError(f"two_sided_method must be one of {TWO_SIDED_METHODS}, got {two_sided_method}")
    n1, n2, cat_used = _binary_counts(data, codes, p0, swap_large_p0=True)
    n = n1 + n2
    min_count, exp_prop, obs_prop = n1, p0, n1 / n
    if n2 < n1:
        min_count, exp_prop, obs_prop = n2, 1 - p0, n2 / n

    dist = stats.binom(n, exp_prop)
    upper = exp_prop < obs_prop
    sig1 = dist.sf(min_count - 1) if upper else dist.cdf(min_count)

    if two_sided_method == "double":
        sig2 = sig1
        test = "one-sample binomial, with double one-sided method"
    elif two_sided_method == "eqdist":
        exp_count = n * exp_prop
        other = exp_count + (exp_count - min_count)
        sig2 = dist.cdf(other) if upper else dist.sf(np.ceil(other) - 1)
        test = "one-sample binomial, with equal-distance method"
    else:
        p_small = dist.pmf(min_count)
        if upper:
            candidates = np.arange(min_count - 1, -1, -1)
        else:
            candidates = np.arange(min_count + 1, n + 1)
        below = candidates[dist.pmf(candidates) < p_small]
        if len(below) == 0:
            sig2 = 0.0
        elif upper:
            sig2 = dist.cdf(below[0])
        else:
            sig2 = dist.sf(below[0] - 1)
        test = "one-sample binomial, with small p method"

    pvalue = min(1.0, sig1 + sig2)
    return pd.DataFrame({"p-value": [pvalue], "test": [f"{test} {cat_used}"]})


def _proportion_z(data, codes, p0, cc, wald: bool) -> pd.DataFrame:
    if cc not in ("none", "yates"):
        raise ValueError(f"cc must be 'none' or 'yates', got {cc}")
    n1, n2, cat_used = _binary_counts(data, codes, p0, swap_large_p0=wald)
    n = n1 + n2
    min_count, exp_prop = n1, p0
    if n2 < n1:
        min_count, exp_prop = n2, 1 - p0
    p = (min_count + 0.5) / n if cc == "yates" else min_count / n
    se = np.sqrt(p * (1 - p) / n) if wald else np.sqrt(p0 * (1 - p0) / n)
    z = (p - exp_prop) / se

    test = "one-sample Wald" if wald else "one-sample Score"
    if cc == "yates":
        test += " with Yates continuity correction"
    if wald:
        test += f" {cat_used}"
    return pd.DataFrame({"n": [n], "statistic": [z], "p-value": [2 * stats.norm.sf(abs(z))], "test": [test]})


def score_os(data, codes: Optional[Sequence[Any]] = None, p0: float = 0.5, cc: str = "none") -> pd.DataFrame:
    """One-sample score test for a proportion (standard error from p0).

    Returns:
        One-row DataFrame with n, statistic, p-value, test
    """
    return _proportion_z(data, codes, p0, cc, wald=False)


def wald_os(data, codes: Optional[Sequence[Any]] = None, p0: float = 0.5, cc: str = "none") -> pd.DataFrame:
    """One-sample Wald test for a proportion (standard error from the sample).

    Returns:
        One-row DataFrame with n, statistic, p-value, test
    """
    return _proportion_z(data, codes, p0, cc, wald=True)


def sign_os(data, levels: Optional[Sequence[Any]] = None, mu: Optional[float] = None) -> pd.DataFrame:
    """One-sample sign test; scores equal to mu are ignored.

    Returns:
        One-row DataFrame with mu, p-value, test
    """
    x, mu = _scores(data, levels, mu)
    n_below = int(np.sum(x < mu))
    n_above = int(np.sum(x > mu))
    pvalue = min(1.0, 2 * stats.binom.cdf(min(n_below, n_above), n_below + n_above, 0.5))
    return pd.DataFrame({"mu": [mu], "p-value": [pvalue], "test": ["one-sample sign test"]})


def trinomial_os(data, levels: Optional[Sequence[Any]] = None, mu: Optional[float] = None) -> pd.DataFrame:
    """One-sample trinomial test, a sign test that keeps the ties with mu.

    Returns:
        One-row DataFrame with mu, pos, neg, ties, p-value, test
    """
    x, mu = _scores(data, levels, mu)
    pos = int(np.sum(x > mu))
    neg = int(np.sum(x < mu))
    ties = int(np.sum(x == mu))
    pvalue = trinomial_pvalue(pos, neg, ties)
    return pd.DataFrame(
        {"mu": [mu], "pos": [pos], "neg": [neg], "ties": [ties], "p-value": [pvalue], "test": ["one-sample trinomial test"]}
    )


def trinomial_pvalue(pos: int, neg: int, ties: int) -> float:
    """Two-sided p-value of a net difference of at least |pos - neg|."""
    n = pos + neg + ties
    p0 = ties / n
    p1 = (1 - p0) / 2
    dist = stats.multinomial(n, [p1, p1, p0])
    sig = 0.0
    for z in range(abs(pos - neg), n + 1):
        for i in range((n - z) // 2 + 1):
            sig += dist.pmf([i, i + z, n - 2 * i - z])
    return float(min(1.0, 2 * sig))


def student_t_os(data, mu: Optional[float] = None) -> pd.DataFrame:
    """One-sample Student t-test.

    Returns:
        One-row DataFrame with mu, sample mean, statistic, df, p-value, test
    """
    x, mu = _scores(data, None, mu)
    res = stats.ttest_1samp(x, mu)
    return pd.DataFrame(
        {
            "mu": [mu],
            "sample mean": [x.mean()],
            "statistic": [float(res.statistic)],
            "df": [len(x) - 1],
            "p-value": [float(res.pvalue)],
            "test": ["one-sample Student t"],
        }
    )


def trimmed_mean_os(data, mu: Optional[float] = None, trim: float = 0.1, se: str = "yuen") -> pd.DataFrame:
    """One-sample trimmed mean t-test.

    Args:
        data: Scale scores
        mu: Hypothesized trimmed mean (default: midrange)
        trim: Proportion trimmed from each side
        se: "yuen" or "wilcox" standard error from the winsorized variance

    Returns:
        One-row DataFrame with trimmed mean, mu, se, statistic, df, p-value, test
    """
    if se not in ("yuen", "wilcox"):
        raise ValueError(f"se must be 'yuen' or 'wilcox', got {se}")
    x, mu = _scores(data, None, mu)
    n = len(x)
    g = int(np.floor(n * trim))
    nt = n - 2 * g
    xs = np.sort(x)
    mt = xs[g:n - g].mean()
    wins = np.clip(x, xs[g], xs[n - g - 1])
    var_w = np.var(wins, ddof=1)
    if se == "yuen":
        se_value = np.sqrt(var_w) * np.sqrt(n - 1) / np.sqrt(nt * (nt - 1))
    else:
        se_value = np.sqrt(var_w) / ((1 - 2 * trim) * np.sqrt(n))
    t = (mt - mu) / se_value
    df = nt - 1
    return pd.DataFrame(
        {
            "trimmed mean": [mt],
            "mu": [mu],
            "se": [se_value],
            "statistic": [t],
            "df": [df],
            "p-value": [2 * stats.t.sf(abs(t), df)],
            "test": ["one-sample trimmed mean test"],
        }
    )


def wilcoxon_os(
    data,
    levels: Optional[Sequence[Any]] = None,
    mu: Optional[float] = None,
    ties: bool = True,
    appr: str = "wilcoxon",
    eq_med: str = "wilcoxon",
    cc: bool = False,
) -> pd.DataFrame:
    """One-sample Wilcoxon signed rank test.

    Args:
        data: Ordinal or scale scores
        levels: Optional ordered labels
        mu: Hypothesized median (default: midrange)
        ties: Apply the ties correction to the variance
        appr: "wilcoxon" (normal), "none" (exact distribution), "imanz" or
            "imant" (Iman's z and t approximations)
        eq_med: Scores equal to mu: "wilcoxon" (drop), "zsplit" (split
            their ranks) or "pratt" (rank, then drop)
        cc: Continuity correction

    Returns:
        One-row DataFrame with mu, W, statistic, df, p-value, test

    Raises:
        ValueError: For the exact test when tied ranks exist
    """
    if appr not in WILCOXON_APPR:
        raise ValueError(f"appr must be one of {WILCOXON_APPR}, got {appr}")
    if eq_med not in WILCOXON_EQMED:
        raise ValueError(f"eq_med must be one of {WILCOXON_EQMED}, got {eq_med}")
    x, mu = _scores(data, levels, mu)
    return signed_rank_test(x - mu, mu, ties, appr, eq_med, cc, "one-sample")


def signed_rank_test(diffs: np.ndarray, mu: float, ties: bool, appr: str, eq_med: str, cc: bool, design: str) -> pd.DataFrame:
    """Signed rank test on differences; shared by the one-sample and paired versions."""
    n = len(diffs)
    n_zero = int(np.sum(diffs == 0))
    nr = n - n_zero if eq_med == "wilcoxon" else n
    if eq_med == "wilcoxon" or appr == "none":
        diffs = diffs[diffs != 0]
    abs_diffs = np.abs(diffs)
    ranks = stats.rankdata(abs_diffs)
    w = ranks[diffs > 0].sum()

    if appr == "none":
        if len(np.unique(ranks)) < len(ranks):
            raise ValueError("Ties exist, the exact signed rank test cannot be computed")
        w_min = ranks[diffs < 0].sum()
        statistic = min(w, w_min)
        pvalue = min(1.0, 2 * wilcoxon_cdf(int(statistic), len(ranks)))
        return pd.DataFrame(
            {
                "mu": [mu], "W": [w], "statistic": [statistic], "df": [np.nan], "p-value": [pvalue],
                "test": [f"{design} Wilcoxon signed rank exact test"],
            }
        )

    if eq_med == "zsplit":
        w = w + ranks[diffs == 0].sum() / 2
    r_avg = nr * (nr + 1) / 4
    s2 = nr * (nr + 1) * (2 * nr + 1) / 24
    if eq_med == "pratt":
        s2 -= n_zero * (n_zero + 1) * (2 * n_zero + 1) / 24
        r_avg = (nr * (nr + 1) - n_zero * (n_zero + 1)) / 4
    if ties:
        tie_ranks = ranks[abs_diffs != 0] if eq_med == "pratt" else ranks
        _, counts = np.unique(tie_ranks, return_counts=True)
        s2 -= np.sum(counts**3 - counts) / 48

    num = abs(w - r_avg)
    if cc:
        num -= 0.5
    df = np.nan
    if appr == "imant":
        var = (s2 * nr - (w - r_avg) ** 2) / (nr - 1)
        statistic = num / np.sqrt(var)
        df = nr - 1
        pvalue = 2 * stats.t.sf(abs(statistic), df)
    else:
        statistic = num / np.sqrt(s2)
        if appr == "imanz":
            statistic = statistic / 2 * (1 + np.sqrt((nr - 1) / (nr - statistic**2)))
        pvalue = 2 * stats.norm.sf(abs(statistic))

    test = f"{design} Wilcoxon signed rank test"
    if ties and cc:
        test += ", with ties and continuity correction"
    elif ties:
        test += ", with ties correction"
    elif cc:
        test += ", with continuity correction"
    if appr == "imant":
        test += ", using Iman (1974) t approximation"
    elif appr == "imanz":
        test += ", using Iman (1974) z approximation"
    if eq_med == "pratt":
        test += ", Pratt method for equal to hyp. med. (inc. Cureton adjustment for normal approximation)"
    elif eq_med == "zsplit":
        test += ", z-split method for equal to hyp. med."
    return pd.DataFrame(
        {"mu": [mu], "W": [w], "statistic": [statistic], "df": [df], "p-value": [pvalue], "test": [test]}
    )


def z_os(data, mu: Optional[float] = None, sigma: Optional[float] = None) -> pd.DataFrame:
    """One-sample z-test; sigma defaults to the sample standard deviation.

    Returns:
        One-row DataFrame with mu, sample mean, statistic, p-value, test
    """
    x, mu = _scores(data, None, mu)
    s = np.std(x, ddof=1) if sigma is None else sigma
    z = (x.mean() - mu) / (s / np.sqrt(len(x)))
    return pd.DataFrame(
        {
            "mu": [mu],
            "sample mean": [x.mean()],
            "statistic": [z],
            "p-value": [2 * stats.norm.sf(abs(z))],
            "test": ["one-sample Z"],
        }
    )
