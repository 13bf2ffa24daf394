"""Goodness-of-fit tests for a single nominal variable."""

from __future__ import annotations

import logging
from math import comb
from typing import Sequence, Union
import numpy as np
import pandas as pd
from scipy import stats

from stikpet.distributions.multinomial import multinomial_cdf, multinomial_pmf
from stikpet.preprocess import ExpectedCounts, gof_counts

logger = logging.getLogger(__name__)

CORRECTIONS = ["none", "yates", "pearson", "williams"]

# named values of the power divergence lambda and the test they give
LAMBDA_NAMES = {
    "cressie-read": (2 / 3, "Cressie-Read"),
    "likelihood-ratio": (0.0, "likelihood-ratio"),
    "g": (0.0, "likelihood-ratio"),
    "mod-log": (-1.0, "mod-log likelihood ratio"),
    "pearson": (1.0, "Pearson chi-square"),
    "freeman-tukey": (-0.5, "Freeman-Tukey"),
    "neyman": (-2.0, "Neyman"),
}


def resolve_lambda(lambd: Union[str, float]):
    """Return (lambda, test name) for a lambda name or value."""
    if isinstance(lambd, str):
        if lambd not in LAMBDA_NAMES:
            raise ValueError(f"lambd must be a number or one of {list(LAMBDA_NAMES)}, got {lambd}")
        return LAMBDA_NAMES[lambd]
    for value, name in LAMBDA_NAMES.values():
        if np.isclose(lambd, value):
            return value, name
    return float(lambd), f"power divergence with lambda = {lambd}"


def yates_adjust(observed: np.ndarray, expected: np.ndarray) -> np.ndarray:
    """Move each observed count half a unit towards its expected count."""
    return observed - 0.5 * np.sign(observed - expected)


def divergence_statistic(observed: np.ndarray, expected: np.ndarray, lambd: float) -> float:
    """Cressie-Read power divergence statistic.

    Zero observed counts contribute nothing for lambda > -1 and make the
    statistic infinite otherwise.
    """
    observed = np.asarray(observed, dtype=float)
    expected = np.asarray(expected, dtype=float)
    with np.errstate(divide="ignore", invalid="ignore"):
        if lambd == 0:
            terms = np.where(observed > 0, observed * np.log(observed / expected), 0.0)
            return float(2 * np.sum(terms))
        if lambd == -1:
            return float(2 * np.sum(expected * np.log(expected / observed)))
        terms = observed * ((observed / expected) ** lambd - 1)
        terms = np.where(observed > 0, terms, 0.0 if lambd > -1 else np.inf)
        return float(2 / (lambd * (lambd + 1)) * np.sum(terms))


def _check_cc(cc: str):
    if cc not in CORRECTIONS:
        raise ValueError(f"cc must be one of {CORRECTIONS}, got {cc}")


def _correct(statistic: float, n: float, k: int, cc: str) -> float:
    if cc == "pearson":
        return statistic * (n - 1) / n
    if cc == "williams":
        return statistic / (1 + (k**2 - 1) / (6 * n * (k - 1)))
    return statistic


def _cc_text(cc: str) -> str:
    return {
        "none": "",
        "yates": ", with Yates continuity correction",
        "pearson": ", with E. Pearson continuity correction",
        "williams": ", with Williams continuity correction",
    }[cc]


def _result(observed: np.ndarray, expected: np.ndarray, statistic: float, test: str) -> pd.DataFrame:
    k = len(observed)
    n = observed.sum()
    df = k - 1
    min_exp = float(expected.min())
    if min_exp < 5:
        logger.debug(f"Minimum expected count {min_exp:.3f} is below 5")
    return pd.DataFrame(
        {
            "n": [n],
            "k": [k],
            "statistic": [statistic],
            "df": [df],
            "p-value": [float(stats.chi2.sf(statistic, df))],
            "minExp": [min_exp],
            "propBelow5": [float(np.mean(expected < 5))],
            "test": [test],
        }
    )


def powerdivergence_gof(
    data,
    exp_counts: ExpectedCounts = None,
    lambd: Union[str, float] = "cressie-read",
    cc: str = "none",
) -> pd.DataFrame:
    """Power divergence goodness-of-fit test.

    Args:
        data: Nominal observations
        exp_counts: Optional expected counts per category (dict, Series or
            two-column DataFrame). Default: equal counts for each observed
            category. Categories not in exp_counts are ignored.
        lambd: Lambda value or name ("cressie-read", "likelihood-ratio",
            "g", "mod-log", "pearson", "freeman-tukey", "neyman")
        cc: Correction: "none", "yates", "pearson" or "williams"

    Returns:
        One-row DataFrame with n, k, statistic, df, p-value, minExp,
        propBelow5, test
    """
    _check_cc(cc)
    lambd, name = resolve_lambda(lambd)
    _, observed, expected = gof_counts(data, exp_counts)
    obs = yates_adjust(observed, expected) if cc == "yates" else observed
    statistic = _correct(divergence_statistic(obs, expected, lambd), observed.sum(), len(observed), cc)
    return _result(observed, expected, statistic, f"{name} test of goodness-of-fit{_cc_text(cc)}")


def pearson_gof(data, exp_counts: ExpectedCounts = None, cc: str = "none") -> pd.DataFrame:
    """Pearson chi-square goodness-of-fit test.

    Returns:
        One-row DataFrame with n, k, statistic, df, p-value, minExp,
        propBelow5, test
    """
    _check_cc(cc)
    _, observed, expected = gof_counts(data, exp_counts)
    if cc == "yates":
        statistic = np.sum((np.abs(observed - expected) - 0.5) ** 2 / expected)
    else:
        statistic = np.sum((observed - expected) ** 2 / expected)
    statistic = _correct(float(statistic), observed.sum(), len(observed), cc)
    return _result(observed, expected, statistic, f"Pearson chi-square test of goodness-of-fit{_cc_text(cc)}")


def g_gof(data, exp_counts: ExpectedCounts = None, cc: str = "none") -> pd.DataFrame:
    """G (likelihood ratio) goodness-of-fit test."""
    res = powerdivergence_gof(data, exp_counts, lambd=0.0, cc=cc)
    res["test"] = f"G test of goodness-of-fit{_cc_text(cc)}"
    return res


def mod_log_likelihood_gof(data, exp_counts: ExpectedCounts = None, cc: str = "none") -> pd.DataFrame:
    """Mod-log likelihood ratio goodness-of-fit test."""
    return powerdivergence_gof(data, exp_counts, lambd=-1.0, cc=cc)


def neyman_gof(data, exp_counts: ExpectedCounts = None, cc: str = "none") -> pd.DataFrame:
    """Neyman goodness-of-fit test, sum of (O - E)^2 / O."""
    _check_cc(cc)
    _, observed, expected = gof_counts(data, exp_counts)
    obs = yates_adjust(observed, expected) if cc == "yates" else observed
    with np.errstate(divide="ignore"):
        statistic = float(np.sum((obs - expected) ** 2 / obs))
    statistic = _correct(statistic, observed.sum(), len(observed), cc)
    return _result(observed, expected, statistic, f"Neyman test of goodness-of-fit{_cc_text(cc)}")


def cressie_read_gof(data, exp_counts: ExpectedCounts = None, cc: str = "none", lambd: float = 2 / 3) -> pd.DataFrame:
    """Cressie-Read goodness-of-fit test (power divergence, default lambda 2/3)."""
    res = powerdivergence_gof(data, exp_counts, lambd=lambd, cc=cc)
    label = "" if np.isclose(lambd, 2 / 3) else f" (lambda = {lambd})"
    res["test"] = f"Cressie-Read test of goodness-of-fit{label}{_cc_text(cc)}"
    return res


def freeman_tukey_gof(data, exp_counts: ExpectedCounts = None, cc: str = "none", modified: bool = False) -> pd.DataFrame:
    """Freeman-Tukey goodness-of-fit test.

    Args:
        data: Nominal observations
        exp_counts: Optional expected counts per category
        cc: "none", "yates", "pearson" or "williams"
        modified: Use sqrt(O) + sqrt(O + 1) - sqrt(4E + 1) instead of
            2 * (sqrt(O) - sqrt(E))

    Returns:
        One-row DataFrame with n, k, statistic, df, p-value, minExp,
        propBelow5, test
    """
    _check_cc(cc)
    _, observed, expected = gof_counts(data, exp_counts)
    obs = yates_adjust(observed, expected) if cc == "yates" else observed
    if modified:
        statistic = np.sum((np.sqrt(obs) + np.sqrt(obs + 1) - np.sqrt(4 * expected + 1)) ** 2)
        name = "modified Freeman-Tukey"
    else:
        statistic = 4 * np.sum((np.sqrt(obs) - np.sqrt(expected)) ** 2)
        name = "Freeman-Tukey"
    statistic = _correct(float(statistic), observed.sum(), len(observed), cc)
    return _result(observed, expected, statistic, f"{name} test of goodness-of-fit{_cc_text(cc)}")


def freeman_tukey_read(
    data,
    exp_counts: ExpectedCounts = None,
    weights: Sequence[float] = (4 / 3, 8 / 3),
    cc: str = "none",
) -> pd.DataFrame:
    """Freeman-Tukey-Read goodness-of-fit test.

    Each category adds sum_j w_j * (O/E)^((j-1)/2) * (sqrt(O) - sqrt(E))^2.
    The default weights give a statistic close to the Freeman-Tukey one.
    """
    if cc not in ("none", "pearson", "williams"):
        raise ValueError(f"cc must be 'none', 'pearson' or 'williams', got {cc}")
    _, observed, expected = gof_counts(data, exp_counts)
    ratio = np.sqrt(observed / expected)
    factor = sum(w * ratio**j for j, w in enumerate(weights))
    statistic = float(np.sum(factor * (np.sqrt(observed) - np.sqrt(expected)) ** 2))
    statistic = _correct(statistic, observed.sum(), len(observed), cc)
    return _result(observed, expected, statistic, f"Freeman-Tukey-Read test of goodness-of-fit{_cc_text(cc)}")


def multinomial_gof(data, exp_counts: ExpectedCounts = None, method: str = "loggamma") -> pd.DataFrame:
    """Exact multinomial goodness-of-fit test.

    The p-value sums the probabilities of every split of n over the k
    categories that is at most as likely as the observed one.

    Args:
        data: Nominal observations
        exp_counts: Optional expected counts per category
        method: Probability calculation, see ``multinomial_pmf``

    Returns:
        One-row DataFrame with p obs, n combs., p-value, test
    """
    _, observed, expected = gof_counts(data, exp_counts)
    n = int(observed.sum())
    k = len(observed)
    probs = expected / expected.sum()
    n_combs = comb(n + k - 1, k - 1)
    if n_combs > 1_000_000:
        logger.warning(f"Exact multinomial test enumerates {n_combs} outcomes, this may take long")
    counts = observed.astype(int)
    return pd.DataFrame(
        {
            "p obs": [multinomial_pmf(counts, probs, method)],
            "n combs.": [n_combs],
            "p-value": [multinomial_cdf(counts, probs, method)],
            "test": ["one-sample multinomial exact goodness-of-fit test"],
        }
    )
