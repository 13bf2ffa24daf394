"""Tests of independence for two nominal variables."""

from __future__ import annotations

import logging
from typing import Any, Iterator, List, Optional, Sequence, Union
import numpy as np
import pandas as pd
from scipy import stats
from scipy.special import gammaln

from stikpet.hypothesis_tests.goodness_of_fit import divergence_statistic, resolve_lambda, yates_adjust
from stikpet.tables import tab_cross

logger = logging.getLogger(__name__)

IND_CORRECTIONS = ["none", "yates", "pearson", "williams"]


def _table(field1, field2, categories1, categories2) -> np.ndarray:
    return tab_cross(field1, field2, order1=categories1, order2=categories2).to_numpy(dtype=float)


def _expected(ct: np.ndarray) -> np.ndarray:
    return np.outer(ct.sum(axis=1), ct.sum(axis=0)) / ct.sum()


def _ind_result(ct: np.ndarray, expected: np.ndarray, statistic: float, cc: str, test: str) -> pd.DataFrame:
    n = ct.sum()
    r, c = ct.shape
    df = (r - 1) * (c - 1)
    if cc == "williams":
        q = 1 + (n * np.sum(1 / ct.sum(axis=1)) - 1) * (n * np.sum(1 / ct.sum(axis=0)) - 1) / (6 * n * df)
        statistic = statistic / q
        test += ", with Williams continuity correction"
    elif cc == "pearson":
        statistic = statistic * (n - 1) / n
        test += ", with E.S. Pearson continuity correction"
    elif cc == "yates":
        test += ", with Yates continuity correction"
    return pd.DataFrame(
        {
            "n": [n],
            "n rows": [r],
            "n col.": [c],
            "statistic": [statistic],
            "df": [df],
            "p-value": [float(stats.chi2.sf(statistic, df))],
            "min. exp.": [float(expected.min())],
            "prop. exp. below 5": [float(np.mean(expected < 5))],
            "test": [test],
        }
    )


def powerdivergence_ind(
    field1,
    field2,
    categories1: Optional[Sequence[Any]] = None,
    categories2: Optional[Sequence[Any]] = None,
    cc: str = "none",
    lambd: Union[str, float] = "cressie-read",
) -> pd.DataFrame:
    """Power divergence test of independence.

    Args:
        field1, field2: Nominal fields of equal length
        categories1, categories2: Optional categories to use (and their order)
        cc: "none", "yates", "pearson" or "williams"
        lambd: Lambda value or name, see ``resolve_lambda``

    Returns:
        One-row DataFrame with n, n rows, n col., statistic, df, p-value,
        min. exp., prop. exp. below 5, test
    """
    if cc not in IND_CORRECTIONS:
        raise ValueError(f"cc must be one of {IND_CORRECTIONS}, got {cc}")
    lambd, name = resolve_lambda(lambd)
    ct = _table(field1, field2, categories1, categories2)
    expected = _expected(ct)
    obs = yates_adjust(ct, expected) if cc == "yates" else ct
    statistic = divergence_statistic(obs.ravel(), expected.ravel(), lambd)
    return _ind_result(ct, expected, statistic, cc, f"{name} test of independence")


def pearson_ind(field1, field2, categories1=None, categories2=None, cc: str = "none") -> pd.DataFrame:
    """Pearson chi-square test of independence."""
    return powerdivergence_ind(field1, field2, categories1, categories2, cc=cc, lambd=1.0)


def g_ind(field1, field2, categories1=None, categories2=None, cc: str = "none") -> pd.DataFrame:
    """G test (likelihood ratio) of independence."""
    res = powerdivergence_ind(field1, field2, categories1, categories2, cc=cc, lambd=0.0)
    res["test"] = res["test"].str.replace("likelihood-ratio test", "G test", regex=False)
    return res


def mod_log_likelihood_ind(field1, field2, categories1=None, categories2=None, cc: str = "none") -> pd.DataFrame:
    """Mod-log likelihood ratio test of independence."""
    return powerdivergence_ind(field1, field2, categories1, categories2, cc=cc, lambd=-1.0)


def cressie_read_ind(field1, field2, categories1=None, categories2=None, cc: str = "none", lambd: float = 2 / 3) -> pd.DataFrame:
    """Cressie-Read test of independence."""
    return powerdivergence_ind(field1, field2, categories1, categories2, cc=cc, lambd=lambd)


def neyman_ind(field1, field2, categories1=None, categories2=None, cc: str = "none") -> pd.DataFrame:
    """Neyman test of independence, sum of (O - E)^2 / O."""
    if cc not in IND_CORRECTIONS:
        raise ValueError(f"cc must be one of {IND_CORRECTIONS}, got {cc}")
    ct = _table(field1, field2, categories1, categories2)
    expected = _expected(ct)
    obs = yates_adjust(ct, expected) if cc == "yates" else ct
    with np.errstate(divide="ignore"):
        statistic = float(np.sum((obs - expected) ** 2 / obs))
    return _ind_result(ct, expected, statistic, cc, "Neyman test of independence")


def freeman_tukey_ind(field1, field2, categories1=None, categories2=None, cc: str = "none", version: int = 1) -> pd.DataFrame:
    """Freeman-Tukey test of independence.

    Args:
        field1, field2: Nominal fields
        categories1, categories2: Optional categories to use
        cc: "none", "yates", "pearson" or "williams"
        version: 1 for 4 * sum (sqrt(O) - sqrt(E))^2, 2 for the
            sqrt(O) + sqrt(O + 1) - sqrt(4E + 1) form, 3 for the
            sqrt(O) + sqrt(O + 1) - sqrt(4(E + 1)) form
    """
    if cc not in IND_CORRECTIONS:
        raise ValueError(f"cc must be one of {IND_CORRECTIONS}, got {cc}")
    if version not in (1, 2, 3):
        raise ValueError(f"version must be 1, 2 or 3, got {version}")
    ct = _table(field1, field2, categories1, categories2)
    expected = _expected(ct)
    obs = yates_adjust(ct, expected) if cc == "yates" else ct
    if version == 1:
        statistic = 4 * np.sum((np.sqrt(obs) - np.sqrt(expected)) ** 2)
    elif version == 2:
        statistic = np.sum((np.sqrt(obs) + np.sqrt(obs + 1) - np.sqrt(4 * expected + 1)) ** 2)
    else:
        statistic = np.sum((np.sqrt(obs) + np.sqrt(obs + 1) - np.sqrt(4 * (expected + 1))) ** 2)
    return _ind_result(ct, expected, float(statistic), cc, "Freeman-Tukey test of independence")


def fisher(field1, field2, categories1=None, categories2=None) -> pd.DataFrame:
    """Fisher exact test for a 2x2 table.

    Returns:
        One-row DataFrame with p-value and test
    """
    ct = _table(field1, field2, categories1, categories2)
    if ct.shape != (2, 2):
        raise ValueError(f"Fisher exact test needs a 2x2 table, got {ct.shape[0]}x{ct.shape[1]}")
    _, pvalue = stats.fisher_exact(ct.astype(int))
    return pd.DataFrame({"p-value": [float(pvalue)], "test": ["Fisher exact test"]})


def _bounded_compositions(total: int, caps: List[int]) -> Iterator[List[int]]:
    if len(caps) == 1:
        if total <= caps[0]:
            yield [total]
        return
    rest_cap = sum(caps[1:])
    for i in range(max(0, total - rest_cap), min(total, caps[0]) + 1):
        for rest in _bounded_compositions(total - i, caps[1:]):
            yield [i] + rest


def _tables(row_totals: List[int], col_totals: List[int]) -> Iterator[List[List[int]]]:
    """All tables with the given margins."""
    if len(row_totals) == 1:
        yield [list(col_totals)]
        return
    for row in _bounded_compositions(row_totals[0], col_totals):
        remaining = [c - r for c, r in zip(col_totals, row)]
        for rest in _tables(row_totals[1:], remaining):
            yield [row] + rest


def fisher_freeman_halton(field1, field2, categories1=None, categories2=None) -> pd.DataFrame:
    """Fisher-Freeman-Halton exact test for an r x c table.

    Sums the hypergeometric probabilities of all tables with the observed
    margins that are no more likely than the observed table.

    Returns:
        One-row DataFrame with n tables, p-value and test
    """
    ct = _table(field1, field2, categories1, categories2).astype(int)
    rows = [int(v) for v in ct.sum(axis=1)]
    cols = [int(v) for v in ct.sum(axis=0)]
    n = sum(rows)
    const = np.sum(gammaln(np.array(rows) + 1)) + np.sum(gammaln(np.array(cols) + 1)) - gammaln(n + 1)

    def log_prob(table) -> float:
        return const - np.sum(gammaln(np.asarray(table) + 1))

    observed = log_prob(ct)
    pvalue = 0.0
    n_tables = 0
    for table in _tables(rows, cols):
        n_tables += 1
        lp = log_prob(table)
        if lp <= observed + 1e-7:
            pvalue += np.exp(lp)
    logger.debug(f"Fisher-Freeman-Halton enumerated {n_tables} tables")
    return pd.DataFrame(
        {"n tables": [n_tables], "p-value": [min(1.0, pvalue)], "test": ["Fisher-Freeman-Halton exact test"]}
    )
