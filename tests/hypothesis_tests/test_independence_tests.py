"""Tests for the tests of independence."""

import math

import pytest
import pandas as pd

from stikpet.hypothesis_tests.independence import (
    cressie_read_ind,
    fisher,
    fisher_freeman_halton,
    freeman_tukey_ind,
    g_ind,
    mod_log_likelihood_ind,
    neyman_ind,
    pearson_ind,
    powerdivergence_ind,
)


def _fields(a, b, c, d):
    """Two binary fields whose cross table is [[a, b], [c, d]]."""
    rows = ["x"] * (a + b) + ["y"] * (c + d)
    cols = ["p"] * a + ["q"] * b + ["p"] * c + ["q"] * d
    return pd.Series(rows), pd.Series(cols)


def test_pearson_two_by_two():
    """Expected counts of 20 everywhere give chi2 = 4 * 100 / 20."""
    f1, f2 = _fields(30, 10, 10, 30)
    res = pearson_ind(f1, f2)
    assert res["statistic"].iloc[0] == pytest.approx(20.0)
    assert res["df"].iloc[0] == 1
    assert res["n"].iloc[0] == 80
    assert res["min. exp."].iloc[0] == pytest.approx(20.0)
    assert res["prop. exp. below 5"].iloc[0] == 0


def test_corrections():
    """Yates uses |O - E| - 0.5, E. Pearson (n - 1) / n, Williams divides by q."""
    f1, f2 = _fields(30, 10, 10, 30)
    assert pearson_ind(f1, f2, cc="yates")["statistic"].iloc[0] == pytest.approx(4 * 9.5**2 / 20)
    assert pearson_ind(f1, f2, cc="pearson")["statistic"].iloc[0] == pytest.approx(20 * 79 / 80)
    # q = 1 + (80 * 2 / 40 - 1)^2 / (6 * 80)
    assert pearson_ind(f1, f2, cc="williams")["statistic"].iloc[0] == pytest.approx(20 / (1 + 9 / 480))
    with pytest.raises(ValueError, match="cc must be"):
        pearson_ind(f1, f2, cc="holm")


def test_g_statistic():
    """G = 2 * sum O ln(O / E) = 2 * 40 * (1.5 ln 1.5 + 0.5 ln 0.5) / 2."""
    f1, f2 = _fields(30, 10, 10, 30)
    res = g_ind(f1, f2)
    expected = 2 * (2 * 30 * math.log(1.5) + 2 * 10 * math.log(0.5))
    assert res["statistic"].iloc[0] == pytest.approx(expected)
    assert res["test"].iloc[0].startswith("G test")


def test_named_lambda_and_neyman():
    """Lambda 1 equals Pearson; Neyman divides by the observed counts."""
    f1, f2 = _fields(30, 10, 10, 30)
    assert powerdivergence_ind(f1, f2, lambd="pearson")["statistic"].iloc[0] == pytest.approx(20.0)
    assert neyman_ind(f1, f2)["statistic"].iloc[0] == pytest.approx(2 * 100 / 30 + 2 * 100 / 10)


def test_freeman_tukey_versions():
    """Version 1 is 4 * sum (sqrt(O) - sqrt(E))^2; unknown versions are rejected."""
    f1, f2 = _fields(30, 10, 10, 30)
    expected = 4 * 2 * ((math.sqrt(30) - math.sqrt(20)) ** 2 + (math.sqrt(10) - math.sqrt(20)) ** 2)
    assert freeman_tukey_ind(f1, f2)["statistic"].iloc[0] == pytest.approx(expected)
    with pytest.raises(ValueError, match="version"):
        freeman_tukey_ind(f1, f2, version=4)


def test_fisher_and_ffh_agree_on_two_by_two():
    """For [[3, 1], [1, 3]] the tables at most as likely sum to 34 / 70."""
    f1, f2 = _fields(3, 1, 1, 3)
    assert fisher(f1, f2)["p-value"].iloc[0] == pytest.approx(34 / 70)
    res = fisher_freeman_halton(f1, f2)
    assert res["p-value"].iloc[0] == pytest.approx(34 / 70)
    assert res["n tables"].iloc[0] == 5


def test_fisher_needs_two_by_two():
    """A 3x2 table is rejected."""
    f1 = pd.Series(["x", "y", "z", "x"])
    f2 = pd.Series(["p", "q", "p", "q"])
    with pytest.raises(ValueError, match="2x2"):
        fisher(f1, f2)


def test_categories_select_and_order():
    """Selecting categories drops the other rows."""
    f1 = pd.Series(["x"] * 4 + ["y"] * 4 + ["z"] * 3)
    f2 = pd.Series(["p", "p", "p", "q", "p", "q", "q", "q", "p", "q", "p"])
    res = pearson_ind(f1, f2, categories1=["x", "y"])
    assert res["n"].iloc[0] == 8
    assert res["n rows"].iloc[0] == 2


def test_mod_log_likelihood_ind():
    """2 * sum E ln(E / O) with E = 20: 2 * 20 * (2 ln(2 / 3) + 2 ln 2) = 80 ln(4 / 3)."""
    f1, f2 = _fields(30, 10, 10, 30)
    res = mod_log_likelihood_ind(f1, f2)
    assert res["statistic"].iloc[0] == pytest.approx(80 * math.log(4 / 3))
    assert res["test"].iloc[0] == "mod-log likelihood ratio test of independence"


def test_cressie_read_ind():
    """Lambda 2/3: 9/5 * (60 * (1.5^(2/3) - 1) + 20 * (0.5^(2/3) - 1))."""
    f1, f2 = _fields(30, 10, 10, 30)
    res = cressie_read_ind(f1, f2)
    expected = 1.8 * (60 * (1.5 ** (2 / 3) - 1) + 20 * (0.5 ** (2 / 3) - 1))
    assert res["statistic"].iloc[0] == pytest.approx(expected)
    assert res["test"].iloc[0] == "Cressie-Read test of independence"
    # lambda 1 is the Pearson statistic
    assert cressie_read_ind(f1, f2, lambd=1)["statistic"].iloc[0] == pytest.approx(20.0)
