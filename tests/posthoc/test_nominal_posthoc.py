"""Tests for the nominal post-hoc analyses."""

import math

import pytest
import pandas as pd

from stikpet.posthoc.nominal import (
    binomial,
    column_proportion,
    mcnemar_co,
    mcnemar_pw,
    pairwise_bin,
    pairwise_gof,
    residual,
    residual_gof,
    residual_gof_bin,
    residual_gof_gof,
)


def _fields(a, b, c, d):
    """Two fields whose cross table over x, y is [[a, b], [c, d]]."""
    first = ["x"] * (a + b) + ["y"] * (c + d)
    second = ["x"] * a + ["y"] * b + ["x"] * c + ["y"] * d
    return pd.Series(first), pd.Series(second)


def test_pairwise_binomial(nominal_data):
    """Each pair is a Bin(n, 0.5) test of its smaller count."""
    res = pairwise_bin(nominal_data)
    assert list(zip(res["category 1"], res["category 2"])) == [("A", "B"), ("A", "C"), ("B", "C")]
    # 2 * P(X <= 6 | 16), 2 * P(X <= 4 | 14), 2 * P(X <= 4 | 10)
    expected = [2 * 14893 / 65536, 2 * 1471 / 16384, 2 * 386 / 1024]
    assert res["p-value"].to_list() == pytest.approx(expected)
    assert res["adj. p-value"].to_list() == pytest.approx([1.0, 3 * expected[1], 1.0])
    assert res["n pair"].to_list() == [16, 14, 10]


def test_binomial_drops_statistic(nominal_data):
    """The binomial shortcut has no statistic or n pair columns."""
    res = binomial(nominal_data, mtc="none")
    assert "statistic" not in res.columns
    assert res["adj. p-value"].to_list() == pytest.approx(res["p-value"].to_list())


def test_pairwise_gof_pearson(nominal_data):
    """Pairs get equal expected counts within the pair."""
    res = pairwise_gof(nominal_data)
    assert res["statistic"].to_list() == pytest.approx([1.0, 18 / 7, 0.4])
    assert res["df"].to_list() == [1, 1, 1]
    assert res["exp. prop. 1"].to_list() == pytest.approx([0.5, 0.5, 0.5])


def test_pairwise_invalid_test(nominal_data):
    """Unknown tests are rejected."""
    with pytest.raises(ValueError, match="test must be one of"):
        pairwise_gof(nominal_data, test="chi")


def test_residual_gof(nominal_data):
    """Standardized residuals (O - E) / sqrt(E) with E = 20 / 3."""
    e = 20 / 3
    res = residual_gof(nominal_data)
    assert res["statistic"].to_list() == pytest.approx([(o - e) / math.sqrt(e) for o in (10, 6, 4)])
    adj = residual_gof_bin(nominal_data, test="adj-residual")
    assert adj["statistic"].iloc[0] == pytest.approx((10 - e) / math.sqrt(e * 2 / 3))


def test_residual_gof_binomial(nominal_data):
    """Category against the rest with p0 = E / n."""
    res = residual_gof_bin(nominal_data, test="binomial")
    assert res["category"].to_list() == ["A", "B", "C"]
    assert all(0 <= p <= 1 for p in res["adj. p-value"])


def test_residual_gof_gof(nominal_data):
    """A against the rest: 10 vs 10 observed, 20/3 vs 40/3 expected."""
    res = residual_gof_gof(nominal_data)
    assert res["statistic"].iloc[0] == pytest.approx((10 / 3) ** 2 / (20 / 3) + (10 / 3) ** 2 / (40 / 3))


def test_cell_residuals():
    """Expected 20 in each cell: standardized 10 / sqrt(20), adjusted 10 / sqrt(5)."""
    f1, f2 = _fields(30, 10, 10, 30)
    adj = residual(f1, f2)
    assert len(adj) == 4
    assert adj[["field1", "field2"]].iloc[0].to_list() == ["x", "x"]
    assert adj["adj. st. residual"].iloc[0] == pytest.approx(10 / math.sqrt(5))
    std = residual(f1, f2, residual="standardized")
    assert std["st. residual"].iloc[1] == pytest.approx(-10 / math.sqrt(20))


def test_column_proportion():
    """Column proportions 0.75 and 0.25 out of 40 each."""
    f1, f2 = _fields(30, 10, 10, 30)
    spss = column_proportion(f1, f2)
    assert len(spss) == 2
    # pooled p = 0.5: se = sqrt(0.25 * 2 / 40)
    assert spss["statistic"].iloc[0] == pytest.approx(0.5 / math.sqrt(0.0125))
    mar = column_proportion(f1, f2, se_method="marascuilo")
    # se = sqrt(0.75^2 / 40 + 0.25^2 / 40) = 0.125
    assert mar["statistic"].to_list() == pytest.approx([4.0, -4.0])


def test_mcnemar_pairwise_and_one_vs_rest():
    """Off-diagonal counts 10 and 2."""
    f1, f2 = _fields(5, 10, 2, 5)
    pw = mcnemar_pw(f1, f2)
    assert pw["statistic"].iloc[0] == pytest.approx(64 / 12)
    assert pw["n"].iloc[0] == 22
    assert mcnemar_pw(f1, f2, cc=True)["statistic"].iloc[0] == pytest.approx(49 / 12)
    co = mcnemar_co(f1, f2)
    assert co["statistic"].to_list() == pytest.approx([64 / 12, 64 / 12])


def test_mcnemar_exact_and_mid_p():
    """2 * P(X <= 2 | 12, 0.5) and minus P(X = 2) for the mid-p."""
    f1, f2 = _fields(5, 10, 2, 5)
    exact = mcnemar_pw(f1, f2, exact=True)
    assert exact["p-value"].iloc[0] == pytest.approx(158 / 4096)
    mid = mcnemar_pw(f1, f2, exact=True, cc=True)
    assert mid["p-value"].iloc[0] == pytest.approx(92 / 4096)
