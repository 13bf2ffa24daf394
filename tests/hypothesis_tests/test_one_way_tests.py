"""Tests for the one-way tests of k independent groups."""

import logging
import math

import pytest
import pandas as pd
from scipy import stats

from stikpet.config import set_config
from stikpet.hypothesis_tests.one_way import (
    KW_METHODS,
    alexander_govern_owa,
    box_owa,
    brown_forsythe_owa,
    cochran_owa,
    fisher_owa,
    hartung_agac_makabi_owa,
    james_owa,
    kruskal_wallis,
    mehrotra_owa,
    ozdemir_kurt_owa,
    welch_owa,
    wilcox_owa,
)

# three groups of three with means 2, 5, 8 and variance 1
GROUPS = pd.Series(["a"] * 3 + ["b"] * 3 + ["c"] * 3)
SCORES = pd.Series([1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 8.0, 9.0])


def test_fisher_anova_table():
    """SS between 54, within 6, total 60; F = 27 / 1."""
    res = fisher_owa(GROUPS, SCORES)
    assert res["variance"].to_list() == ["between", "within", "total"]
    assert res["SS"].to_list() == pytest.approx([54.0, 6.0, 60.0])
    assert res["df"].to_list() == [2, 6, 8]
    assert res["F"].iloc[0] == pytest.approx(27.0)
    # F(2, df2) survival: (1 + 2F / df2)^(-df2 / 2) = 10^-3
    assert res["p-value"].iloc[0] == pytest.approx(0.001)


def test_welch():
    """Equal weights 3: F = 27 / (1 + 1 / 6), df2 = 8 / (3 * 2 / 3)."""
    res = welch_owa(GROUPS, SCORES)
    assert res["statistic"].iloc[0] == pytest.approx(27 * 6 / 7)
    assert res["df1"].iloc[0] == 2
    assert res["df2"].iloc[0] == pytest.approx(4.0)


def test_cochran_and_james_large_sample():
    """The weighted sum of squares is 3 * 18."""
    res = cochran_owa(GROUPS, SCORES)
    assert res["statistic"].iloc[0] == pytest.approx(54.0)
    assert res["p-value"].iloc[0] == pytest.approx(math.exp(-27))
    james0 = james_owa(GROUPS, SCORES, order=0)
    assert james0["statistic"].iloc[0] == pytest.approx(54.0)


def test_james_orders():
    """Higher orders keep the statistic and search the p-value."""
    first = james_owa(GROUPS, SCORES, order=1)
    second = james_owa(GROUPS, SCORES)
    assert first["statistic"].iloc[0] == pytest.approx(54.0)
    assert first["J critical"].iloc[0] > stats.chi2.isf(0.05, 2)
    assert 0 < second["p-value"].iloc[0] < 0.05
    with pytest.raises(ValueError, match="order must be"):
        james_owa(GROUPS, SCORES, order=3)


def test_brown_forsythe_box_mehrotra_equal_variances():
    """With equal sizes and variances they reduce to the classic F(2, 6) = 27."""
    bf = brown_forsythe_owa(GROUPS, SCORES)
    assert bf["statistic"].iloc[0] == pytest.approx(27.0)
    assert bf["df2"].iloc[0] == pytest.approx(6.0)
    box = box_owa(GROUPS, SCORES)
    assert box["statistic"].iloc[0] == pytest.approx(27.0)
    assert box[["df1", "df2"]].iloc[0].to_list() == pytest.approx([2.0, 6.0])
    meh = mehrotra_owa(GROUPS, SCORES)
    assert meh["statistic"].iloc[0] == pytest.approx(27.0)
    assert meh[["df1", "df2"]].iloc[0].to_list() == pytest.approx([2.0, 6.0])


def test_hartung_agac_makabi():
    """phi = 5 / 4 gives weights 2.4 and statistic 43.2 / (2 + 1 / 3)."""
    res = hartung_agac_makabi_owa(GROUPS, SCORES)
    assert res["statistic"].iloc[0] == pytest.approx(43.2 / (7 / 3))
    with pytest.raises(ValueError, match="version"):
        hartung_agac_makabi_owa(GROUPS, SCORES, version=3)


def test_wilcox_equal_variances():
    """Equal variances make each W the group mean: H = 18 / (1 / 3)."""
    res = wilcox_owa(GROUPS, SCORES)
    assert res["statistic"].iloc[0] == pytest.approx(54.0)
    assert res["df"].iloc[0] == 2


def test_alexander_govern_equal_means():
    """Identical groups give a statistic of zero."""
    groups = pd.Series(["a"] * 3 + ["b"] * 3)
    scores = pd.Series([1.0, 2.0, 3.0, 1.0, 2.0, 3.0])
    res = alexander_govern_owa(groups, scores)
    assert res["statistic"].iloc[0] == pytest.approx(0.0)
    assert res["p-value"].iloc[0] == pytest.approx(1.0)


def test_alexander_govern_and_ozdemir_kurt_detect_difference():
    """Means 2, 5, 8 differ clearly."""
    assert alexander_govern_owa(GROUPS, SCORES)["p-value"].iloc[0] < 0.05
    res = ozdemir_kurt_owa(GROUPS, SCORES)
    assert 0 <= res["p-value"].iloc[0] < 0.05


def test_too_few_groups():
    """One group cannot be compared."""
    with pytest.raises(ValueError, match="At least two groups"):
        welch_owa(GROUPS, SCORES, categories=["a"])


def test_kruskal_wallis_chi2():
    """Rank sums 6, 15, 24: H = 12 / 90 * 279 - 30 = 7.2."""
    res = kruskal_wallis(GROUPS, SCORES)
    assert res["H"].iloc[0] == pytest.approx(7.2)
    assert res["df"].iloc[0] == 2
    assert res["p-value"].iloc[0] == pytest.approx(math.exp(-3.6))


def test_kruskal_wallis_iman():
    """Iman F = 6 * 7.2 / (2 * 0.8) with df2 from the within-group rank variances."""
    res = kruskal_wallis(GROUPS, SCORES, method="iman")
    assert res["statistic"].iloc[0] == pytest.approx(27.0)
    assert res["df2"].iloc[0] == pytest.approx(6.0)
    assert res["test"].iloc[0] == "Kruskal-Wallis H test, iman approximation"


@pytest.mark.parametrize("method", KW_METHODS)
def test_kruskal_wallis_methods_give_probabilities(method):
    """Every approximation keeps H and gives a p-value in [0, 1]."""
    res = kruskal_wallis(GROUPS, SCORES, method=method)
    assert res["H"].iloc[0] == pytest.approx(7.2)
    assert 0 <= res["p-value"].iloc[0] <= 1


def test_kruskal_wallis_invalid_method():
    """Unknown approximations are rejected."""
    with pytest.raises(ValueError, match="method must be"):
        kruskal_wallis(GROUPS, SCORES, method="exact")


@pytest.mark.parametrize("test", [james_owa, ozdemir_kurt_owa])
def test_p_value_search_logs_when_capped(test, caplog):
    """Two bisection steps cannot converge: a warning is logged and the last estimate kept."""
    set_config(max_iter=2)
    with caplog.at_level(logging.WARNING):
        res = test(GROUPS, SCORES)

    assert "without convergence" in caplog.text
    assert 0 < res["p-value"].iloc[0] < 1
