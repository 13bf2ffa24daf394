"""Tests for the scale and paired post-hoc analyses."""

import math

import pytest
import pandas as pd

from stikpet.posthoc.scale import MEAN_COLUMNS, pairwise_is, pairwise_ps, pairwise_t

GROUPS = pd.Series(["a"] * 3 + ["b"] * 3 + ["c"] * 3)
SCORES = pd.Series([1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 8.0, 9.0])

REPEATED = pd.DataFrame({"c1": [1, 2, 3, 1], "c2": [2, 4, 7, 5], "c3": [3, 5, 6, 9]})


def test_pairwise_student():
    """Each pair: means 3 apart with pooled sd 1."""
    res = pairwise_is(GROUPS, SCORES)
    assert list(res.columns) == MEAN_COLUMNS
    assert res["statistic"].iloc[0] == pytest.approx(-3 / math.sqrt(2 / 3))
    assert res["df"].iloc[0] == 4
    assert res["sample diff."].to_list() == pytest.approx([-3.0, -6.0, -3.0])


def test_pairwise_z_and_yuen():
    """The z-test has no df; Yuen without trimming matches Welch."""
    z = pairwise_is(GROUPS, SCORES, is_test="z")
    assert z["df"].isna().all()
    assert z["mean 1"].to_list() == pytest.approx([2.0, 2.0, 5.0])
    yuen = pairwise_is(GROUPS, SCORES, is_test="yuen")
    welch = pairwise_is(GROUPS, SCORES, is_test="welch")
    assert yuen["statistic"].to_list() == pytest.approx(welch["statistic"].to_list())
    with pytest.raises(ValueError, match="is_test"):
        pairwise_is(GROUPS, SCORES, is_test="games-howell")


def test_pairwise_t_pooled_over_all_groups():
    """MSW = 1 with 6 df."""
    res = pairwise_t(GROUPS, SCORES)
    assert res["statistic"].iloc[0] == pytest.approx(-3 / math.sqrt(2 / 3))
    assert res["df"].iloc[0] == 6
    assert res["test"].iloc[0] == "Winer pairwise t"


def test_pairwise_sign():
    """c1 is below c2 in all four cases: z = (4 - 2 - 0.5) / (0.5 * 2)."""
    res = pairwise_ps(REPEATED)
    assert list(zip(res["var 1"], res["var 2"])) == [("c1", "c2"), ("c1", "c3"), ("c2", "c3")]
    assert res["statistic"].iloc[0] == pytest.approx(1.5)
    assert "adj. p-value" in res.columns


def test_pairwise_wilcoxon_and_trinomial():
    """Other paired tests keep their own columns."""
    wil = pairwise_ps(REPEATED, test="wilcoxon")
    assert "W" in wil.columns
    tri = pairwise_ps(REPEATED, test="trinomial")
    assert tri["n 0"].to_list() == [0, 0, 0]
    with pytest.raises(ValueError, match="test must be"):
        pairwise_ps(REPEATED, test="t")
