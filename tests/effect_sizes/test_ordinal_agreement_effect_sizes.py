"""Tests for ordinal effect sizes, agreement measures and conversions."""

import numpy as np
import pytest

from stikpet.effect_sizes import (
    cohen_kappa,
    common_language_is,
    common_language_os,
    common_language_ps,
    convert_es,
    dominance,
    freeman_theta,
    hodges_lehmann_is,
    pairwise_bin_ord,
    scott_pi,
    vargha_delaney_a,
)

# ranks 1, 2, 3.5 and 3.5, 5, 6 with one tie between the groups
GROUPS = ["a"] * 3 + ["b"] * 3
SCORES = [1, 2, 3, 3, 4, 5]

RATER1 = ["a", "a", "a", "b", "b", "b", "a", "b"]
RATER2 = ["a", "a", "b", "b", "b", "a", "a", "b"]


def test_vargha_delaney_a():
    """Test A for both groups."""
    res = vargha_delaney_a(GROUPS, SCORES)

    assert list(res.columns) == ["A-a", "A-b"]
    assert res["A-a"].iloc[0] == pytest.approx(1 / 18)
    assert res["A-b"].iloc[0] == pytest.approx(17 / 18)


def test_common_language_is_methods():
    """Test the brute force and rank based CLE."""
    brute = common_language_is(GROUPS, SCORES)
    ignore_ties = common_language_is(GROUPS, SCORES, method="brute-it")
    vda = common_language_is(GROUPS, SCORES, method="vda")

    assert brute["CLE a"].iloc[0] == pytest.approx(1 / 18)
    assert ignore_ties["CLE a"].iloc[0] == 0
    assert ignore_ties["CLE b"].iloc[0] == pytest.approx(8 / 9)
    assert vda["CLE a"].iloc[0] == pytest.approx(brute["CLE a"].iloc[0])


def test_common_language_os_versions():
    """Test the one-sample CLE."""
    data = [1, 2, 3, 4, 5]

    assert common_language_os(data, mu=2) == pytest.approx(0.7)
    assert common_language_os(data, mu=2, version="brute-it") == pytest.approx(0.6)
    with pytest.raises(ValueError):
        common_language_os(data, version="guess")


def test_common_language_ps_dunlap():
    """Test the Dunlap arcsine version from r."""
    x = [1, 2, 3, 4]
    y = [2, 2, 4, 6]
    # sxy = 7, sxx = 5, syy = 11
    r = 7 / 55**0.5

    assert common_language_ps(x, y) == pytest.approx(np.arcsin(r) / np.pi + 0.5)
    assert 0.5 < common_language_ps(x, y, method="mcgraw-wong") < 1


def test_dominance():
    """Test dominance and its rescaled version."""
    data = [1, 2, 3, 4, 5]

    assert dominance(data)["dominance"].iloc[0] == pytest.approx(0.0)
    assert dominance(data, mu=2)["dominance"].iloc[0] == pytest.approx(0.4)
    assert dominance(data, mu=2, out="vda")["VDA-like"].iloc[0] == pytest.approx(0.7)


def test_freeman_theta_complete_separation():
    """Test theta when every score of one group is below the other."""
    assert freeman_theta(["a", "a", "b", "b"], [1, 1, 2, 2]) == pytest.approx(1.0)


def test_hodges_lehmann_is():
    """Test the median of all pairwise differences."""
    # differences -1, -3, 0, -2, 1, -1
    assert hodges_lehmann_is(["a"] * 3 + ["b"] * 2, [1, 2, 3, 2, 4]) == pytest.approx(-1.0)


def test_pairwise_bin_ord(grouped_scores):
    """Test rank biserial for every pair of groups."""
    groups, scores = grouped_scores
    res = pairwise_bin_ord(groups, scores, es="rb")

    assert res["cat. 1"].tolist() == ["a", "a", "b"]
    assert res["cat. 2"].tolist() == ["b", "c", "c"]
    assert res["rb"].tolist() == pytest.approx([-1.0, -1.0, -1.0])


def test_pairwise_bin_ord_rosenthal(grouped_scores):
    """Test the Rosenthal correlation from Dunn's z values."""
    groups, scores = grouped_scores
    res = pairwise_bin_ord(groups, scores, es="rosenthal")

    assert list(res.columns) == ["cat. 1", "cat. 2", "Rosenthal Correlation"]
    assert len(res) == 3


def test_cohen_kappa():
    """Test kappa and the approximate standard error."""
    res = cohen_kappa(RATER1, RATER2, ase="approximate")

    # p0 = 0.75, pc = 0.5
    assert res["kappa"].iloc[0] == pytest.approx(0.5)
    assert res["ASE_0"].iloc[0] == pytest.approx(0.125**0.5)
    assert cohen_kappa(RATER1, RATER2)["kappa"].iloc[0] == pytest.approx(0.5)


def test_cohen_kappa_drops_unshared_categories():
    """Test that a category used by one rater only is dropped."""
    res = cohen_kappa(RATER1 + ["c"], RATER2 + ["a"])

    assert res["kappa"].iloc[0] == pytest.approx(0.5)


def test_scott_pi():
    """Test Scott's pi with equal marginals."""
    res = scott_pi(RATER1, RATER2)

    assert res["Scott pi"].iloc[0] == pytest.approx(0.5)
    assert res["n"].iloc[0] == 8


@pytest.mark.parametrize(
    "es, fr, to, ex1, expected",
    [
        (0.5, "cohend", "r", None, 0.5 / 4.25**0.5),
        (0.5, "yuleq", "or", None, 3.0),
        (0.6, "rb", "vda", None, 0.8),
        (0.25, "fei", "jbme", None, 0.0625),
        (0.5, "cramervgof", "cohenw", 5, 1.0),
        (0.5, "cle", "cohend", None, 0.0),
    ],
)
def test_convert_es(es, fr, to, ex1, expected):
    """Test a selection of conversions."""
    assert convert_es(es, fr, to, ex1) == pytest.approx(expected, abs=1e-12)


def test_convert_es_round_trip_d_cle():
    """Test that CLE to d undoes d to CLE."""
    cle = convert_es(0.8, "cohend", "cle")

    assert convert_es(cle, "cle", "cohend") == pytest.approx(0.8)


def test_convert_es_unknown():
    """Test that an unavailable conversion raises."""
    with pytest.raises(ValueError, match="No conversion"):
        convert_es(0.5, "cohend", "fei")
