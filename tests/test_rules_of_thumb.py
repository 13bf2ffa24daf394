"""Tests for the rules of thumb classifiers."""

import pytest
import pandas as pd

from stikpet.rules_of_thumb import (
    thumb_cle,
    thumb_cliff_delta,
    thumb_cohen_d,
    thumb_cohen_f,
    thumb_cohen_g,
    thumb_cohen_h,
    thumb_cohen_w,
    thumb_cramer_v,
    thumb_gk_gamma,
    thumb_kaiser_b,
    thumb_odds_ratio,
    thumb_pearson_r,
    thumb_point_biserial,
    thumb_post_hoc_gof,
    thumb_rank_biserial,
    thumb_somers_d,
    thumb_vda,
    thumb_yule_q,
)


def test_cohen_d_bounds_are_inclusive_below():
    """A value on a boundary belongs to the higher class."""
    assert thumb_cohen_d(0.5)["classification"].iloc[0] == "medium"
    assert thumb_cohen_d(0.5, qual="cohen")["classification"].iloc[0] == "medium"
    assert thumb_cohen_d(0.19, qual="cohen")["classification"].iloc[0] == "negligible"


def test_cohen_d_ignores_sign():
    """Negative values are classified by their magnitude."""
    res = thumb_cohen_d(-0.9, qual="cohen")
    assert res["classification"].iloc[0] == "large"
    assert res["reference"].iloc[0] == "Cohen (1988, p. 40)"


def test_unknown_rule_raises():
    """Unknown rule names give a ValueError."""
    with pytest.raises(ValueError, match="qual must be one of"):
        thumb_cohen_d(0.3, qual="nobody")


def test_odds_ratio_below_one_is_inverted():
    """An odds ratio of 0.25 is classified as 4."""
    res = thumb_odds_ratio(0.25)
    assert res["classification"].iloc[0] == "moderate"
    assert res["classification"].iloc[0] == thumb_odds_ratio(4)["classification"].iloc[0]


def test_pearson_r_rules():
    """Bartz is the default rule."""
    assert thumb_pearson_r(-0.45)["classification"].iloc[0] == "moderate"
    assert thumb_pearson_r(0.45, qual="cohen")["classification"].iloc[0] == "medium"
    # the three aliases share one rule
    refs = {thumb_pearson_r(0.15, qual=q)["reference"].iloc[0] for q in ("brydges", "gignac", "hemphill")}
    assert len(refs) == 1


def test_rank_biserial_direct_and_converted():
    """rb = 0.2 is small directly and via d = sqrt(2) * ppf(0.6) = 0.358."""
    assert thumb_rank_biserial(0.2)["classification"].iloc[0] == "small"
    res = thumb_rank_biserial(0.2, qual="cohen-conv")
    assert res["classification"].iloc[0] == "small"
    assert res["reference"].iloc[0] == "Cohen (1988, p. 40)"


def test_vda_distance_from_half():
    """A = 0.9 is 0.4 away from 0.5."""
    assert thumb_vda(0.9)["classification"].iloc[0] == "large"
    assert thumb_vda(0.1)["classification"].iloc[0] == "large"
    assert thumb_vda(0.52)["classification"].iloc[0] == "negligible"


def test_cle_conversions():
    """A CLE of 0.5 is negligible on every route."""
    assert thumb_cle(0.5)["classification"].iloc[0] == "negligible"
    assert thumb_cle(0.5, qual="cohen", convert="rb")["classification"].iloc[0] == "negligible"
    assert thumb_cle(0.5, qual="cohen", convert="cohen_d")["classification"].iloc[0] == "negligible"
    with pytest.raises(ValueError, match="convert must be"):
        thumb_cle(0.5, convert="sideways")


def test_yule_q_and_cramer_v():
    """Labels come from the selected rule."""
    yq = thumb_yule_q(0.5)
    assert yq["classification"].iloc[0] == "substantial"
    assert yq["reference"].iloc[0] == "Glen (n.d.)"
    assert thumb_cramer_v(0.35)["classification"].iloc[0] == "moderate"
    assert thumb_cramer_v(0.35, qual="akoglu")["classification"].iloc[0] == "very strong"


def test_post_hoc_gof_cohen_w():
    """Each row gets its own classification."""
    es = pd.DataFrame({"category": ["A", "B"], "Cohen w": [0.05, 0.35]})
    res = thumb_post_hoc_gof(es)
    assert res["classification"].to_list() == ["negligible", "medium"]
    assert "classification" not in es.columns


def test_post_hoc_gof_converted_to_cramer_v():
    """With two categories Cramér V equals Cohen w."""
    es = pd.DataFrame({"category": ["A", "B"], "Cohen w": [0.05, 0.35]})
    res = thumb_post_hoc_gof(es, convert=True)
    assert res["Cohen w to Cramér V"].to_list() == pytest.approx([0.05, 0.35])
    assert res["classification"].to_list() == ["negligible", "moderate"]


def test_post_hoc_gof_jbme():
    """JBM-E 0.25 with minimum proportion 0.25 gives w = sqrt(0.75)."""
    es = pd.DataFrame({"category": ["A", "B"], "Johnston-Berry-Mielke E": [0.25, 0.25]})
    ph = pd.DataFrame({"obs. count": [10, 10], "minExp": [5.0, 5.0]})
    res = thumb_post_hoc_gof(es, ph_results=ph)
    assert res["JBM-E to Cohen w"].to_list() == pytest.approx([0.75**0.5] * 2)
    assert res["classification"].to_list() == ["large", "large"]
    with pytest.raises(ValueError, match="post-hoc results"):
        thumb_post_hoc_gof(es)


def test_post_hoc_gof_without_rules():
    """The alternative ratio has no rules of thumb."""
    es = pd.DataFrame({"category": ["A"], "alternative ratio": [1.2]})
    res = thumb_post_hoc_gof(es)
    assert res["classification"].iloc[0] == "no rules-of-thumb available"


def test_post_hoc_gof_unknown_column():
    """A frame without an effect size column is rejected."""
    with pytest.raises(ValueError, match="No known effect size column"):
        thumb_post_hoc_gof(pd.DataFrame({"x": [1.0]}))


@pytest.mark.parametrize(
    "thumb, value, qual, label, reference",
    [
        (thumb_cliff_delta, 0.4, "romano", "medium", "Romano et al. (2006, p. 14)"),
        (thumb_cliff_delta, -0.43, "metsamuuronen", "large", "Metsämuuronen (2023, p. 17)"),
        (thumb_cohen_f, 0.3, "cohen", "medium", "Cohen (1988, pp. 285-287)"),
        (thumb_cohen_g, 0.05, "cohen", "small", "Cohen (1988, pp. 147-149)"),
        (thumb_cohen_h, 0.1, "cohen", "negligible", "Cohen (1988, p. 198)"),
        (thumb_cohen_w, 0.5, "cohen", "large", "Cohen (1988, p. 227)"),
        (thumb_gk_gamma, 0.65, "blaikie", "strong", "Blaikie (2003, p. 100)"),
        (thumb_gk_gamma, 0.2, "rea-parker", "low", "Rea and Parker (2014, p. 229)"),
        (thumb_gk_gamma, 0.9, "metsamuuronen", "huge", "Metsämuuronen (2023, p. 17)"),
        (thumb_kaiser_b, 0.85, "kaiser", "fair", "Kaiser (1968, p. 212)"),
        (thumb_kaiser_b, 0.5, "kaiser", "terrible", "Kaiser (1968, p. 212)"),
        (thumb_point_biserial, 0.3, "cohen", "medium", "Cohen (1988, p. 82)"),
        (thumb_somers_d, -0.6, "metsamuuronen", "very large", "Metsämuuronen (2023, p. 17)"),
    ],
)
def test_single_rule_classifiers(thumb, value, qual, label, reference):
    """Each classifier looks up the magnitude in its own table."""
    res = thumb(value, qual=qual)
    assert res["classification"].iloc[0] == label
    assert res["reference"].iloc[0] == reference


@pytest.mark.parametrize(
    "thumb",
    [thumb_cliff_delta, thumb_cohen_f, thumb_cohen_g, thumb_cohen_h, thumb_cohen_w,
     thumb_gk_gamma, thumb_kaiser_b, thumb_point_biserial, thumb_somers_d],
)
def test_single_rule_classifiers_reject_unknown_rule(thumb):
    """Unknown rule names give a ValueError."""
    with pytest.raises(ValueError, match="qual must be one of"):
        thumb(0.3, qual="nobody")
