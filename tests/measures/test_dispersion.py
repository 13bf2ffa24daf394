"""Tests for measures of dispersion and qualitative variation."""

import logging

import pytest

from stikpet.measures import consensus, qualitative_variation, variation, variation_ratio

SCORES = [2, 4, 4, 4, 5, 5, 7, 9]


@pytest.mark.parametrize(
    "measure, expected",
    [
        ("vr", 0.5),
        ("bpi", 0.5),
        ("m1", 0.62),
        ("m2", 0.93),
        ("varnc", 0.93),
        ("d1", 132 / 380),
    ],
)
def test_qualitative_variation_values(nominal_data, measure, expected):
    """Test qualitative variation for counts 10, 6, 4."""
    res = qualitative_variation(nominal_data, measure=measure)

    assert res["value"].iloc[0] == pytest.approx(expected)


def test_qualitative_variation_hrel_equals_pielou(nominal_data):
    """Test that HREL and Pielou J coincide."""
    hrel = qualitative_variation(nominal_data, measure="hrel")["value"].iloc[0]
    j = qualitative_variation(nominal_data, measure="j")["value"].iloc[0]

    assert hrel == pytest.approx(j)
    assert hrel == pytest.approx(0.93725, abs=1e-4)


def test_qualitative_variation_labels(nominal_data):
    """Test the measure label and source."""
    res = qualitative_variation(nominal_data, measure="m1")

    assert res["measure"].iloc[0] == "Gibbs-Poston M1"
    assert res["source"].iloc[0].startswith("(Gibbs & Poston")


def test_qualitative_variation_invalid_measure(nominal_data):
    """Test that an unknown measure raises."""
    with pytest.raises(ValueError):
        qualitative_variation(nominal_data, measure="xyz")


def test_variation_standard_deviation():
    """Test sample and population standard deviation."""
    sample = variation(SCORES)
    population = variation(SCORES, ddof=0)

    # squared deviations from the mean 5 sum to 32
    assert sample["value"].iloc[0] == pytest.approx((32 / 7) ** 0.5)
    assert sample["measure"].iloc[0] == "standard deviation (sample)"
    assert population["value"].iloc[0] == pytest.approx(2.0)


@pytest.mark.parametrize(
    "measure, expected",
    [
        ("var", 32 / 7),
        ("mad", 1.5),
        ("madmed", 1.5),
        ("medad", 0.5),
        ("cv", (32 / 7) ** 0.5 / 5),
    ],
)
def test_variation_measures(measure, expected):
    """Test the deviation-based measures."""
    assert variation(SCORES, measure=measure)["value"].iloc[0] == pytest.approx(expected)


def test_variation_sum_of_deviations():
    """Test the sum of squared and absolute deviations."""
    assert variation(SCORES, measure="ss")["value"].iloc[0] == pytest.approx(32)
    assert variation(SCORES, measure="ss", azs="abs")["value"].iloc[0] == pytest.approx(12)
    assert variation(SCORES, measure="ss", center=0)["value"].iloc[0] == pytest.approx(232)


def test_variation_quartile_coefficient():
    """Test the quartile coefficient of dispersion on 1..8."""
    # cdf quartiles 2.5 and 6.5
    assert variation(range(1, 9), measure="qcd")["value"].iloc[0] == pytest.approx(4 / 9)


def test_variation_ratio(nominal_data, caplog):
    """Test Freeman's ratio and the no-mode case."""
    assert variation_ratio(nominal_data) == pytest.approx(0.5)

    with caplog.at_level(logging.WARNING):
        assert variation_ratio(["a", "b"]) is None
    assert "No mode" in caplog.text


def test_consensus_extremes():
    """Test full consensus and an even split over the extremes."""
    levels = ["a", "b", "c"]

    assert consensus(["a", "a"], levels=levels) == pytest.approx(1.0)
    assert consensus(["a", "c"], levels=levels) == pytest.approx(0.0)
