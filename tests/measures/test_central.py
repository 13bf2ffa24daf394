"""Tests for measures of central tendency."""

import numpy as np
import pytest

from stikpet.measures import hodges_lehmann_os, mean, median, mode, mode_bin

SKEWED = [1, 2, 3, 4, 100]


def test_mean_arithmetic():
    """Test the plain arithmetic mean."""
    assert mean(range(1, 11)) == pytest.approx(5.5)


def test_mean_trimmed_and_winsorized():
    """Test trimming and winsorizing one score per side."""
    # trim_prop 0.4 of n = 5 removes one score at each end
    assert mean(SKEWED, version="trimmed", trim_prop=0.4) == pytest.approx(3.0)
    # winsorized scores: 2, 2, 3, 4, 4
    assert mean(SKEWED, version="winsorized", trim_prop=0.4) == pytest.approx(3.0)


@pytest.mark.parametrize(
    "version, data, expected",
    [
        ("olympic", SKEWED, 3.0),
        ("midrange", SKEWED, 50.5),
        ("geometric", [1, 2, 4], 2.0),
        ("harmonic", [1, 2, 4], 3 / 1.75),
    ],
)
def test_mean_versions(version, data, expected):
    """Test the other mean versions."""
    assert mean(data, version=version) == pytest.approx(expected)


def test_mean_decile():
    """Test the decile mean on 1..10."""
    assert mean(range(1, 11), version="decile") == pytest.approx(5.0)


def test_mean_invalid_version():
    """Test that an unknown version raises."""
    with pytest.raises(ValueError, match="version must be one of"):
        mean([1, 2], version="median")


def test_median_numeric_tie_breakers():
    """Test the even-n tie breakers."""
    assert median([1, 3, 2, 4]) == 2.5
    assert median([1, 3, 2, 4], tie_breaker="low") == 2.0
    assert median([1, 3, 2, 4], tie_breaker="high") == 3.0


def test_median_ordinal_labels():
    """Test median labels for ordinal data."""
    levels = ["a", "b", "c"]

    assert median(["a", "b", "c"], levels=levels) == "b"
    assert median(["a", "b"], levels=levels) == "between a and b"


def test_mode_single_and_none():
    """Test a unique mode and data without a mode."""
    res = mode(["a", "b", "b", None])

    assert res["mode"].tolist() == ["b"]
    assert res["mode freq."].tolist() == [2]

    assert np.isnan(mode(["a", "b"])["mode"].iloc[0])
    assert mode(["a", "b"], all_eq="all")["mode"].tolist() == ["a", "b"]


def test_mode_bin_values():
    """Test the modal bin by frequency density."""
    data = [1, 2, 2, 3, 6]
    bins = [(0, 2), (2, 4), (4, 8)]

    # densities 0.5, 1.5, 0.25
    res = mode_bin(data, bins)
    assert res["mode"].tolist() == ["2 < 4"]
    assert res["mode fd."].iloc[0] == pytest.approx(1.5)

    assert mode_bin(data, bins, value="midpoint")["mode"].iloc[0] == pytest.approx(3.0)
    # 2 + 1 / (1 + 1.25) * 2
    assert mode_bin(data, bins, value="quadratic")["mode"].iloc[0] == pytest.approx(2 + 2 / 2.25)


def test_hodges_lehmann_os():
    """Test the median of the Walsh averages."""
    # Walsh averages: 1, 1.5, 2, 5, 5.5, 9
    assert hodges_lehmann_os([1, 2, 9]) == pytest.approx(3.5)
