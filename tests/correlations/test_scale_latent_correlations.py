"""Tests for Pearson, conversions to r and latent correlations."""

import numpy as np
import pytest

from stikpet.correlations import pearson, point_biserial, polychoric, rosenthal, tetrachoric

# 2x2 table a=30, b=10, c=10, d=30
BIN1 = [0] * 40 + [1] * 40
BIN2 = [0] * 30 + [1] * 10 + [0] * 10 + [1] * 30

# 2x2 table a=40, b=10, c=20, d=30
SKEW1 = [0] * 50 + [1] * 50
SKEW2 = [0] * 40 + [1] * 10 + [0] * 20 + [1] * 30


def test_pearson_t_test():
    """Test r and the t statistic."""
    res = pearson([1, 2, 3, 4, 5], [2, 4, 5, 4, 5])

    # sxy = 6, sxx = 10, syy = 6
    r = 6 / 60**0.5
    assert res["r"].iloc[0] == pytest.approx(r)
    assert res["statistic"].iloc[0] == pytest.approx(r * (3 / (1 - r**2)) ** 0.5)
    assert res["df"].iloc[0] == 3


def test_pearson_corrections_shrink():
    """Test that the adjusted r is smaller than r for a positive r."""
    x = [1, 2, 3, 4, 5, 6, 7, 8]
    y = [2, 1, 4, 3, 6, 5, 8, 7]
    r = pearson(x, y)["r"].iloc[0]

    for corr in ("wherry", "smith", "ezekiel"):
        assert pearson(x, y, corr=corr)["r"].iloc[0] < r


def test_pearson_z_test():
    """Test the Fisher z test."""
    res = pearson([1, 2, 3, 4, 5], [2, 4, 5, 4, 5], test="z")

    r = 6 / 60**0.5
    assert res["statistic"].iloc[0] == pytest.approx(np.arctanh(r) * 2**0.5)
    assert np.isnan(res["df"].iloc[0])


def test_pearson_invalid_options():
    """Test invalid correction and test."""
    with pytest.raises(ValueError):
        pearson([1, 2, 3], [1, 2, 3], corr="guess")
    with pytest.raises(ValueError):
        pearson([1, 2, 3], [1, 2, 3], test="f")


def test_point_biserial_and_rosenthal():
    """Test conversions of t and z to r."""
    assert point_biserial(2, 12) == pytest.approx(0.5)
    assert rosenthal(2, 16) == pytest.approx(0.5)


@pytest.mark.parametrize("method", ["divgi", "search", "kirk", "brown"])
def test_tetrachoric_median_splits(method):
    """Test the closed form for a symmetric table split at the medians."""
    # 30 / 80 = 1/4 + arcsin(r) / (2 pi) gives r = sin(pi / 4)
    assert tetrachoric(BIN1, BIN2, method=method) == pytest.approx(2**0.5 / 2, abs=1e-3)


def test_tetrachoric_methods_agree():
    """Test that the methods find the same correlation for unequal margins."""
    brown = tetrachoric(SKEW1, SKEW2, method="brown")

    assert brown > 0
    for method in ("divgi", "search", "kirk"):
        assert tetrachoric(SKEW1, SKEW2, method=method) == pytest.approx(brown, abs=1e-3)


def test_tetrachoric_needs_two_by_two():
    """Test that a larger table raises."""
    with pytest.raises(ValueError, match="2x2"):
        tetrachoric([0, 1, 2, 0], [0, 1, 1, 0])


def test_polychoric_equals_tetrachoric_on_two_by_two():
    """Test that the polychoric correlation of a 2x2 table is tetrachoric."""
    assert polychoric(BIN1, BIN2) == pytest.approx(2**0.5 / 2, abs=1e-3)
