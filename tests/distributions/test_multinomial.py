"""Tests for the multinomial distribution helpers."""

import pytest

from stikpet.distributions import find_combinations, multinomial_cdf, multinomial_pmf


@pytest.mark.parametrize("method", ["loggamma", "gamma", "factorial", "mprob"])
def test_multinomial_pmf_methods(method):
    """Test every calculation method on small counts."""
    assert multinomial_pmf([1, 1], [0.5, 0.5], method) == pytest.approx(0.5)
    # 3! / (2! 0! 1!) / 3^3
    assert multinomial_pmf([2, 0, 1], [1 / 3] * 3, method) == pytest.approx(1 / 9)


def test_multinomial_pmf_unequal_probabilities():
    """Test the pmf with unequal probabilities."""
    # 3 * 0.2 * 0.8^2
    assert multinomial_pmf([1, 2], [0.2, 0.8]) == pytest.approx(0.384)


def test_multinomial_pmf_invalid_method():
    """Test that an unknown method raises."""
    with pytest.raises(ValueError):
        multinomial_pmf([1, 1], [0.5, 0.5], method="guess")


def test_find_combinations():
    """Test compositions of n over k categories."""
    assert find_combinations(2, 2) == [[0, 2], [1, 1], [2, 0]]
    assert len(find_combinations(3, 3)) == 10


def test_multinomial_cdf():
    """Test the exact goodness-of-fit p-value."""
    # outcomes (0,2), (1,1), (2,0) with probabilities .25, .5, .25
    assert multinomial_cdf([2, 0], [0.5, 0.5]) == pytest.approx(0.5)
    assert multinomial_cdf([1, 1], [0.5, 0.5]) == pytest.approx(1.0)
