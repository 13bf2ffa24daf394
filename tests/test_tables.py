"""Tests for cross tables, frequency tables and bin rules."""

import pytest
import numpy as np

from stikpet.tables import tab_cross, tab_frequency, tab_frequency_bins, tab_nbins

ROWS = ["a", "a", "b", "b", "b", None]
COLS = ["x", "y", "x", "x", "y", "x"]


def test_tab_cross_counts():
    """Test counts of a cross table, dropping incomplete pairs."""
    ct = tab_cross(ROWS, COLS)

    assert ct.loc["a", "x"] == 1
    assert ct.loc["b", "x"] == 2
    assert ct.to_numpy().sum() == 5


def test_tab_cross_order_fills_zero():
    """Test that listed but unseen categories get zero counts."""
    ct = tab_cross(ROWS, COLS, order1=["b", "a", "c"], order2=["y", "x"])

    assert ct.index.tolist() == ["b", "a", "c"]
    assert ct.columns.tolist() == ["y", "x"]
    assert ct.loc["c"].tolist() == [0, 0]


def test_tab_cross_totals():
    """Test the Total row and column."""
    ct = tab_cross(ROWS, COLS, totals="include")

    assert ct.loc["Total"].tolist() == [3, 2, 5]
    assert ct["Total"].tolist() == [2, 3, 5]


def test_tab_cross_row_percent():
    """Test row percentages."""
    ct = tab_cross(ROWS, COLS, percent="row")

    assert ct.loc["a"].tolist() == pytest.approx([50, 50])
    assert ct.loc["b"].tolist() == pytest.approx([200 / 3, 100 / 3])


def test_tab_cross_invalid_option():
    """Test that unknown options raise."""
    with pytest.raises(ValueError):
        tab_cross(ROWS, COLS, percent="cell")
    with pytest.raises(ValueError):
        tab_cross(ROWS, COLS, totals="maybe")


def test_tab_frequency_with_missing():
    """Test frequencies and percentages with a missing row."""
    table = tab_frequency(["a", "b", "b", None])

    assert table.loc["a", "Frequency"] == 1
    assert table.loc["b", "Percent"] == pytest.approx(50)
    assert table.loc["a", "Valid Percent"] == pytest.approx(100 / 3)
    assert table.loc["b", "Cumulative Percent"] == pytest.approx(100)
    assert table.loc["missing", "Frequency"] == 1
    assert np.isnan(table.loc["missing", "Valid Percent"])


def test_tab_nbins_simple_rules():
    """Test the closed-form bin rules."""
    assert tab_nbins(list(range(16)), method="sturges") == 5
    assert tab_nbins(list(range(10)), method="src") == 4


def test_tab_nbins_search_methods_return_positive():
    """Test that the search methods return a usable number of bins."""
    data = [1, 2, 2, 3, 3, 3, 4, 4, 5, 7, 8, 9, 12, 15]
    for method in ("shinshim", "stone", "knuth"):
        k = tab_nbins(data, method=method)
        assert k >= 2


def test_tab_nbins_invalid_method():
    """Test that an unknown method raises."""
    with pytest.raises(ValueError, match="method must be one of"):
        tab_nbins([1, 2, 3], method="guess")


def test_tab_frequency_bins_explicit():
    """Test counting with explicit bins including the lower bound."""
    table = tab_frequency_bins([1, 2, 2, 3, 4], bins=[(0, 2), (2, 4), (4, 6)])

    assert table["frequency"].tolist() == [1, 3, 1]
    assert table["frequency density"].tolist() == pytest.approx([0.5, 1.5, 0.5])
