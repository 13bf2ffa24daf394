"""Tests for rank and ordinal correlation coefficients."""

import logging

import pytest

from stikpet.correlations import (
    goodman_kruskal_gamma,
    kendall_tau,
    rank_biserial_is,
    rank_biserial_os,
    somers_d,
    spearman_rho,
    stuart_tau,
)

# ten pairs, eight concordant and two discordant
X = [1, 2, 3, 4, 5]
Y = [2, 1, 4, 3, 5]


def test_goodman_kruskal_gamma():
    """Test gamma from concordant and discordant pairs."""
    res = goodman_kruskal_gamma(X, Y)

    assert res["gamma"].iloc[0] == pytest.approx(0.6)
    assert res["statistic"].iloc[0] > 0


def test_goodman_kruskal_gamma_ignores_ties():
    """Test that tied pairs do not count."""
    res = goodman_kruskal_gamma([1, 1, 2, 2, 3], [1, 2, 2, 3, 3])

    assert res["gamma"].iloc[0] == pytest.approx(1.0)


def test_goodman_kruskal_gamma_invalid_ase():
    """Test that an unknown standard error option raises."""
    with pytest.raises(ValueError):
        goodman_kruskal_gamma(X, Y, ase=2)


def test_kendall_tau_a_and_b_without_ties():
    """Test that tau-a and tau-b coincide without ties."""
    a = kendall_tau(X, Y, version="a")
    b = kendall_tau(X, Y, version="b")

    assert a["Kendall Tau-a"].iloc[0] == pytest.approx(0.6)
    assert b["Kendall Tau-b"].iloc[0] == pytest.approx(0.6)
    # 6 / sqrt(5 * 4 * 15 / 18)
    assert a["statistic"].iloc[0] == pytest.approx(6 / (50 / 3) ** 0.5)
    assert b["statistic"].iloc[0] == pytest.approx(6 / (50 / 3) ** 0.5)


def test_kendall_tau_exact():
    """Test the exact p-value for n = 5 with two discordant pairs."""
    res = kendall_tau(X, Y, test="kendall-exact")

    # at most two inversions: 1 + 4 + 9 of 120 permutations, two-sided
    assert res["p-value"].iloc[0] == pytest.approx(28 / 120)
    assert res["statistic"].iloc[0] == 8
    assert res["test"].iloc[0] == "Kendall exact"


def test_kendall_tau_exact_with_ties_falls_back(caplog):
    """Test that ties switch the exact test to the approximation."""
    with caplog.at_level(logging.WARNING):
        res = kendall_tau([1, 1, 2, 3], [1, 2, 3, 4], test="as71")

    assert res["test"].iloc[0] == "Kendall approximation"
    assert "Ties present" in caplog.text


def test_kendall_tau_invalid_options():
    """Test invalid version and test names."""
    with pytest.raises(ValueError):
        kendall_tau(X, Y, version="c")
    with pytest.raises(ValueError):
        kendall_tau(X, Y, test="guess")


@pytest.mark.parametrize("direction", ["rows", "columns", "both"])
def test_somers_d_without_ties(direction):
    """Test that every direction gives tau without ties."""
    res = somers_d(X, Y, direction=direction)

    assert res["d"].iloc[0] == pytest.approx(0.6)
    assert res["ASE_0"].iloc[0] > 0


def test_stuart_tau():
    """Test tau-c on a square table."""
    res = stuart_tau(X, Y)

    # (P - Q) / (n^2 (m - 1) / m) = 12 / 20
    assert res["tau"].iloc[0] == pytest.approx(0.6)


def test_spearman_rho_t_test():
    """Test rho and the t statistic."""
    res = spearman_rho(X, Y)

    # sum of squared rank differences is 4: 1 - 6 * 4 / 120
    assert res["rho"].iloc[0] == pytest.approx(0.8)
    assert res["statistic"].iloc[0] == pytest.approx(0.8 * (3 / 0.36) ** 0.5)
    assert res["df"].iloc[0] == 3


def test_spearman_rho_exact():
    """Test the exact permutation p-value."""
    res = spearman_rho(X, Y, test="exact")

    # D <= 4 for 1 + 4 + 3 of 120 permutations, two-sided
    assert res["p-value"].iloc[0] == pytest.approx(16 / 120)


def test_spearman_rho_coefficient_only():
    """Test that test="none" only reports rho."""
    res = spearman_rho(X, Y, test="none")

    assert list(res.columns) == ["rho"]


def test_rank_biserial_is_versions():
    """Test Glass and Cureton rank biserial with a tie between groups."""
    groups = ["a"] * 3 + ["b"] * 3
    scores = [1, 2, 3, 3, 4, 5]

    # ranks 1, 2, 3.5 and 3.5, 5, 6
    assert rank_biserial_is(groups, scores, version="glass") == pytest.approx(-8 / 9)
    assert rank_biserial_is(groups, scores, version="cureton") == pytest.approx(-1.0)


def test_rank_biserial_is_complete_separation():
    """Test both versions without ties."""
    groups = ["a", "a", "b", "b"]

    assert rank_biserial_is(groups, [1, 2, 3, 4], version="glass") == pytest.approx(-1.0)
    assert rank_biserial_is(groups, [1, 2, 3, 4]) == pytest.approx(-1.0)


def test_rank_biserial_os():
    """Test the one-sample rank biserial."""
    res = rank_biserial_os([1, 2, 3, 5], mu=2)

    # deviations -1, 1, 3 with ranks 1.5, 1.5, 3
    assert res["rb"].iloc[0] == pytest.approx(0.5)
    assert rank_biserial_os([1, 2, 3, 4, 5, 6])["rb"].iloc[0] == pytest.approx(0.0)
    assert rank_biserial_os([1, 2, 3, 4, 5, 6])["mu"].iloc[0] == pytest.approx(3.5)


def test_kendall_tau_as71_reports_s():
    """Test that the AS 71 statistic is S = n(n - 1)/2 * |tau| for one swapped pair."""
    res = kendall_tau([1, 2, 3, 4, 5], [1, 3, 2, 4, 5], test="as71")

    # 9 concordant and 1 discordant pair
    assert res["Kendall Tau-b"].iloc[0] == pytest.approx(0.8)
    assert res["statistic"].iloc[0] == pytest.approx(10 * res["Kendall Tau-b"].iloc[0])
    assert res["test"].iloc[0] == "exact with AS71 algorithm"
