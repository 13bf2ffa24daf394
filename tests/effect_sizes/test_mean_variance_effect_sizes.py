"""Tests for standardized mean differences and variance-explained measures."""

import pytest

from stikpet.effect_sizes import (
    cohen_d,
    cohen_d_os,
    cohen_d_ow,
    cohen_d_ps,
    cohen_f,
    cohen_u,
    epsilon_sq,
    epsilon_sq_kw,
    eta_sq,
    eta_sq_kw,
    eta_sq_mc,
    glass_delta,
    hedges_g_is,
    hedges_g_os,
    hedges_g_ps,
    kendall_w,
    omega_sq,
    rmsse,
)

# means 2, 5, 8; SSb = 54, SSw = 6, SSt = 60
GROUPS = ["a"] * 3 + ["b"] * 3 + ["c"] * 3
SCORES = [1, 2, 3, 4, 5, 6, 7, 8, 9]


def test_cohen_d_two_groups(grouped_scores):
    """Test Cohen's d with the pooled SD sqrt(SSw / n)."""
    groups, scores = grouped_scores

    # mean difference 5, SSw = 20 over n = 10
    assert cohen_d(groups, scores, categories=["a", "b"]) == pytest.approx(5 / 2**0.5)


def test_hedges_g_is_corrections(grouped_scores):
    """Test Hedges g without and with the small sample corrections."""
    groups, scores = grouped_scores
    g = -5 / 2.5**0.5

    plain = hedges_g_is(groups, scores)
    assert plain["g"].iloc[0] == pytest.approx(g)
    assert plain["version"].iloc[0] == "Cohen ds (Hedges g uncorrected)"
    assert hedges_g_is(groups, scores, corr="hedges")["g"].iloc[0] == pytest.approx(g * (1 - 3 / 23))
    # Gamma(4) / (Gamma(3.5) sqrt(4))
    assert hedges_g_is(groups, scores, corr="exact")["g"].iloc[0] == pytest.approx(g * 0.902703, rel=1e-5)


def test_hedges_g_is_invalid_correction(grouped_scores):
    """Test that an unknown correction raises."""
    groups, scores = grouped_scores
    with pytest.raises(ValueError):
        hedges_g_is(groups, scores, corr="guess")


def test_one_sample_measures():
    """Test one-sample Cohen d and Hedges g."""
    data = [1, 2, 3, 4, 5]

    assert cohen_d_os(data, mu=1) == pytest.approx(2 / 2.5**0.5)
    assert cohen_d_os(data) == pytest.approx(0.0)
    res = hedges_g_os(data, mu=1, appr="hedges")
    assert res["g"].iloc[0] == pytest.approx(2 / 2.5**0.5 * (1 - 3 / 15))
    assert res["version"].iloc[0] == "Hedges approximation"


def test_paired_measures():
    """Test paired Cohen d_z and Hedges g."""
    x = [1, 2, 3, 4]
    y = [2, 2, 4, 6]
    # differences -1, 0, -1, -2 with mean -1 and SD sqrt(2 / 3)
    dz = -1 / (2 / 3) ** 0.5

    assert cohen_d_ps(x, y, within=False) == pytest.approx(dz)
    res = hedges_g_ps(x, y, appr="hedges", within=False)
    assert res["g"].iloc[0] == pytest.approx(dz * (1 - 3 / 11))
    assert res["version"].iloc[0] == "Hedges approximation"


def test_glass_delta(grouped_scores):
    """Test Glass' delta with either group as control."""
    groups, scores = grouped_scores

    assert glass_delta(groups, scores) == pytest.approx(-5 / 2.5**0.5)
    assert glass_delta(groups, scores, control="a") == pytest.approx(-5 / 2.5**0.5)


def test_cohen_u():
    """Test the non-overlap measures at d = 0."""
    assert cohen_u(0) == pytest.approx(0.5)
    assert cohen_u(0, version="u2") == pytest.approx(0.5)
    assert cohen_u(0, version="u1") == pytest.approx(0.0)
    with pytest.raises(ValueError):
        cohen_u(0, version="u4")


def test_variance_explained():
    """Test eta, epsilon and omega squared."""
    assert eta_sq(GROUPS, SCORES) == pytest.approx(0.9)
    assert eta_sq(GROUPS, SCORES, use_ranks=True) == pytest.approx(0.9)
    assert epsilon_sq(GROUPS, SCORES) == pytest.approx(52 / 60)
    # (SSb - dfb MSw) / (SSt + MSw)
    assert omega_sq(GROUPS, SCORES) == pytest.approx(52 / 61)
    assert 0 < omega_sq(GROUPS, SCORES, version="hays2") < 1


def test_cohen_f_and_rmsse():
    """Test Cohen f, the one-way d and Steiger's Psi."""
    assert cohen_f(GROUPS, SCORES) == pytest.approx(3.0)
    assert cohen_d_ow(GROUPS, SCORES) == pytest.approx(6 / (6 / 9) ** 0.5)
    assert rmsse(GROUPS, SCORES) == pytest.approx(3.0)


def test_statistic_based_measures():
    """Test effect sizes computed from an omnibus statistic."""
    assert eta_sq_kw(10, 20, 3) == pytest.approx(8 / 17)
    assert epsilon_sq_kw(10, 21) == pytest.approx(0.5)
    assert eta_sq_mc(6, 10, 4) == pytest.approx(0.2)
    assert kendall_w(6, 10, 4) == pytest.approx(0.2)
