"""Tests for 2x2 table association measures."""

import math

import pytest

from stikpet.effect_sizes import (
    alroy_f,
    becker_clogg_r,
    bin_bin,
    bonett_price_r,
    bonett_price_y,
    camp_r,
    cole_c1,
    cole_c5,
    cole_c7,
    digby_h,
    edward_q,
    forbes,
    mcewen_michael,
    odds_ratio,
    pearson_q1,
    pearson_q4,
    pearson_q5,
    phi,
    yule_q,
    yule_r,
    yule_y,
)

# a=30, b=10, c=10, d=30
ROWS = ["x"] * 40 + ["y"] * 40
COLS = ["p"] * 30 + ["q"] * 10 + ["p"] * 10 + ["q"] * 30


def test_odds_ratio_with_test():
    """Test the odds ratio and the z-test on its log."""
    res = odds_ratio(ROWS, COLS)

    assert res["OR"].iloc[0] == pytest.approx(9.0)
    assert res["n"].iloc[0] == 80
    se = (2 / 30 + 2 / 10) ** 0.5
    assert res["statistic"].iloc[0] == pytest.approx(math.log(9) / se)


@pytest.mark.parametrize(
    "func, expected",
    [
        (yule_q, 0.8),
        (yule_y, 0.5),
        (phi, 0.5),
        (cole_c1, 0.5),
        (cole_c7, 0.5),
        (forbes, 1.5),
        (mcewen_michael, 0.8),
        (cole_c5, 2**0.5 * 800 / 3_200_000**0.5),
        (digby_h, (9**0.75 - 1) / (9**0.75 + 1)),
        (edward_q, (9 ** (math.pi / 4) - 1) / (9 ** (math.pi / 4) + 1)),
    ],
)
def test_named_measures(func, expected):
    """Test measures with a closed form for the symmetric table."""
    assert func(ROWS, COLS) == pytest.approx(expected)


@pytest.mark.parametrize("func", [yule_r, pearson_q1, pearson_q4, pearson_q5])
def test_tetrachoric_approximations(func):
    """Test the Pearson approximations that are exact for this table."""
    # the tetrachoric correlation of the table is sin(pi / 4)
    assert func(ROWS, COLS) == pytest.approx(2**0.5 / 2)


def test_pearson_q1_negative_association():
    """Test that Q1 is negative when bc > ad."""
    assert pearson_q1(ROWS, COLS[::-1]) == pytest.approx(-(2**0.5) / 2)


def test_bonett_price_r_version_1():
    """Test Bonett-Price with equal margins."""
    # c = 0.5, so cos(pi / (1 + 9^0.5))
    assert bonett_price_r(ROWS, COLS, version=1) == pytest.approx(2**0.5 / 2)


def test_camp_r_methods():
    """Test Camp's approximation with the Cureton table and phi = 1."""
    m = 0.25 * 2 * 0.6744897501960817 / 0.3989422804014327

    assert camp_r(ROWS, COLS) == pytest.approx(m / (1 + 0.637 * m**2) ** 0.5, rel=1e-6)
    assert camp_r(ROWS, COLS, method="camp1") == pytest.approx(m / (1 + m**2) ** 0.5, rel=1e-6)


@pytest.mark.parametrize(
    "method, expected",
    [
        ("jaccard", 0.6),
        ("tanimoto", 0.6),
        ("sokal-michener", 0.75),
        ("hamann", 0.5),
        ("russell-rao", 30 / 80),
        ("cole-c4", 0.8),
    ],
)
def test_bin_bin_methods(method, expected):
    """Test a selection of similarity measures and aliases."""
    assert bin_bin(ROWS, COLS, method=method) == pytest.approx(expected)


def test_bin_bin_unknown_method():
    """Test that an unknown measure raises."""
    with pytest.raises(ValueError, match="Unknown 2x2 measure"):
        bin_bin(ROWS, COLS, method="guess")


def test_table_must_be_two_by_two():
    """Test that more than two categories raise."""
    with pytest.raises(ValueError, match="2x2"):
        yule_q(["x", "y", "z"], ["p", "q", "p"])


def test_alroy_f():
    """Test Alroy's adjustment with a + b + c = 50."""
    na = 50 + math.sqrt(50)
    expected = 30 * na / (30 * na + 1.5 * 100)

    assert alroy_f(ROWS, COLS) == pytest.approx(expected)
    assert bin_bin(ROWS, COLS, method="alroy") == pytest.approx(expected)


def test_bonett_price_y():
    """Test that balanced margins give the exponent 1/2: (30.1 - 10.1) / (30.1 + 10.1)."""
    assert bonett_price_y(ROWS, COLS) == pytest.approx(20 / 40.2)


def test_becker_clogg_r_versions():
    """Test both versions with median splits, where delta = (-4) * (-4) = 16."""
    phi_bc = math.log(9) / 16
    g = math.exp(12.4 * phi_bc - 24.6 * phi_bc**3)
    assert becker_clogg_r(ROWS, COLS) == pytest.approx((g - 1) / (g + 1))

    w = 9 ** (13.3 / 16)
    assert becker_clogg_r(ROWS, COLS, version=2) == pytest.approx((w - 1) / (w + 1))

    with pytest.raises(ValueError, match="version must be"):
        becker_clogg_r(ROWS, COLS, version=3)
