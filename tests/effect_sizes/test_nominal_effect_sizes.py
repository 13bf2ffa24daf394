"""Tests for nominal effect sizes."""

import pandas as pd
import pytest

from stikpet.effect_sizes import (
    alt_ratio,
    bag_s,
    cohen_g,
    cohen_h,
    cohen_h_os,
    cohen_w,
    cont_coeff,
    cramer_v_gof,
    cramer_v_ind,
    fei,
    goodman_kruskal_lambda,
    goodman_kruskal_tau,
    jbm_e,
    jbm_r,
    pairwise_bin,
    post_hoc_gof,
    theil_u,
)

BINARY = ["a"] * 7 + ["b"] * 3

# table [[8, 2], [2, 8]]
ROWS = ["x"] * 10 + ["y"] * 10
COLS = ["p"] * 8 + ["q"] * 2 + ["p"] * 2 + ["q"] * 8


def test_chi_square_based_measures():
    """Test Cohen w, Cramér V and the contingency coefficient."""
    assert cohen_w(20, 80) == pytest.approx(0.5)
    assert cramer_v_gof(10, 20, 3) == pytest.approx(0.5)
    assert cramer_v_ind(10, 40, 2, 3) == pytest.approx(0.5)
    assert cont_coeff(20, 80) == pytest.approx(0.2**0.5)
    assert cont_coeff(20, 80, adj="sakoda", r=2, c=2) == pytest.approx(0.4**0.5)


def test_cramer_v_bergsma_shrinks():
    """Test that the bias correction lowers V."""
    assert cramer_v_gof(10, 20, 3, bergsma=True) < cramer_v_gof(10, 20, 3)
    assert cramer_v_ind(10, 40, 2, 3, cc="bergsma") < cramer_v_ind(10, 40, 2, 3)


def test_fei_and_jbm_e_agree():
    """Test that Fei is the square root of JBM E."""
    # pe = 5 / 20, so Fei = sqrt(5 / (20 * 3))
    assert fei(5, 20, 5) == pytest.approx((1 / 12) ** 0.5)
    assert jbm_e(5, 20, 5) == pytest.approx(1 / 12)


def test_jbm_r():
    """Test JBM R for identical and fully separated measurements."""
    same = pd.DataFrame({"m1": [1, 1, 0, 0], "m2": [1, 1, 0, 0]})
    split = pd.DataFrame({"m1": [1, 1, 1, 1], "m2": [0, 0, 0, 0]})

    assert jbm_r(same) == pytest.approx(0.0)
    assert jbm_r(split) == pytest.approx(1.0)


def test_proportion_measures():
    """Test Cohen g, h and the alternative ratio."""
    assert cohen_g(BINARY) == pytest.approx(0.2)
    assert cohen_h(0.5, 0.5) == 0
    assert cohen_h(1, 0) == pytest.approx(3.141592653589793)
    assert cohen_h_os(BINARY) == pytest.approx(cohen_h(0.7, 0.5))

    ar = alt_ratio(BINARY)
    assert ar["AR1"].iloc[0] == pytest.approx(1.4)
    assert ar["AR2"].iloc[0] == pytest.approx(0.6)


def test_goodman_kruskal_lambda():
    """Test lambda on a table with tied column totals."""
    res = goodman_kruskal_lambda(ROWS, COLS)

    # (8 + 8 - 10) / (20 - 10) for every version
    assert res["dependent"].tolist() == ["symmetric", "field1", "field2"]
    assert res["value"].tolist() == pytest.approx([0.6, 0.6, 0.6])
    assert (res["n"] == 20).all()


def test_goodman_kruskal_lambda_invalid_ties():
    """Test that an unknown ties option raises."""
    with pytest.raises(ValueError):
        goodman_kruskal_lambda(ROWS, COLS, ties="last")


def test_goodman_kruskal_tau_perfect():
    """Test tau for a diagonal table."""
    res = goodman_kruskal_tau(["x"] * 10 + ["y"] * 10, ["p"] * 10 + ["q"] * 10)

    assert res["tau"].iloc[0] == pytest.approx(1.0)
    assert res["df"].iloc[0] == 1


def test_theil_u():
    """Test the uncertainty coefficient of a symmetric table."""
    num = 2 * 0.6931471805599453 + 0.8 * -0.916290731874155 + 0.2 * -2.302585092994046
    for direction in ("rows", "columns"):
        res = theil_u(ROWS, COLS, direction=direction)
        assert res["U"].iloc[0] == pytest.approx(num / 0.6931471805599453, rel=1e-6)
    assert theil_u(ROWS, COLS)["U"].iloc[0] == pytest.approx(num / 0.6931471805599453, rel=1e-6)


def test_bag_s():
    """Test Bennett, Alpert and Goldstein's S."""
    r1 = ["a", "a", "a", "b", "b", "b", "a", "b"]
    r2 = ["a", "a", "b", "b", "b", "a", "a", "b"]

    # p0 = 0.75 with two categories
    assert bag_s(r1, r2) == pytest.approx(0.5)


def test_pairwise_bin_cohen_g(nominal_data):
    """Test Cohen g for every pair of categories."""
    res = pairwise_bin(nominal_data)

    assert res["category 1"].tolist() == ["A", "A", "B"]
    assert res["category 2"].tolist() == ["B", "C", "C"]
    assert res["Cohen g"].tolist() == pytest.approx([10 / 16 - 0.5, 10 / 14 - 0.5, 0.1])


def test_pairwise_bin_alternative_ratio(nominal_data):
    """Test the alternative ratio against expected counts."""
    res = pairwise_bin(nominal_data, exp_counts={"A": 1, "B": 1, "C": 2}, es="ar")

    # A against C: observed 10 / 14, expected 1 / 3
    assert res.loc[1, "AR 1"] == pytest.approx((10 / 14) * 3)


def test_post_hoc_gof_auto_picks_by_test():
    """Test the automatic choice of effect size."""
    exact = pd.DataFrame({
        "category 1": ["A"], "category 2": ["B"], "n1": [10], "n2": [6],
        "obs. prop. 1": [0.625], "exp. prop. 1": [0.5], "test": ["one-sample binomial"],
    })
    z = pd.DataFrame({
        "category": ["A", "B"], "obs. count": [12, 8], "exp. count": [10, 10],
        "statistic": [1.0, -1.0], "test": ["adjusted residuals", "adjusted residuals"],
    })

    res = post_hoc_gof(exact)
    assert list(res.columns) == ["category 1", "category 2", "Cohen h"]
    assert res["Cohen h"].iloc[0] == pytest.approx(cohen_h(0.625, 0.5))

    res = post_hoc_gof(z)
    # 1 / sqrt(20)
    assert res["Rosenthal correlation"].tolist() == pytest.approx([20**-0.5, -(20**-0.5)])


def test_post_hoc_gof_chi_square():
    """Test Cramér V and Fei after pairwise chi-square tests."""
    chi = pd.DataFrame({
        "category 1": ["A"], "category 2": ["B"], "n1": [12], "n2": [8],
        "obs. prop. 1": [0.6], "exp. prop. 1": [0.5], "statistic": [0.8], "minExp": [10.0],
        "test": ["Pearson chi-square test of goodness-of-fit"],
    })

    assert post_hoc_gof(chi)["Cramér V"].iloc[0] == pytest.approx(0.2)
    # 0.8 * 10 / (20 * 10), then the square root
    assert post_hoc_gof(chi, es="fei")["Fei"].iloc[0] == pytest.approx(0.2)


def test_post_hoc_gof_rejects_impossible_combination():
    """Test that a statistic-based effect size after an exact test raises."""
    exact = pd.DataFrame({
        "category 1": ["A"], "category 2": ["B"], "n1": [10], "n2": [6],
        "obs. prop. 1": [0.625], "exp. prop. 1": [0.5], "test": ["one-sample binomial"],
    })

    with pytest.raises(ValueError, match="not possible"):
        post_hoc_gof(exact, es="rosenthal")
    with pytest.raises(ValueError, match="not possible"):
        post_hoc_gof(exact, es="cramerv")
