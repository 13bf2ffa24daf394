"""Tests for the Kendall and Spearman null distribution helpers."""

import pytest

from stikpet.config import set_config
from stikpet.helpers.kendall import as71, kendall_counts, kendall_exact_pvalue, tau_permutation_pvalue
from stikpet.helpers.permutations import permutation_chunks, permutations
from stikpet.helpers.spearman import as89, spearman_permutation_pvalue


def test_kendall_counts_small_n():
    """Test the Mahonian numbers for n = 3 and n = 4."""
    assert kendall_counts(3) == [1, 2, 2, 1]
    assert kendall_counts(4) == [1, 3, 5, 6, 5, 3, 1]
    assert kendall_counts(4, c_max=2) == [1, 3, 5]


def test_kendall_exact_pvalue():
    """Test the two-sided exact p-value."""
    # only the identity has zero discordant pairs: 2 * 1/24
    assert kendall_exact_pvalue(4, 0) == pytest.approx(1 / 12)
    assert kendall_exact_pvalue(4, 3) == 1.0


def test_as71_exact_region():
    """Test AS 71 for small n where frequencies are exact."""
    assert as71(3, 3) == pytest.approx(1 / 6)
    assert as71(6, 4) == pytest.approx(1 / 24)


def test_as71_edgeworth_region():
    """Test AS 71 for larger n returns a proper tail probability."""
    p_small = as71(30, 12)
    p_large = as71(10, 12)

    assert 0 < p_small < p_large < 1


def test_permutations_order():
    """Test lexicographic permutations of 1..n."""
    perms = permutations(3)

    assert perms.shape == (6, 3)
    assert perms[0].tolist() == [1, 2, 3]
    assert perms[-1].tolist() == [3, 2, 1]


def test_permutation_chunks_cover_all():
    """Test that chunks together hold every permutation."""
    blocks = list(permutation_chunks(4, chunk_size=7))

    assert sum(len(b) for b in blocks) == 24
    assert len(blocks) == 4


def test_as89_exact_enumeration():
    """Test AS 89 against enumeration for n = 3."""
    # D over the six permutations: 0, 2, 2, 6, 6, 8
    assert as89(3, 8) == pytest.approx(1 / 6)
    assert as89(3, 6) == pytest.approx(0.5)
    assert as89(3, 0) == 1.0
    assert as89(3, 9) == 0.0


def test_tau_permutation_pvalue():
    """Test the Kendall permutation p-value."""
    assert tau_permutation_pvalue([1, 2, 3], [1, 2, 3]) == 0
    assert tau_permutation_pvalue([3, 2, 1], [1, 2, 3]) == pytest.approx(5 / 6)


def test_spearman_permutation_pvalue():
    """Test the Spearman permutation p-value."""
    assert spearman_permutation_pvalue([1, 2, 3], [1, 2, 3]) == 0
    assert spearman_permutation_pvalue([3, 2, 1], [1, 2, 3]) == 1.0


def test_permutation_tests_respect_exact_max_n():
    """Test that large samples are refused."""
    set_config(exact_max_n=4)
    with pytest.raises(ValueError, match="n <= 4"):
        tau_permutation_pvalue(range(5), range(5))
    with pytest.raises(ValueError, match="n <= 4"):
        spearman_permutation_pvalue(range(5), range(5))
