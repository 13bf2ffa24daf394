"""Tests for multiple comparison adjustment."""

import pytest
import numpy as np

from stikpet.config import set_config
from stikpet.p_adjustments import p_adjust


def test_bonferroni():
    """Test Bonferroni adjustment multiplies by the number of tests."""
    adj = p_adjust([0.01, 0.02, 0.04], "bonferroni")

    assert adj == pytest.approx([0.03, 0.06, 0.12])


def test_bonferroni_capped_at_one():
    """Test that adjusted p-values never exceed 1."""
    adj = p_adjust([0.5, 0.9], "bonferroni")

    assert adj == pytest.approx([1.0, 1.0])


def test_holm():
    """Test Holm step-down adjustment."""
    # sorted: 0.01 * 3, max(0.03, 0.02 * 2), max(0.04, 0.04 * 1)
    adj = p_adjust([0.04, 0.01, 0.02], "holm")

    assert adj == pytest.approx([0.04, 0.03, 0.04])


def test_benjamini_hochberg():
    """Test Benjamini-Hochberg adjustment."""
    # p * m / rank = 0.03, 0.03, 0.04
    adj = p_adjust([0.01, 0.02, 0.04], "bh")

    assert adj == pytest.approx([0.03, 0.03, 0.04])


def test_none_returns_copy():
    """Test that no adjustment returns an unchanged copy."""
    p = np.array([0.01, 0.2])
    adj = p_adjust(p, "none")

    assert adj == pytest.approx(p)
    assert adj is not p


def test_hommel_original():
    """Test the original Hommel procedure."""
    # the largest non-rejected set has size 3, so all p-values are tripled
    adj = p_adjust([0.2, 0.5, 0.04], "hommel-original", alpha=0.05)

    assert adj == pytest.approx([0.6, 1.0, 0.12])


def test_hommel_original_all_rejected():
    """Test that p-values stay unchanged when every hypothesis is rejected."""
    adj = p_adjust([0.01, 0.02, 0.04], "hommel-original", alpha=0.05)

    assert adj == pytest.approx([0.01, 0.02, 0.04])


def test_default_method_from_config():
    """Test that the configured method is used by default."""
    set_config(p_adjust="holm")

    adj = p_adjust([0.04, 0.01, 0.02])

    assert adj == pytest.approx([0.04, 0.03, 0.04])


def test_unknown_method_raises():
    """Test that an unknown method raises ValueError."""
    with pytest.raises(ValueError, match="method must be one of"):
        p_adjust([0.01], "tukey")


def test_empty_input():
    """Test adjustment of an empty list."""
    assert len(p_adjust([], "holm")) == 0
