"""Tests for the package configuration."""

import pytest

from stikpet.config import StikpetConfig, get_config, reset_config, set_config


def test_defaults():
    """Test the default configuration values."""
    cfg = get_config()

    assert cfg.alpha == 0.05
    assert cfg.p_adjust == "bonferroni"
    assert cfg.n_iter == 1000
    assert cfg.max_iter == 500
    assert cfg.seed is None
    assert cfg.exact_max_n == 10


def test_set_config_changes_active():
    """Test that set_config installs a changed configuration."""
    new = set_config(alpha=0.01, seed=7)

    assert new.alpha == 0.01
    assert get_config().seed == 7
    assert get_config().p_adjust == "bonferroni"


def test_reset_config():
    """Test that reset_config restores the defaults."""
    set_config(p_adjust="holm")
    reset_config()

    assert get_config().p_adjust == "bonferroni"


@pytest.mark.parametrize(
    "changes",
    [
        {"alpha": 0.0},
        {"alpha": 1.5},
        {"p_adjust": "tukey"},
        {"n_iter": 0},
        {"max_iter": 0},
        {"exact_max_n": 1},
    ],
)
def test_invalid_values_raise(changes):
    """Test validation of configuration values."""
    with pytest.raises(ValueError):
        StikpetConfig(**changes)


def test_unknown_field_raises():
    """Test that unknown fields are rejected."""
    with pytest.raises(TypeError):
        set_config(colour="blue")
