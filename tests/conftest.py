"""Pytest configuration and fixtures."""

import pytest
import numpy as np
import pandas as pd

from stikpet.config import reset_config


@pytest.fixture(autouse=True)
def default_config():
    """Run every test with the default configuration."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def nominal_data():
    """Nominal scores with counts A=10, B=6, C=4 and two missing values."""
    return pd.Series(["A"] * 10 + ["B"] * 6 + ["C"] * 4 + [None, np.nan])


@pytest.fixture
def grouped_scores():
    """Three groups of five scale scores without ties."""
    groups = ["a"] * 5 + ["b"] * 5 + ["c"] * 5
    scores = [1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 8.0, 9.0, 10.0, 11.0, 12.0, 13.0, 14.0, 15.5]
    return pd.Series(groups), pd.Series(scores)


@pytest.fixture
def ordinal_levels():
    """Ordered labels for a five-point scale."""
    return ["very bad", "bad", "neutral", "good", "very good"]


@pytest.fixture
def seeded_rng():
    """Random generator with a fixed seed."""
    return np.random.default_rng(42)
