"""
stikpet: statistical formulas for teaching and reporting.

This package provides:
- Effect sizes and their conversions and rules of thumb
- Correlation coefficients for nominal, ordinal and scale data
- Measures of central tendency, dispersion and quantiles
- One-sample, paired, independent-samples and one-way tests
- Post-hoc analyses with multiple comparison adjustment
- Cross tables and helper distributions
"""

__version__ = "0.1.0"

from stikpet import (
    correlations,
    distributions,
    effect_sizes,
    hypothesis_tests,
    measures,
    posthoc,
    rules_of_thumb,
)
from stikpet.config import StikpetConfig, get_config, reset_config, set_config
from stikpet.p_adjustments import p_adjust
from stikpet.tables import tab_cross

__all__ = [
    "__version__",
    "StikpetConfig",
    "correlations",
    "distributions",
    "effect_sizes",
    "get_config",
    "hypothesis_tests",
    "measures",
    "p_adjust",
    "posthoc",
    "reset_config",
    "rules_of_thumb",
    "set_config",
    "tab_cross",
]
