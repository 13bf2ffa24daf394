"""Measures of central tendency, position and dispersion."""

from stikpet.measures.central import hodges_lehmann_os, mean, median, mode, mode_bin
from stikpet.measures.dispersion import consensus, qualitative_variation, variation, variation_ratio
from stikpet.measures.quantiles import quantiles
from stikpet.measures.quartiles import quartile_range, quartiles

__all__ = [
    "mean",
    "median",
    "mode",
    "mode_bin",
    "hodges_lehmann_os",
    "quantiles",
    "quartiles",
    "quartile_range",
    "variation",
    "variation_ratio",
    "qualitative_variation",
    "consensus",
]
