"""Exact and approximate null distributions used by the tests."""

from stikpet.distributions.kendall import kendall_tau_dist
from stikpet.distributions.mann_whitney import (
    mann_whitney_cdf,
    mann_whitney_count,
    mann_whitney_frequencies,
    mann_whitney_pmf,
)
from stikpet.distributions.multinomial import find_combinations, multinomial_cdf, multinomial_pmf
from stikpet.distributions.spearman import spearman_cdf
from stikpet.distributions.wilcoxon import signed_rank_frequencies, wilcoxon_cdf, wilcoxon_pmf

__all__ = [
    "kendall_tau_dist",
    "mann_whitney_count",
    "mann_whitney_frequencies",
    "mann_whitney_pmf",
    "mann_whitney_cdf",
    "multinomial_pmf",
    "multinomial_cdf",
    "find_combinations",
    "spearman_cdf",
    "signed_rank_frequencies",
    "wilcoxon_pmf",
    "wilcoxon_cdf",
]
