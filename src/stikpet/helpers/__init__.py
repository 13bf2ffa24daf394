"""Numeric helpers shared by the correlation, measure and test functions."""

from stikpet.helpers.kendall import as71, kendall_counts, kendall_exact_pvalue, tau_permutation_pvalue
from stikpet.helpers.permutations import permutations
from stikpet.helpers.quantile_index import quantile_index, quartile_index
from stikpet.helpers.search import bisect_pvalue
from stikpet.helpers.spearman import as89, spearman_permutation_pvalue

__all__ = [
    "as71",
    "as89",
    "kendall_counts",
    "kendall_exact_pvalue",
    "tau_permutation_pvalue",
    "spearman_permutation_pvalue",
    "permutations",
    "quantile_index",
    "quartile_index",
    "bisect_pvalue",
]
