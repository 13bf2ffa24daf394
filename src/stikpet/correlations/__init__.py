"""Correlation coefficients for scale, ordinal and binary data."""

from stikpet.correlations.latent import polychoric, tetrachoric
from stikpet.correlations.ordinal import (
    goodman_kruskal_gamma,
    kendall_tau,
    rank_biserial_is,
    rank_biserial_os,
    somers_d,
    spearman_rho,
    stuart_tau,
)
from stikpet.correlations.scale import pearson, point_biserial, rosenthal

__all__ = [
    "goodman_kruskal_gamma",
    "kendall_tau",
    "pearson",
    "point_biserial",
    "polychoric",
    "rank_biserial_is",
    "rank_biserial_os",
    "rosenthal",
    "somers_d",
    "spearman_rho",
    "stuart_tau",
    "tetrachoric",
]
