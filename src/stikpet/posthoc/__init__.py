"""Post-hoc analyses: pairwise and residual follow-ups of omnibus tests."""

from stikpet.posthoc.nominal import (
    binomial,
    column_proportion,
    mcnemar_co,
    mcnemar_pw,
    pairwise_bin,
    pairwise_gof,
    residual,
    residual_gof,
    residual_gof_bin,
    residual_gof_gof,
)
from stikpet.posthoc.rank import (
    conover_iman,
    dunn,
    dunn_q,
    friedman,
    mann_whitney,
    mood_median,
    nemenyi,
    pairwise_iso,
    sdcf,
)
from stikpet.posthoc.scale import pairwise_is, pairwise_ps, pairwise_t

__all__ = [
    "binomial",
    "column_proportion",
    "conover_iman",
    "dunn",
    "dunn_q",
    "friedman",
    "mann_whitney",
    "mcnemar_co",
    "mcnemar_pw",
    "mood_median",
    "nemenyi",
    "pairwise_bin",
    "pairwise_gof",
    "pairwise_is",
    "pairwise_iso",
    "pairwise_ps",
    "pairwise_t",
    "residual",
    "residual_gof",
    "residual_gof_bin",
    "residual_gof_gof",
    "sdcf",
]
