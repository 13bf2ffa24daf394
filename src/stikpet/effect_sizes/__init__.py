"""Effect size measures."""

from stikpet.effect_sizes.agreement import cohen_kappa, scott_pi
from stikpet.effect_sizes.binary import (
    alroy_f,
    becker_clogg_r,
    bin_bin,
    bonett_price_r,
    bonett_price_y,
    camp_r,
    cole_c1,
    cole_c5,
    cole_c7,
    digby_h,
    edward_q,
    forbes,
    mcewen_michael,
    odds_ratio,
    pearson_q1,
    pearson_q4,
    pearson_q5,
    phi,
    yule_q,
    yule_r,
    yule_y,
)
from stikpet.effect_sizes.conversion import convert_es
from stikpet.effect_sizes.means import (
    cohen_d,
    cohen_d_os,
    cohen_d_ps,
    cohen_u,
    glass_delta,
    hedges_g_is,
    hedges_g_os,
    hedges_g_ps,
)
from stikpet.effect_sizes.nominal import (
    alt_ratio,
    bag_s,
    cohen_g,
    cohen_h,
    cohen_h_os,
    cohen_w,
    cont_coeff,
    cramer_v_gof,
    cramer_v_ind,
    fei,
    goodman_kruskal_lambda,
    goodman_kruskal_tau,
    jbm_e,
    jbm_r,
    pairwise_bin,
    post_hoc_gof,
    theil_u,
)
from stikpet.effect_sizes.ordinal import (
    common_language_is,
    common_language_os,
    common_language_ps,
    dominance,
    freeman_theta,
    hodges_lehmann_is,
    pairwise_bin_ord,
    vargha_delaney_a,
)
from stikpet.effect_sizes.variance import (
    cohen_d_ow,
    cohen_f,
    epsilon_sq,
    epsilon_sq_kw,
    eta_sq,
    eta_sq_kw,
    eta_sq_mc,
    kendall_w,
    omega_sq,
    rmsse,
)

__all__ = [
    "alroy_f",
    "alt_ratio",
    "bag_s",
    "becker_clogg_r",
    "bin_bin",
    "bonett_price_r",
    "bonett_price_y",
    "camp_r",
    "cohen_d",
    "cohen_d_os",
    "cohen_d_ow",
    "cohen_d_ps",
    "cohen_f",
    "cohen_g",
    "cohen_h",
    "cohen_h_os",
    "cohen_kappa",
    "cohen_u",
    "cohen_w",
    "cole_c1",
    "cole_c5",
    "cole_c7",
    "common_language_is",
    "common_language_os",
    "common_language_ps",
    "cont_coeff",
    "convert_es",
    "cramer_v_gof",
    "cramer_v_ind",
    "digby_h",
    "dominance",
    "edward_q",
    "epsilon_sq",
    "epsilon_sq_kw",
    "eta_sq",
    "eta_sq_kw",
    "eta_sq_mc",
    "fei",
    "forbes",
    "freeman_theta",
    "glass_delta",
    "goodman_kruskal_lambda",
    "goodman_kruskal_tau",
    "hedges_g_is",
    "hedges_g_os",
    "hedges_g_ps",
    "hodges_lehmann_is",
    "jbm_e",
    "jbm_r",
    "kendall_w",
    "mcewen_michael",
    "odds_ratio",
    "omega_sq",
    "pairwise_bin",
    "pairwise_bin_ord",
    "pearson_q1",
    "pearson_q4",
    "pearson_q5",
    "phi",
    "post_hoc_gof",
    "rmsse",
    "scott_pi",
    "theil_u",
    "vargha_delaney_a",
    "yule_q",
    "yule_r",
    "yule_y",
]
