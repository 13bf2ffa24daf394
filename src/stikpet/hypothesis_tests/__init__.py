"""Hypothesis tests: one-sample, goodness-of-fit, independence, paired, two-sample and one-way."""

from stikpet.hypothesis_tests.goodness_of_fit import (
    cressie_read_gof,
    freeman_tukey_gof,
    freeman_tukey_read,
    g_gof,
    mod_log_likelihood_gof,
    multinomial_gof,
    neyman_gof,
    pearson_gof,
    powerdivergence_gof,
)
from stikpet.hypothesis_tests.independence import (
    cressie_read_ind,
    fisher,
    fisher_freeman_halton,
    freeman_tukey_ind,
    g_ind,
    mod_log_likelihood_ind,
    neyman_ind,
    pearson_ind,
    powerdivergence_ind,
)
from stikpet.hypothesis_tests.one_sample import (
    binomial_os,
    score_os,
    sign_os,
    student_t_os,
    trimmed_mean_os,
    trinomial_os,
    wald_os,
    wilcoxon_os,
    z_os,
)
from stikpet.hypothesis_tests.one_way import (
    alexander_govern_owa,
    box_owa,
    brown_forsythe_owa,
    cochran_owa,
    fisher_owa,
    hartung_agac_makabi_owa,
    james_owa,
    kruskal_wallis,
    mehrotra_owa,
    ozdemir_kurt_owa,
    welch_owa,
    wilcox_owa,
)
from stikpet.hypothesis_tests.paired import (
    bhapkar,
    cochran_q,
    friedman,
    mcnemar_bowker,
    sign_ps,
    student_t_ps,
    stuart_maxwell,
    trinomial_ps,
    wilcoxon_ps,
    z_ps,
)
from stikpet.hypothesis_tests.two_sample import (
    brunner_munzel,
    brunner_munzel_perm,
    c_square,
    cliff_delta_is,
    fligner_policello,
    mann_whitney,
    mood_median,
    student_t_is,
    trimmed_mean_is,
    welch_t_is,
    z_is,
)

__all__ = [
    "alexander_govern_owa",
    "bhapkar",
    "binomial_os",
    "box_owa",
    "brown_forsythe_owa",
    "brunner_munzel",
    "brunner_munzel_perm",
    "c_square",
    "cliff_delta_is",
    "cochran_owa",
    "cochran_q",
    "cressie_read_gof",
    "cressie_read_ind",
    "fisher",
    "fisher_freeman_halton",
    "fisher_owa",
    "fligner_policello",
    "freeman_tukey_gof",
    "freeman_tukey_ind",
    "freeman_tukey_read",
    "friedman",
    "g_gof",
    "g_ind",
    "hartung_agac_makabi_owa",
    "james_owa",
    "kruskal_wallis",
    "mann_whitney",
    "mcnemar_bowker",
    "mehrotra_owa",
    "mod_log_likelihood_gof",
    "mod_log_likelihood_ind",
    "mood_median",
    "multinomial_gof",
    "neyman_gof",
    "neyman_ind",
    "ozdemir_kurt_owa",
    "pearson_gof",
    "pearson_ind",
    "powerdivergence_gof",
    "powerdivergence_ind",
    "score_os",
    "sign_os",
    "sign_ps",
    "student_t_is",
    "student_t_os",
    "student_t_ps",
    "stuart_maxwell",
    "trimmed_mean_is",
    "trimmed_mean_os",
    "trinomial_os",
    "trinomial_ps",
    "wald_os",
    "welch_owa",
    "welch_t_is",
    "wilcox_owa",
    "wilcoxon_os",
    "wilcoxon_ps",
    "z_is",
    "z_os",
    "z_ps",
]
