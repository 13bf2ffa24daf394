"""Kendall tau null distribution."""

from __future__ import annotations

from scipy.special import comb

from stikpet.helpers.kendall import as71, kendall_exact_pvalue


def kendall_tau_dist(n: int, tau: float, method: str = "kendall") -> float:
    """Two-sided p-value of Kendall's tau under independence.

    Args:
        n: Number of pairs
        tau: Observed tau (without ties)
        method: "kendall" for the exact count of permutations with at most
            the observed number of discordant pairs, "as71" for algorithm AS 71

    Returns:
        Two-sided p-value
    """
    if method == "kendall":
        # number of concordant pairs
        c = (tau + 1) * n * (n - 1) / 4
        return kendall_exact_pvalue(n, int(round(c)))
    if method in ("as71", "AS71"):
        s = round(comb(n, 2) * abs(tau))
        return min(1.0, 2 * as71(s, n))
    raise ValueError(f"method must be 'kendall' or 'as71', got {method}")
