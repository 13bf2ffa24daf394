"""Measures of central tendency."""

from __future__ import annotations

from typing import Any, Optional, Sequence
import numpy as np
import pandas as pd

from stikpet.measures.quantiles import quantiles
from stikpet.preprocess import apply_levels, as_series

MEAN_VERSIONS = [
    "arithmetic", "winsorized", "trimmed", "windsor", "truncated", "olympic",
    "geometric", "harmonic", "midrange", "decile",
]


def mean(
    data,
    levels: Optional[Sequence[Any]] = None,
    version: str = "arithmetic",
    trim_prop: float = 0.1,
    trim_frac: str = "down",
) -> float:
    """Calculate one of several means.

    Args:
        data: Numeric scores, or ordinal labels when ``levels`` is given
        levels: Optional ordered labels
        version: arithmetic, winsorized, trimmed (also windsor/truncated),
            olympic, geometric, harmonic, midrange or decile
        trim_prop: Total proportion trimmed (half from each end)
        trim_frac: How to handle a fractional number of trimmed scores:
            "down" (round down), "prop" (weigh the boundary scores) or
            "linear" (interpolate between the two nearest trimmed means)

    Returns:
        The mean
    """
    if version not in MEAN_VERSIONS:
        raise ValueError(f"version must be one of {MEAN_VERSIONS}, got {version}")
    x = apply_levels(data, levels).dropna().to_numpy(dtype=float)
    n = len(x)

    if version == "arithmetic":
        return float(np.mean(x))

    if version in ("winsorized", "trimmed", "windsor", "truncated"):
        x = np.sort(x)
        nt = n * trim_prop / 2
        nl = int(np.floor(nt))
        if version == "winsorized":
            if nl > 0:
                x[:nl] = x[nl]
                x[n - nl:] = x[n - nl - 1]
            return float(np.mean(x))
        if trim_frac == "down":
            return float(np.mean(x[nl:n - nl]))
        if trim_frac == "prop":
            fr = nt - nl
            inner = np.sum(x[nl + 1:n - nl - 1])
            return float((x[nl] * (1 - fr) + x[n - nl - 1] * (1 - fr) + inner) / (n - nt * 2))
        if trim_frac == "linear":
            p1 = nl * 2 / n
            p2 = (nl + 1) * 2 / n
            m1 = np.mean(x[nl:n - nl])
            m2 = np.mean(x[nl + 1:n - nl - 1])
            return float((trim_prop - p1) / (p2 - p1) * (m2 - m1) + m1)
        raise ValueError(f"trim_frac must be 'down', 'prop' or 'linear', got {trim_frac}")

    if version == "olympic":
        return float((np.sum(x) - np.max(x) - np.min(x)) / (n - 2))
    if version == "geometric":
        return float(np.exp(np.sum(np.log(x)) / n))
    if version == "harmonic":
        return float(n / np.sum(1 / x))
    if version == "midrange":
        return float((np.max(x) + np.min(x)) / 2)

    # decile mean: average of the nine deciles
    qs = quantiles(x, k=10)["value"].to_numpy()
    return float(np.mean(qs[1:10]))


def median(data, levels: Optional[Sequence[Any]] = None, tie_breaker: str = "between"):
    """Median of numeric or ordinal data.

    Args:
        data: Numeric scores, or ordinal labels when ``levels`` is given
        levels: Optional ordered labels
        tie_breaker: For an even number of scores: "between" (average of the
            two middle scores), "low" or "high"

    Returns:
        The median as a number, or for ordinal labels the label (or
        "between A and B")
    """
    if tie_breaker not in ("between", "low", "high"):
        raise ValueError(f"tie_breaker must be 'between', 'low' or 'high', got {tie_breaker}")
    x = np.sort(apply_levels(data, levels).dropna().to_numpy(dtype=float))
    n = len(x)
    if n == 0:
        raise ValueError("No valid scores")

    if n % 2 == 1:
        med = x[n // 2]
        low = high = med
    else:
        low, high = x[n // 2 - 1], x[n // 2]
        if tie_breaker == "between":
            med = (low + high) / 2
        elif tie_breaker == "low":
            med = low
        else:
            med = high

    if levels is None:
        return float(med)
    if float(med).is_integer():
        return levels[int(med) - 1]
    return f"between {levels[int(low) - 1]} and {levels[int(high) - 1]}"


def mode(data, all_eq: str = "none") -> pd.DataFrame:
    """Most frequent value(s).

    Args:
        data: Values of any type
        all_eq: What to report if all categories are equally frequent:
            "none" gives a missing mode, "all" lists every category

    Returns:
        DataFrame with one row per mode and columns ``mode`` and ``mode freq.``
    """
    freq = as_series(data).dropna().value_counts().sort_index()
    f_mode = freq.max()
    modes = freq.index[freq == f_mode].to_list()
    if len(modes) == len(freq) and all_eq == "none":
        return pd.DataFrame({"mode": [np.nan], "mode freq.": [np.nan]})
    return pd.DataFrame({"mode": modes, "mode freq.": [f_mode] * len(modes)})


def mode_bin(data, bins: Sequence[Sequence[float]], all_eq: str = "none", value: str = "none") -> pd.DataFrame:
    """Modal bin(s) of binned scale data, based on frequency density.

    Args:
        data: Numeric scores
        bins: List of (lower, upper) bounds; lower bounds are inclusive
        all_eq: "none" reports no mode when every bin has the same density
        value: "none" reports the bin as text, "midpoint" its midpoint,
            "quadratic" the interpolated mode using the neighbouring densities

    Returns:
        DataFrame with one row per modal bin and columns ``mode`` and ``mode fd.``
    """
    if value not in ("none", "midpoint", "quadratic"):
        raise ValueError(f"value must be 'none', 'midpoint' or 'quadratic', got {value}")
    x = as_series(data).dropna().to_numpy(dtype=float)
    bounds = [(float(lb), float(ub)) for lb, ub in bins]
    k = len(bounds)
    fd = np.array([(np.sum(x >= lb) - np.sum(x >= ub)) / (ub - lb) for lb, ub in bounds])
    mode_fd = fd.max()
    is_mode = fd == mode_fd
    if is_mode.sum() == k and all_eq == "none":
        return pd.DataFrame({"mode": [np.nan], "mode fd.": [np.nan]})

    modes = []
    for i in np.flatnonzero(is_mode):
        lb, ub = bounds[i]
        if value == "midpoint":
            modes.append((lb + ub) / 2)
        elif value == "quadratic":
            # bins outside the table have density 0
            d1 = mode_fd - (fd[i - 1] if i > 0 else 0)
            d2 = mode_fd - (fd[i + 1] if i < k - 1 else 0)
            modes.append(lb + d1 / (d1 + d2) * (ub - lb))
        else:
            modes.append(f"{lb:g} < {ub:g}")
    return pd.DataFrame({"mode": modes, "mode fd.": [mode_fd] * len(modes)})


def hodges_lehmann_os(scores, levels: Optional[Sequence[Any]] = None) -> float:
    """One-sample Hodges-Lehmann estimate: the median of the Walsh averages.

    The Walsh averages are (x_i + x_j) / 2 for all i <= j.
    """
    x = apply_levels(scores, levels).dropna().to_numpy(dtype=float)
    i, j = np.triu_indices(len(x))
    walsh = (x[i] + x[j]) / 2
    return float(np.median(walsh))
