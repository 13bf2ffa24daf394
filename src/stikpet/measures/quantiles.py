"""Quantiles by named method."""

from __future__ import annotations

from typing import Any, Optional, Sequence
import numpy as np
import pandas as pd

from stikpet.helpers.quantile_index import quantile_index, round_index, value_at
from stikpet.preprocess import apply_levels

# Aliases used by other software for the same quantile definition
METHOD_ALIASES = {
    "sas5": ["cdf", "sas5", "hf2", "r2"],
    "sas4": ["sas4", "minitab", "hf6", "maple5", "r6"],
    "excel": ["excel", "hf7", "gumbel", "maple6", "r7"],
    "sas1": ["sas1", "parzen", "hf4", "maple3", "r4"],
    "sas2": ["sas2", "hf3", "r3"],
    "sas3": ["sas3", "hf1", "maple1", "r1"],
    "hl2": ["hl2", "hf5", "maple4"],
    "hf8": ["hf8", "maple7", "r8"],
    "hf9": ["hf9", "maple8", "r9"],
}

# numpy and pandas names, computed by np.quantile with the matching method
NUMPY_METHODS = {
    "inverted_cdf": "inverted_cdf",
    "averaged_inverted_cdf": "averaged_inverted_cdf",
    "closest_observation": "closest_observation",
    "hf3b": "closest_observation",
    "interpolated_inverted_cdf": "interpolated_inverted_cdf",
    "hazen": "hazen",
    "weibull": "weibull",
    "linear": "linear",
    "pd1": "linear",
    "median_unbiased": "median_unbiased",
    "normal_unbiased": "normal_unbiased",
    "lower": "lower",
    "pd2": "lower",
    "higher": "higher",
    "pd3": "higher",
    "nearest": "nearest",
    "pd4": "nearest",
    "midpoint": "midpoint",
    "pd5": "midpoint",
    "np": "midpoint",
}

# (index method, lower fraction rule, lower integer rule, upper fraction rule, upper integer rule)
METHOD_SETTINGS = {
    "sas1": ("sas1", "linear", "int", "linear", "int"),
    "sas2": ("sas1", "bankers", "int", "bankers", "int"),
    "sas3": ("sas1", "up", "int", "up", "int"),
    "sas5": ("sas1", "up", "midpoint", "up", "midpoint"),
    "sas4": ("sas4", "linear", "int", "linear", "int"),
    "ms": ("sas4", "nearest", "int", "halfdown", "int"),
    "lohninger": ("sas4", "nearest", "int", "nearest", "int"),
    "hl2": ("hl", "linear", "int", "linear", "int"),
    "hl1": ("hl", "midpoint", "int", "midpoint", "int"),
    "excel": ("excel", "linear", "int", "linear", "int"),
    "hf8": ("hf8", "linear", "int", "linear", "int"),
    "hf9": ("hf9", "linear", "int", "linear", "int"),
    "maple2": ("hl", "down", "int", "down", "int"),
}


def _canonical(method: str) -> str:
    for name, aliases in METHOD_ALIASES.items():
        if method in aliases:
            return name
    return method


def quantiles(
    data,
    levels: Optional[Sequence[Any]] = None,
    k: int = 4,
    method: str = "own",
    index_method: str = "sas1",
    low_frac: str = "linear",
    low_int: str = "int",
    high_frac: str = "linear",
    high_int: str = "int",
) -> pd.DataFrame:
    """Determine the k-quantiles (the k+1 cut points including min and max).

    Args:
        data: Numeric scores, or ordinal labels when ``levels`` is given
        levels: Optional ordered labels
        k: Number of parts (4 for quartiles, 10 for deciles)
        method: A named method (e.g. "cdf", "excel", "hf8") or "own" to use
            the index and rounding settings below
        index_method: sas1, sas4, hl, excel, hf8 or hf9
        low_frac, low_int: Rounding rules for quantiles below the median
        high_frac, high_int: Rounding rules for the median and above

    Returns:
        DataFrame with a ``quantile`` column (position i/k) and ``value``.
        With levels, an extra ``label`` column gives the matching label or
        "between A and B".
    """
    if k < 1:
        raise ValueError(f"k must be >= 1, got {k}")
    x = np.sort(apply_levels(data, levels).dropna().to_numpy(dtype=float))
    if len(x) == 0:
        raise ValueError("No valid scores")

    probs = [i / k for i in range(k + 1)]
    if method in NUMPY_METHODS:
        values = np.quantile(x, probs, method=NUMPY_METHODS[method]).tolist()
    else:
        values = _rule_quantiles(x, k, _canonical(method), (index_method, low_frac, low_int, high_frac, high_int))

    result = pd.DataFrame({"quantile": probs, "value": values})
    if levels is not None:
        result["label"] = [_label(v, levels) for v in values]
    return result


def _rule_quantiles(x: np.ndarray, k: int, method: str, own_settings) -> list:
    if method == "own":
        settings = own_settings
    elif method in METHOD_SETTINGS:
        settings = METHOD_SETTINGS[method]
    else:
        raise ValueError(f"Unknown quantile method: {method}")
    idx_method, lf, li, hf, hi = settings

    positions = quantile_index(x, k=k, method=idx_method)
    values = []
    for i, pos in enumerate(positions):
        if i / k < 0.5:
            pos = round_index(pos, lf, li)
        else:
            pos = round_index(pos, hf, hi)
        values.append(value_at(x, pos))
    # the 0 and 1 quantiles are the extremes whatever the rounding rule
    values[0] = float(x[0])
    values[-1] = float(x[-1])
    return values


def _label(value: float, levels: Sequence[Any]) -> str:
    if float(value).is_integer():
        return levels[int(value) - 1]
    return f"between {levels[int(np.floor(value)) - 1]} and {levels[int(np.ceil(value)) - 1]}"
