"""Index positions and rounding rules shared by the quantile methods."""

from __future__ import annotations

from typing import Tuple
import numpy as np

INDEX_METHODS = ["sas1", "sas4", "hl", "excel", "hf8", "hf9"]
QUARTILE_INDEX_METHODS = ["inclusive", "exclusive"] + INDEX_METHODS
FRACTION_RULES = ["linear", "down", "up", "bankers", "nearest", "halfdown", "midpoint"]
INTEGER_RULES = ["int", "midpoint"]


def _position(n: int, p: float, method: str) -> float:
    if method == "sas1":
        return n * p
    if method == "sas4":
        return (n + 1) * p
    if method == "hl":
        return n * p + 1 / 2
    if method == "excel":
        return (n - 1) * p + 1
    if method == "hf8":
        return (n + 1 / 3) * p + 1 / 3
    if method == "hf9":
        return (n + 1 / 4) * p + 3 / 8
    raise ValueError(f"index method must be one of {INDEX_METHODS}, got {method}")


def quantile_index(data, k: int = 4, method: str = "sas1") -> np.ndarray:
    """Positions (1-based) of the k+1 quantiles of the sorted data.

    Positions are clipped to [1, n].
    """
    n = len(data)
    positions = [_position(n, i / k, method) for i in range(k + 1)]
    return np.clip(np.array(positions, dtype=float), 1, n)


def quartile_index(data, method: str = "sas1") -> Tuple[float, float]:
    """Positions (1-based) of the first and third quartile.

    Args:
        data: Values (only the length is used)
        method: inclusive, exclusive, or one of the quantile index methods

    Returns:
        Tuple of (Q1 position, Q3 position)
    """
    n = len(data)
    if method == "inclusive":
        if n % 2 == 0:
            return (n + 2) / 4, (3 * n + 2) / 4
        return (n + 3) / 4, (3 * n + 1) / 4
    if method == "exclusive":
        if n % 2 == 0:
            return (n + 2) / 4, (3 * n + 2) / 4
        return (n + 1) / 4, (3 * n + 3) / 4
    return _position(n, 1 / 4, method), _position(n, 3 / 4, method)


def round_index(index: float, frac_rule: str = "linear", int_rule: str = "int") -> float:
    """Apply a rounding rule to a fractional (or integer) index position.

    Args:
        index: Index position
        frac_rule: Rule for fractional positions (linear keeps the fraction)
        int_rule: Rule for integer positions ("midpoint" moves half a step up)
    """
    if float(index).is_integer():
        if int_rule == "int":
            return index
        if int_rule == "midpoint":
            return index + 1 / 2
        raise ValueError(f"int_rule must be one of {INTEGER_RULES}, got {int_rule}")

    if frac_rule == "linear":
        return index
    if frac_rule == "down":
        return float(np.floor(index))
    if frac_rule == "up":
        return float(np.ceil(index))
    if frac_rule == "bankers":
        return float(round(index))
    if frac_rule == "nearest":
        return float(int(index + 0.5))
    if frac_rule == "halfdown":
        if float(index + 0.5).is_integer():
            return float(np.floor(index))
        return float(round(index))
    if frac_rule == "midpoint":
        return (np.floor(index) + np.ceil(index)) / 2
    raise ValueError(f"frac_rule must be one of {FRACTION_RULES}, got {frac_rule}")


def value_at(sorted_data: np.ndarray, index: float) -> float:
    """Value at a 1-based position, interpolating linearly between neighbours."""
    n = len(sorted_data)
    index = min(max(index, 1), n)
    low = int(np.floor(index))
    high = int(np.ceil(index))
    if low == high:
        return float(sorted_data[low - 1])
    return float(sorted_data[low - 1] + (index - low) * (sorted_data[high - 1] - sorted_data[low - 1]))
