"""Quartiles and quartile based ranges."""

from __future__ import annotations

from typing import Any, Optional, Sequence, Tuple
import numpy as np
import pandas as pd

from stikpet.helpers.quantile_index import quartile_index
from stikpet.preprocess import apply_levels

QUARTILE_METHODS = [
    "cdf", "sas5", "hf2", "inclusive", "tukey", "vining", "exclusive", "jf",
    "ms", "lohninger", "hl1", "hl2", "hf5", "minitab", "sas4", "hf6",
    "excel", "hf7", "sas1", "hf4", "sas2", "hf3", "sas3", "hf1", "hf8", "hf9",
]
RANGE_MEASURES = ["iqr", "siqr", "qd", "mqr"]

_INDEX_ALIASES = {
    "hl2": "hl", "hf5": "hl",
    "minitab": "sas4", "sas4": "sas4", "hf6": "sas4",
    "excel": "excel", "hf7": "excel",
    "sas1": "sas1", "hf4": "sas1",
    "hf8": "hf8", "hf9": "hf9",
}


def _quartile_positions(n: int, method: str) -> Tuple[float, float]:
    m = n % 4
    if method in ("inclusive", "tukey", "vining"):
        if m in (0, 2):
            return (n + 2) / 4, (3 * n + 2) / 4
        return (n + 3) / 4, (3 * n + 1) / 4
    if method in ("exclusive", "jf"):
        if m in (0, 2):
            return (n + 2) / 4, (3 * n + 2) / 4
        return (n + 1) / 4, (3 * n + 3) / 4
    if method in ("cdf", "sas5", "hf2"):
        if m == 0:
            return (n + 2) / 4, (3 * n + 2) / 4
        return float(np.ceil(n / 4)), float(np.ceil(3 * n / 4))
    if method == "ms":
        q1 = int((n + 1) / 4 + 0.5)
        q3 = np.floor(3 * (n + 1) / 4) if m == 1 else int(3 * (n + 1) / 4 + 0.5)
        return float(q1), float(q3)
    if method == "lohninger":
        return float(int((n + 1) / 4 + 0.5)), float(int(3 * (n + 1) / 4 + 0.5))
    if method == "hl1":
        if m in (0, 2):
            return (n + 2) / 4, (3 * n + 2) / 4
        if m == 1:
            return (n + 3) / 4, (3 * n + 3) / 4
        return (n + 1) / 4, (3 * n + 1) / 4
    if method in ("sas2", "hf3"):
        return float(round(n / 4)), float(round(3 * n / 4))
    if method in ("sas3", "hf1"):
        return float(np.ceil(n / 4)), float(np.ceil(3 * n / 4))
    if method in _INDEX_ALIASES:
        return quartile_index(range(n), _INDEX_ALIASES[method])
    raise ValueError(f"method must be one of {QUARTILE_METHODS}, got {method}")


def _quartile_value(x: np.ndarray, index: float, levels: Optional[Sequence[Any]]):
    index = min(max(index, 1), len(x))
    low = int(np.floor(index))
    high = int(np.ceil(index))
    if x[low - 1] == x[high - 1]:
        value = x[low - 1]
    elif levels is not None:
        return f"between {levels[int(x[low - 1]) - 1]} and {levels[int(x[high - 1]) - 1]}"
    else:
        value = x[low - 1] + (index - low) * (x[high - 1] - x[low - 1])
    if levels is not None:
        return levels[int(value) - 1]
    return float(value)


def quartiles(data, levels: Optional[Sequence[Any]] = None, method: str = "cdf") -> pd.DataFrame:
    """First and third quartile.

    Args:
        data: Numeric scores, or ordinal labels when ``levels`` is given
        levels: Optional ordered labels
        method: Quartile definition, see ``QUARTILE_METHODS``

    Returns:
        One-row DataFrame with columns Q1 and Q3. For ordinal labels a
        quartile between two different labels is reported as "between A and B".
    """
    x = np.sort(apply_levels(data, levels).dropna().to_numpy(dtype=float))
    n = len(x)
    if n == 0:
        raise ValueError("No valid scores")
    i1, i3 = _quartile_positions(n, method)
    q1 = _quartile_value(x, i1, levels)
    q3 = _quartile_value(x, i3, levels)
    return pd.DataFrame({"Q1": [q1], "Q3": [q3]})


def quartile_range(
    data, levels: Optional[Sequence[Any]] = None, measure: str = "iqr", method: str = "cdf"
) -> pd.DataFrame:
    """Interquartile range and related measures.

    Args:
        data: Numeric scores, or ordinal labels when ``levels`` is given
        levels: Optional ordered labels (the range is then in rank units)
        measure: "iqr" (Q3 - Q1), "siqr"/"qd" (half the IQR) or "mqr"
            (mid-quartile range, the mean of Q1 and Q3)
        method: Quartile definition

    Returns:
        One-row DataFrame with Q1, Q3 and the range. The range column is
        named Hspread for the Tukey hinges (inclusive, tukey, vining), IQR,
        SIQR or MQR otherwise.
    """
    if measure not in RANGE_MEASURES:
        raise ValueError(f"measure must be one of {RANGE_MEASURES}, got {measure}")
    qs = quartiles(apply_levels(data, levels), method=method)
    q1 = qs.loc[0, "Q1"]
    q3 = qs.loc[0, "Q3"]
    if measure == "iqr":
        value = q3 - q1
        name = "Hspread" if method in ("tukey", "inclusive", "vining") else "IQR"
    elif measure in ("siqr", "qd"):
        value = (q3 - q1) / 2
        name = "SIQR"
    else:
        value = (q3 + q1) / 2
        name = "MQR"
    return pd.DataFrame({"Q1": [q1], "Q3": [q3], name: [value]})
