"""Shared data preparation for the statistical functions."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple, Union
import numpy as np
import pandas as pd

ExpectedCounts = Union[Dict[Any, float], pd.Series, pd.DataFrame, None]


def as_series(data) -> pd.Series:
    """Convert an array-like to a pandas Series with a fresh integer index."""
    if isinstance(data, pd.DataFrame):
        if data.shape[1] != 1:
            raise ValueError(f"Expected a single column, got {data.shape[1]} columns")
        data = data.iloc[:, 0]
    if isinstance(data, pd.Series):
        return data.reset_index(drop=True)
    return pd.Series(list(data) if not isinstance(data, np.ndarray) else data)


def drop_missing(data) -> pd.Series:
    """Return the data as a Series without missing values."""
    return as_series(data).dropna().reset_index(drop=True)


def sorted_categories(data) -> List[Any]:
    """Unique non-missing values in sorted order (the order of a frequency table)."""
    return sorted(pd.unique(as_series(data).dropna()))


def apply_levels(data, levels: Optional[Sequence[Any]] = None) -> pd.Series:
    """Replace ordinal labels by their rank 1..k in ``levels``.

    Args:
        data: Ordinal values (labels or numbers)
        levels: Ordered labels; None leaves the data as float values

    Returns:
        Float Series, values not found in levels become NaN
    """
    s = as_series(data)
    if levels is None:
        return pd.to_numeric(s, errors="raise").astype(float)
    mapping = {lvl: i + 1 for i, lvl in enumerate(levels)}
    return s.map(mapping).astype(float)


def select_categories(
    nom_field, score_field, categories: Optional[Sequence[Any]] = None, levels: Optional[Sequence[Any]] = None
) -> pd.DataFrame:
    """Combine a grouping field and a score field into one frame.

    Args:
        nom_field: Group labels
        score_field: Scores (numeric, or labels when levels is given)
        categories: Optional subset/order of groups to keep
        levels: Optional ordered labels for the scores

    Returns:
        DataFrame with columns ``group`` and ``score`` and no missing values

    Raises:
        ValueError: If the fields differ in length or no rows remain
    """
    groups = as_series(nom_field)
    scores = as_series(score_field)
    if len(groups) != len(scores):
        raise ValueError(f"Fields differ in length: {len(groups)} vs {len(scores)}")

    df = pd.DataFrame({"group": groups, "score": apply_levels(scores, levels)}).dropna()
    if categories is not None:
        df = df[df["group"].isin(list(categories))]
    if len(df) == 0:
        raise ValueError("No valid rows after removing missing values")
    return df.reset_index(drop=True)


def two_groups(
    cat_field, score_field, categories: Optional[Sequence[Any]] = None, levels: Optional[Sequence[Any]] = None
) -> Tuple[np.ndarray, np.ndarray, Any, Any]:
    """Split scores into the two groups compared by a two-sample procedure.

    Without ``categories`` the first two categories in sorted order are used.

    Returns:
        Tuple of (scores group 1, scores group 2, label 1, label 2)

    Raises:
        ValueError: If fewer than two categories are available
    """
    df = select_categories(cat_field, score_field, levels=levels)
    if categories is not None:
        if len(categories) < 2:
            raise ValueError(f"Two categories are needed, got {list(categories)}")
        cat1, cat2 = categories[0], categories[1]
    else:
        cats = sorted_categories(df["group"])
        if len(cats) < 2:
            raise ValueError(f"Two categories are needed, found {cats}")
        cat1, cat2 = cats[0], cats[1]

    x = df.loc[df["group"] == cat1, "score"].to_numpy(dtype=float)
    y = df.loc[df["group"] == cat2, "score"].to_numpy(dtype=float)
    return x, y, cat1, cat2


def group_summary(nom_field, scale_field, categories: Optional[Sequence[Any]] = None) -> pd.DataFrame:
    """Per-category count, mean and sample variance.

    Returns:
        DataFrame indexed by category with columns n, mean, var
    """
    df = select_categories(nom_field, scale_field, categories)
    summary = df.groupby("group")["score"].agg(["count", "mean", "var"])
    summary.columns = ["n", "mean", "var"]
    if categories is not None:
        summary = summary.reindex([c for c in categories if c in summary.index])
    summary.index.name = "category"
    return summary


def paired(field1, field2, levels: Optional[Sequence[Any]] = None) -> Tuple[np.ndarray, np.ndarray]:
    """Row-wise removal of missing values for paired data.

    Raises:
        ValueError: If the fields differ in length
    """
    a = as_series(field1)
    b = as_series(field2)
    if len(a) != len(b):
        raise ValueError(f"Paired fields differ in length: {len(a)} vs {len(b)}")
    df = pd.DataFrame({"a": apply_levels(a, levels), "b": apply_levels(b, levels)}).dropna()
    return df["a"].to_numpy(dtype=float), df["b"].to_numpy(dtype=float)


def expected_series(exp_counts: ExpectedCounts) -> Optional[pd.Series]:
    """Normalise expected counts given as dict, Series or two-column frame."""
    if exp_counts is None:
        return None
    if isinstance(exp_counts, pd.DataFrame):
        return pd.Series(exp_counts.iloc[:, 1].to_numpy(dtype=float), index=exp_counts.iloc[:, 0].to_list())
    if isinstance(exp_counts, pd.Series):
        return exp_counts.astype(float)
    return pd.Series(dict(exp_counts), dtype=float)


def gof_counts(data, exp_counts: ExpectedCounts = None) -> Tuple[List[Any], np.ndarray, np.ndarray]:
    """Observed and expected counts for a goodness-of-fit test.

    Args:
        data: Nominal observations
        exp_counts: Optional expected counts per category. Rescaled so that
            their total equals the observed total. None means equal expected
            counts for each observed category.

    Returns:
        Tuple of (categories, observed counts, expected counts)
    """
    s = drop_missing(data)
    exp = expected_series(exp_counts)
    if exp is None:
        freq = s.value_counts().sort_index()
        observed = freq.to_numpy(dtype=float)
        n = observed.sum()
        k = len(observed)
        return freq.index.to_list(), observed, np.full(k, n / k)

    cats = exp.index.to_list()
    observed = np.array([(s == c).sum() for c in cats], dtype=float)
    n = observed.sum()
    expected = exp.to_numpy(dtype=float) / exp.sum() * n
    return cats, observed, expected
