"""Cross tables, frequency tables and number-of-bins rules."""

from __future__ import annotations

from typing import Any, Optional, Sequence, Union
import numpy as np
import pandas as pd
from scipy.special import gammaln

from stikpet.measures.quartiles import quartile_range
from stikpet.preprocess import as_series, drop_missing

BIN_METHODS = [
    "src", "sturges", "qr", "rice", "ts", "exp", "velleman", "doane",
    "scott", "fd", "shinshim", "stone", "knuth",
]


def tab_cross(
    field1,
    field2,
    order1: Optional[Sequence[Any]] = None,
    order2: Optional[Sequence[Any]] = None,
    percent: Optional[str] = None,
    totals: str = "exclude",
) -> pd.DataFrame:
    """Cross table of two categorical fields.

    Args:
        field1: Values for the rows
        field2: Values for the columns
        order1: Optional subset/order of row categories
        order2: Optional subset/order of column categories
        percent: None for counts, or "all", "row", "column" percentages
        totals: "include" adds a Total row and column, "exclude" does not

    Returns:
        DataFrame with row categories as index and column categories as columns

    Raises:
        ValueError: If percent or totals is not a known option
    """
    if percent not in (None, "none", "all", "row", "column"):
        raise ValueError(f"percent must be None, 'all', 'row' or 'column', got {percent}")
    if totals not in ("include", "exclude"):
        raise ValueError(f"totals must be 'include' or 'exclude', got {totals}")

    a = as_series(field1)
    b = as_series(field2)
    if len(a) != len(b):
        raise ValueError(f"Fields differ in length: {len(a)} vs {len(b)}")
    df = pd.DataFrame({"a": a, "b": b}).dropna()
    tab = pd.crosstab(df["a"], df["b"])

    if order1 is not None:
        tab = tab.reindex(index=list(order1), fill_value=0)
    if order2 is not None:
        tab = tab.reindex(columns=list(order2), fill_value=0)
    tab = tab.astype(float)

    row_totals = tab.sum(axis=1)
    col_totals = tab.sum(axis=0)
    grand = row_totals.sum()
    if totals == "include":
        tab["Total"] = row_totals
        tab.loc["Total"] = list(col_totals) + [grand]
        row_totals = tab["Total"]
        col_totals = tab.loc["Total"]

    if percent == "all":
        tab = tab / grand * 100
    elif percent == "row":
        tab = tab.div(row_totals, axis=0) * 100
    elif percent == "column":
        tab = tab.div(col_totals, axis=1) * 100

    tab.index.name = None
    tab.columns.name = None
    return tab


def tab_frequency(data, order: Optional[Sequence[Any]] = None) -> pd.DataFrame:
    """Frequency table with percentages.

    Args:
        data: Values to tabulate
        order: Optional order of categories (categories not listed are dropped)

    Returns:
        DataFrame indexed by category with columns Frequency, Percent,
        Valid Percent and Cumulative Percent. A "missing" row appears when
        the data contains missing values.
    """
    s = as_series(data)
    n_total = len(s)
    valid = s.dropna()
    freq = valid.value_counts().sort_index()
    if order is not None:
        freq = freq.reindex(list(order), fill_value=0)

    n_valid = freq.sum()
    table = pd.DataFrame({"Frequency": freq.astype(int)})
    table["Percent"] = table["Frequency"] / n_total * 100
    table["Valid Percent"] = table["Frequency"] / n_valid * 100
    table["Cumulative Percent"] = table["Valid Percent"].cumsum()

    n_missing = n_total - len(valid)
    if n_missing > 0:
        table.loc["missing"] = [n_missing, n_missing / n_total * 100, np.nan, np.nan]
    table.index.name = None
    return table


def tab_frequency_bins(
    data,
    nbins: Union[int, str] = "sturges",
    bins: Optional[Sequence[Sequence[float]]] = None,
    incl_lower: bool = True,
    adjust: float = 1,
) -> pd.DataFrame:
    """Frequency table of binned scale data.

    Args:
        data: Numeric values
        nbins: Number of bins, or a method name accepted by ``tab_nbins``
        bins: Optional explicit list of (lower, upper) bounds
        incl_lower: Include the lower bound in a bin (else the upper bound)
        adjust: Amount added to the maximum (or subtracted from the minimum)
            so the extreme value falls inside the last (first) bin

    Returns:
        DataFrame with columns lower bound, upper bound, frequency, frequency density
    """
    x = drop_missing(data).to_numpy(dtype=float)

    if bins is None:
        k = int(nbins) if isinstance(nbins, (int, np.integer)) else tab_nbins(x, method=nbins)
        mn, mx = x.min(), x.max()
        if incl_lower:
            mx = mx + adjust
        else:
            mn = mn - adjust
        h = (mx - mn) / k
        bounds = [(mn + i * h, mn + (i + 1) * h) for i in range(k)]
    else:
        bounds = [(float(lb), float(ub)) for lb, ub in bins]

    rows = []
    for lb, ub in bounds:
        if incl_lower:
            f = np.sum(x < ub) - np.sum(x < lb)
        else:
            f = np.sum(x <= ub) - np.sum(x <= lb)
        rows.append([lb, ub, f, f / (ub - lb)])

    return pd.DataFrame(rows, columns=["lower bound", "upper bound", "frequency", "frequency density"])


def tab_nbins(data, method: str = "src", max_bins: Optional[int] = None, qmethod: str = "cdf") -> int:
    """Number of bins for a histogram or binned frequency table.

    Args:
        data: Numeric values
        method: One of src, sturges, qr, rice, ts, exp, velleman, doane,
            scott, fd, shinshim, stone, knuth
        max_bins: Upper bound for the search methods (default: n)
        qmethod: Quartile method for the Freedman-Diaconis rule

    Returns:
        Number of bins (rounded up)

    Notes:
        shinshim, stone and knuth evaluate a cost function for every
        k = 2..max_bins and use the bin width of the minimum.
    """
    if method not in BIN_METHODS:
        raise ValueError(f"method must be one of {BIN_METHODS}, got {method}")

    x = drop_missing(data).to_numpy(dtype=float)
    n = len(x)
    if max_bins is None:
        max_bins = n

    if method == "src":
        k = np.sqrt(n)
    elif method == "sturges":
        k = np.log2(n) + 1
    elif method == "qr":
        k = 2.5 * n ** (1 / 4)
    elif method == "rice":
        k = 2 * n ** (1 / 3)
    elif method == "ts":
        k = (2 * n) ** (1 / 3)
    elif method == "exp":
        k = np.log2(n)
    elif method == "velleman":
        k = 2 * n**0.5 if n <= 100 else 10 * np.log10(n)
    elif method == "doane":
        sd_pop = np.std(x, ddof=0)
        g1 = np.sum(((x - x.mean()) / sd_pop) ** 3) / n
        sg1 = np.sqrt(6 * (n - 2) / ((n + 1) * (n + 3)))
        k = 1 + np.log2(n) + np.log2(1 + abs(g1) / sg1)
    else:
        data_range = x.max() - x.min()
        if method == "scott":
            h = 3.49 * np.std(x, ddof=1) / n ** (1 / 3)
            k = data_range / h
        elif method == "fd":
            iqr = quartile_range(x, measure="iqr", method=qmethod).iloc[0, 2]
            h = 2 * iqr / n ** (1 / 3)
            k = data_range / h
        else:
            ks = np.arange(2, max_bins + 1)
            costs = np.empty(len(ks))
            widths = data_range / ks
            for i, ki in enumerate(ks):
                counts, _ = np.histogram(x, bins=ki, range=(x.min(), x.max()))
                avg = counts.mean()
                v = np.sum((counts - avg) ** 2) / ki
                if method == "shinshim":
                    costs[i] = (2 * avg - v) / widths[i] ** 2
                elif method == "stone":
                    costs[i] = 1 / widths[i] * (2 / (n - 1) - (n + 1) / (n - 1) * np.sum((counts / n) ** 2))
                else:
                    log_post = (
                        n * np.log(ki) + gammaln(ki / 2) - ki * gammaln(0.5)
                        - gammaln(n + ki / 2) + np.sum(gammaln(counts + 0.5))
                    )
                    costs[i] = -log_post
            h = widths[int(np.argmin(costs))]
            k = data_range / h

    return int(np.ceil(k))
