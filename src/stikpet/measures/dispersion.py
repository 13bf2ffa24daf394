"""Measures of dispersion and qualitative variation."""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence, Union
import numpy as np
import pandas as pd

from stikpet.measures.central import mean, mode
from stikpet.measures.quartiles import quartiles
from stikpet.preprocess import apply_levels, as_series

logger = logging.getLogger(__name__)

QV_MEASURES = {
    "vr": ("Freeman Variation Ratio", "(Freeman, 1965)"),
    "bpi": ("Berger-Parker D", "(Berger & Parker, 1970, p. 1345)"),
    "modvr": ("Wilcox MODVR", "(Wilcox, 1973, p. 7)"),
    "ranvr": ("Wilcox RANVR", "(Wilcox, 1973, p. 8)"),
    "avdev": ("Wilcox AVDEV", "(Wilcox, 1973, p. 9)"),
    "mndif": ("Wilcox MNDIF", "(Wilcox, 1973, p. 9)"),
    "varnc": ("Wilcox VARNC", "(Wilcox, 1973, p. 11)"),
    "stdev": ("Wilcox STDEV", "(Wilcox, 1973, p. 14)"),
    "hrel": ("Wilcox HREL", "(Wilcox, 1973, p. 16)"),
    "m1": ("Gibbs-Poston M1", "(Gibbs & Poston, 1975, p. 471)"),
    "m2": ("Gibbs-Poston M2", "(Gibbs & Poston, 1975, p. 472)"),
    "m3": ("Gibbs-Poston M3", "(Gibbs & Poston, 1975, p. 472)"),
    "m4": ("Gibbs-Poston M4", "(Gibbs & Poston, 1975, p. 473)"),
    "m5": ("Gibbs-Poston M5", "(Gibbs & Poston, 1975, p. 474)"),
    "m6": ("Gibbs-Poston M6", "(Gibbs & Poston, 1975, p. 474)"),
    "b": ("Kaiser b", "(Kaiser, 1968, p. 211)"),
    "bd": ("Bulla D", "(Bulla, 1994, p. 169)"),
    "be": ("Bulla E", "(Bulla, 1994, pp. 168-169)"),
    "d1": ("Simpson D", "(Simpson, 1949, p. 688)"),
    "d2": ("Simpson D biased", "(Smith & Wilson, 1996, p. 71)"),
    "d3": ("Simpson D as diversity", "(Wikipedia, n.d.)"),
    "d4": ("Simpson D as diversity biased", "(Berger & Parker, 1970, p. 1345)"),
    "hd": ("Hill Diversity", "(Hill, 1973, p. 428)"),
    "he": ("Hill Evenness", "(Hill, 1973, p. 429)"),
    "hi": ("Heip Evenness", "(Heip, 1974, p. 555)"),
    "j": ("Pielou J", "(Pielou, 1966, p. 141)"),
    "si": ("Sheldon Evenness", "(Sheldon, 1969, p. 467)"),
    "sw1": ("Smith-Wilson Evenness Index 1", "(Smith & Wilson, 1996, p. 71)"),
    "sw2": ("Smith-Wilson Evenness Index 2", "(Smith & Wilson, 1996, p. 71)"),
    "sw3": ("Smith-Wilson Evenness Index 3", "(Smith & Wilson, 1996, p. 71)"),
    "swe": ("Shannon-Weaver Entropy", "(Shannon & Weaver, 1949, p. 20)"),
    "re": ("Renyi Entropy", "(Renyi, 1961, p. 549)"),
    "fisher": ("Fisher alpha", "(Fisher et al., 1943, p. 55)"),
}


def _hill(props: np.ndarray, order: float) -> float:
    if order == 1:
        return float(np.exp(-np.sum(props * np.log(props))))
    return float(np.sum(props**order) ** (1 / (1 - order)))


def _fisher_alpha(n: float, k: int, max_iter: int = 100) -> float:
    """Solve k = a * ln(1 + n / a) for a with a step-halving search."""
    a1 = 1.0
    k1 = a1 * np.log(1 + n / a1)
    if k1 == k:
        return a1
    a2 = 0.5 if k1 > k else 2.0
    k2 = a2 * np.log(1 + n / a2)
    if k2 == k:
        return a2

    a3 = a2
    k3 = k2
    iters = 0
    while iters < max_iter and k3 != k:
        iters += 1
        if k2 > k:
            a3 = a2 - abs(a2 - a1) if k1 > k else a2 - abs(a2 - a1) / 2
        else:
            a3 = a2 + abs(a2 - a1) if k1 < k else a2 + abs(a2 - a1) / 2
        if a3 == 0:
            a3 = a2 - abs(a2 - a1) / 2
        k3 = a3 * np.log(1 + n / a3)
        a1, a2 = a2, a3
        k1, k2 = k2, k3
    return float(a3)


def qualitative_variation(data, measure: str = "vr", var1: float = 2, var2: float = 1) -> pd.DataFrame:
    """Measures of qualitative variation (dispersion of nominal data).

    Args:
        data: Nominal values
        measure: Key of ``QV_MEASURES``, for example "vr" (Freeman's variation
            ratio), "varnc", "hrel", "m1".."m6", "d1".."d4", "swe" or "fisher"
        var1: Order for Hill diversity ("hd", "he") and Renyi entropy ("re")
        var2: Second order for Hill evenness ("he")

    Returns:
        One-row DataFrame with columns value, measure, source

    Notes:
        Several measures coincide: Wilcox VARNC, Gibbs-Poston M2 and
        Smith-Wilson E1, and Wilcox HREL with Pielou J.
    """
    if measure not in QV_MEASURES:
        raise ValueError(f"measure must be one of {list(QV_MEASURES)}, got {measure}")
    freqs = as_series(data).dropna().value_counts().sort_index().to_numpy(dtype=float)
    k = len(freqs)
    n = freqs.sum()
    fm = freqs.max()
    props = freqs / n
    fmean = n / k

    if measure == "vr":
        qv = 1 - fm / n
    elif measure == "bpi":
        qv = fm / n
    elif measure == "modvr":
        qv = np.sum(fm - freqs) / (n * (k - 1))
    elif measure == "ranvr":
        qv = 1 - (fm - freqs.min()) / fm
    elif measure == "avdev":
        qv = 1 - np.sum(np.abs(freqs - fmean)) / (2 * fmean * (k - 1))
    elif measure == "mndif":
        i, j = np.triu_indices(k, 1)
        qv = 1 - np.sum(np.abs(freqs[i] - freqs[j])) / (n * (k - 1))
    elif measure == "varnc":
        qv = 1 - np.sum((freqs - fmean) ** 2) / (n**2 * (k - 1) / k)
    elif measure == "stdev":
        qv = 1 - (np.sum((freqs - fmean) ** 2) / ((n - fmean) ** 2 + (k - 1) * fmean**2)) ** 0.5
    elif measure == "hrel":
        qv = -np.sum(props * np.log2(props)) / np.log2(k)
    elif measure == "m1":
        qv = 1 - np.sum(props**2)
    elif measure == "m2":
        qv = (1 - np.sum(props**2)) / (1 - 1 / k)
    elif measure == "m3":
        pl = props.min()
        qv = (1 - np.sum(props**2) - pl) / (1 - 1 / k - pl)
    elif measure == "m4":
        qv = 1 - np.sum(np.abs(freqs - fmean)) / (2 * n)
    elif measure == "m5":
        qv = 1 - np.sum(np.abs(freqs - fmean)) / (2 * (n - k + 1 - fmean))
    elif measure == "m6":
        qv = k * (1 - np.sum(np.abs(freqs - fmean)) / (2 * n))
    elif measure == "b":
        qv = 1 - (1 - (np.prod(freqs * k / n) ** (1 / k)) ** 2) ** 0.5
    elif measure in ("bd", "be"):
        o = np.sum(np.minimum(props, 1 / k))
        qv = (o - 1 / k + (k - 1) / n) / (1 - 1 / k + (k - 1) / n)
        if measure == "bd":
            qv = k * qv
    elif measure == "d1":
        qv = np.sum(freqs * (freqs - 1)) / (n * (n - 1))
    elif measure == "d2":
        qv = np.sum(props**2)
    elif measure == "d3":
        qv = 1 - np.sum(freqs * (freqs - 1)) / (n * (n - 1))
    elif measure == "d4":
        qv = 1 - np.sum(props**2)
    elif measure == "hd":
        qv = _hill(props, var1)
    elif measure == "he":
        qv = _hill(props, var1) / _hill(props, var2)
    elif measure in ("hi", "j", "si", "swe"):
        h = -np.sum(props * np.log(props))
        if measure == "hi":
            qv = (np.exp(h) - 1) / (k - 1)
        elif measure == "j":
            qv = h / np.log(k)
        elif measure == "si":
            qv = np.exp(h) / k
        else:
            qv = h
    elif measure in ("sw1", "sw2", "sw3"):
        d = np.sum(props**2)
        if measure == "sw1":
            qv = (1 - d) / (1 - 1 / k)
        elif measure == "sw2":
            qv = -np.log(d) / np.log(k)
        else:
            qv = 1 / (d * k)
    elif measure == "re":
        qv = 1 / (1 - var1) * np.log2(np.sum(props**var1))
    else:
        qv = _fisher_alpha(n, k)

    label, source = QV_MEASURES[measure]
    return pd.DataFrame({"value": [float(qv)], "measure": [label], "source": [source]})


VARIATION_MEASURES = ["std", "var", "mad", "madmed", "medad", "cv", "stddm", "cd", "qcd", "ss"]


def variation(
    data,
    levels: Optional[Sequence[Any]] = None,
    measure: str = "std",
    ddof: int = 1,
    center: Union[str, float] = "mean",
    azs: str = "square",
) -> pd.DataFrame:
    """Measures of dispersion for scale (or ordinal) data.

    Args:
        data: Numeric scores, or ordinal labels when ``levels`` is given
        levels: Optional ordered labels
        measure: std, var, mad (mean absolute deviation), madmed (mean
            absolute deviation around the median), medad (median absolute
            deviation), cv (coefficient of variation), stddm (standard
            deviation around the decile mean), cd (coefficient of deviation),
            qcd (quartile coefficient of dispersion) or ss (sum of deviations)
        ddof: Delta degrees of freedom for std, var, cv, stddm and cd
        center: For "ss": "mean", "median", "mode" or a number
        azs: For "ss": "square" or "abs" deviations

    Returns:
        One-row DataFrame with columns value and measure
    """
    if measure not in VARIATION_MEASURES:
        raise ValueError(f"measure must be one of {VARIATION_MEASURES}, got {measure}")
    x = apply_levels(data, levels).dropna().to_numpy(dtype=float)
    n = len(x)

    if measure in ("std", "var", "cv"):
        if ddof == 1:
            kind = "(sample)"
        elif ddof == 0:
            kind = "(population)"
        else:
            kind = f"corrected with {ddof}"
        var = np.sum((x - x.mean()) ** 2) / (n - ddof)
        if measure == "std":
            value, label = var**0.5, f"standard deviation {kind}"
        elif measure == "var":
            value, label = var, f"variance {kind}"
        else:
            value, label = var**0.5 / x.mean(), "coefficient of variation"
    elif measure == "mad":
        value, label = np.sum(np.abs(x - x.mean())) / n, "mean absolute deviation"
    elif measure == "madmed":
        value, label = np.sum(np.abs(x - np.median(x))) / n, "mean absolute deviation around median"
    elif measure == "medad":
        value, label = np.median(np.abs(x - np.median(x))), "median absolute deviation"
    elif measure in ("stddm", "cd"):
        dm = mean(x, version="decile")
        s = (np.sum((x - dm) ** 2) / (n - ddof)) ** 0.5
        if measure == "stddm":
            value, label = s, "standard deviation with decile mean"
        else:
            value, label = s / dm, "coefficient of deviation"
    elif measure == "qcd":
        qs = quartiles(x)
        q1, q3 = qs.loc[0, "Q1"], qs.loc[0, "Q3"]
        value, label = (q3 - q1) / (q3 + q1), "quartile coefficient of dispersion"
    else:
        if center == "mean":
            mu = x.mean()
        elif center == "median":
            mu = np.median(x)
        elif center == "mode":
            mu = mode(x, all_eq="all").loc[0, "mode"]
        else:
            mu = float(center)
        if azs == "square":
            value, label = np.sum((x - mu) ** 2), f"sum squared deviation around {center}"
        elif azs == "abs":
            value, label = np.sum(np.abs(x - mu)), f"sum absolute deviation around {center}"
        else:
            raise ValueError(f"azs must be 'square' or 'abs', got {azs}")

    return pd.DataFrame({"value": [float(value)], "measure": [label]})


def variation_ratio(data) -> Optional[float]:
    """Freeman's variation ratio, the proportion of cases outside the mode(s).

    Returns:
        1 - (number of modes x modal frequency) / n, or None when every
        category is equally frequent (there is no mode)
    """
    freq = as_series(data).dropna().value_counts()
    max_freq = freq.max()
    n_modes = int((freq == max_freq).sum())
    if n_modes == len(freq):
        logger.warning("No mode in data, so also no variation ratio")
        return None
    return float(1 - n_modes * max_freq / freq.sum())


def consensus(ord_data, levels: Optional[Sequence[Any]] = None) -> float:
    """Tastle-Wierman consensus of ordinal data.

    Args:
        ord_data: Ordinal values
        levels: Optional ordered labels; all levels count as categories
            even when unused

    Returns:
        Consensus between 0 (equal split between the two extremes) and 1
        (all cases in one category)
    """
    s = as_series(ord_data).dropna()
    if levels is None:
        freq = s.value_counts().sort_index()
    else:
        freq = s.value_counts().reindex(list(levels), fill_value=0)
    f = freq.to_numpy(dtype=float)
    n = f.sum()
    p = f / n
    r = np.arange(1, len(f) + 1)
    m = np.sum(p * r)
    d = r.max() - r.min()
    used = p > 0
    return float(1 + np.sum(p[used] * np.log2(1 - np.abs(r[used] - m) / d)))
