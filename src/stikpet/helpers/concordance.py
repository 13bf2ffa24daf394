"""Concordant and discordant pair counts from a cross table."""

from __future__ import annotations

from typing import Tuple
import numpy as np
import pandas as pd


def concordance_matrices(ct) -> Tuple[np.ndarray, np.ndarray]:
    """Per cell, the number of cases that form a concordant or discordant pair.

    For cell (i, j) the concordant count sums the cells strictly above-left
    and strictly below-right; the discordant count sums the cells strictly
    above-right and strictly below-left.

    Returns:
        Tuple of (concordant, discordant) arrays of the table's shape
    """
    ct = np.asarray(ct, dtype=float)
    nr, nc = ct.shape
    conc = np.zeros_like(ct)
    disc = np.zeros_like(ct)
    for i in range(nr):
        for j in range(nc):
            conc[i, j] = ct[:i, :j].sum() + ct[i + 1:, j + 1:].sum()
            disc[i, j] = ct[:i, j + 1:].sum() + ct[i + 1:, :j].sum()
    return conc, disc


def ordinal_table(x, y) -> np.ndarray:
    """Cross table of two ordinal score vectors, categories in sorted order."""
    return pd.crosstab(pd.Series(x, name="x"), pd.Series(y, name="y")).to_numpy(dtype=float)


def pair_counts(ct) -> Tuple[float, float]:
    """Total concordant (P) and discordant (Q) counts, each pair counted twice."""
    ct = np.asarray(ct, dtype=float)
    conc, disc = concordance_matrices(ct)
    return float(np.sum(ct * conc)), float(np.sum(ct * disc))
