"""Chance-corrected agreement between two raters."""

from __future__ import annotations

from typing import Any, Optional, Sequence
import numpy as np
import pandas as pd
from scipy import stats

from stikpet.preprocess import as_series, sorted_categories
from stikpet.tables import tab_cross


def cohen_kappa(nom1, nom2, ase: str = "exact") -> pd.DataFrame:
    """Cohen's kappa with its asymptotic standard errors.

    Only categories used by both raters are kept.

    Args:
        nom1, nom2: Ratings of the same subjects by two raters
        ase: "exact" (Fleiss, Cohen and Everitt) or "approximate"

    Returns:
        One-row DataFrame with kappa, ASE_1, ASE_0, statistic, p-value
    """
    if ase not in ("exact", "approximate"):
        raise ValueError(f"ase must be 'exact' or 'approximate', got {ase}")
    a = as_series(nom1)
    b = as_series(nom2)
    if len(a) != len(b):
        raise ValueError(f"Paired fields differ in length: {len(a)} vs {len(b)}")
    keep = a.notna() & b.notna()
    a, b = a[keep], b[keep]
    shared = sorted(set(sorted_categories(a)) & set(sorted_categories(b)))
    ct = tab_cross(a, b, order1=shared, order2=shared).to_numpy(dtype=float)

    n = ct.sum()
    rs = ct.sum(axis=1)
    cs = ct.sum(axis=0)
    p0 = np.trace(ct) / n
    pc = np.sum(rs * cs) / n**2
    kappa = (p0 - pc) / (1 - pc)

    if ase == "approximate":
        ase_1 = np.sqrt(p0 * (1 - p0) / (n * (1 - pc) ** 2))
        ase_0 = np.sqrt(pc / (n * (1 - pc)))
    else:
        pij = ct / n
        pid = rs / n
        pdj = cs / n
        diag = np.diag(pij)
        off = ~np.eye(len(pid), dtype=bool)
        marg = pdj[:, None] + pid[None, :]
        ss1 = (
            np.sum(diag * ((1 - pc) - (pdj + pid) * (1 - p0)) ** 2)
            + (1 - p0) ** 2 * np.sum(pij[off] * marg[off] ** 2)
            - (p0 * pc - 2 * pc + p0) ** 2
        )
        ss0 = (
            np.sum(pid * pdj * (1 - (pdj + pid)) ** 2)
            + np.sum((pid[:, None] * pdj[None, :])[off] * marg[off] ** 2)
            - pc**2
        )
        ase_1 = np.sqrt(ss1 / (n * (1 - pc) ** 4))
        ase_0 = np.sqrt(ss0 / (n * (1 - pc) ** 2))

    z = kappa / ase_0
    return pd.DataFrame(
        {
            "kappa": [kappa],
            "ASE_1": [ase_1],
            "ASE_0": [ase_0],
            "statistic": [z],
            "p-value": [2 * stats.norm.sf(abs(z))],
        }
    )


def scott_pi(field1, field2, categories: Optional[Sequence[Any]] = None) -> pd.DataFrame:
    """Scott's pi with a z-test.

    Returns:
        One-row DataFrame with Scott pi, n, statistic, p-value
    """
    if categories is None:
        categories = sorted(set(sorted_categories(field1)) | set(sorted_categories(field2)))
    ct = tab_cross(field1, field2, order1=categories, order2=categories).to_numpy(dtype=float)
    n = ct.sum()
    p0 = np.trace(ct) / n
    pe = np.sum(((ct.sum(axis=1) + ct.sum(axis=0)) / (2 * n)) ** 2)
    pi = (p0 - pe) / (1 - pe)
    ase = np.sqrt((1 / (1 - pe)) ** 2 * p0 * (1 - p0) / (n - 1))
    z = pi / ase
    return pd.DataFrame({"Scott pi": [pi], "n": [n], "statistic": [z], "p-value": [2 * stats.norm.sf(abs(z))]})
