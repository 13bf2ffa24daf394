"""Effect sizes for nominal data: chi-square based, proportion based and PRE measures."""

from __future__ import annotations

import itertools
from typing import Any, Optional, Sequence
import numpy as np
import pandas as pd
from scipy import stats

from stikpet.config import get_config
from stikpet.preprocess import drop_missing, expected_series, sorted_categories
from stikpet.tables import tab_cross

LAMBDA_TIES = ["first", "random", "average", "max"]
POST_HOC_ES = ["auto", "coheng", "cohenh", "ar", "rosenthal", "cramerv", "cohenw", "jbme", "fei"]
POST_HOC_LABELS = {
    "coheng": "Cohen g",
    "cohenh": "Cohen h",
    "ar": "alternative ratio",
    "cramerv": "Cramér V",
    "cohenw": "Cohen w",
    "jbme": "Johnston-Berry-Mielke E",
    "fei": "Fei",
    "rosenthal": "Rosenthal correlation",
}


def cohen_w(chi2: float, n: int) -> float:
    """Cohen's w, sqrt(chi2 / n)."""
    return float(np.sqrt(chi2 / n))


def cramer_v_gof(chi2: float, n: int, k: int, bergsma: bool = False) -> float:
    """Cramér's V for a goodness-of-fit test.

    Args:
        chi2: Chi-square statistic
        n: Sample size
        k: Number of categories
        bergsma: Apply the Bergsma bias correction
    """
    if bergsma:
        k_avg = k - (k - 1) ** 2 / (n - 1)
        phi2 = max(0.0, chi2 / n - (k - 1) / (n - 1))
        return float(np.sqrt(phi2 / (k_avg - 1)))
    return float(np.sqrt(chi2 / (n * (k - 1))))


def cramer_v_ind(chi2: float, n: int, r: int, c: int, cc: Optional[str] = None) -> float:
    """Cramér's V for a test of independence.

    Args:
        chi2: Chi-square statistic
        n: Sample size
        r, c: Number of rows and columns
        cc: None, or "bergsma" for the bias corrected version
    """
    if cc == "bergsma":
        m = min(r, c)
        m_hat = m - (m - 1) ** 2 / (n - 1)
        phi2 = max(0.0, chi2 / n - (r - 1) * (c - 1) / (n - 1))
        return float(np.sqrt(phi2 / (m_hat - 1)))
    if cc is not None:
        raise ValueError(f"cc must be None or 'bergsma', got {cc}")
    return float(np.sqrt(chi2 / (n * min(r - 1, c - 1))))


def cont_coeff(chi2: float, n: int, adj: Optional[str] = None, r: Optional[int] = None, c: Optional[int] = None) -> float:
    """Pearson's contingency coefficient, optionally with Sakoda's adjustment."""
    es = np.sqrt(chi2 / (n + chi2))
    if adj == "sakoda":
        if r is None or c is None:
            raise ValueError("Sakoda adjustment needs the number of rows and columns")
        m = min(r, c)
        es = es / np.sqrt((m - 1) / m)
    elif adj is not None:
        raise ValueError(f"adj must be None or 'sakoda', got {adj}")
    return float(es)


def fei(chi2: float, n: int, min_exp: float) -> float:
    """Fei, chi2 scaled by its maximum given the smallest expected count."""
    pe = min_exp / n
    return float(np.sqrt(chi2 / (n * (1 / pe - 1))))


def jbm_e(chi2: float, n: int, min_exp: float, test: str = "chi") -> float:
    """Johnston-Berry-Mielke E from a chi-square ("chi") or G ("g") statistic."""
    if test == "chi":
        return float(chi2 * min_exp / (n * (n - min_exp)))
    if test == "g":
        return float(-1 / np.log(min_exp / n) * chi2 / (2 * n))
    raise ValueError(f"test must be 'chi' or 'g', got {test}")


def jbm_r(data: pd.DataFrame, success: Optional[Any] = None) -> float:
    """Johnston-Berry-Mielke R for k binary measurements on n subjects.

    Args:
        data: DataFrame with one column per measurement
        success: Value counted as success (default: the first value)
    """
    df = pd.DataFrame(data).dropna()
    n, k = df.shape
    if success is None:
        success = df.iloc[0, 0]
    hits = (df == success).to_numpy()
    col_success = hits.sum(axis=0)
    delta = np.sum(col_success * (n - col_success)) / (n * (n - 1) / 2 * k)
    p_row = hits.sum(axis=1) / k
    np_success = p_row.sum()
    mu = 2 / (n * (n - 1)) * (np_success * (n - np_success) - np.sum(p_row * (1 - p_row)))
    return float(1 - delta / mu)


def _binary_counts(data, codes: Optional[Sequence[Any]] = None):
    """Counts (n1, n2) of the first and second category."""
    s = drop_missing(data)
    if codes is None:
        freq = s.value_counts().sort_index()
        n1 = int(freq.iloc[0])
        return n1, len(s) - n1
    return int((s == codes[0]).sum()), int((s == codes[1]).sum())


def cohen_g(data, codes: Optional[Sequence[Any]] = None) -> float:
    """Cohen's g, the proportion of the first category minus 0.5."""
    n1, n2 = _binary_counts(data, codes)
    return n1 / (n1 + n2) - 0.5


def cohen_h(p1: float, p2: float) -> float:
    """Cohen's h between two proportions (arcsine transformed difference)."""
    return float(2 * np.arcsin(np.sqrt(p1)) - 2 * np.arcsin(np.sqrt(p2)))


def cohen_h_os(data, codes: Optional[Sequence[Any]] = None, p0: float = 0.5) -> float:
    """Cohen's h' of the first category's proportion against p0."""
    n1, n2 = _binary_counts(data, codes)
    return cohen_h(n1 / (n1 + n2), p0)


def alt_ratio(
    data,
    codes: Optional[Sequence[Any]] = None,
    p0: float = 0.5,
    category: Optional[Any] = None,
) -> pd.DataFrame:
    """Alternative ratio (relative risk against the expected proportion).

    Args:
        data: Binary nominal data
        codes: Optional two categories to use
        p0: Expected proportion of the first category
        category: Category treated as first (default: first code, or the
            first value in the data)

    Returns:
        One-row DataFrame with AR1 and AR2
    """
    s = drop_missing(data)
    if codes is None:
        n = len(s)
        first = s.iloc[0] if category is None else category
        n1 = int((s == first).sum())
        n2 = n - n1
    else:
        n1 = int((s == codes[0]).sum())
        n2 = int((s == codes[1]).sum())
        n = n1 + n2
        if category is not None and codes[1] == category:
            n1, n2 = n2, n1
    return pd.DataFrame({"AR1": [n1 / n / p0], "AR2": [n2 / n / (1 - p0)]})


def _first_max(values: np.ndarray, rng: Optional[np.random.Generator]) -> int:
    candidates = np.flatnonzero(values == values.max())
    if rng is not None:
        return int(rng.choice(candidates))
    return int(candidates[0])


def goodman_kruskal_lambda(
    field1,
    field2,
    categories1: Optional[Sequence[Any]] = None,
    categories2: Optional[Sequence[Any]] = None,
    ties: str = "first",
) -> pd.DataFrame:
    """Goodman-Kruskal lambda (symmetric and both asymmetric versions).

    Args:
        field1, field2: Nominal fields (rows, columns)
        categories1, categories2: Optional categories to keep
        ties: How to pick the modal row/column when several maxima exist:
            "first", "random", "average" (mean of the ASEs over all
            choices) or "max" (largest ASE)

    Returns:
        DataFrame with one row per dependent (symmetric, field1, field2)
        and columns value, n, ASE_0, ASE_1, statistic, p-value
    """
    if ties not in LAMBDA_TIES:
        raise ValueError(f"ties must be one of {LAMBDA_TIES}, got {ties}")
    ct = tab_cross(field1, field2, order1=categories1, order2=categories2).to_numpy(dtype=float)
    r, c = ct.shape
    rs = ct.sum(axis=1)
    cs = ct.sum(axis=0)
    n = ct.sum()
    rm = rs.max()
    cm = cs.max()
    fim = ct.max(axis=1)
    fmj = ct.max(axis=0)

    rng = np.random.default_rng(get_config().seed) if ties == "random" else None
    if ties in ("average", "max"):
        row_choices = np.flatnonzero(rs == rm)
        col_choices = np.flatnonzero(cs == cm)
    else:
        row_choices = [_first_max(rs, rng)]
        col_choices = [_first_max(cs, rng)]
    fim_idx = [_first_max(ct[i, :], rng) for i in range(r)]
    fmj_idx = [_first_max(ct[:, j], rng) for j in range(c)]

    dijc = np.zeros((r, c))
    dijc[np.arange(r), fim_idx] = 1
    dijr = np.zeros((r, c))
    dijr[fmj_idx, np.arange(c)] = 1

    l_yx = (fim.sum() - cm) / (n - cm)
    l_xy = (fmj.sum() - rm) / (n - rm)
    l_sym = (fim.sum() + fmj.sum() - cm - rm) / (2 * n - rm - cm)

    ase0, ase1 = [], []
    for row_idx, col_idx in itertools.product(row_choices, col_choices):
        djc = np.zeros((r, c))
        djc[:, col_idx] = 1
        djr = np.zeros((r, c))
        djr[row_idx, :] = 1

        yx0 = np.sqrt(np.sum(ct * (dijc - djc) ** 2) - (fim.sum() - cm) ** 2 / n) / (n - cm)
        yx1 = np.sqrt((n - fim.sum()) * (fim.sum() + cm - 2 * np.sum(ct * dijc * djc)) / (n - cm) ** 3)
        xy0 = np.sqrt(np.sum(ct * (dijr - djr) ** 2) - (fmj.sum() - rm) ** 2 / n) / (n - rm)
        xy1 = np.sqrt((n - fmj.sum()) * (fmj.sum() + rm - 2 * np.sum(ct * dijr * djr)) / (n - rm) ** 3)
        sym0 = np.sqrt(
            np.sum(ct * (dijr + dijc - djr - djc) ** 2) - (fim.sum() + fmj.sum() - rm - cm) ** 2 / n
        ) / (2 * n - rm - cm)
        sym1 = np.sqrt(
            np.sum(ct * (dijr + dijc - djr - djc + l_sym * (djr + djc)) ** 2) - 4 * n * l_sym**2
        ) / (2 * n - rm - cm)
        ase0.append([sym0, xy0, yx0])
        ase1.append([sym1, xy1, yx1])

    reduce = np.max if ties == "max" else np.mean
    ase_0 = reduce(np.array(ase0), axis=0)
    ase_1 = reduce(np.array(ase1), axis=0)
    values = np.array([l_sym, l_xy, l_yx])
    with np.errstate(divide="ignore", invalid="ignore"):
        statistic = values / ase_0
    return pd.DataFrame(
        {
            "dependent": ["symmetric", "field1", "field2"],
            "value": values,
            "n": n,
            "ASE_0": ase_0,
            "ASE_1": ase_1,
            "statistic": statistic,
            "p-value": 2 * stats.norm.sf(np.abs(statistic)),
        }
    )


def goodman_kruskal_tau(nom1, nom2, direction: str = "rows") -> pd.DataFrame:
    """Goodman-Kruskal tau.

    Args:
        nom1, nom2: Nominal fields
        direction: "rows" (nom1 in the rows) or "columns" (nom2 in the rows)

    Returns:
        One-row DataFrame with tau, statistic, df, p-value
    """
    if direction not in ("rows", "columns"):
        raise ValueError(f"direction must be 'rows' or 'columns', got {direction}")
    if direction == "columns":
        nom1, nom2 = nom2, nom1
    ct = tab_cross(nom1, nom2).to_numpy(dtype=float)
    r, c = ct.shape
    rs = ct.sum(axis=1)
    cs = ct.sum(axis=0)
    n = ct.sum()
    t1 = np.sum(ct**2 / rs[:, None])
    t2 = np.sum(cs**2)
    tau = (n * t1 - t2) / (n**2 - t2)
    chi2 = (n - 1) * (c - 1) * tau
    df = (r - 1) * (c - 1)
    return pd.DataFrame({"tau": [tau], "statistic": [chi2], "df": [df], "p-value": [stats.chi2.sf(chi2, df)]})


def theil_u(field1, field2, direction: str = "both") -> pd.DataFrame:
    """Theil's U, the uncertainty coefficient.

    Args:
        field1, field2: Nominal fields (rows, columns)
        direction: "rows", "columns" or "both" (symmetric)

    Returns:
        One-row DataFrame with U, ASE_0, ASE_1, statistic, p-value
    """
    if direction not in ("rows", "columns", "both"):
        raise ValueError(f"direction must be 'rows', 'columns' or 'both', got {direction}")
    ct = tab_cross(field1, field2).to_numpy(dtype=float)
    rs = ct.sum(axis=1)[:, None]
    cs = ct.sum(axis=0)[None, :]
    n = ct.sum()
    hx = -np.sum(rs / n * np.log(rs / n))
    hy = -np.sum(cs / n * np.log(cs / n))
    mask = ct > 0
    cells = np.where(mask, ct, 1.0)
    hxy = -np.sum(np.where(mask, ct / n * np.log(cells / n), 0.0))
    num = hx + hy - hxy
    p_sum = np.sum(np.where(mask, ct * np.log(rs * cs / (n * cells)) ** 2, 0.0))

    if direction == "columns":
        u = num / hy
        terms = ct * (hy * np.log(cells / rs) + (hx - hxy) * np.log(cs / n)) ** 2
        ase_1 = np.sqrt(np.sum(np.where(mask, terms, 0.0))) / (n * hy**2)
        ase_0 = np.sqrt(p_sum - n * num**2) / (n * hy)
    elif direction == "rows":
        u = num / hx
        terms = ct * (hx * np.log(cells / cs) + (hy - hxy) * np.log(rs / n)) ** 2
        ase_1 = np.sqrt(np.sum(np.where(mask, terms, 0.0))) / (n * hx**2)
        ase_0 = np.sqrt(p_sum - n * num**2) / (n * hx)
    else:
        u = 2 * num / (hx + hy)
        terms = ct * (hxy * np.log(rs * cs / n**2) - (hx + hy) * np.log(cells / n)) ** 2
        ase_1 = 2 * np.sqrt(np.sum(np.where(mask, terms, 0.0))) / (n * (hx + hy) ** 2)
        ase_0 = 2 * np.sqrt(p_sum - n * num**2) / (n * (hx + hy))

    statistic = u / ase_0
    return pd.DataFrame(
        {
            "U": [u],
            "ASE_0": [ase_0],
            "ASE_1": [ase_1],
            "statistic": [statistic],
            "p-value": [2 * stats.norm.sf(abs(statistic))],
        }
    )


def bag_s(field1, field2, categories: Optional[Sequence[Any]] = None) -> float:
    """Bennett, Alpert and Goldstein's S agreement measure."""
    if categories is None:
        categories = sorted(set(sorted_categories(field1)) | set(sorted_categories(field2)))
    ct = tab_cross(field1, field2, order1=categories, order2=categories).to_numpy(dtype=float)
    k = ct.shape[0]
    p0 = np.trace(ct) / ct.sum()
    return float(k / (k - 1) * (p0 - 1 / k))


def pairwise_bin(data, exp_counts=None, es: str = "coheng") -> pd.DataFrame:
    """Effect sizes for each pair of categories of a nominal variable.

    Args:
        data: Nominal data
        exp_counts: Optional expected counts per category
        es: "coheng", "cohenh" or "ar"

    Returns:
        DataFrame with one row per pair
    """
    if es not in ("coheng", "cohenh", "ar"):
        raise ValueError(f"es must be 'coheng', 'cohenh' or 'ar', got {es}")
    freq = drop_missing(data).value_counts().sort_index()
    pairs = list(itertools.combinations(freq.index, 2))
    res = pd.DataFrame(pairs, columns=["category 1", "category 2"])
    res["n1"] = [int(freq[a]) for a, _ in pairs]
    res["n2"] = [int(freq[b]) for _, b in pairs]
    p1 = res["n1"] / (res["n1"] + res["n2"])

    exp = expected_series(exp_counts)
    if exp is None:
        pc1 = pd.Series(0.5, index=res.index)
    else:
        e1 = np.array([exp[a] for a, _ in pairs])
        e2 = np.array([exp[b] for _, b in pairs])
        pc1 = pd.Series(e1 / (e1 + e2), index=res.index)

    if es == "coheng":
        res["Cohen g"] = p1 - 0.5
    elif es == "cohenh":
        res["Cohen h'"] = 2 * np.arcsin(np.sqrt(p1)) - 2 * np.arcsin(np.sqrt(pc1))
    else:
        res["AR 1"] = p1 / pc1
        res["AR 2"] = (1 - p1) / (1 - pc1)
    return res


def _post_hoc_kind(test_used: str) -> str:
    if any(w in test_used for w in ("binomial", "multinomial")):
        return "exact"
    if any(w in test_used for w in ("Wald", "Score", "adjusted", "standardized")):
        return "z-test"
    if any(w in test_used for w in ("G test", "likelihood")):
        return "likelihood-test"
    return "chi2-test"


def post_hoc_gof(post_hoc_results: pd.DataFrame, es: str = "auto", bergsma: bool = False) -> pd.DataFrame:
    """Effect sizes for the rows of a goodness-of-fit post-hoc analysis.

    Args:
        post_hoc_results: Output of a pairwise (``category 1``/``category 2``)
            or residual (``category``) goodness-of-fit post-hoc function
        es: Effect size, one of ``POST_HOC_ES``. "auto" picks Cohen h for
            exact tests, Rosenthal r for z-tests and Cramér V otherwise.
        bergsma: Bias correction for Cramér V

    Returns:
        DataFrame with the categories and the effect size per row

    Raises:
        ValueError: If the effect size cannot be computed from the test used
    """
    if es not in POST_HOC_ES:
        raise ValueError(f"es must be one of {POST_HOC_ES}, got {es}")
    df = post_hoc_results
    kind = _post_hoc_kind(str(df["test"].iloc[0]))
    if es == "auto":
        es = {"exact": "cohenh", "z-test": "rosenthal"}.get(kind, "cramerv")

    needs_stat = es in ("rosenthal", "cramerv", "cohenw", "jbme", "fei")
    if es == "rosenthal" and kind != "z-test":
        raise ValueError(f"Rosenthal correlation is not possible after a {kind}")
    if needs_stat and es != "rosenthal" and kind not in ("chi2-test", "likelihood-test"):
        raise ValueError(f"{POST_HOC_LABELS[es]} is not possible after a {kind}")

    pairwise = "category 1" in df.columns
    if pairwise:
        out = df[["category 1", "category 2"]].copy()
        n_row = df["n1"].astype(float) + df["n2"].astype(float)
        p_obs = df["obs. prop. 1"].astype(float)
        p_exp = df["exp. prop. 1"].astype(float)
    else:
        out = df[["category"]].copy()
        n_row = pd.Series(df["obs. count"].astype(float).sum(), index=df.index)
        p_obs = df["obs. count"].astype(float) / n_row
        p_exp = df["exp. count"].astype(float) / n_row

    if es == "coheng":
        values = p_obs - 0.5
    elif es == "cohenh":
        values = 2 * np.arcsin(np.sqrt(p_obs)) - 2 * np.arcsin(np.sqrt(p_exp))
    elif es == "ar":
        values = p_obs / p_exp
    else:
        statistic = df["statistic"].astype(float)
        if es == "rosenthal":
            values = statistic / np.sqrt(n_row)
        elif es in ("cramerv", "cohenw"):
            values = np.sqrt(statistic / n_row)
            if es == "cramerv" and bergsma:
                phi2 = np.maximum(0, statistic / n_row - 1 / (n_row - 1))
                values = np.sqrt(phi2 / (1 - 1 / (n_row - 1)))
        else:
            min_exp = df["minExp"].astype(float)
            if kind == "chi2-test":
                values = statistic * min_exp / (n_row * (n_row - min_exp))
            else:
                values = -1 / np.log(min_exp / n_row) * statistic / (2 * n_row)
            if es == "fei":
                values = np.sqrt(values)

    out[POST_HOC_LABELS[es]] = values.to_numpy(dtype=float)
    return out.reset_index(drop=True)
