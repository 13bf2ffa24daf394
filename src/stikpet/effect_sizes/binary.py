"""Association measures for 2x2 tables."""

from __future__ import annotations

import math
from typing import Any, Callable, Dict, NamedTuple, Optional, Sequence
import numpy as np
import pandas as pd
from scipy import stats

from stikpet.tables import tab_cross

CAMP_PHI_CURETON = {
    0.5: [0.637, 0.636, 0.636, 0.635, 0.635, 0.634, 0.634, 0.633, 0.633, 0.632, 0.631],
    0.6: [0.631, 0.631, 0.63, 0.629, 0.628, 0.627, 0.626, 0.625, 0.624, 0.622, 0.621],
    0.7: [0.621, 0.62, 0.618, 0.616, 0.614, 0.612, 0.61, 0.608, 0.606, 0.603, 0.6],
    0.8: [0.6, 0.597, 0.594, 0.591, 0.587, 0.583, 0.579, 0.574, 0.569, 0.564, 0.559],
}
CAMP_PHI = {0.5: 0.637, 0.6: 0.63, 0.7: 0.62, 0.8: 0.6, 0.9: 0.56}


class Cells(NamedTuple):
    """Counts of a 2x2 table, a b in the first row and c d in the second."""

    a: float
    b: float
    c: float
    d: float

    @property
    def r1(self) -> float:
        return self.a + self.b

    @property
    def r2(self) -> float:
        return self.c + self.d

    @property
    def c1(self) -> float:
        return self.a + self.c

    @property
    def c2(self) -> float:
        return self.b + self.d

    @property
    def n(self) -> float:
        return self.a + self.b + self.c + self.d


def table_cells(
    field1,
    field2,
    categories1: Optional[Sequence[Any]] = None,
    categories2: Optional[Sequence[Any]] = None,
) -> Cells:
    """Cross two binary fields and return the four cell counts.

    Raises:
        ValueError: If the cross table is not 2x2
    """
    ct = tab_cross(field1, field2, order1=categories1, order2=categories2).to_numpy(dtype=float)
    if ct.shape != (2, 2):
        raise ValueError(f"A 2x2 table is needed, got shape {ct.shape}")
    return Cells(ct[0, 0], ct[0, 1], ct[1, 0], ct[1, 1])


def _pearson_q1(t: Cells) -> float:
    """Pearson's Q1 after orienting the table so that ad >= bc, a >= d and c >= b."""
    a, b, c, d = t
    orientations = [
        (a, b, c, d), (a, c, b, d), (d, c, b, a), (d, b, c, a),
        (c, d, a, b), (b, a, d, c), (c, a, d, b), (b, d, a, c),
    ]
    for aa, bb, cc, dd in orientations:
        if aa * dd >= bb * cc and aa >= dd and cc >= bb:
            sign = 1.0 if a * d >= b * c else -1.0
            return sign * math.sin(math.pi / 2 * (aa * dd - bb * cc) / ((aa + bb) * (bb + dd)))
    raise ValueError(f"No orientation of the table {tuple(t)} fits Pearson Q1")


def _cole_c7(t: Cells) -> float:
    a, b, c, d = t
    if a * d >= b * c:
        return (a * d - b * c) / ((a + b) * (b + d))
    if a <= d:
        return (a * d - b * c) / ((a + b) * (a + c))
    return (a * d - b * c) / ((b + d) * (c + d))


def _tulloss(t: Cells) -> float:
    a, b, c, _ = t
    mn, mx = min(b, c), max(b, c)
    f1 = math.log2(1 + (mn + a) / (mx + a))
    f2 = 1 / math.sqrt(math.log2(2 + mn / (a + 1)))
    f3 = math.log2(1 + a / (a + b)) * math.log2(1 + a / (a + c))
    return math.sqrt(f1 * f2 * f3)


def _anderberg(t: Cells, lambda_version: bool = False) -> float:
    a, b, c, d = t
    s1 = max(a, b) + max(c, d) + max(a, c) + max(b, d)
    s2 = max(t.r1, t.r2) + max(t.c1, t.c2)
    if lambda_version:
        return (s1 - s2) / (2 * t.n - s2)
    return (s1 - s2) / (2 * t.n)


def _chi2(t: Cells) -> float:
    return t.n * (t.a * t.d - t.b * t.c) ** 2 / (t.r1 * t.r2 * t.c1 * t.c2)


def _hurlbert(t: Cells) -> float:
    a, b, c, d = t
    a_hat = t.r1 * t.c1 / t.n
    if a * d >= b * c:
        chi_max = t.n * t.r1 * t.c2 / (t.r2 * t.c1)
        g_hat = math.ceil(a_hat)
    elif a <= d:
        chi_max = t.n * t.r1 * t.c1 / (t.r2 * t.c2)
        g_hat = math.floor(a_hat)
    else:
        chi_max = t.n * t.r2 * t.c2 / (t.r1 * t.c1)
        g_hat = math.floor(a_hat)
    chi_min = t.n**3 * (a_hat - g_hat) ** 2 / (t.r1 * t.r2 * t.c1 * t.c2)
    return float(np.sign(a * d - b * c) * math.sqrt((_chi2(t) - chi_min) / (chi_max - chi_min)))


def _bonett_price_y(t: Cells) -> float:
    a, b, c, d = t
    w = (a + 0.1) * (d + 0.1) / ((b + 0.1) * (c + 0.1))
    p_min = min(t.r1, t.r2, t.c1, t.c2) / t.n
    x = 0.5 - (0.5 - p_min) ** 2
    return (w**x - 1) / (w**x + 1)


def _cole_c5(t: Cells) -> float:
    diff = t.a * t.d - t.b * t.c
    return math.sqrt(2) * diff / math.sqrt(diff**2 + t.r1 * t.r2 * t.c1 * t.c2)


def _odds_ratio(t: Cells) -> float:
    return t.a * t.d / (t.b * t.c)


def _edward(t: Cells) -> float:
    w = _odds_ratio(t) ** (math.pi / 4)
    return (w - 1) / (w + 1)


def _yule_r(t: Cells) -> float:
    return math.cos(math.pi * math.sqrt(t.b * t.c) / (math.sqrt(t.a * t.d) + math.sqrt(t.b * t.c)))


def _alroy(t: Cells) -> float:
    na = t.a + t.b + t.c
    return t.a * (na + math.sqrt(na)) / (t.a * (na + math.sqrt(na)) + 1.5 * t.b * t.c)


BIN_BIN_MEASURES: Dict[str, Callable[[Cells], float]] = {
    "russell-rao": lambda t: t.a / t.n,
    "dice-1": lambda t: t.a / t.r1,
    "dice-2": lambda t: t.a / t.c1,
    "braun-blanquet": lambda t: t.a / max(t.r1, t.c1),
    "simpson": lambda t: t.a / min(t.r1, t.c1),
    "kulczynski-1": lambda t: t.a / (t.b + t.c),
    "jaccard": lambda t: t.a / (t.a + t.b + t.c),
    "sokal-sneath-1": lambda t: t.a / (t.a + 2 * t.b + 2 * t.c),
    "gleason": lambda t: 2 * t.a / (2 * t.a + t.b + t.c),
    "mountford": lambda t: 2 * t.a / (t.a * (t.b + t.c) + 2 * t.b * t.c),
    "driver-kroeber-1": lambda t: t.a / math.sqrt(t.r1 * t.c1),
    "sorgenfrei": lambda t: t.a**2 / (t.r1 * t.c1),
    "johnson": lambda t: t.a / t.r1 + t.a / t.c1,
    "kulczynski-2": lambda t: t.a * (2 * t.a + t.b + t.c) / (2 * t.r1 * t.c1),
    "fager-mcgowan-1": lambda t: t.a / math.sqrt(t.r1 * t.c1) - 1 / (2 * math.sqrt(max(t.r1, t.c1))),
    "fager-mcgowan-2": lambda t: t.a / math.sqrt(t.r1 * t.c1) - math.sqrt(max(t.r1, t.c1)) / 2,
    "tarantula": lambda t: t.a * t.r2 / (t.c * t.r1),
    "ample": lambda t: abs(t.a * t.r2 / (t.c * t.r1)),
    "gilbert": lambda t: (t.a * t.n - t.r1 * t.c1) / (t.c1 * t.n + t.r1 * t.n - t.a * t.n - t.r1 * t.c1),
    "fossum-kaskey": lambda t: t.n * (t.a - 0.5) ** 2 / (t.r1 * t.c1),
    "eyraud": lambda t: (t.a - t.r1 * t.c1) / (t.r1 * t.r2 * t.c1 * t.c2),
    "sokal-michener": lambda t: (t.a + t.d) / t.n,
    "faith": lambda t: (t.a + t.d / 2) / t.n,
    "sokal-sneath-5": lambda t: (t.a + t.d) / (t.b + t.c),
    "rogers-tanimoto": lambda t: (t.a + t.d) / (t.a + 2 * t.b + 2 * t.c + t.d),
    "sokal-sneath-2": lambda t: (2 * t.a + 2 * t.d) / (2 * t.a + t.b + t.c + 2 * t.d),
    "gower": lambda t: (t.a + t.d) / math.sqrt(t.r1 * t.r2 * t.c1 * t.c2),
    "sokal-sneath-4": lambda t: t.a * t.d / math.sqrt(t.r1 * t.c1 * t.r2 * t.c2),
    "rogot-goldberg": lambda t: t.a / (t.r1 + t.c1) + t.d / (t.r2 + t.c2),
    "sokal-sneath-3": lambda t: (t.a / t.r1 + t.a / t.c1 + t.d / t.r2 + t.d / t.c2) / 4,
    "hawkins-dotson": lambda t: (t.a / (t.a + t.b + t.c) + t.d / (t.b + t.c + t.d)) / 2,
    "clement": lambda t: t.a * t.r2 / (t.n * t.r1) + t.d * t.r1 / (t.n * t.r2),
    "harris-lahey": lambda t: (
        t.a * (t.r2 + t.c2) / (2 * t.n * (t.a + t.b + t.c))
        + t.d * (t.r1 + t.c1) / (2 * t.n * (t.b + t.c + t.d))
    ),
    "austin-colwell": lambda t: 2 / math.pi * math.asin(math.sqrt((t.a + t.d) / t.n)),
    "forbes-1": lambda t: t.n * t.a / (t.r1 * t.c1),
    "baroni-urbani-buser-1": lambda t: (
        (math.sqrt(t.a * t.d) + t.a) / (math.sqrt(t.a * t.d) + t.a + t.b + t.c)
    ),
    "peirce-1": lambda t: (t.a * t.d - t.b * t.c) / (t.r1 * t.r2),
    "peirce-2": lambda t: (t.a * t.d - t.b * t.c) / (t.c1 * t.c2),
    "cole-c1": lambda t: (t.a * t.d - t.b * t.c) / (t.r1 * t.c1),
    "loevinger": lambda t: (t.a * t.d - t.b * t.c) / min(t.r1 * t.c2, t.r2 * t.c1),
    "cole-c7": _cole_c7,
    "dennis": lambda t: (t.a * t.d - t.b * t.c) / math.sqrt(t.n * t.r1 * t.c1),
    "phi": lambda t: (t.a * t.d - t.b * t.c) / math.sqrt(t.r1 * t.r2 * t.c1 * t.c2),
    "doolittle": lambda t: (t.a * t.d - t.b * t.c) ** 2 / (t.r1 * t.r2 * t.c1 * t.c2),
    "peirce-3": lambda t: (t.a * t.d + t.b * t.c) / (t.a * t.b + 2 * t.b * t.c + t.c * t.d),
    "cohen-kappa": lambda t: 2 * (t.a * t.d - t.b * t.c) / (t.r1 * t.c2 + t.r2 * t.c1),
    "mcewen-michael": lambda t: 4 * (t.a * t.d - t.b * t.c) / ((t.a + t.d) ** 2 + (t.b + t.c) ** 2),
    "kuder-richardson": lambda t: (
        4 * (t.a * t.d - t.b * t.c) / (t.r1 * t.r2 + t.c1 * t.c2 + 2 * t.a * t.d - 2 * t.b * t.c)
    ),
    "scott": lambda t: (4 * t.a * t.d - (t.b + t.c) ** 2) / ((t.r1 + t.c1) * (t.r2 + t.c2)),
    "maxwell-pilliner": lambda t: 2 * (t.a * t.d - t.b * t.c) / (t.r1 * t.r2 + t.c1 * t.c2),
    "cole-c5": _cole_c5,
    "hamann": lambda t: (t.a + t.d - t.b - t.c) / t.n,
    "fleiss": lambda t: (
        (t.a * t.d - t.b * t.c) * (t.r1 * t.c2 + t.r2 * t.c1) / (2 * t.r1 * t.r2 * t.c1 * t.c2)
    ),
    "yule-q": lambda t: (t.a * t.d - t.b * t.c) / (t.a * t.d + t.b * t.c),
    "yule-y": lambda t: (math.sqrt(t.a * t.d) - math.sqrt(t.b * t.c)) / (math.sqrt(t.a * t.d) + math.sqrt(t.b * t.c)),
    "digby": lambda t: ((t.a * t.d) ** 0.75 - (t.b * t.c) ** 0.75) / ((t.a * t.d) ** 0.75 + (t.b * t.c) ** 0.75),
    "edward": _edward,
    "tarwid": lambda t: (t.n * t.a - t.r1 * t.c1) / (t.n * t.a + t.r1 * t.c1),
    "mcconnaughey": lambda t: (t.a**2 - t.b * t.c) / (t.r1 * t.c1),
    "baroni-urbani-buser-2": lambda t: (
        (math.sqrt(t.a * t.d) + t.a - t.b - t.c) / (math.sqrt(t.a * t.d) + t.a + t.b + t.c)
    ),
    "kent-foster-1": lambda t: -t.b * t.c / (t.b * t.r1 + t.c * t.c1 + t.b * t.c),
    "kent-foster-2": lambda t: -t.b * t.c / (t.b * t.r2 + t.c * t.c2 + t.b * t.c),
    "tulloss": _tulloss,
    "gilbert-wells": lambda t: math.log(t.a) - math.log(t.n) - math.log(t.r1 / t.n) - math.log(t.c1 / t.n),
    "pearson-heron": _yule_r,
    "anderberg": _anderberg,
    "alroy": _alroy,
    "pearson-q1": _pearson_q1,
    "gk-lambda-1": lambda t: _anderberg(t, lambda_version=True),
    "gk-lambda-2": lambda t: (2 * min(t.a, t.d) - t.b - t.c) / (2 * min(t.a, t.d) + t.b + t.c),
    "contingency": lambda t: math.sqrt(_chi2(t) / (t.n + _chi2(t))),
    "cohen-w": lambda t: math.sqrt(_chi2(t) / t.n),
    "pearson": lambda t: math.sqrt(BIN_BIN_MEASURES["phi"](t) / (t.n + BIN_BIN_MEASURES["phi"](t))),
    "hurlbert": _hurlbert,
    "stiles": lambda t: math.log10(t.n * (abs(t.a * t.d - t.b * t.c) - t.n / 2) ** 2 / (t.r1 * t.c1 * t.c2 * t.r2)),
    "bonett-price": _bonett_price_y,
    "odds-ratio": _odds_ratio,
}

BIN_BIN_ALIASES = {
    "tanimoto": "jaccard",
    "dice-3": "gleason",
    "nei-li": "gleason",
    "czekanowski": "gleason",
    "ochiai-1": "driver-kroeber-1",
    "otsuka": "driver-kroeber-1",
    "driver-kroeber-2": "kulczynski-2",
    "matching": "sokal-michener",
    "gower-legendre": "sokal-sneath-2",
    "ochiai-2": "sokal-sneath-4",
    "forbes-2": "loevinger",
    "cole-c2": "phi",
    "cole-c3": "mcewen-michael",
    "cole-c4": "yule-q",
    "pearson-q2": "yule-q",
    "cole-c8": "hurlbert",
}


def bin_bin(
    field1,
    field2,
    categories1: Optional[Sequence[Any]] = None,
    categories2: Optional[Sequence[Any]] = None,
    method: str = "odds-ratio",
) -> float:
    """Any of the named similarity/association measures of a 2x2 table.

    Args:
        field1, field2: Binary fields (rows, columns)
        categories1, categories2: Optional order of the two categories
        method: Key of ``BIN_BIN_MEASURES`` or ``BIN_BIN_ALIASES``
    """
    key = BIN_BIN_ALIASES.get(method, method)
    if key not in BIN_BIN_MEASURES:
        raise ValueError(f"Unknown 2x2 measure: {method}")
    return float(BIN_BIN_MEASURES[key](table_cells(field1, field2, categories1, categories2)))


def odds_ratio(
    field1,
    field2,
    categories1: Optional[Sequence[Any]] = None,
    categories2: Optional[Sequence[Any]] = None,
) -> pd.DataFrame:
    """Odds ratio with a z-test on its logarithm.

    Returns:
        One-row DataFrame with OR, n, statistic, p-value
    """
    t = table_cells(field1, field2, categories1, categories2)
    odds = _odds_ratio(t)
    se = np.sqrt(1 / t.a + 1 / t.b + 1 / t.c + 1 / t.d)
    z = np.log(odds) / se
    return pd.DataFrame({"OR": [odds], "n": [t.n], "statistic": [z], "p-value": [2 * stats.norm.sf(abs(z))]})


def yule_q(field1, field2, categories1=None, categories2=None) -> float:
    """Yule's Q, (ad - bc) / (ad + bc)."""
    return float(BIN_BIN_MEASURES["yule-q"](table_cells(field1, field2, categories1, categories2)))


def yule_r(field1, field2, categories1=None, categories2=None) -> float:
    """Yule's r (Pearson-Heron cosine approximation)."""
    return float(_yule_r(table_cells(field1, field2, categories1, categories2)))


def yule_y(field1, field2, categories1=None, categories2=None) -> float:
    """Yule's Y, the coefficient of colligation."""
    return float(BIN_BIN_MEASURES["yule-y"](table_cells(field1, field2, categories1, categories2)))


def phi(field1, field2, categories1=None, categories2=None) -> float:
    """Phi coefficient of a 2x2 table."""
    return float(BIN_BIN_MEASURES["phi"](table_cells(field1, field2, categories1, categories2)))


def pearson_q1(field1, field2, categories1=None, categories2=None) -> float:
    """Pearson's Q1 approximation of the tetrachoric correlation."""
    return _pearson_q1(table_cells(field1, field2, categories1, categories2))


def pearson_q4(field1, field2, categories1=None, categories2=None) -> float:
    """Pearson's Q4."""
    a, b, c, d = t = table_cells(field1, field2, categories1, categories2)
    return math.sin(math.pi / 2 / (1 + 2 * b * c * t.n / ((a * d - b * c) * (b + c))))


def pearson_q5(field1, field2, categories1=None, categories2=None) -> float:
    """Pearson's Q5."""
    a, b, c, d = t = table_cells(field1, field2, categories1, categories2)
    k = 4 * a * b * c * d * t.n**2 / ((a * d - b * c) ** 2 * (a + d) * (b + c))
    return math.sin(math.pi / 2 / math.sqrt(1 + k))


def edward_q(field1, field2, categories1=None, categories2=None) -> float:
    """Edwards' Q, (OR^(pi/4) - 1) / (OR^(pi/4) + 1)."""
    return _edward(table_cells(field1, field2, categories1, categories2))


def becker_clogg_r(field1, field2, categories1=None, categories2=None, version: int = 1) -> float:
    """Becker and Clogg's approximation of the tetrachoric correlation.

    Args:
        field1, field2: Binary fields
        categories1, categories2: Optional order of the categories
        version: 1 (cubic in the log odds ratio) or 2 (power of the odds ratio)
    """
    if version not in (1, 2):
        raise ValueError(f"version must be 1 or 2, got {version}")
    t = table_cells(field1, field2, categories1, categories2)
    p_r1, p_r2 = t.r1 / t.n, t.r2 / t.n
    p_c1, p_c2 = t.c1 / t.n, t.c2 / t.n
    tr = stats.norm.ppf(p_r1)
    tc = stats.norm.ppf(p_c1)
    m_r = -np.exp(-tr**2 / 2) / p_r1 - np.exp(-tr**2 / 2) / p_r2
    v_c = -np.exp(-tc**2 / 2) / p_c1 - np.exp(-tc**2 / 2) / p_c2
    delta = m_r * v_c
    odds = _odds_ratio(t)
    if version == 2:
        w = odds ** (13.3 / delta)
        return float((w - 1) / (w + 1))
    phi_bc = np.log(odds) / delta
    g = np.exp(12.4 * phi_bc - 24.6 * phi_bc**3)
    return float((g - 1) / (g + 1))


def bonett_price_r(field1, field2, categories1=None, categories2=None, version: int = 2) -> float:
    """Bonett and Price's approximation of the tetrachoric correlation.

    Version 2 adds 0.5 to each cell (and 1 / 2 to the margins) to cope
    with zero cells.
    """
    if version not in (1, 2):
        raise ValueError(f"version must be 1 or 2, got {version}")
    t = table_cells(field1, field2, categories1, categories2)
    margin_min = min(t.r1, t.r2, t.c1, t.c2)
    if version == 1:
        p_min = margin_min / t.n
        c_bp = (1 - abs(t.r1 - t.c1) / (5 * t.n) - (0.5 - p_min) ** 2) / 2
        omega = _odds_ratio(t)
    else:
        p_min = (margin_min + 1) / (t.n + 2)
        c_bp = (1 - abs(t.r1 - t.c1) / (5 * (t.n + 2)) - (0.5 - p_min) ** 2) / 2
        omega = (t.a + 0.5) * (t.d + 0.5) / ((t.b + 0.5) * (t.c + 0.5))
    return math.cos(math.pi / (1 + omega**c_bp))


def bonett_price_y(field1, field2, categories1=None, categories2=None) -> float:
    """Bonett and Price's adjusted Yule's Y."""
    return _bonett_price_y(table_cells(field1, field2, categories1, categories2))


def camp_r(field1, field2, categories1=None, categories2=None, method: str = "cureton") -> float:
    """Camp's biserial approximation for a 2x2 table.

    Args:
        field1, field2: Binary fields
        categories1, categories2: Optional order of the categories
        method: "cureton" (two-decimal phi table), "camp1" (phi = 1) or
            "camp2" (one-decimal phi table)
    """
    if method not in ("cureton", "camp1", "camp2"):
        raise ValueError(f"method must be 'cureton', 'camp1' or 'camp2', got {method}")
    t = table_cells(field1, field2, categories1, categories2)
    a, b, c, d = t
    sign = 1
    if t.c1 < t.c2:
        a, b, c, d = b, a, d, c
        sign = -1
    col1, col2 = a + c, b + d
    p = col1 / t.n
    z1 = stats.norm.ppf(a / col1)
    z2 = stats.norm.ppf(d / col2)
    y = stats.norm.pdf(stats.norm.ppf(p))
    m = p * (1 - p) * (z1 + z2) / y

    tenth = math.floor(p * 10) / 10
    if method == "camp1":
        phi_value = 1.0
    elif method == "camp2":
        phi_value = CAMP_PHI[tenth]
    else:
        if tenth not in CAMP_PHI_CURETON:
            raise ValueError(f"No Cureton phi value for a column proportion of {p:.3f}")
        phi_value = CAMP_PHI_CURETON[tenth][round(p * 100) - math.floor(p * 10) * 10]
    return float(sign * m / math.sqrt(1 + phi_value * m**2))


def cole_c1(field1, field2, categories1=None, categories2=None) -> float:
    """Cole's C1."""
    return float(BIN_BIN_MEASURES["cole-c1"](table_cells(field1, field2, categories1, categories2)))


def cole_c5(field1, field2, categories1=None, categories2=None) -> float:
    """Cole's C5."""
    return _cole_c5(table_cells(field1, field2, categories1, categories2))


def cole_c7(field1, field2, categories1=None, categories2=None) -> float:
    """Cole's C7."""
    return float(_cole_c7(table_cells(field1, field2, categories1, categories2)))


def digby_h(field1, field2, categories1=None, categories2=None) -> float:
    """Digby's H."""
    return float(BIN_BIN_MEASURES["digby"](table_cells(field1, field2, categories1, categories2)))


def forbes(field1, field2, categories1=None, categories2=None) -> float:
    """Forbes' coefficient, n a / (R1 C1)."""
    return float(BIN_BIN_MEASURES["forbes-1"](table_cells(field1, field2, categories1, categories2)))


def alroy_f(field1, field2, categories1=None, categories2=None) -> float:
    """Alroy's forbes adjustment."""
    return _alroy(table_cells(field1, field2, categories1, categories2))


def mcewen_michael(field1, field2, categories1=None, categories2=None) -> float:
    """McEwen and Michael's coefficient."""
    return float(BIN_BIN_MEASURES["mcewen-michael"](table_cells(field1, field2, categories1, categories2)))
