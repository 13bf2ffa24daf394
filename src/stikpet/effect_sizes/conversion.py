"""Conversions between effect size measures."""

from __future__ import annotations

import math
from typing import Any, Callable, Dict, Tuple

from scipy import stats

Converter = Callable[[float, Any, Any], float]


def _d_to_or(es, ex1, ex2):
    if ex1 == "chinn":
        return math.exp(1.81 * es)
    return math.exp(es * math.pi / math.sqrt(3))


def _or_to_d(es, ex1, ex2):
    if ex1 == "chinn":
        return math.log(es) / 1.81
    return math.log(es) * math.sqrt(3) / math.pi


# ex1/ex2 per conversion: cramervgof k; epsilonsq/etasq n and k; omegasq
# dfb and dfw; jbme and fei the minimum expected proportion; or "chinn"
CONVERSIONS: Dict[Tuple[str, str], Converter] = {
    ("cohendos", "cohend"): lambda es, ex1, ex2: es * math.sqrt(2),
    ("cohend", "or"): _d_to_or,
    ("or", "cohend"): _or_to_d,
    ("cohend", "r"): lambda es, ex1, ex2: es / math.sqrt(es**2 + 4),
    ("r", "cohend"): lambda es, ex1, ex2: 2 * es / math.sqrt(1 - es**2),
    ("cohend", "cle"): lambda es, ex1, ex2: float(stats.norm.cdf(es / math.sqrt(2))),
    ("cohenf", "etasq"): lambda es, ex1, ex2: es**2 / (1 + es**2),
    ("etasq", "cohenf"): lambda es, ex1, ex2: math.sqrt(es / (1 - es)),
    ("cohenhos", "cohenh"): lambda es, ex1, ex2: es * math.sqrt(2),
    ("cohenw", "cc"): lambda es, ex1, ex2: math.sqrt(es**2 / (1 + es**2)),
    ("cc", "cohenw"): lambda es, ex1, ex2: math.sqrt(es**2 / (1 - es**2)),
    ("cramervgof", "cohenw"): lambda es, ex1, ex2: es * math.sqrt(ex1 - 1),
    ("cohenw", "cramervgof"): lambda es, ex1, ex2: es / math.sqrt(ex1 - 1),
    ("epsilonsq", "etasq"): lambda es, ex1, ex2: 1 - (1 - es) * (ex1 - ex2) / (ex1 - 1),
    ("etasq", "epsilonsq"): lambda es, ex1, ex2: (ex1 * es - ex2 + (1 - es)) / (ex1 - ex2),
    ("epsilonsq", "omegasq"): lambda es, ex1, ex2: es * (1 - ex1 / (ex2 + ex1)),
    ("omegasq", "epsilonsq"): lambda es, ex1, ex2: es / (1 - ex1 / (ex2 + ex1)),
    ("jbme", "cohenw"): lambda es, ex1, ex2: math.sqrt(es * (1 - ex1) / ex1),
    ("cohenw", "jbme"): lambda es, ex1, ex2: es**2 * ex1 / (1 - ex1),
    ("jbme", "fei"): lambda es, ex1, ex2: math.sqrt(es),
    ("fei", "jbme"): lambda es, ex1, ex2: es**2,
    ("or", "yuleq"): lambda es, ex1, ex2: (es - 1) / (es + 1),
    ("or", "yuley"): lambda es, ex1, ex2: (math.sqrt(es) - 1) / (math.sqrt(es) + 1),
    ("yuleq", "or"): lambda es, ex1, ex2: (1 + es) / (1 - es),
    ("yuleq", "yuley"): lambda es, ex1, ex2: (1 - math.sqrt(1 - es**2)) / es,
    ("yuley", "or"): lambda es, ex1, ex2: ((1 + es) / (1 - es)) ** 2,
    ("yuley", "yuleq"): lambda es, ex1, ex2: 2 * es / (1 + es**2),
    ("rb", "vda"): lambda es, ex1, ex2: (es + 1) / 2,
    ("vda", "rb"): lambda es, ex1, ex2: 2 * es - 1,
    ("rb", "cle"): lambda es, ex1, ex2: (es + 1) / 2,
    ("cle", "rb"): lambda es, ex1, ex2: 2 * es - 1,
    ("cle", "cohend"): lambda es, ex1, ex2: math.sqrt(2) * float(stats.norm.ppf(es)),
    ("rb", "cohend"): lambda es, ex1, ex2: math.sqrt(2) * float(stats.norm.ppf((es + 1) / 2)),
}


def convert_es(es: float, fr: str, to: str, ex1: Any = None, ex2: Any = None) -> float:
    """Convert an effect size to another measure.

    Args:
        es: Effect size value
        fr: Measure of ``es``, e.g. "cohend", "or", "etasq"
        to: Target measure
        ex1, ex2: Extra information some conversions need (see ``CONVERSIONS``)

    Returns:
        The converted value

    Raises:
        ValueError: If the conversion is not available
    """
    try:
        converter = CONVERSIONS[(fr, to)]
    except KeyError:
        raise ValueError(f"No conversion from {fr} to {to}") from None
    return float(converter(es, ex1, ex2))
