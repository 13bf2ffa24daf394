"""Rules of thumb for classifying effect sizes."""

from __future__ import annotations

from bisect import bisect_right
from typing import Dict, List, Optional, Tuple
import numpy as np
import pandas as pd

from stikpet.effect_sizes.conversion import convert_es

# upper bounds (exclusive), labels for each interval, reference
Rule = Tuple[List[float], List[str], str]

NEG_S_M_L = ["negligible", "small", "medium", "large"]

COHEN_D: Dict[str, Rule] = {
    "cohen": ([0.2, 0.5, 0.8], NEG_S_M_L, "Cohen (1988, p. 40)"),
    "lovakov": ([0.15, 0.35, 0.65], NEG_S_M_L, "Lovakov and Agadullina (2021, p. 501)"),
    "rosenthal": ([0.2, 0.5, 0.8, 1.3], NEG_S_M_L + ["very large"], "Rosenthal (1996, p. 45)"),
    "sawilowsky": (
        [0.1, 0.2, 0.5, 0.8, 1.2, 2],
        ["negligible", "very small", "small", "medium", "large", "very large", "huge"],
        "Sawilowsky (2009, p. 599)",
    ),
}

VARGHA_DELANEY: Rule = ([0.06, 0.14, 0.21], NEG_S_M_L, "Vargha and Delaney (2000, p. 106)")

CLIFF_DELTA: Dict[str, Rule] = {
    "romano": ([0.15, 0.33, 0.47], NEG_S_M_L, "Romano et al. (2006, p. 14)"),
    "metsamuuronen": ([0.11, 0.28, 0.43], NEG_S_M_L, "Metsämuuronen (2023, p. 17)"),
}

COHEN_F: Dict[str, Rule] = {"cohen": ([0.1, 0.25, 0.4], NEG_S_M_L, "Cohen (1988, pp. 285-287)")}
COHEN_G: Dict[str, Rule] = {"cohen": ([0.05, 0.15, 0.25], NEG_S_M_L, "Cohen (1988, pp. 147-149)")}
COHEN_H: Dict[str, Rule] = {"cohen": ([0.2, 0.5, 0.8], NEG_S_M_L, "Cohen (1988, p. 198)")}
COHEN_W: Dict[str, Rule] = {"cohen": ([0.1, 0.3, 0.5], NEG_S_M_L, "Cohen (1988, p. 227)")}

CRAMER_V: Dict[str, Rule] = {
    "rea-parker": (
        [0.1, 0.2, 0.4, 0.6, 0.8],
        ["negligible", "weak", "moderate", "relatively strong", "strong", "very strong"],
        "Rea and Parker (1992, p. 203)",
    ),
    "akoglu": (
        [0.05, 0.1, 0.15, 0.25],
        ["very weak", "weak", "moderate", "strong", "very strong"],
        "Akoglu (2018, p. 92)",
    ),
    "calamba-rustico": (
        [0.15, 0.2, 0.25, 0.3, 0.35, 0.5],
        ["very weak", "weak", "moderate", "moderately strong", "strong", "worrisomely strong", "redundant"],
        "Calamba and Rustico (2019, p. 7)",
    ),
}

GK_GAMMA: Dict[str, Rule] = {
    "blaikie": (
        [0.1, 0.3, 0.6, 0.75],
        ["negligible", "weak", "moderate", "strong", "very strong"],
        "Blaikie (2003, p. 100)",
    ),
    "rea-parker": (
        [0.1, 0.3, 0.6, 0.75],
        ["negligible", "low", "moderate", "strong", "very strong"],
        "Rea and Parker (2014, p. 229)",
    ),
    "metsamuuronen": (
        [0.14, 0.31, 0.45, 0.62, 0.84],
        NEG_S_M_L + ["very large", "huge"],
        "Metsämuuronen (2023, p. 17)",
    ),
}

KAISER_B: Dict[str, Rule] = {
    "kaiser": ([0.7, 0.8, 0.9, 0.95], ["terrible", "poor", "fair", "good", "excellent"], "Kaiser (1968, p. 212)"),
}

ODDS_RATIO: Dict[str, Rule] = {
    "chen": ([1.68, 3.47, 6.71], ["negligible", "weak", "moderate", "strong"], "Chen et al. (2010, p. 862)"),
    "hopkins": (
        [1.5, 3.5, 9, 32, 360],
        ["trivial", "small", "moderate", "large", "very large", "nearly perfect"],
        "Hopkins (2006, tbl. 1)",
    ),
    "jones1": ([1.5, 2.5, 4.3], NEG_S_M_L, "Jones (2014)"),
    "jones2": ([1.5, 3.5, 9], NEG_S_M_L, "Jones (2014)"),
    "wuensch": ([1.49, 3.45, 9], NEG_S_M_L, "Wuensch (2009, p. 2)"),
}

_BRYDGES: Rule = (
    [0.1, 0.2, 0.3],
    NEG_S_M_L,
    "Brydges (2019, p. 5); Gignac and Szodorai (2016, p. 75); Hemphill (2003, p. 78)",
)

PEARSON_R: Dict[str, Rule] = {
    "agnes": ([0.2, 0.4, 0.6, 0.8], ["negligible", "low", "moderate", "marked", "high"], "Agnes (2011)"),
    "bartz": ([0.2, 0.4, 0.6, 0.8], ["very low", "low", "moderate", "strong", "very high"], "Bartz (1988, p. 199)"),
    "brydges": _BRYDGES,
    "gignac": _BRYDGES,
    "hemphill": _BRYDGES,
    "cohen": ([0.1, 0.3, 0.5], NEG_S_M_L, "Cohen (1988, p. 82)"),
    "disha": (
        [0.1, 0.3, 0.5, 0.7, 0.9],
        ["markedly low and negligible", "very low", "low", "moderate", "high", "very high"],
        "Disha (2016)",
    ),
    "funder": (
        [0.05, 0.1, 0.2, 0.3, 0.4],
        ["negligible", "very small", "small", "medium", "large", "very large"],
        "Funder and Ozer (2019, p. 166)",
    ),
    "hopkins": (
        [0.1, 0.3, 0.5, 0.7, 0.9],
        ["trivial", "low", "moderate", "high", "very large", "nearly perfect"],
        "Hopkins (2006, tbl. 1)",
    ),
    "lovakov": ([0.12, 0.24, 0.41], NEG_S_M_L, "Lovakov and Agadullina (2021, p. 514)"),
    "rafter": ([0.25, 0.75], ["weak", "moderate", "strong"], "Rafter et al. (2003, p. 194)"),
    "rea": (
        [0.1, 0.3, 0.6, 0.75],
        ["negligible", "low", "moderate", "strong", "very strong"],
        "Rea and Parker (2014, pp. 229, 271)",
    ),
    "rosenthal": ([0.1, 0.3, 0.5, 0.7], NEG_S_M_L + ["very large"], "Rosenthal (1996, p. 45)"),
    "rumsey": ([0.3, 0.5, 0.7], ["negligible", "weak", "moderate", "strong"], "Rumsey (2011, p. 284)"),
}

POINT_BISERIAL: Dict[str, Rule] = {"cohen": ([0.1, 0.243, 0.371], NEG_S_M_L, "Cohen (1988, p. 82)")}

RANK_BISERIAL: Dict[str, Rule] = {
    "cohen": ([0.125, 0.304, 0.465], NEG_S_M_L, "Cohen (1988, p. 82)"),
    "vd": ([0.11, 0.28, 0.43], NEG_S_M_L, "Vargha and Delaney (2000, p. 106)"),
}

SOMERS_D: Dict[str, Rule] = {
    "metsamuuronen": (
        [0.13, 0.29, 0.43, 0.59, 0.81],
        NEG_S_M_L + ["very large", "huge"],
        "Metsämuuronen (2023, p. 17)",
    ),
}

YULE_Q: Dict[str, Rule] = {
    "glen": ([0.29, 0.49, 0.69], ["very small", "moderate", "substantial", "very strong"], "Glen (n.d.)"),
}

# rules for d that rank based measures can use after conversion
D_CONVERTIBLE = ["sawilowsky", "cohen-conv", "lovakov", "rosenthal"]


def _result(classification: str, reference: str) -> pd.DataFrame:
    return pd.DataFrame({"classification": [classification], "reference": [reference]})


def _classify(value: float, rules: Dict[str, Rule], qual: str) -> pd.DataFrame:
    if qual not in rules:
        raise ValueError(f"qual must be one of {list(rules)}, got {qual}")
    bounds, labels, reference = rules[qual]
    return _result(labels[bisect_right(bounds, abs(value))], reference)


def thumb_cohen_d(d: float, qual: str = "sawilowsky") -> pd.DataFrame:
    """Classify Cohen d.

    Args:
        d: Cohen d (sign is ignored)
        qual: "cohen", "lovakov", "rosenthal" or "sawilowsky"

    Returns:
        One-row DataFrame with classification and reference

    Raises:
        ValueError: If qual is unknown
    """
    return _classify(d, COHEN_D, qual)


def _via_cohen_d(rb: float, qual: str) -> pd.DataFrame:
    d = convert_es(rb, fr="rb", to="cohend")
    return thumb_cohen_d(d, "cohen" if qual == "cohen-conv" else qual)


def thumb_rank_biserial(rb: float, qual: str = "cohen") -> pd.DataFrame:
    """Classify a rank biserial correlation.

    "cohen" and "vd" classify rb directly; "sawilowsky", "cohen-conv",
    "lovakov" and "rosenthal" classify the Cohen d it converts to.
    """
    if qual in D_CONVERTIBLE:
        return _via_cohen_d(rb, qual)
    return _classify(rb, RANK_BISERIAL, qual)


def thumb_vda(a: float, qual: str = "vd") -> pd.DataFrame:
    """Classify the Vargha-Delaney A by its distance from 0.5, or via Cohen d."""
    if qual in D_CONVERTIBLE:
        return _via_cohen_d(convert_es(a, fr="vda", to="rb"), qual)
    return _classify(0.5 - a, {"vd": VARGHA_DELANEY}, qual)


def thumb_cle(cle: float, qual: str = "vd", convert: str = "no") -> pd.DataFrame:
    """Classify a common language effect size.

    Args:
        cle: Common language effect size (probability)
        qual: Rule to use; "vd" without conversion, a rank biserial rule for
            convert="rb", a Cohen d rule for convert="cohen_d"
        convert: "no", "rb" (via the rank biserial correlation) or
            "cohen_d" (via Cohen d)
    """
    if convert == "no":
        return _classify(0.5 - cle, {"vd": VARGHA_DELANEY}, qual)
    rb = convert_es(cle, fr="cle", to="rb")
    if convert == "rb":
        return thumb_rank_biserial(rb, qual)
    if convert == "cohen_d":
        return thumb_cohen_d(convert_es(rb, fr="rb", to="cohend"), qual)
    raise ValueError(f"convert must be 'no', 'rb' or 'cohen_d', got {convert}")


def thumb_cliff_delta(d: float, qual: str = "romano") -> pd.DataFrame:
    """Classify Cliff delta ("romano" or "metsamuuronen")."""
    return _classify(d, CLIFF_DELTA, qual)


def thumb_cohen_f(f: float, qual: str = "cohen") -> pd.DataFrame:
    return _classify(f, COHEN_F, qual)


def thumb_cohen_g(g: float, qual: str = "cohen") -> pd.DataFrame:
    return _classify(g, COHEN_G, qual)


def thumb_cohen_h(h: float, qual: str = "cohen") -> pd.DataFrame:
    return _classify(h, COHEN_H, qual)


def thumb_cohen_w(w: float, qual: str = "cohen") -> pd.DataFrame:
    return _classify(w, COHEN_W, qual)


def thumb_cramer_v(v: float, qual: str = "rea-parker") -> pd.DataFrame:
    """Classify Cramér V ("rea-parker", "akoglu" or "calamba-rustico")."""
    return _classify(v, CRAMER_V, qual)


def thumb_gk_gamma(g: float, qual: str = "blaikie") -> pd.DataFrame:
    """Classify Goodman-Kruskal gamma ("blaikie", "rea-parker" or "metsamuuronen")."""
    return _classify(g, GK_GAMMA, qual)


def thumb_kaiser_b(b: float, qual: str = "kaiser") -> pd.DataFrame:
    return _classify(b, KAISER_B, qual)


def thumb_odds_ratio(odds_ratio: float, qual: str = "chen") -> pd.DataFrame:
    """Classify an odds ratio; ratios below 1 are inverted first.

    Args:
        odds_ratio: Odds ratio
        qual: "chen", "hopkins", "jones1", "jones2" or "wuensch"
    """
    if odds_ratio < 1:
        odds_ratio = 1 / odds_ratio
    return _classify(odds_ratio, ODDS_RATIO, qual)


def thumb_pearson_r(r: float, qual: str = "bartz") -> pd.DataFrame:
    """Classify a Pearson (or other) correlation coefficient.

    Args:
        r: Correlation coefficient (sign is ignored)
        qual: One of the keys of ``PEARSON_R``
    """
    return _classify(r, PEARSON_R, qual)


def thumb_point_biserial(rp: float, qual: str = "cohen") -> pd.DataFrame:
    return _classify(rp, POINT_BISERIAL, qual)


def thumb_somers_d(d: float, qual: str = "metsamuuronen") -> pd.DataFrame:
    return _classify(d, SOMERS_D, qual)


def thumb_yule_q(q: float, qual: str = "glen") -> pd.DataFrame:
    return _classify(q, YULE_Q, qual)


def thumb_post_hoc_gof(
    eff_sizes: pd.DataFrame, convert: bool = False, ph_results: Optional[pd.DataFrame] = None, qual: Optional[str] = None
) -> pd.DataFrame:
    """Classify the effect sizes of a goodness-of-fit post-hoc analysis.

    Args:
        eff_sizes: Output of ``effect_sizes.post_hoc_gof``
        convert: Convert before classifying: Cohen h from the one-sample
            version, Cohen w to Cramér V or back, JBM-E and Fei to Cramér V
            instead of Cohen w
        ph_results: The post-hoc results the effect sizes came from; needed
            for JBM-E and Fei (their minExp and sizes)
        qual: Rule passed on to the classifier (default: its own default)

    Returns:
        Copy of eff_sizes with the converted values (when converted),
        classification and reference

    Raises:
        ValueError: If JBM-E or Fei are given without ph_results
    """
    df = eff_sizes.copy()
    kwargs = {} if qual is None else {"qual": qual}

    if "alternative ratio" in df.columns:
        df["classification"] = "no rules-of-thumb available"
        df["reference"] = "n.a."
        return df

    if "Rosenthal correlation" in df.columns:
        values = df["Rosenthal correlation"].to_numpy(dtype=float)
        rule, label = thumb_pearson_r, None
    elif "Cohen g" in df.columns:
        values = df["Cohen g"].to_numpy(dtype=float)
        rule, label = thumb_cohen_g, None
    elif "Cohen h" in df.columns:
        values = df["Cohen h"].to_numpy(dtype=float)
        rule, label = thumb_cohen_h, None
        if convert:
            values = np.array([convert_es(v, "cohenhos", "cohenh") for v in values])
            label = "Cohen h_2 to Cohen h"
    elif "Cohen w" in df.columns or "Cramér V" in df.columns:
        from_w = "Cohen w" in df.columns
        values = df["Cohen w" if from_w else "Cramér V"].to_numpy(dtype=float)
        if from_w:
            rule, label = (thumb_cramer_v, "Cohen w to Cramér V") if convert else (thumb_cohen_w, None)
            if convert:
                values = np.array([convert_es(v, "cohenw", "cramervgof", ex1=2) for v in values])
        else:
            rule, label = (thumb_cohen_w, "Cramér V to Cohen w") if convert else (thumb_cramer_v, None)
            if convert:
                values = np.array([convert_es(v, "cramervgof", "cohenw", ex1=2) for v in values])
    elif "Johnston-Berry-Mielke E" in df.columns or "Fei" in df.columns:
        if ph_results is None:
            raise ValueError("JBM-E and Fei need the post-hoc results to be classified")
        fr, col = ("jbme", "Johnston-Berry-Mielke E") if "Fei" not in df.columns else ("fei", "Fei")
        if "n1" in ph_results.columns:
            n = ph_results["n1"].to_numpy(dtype=float) + ph_results["n2"].to_numpy(dtype=float)
        else:
            n = np.full(len(ph_results), ph_results["obs. count"].astype(float).sum())
        min_prop = ph_results["minExp"].to_numpy(dtype=float) / n
        es = df[col].to_numpy(dtype=float)
        if fr == "fei":
            es = np.array([convert_es(v, "fei", "jbme") for v in es])
        values = np.array([convert_es(v, "jbme", "cohenw", ex1=p) for v, p in zip(es, min_prop)])
        label = f"{'JBM-E' if fr == 'jbme' else 'Fei'} to Cohen w"
        rule = thumb_cohen_w
        if convert:
            values = np.array([convert_es(v, "cohenw", "cramervgof", ex1=2) for v in values])
            label = f"{'JBM-E' if fr == 'jbme' else 'Fei'} to Cramér V"
            rule = thumb_cramer_v
    else:
        raise ValueError(f"No known effect size column in {list(df.columns)}")

    classified = [rule(v, **kwargs) for v in values]
    if label is not None:
        df[label] = values
    df["classification"] = [c["classification"].iloc[0] for c in classified]
    df["reference"] = [c["reference"].iloc[0] for c in classified]
    return df
