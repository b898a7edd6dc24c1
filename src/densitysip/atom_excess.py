"""
q-SIP atom fraction excess (Hungate et al. 2015).

This module provides:
- weighted_mean_bd: count-weighted mean buoyant density (W) per taxon, class and replicate.
- calc_gi / calc_mlight / calc_mheavymax / calc_mlab / calc_atom_excess: the
  molecular-weight formula chain, vectorized over numpy arrays or pandas Series.
- summarize_atom_excess: the per-taxon summary (Wlight, Wlab, Z, Gi, Mlight,
  Mheavymax, Mlab, A) computed from any W-table, observed or resampled.
- qsip_atom_excess: formatting + W + summary in one call.

Notes
-----
- Division by zero (zero total count, Wlight == 0, Mheavymax == Mlight) yields
  NaN for the affected taxon instead of raising, so one degenerate taxon never
  aborts the whole table.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

import numpy as np
import pandas as pd

from .cleaning import format_abundance_table, require_columns
from .config import (
    TAXON_COL, SAMPLE_COL, DENSITY_COL, COUNT_COL, IS_CONTROL_COL, W_COL,
)
from .dataframe_ops import spread_by_control
from .isotopes import GC_INTERCEPT, GC_SLOPE, MLIGHT_SLOPE, MLIGHT_INTERCEPT, get_isotope
from .predicates import ControlPredicate
from .validators import assert_w_table

logger = logging.getLogger(__name__)

__all__ = [
    "AtomExcessResult",
    "weighted_mean_bd",
    "calc_gi",
    "calc_mlight",
    "calc_mheavymax",
    "calc_mlab",
    "calc_atom_excess",
    "summarize_atom_excess",
    "qsip_atom_excess",
]

SUMMARY_COLUMNS = [TAXON_COL, "Wlab", "Wlight", "Z", "Gi", "Mlight", "Mheavymax", "Mlab", "A"]


@dataclass
class AtomExcessResult:
    W: pd.DataFrame  # is_control, taxon_id, <replicate>, W
    A: pd.DataFrame  # one row per taxon, SUMMARY_COLUMNS
    isotope: str
    replicate_col: Optional[str] = None


def _safe_divide(num, den):
    """num / den with NaN wherever den is zero."""
    num = np.asarray(num, dtype=float)
    den = np.asarray(den, dtype=float)
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.where(den == 0, np.nan, num / np.where(den == 0, 1.0, den))


# ------------------------- Weighted mean density -------------------------

def weighted_mean_bd(df: pd.DataFrame, replicate_col: str) -> pd.DataFrame:
    """
    W = sum(count * density) / sum(count) per (is_control, taxon_id, replicate).

    Rows with an undefined count are left out of the weighting; a group whose
    counts sum to zero gets W = NaN.
    """
    require_columns(df, [IS_CONTROL_COL, TAXON_COL, replicate_col, DENSITY_COL, COUNT_COL])
    counts = df[COUNT_COL].to_numpy(dtype=float)
    valid = ~np.isnan(counts)
    work = pd.DataFrame({
        IS_CONTROL_COL: df[IS_CONTROL_COL].to_numpy(dtype=bool),
        TAXON_COL: df[TAXON_COL].to_numpy(),
        replicate_col: df[replicate_col].to_numpy(),
        "_wx": np.where(valid, counts * df[DENSITY_COL].to_numpy(dtype=float), 0.0),
        "_w": np.where(valid, counts, 0.0),
    })
    sums = work.groupby([IS_CONTROL_COL, TAXON_COL, replicate_col], sort=True, dropna=False)[["_wx", "_w"]].sum()
    out = sums.index.to_frame(index=False)
    out[W_COL] = _safe_divide(sums["_wx"].to_numpy(), sums["_w"].to_numpy())
    return out


# ------------------------------ Formula chain ------------------------------

def calc_gi(wlight):
    """Fractional G+C content from unlabeled weighted mean density."""
    return (np.asarray(wlight, dtype=float) - GC_INTERCEPT) / GC_SLOPE


def calc_mlight(gi):
    """Molecular weight of unlabeled DNA."""
    return MLIGHT_SLOPE * np.asarray(gi, dtype=float) + MLIGHT_INTERCEPT


def calc_mheavymax(mlight, isotope: str = "13C", gi=np.nan):
    """Theoretical maximum molecular weight of fully labeled DNA."""
    iso = get_isotope(isotope)
    mlight = np.asarray(mlight, dtype=float)
    if iso.heavymax_gc_coef == 0:
        return iso.heavymax_offset + mlight
    return iso.heavymax_gc_coef * np.asarray(gi, dtype=float) + iso.heavymax_offset + mlight


def calc_mlab(z, wlight, mlight):
    """Molecular weight of labeled DNA: (Z / Wlight + 1) * Mlight, NaN when Wlight == 0."""
    return (_safe_divide(z, wlight) + 1) * np.asarray(mlight, dtype=float)


def calc_atom_excess(mlab, mlight, mheavymax, isotope: str = "13C"):
    """Atom fraction excess: (Mlab - Mlight) / (Mheavymax - Mlight) * (1 - x)."""
    x = get_isotope(isotope).natural_abundance
    mlight = np.asarray(mlight, dtype=float)
    ratio = _safe_divide(np.asarray(mlab, dtype=float) - mlight,
                         np.asarray(mheavymax, dtype=float) - mlight)
    return ratio * (1 - x)


def summarize_atom_excess(W: pd.DataFrame, isotope: str = "13C",
                          taxa: Optional[Iterable] = None) -> pd.DataFrame:
    """
    Per-taxon atom fraction excess from a W-table.

    Parameters:
    - W: table with columns taxon_id, is_control, W (any number of rows per taxon/class).
    - isotope: '13C' or '18O' (case-insensitive).
    - taxa: optional taxa to report; taxa absent from W get NaN rows.

    Returns:
    - DataFrame with columns taxon_id, Wlab, Wlight, Z, Gi, Mlight, Mheavymax, Mlab, A.
    """
    iso = get_isotope(isotope)
    assert_w_table(W)

    s = spread_by_control(W, W_COL, control_name="Wlight", treatment_name="Wlab")
    if taxa is not None:
        s = s.set_index(TAXON_COL).reindex(pd.Index(list(taxa), name=TAXON_COL)).reset_index()

    s["Z"] = s["Wlab"] - s["Wlight"]
    s["Gi"] = calc_gi(s["Wlight"])
    s["Mlight"] = calc_mlight(s["Gi"])
    s["Mheavymax"] = calc_mheavymax(s["Mlight"], iso.name, s["Gi"])
    s["Mlab"] = calc_mlab(s["Z"], s["Wlight"], s["Mlight"])
    s["A"] = calc_atom_excess(s["Mlab"], s["Mlight"], s["Mheavymax"], iso.name)
    return s[SUMMARY_COLUMNS]


# ------------------------------ Entry point ------------------------------

def qsip_atom_excess(
    table: pd.DataFrame,
    control: ControlPredicate,
    replicate_col: str,
    isotope: str = "13C",
    *,
    taxon_col: str = TAXON_COL,
    sample_col: str = SAMPLE_COL,
    density_col: str = DENSITY_COL,
    count_col: str = COUNT_COL,
) -> AtomExcessResult:
    """
    Calculate atom fraction excess using the q-SIP method.

    Parameters:
    - table: long-format abundance table, usually qPCR-rescaled (see transform.qpcr_rescale).
    - control: predicate identifying unlabeled control samples.
    - replicate_col: column designating replicate gradients.
    - isotope: the isotope the labeled substrate carries ('13C' or '18O').

    Returns:
    - AtomExcessResult with W (weighted mean density per taxon, class and
      replicate) and A (per-taxon summary; Z is the density shift, A the atom
      fraction excess).
    """
    iso = get_isotope(isotope)
    df = format_abundance_table(
        table, control, replicate_col,
        taxon_col=taxon_col, sample_col=sample_col,
        density_col=density_col, count_col=count_col,
    )
    W = weighted_mean_bd(df, replicate_col)
    A = summarize_atom_excess(W, iso.name)
    logger.info("q-SIP atom excess (%s): %d taxa, %d W values", iso.name, len(A), len(W))
    return AtomExcessResult(W=W, A=A, isotope=iso.name, replicate_col=replicate_col)
