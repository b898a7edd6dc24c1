from __future__ import annotations
import logging
from typing import Iterable, Optional

import numpy as np
import pandas as pd

from .config import TAXON_COL, SAMPLE_COL, DENSITY_COL, COUNT_COL, IS_CONTROL_COL
from .predicates import ControlPredicate, classify_samples
from .validators import assert_formatted

logger = logging.getLogger(__name__)


def require_columns(df: pd.DataFrame, cols: Iterable[str]) -> None:
    """Raise KeyError listing every requested column that is absent from df."""
    missing = [c for c in cols if c not in df.columns]
    if missing:
        raise KeyError(f"Columns not found: {missing}. Available: {list(df.columns)[:20]}")


def cast_numeric(df: pd.DataFrame, cols: Iterable[str]) -> pd.DataFrame:
    """
    Cast columns to float, coercing textual representations.

    Args:
        df: Input DataFrame
        cols: Columns to cast

    Returns:
        DataFrame with the columns as float64; unparseable values become NaN
    """
    df = df.copy()
    for col in cols:
        s = df[col]
        if not pd.api.types.is_numeric_dtype(s):
            s = s.astype(str).str.strip()
        df[col] = pd.to_numeric(s, errors="coerce").astype(float)
    return df


def harmonize_ids(df: pd.DataFrame, id_col: str = TAXON_COL) -> pd.DataFrame:
    """
    Standardize ID column values as whitespace-stripped strings.

    Args:
        df: Input DataFrame
        id_col: Name of the ID column to harmonize (default: "taxon_id")

    Returns:
        DataFrame with standardized ID column
    """
    if id_col in df.columns:
        df = df.copy()
        df[id_col] = df[id_col].astype(str).str.strip()
    return df


def drop_undefined_density(df: pd.DataFrame, density_col: str = DENSITY_COL) -> pd.DataFrame:
    """Remove rows whose buoyant density is NaN or infinite."""
    keep = np.isfinite(df[density_col].to_numpy(dtype=float))
    n_drop = int((~keep).sum())
    if n_drop:
        logger.debug("Dropping %d rows with undefined or infinite %s", n_drop, density_col)
    return df.loc[keep]


def ensure_nonnegative(df: pd.DataFrame, col: str = COUNT_COL) -> pd.DataFrame:
    """
    Validate that a numeric column holds no negative values (NaN is allowed).

    Raises:
        ValueError: If negative values are found
    """
    if (df[col] < 0).any():
        raise ValueError(f"Negative values found in column '{col}'.")
    return df


def format_abundance_table(
    table: pd.DataFrame,
    control: ControlPredicate,
    replicate_col: Optional[str] = None,
    *,
    taxon_col: str = TAXON_COL,
    sample_col: str = SAMPLE_COL,
    density_col: str = DENSITY_COL,
    count_col: str = COUNT_COL,
) -> pd.DataFrame:
    """
    Format a long-format abundance table (one row per taxon x fraction) for SIP analysis.

    The control predicate is evaluated once per sample to set `is_control`;
    density and count are cast to numbers; rows with undefined or infinite
    density are dropped.

    Args:
        table: Long-format table with taxon, sample, density and count columns
            plus the sample metadata used by `control`
        control: Predicate classifying a sample record as control (True)
        replicate_col: Optional column designating replicate gradients
        taxon_col, sample_col, density_col, count_col: Input column names

    Returns:
        DataFrame with columns taxon_id, sample_id, is_control, buoyant_density,
        count and, if given, replicate_col

    Raises:
        KeyError: If a required column or a predicate column is missing
        ValueError: If no rows remain after formatting, or counts are negative
    """
    required = [taxon_col, sample_col, density_col, count_col]
    if replicate_col is not None:
        clashes = {taxon_col, density_col, count_col, TAXON_COL, IS_CONTROL_COL, DENSITY_COL, COUNT_COL}
        if replicate_col in clashes or (replicate_col == SAMPLE_COL and sample_col != SAMPLE_COL):
            raise ValueError(f"replicate_col '{replicate_col}' clashes with a data column")
        required.append(replicate_col)
    require_columns(table, required)

    flags = classify_samples(table, control, sample_col)

    out = pd.DataFrame({
        TAXON_COL: table[taxon_col].to_numpy(),
        SAMPLE_COL: table[sample_col].to_numpy(),
        IS_CONTROL_COL: table[sample_col].map(flags).astype(bool).to_numpy(),
        DENSITY_COL: table[density_col].to_numpy(),
        COUNT_COL: table[count_col].to_numpy(),
    })
    if replicate_col is not None:
        out[replicate_col] = table[replicate_col].to_numpy()

    out = cast_numeric(out, [DENSITY_COL, COUNT_COL])
    out = harmonize_ids(out, TAXON_COL)
    out = harmonize_ids(out, SAMPLE_COL)
    out = drop_undefined_density(out, DENSITY_COL).reset_index(drop=True)
    if out.empty:
        raise ValueError(
            "No rows in the abundance table after formatting. "
            "Check the control predicate and column names."
        )
    ensure_nonnegative(out, COUNT_COL)
    assert_formatted(out, replicate_col)
    logger.debug("Formatted table: %d rows, %d taxa, %d samples",
                 len(out), out[TAXON_COL].nunique(), out[SAMPLE_COL].nunique())
    return out
