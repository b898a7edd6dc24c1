from __future__ import annotations
from typing import Iterable, Mapping, Union

import numpy as np
import pandas as pd

from .cleaning import cast_numeric
from .config import SAMPLE_COL, COUNT_COL


def total_sum_scale(df: pd.DataFrame, group_cols: Union[str, Iterable[str]] = SAMPLE_COL,
                    count_col: str = COUNT_COL) -> pd.DataFrame:
    """
    Total-sum scaling: divide each count by its group's total count.
    Groups with a zero (or undefined) total yield 0 instead of NaN; rows with
    an undefined count stay NaN so that they are skipped downstream.
    """
    if isinstance(group_cols, str):
        group_cols = [group_cols]
    df = df.copy()
    totals = df.groupby(list(group_cols), dropna=False)[count_col].transform("sum")
    with np.errstate(divide="ignore", invalid="ignore"):
        rel = df[count_col] / totals
    df[count_col] = rel.mask(rel.isna() & df[count_col].notna(), 0.0)
    return df


def qpcr_rescale(df: pd.DataFrame, qpcr: Union[pd.Series, Mapping], sample_col: str = SAMPLE_COL,
                 count_col: str = COUNT_COL) -> pd.DataFrame:
    """
    Rescale counts to quantitative abundances: relative abundance within each
    sample multiplied by that sample's qPCR gene copy number.

    qpcr maps sample id -> copy number. Every sample in df must be present.
    """
    qpcr = pd.Series(qpcr, dtype=float)
    qpcr.index = qpcr.index.astype(str).str.strip()
    samples = df[sample_col].astype(str).str.strip()
    missing = sorted(set(samples) - set(qpcr.index))
    if missing:
        raise KeyError(f"Samples missing from qPCR table: {missing[:20]}")
    if (qpcr < 0).any():
        raise ValueError("qpcr_rescale requires nonnegative copy numbers.")
    out = total_sum_scale(cast_numeric(df, [count_col]), sample_col, count_col)
    out[count_col] = out[count_col].to_numpy(dtype=float) * samples.map(qpcr).to_numpy(dtype=float)
    return out
