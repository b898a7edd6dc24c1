from __future__ import annotations
import pandas as pd

from .config import TAXON_COL, IS_CONTROL_COL


def spread_by_control(
    df: pd.DataFrame,
    value_col: str,
    control_name: str,
    treatment_name: str,
    *,
    key: str = TAXON_COL,
    flag_col: str = IS_CONTROL_COL,
) -> pd.DataFrame:
    """
    Average value_col per (key, flag) and spread the control/treatment
    values into two columns, one row per key.

    Both output columns always exist; a key seen in only one class gets NaN
    for the other.
    """
    means = df.groupby([key, flag_col], sort=True)[value_col].mean()
    wide = means.unstack(flag_col).reindex(columns=[False, True])
    return pd.DataFrame({
        key: wide.index.to_numpy(),
        treatment_name: wide[False].to_numpy(dtype=float),
        control_name: wide[True].to_numpy(dtype=float),
    })
