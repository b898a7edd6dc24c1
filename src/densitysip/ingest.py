from __future__ import annotations
from pathlib import Path
from typing import Optional, Union

import pandas as pd

from .config import TAXON_COL, SAMPLE_COL, COUNT_COL


def read_abundance_table(path: Union[str, Path], sheet_name: Union[str, int] = 0) -> pd.DataFrame:
    """Read a long-format abundance table from .csv, .tsv/.txt or .xlsx."""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return pd.read_csv(path)
    if suffix in (".tsv", ".txt"):
        return pd.read_csv(path, sep="\t")
    if suffix == ".xlsx":
        return pd.read_excel(path, sheet_name=sheet_name, engine="openpyxl")
    raise ValueError(f"Unsupported abundance table format: {path.suffix}")


def otu_table_to_long(
    otu_table: pd.DataFrame,
    sample_data: pd.DataFrame,
    *,
    taxa_are_rows: bool = True,
    sample_col: str = SAMPLE_COL,
    taxon_col: str = TAXON_COL,
    count_col: str = COUNT_COL,
    sample_col_keep: Optional[list[str]] = None,
) -> pd.DataFrame:
    """
    Melt a wide OTU count matrix and join the sample metadata.

    Args:
        otu_table: counts, taxa x samples (or samples x taxa if taxa_are_rows=False),
            with taxon and sample ids as index/columns
        sample_data: sample metadata indexed by sample id
        sample_col_keep: metadata columns to keep (default: all)

    Returns:
        Long-format DataFrame with one row per (taxon, sample)

    Raises:
        KeyError: If samples in the OTU table have no metadata
    """
    counts = otu_table if taxa_are_rows else otu_table.T
    counts = counts.copy()
    counts.index = counts.index.astype(str)
    counts.columns = counts.columns.astype(str)

    meta = sample_data.copy()
    meta.index = meta.index.astype(str)
    missing = [s for s in counts.columns if s not in meta.index]
    if missing:
        raise KeyError(f"Samples without metadata: {missing[:20]}")
    if sample_col_keep is not None:
        meta = meta.loc[:, list(sample_col_keep)]

    long = (
        counts.rename_axis(index=taxon_col, columns=None)
        .reset_index()
        .melt(id_vars=taxon_col, var_name=sample_col, value_name=count_col)
    )
    meta = meta.rename_axis(sample_col).reset_index()
    return long.merge(meta, on=sample_col, how="left")
