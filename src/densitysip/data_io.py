from __future__ import annotations
import json
from pathlib import Path
from typing import Union

import pandas as pd

from .atom_excess import AtomExcessResult

PathLike = Union[str, Path]


def save_table(df: pd.DataFrame, directory: PathLike, name: str) -> Path:
    """
    Save a DataFrame to directory as a Parquet file.

    Args:
        df: The DataFrame to save
        directory: Target directory (created if needed)
        name: The filename (without path) for the saved file

    Returns:
        Path: The full path to the saved file
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    df.to_parquet(path, index=False)
    return path


def load_table(directory: PathLike, name: str) -> pd.DataFrame:
    """
    Load a DataFrame saved with save_table.

    Args:
        directory: Directory holding the file
        name: The filename (without path) to load

    Returns:
        pd.DataFrame: The loaded DataFrame
    """
    return pd.read_parquet(Path(directory) / name)


def save_atom_excess(result: AtomExcessResult, directory: PathLike) -> Path:
    """Persist the W and A tables of a q-SIP result so bootstrapping can run later."""
    directory = Path(directory)
    save_table(result.W, directory, "atom_excess_W.parquet")
    save_table(result.A, directory, "atom_excess_A.parquet")
    meta = {"isotope": result.isotope, "replicate_col": result.replicate_col}
    (directory / "atom_excess_meta.json").write_text(json.dumps(meta))
    return directory


def load_atom_excess(directory: PathLike) -> AtomExcessResult:
    directory = Path(directory)
    meta = json.loads((directory / "atom_excess_meta.json").read_text())
    return AtomExcessResult(
        W=load_table(directory, "atom_excess_W.parquet"),
        A=load_table(directory, "atom_excess_A.parquet"),
        isotope=meta["isotope"],
        replicate_col=meta.get("replicate_col"),
    )
