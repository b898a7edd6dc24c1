from __future__ import annotations
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Sequence, Union

import pandas as pd

from .atom_excess import AtomExcessResult, qsip_atom_excess
from .bootstrap import SeedLike, qsip_bootstrap
from .config import (
    TAXON_COL, SAMPLE_COL, DENSITY_COL, COUNT_COL,
    DEFAULT_N_INTERP, DEFAULT_N_SAMPLE, DEFAULT_N_BOOT, DEFAULT_ALPHA,
)
from .data_io import save_atom_excess, save_table
from .delta_bd import delta_bd
from .predicates import ControlPredicate
from .transform import qpcr_rescale

logger = logging.getLogger(__name__)


@dataclass
class SIPResults:
    delta_bd: pd.DataFrame
    atom_excess: AtomExcessResult
    bootstrap: pd.DataFrame


def run_sip_analysis(
    table: pd.DataFrame,
    control: ControlPredicate,
    replicate_col: str,
    isotope: str = "13C",
    *,
    qpcr: Optional[Union[pd.Series, Mapping]] = None,
    n: int = DEFAULT_N_INTERP,
    n_sample: Sequence[int] = DEFAULT_N_SAMPLE,
    n_boot: int = DEFAULT_N_BOOT,
    a: float = DEFAULT_ALPHA,
    parallel: Union[bool, int] = False,
    seed: SeedLike = None,
    out_dir: Optional[Union[str, Path]] = None,
    taxon_col: str = TAXON_COL,
    sample_col: str = SAMPLE_COL,
    density_col: str = DENSITY_COL,
    count_col: str = COUNT_COL,
) -> SIPResults:
    """
    Run both SIP branches on one abundance table.

    delta_BD uses the raw counts (it rescales to relative abundance itself);
    q-SIP uses qPCR-rescaled counts when `qpcr` (sample id -> copy number) is given.
    With out_dir set, every result table is written there as Parquet.
    """
    cols = dict(taxon_col=taxon_col, sample_col=sample_col, density_col=density_col, count_col=count_col)

    # ---- delta_BD ----
    df_dbd = delta_bd(table, control, n=n, parallel=parallel, **cols)
    logger.info("delta_BD computed for %d taxa (%d undefined)",
                len(df_dbd), int(df_dbd["delta_BD"].isna().sum()))

    # ---- q-SIP ----
    qsip_table = table
    if qpcr is not None:
        qsip_table = qpcr_rescale(table, qpcr, sample_col=sample_col, count_col=count_col)
    atomx = qsip_atom_excess(qsip_table, control, replicate_col, isotope, **cols)
    df_boot = qsip_bootstrap(atomx, n_sample=n_sample, n_boot=n_boot, a=a,
                             parallel=parallel, seed=seed)
    logger.info("q-SIP bootstrap finished: %d taxa with CI", int(df_boot["A_CI_low"].notna().sum()))

    if out_dir is not None:
        save_table(df_dbd, out_dir, "delta_bd.parquet")
        save_atom_excess(atomx, out_dir)
        save_table(df_boot, out_dir, "atom_excess_bootstrap.parquet")
        logger.info("Results written to %s", out_dir)

    return SIPResults(delta_bd=df_dbd, atom_excess=atomx, bootstrap=df_boot)
