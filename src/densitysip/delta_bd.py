"""
delta_BD: buoyant density shift of each taxon between labeled and unlabeled gradients
(Pepe-Ranney et al. 2016).

The relative abundance of each taxon is interpolated at a fixed set of
buoyant densities, so that gradients whose fractions were collected at
different densities become comparable. The center of mass (CM) of the
interpolated profile is its abundance-weighted mean density, and

    delta_BD = CM_treatment - CM_control

Gradients in the same class (control or treatment) are pooled into one
profile. NaN values arise when a taxon is absent from one class or has no
abundance inside the interpolation range.
"""
from __future__ import annotations

import logging
from functools import partial
from typing import Optional, Union

import numpy as np
import pandas as pd

from .cleaning import format_abundance_table
from .config import (
    TAXON_COL, SAMPLE_COL, DENSITY_COL, COUNT_COL, IS_CONTROL_COL, DEFAULT_N_INTERP,
)
from .dataframe_ops import spread_by_control
from .interpolation import density_grid, interpolate_counts
from .predicates import ControlPredicate
from .parallel import parallel_map
from .transform import total_sum_scale

logger = logging.getLogger(__name__)

__all__ = ["center_of_mass", "delta_bd"]

CM_COL = "center_of_mass"


def center_of_mass(densities, weights) -> float:
    """Weighted mean density; NaN when the weights sum to zero."""
    x = np.asarray(densities, dtype=float)
    w = np.asarray(weights, dtype=float)
    total = w.sum()
    if total == 0 or not np.isfinite(total):
        return float("nan")
    return float(np.sum(x * w) / total)


def _group_center_of_mass(group: tuple, grid: np.ndarray) -> float:
    densities, counts = group
    return center_of_mass(grid, interpolate_counts(densities, counts, grid))


def delta_bd(
    table: pd.DataFrame,
    control: ControlPredicate,
    n: int = DEFAULT_N_INTERP,
    bd_min: Optional[float] = None,
    bd_max: Optional[float] = None,
    *,
    normalize_by: Optional[str] = None,
    parallel: Union[bool, int] = False,
    max_workers: Optional[int] = None,
    taxon_col: str = TAXON_COL,
    sample_col: str = SAMPLE_COL,
    density_col: str = DENSITY_COL,
    count_col: str = COUNT_COL,
) -> pd.DataFrame:
    """
    Calculate delta_BD for every taxon.

    Parameters:
    - table: long-format abundance table (one row per taxon x fraction).
    - control: predicate identifying unlabeled control samples.
    - n: number of evenly spaced densities used for interpolation.
    - bd_min, bd_max: interpolation range; default to the min/max density of all rows.
    - normalize_by: replicate column; each (class, replicate) gradient is total-sum
      scaled to relative abundance. Defaults to the sample (gradient fraction).
    - parallel: interpolate the (taxon, class) groups in a process pool; an int sets the worker count.

    Returns:
    - DataFrame with columns taxon_id, CM_control, CM_treatment, delta_BD (one row per taxon).
    """
    extra_col = normalize_by if normalize_by not in (None, sample_col) else None
    df = format_abundance_table(
        table, control,
        replicate_col=extra_col,
        taxon_col=taxon_col, sample_col=sample_col,
        density_col=density_col, count_col=count_col,
    )
    # a gradient is a (class, replicate) pair; replicate numbers repeat across classes
    df = total_sum_scale(df, [IS_CONTROL_COL, extra_col] if extra_col else SAMPLE_COL)

    if bd_min is None:
        bd_min = float(df[DENSITY_COL].min())
    if bd_max is None:
        bd_max = float(df[DENSITY_COL].max())
    grid = density_grid(bd_min, bd_max, n)

    keys, groups = [], []
    for key, sub in df.groupby([TAXON_COL, IS_CONTROL_COL], sort=True):
        keys.append(key)
        groups.append((sub[DENSITY_COL].to_numpy(), sub[COUNT_COL].to_numpy()))
    logger.info("delta_BD: interpolating %d taxon/class groups on %d densities [%.4f, %.4f]",
                len(groups), len(grid), bd_min, bd_max)

    cms = parallel_map(partial(_group_center_of_mass, grid=grid), groups,
                       parallel=parallel, max_workers=max_workers)
    df_cm = pd.DataFrame({
        TAXON_COL: [k[0] for k in keys],
        IS_CONTROL_COL: np.array([k[1] for k in keys], dtype=bool),
        CM_COL: np.asarray(cms, dtype=float),
    })

    out = spread_by_control(df_cm, CM_COL, control_name="CM_control", treatment_name="CM_treatment")
    out = out[[TAXON_COL, "CM_control", "CM_treatment"]].copy()
    out["delta_BD"] = out["CM_treatment"] - out["CM_control"]
    return out
