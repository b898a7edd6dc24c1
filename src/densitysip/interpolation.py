from __future__ import annotations
import numpy as np
import pandas as pd

from .config import DENSITY_COL, COUNT_COL, DEFAULT_N_INTERP

COUNT_INTERP_COL = "count_interp"


def density_grid(bd_min: float, bd_max: float, n: int = DEFAULT_N_INTERP) -> np.ndarray:
    """n evenly spaced buoyant densities spanning [bd_min, bd_max]."""
    if int(n) != n or n < 1:
        raise ValueError(f"n must be a positive integer, got {n!r}")
    if not (np.isfinite(bd_min) and np.isfinite(bd_max)):
        raise ValueError("bd_min and bd_max must be finite")
    if bd_min > bd_max:
        raise ValueError(f"bd_min ({bd_min}) is greater than bd_max ({bd_max})")
    return np.linspace(bd_min, bd_max, int(n))


def interpolate_counts(densities, counts, grid: np.ndarray) -> np.ndarray:
    """
    Piecewise-linear interpolation of counts over density onto grid.

    Pairs with an undefined count are ignored and duplicate densities are
    averaged. Grid points outside the observed density range get 0.
    With a single distinct density, grid points equal to it take its count
    and every other point is 0.
    """
    obs = pd.DataFrame({"x": np.asarray(densities, dtype=float),
                        "y": np.asarray(counts, dtype=float)}).dropna()
    obs = obs.groupby("x", sort=True)["y"].mean()
    grid = np.asarray(grid, dtype=float)

    if len(obs) == 0:
        return np.zeros_like(grid)
    if len(obs) == 1:
        x0 = float(obs.index[0])
        return np.where(np.isclose(grid, x0, rtol=0.0, atol=1e-12), float(obs.iloc[0]), 0.0)

    y = np.interp(grid, obs.index.to_numpy(dtype=float), obs.to_numpy(dtype=float),
                  left=np.nan, right=np.nan)
    return np.nan_to_num(y, nan=0.0)


def lin_interp(df: pd.DataFrame, bd_min: float, bd_max: float, n: int = DEFAULT_N_INTERP,
               density_col: str = DENSITY_COL, count_col: str = COUNT_COL) -> pd.DataFrame:
    """
    Interpolate a (density, count) table onto a fixed density grid.

    Returns a DataFrame with columns buoyant_density (the n grid values) and count_interp.
    """
    if density_col not in df.columns or count_col not in df.columns:
        raise KeyError(f"lin_interp requires columns '{density_col}' and '{count_col}'")
    grid = density_grid(bd_min, bd_max, n)
    return pd.DataFrame({
        DENSITY_COL: grid,
        COUNT_INTERP_COL: interpolate_counts(df[density_col], df[count_col], grid),
    })
