"""
Bootstrap confidence intervals for q-SIP atom fraction excess.

Each bootstrap replicate resamples, per taxon and with replacement, the
weighted mean densities (W) of the control and treatment gradients and
recomputes the atom fraction excess. Replicates are independent, so they can
be fanned out to a process pool; the per-taxon quantiles are taken once every
replicate has finished.

Random state is explicit: every replicate gets its own generator spawned from
`seed`, so a seeded run gives the same result serially or in parallel.
"""
from __future__ import annotations

import logging
from functools import partial
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from .atom_excess import AtomExcessResult, summarize_atom_excess
from .config import (
    TAXON_COL, IS_CONTROL_COL, W_COL, DEFAULT_N_SAMPLE, DEFAULT_N_BOOT, DEFAULT_ALPHA,
)
from .isotopes import get_isotope
from .parallel import parallel_map

logger = logging.getLogger(__name__)

__all__ = ["sample_w", "bootstrap_replicates", "qsip_bootstrap"]

SeedLike = Union[None, int, np.random.SeedSequence]
# (taxon, control W values, treatment W values)
Pool = Tuple[object, np.ndarray, np.ndarray]


def sample_w(values: np.ndarray, n: int, rng: np.random.Generator) -> np.ndarray:
    """
    Draw n values with replacement.

    A single observed value is repeated n times; an empty pool gives an empty array.
    """
    values = np.asarray(values, dtype=float)
    if len(values) > 1:
        return rng.choice(values, size=n, replace=True)
    return np.repeat(values, n)


def _check_params(n_sample: Sequence[int], n_boot: int, a: float) -> Tuple[int, int]:
    if len(n_sample) != 2:
        raise ValueError(f"n_sample must hold two sizes (control, treatment), got {n_sample!r}")
    n_light, n_lab = (int(v) for v in n_sample)
    if n_light < 1 or n_lab < 1 or n_light != n_sample[0] or n_lab != n_sample[1]:
        raise ValueError(f"n_sample sizes must be positive integers, got {n_sample!r}")
    if int(n_boot) != n_boot or n_boot < 1:
        raise ValueError(f"n_boot must be a positive integer, got {n_boot!r}")
    if not 0 < a < 1:
        raise ValueError(f"a must lie in (0, 1), got {a!r}")
    return n_light, n_lab


def _build_pools(W: pd.DataFrame) -> List[Pool]:
    pools = []
    for taxon, sub in W.groupby(TAXON_COL, sort=True):
        flags = sub[IS_CONTROL_COL].to_numpy(dtype=bool)
        w = sub[W_COL].to_numpy(dtype=float)
        pools.append((taxon, w[flags], w[~flags]))
    return pools


def _bootstrap_replicate(job: Tuple[int, np.random.SeedSequence], pools: List[Pool],
                         isotope: str, n_light: int, n_lab: int) -> pd.DataFrame:
    bootstrap_id, seed_seq = job
    rng = np.random.default_rng(seed_seq)
    taxa, flags, values = [], [], []
    for taxon, light, lab in pools:
        for is_control, pool, size in ((True, light, n_light), (False, lab, n_lab)):
            drawn = sample_w(pool, size, rng)
            taxa.extend([taxon] * len(drawn))
            flags.extend([is_control] * len(drawn))
            values.append(drawn)
    df_w = pd.DataFrame({
        TAXON_COL: pd.Series(taxa, dtype=object),
        IS_CONTROL_COL: np.array(flags, dtype=bool),
        W_COL: np.concatenate(values) if values else np.array([], dtype=float),
    })
    A = summarize_atom_excess(df_w, isotope, taxa=[p[0] for p in pools])
    return pd.DataFrame({
        TAXON_COL: A[TAXON_COL].to_numpy(),
        "A": A["A"].to_numpy(dtype=float),
        "bootstrap_id": bootstrap_id,
    })


def bootstrap_replicates(
    atomx: AtomExcessResult,
    isotope: Optional[str] = None,
    n_sample: Sequence[int] = DEFAULT_N_SAMPLE,
    n_boot: int = DEFAULT_N_BOOT,
    *,
    parallel: Union[bool, int] = False,
    max_workers: Optional[int] = None,
    seed: SeedLike = None,
) -> pd.DataFrame:
    """
    Atom fraction excess of every taxon in every bootstrap replicate.

    Returns a long DataFrame with columns taxon_id, A, bootstrap_id (1..n_boot).
    """
    iso = get_isotope(isotope if isotope is not None else atomx.isotope)
    n_light, n_lab = _check_params(n_sample, n_boot, DEFAULT_ALPHA)

    pools = _build_pools(atomx.W)
    seed_seq = seed if isinstance(seed, np.random.SeedSequence) else np.random.SeedSequence(seed)
    jobs = list(zip(range(1, int(n_boot) + 1), seed_seq.spawn(int(n_boot))))
    logger.info("q-SIP bootstrap (%s): %d replicates, %d taxa, n_sample=(%d, %d)",
                iso.name, len(jobs), len(pools), n_light, n_lab)

    func = partial(_bootstrap_replicate, pools=pools, isotope=iso.name, n_light=n_light, n_lab=n_lab)
    results = parallel_map(func, jobs, parallel=parallel, max_workers=max_workers)
    return pd.concat(results, ignore_index=True)


def qsip_bootstrap(
    atomx: AtomExcessResult,
    isotope: Optional[str] = None,
    n_sample: Sequence[int] = DEFAULT_N_SAMPLE,
    n_boot: int = DEFAULT_N_BOOT,
    a: float = DEFAULT_ALPHA,
    parallel: Union[bool, int] = False,
    *,
    max_workers: Optional[int] = None,
    seed: SeedLike = None,
) -> pd.DataFrame:
    """
    Bootstrap confidence intervals for atom fraction excess.

    Parameters:
    - atomx: result of qsip_atom_excess().
    - isotope: '13C' or '18O'; defaults to the isotope atomx was computed with.
    - n_sample: resample sizes (with replacement) for control and treatment W values.
    - n_boot: number of bootstrap replicates.
    - a: alpha; the interval spans the a/2 and 1 - a/2 quantiles.
    - parallel: run replicates in a process pool; an int sets the worker count.
    - seed: seed (or SeedSequence) for the resampling; None draws fresh entropy.

    Returns:
    - atomx.A with the columns A_CI_low and A_CI_high added (one row per taxon).
    """
    _check_params(n_sample, n_boot, a)
    df_boot = bootstrap_replicates(atomx, isotope, n_sample, n_boot,
                                   parallel=parallel, max_workers=max_workers, seed=seed)

    grouped = df_boot.groupby(TAXON_COL, sort=True)["A"]
    ci = pd.DataFrame({
        "A_CI_low": grouped.quantile(a / 2),
        "A_CI_high": grouped.quantile(1 - a / 2),
    }).reset_index()
    return atomx.A.merge(ci, on=TAXON_COL, how="inner")
