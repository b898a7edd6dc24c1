"""
densitysip - taxon enrichment in DNA stable isotope probing (SIP) density gradients.

- delta_bd: buoyant density shift from interpolated center-of-mass profiles
- qsip_atom_excess / qsip_bootstrap: q-SIP atom fraction excess with bootstrap CIs
"""
from .predicates import equals, isin
from .cleaning import format_abundance_table
from .transform import total_sum_scale, qpcr_rescale
from .interpolation import lin_interp
from .delta_bd import delta_bd
from .atom_excess import AtomExcessResult, weighted_mean_bd, summarize_atom_excess, qsip_atom_excess
from .bootstrap import qsip_bootstrap, bootstrap_replicates
from .pipeline import SIPResults, run_sip_analysis

__all__ = [
    "equals",
    "isin",
    "format_abundance_table",
    "total_sum_scale",
    "qpcr_rescale",
    "lin_interp",
    "delta_bd",
    "AtomExcessResult",
    "weighted_mean_bd",
    "summarize_atom_excess",
    "qsip_atom_excess",
    "qsip_bootstrap",
    "bootstrap_replicates",
    "SIPResults",
    "run_sip_analysis",
]

__version__ = "0.1.0"
