"""
Isotope and DNA buoyant-density constants for q-SIP atom fraction excess
(Hungate et al. 2015).

- GC content from unlabeled density: Gi = (Wlight - GC_INTERCEPT) / GC_SLOPE
- Unlabeled molecular weight: Mlight = MLIGHT_SLOPE * Gi + MLIGHT_INTERCEPT
- ISOTOPES holds, per label, the natural abundance x and the coefficients of
  the theoretical maximum labeled weight: Mheavymax = gc_coef * Gi + offset + Mlight
"""
from __future__ import annotations
from dataclasses import dataclass

GC_INTERCEPT = 1.646057
GC_SLOPE = 0.083506
MLIGHT_SLOPE = 0.496
MLIGHT_INTERCEPT = 307.691


@dataclass(frozen=True)
class Isotope:
    name: str
    natural_abundance: float
    heavymax_gc_coef: float
    heavymax_offset: float


ISOTOPES = {
    "13C": Isotope("13C", natural_abundance=0.01111233,
                   heavymax_gc_coef=-0.4987282, heavymax_offset=9.974564),
    "18O": Isotope("18O", natural_abundance=0.002000429,
                   heavymax_gc_coef=0.0, heavymax_offset=12.07747),
}


def get_isotope(isotope: str) -> Isotope:
    """Look up an isotope by name (case-insensitive); unknown names raise ValueError."""
    key = str(isotope).strip().upper()
    if key not in ISOTOPES:
        raise ValueError(f"Isotope not recognized: {isotope!r}. Use one of {sorted(ISOTOPES)}")
    return ISOTOPES[key]
