from __future__ import annotations
import logging

# canonical column names of the formatted table
TAXON_COL = "taxon_id"
SAMPLE_COL = "sample_id"
DENSITY_COL = "buoyant_density"
COUNT_COL = "count"
IS_CONTROL_COL = "is_control"
W_COL = "W"

# delta_BD interpolation grid size
DEFAULT_N_INTERP = 20

# bootstrap defaults: (control, treatment) resample sizes, replicates, alpha
DEFAULT_N_SAMPLE = (3, 3)
DEFAULT_N_BOOT = 10
DEFAULT_ALPHA = 0.1

# worker pool sizing
CPU_FRACTION = 0.80
MAX_WORKERS_CAP = 60

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"


def setup_logging(level: str = "INFO") -> logging.Logger:
    lvl = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=lvl, format=LOG_FORMAT, datefmt="%H:%M:%S")
    return logging.getLogger("densitysip")
