import numpy as np
import pandas as pd
import pytest


def make_sip_table(shift=0.01, densities=(1.69, 1.70, 1.71, 1.72, 1.73)):
    """
    Three control (12C-Con) and three labeled (13C-Glu) gradients.
    OTU.1 peaks at 1.71 in controls and is shifted by `shift` in labeled gradients;
    OTU.2 is unlabeled and peaks at 1.71 in both.
    """
    rows = []
    for substrate in ("12C-Con", "13C-Glu"):
        for rep in (1, 2, 3):
            for i, bd in enumerate(densities):
                sample = f"{substrate}_{rep}_F{i}"
                bd_obs = bd + 0.001 * rep
                peak1 = 1.71 + (shift if substrate == "13C-Glu" else 0.0)
                c1 = 100.0 * np.exp(-((bd_obs - peak1) / 0.01) ** 2) + 1
                c2 = 100.0 * np.exp(-((bd_obs - 1.71) / 0.01) ** 2) + 1
                for otu, c in (("OTU.1", c1), ("OTU.2", c2)):
                    rows.append({
                        "taxon_id": otu,
                        "sample_id": sample,
                        "Substrate": substrate,
                        "Replicate": rep,
                        "buoyant_density": bd_obs,
                        "count": c,
                    })
    return pd.DataFrame(rows)


@pytest.fixture
def sip_table():
    return make_sip_table()
