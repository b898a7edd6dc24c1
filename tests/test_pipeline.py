import numpy as np

from densitysip.pipeline import run_sip_analysis
from densitysip.predicates import equals


def test_run_sip_analysis_writes_results(tmp_path, sip_table):
    qpcr = {s: 1e6 for s in sip_table["sample_id"].unique()}
    res = run_sip_analysis(sip_table, equals("Substrate", "12C-Con"), "Replicate",
                           qpcr=qpcr, n_boot=5, seed=0, out_dir=tmp_path)
    assert res.delta_bd["taxon_id"].tolist() == ["OTU.1", "OTU.2"]
    assert len(res.atom_excess.A) == 2
    assert {"A_CI_low", "A_CI_high"} <= set(res.bootstrap.columns)
    assert np.isfinite(res.bootstrap["A"]).all()
    for name in ("delta_bd.parquet", "atom_excess_W.parquet", "atom_excess_A.parquet",
                 "atom_excess_bootstrap.parquet", "atom_excess_meta.json"):
        assert (tmp_path / name).exists()
