import pandas as pd

from densitysip.atom_excess import qsip_atom_excess
from densitysip.bootstrap import qsip_bootstrap
from densitysip.data_io import load_atom_excess, load_table, save_atom_excess, save_table
from densitysip.predicates import equals


def test_save_and_load_table(tmp_path):
    df = pd.DataFrame({"taxon_id": ["A", "B"], "delta_BD": [0.01, float("nan")]})
    path = save_table(df, tmp_path / "out", "delta_bd.parquet")
    assert path.exists()
    pd.testing.assert_frame_equal(load_table(tmp_path / "out", "delta_bd.parquet"), df)


def test_saved_atom_excess_can_be_bootstrapped_later(tmp_path, sip_table):
    atomx = qsip_atom_excess(sip_table, equals("Substrate", "12C-Con"), "Replicate", isotope="18O")
    save_atom_excess(atomx, tmp_path)
    loaded = load_atom_excess(tmp_path)
    assert loaded.isotope == "18O"
    assert loaded.replicate_col == "Replicate"
    pd.testing.assert_frame_equal(
        qsip_bootstrap(loaded, n_boot=5, seed=1),
        qsip_bootstrap(atomx, n_boot=5, seed=1),
    )
