import numpy as np
import pandas as pd
import pytest

from densitysip.delta_bd import center_of_mass, delta_bd
from densitysip.predicates import equals

CONTROL = equals("Substrate", "12C-Con")


def test_labeled_taxon_shifts_heavy(sip_table):
    out = delta_bd(sip_table, CONTROL, n=20).set_index("taxon_id")
    assert list(out.columns) == ["CM_control", "CM_treatment", "delta_BD"]
    assert out.loc["OTU.1", "delta_BD"] > 0
    assert out.loc["OTU.2", "delta_BD"] < 0
    assert np.allclose(out["delta_BD"], out["CM_treatment"] - out["CM_control"])


def test_swapping_labels_negates_delta_bd(sip_table):
    fwd = delta_bd(sip_table, CONTROL)
    rev = delta_bd(sip_table, ~CONTROL)
    assert fwd["taxon_id"].tolist() == rev["taxon_id"].tolist()
    assert np.allclose(fwd["delta_BD"], -rev["delta_BD"], equal_nan=True)
    assert np.allclose(fwd["CM_control"], rev["CM_treatment"], equal_nan=True)


def test_taxon_in_one_class_only_is_kept_with_nan(sip_table):
    extra = sip_table[sip_table["Substrate"] == "12C-Con"].query("taxon_id == 'OTU.2'").copy()
    extra["taxon_id"] = "OTU.3"
    out = delta_bd(pd.concat([sip_table, extra], ignore_index=True), CONTROL).set_index("taxon_id")
    assert "OTU.3" in out.index
    assert np.isfinite(out.loc["OTU.3", "CM_control"])
    assert np.isnan(out.loc["OTU.3", "CM_treatment"])
    assert np.isnan(out.loc["OTU.3", "delta_BD"])


def test_explicit_density_range(sip_table):
    # a range holding no observations gives all-zero profiles and NaN centers of mass
    out = delta_bd(sip_table, CONTROL, n=5, bd_min=1.80, bd_max=1.85)
    assert out["delta_BD"].isna().all()
    with pytest.raises(ValueError):
        delta_bd(sip_table, CONTROL, bd_min=1.75, bd_max=1.70)


def test_parallel_matches_serial(sip_table):
    serial = delta_bd(sip_table, CONTROL)
    par = delta_bd(sip_table, CONTROL, parallel=2)
    pd.testing.assert_frame_equal(serial, par)


def test_center_of_mass_zero_weights():
    assert center_of_mass([1.7, 1.8], [1.0, 3.0]) == pytest.approx(1.775)
    assert np.isnan(center_of_mass([1.7, 1.8], [0.0, 0.0]))


def test_replicate_normalization_keeps_classes_apart(sip_table):
    base = delta_bd(sip_table, CONTROL, normalize_by="Replicate")
    scaled = sip_table.copy()
    labeled = scaled["Substrate"] == "13C-Glu"
    scaled.loc[labeled, "count"] = scaled.loc[labeled, "count"] * 1000
    out = delta_bd(scaled, CONTROL, normalize_by="Replicate")
    assert np.array_equal(base["CM_control"].to_numpy(), out["CM_control"].to_numpy())


def test_undefined_count_is_skipped_not_zeroed(sip_table):
    table = sip_table.copy()
    table["count"] = table["count"].astype(object)
    target = table.index[(table["taxon_id"] == "OTU.1") & (table["Substrate"] == "12C-Con")][2]
    table.loc[target, "count"] = "n/a"
    with_nan = delta_bd(table, CONTROL)
    without_row = delta_bd(table.drop(index=target), CONTROL)
    pd.testing.assert_frame_equal(with_nan, without_row)
