import numpy as np
import pandas as pd

from densitysip.dataframe_ops import spread_by_control


def test_spread_by_control_means_and_missing_class():
    df = pd.DataFrame({
        "taxon_id": ["A", "A", "A", "B"],
        "is_control": [True, True, False, True],
        "v": [1.0, 3.0, 5.0, 7.0],
    })
    out = spread_by_control(df, "v", control_name="light", treatment_name="lab")
    out = out.set_index("taxon_id")
    assert out.loc["A", "light"] == 2.0
    assert out.loc["A", "lab"] == 5.0
    assert out.loc["B", "light"] == 7.0
    assert np.isnan(out.loc["B", "lab"])


def test_spread_by_control_only_one_class_present():
    df = pd.DataFrame({"taxon_id": ["A"], "is_control": [False], "v": [1.0]})
    out = spread_by_control(df, "v", control_name="light", treatment_name="lab")
    assert list(out.columns) == ["taxon_id", "lab", "light"]
    assert np.isnan(out.loc[0, "light"])
