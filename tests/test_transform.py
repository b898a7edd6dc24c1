import numpy as np
import pandas as pd
import pytest

from densitysip.transform import qpcr_rescale, total_sum_scale


def test_total_sum_scale_per_sample():
    df = pd.DataFrame({"sample_id": ["a", "a", "b", "b"], "count": [1.0, 3.0, 0.0, 0.0]})
    out = total_sum_scale(df)
    assert np.allclose(out["count"], [0.25, 0.75, 0.0, 0.0])
    # zero-total samples give zeros, not NaN
    assert out["count"].isna().sum() == 0
    assert df["count"].tolist() == [1.0, 3.0, 0.0, 0.0]


def test_qpcr_rescale():
    df = pd.DataFrame({"sample_id": ["a", "a", "b"], "count": ["1", "3", "5"]})
    out = qpcr_rescale(df, {"a": 1000.0, "b": 10.0})
    assert np.allclose(out["count"], [250.0, 750.0, 10.0])


def test_qpcr_rescale_missing_sample():
    df = pd.DataFrame({"sample_id": ["a", "b"], "count": [1.0, 2.0]})
    with pytest.raises(KeyError):
        qpcr_rescale(df, {"a": 1000.0})


def test_total_sum_scale_keeps_undefined_counts():
    df = pd.DataFrame({"sample_id": ["a", "a", "a", "b"], "count": [1.0, np.nan, 3.0, np.nan]})
    out = total_sum_scale(df)
    assert np.allclose(out["count"], [0.25, np.nan, 0.75, np.nan], equal_nan=True)
