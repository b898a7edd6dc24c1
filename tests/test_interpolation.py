import numpy as np
import pandas as pd
import pytest

from densitysip.interpolation import density_grid, interpolate_counts, lin_interp


def test_two_point_profile_boundary():
    df = pd.DataFrame({"buoyant_density": [1.70, 1.75], "count": [10.0, 20.0]})
    out = lin_interp(df, 1.70, 1.75, n=3)
    assert np.allclose(out["buoyant_density"], [1.70, 1.725, 1.75])
    assert np.allclose(out["count_interp"], [10.0, 15.0, 20.0])


def test_out_of_domain_is_zero():
    grid = density_grid(1.60, 1.80, 5)
    y = interpolate_counts([1.64, 1.76], [4.0, 16.0], grid)
    # grid: 1.60, 1.65, 1.70, 1.75, 1.80
    assert np.allclose(y, [0.0, 5.0, 10.0, 15.0, 0.0])


def test_duplicates_averaged_and_nan_counts_ignored():
    grid = np.array([1.70, 1.71, 1.72])
    y = interpolate_counts([1.70, 1.70, 1.72, 1.71], [2.0, 4.0, 5.0, np.nan], grid)
    assert np.allclose(y, [3.0, 4.0, 5.0])


def test_single_point_profile():
    grid = density_grid(1.70, 1.72, 3)
    assert np.allclose(interpolate_counts([1.71], [9.0], grid), [0.0, 9.0, 0.0])
    assert np.allclose(interpolate_counts([1.715], [9.0], grid), [0.0, 0.0, 0.0])
    assert np.allclose(interpolate_counts([], [], grid), [0.0, 0.0, 0.0])


def test_invalid_grid():
    with pytest.raises(ValueError):
        density_grid(1.75, 1.70, 5)
    with pytest.raises(ValueError):
        density_grid(1.70, 1.75, 0)
