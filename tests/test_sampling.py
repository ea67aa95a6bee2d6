import warnings

import geopandas as gpd
import numpy as np
import pandas as pd
import pytest
from shapely.geometry import Point

from snowreach.analysis.sampling import find_no_data, has_no_data, sample_elevation
from snowreach.errors import NoDataSample, UnsupportedFrameError

from conftest import RES, SIZE, X0, Y0, make_field


def at_pixel(col, row):
    """Map coordinate of a fractional (col, row) pixel position"""
    return Point(X0 + col * RES, Y0 - row * RES)


def points(*geoms, crs="EPSG:3301"):
    return gpd.GeoDataFrame(
        {"station": [f"S{i}" for i in range(len(geoms))], "duration": [150.0] * len(geoms)},
        geometry=list(geoms),
        crs=crs,
    )


def test_bilinear_reproduces_linear_field(linear_field):
    stations = points(at_pixel(10.25, 20.75), at_pixel(55.5, 3.5), at_pixel(70.9, 80.1))

    sampled = sample_elevation(stations, linear_field)

    # 2 * col + row evaluated at cell-centre coordinates
    expected = [2 * 9.75 + 20.25, 2 * 55.0 + 3.0, 2 * 70.4 + 79.6]
    assert sampled["elevation"].to_numpy(dtype="float64") == pytest.approx(expected)


def test_nearest_takes_covering_cell(linear_field):
    stations = points(at_pixel(10.25, 20.75))

    sampled = sample_elevation(stations, linear_field, method="nearest")

    assert sampled["elevation"].iloc[0] == pytest.approx(2 * 10 + 20)


def test_edge_cells_are_clamped(linear_field):
    stations = points(at_pixel(0.1, 0.1), at_pixel(SIZE, SIZE))

    sampled = sample_elevation(stations, linear_field)

    assert sampled["elevation"].iloc[0] == pytest.approx(0.0)
    assert sampled["elevation"].iloc[1] == pytest.approx(2 * (SIZE - 1) + (SIZE - 1))


def test_outside_extent_is_no_data(step_field):
    stations = points(at_pixel(20, 20), at_pixel(-5, 20), at_pixel(20, SIZE + 3))

    sampled = sample_elevation(stations, step_field)

    assert str(sampled["elevation"].dtype) == "Float64"
    assert sampled["elevation"].iloc[0] == pytest.approx(120.0)
    assert sampled["elevation"].iloc[1] is pd.NA
    assert sampled["elevation"].iloc[2] is pd.NA


def test_nodata_cell_is_no_data(linear_field):
    data = linear_field.data.copy()
    data[20, 10] = np.nan
    field = make_field(data)

    sampled = sample_elevation(points(at_pixel(10.5, 20.5), at_pixel(40.5, 40.5)), field)

    assert sampled["elevation"].isna().tolist() == [True, False]


def test_zero_elevation_is_a_valid_sample():
    field = make_field(np.zeros((SIZE, SIZE)))

    sampled = sample_elevation(points(at_pixel(30, 30)), field)

    assert not has_no_data(sampled)
    assert sampled["elevation"].iloc[0] == 0.0


def test_sampling_does_not_touch_input(stations, step_field):
    sample_elevation(stations, step_field)

    assert "elevation" not in stations.columns


def test_find_no_data_lists_stations(stations, step_field):
    sampled = sample_elevation(stations, step_field)

    no_data = find_no_data(sampled)

    assert has_no_data(sampled)
    assert no_data == [NoDataSample(station="C", x=800_000.0, y=6_480_000.0)]


def test_find_no_data_requires_sampling(stations):
    with pytest.raises(KeyError):
        find_no_data(stations)


def test_frame_mismatch(stations, step_field):
    with pytest.raises(UnsupportedFrameError):
        sample_elevation(stations.to_crs("EPSG:4326"), step_field)


def test_unknown_method(stations, step_field):
    with pytest.raises(ValueError, match="cubic"):
        sample_elevation(stations, step_field, method="cubic")


def test_empty_layer(stations, step_field):
    sampled = sample_elevation(stations.iloc[0:0], step_field)

    assert len(sampled) == 0
    assert "elevation" in sampled.columns


def test_sampling_emits_no_deprecation_warnings(linear_field):
    stations = points(at_pixel(10.25, 20.75))

    with warnings.catch_warnings():
        warnings.simplefilter("error", DeprecationWarning)
        warnings.simplefilter("error", PendingDeprecationWarning)
        sampled = sample_elevation(stations, linear_field)

    assert sampled["elevation"].iloc[0] == pytest.approx(39.75)
