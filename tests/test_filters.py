import geopandas as gpd
import pandas as pd
import pytest
from shapely.geometry import Point

from snowreach.analysis.filters import filter_stations


def sampled(durations, elevations):
    n = len(durations)
    return gpd.GeoDataFrame(
        {
            "station": [f"S{i}" for i in range(n)],
            "duration": durations,
            "elevation": pd.array(elevations, dtype="Float64"),
        },
        geometry=[Point(650_000 + i * 1_000, 6_450_000) for i in range(n)],
        crs="EPSG:3301",
    )


def test_strict_thresholds():
    stations = sampled(
        [150, 100, 101, 150, 150, 99],
        [120, 120, 51, 50, 50.001, 200],
    )

    kept = filter_stations(stations, min_duration=100, min_elevation=50)

    assert kept["station"].tolist() == ["S0", "S2", "S4"]


def test_matches_set_definition():
    durations = [80, 120, 101, 100, 300, 150, 150, 0]
    elevations = [60, 60, 49.9, 75, 300, None, -10, 500]
    stations = sampled(durations, elevations)

    kept = filter_stations(stations, min_duration=100, min_elevation=50)

    expected = [
        f"S{i}" for i, (d, e) in enumerate(zip(durations, elevations))
        if e is not None and d > 100 and e > 50
    ]
    assert kept["station"].tolist() == expected


def test_no_data_never_passes():
    stations = sampled([10_000, 10_000], [None, None])

    kept = filter_stations(stations, min_duration=100, min_elevation=-1_000)

    assert kept.empty


def test_preserves_order_and_index():
    stations = sampled([200, 50, 300, 400], [100, 100, 100, 100]).iloc[::-1]

    kept = filter_stations(stations, min_duration=100, min_elevation=50)

    assert kept["station"].tolist() == ["S3", "S2", "S0"]
    assert kept.index.tolist() == [3, 2, 0]
    assert kept.crs == stations.crs


def test_input_unchanged():
    stations = sampled([150, 50], [120, 120])

    filter_stations(stations, min_duration=100, min_elevation=50)

    assert len(stations) == 2


def test_requires_elevation_column():
    stations = sampled([150], [120]).drop(columns="elevation")

    with pytest.raises(KeyError, match="elevation"):
        filter_stations(stations, min_duration=100, min_elevation=50)
