import geopandas as gpd
import numpy as np
import pytest
import rasterio
from rasterio.crs import CRS
from rasterio.transform import from_origin
from shapely.geometry import Point, box

from snowreach.data.models import LayerSet, RasterField

# Synthetic grid over south-east Estonia in EPSG:3301
X0 = 600_000.0
Y0 = 6_500_000.0
RES = 1_000.0
SIZE = 100

HIGH = 120.0
LOW = 40.0

# Station A sits on high ground, B on low ground, C outside the grid
STATION_A = (620_000.0, 6_480_000.0)
STATION_B = (690_000.0, 6_410_000.0)
STATION_C = (800_000.0, 6_480_000.0)


def make_field(data, crs="EPSG:3301"):
    return RasterField(
        data=np.asarray(data, dtype="float64"),
        transform=from_origin(X0, Y0, RES, RES),
        crs=CRS.from_user_input(crs),
    )


def write_dem(path, field, nodata=None):
    data = field.data
    if nodata is not None:
        data = np.where(np.isnan(data), nodata, data)
    with rasterio.open(
        path, "w",
        driver="GTiff",
        height=field.height,
        width=field.width,
        count=1,
        dtype="float32",
        crs=field.crs,
        transform=field.transform,
        nodata=nodata,
    ) as dst:
        dst.write(data.astype("float32"), 1)
    return path


@pytest.fixture
def step_field():
    """120 m west of the grid's middle column, 40 m east of it"""
    data = np.full((SIZE, SIZE), LOW)
    data[:, : SIZE // 2] = HIGH
    return make_field(data)


@pytest.fixture
def linear_field():
    """Cell (row, col) holds 2 * col + row"""
    rows, cols = np.mgrid[0:SIZE, 0:SIZE]
    return make_field(2.0 * cols + rows)


@pytest.fixture
def stations():
    return gpd.GeoDataFrame(
        {
            "station": ["A", "B", "C"],
            "duration": [150.0, 150.0, 200.0],
        },
        geometry=[Point(*STATION_A), Point(*STATION_B), Point(*STATION_C)],
        crs="EPSG:3301",
    )


@pytest.fixture
def cities():
    return gpd.GeoDataFrame(
        {
            "name": ["Near A", "Near B", "Near C", "Far"],
            "latitude": [0.0, 0.0, 0.0, 0.0],
            "longitude": [0.0, 0.0, 0.0, 0.0],
            "population": [10_000, 20_000, 30_000, 40_000],
        },
        geometry=[
            Point(STATION_A[0] + 30_000, STATION_A[1]),
            Point(STATION_B[0] - 30_000, STATION_B[1]),
            Point(STATION_C[0] + 10_000, STATION_C[1]),
            Point(500_000, 6_300_000),
        ],
        crs="EPSG:3301",
    )


@pytest.fixture
def counties():
    return gpd.GeoDataFrame(
        {"name": ["West", "East"]},
        geometry=[
            box(X0, Y0 - SIZE * RES, X0 + SIZE * RES / 2, Y0),
            box(X0 + SIZE * RES / 2, Y0 - SIZE * RES, X0 + SIZE * RES, Y0),
        ],
        crs="EPSG:3301",
    )


@pytest.fixture
def layers(step_field, stations, cities, counties):
    """Vector layers in WGS 84, as they usually arrive"""
    return LayerSet(
        dem=step_field,
        stations=stations.to_crs("EPSG:4326"),
        cities=cities.to_crs("EPSG:4326"),
        counties=counties.to_crs("EPSG:4326"),
    )
