"""
Elevation sampling at station locations
"""
import logging
from typing import List

import geopandas as gpd
import numpy as np
import pandas as pd

from ..config import ELEVATION_COLUMN
from ..data.models import RasterField
from ..errors import NoDataSample, UnsupportedFrameError
from .reproject import same_crs

logger = logging.getLogger(__name__)

SAMPLING_METHODS = ("bilinear", "nearest")


def _pixel_coords(field: RasterField, xs: np.ndarray, ys: np.ndarray):
    """Fractional (row, col) of each point; cell corners sit on integers"""
    inverse = ~field.transform
    cols = inverse.a * xs + inverse.b * ys + inverse.c
    rows = inverse.d * xs + inverse.e * ys + inverse.f
    return np.asarray(rows, dtype="float64"), np.asarray(cols, dtype="float64")


def _nearest(data: np.ndarray, rows: np.ndarray, cols: np.ndarray) -> np.ndarray:
    height, width = data.shape
    r = np.clip(np.floor(rows).astype(int), 0, height - 1)
    c = np.clip(np.floor(cols).astype(int), 0, width - 1)
    return data[r, c]


def _bilinear(data: np.ndarray, rows: np.ndarray, cols: np.ndarray) -> np.ndarray:
    """
    Blend the four cell centres around each point.

    Between the outermost cell centres and the raster edge the value is
    clamped to the edge cells. A NaN neighbour with non-zero weight makes
    the result NaN.
    """
    height, width = data.shape
    r = np.clip(rows - 0.5, 0, height - 1)
    c = np.clip(cols - 0.5, 0, width - 1)

    r0 = np.floor(r).astype(int)
    c0 = np.floor(c).astype(int)
    dr = r - r0
    dc = c - c0
    r1 = np.where(dr > 0, np.minimum(r0 + 1, height - 1), r0)
    c1 = np.where(dc > 0, np.minimum(c0 + 1, width - 1), c0)

    top = data[r0, c0] * (1 - dc) + np.where(dc > 0, data[r0, c1] * dc, 0.0)
    bottom = data[r1, c0] * (1 - dc) + np.where(dc > 0, data[r1, c1] * dc, 0.0)
    return top * (1 - dr) + np.where(dr > 0, bottom * dr, 0.0)


def sample_elevation(
    stations: gpd.GeoDataFrame,
    field: RasterField,
    method: str = "bilinear",
    column: str = ELEVATION_COLUMN,
) -> gpd.GeoDataFrame:
    """
    Attach the DEM value under each station as a nullable ``Float64`` column.

    Stations outside the raster extent, or over nodata cells, get ``pd.NA``
    rather than a numeric fill value.

    Args:
        stations: point layer in the same CRS as ``field``
        field: elevation raster
        method: "bilinear" or "nearest"
        column: name of the attribute to add

    Returns:
        A copy of ``stations`` with the elevation column set
    """
    if method not in SAMPLING_METHODS:
        raise ValueError(f"Unknown sampling method {method!r}, expected one of {SAMPLING_METHODS}")
    if stations.crs is None or not same_crs(stations.crs, field.crs):
        raise UnsupportedFrameError(
            f"Stations ({stations.crs}) must be in the DEM frame ({field.crs}) before sampling"
        )

    result = stations.copy()
    if len(result) == 0:
        result[column] = pd.array([], dtype="Float64")
        return result

    xs = result.geometry.x.to_numpy(dtype="float64")
    ys = result.geometry.y.to_numpy(dtype="float64")
    rows, cols = _pixel_coords(field, xs, ys)

    inside = (
        np.isfinite(rows) & np.isfinite(cols)
        & (rows >= 0) & (rows <= field.height)
        & (cols >= 0) & (cols <= field.width)
    )

    values = np.full(len(result), np.nan)
    if inside.any():
        sampler = _bilinear if method == "bilinear" else _nearest
        values[inside] = sampler(field.data, rows[inside], cols[inside])

    missing = ~np.isfinite(values)
    result[column] = pd.arrays.FloatingArray(np.where(missing, 0.0, values), missing)

    logger.info(
        f"Sampled {column} for {len(result)} stations ({method}), "
        f"{int(missing.sum())} without data"
    )
    return result


def find_no_data(stations: gpd.GeoDataFrame, column: str = ELEVATION_COLUMN) -> List[NoDataSample]:
    """List the stations whose sampled value is missing"""
    if column not in stations.columns:
        raise KeyError(f"Column {column!r} not found; sample the DEM first")

    missing = stations[stations[column].isna()]
    if "station" in missing.columns:
        ids = missing["station"].tolist()
    else:
        ids = missing.index.tolist()
    return [
        NoDataSample(station=station_id, x=float(point.x), y=float(point.y))
        for station_id, point in zip(ids, missing.geometry)
    ]


def has_no_data(stations: gpd.GeoDataFrame, column: str = ELEVATION_COLUMN) -> bool:
    return bool(find_no_data(stations, column))
