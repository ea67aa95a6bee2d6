"""
Station buffers and the cities that fall inside them
"""
import logging

import geopandas as gpd
import pandas as pd
import shapely

from ..config import MIN_QUAD_SEGS, QUAD_SEGS
from ..errors import InvalidRadiusError, UnsupportedFrameError
from .reproject import reproject_layer, to_crs

logger = logging.getLogger(__name__)


def buffer_stations(
    stations: gpd.GeoDataFrame,
    radius_m: float,
    quad_segs: int = QUAD_SEGS,
    metric_crs=None,
) -> gpd.GeoDataFrame:
    """
    Build a disk of ``radius_m`` metres around every station.

    Each disk is a polygon with ``4 * quad_segs`` boundary segments, in a
    projected frame: the stations' own frame when it is projected, otherwise
    ``metric_crs``. Station attributes are kept on the buffers.
    """
    if not radius_m > 0:
        raise InvalidRadiusError(f"Buffer radius must be positive, got {radius_m}")
    if quad_segs < MIN_QUAD_SEGS:
        raise ValueError(f"quad_segs must be at least {MIN_QUAD_SEGS}, got {quad_segs}")
    if stations.crs is None:
        raise UnsupportedFrameError("Stations have no CRS, cannot buffer in metres")

    if not to_crs(stations.crs).is_projected:
        if metric_crs is None:
            raise UnsupportedFrameError(
                f"Stations are in geographic frame {stations.crs}; a metric frame is required"
            )
        if not to_crs(metric_crs).is_projected:
            raise UnsupportedFrameError(f"{metric_crs} is not a projected frame")
        stations = reproject_layer(stations, metric_crs)

    disks = shapely.buffer(stations.geometry.to_numpy(), radius_m, quad_segs=quad_segs)
    buffers = stations.copy()
    buffers[buffers.geometry.name] = gpd.GeoSeries(disks, index=stations.index, crs=stations.crs)

    logger.info(f"Created {len(buffers)} buffers of {radius_m / 1000:g} km (CRS: {buffers.crs})")
    return buffers


def _join(cities: gpd.GeoDataFrame, buffers: gpd.GeoDataFrame) -> gpd.GeoDataFrame:
    """
    Inner join of cities onto the buffers containing them, in the buffer frame.

    The result index holds city positions and ``buffer_position`` the buffer
    positions, so repeated index labels in either input stay distinct.
    """
    if buffers.crs is None:
        raise UnsupportedFrameError("Buffers have no CRS")

    projected = reproject_layer(cities, buffers.crs).reset_index(drop=True)
    polygons = buffers[[buffers.geometry.name]].reset_index(drop=True)
    polygons["buffer_position"] = range(len(polygons))
    return gpd.sjoin(projected, polygons, how="inner", predicate="intersects")


def cities_within_buffers(cities: gpd.GeoDataFrame, buffers: gpd.GeoDataFrame) -> gpd.GeoDataFrame:
    """
    Return every city inside at least one buffer, boundary included.

    Cities matched by several buffers appear once, in their input order and
    their original frame. No match gives an empty frame.
    """
    if len(buffers) == 0 or len(cities) == 0:
        logger.info("No buffers or no cities, nothing to join")
        return cities.iloc[0:0].copy()

    positions = sorted(set(_join(cities, buffers).index))
    within = cities.iloc[positions].copy()

    logger.info(f"Found {len(within)}/{len(cities)} cities within the buffers")
    return within


def station_city_pairs(
    cities: gpd.GeoDataFrame,
    buffers: gpd.GeoDataFrame,
    stations: gpd.GeoDataFrame,
    city_name: str = "name",
    station_id: str = "station",
) -> pd.DataFrame:
    """
    One row per (city, station) where the city lies in that station's buffer.

    ``stations`` must be row-aligned with ``buffers``; distances are measured
    in the buffers' frame.
    """
    if len(buffers) == 0 or len(cities) == 0:
        return pd.DataFrame({
            city_name: pd.Series(dtype=object),
            station_id: pd.Series(dtype=object),
            "distance_m": pd.Series(dtype="float64"),
        })

    joined = _join(cities, buffers)
    centres = reproject_layer(stations, buffers.crs).geometry.to_numpy()
    station_positions = joined["buffer_position"].to_numpy()
    distances = [
        point.distance(centres[pos])
        for point, pos in zip(joined.geometry, station_positions)
    ]

    pairs = pd.DataFrame({
        city_name: joined[city_name].to_numpy(),
        station_id: stations[station_id].to_numpy()[station_positions],
        "distance_m": distances,
    })
    return pairs.sort_values([city_name, "distance_m"], kind="stable").reset_index(drop=True)
