"""
Threshold filtering of sampled stations
"""
import logging

import geopandas as gpd

from ..config import ELEVATION_COLUMN

logger = logging.getLogger(__name__)


def filter_stations(
    stations: gpd.GeoDataFrame,
    min_duration: float,
    min_elevation: float,
    elevation_column: str = ELEVATION_COLUMN,
) -> gpd.GeoDataFrame:
    """
    Keep stations with duration > min_duration and elevation > min_elevation.

    Both comparisons are strict. Missing elevations never pass. Row order
    is preserved.
    """
    for column in ("duration", elevation_column):
        if column not in stations.columns:
            raise KeyError(f"Column {column!r} not found in stations layer")

    passes = (stations["duration"] > min_duration) & (stations[elevation_column] > min_elevation)
    passes = passes.fillna(False).astype(bool)

    filtered = stations[passes]
    logger.info(
        f"Kept {len(filtered)}/{len(stations)} stations "
        f"(duration > {min_duration}, {elevation_column} > {min_elevation})"
    )
    return filtered
