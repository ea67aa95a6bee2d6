"""
In-memory containers passed between pipeline stages
"""
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import geopandas as gpd
import numpy as np
import pandas as pd
from affine import Affine
from rasterio.crs import CRS
from rasterio.transform import array_bounds

from ..errors import NoDataSample


@dataclass
class RasterField:
    """
    Single-band elevation grid.

    Args:
        data: 2-D float array, NaN where the source had no data
        transform: affine mapping from (col, row) to (x, y) of cell corners
        crs: reference frame of the grid
    """

    data: np.ndarray
    transform: Affine
    crs: CRS

    @property
    def shape(self) -> Tuple[int, int]:
        return self.data.shape

    @property
    def height(self) -> int:
        return self.data.shape[0]

    @property
    def width(self) -> int:
        return self.data.shape[1]

    @property
    def res(self) -> Tuple[float, float]:
        return abs(self.transform.a), abs(self.transform.e)

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        """(left, bottom, right, top)"""
        west, south, east, north = array_bounds(self.height, self.width, self.transform)
        return west, south, east, north


@dataclass
class LayerSet:
    dem: RasterField
    stations: gpd.GeoDataFrame
    cities: gpd.GeoDataFrame
    counties: gpd.GeoDataFrame


@dataclass
class PipelineResult:
    """Tables handed to whatever renders or stores the analysis"""

    filtered_stations: gpd.GeoDataFrame
    cities_within_buffer: gpd.GeoDataFrame
    buffers: gpd.GeoDataFrame
    counties: gpd.GeoDataFrame
    no_data: List[NoDataSample] = field(default_factory=list)
    pairs: Optional[pd.DataFrame] = None  # city, station, distance_m
