"""
Configuration for the snow station proximity pipeline
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .errors import InvalidRadiusError

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Input data paths
DATA_DIR = PROJECT_ROOT / "data" / "raw"
DEM_FILE = DATA_DIR / "dem_est.tif"
STATIONS_FILE = DATA_DIR / "snow_stations.gpkg"
CITIES_FILE = DATA_DIR / "ne_10m_populated_places.shp"
COUNTIES_FILE = DATA_DIR / "maakond_20231201.shp"

# Output directory
OUTPUT_DIR = PROJECT_ROOT / "data" / "results"

# Reference frames
WORKING_CRS = "EPSG:3301"  # Estonian Coordinate System of 1997, metres
OUTPUT_CRS = "EPSG:4326"  # WGS 84

# Analysis parameters
MIN_ELEVATION = 50.0  # metres, exclusive
MIN_DURATION = 100.0  # days of snow cover, exclusive
BUFFER_RADIUS_M = 50_000.0
QUAD_SEGS = 16  # segments per quarter circle, 64 vertices per buffer
MIN_QUAD_SEGS = 8  # 32 vertices keeps the area error below 1%

# City layer filter
CITY_COUNTRY = "Estonia"
CITY_COUNTRY_FIELD = "ADM0NAME"

# Source column -> record attribute
STATION_COLUMNS = {
    "station": "station",
    "duration": "duration",
}
STATION_COORD_COLUMNS = ("longitude", "latitude")
LONLAT_CRS = "EPSG:4326"  # frame of the coordinate columns when no other is given

CITY_COLUMNS = {
    "NAMEASCII": "name",
    "LATITUDE": "latitude",
    "LONGITUDE": "longitude",
    "POP_MAX": "population",
}

COUNTY_COLUMNS = {
    "MNIMI": "name",
}

ELEVATION_COLUMN = "elevation"


@dataclass
class SourcePaths:
    """Locations of the four input layers."""

    dem: Path = DEM_FILE
    stations: Path = STATIONS_FILE
    cities: Path = CITIES_FILE
    counties: Path = COUNTIES_FILE

    def __post_init__(self):
        self.dem = Path(self.dem)
        self.stations = Path(self.stations)
        self.cities = Path(self.cities)
        self.counties = Path(self.counties)


@dataclass
class PipelineSettings:
    """Thresholds and reference frames for one pipeline run."""

    min_elevation: float = MIN_ELEVATION
    min_duration: float = MIN_DURATION
    buffer_radius_m: float = BUFFER_RADIUS_M
    working_crs: str = WORKING_CRS
    output_crs: str = OUTPUT_CRS
    quad_segs: int = QUAD_SEGS
    city_country: Optional[str] = CITY_COUNTRY
    stations_crs: Optional[str] = None

    def validate(self) -> "PipelineSettings":
        if not self.buffer_radius_m > 0:
            raise InvalidRadiusError(
                f"Buffer radius must be positive, got {self.buffer_radius_m}"
            )
        if self.quad_segs < MIN_QUAD_SEGS:
            raise ValueError(
                f"quad_segs must be at least {MIN_QUAD_SEGS}, got {self.quad_segs}"
            )
        return self
