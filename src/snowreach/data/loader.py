"""
Layer loading
Reads the DEM raster and the station, city and county vector layers,
narrowing each vector layer to the attributes the pipeline uses.
"""
import logging
from pathlib import Path
from typing import Mapping, Optional

import geopandas as gpd
import numpy as np
import pandas as pd
import rasterio
from rasterio.errors import RasterioError
from pyproj.exceptions import CRSError

from ..config import (
    CITY_COLUMNS,
    CITY_COUNTRY_FIELD,
    COUNTY_COLUMNS,
    LONLAT_CRS,
    STATION_COLUMNS,
    STATION_COORD_COLUMNS,
    SourcePaths,
)
from ..errors import SourceReadError
from .models import LayerSet, RasterField

logger = logging.getLogger(__name__)


def validate_inputs(paths: SourcePaths):
    """Validate that all required input files exist"""
    for name in ("dem", "stations", "cities", "counties"):
        path = getattr(paths, name)
        if not path.exists():
            raise SourceReadError(f"{name} file not found: {path}")

    logger.info("✓ Input files validated")


def load_dem(path) -> RasterField:
    """Read band 1 of a raster, with nodata cells set to NaN"""
    path = Path(path)
    if not path.exists():
        raise SourceReadError(f"DEM file not found: {path}")

    logger.info(f"Opening DEM file: {path}")
    try:
        with rasterio.open(path) as src:
            if not src.crs:
                raise SourceReadError(f"DEM has no CRS: {path}")

            logger.info(f"DEM CRS: {src.crs}")
            logger.info(f"DEM bounds: {src.bounds}")
            logger.info(f"DEM shape: {src.width} x {src.height} pixels")
            logger.info(f"DEM resolution: {src.res}")

            band = src.read(1, masked=True).astype("float64")
            return RasterField(
                data=band.filled(np.nan),
                transform=src.transform,
                crs=src.crs,
            )
    except RasterioError as e:
        raise SourceReadError(f"Could not read DEM {path}: {e}") from e


def _read_vector(path, label: str) -> gpd.GeoDataFrame:
    path = Path(path)
    if not path.exists():
        raise SourceReadError(f"{label} file not found: {path}")

    logger.info(f"Loading {label} from {path}")
    try:
        gdf = gpd.read_file(path)
    except (OSError, RuntimeError, ValueError) as e:
        raise SourceReadError(f"Could not read {label} {path}: {e}") from e

    logger.info(f"Available columns: {list(gdf.columns)}")
    return gdf


def _ensure_crs(gdf: gpd.GeoDataFrame, crs, label: str) -> gpd.GeoDataFrame:
    if gdf.crs is not None:
        return gdf
    if crs is None:
        raise SourceReadError(f"{label} layer has no CRS and none was given")

    logger.warning(f"No CRS found in {label} layer. Setting to {crs}")
    try:
        return gdf.set_crs(crs)
    except CRSError as e:
        raise SourceReadError(f"Invalid CRS {crs!r} for {label}: {e}") from e


def _narrow(gdf: gpd.GeoDataFrame, columns: Mapping[str, str], label: str) -> gpd.GeoDataFrame:
    """Keep only the mapped columns (plus geometry) under their record names"""
    missing = [c for c in columns if c not in gdf.columns]
    if missing:
        logger.error(f"Missing {label} fields {missing}. Available: {gdf.columns.tolist()}")
        raise SourceReadError(f"{label} layer is missing required fields: {missing}")

    narrowed = gdf[list(columns) + [gdf.geometry.name]].rename(columns=dict(columns))
    return narrowed.reset_index(drop=True)


def _has_geometry(gdf) -> bool:
    if not isinstance(gdf, gpd.GeoDataFrame) or "geometry" not in gdf.columns:
        return False
    geoms = gdf["geometry"]
    return len(geoms) == 0 or not (geoms.isna() | geoms.is_empty).all()


def load_stations(path, crs=None) -> gpd.GeoDataFrame:
    """
    Load snow stations as points with ``station`` and ``duration`` attributes.

    The stored geometry is used whenever the source has one. Points are
    built from longitude/latitude columns only for sources without
    geometry (e.g. CSV), in ``crs`` or WGS 84 when none is given.
    """
    gdf = _read_vector(path, "stations")

    lon_field, lat_field = STATION_COORD_COLUMNS
    if _has_geometry(gdf):
        if gdf.geometry.isna().any() or not (gdf.geom_type == "Point").all():
            raise SourceReadError("stations layer must contain point geometries")
        gdf = _ensure_crs(gdf, crs, "stations")
    elif lon_field in gdf.columns and lat_field in gdf.columns:
        xs = pd.to_numeric(gdf[lon_field], errors="coerce")
        ys = pd.to_numeric(gdf[lat_field], errors="coerce")
        if xs.isna().any() or ys.isna().any():
            raise SourceReadError("stations layer has non-numeric coordinates")
        gdf = gpd.GeoDataFrame(
            pd.DataFrame(gdf).drop(columns="geometry", errors="ignore"),
            geometry=gpd.points_from_xy(xs, ys),
            crs=crs or LONLAT_CRS,
        )
    else:
        raise SourceReadError(
            f"stations layer has neither geometry nor {lon_field}/{lat_field} columns"
        )

    stations = _narrow(gdf, STATION_COLUMNS, "stations")

    raw = stations["duration"]
    duration = pd.to_numeric(raw, errors="coerce")
    malformed = duration.isna() & raw.notna()
    if malformed.any():
        raise SourceReadError(
            f"stations layer has non-numeric durations for stations "
            f"{stations.loc[malformed, 'station'].tolist()}"
        )
    stations["duration"] = duration

    logger.info(f"Loaded {len(stations)} stations (CRS: {stations.crs})")
    return stations


def load_cities(path, country: Optional[str] = None, crs=None) -> gpd.GeoDataFrame:
    """Load populated places, optionally restricted to one country"""
    gdf = _read_vector(path, "cities")
    gdf = _ensure_crs(gdf, crs, "cities")

    if country is not None:
        if CITY_COUNTRY_FIELD not in gdf.columns:
            raise SourceReadError(
                f"cities layer has no {CITY_COUNTRY_FIELD} field to filter on"
            )
        gdf = gdf[gdf[CITY_COUNTRY_FIELD] == country]
        logger.info(f"Found {len(gdf)} cities in {country}")

    cities = _narrow(gdf, CITY_COLUMNS, "cities")
    logger.info(f"Loaded {len(cities)} cities (CRS: {cities.crs})")
    return cities


def load_counties(path, crs=None) -> gpd.GeoDataFrame:
    gdf = _read_vector(path, "counties")
    gdf = _ensure_crs(gdf, crs, "counties")
    counties = _narrow(gdf, COUNTY_COLUMNS, "counties")
    logger.info(f"Loaded {len(counties)} counties (CRS: {counties.crs})")
    return counties


def load_layers(paths: SourcePaths, country: Optional[str] = None, stations_crs=None) -> LayerSet:
    """Load all four input layers"""
    validate_inputs(paths)
    return LayerSet(
        dem=load_dem(paths.dem),
        stations=load_stations(paths.stations, crs=stations_crs),
        cities=load_cities(paths.cities, country=country),
        counties=load_counties(paths.counties),
    )
