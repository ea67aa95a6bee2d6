"""
Reprojection of rasters and vector layers between reference frames
"""
import logging

import geopandas as gpd
import numpy as np
from pyproj import CRS
from pyproj.exceptions import CRSError
from rasterio.crs import CRS as RasterioCRS
from rasterio.errors import CRSError as RasterioCRSError
from rasterio.warp import calculate_default_transform, reproject, Resampling

from ..data.models import RasterField
from ..errors import UnsupportedFrameError

logger = logging.getLogger(__name__)


def to_crs(value) -> CRS:
    """Parse anything pyproj understands into a CRS"""
    if value is None:
        raise UnsupportedFrameError("Reference frame is undefined")
    if isinstance(value, RasterioCRS):
        epsg = value.to_epsg()
        value = epsg if epsg is not None else value.to_wkt()
    try:
        return CRS.from_user_input(value)
    except CRSError as e:
        raise UnsupportedFrameError(f"Unknown reference frame {value!r}: {e}") from e


def _rasterio_crs(crs: CRS) -> RasterioCRS:
    epsg = crs.to_epsg()
    if epsg is not None:
        return RasterioCRS.from_epsg(epsg)
    return RasterioCRS.from_wkt(crs.to_wkt())


def same_crs(a, b) -> bool:
    # GDAL and geopandas both work in x/y order, so axis order is irrelevant here
    return to_crs(a).equals(to_crs(b), ignore_axis_order=True)


def reproject_raster(field: RasterField, dst_crs, resampling=Resampling.bilinear) -> RasterField:
    """
    Warp a raster into ``dst_crs``.

    Bilinear resampling is the default since elevation is a continuous
    field. A raster already in ``dst_crs`` is returned as is.
    """
    target = to_crs(dst_crs)
    if same_crs(field.crs, target):
        logger.info(f"DEM already in {dst_crs}, skipping reprojection")
        return field

    logger.info(f"Reprojecting DEM from {field.crs} to {dst_crs} ({resampling.name})")
    try:
        src_crs = _rasterio_crs(to_crs(field.crs))
        out_crs = _rasterio_crs(target)
        transform, width, height = calculate_default_transform(
            src_crs, out_crs, field.width, field.height, *field.bounds
        )
        destination = np.full((height, width), np.nan, dtype="float64")
        reproject(
            source=field.data,
            destination=destination,
            src_transform=field.transform,
            src_crs=src_crs,
            src_nodata=np.nan,
            dst_transform=transform,
            dst_crs=out_crs,
            dst_nodata=np.nan,
            resampling=resampling,
        )
    except RasterioCRSError as e:
        raise UnsupportedFrameError(
            f"Cannot reproject DEM from {field.crs} to {dst_crs}: {e}"
        ) from e

    logger.info(f"  Dimensions: {width} x {height} pixels")
    return RasterField(data=destination, transform=transform, crs=out_crs)


def reproject_layer(gdf: gpd.GeoDataFrame, dst_crs) -> gpd.GeoDataFrame:
    """Transform a vector layer into ``dst_crs``; always returns a new frame"""
    if gdf.crs is None:
        raise UnsupportedFrameError("Layer has no CRS, cannot reproject")

    target = to_crs(dst_crs)
    if same_crs(gdf.crs, target):
        return gdf.copy()

    logger.info(f"Reprojecting {len(gdf)} features from {gdf.crs} to {dst_crs}")
    try:
        projected = gdf.to_crs(target)
    except CRSError as e:
        raise UnsupportedFrameError(
            f"Cannot reproject layer from {gdf.crs} to {dst_crs}: {e}"
        ) from e

    if len(projected) and not np.isfinite(projected.total_bounds).all():
        raise UnsupportedFrameError(
            f"Transformation from {gdf.crs} to {dst_crs} produced non-finite coordinates"
        )
    return projected
