"""
Snow station proximity pipeline
Reproject -> sample elevation -> filter -> buffer -> join with cities
"""
import logging
from typing import Optional

from .analysis.filters import filter_stations
from .analysis.proximity import buffer_stations, cities_within_buffers, station_city_pairs
from .analysis.reproject import reproject_layer, reproject_raster
from .analysis.sampling import find_no_data, sample_elevation
from .config import PipelineSettings, SourcePaths
from .data.loader import load_layers
from .data.models import LayerSet, PipelineResult

logger = logging.getLogger(__name__)


def run(layers: LayerSet, settings: Optional[PipelineSettings] = None) -> PipelineResult:
    """Run every analysis stage on already loaded layers"""
    settings = (settings or PipelineSettings()).validate()

    # Common working frame for sampling and buffering
    dem = reproject_raster(layers.dem, settings.working_crs)
    stations = reproject_layer(layers.stations, settings.working_crs)

    stations = sample_elevation(stations, dem)
    no_data = find_no_data(stations)
    if no_data:
        logger.warning(
            f"{len(no_data)} stations have no DEM value and will be excluded: "
            f"{[sample.station for sample in no_data]}"
        )

    filtered = filter_stations(stations, settings.min_duration, settings.min_elevation)
    buffers = buffer_stations(filtered, settings.buffer_radius_m, quad_segs=settings.quad_segs)
    cities = cities_within_buffers(layers.cities, buffers)
    pairs = station_city_pairs(layers.cities, buffers, filtered)

    # Everything handed out in the output frame
    filtered = reproject_layer(filtered, settings.output_crs)
    filtered["lon"] = filtered.geometry.x
    filtered["lat"] = filtered.geometry.y

    return PipelineResult(
        filtered_stations=filtered,
        cities_within_buffer=reproject_layer(cities, settings.output_crs),
        buffers=reproject_layer(buffers, settings.output_crs),
        counties=reproject_layer(layers.counties, settings.output_crs),
        no_data=no_data,
        pairs=pairs,
    )


def run_pipeline(paths: Optional[SourcePaths] = None, settings: Optional[PipelineSettings] = None) -> PipelineResult:
    """Load the four layers from ``paths`` and run the pipeline"""
    paths = paths or SourcePaths()
    settings = (settings or PipelineSettings()).validate()

    layers = load_layers(paths, country=settings.city_country, stations_crs=settings.stations_crs)
    return run(layers, settings)
