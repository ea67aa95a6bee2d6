#!/usr/bin/env python3
"""
Snow Station Proximity Analysis
Finds high-elevation, long-duration snow stations and the cities near them
"""
import argparse
import logging
import sys
import time

from .config import (
    BUFFER_RADIUS_M,
    CITIES_FILE,
    CITY_COUNTRY,
    COUNTIES_FILE,
    DEM_FILE,
    MIN_DURATION,
    MIN_ELEVATION,
    OUTPUT_DIR,
    STATIONS_FILE,
    PipelineSettings,
    SourcePaths,
)
from .errors import SnowReachError
from .export import write_results
from .pipeline import run_pipeline

logger = logging.getLogger(__name__)


def configure_logging():
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)]
    )


def build_parser():
    parser = argparse.ArgumentParser(description="Find cities within reach of high snow stations")
    parser.add_argument("--dem", default=DEM_FILE, help="Elevation raster")
    parser.add_argument("--stations", default=STATIONS_FILE, help="Snow station points")
    parser.add_argument("--cities", default=CITIES_FILE, help="Populated places")
    parser.add_argument("--counties", default=COUNTIES_FILE, help="County polygons")
    parser.add_argument("--output", default=OUTPUT_DIR, help="Directory for the result tables")
    parser.add_argument("--min-elevation", type=float, default=MIN_ELEVATION)
    parser.add_argument("--min-duration", type=float, default=MIN_DURATION)
    parser.add_argument("--radius-km", type=float, default=BUFFER_RADIUS_M / 1000)
    parser.add_argument("--country", default=CITY_COUNTRY,
                        help="Keep only cities of this country (empty string keeps all)")
    parser.add_argument("--stations-crs", default=None,
                        help="CRS to assume when the station layer has none")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    configure_logging()

    logger.info("=" * 60)
    logger.info("Snow Station Proximity Analysis")
    logger.info("=" * 60)

    paths = SourcePaths(
        dem=args.dem,
        stations=args.stations,
        cities=args.cities,
        counties=args.counties,
    )
    settings = PipelineSettings(
        min_elevation=args.min_elevation,
        min_duration=args.min_duration,
        buffer_radius_m=args.radius_km * 1000,
        city_country=args.country or None,
        stations_crs=args.stations_crs,
    )

    start_time = time.time()
    try:
        result = run_pipeline(paths, settings)
        write_results(result, args.output, settings)
    except SnowReachError as e:
        logger.error(f"Processing failed: {e}")
        return 1

    logger.info("=" * 60)
    logger.info(f"Stations kept: {len(result.filtered_stations)}")
    logger.info(f"Cities within {args.radius_km:g} km: {len(result.cities_within_buffer)}")
    for name in result.cities_within_buffer["name"]:
        logger.info(f"  - {name}")
    logger.info(f"Finished in {time.time() - start_time:.2f}s")
    logger.info("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
