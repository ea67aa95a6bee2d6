"""
Result export
Writes the filtered stations, the cities within reach and the city/station
pairs as Parquet tables, with a small JSON sidecar describing the run.
"""
import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Optional

import geopandas as gpd
import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from .config import ELEVATION_COLUMN, PipelineSettings
from .data.models import PipelineResult

logger = logging.getLogger(__name__)

STATIONS_TABLE = "filtered_stations.parquet"
CITIES_TABLE = "cities_within_buffer.parquet"
PAIRS_TABLE = "station_city_pairs.parquet"
METADATA_FILE = "metadata.json"

STATIONS_SCHEMA = pa.schema([
    ("station", pa.string()),
    ("duration", pa.float64()),
    (ELEVATION_COLUMN, pa.float64()),
    ("lon", pa.float64()),
    ("lat", pa.float64()),
])

CITIES_SCHEMA = pa.schema([
    ("name", pa.string()),
    ("population", pa.float64()),
    ("lon", pa.float64()),
    ("lat", pa.float64()),
])

PAIRS_SCHEMA = pa.schema([
    ("name", pa.string()),
    ("station", pa.string()),
    ("distance_m", pa.float64()),
])


def _coordinates_frame(gdf: gpd.GeoDataFrame, columns) -> pd.DataFrame:
    df = pd.DataFrame(gdf.drop(columns=gdf.geometry.name))
    df["lon"] = gdf.geometry.x
    df["lat"] = gdf.geometry.y
    return df[list(columns)]


def stations_table(stations: gpd.GeoDataFrame) -> pa.Table:
    df = _coordinates_frame(stations, STATIONS_SCHEMA.names)
    df["station"] = df["station"].astype(str)
    df["duration"] = df["duration"].astype("float64")
    df[ELEVATION_COLUMN] = df[ELEVATION_COLUMN].astype("Float64")
    return pa.Table.from_pandas(df, schema=STATIONS_SCHEMA, preserve_index=False)


def cities_table(cities: gpd.GeoDataFrame) -> pa.Table:
    df = _coordinates_frame(cities, CITIES_SCHEMA.names)
    df["name"] = df["name"].astype(str)
    df["population"] = df["population"].astype("float64")
    return pa.Table.from_pandas(df, schema=CITIES_SCHEMA, preserve_index=False)


def pairs_table(pairs: pd.DataFrame) -> pa.Table:
    df = pairs[PAIRS_SCHEMA.names].copy()
    df["name"] = df["name"].astype(str)
    df["station"] = df["station"].astype(str)
    df["distance_m"] = df["distance_m"].astype("float64")
    return pa.Table.from_pandas(df, schema=PAIRS_SCHEMA, preserve_index=False)


def write_results(result: PipelineResult, output_dir, settings: Optional[PipelineSettings] = None) -> Path:
    """
    Write the result tables and the run metadata into ``output_dir``.

    Returns the output directory.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    settings = settings or PipelineSettings()

    pq.write_table(stations_table(result.filtered_stations), output_dir / STATIONS_TABLE, compression="snappy")
    pq.write_table(cities_table(result.cities_within_buffer), output_dir / CITIES_TABLE, compression="snappy")
    if result.pairs is not None:
        pq.write_table(pairs_table(result.pairs), output_dir / PAIRS_TABLE, compression="snappy")

    with open(output_dir / METADATA_FILE, "w") as f:
        json.dump({
            "crs": result.filtered_stations.crs.to_string(),
            "settings": asdict(settings),
            "stations": len(result.filtered_stations),
            "cities": len(result.cities_within_buffer),
            "pairs": 0 if result.pairs is None else len(result.pairs),
            "no_data_stations": [str(sample.station) for sample in result.no_data],
        }, f, indent=2)

    logger.info(f"✓ Wrote results to {output_dir}")
    return output_dir
