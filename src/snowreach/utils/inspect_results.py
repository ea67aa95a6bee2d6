"""
Small helper to inspect the exported result tables.

The goal is to quickly check what a run produced: schemas, row counts
and the value ranges of the numeric columns.
"""
import json
from pathlib import Path

import pyarrow.parquet as pq

from ..config import OUTPUT_DIR
from ..export import CITIES_TABLE, METADATA_FILE, STATIONS_TABLE


def _describe(parquet_file: Path, numeric_columns) -> None:
    print(f"\nInspecting {parquet_file}")
    if not parquet_file.exists():
        print("  Not found!")
        return

    table = pq.read_table(parquet_file)
    print(f"  Schema: {table.schema}")
    print(f"  Rows: {table.num_rows}")

    df = table.to_pandas()
    if df.empty:
        print("  No rows in table.")
        return

    for column in numeric_columns:
        values = df[column].dropna()
        if len(values) == 0:
            print(f"  {column}: no values")
            continue
        print(f"  {column} (min/mean/max): {values.min():.1f}/{values.mean():.1f}/{values.max():.1f}")


def inspect_results(output_dir=OUTPUT_DIR) -> None:
    """Print a summary of the tables written by one pipeline run."""
    output_dir = Path(output_dir)

    metadata_file = output_dir / METADATA_FILE
    if metadata_file.exists():
        with open(metadata_file) as f:
            metadata = json.load(f)
        print(f"CRS: {metadata['crs']}")
        print(f"Stations: {metadata['stations']}, cities: {metadata['cities']}")
        if metadata["no_data_stations"]:
            print(f"Stations without elevation: {metadata['no_data_stations']}")

    _describe(output_dir / STATIONS_TABLE, ["duration", "elevation"])
    _describe(output_dir / CITIES_TABLE, ["population"])


def main() -> None:
    inspect_results()


if __name__ == "__main__":
    main()
