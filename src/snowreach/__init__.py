"""
Snow station proximity analysis.

This package contains a small pipeline organized into logical modules:
- ``data``: loading the DEM, station, city and county layers
- ``analysis``: reprojection, elevation sampling, filtering and buffering
- ``pipeline``: the ordered run of all stages
- ``export``: writing the result tables to Parquet
- ``utils``: inspection and debugging helpers

The pipeline returns plain GeoDataFrames; rendering them on a map is left
to whatever consumes the result.
"""

__version__ = "0.1.0"
