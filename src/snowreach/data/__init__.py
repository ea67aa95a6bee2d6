"""
Input layers for the proximity analysis.

This module reads the DEM raster and the station, city and county vector
layers, and defines the containers passed between pipeline stages.
"""
