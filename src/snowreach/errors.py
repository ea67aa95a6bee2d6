"""
Exceptions and markers raised by the pipeline stages
"""
from dataclasses import dataclass
from typing import Any


class SnowReachError(Exception):
    """Base class for all pipeline errors"""


class SourceReadError(SnowReachError):
    """An input layer is missing, malformed, or has no usable reference frame"""


class UnsupportedFrameError(SnowReachError):
    """No transformation exists between two reference frames"""


class InvalidRadiusError(SnowReachError, ValueError):
    """Buffer radius is zero or negative"""


@dataclass(frozen=True)
class NoDataSample:
    """
    A station whose elevation could not be sampled.

    Not an error: the station simply drops out at the threshold filter.
    """

    station: Any
    x: float
    y: float
