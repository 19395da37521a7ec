"""Line influx package: incremental line splitting for byte streams."""

from .influx import Influx
from .options import InfluxOptions, Mode
from .buffer import LineBuffer
from .splitter import Splitter, default_printer
from .pull import BackoffPolicy, CANCELLED, pull
from .sources import ChannelSource
from .exceptions import (
    InfluxError,
    InvalidOptionsError,
    DecodeFailedError,
    StreamClosedError,
    PullTimeoutError,
    SourceReadError
)

__all__ = [
    "Influx",
    "InfluxOptions",
    "Mode",
    "LineBuffer",
    "Splitter",
    "default_printer",
    "BackoffPolicy",
    "CANCELLED",
    "pull",
    "ChannelSource",
    "InfluxError",
    "InvalidOptionsError",
    "DecodeFailedError",
    "StreamClosedError",
    "PullTimeoutError",
    "SourceReadError"
]
__version__ = "0.1.0"
