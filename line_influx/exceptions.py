"""Custom exceptions for line_influx package."""


class InfluxError(Exception):
    """Base exception for line processing errors."""
    pass


class InvalidOptionsError(InfluxError):
    """Raised when an option value or option name is not recognized."""
    pass


class DecodeFailedError(InfluxError):
    """Raised when a chunk cannot be decoded with the configured charset."""
    pass


class StreamClosedError(InfluxError):
    """Raised when a chunk arrives after end-of-stream was signalled."""
    pass


class PullTimeoutError(InfluxError):
    """Raised when a suspending pull exceeds its timeout."""
    pass


class SourceReadError(InfluxError):
    """Raised when reading from the underlying source fails."""
    pass
