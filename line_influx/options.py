"""Configuration for line processing."""

import codecs
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Callable, Mapping, Optional, Union

from .exceptions import InvalidOptionsError

LineSink = Callable[[str], None]

# Names accepted in option mappings besides the field names themselves
_ALIASES = {
    "chunkSize": "chunk_size",
    "newline": "delimiter",
    "callback": "sink",
}


class Mode(Enum):
    BUFFER = "buffer"
    SINK = "sink"


@dataclass(frozen=True)
class InfluxOptions:
    """Options for splitting a byte stream into lines.

    Attributes:
        charset: Codec used to decode byte chunks
        delimiter: Line separator (default: newline)
        trim: Strip leading/trailing whitespace from every line
        chunk_size: Max bytes requested per read from the source
        sink: Optional callback receiving each line instead of the buffer
    """
    charset: str = "utf-8"
    delimiter: str = "\n"
    trim: bool = False
    chunk_size: int = 512
    sink: Optional[LineSink] = None

    def __post_init__(self) -> None:
        if not isinstance(self.delimiter, str) or not self.delimiter:
            raise InvalidOptionsError("delimiter must be a non-empty string")
        if not isinstance(self.chunk_size, int) or self.chunk_size <= 0:
            raise InvalidOptionsError(f"chunk_size must be a positive integer, got {self.chunk_size!r}")
        if self.sink is not None and not callable(self.sink):
            raise InvalidOptionsError("sink must be callable")
        try:
            codecs.lookup(self.charset)
        except (LookupError, TypeError) as e:
            raise InvalidOptionsError(f"Unknown charset: {self.charset!r}") from e

    @property
    def mode(self) -> Mode:
        return Mode.SINK if self.sink is not None else Mode.BUFFER

    @classmethod
    def merge(cls, options: Union["InfluxOptions", Mapping[str, Any], None] = None) -> "InfluxOptions":
        """Build options from defaults overridden by `options`.

        Args:
            options: None, an InfluxOptions instance, or a mapping of overrides.
                Keys may be field names or `chunkSize`, `newline`, `callback`.

        Raises:
            InvalidOptionsError: On unknown keys or invalid values
        """
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        if not isinstance(options, Mapping):
            raise InvalidOptionsError(f"Options must be a mapping, got {type(options).__name__}")

        known = {f.name for f in fields(cls)}
        overrides = {}
        for key, value in options.items():
            name = _ALIASES.get(key, key)
            if name not in known:
                raise InvalidOptionsError(f"Unknown option: {key}")
            overrides[name] = value
        return replace(cls(), **overrides)
