"""Line processor combining a splitter, a line buffer and both read modes."""

import logging
import sys
import threading
from typing import Any, Mapping, Optional, Union

from .buffer import LineBuffer
from .exceptions import InfluxError, SourceReadError
from .options import InfluxOptions
from .pull import DEFAULT_POLICY, BackoffPolicy, PullResult, pull
from .sources import ChannelSource, StreamName
from .splitter import Chunk, Splitter

logger = logging.getLogger(__name__)

Options = Union[InfluxOptions, Mapping[str, Any], None]


class Influx:
    """Splits an incoming byte stream into lines and buffers them for consumers.

    This class provides:
    - Push-style feeding (`feed` / `end`) for callers that receive chunks
    - Pull-style reading from a binary source (`pump`, or `start` on a reader thread)
    - `next()` for an immediate pop and `await next_async()` for a suspending pull
    - Context manager support for the reader thread
    """

    def __init__(self, source=None, options: Options = None, policy: BackoffPolicy = DEFAULT_POLICY) -> None:
        """Initialize the processor.

        Args:
            source: Optional object with `read(n)` returning bytes (or str), empty at end
            options: InfluxOptions or a mapping of option overrides
            policy: Spin and backoff limits used by next_async()

        Raises:
            InvalidOptionsError: If an option is unknown or invalid
        """
        self.source = source
        self.options = InfluxOptions.merge(options)
        self.policy = policy
        self._buffer = LineBuffer()
        self._splitter = Splitter(self.options, self._buffer)
        self._thread: Optional[threading.Thread] = None
        self._error: Optional[BaseException] = None

    @property
    def eof(self) -> bool:
        return self._buffer.eof

    @property
    def pending(self) -> int:
        return len(self._buffer)

    def feed(self, chunk: Chunk) -> None:
        """Process one chunk delivered by the producer."""
        self._splitter.process_chunk(chunk)

    def end(self) -> None:
        """Signal end-of-stream: flush the last fragment and set the eof flag."""
        self._splitter.flush()

    def read_chunk(self) -> bool:
        """Read and process one chunk from the source.

        Returns:
            True if a chunk was processed, False once the source is exhausted
        """
        if self.source is None:
            raise InfluxError("No source to read from")
        try:
            data = self.source.read(self.options.chunk_size)
        except OSError as e:
            logger.error(f"Failed to read from source: {e}")
            raise SourceReadError(f"Source read failed: {e}") from e
        if not data:
            self.end()
            return False
        self.feed(data)
        return True

    def pump(self) -> None:
        """Read the source until it is exhausted."""
        while self.read_chunk():
            pass

    def start(self) -> "Influx":
        """Run pump() on a daemon thread."""
        if self._thread is not None:
            return self
        if self.source is None:
            raise InfluxError("No source to read from")
        logger.info(f"Starting reader for {self.source!r}")
        self._thread = threading.Thread(target=self._run, name="influx-reader", daemon=True)
        self._thread.start()
        return self

    def _run(self) -> None:
        try:
            self.pump()
        except Exception as e:
            # Surfaced to consumers via join() and next_async()
            logger.error(f"Reader stopped: {e}")
            self._error = e

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for the reader thread and re-raise any error it hit."""
        if self._thread is not None:
            self._thread.join(timeout)
        self._raise_pending()

    def _raise_pending(self) -> None:
        if self._error is not None:
            raise self._error

    def next(self) -> Optional[str]:
        """
        Pop the next buffered line, or None if the buffer is empty.
        Does not indicate end-of-stream, check `eof` for that.
        """
        return self._buffer.pop()

    async def next_async(self, cancel=None, timeout: Optional[float] = None) -> PullResult:
        """Wait for the next line.

        Args:
            cancel: Optional asyncio.Event; once set the call returns CANCELLED
            timeout: Optional limit in seconds

        Returns:
            The next line, or None when the stream ended and no lines are left

        Raises:
            PullTimeoutError: If timeout elapses first
            InfluxError: Any error raised by the reader thread, once the lines
                buffered before it are consumed
        """
        return await pull(self._buffer, self.policy, cancel=cancel, timeout=timeout, check=self._raise_pending)

    async def __aiter__(self):
        while True:
            line = await self.next_async()
            if line is None:
                return
            yield line

    def __enter__(self) -> "Influx":
        """Start the reader thread when a source is present.

        A clean exit waits for the reader to finish, which on stdin or a channel
        means waiting for end-of-stream. When the body raised, exit leaves the
        daemon reader running and the body's exception propagates unchanged.
        """
        if self.source is not None:
            self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type is None:
            self.join()

    @classmethod
    def stdin(cls, options: Options = None) -> "Influx":
        """Create a processor reading standard input."""
        return cls(sys.stdin.buffer, options)

    @classmethod
    def open(cls, stream, options: Options = None) -> "Influx":
        """Create a processor reading an arbitrary binary stream."""
        return cls(stream, options)

    @classmethod
    def from_channel(cls, channel, options: Options = None, which: StreamName = "stdout") -> "Influx":
        """Create a processor reading a paramiko channel's stdout or stderr."""
        return cls(ChannelSource(channel, which), options)

    def __repr__(self) -> str:
        status = "eof" if self.eof else "open"
        return f"Influx({self.options.mode.value}, {self.pending} buffered, {status})"
