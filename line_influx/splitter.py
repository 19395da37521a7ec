import codecs
import logging
from collections import deque
from typing import Union

from .buffer import LineBuffer
from .exceptions import DecodeFailedError, StreamClosedError
from .options import InfluxOptions, Mode

logger = logging.getLogger(__name__)

Chunk = Union[bytes, bytearray, memoryview, str]


def default_printer(line: str) -> None:
    # Keep it minimal, callers can override
    print(line)


class Splitter:
    """
    Splits decoded chunks on the configured delimiter.
    The unterminated remainder is carried over to the next chunk and emitted
    as the final line on flush(), even when it is empty.

    Completed lines wait in a queue until emitted. If a sink raises, the
    lines after the failing one stay queued and go out first on the next
    process_chunk() or flush(), so stream order is kept.
    """
    def __init__(self, options: InfluxOptions, buffer: LineBuffer):
        self.options = options
        self.buffer = buffer
        self._rest = ""  # carryover partial line
        self._pending: deque = deque()
        self._decoder = codecs.getincrementaldecoder(options.charset)(errors="strict")
        self._flushed = False
        if options.mode is Mode.SINK:
            self._emit = options.sink
        else:
            self._emit = buffer.push

    @property
    def carry_over(self) -> str:
        return self._rest

    @property
    def flushed(self) -> bool:
        return self._flushed

    def process_chunk(self, chunk: Chunk) -> None:
        """Decode `chunk`, join it to the carry-over and emit every completed line.

        Raises:
            DecodeFailedError: If the bytes are invalid under the configured charset,
                or a text chunk follows bytes ending inside a character
            StreamClosedError: If called after flush()
        """
        if self._flushed:
            raise StreamClosedError("Chunk received after end-of-stream")
        if chunk:
            text = self._text(chunk) if isinstance(chunk, str) else self._decode(chunk)
            lines = (self._rest + text).split(self.options.delimiter)
            self._rest = lines.pop()
            if lines:
                logger.debug(f"Chunk of {len(chunk)} produced {len(lines)} line(s)")
            self._pending.extend(lines)
        self._emit_pending()

    def process_line(self, line: str) -> None:
        if self.options.trim:
            line = line.strip()
        self._emit(line)

    def flush(self) -> None:
        """Emit the carry-over as the last line and mark end-of-stream.

        Runs once; a later call only retries lines a failing sink left queued.
        """
        if not self._flushed:
            tail = self._decode(b"", final=True)
            self._flushed = True
            self._pending.extend((self._rest + tail).split(self.options.delimiter))
            self._rest = ""
        elif self.buffer.eof:
            return
        self._emit_pending()
        self.buffer.mark_eof()
        logger.info("End of stream reached")

    def _emit_pending(self) -> None:
        while self._pending:
            self.process_line(self._pending.popleft())

    def _text(self, chunk: str) -> str:
        undecoded, _ = self._decoder.getstate()
        if undecoded:
            logger.error(f"Text chunk follows {len(undecoded)} undecoded byte(s)")
            raise DecodeFailedError(
                f"Text chunk received while {len(undecoded)} byte(s) of an incomplete "
                f"{self.options.charset} character are pending"
            )
        return chunk

    def _decode(self, data, final: bool = False) -> str:
        try:
            return self._decoder.decode(bytes(data), final)
        except UnicodeDecodeError as e:
            logger.error(f"Failed to decode chunk as {self.options.charset}: {e}")
            raise DecodeFailedError(f"Invalid {self.options.charset} data: {e}") from e
