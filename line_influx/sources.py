"""Chunk sources that are not plain binary file objects."""

import logging
import socket
import time
from typing import Callable, Literal, Optional

import paramiko
from paramiko.ssh_exception import SSHException

from .exceptions import SourceReadError

logger = logging.getLogger(__name__)

StreamName = Literal["stdout", "stderr"]


class ChannelSource:
    """Exposes a paramiko channel as a binary source with `read(n)`.

    The channel is polled without blocking: `read` waits until data is ready
    or the remote command has exited, and returns b"" once the command exited
    and its output is drained, or the channel closed. The stream not being
    read is drained on every poll so the remote side never stalls on a full
    window; its data goes to `other_sink` when one is given.
    """

    def __init__(
        self,
        channel: paramiko.Channel,
        which: StreamName = "stdout",
        poll_interval: float = 0.01,
        timeout: Optional[float] = None,
        other_sink: Optional[Callable[[bytes], None]] = None,
    ) -> None:
        """
        Args:
            channel: Channel with a command already started
            which: Read the command's stdout or stderr
            poll_interval: Sleep between readiness checks in seconds
            timeout: Max seconds a single read may wait for data (default: no limit)
            other_sink: Optional callback for data arriving on the other stream
                        (default: discarded)
        """
        self.channel = channel
        self.which = which
        self.poll_interval = poll_interval
        self.timeout = timeout
        self.other_sink = other_sink
        self._stderr = which == "stderr"

    def _ready(self, other: bool = False) -> bool:
        if self._stderr != other:
            return self.channel.recv_stderr_ready()
        return self.channel.recv_ready()

    def _recv(self, size: int, other: bool = False) -> bytes:
        if self._stderr != other:
            return self.channel.recv_stderr(size)
        return self.channel.recv(size)

    def _drain_other(self, size: int) -> None:
        while self._ready(other=True):
            data = self._recv(size, other=True)
            if not data:
                return
            if self.other_sink is not None:
                self.other_sink(data)

    def read(self, size: int) -> bytes:
        start_time = time.monotonic()
        try:
            while True:
                if self._ready():
                    # empty data means the channel was closed
                    return self._recv(size)
                self._drain_other(size)
                if self.channel.closed:
                    logger.debug(f"Channel closed while reading {self.which}")
                    return b""
                # Command finished and nothing left to read
                if self.channel.exit_status_ready() and not self._ready():
                    logger.debug(f"Channel {self.which} drained")
                    return b""
                if self.timeout is not None and (time.monotonic() - start_time) > self.timeout:
                    raise SourceReadError(f"No data on {self.which} within {self.timeout} seconds")
                time.sleep(self.poll_interval)
        except (socket.error, EOFError, SSHException) as e:
            logger.error(f"Reading channel {self.which} failed: {e}")
            raise SourceReadError(f"Channel read failed: {e}") from e

    def close(self) -> None:
        self.channel.close()

    def __repr__(self) -> str:
        return f"ChannelSource({self.which})"
