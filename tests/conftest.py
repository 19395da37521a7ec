"""Shared pytest fixtures for line_influx tests."""

import pytest
from unittest.mock import Mock

from line_influx.buffer import LineBuffer
from line_influx.influx import Influx
from line_influx.options import InfluxOptions
from line_influx.pull import BackoffPolicy
from line_influx.splitter import Splitter


def _drain(source):
    """Pop every buffered line from a LineBuffer or an Influx."""
    lines = []
    pop = source.pop if isinstance(source, LineBuffer) else source.next
    while True:
        line = pop()
        if line is None:
            return lines
        lines.append(line)


@pytest.fixture
def drain():
    return _drain


@pytest.fixture
def buffer():
    return LineBuffer()


@pytest.fixture
def make_splitter(buffer):
    """Build a Splitter over the shared buffer with option overrides."""
    def _make(**overrides):
        return Splitter(InfluxOptions(**overrides), buffer)
    return _make


@pytest.fixture
def influx():
    """Processor without a source, fed directly by the test."""
    return Influx()


@pytest.fixture
def fast_policy():
    """Backoff policy with tiny delays so polling tests stay quick."""
    return BackoffPolicy(max_spin=8, initial_delay=0.0005, max_delay=0.002)


@pytest.fixture
def mock_channel():
    """Create a mock paramiko channel that serves the given stdout/stderr chunks."""
    def _make(stdout_chunks=(), stderr_chunks=()):
        channel = Mock()
        state = {"stdout": list(stdout_chunks), "stderr": list(stderr_chunks)}

        def recv(size):
            return state["stdout"].pop(0) if state["stdout"] else b''

        def recv_stderr(size):
            return state["stderr"].pop(0) if state["stderr"] else b''

        channel.recv_ready.side_effect = lambda: bool(state["stdout"])
        channel.recv_stderr_ready.side_effect = lambda: bool(state["stderr"])
        channel.recv.side_effect = recv
        channel.recv_stderr.side_effect = recv_stderr
        channel.exit_status_ready.side_effect = lambda: not state["stdout"] and not state["stderr"]
        channel.closed = False
        channel.close = Mock()
        return channel
    return _make
