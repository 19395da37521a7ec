"""Tests for ChannelSource without requiring a live SSH server."""

import socket

import pytest
from paramiko.ssh_exception import SSHException

from line_influx.exceptions import SourceReadError
from line_influx.influx import Influx
from line_influx.sources import ChannelSource


class TestChannelSource:

    def test_reads_stdout_chunks_until_exit(self, mock_channel):
        channel = mock_channel(stdout_chunks=[b"Starting...\nProce", b"ssing\n", b"Done"])
        source = ChannelSource(channel, poll_interval=0)

        assert source.read(512) == b"Starting...\nProce"
        assert source.read(512) == b"ssing\n"
        assert source.read(512) == b"Done"
        assert source.read(512) == b""

    def test_reads_stderr(self, mock_channel):
        channel = mock_channel(stderr_chunks=[b"Warning: config not found\n"])
        source = ChannelSource(channel, which="stderr", poll_interval=0)

        assert source.read(64) == b"Warning: config not found\n"
        channel.recv_stderr.assert_called_once_with(64)
        channel.recv.assert_not_called()

    def test_influx_over_channel(self, mock_channel, drain):
        channel = mock_channel(stdout_chunks=[b"Line 1\nLi", b"ne 2\n"])
        influx = Influx(ChannelSource(channel, poll_interval=0))

        influx.pump()

        assert drain(influx) == ["Line 1", "Line 2", ""]

    def test_waits_for_data(self, mock_channel):
        """Data that is not ready on the first check is picked up on a later poll."""
        channel = mock_channel()
        ready = iter([False, False, True])
        channel.recv_ready.side_effect = lambda: next(ready)
        channel.recv.side_effect = lambda size: b"late\n"
        channel.exit_status_ready.side_effect = lambda: False

        source = ChannelSource(channel, poll_interval=0)

        assert source.read(16) == b"late\n"
        assert channel.recv_ready.call_count == 3

    def test_timeout(self, mock_channel):
        channel = mock_channel()
        channel.exit_status_ready.side_effect = lambda: False
        source = ChannelSource(channel, poll_interval=0.001, timeout=0.01)

        with pytest.raises(SourceReadError, match="No data on stdout"):
            source.read(16)

    @pytest.mark.parametrize("error", [
        socket.error("Connection reset"),
        SSHException("Channel closed"),
    ])
    def test_channel_errors_are_wrapped(self, mock_channel, error):
        channel = mock_channel()
        channel.recv_ready.side_effect = error
        source = ChannelSource(channel, poll_interval=0)

        with pytest.raises(SourceReadError, match="Channel read failed"):
            source.read(16)

    def test_close(self, mock_channel):
        channel = mock_channel()
        ChannelSource(channel).close()
        channel.close.assert_called_once()

    def test_other_stream_is_drained_while_waiting(self, mock_channel):
        """Exit is reported only once stderr is drained; reading stdout must get there."""
        channel = mock_channel(stderr_chunks=[b"warn\n", b"more\n"])
        source = ChannelSource(channel, poll_interval=0, timeout=1)

        assert source.read(16) == b""
        assert channel.recv_stderr.call_count == 2

    def test_other_stream_goes_to_side_sink(self, mock_channel, drain):
        errors = []
        channel = mock_channel(stdout_chunks=[b"out\n"], stderr_chunks=[b"err 1\n", b"err 2\n"])
        influx = Influx(ChannelSource(channel, poll_interval=0, other_sink=errors.append))

        influx.pump()

        assert drain(influx) == ["out", ""]
        assert errors == [b"err 1\n", b"err 2\n"]

    def test_empty_recv_means_closed(self, mock_channel):
        channel = mock_channel()
        channel.recv_ready.side_effect = lambda: True
        channel.recv.side_effect = lambda size: b''
        channel.exit_status_ready.side_effect = lambda: False

        assert ChannelSource(channel, poll_interval=0).read(16) == b""

    def test_closed_channel_without_exit_status(self, mock_channel):
        channel = mock_channel()
        channel.exit_status_ready.side_effect = lambda: False
        channel.closed = True

        assert ChannelSource(channel, poll_interval=0).read(16) == b""
