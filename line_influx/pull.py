"""Suspending pull over a LineBuffer: bounded busy-spin, then timed polling with backoff."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Union

from .buffer import LineBuffer
from .exceptions import PullTimeoutError

logger = logging.getLogger(__name__)


class _Sentinel:
    def __init__(self, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return self.name


# Returned by pull() when its cancel event fires
CANCELLED = _Sentinel("CANCELLED")
_NOTHING = _Sentinel("NOTHING")

PullResult = Union[str, None, _Sentinel]


@dataclass(frozen=True)
class BackoffPolicy:
    """Polling limits for a suspending pull.

    Attributes:
        max_spin: Checks made without yielding before switching to timed polling
        initial_delay: First sleep in seconds
        max_delay: Ceiling for the doubled sleep in seconds
    """
    max_spin: int = 4096
    initial_delay: float = 0.001
    max_delay: float = 0.032

    def delays(self):
        """Yield the sleep schedule: initial_delay, doubled each time, capped at max_delay."""
        delay = min(self.initial_delay, self.max_delay)
        while True:
            yield delay
            delay = min(self.max_delay, delay * 2)


DEFAULT_POLICY = BackoffPolicy()


def _poll(buffer: LineBuffer, check=None, cancel=None):
    line = buffer.pop()
    if line is not None:
        return line
    # Reader errors and cancellation only apply once buffered lines are drained
    if check is not None:
        check()
    if buffer.eof:
        # the producer may have pushed its last line right before setting the flag
        return buffer.pop()
    if cancel is not None and cancel.is_set():
        return CANCELLED
    return _NOTHING


async def pull(
    buffer: LineBuffer,
    policy: BackoffPolicy = DEFAULT_POLICY,
    cancel=None,
    timeout: Optional[float] = None,
    check: Optional[Callable[[], None]] = None,
) -> PullResult:
    """
    Wait for the next line.
    Args:
        buffer: Buffer filled by the producer.
        policy: Spin budget and backoff limits.
        cancel: Optional object with `is_set()` (e.g. asyncio.Event); once set,
                the pull resolves with CANCELLED.
        timeout: Optional limit in seconds for the whole wait.
        check: Optional callable run whenever a poll finds the buffer empty;
               may raise to end the wait in place of the end-of-stream result.
    Returns:
        The next line, None once the stream ended and the buffer is drained,
        or CANCELLED.
    Raises:
        PullTimeoutError: If `timeout` elapses first
    """
    def attempt():
        return _poll(buffer, check, cancel)

    # Spin until a line arrives, eof happens or the spin budget runs out
    spins = 0
    result = attempt()
    while result is _NOTHING and spins < policy.max_spin:
        spins += 1
        result = attempt()
    if result is not _NOTHING:
        return result

    loop = asyncio.get_running_loop()
    deadline = None if timeout is None else loop.time() + timeout
    logger.debug(f"No line after {spins} spins, switching to timed polling")

    for delay in policy.delays():
        if deadline is not None:
            remaining = deadline - loop.time()
            if remaining <= 0:
                raise PullTimeoutError(f"No line within {timeout} seconds")
            delay = min(delay, remaining)
        await asyncio.sleep(delay)
        result = attempt()
        if result is not _NOTHING:
            return result
