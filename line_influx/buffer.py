import threading
from collections import deque
from typing import Optional


class LineBuffer:
    """
    FIFO of completed lines plus the end-of-stream flag.
    Guarded by a lock so a reader thread can push while consumers pop.
    """
    def __init__(self) -> None:
        self._lines: deque = deque()
        self._eof = False
        self._lock = threading.Lock()

    def push(self, line: str) -> None:
        with self._lock:
            self._lines.append(line)

    def pop(self) -> Optional[str]:
        """Remove and return the oldest line, or None if nothing is buffered."""
        with self._lock:
            if not self._lines:
                return None
            return self._lines.popleft()

    def peek(self) -> Optional[str]:
        with self._lock:
            return self._lines[0] if self._lines else None

    def mark_eof(self) -> None:
        # false -> true only
        with self._lock:
            self._eof = True

    @property
    def eof(self) -> bool:
        return self._eof

    @property
    def exhausted(self) -> bool:
        with self._lock:
            return self._eof and not self._lines

    def __len__(self) -> int:
        with self._lock:
            return len(self._lines)

    def __bool__(self) -> bool:
        return len(self) > 0
