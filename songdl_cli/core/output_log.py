"""
The shared transcript shown in the log pane.
"""

import threading
from collections.abc import Iterable


class OutputLog:
    """
    An append-only, ordered sequence of display lines.

    The download runner appends to it while the renderer takes snapshots, so
    every read and mutation holds the same lock. Snapshots are copies; the
    renderer never sees a list while it is being changed.
    """

    def __init__(self, lines: Iterable[str] = ()):
        self._lock = threading.Lock()
        self._lines: list[str] = list(lines)

    def append(self, line: str) -> None:
        with self._lock:
            self._lines.append(line)

    def extend(self, lines: Iterable[str]) -> None:
        with self._lock:
            self._lines.extend(lines)

    def snapshot(self) -> list[str]:
        with self._lock:
            return list(self._lines)

    def tail(self, count: int) -> list[str]:
        """Returns a copy of the last `count` lines."""
        if count <= 0:
            return []
        with self._lock:
            return self._lines[-count:]

    def clear(self) -> None:
        with self._lock:
            self._lines.clear()

    def replace(self, lines: Iterable[str]) -> None:
        """Clears the log and appends `lines` under a single lock acquisition."""
        new_lines = list(lines)
        with self._lock:
            self._lines = new_lines

    def __len__(self) -> int:
        with self._lock:
            return len(self._lines)
