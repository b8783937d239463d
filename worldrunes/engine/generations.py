from __future__ import annotations

import threading


class SearchGenerations:
    """Monotonic ids for search submissions; only the newest one is current."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._latest = 0

    def next(self) -> int:
        with self._lock:
            self._latest += 1
            return self._latest

    def latest(self) -> int:
        with self._lock:
            return self._latest

    def is_current(self, generation: int) -> bool:
        with self._lock:
            return int(generation) == self._latest and self._latest > 0
