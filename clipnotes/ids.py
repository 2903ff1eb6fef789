from __future__ import annotations

import time


class IdFactory:
    """Millisecond-timestamp ids that never repeat or go backwards."""

    def __init__(self, last_id: str | None = None) -> None:
        self._last = 0
        if last_id is not None:
            self.observe(last_id)

    def observe(self, value: str) -> None:
        try:
            self._last = max(self._last, int(value))
        except (TypeError, ValueError):
            return

    def next_id(self, now: float | None = None) -> str:
        if now is None:
            now = time.time()
        candidate = int(now * 1000)
        if candidate <= self._last:
            candidate = self._last + 1
        self._last = candidate
        return str(candidate)
