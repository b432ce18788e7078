from __future__ import annotations

import re
import threading
import time

from app.utils.errors import ApiError

_LIMIT_RE = re.compile(r"^\s*(\d+)\s+per\s+(second|minute|hour)\s*$", re.IGNORECASE)
_WINDOWS = {"second": 1, "minute": 60, "hour": 3600}


def parse_limit(limit: str) -> tuple[int, int]:
    """``"30 per minute"`` -> ``(30, 60)``; unparseable limits fall back to 300/minute."""
    m = _LIMIT_RE.match(str(limit or ""))
    if not m:
        return 300, 60
    return max(1, int(m.group(1))), _WINDOWS[m.group(2).lower()]


class InMemoryRateLimiter:
    """Fixed-window counter per key, local to the process."""

    def __init__(self, *, max_keys: int = 50_000):
        self._max_keys = max_keys
        self._lock = threading.Lock()
        self._store: dict[str, tuple[int, int]] = {}

    def check(self, key: str, limit: str) -> None:
        max_hits, window_seconds = parse_limit(limit)
        window_id = int(time.time() // window_seconds)
        bucket = f"{key}:{window_seconds}"

        with self._lock:
            if len(self._store) > self._max_keys:
                self._store.clear()

            current_window, count = self._store.get(bucket, (window_id, 0))
            if current_window != window_id:
                count = 0
            count += 1
            self._store[bucket] = (window_id, count)

        if count > max_hits:
            raise ApiError("RATE_LIMITED", "Rate limit exceeded", status=429, details={"retryAfterSeconds": window_seconds})

    def reset(self) -> None:
        with self._lock:
            self._store.clear()
