from __future__ import annotations

import os
import threading
from typing import Optional

from cachetools import TTLCache

from assessment.session import ExamSession


class SessionStore:
    """Process-local registry of in-flight exam sessions.

    Entries expire ``ttl_seconds`` after their last write; a reload of the
    test page does not resume an expired or lost session.
    """

    def __init__(self, *, ttl_seconds: int, max_items: int):
        self._cache: TTLCache = TTLCache(maxsize=max(100, int(max_items)), ttl=max(1, int(ttl_seconds)))
        self._lock = threading.RLock()

    def add(self, session: ExamSession) -> str:
        session_id = os.urandom(16).hex()
        with self._lock:
            self._cache[session_id] = session
        return session_id

    def get(self, session_id: str) -> Optional[ExamSession]:
        key = str(session_id or "").strip()
        if not key:
            return None
        with self._lock:
            session = self._cache.get(key)
            if session is not None:
                # refresh expiry on activity
                self._cache[key] = session
            return session

    def discard(self, session_id: str) -> None:
        with self._lock:
            self._cache.pop(str(session_id or ""), None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()
