from __future__ import annotations

import logging
import threading
from concurrent.futures import CancelledError, Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from enum import Enum
from typing import Any, Optional

from cachetools import TTLCache

from assessment.deadline import DeadlineExceeded, call_with_deadline, make_executor
from assessment.errors import PersistenceFailed
from assessment.ports import HistoryRepository
from assessment.types import HistoryRecord
from pii import mask_email

logger = logging.getLogger("assessment.persister")


class PersistStatus(str, Enum):
    PENDING = "pending"
    SAVED = "saved"
    FAILED = "failed"


class PersistTicket:
    """Handle on one history write. Never raises to the holder."""

    def __init__(self, attempt_key: str, future: Future):
        self.attempt_key = attempt_key
        self._future = future

    @property
    def status(self) -> PersistStatus:
        if not self._future.done():
            return PersistStatus.PENDING
        if self._future.cancelled() or self._future.exception() is not None:
            return PersistStatus.FAILED
        return PersistStatus.SAVED

    @property
    def warning(self) -> Optional[str]:
        if self.status != PersistStatus.FAILED:
            return None
        if self._future.cancelled():
            return "Saving your result was cancelled"
        exc = self._future.exception()
        return getattr(exc, "message", None) or str(exc) or "Could not save your result"

    def wait(self, timeout: Optional[float] = None) -> PersistStatus:
        try:
            self._future.exception(timeout=timeout)
        except (FutureTimeout, CancelledError):
            # still pending after timeout, or cancelled; status reports which
            pass
        return self.status

    def add_done_callback(self, fn) -> None:
        self._future.add_done_callback(lambda _f: fn(self))

    def as_dict(self) -> dict[str, Any]:
        return {"status": self.status.value, "warning": self.warning}

    @classmethod
    def failed(cls, attempt_key: str, error: BaseException) -> "PersistTicket":
        fut: Future = Future()
        fut.set_exception(error)
        return cls(attempt_key, fut)


class ResultPersister:
    """Best-effort, single-attempt history writer.

    ``persist`` returns immediately with a ticket; the write runs on a worker
    thread. A second ``persist`` for an attempt key already accepted returns
    the first ticket instead of writing again.
    """

    def __init__(
        self,
        repository: HistoryRepository,
        *,
        executor: Optional[ThreadPoolExecutor] = None,
        max_workers: int = 2,
        timeout: Optional[float] = None,
        remember_keys: int = 50_000,
        remember_seconds: int = 24 * 3600,
    ):
        self._repository = repository
        self._owns_executor = executor is None
        self._executor = executor or make_executor(max_workers, "history-writer")
        self._timeout = timeout
        # a hung store ties up history-io threads only
        self._io_executor = make_executor(max_workers, "history-io") if timeout and timeout > 0 else None
        self._tickets: TTLCache = TTLCache(maxsize=remember_keys, ttl=remember_seconds)
        self._lock = threading.Lock()

    def persist(self, record: HistoryRecord) -> PersistTicket:
        key = str(record.attempt_key or "").strip()
        if not key:
            raise ValueError("history record is missing its attempt key")

        with self._lock:
            existing = self._tickets.get(key)
            if existing is not None:
                logger.info("duplicate submit ignored attempt=%s", key)
                return existing
            ticket = PersistTicket(key, self._executor.submit(self._write, record))
            self._tickets[key] = ticket
        return ticket

    def _write(self, record: HistoryRecord) -> None:
        try:
            call_with_deadline(self._repository.append, record, timeout=self._timeout, executor=self._io_executor)
        except DeadlineExceeded as e:
            logger.warning("history write timed out attempt=%s identity=%s", record.attempt_key, mask_email(record.identity))
            raise PersistenceFailed("Saving your result is taking too long; it may not have been recorded") from e
        except Exception as e:
            logger.warning(
                "history write failed attempt=%s identity=%s",
                record.attempt_key,
                mask_email(record.identity),
                exc_info=True,
            )
            raise PersistenceFailed("Error saving test results") from e

        logger.info(
            "history saved attempt=%s type_id=%s correct=%d total=%d result=%s",
            record.attempt_key,
            record.type_id,
            record.correct,
            record.total,
            "passed" if record.passed else "failed",
        )

    def shutdown(self, wait: bool = True) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=wait)
        if self._io_executor is not None:
            self._io_executor.shutdown(wait=False)
