from __future__ import annotations

import threading

import pytest

from assessment.deadline import DeadlineExceeded, call_with_deadline, make_executor
from assessment.gate import GateDecision, SessionGate
from assessment.persister import PersistStatus, ResultPersister
from assessment.types import HistoryRecord
from fakes import FakeHistory, FakeRegistry


def test_no_timeout_runs_inline():
    assert call_with_deadline(threading.current_thread) is threading.current_thread()


def test_timed_call_returns_value():
    pool = make_executor(1, "t")
    try:
        assert call_with_deadline(lambda x: x * 2, 21, timeout=1, executor=pool) == 42
    finally:
        pool.shutdown(wait=True)


def test_hung_call_exhausts_only_its_own_pool():
    release = threading.Event()
    busy = make_executor(1, "busy")
    other = make_executor(1, "other")
    try:
        with pytest.raises(DeadlineExceeded):
            call_with_deadline(release.wait, 5, timeout=0.05, executor=busy)

        # the single worker of ``busy`` is still parked on the hung call
        with pytest.raises(DeadlineExceeded):
            call_with_deadline(lambda: "ok", timeout=0.05, executor=busy)
        assert call_with_deadline(lambda: "ok", timeout=1, executor=other) == "ok"
    finally:
        release.set()
        busy.shutdown(wait=True)
        other.shutdown(wait=True)


def test_hanging_history_store_does_not_starve_gate():
    release = threading.Event()
    persister = ResultPersister(FakeHistory(block=release), max_workers=1, timeout=0.05)
    gate_pool = make_executor(1, "auth-check")
    try:
        tickets = [
            persister.persist(
                HistoryRecord(
                    identity="bob@x.com",
                    taken_at="2026-01-01T00:00:00Z",
                    type_id=42,
                    correct=1,
                    total=1,
                    passed=True,
                    attempt_key=f"k{i}",
                )
            )
            for i in range(3)
        ]
        assert tickets[0].wait(2) == PersistStatus.FAILED

        gate = SessionGate(FakeRegistry(["bob@x.com"]), timeout=1, executor=gate_pool)
        assert gate.authorize("bob@x.com") == GateDecision.AUTHORIZED
    finally:
        release.set()
        persister.shutdown()
        gate_pool.shutdown(wait=True)
