from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Union

from assessment.errors import (
    AssessmentError,
    AuthorizationCheckFailed,
    AuthorizationDenied,
    IncompleteSubmission,
    InvalidTransition,
    PersistenceFailed,
    ValidationError,
)
from assessment.gate import GateDecision, SessionGate, normalize_identity
from assessment.loader import QuestionBankLoader, parse_test_reference
from assessment.persister import PersistTicket, ResultPersister
from assessment.scoring import DEFAULT_PASS_RATIO, pass_threshold, score
from assessment.types import HistoryRecord, Question, QuestionSet, ScoreResult, SessionState, TestReference
from pii import mask_email, mask_name, normalize_name

logger = logging.getLogger("assessment.session")


def _iso_utc_now() -> str:
    dt = datetime.now(timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _new_attempt_key() -> str:
    return uuid.uuid4().hex


class SessionStatus(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    SUBMITTED = "SUBMITTED"
    ERROR = "ERROR"


@dataclass(frozen=True)
class SessionSnapshot:
    """Consistent read of a session taken under its lock."""

    status: SessionStatus
    type_id: Optional[int]
    index: int
    question_count: int
    answered_ids: tuple[int, ...]
    selections: Mapping[int, int]
    current_question: Optional[Question]
    result: Optional[ScoreResult]
    attempt_key: Optional[str]
    ticket: Optional[PersistTicket]


class ExamSession:
    """One test taker's attempt, driven by start/select/navigate/submit events.

    Collaborators are injected so the machine runs without a web layer or a
    database. Events are serialized on an internal lock; the only blocking
    calls are the authorization check and the question load inside ``start``.
    The history write issued by ``submit`` never delays the returned score.
    """

    def __init__(
        self,
        gate: SessionGate,
        loader: QuestionBankLoader,
        persister: ResultPersister,
        *,
        pass_ratio: Any = DEFAULT_PASS_RATIO,
        assessment_type: str = "Custom",
        clock: Callable[[], str] = _iso_utc_now,
        key_factory: Callable[[], str] = _new_attempt_key,
    ):
        # fail fast on a bad ratio instead of at submit time
        pass_threshold(1, pass_ratio)

        self._gate = gate
        self._loader = loader
        self._persister = persister
        self._pass_ratio = pass_ratio
        self._assessment_type = assessment_type
        self._clock = clock
        self._key_factory = key_factory
        self._lock = threading.RLock()

        self.status = SessionStatus.NOT_STARTED
        self.identity: Optional[str] = None
        self.full_name: Optional[str] = None
        self.reference: Optional[TestReference] = None
        self.questions: Optional[QuestionSet] = None
        self.attempt_key: Optional[str] = None
        self.last_error: Optional[AssessmentError] = None
        self.result: Optional[ScoreResult] = None
        self.ticket: Optional[PersistTicket] = None
        self._state: Optional[SessionState] = None
        self._frozen: Optional[Mapping[int, int]] = None

    # -- queries --------------------------------------------------------

    @property
    def index(self) -> int:
        return self._state.index if self._state else 0

    @property
    def question_count(self) -> int:
        return len(self.questions) if self.questions else 0

    @property
    def selections(self) -> Mapping[int, int]:
        if self._frozen is not None:
            return self._frozen
        return MappingProxyType(dict(self._state.selections)) if self._state else MappingProxyType({})

    @property
    def completed(self) -> bool:
        return bool(self._state and self._state.completed)

    def unanswered(self) -> list[int]:
        return self._state.unanswered() if self._state else []

    def current_question(self) -> Optional[Question]:
        if not self.questions or not self._state:
            return None
        return self.questions.questions[self._state.index]

    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            selections = MappingProxyType(dict(self.selections))
            ids = self.questions.ids() if self.questions else []
            return SessionSnapshot(
                status=self.status,
                type_id=self.reference.type_id if self.reference else None,
                index=self.index,
                question_count=self.question_count,
                answered_ids=tuple(qid for qid in ids if qid in selections),
                selections=selections,
                current_question=self.current_question(),
                result=self.result,
                attempt_key=self.attempt_key,
                ticket=self.ticket,
            )

    # -- events ---------------------------------------------------------

    def start(
        self,
        identity: Any,
        test_reference: Union[TestReference, str],
        *,
        full_name: Optional[str] = None,
    ) -> None:
        with self._lock:
            if self.status not in {SessionStatus.NOT_STARTED, SessionStatus.ERROR}:
                raise InvalidTransition(f"Cannot start a session that is {self.status.value}")

            try:
                ref = test_reference if isinstance(test_reference, TestReference) else parse_test_reference(test_reference)
                decision = self._gate.authorize(identity, ref)
                if decision == GateDecision.DENIED:
                    raise AuthorizationDenied("You have not passed the interview round required for this test")
                if decision == GateDecision.CHECK_FAILED:
                    raise AuthorizationCheckFailed("We could not verify your access right now, please try again")
                questions = self._loader.load(ref.type_id)
            except AssessmentError as e:
                self.status = SessionStatus.ERROR
                self.last_error = e
                raise

            self.identity = normalize_identity(identity)
            self.full_name = normalize_name(full_name) or None
            self.reference = ref
            self.questions = questions
            self.last_error = None
            self._begin_attempt()
            logger.info(
                "session started identity=%s name=%s type_id=%s questions=%d attempt=%s",
                mask_email(self.identity),
                mask_name(self.full_name or ""),
                ref.type_id,
                len(questions),
                self.attempt_key,
            )

    def select_answer(self, question_id: int, choice_id: int) -> None:
        with self._lock:
            self._require(SessionStatus.IN_PROGRESS, "select an answer")
            question = self.questions.by_id().get(question_id)
            if question is None:
                raise ValidationError("Unknown question", details={"questionId": question_id})
            if choice_id not in question.choice_ids():
                raise ValidationError(
                    "Choice does not belong to this question",
                    details={"questionId": question_id, "choiceId": choice_id},
                )
            self._state.selections[question_id] = choice_id

    def navigate(self, delta: int) -> int:
        with self._lock:
            self._require(SessionStatus.IN_PROGRESS, "navigate")
            last = self.question_count - 1
            self._state.index = max(0, min(last, self._state.index + int(delta)))
            return self._state.index

    def submit(self) -> ScoreResult:
        with self._lock:
            if self.status == SessionStatus.SUBMITTED and self.result is not None:
                logger.info("repeated submit attempt=%s", self.attempt_key)
                return self.result
            self._require(SessionStatus.IN_PROGRESS, "submit")

            missing = self._state.unanswered()
            if missing:
                raise IncompleteSubmission(missing)

            self._frozen = MappingProxyType(dict(self._state.selections))
            result = score(self.questions.questions, self._frozen, self._pass_ratio)
            self.result = result
            self.status = SessionStatus.SUBMITTED

            record = HistoryRecord(
                identity=self.identity,
                taken_at=self._clock(),
                type_id=self.reference.type_id,
                correct=result.correct,
                total=result.total,
                passed=result.passed,
                attempt_key=self.attempt_key,
                assessment_type=self._assessment_type,
                full_name=self.full_name,
            )
            try:
                self.ticket = self._persister.persist(record)
            except Exception as e:
                logger.warning("history write not scheduled attempt=%s", self.attempt_key, exc_info=True)
                failure = PersistenceFailed("Error saving test results")
                failure.__cause__ = e
                self.ticket = PersistTicket.failed(self.attempt_key, failure)

            logger.info(
                "session submitted attempt=%s correct=%d total=%d passed=%s",
                self.attempt_key,
                result.correct,
                result.total,
                result.passed,
            )
            return result

    def retake(self) -> None:
        with self._lock:
            self._require(SessionStatus.SUBMITTED, "retake")
            previous = self.attempt_key
            self._begin_attempt()
            logger.info("session retake previous=%s attempt=%s", previous, self.attempt_key)

    # -- internals ------------------------------------------------------

    def _begin_attempt(self) -> None:
        self._state = SessionState(question_ids=self.questions.ids())
        self._frozen = None
        self.result = None
        self.ticket = None
        self.attempt_key = self._key_factory()
        self.status = SessionStatus.IN_PROGRESS

    def _require(self, status: SessionStatus, action: str) -> None:
        if self.status != status:
            raise InvalidTransition(f"Cannot {action} while the session is {self.status.value}")
