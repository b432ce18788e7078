from __future__ import annotations

from assessment.errors import (
    AssessmentError,
    AuthorizationCheckFailed,
    AuthorizationDenied,
    EmptyQuestionSet,
    IncompleteSubmission,
    InvalidTransition,
    PersistenceFailed,
    QuestionLoadFailed,
    ValidationError,
)
from assessment.gate import GateDecision, SessionGate, normalize_identity, validate_identity
from assessment.loader import QuestionBankLoader, parse_test_reference
from assessment.persister import PersistTicket, ResultPersister
from assessment.scoring import canonical_correct_choice, pass_threshold, score
from assessment.session import ExamSession, SessionSnapshot, SessionStatus
from assessment.types import Choice, HistoryRecord, Question, QuestionSet, ScoreResult, TestReference

__all__ = [
    "AssessmentError",
    "AuthorizationCheckFailed",
    "AuthorizationDenied",
    "Choice",
    "EmptyQuestionSet",
    "ExamSession",
    "GateDecision",
    "HistoryRecord",
    "IncompleteSubmission",
    "InvalidTransition",
    "PersistTicket",
    "PersistenceFailed",
    "Question",
    "QuestionBankLoader",
    "QuestionLoadFailed",
    "QuestionSet",
    "ResultPersister",
    "ScoreResult",
    "SessionGate",
    "SessionSnapshot",
    "SessionStatus",
    "TestReference",
    "ValidationError",
    "canonical_correct_choice",
    "normalize_identity",
    "parse_test_reference",
    "pass_threshold",
    "score",
    "validate_identity",
]
