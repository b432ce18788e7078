from __future__ import annotations

from typing import Any, Iterable


class AssessmentError(Exception):
    code = "ASSESSMENT_ERROR"
    retryable = False

    def __init__(self, message: str, *, details: Any = None):
        super().__init__(message)
        self.message = str(message or "")
        self.details = details


class ValidationError(AssessmentError):
    code = "VALIDATION_ERROR"


class AuthorizationDenied(AssessmentError):
    code = "AUTHORIZATION_DENIED"


class AuthorizationCheckFailed(AssessmentError):
    code = "AUTH_CHECK_FAILED"
    retryable = True


class QuestionLoadFailed(AssessmentError):
    code = "QUESTION_LOAD_FAILED"
    retryable = True


class EmptyQuestionSet(AssessmentError):
    code = "EMPTY_QUESTION_SET"


class IncompleteSubmission(AssessmentError):
    code = "INCOMPLETE_SUBMISSION"

    def __init__(self, unanswered: Iterable[int]):
        ids = list(unanswered)
        super().__init__(f"{len(ids)} question(s) unanswered", details={"unanswered": ids})
        self.unanswered = ids


class InvalidTransition(AssessmentError):
    code = "INVALID_STATE"


class PersistenceFailed(AssessmentError):
    """Non-fatal: carried as a warning next to an already-computed score."""

    code = "PERSISTENCE_FAILED"
    retryable = False
