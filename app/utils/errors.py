from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from assessment import errors as domain


@dataclass(frozen=True)
class ApiError(Exception):
    code: str
    message: str
    status: int = 400
    details: Any | None = None


# domain error -> (public code, http status)
_DOMAIN_MAP: list[tuple[type[domain.AssessmentError], str, int]] = [
    (domain.ValidationError, "BAD_REQUEST", 400),
    (domain.AuthorizationDenied, "FORBIDDEN", 403),
    (domain.AuthorizationCheckFailed, "AUTH_CHECK_FAILED", 503),
    (domain.EmptyQuestionSet, "NOT_FOUND", 404),
    (domain.QuestionLoadFailed, "QUESTION_LOAD_FAILED", 503),
    (domain.IncompleteSubmission, "INCOMPLETE_SUBMISSION", 409),
    (domain.InvalidTransition, "INVALID_STATE", 409),
]


def api_error_from(err: domain.AssessmentError) -> ApiError:
    for cls, code, status in _DOMAIN_MAP:
        if isinstance(err, cls):
            return ApiError(code, err.message, status=status, details=err.details)
    return ApiError("INTERNAL", "Unexpected error", status=500)
