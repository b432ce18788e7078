from __future__ import annotations

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Any, Optional

from assessment.deadline import call_with_deadline
from assessment.errors import ValidationError
from assessment.ports import AuthorizationRegistry
from assessment.types import TestReference
from pii import mask_email

logger = logging.getLogger("assessment.gate")

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class GateDecision(str, Enum):
    AUTHORIZED = "AUTHORIZED"
    DENIED = "DENIED"
    CHECK_FAILED = "CHECK_FAILED"


def normalize_identity(value: Any) -> str:
    return str(value or "").strip().lower()


def validate_identity(value: Any) -> str:
    identity = normalize_identity(value)
    if not identity or not _EMAIL_RE.match(identity):
        raise ValidationError("Please enter a valid email")
    return identity


class SessionGate:
    """Checks a test taker against the authorization registry.

    One registry lookup per call. A registry failure or deadline miss is
    reported as ``CHECK_FAILED`` so callers can tell "could not verify" apart
    from "not eligible".
    """

    def __init__(
        self,
        registry: AuthorizationRegistry,
        *,
        timeout: Optional[float] = None,
        executor: Optional[ThreadPoolExecutor] = None,
    ):
        self._registry = registry
        self._timeout = timeout
        self._executor = executor

    def authorize(self, identity: Any, test_reference: Optional[TestReference] = None) -> GateDecision:
        email = validate_identity(identity)
        slug = test_reference.slug if test_reference else ""

        try:
            allowed = call_with_deadline(
                self._registry.is_authorized, email, timeout=self._timeout, executor=self._executor
            )
        except Exception:
            logger.warning("authorization check failed identity=%s test=%s", mask_email(email), slug, exc_info=True)
            return GateDecision.CHECK_FAILED

        if not allowed:
            logger.info("authorization denied identity=%s test=%s", mask_email(email), slug)
            return GateDecision.DENIED
        return GateDecision.AUTHORIZED
