from __future__ import annotations

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import Any, Optional

from assessment.deadline import call_with_deadline
from assessment.errors import EmptyQuestionSet, QuestionLoadFailed, ValidationError
from assessment.ports import QuestionRepository
from assessment.types import QuestionSet, TestReference

logger = logging.getLogger("assessment.loader")

_TYPE_ID_RE = re.compile(r"^\d{1,10}$", re.ASCII)
# type ids live in a 32-bit INTEGER column
_MAX_TYPE_ID = 2**31 - 1


def parse_test_reference(slug: Any) -> TestReference:
    """Parse ``"{name}-{team}-{typeId}"``; the type id is the last hyphen token."""
    s = str(slug or "").strip()
    token = s.rsplit("-", 1)[-1].strip()
    if not _TYPE_ID_RE.match(token) or not 0 < int(token) <= _MAX_TYPE_ID:
        raise ValidationError("Test not found", details={"slug": s})
    return TestReference(slug=s, type_id=int(token))


class QuestionBankLoader:
    def __init__(
        self,
        repository: QuestionRepository,
        *,
        timeout: Optional[float] = None,
        executor: Optional[ThreadPoolExecutor] = None,
    ):
        self._repository = repository
        self._timeout = timeout
        self._executor = executor

    def load(self, type_id: int) -> QuestionSet:
        try:
            rows = call_with_deadline(
                self._repository.get_by_type, int(type_id), timeout=self._timeout, executor=self._executor
            )
        except Exception as e:
            logger.warning("question load failed type_id=%s", type_id, exc_info=True)
            raise QuestionLoadFailed("Could not load questions, please try again") from e

        if not rows:
            logger.info("no questions configured type_id=%s", type_id)
            raise EmptyQuestionSet("No questions configured for this test", details={"typeId": int(type_id)})

        questions = []
        for q in rows:
            own = tuple(c for c in q.choices if c.question_id == q.id)
            if len(own) != len(q.choices):
                logger.warning("question %s: dropped %d choices owned by another question", q.id, len(q.choices) - len(own))
                q = replace(q, choices=own)
            flagged = sum(1 for c in own if c.is_correct)
            if flagged != 1:
                logger.warning("question %s has %d choices flagged correct", q.id, flagged)
            questions.append(q)

        logger.info("loaded questions type_id=%s count=%d", type_id, len(questions))
        return QuestionSet(type_id=int(type_id), questions=tuple(questions))
