from __future__ import annotations

from typing import Protocol

from assessment.types import HistoryRecord, Question


class AuthorizationRegistry(Protocol):
    def is_authorized(self, identity: str) -> bool:
        """True when any registry row exists for the normalized identity.

        Raises on transport failure; a raise is never the same as ``False``.
        """


class QuestionRepository(Protocol):
    def get_by_type(self, type_id: int) -> list[Question]:
        """Questions of one assessment type with their choices populated (may be empty)."""


class HistoryRepository(Protocol):
    def append(self, record: HistoryRecord) -> None:
        """Write one history row. Raises on failure.

        Writing a record whose attempt key is already stored is a no-op.
        """
