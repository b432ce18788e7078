from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class TestReference:
    __test__ = False

    slug: str
    type_id: int


@dataclass(frozen=True)
class Choice:
    id: int
    question_id: int
    text: str
    is_correct: bool = False


@dataclass(frozen=True)
class Question:
    id: int
    prompt: str
    level: int
    type_id: int
    choices: tuple[Choice, ...] = ()

    def choice_ids(self) -> set[int]:
        return {c.id for c in self.choices}


@dataclass(frozen=True)
class QuestionSet:
    type_id: int
    questions: tuple[Question, ...]

    def __len__(self) -> int:
        return len(self.questions)

    def by_id(self) -> dict[int, Question]:
        return {q.id: q for q in self.questions}

    def ids(self) -> list[int]:
        return [q.id for q in self.questions]


@dataclass(frozen=True)
class ScoreResult:
    correct: int
    total: int
    passed: bool
    # question id -> whether the recorded selection matched the canonical choice
    per_question: tuple[tuple[int, bool], ...] = ()

    @property
    def result_label(self) -> str:
        return "passed" if self.passed else "failed"


@dataclass(frozen=True)
class HistoryRecord:
    identity: str
    taken_at: str
    type_id: int
    correct: int
    total: int
    passed: bool
    attempt_key: str
    assessment_type: str = "Custom"
    full_name: Optional[str] = None


@dataclass
class SessionState:
    """Mutable navigation/selection state of one attempt.

    Only ever touched by the owning ExamSession while it holds its lock.
    """

    question_ids: list[int]
    index: int = 0
    selections: dict[int, int] = field(default_factory=dict)

    @property
    def answered_count(self) -> int:
        return sum(1 for qid in self.question_ids if qid in self.selections)

    @property
    def completed(self) -> bool:
        return self.answered_count == len(self.question_ids)

    def unanswered(self) -> list[int]:
        return [qid for qid in self.question_ids if qid not in self.selections]
