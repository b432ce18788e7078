from __future__ import annotations

import math
from fractions import Fraction
from typing import Any, Iterable, Mapping, Optional

from assessment.types import Choice, Question, ScoreResult

DEFAULT_PASS_RATIO = 0.8


def _ratio(pass_ratio: Any) -> Fraction:
    # str() first so 0.8 means 4/5 rather than its binary approximation
    r = Fraction(str(pass_ratio))
    if r <= 0 or r > 1:
        raise ValueError(f"pass ratio must be in (0, 1], got {pass_ratio}")
    return r


def pass_threshold(total: int, pass_ratio: Any = DEFAULT_PASS_RATIO) -> int:
    return math.ceil(_ratio(pass_ratio) * int(total))


def canonical_correct_choice(question: Question) -> Optional[Choice]:
    for c in question.choices:
        if c.is_correct:
            return c
    return None


def score(
    questions: Iterable[Question],
    selections: Mapping[int, int],
    pass_ratio: Any = DEFAULT_PASS_RATIO,
) -> ScoreResult:
    per_question: list[tuple[int, bool]] = []
    for q in questions:
        canonical = canonical_correct_choice(q)
        hit = canonical is not None and selections.get(q.id) == canonical.id
        per_question.append((q.id, hit))

    correct = sum(1 for _, hit in per_question if hit)
    total = len(per_question)
    return ScoreResult(
        correct=correct,
        total=total,
        passed=correct >= pass_threshold(total, pass_ratio),
        per_question=tuple(per_question),
    )
