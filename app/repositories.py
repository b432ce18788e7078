from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

import db as dbmod
from assessment.types import Choice, HistoryRecord, Question
from models import Answer as AnswerRow
from models import Question as QuestionRow
from models import RuleAssessment, TestHistory

logger = logging.getLogger("app.repositories")


class SqlAuthorizationRegistry:
    def is_authorized(self, identity: str) -> bool:
        email = str(identity or "").strip().lower()
        with dbmod.SessionLocal() as db:
            row = db.execute(
                select(RuleAssessment.id).where(func.lower(RuleAssessment.email) == email).limit(1)
            ).first()
        return row is not None


class SqlQuestionRepository:
    def get_by_type(self, type_id: int) -> list[Question]:
        with dbmod.SessionLocal() as db:
            q_rows = (
                db.execute(select(QuestionRow).where(QuestionRow.type_id == int(type_id)).order_by(QuestionRow.id.asc()))
                .scalars()
                .all()
            )
            if not q_rows:
                return []

            ids = [r.id for r in q_rows]
            a_rows = (
                db.execute(select(AnswerRow).where(AnswerRow.question_id.in_(ids)).order_by(AnswerRow.id.asc()))
                .scalars()
                .all()
            )

        by_question: dict[int, list[Choice]] = {}
        for a in a_rows:
            by_question.setdefault(int(a.question_id), []).append(
                Choice(id=int(a.id), question_id=int(a.question_id), text=a.text or "", is_correct=bool(a.is_correct))
            )

        return [
            Question(
                id=int(r.id),
                prompt=r.question or "",
                level=int(r.level or 0),
                type_id=int(r.type_id),
                choices=tuple(by_question.get(int(r.id), [])),
            )
            for r in q_rows
        ]


class SqlHistoryRepository:
    def append(self, record: HistoryRecord) -> None:
        row = TestHistory(
            date_test=record.taken_at,
            email=record.identity,
            full_name=record.full_name or "",
            result="passed" if record.passed else "failed",
            correct_answers=int(record.correct),
            total_questions=int(record.total),
            assessment_type=record.assessment_type or "Custom",
            type_id=int(record.type_id),
            attempt_key=record.attempt_key,
        )
        with dbmod.SessionLocal() as db:
            db.add(row)
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                exists = db.execute(
                    select(TestHistory.id).where(TestHistory.attempt_key == record.attempt_key)
                ).first()
                if exists is None:
                    raise
                logger.info("history row already stored attempt=%s", record.attempt_key)
