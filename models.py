from __future__ import annotations

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, Text, UniqueConstraint

from db import Base


class QuestionType(Base):
    __tablename__ = "question_type"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False, default="")
    title = Column(Text, nullable=False, default="")


class Question(Base):
    __tablename__ = "question"

    id = Column(Integer, primary_key=True, autoincrement=True)
    question = Column(Text, nullable=False, default="")
    level = Column(Integer, nullable=False, default=1)
    type_id = Column(Integer, ForeignKey("question_type.id"), nullable=False, index=True)


class Answer(Base):
    __tablename__ = "answer"

    id = Column(Integer, primary_key=True, autoincrement=True)
    question_id = Column(Integer, ForeignKey("question.id"), nullable=False, index=True)
    text = Column(Text, nullable=False, default="")
    is_correct = Column(Boolean, nullable=False, default=False)


class RuleAssessment(Base):
    # Candidates cleared by the interview round; presence of a row grants test access.
    __tablename__ = "rule_assessment"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String, nullable=False, index=True)
    full_name = Column(Text, nullable=False, default="")
    createdAt = Column(Text, nullable=False, default="")


class TestHistory(Base):
    __test__ = False
    __tablename__ = "test_history"
    __table_args__ = (UniqueConstraint("attempt_key", name="uq_test_history_attempt_key"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    date_test = Column(Text, nullable=False, default="")
    email = Column(String, nullable=False, index=True)
    full_name = Column(Text, nullable=False, default="")
    result = Column(String, nullable=False, default="")
    correct_answers = Column(Integer, nullable=False, default=0)
    total_questions = Column(Integer, nullable=False, default=0)
    assessment_type = Column(String, nullable=False, default="Custom")
    type_id = Column(Integer, nullable=False, index=True)
    attempt_key = Column(String, nullable=False)
