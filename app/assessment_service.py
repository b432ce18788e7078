from __future__ import annotations

from typing import Optional

from flask import Flask

from app.config import BaseConfig
from app.repositories import SqlAuthorizationRegistry, SqlHistoryRepository, SqlQuestionRepository
from app.session_store import SessionStore
from app.utils.errors import ApiError
from assessment.deadline import make_executor
from assessment.gate import SessionGate
from assessment.loader import QuestionBankLoader
from assessment.persister import ResultPersister
from assessment.ports import AuthorizationRegistry, HistoryRepository, QuestionRepository
from assessment.session import ExamSession


class AssessmentService:
    """Builds exam sessions from config and keeps them addressable by id."""

    def __init__(
        self,
        cfg: BaseConfig,
        *,
        registry: Optional[AuthorizationRegistry] = None,
        questions: Optional[QuestionRepository] = None,
        history: Optional[HistoryRepository] = None,
    ):
        self.cfg = cfg
        # one pool per stage; a stuck question store leaves authorization checks running
        self._auth_pool = make_executor(cfg.DEADLINE_POOL_THREADS, "auth-check")
        self._load_pool = make_executor(cfg.DEADLINE_POOL_THREADS, "question-load")
        self.gate = SessionGate(
            registry or SqlAuthorizationRegistry(),
            timeout=cfg.AUTH_CHECK_TIMEOUT_SECONDS,
            executor=self._auth_pool,
        )
        self.loader = QuestionBankLoader(
            questions or SqlQuestionRepository(),
            timeout=cfg.QUESTION_LOAD_TIMEOUT_SECONDS,
            executor=self._load_pool,
        )
        self.persister = ResultPersister(
            history or SqlHistoryRepository(),
            max_workers=cfg.HISTORY_WRITER_THREADS,
            timeout=cfg.HISTORY_WRITE_TIMEOUT_SECONDS,
        )
        self.store = SessionStore(ttl_seconds=cfg.SESSION_TTL_MINUTES * 60, max_items=cfg.SESSION_MAX_ACTIVE)

    def new_session(self) -> ExamSession:
        return ExamSession(
            self.gate,
            self.loader,
            self.persister,
            pass_ratio=self.cfg.PASS_RATIO,
            assessment_type=self.cfg.ASSESSMENT_TYPE_LABEL,
        )

    def open_session(self, slug: str, email: str, full_name: Optional[str] = None) -> tuple[str, ExamSession]:
        session = self.new_session()
        session.start(email, slug, full_name=full_name)
        return self.store.add(session), session

    def require_session(self, session_id: str) -> ExamSession:
        session = self.store.get(session_id)
        if session is None:
            raise ApiError("NOT_FOUND", "Session not found or expired", status=404)
        return session

    def shutdown(self, wait: bool = True) -> None:
        self.persister.shutdown(wait=wait)
        self._auth_pool.shutdown(wait=False)
        self._load_pool.shutdown(wait=False)


def init_assessment(app: Flask, **overrides) -> AssessmentService:
    service = AssessmentService(app.config["CFG"], **overrides)
    app.extensions["assessment"] = service
    return service


def get_service(app: Flask) -> AssessmentService:
    service = app.extensions.get("assessment")
    if service is None:
        raise ApiError("INTERNAL", "Assessment service not initialized", status=500)
    return service
