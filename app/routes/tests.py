from __future__ import annotations

from typing import Any

from flask import Blueprint, current_app, jsonify

from app.assessment_service import get_service
from app.utils.errors import ApiError
from app.utils.validators import optional_str, require_int, require_json
from assessment.session import ExamSession, SessionSnapshot, SessionStatus
from assessment.types import Question

tests_bp = Blueprint("tests", __name__)


def _question_view(q: Question) -> dict[str, Any]:
    return {
        "id": q.id,
        "question": q.prompt,
        "level": q.level,
        "choices": [{"id": c.id, "text": c.text} for c in q.choices],
    }


def _result_view(snap: SessionSnapshot) -> dict[str, Any]:
    result = snap.result
    if result is None:
        return {}
    return {
        "correct": result.correct,
        "total": result.total,
        "passed": result.passed,
        "result": result.result_label,
        "review": [{"questionId": qid, "correct": hit} for qid, hit in result.per_question],
        "attemptKey": snap.attempt_key,
        "persistence": snap.ticket.as_dict() if snap.ticket else None,
    }


def _session_view(session_id: str, session: ExamSession) -> dict[str, Any]:
    snap = session.snapshot()
    current = snap.current_question
    data: dict[str, Any] = {
        "sessionId": session_id,
        "status": snap.status.value,
        "typeId": snap.type_id,
        "index": snap.index,
        "questionCount": snap.question_count,
        "answeredIds": list(snap.answered_ids),
        "selections": {str(k): v for k, v in snap.selections.items()},
        "currentQuestion": _question_view(current) if current else None,
    }
    if snap.status == SessionStatus.SUBMITTED:
        data["result"] = _result_view(snap)
    return data


@tests_bp.post("/tests/<slug>/sessions")
def start_session(slug: str):
    body = require_json()
    service = get_service(current_app)
    session_id, session = service.open_session(slug, body.get("email"), optional_str(body.get("fullName")))
    return jsonify({"success": True, "data": _session_view(session_id, session)}), 201


@tests_bp.get("/sessions/<session_id>")
def get_session(session_id: str):
    session = get_service(current_app).require_session(session_id)
    return jsonify({"success": True, "data": _session_view(session_id, session)})


@tests_bp.put("/sessions/<session_id>/answers/<int:question_id>")
def select_answer(session_id: str, question_id: int):
    body = require_json()
    choice_id = require_int(body.get("choiceId"), "choiceId")
    session = get_service(current_app).require_session(session_id)
    session.select_answer(question_id, choice_id)
    return jsonify({"success": True, "data": _session_view(session_id, session)})


@tests_bp.post("/sessions/<session_id>/navigate")
def navigate(session_id: str):
    body = require_json()
    delta = require_int(body.get("delta"), "delta")
    session = get_service(current_app).require_session(session_id)
    session.navigate(delta)
    return jsonify({"success": True, "data": _session_view(session_id, session)})


@tests_bp.post("/sessions/<session_id>/submit")
def submit(session_id: str):
    session = get_service(current_app).require_session(session_id)
    session.submit()
    return jsonify({"success": True, "data": _session_view(session_id, session)})


@tests_bp.get("/sessions/<session_id>/result")
def result(session_id: str):
    snap = get_service(current_app).require_session(session_id).snapshot()
    if snap.status != SessionStatus.SUBMITTED:
        raise ApiError("INVALID_STATE", "Test has not been submitted", status=409)
    return jsonify({"success": True, "data": _result_view(snap)})


@tests_bp.post("/sessions/<session_id>/retake")
def retake(session_id: str):
    session = get_service(current_app).require_session(session_id)
    session.retake()
    return jsonify({"success": True, "data": _session_view(session_id, session)})
