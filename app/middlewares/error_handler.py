from __future__ import annotations

import logging
from typing import Any

from flask import Flask, g, jsonify
from werkzeug.exceptions import HTTPException

from app.utils.errors import ApiError, api_error_from
from assessment.errors import AssessmentError


def _render(err: ApiError):
    payload: dict[str, Any] = {
        "success": False,
        "error": {"code": err.code, "message": err.message, "details": err.details},
    }
    if getattr(g, "request_id", None):
        payload["request_id"] = g.request_id
    return jsonify(payload), err.status


def init_error_handlers(app: Flask) -> None:
    @app.errorhandler(ApiError)
    def _api_error(err: ApiError):
        return _render(err)

    @app.errorhandler(AssessmentError)
    def _assessment_error(err: AssessmentError):
        logging.getLogger("app").info(
            "assessment error code=%s retryable=%s request_id=%s", err.code, err.retryable, getattr(g, "request_id", "")
        )
        return _render(api_error_from(err))

    @app.errorhandler(HTTPException)
    def _http_error(err: HTTPException):
        return _render(ApiError(f"HTTP_{int(err.code or 500)}", str(err.description or "HTTP error"), status=int(err.code or 500)))

    @app.errorhandler(Exception)
    def _unhandled(err: Exception):
        logging.getLogger("app").exception(
            "Unhandled exception request_id=%s", getattr(g, "request_id", "")
        )
        return _render(ApiError("INTERNAL", "Unexpected error", status=500))
