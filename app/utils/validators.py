from __future__ import annotations

from typing import Any, Optional

from flask import request

from app.utils.errors import ApiError


def require_json() -> dict[str, Any]:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ApiError("BAD_REQUEST", "JSON body must be an object", status=400)
    return body


def require_int(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise ApiError("BAD_REQUEST", f"{field} must be an integer", status=400)
    if isinstance(value, int):
        return value
    s = str(value if value is not None else "").strip()
    try:
        return int(s)
    except Exception as e:
        raise ApiError("BAD_REQUEST", f"{field} must be an integer", status=400) from e


def optional_str(value: Any, *, max_len: int = 200) -> Optional[str]:
    s = str(value or "").strip()
    if not s:
        return None
    return s[:max_len]
