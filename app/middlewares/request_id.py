from __future__ import annotations

import os
import re
import time
from typing import Optional

from flask import Flask, g, request

REQUEST_ID_HEADER = "X-Request-ID"

_SAFE_ID_RE = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def _incoming_request_id() -> Optional[str]:
    # only plain tokens are echoed into logs and error bodies
    raw = str(request.headers.get(REQUEST_ID_HEADER) or "").strip()
    return raw if _SAFE_ID_RE.match(raw) else None


def init_request_id(app: Flask) -> None:
    @app.before_request
    def _assign_request_id():
        g.request_id = _incoming_request_id() or os.urandom(8).hex()
        g.start_ts = time.monotonic()

    @app.after_request
    def _echo_request_id(resp):
        rid = getattr(g, "request_id", None)
        if rid:
            resp.headers[REQUEST_ID_HEADER] = rid
        return resp
