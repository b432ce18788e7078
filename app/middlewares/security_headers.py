from __future__ import annotations

from flask import Flask, request

_STATIC_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
}
_HSTS = "max-age=31536000; includeSubDomains"


def _is_https() -> bool:
    return request.is_secure or str(request.headers.get("X-Forwarded-Proto") or "").lower() == "https"


def init_security_headers(app: Flask) -> None:
    production = bool(getattr(app.config.get("CFG"), "IS_PRODUCTION", False))

    @app.after_request
    def _apply_security_headers(resp):
        for name, value in _STATIC_HEADERS.items():
            resp.headers.setdefault(name, value)

        # question content and scores must not land in shared caches
        if request.path.startswith("/api/"):
            resp.headers.setdefault("Cache-Control", "no-store")

        if production and _is_https():
            resp.headers.setdefault("Strict-Transport-Security", _HSTS)
        return resp
