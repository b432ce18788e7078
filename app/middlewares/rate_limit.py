from __future__ import annotations

from flask import Flask, request

from app.utils.rate_limiter import InMemoryRateLimiter

_limiter = InMemoryRateLimiter()


def _client_ip(trust_proxy: bool) -> str:
    ip = request.remote_addr or ""
    if trust_proxy:
        ip = request.headers.get("X-Forwarded-For", ip)
    if ip and "," in ip:
        ip = ip.split(",", 1)[0].strip()
    return ip


def init_rate_limiting(app: Flask) -> None:
    cfg = app.config["CFG"]

    @app.before_request
    def _rate_limit():
        path = request.path or ""
        if not path.startswith("/api/v1/"):
            return None

        ip = _client_ip(cfg.TRUST_PROXY_HEADERS)
        _limiter.check(f"{ip}:GLOBAL", cfg.RATE_LIMIT_GLOBAL)

        if request.method == "POST" and path.startswith("/api/v1/tests/") and path.endswith("/sessions"):
            _limiter.check(f"{ip}:SESSION_START", cfg.RATE_LIMIT_SESSION_START)
            return None

        _limiter.check(f"{ip}:PATH:{path}", cfg.RATE_LIMIT_DEFAULT)
        return None
