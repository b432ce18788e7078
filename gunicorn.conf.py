import os


def _env_int(name: str, default: int) -> int:
    try:
        return int(str(os.getenv(name, "") or "").strip() or default)
    except Exception:
        return default


bind = f"0.0.0.0:{_env_int('PORT', 5002)}"
wsgi_app = "wsgi:app"

# Exam sessions live in process memory: keep one worker unless a sticky
# load balancer pins each taker to a worker.
workers = max(1, _env_int("WEB_CONCURRENCY", 1))
threads = max(1, _env_int("PYTHON_THREADS", 8))

timeout = max(10, _env_int("GUNICORN_TIMEOUT", 60))
graceful_timeout = max(5, _env_int("GUNICORN_GRACEFUL_TIMEOUT", 30))
keepalive = max(1, _env_int("GUNICORN_KEEPALIVE", 5))

accesslog = "-"
errorlog = "-"
