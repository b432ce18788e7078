import sys
from pathlib import Path

import pytest


BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))


@pytest.fixture()
def app_client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    db_path = tmp_path / "test.db"

    monkeypatch.setenv("ENV", "testing")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_path.as_posix()}")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")

    # Prevent accidental pollution from any existing env config.
    for name in ("PASS_RATIO", "CORS_ORIGINS", "ASSESSMENT_TYPE_LABEL", "HISTORY_WRITE_TIMEOUT_SECONDS"):
        monkeypatch.delenv(name, raising=False)

    from app import create_app
    from app.middlewares import rate_limit

    rate_limit._limiter.reset()

    app = create_app()
    app.testing = True

    with app.test_client() as client:
        yield app, client

    app.extensions["assessment"].shutdown()
