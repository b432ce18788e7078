from __future__ import annotations

from dotenv import load_dotenv
from flask import Flask
from flask_cors import CORS

import db as dbmod
from app.assessment_service import init_assessment
from app.config import get_config
from app.middlewares.error_handler import init_error_handlers
from app.middlewares.logging import init_request_logging
from app.middlewares.rate_limit import init_rate_limiting
from app.middlewares.request_id import init_request_id
from app.middlewares.security_headers import init_security_headers
from app.routes.core import core_bp
from app.routes.tests import tests_bp
from app.utils.logging import setup_logging


def create_app(**service_overrides) -> Flask:
    """Application factory.

    ``service_overrides`` may replace the SQL-backed ``registry``, ``questions``
    or ``history`` repositories of the assessment service.
    """
    load_dotenv()

    cfg = get_config()
    setup_logging(cfg.LOG_LEVEL)

    app = Flask(__name__)
    app.config["CFG"] = cfg

    CORS(
        app,
        origins=cfg.CORS_ORIGINS,
        supports_credentials=cfg.CORS_ALLOW_CREDENTIALS,
        allow_headers=["Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
        methods=["GET", "POST", "PUT", "OPTIONS"],
        max_age=3600,
    )

    init_request_id(app)
    init_security_headers(app)
    init_rate_limiting(app)
    init_request_logging(app)
    init_error_handlers(app)

    dbmod.init_engine(cfg.DATABASE_URL)
    if cfg.DB_CREATE_SCHEMA:
        dbmod.create_schema()

    init_assessment(app, **service_overrides)

    app.register_blueprint(core_bp)
    app.register_blueprint(tests_bp, url_prefix="/api/v1")

    return app
