from __future__ import annotations

from flask import Blueprint, current_app, jsonify

import db as dbmod
from app.utils.datetime import iso_utc

core_bp = Blueprint("core", __name__)


@core_bp.get("/health")
def health():
    ok = dbmod.ping()
    cfg = current_app.config["CFG"]
    service = current_app.extensions.get("assessment")
    status = 200 if ok else 503
    return (
        jsonify(
            {
                "status": "ok" if ok else "degraded",
                "time": iso_utc(),
                "version": cfg.APP_VERSION,
                "db": "ok" if ok else "error",
                "activeSessions": len(service.store) if service else 0,
            }
        ),
        status,
    )


@core_bp.get("/version")
def version():
    cfg = current_app.config["CFG"]
    return jsonify({"version": cfg.APP_VERSION, "env": cfg.ENV, "time": iso_utc()})
