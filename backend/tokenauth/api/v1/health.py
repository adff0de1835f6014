"""Health check endpoint."""

from __future__ import annotations

from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from tokenauth.api.deps import json_response, timing
from tokenauth.core.components import get_components
from tokenauth.core.extensions import db
from tokenauth.services.authorization import PUBLIC

bp = Blueprint("health", __name__)

POLICIES = {"healthcheck": PUBLIC}


@bp.get("/health")
@timing
def healthcheck():
    """Return application, database and revocation cache health information."""

    db_status = "ok"
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:  # pragma: no cover - depends on DB backend
        current_app.logger.exception("healthcheck.db_error")
        db_status = "fail"
    cache_status = "ok" if get_components().cache.ping() else "fail"
    status = "ok" if db_status == cache_status == "ok" else "degraded"
    version = current_app.config.get("APP_VERSION", "dev")
    payload = {"status": status, "db": db_status, "cache": cache_status, "version": version}
    return json_response(payload, status=200 if status == "ok" else 503)
