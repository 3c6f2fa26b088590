"""Health check endpoint."""

from __future__ import annotations

from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from credo.api.deps import json_response, timing
from credo.core.credentials import get_credential_cache
from credo.core.extensions import db

bp = Blueprint("health", __name__)


@bp.get("/health")
@timing
def healthcheck():
    """Report database reachability and credential-cache state."""

    db_status = "ok"
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:  # pragma: no cover - depends on DB backend
        current_app.logger.exception("healthcheck.db_error")
        db_status = "fail"

    cache = get_credential_cache()
    if cache is None:
        credentials = "static"
    elif not cache.enabled:
        credentials = "uncached"
    else:
        credentials = "warm" if cache.is_populated() else "cold"

    payload = {
        "status": "ok" if db_status == "ok" else "degraded",
        "db": db_status,
        "credentials": credentials,
        "version": current_app.config.get("APP_VERSION", "dev"),
    }
    return json_response(payload, status=200 if db_status == "ok" else 503)
