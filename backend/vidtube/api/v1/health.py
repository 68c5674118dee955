"""Liveness and readiness check for the account service."""

from __future__ import annotations

from flask import Blueprint, current_app
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from vidtube.api.deps import api_response
from vidtube.core.extensions import db, get_media_store
from vidtube.models.user import User

bp = Blueprint("health", __name__)


def users_table_reachable() -> bool:
    """Run a trivial query against ``users``; ``False`` when the DB fails."""
    try:
        db.session.execute(select(func.count()).select_from(User).limit(1)).scalar_one()
    except SQLAlchemyError as exc:
        current_app.logger.error(
            "health.database_unreachable: %s", exc, extra={"event": "health.database"}
        )
        return False
    return True


@bp.get("/health")
def health():
    """Report database reachability and whether uploads can be stored."""

    database_up = users_table_reachable()
    media_ready = get_media_store() is not None
    data = {
        "database": "up" if database_up else "down",
        "mediaStore": "configured" if media_ready else "disabled",
    }
    if not database_up:
        return api_response(data, "Database unavailable", status=503)
    return api_response(data, "OK")
