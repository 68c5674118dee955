"""Global Flask extension instances and initialization helpers."""

from __future__ import annotations

from typing import Any

from flask import Flask, current_app
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import MetaData

# Global naming convention for all constraints
convention = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)

# Global singletons (import-safe)
db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)
migrate = Migrate(render_as_batch=True)
jwt = JWTManager()

TOKEN_SERVICE_KEY = "token_service"
PASSWORD_HASHER_KEY = "password_hasher"
MEDIA_STORE_KEY = "media_store"


def init_app(app: Flask) -> None:
    """Initialize SQLAlchemy, migrations, JWT guard and auth collaborators.

    Parameters
    ----------
    app: flask.Flask
        Application used to bind extension instances. This call imports the
        :mod:`vidtube.models` package to ensure SQLAlchemy metadata is ready
        for migrations.

    Notes
    -----
    The token service, password hasher and media store are stored in
    ``app.extensions`` so tests can swap them per application.
    """
    db.init_app(app)

    # Ensure models are imported so Alembic sees metadata
    from vidtube import models as _models  # noqa: F401

    migrate.init_app(app, db)
    jwt.init_app(app)

    from vidtube.infra.jwt.jwt_token_service import JWTTokenService, TokenSettings
    from vidtube.infra.security.werkzeug_password_hasher import WerkzeugPasswordHasher

    app.extensions[TOKEN_SERVICE_KEY] = JWTTokenService(TokenSettings.from_config(app.config))
    app.extensions[PASSWORD_HASHER_KEY] = WerkzeugPasswordHasher()
    app.extensions[MEDIA_STORE_KEY] = _build_media_store(app)


def _build_media_store(app: Flask) -> Any:
    """Return an S3 media store when ``MEDIA_S3_BUCKET`` is configured."""
    bucket = app.config.get("MEDIA_S3_BUCKET")
    if not bucket:
        app.logger.info("media_store.disabled", extra={"event": "media_store.disabled"})
        return None

    from vidtube.infra.storage.s3_media_store import S3MediaStore, build_s3_client

    return S3MediaStore(
        client=build_s3_client(app.config),
        bucket=bucket,
        public_base_url=app.config.get("MEDIA_PUBLIC_BASE_URL") or "",
        key_prefix=app.config.get("MEDIA_KEY_PREFIX", "uploads"),
    )


def get_token_service() -> Any:
    """Return the token service bound to the current application."""
    return current_app.extensions[TOKEN_SERVICE_KEY]


def get_password_hasher() -> Any:
    """Return the password hasher bound to the current application."""
    return current_app.extensions[PASSWORD_HASHER_KEY]


def get_media_store() -> Any:
    """Return the media store, or ``None`` when ``MEDIA_S3_BUCKET`` is unset."""
    return current_app.extensions.get(MEDIA_STORE_KEY)
