"""Pytest fixtures configuring an isolated transactional database layer.

Each test runs inside a SAVEPOINT-backed transaction against an in-memory
SQLite database so data changes never leak between cases.
"""

from __future__ import annotations

import os

import pytest
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker
from vidtube.core.config import TestingConfig
from vidtube.core.extensions import MEDIA_STORE_KEY
from vidtube.core.extensions import db as _db  # Flask-SQLAlchemy instance
from vidtube.factory import create_app  # application factory under test
from vidtube.infra.jwt.jwt_token_service import JWTTokenService, TokenSettings
from vidtube.infra.security.werkzeug_password_hasher import WerkzeugPasswordHasher
from vidtube.services._shared.ports import InMemoryMediaStore


@pytest.fixture(scope="session")
def app(tmp_path_factory):
    """Create a Flask application configured for testing.

    Returns
    -------
    flask.Flask
        Application built from :class:`TestingConfig` with uploads redirected
        to a temp directory and an in-memory media store.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)

    class _Config(TestingConfig):
        UPLOAD_TEMP_DIR = str(tmp_path_factory.mktemp("uploads"))

    app = create_app(_Config, instance_relative_config=False)
    app.extensions[MEDIA_STORE_KEY] = InMemoryMediaStore()
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture(scope="session")
def db(app):
    """Create database tables once per test session."""
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(db):
    """Keep a dedicated DBAPI connection open for the whole session."""
    conn = db.engine.connect()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def session(db, connection):
    """Provide a SQLAlchemy session wrapped in a nested transaction.

    Notes
    -----
    SQLAlchemy 2.0 recipe for transactional tests: a top-level transaction,
    a SAVEPOINT per test, and the SAVEPOINT reinstalled whenever SQLAlchemy
    ends one. Units of work may ``commit()``; the outer rollback still
    discards everything.
    """
    top_trans = connection.begin()

    SessionFactory = sessionmaker(bind=connection, future=True)
    scoped = scoped_session(SessionFactory)

    nested = connection.begin_nested()

    @event.listens_for(scoped(), "after_transaction_end")
    def _restart_savepoint(sess, trans):  # pragma: no cover
        if trans.nested and not trans._parent.nested:
            nonlocal nested
            nested = connection.begin_nested()

    # App code resolves ``db.session``; point it at this scoped session
    original_session = db.session
    db.session.remove()
    db.session = scoped

    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = original_session
        top_trans.rollback()


@pytest.fixture()
def client(app, session):
    """Return a Flask test client sharing the transactional session."""
    return app.test_client()


@pytest.fixture()
def media_store(app):
    """Fresh in-memory media store installed on the app for one test."""
    store = InMemoryMediaStore()
    previous = app.extensions.get(MEDIA_STORE_KEY)
    app.extensions[MEDIA_STORE_KEY] = store
    yield store
    app.extensions[MEDIA_STORE_KEY] = previous


@pytest.fixture(scope="session")
def token_settings(app):
    """Token settings derived from the testing config."""
    return TokenSettings.from_config(app.config)


@pytest.fixture()
def token_service(token_settings):
    return JWTTokenService(token_settings)


@pytest.fixture(scope="session")
def password_hasher():
    # pbkdf2 with few iterations keeps tests fast
    return WerkzeugPasswordHasher(method="pbkdf2:sha256:1000")


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


# -- Hook up Factory Boy to pytest SQLAlchemy session --------------------------
@pytest.fixture(autouse=True)
def _factories_session(session):
    """Wire Factory Boy's session helper to the transactional session fixture."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(session)
    yield
