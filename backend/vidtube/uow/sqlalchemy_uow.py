"""
SQLAlchemy units of work over the Flask-scoped session.
"""

from __future__ import annotations

from collections.abc import Callable
from contextlib import suppress
from typing import Any

from sqlalchemy import event
from sqlalchemy.exc import InvalidRequestError
from sqlalchemy.orm import Session, scoped_session

from vidtube.core.extensions import db
from vidtube.repositories import UserRepository
from vidtube.uow.base import UnitOfWork

# Leading SQL keywords a read-only unit refuses to send
_WRITE_VERBS = frozenset(
    {"insert", "update", "delete", "replace", "merge", "create", "alter", "drop", "truncate"}
)


class _SessionUnit(UnitOfWork):
    """Bind the user repository to the current scoped session."""

    def __init__(self) -> None:
        self.session = db.session
        self.users = UserRepository(session=self.session)

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyUnitOfWork(_SessionUnit):
    """
    Read-write unit used by register, login, refresh and logout.

    Commits on a clean exit and rolls back when the block raises, so a
    refresh-token swap and the pair it guards are persisted together or not
    at all.
    """

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.rollback()
            return
        try:
            self.commit()
        except Exception:
            self.rollback()
            raise

    def commit(self) -> None:
        self.session.commit()


class SQLAlchemyReadOnlyUnitOfWork(_SessionUnit):
    """
    Read-only unit for lookups (uniqueness checks, credential checks, re-reads).

    While open, flushes carrying pending ORM changes and DML statements sent on
    the unit's connection raise ``RuntimeError``. A transaction opened by the
    unit is rolled back on exit; one that was already running is left alone.
    """

    def __init__(self) -> None:
        super().__init__()
        self._owns_transaction = False
        self._listeners: list[tuple[Any, str, Callable[..., None]]] = []

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        # Listen on the thread-local Session, not the scoped registry
        current: Session = (
            self.session() if isinstance(self.session, scoped_session) else self.session
        )
        self._owns_transaction = not current.in_transaction()
        connection = current.connection()
        self._listen(current, "before_flush", self._refuse_flush)
        self._listen(connection, "before_cursor_execute", self._refuse_statement)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._owns_transaction:
                self.rollback()
        finally:
            while self._listeners:
                target, name, fn = self._listeners.pop()
                with suppress(InvalidRequestError):
                    event.remove(target, name, fn)
            self._owns_transaction = False

    def commit(self) -> None:
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def _listen(self, target: Any, name: str, fn: Callable[..., None]) -> None:
        event.listen(target, name, fn)
        self._listeners.append((target, name, fn))

    def _refuse_flush(self, session, flush_context, instances) -> None:
        if session.new or session.dirty or session.deleted:
            raise RuntimeError("Read-only UnitOfWork: ORM flush blocked (pending changes).")

    def _refuse_statement(self, conn, cursor, statement, parameters, context, executemany):
        words = statement.split(None, 1) if statement else []
        verb = words[0].lower() if words else ""
        if verb in _WRITE_VERBS:
            raise RuntimeError(f"Read-only UnitOfWork: SQL statement blocked: {verb.upper()}")
