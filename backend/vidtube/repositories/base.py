"""Generic repository base for SQLAlchemy 2.x.

This module centralizes persistence-only concerns shared by repositories:
- Session resolution (injected Unit of Work session or the Flask-scoped one).
- Primary-key lookups and staged inserts that materialize the PK.
- Column-scoped ``UPDATE`` helpers that bypass ORM attribute validators.
- No business logic, no commit/rollback; services own transactions.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import Select, func, select, update
from sqlalchemy.orm import InstrumentedAttribute, Session

from vidtube.core.extensions import db

E = TypeVar("E")  # SQLAlchemy mapped entity type


class BaseRepository(Generic[E]):
    """Generic, persistence-only repository for a single aggregate.

    Subclasses MUST define:

    * ``model``: the SQLAlchemy mapped class.

    This class NEVER:

    * opens/commits/rolls back transactions,
    * implements business rules or cross-aggregate coordination.
    """

    #: SQLAlchemy mapped model (must be set by subclasses)
    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        """Initialise the repository with an optional SQLAlchemy session.

        When no explicit session is provided the repository falls back to the
        Flask-scoped session exposed by ``vidtube.core.extensions``.

        :param session: Session shared across the Unit of Work scope.
        :type session: :class:`sqlalchemy.orm.Session` | None
        """
        self._session: Session | None = session

    # ------------------------------ Session access ---------------------------

    @property
    def session(self) -> Session:
        """Return the active SQLAlchemy session."""
        if self._session is not None:
            return self._session
        return cast(Session, db.session)

    # ------------------------------ Extensibility ----------------------------

    def _default_eagerload(self, stmt: Select[Any]) -> Select[Any]:
        """Attach eager-loading options to generic get/list operations."""
        return stmt

    def _pk_attr(self) -> InstrumentedAttribute[Any] | None:
        """Return the model's primary-key attribute (``model.id``) if available."""
        return getattr(self.model, "id", None)

    # --------------------------------- CRUD ----------------------------------

    def add(self, instance: E) -> E:
        """Stage a new entity for persistence and flush to materialize the PK.

        :param instance: New entity instance.
        :type instance: E
        :returns: The same instance after ``flush()``.
        :rtype: E
        """
        self.session.add(instance)
        self.flush()
        return instance

    def get(self, entity_id: Any) -> E | None:
        """Retrieve a single entity by primary key.

        :param entity_id: Primary-key value.
        :returns: Entity or ``None``.
        :raises RuntimeError: If no PK attribute can be detected.
        """
        pk_attr = self._pk_attr()
        if pk_attr is None:
            raise RuntimeError("BaseRepository.get requires a detectable PK attribute.")
        stmt = self._default_eagerload(select(self.model).where(pk_attr == entity_id))
        result = self.session.execute(stmt).scalars().first()
        return cast(E | None, result)

    def exists(self, *criteria: Any) -> bool:
        """Return ``True`` when at least one row matches the SQL criteria."""
        stmt: Select[Any] = select(func.count()).select_from(self.model).where(*criteria)
        return bool(self.session.execute(stmt.limit(1)).scalar())

    def save(self, instance: E) -> E:
        """Flush pending changes of an already-persistent entity."""
        self.session.add(instance)
        self.flush()
        return instance

    def flush(self) -> None:
        """Flush pending changes to the database without committing."""
        self.session.flush()

    # ----------------------------- Partial updates ----------------------------

    def update_columns(
        self,
        entity_id: Any,
        values: Mapping[str, Any],
        *criteria: Any,
    ) -> int:
        """Issue a single ``UPDATE`` touching only ``values`` for one row.

        The statement bypasses ORM attribute validators and required-column
        checks on the rest of the record. Extra ``criteria`` turn it into a
        conditional update (compare-and-set).

        :param entity_id: Primary-key value.
        :param values: Column name → new value.
        :param criteria: Additional ``WHERE`` clauses.
        :returns: Number of rows changed (0 or 1).
        :rtype: int
        """
        pk_attr = self._pk_attr()
        if pk_attr is None:
            raise RuntimeError("BaseRepository.update_columns requires a detectable PK.")
        stmt = (
            update(self.model)
            .where(pk_attr == entity_id, *criteria)
            .values(**dict(values))
            .execution_options(synchronize_session="evaluate")
        )
        result = self.session.execute(stmt)
        return int(result.rowcount or 0)
