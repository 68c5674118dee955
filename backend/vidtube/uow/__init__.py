"""Unit of Work abstractions and concrete implementations.

Services depend on :class:`UnitOfWork`; the SQLAlchemy-backed variants bind
the user repository to the Flask-scoped session.
"""

from .base import UnitOfWork
from .sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork

__all__ = [
    "UnitOfWork",
    "SQLAlchemyUnitOfWork",
    "SQLAlchemyReadOnlyUnitOfWork",
]
