# vidtube/services/_shared/base.py
from __future__ import annotations

from vidtube.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)


class BaseService:
    """
    Base class for application services.

    Services never touch the global session directly; every store access
    runs inside a unit of work obtained from :meth:`rw_uow` or :meth:`ro_uow`.
    """

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """Create a read-write Unit of Work."""
        return SQLAlchemyUnitOfWork()

    def ro_uow(self) -> SQLAlchemyReadOnlyUnitOfWork:
        """Create a read-only Unit of Work for lookups."""
        return SQLAlchemyReadOnlyUnitOfWork()
