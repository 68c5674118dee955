"""Column mixins for mapped models."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, func
from sqlalchemy.orm import Mapped, mapped_column


class IdentityMixin:
    """Integer surrogate key ``id``; ``repr`` shows only class and key."""

    id: Mapped[int] = mapped_column(primary_key=True)

    def __repr__(self) -> str:
        # Read the loaded state only so repr never triggers a refresh query
        return f"<{type(self).__name__} id={self.__dict__.get('id')}>"


class AuditMixin:
    """``created_at``/``updated_at`` stamped by the database clock.

    ``updated_at`` also moves on column-scoped Core updates, such as the
    refresh-token writes issued by the user repository.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
