"""
Transactional boundary contract used by the session manager.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from vidtube.repositories.user import UserRepository


class UnitOfWork(ABC):
    """
    One use-case transaction with its repositories.

    Entering yields the unit itself; leaving without an exception commits a
    read-write unit, while any exception (or a read-only unit) rolls back.
    Refresh-token rotation relies on this: the compare-and-swap and the token
    issuance it guards land in a single transaction.
    """

    users: UserRepository

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...

    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...

    @abstractmethod
    def commit(self) -> None: ...

    @abstractmethod
    def rollback(self) -> None: ...
