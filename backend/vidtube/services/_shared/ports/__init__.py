"""
vidtube.services._shared.ports
==============================

*Ports* (hexagonal interfaces) the session manager depends on.

Modules
-------
- :mod:`password_hasher`:
    :class:`~.PasswordHasher`: one-way hash + verify for credentials.

- :mod:`token_service`:
    :class:`~.TokenService`: stateless issuing/verification of access and
    refresh JWTs.

- :mod:`media_store`:
    :class:`~.MediaStore`: uploads a local file and returns a durable URL.

Concrete adapters live under ``vidtube.infra``.
"""

from __future__ import annotations

from .media_store import InMemoryMediaStore, MediaStore
from .password_hasher import PasswordHasher
from .token_service import TokenService

__all__ = [
    "PasswordHasher",
    "TokenService",
    "MediaStore",
    "InMemoryMediaStore",
]
