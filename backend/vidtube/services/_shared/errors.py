"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and never import Flask, HTTP, or
SQLAlchemy. They are the stable contract between repositories, adapters and
application services.

The translation to the HTTP error envelope is handled by
``vidtube/core/errors.py``.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    :param message: Human-readable summary, safe for clients.
    :type message: str
    :param errors: Optional structured error entries.
    :type errors: Sequence[Any] | None

    Notes
    -----
    - These are *not* HTTP errors.
    - The API layer maps each subclass to a status code.
    """

    default_message = "Something went wrong"

    def __init__(self, message: str | None = None, errors: Sequence[Any] | None = None) -> None:
        self.message = message or self.default_message
        self.errors = list(errors or [])
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class ValidationError(ServiceError):
    """Raised when input is missing or malformed."""

    default_message = "Invalid input"


class ConflictError(ServiceError):
    """Raised when a uniqueness rule would be violated."""

    default_message = "Conflict"


class NotFoundError(ServiceError):
    """Raised when a referenced entity does not exist."""

    default_message = "Resource not found"


class AuthError(ServiceError):
    """Raised when credential or token verification fails (incl. revocation)."""

    default_message = "Unauthorized request"


class UploadError(ServiceError):
    """Raised when a required media upload does not yield a usable URL."""

    default_message = "File upload failed"


class InternalError(ServiceError):
    """Raised when a post-condition is violated (e.g. row unreadable after write)."""

    default_message = "Something went wrong"


class TokenInvalidError(ServiceError):
    """
    Raised by the token service when a token fails verification.

    Covers bad signatures, expiry, malformed tokens and wrong token kinds.
    Callers re-wrap it as :class:`AuthError`.
    """

    default_message = "Invalid token"
