"""Centralized JSON error handling for the API.

Every failure leaving the application uses the uniform envelope::

    {"statusCode": 401, "data": null, "message": "...", "success": false, "errors": []}
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, jsonify, request
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from vidtube.core.logger import ensure_request_id

log = logging.getLogger(__name__)


def error_envelope(
    *,
    status: int,
    message: str,
    errors: Sequence[Any] | None = None,
) -> dict[str, Any]:
    """
    Build the uniform error body.

    :param status: HTTP status code.
    :param message: Human-readable error summary (safe for clients).
    :param errors: Optional structured error entries.
    :returns: Envelope dictionary.
    :rtype: dict
    """
    return {
        "statusCode": int(status),
        "data": None,
        "message": message,
        "success": False,
        "errors": list(errors or []),
    }


def error_response(
    *,
    status: int,
    message: str,
    errors: Sequence[Any] | None = None,
) -> tuple[Response, int]:
    """Return a ``(response, status)`` pair carrying the error envelope."""
    return jsonify(error_envelope(status=status, message=message, errors=errors)), int(status)


def _log(status: int, kind: str, message: str, *, exc_info: bool = False) -> None:
    """4xx → warning; 5xx → error."""
    level = log.error if status >= 500 else log.warning
    level(
        "%s: status=%s msg=%s request_id=%s",
        kind,
        status,
        message,
        ensure_request_id(),
        extra={"status": status},
        exc_info=exc_info,
    )


class APIError(Exception):
    """
    Represent a JSON-serializable API error.

    Parameters
    ----------
    message : str
        Human-readable description presented to clients.
    status_code : int, optional
        HTTP status code to return. Defaults to ``400``.
    errors : Sequence[Any] | None, optional
        Optional structured payload (e.g., validation messages) included in
        the response body.
    """

    def __init__(
        self,
        message: str = "Something went wrong",
        status_code: int = 400,
        errors: Sequence[Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)
        self.errors = list(errors or [])

    def to_envelope(self) -> dict[str, Any]:
        """Serialize error metadata into the error envelope."""
        return error_envelope(status=self.status_code, message=self.message, errors=self.errors)


class Unauthorized(APIError):
    """401 when authentication fails."""

    def __init__(self, message: str = "Unauthorized request") -> None:
        super().__init__(message, status_code=HTTPStatus.UNAUTHORIZED)


def service_error_status(exc: Exception) -> int:
    """
    Map a service-layer error to its HTTP status code.

    :param exc: Exception raised within a service.
    :returns: HTTP status code (500 for unknown types).
    """
    from vidtube.services._shared import errors as svc

    mapping: tuple[tuple[type[Exception], HTTPStatus], ...] = (
        (svc.ValidationError, HTTPStatus.BAD_REQUEST),
        (svc.UploadError, HTTPStatus.BAD_REQUEST),
        (svc.AuthError, HTTPStatus.UNAUTHORIZED),
        (svc.TokenInvalidError, HTTPStatus.UNAUTHORIZED),
        (svc.NotFoundError, HTTPStatus.NOT_FOUND),
        (svc.ConflictError, HTTPStatus.CONFLICT),
        (svc.InternalError, HTTPStatus.INTERNAL_SERVER_ERROR),
    )
    for exc_type, status in mapping:
        if isinstance(exc, exc_type):
            return int(status)
    return int(HTTPStatus.INTERNAL_SERVER_ERROR)


def init_app(app: Flask) -> None:
    """
    Attach JSON error handlers to the Flask app.

    Notes
    -----
    - Guarantees the error envelope for all handled errors.
    - Emits 5xx with ``exc_info`` for traceability; 4xx as warnings.
    """
    from vidtube.core.extensions import jwt
    from vidtube.services._shared.errors import ServiceError

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        _log(err.status_code, "APIError", err.message)
        return jsonify(err.to_envelope()), err.status_code

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        status = service_error_status(err)
        _log(status, type(err).__name__, err.message, exc_info=status >= 500)
        return error_response(status=status, message=err.message, errors=err.errors)

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        message = (err.description or HTTPStatus(status).phrase).strip()
        if status == HTTPStatus.NOT_FOUND and request:
            message = f"Route '{request.path}' not found"
        _log(status, "HTTPException", message)
        return error_response(status=status, message=message)

    # Access-token guard failures (flask-jwt-extended callbacks)
    @jwt.unauthorized_loader
    def _missing_token(reason: str):
        _log(HTTPStatus.UNAUTHORIZED, "JWT", reason)
        return error_response(status=HTTPStatus.UNAUTHORIZED, message="Unauthorized request")

    @jwt.invalid_token_loader
    def _invalid_token(reason: str):
        _log(HTTPStatus.UNAUTHORIZED, "JWT", reason)
        return error_response(status=HTTPStatus.UNAUTHORIZED, message="Invalid access token")

    @jwt.expired_token_loader
    def _expired_token(_header: dict[str, Any], _payload: dict[str, Any]):
        _log(HTTPStatus.UNAUTHORIZED, "JWT", "expired access token")
        return error_response(status=HTTPStatus.UNAUTHORIZED, message="Access token expired")

    @app.errorhandler(MarshmallowValidationError)
    def handle_validation_error(err: MarshmallowValidationError):
        messages = err.messages or {}
        entries = (
            [{"field": k, "messages": v} for k, v in messages.items()]
            if isinstance(messages, dict)
            else [{"field": None, "messages": messages}]
        )
        _log(HTTPStatus.BAD_REQUEST, "ValidationError", "payload validation failed")
        return error_response(
            status=HTTPStatus.BAD_REQUEST, message="Validation failed", errors=entries
        )

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        # Do not leak raw DB error to clients
        _log(HTTPStatus.CONFLICT, "IntegrityError", "resource conflict", exc_info=True)
        return error_response(status=HTTPStatus.CONFLICT, message="Resource conflict")

    @app.errorhandler(OperationalError)
    def handle_operational_error(err: OperationalError):
        # E.g., transient DB connectivity, deadlocks
        _log(
            HTTPStatus.SERVICE_UNAVAILABLE,
            "OperationalError",
            "service unavailable",
            exc_info=True,
        )
        return error_response(
            status=HTTPStatus.SERVICE_UNAVAILABLE, message="Service temporarily unavailable"
        )

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        # Unexpected server-side error; never leak internal details
        _log(HTTPStatus.INTERNAL_SERVER_ERROR, "Unhandled exception", repr(err), exc_info=True)
        return error_response(status=HTTPStatus.INTERNAL_SERVER_ERROR, message="Unexpected error")
