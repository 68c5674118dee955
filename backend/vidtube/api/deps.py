"""Shared API helpers for responses, auth guards and service wiring."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from flask import Response, current_app, jsonify, request
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

from vidtube.core.errors import Unauthorized
from vidtube.core.extensions import get_media_store, get_password_hasher, get_token_service
from vidtube.services.auth.service import AuthService

F = TypeVar("F", bound=Callable[..., Any])

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def api_response(data: Any, message: str = "Success", *, status: int = 200) -> Response:
    """Wrap ``data`` in the success envelope ``{statusCode, data, message, success}``."""

    return json_response(
        {"statusCode": status, "data": data, "message": message, "success": status < 400},
        status=status,
    )


def require_auth(func: F) -> F:
    """Ensure the request carries a valid access token (cookie or Bearer)."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        verify_jwt_in_request(optional=False)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def current_user_id() -> int:
    """Return the authenticated user id resolved from the access token."""

    identity = get_jwt_identity()
    if isinstance(identity, str) and identity.isdigit():
        return int(identity)
    if isinstance(identity, int):
        return identity
    raise Unauthorized("Invalid access token")


def build_auth_service() -> AuthService:
    """Wire an :class:`AuthService` with the app-scoped collaborators.

    A missing media store is passed through as ``None``; only registration
    needs one and reports its absence after validating the input.
    """

    return AuthService(
        token_service=get_token_service(),
        password_hasher=get_password_hasher(),
        media_store=get_media_store(),
    )


def _cookie_options() -> dict[str, Any]:
    return {
        "httponly": True,
        "secure": bool(current_app.config.get("AUTH_COOKIE_SECURE", True)),
        "samesite": current_app.config.get("AUTH_COOKIE_SAMESITE"),
        "path": "/",
    }


def set_auth_cookies(response: Response, *, access_token: str, refresh_token: str) -> Response:
    """Attach both tokens as ``httpOnly`` + ``secure`` cookies."""

    options = _cookie_options()
    response.set_cookie(ACCESS_COOKIE, access_token, **options)
    response.set_cookie(REFRESH_COOKIE, refresh_token, **options)
    return response


def clear_auth_cookies(response: Response) -> Response:
    """Expire both auth cookies using the same flags they were set with."""

    options = _cookie_options()
    response.delete_cookie(ACCESS_COOKIE, **options)
    response.delete_cookie(REFRESH_COOKIE, **options)
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
