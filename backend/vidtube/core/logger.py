"""JSON logs on stdout, correlated per request by ``X-Request-ID``."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from flask import Flask, Response, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
_INBOUND_HEADERS = (REQUEST_ID_HEADER, "X-Correlation-ID")
_ENVIRON_KEY = "vidtube.request_id"

# ``extra=`` attributes promoted to top-level keys
LOGGED_EXTRAS = ("event", "user_id", "endpoint", "elapsed_ms", "status")


def ensure_request_id() -> str:
    """Return the id correlating everything logged for the current request.

    The first call in a request adopts ``X-Request-ID`` (or
    ``X-Correlation-ID``) from the client, or mints a uuid4, and pins it in the
    WSGI environ. The environ belongs to exactly one request, so the id never
    bleeds into a later request sharing the same application context.
    Outside a request every call returns a fresh uuid4.
    """
    if not has_request_context():
        return str(uuid4())

    environ = request.environ
    request_id = environ.get(_ENVIRON_KEY)
    if request_id is None:
        request_id = str(uuid4())
        for header in _INBOUND_HEADERS:
            value = request.headers.get(header, "").strip()
            if value:
                request_id = value
                break
        environ[_ENVIRON_KEY] = request_id
    return request_id


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(
                timespec="milliseconds"
            ),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        entry.update({key: getattr(record, key) for key in LOGGED_EXTRAS if hasattr(record, key)})
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class RequestIdFilter(logging.Filter):
    """Stamp ``request_id`` on every record (``None`` outside requests)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = ensure_request_id() if has_request_context() else None
        return True


def configure_logging(level: str | int = "INFO") -> None:
    """Route the root logger to a single JSON handler on stdout."""

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestIdFilter())

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level.upper() if isinstance(level, str) else level)


def init_app(app: Flask) -> None:
    """Pin a request id before each request and echo it on every response."""

    app.logger.addFilter(RequestIdFilter())

    @app.before_request
    def _bind_request_id() -> None:
        ensure_request_id()

    @app.after_request
    def _echo_request_id(response: Response) -> Response:
        response.headers[REQUEST_ID_HEADER] = ensure_request_id()
        return response


__all__ = ["configure_logging", "init_app", "ensure_request_id", "REQUEST_ID_HEADER"]
