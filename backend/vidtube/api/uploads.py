"""Temporary storage for multipart uploads awaiting the media store."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from flask import current_app, request
from werkzeug.utils import secure_filename

log = logging.getLogger(__name__)


def _temp_dir() -> Path:
    path = Path(current_app.config.get("UPLOAD_TEMP_DIR", "./public/temp"))
    path.mkdir(parents=True, exist_ok=True)
    return path


def save_first_file(field: str) -> str | None:
    """Persist the first file posted under ``field`` and return its local path.

    Returns ``None`` when the field is absent or carries an empty filename.
    The stored name is sanitized and prefixed with a random id so concurrent
    uploads of ``avatar.png`` never collide.
    """
    files = request.files.getlist(field)
    if not files or not files[0].filename:
        return None
    upload = files[0]
    name = secure_filename(upload.filename or "") or "upload"
    target = _temp_dir() / f"{uuid.uuid4().hex}-{name}"
    upload.save(target)
    return str(target)


@contextmanager
def temp_uploads(*fields: str) -> Iterator[dict[str, str | None]]:
    """Save the first file of each ``field`` and remove leftovers on exit.

    The media store normally deletes the file after uploading it; anything
    it did not consume (early validation failures) is removed here.
    """
    paths: dict[str, str | None] = {}
    try:
        for field in fields:
            paths[field] = save_first_file(field)
        yield paths
    finally:
        for path in paths.values():
            if path:
                try:
                    Path(path).unlink(missing_ok=True)
                except OSError as exc:
                    log.warning("upload.cleanup_failed: %s", exc)
