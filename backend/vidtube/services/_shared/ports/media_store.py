from __future__ import annotations

import os
from contextlib import suppress
from pathlib import Path
from typing import Protocol


class MediaStore(Protocol):
    """
    Durable storage for user-supplied media (avatars, cover images).

    ``upload`` takes a local file path and returns a durable URL, or ``None``
    when the path is empty or the upload failed. The local file is removed
    after the attempt either way.
    """

    def upload(self, local_path: str | None) -> str | None: ...


class InMemoryMediaStore(MediaStore):
    """Media store double recording uploads; used in unit and API tests.

    ``fail_on`` holds filename endings whose upload should fail. Matching on
    the ending lets tests target files the API stored under a unique prefix.
    """

    def __init__(self, *, base_url: str = "https://media.test", fail_on: set[str] | None = None):
        self.base_url = base_url.rstrip("/")
        self.fail_on = set(fail_on or ())
        self.uploaded: list[str] = []

    def upload(self, local_path: str | None) -> str | None:
        if not local_path:
            return None
        name = Path(local_path).name
        try:
            if any(name.endswith(s) for s in self.fail_on) or not os.path.exists(local_path):
                return None
            self.uploaded.append(name)
            return f"{self.base_url}/{name}"
        finally:
            with suppress(FileNotFoundError):
                os.remove(local_path)
