# vidtube/infra/storage/s3_media_store.py
from __future__ import annotations

import logging
import mimetypes
import os
import uuid
from collections.abc import Mapping
from contextlib import suppress
from pathlib import Path
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from vidtube.services._shared.ports import MediaStore

logger = logging.getLogger(__name__)


def build_s3_client(config: Mapping[str, Any]) -> Any:
    """
    Create a boto3 S3 client from the Flask config.

    Works against AWS S3 and S3-compatible endpoints (MinIO, R2, ...).
    Connect/read timeouts and retries are bounded.
    """
    return boto3.client(
        "s3",
        endpoint_url=config.get("MEDIA_S3_ENDPOINT_URL") or None,
        region_name=config.get("MEDIA_S3_REGION") or None,
        aws_access_key_id=config.get("MEDIA_S3_ACCESS_KEY") or None,
        aws_secret_access_key=config.get("MEDIA_S3_SECRET_KEY") or None,
        config=Config(
            signature_version="s3v4",
            connect_timeout=config.get("MEDIA_CONNECT_TIMEOUT", 5),
            read_timeout=config.get("MEDIA_READ_TIMEOUT", 30),
            retries={"max_attempts": 3, "mode": "standard"},
        ),
    )


class S3MediaStore(MediaStore):
    """
    Media store writing objects to an S3 bucket.

    :param client: boto3 S3 client.
    :param bucket: Target bucket.
    :param public_base_url: Base URL objects are served from. Falls back to
        ``<endpoint>/<bucket>`` when empty.
    :param key_prefix: Key namespace for uploaded objects.
    """

    def __init__(
        self,
        *,
        client: Any,
        bucket: str,
        public_base_url: str = "",
        key_prefix: str = "uploads",
    ) -> None:
        self.client = client
        self.bucket = bucket
        self.key_prefix = key_prefix.strip("/")
        base = public_base_url or f"{client.meta.endpoint_url}/{bucket}"
        self.public_base_url = base.rstrip("/")

    def _object_key(self, local_path: str) -> str:
        suffix = Path(local_path).suffix.lower()
        name = f"{uuid.uuid4().hex}{suffix}"
        return f"{self.key_prefix}/{name}" if self.key_prefix else name

    def upload(self, local_path: str | None) -> str | None:
        """
        Upload ``local_path`` and return its public URL.

        Returns ``None`` when the path is empty, unreadable or the upload
        fails. The local file is removed in every case.
        """
        if not local_path:
            return None

        key = self._object_key(local_path)
        content_type = mimetypes.guess_type(local_path)[0] or "application/octet-stream"
        try:
            with open(local_path, "rb") as fh:
                self.client.put_object(
                    Bucket=self.bucket,
                    Key=key,
                    Body=fh.read(),
                    ContentType=content_type,
                )
        except (OSError, BotoCoreError, ClientError) as exc:
            logger.warning(
                "media_store.upload_failed: %s",
                exc,
                extra={"event": "media_store.upload_failed"},
            )
            return None
        finally:
            with suppress(FileNotFoundError):
                os.remove(local_path)

        logger.info("media_store.uploaded", extra={"event": "media_store.uploaded"})
        return f"{self.public_base_url}/{key}"
