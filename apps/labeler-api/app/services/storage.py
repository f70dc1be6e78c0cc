"""
Local object storage.

Buckets are folders under STORAGE_ROOT; public URLs point at the
/storage static mount. Objects are write-once.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import BinaryIO, Union

from app.core.config import settings

logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    pass


class ObjectStorage:
    def __init__(self, root: str, public_base_url: str):
        self.root = Path(root).resolve()
        self.public_base_url = public_base_url.rstrip("/")

    def _object_path(self, bucket: str, name: str) -> Path:
        path = (self.root / bucket / name).resolve()
        try:
            path.relative_to(self.root / bucket)
        except ValueError:
            raise StorageError(f"Invalid object name: {name}")
        return path

    def upload(self, bucket: str, name: str, data: Union[bytes, BinaryIO]) -> str:
        """Write an object and return its path relative to the bucket."""
        path = self._object_path(bucket, name)
        if path.exists():
            raise StorageError(f"Object already exists: {bucket}/{name}")
        try:
            os.makedirs(path.parent, exist_ok=True)
            with open(path, "wb") as handle:
                if isinstance(data, (bytes, bytearray)):
                    handle.write(data)
                else:
                    while chunk := data.read(1024 * 1024):
                        handle.write(chunk)
        except OSError as exc:
            logger.error("Upload of %s/%s failed: %s", bucket, name, exc)
            raise StorageError(f"Upload failed: {exc}") from exc
        logger.info("Stored %s/%s (%d bytes)", bucket, name, path.stat().st_size)
        return name

    def local_path(self, bucket: str, name: str) -> Path:
        return self._object_path(bucket, name)

    def public_url(self, bucket: str, name: str) -> str:
        return f"{self.public_base_url}/storage/{bucket}/{name}"


def get_storage() -> ObjectStorage:
    return ObjectStorage(settings.storage_root, settings.PUBLIC_BASE_URL)
