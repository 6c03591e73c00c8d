"""Check-in photo storage."""

import asyncio
import logging
from pathlib import Path
from typing import Protocol

from terramine.config import get_settings
from terramine.exceptions import PhotoRejected

logger = logging.getLogger(__name__)

JPEG_MAGIC = b"\xff\xd8\xff"
PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


class PhotoStore(Protocol):
    """Stores photo bytes and hands back a reference clients can fetch."""

    async def put(self, data: bytes, key: str) -> str: ...

    async def delete(self, reference: str) -> None: ...


def _extension_for(data: bytes) -> str:
    if data.startswith(JPEG_MAGIC):
        return "jpg"
    if data.startswith(PNG_MAGIC):
        return "png"
    raise PhotoRejected("Photo must be a JPEG or PNG image")


class LocalObjectStore:
    """Object-storage style store backed by a directory.

    Keys look like ``checkins/{property_id}/{visitor_id}_{timestamp}`` and
    map one-to-one to files below ``root``; the reference returned is the
    public URL under ``base_url``.
    """

    def __init__(self, root: str | Path, base_url: str, max_bytes: int):
        self._root = Path(root)
        self._base_url = base_url.rstrip("/")
        self._max_bytes = max_bytes

    async def put(self, data: bytes, key: str) -> str:
        if not data:
            raise PhotoRejected("Photo is empty")
        if len(data) > self._max_bytes:
            raise PhotoRejected(f"Photo exceeds {self._max_bytes} bytes")
        if ".." in Path(key).parts or key.startswith("/"):
            raise PhotoRejected(f"Invalid photo key: {key}")

        name = f"{key}.{_extension_for(data)}"
        path = self._root / name
        await asyncio.to_thread(self._write, path, data)
        logger.info(f"Stored photo {name} ({len(data)} bytes)")
        return f"{self._base_url}/{name}"

    async def delete(self, reference: str) -> None:
        """Remove an object previously returned by ``put``."""
        prefix = f"{self._base_url}/"
        if not reference.startswith(prefix):
            raise PhotoRejected(f"Not a stored photo: {reference}")
        name = reference[len(prefix) :]
        if ".." in Path(name).parts or name.startswith("/"):
            raise PhotoRejected(f"Invalid photo key: {name}")

        await asyncio.to_thread((self._root / name).unlink, missing_ok=True)
        logger.info(f"Deleted photo {name}")

    @staticmethod
    def _write(path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)


def get_photo_store() -> PhotoStore:
    """Photo store configured from settings."""
    settings = get_settings()
    return LocalObjectStore(
        settings.photo_storage_dir, settings.photo_base_url, settings.max_photo_bytes
    )
