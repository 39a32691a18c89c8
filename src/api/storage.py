# This file stores uploaded files for file-backed entities and publishes links to them.
# It exists so services only see an upload/delete interface, never the storage provider itself.
# The local provider writes under one directory that the app serves as static files.

from __future__ import annotations

import logging
import os
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

LOGGER = logging.getLogger("cms.storage")

_MIME_TYPES = {
    "pdf": "application/pdf",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "ico": "image/x-icon",
    "mp4": "video/mp4",
}
DEFAULT_MIME_TYPE = "application/octet-stream"


class StorageError(RuntimeError):
    """Raised when the storage provider cannot complete an upload or delete."""


@dataclass(frozen=True)
class UploadedFile:
    file_name: str
    content: bytes
    content_type: str | None = None

    @property
    def extension(self) -> str:
        return file_extension(self.file_name)

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class StoredFile:
    file_id: str
    shareable_link: str


def file_extension(file_name: str) -> str:
    _, ext = os.path.splitext(file_name)
    return ext.lstrip(".").lower()


def mime_type_from_filename(file_name: str) -> str:
    return _MIME_TYPES.get(file_extension(file_name), DEFAULT_MIME_TYPE)


class FileStorage(Protocol):
    def upload(self, file: UploadedFile) -> StoredFile: ...

    def delete(self, file_id: str) -> None: ...


class LocalFileStorage:
    """Write uploads to a directory and build links under a public base URL."""

    def __init__(self, *, directory: str | Path, public_url: str) -> None:
        self.directory = Path(directory)
        self.public_url = public_url.rstrip("/")

    def _resolve(self, file_id: str) -> Path:
        path = (self.directory / file_id).resolve()
        if path.parent != self.directory.resolve():
            raise StorageError(f"Invalid file id: {file_id!r}")
        return path

    def link_for(self, file_id: str) -> str:
        return f"{self.public_url}/{file_id}"

    def upload(self, file: UploadedFile) -> StoredFile:
        extension = file.extension
        file_id = uuid.uuid4().hex + (f".{extension}" if extension else "")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path = self._resolve(file_id)
            while path.exists():
                file_id = uuid.uuid4().hex + (f".{extension}" if extension else "")
                path = self._resolve(file_id)
            path.write_bytes(file.content)
        except OSError as exc:
            raise StorageError(f"Could not store {file.file_name!r}") from exc

        LOGGER.info(
            "Stored %s as %s (%s, %d bytes)",
            file.file_name,
            file_id,
            file.content_type or mime_type_from_filename(file.file_name),
            file.size,
        )
        return StoredFile(file_id=file_id, shareable_link=self.link_for(file_id))

    def delete(self, file_id: str) -> None:
        path = self._resolve(file_id)
        try:
            path.unlink()
        except FileNotFoundError:
            LOGGER.warning("Stored file %s was already missing", file_id)
        except OSError as exc:
            raise StorageError(f"Could not delete {file_id!r}") from exc
