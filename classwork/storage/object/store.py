"""Object storage interface and implementations."""

from __future__ import annotations

import abc
import asyncio
from pathlib import Path

import pydantic as p


class UploadResult(p.BaseModel):
    """Result of an upload operation."""

    model_config = p.ConfigDict(frozen=True)

    # The URL to access the uploaded file
    url: str

    # Size of the uploaded file in bytes
    size: int

    # Content type of the file
    content_type: str


class ObjectStore(abc.ABC):
    """Abstract base class for object storage.

    Stores hand back opaque URLs; callers enforce size and type limits.
    """

    @abc.abstractmethod
    async def upload(
        self,
        key: str,
        data: bytes,
        content_type: str = "application/octet-stream",
    ) -> UploadResult:
        """Upload data to storage.

        Args:
            key: The storage key (path/filename) for the object.
            data: The file contents as bytes.
            content_type: MIME type of the file.

        Returns:
            UploadResult with the URL and metadata.
        """
        ...

    @abc.abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete an object from storage.

        Returns:
            True if deleted, False if not found.
        """
        ...

    @abc.abstractmethod
    def get_url(self, key: str) -> str:
        """Get the URL for an object."""
        ...


class LocalObjectStore(ObjectStore):
    """Local filesystem implementation, served by the web app under its url_prefix."""

    def __init__(self, base_path: Path, url_prefix: str = "/uploads") -> None:
        self._base_path = base_path
        self._url_prefix = url_prefix.rstrip("/")

        # Ensure base directory exists
        self._base_path.mkdir(parents=True, exist_ok=True)

    @property
    def base_path(self) -> Path:
        return self._base_path

    @property
    def url_prefix(self) -> str:
        return self._url_prefix

    def _path(self, key: str) -> Path:
        path = (self._base_path / key).resolve()
        if not path.is_relative_to(self._base_path.resolve()):
            raise ValueError(f"key escapes the store: {key!r}")
        return path

    async def upload(
        self,
        key: str,
        data: bytes,
        content_type: str = "application/octet-stream",
    ) -> UploadResult:
        """Upload data to local filesystem."""
        file_path = self._path(key)

        # Ensure parent directories exist
        file_path.parent.mkdir(parents=True, exist_ok=True)

        await asyncio.to_thread(file_path.write_bytes, data)

        return UploadResult(
            url=self.get_url(key),
            size=len(data),
            content_type=content_type,
        )

    async def delete(self, key: str) -> bool:
        """Delete file from local filesystem."""
        file_path = self._path(key)

        if file_path.exists():
            file_path.unlink()
            return True

        return False

    def get_url(self, key: str) -> str:
        """Get URL for local file (served by web server)."""
        return f"{self._url_prefix}/{key}"
