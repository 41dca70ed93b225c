"""Object storage abstraction for submission attachments."""

from .store import LocalObjectStore, ObjectStore, UploadResult

__all__ = ["LocalObjectStore", "ObjectStore", "UploadResult"]
