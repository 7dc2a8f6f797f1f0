from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from src.homecare.config import settings


class DocumentStorageBackend(ABC):
    @abstractmethod
    def save_file(self, content: bytes, *, name: str) -> str:
        """Persist document bytes and return the public URL for them."""


class LocalDocumentStorageBackend(DocumentStorageBackend):
    """Stores uploads in a local directory served under ``upload_url_prefix``."""

    def __init__(self, base: Path | None = None, url_prefix: str | None = None) -> None:
        self._base: Path = base or settings.upload_dir
        self._url_prefix = (url_prefix or settings.upload_url_prefix).rstrip("/")

    def save_file(self, content: bytes, *, name: str) -> str:
        self._base.mkdir(parents=True, exist_ok=True)
        (self._base / name).write_bytes(content)
        return f"{self._url_prefix}/{name}"

    def path_for(self, url: str) -> Path:
        return self._base / url.rsplit("/", 1)[-1]


document_storage_backend: DocumentStorageBackend = LocalDocumentStorageBackend()
