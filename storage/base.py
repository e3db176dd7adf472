"""Blob store interface.

Paths are object keys inside a single bucket, e.g.
``sessions/<session id>/chunk_0.wav``.
"""

from abc import ABC, abstractmethod


class BlobStore(ABC):
    @abstractmethod
    def create_upload_url(self, path: str, mime_type: str | None = None) -> str:
        """Mint a time-limited URL the client can upload ``path`` to directly."""

    @abstractmethod
    def public_url(self, path: str) -> str:
        """Return the eventual public read URL of ``path``."""

    @abstractmethod
    def delete(self, path: str) -> None:
        """Delete ``path``. Deleting a missing object is not an error."""

    @abstractmethod
    def exists(self, path: str) -> bool:
        pass
