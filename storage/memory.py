import secrets
import threading
from typing import Dict, Set

from storage.base import BlobStore


class InMemoryBlobStore(BlobStore):
    """Keeps uploaded bytes in a dict.

    Upload URLs point at the ``/mock-storage`` route so a local client can
    exercise the full upload flow against it. Each URL carries a token that
    is only valid for its path.
    """

    def __init__(self, base_url: str = "http://localhost:8000"):
        self.base_url = base_url.rstrip("/")
        self.objects: Dict[str, bytes] = {}
        self.content_types: Dict[str, str] = {}
        self._upload_tokens: Dict[str, Set[str]] = {}
        self._lock = threading.Lock()

    def create_upload_url(self, path: str, mime_type: str | None = None) -> str:
        token = secrets.token_urlsafe(16)
        with self._lock:
            self._upload_tokens.setdefault(path, set()).add(token)
        return f"{self.base_url}/mock-storage/{path}?token={token}"

    def accepts_upload(self, path: str, token: str | None) -> bool:
        with self._lock:
            return bool(token) and token in self._upload_tokens.get(path, ())

    def public_url(self, path: str) -> str:
        return f"{self.base_url}/mock-storage/{path}"

    def put(self, path: str, content: bytes, mime_type: str | None = None) -> None:
        with self._lock:
            self.objects[path] = content
            if mime_type:
                self.content_types[path] = mime_type

    def read(self, path: str) -> bytes | None:
        with self._lock:
            return self.objects.get(path)

    def delete(self, path: str) -> None:
        with self._lock:
            self.objects.pop(path, None)
            self.content_types.pop(path, None)

    def exists(self, path: str) -> bool:
        with self._lock:
            return path in self.objects
