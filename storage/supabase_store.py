import posixpath

from supabase import Client, create_client

from core.errors import StoreError
from storage.base import BlobStore
from utils.state import State


class SupabaseBlobStore(BlobStore):
    """Supabase Storage bucket accessed through the ``supabase`` client."""

    def __init__(self, url: str, key: str, bucket: str, client: Client | None = None):
        if not client and not (url and key):
            raise StoreError("SUPABASE_URL and SUPABASE_KEY are required")
        self.url = url.rstrip("/") if url else url
        self.bucket = bucket
        self.client = client or create_client(url, key)
        State.logger.info(f"Supabase storage initialized: bucket {bucket}")

    def _bucket(self):
        return self.client.storage.from_(self.bucket)

    def create_upload_url(self, path: str, mime_type: str | None = None) -> str:
        try:
            data = self._bucket().create_signed_upload_url(path)
        except Exception as e:
            State.logger.error(f"Error generating presigned URL for {path}: {str(e)}")
            raise StoreError(f"Failed to create presigned URL for {path}") from e
        signed_url = data.get("signed_url") or data.get("signedUrl")
        if not signed_url:
            raise StoreError(f"Storage returned no signed URL for {path}")
        return signed_url

    def public_url(self, path: str) -> str:
        return f"{self.url}/storage/v1/object/public/{self.bucket}/{path}"

    def delete(self, path: str) -> None:
        try:
            self._bucket().remove([path])
        except Exception as e:
            State.logger.error(f"Error deleting file {path}: {str(e)}")
            raise StoreError(f"Failed to delete {path}") from e

    def exists(self, path: str) -> bool:
        folder, name = posixpath.split(path)
        try:
            entries = self._bucket().list(folder, {"search": name})
        except Exception as e:
            State.logger.error(f"Error checking file {path}: {str(e)}")
            raise StoreError(f"Failed to look up {path}") from e
        return any(entry.get("name") == name for entry in entries or [])
