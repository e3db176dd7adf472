from core.config import Settings
from storage.base import BlobStore
from utils.state import State


def build_blob_store(settings: Settings) -> BlobStore:
    backend = settings.BLOB_STORE
    if backend == "memory":
        from storage.memory import InMemoryBlobStore

        store = InMemoryBlobStore(base_url=settings.PUBLIC_BASE_URL)
    elif backend == "supabase":
        from storage.supabase_store import SupabaseBlobStore

        store = SupabaseBlobStore(
            url=settings.SUPABASE_URL,
            key=settings.SUPABASE_KEY,
            bucket=settings.STORAGE_BUCKET_NAME,
        )
    else:
        raise ValueError(f"Unknown BLOB_STORE: {backend}")
    State.logger.info(f"Blob store backend: {backend}")
    return store
