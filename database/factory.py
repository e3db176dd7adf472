from core.config import Settings
from database.base import DocumentStore
from utils.state import State


def build_document_store(settings: Settings) -> DocumentStore:
    backend = settings.DOCUMENT_STORE
    if backend == "memory":
        from database.memory import InMemoryDocumentStore

        store = InMemoryDocumentStore()
    elif backend == "sql":
        from database.sql_store import SqlDocumentStore

        store = SqlDocumentStore(url=settings.DATABASE_URL)
    elif backend == "firestore":
        from database.firestore_store import FirestoreDocumentStore

        store = FirestoreDocumentStore(project=settings.FIRESTORE_PROJECT_ID)
    else:
        raise ValueError(f"Unknown DOCUMENT_STORE: {backend}")
    State.logger.info(f"Document store backend: {backend}")
    return store
