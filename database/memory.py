import copy
import threading
from typing import Dict, List, Optional

from core.errors import NotFoundError
from database.base import DocumentStore, Filter, matches, new_document_id
from utils.clock import utc_now_iso


class InMemoryDocumentStore(DocumentStore):
    """Dict-backed store for tests and local development.

    State lives on the instance, so every app built with its own store is
    isolated. A single lock serializes writes, which makes ``increment``
    atomic.
    """

    def __init__(self):
        self._collections: Dict[str, Dict[str, dict]] = {}
        self._lock = threading.RLock()

    def _collection(self, name: str) -> Dict[str, dict]:
        return self._collections.setdefault(name, {})

    def create(self, collection: str, data: dict, doc_id: str | None = None) -> dict:
        now = utc_now_iso()
        doc_id = doc_id or new_document_id()
        document = {**copy.deepcopy(data), "createdAt": now, "updatedAt": now}
        with self._lock:
            self._collection(collection)[doc_id] = document
        return {"id": doc_id, **copy.deepcopy(document)}

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        with self._lock:
            document = self._collection(collection).get(doc_id)
            if document is None:
                return None
            return {"id": doc_id, **copy.deepcopy(document)}

    def list(self, collection: str, filters: Optional[List[Filter]] = None) -> List[dict]:
        with self._lock:
            return [
                {"id": doc_id, **copy.deepcopy(document)}
                for doc_id, document in self._collection(collection).items()
                if matches(document, filters)
            ]

    def update(self, collection: str, doc_id: str, data: dict) -> dict:
        with self._lock:
            document = self._collection(collection).get(doc_id)
            if document is None:
                raise NotFoundError(f"Document {collection}/{doc_id} not found")
            document.update(copy.deepcopy(data))
            document["updatedAt"] = utc_now_iso()
            return {"id": doc_id, **copy.deepcopy(document)}

    def delete(self, collection: str, doc_id: str) -> bool:
        with self._lock:
            return self._collection(collection).pop(doc_id, None) is not None

    def increment(self, collection: str, doc_id: str, field: str, amount: int = 1) -> None:
        with self._lock:
            document = self._collection(collection).get(doc_id)
            if document is None:
                raise NotFoundError(f"Document {collection}/{doc_id} not found")
            document[field] = (document.get(field) or 0) + amount
            document["updatedAt"] = utc_now_iso()
