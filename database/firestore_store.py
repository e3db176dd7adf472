from typing import List, Optional

from google.api_core.exceptions import GoogleAPICallError
from google.api_core.exceptions import NotFound as FirestoreNotFound
from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from core.errors import NotFoundError, StoreError
from database.base import DocumentStore, Filter, new_document_id
from utils.clock import utc_now_iso
from utils.state import State


class FirestoreDocumentStore(DocumentStore):
    """Production store on Cloud Firestore.

    Credentials come from the standard Google application-default chain.
    """

    def __init__(self, project: str | None = None, client: firestore.Client | None = None):
        self.db = client or firestore.Client(project=project)
        State.logger.info("Firestore client initialized")

    def _fail(self, action: str, collection: str, e: Exception):
        State.logger.error(f"Firestore failed to {action} in {collection}: {str(e)}")
        raise StoreError(f"Failed to {action} in {collection}") from e

    def create(self, collection: str, data: dict, doc_id: str | None = None) -> dict:
        now = utc_now_iso()
        doc_id = doc_id or new_document_id()
        payload = {**data, "createdAt": now, "updatedAt": now}
        try:
            self.db.collection(collection).document(doc_id).set(payload)
        except GoogleAPICallError as e:
            self._fail("create document", collection, e)
        return {"id": doc_id, **payload}

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        try:
            snapshot = self.db.collection(collection).document(doc_id).get()
        except GoogleAPICallError as e:
            self._fail("read document", collection, e)
        if not snapshot.exists:
            return None
        return {"id": snapshot.id, **snapshot.to_dict()}

    def list(self, collection: str, filters: Optional[List[Filter]] = None) -> List[dict]:
        query = self.db.collection(collection)
        for field, op, value in filters or ():
            query = query.where(filter=FieldFilter(field, op, value))
        try:
            return [{"id": doc.id, **doc.to_dict()} for doc in query.stream()]
        except GoogleAPICallError as e:
            self._fail("list documents", collection, e)

    def update(self, collection: str, doc_id: str, data: dict) -> dict:
        ref = self.db.collection(collection).document(doc_id)
        try:
            ref.update({**data, "updatedAt": utc_now_iso()})
            snapshot = ref.get()
        except FirestoreNotFound as e:
            raise NotFoundError(f"Document {collection}/{doc_id} not found") from e
        except GoogleAPICallError as e:
            self._fail("update document", collection, e)
        return {"id": snapshot.id, **snapshot.to_dict()}

    def delete(self, collection: str, doc_id: str) -> bool:
        ref = self.db.collection(collection).document(doc_id)
        try:
            existed = ref.get().exists
            ref.delete()
        except GoogleAPICallError as e:
            self._fail("delete document", collection, e)
        return existed

    def increment(self, collection: str, doc_id: str, field: str, amount: int = 1) -> None:
        ref = self.db.collection(collection).document(doc_id)
        try:
            ref.update({field: firestore.Increment(amount), "updatedAt": utc_now_iso()})
        except FirestoreNotFound as e:
            raise NotFoundError(f"Document {collection}/{doc_id} not found") from e
        except GoogleAPICallError as e:
            self._fail("increment field", collection, e)

    def close(self) -> None:
        self.db.close()
