from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from core.errors import NotFoundError, StoreError
from database.base import DocumentStore, Filter, matches, new_document_id
from database.database import Base, create_sql_engine, make_session_factory
from models.document import Document
from utils.clock import utc_now_iso
from utils.state import State


class SqlDocumentStore(DocumentStore):
    """Documents stored as JSON rows of a single ``documents`` table.

    Filtering happens in Python after loading the collection so the same
    code runs on SQLite and PostgreSQL.
    """

    def __init__(self, url: str | None = None, engine: Engine | None = None):
        if engine is None:
            engine = create_sql_engine(url)
        self.engine = engine
        self.SessionLocal = make_session_factory(engine)
        Base.metadata.create_all(bind=engine)

    def _fail(self, action: str, collection: str, e: Exception):
        State.logger.error(f"SQL store failed to {action} in {collection}: {str(e)}")
        raise StoreError(f"Failed to {action} in {collection}") from e

    def create(self, collection: str, data: dict, doc_id: str | None = None) -> dict:
        now = utc_now_iso()
        doc_id = doc_id or new_document_id()
        payload = {**data, "createdAt": now, "updatedAt": now}
        try:
            with self.SessionLocal() as db:
                row = Document(
                    collection=collection,
                    doc_id=doc_id,
                    data=payload,
                    time_created=now,
                    time_updated=now,
                )
                db.add(row)
                db.commit()
                return row.as_dict()
        except SQLAlchemyError as e:
            self._fail("create document", collection, e)

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        try:
            with self.SessionLocal() as db:
                row = db.get(Document, (collection, doc_id))
                return row.as_dict() if row else None
        except SQLAlchemyError as e:
            self._fail("read document", collection, e)

    def list(self, collection: str, filters: Optional[List[Filter]] = None) -> List[dict]:
        try:
            with self.SessionLocal() as db:
                rows = db.scalars(
                    select(Document).where(Document.collection == collection)
                ).all()
                return [row.as_dict() for row in rows if matches(row.data, filters)]
        except SQLAlchemyError as e:
            self._fail("list documents", collection, e)

    def update(self, collection: str, doc_id: str, data: dict) -> dict:
        try:
            with self.SessionLocal() as db:
                row = db.get(Document, (collection, doc_id), with_for_update=True)
                if not row:
                    raise NotFoundError(f"Document {collection}/{doc_id} not found")
                now = utc_now_iso()
                # JSON columns only persist on reassignment
                row.data = {**row.data, **data, "updatedAt": now}
                row.time_updated = now
                db.commit()
                return row.as_dict()
        except SQLAlchemyError as e:
            self._fail("update document", collection, e)

    def delete(self, collection: str, doc_id: str) -> bool:
        try:
            with self.SessionLocal() as db:
                row = db.get(Document, (collection, doc_id))
                if not row:
                    return False
                db.delete(row)
                db.commit()
                return True
        except SQLAlchemyError as e:
            self._fail("delete document", collection, e)

    def increment(self, collection: str, doc_id: str, field: str, amount: int = 1) -> None:
        try:
            with self.SessionLocal() as db:
                row = db.get(Document, (collection, doc_id), with_for_update=True)
                if not row:
                    raise NotFoundError(f"Document {collection}/{doc_id} not found")
                now = utc_now_iso()
                row.data = {
                    **row.data,
                    field: (row.data.get(field) or 0) + amount,
                    "updatedAt": now,
                }
                row.time_updated = now
                db.commit()
        except SQLAlchemyError as e:
            self._fail("increment field", collection, e)

    def close(self) -> None:
        self.engine.dispose()
