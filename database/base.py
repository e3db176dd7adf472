"""Document store interface.

A document store keeps flat collections of JSON-like documents keyed by a
generated identifier. Implementations stamp ``createdAt`` on create and
``updatedAt`` on every write, and return documents with their ``id`` merged
in. No implementation offers multi-document transactions.
"""

import uuid
from abc import ABC, abstractmethod
from typing import Any, Iterable, List, Optional, Tuple

from core.errors import ValidationError

# (field, operator, value); operators: "==", "!=", "in"
Filter = Tuple[str, str, Any]

SUPPORTED_OPERATORS = ("==", "!=", "in")


def new_document_id() -> str:
    return uuid.uuid4().hex


def matches(document: dict, filters: Optional[Iterable[Filter]]) -> bool:
    for field, op, value in filters or ():
        current = document.get(field)
        if op == "==":
            if current != value:
                return False
        elif op == "!=":
            if current == value:
                return False
        elif op == "in":
            if current not in value:
                return False
        else:
            raise ValidationError(f"Unsupported filter operator: {op}")
    return True


class DocumentStore(ABC):
    @abstractmethod
    def create(self, collection: str, data: dict, doc_id: str | None = None) -> dict:
        """Insert a new document and return it with ``id`` and timestamps."""

    @abstractmethod
    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        """Point read. Returns ``None`` when the document does not exist."""

    @abstractmethod
    def list(self, collection: str, filters: Optional[List[Filter]] = None) -> List[dict]:
        """Return every document of ``collection`` matching all ``filters``."""

    @abstractmethod
    def update(self, collection: str, doc_id: str, data: dict) -> dict:
        """Merge ``data`` into an existing document and return the result.

        Raises:
            NotFoundError: if the document does not exist.
        """

    @abstractmethod
    def delete(self, collection: str, doc_id: str) -> bool:
        """Delete a document. Returns whether it existed."""

    @abstractmethod
    def increment(self, collection: str, doc_id: str, field: str, amount: int = 1) -> None:
        """Atomically add ``amount`` to a numeric field (missing counts as 0).

        Raises:
            NotFoundError: if the document does not exist.
        """

    def close(self) -> None:
        pass
