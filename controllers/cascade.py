"""Cascading deletes across sessions, chunk records and chunk blobs.

Order is fixed: blobs first (best effort), then chunk records (fail fast),
then the parent record. A crash part way leaves the parent readable and its
chunks enumerable, so the same delete can simply be retried.
"""

from dataclasses import dataclass, field
from typing import List

from core.errors import AccessDeniedError, NotFoundError, PartialCascadeFailure, StoreError
from database.base import DocumentStore
from models.chunk import AUDIO_CHUNKS
from models.patient import PATIENTS
from models.session import SESSIONS
from models.template import TEMPLATES
from models.user import USERS
from storage.base import BlobStore
from utils.state import State


@dataclass
class CascadeReport:
    sessions_deleted: int = 0
    chunks_deleted: int = 0
    failures: List[PartialCascadeFailure] = field(default_factory=list)

    @property
    def failed_paths(self) -> List[str]:
        return [path for failure in self.failures for path in failure.failed_paths]

    def merge(self, other: "CascadeReport") -> "CascadeReport":
        self.sessions_deleted += other.sessions_deleted
        self.chunks_deleted += other.chunks_deleted
        self.failures.extend(other.failures)
        return self


def ensure_owner(document: dict | None, user_id: str, label: str) -> dict:
    if not document:
        raise NotFoundError(f"{label} not found")
    if document.get("userId") != user_id:
        State.logger.error(f"Access denied to {label.lower()} {document.get('id')} for user {user_id}")
        raise AccessDeniedError("Access denied")
    return document


def _delete_chunk_blobs(session_id: str, chunks: List[dict], blobs: BlobStore) -> PartialCascadeFailure:
    log = State.bind(session_id=session_id)
    failure = PartialCascadeFailure(session_id=session_id)
    for chunk in chunks:
        path = chunk.get("gcsPath")
        if not path:
            continue
        try:
            blobs.delete(path)
        except StoreError as e:
            log.warning(f"Error deleting file {path}: {e.message}")
            failure.failed_paths.append(path)
    return failure


def cascade_delete_session(session: dict, store: DocumentStore, blobs: BlobStore) -> CascadeReport:
    """Delete a loaded session with its chunks. No ownership check."""
    session_id = session["id"]
    log = State.bind(session_id=session_id)
    chunks = store.list(AUDIO_CHUNKS, [("sessionId", "==", session_id)])

    report = CascadeReport()
    failure = _delete_chunk_blobs(session_id, chunks, blobs)
    if failure:
        report.failures.append(failure)
        log.warning(
            f"Session {session_id}: {len(failure.failed_paths)} chunk blob(s) could not be deleted"
        )

    for chunk in chunks:
        store.delete(AUDIO_CHUNKS, chunk["id"])
        report.chunks_deleted += 1

    store.delete(SESSIONS, session_id)
    report.sessions_deleted += 1
    log.info(f"Session {session_id} and {len(chunks)} associated chunks deleted")
    return report


def delete_session(session_id: str, user_id: str, store: DocumentStore, blobs: BlobStore) -> CascadeReport:
    session = ensure_owner(store.get(SESSIONS, session_id), user_id, "Session")
    return cascade_delete_session(session, store, blobs)


def _cascade_sessions(field_name: str, value: str, store: DocumentStore, blobs: BlobStore) -> CascadeReport:
    report = CascadeReport()
    for session in store.list(SESSIONS, [(field_name, "==", value)]):
        report.merge(cascade_delete_session(session, store, blobs))
    return report


def delete_patient(patient_id: str, user_id: str, store: DocumentStore, blobs: BlobStore) -> CascadeReport:
    ensure_owner(store.get(PATIENTS, patient_id), user_id, "Patient")
    report = _cascade_sessions("patientId", patient_id, store, blobs)
    store.delete(PATIENTS, patient_id)
    State.logger.info(f"Deleted patient: {patient_id} with {report.sessions_deleted} sessions")
    return report


def delete_user_data(uid: str, store: DocumentStore, blobs: BlobStore) -> CascadeReport:
    """
    Delete a user's profile and everything they own.

    Sessions go through the full cascade; patients and templates are then
    deleted without checking for leftover sessions.

    Raises:
        NotFoundError: the caller has no user profile.
    """
    profiles = store.list(USERS, [("uid", "==", uid)])
    if not profiles:
        raise NotFoundError("User profile not found")

    report = _cascade_sessions("userId", uid, store, blobs)
    for collection in (PATIENTS, TEMPLATES):
        for document in store.list(collection, [("userId", "==", uid)]):
            store.delete(collection, document["id"])
    for profile in profiles:
        store.delete(USERS, profile["id"])
    State.logger.info(f"Deleted user profile and associated data: {uid}")
    return report
