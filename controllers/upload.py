"""Chunked audio upload workflow.

The client asks for an upload destination, PUTs the bytes straight to the
blob store, then notifies us so the chunk is recorded against its session.
We never see the audio bytes ourselves.
"""

from typing import List

from core.errors import NotFoundError, ValidationError
from database.base import DocumentStore
from models.chunk import AUDIO_CHUNKS, chunk_blob_path, new_chunk_document
from models.session import SESSIONS, SessionStatus
from storage.base import BlobStore
from utils.clock import utc_now_iso
from utils.state import State


def _require(**fields):
    missing = [name for name, value in fields.items() if value is None or value == ""]
    if missing:
        raise ValidationError(f"{', '.join(missing)} required")


def issue_upload_destination(
    session_id: str, chunk_number: int, mime_type: str, blobs: BlobStore
) -> dict:
    """
    Mint a direct-upload URL for one chunk.

    The path only depends on the session, the chunk number and the
    extension, so re-issuing for the same chunk always targets the same
    object.

    Returns:
        dict: ``url`` to upload to, ``gcsPath`` object key, ``publicUrl``.
    """
    _require(sessionId=session_id, chunkNumber=chunk_number, mimeType=mime_type)
    path = chunk_blob_path(session_id, chunk_number, mime_type)
    url = blobs.create_upload_url(path, mime_type)
    State.logger.info(
        f"Generated presigned URL for session: {session_id}, chunk: {chunk_number}"
    )
    return {"url": url, "gcsPath": path, "publicUrl": blobs.public_url(path)}


def record_chunk_upload(
    session_id: str,
    gcs_path: str,
    chunk_number: int,
    store: DocumentStore,
    blobs: BlobStore,
    is_last: bool = False,
    total_chunks_client: int | None = None,
    public_url: str | None = None,
    mime_type: str | None = None,
    selected_template_id: str | None = None,
    model: str | None = None,
    verify_upload: bool = False,
) -> dict:
    """
    Record an uploaded chunk and advance the session.

    The counter goes through the store's atomic increment. Completion fields
    are plain writes: whichever notification carrying ``is_last`` lands last
    wins, and nothing checks ``chunksUploaded`` against the client's total.
    Chunks arriving after completion are still recorded.

    Raises:
        ValidationError: a required field is missing.
        NotFoundError: the session does not exist, or ``verify_upload`` is
            set and nothing was uploaded at ``gcs_path``.
    """
    _require(sessionId=session_id, gcsPath=gcs_path, chunkNumber=chunk_number)

    log = State.bind(session_id=session_id)
    session = store.get(SESSIONS, session_id)
    if not session:
        log.error(f"Chunk notification for unknown session: {session_id}")
        raise NotFoundError("Session not found")
    if verify_upload and not blobs.exists(gcs_path):
        log.error(f"No uploaded audio at {gcs_path} for session: {session_id}")
        raise NotFoundError(f"No uploaded audio found at {gcs_path}")

    store.create(
        AUDIO_CHUNKS,
        new_chunk_document(
            session_id=session_id,
            chunk_number=chunk_number,
            gcs_path=gcs_path,
            public_url=public_url,
            mime_type=mime_type,
            is_last=is_last,
        ),
    )
    store.increment(SESSIONS, session_id, "chunksUploaded")
    log.info(f"Chunk {chunk_number} uploaded for session: {session_id}")

    status = session.get("status") or SessionStatus.IN_PROGRESS.value
    if is_last:
        completion = {"status": SessionStatus.COMPLETED.value}
        if not session.get("endTime"):
            completion["endTime"] = utc_now_iso()
        if total_chunks_client is not None:
            completion["totalChunks"] = total_chunks_client
        if selected_template_id is not None:
            completion["templateId"] = selected_template_id
        if model is not None:
            completion["model"] = model
        store.update(SESSIONS, session_id, completion)
        status = SessionStatus.COMPLETED.value
        log.info(
            f"Last chunk received for session: {session_id}, session completed"
        )

    return {
        "success": True,
        "message": "Chunk processed successfully",
        "status": "completed" if status == SessionStatus.COMPLETED.value else "collecting",
    }


def list_session_chunks(session_id: str, store: DocumentStore) -> List[dict]:
    """Chunks of a session ordered by ``chunkNumber``, whatever the arrival order."""
    _require(sessionId=session_id)
    chunks = store.list(AUDIO_CHUNKS, [("sessionId", "==", session_id)])
    chunks.sort(key=lambda chunk: chunk.get("chunkNumber", 0))
    return chunks
