from utils.clock import utc_now_iso

AUDIO_CHUNKS = "audio_chunks"

# Every chunk object lives under this prefix inside the bucket.
BLOB_PREFIX = "sessions/"


def chunk_extension(mime_type: str | None) -> str:
    """Loose content-type sniff: anything mentioning mp3 is mp3, the rest wav."""
    return "mp3" if mime_type and "mp3" in mime_type else "wav"


def chunk_file_name(session_id: str, chunk_number: int, mime_type: str | None) -> str:
    return f"{session_id}/chunk_{chunk_number}.{chunk_extension(mime_type)}"


def chunk_blob_path(session_id: str, chunk_number: int, mime_type: str | None) -> str:
    return BLOB_PREFIX + chunk_file_name(session_id, chunk_number, mime_type)


def new_chunk_document(
    session_id: str,
    chunk_number: int,
    gcs_path: str,
    public_url: str | None = None,
    mime_type: str | None = None,
    is_last: bool = False,
) -> dict:
    return {
        "sessionId": session_id,
        "chunkNumber": chunk_number,
        "gcsPath": gcs_path,
        "publicUrl": public_url,
        "mimeType": mime_type,
        "isLast": bool(is_last),
        "uploadedAt": utc_now_iso(),
    }
