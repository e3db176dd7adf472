from pydantic import Field

from schema.base import CamelModel


class PresignedUrlRequest(CamelModel):
    session_id: str = Field(min_length=1)
    chunk_number: int
    mime_type: str = Field(min_length=1)


class ChunkUploadedRequest(CamelModel):
    session_id: str = Field(min_length=1)
    gcs_path: str = Field(min_length=1)
    chunk_number: int
    is_last: bool = False
    total_chunks_client: int | None = None
    public_url: str | None = None
    mime_type: str | None = None
    selected_template_id: str | None = None
    model: str | None = None
