from fastapi import APIRouter, Depends, Query, Request, Response

from controllers.upload import issue_upload_destination, record_chunk_upload
from core.auth import Identity, optional_verify_token
from core.dependencies import get_app_settings, get_blob_store, get_store
from core.errors import AccessDeniedError, NotFoundError, ServiceError, unexpected_error
from schema.upload import ChunkUploadedRequest, PresignedUrlRequest
from storage.memory import InMemoryBlobStore

router = APIRouter()
mock_storage_router = APIRouter()


@router.post("/get-presigned-url")
async def get_presigned_url(
    req: PresignedUrlRequest,
    identity: Identity = Depends(optional_verify_token),
    blobs=Depends(get_blob_store),
):
    try:
        return issue_upload_destination(
            session_id=req.session_id,
            chunk_number=req.chunk_number,
            mime_type=req.mime_type,
            blobs=blobs,
        )
    except ServiceError:
        raise
    except Exception as e:
        raise unexpected_error("generating presigned URL", e) from e


@router.post("/notify-chunk-uploaded")
async def notify_chunk_uploaded(
    req: ChunkUploadedRequest,
    identity: Identity = Depends(optional_verify_token),
    store=Depends(get_store),
    blobs=Depends(get_blob_store),
    settings=Depends(get_app_settings),
):
    try:
        return record_chunk_upload(
            session_id=req.session_id,
            gcs_path=req.gcs_path,
            chunk_number=req.chunk_number,
            store=store,
            blobs=blobs,
            is_last=req.is_last,
            total_chunks_client=req.total_chunks_client,
            public_url=req.public_url,
            mime_type=req.mime_type,
            selected_template_id=req.selected_template_id,
            model=req.model,
            verify_upload=settings.VERIFY_CHUNK_UPLOADS,
        )
    except ServiceError:
        raise
    except Exception as e:
        raise unexpected_error("processing chunk notification", e) from e


def _memory_blobs(blobs) -> InMemoryBlobStore:
    if not isinstance(blobs, InMemoryBlobStore):
        raise NotFoundError("Mock storage is only available with the in-memory blob store")
    return blobs


@mock_storage_router.put("/mock-storage/{path:path}")
async def mock_upload(
    path: str,
    request: Request,
    token: str | None = Query(None, description="Token from the issued upload URL"),
    blobs=Depends(get_blob_store),
):
    blobs = _memory_blobs(blobs)
    if not blobs.accepts_upload(path, token):
        raise AccessDeniedError("Invalid or missing upload token")
    content = await request.body()
    blobs.put(path, content, request.headers.get("content-type"))
    return Response(status_code=200)


@mock_storage_router.get("/mock-storage/{path:path}")
async def mock_download(path: str, blobs=Depends(get_blob_store)):
    blobs = _memory_blobs(blobs)
    content = blobs.read(path)
    if content is None:
        raise NotFoundError("Object not found")
    return Response(
        content=content,
        media_type=blobs.content_types.get(path, "application/octet-stream"),
    )
