from dotenv import load_dotenv

load_dotenv(".env")

from contextlib import asynccontextmanager

import logfire
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.auth import IdentityResolver, build_identity_resolver
from core.config import Settings, get_settings
from core.errors import ServiceError
from database.base import DocumentStore
from database.factory import build_document_store
from database.sql_store import SqlDocumentStore
from routes import audio, patient, session, template, user
from storage.base import BlobStore
from storage.factory import build_blob_store
from utils.clock import utc_now_iso
from utils.state import State

HTTP_ERROR_KINDS = {
    401: "unauthenticated",
    403: "access_denied",
    404: "not_found",
    405: "method_not_allowed",
}


def _error(status_code: int, kind: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": kind, "message": message})


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        field = ".".join(loc) or "body"
        parts.append(f"{field}: {err.get('msg')}")
    return "; ".join(parts) or "Invalid request"


def _instrument(app: FastAPI, store: DocumentStore, settings: Settings) -> None:
    logfire.instrument_fastapi(app, capture_headers=False)
    if isinstance(store, SqlDocumentStore):
        logfire.instrument_sqlalchemy(engine=store.engine)
    if settings.BLOB_STORE == "supabase":
        logfire.instrument_httpx()


def create_app(
    store: DocumentStore | None = None,
    blob_store: BlobStore | None = None,
    identity_resolver: IdentityResolver | None = None,
    settings: Settings | None = None,
    instrument: bool = True,
) -> FastAPI:
    settings = settings or get_settings()
    store = store or build_document_store(settings)
    blob_store = blob_store or build_blob_store(settings)
    identity_resolver = identity_resolver or build_identity_resolver(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        State.logger.info("Starting up...")
        yield
        State.logger.info("Shutting down...")
        store.close()

    app = FastAPI(
        title=settings.APP_TITLE,
        description=settings.APP_DESCRIPTION,
        version=settings.APP_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.blob_store = blob_store
    app.state.identity_resolver = identity_resolver

    app.add_middleware(
        CORSMiddleware,
        allow_credentials=False,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        return _error(exc.status_code, exc.kind, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        message = _validation_message(exc)
        State.logger.error(f"Invalid request to {request.url.path}: {message}")
        return _error(400, "validation_error", message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        kind = HTTP_ERROR_KINDS.get(exc.status_code, "http_error")
        return _error(exc.status_code, kind, str(exc.detail))

    app.include_router(audio.router, prefix="/api/v1")
    app.include_router(session.router, prefix="/api/v1")
    app.include_router(patient.router, prefix="/api/v1")
    app.include_router(template.router, prefix="/api/v1")
    app.include_router(user.router, prefix="/api/users")
    app.include_router(audio.mock_storage_router)

    @app.get("/")
    async def root():
        return {
            "name": settings.APP_TITLE,
            "version": settings.APP_VERSION,
            "status": "running",
            "endpoints": {
                "health": "/health",
                "api": "/api/v1",
                "users": "/api/users",
            },
        }

    @app.get("/health")
    async def health():
        return {
            "status": "ok",
            "timestamp": utc_now_iso(),
            "environment": settings.ENVIRONMENT,
            "version": settings.APP_VERSION,
        }

    if instrument:
        _instrument(app, store, settings)
    return app


app = create_app()
