from fastapi import Request

from core.config import Settings
from database.base import DocumentStore
from storage.base import BlobStore


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def get_blob_store(request: Request) -> BlobStore:
    return request.app.state.blob_store


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
