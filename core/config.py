"""
Configuration settings for the MediNote backend
"""
import os
from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Application settings, read from the environment at construction."""

    def __init__(self):
        # Application
        self.APP_TITLE: str = "MediNote Backend API"
        self.APP_DESCRIPTION: str = "Medical transcription app backend"
        self.APP_VERSION: str = "1.0.0"
        self.ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

        # Document store
        self.DOCUMENT_STORE: str = os.getenv("DOCUMENT_STORE", "memory").lower()
        self.DATABASE_URL: str = os.getenv(
            "DATABASE_URL", "sqlite:///./medinote.sqlite"
        )
        self.FIRESTORE_PROJECT_ID: str | None = os.getenv("FIRESTORE_PROJECT_ID")

        # Blob store
        self.BLOB_STORE: str = os.getenv("BLOB_STORE", "memory").lower()
        self.SUPABASE_URL: str | None = os.getenv("SUPABASE_URL")
        self.SUPABASE_KEY: str | None = os.getenv("SUPABASE_KEY") or os.getenv(
            "SUPABASE_ANON_KEY"
        )
        self.STORAGE_BUCKET_NAME: str = os.getenv(
            "STORAGE_BUCKET_NAME", "medinote-audio-files"
        )
        self.PUBLIC_BASE_URL: str = os.getenv(
            "PUBLIC_BASE_URL", "http://localhost:8000"
        )

        # Identity
        self.AUTH_MODE: str = os.getenv("AUTH_MODE", "anonymous").lower()
        self.JWT_SECRET_KEY: str | None = os.getenv("JWT_SECRET_KEY")
        self.JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")

        # Upload workflow
        self.VERIFY_CHUNK_UPLOADS: bool = _flag("VERIFY_CHUNK_UPLOADS")


def get_settings() -> Settings:
    return Settings()
