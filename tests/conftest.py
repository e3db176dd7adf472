import os
import pathlib
import sys

import pytest
from fastapi.testclient import TestClient

# Environment needed before importing application modules
os.environ["ENVIRONMENT"] = "test"
os.environ["DOCUMENT_STORE"] = "memory"
os.environ["BLOB_STORE"] = "memory"
os.environ["AUTH_MODE"] = "anonymous"
os.environ["VERIFY_CHUNK_UPLOADS"] = "false"
os.environ.pop("LOGFIRE_TOKEN", None)

# Ensure project root on sys.path for application imports
PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from core.auth import AnonymousIdentityResolver, Identity  # noqa: E402
from core.config import Settings  # noqa: E402
from database.memory import InMemoryDocumentStore  # noqa: E402
from storage.memory import InMemoryBlobStore  # noqa: E402

OTHER_USER = Identity(uid="other-user", email="other@example.com")


def build_app(store, blobs, identity=None, settings=None):
    from main import create_app

    resolver = AnonymousIdentityResolver(identity) if identity else AnonymousIdentityResolver()
    return create_app(
        store=store,
        blob_store=blobs,
        identity_resolver=resolver,
        settings=settings or Settings(),
        instrument=False,
    )


@pytest.fixture()
def store():
    return InMemoryDocumentStore()


@pytest.fixture()
def blobs():
    return InMemoryBlobStore(base_url="http://testserver")


@pytest.fixture()
def client(store, blobs):
    with TestClient(build_app(store, blobs)) as c:
        yield c


@pytest.fixture()
def other_client(store, blobs):
    """Same data, different caller."""
    with TestClient(build_app(store, blobs, identity=OTHER_USER)) as c:
        yield c
