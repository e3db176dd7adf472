import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient
from jose import jwt

from conftest import build_app
from core.auth import (
    ANONYMOUS_IDENTITY,
    AnonymousIdentityResolver,
    JWTIdentityResolver,
    build_identity_resolver,
)
from core.config import Settings
from main import create_app

SECRET = "test-secret"


def _token(sub, secret=SECRET, **claims):
    return jwt.encode({"sub": sub, **claims}, secret, algorithm="HS256")


def test_anonymous_resolver_ignores_token():
    resolver = AnonymousIdentityResolver()
    assert resolver.resolve(None) == ANONYMOUS_IDENTITY
    assert resolver.resolve("garbage") == ANONYMOUS_IDENTITY
    assert ANONYMOUS_IDENTITY.uid == "user123"


def test_jwt_resolver_reads_subject():
    resolver = JWTIdentityResolver(SECRET)
    identity = resolver.resolve(_token("doctor-1", email="doc@example.com"))
    assert identity.uid == "doctor-1"
    assert identity.email == "doc@example.com"
    assert identity.anonymous is False


def test_jwt_resolver_rejects_bad_signature():
    resolver = JWTIdentityResolver(SECRET)
    with pytest.raises(HTTPException) as exc:
        resolver.resolve(_token("doctor-1", secret="other-secret"))
    assert exc.value.status_code == 401


def test_jwt_resolver_missing_token():
    resolver = JWTIdentityResolver(SECRET)
    with pytest.raises(HTTPException) as exc:
        resolver.resolve(None)
    assert exc.value.status_code == 401
    assert resolver.resolve(None, optional=True) == ANONYMOUS_IDENTITY


def test_jwt_resolver_needs_secret():
    with pytest.raises(ValueError):
        JWTIdentityResolver("")


def test_build_identity_resolver(monkeypatch):
    monkeypatch.setenv("AUTH_MODE", "jwt")
    monkeypatch.setenv("JWT_SECRET_KEY", SECRET)
    assert isinstance(build_identity_resolver(Settings()), JWTIdentityResolver)
    monkeypatch.setenv("AUTH_MODE", "anonymous")
    assert isinstance(build_identity_resolver(Settings()), AnonymousIdentityResolver)
    monkeypatch.setenv("AUTH_MODE", "magic")
    with pytest.raises(ValueError):
        build_identity_resolver(Settings())


@pytest.fixture()
def jwt_client(store, blobs):
    app = create_app(
        store=store,
        blob_store=blobs,
        identity_resolver=JWTIdentityResolver(SECRET),
        settings=Settings(),
        instrument=False,
    )
    with TestClient(app) as c:
        yield c


def test_protected_route_requires_token(jwt_client):
    r = jwt_client.post("/api/v1/add-patient-ext", json={"name": "John Doe"})
    assert r.status_code == 401
    assert r.json()["error"] == "unauthenticated"


def test_protected_route_with_token(jwt_client):
    headers = {"Authorization": f"Bearer {_token('doctor-1')}"}
    r = jwt_client.post("/api/v1/add-patient-ext", json={"name": "John Doe"}, headers=headers)
    assert r.status_code == 201
    assert r.json()["patient"]["userId"] == "doctor-1"


def test_invalid_token_is_rejected(jwt_client):
    headers = {"Authorization": "Bearer not-a-jwt"}
    r = jwt_client.get("/api/users/stats", headers=headers)
    assert r.status_code == 401


def test_optional_route_without_token(jwt_client):
    r = jwt_client.post(
        "/api/v1/get-presigned-url",
        json={"sessionId": "abc", "chunkNumber": 0, "mimeType": "audio/wav"},
    )
    assert r.status_code == 200


def test_verify_uploads_setting(store, blobs):
    settings = Settings()
    settings.VERIFY_CHUNK_UPLOADS = True
    with TestClient(build_app(store, blobs, settings=settings)) as c:
        pid = c.post("/api/v1/add-patient-ext", json={"name": "John Doe"}).json()["patient"]["id"]
        sid = c.post("/api/v1/upload-session", json={"patientId": pid}).json()["id"]
        r = c.post(
            "/api/v1/notify-chunk-uploaded",
            json={"sessionId": sid, "gcsPath": f"sessions/{sid}/chunk_0.wav", "chunkNumber": 0},
        )
        assert r.status_code == 404

        dest = c.post(
            "/api/v1/get-presigned-url",
            json={"sessionId": sid, "chunkNumber": 0, "mimeType": "audio/wav"},
        ).json()
        c.put(dest["url"], content=b"RIFF")
        r = c.post(
            "/api/v1/notify-chunk-uploaded",
            json={"sessionId": sid, "gcsPath": dest["gcsPath"], "chunkNumber": 0},
        )
        assert r.status_code == 200
        assert c.get(f"/api/v1/session/{sid}").json()["chunksUploaded"] == 1
