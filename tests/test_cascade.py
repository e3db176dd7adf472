import pytest

from controllers.cascade import delete_patient, delete_session, delete_user_data
from controllers.upload import record_chunk_upload
from core.errors import AccessDeniedError, NotFoundError, StoreError
from database.memory import InMemoryDocumentStore
from models.chunk import AUDIO_CHUNKS, chunk_blob_path
from models.patient import PATIENTS, new_patient_document
from models.session import SESSIONS, new_session_document
from models.template import TEMPLATES, new_template_document
from models.user import USERS, new_user_document
from storage.memory import InMemoryBlobStore


class FlakyBlobStore(InMemoryBlobStore):
    """Fails to delete the paths it was told to."""

    def __init__(self, failing_paths):
        super(FlakyBlobStore, self).__init__(base_url="http://testserver")
        self.failing_paths = set(failing_paths)

    def delete(self, path):
        if path in self.failing_paths:
            raise StoreError(f"delete {path} failed")
        super(FlakyBlobStore, self).delete(path)


class ChunkDeleteFailingStore(InMemoryDocumentStore):
    def delete(self, collection, doc_id):
        if collection == AUDIO_CHUNKS:
            raise StoreError(f"delete {collection}/{doc_id} failed")
        return super(ChunkDeleteFailingStore, self).delete(collection, doc_id)


def _recorded_session(store, blobs, chunks=2, user_id="user123", patient_id="p-1"):
    sid = store.create(SESSIONS, new_session_document(user_id, patient_id))["id"]
    paths = []
    for n in range(chunks):
        path = chunk_blob_path(sid, n, "audio/wav")
        blobs.put(path, b"audio", "audio/wav")
        record_chunk_upload(sid, path, n, store, blobs, is_last=n == chunks - 1)
        paths.append(path)
    return sid, paths


def test_delete_session_removes_everything(store, blobs):
    sid, paths = _recorded_session(store, blobs)
    report = delete_session(sid, "user123", store, blobs)
    assert report.sessions_deleted == 1
    assert report.chunks_deleted == 2
    assert report.failures == []
    assert store.get(SESSIONS, sid) is None
    assert store.list(AUDIO_CHUNKS) == []
    assert not any(blobs.exists(p) for p in paths)


def test_delete_session_checks_owner(store, blobs):
    sid, paths = _recorded_session(store, blobs)
    with pytest.raises(AccessDeniedError):
        delete_session(sid, "someone-else", store, blobs)
    with pytest.raises(NotFoundError):
        delete_session("missing", "user123", store, blobs)
    assert store.get(SESSIONS, sid) is not None
    assert all(blobs.exists(p) for p in paths)


def test_blob_failures_are_reported_not_raised(store):
    blobs = InMemoryBlobStore(base_url="http://testserver")
    sid, paths = _recorded_session(store, blobs, chunks=3)
    flaky = FlakyBlobStore([paths[1]])
    flaky.objects = dict(blobs.objects)

    report = delete_session(sid, "user123", store, flaky)
    assert report.failed_paths == [paths[1]]
    assert report.failures[0].session_id == sid
    assert store.get(SESSIONS, sid) is None
    assert store.list(AUDIO_CHUNKS) == []
    assert flaky.exists(paths[1])
    assert not flaky.exists(paths[0]) and not flaky.exists(paths[2])


def test_chunk_record_failure_keeps_session(blobs):
    store = ChunkDeleteFailingStore()
    sid, paths = _recorded_session(store, blobs)
    with pytest.raises(StoreError):
        delete_session(sid, "user123", store, blobs)
    # parent survives so the delete can be retried
    assert store.get(SESSIONS, sid) is not None
    assert len(store.list(AUDIO_CHUNKS, [("sessionId", "==", sid)])) == 2


def test_delete_patient_cascades_sessions(store, blobs):
    pid = store.create(PATIENTS, new_patient_document("user123", "John Doe"))["id"]
    sid, paths = _recorded_session(store, blobs, patient_id=pid)
    other, _ = _recorded_session(store, blobs, patient_id="p-other")

    report = delete_patient(pid, "user123", store, blobs)
    assert report.sessions_deleted == 1
    assert store.get(PATIENTS, pid) is None
    assert store.get(SESSIONS, sid) is None
    assert store.get(SESSIONS, other) is not None
    assert not any(blobs.exists(p) for p in paths)


def test_delete_patient_checks_owner(store, blobs):
    pid = store.create(PATIENTS, new_patient_document("user123", "John Doe"))["id"]
    with pytest.raises(AccessDeniedError):
        delete_patient(pid, "other-user", store, blobs)
    assert store.get(PATIENTS, pid) is not None


def test_delete_user_data(store, blobs):
    store.create(USERS, new_user_document("user123", "me@example.com"))
    store.create(PATIENTS, new_patient_document("user123", "John Doe"))
    store.create(TEMPLATES, new_template_document("user123", "SOAP"))
    _recorded_session(store, blobs)
    kept = store.create(PATIENTS, new_patient_document("other-user", "Jane Roe"))["id"]

    report = delete_user_data("user123", store, blobs)
    assert report.sessions_deleted == 1
    assert report.chunks_deleted == 2
    assert store.list(USERS) == []
    assert store.list(SESSIONS) == []
    assert store.list(TEMPLATES) == []
    assert [p["id"] for p in store.list(PATIENTS)] == [kept]
    assert blobs.objects == {}


def test_delete_user_data_without_profile(store, blobs):
    store.create(PATIENTS, new_patient_document("user123", "John Doe"))
    with pytest.raises(NotFoundError):
        delete_user_data("user123", store, blobs)
    assert len(store.list(PATIENTS)) == 1
