import uuid


def _uniq(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:8]}"


def create_patient(client, name: str = "John Doe", **details) -> str:
    r = client.post("/api/v1/add-patient-ext", json={"name": name, **details})
    assert r.status_code == 201, r.text
    return r.json()["patient"]["id"]


def create_session(client, patient_id: str, patient_name: str | None = None) -> str:
    r = client.post(
        "/api/v1/upload-session",
        json={"patientId": patient_id, "patientName": patient_name},
    )
    assert r.status_code == 201, r.text
    return r.json()["id"]


def upload_chunk(client, session_id: str, chunk_number: int, is_last: bool = False, **extra):
    """Full client flow: presigned URL, direct PUT, notification."""
    dest = client.post(
        "/api/v1/get-presigned-url",
        json={
            "sessionId": session_id,
            "chunkNumber": chunk_number,
            "mimeType": extra.pop("mimeType", "audio/wav"),
        },
    )
    assert dest.status_code == 200, dest.text
    body = dest.json()
    put = client.put(body["url"], content=b"RIFF....WAVE", headers={"content-type": "audio/wav"})
    assert put.status_code == 200, put.text
    r = client.post(
        "/api/v1/notify-chunk-uploaded",
        json={
            "sessionId": session_id,
            "gcsPath": body["gcsPath"],
            "publicUrl": body["publicUrl"],
            "chunkNumber": chunk_number,
            "isLast": is_last,
            **extra,
        },
    )
    assert r.status_code == 200, r.text
    return body["gcsPath"], r.json()
