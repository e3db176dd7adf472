from fastapi import APIRouter, Depends, Query

from controllers.cascade import delete_session, ensure_owner
from controllers.upload import list_session_chunks
from core.auth import Identity, optional_verify_token, verify_token
from core.dependencies import get_blob_store, get_store
from core.errors import NotFoundError, ServiceError, ValidationError, unexpected_error
from models.patient import PATIENTS
from models.session import SESSIONS, new_session_document, session_summary
from schema.session import CreateSessionRequest, UpdateSessionRequest
from utils.state import State

router = APIRouter()


@router.post("/upload-session", status_code=201)
async def create_session(
    req: CreateSessionRequest,
    identity: Identity = Depends(verify_token),
    store=Depends(get_store),
):
    try:
        session = store.create(
            SESSIONS,
            new_session_document(
                user_id=identity.uid,
                patient_id=req.patient_id,
                patient_name=req.patient_name,
            ),
        )
        State.logger.info(f"Created session: {session['id']} for user: {identity.uid}")
        return {"id": session["id"]}
    except ServiceError:
        raise
    except Exception as e:
        raise unexpected_error("creating session", e) from e


@router.get("/all-session")
async def get_sessions(
    user_id: str | None = Query(None, alias="userId", description="Owner of the sessions"),
    identity: Identity = Depends(optional_verify_token),
    store=Depends(get_store),
):
    try:
        if not user_id:
            raise ValidationError("userId is required")
        sessions = store.list(SESSIONS, [("userId", "==", user_id)])
        patient_map = {}
        for patient_id in {s.get("patientId") for s in sessions if s.get("patientId")}:
            patient = store.get(PATIENTS, patient_id)
            if patient:
                patient_map[patient_id] = {
                    "name": patient.get("name"),
                    "pronouns": patient.get("pronouns"),
                }
        State.logger.info(f"Retrieved {len(sessions)} sessions for user: {user_id}")
        return {
            "sessions": [session_summary(s) for s in sessions],
            "patientMap": patient_map,
        }
    except ServiceError:
        raise
    except Exception as e:
        raise unexpected_error("fetching sessions", e) from e


@router.get("/session/{session_id}")
async def get_session(
    session_id: str,
    identity: Identity = Depends(optional_verify_token),
    store=Depends(get_store),
):
    try:
        session = store.get(SESSIONS, session_id)
        if not session:
            raise NotFoundError("Session not found")
        return session
    except ServiceError:
        raise
    except Exception as e:
        raise unexpected_error("fetching session", e) from e


@router.put("/session/{session_id}")
async def update_session(
    session_id: str,
    req: UpdateSessionRequest,
    identity: Identity = Depends(verify_token),
    store=Depends(get_store),
):
    try:
        ensure_owner(store.get(SESSIONS, session_id), identity.uid, "Session")
        session = store.update(SESSIONS, session_id, req.changes())
        State.logger.info(f"Updated session: {session_id}")
        return {"session": session}
    except ServiceError:
        raise
    except Exception as e:
        raise unexpected_error("updating session", e) from e


@router.delete("/session/{session_id}")
async def delete_session_(
    session_id: str,
    identity: Identity = Depends(verify_token),
    store=Depends(get_store),
    blobs=Depends(get_blob_store),
):
    try:
        delete_session(session_id, identity.uid, store, blobs)
        return {"success": True, "message": "Session deleted successfully"}
    except ServiceError:
        raise
    except Exception as e:
        raise unexpected_error("deleting session", e) from e


@router.get("/session/{session_id}/chunks")
async def get_session_chunks(
    session_id: str,
    identity: Identity = Depends(optional_verify_token),
    store=Depends(get_store),
):
    try:
        chunks = list_session_chunks(session_id, store)
        State.logger.info(f"Retrieved {len(chunks)} chunks for session: {session_id}")
        return {"chunks": chunks}
    except ServiceError:
        raise
    except Exception as e:
        raise unexpected_error("fetching session chunks", e) from e
