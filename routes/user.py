from fastapi import APIRouter, Depends, Query, Response

from controllers.cascade import delete_user_data
from core.auth import Identity, optional_verify_token, verify_token
from core.dependencies import get_blob_store, get_store
from core.errors import NotFoundError, ServiceError, ValidationError, unexpected_error
from models.patient import PATIENTS
from models.session import SESSIONS, SessionStatus
from models.template import TEMPLATES
from models.user import USERS, new_user_document
from schema.user import CreateUserRequest, UpdateUserRequest
from utils.state import State

router = APIRouter()


def _profile(store, uid: str) -> dict:
    users = store.list(USERS, [("uid", "==", uid)])
    if not users:
        raise NotFoundError("User profile not found")
    return users[0]


@router.get("/asd3fd2faec")
async def get_user_by_email(
    email: str | None = Query(None, description="Email address to look up"),
    identity: Identity = Depends(optional_verify_token),
    store=Depends(get_store),
):
    """Legacy lookup kept for older mobile builds."""
    try:
        if not email:
            raise ValidationError("email is required")
        users = store.list(USERS, [("email", "==", email)])
        if not users:
            raise NotFoundError("User not found")
        user = users[0]
        return {"id": user["id"], "email": user["email"], "name": user.get("name")}
    except ServiceError:
        raise
    except Exception as e:
        raise unexpected_error("fetching user by email", e) from e


@router.post("")
async def create_user(
    req: CreateUserRequest,
    response: Response,
    identity: Identity = Depends(verify_token),
    store=Depends(get_store),
):
    try:
        existing = store.list(USERS, [("email", "==", req.email)])
        if existing:
            State.logger.info(f"User already exists: {existing[0]['id']}")
            return existing[0]
        user = store.create(USERS, new_user_document(identity.uid, req.email, req.name))
        State.logger.info(f"Created user: {user['id']} for uid: {identity.uid}")
        response.status_code = 201
        return user
    except ServiceError:
        raise
    except Exception as e:
        raise unexpected_error("creating user", e) from e


@router.get("/profile")
async def get_profile(
    identity: Identity = Depends(verify_token),
    store=Depends(get_store),
):
    try:
        return _profile(store, identity.uid)
    except ServiceError:
        raise
    except Exception as e:
        raise unexpected_error("fetching user profile", e) from e


@router.put("/profile")
async def update_profile(
    req: UpdateUserRequest,
    identity: Identity = Depends(verify_token),
    store=Depends(get_store),
):
    try:
        user = _profile(store, identity.uid)
        if req.email:
            taken = [
                u
                for u in store.list(USERS, [("email", "==", req.email)])
                if u["id"] != user["id"]
            ]
            if taken:
                raise ValidationError("Email already in use")
        updated = store.update(USERS, user["id"], req.changes())
        State.logger.info(f"Updated user profile: {identity.uid}")
        return updated
    except ServiceError:
        raise
    except Exception as e:
        raise unexpected_error("updating user profile", e) from e


@router.delete("/profile")
async def delete_profile(
    identity: Identity = Depends(verify_token),
    store=Depends(get_store),
    blobs=Depends(get_blob_store),
):
    try:
        delete_user_data(identity.uid, store, blobs)
        return {"success": True, "message": "User profile deleted successfully"}
    except ServiceError:
        raise
    except Exception as e:
        raise unexpected_error("deleting user profile", e) from e


@router.get("/stats")
async def get_stats(
    identity: Identity = Depends(verify_token),
    store=Depends(get_store),
):
    try:
        owned = [("userId", "==", identity.uid)]
        patients = store.list(PATIENTS, owned)
        sessions = store.list(SESSIONS, owned)
        templates = store.list(TEMPLATES, owned)
        return {
            "totalPatients": len(patients),
            "totalSessions": len(sessions),
            "totalTemplates": len(templates),
            "completedSessions": sum(
                1 for s in sessions if s.get("status") == SessionStatus.COMPLETED.value
            ),
            "pendingSessions": sum(
                1 for s in sessions if s.get("status") == SessionStatus.IN_PROGRESS.value
            ),
        }
    except ServiceError:
        raise
    except Exception as e:
        raise unexpected_error("fetching user stats", e) from e
