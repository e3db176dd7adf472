from fastapi import APIRouter, Depends, Query

from controllers.cascade import delete_patient as cascade_delete_patient
from controllers.cascade import ensure_owner
from core.auth import Identity, optional_verify_token, verify_token
from core.dependencies import get_blob_store, get_store
from core.errors import NotFoundError, ServiceError, ValidationError, unexpected_error
from models.patient import PATIENTS, new_patient_document
from models.session import SESSIONS, session_summary
from schema.patient import CreatePatientRequest, UpdatePatientRequest
from utils.state import State

router = APIRouter()


@router.get("/patients")
async def get_patients(
    user_id: str | None = Query(None, alias="userId", description="Owner of the patients"),
    identity: Identity = Depends(optional_verify_token),
    store=Depends(get_store),
):
    try:
        if not user_id:
            raise ValidationError("userId is required")
        patients = store.list(PATIENTS, [("userId", "==", user_id)])
        State.logger.info(f"Retrieved {len(patients)} patients for user: {user_id}")
        return {"patients": patients}
    except ServiceError:
        raise
    except Exception as e:
        raise unexpected_error("fetching patients", e) from e


@router.post("/add-patient-ext", status_code=201)
async def create_patient(
    req: CreatePatientRequest,
    identity: Identity = Depends(verify_token),
    store=Depends(get_store),
):
    try:
        details = req.changes()
        details.pop("name", None)
        patient = store.create(
            PATIENTS, new_patient_document(identity.uid, req.name, **details)
        )
        State.logger.info(f"Created patient: {patient['id']} for user: {identity.uid}")
        return {"patient": patient}
    except ServiceError:
        raise
    except Exception as e:
        raise unexpected_error("creating patient", e) from e


@router.get("/patient-details/{patient_id}")
async def get_patient(
    patient_id: str,
    identity: Identity = Depends(optional_verify_token),
    store=Depends(get_store),
):
    try:
        patient = store.get(PATIENTS, patient_id)
        if not patient:
            raise NotFoundError("Patient not found")
        return patient
    except ServiceError:
        raise
    except Exception as e:
        raise unexpected_error("fetching patient", e) from e


@router.put("/patients/{patient_id}")
async def update_patient(
    patient_id: str,
    req: UpdatePatientRequest,
    identity: Identity = Depends(verify_token),
    store=Depends(get_store),
):
    try:
        ensure_owner(store.get(PATIENTS, patient_id), identity.uid, "Patient")
        patient = store.update(PATIENTS, patient_id, req.changes())
        State.logger.info(f"Updated patient: {patient_id}")
        return {"patient": patient}
    except ServiceError:
        raise
    except Exception as e:
        raise unexpected_error("updating patient", e) from e


@router.delete("/patients/{patient_id}")
async def delete_patient(
    patient_id: str,
    identity: Identity = Depends(verify_token),
    store=Depends(get_store),
    blobs=Depends(get_blob_store),
):
    try:
        cascade_delete_patient(patient_id, identity.uid, store, blobs)
        return {"success": True, "message": "Patient deleted successfully"}
    except ServiceError:
        raise
    except Exception as e:
        raise unexpected_error("deleting patient", e) from e


@router.get("/fetch-session-by-patient/{patient_id}")
async def get_patient_sessions(
    patient_id: str,
    identity: Identity = Depends(optional_verify_token),
    store=Depends(get_store),
):
    try:
        sessions = store.list(SESSIONS, [("patientId", "==", patient_id)])
        State.logger.info(f"Retrieved {len(sessions)} sessions for patient: {patient_id}")
        return {"sessions": [session_summary(s) for s in sessions]}
    except ServiceError:
        raise
    except Exception as e:
        raise unexpected_error("fetching patient sessions", e) from e
