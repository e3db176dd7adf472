from enum import Enum

from utils.clock import utc_now_iso

SESSIONS = "sessions"


class SessionStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


def new_session_document(user_id: str, patient_id: str, patient_name: str | None = None) -> dict:
    return {
        "userId": user_id,
        "patientId": patient_id,
        "patientName": patient_name or None,
        "status": SessionStatus.IN_PROGRESS.value,
        "startTime": utc_now_iso(),
        "endTime": None,
        "chunksUploaded": 0,
        "totalChunks": 0,
        "templateId": None,
        "model": None,
    }


def session_summary(session: dict) -> dict:
    """Compact listing shape used by the patient and user session lists."""
    start_time = session.get("startTime")
    return {
        "id": session["id"],
        "userId": session.get("userId"),
        "patientId": session.get("patientId"),
        "patientName": session.get("patientName"),
        "status": session.get("status"),
        "date": start_time.split("T")[0] if start_time else None,
        "startTime": start_time,
        "endTime": session.get("endTime"),
        "sessionTitle": session.get("sessionTitle"),
    }
