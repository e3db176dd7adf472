PATIENTS = "patients"


def new_patient_document(user_id: str, name: str, **details) -> dict:
    return {"userId": user_id, "name": name, **details}
