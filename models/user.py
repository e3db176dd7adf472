USERS = "users"


def new_user_document(uid: str, email: str, name: str | None = None) -> dict:
    return {"uid": uid, "email": email, "name": name or None}
