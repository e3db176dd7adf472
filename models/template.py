TEMPLATES = "templates"


def new_template_document(user_id: str, title: str, type: str = "custom", content: str | None = None) -> dict:
    return {"userId": user_id, "title": title, "type": type or "custom", "content": content}
