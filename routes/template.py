from fastapi import APIRouter, Depends, Query, Response

from controllers.cascade import ensure_owner
from core.auth import Identity, optional_verify_token, verify_token
from core.dependencies import get_store
from core.errors import NotFoundError, ServiceError, ValidationError, unexpected_error
from models.template import TEMPLATES, new_template_document
from schema.template import CreateTemplateRequest, UpdateTemplateRequest
from utils.state import State

router = APIRouter()


@router.get("/fetch-default-template-ext")
async def get_templates(
    user_id: str | None = Query(None, alias="userId", description="Owner of the templates"),
    identity: Identity = Depends(optional_verify_token),
    store=Depends(get_store),
):
    try:
        if not user_id:
            raise ValidationError("userId is required")
        templates = store.list(TEMPLATES, [("userId", "==", user_id)])
        State.logger.info(f"Retrieved {len(templates)} templates for user: {user_id}")
        return {"success": True, "data": templates}
    except ServiceError:
        raise
    except Exception as e:
        raise unexpected_error("fetching templates", e) from e


@router.post("/templates", status_code=201)
async def create_template(
    req: CreateTemplateRequest,
    identity: Identity = Depends(verify_token),
    store=Depends(get_store),
):
    try:
        template = store.create(
            TEMPLATES,
            new_template_document(identity.uid, req.title, req.type, req.content),
        )
        State.logger.info(f"Created template: {template['id']} for user: {identity.uid}")
        return template
    except ServiceError:
        raise
    except Exception as e:
        raise unexpected_error("creating template", e) from e


@router.get("/templates/{template_id}")
async def get_template(
    template_id: str,
    identity: Identity = Depends(optional_verify_token),
    store=Depends(get_store),
):
    try:
        template = store.get(TEMPLATES, template_id)
        if not template:
            raise NotFoundError("Template not found")
        return template
    except ServiceError:
        raise
    except Exception as e:
        raise unexpected_error("fetching template", e) from e


@router.put("/templates/{template_id}")
async def update_template(
    template_id: str,
    req: UpdateTemplateRequest,
    identity: Identity = Depends(verify_token),
    store=Depends(get_store),
):
    try:
        ensure_owner(store.get(TEMPLATES, template_id), identity.uid, "Template")
        template = store.update(TEMPLATES, template_id, req.changes())
        State.logger.info(f"Updated template: {template_id}")
        return template
    except ServiceError:
        raise
    except Exception as e:
        raise unexpected_error("updating template", e) from e


@router.delete("/templates/{template_id}", status_code=204)
async def delete_template(
    template_id: str,
    identity: Identity = Depends(verify_token),
    store=Depends(get_store),
):
    try:
        ensure_owner(store.get(TEMPLATES, template_id), identity.uid, "Template")
        store.delete(TEMPLATES, template_id)
        State.logger.info(f"Deleted template: {template_id}")
        return Response(status_code=204)
    except ServiceError:
        raise
    except Exception as e:
        raise unexpected_error("deleting template", e) from e
