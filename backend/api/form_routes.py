from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field, ValidationError
from typing import List, Optional
import logging

from backend.models.forms import FormInstance, FormTemplate
from backend.services.form_store import FormStore

logger = logging.getLogger(__name__)

router = APIRouter()

def get_store(request: Request) -> FormStore:
    return request.app.state.store

class CreateInstanceRequest(BaseModel):
    form: str = Field(..., examples=["form1"])
    contents: List[Optional[str]] = Field(..., examples=[["Hello", "World"]])

class ReplaceInstanceRequest(BaseModel):
    contents: List[Optional[str]] = Field(..., examples=[["Goodbye", "World"]])

# Handlers are async so every store call runs on the event loop that owns the store.

# ---------- Forms ----------
@router.get("/forms", response_model=List[str])
async def list_forms(store: FormStore = Depends(get_store)):
    return store.list_all_forms()

@router.get("/forms/{name:path}", response_model=FormTemplate, response_model_exclude_none=True)
async def get_form(name: str, store: FormStore = Depends(get_store)):
    form = store.get_form(name)
    if form is None:
        raise HTTPException(status_code=404, detail="form not found")
    return form

# ---------- Instances ----------
@router.post("/instances", response_class=PlainTextResponse)
async def create_instance(req: CreateInstanceRequest, store: FormStore = Depends(get_store)):
    instance_id = store.create(req.form, req.contents)
    if instance_id is None:
        raise HTTPException(status_code=400, detail="unknown form or wrong number of contents")
    return instance_id

@router.get("/instances/{instance_id}", response_model=FormInstance)
async def get_instance(instance_id: str, store: FormStore = Depends(get_store)):
    instance = store.get_instance(instance_id)
    if instance is None:
        raise HTTPException(status_code=404, detail="instance not found")
    return instance

@router.patch(
    "/instances/{instance_id}",
    openapi_extra={"requestBody": {"content": {"application/json": {"schema": ReplaceInstanceRequest.model_json_schema()}}}},
)
async def replace_instance(instance_id: str, request: Request, store: FormStore = Depends(get_store)):
    # body is parsed by hand so an unknown id is a 404 even when the body is malformed
    if store.get_instance(instance_id) is None:
        raise HTTPException(status_code=404, detail="instance not found")
    try:
        req = ReplaceInstanceRequest.model_validate(await request.json())
    except (ValueError, ValidationError):
        logger.info("Badly formatted patch for instance %s", instance_id)
        raise HTTPException(status_code=400, detail="body must be {\"contents\": [string, ...]}")
    if any(c is None for c in req.contents):
        logger.info("Badly formatted patch for instance %s", instance_id)
        raise HTTPException(status_code=400, detail="contents must not contain null")
    if not store.replace(instance_id, req.contents):
        logger.info("Badly formatted patch for instance %s", instance_id)
        raise HTTPException(status_code=400, detail="wrong number of contents")
    return True

@router.delete("/instances/{instance_id}")
async def delete_instance(instance_id: str, store: FormStore = Depends(get_store)):
    if not store.remove(instance_id):
        raise HTTPException(status_code=404, detail="instance not found")
    return True
