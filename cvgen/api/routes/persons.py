"""Person management endpoints: scaffolding, profile pictures and listing."""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from pydantic import BaseModel

from cvgen.api.dependencies import get_settings
from cvgen.config import Settings
from cvgen.contexts.intake.persons import (
    list_persons,
    normalize_person_name,
    save_profile_picture,
    tenant_data_dir,
)
from cvgen.contexts.templating.scaffold import create_person

router = APIRouter(tags=["persons"])


class CreateBody(BaseModel):
    person: str
    tenant: Optional[str] = None


@router.post("/create", status_code=201, summary="Scaffold a new person directory")
def create(body: CreateBody, settings: Settings = Depends(get_settings)) -> dict:
    data_dir = tenant_data_dir(settings.data_root, body.tenant)
    directory = create_person(data_dir, settings.templates_root, body.person)
    return {"person": directory.name, "message": f"Person {directory.name} created"}


@router.post("/upload-picture", summary="Upload a person's profile picture")
def upload_picture(
    person: str = Form(...),
    file: UploadFile = File(...),
    tenant: Optional[str] = Form(None),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Validate the upload as a PNG image and store it as profile.png."""
    person_id = normalize_person_name(person)
    try:
        data = file.file.read()
    finally:
        file.file.close()

    target = save_profile_picture(tenant_data_dir(settings.data_root, tenant), person_id, data)
    return {"person": person_id, "file": target.name, "size": len(data)}


@router.get("/persons", summary="List persons with profile data")
def persons(tenant: Optional[str] = None, settings: Settings = Depends(get_settings)) -> dict:
    return {"persons": list_persons(tenant_data_dir(settings.data_root, tenant))}
