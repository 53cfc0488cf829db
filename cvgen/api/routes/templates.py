"""Template discovery endpoint."""

from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from cvgen.api.dependencies import get_settings
from cvgen.config import Settings
from cvgen.contexts.templating.template_registry import TemplateRegistry

router = APIRouter(tags=["templates"])


class TemplateListItem(BaseModel):
    name: str
    description: str


@router.get("/templates", response_model=List[TemplateListItem], summary="List template variants")
def list_templates(settings: Settings = Depends(get_settings)) -> List[TemplateListItem]:
    """Variants whose primary template exists (the default variant is always listed)."""
    return [
        TemplateListItem(name=variant.name, description=variant.description)
        for variant in TemplateRegistry(settings.templates_root).list_variants()
    ]
