"""
Document generation endpoint.

POST /generate renders a CV and returns it as application/pdf. The document is
also left in the output root under its deterministic name.
"""

import io
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from cvgen.api.dependencies import get_pipeline
from cvgen.contexts.generation.pipeline import DocumentPipeline

router = APIRouter(tags=["generate"])


class GenerateBody(BaseModel):
    person: str
    lang: Optional[str] = None
    template: Optional[str] = None
    tenant: Optional[str] = None


@router.post("/generate", summary="Render a CV to PDF")
def generate_document(
    body: GenerateBody,
    pipeline: DocumentPipeline = Depends(get_pipeline),
) -> StreamingResponse:
    """
    Render the person's CV in the requested language and template variant.

    Errors are reported as {"error": kind, "detail": message}: 400 for invalid
    language/template/person, 404 for missing person data, 500/504 for
    compiler failures.
    """
    request = pipeline.request(body.person, lang=body.lang, template=body.template, tenant=body.tenant)
    data, filename = pipeline.render_bytes(request)

    return StreamingResponse(
        io.BytesIO(data),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
