"""
Output management.

Documents are named deterministically from (person, variant, language) and
always land in the output root:

    {output_dir}/{person}_{template}_{lang}.{ext}

The compiler writes into the job workspace; finalize() then verifies the file
really exists and moves it into place with an atomic rename, so repeated or
concurrent jobs for the same tuple overwrite each other (last writer wins)
and never leave a truncated document behind.
"""

import os
import shutil
from pathlib import Path
from typing import Optional

from PyPDF2 import PdfReader

from cvgen.contexts.generation.models import GenerationRequest
from cvgen.contexts.rendering.logger import _log_info
from cvgen.contexts.templating.template_registry import TemplateVariant
from cvgen.exceptions import OutputMissing


def output_filename(person: str, template: TemplateVariant, lang: str, ext: str = "pdf") -> str:
    return f"{person}_{TemplateVariant(template).value}_{lang}.{ext}"


def output_path(request: GenerationRequest, ext: str = "pdf") -> Path:
    """Absolute destination of the request's document."""
    return Path(request.output_dir).resolve() / output_filename(
        request.person, request.template, request.lang, ext
    )


def finalize(produced: Path, destination: Path, job_id: str) -> Path:
    """
    Verify the compiler's output and move it to its final location.

    Args:
        produced: File the compiler was told to write (inside the workspace)
        destination: Deterministic output path
        job_id: Owning job, used to name the in-flight temporary file

    Returns:
        destination

    Raises:
        OutputMissing: If the compiler exited successfully but produced nothing
    """
    produced = Path(produced)
    destination = Path(destination)

    if not produced.is_file():
        raise OutputMissing(produced)

    destination.parent.mkdir(parents=True, exist_ok=True)
    partial = destination.with_name(f".{destination.name}.{job_id}.part")
    try:
        # Workspace and output root may be on different filesystems
        shutil.move(str(produced), str(partial))
        os.replace(partial, destination)
    except BaseException:
        partial.unlink(missing_ok=True)
        raise

    _log_info(f"[{job_id}] Document saved to: {destination}")
    return destination


def page_count(pdf_path: Path) -> Optional[int]:
    """Get page count from PDF, or None if unreadable."""
    try:
        reader = PdfReader(str(pdf_path))
        return len(reader.pages)
    except Exception:
        return None
