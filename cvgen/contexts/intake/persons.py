"""
Person directory layout.

Each person lives in {data_dir}/{person}/ and holds:
    cv_params.toml          profile data (mandatory)
    experiences_{lang}.typ  content per language (mandatory for the requested language)
    profile.png             profile image (optional)
    company_logo.png        logo override (optional)

A tenant may share a logo across its persons by placing company_logo.png in
the data root itself.
"""

import os
import re
import tempfile
from pathlib import Path
from typing import List, Optional

from cvgen.contexts.intake.image_validator import validate_image_bytes
from cvgen.contexts.intake.logger import _log_info
from cvgen.exceptions import InvalidPerson, PersonNotFound

PROFILE_DATA_FILE = "cv_params.toml"
CONTENT_FILE_PATTERN = "experiences_{lang}.typ"
PROFILE_IMAGE_FILE = "profile.png"
LOGO_FILE = "company_logo.png"

_SAFE_ID = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


def normalize_person_name(name: str) -> str:
    """
    Turn a display name into a directory-safe identifier.

    Lowercases, maps spaces/underscores/dots and any other non-alphanumeric
    character to '-', and collapses repeated dashes.

    Examples:
        normalize_person_name("Jane Doe")      # "jane-doe"
        normalize_person_name("  o'Brien_J. ") # "o-brien-j"
    """
    mapped = "".join(c if c.isalnum() else "-" for c in name.strip().lower())
    return "-".join(part for part in mapped.split("-") if part)


def ensure_safe_person_id(person: str) -> str:
    """
    Reject identifiers that could escape the data root.

    Raises:
        InvalidPerson: If the identifier is empty, contains a path separator or is '.'/'..'
    """
    if not person or person in (".", "..") or not _SAFE_ID.match(person):
        raise InvalidPerson(person)
    return person


def content_filename(lang: str) -> str:
    return CONTENT_FILE_PATTERN.format(lang=lang)


def tenant_data_dir(data_root: Path, tenant: Optional[str] = None) -> Path:
    """Data directory for a tenant, or the data root itself when no tenant is given."""
    if not tenant:
        return Path(data_root)
    normalized = normalize_person_name(tenant)
    ensure_safe_person_id(normalized)
    return Path(data_root) / normalized


def person_dir(data_dir: Path, person: str) -> Path:
    return Path(data_dir) / ensure_safe_person_id(person)


def list_persons(data_dir: Path) -> List[str]:
    """List persons (sorted) whose directory contains a profile data file."""
    data_dir = Path(data_dir)
    if not data_dir.is_dir():
        return []

    return sorted(
        entry.name
        for entry in data_dir.iterdir()
        if entry.is_dir() and (entry / PROFILE_DATA_FILE).is_file()
    )


def save_profile_picture(data_dir: Path, person: str, data: bytes) -> Path:
    """
    Validate an uploaded picture and store it as the person's profile image.

    The file is written to a temporary name and moved into place so a
    concurrently running job never stages a half-written image.

    Raises:
        PersonNotFound: If the person directory does not exist
        InvalidImage: If the bytes are not a usable PNG image
    """
    directory = person_dir(data_dir, person)
    if not directory.is_dir():
        raise PersonNotFound(person, directory)

    target = directory / PROFILE_IMAGE_FILE
    validate_image_bytes(data, target)

    fd, tmp_name = tempfile.mkstemp(prefix=".profile-", suffix=".part", dir=directory)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_name, target)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    _log_info(f"Saved profile picture for {person} ({len(data)} bytes)")
    return target
