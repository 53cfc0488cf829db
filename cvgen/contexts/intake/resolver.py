"""
Asset resolution.

Turns a GenerationRequest into the concrete set of files a job needs, checking
that every mandatory one exists before any workspace is created. Resolution
only reads the filesystem; files can still change afterwards (a staging error
then reports it).
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Tuple

from cvgen.contexts.generation.models import GenerationRequest
from cvgen.contexts.intake.image_validator import validate_profile_image
from cvgen.contexts.intake.languages import SUPPORTED_LANGUAGES
from cvgen.contexts.intake.logger import _log_debug, _log_warning
from cvgen.contexts.intake.persons import (
    LOGO_FILE,
    PROFILE_DATA_FILE,
    PROFILE_IMAGE_FILE,
    content_filename,
    person_dir,
)
from cvgen.contexts.templating.template_registry import TemplateRegistry, VariantSpec
from cvgen.exceptions import (
    InvalidImage,
    InvalidLanguage,
    MissingAsset,
    PersonNotFound,
)


@dataclass(frozen=True)
class ResolvedAssets:
    """
    Source files for one job, all confirmed to exist at resolution time.

    Attributes:
        request: The request these assets were resolved for
        spec: Template variant specification
        person_dir: Person directory
        profile_data: cv_params.toml
        content: experiences_{lang}.typ for the requested language
        template: Primary template file of the variant
        base_template: Shared base template (None if absent)
        profile_image: Valid profile image (None if absent or unusable)
        logos: Staged filename -> source path for logo files that were found
        warnings: Non-fatal problems noticed during resolution
    """

    request: GenerationRequest
    spec: VariantSpec
    person_dir: Path
    profile_data: Path
    content: Path
    template: Path
    base_template: Optional[Path] = None
    profile_image: Optional[Path] = None
    logos: Dict[str, Path] = field(default_factory=dict)
    warnings: Tuple[str, ...] = ()


class AssetResolver:
    """Locates and validates the inputs of a generation request."""

    def resolve(self, request: GenerationRequest) -> ResolvedAssets:
        """
        Resolve every file the request needs.

        Checks, in order: language, person directory, profile data, content
        file, primary template. Optional assets (profile image, logos, base
        template) never fail resolution.

        Raises:
            InvalidLanguage: If the language is not supported
            PersonNotFound: If the person directory is missing
            MissingAsset: Naming the first mandatory file that is missing
        """
        if request.lang not in SUPPORTED_LANGUAGES:
            raise InvalidLanguage(request.lang, SUPPORTED_LANGUAGES)

        directory = person_dir(request.data_dir, request.person)
        if not directory.is_dir():
            raise PersonNotFound(request.person, directory)

        profile_data = directory / PROFILE_DATA_FILE
        if not profile_data.is_file():
            raise MissingAsset("profile_data", profile_data)

        content = directory / content_filename(request.lang)
        if not content.is_file():
            raise MissingAsset(f"content_{request.lang}", content)

        registry = TemplateRegistry(request.templates_dir)
        spec = registry.spec(request.template)
        template = registry.get_template_path(request.template)
        if not template.is_file():
            raise MissingAsset("template", template)

        warnings = []

        base_template = registry.get_base_template_path()
        if not base_template.is_file():
            warnings.append(f"Base template not found: {base_template}")
            base_template = None

        profile_image = directory / PROFILE_IMAGE_FILE
        try:
            if not validate_profile_image(profile_image):
                _log_debug(f"No profile image at {profile_image}; rendering without photo")
                profile_image = None
        except InvalidImage as e:
            warnings.append(f"Skipping profile image: {e.message}")
            profile_image = None

        logos = self._resolve_logos(request, directory, spec, registry)

        for warning in warnings:
            _log_warning(warning)

        return ResolvedAssets(
            request=request,
            spec=spec,
            person_dir=directory,
            profile_data=profile_data,
            content=content,
            template=template,
            base_template=base_template,
            profile_image=profile_image,
            logos=logos,
            warnings=tuple(warnings),
        )

    def _resolve_logos(
        self,
        request: GenerationRequest,
        directory: Path,
        spec: VariantSpec,
        registry: TemplateRegistry,
    ) -> Dict[str, Path]:
        """
        Pick a source for each logo the variant stages.

        Lookup order per staged name: person directory, tenant data root, then
        the variant's auxiliary file in the template root. company_logo.png is
        always looked up so person/tenant logos work with every variant.
        """
        sources = {asset.staged_as: asset for asset in spec.assets}
        sources.setdefault(LOGO_FILE, None)

        logos = {}
        for staged_as, asset in sources.items():
            candidates = [directory / staged_as, request.data_dir / staged_as]
            if asset is not None:
                candidates.append(registry.get_asset_path(asset))

            found = next((c for c in candidates if c.is_file()), None)
            if found is not None:
                _log_debug(f"Using {found} as {staged_as}")
                logos[staged_as] = found
        return logos
