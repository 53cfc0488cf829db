"""
Template variant registry.

A variant is a named document layout/branding choice. The VARIANTS table is
the single place that binds a variant to its primary template file, its
description and the auxiliary assets (logos) staged next to it. Adding a
variant means adding one enum member and one table entry; the module refuses
to import if the two drift apart.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Tuple

from cvgen.exceptions import UnsupportedVariant

# Shared base template imported by every primary template
BASE_TEMPLATE_FILE = "template.typ"


class TemplateVariant(str, Enum):
    DEFAULT = "default"
    KEYTEO = "keyteo"
    KEYTEO_FULL = "keyteo_full"


@dataclass(frozen=True)
class AuxiliaryAsset:
    """
    File shipped in the template root and staged under a fixed name.

    Attributes:
        source: Filename in the template root
        staged_as: Filename the template expects inside the workspace
    """

    source: str
    staged_as: str


@dataclass(frozen=True)
class VariantSpec:
    template_file: str
    description: str
    assets: Tuple[AuxiliaryAsset, ...] = ()


KEYTEO_LOGO = AuxiliaryAsset(source="keyteo_logo.png", staged_as="company_logo.png")

VARIANTS: Dict[TemplateVariant, VariantSpec] = {
    TemplateVariant.DEFAULT: VariantSpec(
        template_file="cv.typ",
        description="Standard CV layout",
    ),
    TemplateVariant.KEYTEO: VariantSpec(
        template_file="cv_keyteo.typ",
        description="CV with Keyteo branding",
        assets=(KEYTEO_LOGO,),
    ),
    TemplateVariant.KEYTEO_FULL: VariantSpec(
        template_file="cv_keyteo_full.typ",
        description="Full-length CV with Keyteo branding",
        assets=(KEYTEO_LOGO,),
    ),
}


def _check_variant_table() -> None:
    unmapped = [variant.value for variant in TemplateVariant if variant not in VARIANTS]
    if unmapped:
        raise RuntimeError(f"Template variants without a file mapping: {unmapped}")

    files = [spec.template_file for spec in VARIANTS.values()]
    if len(set(files)) != len(files):
        raise RuntimeError(f"Template variants share a primary template file: {files}")


_check_variant_table()


@dataclass(frozen=True)
class VariantDescriptor:
    name: str
    description: str
    template_file: str
    available: bool


def variant_for(name: str) -> TemplateVariant:
    """
    Look up a variant by name (case-insensitive).

    Raises:
        UnsupportedVariant: If no variant has this name
    """
    try:
        return TemplateVariant(name.strip().lower())
    except ValueError:
        raise UnsupportedVariant(name, [v.value for v in TemplateVariant]) from None


class TemplateRegistry:
    """
    Resolves variants against a template root on disk.

    Lookups are pure; only list_variants() and the *_exists helpers touch the
    filesystem.
    """

    def __init__(self, templates_dir: Path):
        self.templates_dir = Path(templates_dir)

    def spec(self, variant: TemplateVariant) -> VariantSpec:
        return VARIANTS[variant]

    def get_template_path(self, variant: TemplateVariant) -> Path:
        """Path of the variant's primary template file."""
        return self.templates_dir / VARIANTS[variant].template_file

    def get_base_template_path(self) -> Path:
        return self.templates_dir / BASE_TEMPLATE_FILE

    def get_asset_path(self, asset: AuxiliaryAsset) -> Path:
        return self.templates_dir / asset.source

    def template_exists(self, variant: TemplateVariant) -> bool:
        return self.get_template_path(variant).is_file()

    def list_variants(self) -> List[VariantDescriptor]:
        """
        Describe the variants whose primary template exists.

        The default variant is always reported, flagged unavailable when its
        file is missing, so the listing is never empty.
        """
        descriptors = []
        for variant, spec in VARIANTS.items():
            available = self.template_exists(variant)
            if available or variant is TemplateVariant.DEFAULT:
                descriptors.append(
                    VariantDescriptor(
                        name=variant.value,
                        description=spec.description,
                        template_file=spec.template_file,
                        available=available,
                    )
                )
        return descriptors


def list_variants(templates_dir: Path) -> List[VariantDescriptor]:
    return TemplateRegistry(templates_dir).list_variants()
