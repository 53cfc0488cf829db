"""
Templating Context

Responsibilities:
- Maps template variant names to primary template files and auxiliary assets
- Lists available variants with descriptions
- Scaffolds new person directories from starter templates

Owns: Variant table, person scaffolding templates
Never: Compiles documents
"""

from cvgen.contexts.templating.template_registry import (
    TemplateRegistry,
    TemplateVariant,
    VariantDescriptor,
    variant_for,
)

__all__ = [
    "TemplateRegistry",
    "TemplateVariant",
    "VariantDescriptor",
    "variant_for",
]
