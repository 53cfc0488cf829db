"""Unit tests for the template variant registry."""

from pathlib import Path

import pytest

from cvgen.contexts.templating.template_registry import (
    BASE_TEMPLATE_FILE,
    VARIANTS,
    TemplateRegistry,
    TemplateVariant,
    variant_for,
)
from cvgen.exceptions import UnsupportedVariant


@pytest.mark.unit
def test_every_variant_has_a_distinct_template_file():
    files = [VARIANTS[variant].template_file for variant in TemplateVariant]
    assert len(files) == len(set(files)) == len(TemplateVariant)


@pytest.mark.unit
@pytest.mark.parametrize(
    "name, expected",
    [
        ("default", TemplateVariant.DEFAULT),
        ("keyteo", TemplateVariant.KEYTEO),
        ("KEYTEO_FULL", TemplateVariant.KEYTEO_FULL),
        ("  Keyteo ", TemplateVariant.KEYTEO),
    ],
)
def test_variant_for_is_case_insensitive(name, expected):
    assert variant_for(name) is expected


@pytest.mark.unit
def test_variant_for_unknown_name():
    with pytest.raises(UnsupportedVariant) as exc_info:
        variant_for("fancy")

    assert exc_info.value.kind == "UnsupportedVariant"
    assert exc_info.value.http_status == 400
    assert "keyteo" in exc_info.value.message


@pytest.mark.unit
def test_template_paths(tmp_path):
    registry = TemplateRegistry(tmp_path)

    assert registry.get_template_path(TemplateVariant.DEFAULT) == tmp_path / "cv.typ"
    assert registry.get_template_path(TemplateVariant.KEYTEO) == tmp_path / "cv_keyteo.typ"
    assert registry.get_template_path(TemplateVariant.KEYTEO_FULL) == tmp_path / "cv_keyteo_full.typ"
    assert registry.get_base_template_path() == tmp_path / BASE_TEMPLATE_FILE


@pytest.mark.unit
def test_keyteo_variants_stage_their_logo_as_company_logo():
    for variant in (TemplateVariant.KEYTEO, TemplateVariant.KEYTEO_FULL):
        staged = [asset.staged_as for asset in VARIANTS[variant].assets]
        assert staged == ["company_logo.png"]
    assert VARIANTS[TemplateVariant.DEFAULT].assets == ()


@pytest.mark.unit
def test_list_variants_omits_missing_templates(tmp_path):
    (tmp_path / "cv.typ").write_text("", encoding="utf-8")
    (tmp_path / "cv_keyteo.typ").write_text("", encoding="utf-8")

    variants = TemplateRegistry(tmp_path).list_variants()

    assert [v.name for v in variants] == ["default", "keyteo"]
    assert all(v.available for v in variants)
    assert variants[1].description == VARIANTS[TemplateVariant.KEYTEO].description


@pytest.mark.unit
def test_list_variants_always_reports_default(tmp_path):
    variants = TemplateRegistry(tmp_path / "empty").list_variants()

    assert len(variants) == 1
    assert variants[0].name == "default"
    assert variants[0].available is False


@pytest.mark.unit
def test_repository_templates_cover_every_variant():
    templates = Path(__file__).resolve().parents[2] / "templates"
    registry = TemplateRegistry(templates)

    assert all(registry.template_exists(variant) for variant in TemplateVariant)
    assert registry.get_base_template_path().is_file()
