"""Unit tests for asset resolution."""

import pytest

from conftest import LOGO_BYTES, PERSON
from cvgen.contexts.generation.models import GenerationRequest
from cvgen.contexts.intake.resolver import AssetResolver
from cvgen.contexts.templating.template_registry import TemplateVariant
from cvgen.exceptions import InvalidLanguage, MissingAsset, PersonNotFound


def make_request(data_dir, templates_dir, tmp_path, person=PERSON, lang="en", template=None):
    return GenerationRequest.create(
        person=person,
        lang=lang,
        template=template,
        data_dir=data_dir,
        output_dir=tmp_path / "output",
        templates_dir=templates_dir,
    )


@pytest.mark.unit
def test_resolve_default_variant(data_dir, templates_dir, tmp_path):
    request = make_request(data_dir, templates_dir, tmp_path)

    assets = AssetResolver().resolve(request)

    person = data_dir / PERSON
    assert assets.person_dir == person
    assert assets.profile_data == person / "cv_params.toml"
    assert assets.content == person / "experiences_en.typ"
    assert assets.template.name == "cv.typ"
    assert assets.base_template.name == "template.typ"
    assert assets.profile_image == person / "profile.png"
    assert assets.logos == {}
    assert assets.warnings == ()


@pytest.mark.unit
def test_resolve_missing_language_content(data_dir, templates_dir, tmp_path):
    request = make_request(data_dir, templates_dir, tmp_path, lang="de")

    with pytest.raises(MissingAsset) as exc_info:
        AssetResolver().resolve(request)

    assert exc_info.value.asset == "content_de"
    assert exc_info.value.path == data_dir / PERSON / "experiences_de.typ"
    assert exc_info.value.http_status == 404


@pytest.mark.unit
def test_resolve_unknown_person(data_dir, templates_dir, tmp_path):
    request = make_request(data_dir, templates_dir, tmp_path, person="nobody")

    with pytest.raises(PersonNotFound) as exc_info:
        AssetResolver().resolve(request)

    assert exc_info.value.path == data_dir / "nobody"


@pytest.mark.unit
def test_resolve_missing_profile_data(data_dir, templates_dir, tmp_path):
    (data_dir / PERSON / "cv_params.toml").unlink()
    request = make_request(data_dir, templates_dir, tmp_path)

    with pytest.raises(MissingAsset) as exc_info:
        AssetResolver().resolve(request)

    assert exc_info.value.asset == "profile_data"


@pytest.mark.unit
def test_resolve_missing_template(data_dir, templates_dir, tmp_path):
    (templates_dir / "cv_keyteo.typ").unlink()
    request = make_request(data_dir, templates_dir, tmp_path, template="keyteo")

    with pytest.raises(MissingAsset) as exc_info:
        AssetResolver().resolve(request)

    assert exc_info.value.asset == "template"
    assert exc_info.value.path == templates_dir / "cv_keyteo.typ"


@pytest.mark.unit
def test_resolve_rechecks_language(data_dir, templates_dir, tmp_path):
    request = make_request(data_dir, templates_dir, tmp_path)
    # Bypass create() normalization
    bogus = GenerationRequest(
        person=request.person,
        lang="xx",
        template=request.template,
        data_dir=request.data_dir,
        output_dir=request.output_dir,
        templates_dir=request.templates_dir,
    )

    with pytest.raises(InvalidLanguage):
        AssetResolver().resolve(bogus)


@pytest.mark.unit
def test_invalid_profile_image_is_skipped_with_warning(data_dir, templates_dir, tmp_path):
    (data_dir / PERSON / "profile.png").write_bytes(b"not an image at all")
    request = make_request(data_dir, templates_dir, tmp_path)

    assets = AssetResolver().resolve(request)

    assert assets.profile_image is None
    assert len(assets.warnings) == 1
    assert "profile image" in assets.warnings[0]


@pytest.mark.unit
def test_missing_base_template_is_a_warning(data_dir, templates_dir, tmp_path):
    (templates_dir / "template.typ").unlink()
    request = make_request(data_dir, templates_dir, tmp_path)

    assets = AssetResolver().resolve(request)

    assert assets.base_template is None
    assert any("Base template" in w for w in assets.warnings)


@pytest.mark.unit
def test_keyteo_logo_comes_from_template_root(data_dir, templates_dir, tmp_path):
    request = make_request(data_dir, templates_dir, tmp_path, template="keyteo")

    assets = AssetResolver().resolve(request)

    assert request.template is TemplateVariant.KEYTEO
    assert assets.logos == {"company_logo.png": templates_dir / "keyteo_logo.png"}


@pytest.mark.unit
def test_logo_lookup_prefers_person_then_tenant(data_dir, templates_dir, tmp_path):
    tenant_logo = data_dir / "company_logo.png"
    tenant_logo.write_bytes(LOGO_BYTES)
    request = make_request(data_dir, templates_dir, tmp_path, template="keyteo")

    assert AssetResolver().resolve(request).logos["company_logo.png"] == tenant_logo

    person_logo = data_dir / PERSON / "company_logo.png"
    person_logo.write_bytes(LOGO_BYTES)

    assert AssetResolver().resolve(request).logos["company_logo.png"] == person_logo


@pytest.mark.unit
def test_person_logo_used_with_default_variant(data_dir, templates_dir, tmp_path):
    person_logo = data_dir / PERSON / "company_logo.png"
    person_logo.write_bytes(LOGO_BYTES)
    request = make_request(data_dir, templates_dir, tmp_path)

    assert AssetResolver().resolve(request).logos == {"company_logo.png": person_logo}
