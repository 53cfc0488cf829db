"""Unit tests for output naming and finalization."""

import pytest

from cvgen.contexts.generation.models import GenerationRequest
from cvgen.contexts.rendering.output import finalize, output_filename, output_path, page_count
from cvgen.contexts.templating.template_registry import TemplateVariant
from cvgen.exceptions import OutputMissing


@pytest.mark.unit
def test_output_filename():
    assert output_filename("jane-doe", TemplateVariant.KEYTEO_FULL, "fr") == "jane-doe_keyteo_full_fr.pdf"
    assert output_filename("jane-doe", TemplateVariant.DEFAULT, "en", "png") == "jane-doe_default_en.png"


@pytest.mark.unit
def test_output_path_is_under_output_root(tmp_path):
    request = GenerationRequest.create(
        person="Jane Doe",
        lang="english",
        template="Keyteo",
        data_dir=tmp_path / "data",
        output_dir=tmp_path / "out",
        templates_dir=tmp_path / "templates",
    )

    assert output_path(request) == (tmp_path / "out" / "jane-doe_keyteo_en.pdf").resolve()


@pytest.mark.unit
def test_finalize_moves_and_overwrites(tmp_path):
    destination = tmp_path / "out" / "doc.pdf"

    for content in (b"first", b"second"):
        produced = tmp_path / "ws" / "doc.pdf"
        produced.parent.mkdir(exist_ok=True)
        produced.write_bytes(content)

        assert finalize(produced, destination, "job") == destination
        assert not produced.exists()

    assert destination.read_bytes() == b"second"
    assert sorted(p.name for p in destination.parent.iterdir()) == ["doc.pdf"]


@pytest.mark.unit
def test_finalize_missing_output(tmp_path):
    with pytest.raises(OutputMissing) as exc_info:
        finalize(tmp_path / "never-written.pdf", tmp_path / "out" / "doc.pdf", "job")

    assert exc_info.value.http_status == 500
    assert not (tmp_path / "out" / "doc.pdf").exists()


@pytest.mark.unit
def test_page_count_of_unreadable_file(tmp_path):
    bogus = tmp_path / "bogus.pdf"
    bogus.write_bytes(b"%PDF-1.7 fake")

    assert page_count(bogus) is None
    assert page_count(tmp_path / "absent.pdf") is None
