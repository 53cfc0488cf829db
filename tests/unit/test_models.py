"""Unit tests for generation requests and the job state machine."""

import pytest

from cvgen.contexts.generation.models import (
    GenerationJob,
    GenerationRequest,
    JobState,
    RenderOutcome,
    WatchSummary,
)
from cvgen.contexts.templating.template_registry import TemplateVariant
from cvgen.exceptions import CompileFailed, InvalidLanguage, InvalidPerson, UnsupportedVariant


@pytest.fixture
def request_(tmp_path):
    return GenerationRequest.create(
        person="Jane Doe",
        lang=None,
        template=None,
        data_dir=tmp_path,
        output_dir=tmp_path / "out",
        templates_dir=tmp_path / "templates",
    )


@pytest.mark.unit
def test_create_applies_defaults(request_, tmp_path):
    assert request_.person == "jane-doe"
    assert request_.lang == "en"
    assert request_.template is TemplateVariant.DEFAULT
    assert request_.output_dir.is_absolute()


@pytest.mark.unit
@pytest.mark.parametrize(
    "kwargs, error",
    [
        ({"person": "../.."}, InvalidPerson),
        ({"lang": "klingon"}, InvalidLanguage),
        ({"template": "glossy"}, UnsupportedVariant),
    ],
)
def test_create_rejects_bad_input(tmp_path, kwargs, error):
    params = dict(person="jane", lang="en", template="default")
    params.update(kwargs)

    with pytest.raises(error):
        GenerationRequest.create(
            data_dir=tmp_path, output_dir=tmp_path, templates_dir=tmp_path, **params
        )


@pytest.mark.unit
def test_job_happy_path(request_):
    job = GenerationJob(request=request_)
    for state in (
        JobState.RESOLVING,
        JobState.STAGING,
        JobState.COMPILING,
        JobState.FINALIZING,
        JobState.CLEANING_UP,
        JobState.DONE,
    ):
        job.advance(state)

    assert job.finished
    assert job.history[0] is JobState.IDLE
    assert job.history[-2:] == [JobState.CLEANING_UP, JobState.DONE]


@pytest.mark.unit
def test_job_ids_are_unique(request_):
    assert GenerationJob(request=request_).job_id != GenerationJob(request=request_).job_id


@pytest.mark.unit
@pytest.mark.parametrize(
    "path",
    [
        [JobState.COMPILING],
        [JobState.RESOLVING, JobState.FAILED],
        [JobState.RESOLVING, JobState.STAGING, JobState.DONE],
        [JobState.RESOLVING, JobState.CLEANING_UP, JobState.FAILED, JobState.RESOLVING],
    ],
)
def test_job_rejects_illegal_transitions(request_, path):
    job = GenerationJob(request=request_)

    with pytest.raises(RuntimeError, match="Illegal job transition"):
        for state in path:
            job.advance(state)


@pytest.mark.unit
def test_watch_jobs_reenter_compiling(request_):
    job = GenerationJob(request=request_)
    for state in (JobState.RESOLVING, JobState.STAGING, JobState.COMPILING, JobState.FINALIZING):
        job.advance(state)

    job.advance(JobState.COMPILING)
    job.advance(JobState.COMPILING)
    job.advance(JobState.CLEANING_UP)
    job.advance(JobState.DONE)


@pytest.mark.unit
def test_watch_summary_counts():
    summary = WatchSummary(job_id="job")
    summary.outcomes.append(RenderOutcome(attempt=1))
    summary.outcomes.append(RenderOutcome(attempt=2, error=CompileFailed("error: boom", 1)))

    assert summary.renders == 1
    assert [e.kind for e in summary.failures] == ["CompileFailed"]
