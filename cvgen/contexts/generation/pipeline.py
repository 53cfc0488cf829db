"""
Generation pipeline.

DocumentPipeline composes asset resolution, workspace staging, compilation and
output finalization into two operations:

- generate(): one-shot render, returns the document path
- watch(): render, then re-render whenever a source file changes, until the
  caller sets a stop event

Validation errors surface before any workspace exists. Once a workspace is
allocated it is removed on every exit path, and the job passes through
CLEANING_UP before it ends in DONE or FAILED. Nothing is retried.
"""

import threading
from pathlib import Path
from typing import Callable, Iterable, Optional, Tuple

from cvgen.config import Settings, load_settings
from cvgen.contexts.generation.logger import (
    _log_debug,
    _log_error,
    _log_info,
    _log_warning,
    log_job_end,
    log_job_start,
)
from cvgen.contexts.generation.models import (
    GenerationJob,
    GenerationRequest,
    GenerationResult,
    JobState,
    RenderOutcome,
    WatchPolicy,
    WatchSummary,
)
from cvgen.contexts.generation.watcher import SourceWatcher
from cvgen.contexts.intake.persons import tenant_data_dir
from cvgen.contexts.intake.resolver import AssetResolver, ResolvedAssets
from cvgen.contexts.rendering.compiler import compile_document
from cvgen.contexts.rendering.output import finalize, output_filename, output_path, page_count
from cvgen.contexts.rendering.workspace import Workspace, staging_plan
from cvgen.exceptions import GenerationError
from cvgen.utils.event_logging import log_job_event

RenderCallback = Callable[[RenderOutcome], None]


class DocumentPipeline:
    """
    Orchestrates generation jobs.

    A pipeline holds no per-job state, so one instance can serve many
    concurrent jobs (e.g. from the API's thread pool).

    Example:
        pipeline = DocumentPipeline(load_settings())
        request = pipeline.request("Jane Doe", lang="fr", template="keyteo")
        result = pipeline.generate(request)
        print(result.pdf_path)  # output/jane-doe_keyteo_fr.pdf
    """

    def __init__(self, settings: Optional[Settings] = None, resolver: Optional[AssetResolver] = None):
        self.settings = settings or load_settings()
        self.resolver = resolver or AssetResolver()

    def request(
        self,
        person: str,
        lang: Optional[str] = None,
        template: Optional[str] = None,
        tenant: Optional[str] = None,
    ) -> GenerationRequest:
        """Build a normalized request rooted in this pipeline's configured directories."""
        return GenerationRequest.create(
            person=person,
            lang=lang,
            template=template,
            data_dir=tenant_data_dir(self.settings.data_root, tenant),
            output_dir=self.settings.output_root,
            templates_dir=self.settings.templates_root,
        )

    # ------------------------------------------------------------------
    # One-shot generation
    # ------------------------------------------------------------------

    def generate(
        self,
        request: GenerationRequest,
        timeout: Optional[float] = None,
        job: Optional[GenerationJob] = None,
    ) -> GenerationResult:
        """
        Render one document.

        Args:
            request: What to generate
            timeout: Compiler timeout in seconds (default: settings.compile_timeout)
            job: Pre-built job to track state in (a new one is created otherwise)

        Returns:
            GenerationResult pointing at {output_dir}/{person}_{template}_{lang}.{ext}

        Raises:
            GenerationError: Any resolution, staging, compile or output failure
        """
        job = job or GenerationJob(request=request)
        log_job_start(job.job_id, request.person, request.template.value, request.lang)

        workspace = None
        succeeded = False
        try:
            self._advance(job, JobState.RESOLVING)
            assets = self.resolver.resolve(request)

            self._advance(job, JobState.STAGING)
            workspace = self._stage(job, assets)

            result = self._render(job, workspace, assets, timeout)
            succeeded = True
            return result
        except BaseException as e:
            job.error = e
            raise
        finally:
            self._finish(job, workspace, succeeded)

    def render_bytes(
        self,
        request: GenerationRequest,
        timeout: Optional[float] = None,
        keep_output: bool = True,
    ) -> Tuple[bytes, str]:
        """
        Generate a document and return its content, for request/response callers.

        Args:
            keep_output: Leave the document in the output root after reading it

        Returns:
            (document bytes, filename)
        """
        result = self.generate(request, timeout=timeout)
        data = result.pdf_path.read_bytes()
        if not keep_output:
            result.pdf_path.unlink(missing_ok=True)
        return data, result.pdf_path.name

    # ------------------------------------------------------------------
    # Watch mode
    # ------------------------------------------------------------------

    def watch(
        self,
        request: GenerationRequest,
        stop_event: Optional[threading.Event] = None,
        policy: WatchPolicy = WatchPolicy.STOP,
        poll_interval: Optional[float] = None,
        timeout: Optional[float] = None,
        on_render: Optional[RenderCallback] = None,
    ) -> WatchSummary:
        """
        Render, then re-render on every source change until stopped.

        Resolution and staging happen once. Each detected change re-copies only
        the changed sources into the same workspace and re-enters compilation.

        Args:
            request: What to generate
            stop_event: Set by the caller to end the session (e.g. from a signal handler)
            policy: STOP propagates the first failed render and ends the session;
                    CONTINUE records it and keeps watching
            poll_interval: Seconds between source polls (default: settings.watch_interval)
            timeout: Compiler timeout per render
            on_render: Called after every render attempt with its outcome

        Returns:
            WatchSummary of all render attempts

        Raises:
            GenerationError: Resolution/staging failures, and render failures under STOP
        """
        stop_event = stop_event or threading.Event()
        interval = poll_interval if poll_interval is not None else self.settings.watch_interval
        policy = WatchPolicy(policy)

        job = GenerationJob(request=request)
        summary = WatchSummary(job_id=job.job_id)
        log_job_start(job.job_id, request.person, request.template.value, request.lang)
        _log_info(f"[{job.job_id}] Watch mode ({policy.value} on failure), polling every {interval}s")

        workspace = None
        succeeded = False
        try:
            self._advance(job, JobState.RESOLVING)
            assets = self.resolver.resolve(request)

            self._advance(job, JobState.STAGING)
            workspace = self._stage(job, assets)
            watcher = SourceWatcher(workspace.sources())

            changed: Iterable[Path] = ()
            while True:
                outcome = self._watch_render(job, workspace, assets, timeout, changed, summary, policy)
                if on_render is not None:
                    on_render(outcome)

                changed = watcher.wait_for_change(stop_event, interval)
                if not changed:
                    break
                _log_info(f"[{job.job_id}] Change detected: {', '.join(p.name for p in changed)}")

            _log_info(f"[{job.job_id}] Watch stopped after {len(summary.outcomes)} renders")
            succeeded = True
            return summary
        except BaseException as e:
            job.error = e
            raise
        finally:
            self._finish(job, workspace, succeeded)

    def _watch_render(
        self,
        job: GenerationJob,
        workspace: Workspace,
        assets: ResolvedAssets,
        timeout: Optional[float],
        changed: Iterable[Path],
        summary: WatchSummary,
        policy: WatchPolicy,
    ) -> RenderOutcome:
        outcome = RenderOutcome(attempt=len(summary.outcomes) + 1)
        try:
            if changed:
                workspace.refresh(changed)
            outcome.result = self._render(job, workspace, assets, timeout)
        except GenerationError as e:
            outcome.error = e
            summary.outcomes.append(outcome)
            self._record_event(
                "render_failed",
                job_id=job.job_id,
                attempt=outcome.attempt,
                error=e.kind,
                detail=e.message,
            )
            if policy is WatchPolicy.STOP:
                raise
            _log_error(f"[{job.job_id}] Render {outcome.attempt} failed, still watching: {e.kind}: {e.message}")
            return outcome

        summary.outcomes.append(outcome)
        return outcome

    # ------------------------------------------------------------------
    # Shared steps
    # ------------------------------------------------------------------

    def _stage(self, job: GenerationJob, assets: ResolvedAssets) -> Workspace:
        workspace = Workspace.allocate(self.settings.workspace_base, assets.request.person, job.job_id)
        job.workspace_dir = workspace.path
        try:
            workspace.stage(staging_plan(assets))
        except BaseException:
            workspace.remove()
            raise
        return workspace

    def _render(
        self,
        job: GenerationJob,
        workspace: Workspace,
        assets: ResolvedAssets,
        timeout: Optional[float],
    ) -> GenerationResult:
        request = assets.request
        ext = self.settings.output_format
        timeout = timeout if timeout is not None else self.settings.compile_timeout

        self._advance(job, JobState.COMPILING)
        produced = workspace.file(output_filename(request.person, request.template, request.lang, ext))
        compiled = compile_document(
            self.settings.compiler_command,
            workspace,
            assets.spec.template_file,
            produced,
            request.lang,
            timeout=timeout,
        )

        self._advance(job, JobState.FINALIZING)
        pdf_path = finalize(produced, output_path(request, ext), job.job_id)

        return GenerationResult(
            pdf_path=pdf_path,
            job_id=job.job_id,
            workspace_dir=workspace.path,
            elapsed_s=compiled.elapsed_s,
            page_count=page_count(pdf_path) if ext == "pdf" else None,
            warnings=tuple(assets.warnings) + tuple(workspace.warnings) + tuple(compiled.warnings),
        )

    def _finish(self, job: GenerationJob, workspace: Optional[Workspace], succeeded: bool) -> None:
        try:
            self._advance(job, JobState.CLEANING_UP)
        finally:
            if workspace is not None:
                workspace.remove()
        self._advance(job, JobState.DONE if succeeded else JobState.FAILED)

        if succeeded:
            log_job_end(job.job_id, True, "Job completed")
        elif isinstance(job.error, GenerationError):
            log_job_end(job.job_id, False, f"{job.error.kind}: {job.error.message}")
        else:
            log_job_end(job.job_id, False, f"Job aborted: {job.error!r}")

    def _advance(self, job: GenerationJob, state: JobState) -> None:
        previous = job.state
        job.advance(state)
        _log_debug(f"[{job.job_id}] {previous.value} -> {state.value}")
        self._record_event(
            "state_change",
            job_id=job.job_id,
            person=job.request.person,
            template=job.request.template.value,
            lang=job.request.lang,
            old_state=previous.value,
            new_state=state.value,
        )

    def _record_event(self, event_type: str, job_id: str, **fields) -> None:
        """Append to the event log; a failed write is logged, never raised."""
        try:
            log_job_event(self.settings.events_path, event_type=event_type, job_id=job_id, **fields)
        except OSError as e:
            _log_warning(f"[{job_id}] Could not record {event_type} event: {e}")
