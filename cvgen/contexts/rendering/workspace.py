"""
Job workspaces.

Every generation job compiles inside its own uniquely named directory holding
copies of its inputs under the filenames the templates expect:

    cv_params.toml      <- {person}/cv_params.toml
    experiences.typ     <- {person}/experiences_{lang}.typ
    profile.png         <- {person}/profile.png            (optional)
    company_logo.png    <- person, tenant or variant logo   (optional)
    <primary template>  <- {templates}/<variant file>
    template.typ        <- {templates}/template.typ         (optional)

Workspaces are never shared between jobs and never become the process working
directory; the compiler gets absolute paths and runs with the workspace as its
own cwd. Removal is guaranteed on every exit path and never raises.
"""

import shutil
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional

from cvgen.contexts.intake.persons import PROFILE_DATA_FILE, PROFILE_IMAGE_FILE
from cvgen.contexts.intake.resolver import ResolvedAssets
from cvgen.contexts.rendering.logger import _log_debug, _log_info, _log_warning
from cvgen.exceptions import StagingFailed

STAGED_CONTENT_FILE = "experiences.typ"
WORKSPACE_PREFIX = "cvgen-"


@dataclass(frozen=True)
class StagedFile:
    """
    One file to copy into a workspace.

    Attributes:
        name: Filename inside the workspace
        source: Original file
        asset: Asset label used in errors and logs
        mandatory: Whether a failed copy aborts the job
    """

    name: str
    source: Path
    asset: str
    mandatory: bool = True


def staging_plan(assets: ResolvedAssets) -> List[StagedFile]:
    """List the copies a job needs, mandatory files first."""
    lang = assets.request.lang
    plan = [
        StagedFile(PROFILE_DATA_FILE, assets.profile_data, "profile_data"),
        StagedFile(STAGED_CONTENT_FILE, assets.content, f"content_{lang}"),
        StagedFile(assets.template.name, assets.template, "template"),
    ]

    if assets.base_template is not None:
        plan.append(StagedFile(assets.base_template.name, assets.base_template, "base_template"))
    if assets.profile_image is not None:
        plan.append(
            StagedFile(PROFILE_IMAGE_FILE, assets.profile_image, "profile_image", mandatory=False)
        )
    for staged_as, source in sorted(assets.logos.items()):
        plan.append(StagedFile(staged_as, source, staged_as, mandatory=False))

    return plan


class Workspace:
    """
    A job-scoped directory of staged input copies.

    Attributes:
        path: Absolute workspace directory
        job_id: Owning job
        staged: Workspace filename -> StagedFile for every file copied in
        planned: Workspace filename -> StagedFile for every file staging was asked for
        warnings: Optional files that could not be staged
    """

    def __init__(self, path: Path, job_id: str):
        self.path = Path(path)
        self.job_id = job_id
        self.staged: Dict[str, StagedFile] = {}
        self.planned: Dict[str, StagedFile] = {}
        self.warnings: List[str] = []

    @classmethod
    def allocate(cls, workspace_root: Path, person: str, job_id: str) -> "Workspace":
        """Create a fresh, uniquely named directory under workspace_root."""
        workspace_root = Path(workspace_root)
        workspace_root.mkdir(parents=True, exist_ok=True)
        path = Path(tempfile.mkdtemp(prefix=f"{WORKSPACE_PREFIX}{person}-{job_id}-", dir=workspace_root))
        _log_debug(f"[{job_id}] Allocated workspace {path}")
        return cls(path.resolve(), job_id)

    def file(self, name: str) -> Path:
        return self.path / name

    def has(self, name: str) -> bool:
        return name in self.staged

    def stage(self, plan: Iterable[StagedFile]) -> None:
        """
        Copy every planned file into the workspace.

        Raises:
            StagingFailed: If a mandatory copy fails (optional failures are
                           recorded in self.warnings instead)
        """
        for item in plan:
            self._copy(item)
        _log_info(f"[{self.job_id}] Staged {len(self.staged)} files: {', '.join(sorted(self.staged))}")

    def _copy(self, item: StagedFile) -> None:
        self.planned[item.name] = item
        try:
            shutil.copy2(item.source, self.path / item.name)
        except OSError as e:
            if item.mandatory:
                raise StagingFailed(item.asset, str(e)) from e
            message = f"Could not stage optional {item.asset} from {item.source}: {e}"
            _log_warning(f"[{self.job_id}] {message}")
            self.warnings.append(message)
            return
        self.staged[item.name] = item

    def sources(self) -> List[Path]:
        """Original files behind every planned copy, staged or not."""
        return [item.source for item in self.planned.values()]

    def refresh(self, changed: Iterable[Path]) -> List[str]:
        """
        Re-copy planned files whose source changed.

        An optional source that disappeared is removed from the workspace and
        copied back in once it reappears; a mandatory one raises StagingFailed.

        Returns:
            Workspace filenames that were refreshed or removed
        """
        changed = {Path(p) for p in changed}
        touched = []
        for name, item in self.planned.items():
            if item.source not in changed:
                continue
            if not item.source.exists() and not item.mandatory:
                self.file(name).unlink(missing_ok=True)
                self.staged.pop(name, None)
                _log_info(f"[{self.job_id}] Removed {name}: source {item.source} is gone")
            else:
                self._copy(item)
            touched.append(name)
        return touched

    def remove(self) -> bool:
        """
        Delete the workspace directory.

        Failures are logged, never raised: by the time a workspace is removed
        the job's outcome is already decided.

        Returns:
            True if the directory no longer exists
        """
        try:
            shutil.rmtree(self.path)
        except FileNotFoundError:
            pass
        except OSError as e:
            _log_warning(f"[{self.job_id}] Failed to remove workspace {self.path}: {e}")
            shutil.rmtree(self.path, ignore_errors=True)

        removed = not self.path.exists()
        if removed:
            _log_debug(f"[{self.job_id}] Removed workspace {self.path}")
        else:
            _log_warning(f"[{self.job_id}] Workspace left behind: {self.path}")
        return removed


@contextmanager
def with_workspace(
    assets: ResolvedAssets, workspace_root: Path, job_id: Optional[str] = None
) -> Iterator[Workspace]:
    """
    Allocate and stage a workspace, removing it when the block exits.

    Removal happens on normal exit, on exceptions (including a failed staging
    step part-way through) and on KeyboardInterrupt.

    Example:
        with with_workspace(assets, Path("/tmp")) as workspace:
            compile_document(command, workspace, ...)
    """
    job_id = job_id or assets.request.person
    workspace = Workspace.allocate(workspace_root, assets.request.person, job_id)
    try:
        workspace.stage(staging_plan(assets))
        yield workspace
    finally:
        workspace.remove()
