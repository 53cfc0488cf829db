"""
Value objects for generation jobs.

GenerationRequest describes what to build and is immutable once created.
GenerationJob tracks one run through the job state machine:

    IDLE -> RESOLVING -> STAGING -> COMPILING -> FINALIZING -> CLEANING_UP -> DONE | FAILED

Any state may fail, but a job always passes through CLEANING_UP before it
terminates. Watch jobs re-enter COMPILING after FINALIZING (or after a failed
render when failures are tolerated).
"""

import uuid
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

from cvgen.contexts.intake.languages import normalize_language
from cvgen.contexts.intake.persons import ensure_safe_person_id, normalize_person_name
from cvgen.contexts.templating.template_registry import TemplateVariant, variant_for
from cvgen.exceptions import GenerationError


@dataclass(frozen=True)
class GenerationRequest:
    """
    One generation job's inputs.

    Attributes:
        person: Normalized person identifier (directory name under data_dir)
        lang: Supported language code
        template: Template variant
        data_dir: Person-data root (tenant directory)
        output_dir: Output root for generated documents
        templates_dir: Template root
    """

    person: str
    lang: str
    template: TemplateVariant
    data_dir: Path
    output_dir: Path
    templates_dir: Path

    @classmethod
    def create(
        cls,
        person: str,
        lang: Optional[str],
        template: Optional[str],
        data_dir: Path,
        output_dir: Path,
        templates_dir: Path,
    ) -> "GenerationRequest":
        """
        Build a request from raw user input.

        Normalizes the person name ("Jane Doe" -> "jane-doe"), language aliases
        ("french" -> "fr") and template name (case-insensitive), defaulting to
        English and the default variant.

        Raises:
            InvalidPerson, InvalidLanguage, UnsupportedVariant
        """
        return cls(
            person=ensure_safe_person_id(normalize_person_name(person)),
            lang=normalize_language(lang),
            template=variant_for(template) if template else TemplateVariant.DEFAULT,
            data_dir=Path(data_dir).resolve(),
            output_dir=Path(output_dir).resolve(),
            templates_dir=Path(templates_dir).resolve(),
        )


class JobState(str, Enum):
    IDLE = "idle"
    RESOLVING = "resolving"
    STAGING = "staging"
    COMPILING = "compiling"
    FINALIZING = "finalizing"
    CLEANING_UP = "cleaning_up"
    DONE = "done"
    FAILED = "failed"


ALLOWED_TRANSITIONS = {
    JobState.IDLE: {JobState.RESOLVING},
    JobState.RESOLVING: {JobState.STAGING, JobState.CLEANING_UP},
    JobState.STAGING: {JobState.COMPILING, JobState.CLEANING_UP},
    JobState.COMPILING: {JobState.FINALIZING, JobState.COMPILING, JobState.CLEANING_UP},
    JobState.FINALIZING: {JobState.COMPILING, JobState.CLEANING_UP},
    JobState.CLEANING_UP: {JobState.DONE, JobState.FAILED},
    JobState.DONE: set(),
    JobState.FAILED: set(),
}


@dataclass
class GenerationJob:
    """
    Mutable bookkeeping for one run of the pipeline.

    Attributes:
        request: What is being generated
        job_id: Unique identifier (also embedded in the workspace name)
        state: Current state
        history: Every state entered, in order, starting with IDLE
        workspace_dir: Job workspace once allocated
        error: Failure that ended the job, if any
    """

    request: GenerationRequest
    job_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    state: JobState = JobState.IDLE
    history: List[JobState] = field(default_factory=lambda: [JobState.IDLE])
    workspace_dir: Optional[Path] = None
    error: Optional[BaseException] = None

    def advance(self, new_state: JobState) -> None:
        """
        Move to new_state.

        Raises:
            RuntimeError: If the transition skips or reverses a state
        """
        if new_state not in ALLOWED_TRANSITIONS[self.state]:
            raise RuntimeError(
                f"Illegal job transition {self.state.value} -> {new_state.value} (job {self.job_id})"
            )
        self.state = new_state
        self.history.append(new_state)

    @property
    def finished(self) -> bool:
        return self.state in (JobState.DONE, JobState.FAILED)


@dataclass
class GenerationResult:
    """
    Outcome of a successful generation.

    Attributes:
        pdf_path: Absolute path of the document, {person}_{template}_{lang}.{ext}
        job_id: Job that produced it
        workspace_dir: Workspace used by the job (removed by the time this is returned)
        elapsed_s: Wall-clock duration of the compile step
        page_count: Page count of the document (None if unreadable)
        warnings: Non-fatal problems met while staging (skipped image, missing base template)
    """

    pdf_path: Path
    job_id: str
    workspace_dir: Path
    elapsed_s: float = 0.0
    page_count: Optional[int] = None
    warnings: Tuple[str, ...] = ()


class WatchPolicy(str, Enum):
    """What watch mode does when a re-render fails."""

    STOP = "stop"
    CONTINUE = "continue"


@dataclass
class RenderOutcome:
    """Result of one render attempt inside a watch session."""

    attempt: int
    result: Optional[GenerationResult] = None
    error: Optional[GenerationError] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass
class WatchSummary:
    job_id: str
    outcomes: List[RenderOutcome] = field(default_factory=list)

    @property
    def renders(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.succeeded)

    @property
    def failures(self) -> List[GenerationError]:
        return [outcome.error for outcome in self.outcomes if not outcome.succeeded]
