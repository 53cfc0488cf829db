"""
Document Compilation Module

Runs the external document compiler (Typst by default) against a staged
workspace. The compiler is an opaque boundary: this module does not parse the
template language, it only reports exit status and diagnostics.

Invocation:
    <compiler...> compile <abs template> <abs output> --input lang=<lang>
        [--input picture=profile.png] [--input company_logo.png=company_logo.png]
"""

import subprocess
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from cvgen.contexts.intake.persons import LOGO_FILE, PROFILE_IMAGE_FILE
from cvgen.contexts.rendering.logger import (
    _log_error,
    log_compilation_result,
    log_compilation_start,
)
from cvgen.contexts.rendering.workspace import Workspace
from cvgen.exceptions import CompileFailed, CompileTimeout


@dataclass
class CompileResult:
    """
    Result of a successful compiler run.

    Attributes:
        command: Full command line that was executed
        output_path: Where the compiler was told to write
        returncode: Exit status (always 0 for a returned result)
        stdout: Standard output from the compiler
        stderr: Standard error from the compiler (warnings)
        elapsed_s: Wall-clock duration
        warnings: Lines of stderr the compiler flagged as warnings
    """

    command: List[str]
    output_path: Path
    returncode: int = 0
    stdout: str = ""
    stderr: str = ""
    elapsed_s: float = 0.0
    warnings: List[str] = field(default_factory=list)


def compiler_inputs(workspace: Workspace, lang: str) -> List[str]:
    """Build the --input arguments describing the staged optional files."""
    args = ["--input", f"lang={lang}"]
    if workspace.has(PROFILE_IMAGE_FILE):
        args += ["--input", f"picture={PROFILE_IMAGE_FILE}"]
    if workspace.has(LOGO_FILE):
        args += ["--input", f"{LOGO_FILE}={LOGO_FILE}"]
    return args


def build_command(
    compiler: Sequence[str], template: Path, output_path: Path, extra_args: Sequence[str] = ()
) -> List[str]:
    return [*compiler, "compile", str(template), str(output_path), *extra_args]


def compile_document(
    compiler: Sequence[str],
    workspace: Workspace,
    template_name: str,
    output_path: Path,
    lang: str,
    timeout: Optional[float] = None,
    verbose: bool = False,
) -> CompileResult:
    """
    Compile a staged template to output_path.

    Pure compilation function - assumes the workspace is staged. Existence of
    the output is not checked here; that is the output manager's job.

    Args:
        compiler: Compiler command prefix (e.g. ["typst"])
        workspace: Staged job workspace (used as the compiler's cwd)
        template_name: Primary template filename inside the workspace
        output_path: Absolute path the compiler should write to
        lang: Language passed to the template as an input
        timeout: Seconds before the compiler is killed (None = no limit)
        verbose: Log compiler output even on success

    Returns:
        CompileResult with captured output

    Raises:
        CompileFailed: Non-zero exit status, or compiler not executable
        CompileTimeout: Compiler did not finish within timeout
    """
    template = workspace.file(template_name)
    cmd = build_command(
        compiler, template, Path(output_path).resolve(), compiler_inputs(workspace, lang)
    )

    log_compilation_start(workspace.job_id, cmd, workspace.path)
    start_time = time.time()

    try:
        result = subprocess.run(
            cmd,
            cwd=workspace.path,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",  # Replace invalid UTF-8 bytes instead of crashing
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        _log_error(f"[{workspace.job_id}] Compiler timed out after {timeout}s")
        raise CompileTimeout(timeout) from e
    except OSError as e:
        _log_error(f"[{workspace.job_id}] Failed to execute compiler {cmd[0]!r}: {e}")
        raise CompileFailed(f"Failed to execute {cmd[0]}: {e}") from e

    elapsed = time.time() - start_time
    log_compilation_result(
        workspace.job_id, result.returncode, result.stdout, result.stderr, elapsed, verbose
    )

    if result.returncode != 0:
        diagnostics = "\n".join(part for part in (result.stderr, result.stdout) if part)
        raise CompileFailed(diagnostics, result.returncode)

    return CompileResult(
        command=cmd,
        output_path=Path(output_path),
        returncode=result.returncode,
        stdout=result.stdout,
        stderr=result.stderr,
        elapsed_s=elapsed,
        warnings=[line.strip() for line in result.stderr.splitlines() if line.strip().startswith("warning")],
    )
