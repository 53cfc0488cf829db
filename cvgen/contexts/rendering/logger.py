"""
Rendering context logger.

Provides logging interface for rendering context with automatic [render] prefix.
All rendering modules should import from this module, not from loguru directly.
"""

from pathlib import Path
from typing import List

from loguru import logger

CONTEXT_PREFIX = "[render]"


def _log_info(message: str) -> None:
    """Log info message with [render] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [render] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [render] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [render] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [render] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level rendering-specific logging helpers


def log_compilation_start(job_id: str, command: List[str], workspace: Path) -> None:
    """Log start of compilation with context."""
    _log_info(f"[{job_id}] Compiling in {workspace}")
    _log_debug(f"[{job_id}]   Command: {' '.join(command)}")


def log_compilation_result(
    job_id: str,
    returncode: int,
    stdout: str,
    stderr: str,
    elapsed_time: float,
    verbose: bool = False,
) -> None:
    """
    Log compilation result with diagnostics.

    Compiler output is dumped raw (bypassing the format template so every line
    is not prefixed with timestamp/level) when verbose or on failure.
    """
    if returncode == 0:
        _log_success(f"[{job_id}] Compilation succeeded ({elapsed_time:.2f}s)")
    else:
        _log_error(f"[{job_id}] Compilation failed with status {returncode} ({elapsed_time:.2f}s)")

    if verbose or returncode != 0:
        if stdout:
            logger.opt(raw=True).debug(
                f"\n{'=' * 80}\nCOMPILER STDOUT [{job_id}]:\n{'=' * 80}\n{stdout}\n"
            )
        if stderr:
            logger.opt(raw=True).debug(
                f"\n{'=' * 80}\nCOMPILER STDERR [{job_id}]:\n{'=' * 80}\n{stderr}\n"
            )
