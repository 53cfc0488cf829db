"""
Generation context logger.

Provides logging interface for job orchestration with automatic [generate] prefix.
"""

from loguru import logger

CONTEXT_PREFIX = "[generate]"


def _log_info(message: str) -> None:
    """Log info message with [generate] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [generate] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [generate] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [generate] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [generate] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


def log_job_start(job_id: str, person: str, template: str, lang: str) -> None:
    _log_info(f"[{job_id}] Generating {person} ({template} template, {lang} lang)")


def log_job_end(job_id: str, succeeded: bool, detail: str) -> None:
    if succeeded:
        _log_success(f"[{job_id}] {detail}")
    else:
        _log_error(f"[{job_id}] {detail}")
