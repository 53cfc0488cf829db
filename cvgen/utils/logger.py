"""
Generic logger setup utilities.

Provides reusable loguru configuration with provenance tracking.
Context-specific wrappers are defined in contexts/{context}/logger.py.
"""

import sys
from pathlib import Path
from typing import Dict, Optional

from loguru import logger

# Default level colors for console output
LEVEL_COLORS = {
    "WARNING": "<yellow>",
    "ERROR": "<red>",
    "CRITICAL": "<bold><red>",
}


def setup_logger(
    context_name: str,
    log_dir: Path,
    extra_provenance: Optional[Dict[str, object]] = None,
    console_level: str = "INFO",
) -> Path:
    """
    Configure loguru for a process with provenance tracking.

    Sets up dual output (file + console) and logs execution provenance
    (script, command, working directory, Python version, etc.). Call once per
    process: the CLI calls it per command, the API server at startup.

    Args:
        context_name: Session identifier (e.g., "generate", "server")
        log_dir: Directory for this logging session
        extra_provenance: Additional key-value pairs for provenance header
        console_level: Minimum level echoed to the console

    Returns:
        Path to log file

    Example:
        from cvgen.utils.logger import setup_logger

        log_file = setup_logger(
            context_name="generate",
            log_dir=Path("logs"),
            extra_provenance={"Compiler": "typst"}
        )
    """
    log_dir.mkdir(exist_ok=True, parents=True)
    log_file = log_dir / f"{context_name}.log"

    # Remove default logger
    logger.remove()

    for level_name, color in LEVEL_COLORS.items():
        logger.level(level_name, color=color)

    # File handler captures everything; enqueue keeps writes ordered across job threads
    logger.add(
        log_file,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <7} | {thread.name} | {message}",
        level="DEBUG",
        enqueue=True,
    )

    logger.add(
        sys.stderr,
        format="{time:YYYY-MM-DD HH:mm:ss} | <level>{level: <7}</level> | <level>{message}</level>",
        level=console_level,
        colorize=True,
    )

    log_provenance(extra_provenance)

    return log_file


def log_provenance(extra_context: Optional[Dict[str, object]] = None) -> None:
    """
    Log execution provenance to current logger.

    Logs standard context (script, command, working directory, Python version)
    plus any additional context provided.
    """
    logger.debug("=" * 80)
    logger.debug(f"Script: {sys.argv[0]}")
    logger.debug(f"Command: {' '.join(sys.argv)}")
    logger.debug(f"Working directory: {Path.cwd()}")
    logger.debug(f"Python: {sys.version.split()[0]}")

    if extra_context:
        for key, value in extra_context.items():
            logger.debug(f"{key}: {value}")

    logger.debug("=" * 80)
