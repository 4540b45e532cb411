"""
Rendering context logger.

Provides logging interface for rendering context with automatic [render] prefix.
All rendering modules should import from this module, not from utils.logger directly.
"""

import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from loguru import logger

from texjob.utils.logger import setup_logger as _setup_logger

load_dotenv()

CONTEXT_PREFIX = "[render]"


def setup_rendering_logger(log_dir: Path, console_level: str = "INFO") -> Path:
    """
    Setup logger for rendering context.

    Configures loguru with provenance tracking and rendering-specific context.

    Args:
        log_dir: Directory for this rendering session
        console_level: Minimum level shown on the console

    Returns:
        Path to log file
    """
    return _setup_logger(
        context_name="render",
        log_dir=log_dir,
        extra_provenance={"LaTeX compiler": os.getenv("LATEX_COMPILER", "pdflatex")},
        console_level=console_level,
    )


# Wrapper functions with automatic [render] prefix


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


def _log_exception(message: str) -> None:
    """Log error message with [render] prefix and the active traceback."""
    logger.opt(exception=True).error(f"{CONTEXT_PREFIX} {message}")


# High-level rendering-specific logging helpers


def log_attempt_start(attempt: int, command: List[str], tex_file: Path, working_dir: Path) -> None:
    """Log start of a single engine invocation."""
    _log_info(f"Compilation pass {attempt}: {command[0]}")
    _log_debug(f"  Command: {' '.join(command)}")
    _log_debug(f"  Source: {tex_file}")
    _log_debug(f"  Working directory: {working_dir}")


def log_attempt_result(attempt: int, output, elapsed_time: float) -> None:
    """
    Log the outcome of a single engine invocation.

    Args:
        attempt: 1-based pass number
        output: ProcessOutput from the launcher
        elapsed_time: Time taken by this pass
    """
    _log_debug(f"Pass {attempt} exited with code {output.returncode} ({elapsed_time:.2f}s)")

    # Full engine output on failure, raw so multi-line text keeps its layout
    if output.returncode != 0:
        if output.stdout:
            logger.opt(raw=True).debug(
                f"\n{'=' * 80}\nENGINE STDOUT:\n{'=' * 80}\n{output.text()}\n"
            )
        if output.stderr:
            logger.opt(raw=True).debug(
                f"\n{'=' * 80}\nENGINE STDERR:\n{'=' * 80}\n{output.text(stderr=True)}\n"
            )


def log_compilation_result(
    tex_file: Path, success: bool, attempts: int, elapsed_time: float, output_dir: Optional[Path]
) -> None:
    """Log final outcome of a compilation (all passes)."""
    if success:
        _log_success(f"Compilation succeeded: {tex_file.name} ({attempts} passes, {elapsed_time:.2f}s)")
        _log_debug(f"  Output directory: {output_dir}")
    else:
        _log_error(f"Compilation failed: {tex_file.name} ({attempts} passes, {elapsed_time:.2f}s)")
