"""
Session logging for texjob runs.

One session directory per CLI invocation holds a full DEBUG log of every
engine pass; the console only shows the summary. Context-specific wrappers
(prefixes, engine dumps) live in contexts/{context}/logger.py.
"""

import shutil
import sys
from pathlib import Path
from typing import Dict, Optional

from loguru import logger

import texjob

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {message}"
CONSOLE_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>"

# Engine failures are expected; keep them readable rather than alarming
LEVEL_COLORS = {
    "DEBUG": "<dim>",
    "WARNING": "<yellow>",
    "ERROR": "<red>",
}


def setup_logger(
    context_name: str,
    log_dir: Path,
    extra_provenance: Optional[Dict[str, str]] = None,
    console_level: str = "INFO",
) -> Path:
    """
    Route loguru output to a session log file and the console.

    Existing sinks are replaced, so calling this twice starts a new session.

    Args:
        context_name: Log file stem (e.g. "render" -> render.log)
        log_dir: Session directory, created if missing
        extra_provenance: Additional key-value pairs for the session header
        console_level: Minimum level shown on the console ("DEBUG" for --verbose)

    Returns:
        Path to the session log file
    """
    log_dir.mkdir(exist_ok=True, parents=True)
    log_file = log_dir / f"{context_name}.log"

    logger.remove()
    for level_name, color in LEVEL_COLORS.items():
        logger.level(level_name, color=color)

    logger.add(log_file, format=FILE_FORMAT, level="DEBUG", encoding="utf-8")
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=console_level, colorize=True)

    log_session_header(extra_provenance)

    return log_file


def log_session_header(extra_context: Optional[Dict[str, str]] = None) -> None:
    """
    Record what produced this session: command line, directory, interpreter and engine.

    The engine entry resolves LATEX_COMPILER against PATH so a log shows which
    TeX installation ran the job.
    """
    logger.debug("-" * 72)
    logger.debug(f"texjob {texjob.__version__} (Python {sys.version.split()[0]})")
    logger.debug(f"Command: {' '.join(sys.argv)}")
    logger.debug(f"Working directory: {Path.cwd()}")

    for key, value in (extra_context or {}).items():
        logger.debug(f"{key}: {value}")
        if key == "LaTeX compiler":
            logger.debug(f"Resolved engine: {shutil.which(value) or 'not found on PATH'}")

    logger.debug("-" * 72)
