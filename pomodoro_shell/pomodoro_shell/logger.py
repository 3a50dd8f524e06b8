"""
Logging setup for the pomodoro shell.
"""

from __future__ import annotations

import os
import sys
from collections import defaultdict
from pathlib import Path
from typing import Dict, List, Optional

from loguru import logger as _logger

_LOG_INITIALISED = False
LOG_DIR = Path(
    os.environ.get(
        "POMODORO_SHELL_LOG_DIR",
        str(Path.home() / ".local" / "state" / "pomodoro-shell"),
    )
)
DEFAULT_LOG_PATH = LOG_DIR / "pomodoro-shell.log"

_EXTENSION_ERRORS: Dict[str, List[str]] = defaultdict(list)


def configure(log_path: Optional[Path] = None) -> None:
    """
    Configure loguru for the application.

    Configuration happens only once per process.
    """
    global _LOG_INITIALISED
    if _LOG_INITIALISED:
        return
    target = log_path or DEFAULT_LOG_PATH
    target.parent.mkdir(parents=True, exist_ok=True)

    # Keep console output and add a persistent file sink.
    _logger.remove()
    if sys.stderr is not None:
        _logger.add(sys.stderr, level="INFO", enqueue=True)
    _logger.add(
        target,
        level="DEBUG",
        rotation="10 MB",
        retention=5,
        encoding="utf-8",
        enqueue=True,
        backtrace=True,
        diagnose=False,
    )
    _LOG_INITIALISED = True


def get_logger():
    """Return the shared logger instance."""
    configure()
    return _logger


def log_extension_error(uuid: str, error: object) -> None:
    """Report an extension error and remember it for later inspection."""
    message = str(error)
    _EXTENSION_ERRORS[uuid].append(message)
    get_logger().bind(extension=uuid).error("Extension {} reported an error: {}", uuid, message)


def extension_errors(uuid: str) -> List[str]:
    return list(_EXTENSION_ERRORS.get(uuid, []))


def clear_extension_errors(uuid: Optional[str] = None) -> None:
    if uuid is None:
        _EXTENSION_ERRORS.clear()
    else:
        _EXTENSION_ERRORS.pop(uuid, None)
