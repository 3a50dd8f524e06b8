"""
Entry point for the pomodoro shell application.
"""

from __future__ import annotations

import sys
import time
from pathlib import Path
from typing import Iterable, Tuple

from PySide6.QtCore import QDir, QLockFile
from PySide6.QtWidgets import QApplication

from pomodoro_shell.pomodoro_shell import extension
from pomodoro_shell.pomodoro_shell import logger as app_logger
from shared.metadata import MetadataValidationError

_LOGGER = app_logger.get_logger()
_LOCK_NAME = "pomodoro-shell.lock"


class _InstanceGuard:
    """Lock file guard to prevent concurrent instances."""

    def __init__(self, name: str) -> None:
        self._lock = QLockFile(str(Path(QDir.tempPath()) / name))

    def acquire(self) -> bool:
        return self._lock.tryLock(0)

    def release(self) -> None:
        if self._lock.isLocked():
            self._lock.unlock()


def _run_application_once(argv: Iterable[str]) -> Tuple[int, bool]:
    """Start the Qt application once and report whether shutdown was intentional."""
    app = QApplication.instance() or QApplication(list(argv))
    app.setQuitOnLastWindowClosed(False)

    state = {"manual": False}

    def _request_quit() -> None:
        state["manual"] = True
        app.quit()

    controller = extension.enable()
    controller.quitRequested.connect(_request_quit)
    try:
        exit_code = app.exec()
    finally:
        extension.disable()
    return exit_code, state["manual"]


def main() -> int:
    """Launch the application with single-instance + recovery safeguards."""
    guard = _InstanceGuard(_LOCK_NAME)
    if not guard.acquire():
        _LOGGER.debug("Pomodoro shell instance already running; exiting silently.")
        return 0

    # init installs translators on the application instance
    app = QApplication.instance() or QApplication(sys.argv)  # noqa: F841

    try:
        metadata = extension.load_default_metadata()
    except MetadataValidationError as exc:
        _LOGGER.error("Cannot start: {}", exc)
        guard.release()
        return 1
    extension.init(metadata)

    backoff_seconds = 2
    max_backoff = 30

    try:
        while True:
            try:
                exit_code, manual = _run_application_once(sys.argv)
            except Exception:  # pragma: no cover - defensive crash guard
                _LOGGER.exception("Pomodoro shell crashed; attempting automatic recovery.")
                exit_code = 1
                manual = False

            if manual:
                return exit_code

            _LOGGER.warning(
                "Pomodoro shell exited unexpectedly (code={}). Restarting in {} seconds.",
                exit_code,
                backoff_seconds,
            )
            time.sleep(backoff_seconds)
            backoff_seconds = min(backoff_seconds * 2, max_backoff)
    finally:
        guard.release()


if __name__ == "__main__":
    raise SystemExit(main())
