"""
Idle monitoring using the Mutter IdleMonitor D-Bus API, used to reopen the break screen.
"""

from __future__ import annotations

from typing import Callable, Optional

from PySide6.QtCore import QObject, QTimer, Signal
from PySide6.QtDBus import QDBus, QDBusConnection, QDBusMessage

_IDLE_SERVICE = "org.gnome.Mutter.IdleMonitor"
_IDLE_PATH = "/org/gnome/Mutter/IdleMonitor/Core"
_IDLE_INTERFACE = "org.gnome.Mutter.IdleMonitor"
_IDLE_CALL_TIMEOUT_MS = 1000


class IdleMonitor(QObject):
    """
    Periodically polls session idle time and emits a signal once the configured
    threshold is exceeded. Monitoring halts after emission until restarted.
    """

    idleReached = Signal()

    def __init__(self, threshold_seconds: float = 60, poll_interval_ms: int = 1000) -> None:
        super().__init__()
        self.threshold_seconds = threshold_seconds
        self._poll_interval_ms = poll_interval_ms
        self._timer = QTimer(self)
        self._timer.setInterval(self._poll_interval_ms)
        self._timer.timeout.connect(self._check_idle)  # type: ignore[arg-type]
        self._active = False
        self._idle_seconds_provider: Optional[Callable[[], Optional[float]]] = None

    @property
    def active(self) -> bool:
        return self._active

    def start(self) -> None:
        """Begin monitoring user idle time."""
        if self._active:
            return
        self._active = True
        self._timer.start()

    def stop(self) -> None:
        """Stop monitoring."""
        if not self._active:
            return
        self._timer.stop()
        self._active = False

    def set_idle_seconds_provider(self, provider: Callable[[], Optional[float]]) -> None:
        """
        Override idle seconds acquisition. Primarily used for testing.
        """
        self._idle_seconds_provider = provider

    def _check_idle(self) -> None:
        if not self._active:
            return

        try:
            idle_seconds = self._get_idle_seconds()
        except OSError:
            # If querying idle time fails, pause monitoring rather than crashing.
            self.stop()
            return
        if idle_seconds is None:
            self.stop()
            return

        if idle_seconds >= self.threshold_seconds:
            self.stop()
            self.idleReached.emit()

    def _get_idle_seconds(self) -> Optional[float]:
        if self._idle_seconds_provider is not None:
            return self._idle_seconds_provider()
        return _get_session_idle_ms() / 1000.0


def _get_session_idle_ms() -> int:
    bus = QDBusConnection.sessionBus()
    if not bus.isConnected():
        raise OSError("Session bus is not available.")

    message = QDBusMessage.createMethodCall(_IDLE_SERVICE, _IDLE_PATH, _IDLE_INTERFACE, "GetIdletime")
    reply = bus.call(message, QDBus.CallMode.Block, _IDLE_CALL_TIMEOUT_MS)
    if reply.type() == QDBusMessage.MessageType.ErrorMessage or not reply.arguments():
        raise OSError(reply.errorMessage() or "GetIdletime returned no value.")

    return int(reply.arguments()[0])
