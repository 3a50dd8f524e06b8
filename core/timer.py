"""
Local handle for the remote pomodoro timer.

The timer state machine runs in the gnome-pomodoro service. This handle
keeps a cached copy of the service properties and re-emits the service
signals as Qt signals on the GUI thread.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Any, Dict, Optional

from PySide6.QtCore import QObject, QTimer, Signal

from core.dbus_client import PomodoroDBusClient
from pomodoro_shell.pomodoro_shell import logger as app_logger


class TimerState(Enum):
    NULL = "null"
    IDLE = "idle"
    POMODORO = "pomodoro"
    PAUSE = "pause"

    @classmethod
    def parse(cls, value: Any) -> "TimerState":
        if isinstance(value, TimerState):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.NULL


_PROPERTY_NAMES = {
    "state": "State",
    "elapsed": "Elapsed",
    "elapsedlimit": "ElapsedLimit",
    "sessioncount": "SessionCount",
}

_DEFAULT_PROPERTIES: Dict[str, Any] = {
    "State": TimerState.NULL.value,
    "Elapsed": 0.0,
    "ElapsedLimit": 0.0,
    "SessionCount": 0,
}


def normalize_properties(raw: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Map service property keys (``State``, ``elapsed_limit`` ...) to canonical names."""
    normalized: Dict[str, Any] = {}
    for key, value in (raw or {}).items():
        name = _PROPERTY_NAMES.get(str(key).replace("_", "").replace("-", "").lower())
        if name is not None:
            normalized[name] = value
    return normalized


class Timer(QObject):
    serviceConnected = Signal()
    serviceDisconnected = Signal()
    stateChanged = Signal()
    elapsedChanged = Signal()
    notifyPomodoroStart = Signal(bool)
    notifyPomodoroEnd = Signal(bool)

    def __init__(self, client=None, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._logger = app_logger.get_logger()
        self._client = client if client is not None else PomodoroDBusClient()
        self._properties: Dict[str, Any] = dict(_DEFAULT_PROPERTIES)
        self._connected = False
        self._disposed = False

        self._client.serviceAppeared.connect(self._on_service_appeared)
        self._client.serviceVanished.connect(self._on_service_vanished)
        self._client.propertiesChanged.connect(self._on_properties_changed)
        self._client.pomodoroStartNotified.connect(self._on_pomodoro_start_notified)
        self._client.pomodoroEndNotified.connect(self._on_pomodoro_end_notified)

        # Let the owner subscribe before the first serviceConnected.
        QTimer.singleShot(0, self.refresh)

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def elapsed(self) -> float:
        return float(self._properties.get("Elapsed") or 0.0)

    @property
    def elapsed_limit(self) -> float:
        return float(self._properties.get("ElapsedLimit") or 0.0)

    @property
    def session_count(self) -> int:
        return int(self._properties.get("SessionCount") or 0)

    def get_state(self) -> TimerState:
        return TimerState.parse(self._properties.get("State"))

    def remaining_seconds(self) -> int:
        return max(0, math.ceil(self.elapsed_limit - self.elapsed))

    def refresh(self) -> None:
        """Re-check whether the service is present and sync with it."""
        if self._disposed:
            return
        if self._client.is_available():
            self._on_service_appeared()
        elif self._connected:
            self._on_service_vanished()

    def toggle(self) -> None:
        if not self._connected:
            self._logger.warning("Toggle ignored; timer service is not running.")
            return
        if self.get_state() is TimerState.NULL:
            self.start()
        else:
            self.stop()

    def start(self) -> None:
        self._call("Start")

    def stop(self) -> None:
        self._call("Stop")

    def reset(self) -> None:
        self._call("Reset")

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self._connected = False
        self._client.serviceAppeared.disconnect(self._on_service_appeared)
        self._client.serviceVanished.disconnect(self._on_service_vanished)
        self._client.propertiesChanged.disconnect(self._on_properties_changed)
        self._client.pomodoroStartNotified.disconnect(self._on_pomodoro_start_notified)
        self._client.pomodoroEndNotified.disconnect(self._on_pomodoro_end_notified)
        self._client.dispose()

    def _call(self, method: str) -> None:
        if self._disposed:
            return
        self._logger.debug("Calling timer method {}", method)
        if self._client.call(method) is None:
            self._logger.warning("Timer method {} did not complete.", method)

    def _on_service_appeared(self) -> None:
        properties = normalize_properties(self._client.get_properties())
        self._properties = dict(_DEFAULT_PROPERTIES)
        self._properties.update(properties)
        self._connected = True
        self._logger.info("Connected to timer service; state={}", self.get_state().value)
        self.serviceConnected.emit()

    def _on_service_vanished(self) -> None:
        self._properties = dict(_DEFAULT_PROPERTIES)
        self._connected = False
        self._logger.info("Lost connection to timer service.")
        self.serviceDisconnected.emit()

    def _on_properties_changed(self, raw: Dict[str, Any]) -> None:
        previous_state = self.get_state()
        previous_elapsed = self.elapsed
        self._properties.update(normalize_properties(raw))

        if self.get_state() is not previous_state:
            self._logger.debug(
                "Timer state changed {} -> {}", previous_state.value, self.get_state().value
            )
            self.stateChanged.emit()
        if self.elapsed != previous_elapsed:
            self.elapsedChanged.emit()

    def _on_pomodoro_start_notified(self, is_requested: bool) -> None:
        self.notifyPomodoroStart.emit(is_requested)

    def _on_pomodoro_end_notified(self, is_completed: bool) -> None:
        self.notifyPomodoroEnd.emit(is_completed)
