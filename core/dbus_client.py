"""
Session bus transport to the gnome-pomodoro timer service.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from PySide6.QtCore import QObject, Signal, Slot, SLOT
from PySide6.QtDBus import (
    QDBus,
    QDBusArgument,
    QDBusConnection,
    QDBusMessage,
    QDBusServiceWatcher,
    QDBusVariant,
)

from pomodoro_shell.pomodoro_shell import logger as app_logger

SERVICE_NAME = "org.gnome.Pomodoro"
OBJECT_PATH = "/org/gnome/Pomodoro"
INTERFACE_NAME = "org.gnome.Pomodoro"
CALL_TIMEOUT_MS = 2000

_DBUS_SERVICE = "org.freedesktop.DBus"
_DBUS_PATH = "/org/freedesktop/DBus"
_PROPERTIES_INTERFACE = "org.freedesktop.DBus.Properties"

_SIGNAL_SLOTS = {
    "StateChanged": "_on_state_changed(QDBusMessage)",
    "NotifyPomodoroStart": "_on_notify_pomodoro_start(QDBusMessage)",
    "NotifyPomodoroEnd": "_on_notify_pomodoro_end(QDBusMessage)",
}


class PomodoroDBusClient(QObject):
    """
    Watches the timer service on the session bus and relays its signals.

    Calls are synchronous with a short timeout; failures are logged and
    reported as ``None`` rather than raised.
    """

    serviceAppeared = Signal()
    serviceVanished = Signal()
    propertiesChanged = Signal(object)
    pomodoroStartNotified = Signal(bool)
    pomodoroEndNotified = Signal(bool)

    def __init__(self, bus: Optional[QDBusConnection] = None, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._logger = app_logger.get_logger()
        self._bus = bus or QDBusConnection.sessionBus()
        self._subscribed = False

        self._watcher = QDBusServiceWatcher(
            SERVICE_NAME,
            self._bus,
            QDBusServiceWatcher.WatchModeFlag.WatchForOwnerChange,
            self,
        )
        self._watcher.serviceRegistered.connect(self._on_service_registered)
        self._watcher.serviceUnregistered.connect(self._on_service_unregistered)
        self._subscribe()

    def is_available(self) -> bool:
        message = QDBusMessage.createMethodCall(_DBUS_SERVICE, _DBUS_PATH, _DBUS_SERVICE, "NameHasOwner")
        message.setArguments([SERVICE_NAME])
        reply = self._send(message)
        if reply is None or not reply.arguments():
            return False
        return bool(reply.arguments()[0])

    def get_properties(self) -> Optional[Dict[str, Any]]:
        message = QDBusMessage.createMethodCall(SERVICE_NAME, OBJECT_PATH, _PROPERTIES_INTERFACE, "GetAll")
        message.setArguments([INTERFACE_NAME])
        reply = self._send(message)
        if reply is None or not reply.arguments():
            return None
        return _unwrap_map(reply.arguments()[0])

    def call(self, method: str, *args: Any) -> Optional[list]:
        message = QDBusMessage.createMethodCall(SERVICE_NAME, OBJECT_PATH, INTERFACE_NAME, method)
        if args:
            message.setArguments(list(args))
        reply = self._send(message)
        if reply is None:
            return None
        return list(reply.arguments())

    def dispose(self) -> None:
        self._unsubscribe()
        self._watcher.removeWatchedService(SERVICE_NAME)
        self.deleteLater()

    def _send(self, message: QDBusMessage) -> Optional[QDBusMessage]:
        if not self._bus.isConnected():
            self._logger.warning("Session bus is not connected; dropping {} call.", message.member())
            return None
        reply = self._bus.call(message, QDBus.CallMode.Block, CALL_TIMEOUT_MS)
        if reply.type() == QDBusMessage.MessageType.ErrorMessage:
            self._logger.error(
                "D-Bus call {}.{} failed: {} ({})",
                message.interface(),
                message.member(),
                reply.errorMessage(),
                reply.errorName(),
            )
            return None
        return reply

    def _subscribe(self) -> None:
        if self._subscribed:
            return
        for name, slot in _SIGNAL_SLOTS.items():
            if not self._bus.connect(SERVICE_NAME, OBJECT_PATH, INTERFACE_NAME, name, self, SLOT(slot)):
                self._logger.warning("Unable to subscribe to {} signal.", name)
        self._subscribed = True

    def _unsubscribe(self) -> None:
        if not self._subscribed:
            return
        for name, slot in _SIGNAL_SLOTS.items():
            self._bus.disconnect(SERVICE_NAME, OBJECT_PATH, INTERFACE_NAME, name, self, SLOT(slot))
        self._subscribed = False

    def _on_service_registered(self, service: str) -> None:
        self._logger.info("Timer service {} appeared on the session bus.", service)
        self.serviceAppeared.emit()

    def _on_service_unregistered(self, service: str) -> None:
        self._logger.info("Timer service {} left the session bus.", service)
        self.serviceVanished.emit()

    @Slot(QDBusMessage)
    def _on_state_changed(self, message: QDBusMessage) -> None:
        arguments = message.arguments()
        if not arguments:
            return
        self.propertiesChanged.emit(_unwrap_map(arguments[0]))

    @Slot(QDBusMessage)
    def _on_notify_pomodoro_start(self, message: QDBusMessage) -> None:
        self.pomodoroStartNotified.emit(_first_bool(message))

    @Slot(QDBusMessage)
    def _on_notify_pomodoro_end(self, message: QDBusMessage) -> None:
        self.pomodoroEndNotified.emit(_first_bool(message))


def _unwrap(value: Any) -> Any:
    if isinstance(value, QDBusVariant):
        return _unwrap(value.variant())
    if isinstance(value, QDBusArgument):
        return _demarshal(value)
    return value


def _demarshal(argument: QDBusArgument) -> Any:
    """Read a complex argument (map, array or struct) into Python containers."""
    element = argument.currentType()
    if element == QDBusArgument.ElementType.MapType:
        result = {}
        argument.beginMap()
        while not argument.atEnd():
            argument.beginMapEntry()
            key = _unwrap(argument.asVariant())
            result[str(key)] = _unwrap(argument.asVariant())
            argument.endMapEntry()
        argument.endMap()
        return result
    if element == QDBusArgument.ElementType.ArrayType:
        items = []
        argument.beginArray()
        while not argument.atEnd():
            items.append(_unwrap(argument.asVariant()))
        argument.endArray()
        return items
    if element == QDBusArgument.ElementType.StructureType:
        fields = []
        argument.beginStructure()
        while not argument.atEnd():
            fields.append(_unwrap(argument.asVariant()))
        argument.endStructure()
        return tuple(fields)
    return _unwrap(argument.asVariant())


def _unwrap_map(value: Any) -> Dict[str, Any]:
    value = _unwrap(value)
    if not isinstance(value, dict):
        return {}
    return {str(key): _unwrap(item) for key, item in value.items()}


def _first_bool(message: QDBusMessage) -> bool:
    arguments = message.arguments()
    return bool(_unwrap(arguments[0])) if arguments else False
