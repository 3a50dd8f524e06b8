"""
Extension controller reacting to timer transitions.

The controller owns the tray indicator, the current notification and the
break screen, and decides which of them to show whenever the timer service
reports a change.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from PySide6.QtCore import QObject, Signal

from core.indicator import Indicator
from core.keybindings import KeybindingManager
from core.notifications import (
    IssueNotification,
    NotificationSource,
    PomodoroEndNotification,
    PomodoroStartNotification,
)
from core.screen_dialog import PomodoroEndDialog
from core.settings import (
    DEFAULT_SETTINGS_SCHEMA,
    SHOW_SCREEN_NOTIFICATIONS_KEY,
    TOGGLE_TIMER_KEY,
    PomodoroSettings,
    SettingsError,
    SettingsManager,
)
from core.timer import Timer, TimerState
from shared.metadata import ExtensionMetadata
from pomodoro_shell.pomodoro_shell import logger as app_logger

APP_NAME = "Pomodoro"
APP_VERSION = "0.10.2"
PACKAGE_NAME = "gnome-pomodoro"
DEFAULT_UUID = "pomodoro@arun.codito.in"


class PomodoroExtension(QObject):
    disposed = Signal()
    quitRequested = Signal()

    def __init__(
        self,
        metadata: Optional[ExtensionMetadata] = None,
        *,
        settings_manager: Optional[SettingsManager] = None,
        keybindings: Optional[KeybindingManager] = None,
        timer_factory: Callable[[], Any] = Timer,
        indicator_factory: Callable[[Any], Any] = Indicator,
        dialog_factory: Callable[[Any], Any] = PomodoroEndDialog,
        source_factory: Callable[[], Any] = NotificationSource,
        start_notification_class: type = PomodoroStartNotification,
        end_notification_class: type = PomodoroEndNotification,
        issue_notification_class: type = IssueNotification,
    ) -> None:
        super().__init__()
        self.metadata = metadata
        self.settings_manager = settings_manager or SettingsManager(self.settings_schema)
        self.keybindings = keybindings or KeybindingManager()
        self.timer_factory = timer_factory
        self.indicator_factory = indicator_factory
        self.dialog_factory = dialog_factory
        self.source_factory = source_factory
        self.start_notification_class = start_notification_class
        self.end_notification_class = end_notification_class
        self.issue_notification_class = issue_notification_class
        self._logger = app_logger.get_logger()

        self.settings: Optional[PomodoroSettings] = None
        self.timer = None
        self.indicator = None
        self.notification = None
        self.dialog = None
        self.source = None
        self._disposed = False

        try:
            self.settings = self.settings_manager.read_settings()
        except SettingsError as exc:
            self.log_error(exc)

        self.timer = self.timer_factory()

        self.enable_keybinding()
        self.enable_indicator()
        self.enable_notifications()
        self.enable_screen_notifications()

        self.timer.serviceConnected.connect(self._on_service_connected)
        self.timer.serviceDisconnected.connect(self._on_service_disconnected)
        self.timer.stateChanged.connect(self._on_timer_state_changed)
        self.timer.notifyPomodoroStart.connect(self._on_notify_pomodoro_start)
        self.timer.notifyPomodoroEnd.connect(self._on_notify_pomodoro_end)
        self._logger.info("{} {} enabled.", APP_NAME, APP_VERSION)

    @property
    def uuid(self) -> str:
        return self.metadata.uuid if self.metadata else DEFAULT_UUID

    @property
    def settings_schema(self) -> str:
        return self.metadata.settings_schema if self.metadata else DEFAULT_SETTINGS_SCHEMA

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def show_screen_notifications(self) -> bool:
        if self.settings is None:
            return False
        return self.settings.get_boolean(SHOW_SCREEN_NOTIFICATIONS_KEY)

    def _on_service_connected(self) -> None:
        state = self.timer.get_state()

        if state in (TimerState.POMODORO, TimerState.IDLE):
            self._on_notify_pomodoro_start()

        if state is TimerState.PAUSE:
            self._on_notify_pomodoro_end()

    def _on_service_disconnected(self) -> None:
        if self.dialog is not None:
            self.dialog.close()

        if self.notification is not None:
            self.notification.dispose()
            self.notification = None

    def _on_timer_state_changed(self) -> None:
        state = self.timer.get_state()

        if self.dialog is not None and state is not TimerState.PAUSE:
            self.dialog.close()

        if self.notification is not None and state is TimerState.NULL:
            self.notification.dispose()
            self.notification = None

    def _on_notify_pomodoro_start(self, is_requested: bool = False) -> None:
        if self.notification is not None:
            self.notification.dispose()

        self.notification = self.start_notification_class(self.timer, self.source)
        self.notification.disposed.connect(self._on_notification_disposed)
        self.notification.show()

    def _on_notify_pomodoro_end(self, is_completed: bool = False) -> None:
        show_screen_notifications = self.show_screen_notifications()

        if self.notification is not None:
            self.notification.dispose()

        self.notification = self.end_notification_class(self.timer, self.source)
        self.notification.clicked.connect(self._on_end_notification_clicked)
        self.notification.disposed.connect(self._on_notification_disposed)

        if self.dialog is not None and show_screen_notifications:
            self.dialog.open()
        else:
            self.notification.show()

    def _on_end_notification_clicked(self, notification) -> None:
        if self.dialog is not None:
            self.dialog.open()
            self.dialog.push_modal()

            notification.hide()

    def _on_notification_disposed(self, notification) -> None:
        if self.notification is notification:
            self.notification = None

    def _on_keybinding_pressed(self) -> None:
        if self.timer is not None:
            self.timer.toggle()

    def _on_dialog_closing(self) -> None:
        if self.timer is None or self.timer.get_state() is not TimerState.PAUSE:
            return

        if isinstance(self.notification, self.end_notification_class):
            self.notification.show()

        # TODO: skip re-arming while a fullscreen window (video playback) is active
        self.dialog.open_when_idle()

    def _on_dialog_disposed(self) -> None:
        self.dialog = None

    def enable_indicator(self) -> None:
        self.indicator = self.indicator_factory(self.timer)
        self.indicator.quitRequested.connect(self.quitRequested)
        self.indicator.show()

    def disable_indicator(self) -> None:
        if self.indicator is not None:
            self.indicator.dispose()
            self.indicator = None

    def enable_keybinding(self) -> None:
        if self.settings is None:
            self._logger.warning("Settings unavailable; {} not registered.", TOGGLE_TIMER_KEY)
            return
        self.keybindings.add_keybinding(
            TOGGLE_TIMER_KEY,
            self.settings.get_string(TOGGLE_TIMER_KEY),
            self._on_keybinding_pressed,
        )

    def disable_keybinding(self) -> None:
        self.keybindings.remove_keybinding(TOGGLE_TIMER_KEY)

    def enable_notifications(self) -> None:
        if self.source is None:
            self.source = self.source_factory()

    def disable_notifications(self) -> None:
        if self.notification is not None:
            self.notification.dispose()
            self.notification = None

        if self.source is not None:
            self.source.dispose()
            self.source = None

    def enable_screen_notifications(self) -> None:
        if self.dialog is None:
            self.dialog = self.dialog_factory(self.timer)
            self.dialog.closing.connect(self._on_dialog_closing)
            self.dialog.disposed.connect(self._on_dialog_disposed)

    def disable_screen_notifications(self) -> None:
        if self.dialog is not None:
            self.dialog.dispose()
            self.dialog = None

    def notify_issue(self, message: str):
        notification = self.issue_notification_class(message, self.source)
        notification.show()
        return notification

    def log_error(self, error: object) -> None:
        app_logger.log_extension_error(self.uuid, error)

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True

        self.disable_keybinding()
        self.disable_indicator()
        self.disable_notifications()
        self.disable_screen_notifications()

        self.timer.dispose()
        self.timer = None

        self.settings = None

        self._logger.info("{} disabled.", APP_NAME)
        self.disposed.emit()
