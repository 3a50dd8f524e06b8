import os
import tempfile

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
os.environ.setdefault("POMODORO_SHELL_LOG_DIR", tempfile.mkdtemp(prefix="pomodoro-shell-logs-"))

import pytest
from PySide6.QtCore import QObject, Signal
from PySide6.QtWidgets import QApplication

from core.app import PomodoroExtension
from core.settings import PomodoroSettings, SettingsError
from core.timer import TimerState
from pomodoro_shell.pomodoro_shell import logger as app_logger


@pytest.fixture(scope="session", autouse=True)
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture(autouse=True)
def _reset_extension_errors():
    app_logger.clear_extension_errors()
    yield
    app_logger.clear_extension_errors()


class FakeTimer(QObject):
    serviceConnected = Signal()
    serviceDisconnected = Signal()
    stateChanged = Signal()
    elapsedChanged = Signal()
    notifyPomodoroStart = Signal(bool)
    notifyPomodoroEnd = Signal(bool)

    def __init__(self) -> None:
        super().__init__()
        self.state = TimerState.NULL
        self.connected = True
        self.remaining = 300
        self.calls = []
        self.disposed = False

    def get_state(self) -> TimerState:
        return self.state

    def remaining_seconds(self) -> int:
        return self.remaining

    def set_state(self, state: TimerState) -> None:
        self.state = state
        self.stateChanged.emit()

    def toggle(self) -> None:
        self.calls.append("toggle")

    def start(self) -> None:
        self.calls.append("start")

    def stop(self) -> None:
        self.calls.append("stop")

    def reset(self) -> None:
        self.calls.append("reset")

    def dispose(self) -> None:
        self.disposed = True


class FakeNotification(QObject):
    clicked = Signal(object)
    disposed = Signal(object)

    def __init__(self, timer, source=None) -> None:
        super().__init__()
        self.timer = timer
        self.source = source
        self.shown = 0
        self.hidden = 0
        self.is_disposed = False

    def show(self) -> None:
        if not self.is_disposed:
            self.shown += 1

    def hide(self) -> None:
        if not self.is_disposed:
            self.hidden += 1

    def dispose(self) -> None:
        if self.is_disposed:
            return
        self.is_disposed = True
        self.disposed.emit(self)


class FakeStartNotification(FakeNotification):
    pass


class FakeEndNotification(FakeNotification):
    pass


class FakeIssueNotification(FakeNotification):
    def __init__(self, message, source=None) -> None:
        super().__init__(None, source)
        self.message = message


class FakeDialog(QObject):
    closing = Signal()
    disposed = Signal()

    def __init__(self, timer) -> None:
        super().__init__()
        self.timer = timer
        self.is_open = False
        self.calls = []
        self.is_disposed = False

    def open(self) -> None:
        self.calls.append("open")
        self.is_open = True

    def close(self) -> None:
        self.calls.append("close")
        if self.is_open:
            self.is_open = False
            self.closing.emit()

    def push_modal(self) -> None:
        self.calls.append("push_modal")

    def open_when_idle(self) -> None:
        self.calls.append("open_when_idle")

    def dispose(self) -> None:
        if self.is_disposed:
            return
        self.is_disposed = True
        self.disposed.emit()


class FakeIndicator(QObject):
    quitRequested = Signal()

    def __init__(self, timer) -> None:
        super().__init__()
        self.timer = timer
        self.visible = False
        self.is_disposed = False

    def show(self) -> None:
        self.visible = True

    def dispose(self) -> None:
        self.visible = False
        self.is_disposed = True


class FakeSource:
    def __init__(self) -> None:
        self.is_disposed = False

    def dispose(self) -> None:
        self.is_disposed = True


class FakeKeybindings:
    def __init__(self) -> None:
        self.bindings = {}
        self.removed = []

    def add_keybinding(self, name, accelerator, handler) -> bool:
        self.bindings[name] = (accelerator, handler)
        return True

    def remove_keybinding(self, name) -> None:
        self.removed.append(name)
        self.bindings.pop(name, None)

    def press(self, name) -> None:
        self.bindings[name][1]()


class FakeSettingsManager:
    def __init__(self, settings=None, error=None) -> None:
        self._settings = settings or PomodoroSettings()
        self._error = error

    def read_settings(self) -> PomodoroSettings:
        if self._error is not None:
            raise self._error
        return self._settings


@pytest.fixture
def make_extension():
    created = []

    def _make(*, show_screen_notifications=False, settings_error=None, dialog=True):
        settings = PomodoroSettings(show_screen_notifications=show_screen_notifications)
        extension = PomodoroExtension(
            settings_manager=FakeSettingsManager(settings, settings_error),
            keybindings=FakeKeybindings(),
            timer_factory=FakeTimer,
            indicator_factory=FakeIndicator,
            dialog_factory=FakeDialog,
            source_factory=FakeSource,
            start_notification_class=FakeStartNotification,
            end_notification_class=FakeEndNotification,
            issue_notification_class=FakeIssueNotification,
        )
        if not dialog:
            extension.disable_screen_notifications()
        created.append(extension)
        return extension

    yield _make

    for extension in created:
        extension.dispose()


@pytest.fixture
def settings_error():
    return SettingsError("Settings store /tmp/preferences.ini is malformed.")
