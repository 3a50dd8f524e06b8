import pytest

from core.app import PomodoroExtension
from core.settings import SETTINGS_FILE_ENV, TOGGLE_TIMER_KEY
from core.timer import TimerState
from pomodoro_shell.pomodoro_shell import logger as app_logger
from shared.metadata import ExtensionMetadata
from tests.conftest import (
    FakeDialog,
    FakeEndNotification,
    FakeIndicator,
    FakeIssueNotification,
    FakeKeybindings,
    FakeSource,
    FakeStartNotification,
    FakeTimer,
)


def test_enable_builds_indicator_dialog_and_keybinding(make_extension):
    extension = make_extension()

    assert extension.indicator.visible
    assert extension.dialog is not None
    assert extension.source is not None
    assert extension.notification is None
    assert TOGGLE_TIMER_KEY in extension.keybindings.bindings


def test_repeated_start_signals_keep_a_single_notification(make_extension):
    extension = make_extension()
    seen = []

    for _ in range(4):
        extension.timer.notifyPomodoroStart.emit(False)
        seen.append(extension.notification)

    assert all(isinstance(n, FakeStartNotification) for n in seen)
    assert [n.is_disposed for n in seen] == [True, True, True, False]
    assert extension.notification is seen[-1]
    assert seen[-1].shown == 1


def test_end_signal_replaces_start_notification(make_extension):
    extension = make_extension()
    extension.timer.notifyPomodoroStart.emit(False)
    start = extension.notification

    extension.timer.notifyPomodoroEnd.emit(True)

    assert start.is_disposed
    assert isinstance(extension.notification, FakeEndNotification)
    assert extension.notification.shown == 1


def test_dispose_releases_every_artifact(make_extension):
    extension = make_extension()
    timer = extension.timer
    indicator = extension.indicator
    dialog = extension.dialog
    source = extension.source
    extension.timer.notifyPomodoroStart.emit(False)
    notification = extension.notification
    emitted = []
    extension.disposed.connect(lambda: emitted.append(True))

    extension.dispose()

    assert extension.indicator is None
    assert extension.notification is None
    assert extension.dialog is None
    assert extension.timer is None
    assert extension.settings is None
    assert indicator.is_disposed
    assert notification.is_disposed
    assert dialog.is_disposed
    assert source.is_disposed
    assert timer.disposed
    assert extension.keybindings.removed == [TOGGLE_TIMER_KEY]
    assert emitted == [True]


def test_dispose_twice_is_a_noop(make_extension):
    extension = make_extension()
    emitted = []
    extension.disposed.connect(lambda: emitted.append(True))

    extension.dispose()
    extension.dispose()

    assert emitted == [True]
    assert extension.is_disposed


def test_state_sequence_ending_in_null_destroys_notification(make_extension):
    extension = make_extension()
    timer = extension.timer

    timer.set_state(TimerState.IDLE)
    timer.set_state(TimerState.POMODORO)
    timer.notifyPomodoroStart.emit(False)
    timer.set_state(TimerState.PAUSE)
    timer.notifyPomodoroEnd.emit(True)
    notification = extension.notification
    assert notification is not None

    timer.set_state(TimerState.NULL)

    assert notification.is_disposed
    assert extension.notification is None


@pytest.mark.parametrize(
    "state, expected",
    [
        (TimerState.IDLE, FakeStartNotification),
        (TimerState.POMODORO, FakeStartNotification),
        (TimerState.PAUSE, FakeEndNotification),
    ],
)
def test_service_connected_runs_flow_for_current_state(make_extension, state, expected):
    extension = make_extension()
    extension.timer.state = state

    extension.timer.serviceConnected.emit()

    assert type(extension.notification) is expected


def test_service_connected_in_null_state_shows_nothing(make_extension):
    extension = make_extension()

    extension.timer.serviceConnected.emit()

    assert extension.notification is None


def test_service_disconnected_closes_dialog_and_drops_notification(make_extension):
    extension = make_extension(show_screen_notifications=True)
    extension.timer.state = TimerState.PAUSE
    extension.timer.notifyPomodoroEnd.emit(True)
    notification = extension.notification
    extension.timer.state = TimerState.NULL

    extension.timer.serviceDisconnected.emit()

    assert not extension.dialog.is_open
    assert notification.is_disposed
    assert extension.notification is None


def test_screen_notifications_open_dialog_without_showing_popup(make_extension):
    extension = make_extension(show_screen_notifications=True)
    extension.timer.state = TimerState.PAUSE

    extension.timer.notifyPomodoroEnd.emit(True)

    assert extension.dialog.calls == ["open"]
    assert extension.notification.shown == 0


def test_end_notification_shown_when_screen_notifications_disabled(make_extension):
    extension = make_extension(show_screen_notifications=False)

    extension.timer.notifyPomodoroEnd.emit(True)

    assert extension.dialog.calls == []
    assert extension.notification.shown == 1


def test_end_notification_shown_when_no_dialog_exists(make_extension):
    extension = make_extension(show_screen_notifications=True, dialog=False)

    extension.timer.notifyPomodoroEnd.emit(True)

    assert extension.dialog is None
    assert extension.notification.shown == 1


def test_clicking_end_notification_opens_modal_dialog_and_hides_it(make_extension):
    extension = make_extension()
    extension.timer.notifyPomodoroEnd.emit(True)
    notification = extension.notification

    notification.clicked.emit(notification)

    assert extension.dialog.calls == ["open", "push_modal"]
    assert notification.hidden == 1
    assert not notification.is_disposed
    assert extension.notification is notification


def test_clicking_end_notification_without_dialog_does_nothing(make_extension):
    extension = make_extension(dialog=False)
    extension.timer.notifyPomodoroEnd.emit(True)
    notification = extension.notification

    notification.clicked.emit(notification)

    assert notification.hidden == 0


def test_stale_dispose_event_keeps_current_reference(make_extension):
    extension = make_extension()
    extension.timer.notifyPomodoroStart.emit(False)
    stale = extension.notification
    extension.timer.notifyPomodoroStart.emit(False)
    current = extension.notification

    stale.disposed.emit(stale)

    assert extension.notification is current


def test_dismissed_notification_clears_reference(make_extension):
    extension = make_extension()
    extension.timer.notifyPomodoroStart.emit(False)

    extension.notification.dispose()

    assert extension.notification is None


def test_state_change_away_from_pause_closes_dialog(make_extension):
    extension = make_extension(show_screen_notifications=True)
    extension.timer.state = TimerState.PAUSE
    extension.timer.notifyPomodoroEnd.emit(True)
    assert extension.dialog.is_open

    extension.timer.set_state(TimerState.POMODORO)

    assert not extension.dialog.is_open


def test_dialog_closing_during_break_rearms_and_reshows_popup(make_extension):
    extension = make_extension(show_screen_notifications=True)
    extension.timer.state = TimerState.PAUSE
    extension.timer.notifyPomodoroEnd.emit(True)
    notification = extension.notification

    extension.dialog.close()

    assert notification.shown == 1
    assert extension.dialog.calls[-1] == "open_when_idle"


def test_dialog_closing_outside_break_does_not_rearm(make_extension):
    extension = make_extension(show_screen_notifications=True)
    extension.timer.state = TimerState.PAUSE
    extension.timer.notifyPomodoroEnd.emit(True)

    extension.timer.set_state(TimerState.POMODORO)

    assert "open_when_idle" not in extension.dialog.calls


def test_dialog_closing_does_not_reshow_start_notification(make_extension):
    extension = make_extension()
    extension.timer.notifyPomodoroStart.emit(False)
    notification = extension.notification
    extension.timer.state = TimerState.PAUSE
    extension.dialog.open()

    extension.dialog.close()

    assert notification.shown == 1
    assert extension.dialog.calls[-1] == "open_when_idle"


def test_dialog_dispose_event_clears_reference(make_extension):
    extension = make_extension()

    extension.dialog.dispose()

    assert extension.dialog is None


def test_keybinding_toggles_timer(make_extension):
    extension = make_extension()

    extension.keybindings.press(TOGGLE_TIMER_KEY)

    assert extension.timer.calls == ["toggle"]


def test_settings_failure_is_logged_and_startup_continues(make_extension, settings_error):
    extension = make_extension(settings_error=settings_error)

    assert extension.settings is None
    assert extension.timer is not None
    assert extension.indicator.visible
    assert TOGGLE_TIMER_KEY not in extension.keybindings.bindings
    assert app_logger.extension_errors(extension.uuid) == [str(settings_error)]


def test_settings_failure_falls_back_to_popup_notifications(make_extension, settings_error):
    extension = make_extension(settings_error=settings_error)

    extension.timer.notifyPomodoroEnd.emit(True)

    assert not extension.show_screen_notifications()
    assert extension.dialog.calls == []
    assert extension.notification.shown == 1


def test_notify_issue_does_not_replace_current_notification(make_extension):
    extension = make_extension()
    extension.timer.notifyPomodoroStart.emit(False)
    current = extension.notification

    issue = extension.notify_issue("Timer service crashed")

    assert isinstance(issue, FakeIssueNotification)
    assert issue.message == "Timer service crashed"
    assert issue.shown == 1
    assert extension.notification is current


def test_indicator_quit_is_forwarded(make_extension):
    extension = make_extension()
    requested = []
    extension.quitRequested.connect(lambda: requested.append(True))

    extension.indicator.quitRequested.emit()

    assert requested == [True]


def test_settings_are_read_from_the_metadata_schema(tmp_path, monkeypatch):
    monkeypatch.setenv(SETTINGS_FILE_ENV, str(tmp_path / "preferences.ini"))
    metadata = ExtensionMetadata(
        uuid="pomodoro@example.org",
        name="Pomodoro",
        version="1",
        settings_schema="org.example.pomodoro.preferences",
    )

    extension = PomodoroExtension(
        metadata,
        keybindings=FakeKeybindings(),
        timer_factory=FakeTimer,
        indicator_factory=FakeIndicator,
        dialog_factory=FakeDialog,
        source_factory=FakeSource,
        start_notification_class=FakeStartNotification,
        end_notification_class=FakeEndNotification,
        issue_notification_class=FakeIssueNotification,
    )

    assert extension.settings_schema == "org.example.pomodoro.preferences"
    assert extension.settings_manager.schema == "org.example.pomodoro.preferences"
    assert extension.settings is not None
    extension.dispose()
