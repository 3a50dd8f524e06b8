"""
Tray indicator reflecting the timer state.
"""

from __future__ import annotations

from PySide6.QtCore import QT_TRANSLATE_NOOP, QObject, Signal
from PySide6.QtGui import QAction
from PySide6.QtWidgets import QApplication, QMenu, QStyle, QSystemTrayIcon

from core.i18n import TRANSLATION_CONTEXT, tr
from core.notifications import format_remaining
from core.timer import TimerState

_STATE_LABELS = {
    TimerState.IDLE: QT_TRANSLATE_NOOP(TRANSLATION_CONTEXT, "Idle"),
    TimerState.POMODORO: QT_TRANSLATE_NOOP(TRANSLATION_CONTEXT, "Pomodoro"),
    TimerState.PAUSE: QT_TRANSLATE_NOOP(TRANSLATION_CONTEXT, "Break"),
}

_STATE_ICONS = {
    TimerState.NULL: QStyle.StandardPixmap.SP_MediaStop,
    TimerState.IDLE: QStyle.StandardPixmap.SP_MediaPause,
    TimerState.POMODORO: QStyle.StandardPixmap.SP_MediaPlay,
    TimerState.PAUSE: QStyle.StandardPixmap.SP_BrowserReload,
}


def describe_state(title: str, state: TimerState, remaining_seconds: int, connected: bool = True) -> str:
    if not connected:
        return f"{title}: {tr('Service unavailable')}"
    if state is TimerState.NULL:
        return f"{title}: {tr('Stopped')}"
    return f"{title}: {tr(_STATE_LABELS[state])} {format_remaining(remaining_seconds)}"


class Indicator(QSystemTrayIcon):
    quitRequested = Signal()

    def __init__(self, timer, title: str | None = None, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._timer = timer
        self._title = title or tr("Pomodoro")
        self._disposed = False

        self._menu = QMenu()
        self._toggle_action = QAction(tr("Start"), self._menu)
        self._reset_action = QAction(tr("Reset"), self._menu)
        self._quit_action = QAction(tr("Quit"), self._menu)
        self._menu.addAction(self._toggle_action)
        self._menu.addAction(self._reset_action)
        self._menu.addSeparator()
        self._menu.addAction(self._quit_action)
        self.setContextMenu(self._menu)

        self._toggle_action.triggered.connect(lambda: self._timer.toggle())
        self._reset_action.triggered.connect(lambda: self._timer.reset())
        self._quit_action.triggered.connect(lambda: self.quitRequested.emit())

        for signal in self._timer_signals():
            signal.connect(self.refresh)
        self.refresh()

    @property
    def toggle_label(self) -> str:
        return self._toggle_action.text()

    def refresh(self) -> None:
        if self._disposed:
            return
        state = self._timer.get_state()
        connected = self._timer.connected
        self.setToolTip(describe_state(self._title, state, self._timer.remaining_seconds(), connected))
        self.setIcon(QApplication.style().standardIcon(_STATE_ICONS[state]))
        self._toggle_action.setText(tr("Start") if state is TimerState.NULL else tr("Stop"))
        self._toggle_action.setEnabled(connected)
        self._reset_action.setEnabled(connected and state is not TimerState.NULL)

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        for signal in self._timer_signals():
            signal.disconnect(self.refresh)
        self.hide()
        self._menu.deleteLater()
        self.deleteLater()

    def _timer_signals(self):
        return (
            self._timer.serviceConnected,
            self._timer.serviceDisconnected,
            self._timer.stateChanged,
            self._timer.elapsedChanged,
        )
