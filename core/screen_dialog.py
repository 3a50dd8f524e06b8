"""
Full-screen break overlay shown when a pomodoro ends.
"""

from __future__ import annotations

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QColor, QMouseEvent
from PySide6.QtWidgets import (
    QApplication,
    QDialog,
    QGraphicsDropShadowEffect,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from core.i18n import tr
from core.idle_monitor import IdleMonitor
from core.notifications import format_remaining
from pomodoro_shell.pomodoro_shell import logger as app_logger

IDLE_TIME_TO_OPEN_SECONDS = 60


class PomodoroEndDialog(QDialog):
    """
    Break screen covering the primary display.

    ``closing`` fires whenever an open dialog is closed (button, Escape,
    click or programmatic). ``disposed`` fires once when the dialog is torn
    down; a disposed dialog ignores further calls.
    """

    closing = Signal()
    disposed = Signal()

    def __init__(self, timer, idle_monitor: IdleMonitor | None = None, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._logger = app_logger.get_logger()
        flags = (
            Qt.WindowType.FramelessWindowHint
            | Qt.WindowType.Tool
            | Qt.WindowType.WindowStaysOnTopHint
        )
        self.setWindowFlags(flags)
        self.setWindowOpacity(0.95)
        shadow = QGraphicsDropShadowEffect(self)
        shadow.setBlurRadius(24)
        shadow.setColor(QColor(0, 0, 0, 160))
        shadow.setOffset(0, 12)
        self.setGraphicsEffect(shadow)

        self._timer = timer
        self._idle_monitor = idle_monitor or IdleMonitor(threshold_seconds=IDLE_TIME_TO_OPEN_SECONDS)
        self._idle_monitor.idleReached.connect(self._on_idle_reached)
        self._is_open = False
        self._modal = False
        self._disposed = False

        self._title_label = QLabel(tr("Take a break"))
        self._title_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._title_label.setStyleSheet("font-weight: bold; font-size: 28px;")
        self._countdown_label = QLabel()
        self._countdown_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._countdown_label.setStyleSheet("font-size: 64px;")
        self._hint_label = QLabel(tr("Press Esc or click anywhere to hide"))
        self._hint_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._hint_label.setStyleSheet("color: rgba(255, 255, 255, 0.6);")

        self._start_btn = QPushButton(tr("Start pomodoro"))
        self._start_btn.setMinimumHeight(34)
        self._start_btn.setCursor(Qt.CursorShape.PointingHandCursor)
        self._start_btn.setStyleSheet(
            """
            QPushButton {
                padding: 0 14px;
                border-radius: 10px;
                background-color: #2563eb;
                color: white;
                font-weight: 600;
            }
            QPushButton:hover {
                background-color: #1d4ed8;
            }
            QPushButton:pressed {
                background-color: #1e40af;
            }
            """
        )

        layout = QVBoxLayout(self)
        layout.setContentsMargins(16, 16, 16, 16)
        layout.setSpacing(12)
        layout.addStretch()
        layout.addWidget(self._title_label)
        layout.addWidget(self._countdown_label)
        layout.addSpacing(16)

        button_row = QHBoxLayout()
        button_row.addStretch()
        button_row.addWidget(self._start_btn)
        button_row.addStretch()
        layout.addLayout(button_row)
        layout.addStretch()
        layout.addWidget(self._hint_label)

        self.setStyleSheet(
            """
            QDialog {
                background-color: #111827;
                color: white;
            }
            QLabel {
                color: white;
            }
            """
        )

        self._start_btn.clicked.connect(lambda: self._on_start_clicked())  # type: ignore[arg-type]
        self._timer.elapsedChanged.connect(self._update_countdown)
        self._update_countdown()

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def is_modal(self) -> bool:
        return self._modal

    @property
    def waiting_for_idle(self) -> bool:
        return self._idle_monitor.active

    def open(self) -> None:
        if self._disposed:
            return
        self._idle_monitor.stop()
        if self._is_open:
            return
        self._is_open = True
        self._update_countdown()
        screen = QApplication.primaryScreen()
        if screen is not None:
            self.setGeometry(screen.geometry())
        self.showFullScreen()
        self._logger.debug("Break screen opened.")

    def close(self) -> bool:
        if self._disposed:
            return False
        self._idle_monitor.stop()
        if not self._is_open:
            return False
        self._hide_overlay()
        self._logger.debug("Break screen closed.")
        self.closing.emit()
        return True

    def push_modal(self) -> None:
        if self._disposed or not self._is_open:
            return
        self.raise_()
        self.activateWindow()
        self.grabKeyboard()
        self._modal = True

    def open_when_idle(self) -> None:
        if self._disposed or self._is_open:
            return
        self._logger.debug("Break screen will reopen after {} seconds of inactivity.", self._idle_monitor.threshold_seconds)
        self._idle_monitor.start()

    def dispose(self) -> None:
        if self._disposed:
            return
        self._idle_monitor.stop()
        if self._is_open:
            self._hide_overlay()
        self._disposed = True
        self._timer.elapsedChanged.disconnect(self._update_countdown)
        self.disposed.emit()
        self.deleteLater()

    def reject(self) -> None:
        self.close()

    def mousePressEvent(self, event: QMouseEvent) -> None:  # noqa: N802
        super().mousePressEvent(event)
        if event.button() == Qt.MouseButton.LeftButton:
            self.close()

    def _hide_overlay(self) -> None:
        self._is_open = False
        if self._modal:
            self.releaseKeyboard()
            self._modal = False
        self.hide()

    def _update_countdown(self) -> None:
        self._countdown_label.setText(format_remaining(self._timer.remaining_seconds()))

    def _on_idle_reached(self) -> None:
        self.open()

    def _on_start_clicked(self) -> None:
        # The dialog closes once the timer reports the new state.
        self._timer.start()
