"""
Notification popups presented in the bottom-right corner for timer transitions.
"""

from __future__ import annotations

from typing import List

from PySide6.QtCore import QObject, QPoint, QSize, Qt, Signal
from PySide6.QtGui import QColor, QMouseEvent
from PySide6.QtWidgets import (
    QApplication,
    QGraphicsDropShadowEffect,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QSizePolicy,
    QStyle,
    QToolButton,
    QVBoxLayout,
    QWidget,
)

from core.i18n import tr

_POPUP_STYLE = """
QWidget#PopupCard {
    background-color: rgba(24, 24, 28, 0.78);
    color: white;
    border-radius: 12px;
    border: 1px solid rgba(255, 255, 255, 0.10);
}
QWidget#PopupCard QLabel#NotificationTitle {
    color: white;
}
QWidget#PopupCard QLabel#NotificationMessage {
    color: rgba(255, 255, 255, 0.85);
    margin-top: 2px;
}
"""

_ACTION_STYLE = """
QPushButton {
    padding: 0 14px;
    min-height: 30px;
    border-radius: 10px;
    background-color: rgba(255, 255, 255, 0.12);
    color: white;
    font-weight: 600;
}
QPushButton:hover {
    background-color: rgba(255, 255, 255, 0.22);
}
QPushButton:pressed {
    background-color: rgba(255, 255, 255, 0.30);
}
"""


def format_remaining(seconds: int) -> str:
    minutes, seconds = divmod(max(0, int(seconds)), 60)
    return f"{minutes:02d}:{seconds:02d}"


class NotificationSource(QObject):
    """Groups the popups created by the shell so they can be torn down together."""

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._notifications: List["Notification"] = []

    @property
    def notifications(self) -> List["Notification"]:
        return list(self._notifications)

    def add(self, notification: "Notification") -> None:
        if notification not in self._notifications:
            self._notifications.append(notification)

    def remove(self, notification: "Notification") -> None:
        if notification in self._notifications:
            self._notifications.remove(notification)

    def dispose(self) -> None:
        for notification in self.notifications:
            notification.dispose()
        self._notifications.clear()


class Notification(QWidget):
    clicked = Signal(object)
    disposed = Signal(object)

    def __init__(
        self,
        title: str,
        message: str,
        source: NotificationSource | None = None,
        parent: QWidget | None = None,
    ) -> None:
        flags = Qt.WindowType.Tool | Qt.WindowType.FramelessWindowHint | Qt.WindowType.WindowStaysOnTopHint
        super().__init__(parent)
        self.setWindowFlags(flags)
        self.setObjectName("PomodoroNotification")
        self.setAttribute(Qt.WidgetAttribute.WA_TranslucentBackground, True)
        self.setAttribute(Qt.WidgetAttribute.WA_ShowWithoutActivating, True)
        self.setWindowOpacity(0.90)

        self._source = source
        self._disposed = False

        self._container = QWidget(self)
        self._container.setObjectName("PopupCard")
        shadow = QGraphicsDropShadowEffect(self._container)
        shadow.setBlurRadius(24)
        shadow.setColor(QColor(0, 0, 0, 140))
        shadow.setOffset(0, 10)
        self._container.setGraphicsEffect(shadow)

        self._icon_label = QLabel()
        self._icon_label.setFixedSize(48, 48)
        self._icon_label.setSizePolicy(QSizePolicy.Policy.Fixed, QSizePolicy.Policy.Fixed)
        icon = self.style().standardIcon(QStyle.StandardPixmap.SP_MessageBoxInformation)
        self._icon_label.setPixmap(icon.pixmap(48, 48))

        self._title_label = QLabel(title)
        self._title_label.setObjectName("NotificationTitle")
        self._title_label.setStyleSheet("font-weight: bold; font-size: 14px;")

        self._message_label = QLabel(message)
        self._message_label.setWordWrap(True)
        self._message_label.setObjectName("NotificationMessage")
        self._message_label.setMaximumWidth(360)

        self._close_button = QToolButton()
        self._close_button.setAutoRaise(True)
        self._close_button.setCursor(Qt.CursorShape.PointingHandCursor)
        self._close_button.setToolTip(tr("Dismiss"))
        self._close_button.setIconSize(QSize(14, 14))
        self._close_button.setIcon(self.style().standardIcon(QStyle.StandardPixmap.SP_TitleBarCloseButton))
        self._close_button.clicked.connect(lambda: self.dispose())  # type: ignore[arg-type]

        header = QHBoxLayout()
        header.setSpacing(6)
        header.addWidget(self._title_label)
        header.addStretch()
        header.addWidget(self._close_button)

        self._actions_row = QWidget()
        self._actions_layout = QHBoxLayout(self._actions_row)
        self._actions_layout.setContentsMargins(0, 6, 0, 0)
        self._actions_layout.setSpacing(10)
        self._actions_layout.addStretch()
        self._actions_row.hide()

        text_layout = QVBoxLayout()
        text_layout.setSpacing(4)
        text_layout.addLayout(header)
        text_layout.addWidget(self._message_label)
        text_layout.addWidget(self._actions_row)

        base_layout = QHBoxLayout(self)
        base_layout.setContentsMargins(0, 0, 0, 0)
        base_layout.addWidget(self._container)

        layout = QHBoxLayout(self._container)
        layout.addWidget(self._icon_label)
        layout.addLayout(text_layout)
        layout.setContentsMargins(12, 10, 12, 12)
        layout.setSpacing(10)
        self.setMinimumWidth(340)
        self.setMaximumWidth(460)
        self.setStyleSheet(_POPUP_STYLE)

        if self._source is not None:
            self._source.add(self)

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @property
    def title(self) -> str:
        return self._title_label.text()

    @property
    def message(self) -> str:
        return self._message_label.text()

    def set_message(self, message: str) -> None:
        self._message_label.setText(message)

    def add_action(self, label: str, callback) -> QPushButton:
        button = QPushButton(label)
        button.setCursor(Qt.CursorShape.PointingHandCursor)
        button.setStyleSheet(_ACTION_STYLE)
        button.clicked.connect(lambda: callback())  # type: ignore[arg-type]
        self._actions_layout.addWidget(button)
        self._actions_row.show()
        return button

    def show(self) -> None:
        if self._disposed:
            return
        self.adjustSize()
        self._position_bottom_right()
        super().show()

    def hide(self) -> None:
        if self._disposed:
            return
        super().hide()

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        super().hide()
        if self._source is not None:
            self._source.remove(self)
        self.disposed.emit(self)
        self.deleteLater()

    def _position_bottom_right(self) -> None:
        screen = QApplication.primaryScreen()
        if screen is None:
            return
        geometry = screen.availableGeometry()
        x = geometry.right() - self.width() - 20
        y = geometry.bottom() - self.height() - 20
        self.move(QPoint(x, y))

    def mousePressEvent(self, event: QMouseEvent) -> None:  # noqa: N802
        super().mousePressEvent(event)
        if event.button() == Qt.MouseButton.LeftButton:
            self.clicked.emit(self)


class PomodoroStartNotification(Notification):
    def __init__(self, timer, source: NotificationSource | None = None) -> None:
        super().__init__(tr("Pomodoro"), tr("Focus on your task."), source)
        self._timer = timer


class PomodoroEndNotification(Notification):
    def __init__(self, timer, source: NotificationSource | None = None) -> None:
        super().__init__(tr("Take a break"), "", source)
        self._timer = timer
        self.add_action(tr("Start pomodoro"), self._on_start_clicked)
        self._update_remaining()
        self._timer.elapsedChanged.connect(self._update_remaining)

    def dispose(self) -> None:
        if not self.is_disposed:
            self._timer.elapsedChanged.disconnect(self._update_remaining)
        super().dispose()

    def _update_remaining(self) -> None:
        remaining = format_remaining(self._timer.remaining_seconds())
        self.set_message(tr("{remaining} remaining").format(remaining=remaining))

    def _on_start_clicked(self) -> None:
        self._timer.start()
        self.dispose()


class IssueNotification(Notification):
    def __init__(self, message: str, source: NotificationSource | None = None) -> None:
        super().__init__(tr("Pomodoro"), message, source)
        icon = self.style().standardIcon(QStyle.StandardPixmap.SP_MessageBoxWarning)
        self._icon_label.setPixmap(icon.pixmap(48, 48))
