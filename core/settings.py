"""
QSettings-backed preferences for the pomodoro shell.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Callable, Optional

from PySide6.QtCore import QSettings

from pomodoro_shell.pomodoro_shell import logger as app_logger

_LOGGER = app_logger.get_logger()

SETTINGS_ORGANIZATION = "gnome-pomodoro"
DEFAULT_SETTINGS_SCHEMA = "org.gnome.pomodoro.preferences"
SETTINGS_FILE_ENV = "POMODORO_SHELL_SETTINGS"

SHOW_SCREEN_NOTIFICATIONS_KEY = "show-screen-notifications"
TOGGLE_TIMER_KEY = "toggle-timer-key"
DEFAULT_TOGGLE_TIMER_ACCELERATOR = "<ctrl>+<alt>+p"

_TRUE_STRINGS = {"true", "1", "yes", "on"}
_FALSE_STRINGS = {"false", "0", "no", "off"}


class SettingsError(RuntimeError):
    """Raised when the settings store cannot be read or holds invalid data."""


@dataclass(eq=True)
class PomodoroSettings:
    show_screen_notifications: bool = False
    toggle_timer_key: str = DEFAULT_TOGGLE_TIMER_ACCELERATOR

    def get_boolean(self, key: str) -> bool:
        if key == SHOW_SCREEN_NOTIFICATIONS_KEY:
            return self.show_screen_notifications
        raise KeyError(f"Unknown boolean setting {key!r}")

    def get_string(self, key: str) -> str:
        if key == TOGGLE_TIMER_KEY:
            return self.toggle_timer_key
        raise KeyError(f"Unknown string setting {key!r}")


def _default_store(schema: str) -> QSettings:
    path = os.environ.get(SETTINGS_FILE_ENV)
    if path:
        return QSettings(path, QSettings.Format.IniFormat)
    return QSettings(SETTINGS_ORGANIZATION, schema)


class SettingsManager:
    """
    Loads persisted preferences and rejects malformed data.

    ``schema`` names the settings scope (the metadata ``settings-schema``) and
    selects the QSettings application the values are read from.
    """

    def __init__(
        self,
        schema: str = DEFAULT_SETTINGS_SCHEMA,
        *,
        store_factory: Optional[Callable[[str], Any]] = None,
    ) -> None:
        self.schema = schema
        self._store_factory = store_factory or _default_store

    def read_settings(self) -> PomodoroSettings:
        store = self._store_factory(self.schema)
        status = store.status()
        if status == QSettings.Status.AccessError:
            raise SettingsError(f"Settings store {store.fileName()} is not accessible.")
        if status == QSettings.Status.FormatError:
            raise SettingsError(f"Settings store {store.fileName()} is malformed.")

        return PomodoroSettings(
            show_screen_notifications=self._read_bool(store, SHOW_SCREEN_NOTIFICATIONS_KEY, False),
            toggle_timer_key=self._read_accelerator(store),
        )

    def _read_bool(self, store, name: str, default: bool) -> bool:
        if not store.contains(name):
            return default
        raw = store.value(name)
        if isinstance(raw, bool):
            return raw
        if isinstance(raw, int):
            return bool(raw)
        if isinstance(raw, str):
            cleaned = raw.strip().lower()
            if cleaned in _TRUE_STRINGS:
                return True
            if cleaned in _FALSE_STRINGS:
                return False
        raise SettingsError(f"Setting {name} has non-boolean value {raw!r}.")

    def _read_accelerator(self, store) -> str:
        if not store.contains(TOGGLE_TIMER_KEY):
            return DEFAULT_TOGGLE_TIMER_ACCELERATOR
        raw = store.value(TOGGLE_TIMER_KEY)
        if isinstance(raw, list):
            # QSettings splits unquoted comma separated values
            raw = raw[0] if raw else ""
        if not isinstance(raw, str):
            raise SettingsError(f"Setting {TOGGLE_TIMER_KEY} has non-string value {raw!r}.")
        cleaned = raw.strip()
        if not cleaned:
            _LOGGER.warning("Empty {} in settings; keybinding disabled.", TOGGLE_TIMER_KEY)
        return cleaned
