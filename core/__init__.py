"""
Core components of the pomodoro shell: timer handle, widgets and controller.
"""

from .timer import Timer, TimerState  # noqa: F401
from .settings import PomodoroSettings, SettingsError, SettingsManager  # noqa: F401
