"""
pomodoro_shell package.

Host-side glue for the pomodoro shell: logging and the extension entry
points that build and tear down the controller.
"""

__all__ = [
    "extension",
    "logger",
]
