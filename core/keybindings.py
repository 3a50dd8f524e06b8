"""
Global keybindings registered through pynput.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional

from PySide6.QtCore import QObject, Signal

from pomodoro_shell.pomodoro_shell import logger as app_logger


class PynputHotkeyBackend:
    """Thin wrapper so pynput (which needs a display) is imported on first use."""

    def parse(self, accelerator: str) -> None:
        from pynput import keyboard

        keyboard.HotKey.parse(accelerator)

    def listen(self, hotkeys: Dict[str, Callable[[], None]]):
        from pynput import keyboard

        listener = keyboard.GlobalHotKeys(hotkeys)
        listener.daemon = True
        listener.start()
        return listener


@dataclass
class _Binding:
    accelerator: str
    handler: Callable[[], None]


class KeybindingManager(QObject):
    """
    Keeps a registry of named global keybindings.

    pynput reports presses on its own thread; they are forwarded through a
    queued signal so handlers always run on the Qt thread.
    """

    activated = Signal(str)

    def __init__(self, backend=None, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._logger = app_logger.get_logger()
        self._backend = backend or PynputHotkeyBackend()
        self._bindings: Dict[str, _Binding] = {}
        self._listener = None
        self.activated.connect(self._on_activated)

    def add_keybinding(self, name: str, accelerator: str, handler: Callable[[], None]) -> bool:
        """Register ``handler`` under ``name``; returns False if the accelerator is unusable."""
        if not accelerator:
            self._logger.info("No accelerator configured for {}; skipping.", name)
            return False
        try:
            self._backend.parse(accelerator)
        except (ValueError, ImportError) as exc:
            self._logger.error("Cannot register keybinding {} ({}): {}", name, accelerator, exc)
            return False

        self._bindings[name] = _Binding(accelerator=accelerator, handler=handler)
        self._logger.info("Registered keybinding {} -> {}", name, accelerator)
        self._restart_listener()
        return True

    def remove_keybinding(self, name: str) -> None:
        if self._bindings.pop(name, None) is None:
            return
        self._logger.info("Removed keybinding {}", name)
        self._restart_listener()

    def has_keybinding(self, name: str) -> bool:
        return name in self._bindings

    def accelerator(self, name: str) -> Optional[str]:
        binding = self._bindings.get(name)
        return binding.accelerator if binding else None

    def dispose(self) -> None:
        self._bindings.clear()
        self._stop_listener()

    def _restart_listener(self) -> None:
        self._stop_listener()
        if not self._bindings:
            return
        hotkeys = {
            binding.accelerator: self._make_callback(name)
            for name, binding in self._bindings.items()
        }
        try:
            self._listener = self._backend.listen(hotkeys)
        except (ValueError, ImportError, OSError) as exc:
            self._logger.error("Global keybinding listener unavailable: {}", exc)
            self._listener = None

    def _stop_listener(self) -> None:
        if self._listener is None:
            return
        self._listener.stop()
        self._listener = None

    def _make_callback(self, name: str) -> Callable[[], None]:
        def _emit() -> None:
            self.activated.emit(name)

        return _emit

    def _on_activated(self, name: str) -> None:
        binding = self._bindings.get(name)
        if binding is None:
            return
        self._logger.debug("Keybinding {} pressed.", name)
        binding.handler()
