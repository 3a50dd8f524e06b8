from core.keybindings import KeybindingManager


class FakeListener:
    def __init__(self, hotkeys) -> None:
        self.hotkeys = hotkeys
        self.stopped = False

    def stop(self) -> None:
        self.stopped = True


class FakeBackend:
    def __init__(self) -> None:
        self.listeners = []

    def parse(self, accelerator) -> None:
        if "<" not in accelerator:
            raise ValueError(accelerator)

    def listen(self, hotkeys):
        listener = FakeListener(hotkeys)
        self.listeners.append(listener)
        return listener


def test_pressing_registered_accelerator_runs_handler():
    backend = FakeBackend()
    manager = KeybindingManager(backend)
    pressed = []

    assert manager.add_keybinding("toggle-timer-key", "<ctrl>+<alt>+p", lambda: pressed.append(True))
    backend.listeners[-1].hotkeys["<ctrl>+<alt>+p"]()

    assert pressed == [True]
    assert manager.accelerator("toggle-timer-key") == "<ctrl>+<alt>+p"


def test_readding_a_name_replaces_the_binding():
    backend = FakeBackend()
    manager = KeybindingManager(backend)
    manager.add_keybinding("toggle-timer-key", "<ctrl>+<alt>+p", lambda: None)

    manager.add_keybinding("toggle-timer-key", "<ctrl>+<alt>+o", lambda: None)

    assert backend.listeners[0].stopped
    assert list(backend.listeners[-1].hotkeys) == ["<ctrl>+<alt>+o"]


def test_invalid_accelerator_is_rejected():
    backend = FakeBackend()
    manager = KeybindingManager(backend)

    assert not manager.add_keybinding("toggle-timer-key", "ctrl-p", lambda: None)
    assert not manager.add_keybinding("toggle-timer-key", "", lambda: None)
    assert not manager.has_keybinding("toggle-timer-key")
    assert backend.listeners == []


def test_remove_stops_listener_and_ignores_unknown_names():
    backend = FakeBackend()
    manager = KeybindingManager(backend)
    manager.add_keybinding("toggle-timer-key", "<ctrl>+<alt>+p", lambda: None)

    manager.remove_keybinding("missing")
    manager.remove_keybinding("toggle-timer-key")

    assert backend.listeners[-1].stopped
    assert len(backend.listeners) == 1
    assert not manager.has_keybinding("toggle-timer-key")


def test_activation_after_removal_is_ignored():
    backend = FakeBackend()
    manager = KeybindingManager(backend)
    pressed = []
    manager.add_keybinding("toggle-timer-key", "<ctrl>+<alt>+p", lambda: pressed.append(True))
    callback = backend.listeners[-1].hotkeys["<ctrl>+<alt>+p"]

    manager.dispose()
    callback()

    assert pressed == []
    assert backend.listeners[-1].stopped
