from core import i18n
from pomodoro_shell.pomodoro_shell import extension
from pomodoro_shell.pomodoro_shell import logger as app_logger
from pomodoro_shell.pomodoro_shell.extension import ExtensionContext
from shared.metadata import ExtensionMetadata

METADATA = ExtensionMetadata(
    uuid="pomodoro@example.org",
    name="Pomodoro",
    version="1",
    settings_schema="org.gnome.pomodoro.preferences",
)


class FakeController:
    def __init__(self, metadata) -> None:
        self.metadata = metadata
        self.disposed = 0

    def dispose(self) -> None:
        self.disposed += 1


def _context():
    built = []

    def _factory(metadata):
        controller = FakeController(metadata)
        built.append(controller)
        return controller

    return ExtensionContext(extension_factory=_factory), built


def test_init_stores_metadata_for_enable():
    context, built = _context()

    extension.init(METADATA, context)
    controller = extension.enable(context)

    assert controller.metadata is METADATA
    assert built == [controller]


def test_enable_is_guarded_against_duplicates():
    context, built = _context()

    first = extension.enable(context)
    second = extension.enable(context)

    assert first is second
    assert len(built) == 1


def test_disable_disposes_and_allows_reenable():
    context, built = _context()
    first = extension.enable(context)

    extension.disable(context)
    extension.disable(context)
    second = extension.enable(context)

    assert first.disposed == 1
    assert context.extension is second
    assert second is not first


def test_default_context_is_shared():
    assert extension.get_context() is extension.get_context()


def test_extension_errors_are_recorded_per_uuid():
    app_logger.log_extension_error("a@example.org", ValueError("broken schema"))
    app_logger.log_extension_error("b@example.org", "other")

    assert app_logger.extension_errors("a@example.org") == ["broken schema"]
    app_logger.clear_extension_errors("a@example.org")
    assert app_logger.extension_errors("a@example.org") == []
    assert app_logger.extension_errors("b@example.org") == ["other"]


def test_init_installs_translations_once(monkeypatch, tmp_path):
    calls = []

    def _install(domain, locale_dir):
        calls.append((domain, locale_dir))
        return True

    monkeypatch.setattr(i18n, "install_translations", _install)
    context, _ = _context()
    context.locale_dir = tmp_path

    extension.init(METADATA, context)
    extension.init(METADATA, context)

    assert calls == [("gnome-pomodoro", tmp_path)]
    assert context.translations_installed
