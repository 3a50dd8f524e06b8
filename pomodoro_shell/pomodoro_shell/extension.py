"""
Extension entry points: ``init``, ``enable`` and ``disable``.

The host (``pomodoro_shell.main``) calls ``init`` once with the extension
metadata, then ``enable``/``disable`` any number of times. State lives in an
``ExtensionContext`` rather than module globals so tests can use their own.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional

from core import i18n
from core.app import PACKAGE_NAME, PomodoroExtension
from shared.metadata import ExtensionMetadata, load_metadata

from . import logger

METADATA_PATH = Path(__file__).resolve().parent / "metadata.json"
LOCALE_DIR = Path(__file__).resolve().parent / "locale"


@dataclass
class ExtensionContext:
    extension_factory: Callable[[Optional[ExtensionMetadata]], Any] = PomodoroExtension
    metadata: Optional[ExtensionMetadata] = None
    locale_dir: Path = LOCALE_DIR
    extension: Optional[Any] = field(default=None, init=False)
    translations_installed: bool = field(default=False, init=False)


_CONTEXT = ExtensionContext()


def get_context() -> ExtensionContext:
    return _CONTEXT


def load_default_metadata() -> ExtensionMetadata:
    return load_metadata(METADATA_PATH)


def init(metadata: ExtensionMetadata, context: Optional[ExtensionContext] = None) -> None:
    context = context or get_context()
    context.metadata = metadata
    if not context.translations_installed:
        context.translations_installed = i18n.install_translations(PACKAGE_NAME, context.locale_dir)
    logger.get_logger().info("Initialised {} {} ({})", metadata.name, metadata.version, metadata.uuid)


def enable(context: Optional[ExtensionContext] = None):
    context = context or get_context()
    if context.extension is None:
        context.extension = context.extension_factory(context.metadata)
    return context.extension


def disable(context: Optional[ExtensionContext] = None) -> None:
    context = context or get_context()
    if context.extension is not None:
        context.extension.dispose()
        context.extension = None
