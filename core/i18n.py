"""
Translation helpers for user-visible strings.

Strings are looked up in the ``PomodoroShell`` context through the Qt
translators installed on the application. Catalogues are ``.qm`` files named
``<domain>_<locale>.qm``.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from PySide6.QtCore import QCoreApplication, QLocale, QTranslator

from pomodoro_shell.pomodoro_shell import logger as app_logger

TRANSLATION_CONTEXT = "PomodoroShell"

_LOGGER = app_logger.get_logger()
_INSTALLED: List[QTranslator] = []


def tr(text: str) -> str:
    return QCoreApplication.translate(TRANSLATION_CONTEXT, text)


def install_translations(domain: str, locale_dir: Path, locale: Optional[QLocale] = None) -> bool:
    """
    Install the catalogue for ``locale`` (the system locale by default).

    Returns ``False`` when there is no application instance or no matching
    catalogue; strings then stay untranslated.
    """
    app = QCoreApplication.instance()
    if app is None:
        _LOGGER.warning("No application instance; {} translations not installed.", domain)
        return False

    locale = locale or QLocale.system()
    translator = QTranslator(app)
    if not translator.load(locale, domain, "_", str(locale_dir)):
        _LOGGER.debug("No {} translations for {} in {}.", domain, locale.name(), locale_dir)
        return False

    QCoreApplication.installTranslator(translator)
    _INSTALLED.append(translator)
    _LOGGER.info("Installed {} translations for {}.", domain, locale.name())
    return True


def remove_translations() -> None:
    while _INSTALLED:
        QCoreApplication.removeTranslator(_INSTALLED.pop())
