"""Platform directory constants.

The bridge core only depends on the `PlatformDirs` interface. Implementations:

- `QtPlatformDirs`: Qt's `QStandardPaths` (application data + documents).
- `DesktopPlatformDirs`: the desktop layout used by the reader app:
  Windows `<exe dir>/data`, macOS `~/Library/Application Support/<org>/<app>`,
  Linux `~/.<org>/<app>`.
- `StaticPlatformDirs`: fixed paths (tests, embedding).
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from methods_bridge.logger import get_logger
from methods_bridge.path_utils import abs_path_str, join_str

if TYPE_CHECKING:
    from methods_bridge.settings_manager import SettingsManager

_logger = get_logger("platform_dirs")


class PlatformDirs(Protocol):
    def standard_data_root(self) -> str: ...

    def standard_documents_root(self) -> str: ...


class StaticPlatformDirs:
    def __init__(self, data_root: str | os.PathLike[str], documents_root: str | os.PathLike[str]) -> None:
        self._data_root = abs_path_str(data_root)
        self._documents_root = abs_path_str(documents_root)

    def standard_data_root(self) -> str:
        return self._data_root

    def standard_documents_root(self) -> str:
        return self._documents_root


class DesktopPlatformDirs:
    def __init__(self, organization: str, application: str, *, platform: str | None = None) -> None:
        self._organization = organization
        self._application = application
        self._platform = platform or sys.platform

    def standard_data_root(self) -> str:
        if self._platform.startswith("win"):
            # Portable layout: data lives next to the executable.
            return join_str(Path(sys.executable).resolve().parent, "data")
        home = Path.home()
        if self._platform == "darwin":
            return join_str(home, "Library", "Application Support", self._organization, self._application)
        return join_str(home, f".{self._organization}", self._application)

    def standard_documents_root(self) -> str:
        return join_str(Path.home(), "Documents")


class QtPlatformDirs:
    """Directories reported by `QStandardPaths`.

    Qt derives the application data location from the organization and
    application names set on `QCoreApplication`, so those must be configured
    before the first lookup.
    """

    def standard_data_root(self) -> str:
        from PySide6.QtCore import QStandardPaths  # noqa: PLC0415

        path = QStandardPaths.writableLocation(QStandardPaths.StandardLocation.AppDataLocation)
        if not path:
            raise OSError("no application data location available")
        return abs_path_str(path)

    def standard_documents_root(self) -> str:
        from PySide6.QtCore import QStandardPaths  # noqa: PLC0415

        path = QStandardPaths.writableLocation(QStandardPaths.StandardLocation.DocumentsLocation)
        if not path:
            raise OSError("no documents location available")
        return abs_path_str(path)


def default_platform_dirs(settings: SettingsManager) -> PlatformDirs:
    choice = settings.platform
    if choice == "auto":
        # Desktop builds share their data directory layout with the native library.
        choice = "qt" if sys.platform in ("android", "ios") else "desktop"
    _logger.debug("platform dirs: %s", choice)
    if choice == "desktop":
        return DesktopPlatformDirs(settings.organization, settings.application)
    return QtPlatformDirs()
