from __future__ import annotations

import os
from enum import Enum

from methods_bridge.logger import get_logger
from methods_bridge.path_utils import is_dir, join_str
from methods_bridge.platform_dirs import PlatformDirs

_logger = get_logger("path_resolver")

MARKER_FILE_NAME = "data.local"


class RootKind(str, Enum):
    DATA = "data-root"
    DOCUMENTS = "documents-root"


class PathResolver:
    """Resolve logical roots to absolute directory paths.

    The data root may be redirected by an override marker: a small UTF-8 file
    whose whole content (whitespace-trimmed) names another directory. By
    default the marker sits inside the platform data root as `data.local`.
    A marker that is missing, unreadable, empty or naming something that is
    not a directory is ignored.
    """

    def __init__(
        self,
        dirs: PlatformDirs,
        *,
        marker_path: str | os.PathLike[str] | None = None,
        marker_file_name: str = MARKER_FILE_NAME,
    ) -> None:
        self._dirs = dirs
        self._marker_path = os.fspath(marker_path) if marker_path is not None else None
        self._marker_file_name = marker_file_name

    def marker_path(self) -> str:
        if self._marker_path:
            return self._marker_path
        return join_str(self._dirs.standard_data_root(), self._marker_file_name)

    def read_override(self) -> str | None:
        """Return the override directory named by the marker, if it is usable."""
        marker = None
        try:
            marker = self.marker_path()
            with open(marker, encoding="utf-8") as f:
                candidate = f.read().strip()
        except FileNotFoundError:
            return None
        except (OSError, RuntimeError, UnicodeDecodeError) as e:
            # RuntimeError: Path.home() with no resolvable home directory.
            _logger.debug("override marker unreadable (%s): %s", marker, e)
            return None

        if not candidate:
            return None
        if not is_dir(candidate):
            _logger.debug("override marker ignored, not a directory: %s", candidate)
            return None
        return candidate

    def resolve_root(self, kind: RootKind | str) -> str:
        kind = RootKind(kind)
        if kind is RootKind.DOCUMENTS:
            return self._dirs.standard_documents_root()

        override = self.read_override()
        if override is not None:
            _logger.debug("data root overridden: %s", override)
            return override
        return self._dirs.standard_data_root()
