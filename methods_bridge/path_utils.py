"""Path normalization utilities.

- Use absolute paths when handing paths to the UI.
- Never require that a path exists; callers decide what a missing path means.

Keep this module free of Qt dependencies.
"""

from __future__ import annotations

import os
from pathlib import Path

_DRIVE_PREFIX_LEN = 2


def _normalize_drive_letter(path_str: str) -> str:
    # Normalize drive letter casing on Windows ("c:\\" -> "C:\\").
    if len(path_str) >= _DRIVE_PREFIX_LEN and path_str[1] == ":":
        return path_str[0].upper() + path_str[1:]
    return path_str


def abs_path(path: str | os.PathLike[str]) -> Path:
    """Return an absolute path without requiring that it exists."""
    p = Path(path).expanduser()
    try:
        # strict=False avoids exceptions for non-existent paths.
        return p.resolve(strict=False)
    except OSError:
        return p.absolute()


def abs_path_str(path: str | os.PathLike[str]) -> str:
    """Absolute, OS-native path string (Windows uses backslashes)."""
    return _normalize_drive_letter(str(abs_path(path)))


def join_str(*parts: str | os.PathLike[str]) -> str:
    """Join path parts into an OS-native string, without resolving anything."""
    return _normalize_drive_letter(str(Path(*parts)))


def is_dir(path: str | os.PathLike[str]) -> bool:
    """`os.path.isdir` that treats filesystem errors as "not a directory"."""
    try:
        return Path(path).is_dir()
    except (OSError, ValueError):
        return False
