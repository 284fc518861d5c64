from __future__ import annotations

import json
import os
from typing import Any

from .logger import get_logger
from .path_utils import abs_path_str

_logger = get_logger("settings")

SETTINGS_ENV = "METHODS_BRIDGE_SETTINGS"
_PLATFORMS = ("auto", "qt", "desktop")


class SettingsManager:
    def __init__(self, settings_path: str):
        self.settings_path = abs_path_str(settings_path)
        self._settings: dict[str, Any] = {}
        self.load()

    DEFAULTS: dict[str, Any] = {
        "organization": "opensource",
        "application": "wild",
        "platform": "auto",
        "marker_file_name": "data.local",
        "marker_path": None,
        "worker_shutdown_timeout": 5.0,
        "keep_screen_on": False,
    }

    def load(self) -> None:
        try:
            if os.path.exists(self.settings_path):
                with open(self.settings_path, encoding="utf-8") as f:
                    data = json.load(f)
                    if isinstance(data, dict):
                        self._settings = data
                        _logger.debug("settings loaded: %s", self.settings_path)
                        return
                    _logger.warning("settings file is not a JSON object: %s", self.settings_path)
        except (OSError, ValueError) as e:
            _logger.warning("settings load failed: %s", e)
        self._settings = {}

    def save(self) -> None:
        try:
            os.makedirs(os.path.dirname(self.settings_path), exist_ok=True)
            with open(self.settings_path, "w", encoding="utf-8") as f:
                json.dump(self._settings, f, ensure_ascii=False, indent=2)
            _logger.debug("settings saved: %s", self.settings_path)
        except OSError as e:
            _logger.error("settings save failed: %s", e)

    def get(self, key: str, default: Any = None) -> Any:
        if key in self._settings:
            return self._settings[key]
        if default is not None:
            return default
        return self.DEFAULTS.get(key)

    def set(self, key: str, value: Any) -> None:
        self._settings[key] = value
        self.save()

    @property
    def data(self) -> dict[str, Any]:
        return self._settings

    @property
    def organization(self) -> str:
        return str(self.get("organization") or self.DEFAULTS["organization"])

    @property
    def application(self) -> str:
        return str(self.get("application") or self.DEFAULTS["application"])

    @property
    def platform(self) -> str:
        val = str(self.get("platform") or "auto").strip().lower()
        if val not in _PLATFORMS:
            _logger.warning("unknown platform setting %r, using auto", val)
            return "auto"
        return val

    @property
    def marker_file_name(self) -> str:
        return str(self.get("marker_file_name") or self.DEFAULTS["marker_file_name"])

    @property
    def marker_path(self) -> str | None:
        val = self.get("marker_path")
        return abs_path_str(val) if isinstance(val, str) and val.strip() else None

    @property
    def worker_shutdown_timeout(self) -> float:
        try:
            return max(0.0, float(self.get("worker_shutdown_timeout")))
        except (TypeError, ValueError):
            return float(self.DEFAULTS["worker_shutdown_timeout"])

    @property
    def keep_screen_on(self) -> bool:
        return bool(self.get("keep_screen_on", False))


def default_settings_path() -> str:
    """Settings location: env override, else the per-user config directory."""
    env_path = (os.getenv(SETTINGS_ENV) or "").strip()
    if env_path:
        return abs_path_str(env_path)

    from PySide6.QtCore import QStandardPaths  # noqa: PLC0415

    base = QStandardPaths.writableLocation(QStandardPaths.StandardLocation.AppConfigLocation)
    if not base:
        base = os.path.join(os.path.expanduser("~"), ".config", "methods_bridge")
    return abs_path_str(os.path.join(base, "settings.json"))
