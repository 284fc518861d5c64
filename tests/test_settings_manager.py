from __future__ import annotations

import json
from pathlib import Path

from methods_bridge.path_utils import abs_path_str
from methods_bridge.settings_manager import SettingsManager, default_settings_path


def test_defaults_without_file(tmp_path: Path) -> None:
    sm = SettingsManager(str(tmp_path / "settings.json"))
    assert sm.organization == "opensource"
    assert sm.application == "wild"
    assert sm.platform == "auto"
    assert sm.marker_file_name == "data.local"
    assert sm.marker_path is None
    assert sm.worker_shutdown_timeout == 5.0
    assert sm.keep_screen_on is False


def test_set_persists_and_reloads(tmp_path: Path) -> None:
    path = tmp_path / "cfg" / "settings.json"
    sm = SettingsManager(str(path))
    sm.set("keep_screen_on", True)
    sm.set("marker_path", str(tmp_path / "m.txt"))

    again = SettingsManager(str(path))
    assert again.keep_screen_on is True
    assert again.marker_path == abs_path_str(tmp_path / "m.txt")
    assert json.loads(path.read_text(encoding="utf-8"))["keep_screen_on"] is True


def test_corrupt_file_falls_back_to_defaults(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")
    sm = SettingsManager(str(path))
    assert sm.data == {}
    assert sm.application == "wild"


def test_invalid_values_are_sanitized(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"platform": "amiga", "worker_shutdown_timeout": "soon"}), encoding="utf-8")
    sm = SettingsManager(str(path))
    assert sm.platform == "auto"
    assert sm.worker_shutdown_timeout == 5.0


def test_settings_path_is_normalized(tmp_path: Path) -> None:
    cfg_dir = tmp_path / "somecfg"
    cfg_dir.mkdir()
    forward_slash_path = str(cfg_dir).replace("\\", "/") + "/settings.json"
    sm = SettingsManager(forward_slash_path)
    assert sm.settings_path == abs_path_str(forward_slash_path)


def test_default_settings_path_env_override(tmp_path: Path, monkeypatch) -> None:
    target = tmp_path / "env_settings.json"
    monkeypatch.setenv("METHODS_BRIDGE_SETTINGS", str(target))
    assert default_settings_path() == abs_path_str(target)
