from __future__ import annotations

import threading
from pathlib import Path

import pytest

from methods_bridge.app.host import BridgeHost
from methods_bridge.bridge.outcome import Success
from methods_bridge.platform_dirs import StaticPlatformDirs
from methods_bridge.settings_manager import SettingsManager


@pytest.fixture
def host(tmp_path: Path):
    data = tmp_path / "data"
    docs = tmp_path / "docs"
    data.mkdir()
    docs.mkdir()
    sm = SettingsManager(str(tmp_path / "settings.json"))
    h = BridgeHost(settings=sm, dirs=StaticPlatformDirs(data, docs))
    yield h
    h.close()


def _call(host, qtbot, recording_result, name, arg=None):
    res = recording_result()
    host.channel.invoke(name, arg, res)
    qtbot.waitUntil(lambda: res.done, timeout=5000)
    assert len(res.replies) == 1
    assert res.threads == [threading.get_ident()]
    return res.replies[0]


def test_registered_capabilities(host):
    assert host.dispatcher.registry.names() == sorted(
        ["dataRoot", "documentRoot", "getKeepScreenOn", "setKeepScreenOn"]
    )
    assert host.dispatcher.registry.frozen
    assert host.channel.name == "methods"


def test_data_and_document_roots(host, tmp_path, qtbot, recording_result):
    assert _call(host, qtbot, recording_result, "dataRoot") == ("success", str((tmp_path / "data").resolve()))
    assert _call(host, qtbot, recording_result, "documentRoot") == (
        "success",
        str((tmp_path / "docs").resolve()),
    )


def test_data_root_follows_override_marker(host, tmp_path, qtbot, recording_result):
    custom = tmp_path / "customroot"
    custom.mkdir()
    (tmp_path / "data" / "data.local").write_text(str(custom), encoding="utf-8")
    assert _call(host, qtbot, recording_result, "dataRoot") == ("success", str(custom))


def test_keep_screen_on_round_trip(host, qtbot, recording_result):
    assert _call(host, qtbot, recording_result, "setKeepScreenOn", True) == ("success", None)
    assert _call(host, qtbot, recording_result, "getKeepScreenOn") == ("success", True)
    assert host.screen.keepScreenOn is True
    assert _call(host, qtbot, recording_result, "setKeepScreenOn", False) == ("success", None)
    assert _call(host, qtbot, recording_result, "getKeepScreenOn") == ("success", False)


def test_set_keep_screen_on_from_worker_side_thread_applies_on_home(host, qtbot, recording_result):
    res = recording_result()
    t = threading.Thread(target=host.channel.invoke, args=("setKeepScreenOn", True, res))
    t.start()
    t.join()
    qtbot.waitUntil(lambda: res.done, timeout=5000)
    assert host.screen.keep_screen_on() is True


def test_set_keep_screen_on_rejects_non_bool(host, qtbot, recording_result):
    kind, (code, message) = _call(host, qtbot, recording_result, "setKeepScreenOn", "yes")
    assert kind == "error"
    assert code == ""
    assert "bool" in message
    assert host.screen.keep_screen_on() is False


def test_unknown_call_is_not_implemented(host, qtbot, recording_result):
    assert _call(host, qtbot, recording_result, "vibrate", 100) == ("not_implemented", None)


def test_channel_signals_carry_call_ids(host, qtbot):
    got: list[tuple] = []
    host.channel.succeeded.connect(lambda cid, v: got.append(("ok", cid, v)))
    host.channel.notImplemented.connect(lambda cid: got.append(("ni", cid)))
    host.channel.failed.connect(lambda cid, code, msg: got.append(("err", cid, code, msg)))

    first = host.channel.invokeMethod("getKeepScreenOn", None)
    second = host.channel.invokeMethod("nothing", None)
    third = host.channel.invokeMethod("setKeepScreenOn", 3)

    assert second == first + 1
    qtbot.waitUntil(lambda: len(got) == 3, timeout=5000)
    assert ("ok", first, False) in got
    assert ("ni", second) in got
    assert any(g[0] == "err" and g[1] == third for g in got)


def test_close_drains_worker_and_stops_new_worker_calls(host, qtbot, recording_result):
    pending = recording_result()
    host.channel.invoke("dataRoot", None, pending)
    host.close()
    assert not host.worker.is_alive()

    late = recording_result()
    outcome = host.dispatcher.dispatch("dataRoot", None, late).result(timeout=1)
    assert not isinstance(outcome, Success)
    # Closed marshaler: the late call cannot reach the home thread.
    assert late.replies == []
    qtbot.waitUntil(lambda: pending.done, timeout=5000)


def test_channel_reply_arrives_as_signal(host, tmp_path, qtbot):
    with qtbot.waitSignal(host.channel.succeeded, timeout=5000) as blocker:
        call_id = host.channel.invokeMethod("dataRoot", None)
    assert blocker.args == [call_id, str((tmp_path / "data").resolve())]


def test_method_names_lists_registered_calls(host):
    assert host.channel.methodNames() == ["dataRoot", "documentRoot", "getKeepScreenOn", "setKeepScreenOn"]


def test_failed_wake_lock_reports_error_and_keeps_flag(tmp_path, qtbot, recording_result):
    data = tmp_path / "data"
    data.mkdir()
    calls: list[bool] = []

    def wake_lock(on: bool) -> None:
        calls.append(on)
        raise OSError("wake lock unavailable")

    h = BridgeHost(
        settings=SettingsManager(str(tmp_path / "settings.json")),
        dirs=StaticPlatformDirs(data, tmp_path),
        wake_lock=wake_lock,
    )
    try:
        assert _call(h, qtbot, recording_result, "setKeepScreenOn", True) == ("error", ("", "wake lock unavailable"))
        assert calls == [True]
        assert h.screen.keep_screen_on() is False
        assert _call(h, qtbot, recording_result, "getKeepScreenOn") == ("success", False)
    finally:
        h.close()
