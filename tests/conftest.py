"""Pytest configuration.

The bridge hands replies to the Qt home thread through queued signals, so a
single `QApplication` exists for the whole session (offscreen platform). It is
created early so pytest-qt's `qapp` picks it up, and tests wait for replies
with `qtbot.waitUntil` / `qtbot.waitSignal`.
"""

from __future__ import annotations

import os
import threading
from typing import Any

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

_APP: Any | None = None


def pytest_configure(config) -> None:  # noqa: ARG001
    """Ensure a QApplication exists before collecting/running tests."""

    try:
        from PySide6.QtWidgets import QApplication
    except ImportError:
        return

    global _APP

    app = QApplication.instance()
    if app is None:
        # Keep a strong ref so it isn't GC'd mid-session.
        _APP = QApplication([])
    else:
        _APP = app


def pytest_sessionfinish(session, exitstatus) -> None:  # noqa: ARG001
    """Attempt a clean Qt shutdown to avoid lingering threads at interpreter exit."""

    try:
        from PySide6.QtWidgets import QApplication
    except ImportError:
        return

    app = QApplication.instance()
    if app is None:
        return

    app.quit()
    app.processEvents()


class RecordingResult:
    """MethodResult that records every reply and the thread it arrived on."""

    def __init__(self) -> None:
        self.replies: list[tuple[str, Any]] = []
        self.threads: list[int] = []

    def _record(self, kind: str, payload: Any) -> None:
        self.replies.append((kind, payload))
        self.threads.append(threading.get_ident())

    def success(self, value: Any) -> None:
        self._record("success", value)

    def error(self, code: str, message: str, details: Any = None) -> None:
        self._record("error", (code, message))

    def not_implemented(self) -> None:
        self._record("not_implemented", None)

    @property
    def done(self) -> bool:
        return bool(self.replies)


@pytest.fixture
def recording_result() -> type[RecordingResult]:
    return RecordingResult


@pytest.fixture
def bridge_parts():
    """Registry + worker + marshaler + dispatcher, torn down after the test."""

    from methods_bridge.bridge.dispatcher import Dispatcher
    from methods_bridge.bridge.marshaler import ResultMarshaler
    from methods_bridge.bridge.registry import CapabilityRegistry
    from methods_bridge.bridge.worker import SerialWorker

    registry = CapabilityRegistry()
    worker = SerialWorker(name="test-worker")
    marshaler = ResultMarshaler()
    dispatcher = Dispatcher(registry, worker, marshaler)
    yield registry, worker, marshaler, dispatcher
    worker.shutdown(wait=True)
    marshaler.close()
