from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any, Protocol

from PySide6.QtCore import QCoreApplication, QObject, Qt, Signal, Slot

from methods_bridge.bridge.outcome import Failure, NotImplementedCall, Outcome, Success, Value
from methods_bridge.logger import get_logger
from methods_bridge.metrics import metrics

_logger = get_logger("marshaler")


class MethodResult(Protocol):
    """Reply interface handed to the bridge with each call."""

    def success(self, value: Value) -> None: ...

    def error(self, code: str, message: str, details: Any = None) -> None: ...

    def not_implemented(self) -> None: ...


class _OnceResult:
    """Forward only the first reply to the wrapped result."""

    def __init__(self, inner: MethodResult, name: str) -> None:
        self._inner = inner
        self._name = name
        self._replied = False
        self._lock = threading.Lock()

    def _claim(self) -> bool:
        with self._lock:
            if self._replied:
                _logger.warning("duplicate reply for %s ignored", self._name)
                return False
            self._replied = True
            return True

    def success(self, value: Value) -> None:
        if self._claim():
            self._inner.success(value)

    def error(self, code: str, message: str, details: Any = None) -> None:
        if self._claim():
            self._inner.error(code, message, details)

    def not_implemented(self) -> None:
        if self._claim():
            self._inner.not_implemented()


def apply_outcome(result: MethodResult, outcome: Outcome) -> None:
    if isinstance(outcome, Success):
        result.success(outcome.value)
    elif isinstance(outcome, NotImplementedCall):
        result.not_implemented()
    elif isinstance(outcome, Failure):
        result.error(outcome.code, outcome.message, None)
    else:
        raise TypeError(f"not an outcome: {outcome!r}")


class ResultMarshaler(QObject):
    """Hand outcomes over to the home thread.

    The home thread is the thread that constructs the marshaler; it must run a
    Qt event loop. Any thread may call `post`/`deliver`: the work item travels
    through a queued signal and runs on the home thread, in posting order.
    """

    _posted = Signal(object)

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._home_ident = threading.get_ident()
        self._closed = False
        # Queued even when emitted on the home thread: delivery is always deferred.
        self._posted.connect(self._run_posted, Qt.ConnectionType.QueuedConnection)

    def is_home_thread(self) -> bool:
        return threading.get_ident() == self._home_ident

    def close(self) -> None:
        self._closed = True

    def post(self, fn: Callable[[], None]) -> bool:
        """Schedule `fn` on the home thread. Returns False when it cannot be handed off."""
        if self._closed or QCoreApplication.instance() is None:
            return False
        try:
            self._posted.emit(fn)
        except RuntimeError:
            # Underlying C++ object already destroyed (application teardown).
            _logger.debug("post failed: marshaler deleted", exc_info=True)
            return False
        metrics.inc("marshaler.posted")
        return True

    def deliver(self, result: MethodResult, outcome: Outcome, *, name: str = "<call>") -> bool:
        once = result if isinstance(result, _OnceResult) else _OnceResult(result, name)

        def _apply() -> None:
            apply_outcome(once, outcome)
            metrics.inc("marshaler.delivered")

        if not self.post(_apply):
            _logger.error("outcome for %s dropped: home thread unavailable", name)
            metrics.inc("marshaler.dropped")
            return False
        return True

    @Slot(object)
    def _run_posted(self, fn: Callable[[], None]) -> None:
        try:
            fn()
        except Exception:
            metrics.inc("marshaler.callback_errors")
            _logger.exception("home-thread task failed")
