from __future__ import annotations

import contextlib
import itertools
import threading
from concurrent.futures import Future
from typing import Any

from PySide6.QtCore import Property, QObject, Signal, Slot

from methods_bridge.bridge.dispatcher import Dispatcher
from methods_bridge.bridge.marshaler import MethodResult
from methods_bridge.bridge.outcome import Value
from methods_bridge.logger import get_logger

_logger = get_logger("channel")

CHANNEL_NAME = "methods"


def _unwrap_argument(argument: object | None) -> Any:
    """Convert QML-side values (QJSValue) into plain Python values."""
    if argument is None:
        return None
    if argument.__class__.__name__ == "QJSValue" and hasattr(argument, "toVariant"):
        with contextlib.suppress(Exception):
            argument = argument.toVariant()  # type: ignore[attr-defined]
    if argument.__class__.__name__ == "QJSValue":
        # undefined/null never convert
        return None
    return argument


class _ChannelResult:
    def __init__(self, channel: MethodChannel, call_id: int) -> None:
        self._channel = channel
        self._call_id = call_id

    def success(self, value: Value) -> None:
        self._channel.succeeded.emit(self._call_id, value)

    def error(self, code: str, message: str, details: Any = None) -> None:  # noqa: ARG002
        self._channel.failed.emit(self._call_id, str(code), str(message))

    def not_implemented(self) -> None:
        self._channel.notImplemented.emit(self._call_id)


class MethodChannel(QObject):
    """The named call channel exposed to the UI.

    QML → Python: methods.invokeMethod(name, argument) returns a call id
    Python → QML: exactly one of succeeded / failed / notImplemented per call id,
    always emitted on the home thread.
    """

    succeeded = Signal(int, "QVariant")
    failed = Signal(int, str, str)
    notImplemented = Signal(int)

    def __init__(self, dispatcher: Dispatcher, name: str = CHANNEL_NAME, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._dispatcher = dispatcher
        self._name = name
        self._ids = itertools.count(1)
        self._ids_lock = threading.Lock()

    def _get_name(self) -> str:
        return self._name

    name = Property(str, _get_name, constant=True)  # type: ignore[arg-type]

    def _next_id(self) -> int:
        with self._ids_lock:
            return next(self._ids)

    # NOTE: the argument must be declared as QVariant; `object` fails when QML
    # passes a JS value.
    @Slot(str, "QVariant", result=int)  # type: ignore[call-overload]
    def invokeMethod(self, method: str, argument: object | None = None) -> int:
        call_id = self._next_id()
        _logger.debug("invoke #%d %s", call_id, method)
        self._dispatcher.dispatch(str(method), _unwrap_argument(argument), _ChannelResult(self, call_id))
        return call_id

    def invoke(self, method: str, argument: Any = None, result: MethodResult | None = None) -> Future:
        """Python-side entry. Without `result`, the reply goes out through the channel signals."""
        if result is None:
            result = _ChannelResult(self, self._next_id())
        return self._dispatcher.dispatch(str(method), argument, result)

    @Slot(result=list)
    def methodNames(self) -> list[str]:
        return self._dispatcher.registry.names()
