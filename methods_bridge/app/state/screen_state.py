from __future__ import annotations

import threading
from collections.abc import Callable

from PySide6.QtCore import Property, QObject, Signal

from methods_bridge.logger import get_logger

_logger = get_logger("screen")


class ScreenState(QObject):
    """Keep-screen-on flag that QML binds to.

    Writes are only allowed on the home thread (the thread that created the
    object). `apply_fn` is the platform wake-lock setter. It runs before the
    flag changes; if it raises, the flag and its signal are left untouched.
    """

    keepScreenOnChanged = Signal(bool)

    def __init__(
        self,
        keep_screen_on: bool = False,
        apply_fn: Callable[[bool], None] | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._home_ident = threading.get_ident()
        self._keep_screen_on = bool(keep_screen_on)
        self._apply_fn = apply_fn

    def _get_keep_screen_on(self) -> bool:
        return bool(self._keep_screen_on)

    keepScreenOn = Property(bool, _get_keep_screen_on, notify=keepScreenOnChanged)  # type: ignore[arg-type]

    def keep_screen_on(self) -> bool:
        return self._get_keep_screen_on()

    def set_keep_screen_on(self, enabled: bool) -> None:
        if threading.get_ident() != self._home_ident:
            raise RuntimeError("keep-screen-on must be changed on the home thread")
        v = bool(enabled)
        if v == self._keep_screen_on:
            return
        if self._apply_fn is not None:
            self._apply_fn(v)
        self._keep_screen_on = v
        _logger.debug("keep screen on: %s", v)
        self.keepScreenOnChanged.emit(v)
