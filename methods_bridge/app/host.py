from __future__ import annotations

from collections.abc import Callable

from PySide6.QtCore import Property, QObject

from methods_bridge.app.state.screen_state import ScreenState
from methods_bridge.bridge.capabilities import register_default_capabilities
from methods_bridge.bridge.channel import MethodChannel
from methods_bridge.bridge.dispatcher import Dispatcher
from methods_bridge.bridge.marshaler import ResultMarshaler
from methods_bridge.bridge.registry import CapabilityRegistry
from methods_bridge.bridge.worker import SerialWorker
from methods_bridge.logger import get_logger
from methods_bridge.path_resolver import PathResolver
from methods_bridge.platform_dirs import PlatformDirs, default_platform_dirs
from methods_bridge.settings_manager import SettingsManager, default_settings_path

_logger = get_logger("host")


class BridgeHost(QObject):
    """Owns the bridge for the lifetime of the application.

    Must be created on the home thread (the Qt GUI thread). `close()` stops
    accepting worker calls, drains the worker queue and joins its thread.
    `wake_lock` is the platform setter behind `setKeepScreenOn`.
    """

    def __init__(
        self,
        settings: SettingsManager | None = None,
        dirs: PlatformDirs | None = None,
        wake_lock: Callable[[bool], None] | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._settings_mgr = settings or SettingsManager(default_settings_path())

        self._marshaler = ResultMarshaler(self)
        self._worker = SerialWorker()
        self._screen = ScreenState(self._settings_mgr.keep_screen_on, apply_fn=wake_lock, parent=self)

        self._resolver = PathResolver(
            dirs or default_platform_dirs(self._settings_mgr),
            marker_path=self._settings_mgr.marker_path,
            marker_file_name=self._settings_mgr.marker_file_name,
        )

        self._registry = CapabilityRegistry()
        register_default_capabilities(self._registry, self._resolver, self._screen)
        self._registry.freeze()

        self._dispatcher = Dispatcher(self._registry, self._worker, self._marshaler)
        self._channel = MethodChannel(self._dispatcher, parent=self)
        self._closed = False
        _logger.debug("bridge ready: %s", ", ".join(self._registry.names()))

    def _get_channel(self) -> QObject:
        return self._channel

    channel = Property(QObject, _get_channel, constant=True)  # type: ignore[arg-type]

    def _get_screen(self) -> QObject:
        return self._screen

    screen = Property(QObject, _get_screen, constant=True)  # type: ignore[arg-type]

    @property
    def dispatcher(self) -> Dispatcher:
        return self._dispatcher

    @property
    def worker(self) -> SerialWorker:
        return self._worker

    def close(self, wait: bool = True) -> None:
        if self._closed:
            return
        self._closed = True
        # Worker first: its queued calls still hand their outcomes to the marshaler.
        self._worker.shutdown(wait=wait, timeout=self._settings_mgr.worker_shutdown_timeout)
        self._marshaler.close()
        _logger.debug("bridge closed")
