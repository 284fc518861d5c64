from __future__ import annotations

import argparse
import base64
import json
import os
import sys
from typing import Any

from PySide6.QtCore import QCoreApplication, QEventLoop

from methods_bridge.app.host import BridgeHost
from methods_bridge.bridge.outcome import Value
from methods_bridge.logger import get_logger, install_qt_message_handler
from methods_bridge.settings_manager import SettingsManager, default_settings_path

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_NOT_IMPLEMENTED = 2

# --- CLI logging options -----------------------------------------------------
# Our own options are parsed first, reflected into METHODS_BRIDGE_LOG_LEVEL /
# METHODS_BRIDGE_LOG_CATS and removed, so Qt never sees them.


def _apply_cli_logging_options(argv: list[str]) -> list[str]:
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument("--log-level", help="Set log level")
    parser.add_argument("--log-cats", help="Set log categories")
    args, remaining = parser.parse_known_args(argv[1:])
    if args.log_level:
        os.environ["METHODS_BRIDGE_LOG_LEVEL"] = args.log_level
    if args.log_cats:
        os.environ["METHODS_BRIDGE_LOG_CATS"] = args.log_cats
    return [argv[0], *remaining]


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="methods-bridge", description="Host-platform method bridge")
    parser.add_argument("method", nargs="?", help="Call name to invoke once, e.g. dataRoot")
    parser.add_argument("--arg", help="JSON-encoded call argument, e.g. true")
    parser.add_argument("--settings", help="Path to settings.json")
    parser.add_argument("--list", action="store_true", help="List registered call names")
    parser.add_argument("--qml", help="QML file to load with the channel exposed as `methods`")
    parser.add_argument("--log-level", help="Set log level (debug, info, warning, error)")
    parser.add_argument("--log-cats", help="Comma-separated log categories to show")
    return parser


def _json_value(value: Value) -> Any:
    if isinstance(value, bytes):
        return {"base64": base64.b64encode(value).decode("ascii")}
    return value


class _PrintingResult:
    """Prints the reply as one JSON line and stops the local event loop."""

    def __init__(self, method: str, loop: QEventLoop) -> None:
        self._method = method
        self._loop = loop
        self.exit_code: int | None = None

    def _emit(self, payload: dict[str, Any], exit_code: int) -> None:
        print(json.dumps({"method": self._method, **payload}, ensure_ascii=False))
        self.exit_code = exit_code
        self._loop.quit()

    def success(self, value: Value) -> None:
        self._emit({"status": "success", "value": _json_value(value)}, EXIT_SUCCESS)

    def error(self, code: str, message: str, details: Any = None) -> None:  # noqa: ARG002
        self._emit({"status": "error", "code": code, "message": message}, EXIT_FAILURE)

    def not_implemented(self) -> None:
        self._emit({"status": "not_implemented"}, EXIT_NOT_IMPLEMENTED)


def _call_once(host: BridgeHost, method: str, argument: Any) -> int:
    loop = QEventLoop()
    result = _PrintingResult(method, loop)
    host.channel.invoke(method, argument, result)
    if result.exit_code is None:
        loop.exec()
    return EXIT_FAILURE if result.exit_code is None else result.exit_code


def _run_qml(app: QCoreApplication, host: BridgeHost, qml_path: str) -> int:
    from PySide6.QtCore import QUrl  # noqa: PLC0415
    from PySide6.QtQml import QQmlApplicationEngine  # noqa: PLC0415

    logger = get_logger("main")
    engine = QQmlApplicationEngine()
    ctx = engine.rootContext()
    ctx.setContextProperty("methods", host.channel)
    ctx.setContextProperty("screen", host.screen)
    engine.load(QUrl.fromLocalFile(os.path.abspath(qml_path)))
    if not engine.rootObjects():
        logger.error("failed to load QML: %s", qml_path)
        return EXIT_FAILURE
    return app.exec()


def _ensure_app(argv: list[str], gui: bool) -> QCoreApplication:
    app = QCoreApplication.instance()
    if app is not None:
        return app
    if gui:
        from PySide6.QtGui import QGuiApplication  # noqa: PLC0415

        return QGuiApplication(argv)
    return QCoreApplication(argv)


def run(argv: list[str] | None = None) -> int:
    """Application entrypoint."""
    if argv is None:
        argv = sys.argv
    argv = _apply_cli_logging_options(list(argv))

    parser = _build_parser()
    args = parser.parse_args(argv[1:])

    argument: Any = None
    if args.arg is not None:
        try:
            argument = json.loads(args.arg)
        except ValueError as e:
            parser.error(f"--arg is not valid JSON: {e}")

    app = _ensure_app(argv, gui=bool(args.qml))
    install_qt_message_handler()

    # Qt derives the standard locations from these; set defaults before any lookup.
    app.setOrganizationName(SettingsManager.DEFAULTS["organization"])
    app.setApplicationName(SettingsManager.DEFAULTS["application"])
    settings = SettingsManager(args.settings or default_settings_path())
    app.setOrganizationName(settings.organization)
    app.setApplicationName(settings.application)

    host = BridgeHost(settings)
    try:
        if args.list:
            for name in host.dispatcher.registry.names():
                print(name)
            return EXIT_SUCCESS
        if args.method:
            return _call_once(host, args.method, argument)
        if args.qml:
            return _run_qml(app, host, args.qml)
        parser.print_help()
        return EXIT_SUCCESS
    finally:
        host.close()


if __name__ == "__main__":
    sys.exit(run())
