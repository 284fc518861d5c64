import logging
import sys

from methods_bridge import logger as mb_logger


def _stderr_handlers(base):
    return [h for h in base.handlers if isinstance(h, logging.StreamHandler) and h.stream is sys.stderr]


def test_setup_logger_idempotent_handlers():
    """Calling setup_logger() repeatedly should leave exactly one stderr StreamHandler."""
    base = mb_logger.setup_logger(level=logging.DEBUG)
    _ = mb_logger.setup_logger(level=logging.DEBUG)

    assert len(_stderr_handlers(base)) == 1
    assert base.propagate is False


def test_env_level_overrides_argument(monkeypatch):
    monkeypatch.setenv("METHODS_BRIDGE_LOG_LEVEL", "error")
    base = mb_logger.setup_logger(level=logging.DEBUG)
    assert base.level == logging.ERROR

    monkeypatch.delenv("METHODS_BRIDGE_LOG_LEVEL")
    base = mb_logger.setup_logger(level=logging.INFO)
    assert base.level == logging.INFO


def test_category_filter(monkeypatch):
    monkeypatch.setenv("METHODS_BRIDGE_LOG_CATS", "dispatcher, worker")
    base = mb_logger.setup_logger()
    (handler,) = _stderr_handlers(base)

    def record(name):
        return logging.LogRecord(name, logging.INFO, __file__, 1, "msg", None, None)

    assert all(f.filter(record("methods_bridge.dispatcher")) for f in handler.filters)
    assert not all(f.filter(record("methods_bridge.marshaler")) for f in handler.filters)

    monkeypatch.delenv("METHODS_BRIDGE_LOG_CATS")
    mb_logger.setup_logger()
    assert handler.filters == []


def test_get_logger_returns_child():
    child = mb_logger.get_logger("dispatcher")
    assert child.name == "methods_bridge.dispatcher"
    assert mb_logger.get_logger().name == "methods_bridge"
