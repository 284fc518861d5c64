from __future__ import annotations

from concurrent.futures import Future
from typing import Any

from methods_bridge.bridge.marshaler import MethodResult, ResultMarshaler
from methods_bridge.bridge.outcome import (
    NOT_IMPLEMENTED,
    Failure,
    Outcome,
    Success,
    coerce_value,
    describe_exception,
)
from methods_bridge.bridge.registry import Capability, CapabilityRegistry, Placement
from methods_bridge.bridge.worker import SerialWorker
from methods_bridge.errors import WorkerClosedError
from methods_bridge.logger import get_logger
from methods_bridge.metrics import metrics

_logger = get_logger("dispatcher")


def _resolved(outcome: Outcome) -> Future:
    fut: Future = Future()
    fut.set_result(outcome)
    return fut


class Dispatcher:
    """Route calls to capabilities and normalize what comes back.

    `execute` is the synchronous contract (runs on the calling thread).
    `dispatch` places the handler according to its capability, then hands the
    outcome to the marshaler so the reply lands on the home thread. All handler
    faults stop here.
    """

    def __init__(self, registry: CapabilityRegistry, worker: SerialWorker, marshaler: ResultMarshaler) -> None:
        self._registry = registry
        self._worker = worker
        self._marshaler = marshaler

    @property
    def registry(self) -> CapabilityRegistry:
        return self._registry

    def execute(self, name: str, argument: Any = None) -> Outcome:
        cap = self._registry.lookup(name)
        if cap is None:
            metrics.inc("dispatcher.not_implemented")
            _logger.debug("not implemented: %s", name)
            return NOT_IMPLEMENTED
        return self._run(cap, argument)

    def _run(self, cap: Capability, argument: Any) -> Outcome:
        metrics.inc("dispatcher.calls")
        try:
            with metrics.timed("dispatcher.handler_duration"):
                value = coerce_value(cap.handler(argument))
        except KeyboardInterrupt:
            raise
        except BaseException as exc:
            metrics.inc("dispatcher.failures")
            _logger.warning("call %s failed: %s", cap.name, exc, exc_info=True)
            return Failure(describe_exception(exc))
        return Success(value)

    def dispatch(self, name: str, argument: Any, result: MethodResult) -> Future:
        """Start a call; `result` is answered exactly once on the home thread.

        The returned future resolves with the outcome as soon as it is known,
        which may be before the reply has reached the home thread.
        """
        cap = self._registry.lookup(name)
        if cap is None:
            return self._finish(name, self.execute(name, argument), result)

        if cap.placement is Placement.WORKER:
            return self._dispatch_to_worker(cap, argument, result)

        if cap.placement is Placement.HOME and not self._marshaler.is_home_thread():
            return self._dispatch_to_home(cap, argument, result)

        return self._finish(name, self._run(cap, argument), result)

    def _dispatch_to_worker(self, cap: Capability, argument: Any, result: MethodResult) -> Future:
        try:
            fut = self._worker.submit(self._run, cap, argument)
        except WorkerClosedError as exc:
            _logger.error("call %s rejected: %s", cap.name, exc)
            return self._finish(cap.name, Failure("worker is shut down"), result)

        def _on_done(f: Future) -> None:
            # Runs on the worker thread.
            exc = f.exception()
            outcome = f.result() if exc is None else Failure(describe_exception(exc))
            self._marshaler.deliver(result, outcome, name=cap.name)

        fut.add_done_callback(_on_done)
        return fut

    def _dispatch_to_home(self, cap: Capability, argument: Any, result: MethodResult) -> Future:
        fut: Future = Future()

        def _on_home() -> None:
            outcome = self._run(cap, argument)
            fut.set_result(outcome)
            self._marshaler.deliver(result, outcome, name=cap.name)

        if not self._marshaler.post(_on_home):
            _logger.error("call %s dropped: home thread unavailable", cap.name)
            metrics.inc("marshaler.dropped")
            fut.set_result(Failure("home thread unavailable"))
        return fut

    def _finish(self, name: str, outcome: Outcome, result: MethodResult) -> Future:
        self._marshaler.deliver(result, outcome, name=name)
        return _resolved(outcome)
