from __future__ import annotations

import queue
import threading
from collections.abc import Callable
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Any

from methods_bridge.errors import WorkerClosedError
from methods_bridge.logger import get_logger
from methods_bridge.metrics import metrics

_logger = get_logger("worker")


@dataclass
class _Task:
    fn: Callable[..., Any]
    args: tuple
    kwargs: dict
    future: Future


class SerialWorker:
    """Single-thread FIFO work queue.

    Tasks run one at a time, in submission order, on one dedicated thread that
    never touches UI state. The queue is created and started by the owner and
    stopped with `shutdown()`, which drains what was already submitted.
    """

    def __init__(self, name: str = "methods-worker"):
        self._queue: queue.Queue[_Task] = queue.Queue()
        self._stop_event = threading.Event()
        self._submit_lock = threading.Lock()
        self._thread = threading.Thread(target=self._worker, name=name, daemon=True)
        self._thread.start()

    @property
    def name(self) -> str:
        return self._thread.name

    @property
    def ident(self) -> int | None:
        return self._thread.ident

    def submit(self, fn: Callable[..., Any], *args, **kwargs) -> Future:
        fut: Future = Future()
        with self._submit_lock:
            # Checked under the lock so nothing slips in behind the final drain.
            if self._stop_event.is_set():
                raise WorkerClosedError(f"worker {self.name} is shut down")
            self._queue.put(_Task(fn=fn, args=args, kwargs=kwargs, future=fut))
        metrics.inc("worker.queued")
        return fut

    def _worker(self) -> None:
        while not self._stop_event.is_set() or not self._queue.empty():
            try:
                task = self._queue.get(timeout=0.1)
            except queue.Empty:
                continue
            try:
                if not task.future.set_running_or_notify_cancel():
                    continue
                try:
                    with metrics.timed("worker.task_duration"):
                        res = task.fn(*task.args, **task.kwargs)
                except BaseException as exc:
                    # Kept on the future so the loop survives SystemExit.
                    metrics.inc("worker.task_errors")
                    task.future.set_exception(exc)
                else:
                    task.future.set_result(res)
            finally:
                self._queue.task_done()
        _logger.debug("worker %s stopped", self.name)

    def shutdown(self, wait: bool = True, timeout: float | None = 5.0) -> None:
        with self._submit_lock:
            self._stop_event.set()
        if wait:
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                _logger.warning("worker %s did not stop within %.1fs", self.name, timeout or 0.0)

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def is_worker_thread(self) -> bool:
        return threading.get_ident() == self._thread.ident
