"""In-process counters and timings for the bridge.

Recorded by the worker queue, the dispatcher and the marshaler so tests and
the CLI can see what happened to calls without parsing logs. The bridge lives
as long as the UI does, so a timing key keeps a running summary plus the most
recent samples only.

Usage:
    from methods_bridge.metrics import metrics
    metrics.inc("dispatcher.calls")
    with metrics.timed("worker.task_duration"):
        ...
    metrics.timing("worker.task_duration")["max"]
"""

from __future__ import annotations

import time
from collections import defaultdict, deque
from collections.abc import Iterator
from contextlib import contextmanager
from threading import RLock
from typing import Any

RECENT_SAMPLES = 32


class _Timing:
    __slots__ = ("count", "total", "max", "recent")

    def __init__(self, keep: int) -> None:
        self.count = 0
        self.total = 0.0
        self.max = 0.0
        self.recent: deque[float] = deque(maxlen=keep)

    def add(self, elapsed: float) -> None:
        self.count += 1
        self.total += elapsed
        self.max = max(self.max, elapsed)
        self.recent.append(elapsed)

    def as_dict(self) -> dict[str, Any]:
        return {
            "count": self.count,
            "total": self.total,
            "max": self.max,
            "mean": self.total / self.count if self.count else 0.0,
            "recent": list(self.recent),
        }


class _Metrics:
    def __init__(self, recent_samples: int = RECENT_SAMPLES) -> None:
        self._recent_samples = recent_samples
        self._counters: dict[str, int] = defaultdict(int)
        self._timings: dict[str, _Timing] = {}
        self._lock = RLock()

    def inc(self, key: str, amount: int = 1) -> None:
        with self._lock:
            self._counters[key] += int(amount)

    def count(self, key: str) -> int:
        with self._lock:
            return self._counters.get(key, 0)

    def record(self, key: str, elapsed: float) -> None:
        with self._lock:
            t = self._timings.get(key)
            if t is None:
                t = self._timings[key] = _Timing(self._recent_samples)
            t.add(elapsed)

    @contextmanager
    def timed(self, key: str) -> Iterator[None]:
        start = time.perf_counter()
        try:
            yield
        finally:
            self.record(key, time.perf_counter() - start)

    def timing(self, key: str) -> dict[str, Any] | None:
        with self._lock:
            t = self._timings.get(key)
            return t.as_dict() if t is not None else None

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return {
                "counters": dict(self._counters),
                "timings": {k: t.as_dict() for k, t in self._timings.items()},
            }

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()
            self._timings.clear()


metrics = _Metrics()
