from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from methods_bridge.errors import DuplicateCapabilityError, RegistryFrozenError
from methods_bridge.logger import get_logger

_logger = get_logger("registry")

Handler = Callable[[Any], Any]


class Placement(Enum):
    WORKER = "worker"  # blocking I/O, runs on the serial worker queue
    INLINE = "inline"  # cheap, runs on the dispatching thread
    HOME = "home"  # touches UI/display state, runs on the home thread


@dataclass(frozen=True)
class Capability:
    name: str
    handler: Handler
    placement: Placement = Placement.INLINE

    @property
    def runs_on_worker(self) -> bool:
        return self.placement is Placement.WORKER


class CapabilityRegistry:
    """Name → capability table, filled at startup and frozen afterwards."""

    def __init__(self) -> None:
        self._capabilities: dict[str, Capability] = {}
        self._frozen = False
        self._lock = threading.Lock()

    def register(self, name: str, handler: Handler, *, placement: Placement = Placement.INLINE) -> Capability:
        cap = Capability(name=str(name), handler=handler, placement=placement)
        with self._lock:
            if self._frozen:
                raise RegistryFrozenError(cap.name)
            if cap.name in self._capabilities:
                raise DuplicateCapabilityError(cap.name)
            self._capabilities[cap.name] = cap
        _logger.debug("registered capability: %s (%s)", cap.name, cap.placement.value)
        return cap

    def freeze(self) -> None:
        with self._lock:
            self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def lookup(self, name: str) -> Capability | None:
        # Exact match only; no normalization of the incoming name.
        return self._capabilities.get(name)

    def names(self) -> list[str]:
        return sorted(self._capabilities)

    def __contains__(self, name: object) -> bool:
        return name in self._capabilities

    def __len__(self) -> int:
        return len(self._capabilities)
