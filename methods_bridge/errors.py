from __future__ import annotations


class BridgeError(Exception):
    """Base class for errors raised by the bridge itself (not by capabilities)."""


class DuplicateCapabilityError(BridgeError):
    def __init__(self, name: str) -> None:
        super().__init__(f"capability already registered: {name}")
        self.name = name


class RegistryFrozenError(BridgeError):
    def __init__(self, name: str) -> None:
        super().__init__(f"registry is frozen, cannot register: {name}")
        self.name = name


class WorkerClosedError(BridgeError, RuntimeError):
    """Raised when work is submitted to a worker queue after shutdown."""
