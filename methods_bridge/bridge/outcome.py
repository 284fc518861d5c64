"""Call outcomes.

Every call produces exactly one of:

- `Success(value)`: `value` is one of None, bool, int, float, str, bytes.
- `NotImplementedCall()`: no capability is registered under the call name.
- `Failure(message, code)`: the handler raised; `code` is the generic fault
  marker (always empty for handler faults).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Union

Value = Union[None, bool, int, float, str, bytes]

GENERIC_FAULT_CODE = ""


@dataclass(frozen=True)
class Success:
    value: Value = None


@dataclass(frozen=True)
class NotImplementedCall:
    pass


@dataclass(frozen=True)
class Failure:
    message: str
    code: str = GENERIC_FAULT_CODE


Outcome = Union[Success, NotImplementedCall, Failure]

NOT_IMPLEMENTED = NotImplementedCall()


def coerce_value(value: object) -> Value:
    """Normalize a handler return value into the bridge's value set.

    Raises TypeError for anything the UI side cannot represent.
    """
    if value is None or isinstance(value, (bool, int, float, str, bytes)):
        return value  # type: ignore[return-value]
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, os.PathLike):
        return os.fspath(value)
    raise TypeError(f"unsupported result type: {type(value).__name__}")


def describe_exception(exc: BaseException) -> str:
    message = str(exc).strip()
    return message or type(exc).__name__
