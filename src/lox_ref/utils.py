from __future__ import annotations

import os as _os

from .types import (
    LoxValue,
    LoxNil,
    LoxNumber,
    LoxString,
    LoxBool,
    LoxFunction,
    NativeFunction,
)

DEBUG_PY_TRACE_ENV = "LOX_DEBUG_PY_TRACE"


def debug_py_trace_enabled() -> bool:
    """True when Python tracebacks should accompany reported runtime errors."""
    return _os.environ.get(DEBUG_PY_TRACE_ENV, "") not in ("", "0")


def lox_equals(lhs: LoxValue, rhs: LoxValue) -> bool:
    match (lhs, rhs):
        case (LoxNil(), LoxNil()):
            return True
        case (LoxNumber(value=a), LoxNumber(value=b)):
            return a == b
        case (LoxString(value=a), LoxString(value=b)):
            return a == b
        case (LoxBool(value=a), LoxBool(value=b)):
            return a == b
        # Callables compare by identity
        case (LoxFunction() | NativeFunction(), LoxFunction() | NativeFunction()):
            return lhs is rhs
        case _:
            return False


def stringify(value: LoxValue) -> str:
    """Text written by `print`: strings raw, everything else as its repr."""
    if isinstance(value, LoxString):
        return value.value

    return repr(value)
