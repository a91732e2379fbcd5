"""Built-in native functions registered via lox_ref.runtime."""

from __future__ import annotations

import time
from typing import List

from .runtime import register_native
from .types import LoxNumber, LoxValue

@register_native("clock", arity=0)
def std_clock(_interp, _args: List[LoxValue]) -> LoxNumber:
    return LoxNumber(time.time())
