from __future__ import annotations

import importlib
from typing import TYPE_CHECKING

from .types import Builtins, NativeFunction, NativeImpl

if TYPE_CHECKING:
    from .evaluator import Interpreter

_STDLIB_INITIALIZED = False

def init_stdlib() -> None:
    """Load stdlib modules (idempotent) so register_native hooks run."""
    global _STDLIB_INITIALIZED

    if _STDLIB_INITIALIZED:
        return

    importlib.import_module("lox_ref.stdlib")
    _STDLIB_INITIALIZED = True

def register_native(name: str, *, arity: int):
    def dec(fn: NativeImpl):
        Builtins.natives[name] = NativeFunction(name=name, arity=arity, fn=fn)
        return fn

    return dec

def install_natives(interp: 'Interpreter') -> None:
    """Define every registered native in the interpreter's globals."""
    init_stdlib()

    for name, native in Builtins.natives.items():
        interp.globals.define(name, native)
