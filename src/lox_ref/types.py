from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, TYPE_CHECKING
from typing_extensions import TypeAlias

from lark import Tree

if TYPE_CHECKING:
    from .evaluator import Interpreter

# ---------- Value Model ----------

@dataclass
class LoxNil:
    def __repr__(self) -> str:
        return "nil"

@dataclass
class LoxNumber:
    value: float
    def __repr__(self) -> str:
        v = self.value
        return f"{v:.0f}" if v.is_integer() else repr(v)

@dataclass
class LoxString:
    value: str
    def __repr__(self) -> str:
        return f'"{self.value}"'

@dataclass
class LoxBool:
    value: bool
    def __repr__(self) -> str:
        return "true" if self.value else "false"

@dataclass(eq=False)
class LoxFunction:
    name: str
    params: List[str]
    body: List[Tree]              # statements of the body block
    closure: 'Environment'        # environment active at the declaration
    @property
    def arity(self) -> int:
        return len(self.params)
    def __repr__(self) -> str:
        return f"<fn {self.name}>"

NativeImpl = Callable[['Interpreter', List['LoxValue']], 'LoxValue']

@dataclass(eq=False)
class NativeFunction:
    name: str
    arity: int
    fn: NativeImpl
    def __repr__(self) -> str:
        return f"<native fn {self.name}>"

LoxValue: TypeAlias = (
    LoxNil
    | LoxNumber
    | LoxString
    | LoxBool
    | LoxFunction
    | NativeFunction
)

@dataclass(frozen=True)
class Returning:
    """Result of executing a `return`: unwinds statements up to the call."""
    value: LoxValue

# execute() yields None when control falls through normally
ExecResult: TypeAlias = Optional[Returning]

# ---------- Environment ----------

class Environment:
    """One scope of the chain. Children share their parent by reference, so
    closures created in the same scope see each other's assignments."""

    def __init__(self, enclosing: Optional['Environment']=None):
        self.enclosing = enclosing
        self.values: Dict[str, LoxValue] = {}

    def child(self) -> 'Environment':
        return Environment(enclosing=self)

    def define(self, name: str, val: LoxValue) -> None:
        self.values[name] = val

    def get(self, name: str) -> LoxValue:
        env: Optional[Environment] = self

        while env is not None:
            if name in env.values:
                return env.values[name]
            env = env.enclosing

        raise UndefinedVariable(name)

    def assign(self, name: str, val: LoxValue) -> LoxValue:
        env: Optional[Environment] = self

        while env is not None:
            if name in env.values:
                previous = env.values[name]
                env.values[name] = val
                return previous
            env = env.enclosing

        raise UndefinedVariable(name)

    def ancestor(self, depth: int) -> 'Environment':
        env = self

        for _ in range(depth):
            if env.enclosing is None:
                raise LoxRuntimeError(f"Scope depth {depth} exceeds the environment chain")
            env = env.enclosing

        return env

    def get_at(self, depth: int, name: str) -> LoxValue:
        values = self.ancestor(depth).values

        if name not in values:
            raise UndefinedVariable(name)

        return values[name]

    def assign_at(self, depth: int, name: str, val: LoxValue) -> LoxValue:
        values = self.ancestor(depth).values

        if name not in values:
            raise UndefinedVariable(name)

        previous = values[name]
        values[name] = val
        return previous

    def __repr__(self) -> str:
        depth = 0
        env = self.enclosing

        while env is not None:
            depth += 1
            env = env.enclosing

        return f"<Environment depth={depth} names={sorted(self.values)}>"

# ---------- Exceptions ----------

class LoxRuntimeError(Exception):
    line: Optional[int]
    column: Optional[int]

    def __init__(self, message: str):
        super().__init__(message)
        self.line = None
        self.column = None

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        msg = super().__str__()

        if self.line is None:
            return msg

        if self.column is None:
            return f"{msg} (line {self.line})"

        return f"{msg} (line {self.line}, col {self.column})"

class LoxTypeError(LoxRuntimeError):
    pass

class ExpectedNumber(LoxTypeError):
    def __init__(self, actual: LoxValue):
        super().__init__(f"Expected number, found {actual!r}")
        self.actual = actual

class ExpectedString(LoxTypeError):
    def __init__(self, actual: LoxValue):
        super().__init__(f"Expected string, found {actual!r}")
        self.actual = actual

class ExpectedNumberOrString(LoxTypeError):
    def __init__(self, actual: LoxValue):
        super().__init__(f"Expected number or string, found {actual!r}")
        self.actual = actual

class UndefinedVariable(LoxRuntimeError):
    def __init__(self, name: str):
        super().__init__(f"Undefined variable '{name}'")
        self.name = name

class DivisionByZero(LoxRuntimeError):
    def __init__(self):
        super().__init__("Division by zero")

class LoxArityError(LoxRuntimeError):
    pass

class WrongNumberOfArguments(LoxArityError):
    def __init__(self, expected: int, actual: int):
        super().__init__(f"Function expects {expected} args; got {actual}")
        self.expected = expected
        self.actual = actual

class UncallableValue(LoxRuntimeError):
    def __init__(self, called: LoxValue):
        super().__init__(f"Attempted to call uncallable value {called!r}")
        self.called = called

class Builtins:
    """Native definitions registered by `register_native`; each new
    interpreter installs them into its own globals."""
    natives: Dict[str, NativeFunction] = {}
