from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Iterator, List

from lark import Tree

from ..types import Environment, ExecResult

if TYPE_CHECKING:
    from ..evaluator import Interpreter

@contextmanager
def scoped_environment(interp: 'Interpreter', env: Environment) -> Iterator[Environment]:
    """Make `env` current for the duration of the block, restoring the previous
    environment on every exit path (normal, return, or error)."""
    previous = interp.environment
    interp.environment = env

    try:
        yield env
    finally:
        interp.environment = previous

def execute_block(statements: List[Tree], interp: 'Interpreter', env: Environment) -> ExecResult:
    """Run statements in `env`; stop at the first `return` and hand it back."""
    with scoped_environment(interp, env):
        for stmt in statements:
            result = interp.execute(stmt)
            if result is not None:
                return result

    return None

def eval_block(n: Tree, interp: 'Interpreter') -> ExecResult:
    return execute_block(n.children, interp, interp.environment.child())
