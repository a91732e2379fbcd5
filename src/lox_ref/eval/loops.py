from __future__ import annotations

from typing import TYPE_CHECKING

from lark import Tree

from ..types import ExecResult
from .helpers import is_truthy

if TYPE_CHECKING:
    from ..evaluator import Interpreter

def eval_if_stmt(n: Tree, interp: 'Interpreter') -> ExecResult:
    cond_node, then_node, *rest = n.children

    if is_truthy(interp.evaluate(cond_node)):
        return interp.execute(then_node)

    if rest:
        return interp.execute(rest[0])

    return None

def eval_while_stmt(n: Tree, interp: 'Interpreter') -> ExecResult:
    cond_node, body_node = n.children

    while is_truthy(interp.evaluate(cond_node)):
        result = interp.execute(body_node)
        if result is not None:
            return result

    return None
