from __future__ import annotations

from typing import TYPE_CHECKING, Any, List

from lark import Tree

from ..tree import ident_name, tree_children
from ..types import (
    LoxFunction,
    LoxNil,
    LoxValue,
    NativeFunction,
    UncallableValue,
    WrongNumberOfArguments,
)
from .blocks import execute_block

if TYPE_CHECKING:
    from ..evaluator import Interpreter

def extract_param_names(params_node: Any) -> List[str]:
    return [ident_name(p) for p in tree_children(params_node)]

def eval_fun_decl(n: Tree, interp: 'Interpreter') -> None:
    name_tok, params_node, body_node = n.children
    name = ident_name(name_tok)

    fn_value = LoxFunction(
        name=name,
        params=extract_param_names(params_node),
        body=list(body_node.children),
        # Captures the declaring environment, not the caller's
        closure=interp.environment,
    )
    interp.environment.define(name, fn_value)

def eval_call(n: Tree, interp: 'Interpreter') -> LoxValue:
    callee_node, args_node = n.children
    callee = interp.evaluate(callee_node)

    if not isinstance(callee, (LoxFunction, NativeFunction)):
        raise UncallableValue(callee)

    args = [interp.evaluate(arg) for arg in args_node.children]
    return call_value(callee, args, interp)

def call_value(callee: LoxValue, args: List[LoxValue], interp: 'Interpreter') -> LoxValue:
    match callee:
        case LoxFunction():
            _check_arity(callee.arity, args)
            return call_function(callee, args, interp)
        case NativeFunction(arity=arity, fn=fn):
            _check_arity(arity, args)
            return fn(interp, args)
        case _:
            raise UncallableValue(callee)

def call_function(fn: LoxFunction, args: List[LoxValue], interp: 'Interpreter') -> LoxValue:
    call_env = fn.closure.child()

    for name, value in zip(fn.params, args):
        call_env.define(name, value)

    result = execute_block(fn.body, interp, call_env)

    if result is None:
        return LoxNil()

    return result.value

def _check_arity(expected: int, args: List[LoxValue]) -> None:
    if len(args) != expected:
        raise WrongNumberOfArguments(expected, len(args))
