from __future__ import annotations

from typing import TYPE_CHECKING

from lark import Token

from ..tree import Tree
from ..types import (
    LoxBool,
    LoxNumber,
    LoxString,
    LoxValue,
    DivisionByZero,
    ExpectedNumber,
    ExpectedNumberOrString,
    ExpectedString,
    LoxRuntimeError,
)
from ..utils import lox_equals
from .common import require_number, token_kind
from .helpers import is_truthy

if TYPE_CHECKING:
    from ..evaluator import Interpreter

def eval_unary(n: Tree, interp: 'Interpreter') -> LoxValue:
    op, rhs_node = n.children
    rhs = interp.evaluate(rhs_node)

    match op:
        case Token(type='MINUS'):
            return LoxNumber(-require_number(rhs))
        case Token(type='NEG'):
            return LoxBool(not is_truthy(rhs))
        case _:
            raise LoxRuntimeError(f"Unsupported unary op {op}")

def eval_binary(n: Tree, interp: 'Interpreter') -> LoxValue:
    lhs_node, op, rhs_node = n.children
    # Both operands are evaluated, left first, before any type check
    lhs = interp.evaluate(lhs_node)
    rhs = interp.evaluate(rhs_node)

    return apply_binary_operator(token_kind(op) or '', lhs, rhs)

def apply_binary_operator(op: str, lhs: LoxValue, rhs: LoxValue) -> LoxValue:
    match op:
        case 'PLUS':
            return _add(lhs, rhs)
        case 'MINUS':
            return LoxNumber(require_number(lhs) - require_number(rhs))
        case 'STAR':
            return LoxNumber(require_number(lhs) * require_number(rhs))
        case 'SLASH':
            dividend = require_number(lhs)
            divisor = require_number(rhs)

            if divisor == 0:
                raise DivisionByZero()
            return LoxNumber(dividend / divisor)
        case 'EQ':
            return LoxBool(lox_equals(lhs, rhs))
        case 'NEQ':
            return LoxBool(not lox_equals(lhs, rhs))
        case 'GT' | 'GTE' | 'LT' | 'LTE':
            return LoxBool(_compare_numbers(op, lhs, rhs))
    raise LoxRuntimeError(f"Unknown operator {op}")

def _add(lhs: LoxValue, rhs: LoxValue) -> LoxValue:
    match (lhs, rhs):
        case (LoxNumber(value=a), LoxNumber(value=b)):
            return LoxNumber(a + b)
        case (LoxString(value=a), LoxString(value=b)):
            return LoxString(a + b)
        # The left operand decides what the right one should have been
        case (LoxNumber(), _):
            raise ExpectedNumber(rhs)
        case (LoxString(), _):
            raise ExpectedString(rhs)
        case _:
            raise ExpectedNumberOrString(lhs)

def _compare_numbers(op: str, lhs: LoxValue, rhs: LoxValue) -> bool:
    a = require_number(lhs)
    b = require_number(rhs)

    match op:
        case 'GT':
            return a > b
        case 'GTE':
            return a >= b
        case 'LT':
            return a < b
        case 'LTE':
            return a <= b
    raise LoxRuntimeError(f"Unknown comparator {op}")

def eval_logical(kind: str, n: Tree, interp: 'Interpreter') -> LoxValue:
    """Short-circuit `and`/`or`; the result is an operand, not a coerced bool."""
    lhs_node, _, rhs_node = n.children
    lhs = interp.evaluate(lhs_node)

    if kind == 'or':
        if is_truthy(lhs):
            return lhs
    elif not is_truthy(lhs):
        return lhs

    return interp.evaluate(rhs_node)

def eval_group(n: Tree, interp: 'Interpreter') -> LoxValue:
    return interp.evaluate(n.children[0])
