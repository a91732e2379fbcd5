from __future__ import annotations

import sys
from typing import Callable, Dict, List, Optional, TextIO

from lark import Token

from .runtime import install_natives
from .tree import Node, Tree, ident_name, is_token, node_id, node_position, tree_label
from .types import (
    Environment,
    ExecResult,
    LoxNil,
    LoxRuntimeError,
    LoxValue,
    Returning,
)
from .utils import stringify

from .eval.blocks import eval_block
from .eval.common import token_false, token_nil, token_number, token_string, token_true
from .eval.expr import eval_binary, eval_group, eval_logical, eval_unary
from .eval.fn import eval_call, eval_fun_decl
from .eval.loops import eval_if_stmt, eval_while_stmt


def _maybe_attach_location(exc: LoxRuntimeError, node: Node) -> None:
    # The innermost node wins; outer frames leave it alone
    if exc.line is not None:
        return

    line, column = node_position(node)
    if line is None:
        return

    exc.line = line
    exc.column = column


class Interpreter:
    """Executes resolved statement trees against an environment chain.

    `globals` lives as long as the interpreter, so a REPL session can feed it
    one program unit after another. `locals` maps node ids to the scope depth
    the resolver computed; ids missing from it are looked up in `globals`.
    Entries are kept for the life of the interpreter, since a function
    declared by an earlier unit may still be called by a later one.
    """

    def __init__(self, out: Optional[TextIO]=None):
        self.out = out if out is not None else sys.stdout
        self.globals = Environment()
        self.environment = self.globals
        self.locals: Dict[int, int] = {}

        install_natives(self)

    # ---------------- Public API ----------------

    def interpret(self, statements: List[Tree]) -> None:
        for stmt in statements:
            result = self.execute(stmt)

            if result is not None:
                raise AssertionError(f"return escaped to top level with {result.value!r}")

    def resolve(self, node: Tree, depth: int) -> None:
        self.locals[node_id(node)] = depth

    def execute(self, stmt: Tree) -> ExecResult:
        handler = _STMT_DISPATCH.get(tree_label(stmt) or '')

        if handler is None:
            raise LoxRuntimeError(f"Unknown statement: {tree_label(stmt)}")

        try:
            return handler(stmt, self)
        except LoxRuntimeError as e:
            _maybe_attach_location(e, stmt)
            raise

    def evaluate(self, expr: Node) -> LoxValue:
        try:
            return self._evaluate_inner(expr)
        except LoxRuntimeError as e:
            _maybe_attach_location(e, expr)
            raise

    # ---------------- Core evaluator ----------------

    def _evaluate_inner(self, n: Node) -> LoxValue:
        if is_token(n):
            return self._eval_token(n)

        handler = _EXPR_DISPATCH.get(n.data)
        if handler is not None:
            return handler(n, self)

        match n.data:
            case 'literal':
                return self._eval_token(n.children[0])
            case 'and' | 'or':
                return eval_logical(n.data, n, self)
            case _:
                raise LoxRuntimeError(f"Unknown node: {n.data}")

    def _eval_token(self, t: Token) -> LoxValue:
        handler = _TOKEN_DISPATCH.get(t.type)
        if handler:
            return handler(t, self)

        raise LoxRuntimeError(f"Unhandled token {t.type}:{t.value}")

    # ---------------- Variables ----------------

    def look_up_variable(self, name: str, n: Tree) -> LoxValue:
        depth = self.locals.get(node_id(n))

        if depth is None:
            return self.globals.get(name)

        return self.environment.get_at(depth, name)

    def assign_variable(self, name: str, n: Tree, value: LoxValue) -> None:
        depth = self.locals.get(node_id(n))

        if depth is None:
            self.globals.assign(name, value)
        else:
            self.environment.assign_at(depth, name, value)


# ---------------- Statements ----------------

def _exec_expr_stmt(n: Tree, interp: Interpreter) -> ExecResult:
    interp.evaluate(n.children[0])
    return None

def _exec_print_stmt(n: Tree, interp: Interpreter) -> ExecResult:
    value = interp.evaluate(n.children[0])
    interp.out.write(stringify(value) + "\n")
    return None

def _exec_var_decl(n: Tree, interp: Interpreter) -> ExecResult:
    name_tok, *init = n.children
    value = interp.evaluate(init[0]) if init else LoxNil()
    interp.environment.define(ident_name(name_tok), value)
    return None

def _exec_fun_decl(n: Tree, interp: Interpreter) -> ExecResult:
    eval_fun_decl(n, interp)
    return None

def _exec_return_stmt(n: Tree, interp: Interpreter) -> ExecResult:
    value = interp.evaluate(n.children[0]) if n.children else LoxNil()
    return Returning(value)

# ---------------- Expressions ----------------

def _eval_variable(n: Tree, interp: Interpreter) -> LoxValue:
    return interp.look_up_variable(ident_name(n.children[0]), n)

def _eval_assign(n: Tree, interp: Interpreter) -> LoxValue:
    name_tok, value_node = n.children
    value = interp.evaluate(value_node)
    interp.assign_variable(ident_name(name_tok), n, value)
    return value

# ---------------- Dispatch ----------------

_STMT_DISPATCH: dict[str, Callable[[Tree, Interpreter], ExecResult]] = {
    'exprstmt': _exec_expr_stmt,
    'printstmt': _exec_print_stmt,
    'vardecl': _exec_var_decl,
    'fundecl': _exec_fun_decl,
    'block': eval_block,
    'ifstmt': eval_if_stmt,
    'whilestmt': eval_while_stmt,
    'returnstmt': _exec_return_stmt,
}

_EXPR_DISPATCH: dict[str, Callable[[Tree, Interpreter], LoxValue]] = {
    'unary': eval_unary,
    'binary': eval_binary,
    'group': eval_group,
    'variable': _eval_variable,
    'assign': _eval_assign,
    'call': eval_call,
}

_TOKEN_DISPATCH: dict[str, Callable[[Token, Interpreter], LoxValue]] = {
    'NUMBER': token_number,
    'STRING': token_string,
    'TRUE': token_true,
    'FALSE': token_false,
    'NIL': token_nil,
}
