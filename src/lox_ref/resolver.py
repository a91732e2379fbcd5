"""
Static resolution pass.

Walks a program unit once before it runs and tells the interpreter, for every
`variable` and `assign` node bound in a local scope, how many environments
separate the use from the declaration. Names that no local scope binds are
left out of the table and are looked up in the globals at run time.

Scopes are dicts of name -> defined?; a name is False between its
declaration and the end of its initializer.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol

from lark import Token, Tree
from lark.visitors import Interpreter as TreeWalker

from .tree import ident_name, node_id, node_position, tree_children

class DepthSink(Protocol):
    def resolve(self, node: Tree, depth: int) -> None: ...

# ---------- Errors ----------

class ResolveError(Exception):
    def __init__(self, message: str, node: Any = None):
        line, column = node_position(node) if node is not None else (None, None)
        self.message = message
        self.line = line
        self.column = column
        # Every error collected while resolving the unit, filled in by resolve()
        self.errors: List['ResolveError'] = [self]
        super().__init__(message)

    def __str__(self) -> str:
        if self.line is None:
            return self.message
        return f"{self.message} (line {self.line}, col {self.column})"

class AlreadyDeclared(ResolveError):
    def __init__(self, name: str, node: Any = None):
        super().__init__(f"Variable '{name}' already declared in this scope", node)
        self.name = name

class ReadInOwnInitializer(ResolveError):
    def __init__(self, name: str, node: Any = None):
        super().__init__(f"Cannot read local variable '{name}' in its own initializer", node)
        self.name = name

class ReturnOutsideFunction(ResolveError):
    def __init__(self, node: Any = None):
        super().__init__("Cannot return from top-level code", node)

# ---------- Resolver ----------

class Resolver(TreeWalker):
    """Visits statement trees by label. Labels without a method here (literal,
    binary, call, ifstmt, ...) fall through to `visit_children`, which visits
    their subtrees left to right, the same order the interpreter evaluates them.
    """

    def __init__(self, sink: DepthSink):
        # TreeWalker.__getattr__ answers every unknown name, so all state is set here
        self.sink = sink
        self.scopes: List[Dict[str, bool]] = []
        self.function_depth = 0
        self.errors: List[ResolveError] = []

    def resolve(self, statements: List[Tree]) -> None:
        for stmt in statements:
            try:
                self.visit(stmt)
            except ResolveError as e:
                # Scopes were popped on the way out; carry on with the next statement
                self.errors.append(e)

        if self.errors:
            first = self.errors[0]
            first.errors = list(self.errors)
            raise first

    # ---------- Scopes ----------

    def begin_scope(self) -> None:
        self.scopes.append({})

    def end_scope(self) -> None:
        self.scopes.pop()

    def declare(self, name_tok: Token) -> None:
        if not self.scopes:
            return

        scope = self.scopes[-1]
        name = ident_name(name_tok)

        if name in scope:
            raise AlreadyDeclared(name, name_tok)

        scope[name] = False

    def define(self, name_tok: Token) -> None:
        if not self.scopes:
            return

        self.scopes[-1][ident_name(name_tok)] = True

    def resolve_local(self, node: Tree, name: str) -> None:
        for hops, scope in enumerate(reversed(self.scopes)):
            if name in scope:
                self.sink.resolve(node, hops)
                return
        # Unbound locally: global

    # ---------- Statements ----------

    def block(self, tree: Tree) -> None:
        self.begin_scope()
        try:
            self.visit_children(tree)
        finally:
            self.end_scope()

    def vardecl(self, tree: Tree) -> None:
        name_tok = tree.children[0]
        self.declare(name_tok)

        if len(tree.children) > 1:
            self.visit(tree.children[1])

        self.define(name_tok)

    def fundecl(self, tree: Tree) -> None:
        name_tok, paramlist, body = tree.children

        # Declared and defined up front so the body can recurse by name
        self.declare(name_tok)
        self.define(name_tok)

        self.resolve_function(paramlist, body)

    def resolve_function(self, paramlist: Tree, body: Tree) -> None:
        self.function_depth += 1
        self.begin_scope()
        try:
            for param in paramlist.children:
                self.declare(param)
                self.define(param)

            # Parameters and body statements share the call scope
            for stmt in tree_children(body):
                self.visit(stmt)
        finally:
            self.end_scope()
            self.function_depth -= 1

    def returnstmt(self, tree: Tree) -> None:
        if self.function_depth == 0:
            raise ReturnOutsideFunction(tree)

        self.visit_children(tree)

    # ---------- Expressions ----------

    def variable(self, tree: Tree) -> None:
        name = ident_name(tree.children[0])

        if self.scopes and self.scopes[-1].get(name) is False:
            raise ReadInOwnInitializer(name, tree)

        self.resolve_local(tree, name)

    def assign(self, tree: Tree) -> None:
        name_tok, value = tree.children
        self.visit(value)
        self.resolve_local(tree, ident_name(name_tok))


class DepthTable:
    """Stand-alone sink, for resolving without an interpreter."""

    def __init__(self) -> None:
        self.depths: Dict[int, int] = {}

    def resolve(self, node: Tree, depth: int) -> None:
        self.depths[node_id(node)] = depth

    def get(self, node: Tree) -> Optional[int]:
        return self.depths.get(node_id(node))


def resolve_statements(statements: List[Tree], sink: Optional[DepthSink] = None) -> DepthSink:
    sink = sink if sink is not None else DepthTable()
    Resolver(sink).resolve(statements)
    return sink
