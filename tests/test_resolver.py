from __future__ import annotations

from typing import List, Optional

import pytest
from lark import Tree

from tests.support.harness import (
    AlreadyDeclared,
    DepthTable,
    ReadInOwnInitializer,
    ResolveError,
    ReturnOutsideFunction,
    parse_source,
    resolve_statements,
)


def _uses(statements: List[Tree], name: str) -> List[Tree]:
    """`variable`/`assign` nodes for *name*, in source order."""
    found: List[Tree] = []
    for stmt in statements:
        for sub in stmt.iter_subtrees_topdown():
            if sub.data in ("variable", "assign") and sub.children[0].value == name:
                found.append(sub)
    return found


def _depths(source: str, name: str) -> List[Optional[int]]:
    statements = parse_source(source)
    table = resolve_statements(statements)
    assert isinstance(table, DepthTable)
    return [table.get(node) for node in _uses(statements, name)]


DEPTH_CASES = [
    pytest.param("var g = 1; print g;", "g", [None], id="global-unresolved"),
    pytest.param("print undeclared;", "undeclared", [None], id="unknown-left-for-globals"),
    pytest.param("{ var a = 1; print a; }", "a", [0], id="same-block"),
    pytest.param("{ var a = 1; { { print a; } } }", "a", [2], id="three-blocks-deep"),
    pytest.param("{ var a = 1; { a = 2; } }", "a", [1], id="assign-one-up"),
    pytest.param(
        "{ var a = 1; { var a = 2; print a; } print a; }",
        "a",
        [0, 0],
        id="shadowing-picks-innermost",
    ),
    pytest.param("fun f(x) { print x; }", "x", [0], id="param-in-body"),
    pytest.param("fun f(x) { { print x; } }", "x", [1], id="param-from-nested-block"),
    pytest.param(
        "fun outer() { var n = 0; fun inner() { n = n + 1; return n; } }",
        "n",
        [1, 1, 1],
        id="closure-captures-enclosing-local",
    ),
    pytest.param("fun fib(n) { return fib(n - 1); }", "fib", [None], id="global-recursion"),
    pytest.param("{ fun f() { f(); } }", "f", [1], id="local-recursion"),
    pytest.param(
        "{ var i = 0; while (i < 3) { i = i + 1; } }",
        "i",
        [0, 1, 1],
        id="while-condition-and-body",
    ),
    pytest.param(
        "for (var i = 0; i < 2; i = i + 1) print i;",
        "i",
        [0, 1, 1, 1],
        id="desugared-for",
    ),
]


@pytest.mark.parametrize("source, name, expected", DEPTH_CASES)
def test_resolved_depths(source: str, name: str, expected: List[Optional[int]]) -> None:
    assert _depths(source, name) == expected


ERROR_CASES = [
    pytest.param("{ var a = 1; var a = 2; }", AlreadyDeclared, id="local-redeclare"),
    pytest.param("fun f(a, a) {}", AlreadyDeclared, id="duplicate-param"),
    pytest.param("fun f(a) { var a; }", AlreadyDeclared, id="body-redeclares-param"),
    pytest.param("{ var a = a; }", ReadInOwnInitializer, id="local-self-initializer"),
    pytest.param("{ var a = 1; { var a = a + 1; } }", ReadInOwnInitializer, id="shadow-self-initializer"),
    pytest.param("return 1;", ReturnOutsideFunction, id="top-level-return"),
    pytest.param("{ return; }", ReturnOutsideFunction, id="block-return"),
]


@pytest.mark.parametrize("source, exc_type", ERROR_CASES)
def test_resolve_errors(source: str, exc_type: type) -> None:
    with pytest.raises(exc_type) as exc_info:
        resolve_statements(parse_source(source))

    assert isinstance(exc_info.value, ResolveError)
    assert exc_info.value.line is not None


ALLOWED_CASES = [
    pytest.param("var a = 1; var a = 2;", id="global-redeclare"),
    pytest.param("var a = a;", id="global-self-initializer"),
    pytest.param("{ var a = 1; } { var a = 2; }", id="sibling-blocks"),
    pytest.param("fun f() { return; }", id="return-in-function"),
    pytest.param("fun f() { fun g() { return 1; } return g; }", id="nested-return"),
]


@pytest.mark.parametrize("source", ALLOWED_CASES)
def test_resolve_allows(source: str) -> None:
    resolve_statements(parse_source(source))


def test_resolver_collects_all_errors() -> None:
    statements = parse_source("return 1;\n{ var b = b; }\n{ var c; var c; }")

    with pytest.raises(ResolveError) as exc_info:
        resolve_statements(statements)

    errors = exc_info.value.errors
    assert [type(e) for e in errors] == [ReturnOutsideFunction, ReadInOwnInitializer, AlreadyDeclared]
    assert [e.line for e in errors] == [1, 2, 3]


def test_resolution_continues_after_error() -> None:
    statements = parse_source("{ var b = b; }\n{ var c = 1; print c; }")
    table = DepthTable()

    with pytest.raises(ReadInOwnInitializer):
        resolve_statements(statements, table)

    (use,) = _uses(statements, "c")
    assert table.get(use) == 0


def test_error_reports_position() -> None:
    with pytest.raises(ReadInOwnInitializer) as exc_info:
        resolve_statements(parse_source("{\n  var a = a;\n}"))

    err = exc_info.value
    assert (err.line, err.column) == (2, 11)
    assert "line 2, col 11" in str(err)
    assert err.name == "a"
