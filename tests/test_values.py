from __future__ import annotations

import pytest

from lox_ref.eval.helpers import is_truthy
from lox_ref.types import (
    Environment,
    LoxBool,
    LoxFunction,
    LoxNil,
    LoxNumber,
    LoxString,
    NativeFunction,
)
from lox_ref.utils import lox_equals, stringify


def _fn(name: str) -> LoxFunction:
    return LoxFunction(name=name, params=[], body=[], closure=Environment())


TRUTHY_CASES = [
    pytest.param(LoxNil(), False, id="nil"),
    pytest.param(LoxBool(False), False, id="false"),
    pytest.param(LoxBool(True), True, id="true"),
    pytest.param(LoxNumber(0.0), True, id="zero"),
    pytest.param(LoxNumber(-1.5), True, id="negative"),
    pytest.param(LoxString(""), True, id="empty-string"),
    pytest.param(LoxString("x"), True, id="string"),
    pytest.param(_fn("f"), True, id="function"),
]


@pytest.mark.parametrize("value, expected", TRUTHY_CASES)
def test_truthiness(value, expected: bool) -> None:
    assert is_truthy(value) is expected


STRINGIFY_CASES = [
    pytest.param(LoxNumber(3.0), "3", id="integral"),
    pytest.param(LoxNumber(-0.5), "-0.5", id="fraction"),
    pytest.param(LoxNumber(-0.0), "-0", id="negative-zero"),
    pytest.param(LoxNumber(float("inf")), "inf", id="infinity"),
    pytest.param(LoxString("raw text"), "raw text", id="string-unquoted"),
    pytest.param(LoxBool(True), "true", id="true"),
    pytest.param(LoxNil(), "nil", id="nil"),
    pytest.param(_fn("go"), "<fn go>", id="function"),
    pytest.param(NativeFunction("clock", 0, lambda _i, _a: LoxNil()), "<native fn clock>", id="native"),
]


@pytest.mark.parametrize("value, expected", STRINGIFY_CASES)
def test_stringify(value, expected: str) -> None:
    assert stringify(value) == expected


def test_string_repr_is_quoted() -> None:
    assert repr(LoxString("a")) == '"a"'


def test_equality_is_structural_within_tags() -> None:
    assert lox_equals(LoxNumber(2.0), LoxNumber(2.0))
    assert lox_equals(LoxString("a"), LoxString("a"))
    assert lox_equals(LoxNil(), LoxNil())
    assert not lox_equals(LoxBool(True), LoxBool(False))


def test_equality_across_tags_is_false() -> None:
    assert not lox_equals(LoxNumber(0.0), LoxBool(False))
    assert not lox_equals(LoxNil(), LoxBool(False))
    assert not lox_equals(LoxString("1"), LoxNumber(1.0))


def test_callables_compare_by_identity() -> None:
    f = _fn("f")
    g = _fn("f")

    assert lox_equals(f, f)
    assert not lox_equals(f, g)


def test_function_arity() -> None:
    fn = LoxFunction(name="f", params=["a", "b"], body=[], closure=Environment())
    assert fn.arity == 2
