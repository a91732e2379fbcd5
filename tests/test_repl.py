from __future__ import annotations

import pytest

from lox_ref.repl import _handle_slash, needs_continuation
from lox_ref.repl_highlight import GROUP_STYLE, _TT_GROUP, _highlight_line
from lox_ref.runner import Session
from lox_ref.utils import debug_py_trace_enabled

CONTINUATION_CASES = [
    pytest.param("print 1;", False, id="complete-statement"),
    pytest.param("fun f() {", True, id="open-brace"),
    pytest.param("fun f() {\n  print 1;\n}", False, id="closed-brace"),
    pytest.param("print (1 +", True, id="open-paren"),
    pytest.param('print "abc', True, id="open-string"),
    pytest.param("print @;", False, id="lex-error-submits"),
    pytest.param("}", False, id="stray-close"),
    pytest.param("{ // {", True, id="brace-in-comment-ignored"),
]


@pytest.mark.parametrize("text, expected", CONTINUATION_CASES)
def test_needs_continuation(text: str, expected: bool) -> None:
    assert needs_continuation(text) is expected


def test_highlight_preserves_text() -> None:
    line = 'var x = "hi" + 1; // note'
    fragments = _highlight_line(line)

    assert "".join(text for _, text in fragments) == line


def test_highlight_styles_by_token_group() -> None:
    fragments = dict((text, style) for style, text in _highlight_line('fun f() { return nil; } // c'))

    assert fragments["fun"] == GROUP_STYLE["keyword"]
    assert fragments["f"] == GROUP_STYLE["function"]
    assert fragments["nil"] == GROUP_STYLE["constant"]
    assert fragments["// c"] == GROUP_STYLE["comment"]


def test_highlight_falls_back_on_lex_error() -> None:
    assert _highlight_line('print "open') == [("", 'print "open')]


def test_slash_reset_replaces_session(capsys) -> None:
    box = [Session()]
    original = box[0]

    assert _handle_slash("/reset", box) is True
    assert box[0] is not original
    assert "reset" in capsys.readouterr().out


def test_slash_py_traceback_toggle(monkeypatch, capsys) -> None:
    # Registers the variable with monkeypatch so teardown restores it
    monkeypatch.setenv("LOX_DEBUG_PY_TRACE", "0")
    box = [Session()]

    _handle_slash("/py-traceback on", box)
    assert debug_py_trace_enabled()

    _handle_slash("/py-traceback", box)
    assert not debug_py_trace_enabled()

    out = capsys.readouterr().out
    assert "Python traceback: on" in out
    assert "Python traceback: off" in out


def test_non_slash_input_is_not_a_command() -> None:
    assert _handle_slash("print 1;", [Session()]) is False


def test_unknown_slash_command(capsys) -> None:
    assert _handle_slash("/nope", [Session()]) is True
    assert "Unknown command" in capsys.readouterr().err


def test_every_style_group_is_reachable() -> None:
    # "function" and "comment" are assigned outside the token table
    assert set(GROUP_STYLE) == set(_TT_GROUP.values()) | {"function", "comment"}
