from __future__ import annotations

import io

import pytest

from lox_ref import runner
from lox_ref.runner import EX_IOERR, EX_OK, EX_SOFTWARE, EX_USAGE, main, run_file


def _script(tmp_path, text: str) -> str:
    path = tmp_path / "script.lox"
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_main_runs_script(tmp_path, capsys) -> None:
    path = _script(tmp_path, "fun greet(n) {\n  print \"hi \" + n;\n}\ngreet(\"lox\");\n")

    assert main([path]) == EX_OK
    assert capsys.readouterr().out == "hi lox\n"


def test_main_reads_stdin(monkeypatch, capsys) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO("print 1 + 1;"))

    assert main(["-"]) == EX_OK
    assert capsys.readouterr().out == "2\n"


def test_main_reports_every_parse_error(tmp_path, capsys) -> None:
    path = _script(tmp_path, "var = 1;\nprint 2;\nprint ;\n")

    assert main([path]) == EX_USAGE

    captured = capsys.readouterr()
    assert captured.out == ""
    errors = [line for line in captured.err.splitlines() if line.startswith("Error: ")]
    assert len(errors) == 2
    assert "line 1" in errors[0]
    assert "line 3" in errors[1]


def test_main_runtime_error(tmp_path, capsys) -> None:
    path = _script(tmp_path, "print 1;\nprint -\"x\";\nprint 3;\n")

    assert main([path]) == EX_USAGE

    captured = capsys.readouterr()
    assert captured.out == "1\n"
    assert captured.err.startswith("Error: Expected number")
    assert "(line 2, col 7)" in captured.err
    assert "Python traceback" not in captured.err


def test_main_py_traceback_toggle(tmp_path, capsys, monkeypatch) -> None:
    monkeypatch.setenv("LOX_DEBUG_PY_TRACE", "1")
    path = _script(tmp_path, "print nil + 1;")

    assert main([path]) == EX_USAGE
    assert "Python traceback:" in capsys.readouterr().err


def test_main_missing_file(tmp_path, capsys) -> None:
    assert main([str(tmp_path / "nope.lox")]) == EX_IOERR
    assert "cannot read" in capsys.readouterr().err


def test_main_too_many_args(capsys) -> None:
    assert main(["a.lox", "b.lox"]) == EX_USAGE
    assert "Usage" in capsys.readouterr().err


def test_main_internal_error(tmp_path, capsys, monkeypatch) -> None:
    def broken(self, source):
        raise AssertionError("broken invariant")

    monkeypatch.setattr(runner.Session, "run", broken)
    path = _script(tmp_path, "print 1;")

    assert main([path]) == EX_SOFTWARE
    assert "broken invariant" in capsys.readouterr().err


def test_run_file_runs_whole_file_as_one_unit(tmp_path) -> None:
    # The function body spans lines, which only works as a single unit
    path = _script(tmp_path, "fun f() {\n  return 7;\n}\nprint f();\n")
    out = io.StringIO()

    session = run_file(path, out=out)

    assert out.getvalue() == "7\n"
    assert session.interpreter.globals.get("f") is not None


def test_run_returns_session_for_reuse() -> None:
    out = io.StringIO()
    session = runner.run("var x = 40;", out=out)
    session.run("print x + 2;")

    assert out.getvalue() == "42\n"


@pytest.mark.parametrize(
    "exc_text",
    ["Unexpected character '@'"],
    ids=["lex-error"],
)
def test_main_lex_error(tmp_path, capsys, exc_text: str) -> None:
    path = _script(tmp_path, "print @;")

    assert main([path]) == EX_USAGE
    assert exc_text in capsys.readouterr().err
