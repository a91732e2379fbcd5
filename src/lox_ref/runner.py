from __future__ import annotations

import sys
import traceback
from pathlib import Path
from typing import List, Optional, TextIO

from .evaluator import Interpreter
from .lexer_rd import LexError
from .parser_rd import ParseError, parse_source
from .resolver import DepthTable, ResolveError, Resolver
from .tree import new_node_ids
from .types import LoxRuntimeError
from .utils import debug_py_trace_enabled

# sysexits.h
EX_OK = 0
EX_USAGE = 64
EX_SOFTWARE = 70
EX_IOERR = 74

# Each Lox call costs about a dozen Python frames
RECURSION_LIMIT = 5_000

LoxError = (LexError, ParseError, ResolveError, LoxRuntimeError)


class Session:
    """One interpreter plus the node-id counter shared by every unit it runs."""

    def __init__(self, out: Optional[TextIO]=None):
        self.interpreter = Interpreter(out=out)
        self.ids = new_node_ids()

        if sys.getrecursionlimit() < RECURSION_LIMIT:
            sys.setrecursionlimit(RECURSION_LIMIT)

    def run(self, source: str) -> None:
        """Scan, parse, resolve and execute one program unit.

        Static errors raise before anything in the unit runs. A runtime error
        abandons the rest of the unit; the session stays usable afterwards.
        """
        statements = parse_source(source, ids=self.ids)
        depths = DepthTable()
        Resolver(depths).resolve(statements)
        self.interpreter.locals.update(depths.depths)

        try:
            self.interpreter.interpret(statements)
        except RecursionError:
            raise LoxRuntimeError("Stack overflow") from None
        finally:
            # Any escape leaves the chain unwound back to the top level
            self.interpreter.environment = self.interpreter.globals


def run(source: str, out: Optional[TextIO]=None) -> Session:
    session = Session(out=out)
    session.run(source)
    return session

def run_file(path: str, out: Optional[TextIO]=None) -> Session:
    source = Path(path).read_text(encoding="utf-8")
    return run(source, out=out)

def report_error(exc: Exception) -> None:
    """Print every collected error of a failed unit as `Error: <msg>` on stderr."""
    for err in getattr(exc, "errors", None) or [exc]:
        print(f"Error: {err}", file=sys.stderr)

    if debug_py_trace_enabled() and isinstance(exc, LoxRuntimeError) and exc.__traceback__ is not None:
        print("\nPython traceback:", file=sys.stderr)
        print("".join(traceback.format_tb(exc.__traceback__)), file=sys.stderr, end="")

def _load_source(arg: str) -> str:
    if arg == "-":
        return sys.stdin.read()

    return Path(arg).read_text(encoding="utf-8")

def main(argv: Optional[List[str]]=None) -> int:
    """`lox-ref [script | -]`: run a script, or start the REPL without one."""
    args = list(sys.argv[1:] if argv is None else argv)

    if len(args) > 1:
        print("Usage: lox-ref [script]", file=sys.stderr)
        return EX_USAGE

    if not args:
        from .repl import repl

        repl()
        return EX_OK

    try:
        source = _load_source(args[0])
    except OSError as exc:
        print(f"Error: cannot read {args[0]}: {exc.strerror or exc}", file=sys.stderr)
        return EX_IOERR

    try:
        Session().run(source)
    except LoxError as exc:
        report_error(exc)
        return EX_USAGE
    except AssertionError as exc:
        print(f"Internal error: {exc}", file=sys.stderr)
        return EX_SOFTWARE

    return EX_OK

if __name__ == "__main__":
    sys.exit(main())
