"""
Token Types for Lox

Shared between lexer, parser and the REPL highlighter to avoid circular
dependencies.
"""

from typing import Any
from dataclasses import dataclass
from enum import Enum, auto


class TT(Enum):
    """Token Types - one per terminal of the grammar"""

    # Punctuation
    LPAR = auto()
    RPAR = auto()
    LBRACE = auto()
    RBRACE = auto()
    COMMA = auto()
    DOT = auto()
    SEMI = auto()

    # Arithmetic
    MINUS = auto()
    PLUS = auto()
    SLASH = auto()
    STAR = auto()

    # One or two character operators
    NEG = auto()  # !
    NEQ = auto()  # !=
    ASSIGN = auto()  # =
    EQ = auto()  # ==
    GT = auto()
    GTE = auto()
    LT = auto()
    LTE = auto()

    # Literals
    IDENT = auto()
    STRING = auto()
    NUMBER = auto()

    # Keywords
    AND = auto()
    CLASS = auto()
    ELSE = auto()
    FALSE = auto()
    FUN = auto()
    FOR = auto()
    IF = auto()
    NIL = auto()
    OR = auto()
    PRINT = auto()
    RETURN = auto()
    SUPER = auto()
    THIS = auto()
    TRUE = auto()
    VAR = auto()
    WHILE = auto()

    # Special
    EOF = auto()


@dataclass
class Tok:
    """Token with position info.

    `value` is the decoded payload: a float for NUMBER, the contents for
    STRING, the name for IDENT. `lexeme` is the exact source spelling.
    """

    type: TT
    value: Any
    line: int = 0
    column: int = 0
    pos: int = 0
    lexeme: str = ''

    @property
    def length(self) -> int:
        return len(self.lexeme)

    def __repr__(self):
        return f"Tok({self.type.name}, {self.value!r}, {self.line}:{self.column})"
