"""prompt_toolkit lexer for live Lox syntax highlighting in the REPL."""

from __future__ import annotations

from typing import Callable

from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.lexers import Lexer

from .lexer_rd import Lexer as LoxScanner, LexError
from .token_types import TT

# Map highlight groups → prompt_toolkit style strings.
GROUP_STYLE = {
    "keyword": "bold ansicyan",
    "boolean": "ansicyan",
    "constant": "ansicyan",
    "number": "ansimagenta",
    "string": "ansigreen",
    "identifier": "",
    "function": "bold ansiyellow",
    "operator": "",
    "punctuation": "",
    "comment": "italic ansigray",
}

# Token type → highlight group.
_TT_GROUP = {
    TT.IF: "keyword",
    TT.ELSE: "keyword",
    TT.WHILE: "keyword",
    TT.FOR: "keyword",
    TT.RETURN: "keyword",
    TT.FUN: "keyword",
    TT.VAR: "keyword",
    TT.PRINT: "keyword",
    TT.CLASS: "keyword",
    TT.SUPER: "keyword",
    TT.THIS: "keyword",
    TT.AND: "keyword",
    TT.OR: "keyword",
    TT.TRUE: "boolean",
    TT.FALSE: "boolean",
    TT.NIL: "constant",
    TT.NUMBER: "number",
    TT.STRING: "string",
    TT.IDENT: "identifier",
    TT.PLUS: "operator",
    TT.MINUS: "operator",
    TT.STAR: "operator",
    TT.SLASH: "operator",
    TT.EQ: "operator",
    TT.NEQ: "operator",
    TT.LT: "operator",
    TT.LTE: "operator",
    TT.GT: "operator",
    TT.GTE: "operator",
    TT.NEG: "operator",
    TT.ASSIGN: "operator",
    TT.LPAR: "punctuation",
    TT.RPAR: "punctuation",
    TT.LBRACE: "punctuation",
    TT.RBRACE: "punctuation",
    TT.DOT: "punctuation",
    TT.COMMA: "punctuation",
    TT.SEMI: "punctuation",
}


def _gap_spans(gap: str) -> StyleAndTextTuples:
    """Whitespace between tokens; a `//` in it starts a comment to end of line."""
    idx = gap.find("//")
    if idx < 0:
        return [("", gap)]

    spans: StyleAndTextTuples = []
    if idx > 0:
        spans.append(("", gap[:idx]))
    spans.append((GROUP_STYLE["comment"], gap[idx:]))
    return spans


def _highlight_line(text: str) -> StyleAndTextTuples:
    """Tokenize a single line and return styled fragments."""
    if not text:
        return [("", "")]

    try:
        tokens = LoxScanner(text).tokenize()
    except LexError:
        return [("", text)]

    result: StyleAndTextTuples = []
    pos = 0

    for i, tok in enumerate(tokens):
        if tok.type == TT.EOF or not tok.lexeme:
            continue

        # Unstyled gap before token.
        if tok.pos > pos:
            result.extend(_gap_spans(text[pos:tok.pos]))

        group = _TT_GROUP.get(tok.type, "")
        # `name(` reads as a call or declaration
        if tok.type == TT.IDENT and i + 1 < len(tokens) and tokens[i + 1].type == TT.LPAR:
            group = "function"
        result.append((GROUP_STYLE.get(group, ""), tok.lexeme))
        pos = tok.pos + tok.length

    # Trailing text: whitespace or a comment.
    if pos < len(text):
        result.extend(_gap_spans(text[pos:]))

    return result if result else [("", text)]


class LoxLexer(Lexer):
    """prompt_toolkit Lexer that highlights Lox source using the RD scanner."""

    def lex_document(self, document: Document) -> Callable[[int], StyleAndTextTuples]:
        lines = document.lines

        # Pre-compute highlights lazily per line.
        cache: dict[int, StyleAndTextTuples] = {}

        def get_line(lineno: int) -> StyleAndTextTuples:
            if lineno not in cache:
                if lineno < len(lines):
                    cache[lineno] = _highlight_line(lines[lineno])
                else:
                    cache[lineno] = [("", "")]

            return cache[lineno]

        return get_line
