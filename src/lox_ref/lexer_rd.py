"""
Lexer for Lox - Recursive Descent Parser front end

Tokenizes Lox source code into a stream of tokens.

Features:
- Single-pass tokenization, fail-fast on the first lexical error
- Position tracking (line, column, absolute offset)
- Greedy two-character operators (!=, ==, <=, >=)
- Line comments (// ...)
"""

from typing import List

from .token_types import TT, Tok

def _is_digit(ch: str) -> bool:
    # ASCII digits only
    return '0' <= ch <= '9'

# ============================================================================
# Errors
# ============================================================================

class LexError(Exception):
    """Lexical analysis error"""

    def __init__(self, message: str, line: int = 0, column: int = 0, pos: int = 0):
        self.message = message
        self.line = line
        self.column = column
        self.pos = pos
        super().__init__(f"{message} (line {line}, col {column})")

class UnexpectedCharacter(LexError):
    def __init__(self, character: str, line: int, column: int, pos: int):
        self.character = character
        super().__init__(f"Unexpected character '{character}'", line, column, pos)

class UnterminatedString(LexError):
    def __init__(self, string: str, line: int, column: int, pos: int):
        self.string = string
        super().__init__("Unterminated string", line, column, pos)

class UnterminatedNumber(LexError):
    def __init__(self, string: str, line: int, column: int, pos: int):
        self.string = string
        super().__init__(f"Unterminated number '{string}'", line, column, pos)

# ============================================================================
# Lexer Implementation
# ============================================================================

class Lexer:
    """
    Lox lexer.

    A hand-written state machine: each scan_* method consumes exactly one
    token (or one run of whitespace/comment) starting at self.pos.
    """

    # Keyword mapping
    KEYWORDS = {
        'and': TT.AND,
        'class': TT.CLASS,
        'else': TT.ELSE,
        'false': TT.FALSE,
        'for': TT.FOR,
        'fun': TT.FUN,
        'if': TT.IF,
        'nil': TT.NIL,
        'or': TT.OR,
        'print': TT.PRINT,
        'return': TT.RETURN,
        'super': TT.SUPER,
        'this': TT.THIS,
        'true': TT.TRUE,
        'var': TT.VAR,
        'while': TT.WHILE,
    }

    SINGLE_CHAR = {
        '(': TT.LPAR,
        ')': TT.RPAR,
        '{': TT.LBRACE,
        '}': TT.RBRACE,
        ',': TT.COMMA,
        '.': TT.DOT,
        '-': TT.MINUS,
        '+': TT.PLUS,
        ';': TT.SEMI,
        '*': TT.STAR,
    }

    # Characters that may extend with '=' into a two-character operator
    WITH_EQUAL = {
        '!': (TT.NEG, TT.NEQ),
        '=': (TT.ASSIGN, TT.EQ),
        '<': (TT.LT, TT.LTE),
        '>': (TT.GT, TT.GTE),
    }

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Tok] = []

        # Start of the token being scanned
        self.start = 0
        self.start_line = 1
        self.start_column = 1

    # ========================================================================
    # Main Tokenization
    # ========================================================================

    def tokenize(self) -> List[Tok]:
        """Tokenize entire source, return token list ending with EOF"""
        while self.pos < len(self.source):
            self.scan_token()

        self.mark_start()
        self.emit(TT.EOF, None)
        return self.tokens

    def scan_token(self):
        """Scan next token"""
        if self.skip_whitespace():
            return

        self.mark_start()
        ch = self.peek()

        # Comments
        if ch == '/' and self.peek(1) == '/':
            self.skip_comment()
            return

        if ch == '/':
            self.advance()
            self.emit(TT.SLASH, '/')
            return

        if ch in self.SINGLE_CHAR:
            self.advance()
            self.emit(self.SINGLE_CHAR[ch], ch)
            return

        if ch in self.WITH_EQUAL:
            single, double = self.WITH_EQUAL[ch]
            self.advance()
            if self.peek() == '=':
                self.advance()
                self.emit(double, ch + '=')
            else:
                self.emit(single, ch)
            return

        if ch == '"':
            self.scan_string()
            return

        if _is_digit(ch):
            self.scan_number()
            return

        if ch.isalpha() or ch == '_':
            self.scan_identifier()
            return

        raise UnexpectedCharacter(ch, self.line, self.column, self.pos)

    # ========================================================================
    # Token Scanners
    # ========================================================================

    def scan_string(self):
        """Scan string literal: "..." (no escapes, may span lines)"""
        self.advance()  # Opening quote
        content = ''

        while self.pos < len(self.source) and self.peek() != '"':
            content += self.advance()

        if self.pos >= len(self.source):
            raise UnterminatedString(content, self.start_line, self.start_column, self.start)

        self.advance()  # Closing quote
        self.emit(TT.STRING, content)

    def scan_number(self):
        """Scan number literal: digits, optionally '.' followed by digits"""
        # Integer part
        while _is_digit(self.peek()):
            self.advance()

        # Fractional part
        if self.peek() == '.':
            self.advance()
            if not _is_digit(self.peek()):
                partial = self.source[self.start:self.pos]
                raise UnterminatedNumber(partial, self.start_line, self.start_column, self.start)
            while _is_digit(self.peek()):
                self.advance()

        lexeme = self.source[self.start:self.pos]
        self.emit(TT.NUMBER, float(lexeme))

    def scan_identifier(self):
        """Scan identifier or keyword"""
        while self.peek().isalnum() or self.peek() == '_':
            self.advance()

        value = self.source[self.start:self.pos]
        token_type = self.KEYWORDS.get(value, TT.IDENT)
        self.emit(token_type, value)

    # ========================================================================
    # Utilities
    # ========================================================================

    def peek(self, offset: int = 0) -> str:
        """Look ahead at character"""
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return '\0'

    def advance(self) -> str:
        """Consume one character and return it"""
        ch = self.source[self.pos]
        self.pos += 1

        if ch == '\n':
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return ch

    def mark_start(self):
        self.start = self.pos
        self.start_line = self.line
        self.start_column = self.column

    def skip_whitespace(self) -> bool:
        """Skip whitespace (newlines included), return True if any skipped"""
        skipped = False
        while self.peek() in (' ', '\t', '\r', '\n') and self.pos < len(self.source):
            self.advance()
            skipped = True
        return skipped

    def skip_comment(self):
        """Skip comment until end of line"""
        while self.pos < len(self.source) and self.peek() != '\n':
            self.advance()

    def emit(self, token_type: TT, value):
        """Emit a token spanning self.start .. self.pos"""
        tok = Tok(
            type=token_type,
            value=value,
            line=self.start_line,
            column=self.start_column,
            pos=self.start,
            lexeme=self.source[self.start:self.pos],
        )
        self.tokens.append(tok)


def tokenize(source: str) -> List[Tok]:
    """Convenience function to tokenize source"""
    lexer = Lexer(source)
    return lexer.tokenize()
