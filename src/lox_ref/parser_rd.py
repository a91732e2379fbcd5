"""
Recursive Descent Parser for Lox

Structure:
- Lexer: Token stream from source (lexer_rd)
- Parser: Recursive descent, one method per precedence level
- AST: lark Tree nodes labelled by variant, each with a unique node id

Grammar:
    program     -> declaration* EOF
    declaration -> funDecl | varDecl | statement
    funDecl     -> "fun" IDENT "(" params? ")" block
    varDecl     -> "var" IDENT ( "=" expression )? ";"
    statement   -> exprStmt | forStmt | ifStmt | printStmt | returnStmt
                 | whileStmt | block
    expression  -> assignment
"""

from typing import Iterator, List, Optional

from lark import Tree

from .lexer_rd import tokenize
from .token_types import TT, Tok
from .tree import NodeIds, make_token, make_tree, new_node_ids, tree_label

# ============================================================================
# Errors
# ============================================================================

class ParseError(Exception):
    """Parse error with position info"""

    def __init__(self, message: str, token: Optional[Tok] = None):
        self.message = message
        self.token = token
        self.line = token.line if token else None
        self.column = token.column if token else None
        self.pos = token.pos if token else None
        # Every error collected while parsing the unit, filled in by parse()
        self.errors: List['ParseError'] = [self]
        super().__init__(
            f"{message} (line {token.line}, col {token.column})" if token else message
        )

class ExpectedExpression(ParseError):
    pass

class ExpectedEndOfExpression(ParseError):
    pass

class ExpectedEndOfBlock(ParseError):
    pass

class ExpectedLeftParen(ParseError):
    pass

class ExpectedRightParen(ParseError):
    pass

class UnmatchedParenthesis(ParseError):
    pass

class ExpectedIdentifier(ParseError):
    pass

class ExpectedBlock(ParseError):
    pass

class InvalidAssignmentTarget(ParseError):
    pass

# ============================================================================
# Parser
# ============================================================================

class Parser:
    """
    Recursive descent parser for Lox.

    Expression precedence (lowest to highest):
    1. assignment (=, right associative)
    2. or
    3. and
    4. equality (==, !=)
    5. comparison (<, <=, >, >=)
    6. term (+, -)
    7. factor (*, /)
    8. unary (!, -)
    9. call (callee(args))
    10. primary (literals, identifiers, parens)
    """

    # Tokens that plausibly begin a new statement; recovery stops before them
    SYNC_TOKENS = (
        TT.CLASS, TT.FUN, TT.VAR, TT.FOR, TT.IF, TT.WHILE, TT.PRINT, TT.RETURN,
    )

    EQUALITY_OPS = (TT.EQ, TT.NEQ)
    COMPARISON_OPS = (TT.GT, TT.GTE, TT.LT, TT.LTE)
    TERM_OPS = (TT.MINUS, TT.PLUS)
    FACTOR_OPS = (TT.SLASH, TT.STAR)

    def __init__(self, tokens: List[Tok], ids: Optional[NodeIds] = None):
        self.tokens = tokens
        self.pos = 0
        self.current = tokens[0] if tokens else Tok(TT.EOF, None, 0, 0)
        self.ids: Iterator[int] = ids if ids is not None else new_node_ids()
        self.errors: List[ParseError] = []

    # ========================================================================
    # Token Navigation
    # ========================================================================

    def peek(self, offset: int = 0) -> Tok:
        """Look ahead at token"""
        idx = self.pos + offset
        if idx < len(self.tokens):
            return self.tokens[idx]
        return Tok(TT.EOF, None, 0, 0)

    def previous(self) -> Tok:
        return self.tokens[self.pos - 1] if self.pos > 0 else self.current

    def advance(self) -> Tok:
        """Consume current token and move to next (EOF is never consumed)"""
        prev = self.current
        if prev.type == TT.EOF:
            return prev

        self.pos += 1
        self.current = self.peek()
        return prev

    def check(self, *types: TT) -> bool:
        """Check if current token matches any of the given types"""
        return self.current.type in types

    def match(self, *types: TT) -> bool:
        """Check and consume if current token matches"""
        if self.check(*types):
            self.advance()
            return True
        return False

    def expect(self, token_type: TT, error: type, message: str) -> Tok:
        """Consume token of expected type or raise the given ParseError subclass"""
        if not self.check(token_type):
            raise error(f"{message}, got {self.current.type.name}", self.current)
        return self.advance()

    def node(self, data: str, children: list, tok: Optional[Tok]) -> Tree:
        return make_tree(data, children, tok, self.ids)

    # ========================================================================
    # Top-Level Parsing
    # ========================================================================

    def parse(self) -> List[Tree]:
        """Parse entire program.

        Keeps going after a bad statement so every syntax error of the unit
        is collected; raises the first one (with `.errors` holding all of
        them) once the token stream is exhausted.
        """
        statements = []

        while not self.check(TT.EOF):
            stmt = self.parse_declaration()
            if stmt is not None:
                statements.append(stmt)

        if self.errors:
            first = self.errors[0]
            first.errors = list(self.errors)
            raise first

        return statements

    def parse_declaration(self) -> Optional[Tree]:
        """Parse one declaration, recovering to the next statement on error."""
        try:
            if self.check(TT.FUN):
                return self.parse_fun_decl()
            if self.check(TT.VAR):
                return self.parse_var_decl()
            return self.parse_statement()
        except ParseError as e:
            self.errors.append(e)
            self.synchronize()
            return None

    def synchronize(self) -> None:
        """Discard tokens until just past a ';' or before a statement keyword."""
        self.advance()

        while not self.check(TT.EOF):
            if self.previous().type == TT.SEMI:
                return
            if self.check(*self.SYNC_TOKENS):
                return
            self.advance()

    # ========================================================================
    # Declarations
    # ========================================================================

    def parse_fun_decl(self) -> Tree:
        """
        Parse function declaration:
        fun name(a, b) { body }
        """
        fun_tok = self.advance()
        name_tok = self.expect(TT.IDENT, ExpectedIdentifier, "Expected function name")
        self.expect(TT.LPAR, ExpectedLeftParen, "Expected '(' after function name")

        params = []
        if not self.check(TT.RPAR):
            while True:
                param = self.expect(TT.IDENT, ExpectedIdentifier, "Expected parameter name")
                params.append(make_token('IDENT', param))
                if not self.match(TT.COMMA):
                    break

        self.expect(TT.RPAR, ExpectedRightParen, "Expected ')' after parameters")

        if not self.check(TT.LBRACE):
            raise ExpectedBlock(f"Expected '{{' before function body, got {self.current.type.name}", self.current)
        body = self.parse_block()

        paramlist = self.node('paramlist', params, name_tok)
        return self.node('fundecl', [make_token('IDENT', name_tok), paramlist, body], fun_tok)

    def parse_var_decl(self) -> Tree:
        """Parse variable declaration: var name [= expr];"""
        var_tok = self.advance()
        name_tok = self.expect(TT.IDENT, ExpectedIdentifier, "Expected variable name")

        children = [make_token('IDENT', name_tok)]
        if self.match(TT.ASSIGN):
            children.append(self.parse_expr())

        self.expect_semi("variable declaration")
        return self.node('vardecl', children, var_tok)

    def expect_semi(self, context: str) -> Tok:
        return self.expect(TT.SEMI, ExpectedEndOfExpression, f"Expected ';' after {context}")

    # ========================================================================
    # Statements
    # ========================================================================

    def parse_statement(self) -> Tree:
        """
        Parse a single statement.

        Statements include:
        - Control flow (if, while, for)
        - print, return
        - Blocks
        - Expression statements
        """
        if self.check(TT.FOR):
            return self.parse_for_stmt()
        if self.check(TT.IF):
            return self.parse_if_stmt()
        if self.check(TT.PRINT):
            return self.parse_print_stmt()
        if self.check(TT.RETURN):
            return self.parse_return_stmt()
        if self.check(TT.WHILE):
            return self.parse_while_stmt()
        if self.check(TT.LBRACE):
            return self.parse_block()

        return self.parse_expr_stmt()

    def parse_if_stmt(self) -> Tree:
        """
        Parse if statement:
        if (expr) stmt [else stmt]

        A dangling else binds to the nearest if.
        """
        if_tok = self.advance()
        self.expect(TT.LPAR, ExpectedLeftParen, "Expected '(' after 'if'")
        cond = self.parse_expr()
        self.expect(TT.RPAR, ExpectedRightParen, "Expected ')' after if condition")

        children = [cond, self.parse_statement()]
        if self.match(TT.ELSE):
            children.append(self.parse_statement())

        return self.node('ifstmt', children, if_tok)

    def parse_while_stmt(self) -> Tree:
        """Parse while statement: while (expr) stmt"""
        while_tok = self.advance()
        self.expect(TT.LPAR, ExpectedLeftParen, "Expected '(' after 'while'")
        cond = self.parse_expr()
        self.expect(TT.RPAR, ExpectedRightParen, "Expected ')' after while condition")
        body = self.parse_statement()

        return self.node('whilestmt', [cond, body], while_tok)

    def parse_for_stmt(self) -> Tree:
        """
        Parse for statement and desugar it:
        for (init; cond; incr) body
        =>
        { init; while (cond) { body; incr; } }

        A missing condition is the literal `true`; a missing initializer
        drops the outer block, a missing increment the inner one.
        """
        for_tok = self.advance()
        self.expect(TT.LPAR, ExpectedLeftParen, "Expected '(' after 'for'")

        initializer: Optional[Tree]
        if self.match(TT.SEMI):
            initializer = None
        elif self.check(TT.VAR):
            initializer = self.parse_var_decl()
        else:
            initializer = self.parse_expr_stmt()

        if self.check(TT.SEMI):
            cond = self.node('literal', [make_token('TRUE', self.current, 'true')], self.current)
        else:
            cond = self.parse_expr()
        self.expect_semi("loop condition")

        increment = None
        if not self.check(TT.RPAR):
            increment = self.parse_expr()
        self.expect(TT.RPAR, ExpectedRightParen, "Expected ')' after for clauses")

        body = self.parse_statement()

        if increment is not None:
            incr_stmt = self.node('exprstmt', [increment], for_tok)
            body = self.node('block', [body, incr_stmt], for_tok)

        loop = self.node('whilestmt', [cond, body], for_tok)

        if initializer is not None:
            return self.node('block', [initializer, loop], for_tok)

        return loop

    def parse_print_stmt(self) -> Tree:
        print_tok = self.advance()
        value = self.parse_expr()
        self.expect_semi("value")
        return self.node('printstmt', [value], print_tok)

    def parse_return_stmt(self) -> Tree:
        """Parse return statement: return [expr];"""
        return_tok = self.advance()
        children = []
        if not self.check(TT.SEMI):
            children.append(self.parse_expr())
        self.expect_semi("return value")
        return self.node('returnstmt', children, return_tok)

    def parse_block(self) -> Tree:
        """Parse block: { declaration* }"""
        lbrace = self.advance()
        statements = []

        while not self.check(TT.RBRACE, TT.EOF):
            stmt = self.parse_declaration()
            if stmt is not None:
                statements.append(stmt)

        if not self.match(TT.RBRACE):
            raise ExpectedEndOfBlock("Expected '}' after block", self.current)

        return self.node('block', statements, lbrace)

    def parse_expr_stmt(self) -> Tree:
        first = self.current
        expr = self.parse_expr()
        self.expect_semi("expression")
        return self.node('exprstmt', [expr], first)

    # ========================================================================
    # Expressions - Precedence Climbing
    # ========================================================================

    def parse_expr(self) -> Tree:
        """Parse expression (top level)."""
        return self.parse_assignment()

    def parse_assignment(self) -> Tree:
        """Parse assignment: IDENT = expr (right associative)"""
        target_tok = self.current
        expr = self.parse_or_expr()

        if self.check(TT.ASSIGN):
            eq_tok = self.advance()
            value = self.parse_assignment()

            if tree_label(expr) == 'variable':
                name = expr.children[0]
                return self.node('assign', [name, value], target_tok)

            raise InvalidAssignmentTarget("Invalid assignment target", eq_tok)

        return expr

    def parse_or_expr(self) -> Tree:
        """Parse logical OR: expr or expr"""
        left = self.parse_and_expr()

        while self.check(TT.OR):
            op = self.advance()
            right = self.parse_and_expr()
            left = self.node('or', [left, make_token('OR', op), right], op)

        return left

    def parse_and_expr(self) -> Tree:
        """Parse logical AND: expr and expr"""
        left = self.parse_equality_expr()

        while self.check(TT.AND):
            op = self.advance()
            right = self.parse_equality_expr()
            left = self.node('and', [left, make_token('AND', op), right], op)

        return left

    def _parse_binary(self, operand, ops) -> Tree:
        """Left-associative fold of `operand (op operand)*` into binary nodes."""
        left = operand()

        while self.check(*ops):
            op = self.advance()
            right = operand()
            left = self.node('binary', [left, make_token(op.type.name, op), right], op)

        return left

    def parse_equality_expr(self) -> Tree:
        return self._parse_binary(self.parse_comparison_expr, self.EQUALITY_OPS)

    def parse_comparison_expr(self) -> Tree:
        return self._parse_binary(self.parse_term_expr, self.COMPARISON_OPS)

    def parse_term_expr(self) -> Tree:
        return self._parse_binary(self.parse_factor_expr, self.TERM_OPS)

    def parse_factor_expr(self) -> Tree:
        return self._parse_binary(self.parse_unary_expr, self.FACTOR_OPS)

    def parse_unary_expr(self) -> Tree:
        """Parse unary operators: -expr, !expr"""
        if self.check(TT.NEG, TT.MINUS):
            op = self.advance()
            operand = self.parse_unary_expr()
            return self.node('unary', [make_token(op.type.name, op), operand], op)

        return self.parse_call_expr()

    def parse_call_expr(self) -> Tree:
        """Parse calls: primary ( "(" args? ")" )*"""
        expr = self.parse_primary_expr()

        while self.check(TT.LPAR):
            lpar = self.advance()
            args = []

            if not self.check(TT.RPAR):
                while True:
                    args.append(self.parse_expr())
                    if not self.match(TT.COMMA):
                        break

            self.expect(TT.RPAR, ExpectedRightParen, "Expected ')' after arguments")
            arglist = self.node('arglist', args, lpar)
            expr = self.node('call', [expr, arglist], lpar)

        return expr

    def parse_primary_expr(self) -> Tree:
        """
        Parse primary expressions:
        - Literals (numbers, strings, true, false, nil)
        - Identifiers
        - Parenthesized expressions
        """
        tok = self.current

        if self.match(TT.NUMBER):
            return self.node('literal', [make_token('NUMBER', tok)], tok)

        if self.match(TT.STRING):
            return self.node('literal', [make_token('STRING', tok, tok.value)], tok)

        if self.match(TT.TRUE, TT.FALSE, TT.NIL):
            return self.node('literal', [make_token(tok.type.name, tok)], tok)

        if self.match(TT.IDENT):
            return self.node('variable', [make_token('IDENT', tok)], tok)

        if self.match(TT.LPAR):
            inner = self.parse_expr()
            if not self.match(TT.RPAR):
                raise UnmatchedParenthesis(
                    f"Expected ')' to close '(' at line {tok.line}, col {tok.column}", self.current
                )
            return self.node('group', [inner], tok)

        raise ExpectedExpression(f"Expected expression, got {tok.type.name}", tok)

# ============================================================================
# Usage
# ============================================================================

def parse_source(source: str, ids: Optional[NodeIds] = None) -> List[Tree]:
    """
    Parse Lox source code to a list of statement trees.

    Args:
        source: Source code to parse
        ids: Node id counter; pass the session's so ids stay unique across units
    """
    tokens = tokenize(source)
    parser = Parser(tokens, ids=ids)
    return parser.parse()
