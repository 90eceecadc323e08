"""DrawLang parser: recursive descent over scanner tokens, building an AST.

Syntax errors never raise. On a mismatch one error is recorded and tokens are
discarded until the expected one turns up (or input ends), so ``parse``
always returns a program.
"""

from __future__ import annotations

from dataclasses import dataclass

from drawlang.ast import (
    BinaryExpr,
    ColorNameExpr,
    ColorStmt,
    ConstExpr,
    Expr,
    ForDrawStmt,
    FuncCallExpr,
    OriginStmt,
    ParamExpr,
    Program,
    RotStmt,
    ScaleStmt,
    SizeStmt,
    Statement,
    UnaryExpr,
)
from drawlang.automaton import Encoding, create_automaton
from drawlang.context import Context
from drawlang.errors import Diagnostic, Phase
from drawlang.lexer import Scanner
from drawlang.source import StringSource
from drawlang.tokens import KeywordId, LexicalFault, LiteralValue, Token, TokenCategory

# How an expected token is named in error messages
_EXPECTED: dict[KeywordId, str] = {
    KeywordId.ORIGIN: "ORIGIN",
    KeywordId.SCALE: "SCALE",
    KeywordId.ROT: "ROT",
    KeywordId.FOR: "FOR",
    KeywordId.COLOR: "COLOR",
    KeywordId.SIZE: "SIZE",
    KeywordId.ASSIGN: "IS",
    KeywordId.T: "T",
    KeywordId.FROM: "FROM",
    KeywordId.TO: "TO",
    KeywordId.STEP: "STEP",
    KeywordId.DRAW: "DRAW",
    KeywordId.FUNC: "function name",
    KeywordId.PLUS: "'+'",
    KeywordId.MINUS: "'-'",
    KeywordId.MUL: "'*'",
    KeywordId.DIV: "'/'",
    KeywordId.POWER: "'**'",
    KeywordId.L_BRACKET: "'('",
    KeywordId.R_BRACKET: "')'",
    KeywordId.SEMICOLON: "';'",
    KeywordId.COMMA: "','",
}

_STATEMENT_KEYWORDS = frozenset(
    {
        KeywordId.ORIGIN,
        KeywordId.SCALE,
        KeywordId.ROT,
        KeywordId.FOR,
        KeywordId.COLOR,
        KeywordId.SIZE,
    }
)


@dataclass(frozen=True, slots=True)
class ParseResult:
    program: Program
    errors: list[Diagnostic]
    warnings: list[Diagnostic]

    @property
    def ok(self) -> bool:
        return not self.errors


class Parser:
    """Recursive descent parser pulling tokens from a ``Scanner``."""

    def __init__(self, scanner: Scanner, context: Context | None = None, source: str = "") -> None:
        self._scanner = scanner
        self._context = context if context is not None else Context()
        self._diag = self._context.diagnostics
        self._source = source
        self._token: Token | None = None
        self._depth = 0
        self._eof_reported = False

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def _fetch(self) -> Token:
        while True:
            tok = self._scanner.next_token()
            if tok.category is not TokenCategory.INVALID:
                return tok
            assert isinstance(tok.payload, LexicalFault)
            self._diag.error(tok.payload.message, tok.location, Phase.LEXICAL, tok.lexeme)
            self._diag.note(f"discard invalid token '{tok.lexeme}' at {tok.location}")

    def _peek(self) -> Token:
        if self._token is None:
            self._token = self._fetch()
        return self._token

    def _at(self, kw: KeywordId) -> bool:
        return self._peek().is_keyword(kw)

    def _at_eof(self) -> bool:
        return self._peek().category is TokenCategory.EOF

    def _advance(self) -> Token:
        tok = self._peek()
        if tok.category is not TokenCategory.EOF:
            self._token = self._fetch()
        return tok

    def _trace(self, text: str) -> None:
        self._context.trace_line("  " * self._depth + text)

    def _enter(self, rule: str) -> None:
        self._trace(f"enter in {rule}")
        self._depth += 1

    def _leave(self, rule: str) -> None:
        self._depth -= 1
        self._trace(f"exit from {rule}")

    def _error(self, expected: str) -> None:
        tok = self._peek()
        if tok.category is TokenCategory.EOF:
            # Everything after the first failure at end of input is noise
            if self._eof_reported:
                return
            self._eof_reported = True
            message = f"unexpected end of input, expected {expected}"
        else:
            message = f"unexpected token '{tok.lexeme}', expected {expected}"
        self._diag.error(message, tok.location, Phase.SYNTAX, tok.lexeme)

    def match(self, kw: KeywordId) -> bool:
        """Consume a *kw* token, discarding tokens up to it on a mismatch.

        Returns False if input ended before *kw* was found.
        """
        if self._at(kw):
            self._trace(f"match token {self._advance().lexeme}")
            return True

        self._error(_EXPECTED[kw])
        while not self._at_eof():
            tok = self._advance()
            self._diag.note(f"discard token '{tok.lexeme}' at {tok.location}")
            if self._at(kw):
                self._trace(f"match token {self._advance().lexeme} after discard")
                return True
        return False

    # ------------------------------------------------------------------
    # Program level
    # ------------------------------------------------------------------

    def parse(self) -> Program:
        self._enter("program")
        start = self._peek().location
        statements: list[Statement] = []

        while not self._at_eof():
            if self._at(KeywordId.SEMICOLON):
                # Empty statement
                self._advance()
                continue
            stmt = self._statement()
            if stmt is not None:
                statements.append(stmt)
            self.match(KeywordId.SEMICOLON)

        self._leave("program")
        return Program(tuple(statements), self._source, start)

    def _statement(self) -> Statement | None:
        tok = self._peek()
        kw = tok.keyword if tok.category is TokenCategory.KEYWORD else None
        if kw not in _STATEMENT_KEYWORDS:
            return None

        self._enter("statement")
        if kw is KeywordId.ORIGIN:
            stmt: Statement = self._origin_statement()
        elif kw is KeywordId.SCALE:
            stmt = self._scale_statement()
        elif kw is KeywordId.ROT:
            stmt = self._rot_statement()
        elif kw is KeywordId.FOR:
            stmt = self._for_statement()
        elif kw is KeywordId.COLOR:
            stmt = self._color_statement()
        else:
            stmt = self._size_statement()
        self._leave("statement")
        return stmt

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _pair(self) -> tuple[Expr, Expr]:
        self.match(KeywordId.L_BRACKET)
        first = self.expression()
        self.match(KeywordId.COMMA)
        second = self.expression()
        self.match(KeywordId.R_BRACKET)
        return first, second

    def _origin_statement(self) -> OriginStmt:
        self._enter("origin_statement")
        loc = self._advance().location
        self.match(KeywordId.ASSIGN)
        stmt = OriginStmt(self._pair(), loc)
        self._leave("origin_statement")
        return stmt

    def _scale_statement(self) -> ScaleStmt:
        self._enter("scale_statement")
        loc = self._advance().location
        self.match(KeywordId.ASSIGN)
        stmt = ScaleStmt(self._pair(), loc)
        self._leave("scale_statement")
        return stmt

    def _rot_statement(self) -> RotStmt:
        self._enter("rot_statement")
        loc = self._advance().location
        self.match(KeywordId.ASSIGN)
        stmt = RotStmt((self.expression(),), loc)
        self._leave("rot_statement")
        return stmt

    def _for_statement(self) -> ForDrawStmt:
        self._enter("for_statement")
        loc = self._advance().location
        self.match(KeywordId.T)
        self.match(KeywordId.FROM)
        start = self.expression()
        self.match(KeywordId.TO)
        end = self.expression()
        self.match(KeywordId.STEP)
        step = self.expression()
        self.match(KeywordId.DRAW)
        x, y = self._pair()
        stmt = ForDrawStmt((start, end, step, x, y), loc)
        self._leave("for_statement")
        return stmt

    def _color_statement(self) -> ColorStmt:
        self._enter("color_statement")
        loc = self._advance().location
        self.match(KeywordId.ASSIGN)

        exprs: tuple[Expr, ...]
        if self._at(KeywordId.L_BRACKET):
            self.match(KeywordId.L_BRACKET)
            r = self.expression()
            self.match(KeywordId.COMMA)
            g = self.expression()
            self.match(KeywordId.COMMA)
            b = self.expression()
            self.match(KeywordId.R_BRACKET)
            exprs = (r, g, b)
        else:
            exprs = (self._color_name(),)

        stmt = ColorStmt(exprs, loc)
        self._leave("color_statement")
        return stmt

    def _color_name(self) -> ColorNameExpr:
        tok = self._peek()
        if tok.category is not TokenCategory.IDENTIFIER:
            self._error("color name or '('")
            return ColorNameExpr("", tok.location)
        self._advance()
        if tok.lexeme not in self._context.colors:
            self._diag.warning(
                f"unknown color '{tok.lexeme}', using red", tok.location, Phase.SYNTAX, tok.lexeme
            )
        return ColorNameExpr(tok.lexeme.upper(), tok.location)

    def _size_statement(self) -> SizeStmt:
        self._enter("size_statement")
        loc = self._advance().location
        self.match(KeywordId.ASSIGN)

        exprs: tuple[Expr, ...]
        if self._at(KeywordId.L_BRACKET):
            exprs = self._pair()
        else:
            exprs = (self.expression(),)

        stmt = SizeStmt(exprs, loc)
        self._leave("size_statement")
        return stmt

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def expression(self) -> Expr:
        self._enter("expression")
        left = self._term()
        while self._at(KeywordId.PLUS) or self._at(KeywordId.MINUS):
            op = self._advance()
            self._trace(f"match token {op.lexeme}")
            right = self._term()
            left = BinaryExpr(op.keyword, left, right, op.location)
        self._leave("expression")
        return left

    def _term(self) -> Expr:
        left = self._factor()
        while self._at(KeywordId.MUL) or self._at(KeywordId.DIV):
            op = self._advance()
            self._trace(f"match token {op.lexeme}")
            right = self._factor()
            left = BinaryExpr(op.keyword, left, right, op.location)
        return left

    def _factor(self) -> Expr:
        if self._at(KeywordId.PLUS) or self._at(KeywordId.MINUS):
            op = self._advance()
            self._trace(f"match token {op.lexeme}")
            return UnaryExpr(op.keyword, self._factor(), op.location)
        return self._component()

    def _component(self) -> Expr:
        left = self._atom()
        if self._at(KeywordId.POWER):
            op = self._advance()
            self._trace(f"match token {op.lexeme}")
            # Right associative
            right = self._component()
            left = BinaryExpr(KeywordId.POWER, left, right, op.location)
        return left

    def _atom(self) -> Expr:
        tok = self._peek()

        if tok.category is TokenCategory.LITERAL:
            self._advance()
            assert isinstance(tok.payload, LiteralValue)
            return ConstExpr(tok.payload.value, tok.lexeme, tok.location)

        if tok.is_keyword(KeywordId.T):
            self._advance()
            return ParamExpr(tok.location)

        if tok.is_keyword(KeywordId.FUNC):
            self._advance()
            return self._call(tok)

        if tok.is_keyword(KeywordId.L_BRACKET):
            self.match(KeywordId.L_BRACKET)
            inner = self.expression()
            self.match(KeywordId.R_BRACKET)
            return inner

        if tok.category is TokenCategory.IDENTIFIER:
            self._advance()
            if self._at(KeywordId.L_BRACKET):
                return self._call(tok)
            return self._named_constant(tok)

        self._error("expression")
        return ConstExpr(0.0, "0", tok.location)

    def _call(self, name: Token) -> FuncCallExpr:
        function = self._context.symbols.function(name.lexeme)
        if function is None:
            self._diag.warning(
                f"unknown function '{name.lexeme}', result is 0",
                name.location,
                Phase.SYNTAX,
                name.lexeme,
            )
        self.match(KeywordId.L_BRACKET)
        argument = self.expression()
        self.match(KeywordId.R_BRACKET)
        return FuncCallExpr(name.lexeme.upper(), function, argument, name.location)

    def _named_constant(self, tok: Token) -> ConstExpr:
        entry = self._context.symbols.lookup(tok.lexeme)
        if entry is not None and entry.value is not None:
            return ConstExpr(entry.value, tok.lexeme, tok.location)
        self._diag.warning(
            f"unknown identifier '{tok.lexeme}', using 0", tok.location, Phase.SYNTAX, tok.lexeme
        )
        return ConstExpr(0.0, tok.lexeme, tok.location)


def parse(
    source: str,
    filename: str = "input.draw",
    *,
    encoding: Encoding | str = Encoding.TABLE,
    context: Context | None = None,
) -> ParseResult:
    """Parse DrawLang source text into a ``ParseResult``."""
    if context is None:
        context = Context()
    scanner = Scanner(StringSource(source, filename), create_automaton(encoding), context)
    return parse_tokens(scanner, context, source)


def parse_tokens(scanner: Scanner, context: Context, source: str = "") -> ParseResult:
    """Parse from an existing scanner; used for file-backed sources."""
    program = Parser(scanner, context, source).parse()

    if context.trace and context.diagnostics.sink is not None:
        from drawlang.debug import dump_ast

        dump_ast(program, file=context.diagnostics.sink)

    diag = context.diagnostics
    return ParseResult(
        program,
        diag.errors_in(Phase.LEXICAL, Phase.SYNTAX),
        [w for w in diag.warnings if w.phase is not Phase.SEMANTIC],
    )
