"""AST node types for parsed DrawLang programs."""

from __future__ import annotations

from dataclasses import dataclass

from drawlang.symbols import MathFunction
from drawlang.tokens import KeywordId, SourceLocation

# ------------------------------------------------------------------
# Expressions
# ------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class BinaryExpr:
    """Binary arithmetic: op is PLUS, MINUS, MUL, DIV or POWER."""

    op: KeywordId
    left: Expr
    right: Expr
    location: SourceLocation


@dataclass(frozen=True, slots=True)
class UnaryExpr:
    """Prefix sign: op is PLUS or MINUS."""

    op: KeywordId
    operand: Expr
    location: SourceLocation


@dataclass(frozen=True, slots=True)
class FuncCallExpr:
    """Call of a built-in unary function; ``function`` is None when unbound."""

    name: str
    function: MathFunction | None
    argument: Expr
    location: SourceLocation


@dataclass(frozen=True, slots=True)
class ConstExpr:
    """Numeric literal or named constant, resolved at parse time."""

    value: float
    lexeme: str
    location: SourceLocation


@dataclass(frozen=True, slots=True)
class ParamExpr:
    """The loop parameter T."""

    location: SourceLocation


@dataclass(frozen=True, slots=True)
class ColorNameExpr:
    """A named pen color, e.g. ``COLOR IS BLUE``."""

    name: str
    location: SourceLocation


Expr = BinaryExpr | UnaryExpr | FuncCallExpr | ConstExpr | ParamExpr | ColorNameExpr

# ------------------------------------------------------------------
# Statements
# ------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class OriginStmt:
    exprs: tuple[Expr, Expr]
    location: SourceLocation

    @property
    def x(self) -> Expr:
        return self.exprs[0]

    @property
    def y(self) -> Expr:
        return self.exprs[1]


@dataclass(frozen=True, slots=True)
class ScaleStmt:
    exprs: tuple[Expr, Expr]
    location: SourceLocation

    @property
    def x(self) -> Expr:
        return self.exprs[0]

    @property
    def y(self) -> Expr:
        return self.exprs[1]


@dataclass(frozen=True, slots=True)
class RotStmt:
    exprs: tuple[Expr]
    location: SourceLocation

    @property
    def angle(self) -> Expr:
        return self.exprs[0]


@dataclass(frozen=True, slots=True)
class ForDrawStmt:
    """FOR T FROM start TO end STEP step DRAW (x, y)."""

    exprs: tuple[Expr, Expr, Expr, Expr, Expr]
    location: SourceLocation

    @property
    def start(self) -> Expr:
        return self.exprs[0]

    @property
    def end(self) -> Expr:
        return self.exprs[1]

    @property
    def step(self) -> Expr:
        return self.exprs[2]

    @property
    def x(self) -> Expr:
        return self.exprs[3]

    @property
    def y(self) -> Expr:
        return self.exprs[4]


@dataclass(frozen=True, slots=True)
class ColorStmt:
    """Either an RGB triple in ``exprs`` or a single ``ColorNameExpr``."""

    exprs: tuple[Expr, ...]
    location: SourceLocation

    @property
    def color_name(self) -> ColorNameExpr | None:
        if len(self.exprs) == 1 and isinstance(self.exprs[0], ColorNameExpr):
            return self.exprs[0]
        return None

    @property
    def rgb(self) -> tuple[Expr, Expr, Expr] | None:
        if len(self.exprs) == 3:
            return self.exprs[0], self.exprs[1], self.exprs[2]
        return None


@dataclass(frozen=True, slots=True)
class SizeStmt:
    """SIZE IS n, or SIZE IS (w, h) of which only w is used."""

    exprs: tuple[Expr, ...]
    location: SourceLocation

    @property
    def size(self) -> Expr:
        return self.exprs[0]


Statement = OriginStmt | ScaleStmt | RotStmt | ForDrawStmt | ColorStmt | SizeStmt


@dataclass(frozen=True, slots=True)
class Program:
    """Root node: statements in source order."""

    statements: tuple[Statement, ...]
    source: str
    location: SourceLocation
