"""Symbol and color tables: keywords, named constants, math functions, colors."""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass

from drawlang.tokens import KeywordId, TokenCategory

MathFunction = Callable[[float], float]

# Alias map: alternate spelling -> canonical keyword name
ALIASES: dict[str, str] = {
    "PIXSIZE": "SIZE",
    "PIXELSIZE": "SIZE",
    "PIX": "SIZE",
}


def resolve_name(name: str) -> str:
    """Upper-case *name* and resolve an alias to its canonical spelling."""
    upper = name.upper()
    return ALIASES.get(upper, upper)


@dataclass(frozen=True, slots=True)
class Color:
    r: int
    g: int
    b: int

    def hex(self) -> str:
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"


RED = Color(255, 0, 0)


@dataclass(frozen=True, slots=True)
class SymbolEntry:
    """One symbol table row. ``value`` is set for constants, ``function`` for
    built-in functions."""

    category: TokenCategory
    keyword: KeywordId | None
    name: str
    value: float | None = None
    function: MathFunction | None = None


# ------------------------------------------------------------------
# Math functions with C library semantics (NaN / inf instead of raising)
# ------------------------------------------------------------------


def _c_math(fn: Callable[[float], float]) -> MathFunction:
    def wrapped(x: float) -> float:
        try:
            return float(fn(x))
        except ValueError:
            return math.nan
        except OverflowError:
            return math.inf

    wrapped.__name__ = fn.__name__
    return wrapped


def _ln(x: float) -> float:
    if x == 0:
        return -math.inf
    return math.log(x)


def _log10(x: float) -> float:
    if x == 0:
        return -math.inf
    return math.log10(x)


def _ceil(x: float) -> float:
    if not math.isfinite(x):
        return x
    return float(math.ceil(x))


def _floor(x: float) -> float:
    if not math.isfinite(x):
        return x
    return float(math.floor(x))


FUNCTIONS: dict[str, MathFunction] = {
    "SIN": _c_math(math.sin),
    "COS": _c_math(math.cos),
    "TAN": _c_math(math.tan),
    "LN": _c_math(_ln),
    "EXP": _c_math(math.exp),
    "SQRT": _c_math(math.sqrt),
    "ABS": _c_math(math.fabs),
    "ASIN": _c_math(math.asin),
    "ACOS": _c_math(math.acos),
    "ATAN": _c_math(math.atan),
    "LOG": _c_math(_log10),
    "CEIL": _ceil,
    "FLOOR": _floor,
}

CONSTANTS: dict[str, float] = {
    "PI": math.pi,
    "E": math.e,
}

KEYWORDS: dict[str, KeywordId] = {
    "ORIGIN": KeywordId.ORIGIN,
    "SCALE": KeywordId.SCALE,
    "ROT": KeywordId.ROT,
    "IS": KeywordId.ASSIGN,
    "FOR": KeywordId.FOR,
    "FROM": KeywordId.FROM,
    "TO": KeywordId.TO,
    "STEP": KeywordId.STEP,
    "DRAW": KeywordId.DRAW,
    "COLOR": KeywordId.COLOR,
    "SIZE": KeywordId.SIZE,
    "T": KeywordId.T,
}


class SymbolTable:
    """Case-insensitive symbol lookup."""

    def __init__(self) -> None:
        self._entries: dict[str, SymbolEntry] = {}

    @classmethod
    def default(cls) -> SymbolTable:
        table = cls()
        for name, value in CONSTANTS.items():
            table.add(SymbolEntry(TokenCategory.LITERAL, None, name, value=value))
        for name, kw in KEYWORDS.items():
            table.add(SymbolEntry(TokenCategory.KEYWORD, kw, name))
        for name, fn in FUNCTIONS.items():
            table.add(SymbolEntry(TokenCategory.KEYWORD, KeywordId.FUNC, name, function=fn))
        return table

    def add(self, entry: SymbolEntry) -> None:
        self._entries[entry.name.upper()] = entry

    def lookup(self, name: str) -> SymbolEntry | None:
        return self._entries.get(resolve_name(name))

    def function(self, name: str) -> MathFunction | None:
        entry = self.lookup(name)
        if entry is None:
            return None
        return entry.function

    def __contains__(self, name: str) -> bool:
        return self.lookup(name) is not None

    def __len__(self) -> int:
        return len(self._entries)


COLORS: dict[str, Color] = {
    "RED": RED,
    "GREEN": Color(0, 255, 0),
    "BLUE": Color(0, 0, 255),
    "BLACK": Color(0, 0, 0),
    "WHITE": Color(255, 255, 255),
    "YELLOW": Color(255, 255, 0),
    "CYAN": Color(0, 255, 255),
    "MAGENTA": Color(255, 0, 255),
    "GRAY": Color(128, 128, 128),
    "GREY": Color(128, 128, 128),
    "ORANGE": Color(255, 165, 0),
    "PINK": Color(255, 192, 203),
    "PURPLE": Color(128, 0, 128),
    "BROWN": Color(139, 69, 19),
}


class ColorTable:
    """Case-insensitive named colors; unknown names fall back to red."""

    def __init__(self, colors: dict[str, Color] | None = None) -> None:
        self._colors = {k.upper(): v for k, v in (colors or {}).items()}

    @classmethod
    def default(cls) -> ColorTable:
        return cls(COLORS)

    def get(self, name: str) -> Color | None:
        return self._colors.get(name.upper())

    def lookup(self, name: str) -> Color:
        return self._colors.get(name.upper(), RED)

    def __contains__(self, name: str) -> bool:
        return name.upper() in self._colors

    def __len__(self) -> int:
        return len(self._colors)
