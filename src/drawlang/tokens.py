"""Token types, data structures, and character classification helpers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class TokenCategory(Enum):
    KEYWORD = auto()  # statement keywords, IS, T, built-in functions
    IDENTIFIER = auto()  # [A-Za-z_][A-Za-z0-9_]* not found in the symbol table
    LITERAL = auto()  # numbers and named constants
    OPERATOR = auto()  # + - * / **
    PUNCTUATION = auto()  # ( ) ; ,
    COMMENT = auto()  # // or -- to end of line, never reaches the parser
    EOF = auto()
    INVALID = auto()


class KeywordId(Enum):
    # Statements
    ORIGIN = auto()
    SCALE = auto()
    ROT = auto()
    FOR = auto()
    COLOR = auto()
    SIZE = auto()

    # Control words
    ASSIGN = auto()  # IS
    T = auto()
    FROM = auto()
    TO = auto()
    STEP = auto()
    DRAW = auto()

    # Built-in math function
    FUNC = auto()

    # Operators
    PLUS = auto()
    MINUS = auto()
    MUL = auto()
    DIV = auto()
    POWER = auto()

    # Punctuation
    L_BRACKET = auto()
    R_BRACKET = auto()
    SEMICOLON = auto()
    COMMA = auto()


class LiteralKind(Enum):
    INTEGER = auto()
    DECIMAL = auto()


class FaultKind(Enum):
    UNKNOWN_CHARACTER = auto()
    INVALID_NUMBER = auto()


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """Source position, 1-based line and column, 0-based character offset."""

    source: str
    line: int
    column: int
    offset: int

    def __str__(self) -> str:
        return f"{self.source}:{self.line}:{self.column}"


@dataclass(frozen=True, slots=True)
class LiteralValue:
    kind: LiteralKind
    value: float


@dataclass(frozen=True, slots=True)
class LexicalFault:
    kind: FaultKind
    message: str


Payload = KeywordId | LiteralValue | LexicalFault | None

_PAYLOAD_TYPES: dict[TokenCategory, type | None] = {
    TokenCategory.KEYWORD: KeywordId,
    TokenCategory.IDENTIFIER: None,
    TokenCategory.LITERAL: LiteralValue,
    TokenCategory.OPERATOR: KeywordId,
    TokenCategory.PUNCTUATION: KeywordId,
    TokenCategory.COMMENT: None,
    TokenCategory.EOF: None,
    TokenCategory.INVALID: LexicalFault,
}


@dataclass(frozen=True, slots=True)
class Token:
    """A single scanner token: category, matched text, location and payload."""

    category: TokenCategory
    lexeme: str
    location: SourceLocation
    payload: Payload = None

    def __post_init__(self) -> None:
        expected = _PAYLOAD_TYPES[self.category]
        if expected is None:
            if self.payload is not None:
                raise ValueError(f"{self.category.name} token takes no payload")
        elif not isinstance(self.payload, expected):
            raise ValueError(
                f"{self.category.name} token needs a {expected.__name__} payload, "
                f"got {type(self.payload).__name__}"
            )

    @property
    def keyword(self) -> KeywordId | None:
        """The keyword id of KEYWORD, OPERATOR and PUNCTUATION tokens, else None."""
        if isinstance(self.payload, KeywordId):
            return self.payload
        return None

    def is_keyword(self, kw: KeywordId) -> bool:
        return self.keyword is kw


def is_letter(ch: str) -> bool:
    """Return True for the automaton's letter class [A-Za-z_]."""
    return ("a" <= ch <= "z") or ("A" <= ch <= "Z") or ch == "_"


def is_digit(ch: str) -> bool:
    """Return True for the automaton's digit class [0-9]."""
    return "0" <= ch <= "9"


def is_space(ch: str) -> bool:
    """Return True for ASCII whitespace; anything non-ASCII is significant."""
    return len(ch) == 1 and ch in " \t\n\r\v\f"
