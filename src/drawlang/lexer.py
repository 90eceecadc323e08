"""DrawLang scanner: turns a character cursor into tokens on demand."""

from __future__ import annotations

from drawlang.automaton import Automaton, Encoding, create_automaton
from drawlang.context import Context
from drawlang.source import SourceCursor, StringSource
from drawlang.tokens import (
    FaultKind,
    KeywordId,
    LexicalFault,
    LiteralKind,
    LiteralValue,
    SourceLocation,
    Token,
    TokenCategory,
    is_space,
)

OPERATORS: dict[str, KeywordId] = {
    "+": KeywordId.PLUS,
    "-": KeywordId.MINUS,
    "*": KeywordId.MUL,
    "/": KeywordId.DIV,
    "**": KeywordId.POWER,
}

PUNCTUATION: dict[str, KeywordId] = {
    "(": KeywordId.L_BRACKET,
    ")": KeywordId.R_BRACKET,
    ";": KeywordId.SEMICOLON,
    ",": KeywordId.COMMA,
}


class Scanner:
    """Maximal-munch scanner over a ``SourceCursor``."""

    def __init__(
        self,
        cursor: SourceCursor,
        automaton: Automaton | None = None,
        context: Context | None = None,
    ) -> None:
        self._cursor = cursor
        self._automaton = automaton if automaton is not None else create_automaton()
        self._context = context if context is not None else Context()
        self._done = False

    @property
    def source_name(self) -> str:
        return self._cursor.name

    def has_more_tokens(self) -> bool:
        return not self._done

    def next_token(self) -> Token:
        """Return the next significant token. After end of input, EOF forever."""
        while True:
            self._skip_whitespace()
            loc = self._cursor.location()
            if self._cursor.eof():
                self._done = True
                return Token(TokenCategory.EOF, "", loc)

            lexeme = self._munch()
            category = self._automaton.accepted_category()

            if category is TokenCategory.COMMENT:
                self._skip_line()
                continue

            return self._classify(lexeme, category, loc)

    def tokenize_all(self) -> list[Token]:
        """Scan to end of input. The returned list ends with the EOF token."""
        tokens: list[Token] = []
        while True:
            tok = self.next_token()
            tokens.append(tok)
            if tok.category is TokenCategory.EOF:
                return tokens

    # ------------------------------------------------------------------
    # Character handling
    # ------------------------------------------------------------------

    def _skip_whitespace(self) -> None:
        while is_space(self._cursor.peek_char()):
            self._cursor.next_char()

    def _skip_line(self) -> None:
        # Stop before the newline so line counting stays with the cursor
        while True:
            ch = self._cursor.peek_char()
            if ch == "" or ch == "\n":
                return
            self._cursor.next_char()

    def _munch(self) -> str:
        """Feed characters while the automaton accepts them.

        The first rejected character is pushed back, unless it is the very
        first one, in which case it alone becomes the lexeme.
        """
        automaton = self._automaton
        automaton.reset()
        while True:
            ch = self._cursor.next_char()
            if ch == "":
                break
            if not automaton.feed(ch):
                if automaton.processed_input:
                    self._cursor.unget_char()
                    break
                return ch
        return automaton.processed_input

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def _classify(
        self, lexeme: str, category: TokenCategory | None, loc: SourceLocation
    ) -> Token:
        if category is TokenCategory.IDENTIFIER:
            entry = self._context.symbols.lookup(lexeme)
            if entry is None:
                return Token(TokenCategory.IDENTIFIER, lexeme, loc)
            if entry.category is TokenCategory.LITERAL:
                value = LiteralValue(LiteralKind.DECIMAL, entry.value or 0.0)
                return Token(TokenCategory.LITERAL, lexeme, loc, value)
            return Token(TokenCategory.KEYWORD, lexeme, loc, entry.keyword)

        if category is TokenCategory.LITERAL:
            return Token(TokenCategory.LITERAL, lexeme, loc, _literal_value(lexeme))

        if category is TokenCategory.OPERATOR and lexeme in OPERATORS:
            return Token(TokenCategory.OPERATOR, lexeme, loc, OPERATORS[lexeme])

        if category is TokenCategory.PUNCTUATION and lexeme in PUNCTUATION:
            return Token(TokenCategory.PUNCTUATION, lexeme, loc, PUNCTUATION[lexeme])

        if self._automaton.state_id > 0:
            fault = LexicalFault(FaultKind.INVALID_NUMBER, f"malformed number '{lexeme}'")
        else:
            fault = LexicalFault(FaultKind.UNKNOWN_CHARACTER, f"unexpected character {lexeme!r}")
        return Token(TokenCategory.INVALID, lexeme, loc, fault)


def _literal_value(lexeme: str) -> LiteralValue:
    kind = LiteralKind.DECIMAL if any(c in lexeme for c in ".eE") else LiteralKind.INTEGER
    try:
        value = float(lexeme)
    except ValueError:
        value = 0.0
    return LiteralValue(kind, value)


def tokenize(
    source: str,
    filename: str = "input.draw",
    encoding: Encoding | str = Encoding.TABLE,
    context: Context | None = None,
) -> list[Token]:
    """Convenience: scan a whole string, including the trailing EOF token."""
    scanner = Scanner(StringSource(source, filename), create_automaton(encoding), context)
    return scanner.tokenize_all()
