"""Shared test fixtures and helpers."""

from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from drawlang.automaton import Encoding
from drawlang.context import Context
from drawlang.lexer import tokenize
from drawlang.parser import ParseResult, parse
from drawlang.semantic import Analyzer
from drawlang.symbols import Color
from drawlang.tokens import Token, TokenCategory


@pytest.fixture(params=[Encoding.TABLE, Encoding.DIRECT], ids=lambda e: e.value)
def encoding(request: pytest.FixtureRequest) -> Encoding:
    """Run the test once per automaton encoding."""
    return request.param


@pytest.fixture
def lex(encoding: Encoding):
    """Return a helper that tokenizes source and returns tokens (excluding EOF)."""

    def _lex(source: str) -> list[Token]:
        tokens = tokenize(source, "test.draw", encoding)
        # Strip trailing EOF for convenience
        return [t for t in tokens if t.category is not TokenCategory.EOF]

    return _lex


@pytest.fixture
def parse_source():
    """Return a helper that parses source and returns a ParseResult."""

    def _parse(source: str, filename: str = "test.draw") -> ParseResult:
        return parse(source, filename)

    return _parse


@dataclass
class Recorder:
    """Draw callback that remembers every call."""

    calls: list[tuple[float, float, Color, int]] = field(default_factory=list)

    def __call__(self, x: float, y: float, color: Color, size: int) -> None:
        self.calls.append((x, y, color, size))

    @property
    def points(self) -> list[tuple[float, float]]:
        return [(x, y) for x, y, _, _ in self.calls]


@pytest.fixture
def run_source():
    """Return a helper that parses and executes source.

    The helper returns ``(analyzer, recorder, context)``.
    """

    def _run(source: str) -> tuple[Analyzer, Recorder, Context]:
        context = Context()
        result = parse(source, "test.draw", context=context)
        recorder = Recorder()
        analyzer = Analyzer(context, recorder)
        analyzer.run(result.program)
        return analyzer, recorder, context

    return _run


def assert_categories(tokens: list[Token], expected: list[TokenCategory]) -> None:
    """Assert that the token categories match the expected list."""
    actual = [t.category for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def assert_lexemes(tokens: list[Token], expected: list[str]) -> None:
    """Assert that the token lexemes match the expected list."""
    actual = [t.lexeme for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def find_tokens(tokens: list[Token], category: TokenCategory) -> list[Token]:
    """Return all tokens of the given category."""
    return [t for t in tokens if t.category is category]
