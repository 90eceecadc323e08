"""Diagnostic records and the per-run diagnostics registry."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TextIO

from drawlang.tokens import SourceLocation


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"


class Phase(Enum):
    LEXICAL = "lexical"
    SYNTAX = "syntax"
    SEMANTIC = "semantic"


class ConfigError(ValueError):
    """Invalid configuration file or command-line value."""


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A reported problem with its location and the lexeme it concerns."""

    message: str
    location: SourceLocation
    severity: Severity = Severity.ERROR
    phase: Phase = Phase.SYNTAX
    lexeme: str = ""

    def __str__(self) -> str:
        return f"{self.location}: {self.severity.value}: {self.message}"

    def format(self, source: str) -> str:
        """Render the diagnostic with the offending source line and a caret."""
        lines = source.splitlines(keepends=True)
        line_idx = self.location.line - 1
        col = self.location.column

        if 0 <= line_idx < len(lines):
            source_line = lines[line_idx].rstrip("\n").rstrip("\r")
        else:
            source_line = ""

        # Underline the lexeme, at least one char, but stay within the line
        underline_len = max(1, min(len(self.lexeme), len(source_line) - col + 1))

        pad = " " * (col - 1)
        carets = "^" * underline_len

        line_num = str(self.location.line)
        gutter_width = len(line_num) + 1

        blank_gutter = " " * gutter_width + "|"
        line_gutter = f"{line_num:>{gutter_width - 1}} |"

        return (
            f"{self.severity.value}: {self.message}\n"
            f"{' ' * gutter_width}--> {self.location}\n"
            f"{blank_gutter}\n"
            f"{line_gutter} {source_line}\n"
            f"{blank_gutter} {pad}{carets}"
        )


class Diagnostics:
    """Accumulates errors and warnings for one run.

    When a *sink* is given every record is also echoed to it as one line
    (unless *echo* is off), and ``note`` writes free-form progress text there.
    """

    def __init__(self, sink: TextIO | None = None, *, echo: bool = True) -> None:
        self.sink = sink
        self.echo = echo
        self._records: list[Diagnostic] = []

    def report(self, diagnostic: Diagnostic) -> Diagnostic:
        self._records.append(diagnostic)
        if self.sink is not None and self.echo:
            print(diagnostic, file=self.sink)
        return diagnostic

    def error(
        self,
        message: str,
        location: SourceLocation,
        phase: Phase,
        lexeme: str = "",
    ) -> Diagnostic:
        return self.report(Diagnostic(message, location, Severity.ERROR, phase, lexeme))

    def warning(
        self,
        message: str,
        location: SourceLocation,
        phase: Phase,
        lexeme: str = "",
    ) -> Diagnostic:
        return self.report(Diagnostic(message, location, Severity.WARNING, phase, lexeme))

    def note(self, text: str) -> None:
        if self.sink is not None:
            print(text, file=self.sink)

    @property
    def records(self) -> list[Diagnostic]:
        return list(self._records)

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self._records if d.severity is Severity.ERROR]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self._records if d.severity is Severity.WARNING]

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    @property
    def has_errors(self) -> bool:
        return any(d.severity is Severity.ERROR for d in self._records)

    def errors_in(self, *phases: Phase) -> list[Diagnostic]:
        return [d for d in self.errors if d.phase in phases]

    def clear(self) -> None:
        self._records.clear()
