"""Caller-owned interpreter context shared by scanner, parser and analyzer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TextIO

from drawlang.errors import Diagnostics
from drawlang.symbols import ColorTable, SymbolTable


@dataclass
class Context:
    symbols: SymbolTable = field(default_factory=SymbolTable.default)
    colors: ColorTable = field(default_factory=ColorTable.default)
    diagnostics: Diagnostics = field(default_factory=Diagnostics)
    trace: bool = False

    @classmethod
    def create(cls, sink: TextIO | None = None, *, trace: bool = False) -> Context:
        return cls(diagnostics=Diagnostics(sink), trace=trace)

    def trace_line(self, text: str) -> None:
        if self.trace:
            self.diagnostics.note(text)
