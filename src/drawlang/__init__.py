"""DrawLang: a small language for parametric point plots."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, TextIO

if TYPE_CHECKING:
    from drawlang.ast import Program
    from drawlang.automaton import Encoding
    from drawlang.context import Context
    from drawlang.parser import ParseResult
    from drawlang.semantic import DrawCallback, RunResult

__version__ = "0.1.0"


def parse(
    source: str,
    filename: str = "input.draw",
    *,
    encoding: Encoding | str = "table",
) -> ParseResult:
    """Parse DrawLang source; consult ``errors`` on the result."""
    from drawlang.parser import parse as _parse

    return _parse(source, filename, encoding=encoding)


def interpret(
    source: str,
    filename: str = "input.draw",
    draw: DrawCallback | None = None,
    *,
    encoding: Encoding | str = "table",
    trace: bool = False,
    sink: TextIO | None = None,
) -> RunResult:
    """Parse and execute DrawLang source, calling *draw* once per point."""
    from drawlang.context import Context
    from drawlang.parser import parse as _parse

    context = Context.create(sink, trace=trace)
    result = _parse(source, filename, encoding=encoding, context=context)
    return _execute(result.program, context, draw)


def interpret_file(
    path: str | Path,
    draw: DrawCallback | None = None,
    *,
    encoding: Encoding | str = "table",
    trace: bool = False,
    sink: TextIO | None = None,
    buffer_size: int = 4096,
) -> RunResult:
    """Like ``interpret`` but scans the file through a buffered ``FileSource``."""
    from drawlang.automaton import create_automaton
    from drawlang.context import Context
    from drawlang.lexer import Scanner
    from drawlang.parser import parse_tokens
    from drawlang.source import FileSource

    context = Context.create(sink, trace=trace)
    with FileSource(path, buffer_size=buffer_size) as cursor:
        scanner = Scanner(cursor, create_automaton(encoding), context)
        result = parse_tokens(scanner, context)
    return _execute(result.program, context, draw)


def _execute(program: Program, context: Context, draw: DrawCallback | None) -> RunResult:
    from drawlang.semantic import Analyzer, RunResult

    points = Analyzer(context, draw).run(program)
    diag = context.diagnostics
    return RunResult(program, points, diag.errors, diag.warnings)
