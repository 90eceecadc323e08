"""Command-line interface for DrawLang."""

from __future__ import annotations

import argparse
import sys
import time
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TextIO

from drawlang.automaton import Encoding
from drawlang.errors import ConfigError, Phase

DEFAULT_WIDTH = 800
DEFAULT_HEIGHT = 600
DEFAULT_BACKGROUND = "white"


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    input_file: Path
    output_file: Path | None
    encoding: Encoding
    trace: bool
    width: int
    height: int
    background: str
    watch: bool
    debug: bool
    tokens: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="drawlang",
        description="DrawLang interpreter: renders a program's points to SVG",
    )
    p.add_argument("input", help="Input .draw file")
    p.add_argument("-o", "--output", help="Output SVG file (default: stdout)")
    p.add_argument(
        "--automaton",
        choices=[e.value for e in Encoding],
        default=None,
        help="Scanner automaton encoding (default: table)",
    )
    p.add_argument(
        "--trace",
        action="store_true",
        default=None,
        help="Trace parser rules and interpreter state to stderr",
    )
    p.add_argument(
        "--config",
        metavar="FILE",
        help="Config file (default: auto-discover drawlang.toml)",
    )
    p.add_argument("--width", type=int, default=None, metavar="N", help="Canvas width")
    p.add_argument("--height", type=int, default=None, metavar="N", help="Canvas height")
    p.add_argument(
        "--background",
        default=None,
        metavar="COLOR",
        help="Canvas background: a color name, any SVG color, or 'none'",
    )
    p.add_argument("--watch", action="store_true", help="Watch for changes and re-render")
    p.add_argument("--debug", action="store_true", help="Dump AST to stderr")
    p.add_argument("--tokens", action="store_true", help="Print the token stream and exit")
    return p


def load_config(config_path: Path | None, input_dir: Path) -> dict[str, Any]:
    """Load a TOML config file.

    A missing auto-discovered file gives an empty dict; a missing explicit
    ``--config`` file or malformed TOML raises ConfigError.
    """
    path = config_path if config_path is not None else input_dir / "drawlang.toml"

    if not path.is_file():
        if config_path is not None:
            raise ConfigError(f"config file not found: {path}")
        return {}

    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"{path}: {exc}") from exc


def _section(config: dict[str, Any], name: str) -> dict[str, Any]:
    value = config.get(name, {})
    if not isinstance(value, dict):
        raise ConfigError(f"[{name}] must be a table")
    return value


def _positive_int(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigError(f"{name} must be a positive integer, got {value!r}")
    return value


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: defaults < config file < CLI flags.
    """
    input_file = Path(args.input)
    input_dir = input_file.parent
    if not input_dir.parts:
        input_dir = Path(".")

    config_path = Path(args.config) if args.config else None
    config = load_config(config_path, input_dir)
    interp = _section(config, "interpreter")
    canvas = _section(config, "canvas")

    # Automaton encoding: config < CLI
    automaton = interp.get("automaton", Encoding.TABLE.value)
    if args.automaton is not None:
        automaton = args.automaton
    try:
        encoding = Encoding(automaton)
    except ValueError:
        choices = ", ".join(e.value for e in Encoding)
        raise ConfigError(f"automaton must be one of {choices}, got {automaton!r}") from None

    trace = interp.get("trace", False)
    if not isinstance(trace, bool):
        raise ConfigError(f"trace must be true or false, got {trace!r}")
    if args.trace is not None:
        trace = args.trace

    width = _positive_int(canvas.get("width", DEFAULT_WIDTH), "width")
    if args.width is not None:
        width = _positive_int(args.width, "--width")
    height = _positive_int(canvas.get("height", DEFAULT_HEIGHT), "height")
    if args.height is not None:
        height = _positive_int(args.height, "--height")

    background = str(canvas.get("background", DEFAULT_BACKGROUND))
    if args.background is not None:
        background = args.background

    output_file = Path(args.output) if args.output else None

    return CliOptions(
        input_file=input_file,
        output_file=output_file,
        encoding=encoding,
        trace=trace,
        width=width,
        height=height,
        background=background,
        watch=args.watch,
        debug=args.debug,
        tokens=args.tokens,
    )


def render_file(options: CliOptions, *, err: TextIO | None = None) -> tuple[str, int]:
    """Interpret a DrawLang file and render it to SVG.

    Diagnostics go to *err*. Returns the SVG text and the exit code:
    0 clean, 1 lexical or syntax errors, 2 semantic errors only.
    """
    from drawlang.context import Context
    from drawlang.debug import dump_ast
    from drawlang.errors import Diagnostics
    from drawlang.parser import parse
    from drawlang.render import Canvas
    from drawlang.semantic import Analyzer

    if err is None:
        err = sys.stderr
    source = options.input_file.read_text(encoding="utf-8", errors="replace")
    context = Context(diagnostics=Diagnostics(err, echo=False), trace=options.trace)
    result = parse(source, str(options.input_file), encoding=options.encoding, context=context)

    if options.debug:
        dump_ast(result.program, file=err)

    canvas = Canvas(options.width, options.height, options.background)
    points = Analyzer(context, canvas).run(result.program)

    diag = context.diagnostics
    for record in diag.records:
        print(record.format(source), file=err)
    if diag.records:
        print(
            f"{options.input_file}: {diag.error_count} error(s), "
            f"{diag.warning_count} warning(s), {points} point(s)",
            file=err,
        )

    if diag.errors_in(Phase.LEXICAL, Phase.SYNTAX):
        code = 1
    elif diag.has_errors:
        code = 2
    else:
        code = 0
    return canvas.to_svg(title=options.input_file.name), code


def print_tokens(options: CliOptions, *, out: TextIO | None = None) -> int:
    """Print the token stream; exit code 1 if any token is invalid."""
    from drawlang.debug import dump_tokens
    from drawlang.lexer import tokenize
    from drawlang.tokens import TokenCategory

    if out is None:
        out = sys.stdout
    source = options.input_file.read_text(encoding="utf-8", errors="replace")
    tokens = tokenize(source, str(options.input_file), options.encoding)
    dump_tokens(tokens, file=out)
    if any(t.category is TokenCategory.INVALID for t in tokens):
        return 1
    return 0


def _emit(svg: str, options: CliOptions) -> None:
    if options.output_file:
        options.output_file.write_text(svg, encoding="utf-8")
    else:
        sys.stdout.write(svg)
        sys.stdout.flush()


def watch_loop(options: CliOptions) -> None:
    """Poll input file for changes, re-render on each modification."""
    last_mtime = 0.0
    print(f"Watching {options.input_file} for changes...", file=sys.stderr)
    try:
        while True:
            try:
                mtime = options.input_file.stat().st_mtime
            except OSError:
                time.sleep(0.5)
                continue
            if mtime != last_mtime:
                last_mtime = mtime
                try:
                    svg, code = render_file(options)
                    _emit(svg, options)
                except OSError as exc:
                    # Replaced or removed between stat and read; try again next poll
                    print(f"error: {exc}", file=sys.stderr)
                    last_mtime = 0.0
                    time.sleep(0.5)
                    continue
                status = "Rendered" if code == 0 else "Rendered with errors"
                print(f"{status} {options.input_file}", file=sys.stderr)
            time.sleep(0.5)
    except KeyboardInterrupt:
        pass


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        options = resolve_options(args)
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    try:
        if options.tokens:
            return print_tokens(options)

        if options.watch:
            watch_loop(options)
            return 0

        svg, code = render_file(options)
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    _emit(svg, options)
    return code
