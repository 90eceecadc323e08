"""Semantic analyzer: executes a parsed program and emits points."""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass, field

from drawlang.ast import (
    ColorStmt,
    ForDrawStmt,
    OriginStmt,
    Program,
    RotStmt,
    ScaleStmt,
    SizeStmt,
    Statement,
)
from drawlang.context import Context
from drawlang.errors import Diagnostic, Phase
from drawlang.eval import EvalEnv, color_of, value
from drawlang.symbols import RED, Color

DrawCallback = Callable[[float, float, Color, int], None]

# Loop debug output: the first few points, then every Nth
_TRACE_FIRST = 5
_TRACE_EVERY = 100


@dataclass
class DrawState:
    """Interpreter state that statements overwrite."""

    origin_x: float = 0.0
    origin_y: float = 0.0
    scale_x: float = 1.0
    scale_y: float = 1.0
    rotation: float = 0.0
    color: Color = field(default=RED)
    size: float = 1.0


@dataclass(frozen=True, slots=True)
class RunResult:
    program: Program
    points: int
    errors: list[Diagnostic]
    warnings: list[Diagnostic]

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def syntax_errors(self) -> list[Diagnostic]:
        """Lexical and syntax errors, i.e. everything the parser reported."""
        return [e for e in self.errors if e.phase is not Phase.SEMANTIC]


def clamp_channel(v: float) -> int:
    if math.isnan(v):
        return 0
    return int(min(255.0, max(0.0, v)))


class Analyzer:
    """Walks the statement list, updating ``state`` and calling *draw*."""

    def __init__(self, context: Context | None = None, draw: DrawCallback | None = None) -> None:
        self.context = context if context is not None else Context()
        self.draw = draw
        self.state = DrawState()
        self.env = EvalEnv()

    def run(self, program: Program) -> int:
        """Execute every statement in order and return the number of points drawn."""
        return sum(self.execute(stmt) for stmt in program.statements)

    def check(self, program: Program) -> None:
        """Report loop problems without iterating any loop.

        Non-loop statements execute as usual; each loop only has its bounds
        evaluated and checked, so the cost does not grow with the point count.
        """
        for stmt in program.statements:
            if isinstance(stmt, ForDrawStmt):
                bounds = self._loop_bounds(stmt)
                if bounds is not None:
                    start, _, step = bounds
                    self._check_advance(stmt, start, step)
            else:
                self.execute(stmt)

    def execute(self, stmt: Statement) -> int:
        state = self.state
        env = self.env
        match stmt:
            case OriginStmt():
                state.origin_x = value(stmt.x, env)
                state.origin_y = value(stmt.y, env)
                self._trace(f"ORIGIN: ({state.origin_x}, {state.origin_y})")
            case ScaleStmt():
                state.scale_x = value(stmt.x, env)
                state.scale_y = value(stmt.y, env)
                self._trace(f"SCALE: ({state.scale_x}, {state.scale_y})")
            case RotStmt():
                state.rotation = value(stmt.angle, env)
                self._trace(f"ROT: {state.rotation}")
            case ColorStmt():
                self._set_color(stmt)
            case SizeStmt():
                requested = value(stmt.size, env)
                if math.isfinite(requested) and requested >= 1:
                    state.size = requested
                self._trace(f"SIZE: {state.size}")
            case ForDrawStmt():
                return self._loop(stmt)
        return 0

    def transform(self, x: float, y: float) -> tuple[float, float]:
        """Scale, rotate clockwise, then translate by the origin."""
        state = self.state
        x *= state.scale_x
        y *= state.scale_y
        cos_a = math.cos(state.rotation)
        sin_a = math.sin(state.rotation)
        x, y = x * cos_a + y * sin_a, y * cos_a - x * sin_a
        return x + state.origin_x, y + state.origin_y

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _trace(self, text: str) -> None:
        self.context.trace_line(text)

    def _set_color(self, stmt: ColorStmt) -> None:
        name = stmt.color_name
        if name is not None:
            self.state.color = color_of(name, self.context.colors)
        elif stmt.rgb is not None:
            r, g, b = (clamp_channel(value(e, self.env)) for e in stmt.rgb)
            self.state.color = Color(r, g, b)
        c = self.state.color
        self._trace(f"COLOR: ({c.r}, {c.g}, {c.b})")

    def _loop(self, stmt: ForDrawStmt) -> int:
        bounds = self._loop_bounds(stmt)
        if bounds is None:
            return 0
        start, end, step = bounds

        env = self.env
        count = 0
        env.t = start
        while (env.t <= end) if step > 0 else (env.t >= end):
            raw_x = value(stmt.x, env)
            raw_y = value(stmt.y, env)
            x, y = self.transform(raw_x, raw_y)
            if count < _TRACE_FIRST or count % _TRACE_EVERY == 0:
                self._trace(f"T={env.t} -> raw({raw_x}, {raw_y}) -> transformed({x}, {y})")
            if self.draw is not None:
                self.draw(x, y, self.state.color, int(self.state.size))
            count += 1

            if not self._check_advance(stmt, env.t, step):
                break
            env.t += step

        self._trace(f"FOR loop completed: {count} points drawn")
        return count

    def _loop_bounds(self, stmt: ForDrawStmt) -> tuple[float, float, float] | None:
        """Evaluate start, end and step; None if the loop must not run."""
        env = self.env
        diag = self.context.diagnostics
        start = value(stmt.start, env)
        end = value(stmt.end, env)
        step = value(stmt.step, env)
        self._trace(f"FOR loop: start={start}, end={end}, step={step}")

        if step == 0.0:
            diag.error("loop step cannot be zero", stmt.location, Phase.SEMANTIC, "FOR")
            return None
        if not all(math.isfinite(v) for v in (start, end, step)):
            diag.error(
                f"loop bounds must be finite (start={start}, end={end}, step={step})",
                stmt.location,
                Phase.SEMANTIC,
                "FOR",
            )
            return None
        if (step > 0 and start > end) or (step < 0 and start < end):
            diag.warning(
                "loop step direction does not reach the end value, nothing drawn",
                stmt.location,
                Phase.SEMANTIC,
                "FOR",
            )
            return None
        return start, end, step

    def _check_advance(self, stmt: ForDrawStmt, t: float, step: float) -> bool:
        if t + step != t:
            return True
        self.context.diagnostics.error(
            f"loop step {step} is too small to advance T past {t}",
            stmt.location,
            Phase.SEMANTIC,
            "FOR",
        )
        return False
