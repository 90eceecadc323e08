"""SVG canvas: a draw callback that collects points and renders them."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path

from drawlang.symbols import Color, ColorTable

PRECISION = 3


@dataclass(frozen=True, slots=True)
class Dot:
    x: float
    y: float
    color: Color
    size: int


def _fmt(x: float, precision: int = PRECISION) -> str:
    # Normalise -0.0 so it never produces "-0" in SVG output
    if not x:
        x = 0.0
    s = f"{x:.{precision}f}"
    if "." in s:
        s = s.rstrip("0").rstrip(".")
    if s in ("", "-0"):
        return "0"
    return s


def _escape(text: str) -> str:
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def resolve_background(background: str, colors: ColorTable | None = None) -> str | None:
    """Map a color name to hex; pass other CSS values through; "none" gives None."""
    if not background or background.lower() == "none":
        return None
    colors = colors if colors is not None else ColorTable.default()
    named = colors.get(background)
    if named is not None:
        return named.hex()
    return background


@dataclass
class Canvas:
    """Draw target in screen space (origin top-left, y grows downwards)."""

    width: int = 800
    height: int = 600
    background: str = "white"
    dots: list[Dot] = field(default_factory=list)

    def __call__(self, x: float, y: float, color: Color, size: int) -> None:
        self.dots.append(Dot(x, y, color, size))

    def clear(self) -> None:
        self.dots.clear()

    def to_svg(self, title: str | None = None) -> str:
        lines: list[str] = []
        lines.append('<?xml version="1.0" encoding="UTF-8"?>')
        lines.append(
            '<svg xmlns="http://www.w3.org/2000/svg" version="1.1" '
            f'width="{self.width}" height="{self.height}" '
            f'viewBox="0 0 {self.width} {self.height}">'
        )
        if title:
            lines.append(f"  <title>{_escape(title)}</title>")

        fill = resolve_background(self.background)
        if fill is not None:
            lines.append(
                f'  <rect x="0" y="0" width="{self.width}" height="{self.height}" '
                f'fill="{_escape(fill)}" />'
            )

        for dot in self.dots:
            if not (math.isfinite(dot.x) and math.isfinite(dot.y)):
                continue
            half = dot.size / 2
            lines.append(
                f'  <rect x="{_fmt(dot.x - half)}" y="{_fmt(dot.y - half)}" '
                f'width="{dot.size}" height="{dot.size}" fill="{dot.color.hex()}" />'
            )

        lines.append("</svg>")
        return "\n".join(lines) + "\n"

    def write(self, path: str | Path, title: str | None = None) -> None:
        Path(path).write_text(self.to_svg(title), encoding="utf-8")
