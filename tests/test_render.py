"""Tests for the SVG canvas."""

from __future__ import annotations

import math
from pathlib import Path

from drawlang import interpret
from drawlang.render import Canvas, Dot, _fmt, resolve_background
from drawlang.symbols import Color


class TestFmt:
    def test_strips_trailing_zeros(self):
        assert _fmt(1.5) == "1.5"
        assert _fmt(2.0) == "2"

    def test_negative_zero(self):
        assert _fmt(-0.0) == "0"

    def test_precision(self):
        assert _fmt(1 / 3) == "0.333"


class TestBackground:
    def test_named_color(self):
        assert resolve_background("white") == "#ffffff"
        assert resolve_background("Orange") == "#ffa500"

    def test_passthrough(self):
        assert resolve_background("#123456") == "#123456"

    def test_none(self):
        assert resolve_background("none") is None
        assert resolve_background("") is None


class TestCanvas:
    def test_collects_dots(self):
        canvas = Canvas()
        canvas(1.0, 2.0, Color(1, 2, 3), 4)
        assert canvas.dots == [Dot(1.0, 2.0, Color(1, 2, 3), 4)]

    def test_svg_document(self):
        canvas = Canvas(100, 50, "black")
        canvas(10.0, 20.0, Color(255, 0, 0), 2)
        svg = canvas.to_svg(title="a<b")
        lines = svg.splitlines()
        assert lines[0] == '<?xml version="1.0" encoding="UTF-8"?>'
        assert 'width="100" height="50" viewBox="0 0 100 50"' in lines[1]
        assert "<title>a&lt;b</title>" in svg
        assert '<rect x="0" y="0" width="100" height="50" fill="#000000" />' in svg
        assert '<rect x="9" y="19" width="2" height="2" fill="#ff0000" />' in svg
        assert lines[-1] == "</svg>"

    def test_no_background(self):
        svg = Canvas(10, 10, "none").to_svg()
        assert "<rect" not in svg

    def test_non_finite_points_are_skipped(self):
        canvas = Canvas(background="none")
        canvas(math.nan, 1.0, Color(0, 0, 0), 1)
        canvas(1.0, math.inf, Color(0, 0, 0), 1)
        canvas(1.0, 1.0, Color(0, 0, 0), 1)
        assert canvas.to_svg().count("<rect") == 1

    def test_clear(self):
        canvas = Canvas()
        canvas(0.0, 0.0, Color(0, 0, 0), 1)
        canvas.clear()
        assert canvas.dots == []

    def test_write(self, tmp_path: Path):
        canvas = Canvas(5, 5)
        out = tmp_path / "out.svg"
        canvas.write(out)
        assert out.read_text(encoding="utf-8") == canvas.to_svg()

    def test_as_draw_callback(self):
        canvas = Canvas(background="none")
        result = interpret("color is blue; size is 3; for t from 0 to 2 step 1 draw (t*10, 5);", draw=canvas)
        assert result.points == 3
        assert [d.x for d in canvas.dots] == [0.0, 10.0, 20.0]
        assert all(d.color == Color(0, 0, 255) and d.size == 3 for d in canvas.dots)

    def test_background_attribute_is_escaped(self):
        svg = Canvas(10, 10, 'red" onload="x').to_svg()
        assert 'fill="red&quot; onload=&quot;x"' in svg
        assert 'onload="x"' not in svg
