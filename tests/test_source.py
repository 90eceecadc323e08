"""Tests for character sources: positions, lookahead and pushback."""

from __future__ import annotations

from pathlib import Path

import pytest

from drawlang.source import FileSource, StringSource


def _drain(cursor) -> str:
    out = []
    while True:
        ch = cursor.next_char()
        if ch == "":
            return "".join(out)
        out.append(ch)


class TestStringSource:
    def test_reads_all_characters(self):
        assert _drain(StringSource("ab\ncd")) == "ab\ncd"

    def test_empty_input_is_eof(self):
        src = StringSource("")
        assert src.eof()
        assert src.next_char() == ""
        assert src.peek_char() == ""

    def test_initial_location(self):
        loc = StringSource("x", "prog.draw").location()
        assert (loc.source, loc.line, loc.column, loc.offset) == ("prog.draw", 1, 1, 0)

    def test_location_tracks_lines_and_columns(self):
        src = StringSource("ab\ncd")
        for _ in range(4):
            src.next_char()
        loc = src.location()
        assert (loc.line, loc.column, loc.offset) == (2, 2, 4)

    def test_peek_does_not_consume(self):
        src = StringSource("xy")
        assert src.peek_char() == "x"
        assert src.peek_char() == "x"
        assert src.next_char() == "x"
        assert src.peek_char() == "y"

    def test_unget_rolls_back_one_character(self):
        src = StringSource("xy")
        src.next_char()
        src.next_char()
        src.unget_char()
        assert src.next_char() == "y"
        assert src.location().column == 3

    def test_unget_newline_recomputes_column(self):
        src = StringSource("ab\ncd")
        for _ in range(3):
            src.next_char()
        assert src.location().line == 2
        src.unget_char()
        loc = src.location()
        assert (loc.line, loc.column, loc.offset) == (1, 3, 2)
        assert src.peek_char() == "\n"

    def test_unget_newline_on_later_line(self):
        src = StringSource("a\nbcd\nx")
        for _ in range(6):
            src.next_char()
        src.unget_char()
        loc = src.location()
        assert (loc.line, loc.column) == (2, 4)

    def test_unget_with_nothing_consumed_is_noop(self):
        src = StringSource("abc")
        src.unget_char()
        loc = src.location()
        assert (loc.line, loc.column, loc.offset) == (1, 1, 0)
        assert src.next_char() == "a"

    def test_eof_after_last_character(self):
        src = StringSource("a")
        assert not src.eof()
        src.next_char()
        assert src.eof()


class TestFileSource:
    @pytest.fixture
    def sample(self, tmp_path: Path) -> Path:
        path = tmp_path / "sample.draw"
        path.write_text("ab\ncd", encoding="utf-8")
        return path

    def test_reads_whole_file_in_small_chunks(self, sample: Path):
        with FileSource(sample, buffer_size=2) as src:
            assert _drain(src) == "ab\ncd"
            assert src.eof()

    def test_default_name_is_path(self, sample: Path):
        with FileSource(sample) as src:
            assert src.location().source == str(sample)

    def test_explicit_name(self, sample: Path):
        with FileSource(sample, "shown.draw") as src:
            assert src.location().source == "shown.draw"

    def test_location_matches_string_source(self, sample: Path):
        text = sample.read_text(encoding="utf-8")
        expected = StringSource(text, "n")
        with FileSource(sample, "n", buffer_size=1) as src:
            for _ in range(len(text) + 1):
                assert src.location() == expected.location()
                assert src.next_char() == expected.next_char()

    def test_unget_across_chunk_boundary(self, sample: Path):
        with FileSource(sample, buffer_size=2) as src:
            for _ in range(3):
                src.next_char()
            src.unget_char()
            loc = src.location()
            assert (loc.line, loc.column, loc.offset) == (1, 3, 2)
            assert src.peek_char() == "\n"
            assert src.next_char() == "\n"
            assert src.next_char() == "c"

    def test_unget_with_nothing_consumed_is_noop(self, sample: Path):
        with FileSource(sample) as src:
            src.unget_char()
            assert src.next_char() == "a"

    def test_unget_after_eof(self, sample: Path):
        with FileSource(sample, buffer_size=4) as src:
            _drain(src)
            src.unget_char()
            assert not src.eof()
            assert src.next_char() == "d"

    def test_rejects_zero_buffer(self, sample: Path):
        with pytest.raises(ValueError):
            FileSource(sample, buffer_size=0)

    def test_missing_file_raises(self, tmp_path: Path):
        with pytest.raises(OSError):
            FileSource(tmp_path / "nope.draw")

    @pytest.mark.parametrize("buffer_size", [1, 4096])
    def test_undecodable_bytes_are_replaced(self, tmp_path: Path, buffer_size: int):
        path = tmp_path / "latin1.draw"
        path.write_bytes(b"a\xffb")
        with FileSource(path, buffer_size=buffer_size) as src:
            assert _drain(src) == "a\ufffdb"
