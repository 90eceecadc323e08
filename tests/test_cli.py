"""Tests for the CLI module: arg parsing, exit codes, end-to-end rendering."""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from drawlang.automaton import Encoding
from drawlang.cli import (
    CliOptions,
    build_parser,
    main,
    print_tokens,
    render_file,
)

# ---------------------------------------------------------------------------
# Arg parsing via build_parser
# ---------------------------------------------------------------------------


class TestArgParsing:
    def test_input_only(self) -> None:
        ns = build_parser().parse_args(["prog.draw"])
        assert ns.input == "prog.draw"
        assert ns.output is None
        assert ns.automaton is None
        assert ns.trace is None

    def test_output_flag(self) -> None:
        ns = build_parser().parse_args(["prog.draw", "-o", "out.svg"])
        assert ns.output == "out.svg"

    def test_automaton_choices(self) -> None:
        ns = build_parser().parse_args(["prog.draw", "--automaton", "direct"])
        assert ns.automaton == "direct"
        with pytest.raises(SystemExit):
            build_parser().parse_args(["prog.draw", "--automaton", "nfa"])

    def test_canvas_flags(self) -> None:
        ns = build_parser().parse_args(
            ["prog.draw", "--width", "10", "--height", "20", "--background", "none"]
        )
        assert (ns.width, ns.height, ns.background) == (10, 20, "none")

    def test_boolean_flags(self) -> None:
        ns = build_parser().parse_args(["prog.draw", "--trace", "--watch", "--debug", "--tokens"])
        assert ns.trace is True
        assert ns.watch is True
        assert ns.debug is True
        assert ns.tokens is True


# ---------------------------------------------------------------------------
# render_file / print_tokens
# ---------------------------------------------------------------------------


def _options(path: Path, **overrides) -> CliOptions:
    values = dict(
        input_file=path,
        output_file=None,
        encoding=Encoding.TABLE,
        trace=False,
        width=100,
        height=100,
        background="none",
        watch=False,
        debug=False,
        tokens=False,
    )
    values.update(overrides)
    return CliOptions(**values)


class TestRenderFile:
    def test_clean_program(self, tmp_path: Path) -> None:
        prog = tmp_path / "ok.draw"
        prog.write_text("for t from 0 to 2 step 1 draw (t, t);")
        err = io.StringIO()
        svg, code = render_file(_options(prog), err=err)
        assert code == 0
        assert svg.count("<rect") == 3
        assert "<title>ok.draw</title>" in svg
        assert err.getvalue() == ""

    def test_errors_are_formatted_with_summary(self, tmp_path: Path) -> None:
        prog = tmp_path / "bad.draw"
        prog.write_text("rot is 1 2;")
        err = io.StringIO()
        _, code = render_file(_options(prog), err=err)
        assert code == 1
        text = err.getvalue()
        assert "error: unexpected token '2', expected ';'" in text
        assert "1 | rot is 1 2;" in text
        assert f"{prog}: 1 error(s), 0 warning(s), 0 point(s)" in text

    def test_semantic_error_code(self, tmp_path: Path) -> None:
        prog = tmp_path / "loop.draw"
        prog.write_text("for t from 0 to 1 step 0 draw (t, t);")
        _, code = render_file(_options(prog), err=io.StringIO())
        assert code == 2

    def test_warnings_keep_code_zero(self, tmp_path: Path) -> None:
        prog = tmp_path / "warn.draw"
        prog.write_text("color is mauve; for t from 0 to 0 step 1 draw (t, t);")
        err = io.StringIO()
        svg, code = render_file(_options(prog), err=err)
        assert code == 0
        assert "warning: unknown color 'mauve', using red" in err.getvalue()
        assert 'fill="#ff0000"' in svg

    def test_debug_dumps_ast(self, tmp_path: Path) -> None:
        prog = tmp_path / "dbg.draw"
        prog.write_text("rot is 1;")
        err = io.StringIO()
        render_file(_options(prog, debug=True), err=err)
        assert "Program (1 statements)" in err.getvalue()

    def test_trace(self, tmp_path: Path) -> None:
        prog = tmp_path / "trace.draw"
        prog.write_text("origin is (1, 2);")
        err = io.StringIO()
        render_file(_options(prog, trace=True), err=err)
        assert "ORIGIN: (1.0, 2.0)" in err.getvalue()

    def test_background(self, tmp_path: Path) -> None:
        prog = tmp_path / "bg.draw"
        prog.write_text("")
        svg, _ = render_file(_options(prog, background="black"), err=io.StringIO())
        assert 'fill="#000000"' in svg


class TestPrintTokens:
    def test_valid(self, tmp_path: Path) -> None:
        prog = tmp_path / "t.draw"
        prog.write_text("rot is 1;")
        out = io.StringIO()
        assert print_tokens(_options(prog), out=out) == 0
        assert len(out.getvalue().splitlines()) == 5

    def test_invalid_token(self, tmp_path: Path) -> None:
        prog = tmp_path / "t.draw"
        prog.write_text("rot is 1e;")
        out = io.StringIO()
        assert print_tokens(_options(prog, encoding=Encoding.DIRECT), out=out) == 1
        assert "INVALID_NUMBER" in out.getvalue()


# ---------------------------------------------------------------------------
# Exit codes via main
# ---------------------------------------------------------------------------


class TestExitCodes:
    def test_success(self, tmp_path: Path) -> None:
        prog = tmp_path / "ok.draw"
        prog.write_text("for t from 0 to 1 step 1 draw (t, t);")
        out = tmp_path / "out.svg"
        assert main([str(prog), "-o", str(out)]) == 0
        assert out.read_text(encoding="utf-8").startswith("<?xml")

    def test_stdout(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        prog = tmp_path / "ok.draw"
        prog.write_text("rot is 0;")
        assert main([str(prog)]) == 0
        assert capsys.readouterr().out.rstrip().endswith("</svg>")

    def test_syntax_error_returns_1(self, tmp_path: Path) -> None:
        prog = tmp_path / "bad.draw"
        prog.write_text("origin is (1 2);")
        out = tmp_path / "out.svg"
        assert main([str(prog), "-o", str(out)]) == 1
        # the SVG is still written
        assert out.exists()

    def test_semantic_error_returns_2(self, tmp_path: Path) -> None:
        prog = tmp_path / "loop.draw"
        prog.write_text("for t from 0 to 1 step 0 draw (t, t);")
        assert main([str(prog), "-o", str(tmp_path / "out.svg")]) == 2

    def test_missing_file_returns_2(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main([str(tmp_path / "missing.draw")]) == 2
        assert "error:" in capsys.readouterr().err

    def test_tokens_mode(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        prog = tmp_path / "t.draw"
        prog.write_text("size is 2;")
        assert main([str(prog), "--tokens"]) == 0
        assert "\tKEYWORD\t'size'\tSIZE" in capsys.readouterr().out

    def test_bad_config_returns_2(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        (tmp_path / "drawlang.toml").write_text("[canvas]\nwidth = 0\n")
        prog = tmp_path / "ok.draw"
        prog.write_text("")
        assert main([str(prog)]) == 2
        assert "width must be a positive integer" in capsys.readouterr().err

    @pytest.mark.parametrize("automaton", ["table", "direct"])
    def test_automaton_flag(self, tmp_path: Path, automaton: str) -> None:
        prog = tmp_path / "ok.draw"
        prog.write_text("for t from 0 to 3 step 1 draw (t*1e1, 2.5e-1);")
        out = tmp_path / "out.svg"
        assert main([str(prog), "--automaton", automaton, "-o", str(out)]) == 0
        assert out.read_text(encoding="utf-8").count('fill="#ff0000"') == 4

    def test_undecodable_file_is_a_lexical_error(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        prog = tmp_path / "bytes.draw"
        prog.write_bytes(b"ORIGIN IS (1, 2);\n\xff;\n")
        assert main([str(prog), "-o", str(tmp_path / "out.svg")]) == 1
        err = capsys.readouterr().err
        assert "error: unexpected character" in err
        assert f"{prog}:2:1" in err

    def test_undecodable_file_in_tokens_mode(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        prog = tmp_path / "bytes.draw"
        prog.write_bytes(b"rot \xff;")
        assert main([str(prog), "--tokens"]) == 1
        assert "UNKNOWN_CHARACTER" in capsys.readouterr().out


# ---------------------------------------------------------------------------
# Watch mode
# ---------------------------------------------------------------------------


class TestWatchLoop:
    def test_read_failure_keeps_polling(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        import drawlang.cli as cli

        prog = tmp_path / "w.draw"
        prog.write_text("for t from 0 to 1 step 1 draw (t, t);")
        out = tmp_path / "out.svg"
        real_render = cli.render_file
        renders: list[str] = []

        def flaky_render(options, **kwargs):
            renders.append("call")
            if len(renders) == 1:
                raise FileNotFoundError("replaced while reading")
            return real_render(options, **kwargs)

        sleeps: list[float] = []

        def fake_sleep(seconds: float) -> None:
            sleeps.append(seconds)
            if len(sleeps) == 2:
                raise KeyboardInterrupt

        monkeypatch.setattr(cli, "render_file", flaky_render)
        monkeypatch.setattr(cli.time, "sleep", fake_sleep)

        cli.watch_loop(_options(prog, output_file=out))

        assert len(renders) == 2
        assert out.read_text(encoding="utf-8").count("<rect") == 2
        err = capsys.readouterr().err
        assert "error: replaced while reading" in err
        assert f"Rendered {prog}" in err
