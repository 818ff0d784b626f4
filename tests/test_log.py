"""Tests for the log formatter and the per-severity sink."""

import io

import pytest
from hypothesis import given
from hypothesis import strategies as st

from pride import sgr
from pride.common import Severity
from pride.log import Logger, is_terminal, render, use_color, write_prefixed
from pride.settings import LogSettings


class TTYStream(io.StringIO):
    """In-memory stream that claims to be a terminal."""

    def isatty(self):
        return True


class BrokenStream:
    def isatty(self):
        return False

    def write(self, text):
        raise OSError("disk full")


class WriteOnlyStream:
    def __init__(self):
        self.chunks = []

    def write(self, text):
        self.chunks.append(text)


# ---------------------------------------------------------------------------
# render
# ---------------------------------------------------------------------------


class TestRender:
    def test_color_disabled_strips_prefix(self):
        assert render(sgr.RED + "ERR ", "msg %d", (1,), color=False) == "ERR msg 1" + sgr.RESET

    def test_color_enabled_keeps_prefix_bytes(self):
        assert render(sgr.RED + "ERR ", "msg %d", (1,), color=True) == "\x1b[31mERR msg 1\x1b[0m"

    def test_body_escapes_are_not_stripped(self):
        assert render(sgr.RED, "%s", (sgr.BLUE + "x",), color=False) == sgr.BLUE + "x" + sgr.RESET

    def test_single_trailing_reset(self):
        text = render(sgr.GREEN + sgr.BOLD, "ok\n", color=False)
        assert text == "ok\n" + sgr.RESET
        assert text.count("\x1b") == 1

    def test_no_args_still_unescapes_percent(self):
        assert render("", "100%%", color=False) == "100%" + sgr.RESET

    def test_mismatched_args_raise(self):
        with pytest.raises(TypeError):
            render("", "%d %d", (1,))

    def test_long_template_is_not_truncated(self):
        body = "x" * 5000
        assert render(sgr.RED * 20, "%s", (body,), color=False) == body + sgr.RESET

    @given(st.text(alphabet=st.characters(exclude_characters="\x1b%")))
    def test_stripping_leaves_literal_prefix(self, text):
        prefix = "\x1b[31m" + text
        assert render(prefix, "", color=False) == text + sgr.RESET
        assert render(prefix, "", color=True) == prefix + sgr.RESET


# ---------------------------------------------------------------------------
# Color decision and stream writing
# ---------------------------------------------------------------------------


class TestWritePrefixed:
    def test_terminal_with_color(self):
        stream = TTYStream()
        write_prefixed(stream, sgr.RED, "hi", (), LogSettings())
        assert stream.getvalue() == sgr.RED + "hi" + sgr.RESET

    def test_terminal_with_color_disabled(self):
        stream = TTYStream()
        write_prefixed(stream, sgr.RED, "hi", (), LogSettings(color=False))
        assert stream.getvalue() == "hi" + sgr.RESET

    def test_non_terminal_strips_by_default(self):
        stream = io.StringIO()
        write_prefixed(stream, sgr.RED, "hi", (), LogSettings())
        assert stream.getvalue() == "hi" + sgr.RESET

    def test_non_terminal_with_force_color(self):
        stream = io.StringIO()
        write_prefixed(stream, sgr.RED, "hi", (), LogSettings(force_color=True))
        assert stream.getvalue() == sgr.RED + "hi" + sgr.RESET

    def test_force_color_does_not_affect_terminals(self):
        settings = LogSettings(color=False, force_color=True)
        assert use_color(TTYStream(), settings) is False
        assert use_color(io.StringIO(), settings) is True

    def test_returns_written_length(self):
        stream = io.StringIO()
        assert write_prefixed(stream, "", "abc", (), LogSettings()) == len("abc" + sgr.RESET)

    def test_write_failure_returns_negative(self):
        assert write_prefixed(BrokenStream(), "", "abc", (), LogSettings()) == -1

    def test_closed_stream_returns_negative(self):
        stream = io.StringIO()
        stream.close()
        assert write_prefixed(stream, "", "abc", (), LogSettings()) == -1

    def test_stream_without_isatty(self):
        stream = WriteOnlyStream()
        assert not is_terminal(stream)
        assert write_prefixed(stream, sgr.RED, "abc", (), LogSettings()) == len("abc" + sgr.RESET)
        assert stream.chunks == ["abc" + sgr.RESET]


# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------


class TestLogger:
    def test_everything_goes_to_stderr_by_default(self, capsys):
        log = Logger()
        for severity in Severity:
            log.emit(severity, "%s\n", severity.value)
        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err.count(sgr.RESET) == len(Severity)

    def test_per_severity_stdout_routing(self, capsys):
        settings = LogSettings()
        settings.set_stdout(Severity.INFO, True)
        log = Logger(settings)

        log.info("to out\n")
        log.error("to err\n")

        captured = capsys.readouterr()
        assert captured.out == "to out\n" + sgr.RESET
        assert captured.err == "to err\n" + sgr.RESET

    @pytest.mark.parametrize(
        "method, severity",
        [
            ("plain", Severity.PLAIN),
            ("verbose", Severity.VERBOSE),
            ("debug", Severity.DEBUG),
            ("info", Severity.INFO),
            ("warn", Severity.WARN),
            ("error", Severity.ERROR),
            ("fatal", Severity.FATAL),
        ],
    )
    def test_stream_directed_variants_use_severity_prefix(self, method, severity):
        log = Logger()
        stream = TTYStream()
        getattr(log, f"{method}_to")(stream, "n=%d", 7)
        assert stream.getvalue() == log.settings.prefixes[severity] + "n=7" + sgr.RESET

    def test_printf_variant_returns_count(self, capsys):
        log = Logger()
        assert log.warn("%s-%s", "a", "b") == len("a-b" + sgr.RESET)
        assert capsys.readouterr().err == "a-b" + sgr.RESET

    def test_custom_prefix(self):
        settings = LogSettings()
        settings.set_prefix(Severity.DEBUG, sgr.MAGENTA + "[debug] ")
        stream = TTYStream()
        Logger(settings).debug_to(stream, "x")
        assert stream.getvalue() == sgr.MAGENTA + "[debug] x" + sgr.RESET

    def test_sprintf_follows_global_color_flag(self):
        assert Logger().sprintf(Severity.ERROR, "e") == sgr.RED + sgr.BOLD + "e" + sgr.RESET
        assert Logger(LogSettings(color=False)).sprintf(Severity.ERROR, "e") == "e" + sgr.RESET

    def test_stream_resolved_at_call_time(self, monkeypatch):
        log = Logger()
        replacement = io.StringIO()
        monkeypatch.setattr("sys.stderr", replacement)
        log.plain("late")
        assert replacement.getvalue() == "late" + sgr.RESET
