import io
import threading

import pytest

from logforge.encode import Color, Style
from logforge.writers import (
    AnsiWriter,
    ColorMode,
    ConsoleWriter,
    SimpleWriter,
    ansi_escape,
    color_mode_from_env,
)


@pytest.fixture
def clean_env(monkeypatch):
    for key in ("NO_COLOR", "CLICOLOR_FORCE", "CLICOLOR"):
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_simple_writer_passes_bytes_and_ignores_style():
    buf = io.BytesIO()
    w = SimpleWriter(buf)
    assert w.write(b"abc") == 3
    w.set_style(Style(text=Color.RED))
    w.write(b"def")
    w.flush()
    assert buf.getvalue() == b"abcdef"


def test_ansi_basic():
    buf = io.BytesIO()
    w = AnsiWriter(buf)
    w.write(b"normal ")
    w.set_style(Style(text=Color.RED, background=Color.BLUE, intense=True))
    w.write(b"styled")
    w.set_style(Style(text=Color.GREEN))
    w.write(b" styled2")
    w.set_style(Style())
    w.write(b" normal\n")
    w.flush()
    assert buf.getvalue() == (
        b"normal \x1b[0;31;44;1mstyled\x1b[0;32m styled2\x1b[0m normal\n"
    )


@pytest.mark.parametrize(
    "style, expected",
    [
        (Style(), b"\x1b[0m"),
        (Style(intense=False), b"\x1b[0;22m"),
        (Style(intense=True), b"\x1b[0;1m"),
        (Style(background=Color.WHITE), b"\x1b[0;47m"),
        (Style(text=Color.BLACK, intense=False), b"\x1b[0;30;22m"),
        (Style(text=Color.CYAN, background=Color.MAGENTA), b"\x1b[0;36;45m"),
    ],
)
def test_ansi_escape(style, expected):
    assert ansi_escape(style) == expected


@pytest.mark.parametrize(
    "environ, expected",
    [
        ({}, ColorMode.AUTO),
        ({"NO_COLOR": "1"}, ColorMode.NEVER),
        ({"NO_COLOR": "0"}, ColorMode.AUTO),
        ({"CLICOLOR_FORCE": "1"}, ColorMode.ALWAYS),
        ({"CLICOLOR_FORCE": "0"}, ColorMode.AUTO),
        ({"CLICOLOR": "1"}, ColorMode.AUTO),
        ({"CLICOLOR": "0"}, ColorMode.NEVER),
        ({"NO_COLOR": "1", "CLICOLOR_FORCE": "1"}, ColorMode.NEVER),
        ({"CLICOLOR_FORCE": "1", "CLICOLOR": "0"}, ColorMode.ALWAYS),
    ],
)
def test_color_mode_from_env(environ, expected):
    assert color_mode_from_env(environ) is expected


def test_color_mode_reads_process_env(clean_env):
    clean_env.setenv("NO_COLOR", "1")
    assert color_mode_from_env() is ColorMode.NEVER


def test_console_none_when_not_tty(clean_env, capsys):
    assert ConsoleWriter.stdout() is None
    assert ConsoleWriter.stderr() is None


def test_console_none_when_no_color(clean_env, capsys):
    clean_env.setenv("NO_COLOR", "1")
    clean_env.setenv("CLICOLOR_FORCE", "1")
    assert ConsoleWriter.stdout() is None


def test_console_none_when_clicolor_off(clean_env, capsys):
    clean_env.setenv("CLICOLOR", "0")
    assert ConsoleWriter.stderr() is None


def test_console_forced_stdout_basic(clean_env, capsys):
    clean_env.setenv("CLICOLOR_FORCE", "1")
    writer = ConsoleWriter.stdout()
    with writer.lock() as w:
        w.write(b"normal ")
        w.set_style(Style(text=Color.RED, background=Color.BLUE, intense=True))
        w.write(b"styled")
        w.set_style(Style(text=Color.GREEN))
        w.write(b" styled2")
        w.set_style(Style())
        w.write(b" normal\n")
        w.flush()
    out = capsys.readouterr().out
    assert out == "normal \x1b[0;31;44;1mstyled\x1b[0;32m styled2\x1b[0m normal\n"


def test_console_forced_stderr(clean_env, capsys):
    clean_env.setenv("CLICOLOR_FORCE", "1")
    writer = ConsoleWriter.stderr()
    assert writer.write(b"err") == 3
    writer.set_style(Style(text=Color.YELLOW))
    writer.flush()
    captured = capsys.readouterr()
    assert captured.err == "err\x1b[0;33m"
    assert captured.out == ""


def test_console_lock_released_after_block(clean_env, capsys):
    clean_env.setenv("CLICOLOR_FORCE", "1")
    writer = ConsoleWriter.stdout()
    with writer.lock() as w:
        w.write(b"a")

    def other():
        with writer.lock() as lw:
            lw.write(b"b")

    thread = threading.Thread(target=other)
    thread.start()
    thread.join(timeout=5)
    assert not thread.is_alive()
    writer.flush()
    assert capsys.readouterr().out == "ab"