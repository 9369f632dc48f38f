import io
import os
import re
import threading
from datetime import datetime, timezone

import pytest

from logforge.chunks import (
    ChunkKind,
    ErrorChunk,
    FormattedChunk,
    TextChunk,
    Timezone,
    chunk_from_piece,
)
from logforge.encode import NEWLINE, Color, Style
from logforge.parser import Parameters, parse
from logforge.record import Level, Record, clear_mdc, insert_mdc
from logforge.writers import AnsiWriter, SimpleWriter, ansi_escape


@pytest.fixture(autouse=True)
def _fresh_mdc():
    clear_mdc()
    yield
    clear_mdc()


def compile_one(pattern):
    pieces = parse(pattern)
    assert len(pieces) == 1
    return chunk_from_piece(pieces[0])


def render(pattern, record=None, ansi=False):
    buf = io.BytesIO()
    writer = AnsiWriter(buf) if ansi else SimpleWriter(buf)
    for piece in parse(pattern):
        chunk_from_piece(piece).encode(writer, record or Record())
    return buf.getvalue()


def test_text_chunk_writes_text():
    buf = io.BytesIO()
    TextChunk("abc").encode(SimpleWriter(buf), Record())
    assert buf.getvalue() == b"abc"


def test_error_chunk_writes_marker():
    buf = io.BytesIO()
    ErrorChunk("unexpected arguments").encode(SimpleWriter(buf), Record())
    assert buf.getvalue() == b"{ERROR: unexpected arguments}"


def test_unknown_formatter():
    assert compile_one("{x}") == ErrorChunk("unknown formatter `x`")


def test_simple_formatter_rejects_arguments():
    assert compile_one("{l(a)}") == ErrorChunk("unexpected arguments")


def test_nested_formatter_needs_one_argument():
    assert compile_one("{h}") == ErrorChunk("expected exactly one argument")
    assert compile_one("{D(a)(b)}") == ErrorChunk("expected exactly one argument")


def test_date_argument_count():
    assert compile_one("{d(a)(utc)(b)}") == ErrorChunk(
        "expected at most two arguments"
    )


def test_date_chunk_fields():
    assert compile_one("{d(%Y)(utc)}") == FormattedChunk(
        ChunkKind.TIME, Parameters(), format="%Y", timezone=Timezone.UTC
    )
    assert compile_one("{d}") == FormattedChunk(
        ChunkKind.TIME, Parameters(), format="%+", timezone=Timezone.LOCAL
    )


def test_date_with_nested_formatter_marks_error():
    chunk = compile_one("{d(%Y{l})}")
    assert chunk.format == "%Y{ERROR: unexpected formatter}"


@pytest.mark.parametrize(
    "pattern, message",
    [
        ("{d(%+)(foo)}", "invalid timezone `foo`"),
        ("{d(%+)()}", "invalid timezone"),
        ("{d(%+)({l})}", "invalid timezone"),
    ],
)
def test_invalid_timezones(pattern, message):
    assert compile_one(pattern) == ErrorChunk(message)


@pytest.mark.parametrize(
    "pattern, message",
    [
        ("{X}", "missing MDC key"),
        ("{X()}", "invalid MDC key"),
        ("{X({l})}", "invalid MDC key"),
        ("{X(a)({l})}", "invalid MDC default"),
        ("{X(a)(b)(c)}", "expected at most two arguments"),
    ],
)
def test_invalid_mdc(pattern, message):
    assert compile_one(pattern) == ErrorChunk(message)


def test_mdc_value_and_defaults():
    assert render("{X(user_id)}") == b""
    assert render("{X(user_id)(missing value)}") == b"missing value"
    insert_mdc("user_id", "mdc value")
    assert render("{X(user_id)}") == b"mdc value"


def test_record_fields():
    record = Record(
        level=Level.DEBUG,
        message="the message",
        module_path="path",
        file="file",
        line=132,
        target="tgt",
    )
    assert (
        render("{l} {m} at {M} in {f}:{L} {t}", record)
        == b"DEBUG the message at path in file:132 tgt"
    )


def test_missing_fields_render_placeholders():
    assert render("{M} {f} {L}") == b"??? ??? ???"


def test_newline():
    assert render("{n}") == NEWLINE.encode()


def test_process_and_thread_ids():
    assert render("{P}") == str(os.getpid()).encode()
    assert render("{I}") == str(threading.get_ident()).encode()
    assert render("{i}") == str(threading.get_native_id()).encode()


def test_named_thread():
    chunk = compile_one("{T}")
    buf = io.BytesIO()
    writer = SimpleWriter(buf)
    worker = threading.Thread(
        target=chunk.encode, args=(writer, Record()), name="foobar"
    )
    worker.start()
    worker.join()
    assert buf.getvalue() == b"foobar"


def test_highlight_error_styles():
    output = render("{h(x)}", Record(level=Level.ERROR), ansi=True)
    expected = (
        ansi_escape(Style(text=Color.RED, intense=True)) + b"x" + ansi_escape(Style())
    )
    assert output == expected


def test_highlight_debug_is_plain():
    assert render("{h(x)}", Record(level=Level.DEBUG), ansi=True) == b"x"


def test_debug_and_release():
    record = Record(level=Level.INFO)
    debug = render("{D({l})}", record)
    release = render("{R({l})}", record)
    # Assertions only run with __debug__ set, so the debug branch is the live one.
    assert (debug, release) == (b"INFO", b"")


def test_width_handling():
    assert render("{m:~<5.6}", Record(message="foo")) == b"foo~~"
    assert render("{m:~<5.6}", Record(message="foobar!")) == b"foobar"
    assert render("{m:~>5.6}", Record(message="foo")) == b"~~foo"
    assert render("{m:~>5.6}", Record(message="foobar!")) == b"foobar"


def test_align_formatter():
    record = Record(level=Level.INFO, message="foobar!")
    assert render("{({l} {m}):15}", record) == b"INFO foobar!   "
    assert render("{({l} {m}):>15}", record) == b"   INFO foobar!"


def test_utc_date_output():
    before = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    output = render("{d(%Y-%m-%d)(utc)}").decode()
    after = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    assert output in (before, after)


def test_default_date_is_rfc3339():
    before = datetime.now(timezone.utc).replace(microsecond=0)
    output = render("{d}").decode()
    stamp = datetime.fromisoformat(output)
    assert stamp.tzinfo is not None
    assert stamp >= before
    assert re.fullmatch(r"\d{4}-\d\d-\d\dT\d\d:\d\d:\d\d(\.\d+)?[+-]\d\d:\d\d", output)


def test_time_shapes():
    output = render("{d(%H:%M:%S%.3f)(utc)}").decode()
    assert re.fullmatch(r"\d\d:\d\d:\d\d\.\d{3}", output)
    assert render("{d(%Z)(utc)}") == b"UTC"


def test_bad_time_format_raises():
    with pytest.raises(OSError, match="formatter error"):
        render("{d(%Q)}")