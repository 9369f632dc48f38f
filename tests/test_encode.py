import pytest

from logforge.encode import Color, Encoder, EncoderConfig, Style, Writer
from logforge.record import Level, Record


class _BufferWriter(Writer):
    def __init__(self):
        self.data = bytearray()
        self.flushed = 0

    def write(self, data):
        self.data += data
        return len(data)

    def flush(self):
        self.flushed += 1


class _LevelEncoder(Encoder):
    def encode(self, writer, record):
        writer.set_style(Style(text=Color.RED))
        writer.write(str(record.level).encode())


def test_style_defaults_are_unset():
    style = Style()
    assert (style.text, style.background, style.intense) == (None, None, None)


def test_style_equality_and_hash():
    first = Style(text=Color.RED, background=Color.BLUE, intense=True)
    second = Style(text=Color.RED, background=Color.BLUE, intense=True)
    assert first == second
    assert hash(first) == hash(second)
    assert first != Style(text=Color.RED)


def test_colors_give_distinct_styles():
    styles = {Style(text=color) for color in Color}
    assert len(styles) == len(Color)


def test_default_set_style_does_not_write():
    writer = _BufferWriter()
    writer.write(b"normal ")
    writer.set_style(Style(text=Color.GREEN, intense=False))
    writer.write(b"styled")
    assert bytes(writer.data) == b"normal styled"


def test_encoder_writes_through_writer():
    writer = _BufferWriter()
    _LevelEncoder().encode(writer, Record(level=Level.DEBUG))
    writer.flush()
    assert bytes(writer.data) == b"DEBUG"
    assert writer.flushed == 1


def test_abstract_classes_cannot_be_built():
    with pytest.raises(TypeError):
        Writer()
    with pytest.raises(TypeError):
        Encoder()


def test_encoder_config_defaults_to_pattern():
    cfg = EncoderConfig.from_mapping({"pattern": "{d} - {m}{n}"})
    assert cfg.kind == "pattern"
    assert cfg.config == {"pattern": "{d} - {m}{n}"}


def test_encoder_config_takes_kind_out():
    source = {"kind": "json"}
    cfg = EncoderConfig.from_mapping(source)
    assert cfg == EncoderConfig(kind="json", config={})
    assert source == {"kind": "json"}


def test_encoder_config_rejects_non_string_kind():
    with pytest.raises(TypeError):
        EncoderConfig.from_mapping({"kind": 5})


def test_encoder_config_rejects_non_mapping():
    with pytest.raises(TypeError):
        EncoderConfig.from_mapping(["kind", "json"])