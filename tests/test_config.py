"""Tests for compile options."""
import pytest

from morphdict.config import (
    CompileConfig,
    load_config,
    load_options,
    normalize_kind,
    parse_separator,
    unescape,
)
from morphdict.errors import ConfigError


class TestSeparator:

    def test_plain(self):
        assert parse_separator("+") == ord("+")
        assert parse_separator("|") == ord("|")

    def test_escapes(self):
        assert unescape("\\t") == "\t"
        assert parse_separator("\\t") == 0x09
        assert parse_separator("\\u00a7", "ISO-8859-1") == 0xA7

    def test_multibyte_in_utf8_rejected(self):
        with pytest.raises(ConfigError, match="single-byte"):
            parse_separator("§", "UTF-8")

    def test_multiple_characters_rejected(self):
        with pytest.raises(ConfigError):
            parse_separator("++")
        with pytest.raises(ConfigError):
            parse_separator("")

    def test_unencodable_rejected(self):
        with pytest.raises(ConfigError):
            parse_separator("€", "ASCII")

    def test_unknown_encoding(self):
        with pytest.raises(ConfigError):
            parse_separator("+", "no-such-charset")


def test_kind_aliases():
    assert normalize_kind("standard") == "standard"
    assert normalize_kind("Morphological") == "standard"
    assert normalize_kind("SYNTHESIS") == "synthesis"
    with pytest.raises(ConfigError):
        normalize_kind("lexical")


def test_defaults():
    config = CompileConfig()
    assert config.separator == ord("+")
    assert config.encoder == "suffix"
    assert config.kind == "standard"
    assert config.format == "marisa"
    assert config.assume_sorted is False
    assert config.encoding == "UTF-8"
    assert not config.synthesis


def test_from_options_normalizes():
    config = CompileConfig.from_options(separator="|", encoder="PREFIX", kind="synthesis",
                                        format="Marisa-Bytes", assume_sorted=True)
    assert config.separator == ord("|")
    assert config.encoder == "prefix"
    assert config.synthesis
    assert config.format == "marisa-bytes"
    assert config.assume_sorted is True


def test_invalid_encoder_rejected():
    with pytest.raises(ConfigError):
        CompileConfig.from_options(encoder="zip")
    with pytest.raises(ConfigError):
        CompileConfig(encoder="zip")


def test_separator_out_of_range():
    with pytest.raises(ConfigError):
        CompileConfig(separator=256)


def test_separator_text_escapes_control_bytes():
    assert CompileConfig().separator_text == "+"
    assert CompileConfig(separator=0x09).separator_text == "\\t"


def test_to_dict():
    assert CompileConfig().to_dict() == {
        "separator": "+",
        "encoder": "suffix",
        "kind": "standard",
        "format": "marisa",
        "assume_sorted": False,
        "encoding": "UTF-8",
    }


class TestYamlConfig:

    def test_load(self, temp_dir):
        path = temp_dir / "morphdict.yaml"
        path.write_text("separator: '|'\nencoder: infix\nassume-sorted: true\n", encoding="utf-8")

        config = load_config(path)
        assert config.separator == ord("|")
        assert config.encoder == "infix"
        assert config.assume_sorted is True

    def test_overrides_win(self, temp_dir):
        path = temp_dir / "morphdict.yaml"
        path.write_text("encoder: infix\nkind: synthesis\n", encoding="utf-8")

        config = load_config(path, encoder="none", kind=None)
        assert config.encoder == "none"
        assert config.kind == "synthesis"

    def test_empty_file(self, temp_dir):
        path = temp_dir / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_options(path) == {}
        assert load_config(path) == CompileConfig()

    def test_unknown_key(self, temp_dir):
        path = temp_dir / "bad.yaml"
        path.write_text("compression: cfsa2\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="unknown option"):
            load_config(path)

    def test_not_a_mapping(self, temp_dir):
        path = temp_dir / "list.yaml"
        path.write_text("- suffix\n- prefix\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_options(path)


def test_load_config_without_file():
    assert load_config() == CompileConfig()
    assert load_config(separator="\\t").separator == 0x09
    with pytest.raises(ConfigError):
        load_config(compression="cfsa2")
