"""
config.py - Compile options and their validation.

Options can come from keyword arguments, a YAML file, or the command line
(which overrides the file). YAML keys mirror the CLI flags:

    separator: "+"          # single byte in the source encoding; escapes allowed
    encoder: suffix         # none | suffix | prefix | infix
    kind: standard          # standard | synthesis
    format: marisa          # marisa | marisa-bytes
    assume_sorted: false
    encoding: UTF-8
"""

import codecs
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from morphdict.automaton import DEFAULT_FORMAT, normalize_format_name
from morphdict.encoders import normalize_encoder_name
from morphdict.errors import ConfigError


DEFAULT_SEPARATOR = '+'
DEFAULT_ENCODER = 'suffix'
DEFAULT_ENCODING = 'UTF-8'

STANDARD = 'standard'
SYNTHESIS = 'synthesis'

# Accepted spellings of the dictionary kind
KIND_ALIASES = {
    'standard': STANDARD,
    'morphologic': STANDARD,
    'morphological': STANDARD,
    'synthesis': SYNTHESIS,
}

OPTION_NAMES = ('separator', 'encoder', 'kind', 'format', 'assume_sorted', 'encoding')


def unescape(text: str) -> str:
    """Resolve backslash escapes such as \\t or \\u00a7."""
    if '\\' not in text:
        return text
    try:
        return text.encode('latin-1', 'backslashreplace').decode('unicode_escape')
    except UnicodeDecodeError as e:
        raise ConfigError(f"Invalid escape in separator {text!r}: {e}") from e


def parse_separator(text: str, encoding: str = DEFAULT_ENCODING) -> int:
    """
    Turn separator text into its byte value.

    Raises:
        ConfigError: Not exactly one character, or not a single byte in encoding
    """
    sep = unescape(text)
    if len(sep) != 1:
        raise ConfigError(f"Field separator must be a single character: {sep!r}")

    try:
        encoded = sep.encode(encoding)
    except LookupError as e:
        raise ConfigError(f"Unknown encoding: {encoding}") from e
    except UnicodeEncodeError as e:
        raise ConfigError(f"Separator {sep!r} cannot be encoded in {encoding}") from e

    if len(encoded) != 1:
        raise ConfigError(
            f"Annotation character must be a single-byte value, "
            f"{sep!r} has {len(encoded)} bytes."
        )
    return encoded[0]


def normalize_kind(kind: str) -> str:
    key = kind.strip().lower()
    if key not in KIND_ALIASES:
        raise ConfigError(f"Invalid dictionary kind: {kind}, allowed values: [standard, synthesis]")
    return KIND_ALIASES[key]


@dataclass(frozen=True)
class CompileConfig:
    """Validated options for compiling one or more wordlists."""

    separator: int = ord(DEFAULT_SEPARATOR)
    encoder: str = DEFAULT_ENCODER
    kind: str = STANDARD
    format: str = DEFAULT_FORMAT
    assume_sorted: bool = False
    encoding: str = DEFAULT_ENCODING

    def __post_init__(self):
        if not 0 <= self.separator <= 0xFF:
            raise ConfigError(f"Separator must be a byte value, got {self.separator}")
        if self.encoder != normalize_encoder_name(self.encoder):
            raise ConfigError(f"Encoder name must be lowercase: {self.encoder}")
        if self.kind not in (STANDARD, SYNTHESIS):
            raise ConfigError(f"Invalid dictionary kind: {self.kind}")
        if self.format != normalize_format_name(self.format):
            raise ConfigError(f"Format name must be lowercase: {self.format}")
        try:
            codecs.lookup(self.encoding)
        except LookupError as e:
            raise ConfigError(f"Unknown encoding: {self.encoding}") from e

    @property
    def synthesis(self) -> bool:
        return self.kind == SYNTHESIS

    @property
    def separator_text(self) -> str:
        """Separator as a character, with control characters escaped."""
        char = bytes([self.separator]).decode(self.encoding, errors='backslashreplace')
        if char.isprintable():
            return char
        return char.encode('unicode_escape').decode('ascii')

    @classmethod
    def from_options(
        cls,
        separator: Optional[str] = None,
        encoder: Optional[str] = None,
        kind: Optional[str] = None,
        format: Optional[str] = None,
        assume_sorted: Optional[bool] = None,
        encoding: Optional[str] = None
    ) -> 'CompileConfig':
        """Build a config from user-facing option values; None means default."""
        encoding = encoding or DEFAULT_ENCODING
        return cls(
            separator=parse_separator(separator if separator is not None else DEFAULT_SEPARATOR, encoding),
            encoder=normalize_encoder_name(encoder or DEFAULT_ENCODER),
            kind=normalize_kind(kind or STANDARD),
            format=normalize_format_name(format or DEFAULT_FORMAT),
            assume_sorted=bool(assume_sorted),
            encoding=encoding,
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {f.name: getattr(self, f.name) for f in fields(self)}
        result['separator'] = self.separator_text
        return result


def load_options(path: Path) -> Dict[str, Any]:
    """
    Read compile options from a YAML file.

    Raises:
        FileNotFoundError: The file does not exist
        ConfigError: The file is not a mapping or has unknown keys
    """
    with open(path, encoding='utf-8') as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping of options")

    options = {}
    for key, value in data.items():
        name = str(key).replace('-', '_')
        if name not in OPTION_NAMES:
            raise ConfigError(f"{path}: unknown option '{key}'")
        if name == 'separator' and value is not None:
            value = str(value)
        options[name] = value
    return options


def load_config(path: Optional[Path] = None, **overrides: Any) -> CompileConfig:
    """Config from an optional YAML file, with non-None overrides applied."""
    options = load_options(path) if path is not None else {}
    for name, value in overrides.items():
        if name not in OPTION_NAMES:
            raise ConfigError(f"Unknown option '{name}'")
        if value is not None:
            options[name] = value
    return CompileConfig.from_options(**options)
