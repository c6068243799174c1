"""
automaton.py - Build and persist the dictionary automaton.

The ordered entry list is handed to a MARISA trie (marisa-trie), which
builds the compact structure; nothing here minimizes states by hand.

Serialization formats:
  - marisa:       every encoded entry is a key of a marisa_trie.Trie
  - marisa-bytes: a marisa_trie.BytesTrie mapping each word form to its
                  annotation payloads (encoded lemma SEP tag)

Both are prefixed with a small header so a dictionary describes itself:

    b'\\mdx'  version  format-id  separator

MARISA keys are text, so entry bytes are mapped one-to-one onto latin-1
code points. Callers looking up a word form must encode it the same way
(see CompiledDictionary.lookup).
"""

import functools
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Callable, Dict, Iterable, Iterator, List, Optional, Union

import marisa_trie

from morphdict.errors import ConfigError


logger = logging.getLogger(__name__)

MAGIC = b'\\mdx'
VERSION = 1
HEADER_SIZE = len(MAGIC) + 3

FORMAT_IDS: Dict[str, int] = {
    'marisa': 1,
    'marisa-bytes': 2,
}
DEFAULT_FORMAT = 'marisa'

KEY_ENCODING = 'latin-1'


def to_key(sequence: bytes) -> str:
    return sequence.decode(KEY_ENCODING)


def from_key(key: str) -> bytes:
    return key.encode(KEY_ENCODING)


class Automaton:
    """Immutable set of byte sequences backed by a MARISA trie."""

    def __init__(self, trie: marisa_trie.Trie):
        self.trie = trie

    def __len__(self) -> int:
        return len(self.trie)

    def __contains__(self, sequence: bytes) -> bool:
        return to_key(sequence) in self.trie

    def __iter__(self) -> Iterator[bytes]:
        """Sequences in byte-lexical order."""
        return iter(sorted(from_key(key) for key in self.trie.keys()))


class AutomatonBuilder:
    """
    Incremental builder fed with sequences in non-decreasing order.

    Duplicates collapse into one sequence. Out-of-order input is rejected,
    since the caller is responsible for ordering.
    """

    def __init__(self):
        self._keys: List[str] = []
        self._previous: Optional[bytes] = None

    def add(self, sequence: bytes) -> None:
        if self._previous is not None:
            if sequence < self._previous:
                raise ValueError(
                    f"Input must be sorted: {sequence!r} after {self._previous!r}"
                )
            if sequence == self._previous:
                return
        self._keys.append(to_key(sequence))
        self._previous = sequence

    def complete(self) -> Automaton:
        trie = marisa_trie.Trie(self._keys)
        logger.debug(f"Built trie with {len(trie):,} keys")
        return Automaton(trie)


def build(sequences: Iterable[bytes]) -> Automaton:
    """Build an automaton from ordered sequences."""
    builder = AutomatonBuilder()
    for sequence in sequences:
        builder.add(sequence)
    return builder.complete()


# =============================================================================
# Serialization
# =============================================================================

def normalize_format_name(name: str) -> str:
    key = name.strip().lower()
    if key not in FORMAT_IDS:
        raise ConfigError(f"{name} is not a valid serializer, allowed values: {sorted(FORMAT_IDS)}")
    return key


def write_header(stream: BinaryIO, format_name: str, separator: int) -> None:
    stream.write(MAGIC)
    stream.write(bytes([VERSION, FORMAT_IDS[format_name], separator]))


def serialize_marisa(automaton: Automaton, stream: BinaryIO, separator: int) -> None:
    write_header(stream, 'marisa', separator)
    stream.write(automaton.trie.tobytes())


def serialize_marisa_bytes(automaton: Automaton, stream: BinaryIO, separator: int) -> None:
    sep = bytes([separator])
    items = []
    for sequence in automaton:
        word_form, _, payload = sequence.partition(sep)
        items.append((to_key(word_form), payload))

    write_header(stream, 'marisa-bytes', separator)
    stream.write(marisa_trie.BytesTrie(items).tobytes())


SERIALIZERS: Dict[str, Callable[[Automaton, BinaryIO, int], None]] = {
    'marisa': serialize_marisa,
    'marisa-bytes': serialize_marisa_bytes,
}


def get_serializer(format_name: str, separator: int) -> Callable[[Automaton, BinaryIO], None]:
    """Serializer for a format, bound to the dictionary's separator byte."""
    return functools.partial(SERIALIZERS[normalize_format_name(format_name)], separator=separator)


# =============================================================================
# Reading
# =============================================================================

@dataclass
class CompiledDictionary:
    """A dictionary loaded back from disk."""

    format: str
    version: int
    separator: int
    trie: Union[marisa_trie.Trie, marisa_trie.BytesTrie]

    def __len__(self) -> int:
        return len(self.trie)

    def sequences(self) -> Iterator[bytes]:
        """Stored entries in byte-lexical order, rebuilt for marisa-bytes."""
        if self.format == 'marisa':
            return iter(sorted(from_key(key) for key in self.trie.keys()))

        sep = bytes([self.separator])
        return iter(sorted(
            from_key(key) + sep + payload for key, payload in self.trie.items()
        ))

    def lookup(self, word_form: bytes) -> List[bytes]:
        """Annotation payloads (encoded lemma SEP tag) stored for a word form."""
        sep = bytes([self.separator])
        if self.format == 'marisa-bytes':
            return sorted(self.trie.get(to_key(word_form), []))

        prefix = to_key(word_form + sep)
        return sorted(from_key(key)[len(prefix):] for key in self.trie.keys(prefix))


def read_dictionary(stream: BinaryIO) -> CompiledDictionary:
    """
    Load a dictionary written by one of the serializers.

    Raises:
        ValueError: The data does not start with a known header
    """
    header = stream.read(HEADER_SIZE)
    if len(header) != HEADER_SIZE or not header.startswith(MAGIC):
        raise ValueError("Not a morphdict dictionary (bad header)")

    version, format_id, separator = header[len(MAGIC):]
    if version != VERSION:
        raise ValueError(f"Unsupported dictionary version: {version}")

    names = {v: k for k, v in FORMAT_IDS.items()}
    if format_id not in names:
        raise ValueError(f"Unknown dictionary format id: {format_id}")
    format_name = names[format_id]

    if format_name == 'marisa':
        trie = marisa_trie.Trie()
    else:
        trie = marisa_trie.BytesTrie()
    trie.frombytes(stream.read())

    return CompiledDictionary(format=format_name, version=version, separator=separator, trie=trie)


def load_dictionary(path: Path) -> CompiledDictionary:
    with open(path, 'rb') as f:
        return read_dictionary(f)
