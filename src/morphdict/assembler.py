"""
assembler.py - Build the flat byte sequence stored for one Record.

Layout of an encoded entry:

    word_form SEP encode(word_form, lemma) SEP [tag]

The word form and lemma never contain SEP (checked by the validator); the
diff codes written by the encoder may, so splitting an entry back relies on
the encoder's fixed code width rather than on searching for SEP.
"""

from typing import Optional, Tuple

from morphdict.encoders import CODE_WIDTH, Encoder, get_decoder, normalize_encoder_name
from morphdict.validator import Record


def assemble(record: Record, separator: int, encoder: Encoder) -> bytes:
    """Encode one record as a single byte sequence."""
    out = bytearray(record.word_form)
    out.append(separator)
    encoder(record.word_form, record.lemma, out)
    out.append(separator)
    if record.tag is not None:
        out += record.tag
    return bytes(out)


def disassemble(entry: bytes, separator: int, encoder_name: str) -> Tuple[bytes, bytes, bytes]:
    """
    Split an encoded entry into (word_form, encoded_lemma, tag).

    The tag is b'' when the entry was assembled without one.

    Raises:
        ValueError: The entry does not have the assembled layout
    """
    width = CODE_WIDTH[normalize_encoder_name(encoder_name)]

    word_end = entry.find(separator)
    if word_end < 0:
        raise ValueError(f"No separator in entry {entry!r}")

    lemma_start = word_end + 1
    tag_sep = entry.find(separator, lemma_start + width)
    if tag_sep < 0:
        raise ValueError(f"Missing tag separator in entry {entry!r}")

    return entry[:word_end], entry[lemma_start:tag_sep], entry[tag_sep + 1:]


def expand(entry: bytes, separator: int, encoder_name: str) -> Tuple[bytes, bytes, Optional[bytes]]:
    """Recover (word_form, lemma, tag) from an encoded entry; tag is None if empty."""
    word_form, encoded, tag = disassemble(entry, separator, encoder_name)
    lemma = get_decoder(encoder_name)(word_form, encoded)
    return word_form, lemma, tag or None
