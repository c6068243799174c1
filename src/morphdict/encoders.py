"""
encoders.py - Diff-encode a lemma relative to its word form.

Each strategy is a plain function:

    encode(source, target, out)   appends the encoding of target to out
    decode(source, encoded)       returns target

Encodings start with a fixed number of code bytes, each 'A' + n (mod 256),
followed by the literal tail of the target:

  - none:   no codes, the whole target
  - suffix: [drop N bytes from the end of source]
  - prefix: [drop P bytes from the start] [drop S bytes from the end]
  - infix:  [infix index I] [infix length L] [drop S bytes from the end]

A count of 255 (REMOVE_EVERYTHING) means "discard the whole source" and is
used when a count would not fit in one byte.
"""

from typing import Callable, Dict

from morphdict.errors import ConfigError


REMOVE_EVERYTHING = 255
CODE_BASE = ord('A')

Encoder = Callable[[bytes, bytes, bytearray], None]
Decoder = Callable[[bytes, bytes], bytes]


def _code(n: int) -> int:
    return (n + CODE_BASE) & 0xFF


def _count(code: int) -> int:
    return (code - CODE_BASE) & 0xFF


def shared_prefix_length(a: bytes, b: bytes, a_start: int = 0) -> int:
    """Length of the common prefix of a[a_start:] and b."""
    limit = min(len(a) - a_start, len(b))
    i = 0
    while i < limit and a[a_start + i] == b[i]:
        i += 1
    return i


# =============================================================================
# Encoders
# =============================================================================

def encode_none(source: bytes, target: bytes, out: bytearray) -> None:
    """Store the target verbatim."""
    out += target


def encode_suffix(source: bytes, target: bytes, out: bytearray) -> None:
    """Trim a suffix of the source, then append the rest of the target."""
    shared = shared_prefix_length(source, target)
    truncate = len(source) - shared
    if truncate >= REMOVE_EVERYTHING:
        truncate = REMOVE_EVERYTHING
        shared = 0

    out.append(_code(truncate))
    out += target[shared:]


def encode_prefix(source: bytes, target: bytes, out: bytearray) -> None:
    """Trim a prefix and a suffix of the source, then append the rest."""
    # Longest run of source (starting anywhere) that prefixes the target
    max_length = 0
    max_index = 0
    for i in range(len(source)):
        shared = shared_prefix_length(source, target, a_start=i)
        if (shared > max_length
                and i < REMOVE_EVERYTHING
                and len(source) - (i + shared) < REMOVE_EVERYTHING):
            max_length = shared
            max_index = i

    truncate_prefix = max_index
    truncate_suffix = len(source) - (max_index + max_length)
    if truncate_prefix >= REMOVE_EVERYTHING or truncate_suffix >= REMOVE_EVERYTHING:
        max_length = 0
        truncate_prefix = truncate_suffix = REMOVE_EVERYTHING

    out.append(_code(truncate_prefix))
    out.append(_code(truncate_suffix))
    out += target[max_length:]


def encode_infix(source: bytes, target: bytes, out: bytearray) -> None:
    """Remove an infix and a suffix of the source, then append the rest."""
    max_index = 0
    max_infix = 0
    max_length = shared_prefix_length(source, target)

    # Infixes are tried at the start and right after the shared prefix
    for i in (0, max_length):
        for j in range(1, len(source) - i + 1):
            candidate = source[:i] + source[i + j:]
            shared = shared_prefix_length(candidate, target)
            if (shared > 0
                    and shared > max_length
                    and i < REMOVE_EVERYTHING
                    and j < REMOVE_EVERYTHING):
                max_length = shared
                max_index = i
                max_infix = j

    truncate_suffix = len(source) - (max_infix + max_length)

    # An "infix" that runs to the end is really a suffix
    if truncate_suffix == 0 and max_index + max_infix == len(source):
        truncate_suffix = max_infix
        max_index = max_infix = 0

    if (max_index >= REMOVE_EVERYTHING
            or max_infix >= REMOVE_EVERYTHING
            or truncate_suffix >= REMOVE_EVERYTHING):
        max_index = max_length = 0
        max_infix = truncate_suffix = REMOVE_EVERYTHING

    out.append(_code(max_index))
    out.append(_code(max_infix))
    out.append(_code(truncate_suffix))
    out += target[max_length:]


# =============================================================================
# Decoders
# =============================================================================

def decode_none(source: bytes, encoded: bytes) -> bytes:
    return bytes(encoded)


def decode_suffix(source: bytes, encoded: bytes) -> bytes:
    truncate = _count(encoded[0])
    if truncate == REMOVE_EVERYTHING:
        return bytes(encoded[1:])
    return source[:len(source) - truncate] + encoded[1:]


def decode_prefix(source: bytes, encoded: bytes) -> bytes:
    truncate_prefix = _count(encoded[0])
    truncate_suffix = _count(encoded[1])
    if truncate_prefix == REMOVE_EVERYTHING or truncate_suffix == REMOVE_EVERYTHING:
        return bytes(encoded[2:])
    return source[truncate_prefix:len(source) - truncate_suffix] + encoded[2:]


def decode_infix(source: bytes, encoded: bytes) -> bytes:
    index = _count(encoded[0])
    length = _count(encoded[1])
    truncate_suffix = _count(encoded[2])
    if length == REMOVE_EVERYTHING or truncate_suffix == REMOVE_EVERYTHING:
        return bytes(encoded[3:])
    base = source[:index] + source[index + length:]
    return base[:len(base) - truncate_suffix] + encoded[3:]


ENCODERS: Dict[str, Encoder] = {
    'none': encode_none,
    'suffix': encode_suffix,
    'prefix': encode_prefix,
    'infix': encode_infix,
}

DECODERS: Dict[str, Decoder] = {
    'none': decode_none,
    'suffix': decode_suffix,
    'prefix': decode_prefix,
    'infix': decode_infix,
}

# Number of leading code bytes in an encoding
CODE_WIDTH: Dict[str, int] = {
    'none': 0,
    'suffix': 1,
    'prefix': 2,
    'infix': 3,
}


def normalize_encoder_name(name: str) -> str:
    """Map a user-supplied encoder name (any case) to its registry key."""
    key = name.strip().lower()
    if key not in ENCODERS:
        raise ConfigError(
            f"Invalid encoder: {name}, allowed values: {sorted(ENCODERS)}"
        )
    return key


def get_encoder(name: str) -> Encoder:
    return ENCODERS[normalize_encoder_name(name)]


def get_decoder(name: str) -> Decoder:
    return DECODERS[normalize_encoder_name(name)]
