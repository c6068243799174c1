"""
scanner.py - Split a raw wordlist byte stream into lines and tab columns.

The stream is read in fixed-size chunks and never decoded to text:
  - CR bytes are dropped wherever they occur
  - TAB closes the current column
  - LF (or end of stream) closes the current column and the line
  - blank lines are skipped with a warning

End of stream is handled like a final LF, except that a trailing LF does
not produce a warning for the (empty) line that would follow it.
"""

import bz2
import gzip
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterator, List, Optional

from morphdict.diagnostics import BLANK_LINE, Diagnostics


CR = b'\r'
LF = b'\n'
TAB = b'\t'

DEFAULT_CHUNK_SIZE = 256 * 1024


@dataclass(frozen=True)
class RawColumns:
    """Columns of one input line, not yet validated."""

    line: int  # 1-based
    columns: List[bytes]

    def __len__(self) -> int:
        return len(self.columns)


def open_wordlist(path: Path) -> BinaryIO:
    """Open a wordlist for binary scanning, decompressing .gz/.bz2 inputs."""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == '.gz':
        return gzip.open(path, 'rb')
    if suffix == '.bz2':
        return bz2.open(path, 'rb')
    return open(path, 'rb')


def split_line(line: bytes) -> Optional[List[bytes]]:
    """Split one line (without its LF) into columns; None for a blank line."""
    if CR in line:
        line = line.replace(CR, b'')
    if not line:
        return None
    return line.split(TAB)


class ByteScanner:
    """
    Lazy sequence of RawColumns over a binary stream.

    Usage:
        scanner = ByteScanner(stream, diagnostics)
        for raw in scanner:
            ...
        scanner.line_count  # lines seen, including skipped blank ones
    """

    def __init__(
        self,
        stream: BinaryIO,
        diagnostics: Optional[Diagnostics] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE
    ):
        self.stream = stream
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.chunk_size = chunk_size
        self.line_count = 0

    def __iter__(self) -> Iterator[RawColumns]:
        line_num = 0
        # Pieces of the current, unterminated line; only new chunks are searched for LF
        pieces: List[bytes] = []

        while True:
            chunk = self.stream.read(self.chunk_size)
            if not chunk:
                break

            if LF not in chunk:
                pieces.append(chunk)
                continue

            lines = chunk.split(LF)
            if pieces:
                pieces.append(lines[0])
                lines[0] = b''.join(pieces)
            pieces = [lines.pop()]

            for line in lines:
                line_num += 1
                self.line_count = line_num
                columns = split_line(line)
                if columns is None:
                    self.diagnostics.warn(
                        BLANK_LINE, f"Ignoring empty line {line_num}.", line=line_num
                    )
                    continue
                yield RawColumns(line=line_num, columns=columns)

        # End of stream closes the last line, if anything is pending
        line_num += 1
        columns = split_line(b''.join(pieces))
        if columns is not None:
            self.line_count = line_num
            yield RawColumns(line=line_num, columns=columns)


def scan_columns(
    stream: BinaryIO,
    diagnostics: Optional[Diagnostics] = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE
) -> Iterator[RawColumns]:
    """Yield RawColumns for every non-blank line of a binary stream."""
    return iter(ByteScanner(stream, diagnostics, chunk_size))
