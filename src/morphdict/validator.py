"""
validator.py - Turn raw columns into a structurally valid Record.

Rules, applied in order:
  1. a line has 2 or 3 columns (word form, lemma, optional tag)
  2. 2-column lines are reported in standard dictionaries; synthesis
     dictionaries expect them
  3. neither the word form nor the lemma contains the separator byte
"""

from dataclasses import dataclass
from typing import Optional

from morphdict.diagnostics import TWO_COLUMNS, Diagnostics
from morphdict.errors import MalformedRecordError, ReservedByteConflictError
from morphdict.scanner import RawColumns


MIN_COLUMNS = 2
MAX_COLUMNS = 3


@dataclass(frozen=True)
class Record:
    """A validated (word form, lemma, tag) triple."""

    word_form: bytes
    lemma: bytes
    tag: Optional[bytes] = None
    line: int = 0


def validate_columns(
    raw: RawColumns,
    separator: int,
    synthesis: bool = False,
    diagnostics: Optional[Diagnostics] = None
) -> Record:
    """
    Validate one scanned line.

    Args:
        raw: Columns of the line and its 1-based line number
        separator: Reserved separator byte value (e.g. ord('+'))
        synthesis: True for synthesis dictionaries (2 columns are normal)
        diagnostics: Warning channel (a private one is used if omitted)

    Raises:
        MalformedRecordError: Column count is not 2 or 3
        ReservedByteConflictError: Word form or lemma contains the separator
    """
    count = len(raw.columns)
    if count < MIN_COLUMNS or count > MAX_COLUMNS:
        raise MalformedRecordError(
            f"Line {raw.line} must contain 2 or 3 columns, has {count}",
            line=raw.line,
            column_count=count
        )

    if count == MIN_COLUMNS and not synthesis:
        if diagnostics is None:
            diagnostics = Diagnostics()
        diagnostics.warn(TWO_COLUMNS, f"Line {raw.line} has {count} columns", line=raw.line)

    word_form = raw.columns[0]
    lemma = raw.columns[1]
    if separator in word_form or separator in lemma:
        raise ReservedByteConflictError(
            f"Word or lemma in line {raw.line} contains the annotation byte "
            f"'{chr(separator)}'",
            line=raw.line
        )

    tag = raw.columns[2] if count == MAX_COLUMNS else None
    return Record(word_form=word_form, lemma=lemma, tag=tag, line=raw.line)
