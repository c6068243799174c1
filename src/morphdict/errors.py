"""
Error types raised while compiling a wordlist.

Every fatal problem aborts the whole compilation unit (one input file).
Errors carry the offending 1-based line number when it can be derived.
"""

from typing import Optional


class ConfigError(ValueError):
    """Raised when compile options are invalid."""

    pass


class CompileError(Exception):
    """Base class for errors that abort a compilation unit."""

    kind = "CompileError"

    def __init__(self, message: str, line: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.line = line

    def to_dict(self) -> dict:
        return {'kind': self.kind, 'message': self.message, 'line': self.line}


class InputNotFoundError(CompileError):
    """The input wordlist could not be opened."""

    kind = "InputNotFound"


class InputReadError(CompileError):
    """An I/O error occurred while reading the input wordlist."""

    kind = "InputReadFailure"


class MalformedRecordError(CompileError):
    """A line does not have 2 or 3 tab-separated columns."""

    kind = "MalformedRecord"

    def __init__(self, message: str, line: Optional[int] = None,
                 column_count: Optional[int] = None):
        super().__init__(message, line)
        self.column_count = column_count

    def to_dict(self) -> dict:
        result = super().to_dict()
        result['column_count'] = self.column_count
        return result


class ReservedByteConflictError(CompileError):
    """A word form or lemma contains the separator byte."""

    kind = "ReservedByteConflict"


class UnsortedInputError(CompileError):
    """Input claimed to be sorted is not in byte-lexical order."""

    kind = "UnsortedInput"


class BuildFailureError(CompileError):
    """Automaton construction or serialization failed."""

    kind = "BuildFailure"
