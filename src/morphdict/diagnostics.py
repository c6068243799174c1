"""
Recoverable warnings collected while compiling one wordlist.

Warnings never abort a compilation unit. Each one is kept on the
Diagnostics instance (so results can report them) and logged.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional


logger = logging.getLogger(__name__)

BLANK_LINE = 'blank-line'
TWO_COLUMNS = 'two-columns'
UTF8_BOM = 'utf8-bom'


@dataclass(frozen=True)
class CompileWarning:
    """A single non-fatal diagnostic."""

    kind: str
    message: str
    line: Optional[int] = None

    def to_dict(self) -> dict:
        return {'kind': self.kind, 'message': self.message, 'line': self.line}


class Diagnostics:
    """Warning channel for one compilation unit."""

    def __init__(self, source: Optional[str] = None):
        self.source = source
        self.warnings: List[CompileWarning] = []

    def warn(self, kind: str, message: str, line: Optional[int] = None) -> CompileWarning:
        warning = CompileWarning(kind=kind, message=message, line=line)
        self.warnings.append(warning)
        if self.source:
            logger.warning(f"{self.source}: {message}")
        else:
            logger.warning(message)
        return warning

    def kinds(self) -> List[str]:
        return [w.kind for w in self.warnings]

    def __len__(self) -> int:
        return len(self.warnings)

    def __iter__(self):
        return iter(self.warnings)
