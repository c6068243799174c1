"""
compiler.py - Compile one tab-delimited wordlist into a dictionary file.

A compilation unit moves through these stages:

    START -> SCANNING <-> ASSEMBLING -> ORDERING -> HANDOFF -> DONE
                                                         (any) -> ABORTED

  START       open the input (InputNotFoundError)
  SCANNING    split the byte stream into lines and columns
  ASSEMBLING  validate each line and encode it as one byte sequence
  ORDERING    sort the entries, or verify a claimed sort order
  HANDOFF     build the automaton and serialize it to the output file

Scanning and assembling are interleaved line by line, but the encoded
entries of the whole file are kept in memory until the handoff.

Every fatal error rejects the whole file; no partial dictionary is written.
The output is serialized to a temporary file next to the target and renamed
over it only once complete.
"""

import logging
import os
import tempfile
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import BinaryIO, List, Optional

from morphdict.assembler import assemble
from morphdict.automaton import build, get_serializer
from morphdict.config import CompileConfig
from morphdict.diagnostics import UTF8_BOM, CompileWarning, Diagnostics
from morphdict.encoders import get_encoder
from morphdict.errors import (
    BuildFailureError,
    CompileError,
    InputNotFoundError,
    InputReadError,
)
from morphdict.ordering import enforce_order
from morphdict.progress_display import ProgressDisplay
from morphdict.scanner import ByteScanner, open_wordlist
from morphdict.validator import validate_columns


logger = logging.getLogger(__name__)

BOM_SIGNATURE = b'\xef\xbb\xbf'


class Stage(Enum):
    START = 'start'
    SCANNING = 'scanning'
    ASSEMBLING = 'assembling'
    ORDERING = 'ordering'
    HANDOFF = 'handoff'
    DONE = 'done'
    ABORTED = 'aborted'


@dataclass
class CompileResult:
    """Outcome of compiling one wordlist."""

    input_path: Path
    output_path: Path
    stage: Stage
    entry_count: int = 0
    line_count: int = 0
    warnings: List[CompileWarning] = field(default_factory=list)
    error: Optional[CompileError] = None
    failed_stage: Optional[Stage] = None
    elapsed: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error

    def to_dict(self) -> dict:
        return {
            'input': str(self.input_path),
            'output': str(self.output_path),
            'ok': self.ok,
            'stage': self.stage.value,
            'failed_stage': self.failed_stage.value if self.failed_stage else None,
            'entries': self.entry_count,
            'lines': self.line_count,
            'warnings': [w.to_dict() for w in self.warnings],
            'error': self.error.to_dict() if self.error else None,
            'elapsed_seconds': round(self.elapsed, 3),
        }


class CompilationUnit:
    """State for compiling a single input file; never shared between files."""

    def __init__(self, input_path: Path, config: CompileConfig, progress: bool = False):
        self.input_path = Path(input_path)
        self.config = config
        self.progress = progress
        self.diagnostics = Diagnostics(source=self.input_path.name)
        self.encoder = get_encoder(config.encoder)

        self.stage = Stage.START
        self.entries: List[bytes] = []
        self.line_numbers: List[int] = []
        self.line_count = 0

    def run(self, output_path: Path) -> None:
        """
        Run every stage up to DONE.

        Raises:
            CompileError: Any fatal problem; the unit is left at the failing stage
        """
        with self.open_input() as stream:
            self.collect(stream)

        self.check_bom()
        ordered = self.order()
        self.handoff(ordered, Path(output_path))
        self.stage = Stage.DONE

    def open_input(self) -> BinaryIO:
        self.stage = Stage.START
        try:
            return open_wordlist(self.input_path)
        except FileNotFoundError as e:
            raise InputNotFoundError(
                f"Input file does not exist: {self.input_path.absolute()}"
            ) from e
        except OSError as e:
            raise InputNotFoundError(
                f"Input file cannot be opened: {self.input_path.absolute()} ({e.strerror})"
            ) from e

    def collect(self, stream: BinaryIO) -> None:
        """Scan, validate and assemble every line of the input."""
        separator = self.config.separator
        synthesis = self.config.synthesis
        scanner = ByteScanner(stream, self.diagnostics)

        self.stage = Stage.SCANNING
        with ProgressDisplay(f"Compiling {self.input_path.name}", enabled=self.progress) as progress:
            try:
                for raw in scanner:
                    self.stage = Stage.ASSEMBLING
                    record = validate_columns(raw, separator, synthesis, self.diagnostics)
                    self.entries.append(assemble(record, separator, self.encoder))
                    self.line_numbers.append(record.line)
                    progress.update(Lines=raw.line, Entries=len(self.entries))
                    self.stage = Stage.SCANNING
            except (OSError, EOFError) as e:
                raise InputReadError(
                    f"Error reading {self.input_path} after line {scanner.line_count}: {e}",
                    line=scanner.line_count or None
                ) from e

        self.line_count = scanner.line_count
        logger.debug(f"{self.input_path.name}: {len(self.entries):,} entries from {self.line_count:,} lines")

    def check_bom(self) -> None:
        """Warn when the first entry starts with a UTF-8 byte-order mark."""
        if self.entries and self.entries[0].startswith(BOM_SIGNATURE):
            self.diagnostics.warn(
                UTF8_BOM,
                "Input starts with UTF-8 BOM bytes which is most likely not what you want. "
                "Use a header-less UTF-8 file (unless you are encoding plain bytes, in "
                "which case this message does not apply).",
                line=self.line_numbers[0]
            )

    def order(self) -> List[bytes]:
        self.stage = Stage.ORDERING
        return enforce_order(self.entries, self.config.assume_sorted, self.line_numbers)

    def handoff(self, entries: List[bytes], output_path: Path) -> None:
        """Build the automaton and write it atomically to output_path."""
        self.stage = Stage.HANDOFF
        serialize = get_serializer(self.config.format, self.config.separator)

        tmp_path: Optional[Path] = None
        try:
            automaton = build(entries)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                dir=output_path.parent,
                prefix=f".{output_path.name}.",
                suffix='.tmp',
                delete=False
            ) as tmp:
                tmp_path = Path(tmp.name)
                serialize(automaton, tmp)
            os.replace(tmp_path, output_path)
            tmp_path = None
        except MemoryError as e:
            raise BuildFailureError("Out of memory while building the automaton") from e
        except (OSError, ValueError) as e:
            raise BuildFailureError(f"Could not build {output_path}: {e}") from e
        finally:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)

        size_kb = output_path.stat().st_size / 1024
        logger.info(f"  Dictionary saved: {output_path} ({size_kb:.1f} KB, {len(automaton):,} sequences)")

    def result(self, output_path: Path, error: Optional[CompileError] = None,
               elapsed: float = 0.0) -> CompileResult:
        failed_stage = None
        if error is not None:
            failed_stage = self.stage
            self.stage = Stage.ABORTED
        return CompileResult(
            input_path=self.input_path,
            output_path=Path(output_path),
            stage=self.stage,
            entry_count=len(self.entries),
            line_count=self.line_count,
            warnings=list(self.diagnostics.warnings),
            error=error,
            failed_stage=failed_stage,
            elapsed=elapsed,
        )


def compile_wordlist(
    input_path: Path,
    output_path: Path,
    config: Optional[CompileConfig] = None,
    *,
    progress: bool = False
) -> CompileResult:
    """
    Compile one wordlist into a dictionary file.

    Fatal errors do not raise: they are returned on the result (call
    result.raise_for_error() to turn them back into exceptions).

    Args:
        input_path: Tab-delimited wordlist (word form, lemma, optional tag)
        output_path: Dictionary file to write
        config: Compile options (defaults to CompileConfig())
        progress: Show a live progress panel while scanning

    Returns:
        CompileResult for this unit
    """
    config = config if config is not None else CompileConfig()
    unit = CompilationUnit(input_path, config, progress=progress)

    logger.info(f"Converting {input_path} to {output_path}")
    start_time = time.time()
    try:
        unit.run(output_path)
    except CompileError as e:
        logger.error(f"{unit.input_path}: {e}")
        return unit.result(output_path, error=e, elapsed=time.time() - start_time)

    return unit.result(output_path, elapsed=time.time() - start_time)
