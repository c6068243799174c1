"""
batch.py - Compile a set of wordlists into dictionaries.

For every input file:
  - derive <output_dir>/<package dirs>/<name>.dict and <name>.info
  - skip it when both outputs are newer than the input (unless forced)
  - compile it, and write the .info file only if compilation succeeded

Each file is its own compilation unit: a failure is recorded on that
file's outcome and the remaining files are still compiled. Units share
no state, so they can also be fanned out over worker processes.
"""

import hashlib
import logging
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import orjson

from morphdict.compiler import CompileResult, Stage, compile_wordlist
from morphdict.config import CompileConfig
from morphdict.errors import BuildFailureError, ConfigError
from morphdict.metadata import write_info


logger = logging.getLogger(__name__)

DICT_SUFFIX = '.dict'
INFO_SUFFIX = '.info'

COMPILED = 'compiled'
UP_TO_DATE = 'up-to-date'
FAILED = 'failed'


@dataclass
class BuildOutcome:
    """What happened to one input file in a batch."""

    input_path: Path
    dict_path: Path
    info_path: Path
    status: str
    result: Optional[CompileResult] = None

    @property
    def ok(self) -> bool:
        return self.status != FAILED

    def to_dict(self) -> Dict:
        entry = {
            'input': str(self.input_path),
            'dict': str(self.dict_path),
            'info': str(self.info_path),
            'status': self.status,
        }
        if self.result is not None:
            entry['result'] = self.result.to_dict()
        if self.ok and self.dict_path.exists():
            entry['size_bytes'] = self.dict_path.stat().st_size
            entry['sha256'] = compute_sha256(self.dict_path)
        return entry


def compute_sha256(filepath: Path) -> str:
    sha256 = hashlib.sha256()
    with open(filepath, 'rb') as f:
        while chunk := f.read(8192):
            sha256.update(chunk)
    return sha256.hexdigest()


def collect_inputs(input_file: Optional[Path] = None, input_dir: Optional[Path] = None) -> List[Path]:
    """A single input file, or every regular file below input_dir (sorted)."""
    if input_file is not None:
        return [Path(input_file)]
    if input_dir is None or not Path(input_dir).is_dir():
        return []
    return sorted(p for p in Path(input_dir).rglob('*') if p.is_file())


def output_paths(
    input_path: Path,
    output_dir: Path,
    package: Optional[str] = None,
    output_name: Optional[str] = None
) -> Tuple[Path, Path]:
    """
    Dictionary and info paths for an input file.

    A dotted package name becomes nested directories; output_name replaces
    the input's base name. Parent directories are created.
    """
    target_dir = Path(output_dir)
    if package:
        target_dir = target_dir.joinpath(*package.split('.'))
    target_dir.mkdir(parents=True, exist_ok=True)

    base = output_name if output_name else Path(input_path).stem
    return target_dir / f"{base}{DICT_SUFFIX}", target_dir / f"{base}{INFO_SUFFIX}"


def is_up_to_date(input_path: Path, dict_path: Path, info_path: Path) -> bool:
    """True when both outputs exist and are at least as new as the input."""
    if not input_path.exists() or not dict_path.exists() or not info_path.exists():
        return False
    modified = input_path.stat().st_mtime
    return modified <= dict_path.stat().st_mtime and modified <= info_path.stat().st_mtime


def compile_one(
    input_path: Path,
    dict_path: Path,
    info_path: Path,
    config: CompileConfig,
    progress: bool = False
) -> BuildOutcome:
    """Compile one file and write its .info on success."""
    result = compile_wordlist(input_path, dict_path, config, progress=progress)
    if not result.ok:
        return BuildOutcome(input_path, dict_path, info_path, FAILED, result)

    try:
        write_info(info_path, config)
    except OSError as e:
        error = BuildFailureError(f"Could not write {info_path}: {e}")
        logger.error(f"{input_path}: {error}")
        result = replace(result, stage=Stage.ABORTED, failed_stage=Stage.HANDOFF, error=error)
        return BuildOutcome(input_path, dict_path, info_path, FAILED, result)

    return BuildOutcome(input_path, dict_path, info_path, COMPILED, result)


def failed_outcome(input_path: Path, dict_path: Path, info_path: Path, error: BuildFailureError) -> BuildOutcome:
    """Outcome for a file whose compilation never produced a result."""
    result = CompileResult(
        input_path=Path(input_path),
        output_path=Path(dict_path),
        stage=Stage.ABORTED,
        error=error,
    )
    return BuildOutcome(input_path, dict_path, info_path, FAILED, result)


def build_all(
    inputs: Sequence[Path],
    output_dir: Path,
    config: CompileConfig,
    package: Optional[str] = None,
    output_name: Optional[str] = None,
    force: bool = False,
    jobs: int = 1,
    progress: bool = False
) -> List[BuildOutcome]:
    """
    Compile every input that is not up to date.

    Args:
        inputs: Wordlist files
        output_dir: Root directory for generated dictionaries
        config: Compile options shared by all files
        package: Optional dotted package name (becomes subdirectories)
        output_name: Base name for the outputs (single input only)
        force: Compile even if the outputs are up to date
        jobs: Worker processes (1 compiles in this process)
        progress: Show a live progress panel (sequential builds only)

    Returns:
        One BuildOutcome per input, in input order
    """
    if output_name and len(inputs) > 1:
        raise ConfigError("An output name can only be used with a single input file")

    outcomes: Dict[int, BuildOutcome] = {}
    pending: List[Tuple[int, Path, Path, Path]] = []

    for index, input_path in enumerate(inputs):
        input_path = Path(input_path)
        logger.info(f"processing {input_path.absolute()}")
        dict_path, info_path = output_paths(input_path, output_dir, package, output_name)

        if not force and is_up_to_date(input_path, dict_path, info_path):
            logger.info(f"  {dict_path} is up to date.")
            outcomes[index] = BuildOutcome(input_path, dict_path, info_path, UP_TO_DATE)
            continue
        pending.append((index, input_path, dict_path, info_path))

    if jobs > 1 and len(pending) > 1:
        with ProcessPoolExecutor(max_workers=jobs) as executor:
            futures = {
                index: (executor.submit(compile_one, input_path, dict_path, info_path, config),
                        input_path, dict_path, info_path)
                for index, input_path, dict_path, info_path in pending
            }
            for index, (future, input_path, dict_path, info_path) in futures.items():
                try:
                    outcomes[index] = future.result()
                except Exception as e:
                    # Worker crashed (or raised something unpicklable)
                    logger.error(f"{input_path}: worker failed: {e!r}")
                    outcomes[index] = failed_outcome(
                        input_path, dict_path, info_path,
                        BuildFailureError(f"Worker failed while compiling {input_path}: {e!r}")
                    )
    else:
        for index, input_path, dict_path, info_path in pending:
            outcomes[index] = compile_one(input_path, dict_path, info_path, config, progress)

    ordered = [outcomes[i] for i in range(len(inputs))]
    failed = sum(1 for o in ordered if not o.ok)
    logger.info(
        f"Batch complete: {len(ordered) - failed:,} ok, {failed:,} failed "
        f"({sum(1 for o in ordered if o.status == UP_TO_DATE):,} up to date)"
    )
    return ordered


def write_report(outcomes: Sequence[BuildOutcome], path: Path, config: Optional[CompileConfig] = None) -> None:
    """Write a JSON report of a batch run."""
    report = {
        'config': config.to_dict() if config is not None else None,
        'files': [o.to_dict() for o in outcomes],
        'summary': {
            COMPILED: sum(1 for o in outcomes if o.status == COMPILED),
            UP_TO_DATE: sum(1 for o in outcomes if o.status == UP_TO_DATE),
            FAILED: sum(1 for o in outcomes if o.status == FAILED),
        },
    }
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'wb') as f:
        f.write(orjson.dumps(report, option=orjson.OPT_INDENT_2))
    logger.info(f"Report written: {path}")
