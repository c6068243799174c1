#!/usr/bin/env python3
"""
mdcompile - Compile tab-delimited wordlists into dictionaries.

Each input line is "word-form<TAB>lemma[<TAB>tag]". Every input file
produces <name>.dict (the serialized automaton) and <name>.info (its
metadata) under the output directory.

Usage:
    mdcompile INPUT --output-dir DIR [options]
    mdcompile --input-dir DIR --output-dir DIR [options]

Example:
    mdcompile --input-dir wordlists \\
              --output-dir build/dict \\
              --package org.example.dict --encoder suffix --report build/report.json
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from morphdict.automaton import FORMAT_IDS
from morphdict.batch import build_all, collect_inputs, write_report
from morphdict.encoders import ENCODERS
from morphdict.errors import ConfigError
from morphdict.config import load_config


logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Compile tab-delimited wordlists into morphological dictionaries",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('input', type=Path, nargs='?',
                        help='Input wordlist (omit to compile --input-dir)')
    parser.add_argument('--input-dir', type=Path, default=Path('wordlists'),
                        help='Directory of wordlists, searched recursively '
                             '(default: wordlists)')
    parser.add_argument('--output-dir', type=Path, required=True,
                        help='Directory for generated .dict and .info files')
    parser.add_argument('--package', default=None,
                        help='Dotted package name; becomes subdirectories of the output dir')
    parser.add_argument('--output-name', default=None,
                        help='Base name of the outputs (single input only)')
    parser.add_argument('--config', type=Path, default=None,
                        help='YAML file with compile options (flags override it)')
    parser.add_argument('--separator', default=None,
                        help="Annotation separator character, escapes allowed (default: '+')")
    parser.add_argument('--encoder', choices=sorted(ENCODERS), type=str.lower, default=None,
                        help='Lemma diff encoder (default: suffix)')
    parser.add_argument('--format', choices=sorted(FORMAT_IDS), type=str.lower, default=None,
                        help='Dictionary serialization format (default: marisa)')
    parser.add_argument('--kind', default=None,
                        help='Dictionary kind: standard or synthesis (default: standard)')
    parser.add_argument('--encoding', default=None,
                        help='Encoding of the input files (default: UTF-8)')
    parser.add_argument('--assume-sorted', action='store_true', default=None,
                        help='Input is already sorted: verify the order instead of sorting')
    parser.add_argument('--force', action='store_true',
                        help='Compile even when outputs are up to date')
    parser.add_argument('--skip', action='store_true',
                        help='Do nothing (useful to disable a build step)')
    parser.add_argument('--jobs', type=int, default=1,
                        help='Number of worker processes (default: 1)')
    parser.add_argument('--report', type=Path, default=None,
                        help='Write a JSON report of the run')
    parser.add_argument('--progress', action='store_true',
                        help='Show a live progress panel while scanning')
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for mdcompile."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    args = parse_args(argv)

    if args.skip:
        logger.info("Skipping dictionary compilation")
        return 0

    try:
        config = load_config(
            args.config,
            separator=args.separator,
            encoder=args.encoder,
            format=args.format,
            kind=args.kind,
            encoding=args.encoding,
            assume_sorted=args.assume_sorted,
        )
    except FileNotFoundError as e:
        logger.error(f"Config file not found: {e.filename}")
        return 1
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    if args.input is None and not args.input_dir.is_dir():
        logger.error(f"Input directory not found: {args.input_dir}")
        return 1

    inputs = collect_inputs(input_file=args.input, input_dir=args.input_dir)
    if not inputs:
        logger.warning(f"No wordlists found in {args.input_dir}")

    logger.info("Dictionary compilation")
    logger.info(f"  Inputs:  {len(inputs):,}")
    logger.info(f"  Output:  {args.output_dir}")
    logger.info(f"  Encoder: {config.encoder}, format: {config.format}, kind: {config.kind}")

    try:
        outcomes = build_all(
            inputs,
            args.output_dir,
            config,
            package=args.package,
            output_name=args.output_name,
            force=args.force,
            jobs=max(1, args.jobs),
            progress=args.progress,
        )
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    if args.report:
        write_report(outcomes, args.report, config)

    failed = [o for o in outcomes if not o.ok]
    for outcome in failed:
        logger.error(f"FAILED {outcome.input_path}: {outcome.result.error}")

    return 1 if failed else 0


if __name__ == '__main__':
    sys.exit(main())
