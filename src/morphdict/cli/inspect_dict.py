#!/usr/bin/env python3
"""
mdinspect - Show what a compiled dictionary contains.

Prints the dictionary header, the fields of the companion .info file
(when present) and the number of stored entries. With --dump, entries are
decoded back to "word-form<TAB>lemma<TAB>tag" lines.

Usage:
    mdinspect build/dict/en.dict [--dump] [--limit N] [--encoder NAME]
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from morphdict.assembler import expand
from morphdict.automaton import load_dictionary
from morphdict.config import DEFAULT_ENCODER
from morphdict.encoders import ENCODERS
from morphdict.metadata import ENCODER_KEY, ENCODING_KEY, read_info


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='Inspect a compiled dictionary')
    parser.add_argument('dictionary', type=Path, help='Dictionary (.dict) file')
    parser.add_argument('--info', type=Path, default=None,
                        help='Companion .info file (default: next to the dictionary)')
    parser.add_argument('--dump', action='store_true',
                        help='Print decoded entries')
    parser.add_argument('--limit', type=int, default=None,
                        help='Print at most N entries')
    parser.add_argument('--encoder', choices=sorted(ENCODERS), type=str.lower, default=None,
                        help='Encoder used to decode lemmas (default: from the .info file)')
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for mdinspect."""
    args = parse_args(argv)

    if not args.dictionary.exists():
        print(f"Error: Dictionary not found: {args.dictionary}", file=sys.stderr)
        return 1

    try:
        dictionary = load_dictionary(args.dictionary)
    except ValueError as e:
        print(f"Error: {args.dictionary}: {e}", file=sys.stderr)
        return 1

    info_path = args.info or args.dictionary.with_suffix('.info')
    info = read_info(info_path) if info_path.exists() else {}

    print(f"Dictionary: {args.dictionary}")
    print(f"  Format:    {dictionary.format} (version {dictionary.version})")
    print(f"  Separator: {chr(dictionary.separator)!r}")
    print(f"  Entries:   {len(dictionary):,}")
    for key, value in sorted(info.items()):
        print(f"  {key}: {value}")

    if not args.dump:
        return 0

    encoder = args.encoder or info.get(ENCODER_KEY)
    if encoder is None:
        encoder = DEFAULT_ENCODER
        print(f"Note: no encoder recorded for {args.dictionary}; decoding with "
              f"'{encoder}' (use --encoder to override)", file=sys.stderr)
    encoding = info.get(ENCODING_KEY, 'utf-8')
    print()
    for count, entry in enumerate(dictionary.sequences()):
        if args.limit is not None and count >= args.limit:
            break
        word_form, lemma, tag = expand(entry, dictionary.separator, encoder)
        columns = [word_form, lemma] + ([tag] if tag is not None else [])
        print('\t'.join(c.decode(encoding, errors='replace') for c in columns))

    return 0


if __name__ == '__main__':
    sys.exit(main())
