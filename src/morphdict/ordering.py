"""
ordering.py - Put encoded entries into canonical byte-lexical order.

Two modes:
  - sort:   stable sort of all entries (duplicates are kept)
  - verify: the input claims to be sorted; the first pair out of order
            aborts the unit with UnsortedInputError

Python compares bytes as unsigned values with shorter-is-less on common
prefixes, which is exactly the order the automaton builder requires.
"""

import logging
from typing import List, Optional, Sequence

from morphdict.errors import UnsortedInputError


logger = logging.getLogger(__name__)


def sort_entries(entries: Sequence[bytes]) -> List[bytes]:
    """Return the entries in byte-lexical order."""
    return sorted(entries)


def find_order_violation(entries: Sequence[bytes]) -> Optional[int]:
    """Index of the first entry that sorts before its predecessor, or None."""
    for i in range(1, len(entries)):
        if entries[i - 1] > entries[i]:
            return i
    return None


def is_sorted(entries: Sequence[bytes]) -> bool:
    return find_order_violation(entries) is None


def verify_order(entries: Sequence[bytes], line_numbers: Optional[Sequence[int]] = None) -> None:
    """
    Check that entries are already in non-decreasing order.

    Args:
        entries: Encoded entries in input order
        line_numbers: Source line of each entry (used in the error)

    Raises:
        UnsortedInputError: An entry sorts before the one preceding it
    """
    index = find_order_violation(entries)
    if index is None:
        return

    if line_numbers is not None:
        line = line_numbers[index]
        raise UnsortedInputError(f"Input is not sorted (line {line}).", line=line)
    raise UnsortedInputError(f"Input is not sorted (entry {index + 1}).")


def enforce_order(
    entries: List[bytes],
    assume_sorted: bool,
    line_numbers: Optional[Sequence[int]] = None
) -> List[bytes]:
    """Sort the entries, or verify them when the input is assumed sorted."""
    if assume_sorted:
        verify_order(entries, line_numbers)
        logger.debug(f"Verified order of {len(entries):,} entries")
        return entries

    logger.debug(f"Sorting {len(entries):,} entries")
    return sort_entries(entries)
