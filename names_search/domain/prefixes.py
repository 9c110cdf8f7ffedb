from __future__ import annotations

from typing import Set, Tuple

# Names this short are never indexed, and no prefix is shorter than this plus one.
MIN_INDEXED_NAME_LENGTH = 4
PREFIX_SEED_LENGTH = 2


def expand_prefixes(name: str) -> Set[Tuple[str, str]]:
    """
    Expand a package name into the (prefix, name) pairs stored in the index.

    Prefixes grow one character at a time from length 3 up to ``len(name) - 1``;
    the full name is only ever a member, never a key of its own. Names of three
    characters or fewer produce nothing.
    """
    if len(name) < MIN_INDEXED_NAME_LENGTH:
        return set()

    pairs: Set[Tuple[str, str]] = set()
    prefix = name[:PREFIX_SEED_LENGTH]
    for char in name[PREFIX_SEED_LENGTH:-1]:
        prefix += char
        pairs.add((prefix, name))
    return pairs
