# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Recursive merge of ConfigTree containers.

Merging walks the replacement side key by key:

- a key missing from the base is copied in
- two associative values (see nodes.is_assoc) are merged recursively
- anything else is resolved by the MergeStrategy:

    REPLACE  the replacement value overwrites the base value
    KEEP     the base value is kept
    APPEND   if either side is a container, both are wrapped and
             concatenated (base first); two scalars are replaced

Lists are never merged index by index: they are replaced, kept or appended
as a whole.
"""

from __future__ import annotations

from typing import Any

from ..nodes import assign, concat, is_assoc, is_container, iter_entries, lookup, MISSING, wrap
from ..options import MergeStrategy


def merge_containers(
    base: list | dict,
    replacement: list | dict,
    strategy: MergeStrategy = MergeStrategy.REPLACE,
) -> list | dict:
    """Return base merged with replacement; neither argument is modified.

    Args:
        base: The container being merged into.
        replacement: The container whose entries are merged in.
        strategy: How to resolve keys present on both sides.

    Returns:
        A new container, or base itself when nothing changed.

    Example:
        >>> merge_containers({'a': [1]}, {'a': [2], 'b': 3}, MergeStrategy.APPEND)
        {'a': [1, 2], 'b': 3}
    """
    result = base
    for key, value in iter_entries(replacement):
        current = lookup(result, key)

        if current is MISSING:
            result = assign(result, key, value)
            continue

        if is_assoc(current) and is_assoc(value):
            merged = merge_containers(current, value, strategy)
            if merged is not current:
                result = assign(result, key, merged)
            continue

        resolved = _resolve(current, value, strategy)
        if resolved is not current:
            result = assign(result, key, resolved)
    return result


def _resolve(current: Any, value: Any, strategy: MergeStrategy) -> Any:
    """Pick the value stored for a key present on both sides."""
    if strategy == MergeStrategy.KEEP:
        return current
    if strategy == MergeStrategy.APPEND and (is_container(current) or is_container(value)):
        return concat(wrap(current), wrap(value))
    return value
