# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Cleaning policy and merge strategy options."""

from __future__ import annotations

import enum

PATH_SEPARATOR = '.'


class CleanPolicy(enum.IntFlag):
    """Which values the cleaning pass strips after every structural change.

    Example:
        >>> from dotconfig import ConfigTree
        >>> ConfigTree({'a': None, 'b': []}, policy=CleanPolicy.ALL).to_dict()
        {}
    """

    NONE = 0
    NULLS = 1
    EMPTY = 2
    ALL = NULLS | EMPTY


class MergeStrategy(enum.IntEnum):
    """How merge() resolves a key present on both sides."""

    REPLACE = 1  # replacement value wins
    KEEP = 2     # existing value wins, new keys are still added
    APPEND = 3   # lists are concatenated, scalars promoted to lists


DEFAULT_POLICY = CleanPolicy.NULLS


def as_policy(value: CleanPolicy | int) -> CleanPolicy:
    """Return value as a CleanPolicy.

    Raises:
        ValueError: If value is not an int combining CleanPolicy flags.
    """
    if not isinstance(value, int) or isinstance(value, bool) or not 0 <= value <= CleanPolicy.ALL:
        raise ValueError(f"Invalid cleaning policy: {value!r}")
    return CleanPolicy(value)
