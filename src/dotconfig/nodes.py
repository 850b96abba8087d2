# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Value helpers for ConfigTree containers.

A stored value is a scalar, ``None``, a ``list`` or a ``dict``. Containers are
never mutated once they are reachable from a ConfigTree: every helper here
that "changes" a container returns a new one and leaves the argument alone,
so untouched sub-containers can be shared between trees.

Whether a container behaves as a list or as a map is decided by looking at
its keys (see is_assoc), not by its Python type.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Iterator

from .options import PATH_SEPARATOR, CleanPolicy

_INT_KEY = re.compile(r'-?[1-9][0-9]*|0')


class _Missing:
    """Marker for a key that is not present (distinct from a stored None)."""

    __slots__ = ()

    def __repr__(self) -> str:
        return 'MISSING'


MISSING: Any = _Missing()


# ==================== Keys and paths ====================

def normalize_key(key: Any) -> int | str:
    """Return the storage form of a map key or path segment.

    Canonical decimal integers become ``int``, so ``'0'`` and ``0`` address
    the same entry. ``'01'`` and ``'-0'`` stay strings.

    Example:
        >>> normalize_key('12'), normalize_key('012'), normalize_key(3)
        (12, '012', 3)
    """
    if isinstance(key, bool):
        return int(key)
    if isinstance(key, int):
        return key
    if not isinstance(key, str):
        key = str(key)
    if _INT_KEY.fullmatch(key):
        return int(key)
    return key


def parse_path(path: str) -> list[int | str]:
    """Split a dotted path into normalized segments, dropping empty ones.

    Example:
        >>> parse_path('a..b.0.')
        ['a', 'b', 0]
        >>> parse_path('')
        []
    """
    return [normalize_key(s) for s in path.split(PATH_SEPARATOR) if s != '']


# ==================== Classification ====================

def is_container(value: Any) -> bool:
    """True for list and dict values."""
    return isinstance(value, (dict, list))


def is_assoc(value: Any) -> bool:
    """True if value is a map-like container.

    A dict is associative unless it is empty or its keys are exactly
    ``0..len-1`` in order. Lists and empty containers are never associative.
    """
    if not isinstance(value, dict) or not value:
        return False
    return any(key != i for i, key in enumerate(value))


def wrap(value: Any) -> list | dict:
    """Return value as a container: None -> [], scalar -> [value]."""
    if value is None:
        return []
    if is_container(value):
        return value
    return [value]


def iter_entries(container: list | dict) -> Iterator[tuple[int | str, Any]]:
    """Yield (key, value) pairs of a list or dict."""
    if isinstance(container, list):
        return enumerate(container)
    return iter(container.items())


# ==================== Copy-on-write primitives ====================

def settle(container: dict) -> list | dict:
    """Store a non-empty dict keyed exactly 0..n-1 as a list."""
    if container and not is_assoc(container):
        return list(container.values())
    return container


def lookup(container: Any, key: int | str) -> Any:
    """Return the entry at key, or MISSING if absent or not a container."""
    if isinstance(container, dict):
        return container.get(key, MISSING)
    if isinstance(container, list):
        if isinstance(key, int) and 0 <= key < len(container):
            return container[key]
    return MISSING


def assign(container: list | dict, key: int | str, value: Any) -> list | dict:
    """Return a copy of container with key set to value.

    Setting an existing index of a list, or index ``len``, keeps a list;
    any other key turns the list into a dict keyed by its indices. A dict
    whose keys become exactly 0..n-1 is returned as a list.
    """
    if isinstance(container, list):
        if isinstance(key, int) and 0 <= key <= len(container):
            result = list(container)
            if key == len(result):
                result.append(value)
            else:
                result[key] = value
            return result
        container = dict(enumerate(container))
    result = dict(container)
    result[key] = value
    return settle(result)


def remove(container: list | dict, key: int | str) -> list | dict:
    """Return a copy of container without key.

    Removing the last item of a list keeps a list; removing any other item
    leaves a dict keyed by the surviving indices. A dict whose remaining
    keys are exactly 0..n-1 is returned as a list.
    """
    if isinstance(container, list):
        if key == len(container) - 1:
            return container[:-1]
        container = dict(enumerate(container))
    result = dict(container)
    del result[key]
    return settle(result)


def concat(left: list | dict, right: list | dict) -> list | dict:
    """Concatenate two containers.

    Integer keys are renumbered after the ones already collected, string keys
    are set in place (the right side wins). The result is a list unless a
    string key survives.

    Example:
        >>> concat([1, 2], {'x': 3, 0: 4})
        {0: 1, 1: 2, 'x': 3, 2: 4}
    """
    result: dict[int | str, Any] = {}
    next_index = 0
    for container in (left, right):
        for key, value in iter_entries(container):
            if isinstance(key, int):
                result[next_index] = value
                next_index += 1
            else:
                result[key] = value
    if len(result) == next_index:
        return list(result.values())
    return result


# ==================== Import / export ====================

def import_value(raw: Any) -> Any:
    """Convert raw input into stored form (deep copy, normalized keys).

    Mappings become dicts (or lists, when keyed exactly 0..n-1), lists and
    tuples become lists, anything else is kept as a scalar.
    """
    if isinstance(raw, Mapping):
        return settle({normalize_key(k): import_value(v) for k, v in raw.items()})
    if isinstance(raw, (list, tuple)):
        return [import_value(v) for v in raw]
    return raw


def export_value(value: Any) -> Any:
    """Return a deep copy of a stored value that callers may freely mutate."""
    if isinstance(value, dict):
        return {k: export_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [export_value(v) for v in value]
    return value


def canonical(value: Any) -> Any:
    """Return value with every list-like container as a list.

    Two values with the same canonical form hold the same data: ``{}`` and
    ``[]`` are both the empty container, ``{0: 'a'}`` and ``['a']`` the same
    list.
    """
    if is_container(value) and not is_assoc(value):
        return [canonical(v) for _, v in iter_entries(value)]
    if isinstance(value, dict):
        return {k: canonical(v) for k, v in value.items()}
    return value


# ==================== Cleaning ====================

def _is_stripped(value: Any, policy: CleanPolicy) -> bool:
    if value is None:
        return bool(policy & CleanPolicy.NULLS)
    if is_container(value) and not value:
        return bool(policy & CleanPolicy.EMPTY)
    return False


def clean(container: list | dict, policy: CleanPolicy) -> list | dict:
    """Recursively strip nulls and/or empty containers according to policy.

    Cleaning is bottom-up, so a container emptied by the pass is itself
    removed under CleanPolicy.EMPTY. The container itself is never dropped.
    Returns the very same object when nothing had to change.
    """
    if not policy:
        return container

    changed = False
    survivors: list[tuple[int | str, Any]] = []
    for key, value in iter_entries(container):
        if is_container(value):
            cleaned = clean(value, policy)
            if cleaned is not value:
                changed = True
                value = cleaned
        if _is_stripped(value, policy):
            changed = True
            continue
        survivors.append((key, value))

    if not changed:
        return container
    if isinstance(container, list) and not survivors:
        return []
    return settle(dict(survivors))
