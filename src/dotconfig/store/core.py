# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""ConfigTree - An immutable dot-notation configuration store.

This module provides the ConfigTree class, the core container of the
dotconfig library. A ConfigTree holds nested dicts, lists and scalars
addressed by dotted paths, and never changes after construction: every
mutating operation returns a new tree.

Key Features:
    - **Path navigation**: Dotted paths ('a.b.c'), integer segments for list
      items ('servers.0.host')
    - **Immutability**: with_(), without(), append(), subtract(), merge() and
      split() return new trees; untouched sub-containers are shared
    - **Cleaning policy**: Nulls and/or empty containers are stripped after
      every change, according to a CleanPolicy fixed at construction
    - **Merge strategies**: REPLACE, KEEP and APPEND
    - **Serialization**: pickle support and a JSON text form, both restoring
      the cleaning policy

Path Syntax:
    - Dotted paths: 'parent.child.grandchild'
    - Empty segments are ignored: 'a..b.' == 'a.b'
    - Integer segments: 'items.0' (first list item, or map key 0)

Example:
    Basic usage::

        config = ConfigTree({'database': {'host': 'localhost'}})
        config = config.with_('database.port', 5432)

        print(config['database.port'])  # 5432
        print(config.get('database.user', 'admin'))  # 'admin'

    Merging::

        defaults = ConfigTree({'plugins': ['core'], 'debug': False})
        local = defaults.merge({'plugins': ['extra']}, MergeStrategy.APPEND)
        print(local['plugins'])  # ['core', 'extra']
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Iterator

from ..exceptions import DeserializationError, ImmutableTreeError
from ..nodes import (
    MISSING,
    assign,
    canonical,
    clean,
    concat,
    export_value,
    import_value,
    is_assoc,
    is_container,
    iter_entries,
    lookup,
    parse_path,
    remove,
    settle,
    wrap,
)
from ..options import DEFAULT_POLICY, CleanPolicy, MergeStrategy, as_policy
from .merging import merge_containers

logger = logging.getLogger(__name__)


class ConfigTree:
    """An immutable tree of configuration values with dotted path access.

    ConfigTree provides:
    - get(path, default) / tree[path]: Read values
    - has(path) / path in tree: Check existence (a stored None counts)
    - with_(path, value) / without(path): Derive a tree with a value set/removed
    - append(path, value) / subtract(path, value): List-style edits
    - merge(other, strategy): Recursive merge with another tree or raw data
    - split(path): Derive a tree rooted at a sub-path
    - count(): Number of leaves

    The root is always a dict. Values returned by get(), to_dict() and
    iteration are copies: changing them never changes the tree.

    Example:
        >>> tree = ConfigTree({'a': {'b': 'c'}})
        >>> tree.with_('a.d', 1).to_dict()
        {'a': {'b': 'c', 'd': 1}}
        >>> tree.to_dict()
        {'a': {'b': 'c'}}
    """

    __slots__ = ('_root', '_policy')

    def __init__(
        self,
        source: Mapping | list | tuple | ConfigTree | None = None,
        policy: CleanPolicy | int = DEFAULT_POLICY,
    ) -> None:
        """Initialize a ConfigTree.

        Args:
            source: Optional initial data. Can be:
                - dict (any Mapping): nested data, copied
                - list/tuple: items stored under their indices 0..n-1
                - ConfigTree: share the data of another tree
            policy: CleanPolicy flags applied now and after every change.
                Defaults to CleanPolicy.NULLS.

        Raises:
            TypeError: If source is not a Mapping, list, tuple or ConfigTree.
            ValueError: If policy is not a combination of CleanPolicy flags.

        Example:
            >>> ConfigTree({'a': 1, 'b': None}).to_dict()
            {'a': 1}
            >>> ConfigTree({'b': None}, policy=CleanPolicy.NONE).to_dict()
            {'b': None}
        """
        self._policy = as_policy(policy)
        self._root = self._settle_root(self._load_source(source), self._policy)

    @staticmethod
    def _load_source(source: Any) -> list | dict:
        """Convert a constructor source into stored form."""
        if source is None:
            return {}
        if isinstance(source, ConfigTree):
            return source._root
        if isinstance(source, Mapping):
            return import_value(source)
        if isinstance(source, (list, tuple)):
            return import_value(source)
        raise TypeError(
            f"source must be dict, list, or ConfigTree, not {type(source).__name__}"
        )

    def _derive(self, root: list | dict) -> ConfigTree:
        """Build a tree with the same policy around an already stored root."""
        tree = object.__new__(type(self))
        tree._policy = self._policy
        tree._root = self._settle_root(root, self._policy)
        return tree

    @staticmethod
    def _settle_root(root: list | dict, policy: CleanPolicy) -> dict:
        """Clean root and key a list-like result by its indices."""
        root = clean(root, policy)
        if isinstance(root, list):
            return dict(enumerate(root))
        return root

    # ==================== Special Methods ====================

    def __repr__(self) -> str:
        """Return string representation showing top-level keys and policy."""
        return f"ConfigTree({list(self._root.keys())}, policy={self._policy!r})"

    def __len__(self) -> int:
        """Return the number of top-level entries."""
        return len(self._root)

    def __iter__(self) -> Iterator[tuple[int | str, Any]]:
        """Iterate over (key, value) pairs at the top level.

        Each call starts a fresh iteration, so dict(tree) works.
        """
        return self.iter_items()

    def __contains__(self, path: Any) -> bool:
        """Check if a dotted path exists (same as has())."""
        return self.has(str(path))

    def __getitem__(self, path: Any) -> Any:
        """Get value by dotted path.

        Raises:
            KeyError: If path not found.

        Example:
            >>> ConfigTree({'a': {'b': 1}})['a.b']
            1
        """
        value = self._resolve(parse_path(str(path)))
        if value is MISSING:
            raise KeyError(path)
        return export_value(value)

    def __setitem__(self, path: Any, value: Any) -> None:
        raise ImmutableTreeError(
            f"ConfigTree is immutable, use with_({path!r}, value) to derive a new tree"
        )

    def __delitem__(self, path: Any) -> None:
        raise ImmutableTreeError(
            f"ConfigTree is immutable, use without({path!r}) to derive a new tree"
        )

    def __eq__(self, other: object) -> bool:
        """Same policy and same data; {} and [] are both the empty container."""
        if not isinstance(other, ConfigTree):
            return NotImplemented
        return (
            self._policy == other._policy
            and canonical(self._root) == canonical(other._root)
        )

    __hash__ = None  # type: ignore[assignment]

    @property
    def policy(self) -> CleanPolicy:
        """The cleaning policy shared by this tree and every tree derived from it."""
        return self._policy

    # ==================== Path Utilities ====================

    def _resolve(self, segments: list[int | str]) -> Any:
        """Walk segments from the root; MISSING if any step fails."""
        current: Any = self._root
        for segment in segments:
            current = lookup(current, segment)
            if current is MISSING:
                return MISSING
        return current

    @staticmethod
    def _assign_path(
        container: list | dict, segments: list[int | str], value: Any
    ) -> list | dict:
        """Return container with value stored at segments, creating maps as needed.

        Intermediate entries that are missing or not containers are replaced
        by empty dicts. Only the containers along the path are copied.
        """
        key = segments[0]
        if len(segments) == 1:
            return assign(container, key, value)
        child = lookup(container, key)
        if not is_container(child):
            child = {}
        return assign(container, key, ConfigTree._assign_path(child, segments[1:], value))

    @staticmethod
    def _remove_path(container: list | dict, segments: list[int | str]) -> list | dict:
        """Return container without the entry at segments (itself if absent)."""
        key = segments[0]
        child = lookup(container, key)
        if child is MISSING:
            return container
        if len(segments) == 1:
            return remove(container, key)
        if not is_container(child):
            return container
        new_child = ConfigTree._remove_path(child, segments[1:])
        if new_child is child:
            return container
        return assign(container, key, new_child)

    def _set_stored(self, segments: list[int | str], value: Any) -> ConfigTree:
        """with_() for a value already in stored form."""
        if not segments:
            return self._derive(self._root)
        if value is None and self._policy & CleanPolicy.NULLS:
            return self._derive(self._remove_path(self._root, segments))
        return self._derive(self._assign_path(self._root, segments, value))

    # ==================== Core API ====================

    def get(self, path: str, default: Any = None) -> Any:
        """Get the value at the given path.

        Args:
            path: Dotted path. An empty path returns the whole root.
            default: Value returned when the path does not resolve.

        Returns:
            A copy of the value at path, or default.

        Example:
            >>> tree = ConfigTree({'a': {'b': 'c'}, 's': 'x'})
            >>> tree.get('a.b'), tree.get('a.z', 0), tree.get('s.foo')
            ('c', 0, None)
        """
        value = self._resolve(parse_path(path))
        if value is MISSING:
            return default
        return export_value(value)

    def has(self, path: str) -> bool:
        """Return True if path resolves, even to a stored None.

        Example:
            >>> tree = ConfigTree({'a': None}, policy=CleanPolicy.NONE)
            >>> tree.has('a'), tree.has('b')
            (True, False)
        """
        return self._resolve(parse_path(path)) is not MISSING

    def with_(self, path: str, value: Any) -> ConfigTree:
        """Return a new tree with value stored at path.

        Missing intermediate entries, and intermediate entries holding
        scalars, are replaced by maps. With CleanPolicy.NULLS a None value
        removes the entry instead. An empty path returns an equal tree.

        Args:
            path: Dotted path to the value.
            value: Scalar, None, or nested dict/list (copied), or a ConfigTree
                whose data is stored.

        Returns:
            The new ConfigTree.

        Example:
            >>> ConfigTree({'a': 'x'}).with_('a.b.c', 1).to_dict()
            {'a': {'b': {'c': 1}}}
        """
        if isinstance(value, ConfigTree):
            value = value._root
        else:
            value = import_value(value)
        return self._set_stored(parse_path(path), value)

    set = with_

    def without(self, path: str) -> ConfigTree:
        """Return a new tree without the entry at path.

        Missing paths leave the data unchanged. Parents emptied by the
        removal are pruned only under CleanPolicy.EMPTY.

        Example:
            >>> tree = ConfigTree({'a': {'b': 1}})
            >>> tree.without('a.b').to_dict()
            {'a': {}}
            >>> ConfigTree({'a': {'b': 1}}, policy=CleanPolicy.ALL).without('a.b').to_dict()
            {}
        """
        segments = parse_path(path)
        if not segments:
            return self._derive(self._root)
        return self._derive(self._remove_path(self._root, segments))

    unset = without

    def append(self, path: str, value: Any) -> ConfigTree:
        """Return a new tree with value (or each item of a list) appended at path.

        A missing entry starts as an empty list; a scalar entry is promoted to
        a one-item list.

        Example:
            >>> ConfigTree({'a': {'b': 'v1'}}).append('a.b', 'v2').to_dict()
            {'a': {'b': ['v1', 'v2']}}
            >>> ConfigTree().append('x', ['v1', 'v2']).to_dict()
            {'x': ['v1', 'v2']}
        """
        segments = parse_path(path)
        original = self._resolve(segments)
        if original is MISSING:
            original = []
        combined = concat(wrap(original), wrap(import_value(value)))
        return self._set_stored(segments, combined)

    def subtract(self, path: str, value: Any) -> ConfigTree:
        """Return a new tree with value (or each item of a list) removed at path.

        Every entry equal to one of the removed values is dropped. Lists are
        re-indexed; maps keep the keys of the remaining entries. If path does
        not hold a container, an equal tree is returned.

        Example:
            >>> ConfigTree({'a': ['v1', 'v2', 'v3']}).subtract('a', 'v2').to_dict()
            {'a': ['v1', 'v3']}
            >>> ConfigTree({'a': {'k1': 'v1', 'k2': 'v2'}}).subtract('a', 'v1').to_dict()
            {'a': {'k2': 'v2'}}
        """
        segments = parse_path(path)
        original = self._resolve(segments)
        if not is_container(original):
            return self._derive(self._root)

        to_remove = [v for _, v in iter_entries(wrap(import_value(value)))]
        if is_assoc(original):
            result: list | dict = settle({
                k: v for k, v in original.items() if v not in to_remove
            })
        else:
            result = [v for _, v in iter_entries(original) if v not in to_remove]
        return self._set_stored(segments, result)

    def merge(
        self,
        other: Mapping | list | tuple | ConfigTree | None,
        strategy: MergeStrategy | int = MergeStrategy.REPLACE,
    ) -> ConfigTree:
        """Return a new tree with other merged in.

        Maps are merged recursively; other values are resolved by strategy
        (see dotconfig.store.merging). A None in other behaves like
        without() for that key when the policy strips nulls.

        Args:
            other: A ConfigTree, raw nested data, or None (no change).
            strategy: MergeStrategy.REPLACE (default), KEEP or APPEND.

        Raises:
            TypeError: If other is not a Mapping, list, tuple, ConfigTree or None.

        Example:
            >>> base = ConfigTree({'a': 1, 'b': {'c': 2}})
            >>> base.merge({'b': {'c': 3, 'd': 4}}).to_dict()
            {'a': 1, 'b': {'c': 3, 'd': 4}}
            >>> base.merge({'a': 9, 'e': 5}, MergeStrategy.KEEP).to_dict()
            {'a': 1, 'b': {'c': 2}, 'e': 5}
        """
        strategy = MergeStrategy(strategy)
        if other is None:
            replacement: list | dict = {}
        elif isinstance(other, ConfigTree):
            replacement = other._root
        elif isinstance(other, (Mapping, list, tuple)):
            replacement = import_value(other)
        else:
            raise TypeError(
                f"other must be dict, list, or ConfigTree, not {type(other).__name__}"
            )

        logger.debug("Merging %d top-level keys with %s", len(replacement), strategy.name)
        return self._derive(merge_containers(self._root, replacement, strategy))

    def split(self, path: str) -> ConfigTree:
        """Return a new tree rooted at path.

        A missing path gives an empty tree; a scalar becomes {0: value}.

        Example:
            >>> tree = ConfigTree({'a': {'b': {'c': 'value'}}, 'g': 'scalar'})
            >>> tree.split('a.b').to_dict()
            {'c': 'value'}
            >>> tree.split('g').to_dict()
            {0: 'scalar'}
        """
        value = self._resolve(parse_path(path))
        if value is MISSING:
            value = {}
        elif not is_container(value):
            value = [value]
        logger.debug("Splitting tree at %r", path)
        return self._derive(value)

    def count(self) -> int:
        """Return the number of leaves.

        Maps are recursed into; scalars, None, lists and empty containers
        count as one leaf each.

        Example:
            >>> ConfigTree({'a': {'b': 'c'}, 'd': [1, 2, 3], 'e': 'f'}).count()
            3
        """
        def _count(container: dict) -> int:
            total = 0
            for value in container.values():
                total += _count(value) if is_assoc(value) else 1
            return total

        return _count(self._root)

    # ==================== Iteration ====================

    def iter_keys(self) -> Iterator[int | str]:
        """Yield top-level keys in insertion order."""
        yield from self._root

    def iter_values(self) -> Iterator[Any]:
        """Yield copies of top-level values in insertion order."""
        for value in self._root.values():
            yield export_value(value)

    def iter_items(self) -> Iterator[tuple[int | str, Any]]:
        """Yield (key, value) pairs in insertion order."""
        for key, value in self._root.items():
            yield key, export_value(value)

    def keys(self) -> list[int | str]:
        """Return list of top-level keys in insertion order."""
        return list(self.iter_keys())

    def values(self) -> list[Any]:
        """Return list of top-level values in insertion order."""
        return list(self.iter_values())

    def items(self) -> list[tuple[int | str, Any]]:
        """Return list of (key, value) pairs in insertion order."""
        return list(self.iter_items())

    # ==================== Conversion ====================

    def to_dict(self) -> dict[int | str, Any]:
        """Return the whole tree as a plain nested dict (a deep copy)."""
        return export_value(self._root)

    to_raw = to_dict

    # ==================== Serialization ====================

    def __getstate__(self) -> dict[str, Any]:
        """Return picklable state: the data and the cleaning policy."""
        return {'data': export_value(self._root), 'policy': int(self._policy)}

    def __setstate__(self, state: Any) -> None:
        """Restore from __getstate__() output.

        Raises:
            DeserializationError: If state is malformed.
        """
        root, policy = self._parse_state(state)
        self._policy = policy
        self._root = self._settle_root(root, policy)

    def dumps(self, **kwargs: Any) -> str:
        """Serialize to JSON text; kwargs are passed to json.dumps.

        Integer map keys are written as strings and read back as integers.
        """
        return json.dumps(self.__getstate__(), **kwargs)

    @classmethod
    def loads(cls, text: str | bytes) -> ConfigTree:
        """Restore a tree from dumps() output.

        Raises:
            DeserializationError: If text is not valid JSON or not a stored tree.

        Example:
            >>> tree = ConfigTree({'a': [1, 2]}, policy=CleanPolicy.ALL)
            >>> ConfigTree.loads(tree.dumps()) == tree
            True
        """
        try:
            state = json.loads(text)
        except ValueError as exc:
            logger.debug("Invalid ConfigTree JSON: %s", exc)
            raise DeserializationError(f"Invalid ConfigTree JSON: {exc}") from exc
        tree = object.__new__(cls)
        tree.__setstate__(state)
        return tree

    @staticmethod
    def _parse_state(state: Any) -> tuple[list | dict, CleanPolicy]:
        """Validate stored state, returning (root, policy)."""
        if not isinstance(state, Mapping) or set(state) != {'data', 'policy'}:
            logger.debug("Rejected ConfigTree state: %r", state)
            raise DeserializationError(
                "ConfigTree state must be a mapping with 'data' and 'policy'"
            )
        data, policy = state['data'], state['policy']
        if not isinstance(data, Mapping):
            raise DeserializationError(
                f"ConfigTree data must be a mapping, not {type(data).__name__}"
            )
        try:
            policy = as_policy(policy)
        except ValueError as exc:
            raise DeserializationError(str(exc)) from exc
        return import_value(data), policy
