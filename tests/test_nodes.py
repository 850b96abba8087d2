# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Tests for value helpers and container merging."""

import pytest

from dotconfig import CleanPolicy, MergeStrategy
from dotconfig.nodes import (
    MISSING,
    assign,
    canonical,
    clean,
    concat,
    import_value,
    is_assoc,
    lookup,
    normalize_key,
    parse_path,
    remove,
    settle,
    wrap,
)
from dotconfig.store import merge_containers


class TestKeysAndPaths:
    """Tests for key normalization and path parsing."""

    @pytest.mark.parametrize('key,expected', [
        ('name', 'name'),
        ('0', 0),
        ('42', 42),
        ('-3', -3),
        ('01', '01'),
        ('-0', '-0'),
        ('1.5', '1.5'),
        (7, 7),
        (True, 1),
    ])
    def test_normalize_key(self, key, expected):
        """Test canonical integers become int keys."""
        assert normalize_key(key) == expected
        assert type(normalize_key(key)) is type(expected)

    def test_parse_path_drops_empty_segments(self):
        """Test leading, trailing and doubled dots are ignored."""
        assert parse_path('a..b.') == ['a', 'b']
        assert parse_path('.a') == ['a']
        assert parse_path('') == []
        assert parse_path('...') == []

    def test_parse_path_integer_segments(self):
        """Test integer segments are normalized."""
        assert parse_path('servers.0.host') == ['servers', 0, 'host']


class TestClassification:
    """Tests for is_assoc() and wrap()."""

    @pytest.mark.parametrize('value,expected', [
        ({'a': 1}, True),
        ({0: 'a', 1: 'b'}, False),
        ({1: 'a', 0: 'b'}, True),
        ({0: 'a', 2: 'b'}, True),
        ({}, False),
        ([], False),
        (['a', 'b'], False),
        ('scalar', False),
        (None, False),
    ])
    def test_is_assoc(self, value, expected):
        """Test the list/map heuristic."""
        assert is_assoc(value) is expected

    def test_wrap(self):
        """Test wrap() on null, scalars and containers."""
        assert wrap(None) == []
        assert wrap('a') == ['a']
        assert wrap(0) == [0]
        assert wrap(False) == [False]
        container = {'k': 'v'}
        assert wrap(container) is container


class TestCopyOnWrite:
    """Tests for lookup(), assign() and remove()."""

    def test_lookup(self):
        """Test lookup on dicts, lists and scalars."""
        assert lookup({'a': None}, 'a') is None
        assert lookup({'a': 1}, 'b') is MISSING
        assert lookup(['x', 'y'], 1) == 'y'
        assert lookup(['x', 'y'], 2) is MISSING
        assert lookup(['x', 'y'], -1) is MISSING
        assert lookup(['x', 'y'], 'a') is MISSING
        assert lookup('scalar', 'a') is MISSING

    def test_assign_does_not_modify_argument(self):
        """Test assign() returns a new container."""
        original = {'a': 1}
        result = assign(original, 'b', 2)
        assert result == {'a': 1, 'b': 2}
        assert original == {'a': 1}

    def test_assign_list(self):
        """Test assigning into a list keeps it a list only for index <= len."""
        assert assign(['x', 'y'], 0, 'z') == ['z', 'y']
        assert assign(['x', 'y'], 2, 'z') == ['x', 'y', 'z']
        assert assign(['x', 'y'], 5, 'z') == {0: 'x', 1: 'y', 5: 'z'}
        assert assign(['x'], 'k', 'z') == {0: 'x', 'k': 'z'}

    def test_remove_list(self):
        """Test removing the last item keeps a list, others leave a dict."""
        assert remove(['x', 'y', 'z'], 2) == ['x', 'y']
        assert remove(['x', 'y', 'z'], 1) == {0: 'x', 2: 'z'}

    def test_remove_dict(self):
        original = {'a': 1, 'b': 2}
        assert remove(original, 'a') == {'b': 2}
        assert original == {'a': 1, 'b': 2}


class TestSettleAndCanonical:
    """Tests for settle() and canonical()."""

    def test_settle(self):
        assert settle({0: 'x', 1: 'y'}) == ['x', 'y']
        assert settle({0: 'x', 2: 'y'}) == {0: 'x', 2: 'y'}
        assert settle({}) == {}

    def test_index_keyed_results_become_lists(self):
        """Test helpers store dicts keyed 0..n-1 as lists."""
        assert assign({0: 'x'}, 1, 'y') == ['x', 'y']
        assert remove({0: 'x', 2: 'z'}, 2) == ['x']
        assert import_value({'0': 'a', '1': 'b'}) == ['a', 'b']
        assert clean([None], CleanPolicy.NULLS) == []

    def test_canonical(self):
        assert canonical({'a': {}, 'b': {0: 'x'}}) == {'a': [], 'b': ['x']}
        assert canonical({0: 'x', 2: 'y'}) == {0: 'x', 2: 'y'}
        assert canonical('x') == 'x'


class TestConcat:
    """Tests for concat()."""

    def test_lists(self):
        assert concat([1, 2], [3]) == [1, 2, 3]

    def test_integer_keys_renumbered(self):
        """Test integer keys continue after the left side."""
        assert concat({0: 'a', 5: 'b'}, [3]) == ['a', 'b', 3]

    def test_string_keys_right_wins(self):
        """Test string keys are overwritten by the right side."""
        assert concat({'k': 1, 'j': 2}, {'k': 3}) == {'k': 3, 'j': 2}

    def test_mixed_keys(self):
        assert concat([1, 2], {'x': 3, 0: 4}) == {0: 1, 1: 2, 'x': 3, 2: 4}

    def test_empty(self):
        assert concat([], []) == []


class TestImport:
    """Tests for import_value()."""

    def test_converts_tuples_and_keys(self):
        """Test tuples become lists and integer-like keys become ints."""
        raw = {'a': ('x', 'y'), '3': {'01': 1}}
        assert import_value(raw) == {'a': ['x', 'y'], 3: {'01': 1}}

    def test_deep_copy(self):
        """Test imported containers are not the input objects."""
        inner = ['x']
        raw = {'a': inner}
        result = import_value(raw)
        assert result['a'] == inner
        assert result['a'] is not inner


class TestClean:
    """Tests for clean()."""

    def test_strips_nulls(self):
        assert clean({'a': None, 'b': {'c': None}}, CleanPolicy.NULLS) == {'b': {}}

    def test_strips_empty_bottom_up(self):
        """Test containers emptied by cleaning are removed too."""
        data = {'a': None, 'b': {'c': None}, 'd': [], 'e': 1}
        assert clean(data, CleanPolicy.ALL) == {'e': 1}

    def test_empty_only_keeps_nulls(self):
        assert clean({'a': None, 'b': {}}, CleanPolicy.EMPTY) == {'a': None}

    def test_null_inside_list_leaves_gap(self):
        """Test a list losing an inner item becomes a dict."""
        assert clean([1, None, 2], CleanPolicy.NULLS) == {0: 1, 2: 2}
        assert clean([1, 2, None], CleanPolicy.NULLS) == [1, 2]

    def test_unchanged_is_same_object(self):
        """Test nothing is copied when nothing is stripped."""
        data = {'a': {'b': [1, 2]}, 'c': 'x'}
        assert clean(data, CleanPolicy.ALL) is data
        assert clean({'a': None}, CleanPolicy.NONE) == {'a': None}

    def test_shares_untouched_children(self):
        """Test only containers on the changed path are rebuilt."""
        untouched = {'x': 1}
        data = {'keep': untouched, 'drop': None}
        result = clean(data, CleanPolicy.NULLS)
        assert result == {'keep': {'x': 1}}
        assert result['keep'] is untouched


class TestMergeContainers:
    """Tests for merge_containers()."""

    def test_adds_missing_keys(self):
        assert merge_containers({'a': 1}, {'b': 2}) == {'a': 1, 'b': 2}

    def test_recurses_into_maps(self):
        base = {'db': {'host': 'a', 'port': 1}}
        assert merge_containers(base, {'db': {'host': 'b'}}) == {
            'db': {'host': 'b', 'port': 1}
        }

    def test_lists_replaced_as_a_whole(self):
        assert merge_containers({'a': [1, 2]}, {'a': [3]}) == {'a': [3]}

    def test_keep(self):
        """Test KEEP never overwrites but still adds new keys."""
        base = {'a': 1, 'b': {'c': 2}}
        result = merge_containers(base, {'a': 9, 'b': {'c': 9, 'd': 4}}, MergeStrategy.KEEP)
        assert result == {'a': 1, 'b': {'c': 2, 'd': 4}}

    def test_append_scalars_replaced(self):
        """Test APPEND only concatenates when a container is involved."""
        assert merge_containers({'a': 'x'}, {'a': 'y'}, MergeStrategy.APPEND) == {'a': 'y'}
        assert merge_containers({'a': 'x'}, {'a': ['y']}, MergeStrategy.APPEND) == {
            'a': ['x', 'y']
        }

    def test_arguments_not_modified(self):
        base = {'a': {'b': 1}}
        replacement = {'a': {'c': 2}}
        merge_containers(base, replacement)
        assert base == {'a': {'b': 1}}
        assert replacement == {'a': {'c': 2}}

    def test_returns_base_when_unchanged(self):
        base = {'a': 1}
        assert merge_containers(base, {}) is base
        assert merge_containers(base, {'a': 2}, MergeStrategy.KEEP) is base
