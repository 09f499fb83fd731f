"""
Tests for cloning arrays, sequences, mappings and sets.
"""

import array
import logging
from collections import Counter, OrderedDict, defaultdict, deque, namedtuple
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

import numpy as np

from helperkit import clone

Pair = namedtuple("Pair", "left right")


class Color(Enum):
    RED = 1
    GREEN = 2


@dataclass
class Tag:
    label: str = ""
    meta: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Point:
    x: int = 0
    y: int = 0


@dataclass
class Handler:
    name: str = ""
    callback: Any = None


class TagList(list):
    pass


class Lookup(dict):
    pass


class Registry(defaultdict):
    pass


class TestArraysAreShallow:
    """Test that arrays get a new buffer but share their elements."""

    def test_object_array_shares_elements(self):
        """Test that composites inside a numpy object array are not cloned."""
        arr = np.empty(2, dtype=object)
        arr[0] = Tag("a")
        arr[1] = [1, 2]

        copy = clone(arr)

        assert copy is not arr
        assert copy[0] is arr[0]
        assert copy[1] is arr[1]

    def test_numeric_array_is_independent(self):
        """Test that a numeric array clone owns its buffer."""
        arr = np.arange(5)
        copy = clone(arr)

        copy[0] = 99
        assert arr[0] == 0
        assert copy.dtype == arr.dtype

    def test_array_module_and_bytearray(self):
        """Test array.array and bytearray copies."""
        ints = array.array("i", [1, 2, 3])
        raw = bytearray(b"abc")

        ints_copy = clone(ints)
        raw_copy = clone(raw)

        assert ints_copy == ints and ints_copy is not ints
        assert ints_copy.typecode == "i"
        assert raw_copy == raw and raw_copy is not raw

    def test_array_copy_is_logged(self, caplog):
        """Test the debug trace naming the element type."""
        caplog.set_level(logging.DEBUG, logger="helperkit")

        clone(np.arange(3, dtype=np.int32))

        assert "ndarray of int32 shallowly at root" in caplog.text

    def test_array_vs_list_asymmetry(self):
        """Test that the same payload is shared in an array but copied in a list."""
        payload = [1, 2]
        arr = np.empty(1, dtype=object)
        arr[0] = payload

        assert clone(arr)[0] is payload
        assert clone([payload])[0] is not payload
        assert clone([payload])[0] == payload


class TestSequences:
    """Test deep cloning of lists, tuples and deques."""

    def test_list_of_composites(self):
        """Test that each element of a list is cloned."""
        tags = [Tag("a", {"k": [1]}), Tag("b")]
        copy = clone(tags)

        assert copy == tags
        assert copy[0] is not tags[0]
        assert copy[0].meta["k"] is not tags[0].meta["k"]

    def test_nested_lists(self):
        """Test that nested lists are copied at every level."""
        grid = [[1, 2], [3, [4, 5]]]
        copy = clone(grid)

        copy[1][1].append(6)
        assert grid == [[1, 2], [3, [4, 5]]]

    def test_tuple_elements_are_cloned(self):
        """Test tuples of mutable values."""
        original = ([1], Tag("t"))
        copy = clone(original)

        assert isinstance(copy, tuple)
        assert copy == original
        assert copy[0] is not original[0]
        assert copy[1] is not original[1]

    def test_namedtuple_type_is_kept(self):
        """Test that named tuples are rebuilt with their own class."""
        original = Pair([1], [2])
        copy = clone(original)

        assert type(copy) is Pair
        assert copy.left == [1]
        assert copy.left is not original.left

    def test_deque_keeps_maxlen(self):
        """Test that bounded deques stay bounded."""
        original = deque([[1], [2]], maxlen=3)
        copy = clone(original)

        assert copy.maxlen == 3
        assert list(copy) == [[1], [2]]
        assert copy[0] is not original[0]

    def test_list_subclass(self):
        """Test that list subclasses keep their type."""
        original = TagList([Tag("a")])
        copy = clone(original)

        assert type(copy) is TagList
        assert copy == original
        assert copy[0] is not original[0]

    def test_list_subclass_attributes(self):
        """Test that attributes stored on a list subclass are cloned and excludable."""
        original = TagList([Tag("a")])
        original.label = "batch"
        original.owners = ["ann"]

        copy = clone(original)

        assert copy.label == "batch"
        assert copy.owners == ["ann"]
        assert copy.owners is not original.owners

        partial = clone(original, exclude={"label"})
        assert partial.label is None
        assert partial.owners == ["ann"]
        assert partial[0].label == ""


class TestMappingsAndSets:
    """Test deep cloning of dicts and sets."""

    def test_dict_values_are_cloned_keys_are_kept(self):
        """Test that values are copied while keys are reused."""
        key = ("a", 1)
        original = {key: [1, 2]}
        copy = clone(original)

        assert copy == original
        assert copy[key] is not original[key]
        assert next(iter(copy)) is key

    def test_exclusion_does_not_touch_dict_keys(self):
        """Test that exclusions only apply to object fields."""
        original = {"name": "A", "tag": Tag("x")}
        copy = clone(original, exclude={"name", "label"})

        assert copy["name"] == "A"
        assert copy["tag"].label == ""

    def test_defaultdict(self):
        """Test that the default factory is preserved."""
        original = defaultdict(list, {"a": [1]})
        copy = clone(original)

        assert copy.default_factory is list
        copy["b"].append(2)
        assert "b" not in original
        assert copy["a"] is not original["a"]

    def test_counter_and_ordered_dict(self):
        """Test Counter and OrderedDict keep type and order."""
        counts = Counter("aab")
        ordered = OrderedDict([("z", [1]), ("a", [2])])

        assert clone(counts) == counts
        assert type(clone(counts)) is Counter

        copy = clone(ordered)
        assert type(copy) is OrderedDict
        assert list(copy) == ["z", "a"]

    def test_dict_subclass(self):
        """Test that dict subclasses keep their type."""
        original = Lookup(a=[1])
        copy = clone(original)

        assert type(copy) is Lookup
        assert copy == original
        assert copy["a"] is not original["a"]

    def test_dict_subclass_attributes(self):
        """Test that attributes stored on a dict subclass survive the clone."""
        original = Lookup(a=[1])
        original.meta = {"source": ["db"]}

        copy = clone(original)

        assert copy.meta == {"source": ["db"]}
        assert copy.meta["source"] is not original.meta["source"]
        assert "meta" not in copy
        assert clone(original, exclude={"meta"}).meta is None

    def test_defaultdict_subclass_attributes(self):
        """Test a defaultdict subclass keeps its factory and its attributes."""
        original = Registry(list, {"a": [1]})
        original.name = "jobs"

        copy = clone(original)

        assert type(copy) is Registry
        assert copy.default_factory is list
        assert copy.name == "jobs"

    def test_sets(self):
        """Test sets and frozensets of hashable composites."""
        original = {Point(1, 2), Point(3, 4)}
        frozen = frozenset(original)

        copy = clone(original)
        frozen_copy = clone(frozen)

        assert copy == original and copy is not original
        assert type(frozen_copy) is frozenset
        assert frozen_copy == frozen


class TestSharedValues:
    """Test values that are returned as-is."""

    def test_immutable_values_are_shared(self):
        """Test strings, numbers, enums, dates and decimals."""
        values = [
            "text",
            10**30,
            1.5,
            b"raw",
            Decimal("1.10"),
            datetime(2024, 1, 1),
            Color.GREEN,
            np.float64(2.5),
        ]
        for value in values:
            assert clone(value) is value

    def test_functions_and_classes_are_shared(self):
        """Test that callables are shared, also when held by a field."""
        def callback(x):
            return x

        assert clone(len) is len
        assert clone(Tag) is Tag

        copy = clone(Handler("h", callback))
        assert copy.callback is callback
