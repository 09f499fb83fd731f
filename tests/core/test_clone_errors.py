"""
Tests for clone failures: unsupported values and runaway depth.
"""

import io
import threading
from dataclasses import dataclass
from typing import Any

import pytest

from helperkit import (
    CloneError,
    CloneOptions,
    Cloner,
    RecursionLimitExceededError,
    UnsupportedTypeError,
    clone,
)


@dataclass
class Node:
    value: Any = None
    next: "Node | None" = None


@dataclass
class Holder:
    name: str = ""
    handle: Any = None


class NeedsArgs:
    def __new__(cls, value):
        instance = super().__new__(cls)
        instance.value = value
        return instance


class BadRepr:
    def __repr__(self):
        raise RuntimeError("repr is broken")


def chain(length):
    head = None
    for i in reversed(range(length)):
        head = Node(value=i, next=head)
    return head


class TestUnsupportedTypes:
    """Test values the cloner refuses to copy."""

    def test_lock_at_root(self):
        """Test a lock passed directly."""
        with pytest.raises(UnsupportedTypeError, match="resource handles") as exc_info:
            clone(threading.Lock())

        assert exc_info.value.path == "root"
        assert isinstance(exc_info.value, TypeError)
        assert isinstance(exc_info.value, CloneError)

    def test_lock_inside_mapping(self):
        """Test that the error names the mapping key."""
        with pytest.raises(UnsupportedTypeError) as exc_info:
            clone({"lock": threading.Lock()})

        assert exc_info.value.path == "root['lock']"
        assert "(at root['lock'])" in str(exc_info.value)

    def test_open_stream_in_field(self):
        """Test that the error names the field."""
        with pytest.raises(UnsupportedTypeError) as exc_info:
            clone(Holder("h", io.StringIO("data")))

        assert exc_info.value.path == "root.handle"
        assert exc_info.value.value_type is io.StringIO

    def test_generator_in_list(self):
        """Test a generator inside a list."""
        with pytest.raises(UnsupportedTypeError) as exc_info:
            clone([1, (x for x in range(3))])

        assert exc_info.value.path == "root[1]"

    def test_object_without_fields(self):
        """Test values exposing neither __dict__ nor __slots__."""
        with pytest.raises(UnsupportedTypeError, match="no introspectable fields"):
            clone(object())

    def test_class_that_cannot_be_allocated_blank(self):
        """Test classes whose __new__ requires arguments."""
        with pytest.raises(UnsupportedTypeError, match="cannot allocate") as exc_info:
            clone([NeedsArgs(1)])

        assert exc_info.value.path == "root[0]"

    def test_failed_clone_leaves_source_untouched(self):
        """Test that a failing clone does not modify its input."""
        original = Holder("h", [threading.Lock()])

        with pytest.raises(UnsupportedTypeError):
            clone(original)

        assert original.name == "h"
        assert len(original.handle) == 1


class TestUnprintableKeys:
    """Test mapping keys and set members whose repr raises."""

    def test_mapping_key(self):
        """Test that a key is only rendered when an error needs its path."""
        key = BadRepr()
        original = {key: [1, 2]}

        copy = clone(original)

        assert copy[key] == [1, 2]
        assert copy[key] is not original[key]

    def test_set_member(self):
        """Test a set holding a member with a failing repr."""
        copy = clone({BadRepr()})

        assert len(copy) == 1
        assert isinstance(next(iter(copy)), BadRepr)

    def test_error_path_falls_back_to_type_name(self):
        """Test that the failing path still names the key's type."""
        with pytest.raises(UnsupportedTypeError) as exc_info:
            clone({BadRepr(): threading.Lock()})

        assert exc_info.value.path.startswith("root[<BadRepr instance at ")


class TestExceptionValues:
    """Test that exception instances are refused."""

    def test_exception_at_root(self):
        """Test an exception passed directly."""
        with pytest.raises(UnsupportedTypeError, match="exception state") as exc_info:
            clone(ValueError("boom"))

        assert exc_info.value.value_type is ValueError
        assert exc_info.value.path == "root"

    def test_exception_in_field(self):
        """Test that the error names the field holding the exception."""
        with pytest.raises(UnsupportedTypeError) as exc_info:
            clone(Holder("h", KeyError("missing")))

        assert exc_info.value.path == "root.handle"


class TestRecursionLimits:
    """Test depth guards and cyclic graphs."""

    def test_self_referencing_record(self):
        """Test that a cycle fails at the interpreter limit without max_depth."""
        node = Node(value="loop")
        node.next = node

        with pytest.raises(RecursionLimitExceededError) as exc_info:
            clone(node)

        assert exc_info.value.max_depth is None
        assert isinstance(exc_info.value, RecursionError)

    def test_self_containing_list(self):
        """Test a list that contains itself."""
        items = []
        items.append(items)

        with pytest.raises(RecursionLimitExceededError):
            clone(items)

    def test_cycle_with_max_depth(self):
        """Test that a configured guard trips first with depth and path."""
        node = Node(value="loop")
        node.next = node

        with pytest.raises(RecursionLimitExceededError, match="max_depth=10") as exc_info:
            clone(node, options=CloneOptions(max_depth=10))

        assert exc_info.value.depth == 11
        assert exc_info.value.max_depth == 10
        assert exc_info.value.path == "root" + ".next" * 11

    def test_depth_boundary(self):
        """Test that the deepest node sits exactly at max_depth."""
        head = chain(3)

        copy = clone(head, options=CloneOptions(max_depth=2))
        assert copy == head

        with pytest.raises(RecursionLimitExceededError) as exc_info:
            clone(head, options=CloneOptions(max_depth=1))
        assert exc_info.value.depth == 2
        assert exc_info.value.path == "root.next.next"

    def test_shared_values_do_not_count(self):
        """Test that strings and numbers below the limit are fine."""
        assert clone(Node(value="leaf"), options=CloneOptions(max_depth=0)) == Node(value="leaf")
        assert clone([1, "a"], options=CloneOptions(max_depth=0)) == [1, "a"]

        with pytest.raises(RecursionLimitExceededError) as exc_info:
            clone([[1]], options=CloneOptions(max_depth=0))
        assert exc_info.value.path == "root[0]"


class TestCloneOptions:
    """Test option validation."""

    def test_negative_depth(self):
        """Test that negative depths are rejected."""
        with pytest.raises(ValueError, match=">= 0"):
            CloneOptions(max_depth=-1)

    def test_non_integer_depth(self):
        """Test that booleans and floats are rejected."""
        with pytest.raises(TypeError):
            CloneOptions(max_depth=True)
        with pytest.raises(TypeError):
            CloneOptions(max_depth=2.5)

    def test_default_depth_follows_environment(self, monkeypatch):
        """Test that HELPERKIT_CLONE_MAX_DEPTH bounds clones without explicit options."""
        monkeypatch.setenv("HELPERKIT_CLONE_MAX_DEPTH", "1")

        assert Cloner().options.max_depth == 1
        with pytest.raises(RecursionLimitExceededError, match="max_depth=1"):
            clone(chain(3))

    def test_explicit_options_win_over_environment(self, monkeypatch):
        """Test that passed options are used as given."""
        monkeypatch.setenv("HELPERKIT_CLONE_MAX_DEPTH", "1")

        assert clone(chain(3), options=CloneOptions(max_depth=5)) == chain(3)
