"""
Object graph cloning utilities for helperkit.

This module provides a deep clone that walks an object graph field by field
through the introspection registry, with an optional list of field names to
leave out of the copy.

Notes:
    - Arrays (``numpy.ndarray``, ``array.array``, ``bytearray``) are copied
      shallowly: object elements are shared with the source. Lists, tuples,
      deques, dicts and sets are copied deeply. Attributes stored on list and
      dict subclass instances are cloned like composite fields.
    - No visited set is kept. A cyclic graph recurses until ``max_depth`` or
      the interpreter's recursion limit and fails with
      ``RecursionLimitExceededError``.
    - The cloner holds no state between calls. Concurrent calls are safe as
      long as nobody mutates the source graph while it is being cloned.
"""

from __future__ import annotations

import array
import logging
import reprlib
from collections import Counter, OrderedDict, defaultdict, deque
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import numpy as np

from .errors import RecursionLimitExceededError, UnsupportedTypeError
from .introspection import MISSING, FieldDescriptor, IntrospectionRegistry, default_registry
from .kinds import TypeTag

if TYPE_CHECKING:
    from .settings import HelperSettings

logger = logging.getLogger(__name__)

__all__ = ["CloneOptions", "Cloner", "clone", "clone_many"]


@dataclass
class CloneOptions:
    """
    Options controlling a clone call.

    Attributes:
        max_depth: Deepest level that may be copied (the top-level value is
            depth 0; each element, mapping value or field adds one). None
            leaves depth bounded only by the interpreter's recursion limit.
    """

    max_depth: int | None = None

    def __post_init__(self) -> None:
        if self.max_depth is not None:
            if isinstance(self.max_depth, bool) or not isinstance(self.max_depth, int):
                raise TypeError(f"max_depth must be int or None, got {self.max_depth!r}")
            if self.max_depth < 0:
                raise ValueError("max_depth must be >= 0")

    @classmethod
    def from_settings(cls, settings: HelperSettings | None = None) -> CloneOptions:
        """Build options from loaded settings (loads defaults and environment if omitted)."""
        if settings is None:
            from .settings import load_settings

            settings = load_settings()
        return cls(max_depth=settings.clone_max_depth)


def _normalize_exclude(exclude: Iterable[str] | str | None) -> frozenset[str]:
    if not exclude:
        return frozenset()
    if isinstance(exclude, str):
        return frozenset((exclude,))
    return frozenset(exclude)


class _Path:
    """Location of a value inside the source graph, rendered only on demand."""

    __slots__ = ("parent", "kind", "step")

    def __init__(self, parent: _Path | None, kind: str, step: Any):
        self.parent = parent
        self.kind = kind
        self.step = step

    def attr(self, name: str) -> _Path:
        return _Path(self, "attr", name)

    def index(self, i: int) -> _Path:
        return _Path(self, "index", i)

    def key(self, key: Any) -> _Path:
        return _Path(self, "key", key)

    def member(self, item: Any) -> _Path:
        return _Path(self, "member", item)

    def _render(self) -> str:
        if self.kind == "attr":
            return f".{self.step}"
        if self.kind == "index":
            return f"[{self.step}]"
        if self.kind == "key":
            return f"[{reprlib.repr(self.step)}]"
        if self.kind == "member":
            return f"{{{reprlib.repr(self.step)}}}"
        return str(self.step)

    def __str__(self) -> str:
        parts = []
        node: _Path | None = self
        while node is not None:
            parts.append(node._render())
            node = node.parent
        return "".join(reversed(parts))


class Cloner:
    """
    Deep cloner driven by a type introspection registry.

    **Use Cases:**
    - Producing independent copies of nested records before mutating them
    - Copying a record while dropping sensitive or cached fields
    - Cloning third-party types by registering a custom introspector

    **Example Usage:**
        ```python
        from dataclasses import dataclass, field
        from helperkit.core.clone import Cloner, CloneOptions

        @dataclass
        class Record:
            name: str = ""
            tags: list[str] = field(default_factory=list)

        cloner = Cloner(CloneOptions(max_depth=32))
        copy = cloner.clone(Record("A", ["x", "y"]), exclude={"name"})
        # copy.name == "" and copy.tags == ["x", "y"]
        ```
    """

    def __init__(
        self,
        options: CloneOptions | None = None,
        registry: IntrospectionRegistry | None = None,
    ):
        self.options = options or CloneOptions.from_settings()
        self.registry = registry or default_registry

    def clone(self, instance: Any, exclude: Iterable[str] | str | None = ()) -> Any:
        """
        Return a deep copy of ``instance``.

        Args:
            instance: Any value; None is returned unchanged
            exclude: Field names left at their zero value on every composite
                in the graph (matched by stored or public name)

        Returns:
            A structurally independent copy of ``instance``

        Raises:
            UnsupportedTypeError: If some value in the graph cannot be introspected
            RecursionLimitExceededError: If the graph is deeper than allowed or cyclic
        """
        if instance is None:
            return None
        excluded = _normalize_exclude(exclude)
        try:
            return self._clone(instance, excluded, 0, _Path(None, "root", "root"))
        except RecursionLimitExceededError:
            raise
        except RecursionError as e:
            raise RecursionLimitExceededError() from e

    def _clone(self, value: Any, exclude: frozenset[str], depth: int, path: _Path) -> Any:
        if value is None:
            return None

        try:
            tag = self.registry.classify(value)
        except UnsupportedTypeError as e:
            if e.path:
                raise
            raise UnsupportedTypeError(e.value_type, path, e.reason) from None

        if tag.is_shared:
            return value

        max_depth = self.options.max_depth
        if max_depth is not None and depth > max_depth:
            raise RecursionLimitExceededError(depth, max_depth, path)

        if tag is TypeTag.ARRAY:
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(
                    "Copying %s of %s shallowly at %s",
                    type(value).__name__,
                    self.registry.element_kind(value),
                    path,
                )
            return self._clone_array(value)
        if tag is TypeTag.SEQUENCE:
            return self._clone_sequence(value, exclude, depth, path)
        if tag is TypeTag.MAPPING:
            return self._clone_mapping(value, exclude, depth, path)
        if tag is TypeTag.SET:
            return type(value)(
                self._clone(item, exclude, depth + 1, path.member(item)) for item in value
            )
        return self._clone_composite(value, exclude, depth, path)

    def _clone_array(self, value: Any) -> Any:
        # Elements are shared, only the buffer is new
        if isinstance(value, np.ndarray):
            return value.copy()
        if isinstance(value, array.array):
            return type(value)(value.typecode, value)
        return type(value)(value)

    def _clone_sequence(
        self, value: Any, exclude: frozenset[str], depth: int, path: _Path
    ) -> Any:
        items = [
            self._clone(item, exclude, depth + 1, path.index(i))
            for i, item in enumerate(value)
        ]
        cls = type(value)
        if cls is list:
            return items
        if isinstance(value, tuple):
            if hasattr(cls, "_make"):
                return cls._make(items)
            return cls(items)
        if isinstance(value, deque):
            clone = cls(items, maxlen=value.maxlen)
        else:
            # list subclass: allocate without __init__
            clone = cls.__new__(cls)
            list.extend(clone, items)
        self._copy_instance_dict(value, clone, exclude, depth, path)
        return clone

    def _clone_mapping(
        self, value: Any, exclude: frozenset[str], depth: int, path: _Path
    ) -> Any:
        cls = type(value)
        if isinstance(value, defaultdict):
            clone = cls(value.default_factory)
        elif cls in (dict, OrderedDict, Counter):
            clone = cls()
        else:
            clone = cls.__new__(cls)
        for key, item in value.items():
            clone[key] = self._clone(item, exclude, depth + 1, path.key(key))
        self._copy_instance_dict(value, clone, exclude, depth, path)
        return clone

    def _copy_instance_dict(
        self, value: Any, clone: Any, exclude: frozenset[str], depth: int, path: _Path
    ) -> None:
        """Copy attributes stored on a container subclass instance."""
        attrs = getattr(value, "__dict__", None)
        if not attrs:
            return
        fields = [fd for fd in self._fields(value, path) if fd.name in attrs]
        self._copy_fields(value, clone, fields, exclude, depth, path)

    def _clone_composite(
        self, value: Any, exclude: frozenset[str], depth: int, path: _Path
    ) -> Any:
        cls = type(value)
        logger.debug("Cloning %s at %s (depth %d)", cls.__qualname__, path, depth)
        try:
            blank = self.registry.allocate(cls)
        except UnsupportedTypeError as e:
            if e.path:
                raise
            raise UnsupportedTypeError(e.value_type, path, e.reason) from None
        self._copy_fields(value, blank, self._fields(value, path), exclude, depth, path)
        return blank

    def _fields(self, value: Any, path: _Path) -> Iterable[FieldDescriptor]:
        try:
            return self.registry.fields(value)
        except UnsupportedTypeError as e:
            if e.path:
                raise
            raise UnsupportedTypeError(e.value_type, path, e.reason) from None

    def _copy_fields(
        self,
        value: Any,
        target: Any,
        fields: Iterable[FieldDescriptor],
        exclude: frozenset[str],
        depth: int,
        path: _Path,
    ) -> None:
        for fd in fields:
            if fd.readonly or fd.matches(exclude):
                if fd.get(target) is MISSING:
                    fd.set(target, fd.default())
                continue
            current = fd.get(value)
            if current is MISSING:
                fd.clear(target)
                continue
            fd.set(target, self._clone(current, exclude, depth + 1, path.attr(fd.name)))


def clone(
    instance: Any,
    exclude: Iterable[str] | str | None = (),
    *,
    options: CloneOptions | None = None,
    registry: IntrospectionRegistry | None = None,
) -> Any:
    """
    Return a deep copy of ``instance``, leaving ``exclude``-named fields blank.

    This is the functional entry point over ``Cloner``:
    - None clones to None
    - strings, numbers, enums and other immutable values are returned as-is
    - arrays are copied shallowly, lists/tuples/dicts/sets deeply
    - composite objects are rebuilt field by field without running ``__init__``;
      read-only and excluded fields keep the zero value of their declared type,
      fields never assigned on the source stay unassigned on the copy

    Args:
        instance: The value to clone
        exclude: Field names to skip at every depth of the graph
        options: Clone options (depth guard); read from settings and
            ``HELPERKIT_*`` environment variables when omitted
        registry: Introspection registry (defaults to the shared one)

    Returns:
        The cloned value

    **Example:**
        ```python
        from helperkit import clone

        original = {"name": "A", "tags": ["x", "y"]}
        copy = clone(original)
        assert copy == original and copy["tags"] is not original["tags"]
        ```
    """
    return Cloner(options, registry).clone(instance, exclude)


def clone_many(
    values: Iterable[Any],
    exclude: Iterable[str] | str | None = (),
    *,
    options: CloneOptions | None = None,
    registry: IntrospectionRegistry | None = None,
) -> list[Any]:
    """Clone every value in ``values`` with the same exclusion set."""
    cloner = Cloner(options, registry)
    return [cloner.clone(value, exclude) for value in values]
