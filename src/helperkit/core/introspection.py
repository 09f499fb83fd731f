"""
Type introspection for the helperkit cloner.

This module classifies runtime values into TypeTags and exposes the fields of
composite values through an explicit, per-type introspection table instead of
ad-hoc attribute poking. Built-in introspectors cover dataclasses, slotted
classes and plain ``__dict__`` objects; other types can be registered.
"""

from __future__ import annotations

import array
import dataclasses
import inspect
import pathlib
import re
import socket
import threading
import types
import typing
import uuid
from collections import deque
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from fractions import Fraction
from io import IOBase
from typing import Any, ClassVar, Final

import numpy as np

from .errors import UnsupportedTypeError
from .interfaces import ITypeIntrospector
from .kinds import TypeTag

__all__ = [
    "MISSING",
    "FieldDescriptor",
    "DataclassIntrospector",
    "DictIntrospector",
    "SlotsIntrospector",
    "IntrospectionRegistry",
    "default_registry",
    "classify",
    "readonly_field",
    "zero_value",
]


class _Missing:
    """Marker for a field that holds no value on an instance."""

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Final = _Missing()

_PRIMITIVE_TYPES = (
    bool,
    int,
    float,
    complex,
    bytes,
    Decimal,
    Fraction,
    date,
    datetime,
    time,
    timedelta,
    uuid.UUID,
    pathlib.PurePath,
    range,
    np.generic,
)

# Shared by reference, never walked
_ATOMIC_TYPES = (
    type,
    types.FunctionType,
    types.BuiltinFunctionType,
    types.MethodType,
    types.CodeType,
    re.Pattern,
    property,
    type(Ellipsis),
    type(NotImplemented),
)

_ARRAY_TYPES = (np.ndarray, array.array, bytearray)

_UNSUPPORTED_TYPES = (
    IOBase,
    socket.socket,
    memoryview,
    types.ModuleType,
    types.GeneratorType,
    types.CoroutineType,
    types.AsyncGeneratorType,
    types.FrameType,
    types.TracebackType,
    type(threading.Lock()),
    type(threading.RLock()),
)

_ZERO_FACTORIES: dict[Any, typing.Callable[[], Any]] = {
    bool: bool,
    int: int,
    float: float,
    complex: complex,
    str: str,
    bytes: bytes,
    Decimal: Decimal,
    list: list,
    dict: dict,
    set: set,
    tuple: tuple,
    frozenset: frozenset,
}

_ZERO_BY_NAME = {t.__name__: t for t in _ZERO_FACTORIES}


def readonly_field(**kwargs) -> Any:
    """
    Declare a dataclass field that the cloner must never copy.

    The field behaves like any ``dataclasses.field`` but is flagged read-only:
    clones keep the zero value of its declared type.

    **Example:**
        ```python
        from dataclasses import dataclass
        from helperkit.core.introspection import readonly_field

        @dataclass
        class Account:
            id: int = readonly_field(default=0)
            owner: str = ""
        ```
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata["readonly"] = True
    return dataclasses.field(metadata=metadata, **kwargs)


def _unwrap(annotation: Any) -> Any:
    """Strip Final/Annotated wrappers from an annotation."""
    while True:
        origin = typing.get_origin(annotation)
        if origin is Final or origin is typing.Annotated:
            annotation = typing.get_args(annotation)[0]
        else:
            return annotation


def _is_final(annotation: Any) -> bool:
    if annotation is Final:
        return True
    if isinstance(annotation, str):
        return annotation.startswith(("Final", "typing.Final"))
    origin = typing.get_origin(annotation)
    if origin is typing.Annotated:
        return _is_final(typing.get_args(annotation)[0])
    return origin is Final


def _is_classvar(annotation: Any) -> bool:
    if isinstance(annotation, str):
        return annotation.startswith(("ClassVar", "typing.ClassVar"))
    return annotation is ClassVar or typing.get_origin(annotation) is ClassVar


def zero_value(annotation: Any) -> Any:
    """
    Return the zero value for a declared annotation.

    Builtin scalars and containers map to their empty/zero instance
    (``int`` -> 0, ``str`` -> "", ``list[str]`` -> []); optional, unknown or
    missing annotations map to None. Enum annotations map to None as well,
    since an enum has no canonical zero member.
    """
    if annotation is None or annotation is Final:
        return None
    annotation = _unwrap(annotation)

    if isinstance(annotation, str):
        text = annotation.strip()
        if "|" in text or text.startswith(("Optional", "typing.Optional")):
            return None
        factory = _ZERO_BY_NAME.get(text.split("[", 1)[0])
        return factory() if factory else None

    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        args = typing.get_args(annotation)
        if type(None) in args:
            return None
        return zero_value(args[0])
    if origin is not None:
        annotation = origin

    factory = _ZERO_FACTORIES.get(annotation)
    return factory() if factory else None


def _resolve_hints(cls: type) -> dict[str, Any]:
    """Resolve annotations across the MRO, falling back to raw strings."""
    try:
        return typing.get_type_hints(cls, include_extras=True)
    except (NameError, TypeError, AttributeError):
        hints: dict[str, Any] = {}
        for klass in reversed(cls.__mro__):
            hints.update(inspect.get_annotations(klass))
        return hints


def _own_slots(klass: type) -> list[str]:
    """Slot names declared directly on ``klass``, mangled as stored."""
    slots = klass.__dict__.get("__slots__", ())
    if isinstance(slots, str):
        slots = (slots,)
    names = []
    for slot in slots:
        if slot in ("__dict__", "__weakref__"):
            continue
        if slot.startswith("__") and not slot.endswith("__"):
            slot = f"_{klass.__name__.lstrip('_')}{slot}"
        names.append(slot)
    return names


def _slot_names(cls: type) -> list[str]:
    """Instance slot names across the MRO, base classes first."""
    names: list[str] = []
    for klass in reversed(cls.__mro__):
        for slot in _own_slots(klass):
            if slot not in names:
                names.append(slot)
    return names


def _defines_slots(cls: type) -> bool:
    return any("__slots__" in klass.__dict__ for klass in cls.__mro__[:-1])


def _declaring_class(cls: type, name: str) -> type:
    for klass in cls.__mro__:
        if name in inspect.get_annotations(klass) or name in _own_slots(klass):
            return klass
    return cls


@dataclasses.dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """
    Metadata and accessors for one instance field of a composite value.

    Attributes:
        name: Attribute name as stored on the instance (mangled for private names)
        owner: Class declaring the field (the runtime class for dynamic attributes)
        declared_type: Annotation of the field, or None when undeclared
        readonly: Whether the cloner must leave the field at its zero value
    """

    name: str
    owner: type
    declared_type: Any = None
    readonly: bool = False

    @property
    def public_name(self) -> str:
        """Name without private mangling or leading underscores (``_Owner__x`` -> ``x``)."""
        for klass in self.owner.__mro__:
            prefix = f"_{klass.__name__.lstrip('_')}__"
            if self.name.startswith(prefix) and len(self.name) > len(prefix):
                return self.name[len(prefix) :]
        return self.name.lstrip("_") or self.name

    def matches(self, names: frozenset[str]) -> bool:
        """True when the field is named in ``names`` by stored or public name."""
        return self.name in names or self.public_name in names

    def get(self, instance: Any) -> Any:
        """Read the field from ``instance``; MISSING when it was never assigned."""
        try:
            return object.__getattribute__(instance, self.name)
        except AttributeError:
            return MISSING

    def set(self, instance: Any, value: Any) -> None:
        """Write the field, bypassing custom ``__setattr__`` and frozen dataclass guards."""
        object.__setattr__(instance, self.name, value)

    def clear(self, instance: Any) -> None:
        """Leave the field unassigned on ``instance``."""
        if self.get(instance) is not MISSING:
            object.__delattr__(instance, self.name)

    def default(self) -> Any:
        """Zero value of the declared type."""
        return zero_value(self.declared_type)


class DictIntrospector:
    """
    Introspector for plain classes storing attributes in ``__dict__``.

    Declared fields come from class annotations (ClassVar excluded, ``Final``
    marks read-only); attributes assigned at runtime without an annotation are
    reported as dynamic, writable fields.
    """

    def __init__(self) -> None:
        self._declared: dict[type, tuple[FieldDescriptor, ...]] = {}

    def declared_fields(self, cls: type) -> tuple[FieldDescriptor, ...]:
        """Fields declared by ``cls`` and its bases (cached per class)."""
        cached = self._declared.get(cls)
        if cached is None:
            cached = tuple(self._build_declared(cls))
            self._declared[cls] = cached
        return cached

    def _build_declared(self, cls: type) -> list[FieldDescriptor]:
        hints = _resolve_hints(cls)
        out = []
        for name, hint in hints.items():
            if _is_classvar(hint):
                continue
            out.append(
                FieldDescriptor(
                    name=name,
                    owner=_declaring_class(cls, name),
                    declared_type=hint,
                    readonly=_is_final(hint),
                )
            )
        return out

    def fields(self, value: Any) -> tuple[FieldDescriptor, ...]:
        cls = type(value)
        declared = self.declared_fields(cls)
        known = {fd.name for fd in declared}
        dynamic = [
            FieldDescriptor(name=name, owner=cls)
            for name in getattr(value, "__dict__", {})
            if name not in known
        ]
        return declared + tuple(dynamic)

    def allocate(self, cls: type) -> Any:
        try:
            blank = cls.__new__(cls)
        except TypeError as e:
            raise UnsupportedTypeError(
                cls, reason=f"cannot allocate without calling __init__ ({e})"
            ) from e
        for fd in self.declared_fields(cls):
            fd.set(blank, fd.default())
        return blank


class SlotsIntrospector(DictIntrospector):
    """Introspector for classes declaring ``__slots__`` (with or without ``__dict__``)."""

    def _build_declared(self, cls: type) -> list[FieldDescriptor]:
        out = super()._build_declared(cls)
        known = {fd.name for fd in out}
        hints = _resolve_hints(cls)
        for name in _slot_names(cls):
            if name in known:
                continue
            owner = _declaring_class(cls, name)
            out.append(FieldDescriptor(name=name, owner=owner, declared_type=hints.get(name)))
        return out


class DataclassIntrospector(DictIntrospector):
    """
    Introspector for dataclasses.

    Uses ``dataclasses.fields`` (inherited fields included, ClassVar and
    InitVar pseudo-fields excluded). Fields created with ``readonly_field``
    or annotated ``Final`` are read-only.
    """

    def _build_declared(self, cls: type) -> list[FieldDescriptor]:
        hints = _resolve_hints(cls)
        out = []
        for f in dataclasses.fields(cls):
            hint = hints.get(f.name, f.type)
            out.append(
                FieldDescriptor(
                    name=f.name,
                    owner=_declaring_class(cls, f.name),
                    declared_type=hint,
                    readonly=bool(f.metadata.get("readonly")) or _is_final(hint),
                )
            )
        return out


class IntrospectionRegistry:
    """
    Per-type introspection table used by the cloner.

    The registry maps classes to ``ITypeIntrospector`` implementations. Lookups
    walk the MRO, so registering a base class covers its subclasses. Classes
    without a registration fall back to the built-in dataclass, slots or
    ``__dict__`` introspectors. Resolutions are cached per class.

    **Use Cases:**
    - Cloning extension types that expose their state through properties
    - Overriding how blank instances are built for a family of classes
    - Classifying values before walking them

    **Example Usage:**
        ```python
        from helperkit.core.introspection import IntrospectionRegistry, FieldDescriptor

        class PointIntrospector:
            def fields(self, value):
                return (FieldDescriptor("x", Point, int), FieldDescriptor("y", Point, int))

            def allocate(self, cls):
                return cls(0, 0)

        registry = IntrospectionRegistry()
        registry.register(Point, PointIntrospector())
        ```
    """

    def __init__(self, introspectors: dict[type, ITypeIntrospector] | None = None):
        self._registered: dict[type, ITypeIntrospector] = {}
        self._resolved: dict[type, ITypeIntrospector] = {}
        self._dataclasses = DataclassIntrospector()
        self._slots = SlotsIntrospector()
        self._dicts = DictIntrospector()
        for cls, introspector in (introspectors or {}).items():
            self.register(cls, introspector)

    def register(self, cls: type, introspector: ITypeIntrospector) -> None:
        """Register ``introspector`` for ``cls`` and its subclasses."""
        if not isinstance(cls, type):
            raise TypeError(f"Expected a class, got {cls!r}")
        if not isinstance(introspector, ITypeIntrospector):
            raise TypeError(
                f"{type(introspector).__name__} does not implement fields()/allocate()"
            )
        self._registered[cls] = introspector
        self._resolved.clear()

    def is_registered(self, cls: type) -> bool:
        """True when ``cls`` or one of its bases has a registered introspector."""
        return self._lookup_registered(cls) is not None

    def _lookup_registered(self, cls: type) -> ITypeIntrospector | None:
        if not self._registered:
            return None
        for klass in cls.__mro__:
            if klass in self._registered:
                return self._registered[klass]
        return None

    def resolve(self, cls: type) -> ITypeIntrospector:
        """Return the introspector responsible for ``cls``."""
        introspector = self._resolved.get(cls)
        if introspector is None:
            introspector = self._lookup_registered(cls)
            if introspector is None:
                if dataclasses.is_dataclass(cls):
                    introspector = self._dataclasses
                elif _defines_slots(cls):
                    introspector = self._slots
                else:
                    introspector = self._dicts
            self._resolved[cls] = introspector
        return introspector

    def fields(self, value: Any) -> tuple[FieldDescriptor, ...]:
        """Instance fields of a composite value."""
        return self.resolve(type(value)).fields(value)

    def allocate(self, cls: type) -> Any:
        """Blank instance of ``cls`` built without running ``__init__``."""
        return self.resolve(cls).allocate(cls)

    def classify(self, value: Any) -> TypeTag:
        """
        Classify ``value`` into a TypeTag.

        Raises:
            UnsupportedTypeError: If the value is a resource handle or exposes
                no introspectable fields
        """
        if value is None:
            return TypeTag.PRIMITIVE
        cls = type(value)
        if self._lookup_registered(cls) is not None:
            return TypeTag.COMPOSITE
        if isinstance(value, Enum):
            return TypeTag.ENUM
        if isinstance(value, str):
            return TypeTag.STRING
        if isinstance(value, _PRIMITIVE_TYPES) or isinstance(value, _ATOMIC_TYPES):
            return TypeTag.PRIMITIVE
        if isinstance(value, _ARRAY_TYPES):
            return TypeTag.ARRAY
        if isinstance(value, _UNSUPPORTED_TYPES):
            raise UnsupportedTypeError(cls, reason="resource handles cannot be cloned")
        if isinstance(value, (list, tuple, deque)):
            return TypeTag.SEQUENCE
        if isinstance(value, dict):
            return TypeTag.MAPPING
        if isinstance(value, (set, frozenset)):
            return TypeTag.SET
        if isinstance(value, BaseException):
            raise UnsupportedTypeError(cls, reason="exception state is held outside instance fields")
        if dataclasses.is_dataclass(value) or hasattr(value, "__dict__") or _defines_slots(cls):
            return TypeTag.COMPOSITE
        raise UnsupportedTypeError(cls, reason="no introspectable fields")

    def element_kind(self, value: Any) -> Any:
        """
        Element type of an array or sequence.

        Returns the numpy dtype, the ``array.array`` typecode, or the class of
        the first element for other containers (None when empty).
        """
        if isinstance(value, np.ndarray):
            return value.dtype
        if isinstance(value, array.array):
            return value.typecode
        if isinstance(value, bytearray):
            return int
        for item in value:
            return type(item)
        return None


default_registry = IntrospectionRegistry()


def classify(value: Any) -> TypeTag:
    """Classify ``value`` with the default registry."""
    return default_registry.classify(value)
