"""
Introspection interface protocols for helperkit.
Defines the contract the cloner relies on to walk composite values.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .introspection import FieldDescriptor


@runtime_checkable
class ITypeIntrospector(Protocol):
    """
    Contract for COMPOSITE type introspection.
    Responsibilities: enumerate instance fields and build blank instances.
    """

    def fields(self, value: Any) -> tuple[FieldDescriptor, ...]:
        """
        Return the instance fields of ``value``, declared and inherited.

        Fields are resolved per instance because Python objects may carry
        attributes that their class never declared.
        """
        ...

    def allocate(self, cls: type) -> Any:
        """
        Return a blank instance of ``cls`` without running ``__init__``.

        Every field holds the zero value of its declared type.
        """
        ...


__all__ = ["ITypeIntrospector"]
