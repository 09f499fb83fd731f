"""
helperkit type tags (how the cloner treats a runtime value).
"""

from enum import Enum


class TypeTag(Enum):
    # === Shared as-is (immutable by convention) ===
    PRIMITIVE = "primitive"  # numbers, bytes, dates, None, classes, functions
    STRING = "string"
    ENUM = "enum"

    # === Containers ===
    ARRAY = "array"  # fixed layout, copied shallowly (ndarray, array.array)
    SEQUENCE = "sequence"  # list, tuple, deque; elements cloned
    MAPPING = "mapping"  # dict family; values cloned, keys kept
    SET = "set"  # set, frozenset; elements cloned

    # === Records ===
    COMPOSITE = "composite"  # objects walked field by field

    @property
    def is_shared(self) -> bool:
        """True for tags whose values are returned without copying."""
        return self in (TypeTag.PRIMITIVE, TypeTag.STRING, TypeTag.ENUM)

    @classmethod
    def all_tags(cls) -> list["TypeTag"]:
        """Enumerate all tags (for validation and docs)."""
        return list(cls)
