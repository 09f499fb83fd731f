"""
helperkit - Object Cloning and Everyday Data Helpers

helperkit is a collection of small, independent, stateless helpers. Its core is
a deep cloner that walks object graphs field by field through an explicit
introspection table, with a list of field names to leave out of the copy.
Around it sit helpers for sequences, pandas tables, value conversion and
serialization.

Key Features:
- **Deep Cloning**: Field-by-field copies of dataclasses, slotted and plain objects
- **Field Exclusion**: Skip named fields at every depth of the graph
- **Explicit Introspection**: Register introspectors for types you do not own
- **Fail Fast**: Unsupported values and runaway depth raise categorized errors
- **Table Helpers**: Reorder, filter, merge and dedupe pandas DataFrames
- **Safe Conversions**: Parse ints, booleans, datetimes and enums with defaults

Quick Start:
    ```python
    from dataclasses import dataclass, field
    from helperkit import clone

    @dataclass
    class Record:
        name: str = ""
        tags: list[str] = field(default_factory=list)

    original = Record("A", ["x", "y"])
    copy = clone(original, exclude={"name"})
    # copy.name == "" ; copy.tags == ["x", "y"] ; copy.tags is not original.tags
    ```

Cloning Rules:
    - None -> None
    - str, numbers, enums, dates and other immutable values -> shared
    - numpy arrays, array.array, bytearray -> new buffer, elements shared
    - list, tuple, deque, dict, set -> new container, elements cloned
    - everything else -> blank instance (no __init__), fields cloned one by one

Modules:
    - helperkit.core: cloner, introspection, errors, settings
    - helperkit.sequences: distinct_by, duplicates, split, shuffle, statistics
    - helperkit.tables: DataFrame helpers
    - helperkit.convert: to_int32/to_int64/to_boolean/to_datetime/to_enum/to_base
    - helperkit.serialization: JSON, XML and pickle helpers
"""

# Version information
__version__ = "0.1.0"
__author__ = "helperkit Team"
__description__ = "Object cloning and everyday data helpers"

from .core import (
    CloneError,
    CloneOptions,
    Cloner,
    FieldDescriptor,
    HelperError,
    HelperSettings,
    IntrospectionRegistry,
    ITypeIntrospector,
    RecursionLimitExceededError,
    SchemaMismatchError,
    SettingsError,
    TypeTag,
    UnsupportedTypeError,
    classify,
    clone,
    clone_many,
    load_settings,
    readonly_field,
)

__all__ = [
    # Cloning
    "clone",
    "clone_many",
    "Cloner",
    "CloneOptions",
    # Introspection
    "TypeTag",
    "classify",
    "FieldDescriptor",
    "IntrospectionRegistry",
    "ITypeIntrospector",
    "readonly_field",
    # Errors
    "HelperError",
    "CloneError",
    "UnsupportedTypeError",
    "RecursionLimitExceededError",
    "SettingsError",
    "SchemaMismatchError",
    # Settings
    "HelperSettings",
    "load_settings",
    # Version info
    "__version__",
    "__author__",
    "__description__",
]
