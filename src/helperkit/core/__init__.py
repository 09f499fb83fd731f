"""
Core module for helperkit.

This module contains the object graph cloner and the pieces it is built on:
type tags, introspection, errors and settings.
"""

from .clone import CloneOptions, Cloner, clone, clone_many
from .errors import (
    CloneError,
    HelperError,
    RecursionLimitExceededError,
    SchemaMismatchError,
    SettingsError,
    UnsupportedTypeError,
)
from .interfaces import ITypeIntrospector
from .introspection import (
    MISSING,
    DataclassIntrospector,
    DictIntrospector,
    FieldDescriptor,
    IntrospectionRegistry,
    SlotsIntrospector,
    classify,
    default_registry,
    readonly_field,
    zero_value,
)
from .kinds import TypeTag
from .settings import HelperSettings, configure_logging, load_settings

__all__ = [
    # Errors
    "HelperError",
    "CloneError",
    "UnsupportedTypeError",
    "RecursionLimitExceededError",
    "SettingsError",
    "SchemaMismatchError",
    # Kinds
    "TypeTag",
    # Introspection
    "ITypeIntrospector",
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
    # Cloning
    "CloneOptions",
    "Cloner",
    "clone",
    "clone_many",
    # Settings
    "HelperSettings",
    "load_settings",
    "configure_logging",
]
