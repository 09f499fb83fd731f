"""
Error classes for helperkit.

This module defines the exception hierarchy used across the package: cloner
failures, configuration problems and table schema mismatches.
"""

from __future__ import annotations


class HelperError(Exception):
    """Base class for every error raised by helperkit."""


class CloneError(HelperError):
    """
    Raised when an object graph cannot be cloned.

    The clone is aborted as a whole; no partially copied value is returned.

    Attributes:
        path: Location of the failing value inside the source graph, rendered
            like ``root.tags[1].owner`` (empty when unknown)
    """

    def __init__(self, message: str, path: str = ""):
        self.path = str(path)
        super().__init__(self._fmt(message))

    def _fmt(self, msg: str) -> str:
        """Format the error message with the failing path."""
        if self.path:
            return f"{msg} (at {self.path})"
        return msg


class UnsupportedTypeError(CloneError, TypeError):
    """
    Raised when a value cannot be classified or its fields cannot be reached.

    **Common Causes:**
    - Open file objects, sockets, locks and other resource handles
    - Generators, coroutines and frames
    - Exception instances, whose arguments and traceback live in interpreter slots
    - Extension types exposing neither ``__dict__`` nor ``__slots__``

    **Example Usage:**
        ```python
        import threading
        from helperkit import clone
        from helperkit.core.errors import UnsupportedTypeError

        try:
            clone({"lock": threading.Lock()})
        except UnsupportedTypeError as e:
            print(e)  # ... (at root['lock'])
        ```

    Register an introspector for the type in an ``IntrospectionRegistry`` to
    make it cloneable.
    """

    def __init__(self, value_type: type, path: str = "", reason: str = ""):
        self.value_type = value_type
        self.reason = reason
        message = f"Cannot clone value of type {value_type.__module__}.{value_type.__qualname__}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, path)


class RecursionLimitExceededError(CloneError, RecursionError):
    """
    Raised when the object graph is deeper than the allowed clone depth.

    The cloner keeps no visited set, so a cyclic graph always ends here:
    either at the configured ``max_depth`` or, without one, when the
    interpreter's own recursion limit is hit.

    Attributes:
        depth: Depth reached when the guard tripped (None if unknown)
        max_depth: Configured limit (None when the interpreter limit tripped)
    """

    def __init__(
        self,
        depth: int | None = None,
        max_depth: int | None = None,
        path: str = "",
    ):
        self.depth = depth
        self.max_depth = max_depth
        if max_depth is None:
            message = "Interpreter recursion limit exceeded while cloning; the graph is too deep or cyclic"
        else:
            message = f"Clone depth {depth} exceeds max_depth={max_depth}; the graph is too deep or cyclic"
        super().__init__(message, path)


class SettingsError(HelperError, ValueError):
    """Raised when a settings source cannot be parsed or validated."""


class SchemaMismatchError(HelperError, ValueError):
    """
    Raised when tables with incompatible schemas are merged.

    Attributes:
        position: Index of the first offending table in the merge input
    """

    def __init__(self, message: str, position: int | None = None):
        self.position = position
        if position is not None:
            message = f"[table {position}] {message}"
        super().__init__(message)
