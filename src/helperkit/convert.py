"""
Conversion helpers with default-value fallbacks.

Parsing helpers never raise on bad input: they return the supplied default.
"""

from __future__ import annotations

import logging
import re
import warnings
from datetime import datetime
from enum import Enum
from typing import Any, TypeVar

import pandas as pd

from .serialization import deserialize_from_json, serialize_to_json

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)
T = TypeVar("T")

INT32_MIN, INT32_MAX = -(2**31), 2**31 - 1
INT64_MIN, INT64_MAX = -(2**63), 2**63 - 1

_INTEGER = re.compile(r"\s*[+-]?[0-9]+\s*", re.ASCII)
_DIGITS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"

__all__ = [
    "from_bytes",
    "to_base",
    "to_boolean",
    "to_bytes",
    "to_datetime",
    "to_enum",
    "to_int32",
    "to_int64",
]


def _to_int(value: Any, default: int, low: int, high: int) -> int:
    if value is None:
        return default
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, float):
        if not value.is_integer():
            return default
        value = int(value)
    text = str(value)
    if not _INTEGER.fullmatch(text):
        return default
    number = int(text)
    if number < low or number > high:
        return default
    return number


def to_int32(value: Any, default: int = 0) -> int:
    """
    Convert ``value`` to a signed 32-bit integer.

    Enum members convert through their value and floats only when they hold a
    whole number; anything else through its string form, which must be an
    optionally signed decimal integer (surrounding whitespace allowed). The
    result must fit the 32-bit range.

    **Example:**
        ```python
        to_int32(" -42 ")        # -42
        to_int32(3.0)            # 3
        to_int32(3.5, -1)        # -1
        to_int32("4.2", -1)      # -1
        to_int32("3000000000")   # 0 (out of range)
        ```
    """
    return _to_int(value, default, INT32_MIN, INT32_MAX)


def to_int64(value: Any, default: int = 0) -> int:
    """Convert ``value`` to a signed 64-bit integer (same rules as ``to_int32``)."""
    return _to_int(value, default, INT64_MIN, INT64_MAX)


def to_boolean(value: Any) -> bool:
    """True only when the string form of ``value`` is "true" (any case, trimmed)."""
    if value is None:
        return False
    return str(value).strip().lower() == "true"


def to_datetime(value: Any, default: datetime = datetime.min) -> datetime:
    """
    Parse ``value`` into a datetime, falling back to ``default``.

    Datetimes pass through; other values are parsed from their string form
    with pandas, which understands ISO 8601 and common date layouts.
    """
    if value is None:
        return default
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    if not text:
        return default
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        try:
            parsed = pd.to_datetime(text, errors="coerce")
        except (ValueError, TypeError, OverflowError) as e:
            logger.debug("Cannot parse %r as datetime: %s", text, e)
            return default
    if pd.isna(parsed):
        return default
    return parsed.to_pydatetime()


def to_enum(value: Any, enum_cls: type[E], default: E | None = None) -> E | None:
    """
    Convert ``value`` to a member of ``enum_cls``.

    Matches member names case-insensitively, then integer values.

    **Example:**
        ```python
        class Color(Enum):
            RED = 1
            GREEN = 2

        to_enum("green", Color)   # Color.GREEN
        to_enum("1", Color)       # Color.RED
        to_enum("blue", Color)    # None
        ```
    """
    if value is None:
        return default
    if isinstance(value, enum_cls):
        return value
    text = str(value).strip()
    lowered = text.lower()
    for name, member in enum_cls.__members__.items():
        if name.lower() == lowered:
            return member
    if _INTEGER.fullmatch(text):
        try:
            return enum_cls(int(text))
        except ValueError:
            return default
    return default


def to_base(number: int, target_base: int) -> str:
    """
    Render ``number`` in ``target_base`` using digits 0-9 then A-Z.

    Returns:
        The digits (with a leading "-" for negatives), or "" when
        ``target_base`` is outside 2..36
    """
    if target_base < 2 or target_base > 36:
        return ""
    if target_base == 10:
        return str(number)
    if number == 0:
        return "0"

    sign = "-" if number < 0 else ""
    q = abs(number)
    digits = []
    while q > 0:
        q, r = divmod(q, target_base)
        digits.append(_DIGITS[r])
    return sign + "".join(reversed(digits))


def to_bytes(instance: Any) -> bytes | None:
    """UTF-8 JSON bytes of ``instance``; None when it is None or cannot be encoded."""
    if instance is None:
        return None
    text = serialize_to_json(instance)
    return text.encode("utf-8") if text else None


def from_bytes(data: bytes | None, cls: type[T]) -> T | None:
    """Decode UTF-8 JSON bytes into ``cls``; None on missing or invalid data."""
    if data is None:
        return None
    try:
        text = bytes(data).decode("utf-8")
    except UnicodeDecodeError as e:
        logger.debug("Cannot decode %d bytes as UTF-8: %s", len(data), e)
        return None
    return deserialize_from_json(text, cls)
