"""
Serialization helpers: JSON, XML and binary round-trips.

JSON and XML helpers never raise on bad input: they return an empty string
(serializing) or None (deserializing) and log the cause at debug level.
Binary helpers use pickle and propagate its errors.

Deserialization is driven by type hints, so dataclasses nest naturally:

    ```python
    from dataclasses import dataclass, field
    from helperkit.serialization import serialize_to_json, deserialize_from_json

    @dataclass
    class Item:
        name: str = ""
        tags: list[str] = field(default_factory=list)

    text = serialize_to_json(Item("A", ["x"]))   # '{"name": "A", "tags": ["x"]}'
    deserialize_from_json(text, Item)            # Item(name='A', tags=['x'])
    ```
"""

from __future__ import annotations

import base64
import dataclasses
import json
import logging
import pickle
import types
import typing
import uuid
import xml.etree.ElementTree as ET
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, TypeVar

import numpy as np
import pandas as pd

from .core.settings import load_settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

__all__ = [
    "HelperJSONEncoder",
    "deserialize_from_json",
    "deserialize_from_xml",
    "from_byte_array",
    "serialize_to_json",
    "serialize_to_xml",
    "to_byte_array",
]

_XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>'


class HelperJSONEncoder(json.JSONEncoder):
    """JSON encoder that handles dataclasses, enums, dates, numpy and pandas objects."""

    def default(self, obj):
        if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
            return {f.name: getattr(obj, f.name) for f in dataclasses.fields(obj)}
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, (datetime, date, time)):
            return obj.isoformat()
        if isinstance(obj, timedelta):
            return obj.total_seconds()
        if isinstance(obj, (Decimal, uuid.UUID)):
            return str(obj)
        if isinstance(obj, bytes):
            return base64.b64encode(obj).decode("ascii")
        if isinstance(obj, (set, frozenset)):
            return list(obj)
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        if isinstance(obj, np.datetime64):
            return str(obj)
        if isinstance(obj, np.generic):
            return obj.item()
        if isinstance(obj, pd.DataFrame):
            return obj.to_dict("records")
        if isinstance(obj, pd.Series):
            return obj.to_dict()
        if hasattr(obj, "__dict__"):
            return {k: v for k, v in vars(obj).items() if not k.startswith("_")}
        return super().default(obj)


def serialize_to_json(instance: Any, indent: int | None = None) -> str:
    """
    Serialize ``instance`` to a JSON string.

    Returns:
        The JSON text, or "" when ``instance`` is None or cannot be encoded
    """
    if instance is None:
        return ""
    try:
        return json.dumps(instance, cls=HelperJSONEncoder, indent=indent, ensure_ascii=False)
    except (TypeError, ValueError, RecursionError) as e:
        logger.debug("JSON serialization of %s failed: %s", type(instance).__name__, e)
        return ""


def deserialize_from_json(text: str | None, cls: type[T]) -> T | None:
    """
    Parse JSON text into an instance of ``cls``.

    Returns:
        The parsed value, or None when ``text`` is blank or does not match ``cls``
    """
    if text is None or not text.strip():
        return None
    try:
        return _build(json.loads(text), cls)
    except (ValueError, TypeError, KeyError) as e:
        logger.debug("JSON deserialization into %s failed: %s", getattr(cls, "__name__", cls), e)
        return None


def _type_hints(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls)
    except (NameError, TypeError):
        return {}


def _unwrap_optional(tp: Any) -> tuple[Any, bool]:
    """Return (inner type, is_union) for Optional/Union annotations."""
    origin = typing.get_origin(tp)
    if origin is typing.Union or origin is types.UnionType:
        args = [a for a in typing.get_args(tp) if a is not type(None)]
        if len(args) == 1:
            return args[0], True
        return Any, True
    return tp, False


def _build(data: Any, tp: Any) -> Any:
    """Convert plain JSON data into ``tp`` following its type hints."""
    if tp is None or tp is Any or data is None:
        return data
    tp, _ = _unwrap_optional(tp)
    if tp is Any:
        return data

    origin = typing.get_origin(tp)
    args = typing.get_args(tp)
    if origin in (list, set, frozenset):
        item_tp = args[0] if args else None
        return origin(_build(item, item_tp) for item in data)
    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return tuple(_build(item, args[0]) for item in data)
        if args:
            return tuple(_build(item, item_tp) for item, item_tp in zip(data, args))
        return tuple(data)
    if origin is dict:
        value_tp = args[1] if len(args) == 2 else None
        return {key: _build(value, value_tp) for key, value in data.items()}
    if origin is not None:
        return data
    if not isinstance(tp, type):
        return data

    if dataclasses.is_dataclass(tp):
        if not isinstance(data, dict):
            raise TypeError(f"Expected an object for {tp.__name__}, got {type(data).__name__}")
        hints = _type_hints(tp)
        kwargs = {
            f.name: _build(data[f.name], hints.get(f.name))
            for f in dataclasses.fields(tp)
            if f.init and f.name in data
        }
        return tp(**kwargs)
    if issubclass(tp, Enum):
        return tp(data)
    return _build_scalar(data, tp)


def _build_scalar(data: Any, tp: type) -> Any:
    if tp is bool:
        if not isinstance(data, bool):
            raise TypeError(f"Expected bool, got {type(data).__name__}")
        return data
    if tp in (int, float):
        if isinstance(data, bool) or not isinstance(data, (int, float)):
            raise TypeError(f"Expected {tp.__name__}, got {type(data).__name__}")
        if tp is int and not isinstance(data, int):
            raise TypeError(f"Expected int, got {data!r}")
        return tp(data)
    if tp is str:
        if not isinstance(data, str):
            raise TypeError(f"Expected str, got {type(data).__name__}")
        return data
    if tp is datetime:
        return datetime.fromisoformat(data)
    if tp is date:
        return date.fromisoformat(data)
    if tp is time:
        return time.fromisoformat(data)
    if tp is timedelta:
        return timedelta(seconds=data)
    if tp is Decimal:
        return Decimal(str(data))
    if tp is uuid.UUID:
        return uuid.UUID(data)
    if tp is bytes:
        return base64.b64decode(data)
    if tp in (list, dict):
        if not isinstance(data, tp):
            raise TypeError(f"Expected {tp.__name__}, got {type(data).__name__}")
        return data
    if isinstance(data, dict):
        obj = tp()
        hints = _type_hints(tp)
        for key, value in data.items():
            setattr(obj, key, _build(value, hints.get(key)))
        return obj
    return tp(data)


def serialize_to_xml(instance: Any, indent: bool | None = None) -> str:
    """
    Serialize ``instance`` to an XML document.

    The root element is named after the class. Fields become child elements,
    sequences become repeated ``<item>`` children, mappings become
    ``<entry key="...">`` children and None fields are omitted.

    Args:
        instance: The value to serialize
        indent: Pretty-print the document; None follows the ``xml_indent``
            setting (``HELPERKIT_XML_INDENT``)

    Returns:
        The XML text with a declaration line, or "" when ``instance`` is None
        or cannot be encoded
    """
    if instance is None:
        return ""
    if indent is None:
        indent = load_settings().xml_indent
    try:
        root = ET.Element(type(instance).__name__)
        _write_xml(root, instance)
        if indent:
            ET.indent(root)
        return f"{_XML_DECLARATION}\n{ET.tostring(root, encoding='unicode')}"
    except (TypeError, ValueError, RecursionError) as e:
        logger.debug("XML serialization of %s failed: %s", type(instance).__name__, e)
        return ""


def _scalar_text(value: Any) -> str | None:
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, timedelta):
        return str(value.total_seconds())
    if isinstance(value, bytes):
        return base64.b64encode(value).decode("ascii")
    if isinstance(value, (str, int, float, Decimal, uuid.UUID)):
        return str(value)
    return None


def _public_fields(value: Any) -> list[tuple[str, Any]]:
    if dataclasses.is_dataclass(value):
        return [(f.name, getattr(value, f.name)) for f in dataclasses.fields(value)]
    if hasattr(value, "__dict__"):
        return [(k, v) for k, v in vars(value).items() if not k.startswith("_")]
    raise TypeError(f"Cannot serialize {type(value).__name__} to XML")


def _write_xml(elem: ET.Element, value: Any) -> None:
    text = _scalar_text(value)
    if text is not None:
        elem.text = text
        return
    if isinstance(value, dict):
        for key, item in value.items():
            child = ET.SubElement(elem, "entry", key=str(key))
            _write_child(child, item)
        return
    if isinstance(value, (list, tuple, set, frozenset, np.ndarray)):
        for item in value:
            _write_child(ET.SubElement(elem, "item"), item)
        return
    for name, item in _public_fields(value):
        if item is not None:
            _write_xml(ET.SubElement(elem, name), item)


def _write_child(child: ET.Element, item: Any) -> None:
    if item is None:
        child.set("nil", "true")
    else:
        _write_xml(child, item)


def deserialize_from_xml(text: str | None, cls: type[T]) -> T | None:
    """
    Parse an XML document produced by ``serialize_to_xml`` into ``cls``.

    Returns:
        The parsed value, or None when ``text`` is blank or does not match ``cls``
    """
    if text is None or not text.strip():
        return None
    try:
        return _read_xml(ET.fromstring(text.strip()), cls)
    except (ET.ParseError, ValueError, TypeError, KeyError) as e:
        logger.debug("XML deserialization into %s failed: %s", getattr(cls, "__name__", cls), e)
        return None


def _read_xml(elem: ET.Element, tp: Any) -> Any:
    if elem.get("nil") == "true":
        return None
    tp, _ = _unwrap_optional(tp)
    origin = typing.get_origin(tp)
    args = typing.get_args(tp)

    if origin in (list, set, frozenset, tuple) or tp in (list, set, frozenset, tuple):
        container = origin or tp
        item_tp = args[0] if args else str
        items = [_read_xml(child, item_tp) for child in elem if child.tag == "item"]
        return container(items)
    if origin is dict or tp is dict:
        key_tp, value_tp = args if len(args) == 2 else (str, str)
        return {
            _parse_scalar(child.get("key", ""), key_tp): _read_xml(child, value_tp)
            for child in elem
            if child.tag == "entry"
        }

    if isinstance(tp, type) and dataclasses.is_dataclass(tp):
        hints = _type_hints(tp)
        names = {f.name for f in dataclasses.fields(tp) if f.init}
        kwargs = {
            child.tag: _read_xml(child, hints.get(child.tag, str))
            for child in elem
            if child.tag in names
        }
        return tp(**kwargs)
    if isinstance(tp, type) and len(elem) and _scalar_type(tp) is None:
        obj = tp()
        hints = _type_hints(tp)
        for child in elem:
            setattr(obj, child.tag, _read_xml(child, hints.get(child.tag, str)))
        return obj
    return _parse_scalar(elem.text or "", tp)


def _scalar_type(tp: Any) -> type | None:
    if not isinstance(tp, type):
        return None
    if issubclass(tp, Enum):
        return tp
    for scalar in (bool, int, float, str, Decimal, datetime, date, time, timedelta, uuid.UUID, bytes):
        if tp is scalar:
            return tp
    return None


def _parse_scalar(text: str, tp: Any) -> Any:
    if tp is None or tp is Any or tp is str:
        return text
    if isinstance(tp, type) and issubclass(tp, Enum):
        return tp[text.strip()]
    if tp is bool:
        lowered = text.strip().lower()
        if lowered not in {"true", "false"}:
            raise ValueError(f"Invalid boolean {text!r}")
        return lowered == "true"
    if tp in (int, float, Decimal, uuid.UUID):
        return tp(text.strip())
    if tp in (datetime, date, time):
        return tp.fromisoformat(text.strip())
    if tp is timedelta:
        return timedelta(seconds=float(text))
    if tp is bytes:
        return base64.b64decode(text)
    raise TypeError(f"Cannot read {tp!r} from XML text")


def to_byte_array(instance: Any) -> bytes:
    """
    Pickle ``instance`` to bytes (None gives ``b""``).

    Raises:
        pickle.PicklingError: If the object graph cannot be pickled
    """
    if instance is None:
        return b""
    return pickle.dumps(instance, protocol=pickle.HIGHEST_PROTOCOL)


def from_byte_array(data: bytes | None) -> Any:
    """
    Unpickle bytes produced by ``to_byte_array`` (None or ``b""`` gives None).

    Only load data from trusted sources: unpickling can execute arbitrary code.
    """
    if not data:
        return None
    return pickle.loads(data)
