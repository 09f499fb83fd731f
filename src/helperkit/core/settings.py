"""Loading of helperkit settings from YAML/JSON sources and the environment."""

from __future__ import annotations

import json
import logging
import os
import sys
from collections.abc import Mapping
from copy import deepcopy
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from .errors import SettingsError

__all__ = [
    "ENV_PREFIX",
    "HelperSettings",
    "configure_logging",
    "load_settings",
]

ENV_PREFIX = "HELPERKIT_"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass(slots=True, frozen=True)
class HelperSettings:
    """
    Package-wide defaults.

    Attributes:
        clone_max_depth: Depth guard handed to CloneOptions (None = unbounded)
        csv_delimiter: Default delimiter for table CSV export
        json_indent: Indentation of serialized JSON (None = compact)
        xml_indent: Whether serialized XML is pretty-printed
        log_level: Level for the ``helperkit`` logger when configured
    """

    clone_max_depth: int | None = None
    csv_delimiter: str = ","
    json_indent: int | None = None
    xml_indent: bool = True
    log_level: str = "WARNING"


def load_settings(
    source: str | Path | Mapping[str, Any] | None = None,
    *,
    format: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> HelperSettings:
    """
    Build settings from an optional YAML/JSON file or mapping plus environment.

    Values from ``source`` override the defaults; ``HELPERKIT_*`` environment
    variables (``HELPERKIT_CLONE_MAX_DEPTH``, ``HELPERKIT_CSV_DELIMITER``,
    ``HELPERKIT_JSON_INDENT``, ``HELPERKIT_XML_INDENT``, ``HELPERKIT_LOG_LEVEL``)
    override both.

    **Args:**
        source: Path to a ``.yaml``/``.yml``/``.json`` file, a mapping, or None
        format: Force the file format instead of using the suffix
        environ: Environment to read overrides from (defaults to ``os.environ``)

    **Returns:**
        Validated ``HelperSettings``

    **Raises:**
        FileNotFoundError: If ``source`` names a missing file
        SettingsError: On unknown keys, unparseable files or invalid values

    **Example:**
        ```python
        from helperkit.core.settings import load_settings

        settings = load_settings({"clone_max_depth": 64, "csv_delimiter": ";"})
        ```
    """
    mapping, label = _read_source(source, format=format)
    known = {f.name for f in fields(HelperSettings)}
    unknown = sorted(set(mapping) - known)
    if unknown:
        raise SettingsError(f"{label}: unknown setting(s) {', '.join(unknown)}")

    env = os.environ if environ is None else environ
    for name in known:
        env_key = f"{ENV_PREFIX}{name.upper()}"
        if env_key in env:
            mapping[name] = env[env_key]

    return HelperSettings(
        clone_max_depth=_coerce_optional_int(mapping.get("clone_max_depth"), "clone_max_depth"),
        csv_delimiter=_coerce_delimiter(mapping.get("csv_delimiter", ",")),
        json_indent=_coerce_optional_int(mapping.get("json_indent"), "json_indent"),
        xml_indent=_coerce_bool(mapping.get("xml_indent", True), "xml_indent"),
        log_level=_coerce_level(mapping.get("log_level", "WARNING")),
    )


def _read_source(
    source: str | Path | Mapping[str, Any] | None, *, format: str | None
) -> tuple[dict[str, Any], str]:
    if source is None:
        return {}, "<defaults>"
    if isinstance(source, Mapping):
        return deepcopy(dict(source)), "<mapping>"

    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(path)

    fmt = (format or path.suffix.lstrip(".")).lower()
    text = path.read_text(encoding="utf-8")
    try:
        if fmt in {"yaml", "yml", ""}:
            data = yaml.safe_load(text)
        elif fmt == "json":
            data = json.loads(text)
        else:
            raise SettingsError(f"Unsupported settings format '{fmt}' for {path}")
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise SettingsError(f"Cannot parse settings file {path}: {e}") from e

    if data is None:
        return {}, str(path)
    if not isinstance(data, dict):
        raise SettingsError(f"{path}: top level must be a mapping, got {type(data).__name__}")
    return data, str(path)


def _coerce_optional_int(value: Any, name: str) -> int | None:
    if value is None:
        return None
    if isinstance(value, str):
        text = value.strip()
        if text.lower() in {"", "none", "null"}:
            return None
        try:
            value = int(text)
        except ValueError:
            raise SettingsError(f"{name} must be an integer, got {text!r}") from None
    if isinstance(value, bool) or not isinstance(value, int):
        raise SettingsError(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise SettingsError(f"{name} must be >= 0, got {value}")
    return value


def _coerce_bool(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in {"true", "false", "1", "0", "yes", "no"}:
        return value.strip().lower() in {"true", "1", "yes"}
    raise SettingsError(f"{name} must be a boolean, got {value!r}")


def _coerce_delimiter(value: Any) -> str:
    if not isinstance(value, str) or not value:
        raise SettingsError(f"csv_delimiter must be a non-empty string, got {value!r}")
    return value


def _coerce_level(value: Any) -> str:
    level = str(value).strip().upper()
    if level not in _LOG_LEVELS:
        raise SettingsError(f"log_level must be one of {', '.join(_LOG_LEVELS)}, got {value!r}")
    return level


def configure_logging(level: str | None = None) -> logging.Logger:
    """
    Configure and return the ``helperkit`` logger.

    A stderr handler is attached once; later calls only change the level.

    Args:
        level: Log level name (defaults to the ``log_level`` setting)
    """
    level = _coerce_level(level or load_settings().log_level)
    logger = logging.getLogger("helperkit")

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(fmt=_LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(handler)
    logger.setLevel(getattr(logging, level))
    return logger
