"""
Tabular helpers over pandas DataFrames.

This module provides small, composable operations on frames: column
ordering, row-to-object mapping, delimited export, schema-checked merging,
filtering and key-based deduplication.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable, Iterable, Sequence
from typing import Any, TypeVar

import pandas as pd

from .core.errors import SchemaMismatchError

logger = logging.getLogger(__name__)

T = TypeVar("T")

__all__ = [
    "add_column",
    "filter_rows",
    "is_empty",
    "merge_tables",
    "remove_duplicates",
    "set_columns_order",
    "to_csv",
    "to_records",
]


def _require_frame(df: Any, name: str = "df") -> None:
    if df is None:
        raise TypeError(f"{name} must not be None")
    if not isinstance(df, pd.DataFrame):
        raise TypeError(f"{name} must be a pandas DataFrame, got {type(df).__name__}")


def set_columns_order(df: pd.DataFrame, column_names: Sequence[str]) -> pd.DataFrame:
    """
    Move the listed columns to the front, in the given order.

    Names that are not columns of ``df`` are ignored; the remaining columns
    keep their relative order.

    **Example:**
        ```python
        df = pd.DataFrame({"a": [1], "b": [2], "c": [3]})
        set_columns_order(df, ["c", "x", "a"]).columns.tolist()
        # ['c', 'a', 'b']
        ```
    """
    _require_frame(df)
    front = [name for name in dict.fromkeys(column_names) if name in df.columns]
    rest = [name for name in df.columns if name not in front]
    return df[front + rest]


def to_records(df: pd.DataFrame, cls: Callable[[], T]) -> list[T]:
    """
    Map each row to a new ``cls()`` instance.

    Columns are assigned to attributes of the same name; columns without a
    matching attribute (or dataclass field) are ignored. Missing values
    become None.

    Args:
        df: Source frame
        cls: Class constructible without arguments

    Returns:
        One instance per row, in row order
    """
    _require_frame(df)
    out = []
    for row in df.to_dict("records"):
        obj = cls()
        field_names = (
            {f.name for f in dataclasses.fields(obj)} if dataclasses.is_dataclass(obj) else set()
        )
        for column, value in row.items():
            if column in field_names or hasattr(obj, column):
                setattr(obj, column, None if _is_null(value) else value)
        out.append(obj)
    return out


def _is_null(value: Any) -> bool:
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        # list-like cells
        return False


def to_csv(df: pd.DataFrame, delimiter: str = ",") -> str:
    """
    Render ``df`` as delimited text: a header line, then one line per row.

    Missing values are written as empty strings; fields containing the
    delimiter or quotes are quoted. Lines are separated by ``\\n`` with no
    trailing newline.
    """
    _require_frame(df)
    text = df.to_csv(sep=delimiter, index=False, na_rep="", lineterminator="\n")
    return text.rstrip("\n")


def add_column(df: pd.DataFrame, column_name: str, default_value: Any = None) -> None:
    """
    Add ``column_name`` to ``df`` in place, filled with ``default_value``.

    Raises:
        ValueError: If the column already exists
    """
    _require_frame(df)
    if column_name in df.columns:
        raise ValueError(f"Column '{column_name}' already exists")
    df[column_name] = [default_value] * len(df)


def _schema(df: pd.DataFrame) -> list[tuple[str, Any]]:
    return list(zip(df.columns, df.dtypes))


def merge_tables(tables: Iterable[pd.DataFrame]) -> pd.DataFrame:
    """
    Concatenate frames that share the same schema.

    Column names and dtypes must match pairwise, in order.

    Raises:
        ValueError: If no tables are given
        SchemaMismatchError: If a table's schema differs from the first one
    """
    if tables is None:
        raise TypeError("tables must not be None")
    frames = list(tables)
    if not frames:
        raise ValueError("At least one table is required")

    expected = None
    for position, frame in enumerate(frames):
        _require_frame(frame, f"tables[{position}]")
        schema = _schema(frame)
        if expected is None:
            expected = schema
        elif schema != expected:
            raise SchemaMismatchError(
                f"Tables have incompatible schemas: expected {expected}, got {schema}",
                position=position,
            )

    logger.debug("Merging %d tables with %d columns", len(frames), len(expected))
    return pd.concat(frames, ignore_index=True)


def filter_rows(df: pd.DataFrame, predicate: Callable[[pd.Series], bool]) -> pd.DataFrame:
    """Rows for which ``predicate(row)`` is truthy, with a fresh index."""
    _require_frame(df)
    if predicate is None:
        raise TypeError("predicate must not be None")
    if df.empty:
        return df.iloc[0:0].copy()
    mask = [bool(predicate(row)) for _, row in df.iterrows()]
    return df.loc[mask].reset_index(drop=True)


def is_empty(df: pd.DataFrame) -> bool:
    """True when ``df`` has no rows."""
    _require_frame(df)
    return len(df.index) == 0


def remove_duplicates(df: pd.DataFrame, *column_names: str) -> pd.DataFrame:
    """
    Keep the first row for each key built from ``column_names``.

    The key joins the string form of the listed columns with ``|`` (missing
    values count as empty strings), so ``1`` and ``"1"`` compare equal.
    Without column names every column is part of the key.

    Raises:
        KeyError: If a listed column does not exist
    """
    _require_frame(df)
    columns = list(column_names) or list(df.columns)
    missing = [name for name in columns if name not in df.columns]
    if missing:
        raise KeyError(f"Unknown column(s): {', '.join(map(str, missing))}")

    seen: set[str] = set()
    keep = []
    for values in df[columns].itertuples(index=False, name=None):
        key = "|".join("" if _is_null(v) else str(v) for v in values)
        keep.append(key not in seen)
        seen.add(key)
    return df.loc[keep].reset_index(drop=True)
