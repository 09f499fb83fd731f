"""
Sequence helpers: grouping, duplicates, chunking, shuffling and statistics.

Every helper accepts any iterable and returns new lists rather than lazy
views, so results can be indexed and reused.
"""

from __future__ import annotations

import pickle
from collections.abc import Callable, Hashable, Iterable, MutableSequence
from dataclasses import dataclass
from typing import Any, TypeVar

import numpy as np

T = TypeVar("T")

__all__ = [
    "SequenceStats",
    "add_or_set",
    "count_duplicates",
    "distinct_by",
    "get_duplicates",
    "is_serializable",
    "join",
    "shuffle",
    "split",
    "std_dev",
    "summarize",
]


def _require(value: Any, name: str) -> None:
    if value is None:
        raise TypeError(f"{name} must not be None")


def _group(iterable: Iterable[T], key: Callable[[T], Hashable]) -> dict[Hashable, list[T]]:
    groups: dict[Hashable, list[T]] = {}
    for item in iterable:
        groups.setdefault(key(item), []).append(item)
    return groups


def distinct_by(
    iterable: Iterable[T], key: Callable[[T], Hashable] | None = None
) -> list[T]:
    """
    Return the first item of each key group, in first-seen order.

    Args:
        iterable: Items to deduplicate
        key: Key selector; the item itself when omitted

    Returns:
        List with one item per distinct key

    **Example:**
        ```python
        distinct_by(["apple", "avocado", "banana"], key=lambda s: s[0])
        # ['apple', 'banana']
        ```
    """
    _require(iterable, "iterable")
    groups = _group(iterable, key or (lambda item: item))
    return [items[0] for items in groups.values()]


def get_duplicates(iterable: Iterable[T], key: Callable[[T], Hashable]) -> list[Hashable]:
    """Keys that occur more than once, in first-seen order."""
    _require(iterable, "iterable")
    _require(key, "key")
    return [k for k, items in _group(iterable, key).items() if len(items) > 1]


def count_duplicates(iterable: Iterable[T], key: Callable[[T], Hashable]) -> int:
    """
    Count the items that share their key with at least one other item.

    ``count_duplicates([1, 1, 2, 3, 3, 3], key=lambda x: x)`` is 5: two ones
    plus three threes.
    """
    _require(iterable, "iterable")
    _require(key, "key")
    return sum(len(items) for items in _group(iterable, key).values() if len(items) > 1)


def add_or_set(items: MutableSequence[T], index: int, value: T) -> bool:
    """
    Overwrite ``items[index]`` or append when ``index`` is one past the end.

    Returns:
        True when the list was changed, False when ``index`` lies beyond the
        end (negative indexes are rejected the same way)
    """
    _require(items, "items")
    size = len(items)
    if index < 0 or index > size:
        return False
    if index < size:
        items[index] = value
    else:
        items.append(value)
    return True


def is_serializable(iterable: Iterable[Any]) -> bool:
    """True when every item can be pickled."""
    _require(iterable, "iterable")
    for item in iterable:
        try:
            pickle.dumps(item)
        except (pickle.PicklingError, TypeError, AttributeError):
            return False
    return True


def join(iterable: Iterable[Any], delimiter: str) -> str:
    """Join the string form of each item with ``delimiter`` (None becomes "")."""
    _require(iterable, "iterable")
    return delimiter.join("" if item is None else str(item) for item in iterable)


def split(iterable: Iterable[T], size: int) -> list[list[T]]:
    """
    Split items into consecutive chunks of ``size`` (the last may be shorter).

    Raises:
        ValueError: If ``size`` is not positive
    """
    _require(iterable, "iterable")
    if size <= 0:
        raise ValueError(f"size must be > 0, got {size}")
    items = list(iterable)
    return [items[i : i + size] for i in range(0, len(items), size)]


def shuffle(iterable: Iterable[T], seed: int | None = None) -> list[T]:
    """Return a new list with the items in random order (reproducible with ``seed``)."""
    _require(iterable, "iterable")
    items = list(iterable)
    rng = np.random.default_rng(seed)
    return [items[i] for i in rng.permutation(len(items))]


@dataclass(frozen=True)
class SequenceStats:
    """Summary statistics of a numeric sequence (population standard deviation)."""

    count: int
    mean: float
    median: float
    std: float
    min: float
    max: float


def _as_array(values: Iterable[float]) -> np.ndarray:
    _require(values, "values")
    arr = np.asarray(list(values), dtype=float)
    if arr.size == 0:
        raise ValueError("values must not be empty")
    return arr


def std_dev(values: Iterable[float], ddof: int = 0) -> float:
    """Standard deviation; ``ddof=1`` gives the sample estimate."""
    arr = _as_array(values)
    if arr.size <= ddof:
        raise ValueError(f"need more than {ddof} values for ddof={ddof}")
    return float(np.std(arr, ddof=ddof))


def summarize(values: Iterable[float]) -> SequenceStats:
    """
    Compute count, mean, median, standard deviation, min and max.

    Raises:
        ValueError: If ``values`` is empty or not numeric
    """
    arr = _as_array(values)
    return SequenceStats(
        count=int(arr.size),
        mean=float(np.mean(arr)),
        median=float(np.median(arr)),
        std=float(np.std(arr)),
        min=float(np.min(arr)),
        max=float(np.max(arr)),
    )
