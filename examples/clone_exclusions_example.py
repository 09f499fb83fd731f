"""
Quick demonstration of deep cloning with field exclusions.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field

import numpy as np

from helperkit import CloneOptions, RecursionLimitExceededError, clone, readonly_field
from helperkit.serialization import serialize_to_json


@dataclass
class Customer:
    id: int = readonly_field(default=0)
    name: str = ""
    email: str = ""
    tags: list[str] = field(default_factory=list)
    history: np.ndarray | None = None


def pretty(data: str) -> str:
    """Return JSON formatted output."""
    return json.dumps(json.loads(data), indent=2, sort_keys=True)


def main() -> None:
    original = Customer(
        id=17,
        name="Ada",
        email="ada@example.org",
        tags=["vip"],
        history=np.array([120.0, 80.5]),
    )

    anonymized = clone(original, exclude={"email", "name"})
    anonymized.tags.append("exported")

    print("Original:")
    print(pretty(serialize_to_json(original)))
    print("\nAnonymized clone (id is read-only, so it stays 0):")
    print(pretty(serialize_to_json(anonymized)))

    # Cycles are not tracked: a depth guard turns them into a clear error
    loop: list = []
    loop.append(loop)
    try:
        clone(loop, options=CloneOptions(max_depth=50))
    except RecursionLimitExceededError as e:
        print(f"\nCyclic list rejected: {e}")


if __name__ == "__main__":
    main()
