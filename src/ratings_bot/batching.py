from __future__ import annotations

from typing import Iterator, List, Sequence, TypeVar

T = TypeVar("T")


def cap(items: Sequence[T], max_per_run: int) -> List[T]:
    """First ``max_per_run`` items, in their original order."""
    return list(items[: max(0, int(max_per_run))])


def chunked(items: Sequence[T], size: int) -> Iterator[List[T]]:
    """Yield consecutive slices of at most ``size`` items."""
    size = max(1, int(size))
    for i in range(0, len(items), size):
        yield list(items[i : i + size])
