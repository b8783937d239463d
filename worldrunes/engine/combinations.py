from __future__ import annotations

from typing import Iterator, List, Sequence, TypeVar

T = TypeVar("T")

DEFAULT_MAX_COMBINATIONS = 10000


def generate_combinations(
    items: Sequence[T],
    size: int,
    max_results: int = DEFAULT_MAX_COMBINATIONS,
) -> Iterator[List[T]]:
    """Yield ``size``-element sublists of ``items`` in lexicographic index order.

    Stops silently after ``max_results`` subsets. Relative input order is kept
    inside every subset.
    """
    k = int(size)
    n = len(items)
    if k == 0:
        yield []
        return
    if k < 0 or k > n:
        return
    if int(max_results) <= 0:
        return
    if k == n:
        yield list(items)
        return

    # Index stack: current[i] is the index chosen for slot i.
    current: List[int] = []
    emitted = 0
    start = 0
    while True:
        needed = k - len(current)
        if needed == 0:
            yield [items[i] for i in current]
            emitted += 1
            if emitted >= int(max_results):
                return
            start = current.pop() + 1
            continue
        if n - start >= needed:
            current.append(start)
            start += 1
            continue
        # Not enough items left for this prefix: backtrack.
        if not current:
            return
        start = current.pop() + 1
