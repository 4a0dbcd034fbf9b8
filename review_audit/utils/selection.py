"""
Ranked selection helper.

Bounded top-k over one or more candidate pools, used for the
representative reviews (with backfill) and the recent-years window.
"""

from typing import Callable, Iterable, List, Optional, Sequence, TypeVar

T = TypeVar("T")


def select_ranked(
    pools: Sequence[Iterable[T]],
    limit: int,
    key: Callable[[T], object],
    predicate: Optional[Callable[[T], bool]] = None,
    reverse: bool = True
) -> List[T]:
    """
    Pick up to `limit` items, draining pools in order.

    Each pool is filtered by `predicate`, stably sorted by `key`, and used
    to fill the remaining slots. Items already selected from an earlier
    pool are skipped (identity comparison), so later pools only backfill.

    Args:
        pools: Candidate pools, primary first
        limit: Maximum number of items to return
        key: Sort key
        predicate: Optional filter applied to every pool
        reverse: Sort descending when True

    Returns:
        Selected items, primary pool's picks first
    """
    selected: List[T] = []
    seen = set()

    for pool in pools:
        if len(selected) >= limit:
            break
        candidates = [
            item for item in pool
            if id(item) not in seen and (predicate is None or predicate(item))
        ]
        candidates.sort(key=key, reverse=reverse)
        for item in candidates[:limit - len(selected)]:
            selected.append(item)
            seen.add(id(item))

    return selected
