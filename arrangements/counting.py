"""Memoized counting of the resolutions of a row's unknown cells.

Cells are counted in their symbol form (``"?.#"``), and both evaluators key
the cache by the *content* of the remaining symbols and the remaining run
lengths. A count computed for one row is therefore reused by any other row
(or any other fold of an unfolded row) that reaches the same suffix.
"""

from typing import Iterable, Optional, Sequence

from .model import Cell, Row
from .rules import MAX_RECURSIVE_CELLS, UNSET_SYMBOL
from .search import count_by_enumeration
from .types import CacheKey, CountCache, CountMethod


MAY_BE_SET = frozenset(cell.value for cell in Cell if cell.may_be_set)
MAY_BE_UNSET = frozenset(cell.value for cell in Cell if cell.may_be_unset)


def to_pattern(cells: Sequence[Cell]) -> str:
    # Cell is a str enum, so members join to their symbols
    return "".join(cells)


def resolve_trivial(pattern: str, run_lengths: Sequence[int]) -> tuple[int, Optional[CacheKey]]:
    """Settle the cases that need no branching.

    Returns ``(count, None)`` when the answer is known outright, otherwise
    ``(0, key)`` where ``key`` is the cache key of the suffix starting at the
    first cell that may be set.
    """
    if not run_lengths:
        return (1 if all(symbol in MAY_BE_UNSET for symbol in pattern) else 0), None

    pattern = pattern.lstrip(UNSET_SYMBOL)
    if not pattern:
        # runs remain but nowhere to place them
        return 0, None

    return 0, (pattern, tuple(run_lengths))


def branches(key: CacheKey) -> Iterable[tuple[str, tuple[int, ...]]]:
    """Yield the sub-problems whose counts add up to the count for ``key``.

    The first cell of ``key`` always may be set.
    """
    pattern, run_lengths = key
    run_length = run_lengths[0]

    if run_fits(pattern, run_length):
        # skip the run and the separator after it
        yield pattern[run_length + 1:], run_lengths[1:]

    if pattern[0] == Cell.UNKNOWN.value:
        yield pattern[1:], run_lengths


def run_fits(pattern: str, run_length: int) -> bool:
    if len(pattern) < run_length:
        return False
    if not all(symbol in MAY_BE_SET for symbol in pattern[:run_length]):
        return False
    return len(pattern) == run_length or pattern[run_length] in MAY_BE_UNSET


def count_arrangements(cells: Sequence[Cell], run_lengths: Sequence[int], cache: CountCache) -> int:
    """Count the resolutions of ``cells`` whose set runs are exactly ``run_lengths``."""
    pattern = to_pattern(cells)
    if len(pattern) > MAX_RECURSIVE_CELLS:
        return _count_pattern_iterative(pattern, run_lengths, cache)
    return _count_pattern(pattern, run_lengths, cache)


def _count_pattern(pattern: str, run_lengths: Sequence[int], cache: CountCache) -> int:
    count, key = resolve_trivial(pattern, run_lengths)
    if key is None:
        return count

    cached = cache.get(key)
    if cached is not None:
        return cached

    total = 0
    for sub_pattern, sub_run_lengths in branches(key):
        total += _count_pattern(sub_pattern, sub_run_lengths, cache)

    cache[key] = total
    return total


def count_arrangements_iterative(cells: Sequence[Cell], run_lengths: Sequence[int], cache: CountCache) -> int:
    """Same result and cache keys as ``count_arrangements``, without recursion.

    A key stays on the stack until every sub-problem it branches into is
    cached; each sub-problem is strictly shorter, so the loop terminates.
    """
    return _count_pattern_iterative(to_pattern(cells), run_lengths, cache)


def _count_pattern_iterative(pattern: str, run_lengths: Sequence[int], cache: CountCache) -> int:
    count, root = resolve_trivial(pattern, run_lengths)
    if root is None:
        return count

    stack: list[CacheKey] = [root]
    while stack:
        key = stack[-1]
        if key in cache:
            stack.pop()
            continue

        total = 0
        pending: list[CacheKey] = []
        for sub_pattern, sub_run_lengths in branches(key):
            sub_count, sub_key = resolve_trivial(sub_pattern, sub_run_lengths)
            if sub_key is None:
                total += sub_count
            elif sub_key in cache:
                total += cache[sub_key]
            else:
                pending.append(sub_key)

        if pending:
            stack.extend(pending)
            continue

        cache[key] = total
        stack.pop()

    return cache[root]


def count_row(row: Row, cache: CountCache, method: CountMethod = "recursive") -> int:
    if method == "iterative":
        return count_arrangements_iterative(row.cells, row.run_lengths, cache)
    if method == "enumerate":
        return count_by_enumeration(row.cells, row.run_lengths)
    return count_arrangements(row.cells, row.run_lengths, cache)


def count_all(rows: Iterable[Row], cache: Optional[CountCache] = None, method: CountMethod = "recursive") -> int:
    """Sum the arrangement counts of ``rows``, all sharing one cache."""
    if cache is None:
        cache = {}
    return sum(count_row(row, cache, method) for row in rows)
