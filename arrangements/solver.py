import os
from concurrent.futures import ProcessPoolExecutor
from typing import Callable, Optional

from .counting import count_row
from .model import Row
from .rules import DEFAULT_UNFOLD_FACTOR
from .types import CountCache, CountMethod, CountResult, ProgressState, TraceLog
from .unfold import unfold
from .utils import chunk_evenly, trace
from .validation import validate_count_options, validate_enumerable


def count_rows(
    rows: list[Row],
    unfold_factor: int = 1,
    method: CountMethod = "recursive",
    stop_requested: Optional[Callable[[], bool]] = None,
    progress_callback: Optional[Callable[[ProgressState], None]] = None,
    progress_interval: int = 1,
    use_multiprocessing: bool = False,
    workers: Optional[int] = None,
    trace: bool = False,
    trace_log: Optional[TraceLog] = None,
) -> CountResult:
    validate_count_options(
        rows=rows,
        unfold_factor=unfold_factor,
        method=method,
        progress_interval=progress_interval,
        workers=workers,
    )

    rows = unfold(rows, unfold_factor) if unfold_factor > 1 else list(rows)
    if method == "enumerate":
        for row in rows:
            validate_enumerable(row.unknown_count)

    _trace(trace, trace_log, f"Counting {len(rows)} rows: method={method}, unfold_factor={unfold_factor}")

    if use_multiprocessing:
        row_counts, cache_entries = count_rows_multiprocess(rows=rows, method=method, workers=workers)
        complete = True
        for index, (row, count) in enumerate(zip(rows, row_counts)):
            _trace(trace, trace_log, f"Row {index + 1}: {row} -> {count}")
    else:
        row_counts, cache_entries, complete = _count_rows_sequential(
            rows=rows,
            method=method,
            stop_requested=stop_requested,
            progress_callback=progress_callback,
            progress_interval=progress_interval,
            trace_enabled=trace,
            trace_log=trace_log,
        )

    total = sum(row_counts)
    _trace(trace, trace_log, f"Total {total} arrangements, cache holds {cache_entries} entries")

    return {
        "method": method,
        "unfold_factor": unfold_factor,
        "complete": complete,
        "total": total,
        "row_counts": row_counts,
        "rows_counted": len(row_counts),
        "cache_entries": cache_entries,
        "message": "Count completed." if complete else "Count stopped before every row was counted.",
    }


def solve_records(
    rows: list[Row],
    unfold_factor: int = DEFAULT_UNFOLD_FACTOR,
    method: CountMethod = "recursive",
    use_multiprocessing: bool = False,
    workers: Optional[int] = None,
    trace: bool = False,
    trace_log: Optional[TraceLog] = None,
) -> dict[str, int]:
    """Count the rows as given and unfolded, the two answers for one batch of records."""
    folded = count_rows(
        rows,
        unfold_factor=1,
        method=method,
        use_multiprocessing=use_multiprocessing,
        workers=workers,
        trace=trace,
        trace_log=trace_log,
    )
    unfolded = count_rows(
        rows,
        unfold_factor=unfold_factor,
        method=method,
        use_multiprocessing=use_multiprocessing,
        workers=workers,
        trace=trace,
        trace_log=trace_log,
    )
    return {"folded": folded["total"], "unfolded": unfolded["total"]}


def count_rows_multiprocess(
    rows: list[Row],
    method: CountMethod,
    workers: Optional[int],
) -> tuple[list[int], int]:
    """Count row chunks in worker processes.

    Every worker owns a private cache, so no cache is shared between processes.
    Row order of the returned counts matches ``rows``.
    """
    if not rows:
        return [], 0

    worker_count = workers or max(1, (os.cpu_count() or 1) - 1)
    indexed_rows = list(enumerate(rows))
    chunks = chunk_evenly(indexed_rows, worker_count)

    try:
        executor = ProcessPoolExecutor(max_workers=len(chunks))
    except (PermissionError, OSError):
        row_counts, cache_entries, _ = _count_rows_sequential(
            rows=rows,
            method=method,
            stop_requested=None,
            progress_callback=None,
            progress_interval=1,
            trace_enabled=False,
            trace_log=None,
        )
        return row_counts, cache_entries

    row_counts = [0] * len(rows)
    cache_entries = 0
    with executor:
        futures = [
            executor.submit(count_rows_worker, [row for _, row in chunk], method)
            for chunk in chunks
        ]
        for chunk, future in zip(chunks, futures):
            chunk_counts, chunk_cache_entries = future.result()
            for (index, _), count in zip(chunk, chunk_counts):
                row_counts[index] = count
            cache_entries += chunk_cache_entries

    return row_counts, cache_entries


def count_rows_worker(rows: list[Row], method: CountMethod) -> tuple[list[int], int]:
    cache: CountCache = {}
    return [count_row(row, cache, method) for row in rows], len(cache)


def _count_rows_sequential(
    rows: list[Row],
    method: CountMethod,
    stop_requested: Optional[Callable[[], bool]],
    progress_callback: Optional[Callable[[ProgressState], None]],
    progress_interval: int,
    trace_enabled: bool,
    trace_log: Optional[TraceLog],
) -> tuple[list[int], int, bool]:
    cache: CountCache = {}
    row_counts: list[int] = []
    running_total = 0

    for index, row in enumerate(rows):
        if stop_requested is not None and stop_requested():
            return row_counts, len(cache), False

        count = count_row(row, cache, method)
        row_counts.append(count)
        running_total += count
        _trace(trace_enabled, trace_log, f"Row {index + 1}: {row} -> {count}")

        if progress_callback is not None and (len(row_counts) % progress_interval == 0 or len(row_counts) == len(rows)):
            progress_callback({"rows_counted": len(row_counts), "running_total": running_total})

    return row_counts, len(cache), True


def _trace(enabled: bool, trace_log: Optional[TraceLog], message: str) -> None:
    trace(enabled, trace_log, message)
