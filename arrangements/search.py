from itertools import product
from typing import Optional, Sequence

from .model import Cell
from .types import TraceLog
from .utils import render_cells, trace
from .validation import validate_enumerable


def run_lengths_of(cells: Sequence[Cell]) -> tuple[int, ...]:
    """Lengths of the maximal runs of set cells, left to right."""
    run_lengths: list[int] = []
    current = 0
    for cell in cells:
        if cell is Cell.SET:
            current += 1
        elif current:
            run_lengths.append(current)
            current = 0
    if current:
        run_lengths.append(current)
    return tuple(run_lengths)


def count_by_enumeration(
    cells: Sequence[Cell],
    run_lengths: Sequence[int],
    trace_enabled: bool = False,
    trace_log: Optional[TraceLog] = None,
) -> int:
    unknown_positions = [index for index, cell in enumerate(cells) if cell is Cell.UNKNOWN]
    validate_enumerable(len(unknown_positions))

    expected = tuple(run_lengths)
    resolved = list(cells)
    total = 0

    for assignment in product((Cell.SET, Cell.UNSET), repeat=len(unknown_positions)):
        for position, cell in zip(unknown_positions, assignment):
            resolved[position] = cell
        if run_lengths_of(resolved) == expected:
            total += 1
            trace(trace_enabled, trace_log, f"Accept resolution {render_cells(resolved)}")

    return total
