from typing import Iterable

from .model import Cell, Row
from .validation import validate_unfold_factor


def unfold_row(row: Row, unfold_factor: int) -> Row:
    """Repeat a row ``unfold_factor`` times, copies joined by one unknown cell."""
    validate_unfold_factor(unfold_factor)

    cells: list[Cell] = list(row.cells)
    for _ in range(unfold_factor - 1):
        cells.append(Cell.UNKNOWN)
        cells.extend(row.cells)

    return Row(cells=tuple(cells), run_lengths=row.run_lengths * unfold_factor)


def unfold(rows: Iterable[Row], unfold_factor: int) -> list[Row]:
    return [unfold_row(row, unfold_factor) for row in rows]
