from dataclasses import dataclass
from enum import Enum

from .rules import MIN_RUN_LENGTH, SET_SYMBOL, UNKNOWN_SYMBOL, UNSET_SYMBOL


class Cell(str, Enum):
    """State of one position in a row."""

    SET = SET_SYMBOL
    UNSET = UNSET_SYMBOL
    UNKNOWN = UNKNOWN_SYMBOL

    @property
    def may_be_set(self) -> bool:
        return self is not Cell.UNSET

    @property
    def may_be_unset(self) -> bool:
        return self is not Cell.SET

    @classmethod
    def from_symbol(cls, symbol: str) -> "Cell":
        try:
            return cls(symbol)
        except ValueError as exc:
            raise ValueError(f"unknown cell symbol {symbol!r}; expected one of '.', '#', '?'") from exc


@dataclass(frozen=True)
class Row:
    """One counting problem: tri-state cells plus the ordered run lengths they must produce."""

    cells: tuple[Cell, ...]
    run_lengths: tuple[int, ...]

    def __post_init__(self) -> None:
        # accept any sequence, store tuples so rows hash and slice into cache keys
        object.__setattr__(self, "cells", tuple(self.cells))
        object.__setattr__(self, "run_lengths", tuple(self.run_lengths))

        for cell in self.cells:
            if not isinstance(cell, Cell):
                raise ValueError(f"row cells must be Cell values, got {cell!r}")
        for run_length in self.run_lengths:
            if not isinstance(run_length, int) or isinstance(run_length, bool):
                raise ValueError(f"run lengths must be integers, got {run_length!r}")
            if run_length < MIN_RUN_LENGTH:
                raise ValueError(f"run lengths must be at least {MIN_RUN_LENGTH}")

    @property
    def unknown_count(self) -> int:
        return sum(1 for cell in self.cells if cell is Cell.UNKNOWN)

    def __str__(self) -> str:
        cells_text = "".join(cell.value for cell in self.cells)
        return f"{cells_text} {','.join(str(run_length) for run_length in self.run_lengths)}"
