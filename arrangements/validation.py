from typing import Optional

from .model import Row
from .rules import COUNT_METHODS, MAX_ENUMERATION_UNKNOWNS, MIN_UNFOLD_FACTOR
from .types import CountMethod


def validate_unfold_factor(unfold_factor: int) -> None:
    if not isinstance(unfold_factor, int) or isinstance(unfold_factor, bool):
        raise ValueError("unfold_factor must be an integer")
    if unfold_factor < MIN_UNFOLD_FACTOR:
        raise ValueError(f"unfold_factor must be >= {MIN_UNFOLD_FACTOR}")


def validate_count_method(method: CountMethod) -> None:
    if method not in COUNT_METHODS:
        raise ValueError(f"method must be one of: {', '.join(COUNT_METHODS)}")


def validate_enumerable(unknown_count: int) -> None:
    if unknown_count > MAX_ENUMERATION_UNKNOWNS:
        raise ValueError(
            f"enumeration is limited to rows with at most {MAX_ENUMERATION_UNKNOWNS} unknown cells, got {unknown_count}"
        )


def validate_count_options(
    rows: list[Row],
    unfold_factor: int,
    method: CountMethod,
    progress_interval: int,
    workers: Optional[int],
) -> None:
    validate_unfold_factor(unfold_factor)
    validate_count_method(method)
    if progress_interval < 1:
        raise ValueError("progress_interval must be >= 1")
    if workers is not None and workers < 1:
        raise ValueError("workers must be >= 1")
    for row in rows:
        if not isinstance(row, Row):
            raise ValueError("rows must be Row instances")
