import argparse
import json
from pathlib import Path
from typing import Optional

from arrangements.model import Row
from arrangements.parsing import parse_rows
from arrangements.rules import COUNT_METHODS, DEFAULT_UNFOLD_FACTOR
from arrangements.solver import solve_records
from arrangements.validation import validate_count_method, validate_unfold_factor


def run(
    rows: list[Row],
    unfold_factor: int = DEFAULT_UNFOLD_FACTOR,
    method: str = "recursive",
    use_multiprocessing: bool = False,
    workers: Optional[int] = None,
) -> dict[str, int]:
    # boundary validation
    if not isinstance(rows, list):
        raise ValueError("rows must be a list")
    validate_unfold_factor(unfold_factor)
    validate_count_method(method)

    return solve_records(
        rows,
        unfold_factor=unfold_factor,
        method=method,
        use_multiprocessing=use_multiprocessing,
        workers=workers,
    )


def run_with_trace(
    rows: list[Row],
    unfold_factor: int = DEFAULT_UNFOLD_FACTOR,
    method: str = "recursive",
    workers: Optional[int] = None,
) -> tuple[dict[str, int], list[str]]:
    trace_log: list[str] = []
    result = solve_records(
        rows,
        unfold_factor=unfold_factor,
        method=method,
        use_multiprocessing=workers is not None,
        workers=workers,
        trace=True,
        trace_log=trace_log,
    )
    return result, trace_log


def load_rows_from_file(input_path: str) -> list[Row]:
    path = Path(input_path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ValueError(f"input file not found: {input_path}") from exc

    rows = parse_rows(text)
    if not rows:
        raise ValueError(f"input file has no records: {input_path}")
    return rows


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Count the arrangements of damaged-spring records")
    parser.add_argument("--input", required=True, help="Path to a text file with one record per line")
    parser.add_argument(
        "--unfold",
        type=int,
        default=DEFAULT_UNFOLD_FACTOR,
        help="Number of copies each record is unfolded into for the second answer",
    )
    parser.add_argument("--method", choices=COUNT_METHODS, default="recursive", help="Counting method")
    parser.add_argument("--workers", type=int, default=None, help="Count rows in this many worker processes")
    parser.add_argument("--trace", action="store_true", help="Include counting trace output")
    return parser


if __name__ == "__main__":
    args = _build_parser().parse_args()

    try:
        rows = load_rows_from_file(args.input)
        if args.trace:
            result, trace_log = run_with_trace(
                rows,
                unfold_factor=args.unfold,
                method=args.method,
                workers=args.workers,
            )
            print(json.dumps({**result, "trace": trace_log}, indent=2))
        else:
            result = run(
                rows,
                unfold_factor=args.unfold,
                method=args.method,
                use_multiprocessing=args.workers is not None,
                workers=args.workers,
            )
            print(json.dumps(result, indent=2))
    except ValueError as exc:
        raise SystemExit(f"Error: {exc}")
