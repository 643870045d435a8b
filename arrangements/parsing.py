from .model import Cell, Row


def parse_row(line: str) -> Row:
    """Parse one record such as ``???.### 1,1,3``."""
    parts = line.split()
    if len(parts) != 2:
        raise ValueError("record must be cells followed by comma-separated run lengths")

    cells_text, run_lengths_text = parts
    cells = tuple(Cell.from_symbol(symbol) for symbol in cells_text)

    run_lengths: list[int] = []
    for value in run_lengths_text.split(","):
        if not value.isdigit():
            raise ValueError(f"run length {value!r} is not a positive integer")
        run_lengths.append(int(value))

    return Row(cells=cells, run_lengths=tuple(run_lengths))


def parse_rows(text: str) -> list[Row]:
    rows: list[Row] = []
    for line_number, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        try:
            rows.append(parse_row(line))
        except ValueError as exc:
            raise ValueError(f"line {line_number}: {exc}") from exc
    return rows
