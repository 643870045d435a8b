from typing import Optional, Sequence

from .model import Cell
from .types import TraceLog


def trace(enabled: bool, trace_log: Optional[TraceLog], message: str) -> None:
    if not enabled:
        return
    if trace_log is not None:
        trace_log.append(message)
    else:
        print(message)


def render_cells(cells: Sequence[Cell]) -> str:
    return "".join(cell.value for cell in cells)


def chunk_evenly(items: list, chunk_count: int) -> list[list]:
    if chunk_count < 1:
        return [items]
    chunks: list[list] = [[] for _ in range(min(chunk_count, len(items)))]
    for index, item in enumerate(items):
        chunks[index % len(chunks)].append(item)
    return chunks
