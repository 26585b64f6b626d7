"""
Row ordering for the result grid.

Ascending order: NULL last, two numbers compare numerically, anything else
compares as text with a natural ("file2" < "file10"), case-insensitive order.
Descending order reverses the non-NULL groups while rows with equal keys keep
their original relative order; NULL rows stay last in both directions.
"""
import re
from functools import cmp_to_key
from typing import Any, List, Sequence, Tuple

from .cell_values import CellKind, cell_kind, display_text
from .models import SortDirection

_CHUNK_RE = re.compile(r"(\d+)")


def natural_key(text: str) -> Tuple[Tuple[int, int, str], ...]:
    """Split text into digit and non-digit chunks for natural ordering."""
    key = []
    for chunk in _CHUNK_RE.split(text):
        if not chunk:
            continue
        # Decimal digits only; int() rejects "²" and "①"
        if _CHUNK_RE.fullmatch(chunk):
            key.append((0, int(chunk), ""))
        else:
            key.append((1, 0, chunk.casefold()))
    return tuple(key)


def _cmp(left, right) -> int:
    return (left > right) - (left < right)


def compare_cells(left: Any, right: Any) -> int:
    """Three-way comparison used for ascending order."""
    left_null = cell_kind(left) is CellKind.NULL
    right_null = cell_kind(right) is CellKind.NULL
    if left_null or right_null:
        return _cmp(left_null, right_null)

    if cell_kind(left) is CellKind.NUMBER and cell_kind(right) is CellKind.NUMBER:
        return _cmp(left, right)

    left_text = display_text(left)
    right_text = display_text(right)
    order = _cmp(natural_key(left_text), natural_key(right_text))
    if order == 0:
        # Same text up to case: keep a deterministic order
        order = _cmp(left_text, right_text)
    return order


def sort_rows(
    rows: Sequence[Sequence[Any]],
    column_index: int,
    direction: SortDirection = SortDirection.ASC,
) -> List[Sequence[Any]]:
    """
    Return rows ordered by one column.

    sorted() is stable, including with reverse=True, so tied rows keep their
    original order in both directions.
    """
    valued = []
    nulls = []
    for row in rows:
        if cell_kind(row[column_index]) is CellKind.NULL:
            nulls.append(row)
        else:
            valued.append(row)

    key = cmp_to_key(lambda a, b: compare_cells(a[column_index], b[column_index]))
    ordered = sorted(valued, key=key, reverse=(direction is SortDirection.DESC))
    return ordered + nulls
