"""
Cell Values - closed set of cell kinds and their text forms.

Every value that reaches the grid is one of NULL, BOOLEAN, NUMBER, TEXT or
STRUCTURED. Display, clipboard and sorting all go through this module so the
text form of a cell never depends on the Python type that produced it.
"""
import datetime
import json
import math
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, Sequence

import numpy as np
import pandas as pd


class CellKind(Enum):
    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    TEXT = "text"
    STRUCTURED = "structured"


def normalize_cell(value: Any) -> Any:
    """
    Convert an engine value to one of the closed cell kinds.

    numpy scalars are unwrapped, NaN/NaT become None, temporal values become
    ISO text, bytes become text. Lists and mappings are normalized recursively.
    """
    if value is None:
        return None

    # .item() would turn nanosecond datetime64 into a bare int
    if isinstance(value, np.datetime64):
        value = pd.Timestamp(value)
    elif isinstance(value, np.timedelta64):
        value = pd.Timedelta(value)
    elif isinstance(value, np.generic):
        value = value.item()

    if isinstance(value, float):
        return None if math.isnan(value) else value

    if isinstance(value, (bool, int, str)):
        return value

    if isinstance(value, Decimal):
        return float(value)

    if value is pd.NaT:
        return None

    if isinstance(value, (pd.Timestamp, datetime.datetime, datetime.date, datetime.time)):
        return value.isoformat()

    if isinstance(value, (pd.Timedelta, datetime.timedelta)):
        return str(value)

    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")

    if isinstance(value, np.ndarray):
        return [normalize_cell(item) for item in value.tolist()]

    if isinstance(value, Mapping):
        return {str(key): normalize_cell(item) for key, item in value.items()}

    if isinstance(value, (list, tuple)):
        return [normalize_cell(item) for item in value]

    return str(value)


def cell_kind(value: Any) -> CellKind:
    """Classify a normalized value."""
    if value is None:
        return CellKind.NULL
    if isinstance(value, bool):
        return CellKind.BOOLEAN
    if isinstance(value, (int, float)):
        return CellKind.NUMBER
    if isinstance(value, str):
        return CellKind.TEXT
    return CellKind.STRUCTURED


def display_text(value: Any) -> str:
    """
    Text shown in a cell and copied to the clipboard.

    NULL is empty, TEXT is shown as-is, everything else uses its JSON form
    (true, 3.5, {"a": 1}, ...).
    """
    kind = cell_kind(value)
    if kind is CellKind.NULL:
        return ""
    if kind is CellKind.TEXT:
        return value
    return json.dumps(value, ensure_ascii=False, default=str)


def row_as_text(row: Sequence[Any]) -> str:
    """Serialize a whole row (all columns) as indented JSON."""
    return json.dumps(list(row), ensure_ascii=False, indent=2, default=str)
