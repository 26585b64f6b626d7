"""
Display formatting helpers.
"""
from typing import Optional

BYTE_UNITS = ("B", "KB", "MB", "GB", "TB")


def format_bytes(size: int) -> str:
    """
    Human readable file size, in 1024 steps.

    Two decimals below 10 of a unit, one decimal above:
    format_bytes(1536) == "1.50 KB", format_bytes(20480) == "20.0 KB".
    """
    if size < 1024:
        return f"{size} B"

    value = float(size)
    index = 0
    while value >= 1024 and index < len(BYTE_UNITS) - 1:
        value /= 1024
        index += 1

    decimals = 1 if value >= 10 else 2
    return f"{value:.{decimals}f} {BYTE_UNITS[index]}"


def format_count(count: int) -> str:
    """Thousands separators: 1234567 -> "1,234,567"."""
    return f"{count:,}"


def format_duration(duration_ms: Optional[int]) -> str:
    return "" if duration_ms is None else f"{duration_ms:,}"
