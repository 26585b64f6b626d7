"""
Utility helpers shared by the engine and the UI.
"""

from .formatting import format_bytes, format_count, format_duration
from .sql_text import split_statements, is_select_statement, format_sql

__all__ = [
    'format_bytes',
    'format_count',
    'format_duration',
    'split_statements',
    'is_select_statement',
    'format_sql',
]
