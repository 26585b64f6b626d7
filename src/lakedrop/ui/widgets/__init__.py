"""
Result grid widgets.
"""

from .resizable_header import ResizableHeader
from .result_grid_view import ResultGridView
from .result_table_model import ResultTableModel

__all__ = [
    'ResizableHeader',
    'ResultGridView',
    'ResultTableModel',
]
