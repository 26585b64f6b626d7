"""
Core module - session state, result grid logic and engine boundary.
"""

from .cell_values import CellKind, cell_kind, display_text, normalize_cell, row_as_text
from .drop_zone import DropZoneBridge
from .engine_client import DataEngine, DataEngineClient, EngineRequestWorker
from .errors import (
    LakeDropError,
    ValidationError,
    ScanError,
    QueryError,
    SheetError,
    ExportError,
    NoActiveFileError,
    SampleResolutionError,
)
from .grid_model import ResultGridModel
from .interaction import ContextMenuState, InteractionController, ResizeCapture
from .models import (
    ColumnInfo,
    ErrorInfo,
    FieldInfo,
    FileMetadata,
    GridViewState,
    QueryResult,
    RowWindow,
    SessionState,
    SortDirection,
)
from .notifier import LoggingNotifier, Notifier
from .session_controller import SessionController

__all__ = [
    # Cell values
    'CellKind',
    'cell_kind',
    'display_text',
    'normalize_cell',
    'row_as_text',
    # Controllers
    'SessionController',
    'ResultGridModel',
    'InteractionController',
    'DropZoneBridge',
    'ContextMenuState',
    'ResizeCapture',
    # Engine boundary
    'DataEngine',
    'DataEngineClient',
    'EngineRequestWorker',
    # Errors
    'LakeDropError',
    'ValidationError',
    'ScanError',
    'QueryError',
    'SheetError',
    'ExportError',
    'NoActiveFileError',
    'SampleResolutionError',
    # Models
    'ColumnInfo',
    'ErrorInfo',
    'FieldInfo',
    'FileMetadata',
    'GridViewState',
    'QueryResult',
    'RowWindow',
    'SessionState',
    'SortDirection',
    # Notifications
    'Notifier',
    'LoggingNotifier',
]
