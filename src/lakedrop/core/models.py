"""
Session data model.

All models are frozen dataclasses: a state transition builds a new object
(dataclasses.replace) instead of mutating the published one, so observers can
keep any snapshot they receive.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Tuple


@dataclass(frozen=True)
class FieldInfo:
    """One column of the source schema."""
    name: str
    dtype: str


@dataclass(frozen=True)
class FileMetadata:
    """
    Description of the active source file.

    Attributes:
        file_name: Base name of the file
        file_path: Full path as given to the engine
        file_size: Size in bytes
        row_count: Number of rows in the source (or active sheet)
        schema: Ordered column descriptions
        sheets: Workbook sheet names (empty for non-spreadsheet files)
        active_sheet: Selected sheet; None means sheets[0]
    """
    file_name: str
    file_path: str
    file_size: int = 0
    row_count: int = 0
    schema: Tuple[FieldInfo, ...] = ()
    sheets: Tuple[str, ...] = ()
    active_sheet: Optional[str] = None

    def __post_init__(self):
        if self.file_size < 0 or self.row_count < 0:
            raise ValueError("file_size and row_count must be non-negative")
        if self.active_sheet is not None and self.sheets and self.active_sheet not in self.sheets:
            raise ValueError(f"Active sheet '{self.active_sheet}' is not one of {list(self.sheets)}")

    @property
    def current_sheet(self) -> Optional[str]:
        """Active sheet with the first-sheet default applied."""
        if self.active_sheet is not None:
            return self.active_sheet
        return self.sheets[0] if self.sheets else None


@dataclass(frozen=True)
class ColumnInfo:
    """One column of a query result; order defines grid column order."""
    name: str
    dtype: str


@dataclass(frozen=True)
class QueryResult:
    """
    Materialized query result.

    row_count is the engine-side total and may exceed len(rows) when the
    result was capped.
    """
    columns: Tuple[ColumnInfo, ...] = ()
    rows: Tuple[Tuple[Any, ...], ...] = ()
    row_count: int = 0

    def __post_init__(self):
        width = len(self.columns)
        for index, row in enumerate(self.rows):
            if len(row) != width:
                raise ValueError(
                    f"Row {index} has {len(row)} values, expected {width}"
                )
        if self.row_count < 0:
            raise ValueError("row_count must be non-negative")

    @property
    def is_truncated(self) -> bool:
        return self.row_count > len(self.rows)


@dataclass(frozen=True)
class ErrorInfo:
    """Last recorded failure: error class name plus its message."""
    kind: str
    message: str

    @classmethod
    def from_exception(cls, error: Exception) -> "ErrorInfo":
        return cls(kind=type(error).__name__, message=str(error))


@dataclass(frozen=True)
class SessionState:
    """Authoritative session snapshot, owned by SessionController."""
    file_meta: Optional[FileMetadata] = None
    query_text: str = ""
    result: Optional[QueryResult] = None
    is_loading_file: bool = False
    is_running_query: bool = False
    last_query_duration_ms: Optional[int] = None
    last_error: Optional[ErrorInfo] = None
    # Bumped on every result replacement, even by an equal or identical result
    result_version: int = 0


class SortDirection(Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class GridViewState:
    """Sort and column-width state, owned by the grid subsystem."""
    sort_column_index: Optional[int] = None
    sort_direction: SortDirection = SortDirection.ASC
    column_widths: Tuple[float, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class RowWindow:
    """
    Contiguous range of display rows to materialize.

    Attributes:
        start: First row index (inclusive)
        end: Last row index (exclusive)
        total_height: Scrollable extent for all rows
        offset: Vertical position of row `start`
    """
    start: int
    end: int
    total_height: float
    offset: float

    def __len__(self) -> int:
        return self.end - self.start

    def indexes(self) -> range:
        return range(self.start, self.end)
