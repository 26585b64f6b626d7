"""
Local Engine - in-process DataEngine over pandas and DuckDB.

The active file is loaded into a pandas DataFrame and registered as the
`source` view of an in-memory DuckDB connection. Calls are serialized with a
lock: requests arrive from worker threads.
"""

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import duckdb
import pandas as pd

from ..constants import EXPORT_FORMATS, SOURCE_TABLE
from ..core.cell_values import display_text, normalize_cell
from ..core.engine_client import DataEngine
from ..core.errors import ExportError, QueryError, ScanError, SheetError
from ..core.models import ColumnInfo, FieldInfo, FileMetadata, QueryResult
from ..utils.sql_text import is_select_statement, split_statements
from .file_types import FileKind, FileSpec, detect_file_kind
from .readers import LoadedFrame, load_frame, pandas_dtype_name, sql_type_name
from .samples import SampleLibrary

logger = logging.getLogger(__name__)

NO_FILE_MESSAGE = "No file loaded. Drag a file to begin."


@dataclass
class _ActiveSource:
    path: Path
    spec: FileSpec
    frame: LoadedFrame


class LocalEngine(DataEngine):
    """
    DataEngine reading local files.

    Args:
        samples: Sample file lookup (default: packaged + user samples directories)
    """

    def __init__(self, samples: Optional[SampleLibrary] = None):
        self._lock = threading.Lock()
        self._connection = duckdb.connect(database=':memory:')
        self._source: Optional[_ActiveSource] = None
        self._samples = samples or SampleLibrary()

    def close(self):
        with self._lock:
            self._connection.close()

    @property
    def has_source(self) -> bool:
        return self._source is not None

    # ==================== Loading ====================

    def scan_metadata(self, path: str) -> FileMetadata:
        file_path = Path(path).expanduser()
        if not file_path.is_file():
            raise ScanError(f"File not found: {path}")

        spec = detect_file_kind(file_path)
        frame = load_frame(file_path, spec)

        with self._lock:
            self._activate(_ActiveSource(path=file_path, spec=spec, frame=frame))
            return self._metadata()

    def select_sheet(self, sheet: str) -> FileMetadata:
        with self._lock:
            source = self._source
        if source is None:
            raise SheetError(NO_FILE_MESSAGE)
        if source.spec.kind is not FileKind.EXCEL:
            raise SheetError("Current file is not an Excel workbook.")

        frame = load_frame(source.path, source.spec, sheet_name=sheet)

        with self._lock:
            if self._source is not source:
                raise SheetError(f"Sheet '{sheet}' belongs to a file that is no longer active")
            self._activate(_ActiveSource(path=source.path, spec=source.spec, frame=frame))
            return self._metadata()

    def _activate(self, source: _ActiveSource):
        """Register the frame as the source view. Caller holds the lock."""
        if self._source is not None:
            self._connection.unregister(SOURCE_TABLE)
        self._connection.register(SOURCE_TABLE, source.frame.dataframe)
        self._source = source
        logger.info(f"Active source: {source.path.name} ({len(source.frame.dataframe):,} rows)")

    def _metadata(self) -> FileMetadata:
        source = self._source
        df = source.frame.dataframe
        try:
            file_size = source.path.stat().st_size
        except OSError:
            file_size = 0

        return FileMetadata(
            file_name=source.path.name,
            file_path=str(source.path),
            file_size=file_size,
            row_count=len(df),
            schema=tuple(
                FieldInfo(name=str(name), dtype=pandas_dtype_name(dtype))
                for name, dtype in df.dtypes.items()
            ),
            sheets=tuple(source.frame.sheets),
            active_sheet=source.frame.active_sheet,
        )

    # ==================== Queries ====================

    @staticmethod
    def _checked_statement(sql: str, error_type) -> str:
        """Return the single read statement in `sql` or raise error_type."""
        statements = split_statements(sql)
        if not statements:
            raise error_type("SQL is empty")
        if len(statements) > 1:
            raise error_type(f"Only one statement can run at a time ({len(statements)} given)")
        statement = statements[0]
        if not is_select_statement(statement):
            raise error_type("Only SELECT queries are supported")
        return statement

    def execute(self, sql: str, max_rows: int) -> QueryResult:
        """
        Run one SELECT against the source.

        At most `max_rows` rows are materialized; row_count is the number of
        rows the statement produces.
        """
        if max_rows < 0:
            raise QueryError(f"max_rows must be non-negative, got {max_rows}")
        statement = self._checked_statement(sql, QueryError)

        with self._lock:
            if self._source is None:
                raise QueryError(NO_FILE_MESSAGE)
            try:
                relation = self._connection.sql(statement)
                names = list(relation.columns)
                types = [str(column_type) for column_type in relation.types]
                rows = relation.limit(max_rows).fetchall() if max_rows else []
                if len(rows) < max_rows:
                    row_count = len(rows)
                else:
                    row_count = relation.aggregate('count(*)').fetchone()[0]
            except duckdb.Error as e:
                raise QueryError(str(e)) from e

        columns = tuple(
            ColumnInfo(name=str(name), dtype=sql_type_name(type_name))
            for name, type_name in zip(names, types)
        )
        normalized = tuple(
            tuple(normalize_cell(value) for value in row)
            for row in rows
        )
        return QueryResult(columns=columns, rows=normalized, row_count=row_count)

    # ==================== Export ====================

    def export_query(self, sql: str, destination_path: str, export_format: str) -> None:
        if export_format not in EXPORT_FORMATS:
            raise ExportError(f"Unsupported export format: {export_format}")
        statement = self._checked_statement(sql, ExportError)

        with self._lock:
            if self._source is None:
                raise ExportError(NO_FILE_MESSAGE)
            try:
                df = self._connection.sql(statement).df()
            except duckdb.Error as e:
                raise ExportError(str(e)) from e

        destination = Path(destination_path).expanduser()
        try:
            if export_format == 'csv':
                df.to_csv(destination, index=False)
            else:
                _excel_ready(df).to_excel(destination, index=False, engine='openpyxl')
        except (OSError, ValueError) as e:
            raise ExportError(f"Failed to write {destination.name}: {e}") from e

        logger.info(f"Exported {len(df):,} rows to {destination}")

    # ==================== Samples ====================

    def resolve_sample_path(self, name: str) -> str:
        return str(self._samples.resolve(name))


def _excel_ready(df: pd.DataFrame) -> pd.DataFrame:
    """Excel has no timezones and no nested values."""
    df = df.copy()
    for column in df.columns:
        series = df[column]
        if isinstance(series.dtype, pd.DatetimeTZDtype):
            df[column] = series.dt.tz_localize(None)
        elif series.dtype == object:
            df[column] = series.map(_excel_cell)
    return df


def _excel_cell(value):
    value = normalize_cell(value)
    if isinstance(value, (list, dict)):
        return display_text(value)
    return value
