"""
Readers - load every supported file kind into a pandas DataFrame.

pandas is the pivot format: whatever the file kind, the engine registers one
DataFrame as the `source` table. Excel workbooks are read sheet by sheet with
openpyxl (xlrd for legacy .xls) and every cell is kept as text.
"""

import gzip
import json
import logging
import re
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Tuple

import pandas as pd
import pyarrow as pa
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from xlrd import XLRDError

from ..core.errors import ScanError, SheetError
from .file_types import FileKind, FileSpec

logger = logging.getLogger(__name__)

ENCODING_SAMPLE_SIZE = 100_000

# "2024-01-31", "2024-01-31 12:00:00", "2024-01-31T12:00:00.5+02:00"
ISO_DATE_PATTERN = re.compile(
    r'^\d{4}-\d{2}-\d{2}([ T]\d{2}:\d{2}(:\d{2}(\.\d+)?)?(Z|[+-]\d{2}:?\d{2})?)?$'
)


@dataclass
class LoadedFrame:
    """
    A file (or workbook sheet) loaded into memory.

    Attributes:
        dataframe: The data, with nested values flattened to JSON text
        sheets: Workbook sheet names (empty for other kinds)
        active_sheet: Sheet the dataframe comes from
    """
    dataframe: pd.DataFrame
    sheets: List[str] = field(default_factory=list)
    active_sheet: Optional[str] = None


def _detect_encoding(raw: bytes) -> str:
    """
    Detect text encoding by trying common encodings.

    Args:
        raw: Leading bytes of the (decompressed) file

    Returns:
        Detected encoding name
    """
    # Check for BOM markers first
    if raw.startswith(b'\xef\xbb\xbf'):
        return 'utf-8-sig'
    if raw.startswith(b'\xff\xfe') or raw.startswith(b'\xfe\xff'):
        return 'utf-16'

    try:
        raw.decode('utf-8')
        return 'utf-8'
    except UnicodeDecodeError as e:
        # A multi-byte character cut by the sample boundary is still utf-8
        if e.reason == 'unexpected end of data':
            return 'utf-8'

    for encoding in ['cp1252', 'iso-8859-1']:
        try:
            raw.decode(encoding)
            return encoding
        except (UnicodeDecodeError, LookupError):
            continue

    # latin-1 accepts any byte sequence
    return 'latin-1'


def _read_sample(path: Path, compressed: bool) -> bytes:
    opener = gzip.open if compressed else open
    with opener(path, 'rb') as f:
        return f.read(ENCODING_SAMPLE_SIZE)


def _compression(spec: FileSpec) -> Optional[str]:
    return 'gzip' if spec.compressed else None


def _parse_date_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Convert text columns holding only ISO dates/timestamps to datetime."""
    for column in df.columns:
        series = df[column]
        if series.dtype != object:
            continue
        values = series.dropna()
        if values.empty or not all(isinstance(v, str) and ISO_DATE_PATTERN.match(v) for v in values):
            continue
        try:
            df[column] = pd.to_datetime(series, format='ISO8601')
        except (ValueError, TypeError) as e:
            logger.debug(f"Column '{column}' looks like dates but did not parse: {e}")
    return df


def _flatten_nested(df: pd.DataFrame) -> pd.DataFrame:
    """Serialize dict/list cells (nested JSON) to JSON text."""
    for column in df.columns:
        if df[column].dtype != object:
            continue
        if df[column].map(lambda v: isinstance(v, (dict, list))).any():
            df[column] = df[column].map(
                lambda v: json.dumps(v, ensure_ascii=False, default=str)
                if isinstance(v, (dict, list)) else v
            )
    return df


# ==================== Per-kind readers ====================

def read_csv(path: Path, spec: FileSpec) -> pd.DataFrame:
    encoding = _detect_encoding(_read_sample(path, spec.compressed))
    logger.debug(f"Reading CSV {path.name} (encoding={encoding}, sep={spec.separator!r})")
    df = pd.read_csv(
        path,
        sep=spec.separator,
        encoding=encoding,
        compression=_compression(spec),
    )
    return _parse_date_columns(df)


def read_json_lines(path: Path, spec: FileSpec) -> pd.DataFrame:
    return pd.read_json(path, lines=True, compression=_compression(spec), convert_dates=False)


def read_json(path: Path, spec: FileSpec) -> pd.DataFrame:
    """Read a JSON document holding an array of records."""
    return pd.read_json(path, orient='records', compression=_compression(spec), convert_dates=False)


def read_parquet(path: Path, spec: FileSpec) -> pd.DataFrame:
    return pd.read_parquet(path, engine='pyarrow')


def read_arrow(path: Path, spec: FileSpec) -> pd.DataFrame:
    """Read Arrow IPC, file format (feather v2) or stream format."""
    with pa.memory_map(str(path), 'r') as source:
        try:
            table = pa.ipc.open_file(source).read_all()
        except pa.ArrowInvalid:
            source.seek(0)
            table = pa.ipc.open_stream(source).read_all()
    return table.to_pandas()


def _excel_cell_to_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if hasattr(value, 'isoformat'):
        return value.isoformat()
    return str(value)


def _unique_headers(headers: List[str]) -> List[str]:
    seen = {}
    result = []
    for name in headers:
        count = seen.get(name, 0)
        seen[name] = count + 1
        result.append(name if count == 0 else f"{name}_{count + 1}")
    return result


def _openpyxl_rows(path: Path, sheet_name: Optional[str]) -> Tuple[List[tuple], List[str], str]:
    workbook = load_workbook(path, read_only=True, data_only=True)
    try:
        sheets = list(workbook.sheetnames)
        active = _pick_sheet(sheets, sheet_name)
        rows = list(workbook[active].iter_rows(values_only=True))
    finally:
        workbook.close()
    return rows, sheets, active


def _xlrd_rows(path: Path, sheet_name: Optional[str]) -> Tuple[List[tuple], List[str], str]:
    """Legacy .xls workbooks, read through pandas with the xlrd engine."""
    with pd.ExcelFile(path, engine='xlrd') as excel_file:
        sheets = [str(name) for name in excel_file.sheet_names]
        active = _pick_sheet(sheets, sheet_name)
        df = excel_file.parse(active, header=None, dtype=object)
    rows = [
        tuple(None if pd.isna(value) else value for value in row)
        for row in df.itertuples(index=False, name=None)
    ]
    return rows, sheets, active


def _pick_sheet(sheets: List[str], sheet_name: Optional[str]) -> str:
    if not sheets:
        raise SheetError("No sheets found in workbook")
    active = sheet_name if sheet_name is not None else sheets[0]
    if active not in sheets:
        raise SheetError(f"Sheet '{active}' not found in workbook")
    return active


def read_excel_sheet(path: Path, sheet_name: Optional[str] = None,
                     extension: str = 'xlsx') -> Tuple[pd.DataFrame, List[str], str]:
    """
    Read one workbook sheet as text columns.

    The first row is the header; blank header cells become col_N and rows
    wider than the header extend it with col_N columns.

    Args:
        path: Workbook path
        sheet_name: Sheet to read (default: first sheet)
        extension: "xls" selects the xlrd engine, anything else openpyxl

    Returns:
        (dataframe, sheet names, active sheet)

    Raises:
        SheetError: Unknown sheet name or workbook without sheets
    """
    reader = _xlrd_rows if extension == 'xls' else _openpyxl_rows
    rows, sheets, active = reader(path, sheet_name)

    header_row = rows[0] if rows else ()
    headers = [
        text if text is not None and text.strip() else f"col_{idx + 1}"
        for idx, text in enumerate(_excel_cell_to_text(cell) for cell in header_row)
    ]

    data = []
    for row in rows[1:]:
        if len(row) > len(headers):
            headers.extend(f"col_{idx + 1}" for idx in range(len(headers), len(row)))
        data.append([_excel_cell_to_text(cell) for cell in row])

    width = len(headers)
    data = [values + [None] * (width - len(values)) for values in data]
    df = pd.DataFrame(data, columns=_unique_headers(headers), dtype=object)
    logger.debug(f"Read sheet '{active}' of {path.name}: {len(df)} rows, {width} columns")
    return df, sheets, active


READERS = {
    FileKind.CSV: read_csv,
    FileKind.JSON_LINES: read_json_lines,
    FileKind.JSON: read_json,
    FileKind.PARQUET: read_parquet,
    FileKind.ARROW: read_arrow,
}


def load_frame(path: Path, spec: FileSpec, sheet_name: Optional[str] = None) -> LoadedFrame:
    """
    Load `path` according to `spec`.

    Raises:
        ScanError: The reader failed
        SheetError: Workbook sheet problems
    """
    if spec.kind is FileKind.EXCEL:
        try:
            df, sheets, active = read_excel_sheet(path, sheet_name, spec.extension)
        except (OSError, ValueError, zipfile.BadZipFile, InvalidFileException, XLRDError) as e:
            raise ScanError(f"Failed to read {path.name}: {e}") from e
        except SheetError as e:
            # Opening a file is a scan; only an explicit sheet request is a sheet error
            if sheet_name is None:
                raise ScanError(f"Failed to read {path.name}: {e}") from e
            raise
        return LoadedFrame(dataframe=df, sheets=sheets, active_sheet=active)

    try:
        df = READERS[spec.kind](path, spec)
    except (OSError, ValueError, pa.ArrowException, UnicodeDecodeError) as e:
        raise ScanError(f"Failed to read {path.name}: {e}") from e

    return LoadedFrame(dataframe=_flatten_nested(df))


# ==================== Schema ====================

def pandas_dtype_name(dtype) -> str:
    """Map a pandas dtype to int / float / bool / datetime / str."""
    if pd.api.types.is_bool_dtype(dtype):
        return 'bool'
    if pd.api.types.is_integer_dtype(dtype):
        return 'int'
    if pd.api.types.is_float_dtype(dtype):
        return 'float'
    if pd.api.types.is_datetime64_any_dtype(dtype):
        return 'datetime'
    return 'str'


def sql_type_name(type_name: str) -> str:
    """Map a DuckDB column type (BIGINT, DOUBLE, TIMESTAMP ...) to the same names."""
    upper = type_name.upper()
    if upper.startswith('INTERVAL'):
        return 'str'
    if upper == 'BOOLEAN':
        return 'bool'
    if upper.endswith('[]') or upper.startswith(('STRUCT', 'MAP', 'UNION')):
        return 'str'
    if 'INT' in upper:
        return 'int'
    if upper.startswith(('DOUBLE', 'FLOAT', 'REAL', 'DECIMAL')):
        return 'float'
    if upper.startswith(('TIMESTAMP', 'DATE', 'TIME')):
        return 'datetime'
    return 'str'
