"""
File type detection from extension and gzip magic bytes.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ..core.errors import ScanError

logger = logging.getLogger(__name__)

GZIP_MAGIC = b'\x1f\x8b'


class FileKind(Enum):
    PARQUET = "parquet"
    CSV = "csv"
    JSON_LINES = "jsonl"
    JSON = "json"
    ARROW = "arrow"
    EXCEL = "excel"


EXTENSION_KINDS = {
    'parquet': FileKind.PARQUET,
    'parq': FileKind.PARQUET,
    'csv': FileKind.CSV,
    'tsv': FileKind.CSV,
    'txt': FileKind.CSV,
    'jsonl': FileKind.JSON_LINES,
    'ndjson': FileKind.JSON_LINES,
    'json': FileKind.JSON,
    'arrow': FileKind.ARROW,
    'feather': FileKind.ARROW,
    'ipc': FileKind.ARROW,
    'xlsx': FileKind.EXCEL,
    'xlsm': FileKind.EXCEL,
    'xls': FileKind.EXCEL,
}

# Text formats only; columnar and workbook formats carry their own compression
GZIP_KINDS = (FileKind.CSV, FileKind.JSON_LINES, FileKind.JSON)


@dataclass(frozen=True)
class FileSpec:
    """
    How to read a file.

    Attributes:
        kind: Reader to use
        compressed: gzip stream around the payload
        extension: Effective extension (inner one for "x.csv.gz")
    """
    kind: FileKind
    compressed: bool
    extension: str

    @property
    def separator(self) -> str:
        return '\t' if self.extension == 'tsv' else ','


def has_gzip_magic(path: Path) -> bool:
    """True if the file starts with the gzip magic bytes."""
    try:
        with open(path, 'rb') as f:
            return f.read(2) == GZIP_MAGIC
    except OSError:
        return False


def detect_file_kind(path) -> FileSpec:
    """
    Determine the reader for `path`.

    A trailing ".gz" marks a gzip stream and the inner extension decides the
    kind ("events.jsonl.gz" -> JSON_LINES, compressed). Without ".gz", a file
    starting with the gzip magic bytes is treated as compressed too.

    Raises:
        ScanError: Unknown extension, or gzip around a format that does not support it
    """
    path = Path(path)
    extension = path.suffix.lstrip('.').lower()
    compressed = False

    if extension == 'gz':
        compressed = True
        extension = Path(path.stem).suffix.lstrip('.').lower()

    kind = EXTENSION_KINDS.get(extension)
    if kind is None:
        raise ScanError(f"Unsupported file type: .{extension}")

    if not compressed:
        compressed = has_gzip_magic(path)

    if compressed and kind not in GZIP_KINDS:
        raise ScanError("Compressed file is not supported for this format")

    logger.debug(f"Detected {path.name}: kind={kind.value}, compressed={compressed}")
    return FileSpec(kind=kind, compressed=compressed, extension=extension)
