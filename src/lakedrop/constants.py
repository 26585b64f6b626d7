"""
Centralized constants for LakeDrop.

Eliminates magic numbers scattered across the codebase.
Import from here instead of hardcoding values.
"""
import os
from pathlib import Path

# ===========================================================================
# Query defaults
# ===========================================================================
DEFAULT_SQL = "SELECT * FROM source LIMIT 3"
SOURCE_TABLE = "source"
MAX_RESULT_ROWS = 1000          # Rows materialized per query, whatever row_count says

# ===========================================================================
# Grid geometry (pixels)
# ===========================================================================
DEFAULT_COLUMN_WIDTH = 180
MIN_COLUMN_WIDTH = 120
ROW_HEIGHT_ESTIMATE = 34
OVERSCAN_ROWS = 12
RESIZE_HANDLE_WIDTH = 6         # Hot zone at the right edge of a header section

# ===========================================================================
# Files
# ===========================================================================
# Advisory list for the file picker; the engine decides what it can read.
SUPPORTED_EXTENSIONS = (
    "parquet", "parq",
    "csv", "tsv", "txt",
    "jsonl", "ndjson",
    "json",
    "arrow", "feather", "ipc",
    "xlsx", "xlsm", "xls",
    "gz",
)

EXPORT_FORMATS = ("csv", "xlsx")

# Bundled sample picker: button label -> sample file name
SAMPLE_FILES = {
    "CSV": "sample.csv",
    "JSONL": "sample.jsonl",
    "Parquet": "sample.parquet",
    "Arrow": "sample.arrow",
    "Excel": "sample.xlsx",
}

# ===========================================================================
# Application directories
# ===========================================================================
APP_HOME_ENV = "LAKEDROP_HOME"


def app_config_dir() -> Path:
    """Return the per-user configuration directory (not created here)."""
    override = os.environ.get(APP_HOME_ENV)
    if override:
        return Path(override)
    return Path.home() / ".lakedrop"


# ===========================================================================
# UI timer delays (milliseconds)
# ===========================================================================
STATUS_FEEDBACK_MS = 3000
STATUS_ERROR_MS = 6000
