"""
Error taxonomy for LakeDrop.

Engine-sourced messages are opaque: the core records and surfaces them,
it never parses them.
"""


class LakeDropError(Exception):
    """Base class for every error the session layer records."""


class ValidationError(LakeDropError):
    """Rejected before any engine call (empty query, empty path, ...)."""


class ScanError(LakeDropError):
    """File could not be read or is of an unsupported type."""


class QueryError(LakeDropError):
    """Statement rejected by the engine."""


class SheetError(LakeDropError):
    """No workbook loaded, or unknown sheet name."""


class ExportError(LakeDropError):
    """Export failed (I/O or conversion)."""


class NoActiveFileError(LakeDropError):
    """Export attempted while no file is loaded."""


class SampleResolutionError(LakeDropError):
    """Bundled sample name is unknown or missing."""
