"""
Local data engine: file readers and SQL over the active source.
"""

from .file_types import FileKind, FileSpec, detect_file_kind
from .local_engine import LocalEngine
from .samples import SampleLibrary, build_samples, sample_frame

__all__ = [
    'FileKind',
    'FileSpec',
    'detect_file_kind',
    'LocalEngine',
    'SampleLibrary',
    'build_samples',
    'sample_frame',
]
