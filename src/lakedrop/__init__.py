"""
LakeDrop - Drop a data file, query it with SQL, browse the result
PySide6 Edition
"""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("lakedrop")
except PackageNotFoundError:
    # Package not installed (running from a source checkout)
    __version__ = "0.3.0"

__all__ = ["__version__"]
