"""
Core translations registration.

Registers the translations used throughout the application (panels, buttons,
notifications) from the JSON files in this directory.
"""

from pathlib import Path
from ..manager import get_manager


def register_core_translations():
    """Register core translations from this directory."""
    translations_path = Path(__file__).parent
    get_manager().register_core(translations_path)


# Auto-register when this module is imported
register_core_translations()
