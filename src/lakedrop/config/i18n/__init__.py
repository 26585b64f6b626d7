"""
Internationalization (i18n).

Usage:
    from lakedrop.config.i18n import t
    label = t("run_query")

    from lakedrop.config.i18n import i18n_manager
    i18n_manager.set_language("zh")
    i18n_manager.register_observer(my_callback)
"""

from .manager import I18nManager, get_manager, t

# Global manager instance for convenience
i18n_manager = get_manager()

# Register core translations
from . import core  # noqa: F401, E402

__all__ = [
    'I18nManager',
    'i18n_manager',
    'get_manager',
    't',
]
