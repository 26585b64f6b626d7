"""
Configuration: user preferences and translations.
"""

from .user_preferences import UserPreferences, get_preferences

__all__ = ['UserPreferences', 'get_preferences']
