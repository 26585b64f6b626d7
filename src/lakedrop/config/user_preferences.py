"""
User Preferences - Persistent storage for user settings
"""
import json
import logging
from pathlib import Path
from typing import Optional, Dict, Any, Callable, List

from ..constants import app_config_dir

logger = logging.getLogger(__name__)

THEMES = ('light', 'dark')
LANGUAGES = ('en', 'zh')


class UserPreferences:
    """
    Manages user preferences with persistent storage

    Preferences include:
    - theme: Visual theme ("light" / "dark")
    - language: Interface language ("en" / "zh")

    Args:
        config_dir: Directory holding preferences.json (default: app_config_dir())
    """

    DEFAULT_PREFERENCES = {
        'theme': 'light',
        'language': 'en',
    }

    _instance: Optional['UserPreferences'] = None

    def __init__(self, config_dir: Optional[Path] = None):
        self._preferences = self.DEFAULT_PREFERENCES.copy()
        self._config_dir = Path(config_dir) if config_dir is not None else app_config_dir()
        self._config_file = self._config_dir / 'preferences.json'
        self._observers: Dict[str, List[Callable]] = {}

        self.load()

        logger.info(f"UserPreferences initialized: {self._preferences}")

    @classmethod
    def get_instance(cls) -> 'UserPreferences':
        """Get singleton instance of UserPreferences"""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @property
    def config_file(self) -> Path:
        return self._config_file

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a preference value

        Args:
            key: Preference key
            default: Default value if key not found

        Returns:
            Preference value or default
        """
        return self._preferences.get(key, default)

    def set(self, key: str, value: Any, save: bool = True):
        """
        Set a preference value

        Args:
            key: Preference key
            value: New value
            save: Whether to save to disk immediately
        """
        old_value = self._preferences.get(key)
        self._preferences[key] = value

        if save:
            self.save()

        if old_value != value:
            logger.info(f"Preference changed: {key} = {value}")
            self._notify_observers(key, value)

    def get_theme(self) -> str:
        return self.get('theme', 'light')

    def set_theme(self, theme: str):
        """Set theme and save"""
        if theme not in THEMES:
            raise ValueError(f"Unknown theme: {theme}")
        self.set('theme', theme)

    def toggle_theme(self) -> str:
        """Switch between light and dark, returning the new theme."""
        theme = 'dark' if self.get_theme() == 'light' else 'light'
        self.set_theme(theme)
        return theme

    def get_language(self) -> str:
        return self.get('language', 'en')

    def set_language(self, language: str):
        """Set language and save"""
        if language not in LANGUAGES:
            raise ValueError(f"Unknown language: {language}")
        self.set('language', language)

    def load(self):
        """Load preferences from file; unreadable files fall back to defaults."""
        self._preferences = self.DEFAULT_PREFERENCES.copy()
        if not self._config_file.exists():
            logger.info("No preferences file found, using defaults")
            return

        try:
            with open(self._config_file, 'r', encoding='utf-8') as f:
                loaded_prefs = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error loading preferences: {e}")
            return

        if not isinstance(loaded_prefs, dict):
            logger.error(f"Ignoring {self._config_file}: expected a JSON object")
            return

        # Unknown values are dropped so a hand-edited file cannot break the UI
        if loaded_prefs.get('theme') in THEMES:
            self._preferences['theme'] = loaded_prefs['theme']
        if loaded_prefs.get('language') in LANGUAGES:
            self._preferences['language'] = loaded_prefs['language']
        logger.info(f"Loaded preferences from {self._config_file}")

    def save(self):
        """Save preferences to file"""
        try:
            self._config_dir.mkdir(parents=True, exist_ok=True)
            with open(self._config_file, 'w', encoding='utf-8') as f:
                json.dump(self._preferences, f, indent=2)
            logger.debug(f"Saved preferences to {self._config_file}")
        except OSError as e:
            logger.error(f"Error saving preferences: {e}")

    def reset_to_defaults(self):
        """Reset all preferences to default values"""
        self._preferences = self.DEFAULT_PREFERENCES.copy()
        self.save()
        logger.info("Preferences reset to defaults")

        for key in self._preferences:
            self._notify_observers(key, self._preferences[key])

    def register_observer(self, key: str, callback: Callable):
        """
        Register a callback for preference changes

        Args:
            key: Preference key to observe
            callback: Function(new_value) to call on change
        """
        callbacks = self._observers.setdefault(key, [])
        if callback not in callbacks:
            callbacks.append(callback)

    def unregister_observer(self, key: str, callback: Callable):
        if key in self._observers and callback in self._observers[key]:
            self._observers[key].remove(callback)

    def _notify_observers(self, key: str, value: Any):
        for callback in list(self._observers.get(key, [])):
            try:
                callback(value)
            except Exception as e:
                logger.error(f"Error notifying preference observer {callback}: {e}")

    def get_all(self) -> Dict[str, Any]:
        """Get all preferences as a dictionary"""
        return self._preferences.copy()


def get_preferences() -> UserPreferences:
    """Get the global UserPreferences instance"""
    return UserPreferences.get_instance()
