"""
I18nManager - Central registry for translations.

Translations are JSON files named {lang}.json; every directory registered
with register_core() is merged into one table per language.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Optional, Callable, List

logger = logging.getLogger(__name__)

FALLBACK_LANGUAGE = 'en'


class I18nManager:
    """
    Central registry for internationalization.

    Features:
    - Fallback chain: current language -> english -> key
    - str.format() interpolation of keyword arguments
    - Observer pattern for language changes

    Usage:
        from lakedrop.config.i18n import t
        label = t("run_query")
        label = t("rows_shown", count=42)
    """

    _instance: Optional['I18nManager'] = None

    def __init__(self):
        self._current_language = FALLBACK_LANGUAGE
        self._observers: List[Callable] = []

        # {lang_code: {key: value}}
        self._translations: Dict[str, Dict[str, str]] = {}

        # Language display names
        self._language_names: Dict[str, str] = {
            'en': 'English',
            'zh': '中文',
        }

        logger.debug("I18nManager initialized")

    @classmethod
    def get_instance(cls) -> 'I18nManager':
        """Get singleton instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def register_core(self, translations_path: Path) -> bool:
        """
        Register translations from a directory of {lang}.json files.

        Args:
            translations_path: Directory to scan

        Returns:
            True if registration successful
        """
        if not translations_path.exists():
            logger.warning(f"Translations path does not exist: {translations_path}")
            return False

        for lang_file in sorted(translations_path.glob("*.json")):
            lang_code = lang_file.stem
            try:
                with open(lang_file, 'r', encoding='utf-8') as f:
                    translations = json.load(f)
            except (json.JSONDecodeError, OSError) as e:
                logger.error(f"Failed to load {lang_file}: {e}")
                continue

            if not isinstance(translations, dict):
                logger.error(f"Ignoring {lang_file}: top-level value is not an object")
                continue

            self._translations.setdefault(lang_code, {}).update(translations)
            if 'lang_name' in translations:
                self._language_names[lang_code] = translations['lang_name']

            logger.debug(f"Loaded {lang_code} translations ({len(translations)} keys)")

        return True

    def add_translations(self, lang_code: str, translations: Dict[str, str]):
        """Merge translations given in code (tests, plugins)."""
        self._translations.setdefault(lang_code, {}).update(translations)

    def t(self, key: str, **kwargs) -> str:
        """
        Translate a key.

        Args:
            key: Translation key (e.g., "run_query")
            **kwargs: Format parameters for string interpolation

        Returns:
            Translated string or key if not found
        """
        text = self._translations.get(self._current_language, {}).get(key)
        if text is None:
            text = self._translations.get(FALLBACK_LANGUAGE, {}).get(key)
        if text is None:
            text = key

        if kwargs:
            try:
                text = text.format(**kwargs)
            except (KeyError, ValueError, IndexError) as e:
                logger.warning(f"Error formatting translation '{key}': {e}")

        return text

    def get_current_language(self) -> str:
        """Get current language code."""
        return self._current_language

    def set_language(self, lang_code: str) -> bool:
        """
        Set the current language.

        Args:
            lang_code: Language code (e.g., 'en', 'zh')

        Returns:
            True if the language is available
        """
        if lang_code not in self._translations:
            logger.warning(f"Language '{lang_code}' not available, keeping '{self._current_language}'")
            return False

        if lang_code != self._current_language:
            self._current_language = lang_code
            logger.info(f"Language changed to: {lang_code}")
            self._notify_observers()
        return True

    def get_available_languages(self) -> Dict[str, str]:
        """
        Get all available languages.

        Returns:
            Dict mapping lang_code to display name
        """
        return {
            code: self._language_names.get(code, code.upper())
            for code in sorted(self._translations)
        }

    def register_observer(self, callback: Callable):
        """Register a callback for language changes."""
        if callback not in self._observers:
            self._observers.append(callback)

    def unregister_observer(self, callback: Callable):
        """Unregister a language change observer."""
        if callback in self._observers:
            self._observers.remove(callback)

    def _notify_observers(self):
        """Notify all observers of language change."""
        for callback in list(self._observers):
            try:
                callback()
            except Exception as e:
                logger.error(f"Error notifying i18n observer: {e}")


# Singleton instance
_manager: Optional[I18nManager] = None


def get_manager() -> I18nManager:
    """Get the global I18nManager instance."""
    global _manager
    if _manager is None:
        _manager = I18nManager.get_instance()
    return _manager


def t(key: str, **kwargs) -> str:
    """
    Translate a key (convenience function).

    Args:
        key: Translation key
        **kwargs: Format parameters

    Returns:
        Translated string
    """
    return get_manager().t(key, **kwargs)
