"""
Qt presentation layer.
"""

from .clipboard import QtClipboard
from .main_window import MainWindow
from .notifier import StatusBarNotifier
from .theme import apply_theme, generate_qss

__all__ = [
    'QtClipboard',
    'MainWindow',
    'StatusBarNotifier',
    'apply_theme',
    'generate_qss',
]
