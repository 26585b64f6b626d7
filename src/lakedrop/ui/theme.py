"""
Theme - light/dark palettes and the application stylesheet.
"""

import logging
from typing import Dict

from PySide6.QtWidgets import QApplication

logger = logging.getLogger(__name__)

PALETTES: Dict[str, Dict[str, str]] = {
    'light': {
        'window_bg': '#f5f6f8',
        'panel_bg': '#ffffff',
        'text': '#1f2328',
        'muted': '#6e7781',
        'border': '#d0d7de',
        'accent': '#2f6feb',
        'accent_text': '#ffffff',
        'grid_alt': '#f6f8fa',
        'selection': '#cfe0ff',
        'error_bg': '#ffebe9',
        'error_text': '#a40e26',
        'overlay_bg': 'rgba(47, 111, 235, 0.12)',
    },
    'dark': {
        'window_bg': '#0d1117',
        'panel_bg': '#161b22',
        'text': '#e6edf3',
        'muted': '#8b949e',
        'border': '#30363d',
        'accent': '#388bfd',
        'accent_text': '#ffffff',
        'grid_alt': '#1c2128',
        'selection': '#1f3a60',
        'error_bg': '#3d1418',
        'error_text': '#ff7b72',
        'overlay_bg': 'rgba(56, 139, 253, 0.18)',
    },
}


def generate_qss(theme: str) -> str:
    """
    Build the application stylesheet for a theme.

    Args:
        theme: "light" or "dark" (unknown names fall back to light)

    Returns:
        QSS string
    """
    c = PALETTES.get(theme, PALETTES['light'])
    return f"""
        QMainWindow, QWidget#central {{
            background-color: {c['window_bg']};
            color: {c['text']};
        }}
        QGroupBox {{
            background-color: {c['panel_bg']};
            border: 1px solid {c['border']};
            border-radius: 6px;
            margin-top: 14px;
            padding: 8px;
            color: {c['text']};
        }}
        QGroupBox::title {{
            subcontrol-origin: margin;
            left: 8px;
            padding: 0 4px;
            font-weight: bold;
        }}
        QLabel {{
            color: {c['text']};
        }}
        QLabel[muted="true"] {{
            color: {c['muted']};
        }}
        QLabel#errorBanner {{
            background-color: {c['error_bg']};
            color: {c['error_text']};
            border-radius: 4px;
            padding: 6px;
        }}
        QLabel#dropOverlay {{
            background-color: {c['overlay_bg']};
            border: 2px dashed {c['accent']};
            border-radius: 12px;
            font-size: 18px;
        }}
        QPushButton {{
            background-color: {c['panel_bg']};
            color: {c['text']};
            border: 1px solid {c['border']};
            border-radius: 4px;
            padding: 4px 10px;
        }}
        QPushButton:hover {{
            border-color: {c['accent']};
        }}
        QPushButton#primary {{
            background-color: {c['accent']};
            color: {c['accent_text']};
            border-color: {c['accent']};
        }}
        QPushButton:disabled {{
            color: {c['muted']};
        }}
        QPlainTextEdit, QListWidget, QComboBox {{
            background-color: {c['panel_bg']};
            color: {c['text']};
            border: 1px solid {c['border']};
            border-radius: 4px;
        }}
        QTableView {{
            background-color: {c['panel_bg']};
            alternate-background-color: {c['grid_alt']};
            color: {c['text']};
            gridline-color: {c['border']};
            selection-background-color: {c['selection']};
            selection-color: {c['text']};
            border: 1px solid {c['border']};
        }}
        QHeaderView::section {{
            background-color: {c['window_bg']};
            color: {c['text']};
            border: none;
            border-right: 1px solid {c['border']};
            border-bottom: 1px solid {c['border']};
            padding: 4px 6px;
        }}
        QStatusBar {{
            background-color: {c['panel_bg']};
            color: {c['muted']};
            border-top: 1px solid {c['border']};
        }}
    """


def apply_theme(app: QApplication, theme: str):
    """Apply a theme stylesheet to the whole application."""
    if theme not in PALETTES:
        logger.warning(f"Unknown theme '{theme}', using light")
        theme = 'light'
    app.setStyleSheet(generate_qss(theme))
    logger.debug(f"Applied theme: {theme}")
