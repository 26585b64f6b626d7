"""
System clipboard adapter.
"""

from PySide6.QtGui import QGuiApplication


class QtClipboard:
    """Writes text to the system clipboard."""

    def set_text(self, text: str) -> None:
        clipboard = QGuiApplication.clipboard()
        if clipboard is None:
            raise RuntimeError("Clipboard is not available")
        clipboard.setText(text)
