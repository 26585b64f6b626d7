"""
Status bar notifications (success / error toasts).
"""

import logging

from PySide6.QtWidgets import QStatusBar

from ..constants import STATUS_ERROR_MS, STATUS_FEEDBACK_MS

logger = logging.getLogger(__name__)


class StatusBarNotifier:
    """Shows transient messages in a QStatusBar; errors stay longer."""

    def __init__(self, status_bar: QStatusBar):
        self._status_bar = status_bar

    def success(self, message: str) -> None:
        self._status_bar.showMessage(f"✓ {message}", STATUS_FEEDBACK_MS)

    def error(self, message: str) -> None:
        self._status_bar.showMessage(f"✗ {message}", STATUS_ERROR_MS)
