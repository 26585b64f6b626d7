"""
Notifier - transient user-facing messages.

The core only emits messages; how they are shown (status bar, toast, ...) is
up to the UI. LoggingNotifier is the headless default.
"""
import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class LoggingNotifier:
    """Notifier that only writes to the log."""

    def success(self, message: str) -> None:
        logger.info(message)

    def error(self, message: str) -> None:
        logger.warning(message)
