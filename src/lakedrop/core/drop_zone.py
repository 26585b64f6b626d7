"""
Drop Zone Bridge - OS drag-and-drop events to session loads.
"""
import logging
from typing import Optional, Sequence

from PySide6.QtCore import QObject, Signal

logger = logging.getLogger(__name__)


class DropZoneBridge(QObject):
    """
    Turns drag notifications into SessionController.load_file() calls.

    Only the first path of a multi-file drop is loaded.

    Signals:
        affordance_changed(bool): Drop overlay should be shown / hidden
    """

    affordance_changed = Signal(bool)

    def __init__(self, controller, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._controller = controller
        self._active = False

    @property
    def is_active(self) -> bool:
        return self._active

    def _set_active(self, active: bool):
        if active != self._active:
            self._active = active
            self.affordance_changed.emit(active)

    def drag_entered(self) -> None:
        self._set_active(True)

    def drag_cancelled(self) -> None:
        self._set_active(False)

    def files_dropped(self, paths: Sequence[str]) -> bool:
        """
        Load the first dropped path.

        Returns:
            True if a load was requested
        """
        self._set_active(False)
        if not paths or not paths[0]:
            return False
        if len(paths) > 1:
            logger.info(f"Multiple files dropped, loading only {paths[0]}")
        return self._controller.load_file(paths[0])
