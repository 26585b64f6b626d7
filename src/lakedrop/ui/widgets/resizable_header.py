"""
Resizable Header - horizontal header driving InteractionController.

Qt's own interactive resizing and click sorting are disabled; presses near a
section's right edge start a resize gesture, other clicks advance the sort.
"""
import logging
from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QMouseEvent
from PySide6.QtWidgets import QHeaderView, QWidget

from ...constants import RESIZE_HANDLE_WIDTH
from ...core.interaction import InteractionController

logger = logging.getLogger(__name__)


class ResizableHeader(QHeaderView):
    """Header whose widths and sort clicks are owned by the grid model."""

    def __init__(self, interaction: InteractionController, parent: Optional[QWidget] = None):
        super().__init__(Qt.Orientation.Horizontal, parent)
        self._interaction = interaction
        self._pressed_section = -1

        self.setSectionResizeMode(QHeaderView.ResizeMode.Fixed)
        self.setSectionsClickable(False)
        self.setSortIndicatorShown(False)
        self.setHighlightSections(False)
        self.setDefaultAlignment(Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter)
        self.setMouseTracking(True)

    def handle_at(self, x: int) -> int:
        """
        Column whose resize handle is under viewport x, or -1.

        The handle is the RESIZE_HANDLE_WIDTH pixels at the right edge of a
        section.
        """
        section = self.logicalIndexAt(x)
        if section < 0:
            # Past the last section: its right edge may still be in reach
            section = self.logicalIndexAt(x - RESIZE_HANDLE_WIDTH)
            if section < 0:
                return -1

        right_edge = self.sectionViewportPosition(section) + self.sectionSize(section)
        if 0 <= right_edge - x <= RESIZE_HANDLE_WIDTH or 0 <= x - right_edge <= 1:
            return section
        return -1

    # ==================== Mouse gestures ====================

    def mousePressEvent(self, event: QMouseEvent):
        if event.button() != Qt.MouseButton.LeftButton:
            super().mousePressEvent(event)
            return

        x = int(event.position().x())
        handle = self.handle_at(x)
        if handle >= 0:
            self._interaction.begin_resize(handle, x)
            self._pressed_section = -1
        else:
            self._pressed_section = self.logicalIndexAt(x)
        event.accept()

    def mouseMoveEvent(self, event: QMouseEvent):
        x = int(event.position().x())
        if self._interaction.is_resizing:
            self._interaction.update_resize(x)
            event.accept()
            return

        if self.handle_at(x) >= 0:
            self.setCursor(Qt.CursorShape.SplitHCursor)
        else:
            self.unsetCursor()
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event: QMouseEvent):
        if event.button() != Qt.MouseButton.LeftButton:
            super().mouseReleaseEvent(event)
            return

        if self._interaction.is_resizing:
            self._interaction.end_resize()
        else:
            section = self.logicalIndexAt(int(event.position().x()))
            if section >= 0 and section == self._pressed_section:
                self._interaction.header_clicked(section)
        self._pressed_section = -1
        event.accept()

    def leaveEvent(self, event):
        if not self._interaction.is_resizing:
            self.unsetCursor()
        super().leaveEvent(event)
