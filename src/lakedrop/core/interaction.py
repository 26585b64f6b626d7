"""
Interaction Controller - pointer gestures on the result grid.

Translates header drags and clicks, cell double-clicks and context-menu
requests into ResultGridModel operations or clipboard writes. Only transient
gesture state lives here.
"""
import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol, Sequence, Tuple

from PySide6.QtCore import QObject, Signal

from ..config.i18n import t
from .cell_values import display_text, row_as_text
from .grid_model import ResultGridModel
from .notifier import LoggingNotifier, Notifier

logger = logging.getLogger(__name__)


class Clipboard(Protocol):
    def set_text(self, text: str) -> None: ...


@dataclass(frozen=True)
class ResizeCapture:
    """Column-resize gesture captured on press."""
    column_index: int
    start_x: float
    start_width: float


@dataclass(frozen=True)
class ContextMenuState:
    """Open context menu: anchor position, clicked cell text and its whole row."""
    x: float
    y: float
    value: str
    row: Tuple[Any, ...]


class InteractionController(QObject):
    """
    Gesture handling for the result grid.

    Signals:
        context_menu_changed(object): ContextMenuState when a menu opens, None when it closes
    """

    context_menu_changed = Signal(object)

    def __init__(self, grid: ResultGridModel, clipboard: Clipboard,
                 notifier: Optional[Notifier] = None, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._grid = grid
        self._clipboard = clipboard
        self._notifier = notifier or LoggingNotifier()
        self._resize: Optional[ResizeCapture] = None
        self._menu: Optional[ContextMenuState] = None

    # ==================== Column resize ====================

    @property
    def resize_capture(self) -> Optional[ResizeCapture]:
        return self._resize

    @property
    def is_resizing(self) -> bool:
        return self._resize is not None

    def begin_resize(self, column_index: int, pointer_x: float) -> None:
        """Capture a resize gesture; replaces any gesture still in progress."""
        self._resize = ResizeCapture(
            column_index=column_index,
            start_x=pointer_x,
            start_width=self._grid.column_width(column_index),
        )

    def update_resize(self, pointer_x: float) -> Optional[float]:
        """
        Apply the drag delta to the captured column.

        Returns:
            The width stored by the grid, or None when no gesture is active
        """
        capture = self._resize
        if capture is None:
            return None
        requested = capture.start_width + (pointer_x - capture.start_x)
        return self._grid.set_column_width(capture.column_index, requested)

    def end_resize(self) -> None:
        self._resize = None

    # ==================== Header ====================

    def header_clicked(self, column_index: int) -> None:
        self._grid.set_sort(column_index)

    # ==================== Cells ====================

    def cell_double_clicked(self, row: int, column: int) -> bool:
        """Copy the display text of one cell."""
        return self._copy(display_text(self._grid.cell(row, column)))

    def open_context_menu(self, row: int, column: int, x: float, y: float) -> ContextMenuState:
        values = self._grid.row(row)
        self._menu = ContextMenuState(
            x=x,
            y=y,
            value=display_text(values[column]),
            row=tuple(values),
        )
        self.context_menu_changed.emit(self._menu)
        return self._menu

    @property
    def context_menu(self) -> Optional[ContextMenuState]:
        return self._menu

    def copy_menu_value(self) -> bool:
        menu = self._menu
        if menu is None:
            return False
        self.dismiss_context_menu()
        return self._copy(menu.value)

    def copy_menu_row(self) -> bool:
        menu = self._menu
        if menu is None:
            return False
        self.dismiss_context_menu()
        return self._copy(row_as_text(menu.row))

    def primary_click(self) -> None:
        """Any primary click closes an open context menu."""
        self.dismiss_context_menu()

    def dismiss_context_menu(self) -> None:
        if self._menu is not None:
            self._menu = None
            self.context_menu_changed.emit(None)

    def copy_rows(self, row_indexes: Sequence[int]) -> bool:
        """Copy selected display rows as tab-separated text."""
        if not row_indexes:
            return False
        rows = [self._grid.row(index) for index in sorted(set(row_indexes))]
        return self._copy(rows_text(rows))

    # ==================== Clipboard ====================

    def _copy(self, text: str) -> bool:
        try:
            self._clipboard.set_text(text)
        except Exception as e:
            logger.error(f"Clipboard write failed: {e}")
            self._notifier.error(t("copy_failed"))
            return False
        self._notifier.success(t("copied"))
        return True


def rows_text(rows: Sequence[Sequence[Any]]) -> str:
    """Tab-separated text for several rows (keyboard copy of a selection)."""
    return "\n".join("\t".join(display_text(value) for value in row) for row in rows)
