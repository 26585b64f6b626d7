"""
Result Grid Model - presentation state of the query result.

Owns sort and column-width state (GridViewState), derives the display row
order from the current QueryResult, and computes the window of rows a view
has to materialize for a given viewport. Independent of any widget class:
the Qt table model in ui/ only reads from here.
"""
import dataclasses
import logging
import math
from typing import Any, List, Optional, Sequence

from PySide6.QtCore import QObject, Signal

from ..constants import (
    DEFAULT_COLUMN_WIDTH, MIN_COLUMN_WIDTH, OVERSCAN_ROWS, ROW_HEIGHT_ESTIMATE,
)
from .models import GridViewState, QueryResult, RowWindow, SessionState, SortDirection
from .sorting import sort_rows

logger = logging.getLogger(__name__)


class ResultGridModel(QObject):
    """
    Sort state, column widths and windowing over the current result.

    Sorting is a tri-state cycle per column (unsorted -> asc -> desc ->
    unsorted); clicking another column starts at ascending. Any new result
    resets the sort. Widths start at DEFAULT_COLUMN_WIDTH and are rebuilt
    whenever the number of columns changes.

    Signals:
        view_changed(GridViewState): Sort or widths changed
        rows_changed(): Display rows were replaced or reordered
    """

    view_changed = Signal(object)
    rows_changed = Signal()

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._result: Optional[QueryResult] = None
        self._result_version: Optional[int] = None
        self._view = GridViewState()
        self._display_rows: List[Sequence[Any]] = []

    # ==================== Session binding ====================

    def bind_session(self, controller) -> None:
        """Follow result replacements published by a SessionController."""
        controller.state_changed.connect(self.on_session_state)
        self.on_session_state(controller.state)

    def on_session_state(self, state: SessionState) -> None:
        if state.result_version != self._result_version:
            self._result_version = state.result_version
            self.set_result(state.result)

    def set_result(self, result: Optional[QueryResult]) -> None:
        """Replace the result; the sort is reset, widths kept if shape allows."""
        self._result = result
        column_count = len(result.columns) if result is not None else 0

        widths = self._view.column_widths
        if len(widths) != column_count:
            widths = (float(DEFAULT_COLUMN_WIDTH),) * column_count

        self._view = GridViewState(column_widths=widths)
        self._display_rows = list(result.rows) if result is not None else []
        self.view_changed.emit(self._view)
        self.rows_changed.emit()

    # ==================== Accessors ====================

    @property
    def result(self) -> Optional[QueryResult]:
        return self._result

    @property
    def view_state(self) -> GridViewState:
        return self._view

    @property
    def columns(self):
        return self._result.columns if self._result is not None else ()

    @property
    def column_count(self) -> int:
        return len(self.columns)

    @property
    def display_rows(self) -> List[Sequence[Any]]:
        """Rows in display order (sorted when a sort is active)."""
        return self._display_rows

    @property
    def row_count(self) -> int:
        return len(self._display_rows)

    def row(self, index: int) -> Sequence[Any]:
        return self._display_rows[index]

    def cell(self, row: int, column: int) -> Any:
        return self._display_rows[row][column]

    def column_width(self, index: int) -> float:
        widths = self._view.column_widths
        if 0 <= index < len(widths):
            return widths[index]
        return float(DEFAULT_COLUMN_WIDTH)

    # ==================== Sorting ====================

    def set_sort(self, column_index: int) -> None:
        """Advance the sort cycle for one column."""
        if not 0 <= column_index < self.column_count:
            logger.warning(f"Ignoring sort on invalid column index {column_index}")
            return

        view = self._view
        if view.sort_column_index != column_index:
            view = dataclasses.replace(view, sort_column_index=column_index,
                                       sort_direction=SortDirection.ASC)
        elif view.sort_direction is SortDirection.ASC:
            view = dataclasses.replace(view, sort_direction=SortDirection.DESC)
        else:
            view = dataclasses.replace(view, sort_column_index=None,
                                       sort_direction=SortDirection.ASC)

        self._view = view
        self._apply_sort()
        self.view_changed.emit(self._view)
        self.rows_changed.emit()

    def _apply_sort(self) -> None:
        rows = self._result.rows if self._result is not None else ()
        if self._view.sort_column_index is None:
            self._display_rows = list(rows)
        else:
            self._display_rows = sort_rows(rows, self._view.sort_column_index,
                                           self._view.sort_direction)

    # ==================== Column widths ====================

    def set_column_width(self, index: int, width: float) -> float:
        """
        Set one column width, clamped to MIN_COLUMN_WIDTH.

        Returns:
            The width actually stored
        """
        widths = list(self._view.column_widths)
        if not 0 <= index < len(widths):
            logger.warning(f"Ignoring width for invalid column index {index}")
            return float(DEFAULT_COLUMN_WIDTH)

        clamped = max(float(MIN_COLUMN_WIDTH), float(width))
        if widths[index] != clamped:
            widths[index] = clamped
            self._view = dataclasses.replace(self._view, column_widths=tuple(widths))
            self.view_changed.emit(self._view)
        return clamped

    # ==================== Windowing ====================

    def compute_window(
        self,
        viewport_height: float,
        scroll_offset: float,
        row_height_estimate: float = ROW_HEIGHT_ESTIMATE,
        overscan_count: int = OVERSCAN_ROWS,
    ) -> RowWindow:
        """
        Rows to materialize for a viewport.

        The window covers every row intersecting [scroll_offset,
        scroll_offset + viewport_height), widened by overscan_count rows on
        each side. Cost does not depend on the number of rows.

        Args:
            viewport_height: Visible height
            scroll_offset: Distance scrolled from the top
            row_height_estimate: Height used to position rows
            overscan_count: Extra rows on each side of the visible range
        """
        if row_height_estimate <= 0:
            raise ValueError("row_height_estimate must be positive")

        count = self.row_count
        total_height = count * row_height_estimate
        if count == 0:
            return RowWindow(start=0, end=0, total_height=0.0, offset=0.0)

        scroll_offset = min(max(0.0, scroll_offset), max(0.0, total_height - viewport_height))
        first_visible = int(scroll_offset // row_height_estimate)
        last_visible = math.ceil((scroll_offset + max(0.0, viewport_height)) / row_height_estimate)

        start = max(0, first_visible - overscan_count)
        end = min(count, max(last_visible, first_visible + 1) + overscan_count)
        return RowWindow(
            start=start,
            end=end,
            total_height=total_height,
            offset=start * row_height_estimate,
        )
