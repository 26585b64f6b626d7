"""
Result Grid View - virtualized QTableView over the result grid.

Qt only paints the rows inside the viewport; the view additionally reports
the window ResultGridModel.compute_window() derives for the current scroll
position, including the overscan rows.
"""
import logging
from typing import Optional

from PySide6.QtCore import Qt, QPoint, Signal, Slot
from PySide6.QtGui import QKeySequence
from PySide6.QtWidgets import QAbstractItemView, QHeaderView, QMenu, QTableView, QWidget

from ...config.i18n import t
from ...constants import OVERSCAN_ROWS, ROW_HEIGHT_ESTIMATE
from ...core.grid_model import ResultGridModel
from ...core.interaction import ContextMenuState, InteractionController
from ...core.models import GridViewState, RowWindow
from .resizable_header import ResizableHeader
from .result_table_model import ResultTableModel

logger = logging.getLogger(__name__)


class ResultGridView(QTableView):
    """
    Table view wired to ResultGridModel and InteractionController.

    Signals:
        window_changed(RowWindow): Materialized row window after scroll/resize/data change
    """

    window_changed = Signal(object)

    def __init__(self, grid: ResultGridModel, interaction: InteractionController,
                 parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._grid = grid
        self._interaction = interaction
        self._window = RowWindow(start=0, end=0, total_height=0.0, offset=0.0)

        self.setModel(ResultTableModel(grid, self))
        self.setHorizontalHeader(ResizableHeader(interaction, self))

        # Uniform row height: the estimate used by compute_window is exact
        vertical = self.verticalHeader()
        vertical.setSectionResizeMode(QHeaderView.ResizeMode.Fixed)
        vertical.setDefaultSectionSize(ROW_HEIGHT_ESTIMATE)
        vertical.setMinimumSectionSize(ROW_HEIGHT_ESTIMATE)

        self.setVerticalScrollMode(QAbstractItemView.ScrollMode.ScrollPerPixel)
        self.setHorizontalScrollMode(QAbstractItemView.ScrollMode.ScrollPerPixel)
        self.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self.setSelectionMode(QAbstractItemView.SelectionMode.ExtendedSelection)
        self.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        self.setAlternatingRowColors(True)
        self.setWordWrap(False)
        self.setSortingEnabled(False)
        self.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)

        self.doubleClicked.connect(self._on_double_clicked)
        self.customContextMenuRequested.connect(self._on_context_menu_requested)
        self.verticalScrollBar().valueChanged.connect(self._on_scrolled)
        grid.view_changed.connect(self._apply_view_state)
        # Connected after the table model, so the model has been reset already
        grid.rows_changed.connect(self._on_rows_changed)

        self._apply_view_state(grid.view_state)

    @property
    def row_window(self) -> RowWindow:
        return self._window

    # ==================== Grid state ====================

    @Slot(object)
    def _apply_view_state(self, view: GridViewState):
        header = self.horizontalHeader()
        for index, width in enumerate(view.column_widths):
            if header.sectionSize(index) != int(width):
                header.resizeSection(index, int(width))

    @Slot()
    def _on_rows_changed(self):
        # A model reset drops section sizes
        self._apply_view_state(self._grid.view_state)
        self._update_window()

    @Slot(int)
    def _on_scrolled(self, _value: int):
        self._update_window()

    def _update_window(self):
        window = self._grid.compute_window(
            viewport_height=self.viewport().height(),
            scroll_offset=self.verticalScrollBar().value(),
            row_height_estimate=ROW_HEIGHT_ESTIMATE,
            overscan_count=OVERSCAN_ROWS,
        )
        if window != self._window:
            self._window = window
            self.window_changed.emit(window)

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self._update_window()

    # ==================== Cell gestures ====================

    @Slot(object)
    def _on_double_clicked(self, index):
        if index.isValid():
            self._interaction.cell_double_clicked(index.row(), index.column())

    @Slot(QPoint)
    def _on_context_menu_requested(self, pos: QPoint):
        index = self.indexAt(pos)
        if not index.isValid():
            return
        state = self._interaction.open_context_menu(index.row(), index.column(), pos.x(), pos.y())
        self._show_context_menu(state)

    def _show_context_menu(self, state: ContextMenuState):
        menu = QMenu(self)
        copy_value = menu.addAction(t("copy_value"))
        copy_row = menu.addAction(t("copy_row"))

        chosen = menu.exec(self.viewport().mapToGlobal(QPoint(int(state.x), int(state.y))))
        if chosen is copy_value:
            self._interaction.copy_menu_value()
        elif chosen is copy_row:
            self._interaction.copy_menu_row()
        else:
            self._interaction.dismiss_context_menu()

    def mousePressEvent(self, event):
        if event.button() == Qt.MouseButton.LeftButton:
            self._interaction.primary_click()
        super().mousePressEvent(event)

    def keyPressEvent(self, event):
        if event.matches(QKeySequence.StandardKey.Copy):
            rows = [index.row() for index in self.selectionModel().selectedRows()]
            if rows:
                self._interaction.copy_rows(rows)
            event.accept()
            return
        super().keyPressEvent(event)
