"""
Result Table Model for virtual scrolling.

QAbstractTableModel view of a ResultGridModel. The view asks for cells on
demand, so only visible rows are ever formatted.
"""
from typing import Any, Optional

from PySide6.QtCore import Qt, QAbstractTableModel, QModelIndex, QObject, Slot

from ...core.cell_values import CellKind, cell_kind, display_text
from ...core.grid_model import ResultGridModel
from ...core.models import SortDirection

SORT_ARROWS = {
    SortDirection.ASC: "▲",
    SortDirection.DESC: "▼",
}


class ResultTableModel(QAbstractTableModel):
    """
    Read-only table model over ResultGridModel.display_rows.

    Row order comes from the grid model (its sort), never from Qt's own
    sorting.
    """

    def __init__(self, grid: ResultGridModel, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._grid = grid
        grid.rows_changed.connect(self._on_rows_changed)
        grid.view_changed.connect(self._on_view_changed)

    @property
    def grid(self) -> ResultGridModel:
        return self._grid

    @Slot()
    def _on_rows_changed(self):
        self.beginResetModel()
        self.endResetModel()

    @Slot(object)
    def _on_view_changed(self, _view_state):
        count = self._grid.column_count
        if count:
            self.headerDataChanged.emit(Qt.Orientation.Horizontal, 0, count - 1)

    # -------------------------------------------------------------------------
    # QAbstractTableModel interface
    # -------------------------------------------------------------------------

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:
        if parent.isValid():
            return 0
        return self._grid.row_count

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:
        if parent.isValid():
            return 0
        return self._grid.column_count

    def data(self, index: QModelIndex, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        """Called for each visible cell; must stay cheap."""
        if not index.isValid():
            return None

        row = index.row()
        col = index.column()
        if not (0 <= row < self._grid.row_count and 0 <= col < self._grid.column_count):
            return None

        value = self._grid.cell(row, col)

        if role == Qt.ItemDataRole.DisplayRole:
            return display_text(value)

        elif role == Qt.ItemDataRole.TextAlignmentRole:
            # Right-align numbers, left-align text
            if cell_kind(value) is CellKind.NUMBER:
                return Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter
            return Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter

        elif role == Qt.ItemDataRole.ToolTipRole:
            text = display_text(value)
            return text or None

        return None

    def headerData(self, section: int, orientation: Qt.Orientation,
                   role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if orientation == Qt.Orientation.Vertical:
            if role == Qt.ItemDataRole.DisplayRole:
                return str(section + 1)
            return None

        columns = self._grid.columns
        if not 0 <= section < len(columns):
            return None
        column = columns[section]

        if role == Qt.ItemDataRole.DisplayRole:
            view = self._grid.view_state
            label = f"{column.name}\n{column.dtype}"
            if view.sort_column_index == section:
                label = f"{column.name} {SORT_ARROWS[view.sort_direction]}\n{column.dtype}"
            return label

        elif role == Qt.ItemDataRole.ToolTipRole:
            return f"{column.name} ({column.dtype})"

        return None

    def flags(self, index: QModelIndex) -> Qt.ItemFlag:
        """Read-only, selectable cells."""
        if not index.isValid():
            return Qt.ItemFlag.NoItemFlags
        return Qt.ItemFlag.ItemIsEnabled | Qt.ItemFlag.ItemIsSelectable
