"""
Tests for the Qt result table (model, header, view).
"""
import pytest
from PySide6.QtCore import Qt

from lakedrop.core.grid_model import ResultGridModel
from lakedrop.core.interaction import InteractionController
from lakedrop.ui.widgets import ResultGridView, ResultTableModel

from conftest import make_result


@pytest.fixture
def grid(qapp):
    model = ResultGridModel()
    model.set_result(make_result(
        [(1, "alpha", None), (2, "bravo", 4.5), (3, "charlie", True)],
        names=("id", "name", "extra"),
    ))
    return model


@pytest.fixture
def interaction(grid, clipboard, notifier):
    return InteractionController(grid, clipboard, notifier)


class TestResultTableModel:

    @pytest.fixture
    def model(self, grid):
        return ResultTableModel(grid)

    def test_shape(self, model):
        assert model.rowCount() == 3
        assert model.columnCount() == 3

    def test_display_text(self, model):
        assert model.data(model.index(0, 1), Qt.ItemDataRole.DisplayRole) == "alpha"
        assert model.data(model.index(0, 2), Qt.ItemDataRole.DisplayRole) == ""
        assert model.data(model.index(1, 2), Qt.ItemDataRole.DisplayRole) == "4.5"
        assert model.data(model.index(2, 2), Qt.ItemDataRole.DisplayRole) == "true"

    def test_numbers_right_aligned(self, model):
        alignment = model.data(model.index(0, 0), Qt.ItemDataRole.TextAlignmentRole)
        assert alignment & Qt.AlignmentFlag.AlignRight

    def test_header_shows_sort_arrow(self, model, grid):
        assert model.headerData(1, Qt.Orientation.Horizontal) == "name\nstr"

        grid.set_sort(1)
        assert model.headerData(1, Qt.Orientation.Horizontal) == "name ▲\nstr"
        grid.set_sort(1)
        assert model.headerData(1, Qt.Orientation.Horizontal) == "name ▼\nstr"

        assert model.headerData(0, Qt.Orientation.Vertical) == "1"

    def test_follows_sorted_rows(self, model, grid):
        grid.set_sort(0)
        grid.set_sort(0)

        assert model.data(model.index(0, 1), Qt.ItemDataRole.DisplayRole) == "charlie"

    def test_reset_on_new_result(self, model, grid):
        grid.set_result(make_result([(9, "zulu")]))

        assert model.rowCount() == 1
        assert model.columnCount() == 2


class TestResultGridView:

    @pytest.fixture
    def view(self, grid, interaction):
        view = ResultGridView(grid, interaction)
        view.resize(600, 400)
        yield view
        view.deleteLater()

    def test_section_sizes_follow_grid(self, view, grid):
        header = view.horizontalHeader()
        assert [header.sectionSize(i) for i in range(3)] == [180, 180, 180]

        grid.set_column_width(2, 260)

        assert header.sectionSize(2) == 260

    def test_widths_survive_model_reset(self, view, grid):
        grid.set_column_width(0, 300)

        grid.set_result(make_result([(4, "delta", None)], names=("id", "name", "extra")))

        assert view.horizontalHeader().sectionSize(0) == 300

    def test_handle_at_right_edge(self, view):
        header = view.horizontalHeader()

        assert header.handle_at(178) == 0
        assert header.handle_at(90) == -1

    def test_window_reported_on_new_rows(self, view, grid):
        windows = []
        view.window_changed.connect(windows.append)

        grid.set_result(make_result([(i, str(i)) for i in range(5000)]))

        assert windows
        assert windows[-1].start == 0
        assert windows[-1].total_height == 5000 * 34
        assert view.row_window is windows[-1]
