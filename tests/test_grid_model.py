"""
Tests for ResultGridModel (sorting, column widths, windowing).
"""
import pytest

from lakedrop.constants import DEFAULT_COLUMN_WIDTH, MIN_COLUMN_WIDTH
from lakedrop.core.grid_model import ResultGridModel
from lakedrop.core.models import SortDirection
from lakedrop.core.sorting import sort_rows

from conftest import make_result


@pytest.fixture
def grid(qapp):
    model = ResultGridModel()
    model.set_result(make_result([("A", 1), ("B", 1), ("C", 2)], names=("letter", "n")))
    return model


def letters(grid):
    return [row[0] for row in grid.display_rows]


class TestSorting:
    """Tri-state sort cycle and ordering rules."""

    def test_cycle(self, grid):
        """unsorted -> asc -> desc -> unsorted."""
        assert grid.view_state.sort_column_index is None

        grid.set_sort(1)
        assert grid.view_state.sort_column_index == 1
        assert grid.view_state.sort_direction is SortDirection.ASC

        grid.set_sort(1)
        assert grid.view_state.sort_direction is SortDirection.DESC

        grid.set_sort(1)
        assert grid.view_state.sort_column_index is None
        assert letters(grid) == ["A", "B", "C"]

    def test_other_column_starts_ascending(self, grid):
        grid.set_sort(1)
        grid.set_sort(1)

        grid.set_sort(0)

        assert grid.view_state.sort_column_index == 0
        assert grid.view_state.sort_direction is SortDirection.ASC

    def test_stability(self, grid):
        """Tied rows keep their original order in both directions."""
        grid.set_sort(1)
        assert grid.display_rows == [("A", 1), ("B", 1), ("C", 2)]

        grid.set_sort(1)
        assert grid.display_rows == [("C", 2), ("A", 1), ("B", 1)]

    def test_sort_does_not_touch_result(self, grid):
        original = grid.result.rows
        grid.set_sort(0)
        grid.set_sort(0)
        assert grid.result.rows is original
        assert list(original) == [("A", 1), ("B", 1), ("C", 2)]

    def test_nulls_last_in_both_directions(self):
        rows = [(None,), (3,), (1,), (None,), (2,)]

        assert sort_rows(rows, 0, SortDirection.ASC) == [(1,), (2,), (3,), (None,), (None,)]
        assert sort_rows(rows, 0, SortDirection.DESC) == [(3,), (2,), (1,), (None,), (None,)]

    def test_numbers_compare_numerically(self):
        rows = [(10,), (9.5,), (100,), (-1,)]
        assert sort_rows(rows, 0) == [(-1,), (9.5,), (10,), (100,)]

    def test_text_natural_case_insensitive(self):
        rows = [("file10",), ("File2",), ("file1",), ("apple",)]
        assert sort_rows(rows, 0) == [("apple",), ("file1",), ("File2",), ("file10",)]

    def test_mixed_number_and_text(self):
        """A number next to text compares through its text form."""
        rows = [("b",), (2,), ("a",), (10,)]
        assert sort_rows(rows, 0) == [(2,), (10,), ("a",), ("b",)]

    def test_digit_like_symbols_sort_as_text(self):
        """Superscripts and circled numbers are not decimal digits."""
        assert sort_rows([("10²",), ("5",), ("area",)], 0) == [("5",), ("10²",), ("area",)]
        assert sort_rows([("²",), ("1",)], 0, SortDirection.DESC) == [("²",), ("1",)]
        assert sort_rows([("①",), ("x2",), ("x10",)], 0) == [("x2",), ("x10",), ("①",)]

    def test_header_sort_on_symbol_values(self, qapp):
        model = ResultGridModel()
        model.set_result(make_result([("m³", 1), ("m²", 2), ("m1", 3)], names=("unit", "n")))

        model.set_sort(0)

        assert [row[0] for row in model.display_rows] == ["m1", "m²", "m³"]

    def test_invalid_column_is_ignored(self, grid):
        grid.set_sort(5)
        grid.set_sort(-1)
        assert grid.view_state.sort_column_index is None

    def test_new_result_resets_sort(self, grid):
        grid.set_sort(0)

        grid.set_result(make_result([("Z", 9)], names=("letter", "n")))

        assert grid.view_state.sort_column_index is None
        assert grid.display_rows == [("Z", 9)]

    def test_signals(self, grid):
        views = []
        row_changes = []
        grid.view_changed.connect(views.append)
        grid.rows_changed.connect(lambda: row_changes.append(True))

        grid.set_sort(0)

        assert views[-1] is grid.view_state
        assert row_changes == [True]


class TestColumnWidths:
    """Width defaults, clamping and persistence across results."""

    def test_defaults(self, grid):
        assert grid.view_state.column_widths == (DEFAULT_COLUMN_WIDTH, DEFAULT_COLUMN_WIDTH)
        assert grid.column_width(7) == DEFAULT_COLUMN_WIDTH

    def test_clamped_to_minimum(self, grid):
        assert grid.set_column_width(0, 40) == MIN_COLUMN_WIDTH
        assert grid.column_width(0) == MIN_COLUMN_WIDTH

    def test_wide_value_kept(self, grid):
        assert grid.set_column_width(1, 320) == 320
        assert grid.view_state.column_widths == (DEFAULT_COLUMN_WIDTH, 320)

    def test_widths_survive_same_shape_result(self, grid):
        grid.set_column_width(1, 260)

        grid.set_result(make_result([("Q", 3)], names=("letter", "n")))

        assert grid.column_width(1) == 260

    def test_widths_rebuilt_on_shape_change(self, grid):
        grid.set_column_width(1, 260)

        grid.set_result(make_result([(1, 2, 3)], names=("a", "b", "c")))

        assert grid.view_state.column_widths == (DEFAULT_COLUMN_WIDTH,) * 3

    def test_no_result(self, grid):
        grid.set_result(None)
        assert grid.view_state.column_widths == ()
        assert grid.row_count == 0


class TestComputeWindow:
    """Windowed rendering over large row counts."""

    @pytest.fixture
    def big_grid(self, qapp):
        model = ResultGridModel()
        rows = [(i,) for i in range(500_000)]
        model.set_result(make_result(rows, names=("i",)))
        return model

    def test_top_of_list(self, big_grid):
        window = big_grid.compute_window(viewport_height=340, scroll_offset=0,
                                         row_height_estimate=34, overscan_count=12)
        assert window.start == 0
        assert window.end == 10 + 12
        assert window.total_height == 500_000 * 34
        assert window.offset == 0

    def test_middle_of_list(self, big_grid):
        window = big_grid.compute_window(viewport_height=340, scroll_offset=34 * 1000,
                                         row_height_estimate=34, overscan_count=12)
        assert window.start == 1000 - 12
        assert window.end == 1010 + 12
        assert window.offset == (1000 - 12) * 34
        assert list(window.indexes())[:2] == [988, 989]

    def test_window_stays_bounded(self, big_grid):
        window = big_grid.compute_window(viewport_height=680, scroll_offset=34 * 250_000)
        assert len(window) <= 680 // 34 + 2 * 12 + 1

    def test_scroll_past_end_is_clamped(self, big_grid):
        window = big_grid.compute_window(viewport_height=340, scroll_offset=10 ** 9,
                                         row_height_estimate=34, overscan_count=12)
        assert window.end == 500_000
        assert window.start == 500_000 - 10 - 12

    def test_empty(self, qapp):
        window = ResultGridModel().compute_window(viewport_height=400, scroll_offset=0)
        assert len(window) == 0
        assert window.total_height == 0

    def test_rows_fewer_than_viewport(self, grid):
        window = grid.compute_window(viewport_height=1000, scroll_offset=0)
        assert (window.start, window.end) == (0, 3)

    def test_invalid_row_height(self, grid):
        with pytest.raises(ValueError):
            grid.compute_window(viewport_height=100, scroll_offset=0, row_height_estimate=0)
