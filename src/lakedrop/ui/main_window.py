"""
Main Window - file panel, SQL editor and result grid.

The window only renders SessionState snapshots and forwards user gestures to
the controllers; it holds no session state of its own.
"""

import logging
from pathlib import Path
from typing import Optional

from PySide6.QtCore import Qt, Slot
from PySide6.QtGui import QKeySequence, QShortcut
from PySide6.QtWidgets import (
    QApplication, QComboBox, QFileDialog, QFormLayout, QGroupBox, QHBoxLayout,
    QLabel, QListWidget, QMainWindow, QPlainTextEdit, QPushButton, QSplitter,
    QStackedWidget, QStatusBar, QVBoxLayout, QWidget,
)

from ..config.i18n import i18n_manager, t
from ..config.user_preferences import LANGUAGES, UserPreferences
from ..constants import SAMPLE_FILES, SUPPORTED_EXTENSIONS
from ..core.drop_zone import DropZoneBridge
from ..core.grid_model import ResultGridModel
from ..core.interaction import InteractionController
from ..core.models import RowWindow, SessionState
from ..core.session_controller import SessionController
from ..utils.formatting import format_bytes, format_count, format_duration
from ..utils.sql_text import format_sql
from .theme import apply_theme
from .widgets.result_grid_view import ResultGridView

logger = logging.getLogger(__name__)

EMPTY_PAGE = 0
GRID_PAGE = 1


class MainWindow(QMainWindow):
    """
    Application main window.

    Args:
        controller: Session owner
        grid: Result grid model bound to the controller
        interaction: Grid gesture handler
        drop_zone: Drag-and-drop bridge
        preferences: Theme / language persistence
        status_bar: Status bar shared with the notifier
    """

    def __init__(self, controller: SessionController, grid: ResultGridModel,
                 interaction: InteractionController, drop_zone: DropZoneBridge,
                 preferences: UserPreferences, status_bar: Optional[QStatusBar] = None,
                 parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._controller = controller
        self._grid = grid
        self._interaction = interaction
        self._drop_zone = drop_zone
        self._preferences = preferences
        self._state: Optional[SessionState] = None

        self.setStatusBar(status_bar or QStatusBar(self))
        self.setAcceptDrops(True)
        self.resize(1280, 800)

        self._build_ui()
        self._connect_signals()
        self.retranslate()
        self._on_state_changed(controller.state)

    # ==================== Layout ====================

    def _build_ui(self):
        central = QWidget(self)
        central.setObjectName("central")
        self.setCentralWidget(central)

        splitter = QSplitter(Qt.Orientation.Horizontal, central)
        splitter.addWidget(self._build_side_panel())
        splitter.addWidget(self._build_workspace())
        splitter.setStretchFactor(0, 0)
        splitter.setStretchFactor(1, 1)
        splitter.setSizes([300, 980])

        layout = QVBoxLayout(central)
        layout.setContentsMargins(8, 8, 8, 8)
        layout.addWidget(splitter)

        self._drop_overlay = QLabel(central)
        self._drop_overlay.setObjectName("dropOverlay")
        self._drop_overlay.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._drop_overlay.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents)
        self._drop_overlay.hide()

        self._build_status_widgets()

    def _build_side_panel(self) -> QWidget:
        panel = QWidget(self)
        layout = QVBoxLayout(panel)
        layout.setContentsMargins(0, 0, 4, 0)

        self._title_label = QLabel(panel)
        self._title_label.setStyleSheet("font-size: 20px; font-weight: bold;")
        self._subtitle_label = QLabel(panel)
        self._subtitle_label.setProperty("muted", True)
        self._subtitle_label.setWordWrap(True)
        self._open_button = QPushButton(panel)
        self._open_button.setObjectName("primary")
        layout.addWidget(self._title_label)
        layout.addWidget(self._subtitle_label)
        layout.addWidget(self._open_button)

        # File info
        self._file_group = QGroupBox(panel)
        file_layout = QFormLayout(self._file_group)
        self._file_name_caption = QLabel()
        self._file_size_caption = QLabel()
        self._row_count_caption = QLabel()
        self._file_path_caption = QLabel()
        self._sheet_caption = QLabel()
        self._file_name_value = QLabel()
        self._file_size_value = QLabel()
        self._row_count_value = QLabel()
        self._file_path_value = QLabel()
        self._file_path_value.setWordWrap(True)
        self._file_path_value.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)
        self._sheet_combo = QComboBox()
        file_layout.addRow(self._file_name_caption, self._file_name_value)
        file_layout.addRow(self._file_size_caption, self._file_size_value)
        file_layout.addRow(self._row_count_caption, self._row_count_value)
        file_layout.addRow(self._file_path_caption, self._file_path_value)
        file_layout.addRow(self._sheet_caption, self._sheet_combo)
        self._no_file_label = QLabel()
        self._no_file_label.setProperty("muted", True)
        file_layout.addRow(self._no_file_label)
        layout.addWidget(self._file_group)

        # Samples
        self._samples_group = QGroupBox(panel)
        samples_layout = QVBoxLayout(self._samples_group)
        buttons_row = QHBoxLayout()
        self._sample_buttons = []
        for label, file_name in SAMPLE_FILES.items():
            button = QPushButton(label)
            button.clicked.connect(lambda _checked=False, name=file_name: self._controller.resolve_sample(name))
            buttons_row.addWidget(button)
            self._sample_buttons.append(button)
        self._samples_hint = QLabel()
        self._samples_hint.setProperty("muted", True)
        self._samples_hint.setWordWrap(True)
        samples_layout.addLayout(buttons_row)
        samples_layout.addWidget(self._samples_hint)
        layout.addWidget(self._samples_group)

        # Schema
        self._schema_group = QGroupBox(panel)
        schema_layout = QVBoxLayout(self._schema_group)
        self._schema_list = QListWidget()
        self._schema_hint = QLabel()
        self._schema_hint.setProperty("muted", True)
        schema_layout.addWidget(self._schema_list)
        schema_layout.addWidget(self._schema_hint)
        layout.addWidget(self._schema_group, 1)

        return panel

    def _build_workspace(self) -> QWidget:
        workspace = QWidget(self)
        layout = QVBoxLayout(workspace)
        layout.setContentsMargins(4, 0, 0, 0)

        # Error banner
        banner_row = QHBoxLayout()
        self._error_banner = QLabel()
        self._error_banner.setObjectName("errorBanner")
        self._error_banner.setWordWrap(True)
        self._dismiss_button = QPushButton()
        banner_row.addWidget(self._error_banner, 1)
        banner_row.addWidget(self._dismiss_button)
        self._error_row = QWidget()
        self._error_row.setLayout(banner_row)
        self._error_row.hide()
        layout.addWidget(self._error_row)

        # SQL editor
        self._editor_group = QGroupBox(workspace)
        editor_layout = QVBoxLayout(self._editor_group)
        self._editor = QPlainTextEdit()
        self._editor.setStyleSheet("font-family: monospace;")
        self._editor.setMaximumHeight(160)
        actions_row = QHBoxLayout()
        self._run_button = QPushButton()
        self._run_button.setObjectName("primary")
        self._format_button = QPushButton()
        self._export_csv_button = QPushButton()
        self._export_xlsx_button = QPushButton()
        actions_row.addWidget(self._run_button)
        actions_row.addWidget(self._format_button)
        actions_row.addStretch()
        actions_row.addWidget(self._export_csv_button)
        actions_row.addWidget(self._export_xlsx_button)
        editor_layout.addWidget(self._editor)
        editor_layout.addLayout(actions_row)
        layout.addWidget(self._editor_group)

        self._run_shortcut = QShortcut(QKeySequence("Ctrl+Return"), self._editor)
        self._run_shortcut_enter = QShortcut(QKeySequence("Ctrl+Enter"), self._editor)

        # Results
        self._results_group = QGroupBox(workspace)
        results_layout = QVBoxLayout(self._results_group)
        summary_row = QHBoxLayout()
        self._rows_label = QLabel()
        self._time_label = QLabel()
        self._time_label.setProperty("muted", True)
        summary_row.addWidget(self._rows_label)
        summary_row.addStretch()
        summary_row.addWidget(self._time_label)

        self._results_stack = QStackedWidget()
        empty_page = QWidget()
        empty_layout = QVBoxLayout(empty_page)
        self._drop_hint = QLabel()
        self._drop_hint.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._drop_hint.setStyleSheet("font-size: 16px;")
        self._drop_hint_sub = QLabel()
        self._drop_hint_sub.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._drop_hint_sub.setProperty("muted", True)
        empty_layout.addStretch()
        empty_layout.addWidget(self._drop_hint)
        empty_layout.addWidget(self._drop_hint_sub)
        empty_layout.addStretch()
        self._grid_view = ResultGridView(self._grid, self._interaction)
        self._results_stack.insertWidget(EMPTY_PAGE, empty_page)
        self._results_stack.insertWidget(GRID_PAGE, self._grid_view)

        results_layout.addLayout(summary_row)
        results_layout.addWidget(self._results_stack)
        layout.addWidget(self._results_group, 1)

        return workspace

    def _build_status_widgets(self):
        status_bar = self.statusBar()
        self._file_summary_label = QLabel()
        self._visible_rows_label = QLabel()
        self._theme_button = QPushButton()
        self._theme_button.setFlat(True)
        self._language_button = QPushButton()
        self._language_button.setFlat(True)
        status_bar.addPermanentWidget(self._file_summary_label)
        status_bar.addPermanentWidget(self._visible_rows_label)
        status_bar.addPermanentWidget(self._theme_button)
        status_bar.addPermanentWidget(self._language_button)

    # ==================== Signals ====================

    def _connect_signals(self):
        self._controller.state_changed.connect(self._on_state_changed)
        self._drop_zone.affordance_changed.connect(self._on_drop_affordance)
        self._grid_view.window_changed.connect(self._on_window_changed)

        self._open_button.clicked.connect(self._open_file_dialog)
        self._sheet_combo.activated.connect(self._on_sheet_activated)
        self._editor.textChanged.connect(self._on_editor_changed)
        self._run_button.clicked.connect(self._run_query)
        self._run_shortcut.activated.connect(self._run_query)
        self._run_shortcut_enter.activated.connect(self._run_query)
        self._format_button.clicked.connect(self._format_editor)
        self._export_csv_button.clicked.connect(lambda: self._export("csv"))
        self._export_xlsx_button.clicked.connect(lambda: self._export("xlsx"))
        self._dismiss_button.clicked.connect(self._controller.dismiss_error)
        self._theme_button.clicked.connect(self._toggle_theme)
        self._language_button.clicked.connect(self._toggle_language)

        i18n_manager.register_observer(self.retranslate)
        self._preferences.register_observer('theme', self._on_theme_changed)
        self._preferences.register_observer('language', self._on_language_changed)

    # ==================== Translation ====================

    def retranslate(self):
        """Refresh every translated text."""
        self.setWindowTitle(t("title"))
        self._title_label.setText(t("title"))
        self._subtitle_label.setText(t("subtitle"))
        self._open_button.setText(t("open_file"))
        self._file_group.setTitle(t("file_info"))
        self._file_name_caption.setText(t("file_name"))
        self._file_size_caption.setText(t("file_size"))
        self._row_count_caption.setText(t("row_count"))
        self._file_path_caption.setText(t("file_path"))
        self._sheet_caption.setText(t("sheet"))
        self._no_file_label.setText(t("no_file"))
        self._samples_group.setTitle(t("samples"))
        self._samples_hint.setText(t("samples_hint"))
        self._schema_group.setTitle(t("schema"))
        self._schema_hint.setText(t("schema_hint"))
        self._editor_group.setTitle(t("sql_editor"))
        self._format_button.setText(t("format_sql"))
        self._export_csv_button.setText(t("export_csv"))
        self._export_xlsx_button.setText(t("export_xlsx"))
        self._results_group.setTitle(t("results"))
        self._drop_hint.setText(t("drop_hint"))
        self._drop_hint_sub.setText(t("drop_hint_sub"))
        self._drop_overlay.setText(f"{t('drop_overlay')}\n{t('drop_overlay_hint')}")
        self._dismiss_button.setText(t("dismiss"))
        self._theme_button.setText(
            t("theme_dark") if self._preferences.get_theme() == 'light' else t("theme_light")
        )
        self._language_button.setText(self._next_language_name())
        if self._grid.column_count:
            self._grid_view.model().headerDataChanged.emit(
                Qt.Orientation.Horizontal, 0, self._grid.column_count - 1
            )
        if self._state is not None:
            self._render(self._state)
        self._on_window_changed(self._grid_view.row_window)

    def _next_language(self) -> str:
        current = self._preferences.get_language()
        return LANGUAGES[(LANGUAGES.index(current) + 1) % len(LANGUAGES)] if current in LANGUAGES else 'en'

    def _next_language_name(self) -> str:
        return i18n_manager.get_available_languages().get(self._next_language(), self._next_language())

    # ==================== State rendering ====================

    @Slot(object)
    def _on_state_changed(self, state: SessionState):
        self._state = state
        self._render(state)

    def _render(self, state: SessionState):
        meta = state.file_meta

        # Editor follows the session (e.g. reset to the default query on load)
        if self._editor.toPlainText() != state.query_text:
            self._editor.blockSignals(True)
            self._editor.setPlainText(state.query_text)
            self._editor.blockSignals(False)

        busy = state.is_loading_file or state.is_running_query
        self._run_button.setEnabled(meta is not None and not state.is_running_query)
        self._run_button.setText(t("running") if state.is_running_query else t("run_query"))
        self._export_csv_button.setEnabled(meta is not None and not busy)
        self._export_xlsx_button.setEnabled(meta is not None and not busy)
        self._open_button.setEnabled(not state.is_loading_file)
        self._open_button.setText(t("loading") if state.is_loading_file else t("open_file"))

        self._render_file_info(state)
        self._render_result(state)

        if state.last_error is not None:
            self._error_banner.setText(state.last_error.message)
            self._error_row.show()
        else:
            self._error_row.hide()

    def _render_file_info(self, state: SessionState):
        meta = state.file_meta
        has_file = meta is not None
        for widget in (self._file_name_caption, self._file_name_value, self._file_size_caption,
                       self._file_size_value, self._row_count_caption, self._row_count_value,
                       self._file_path_caption, self._file_path_value):
            widget.setVisible(has_file)
        self._no_file_label.setVisible(not has_file)

        has_sheets = has_file and bool(meta.sheets)
        self._sheet_caption.setVisible(has_sheets)
        self._sheet_combo.setVisible(has_sheets)

        self._schema_list.clear()
        self._schema_hint.setVisible(not has_file)

        if not has_file:
            self._file_summary_label.setText(t("waiting"))
            return

        self._file_name_value.setText(meta.file_name)
        self._file_size_value.setText(format_bytes(meta.file_size))
        self._row_count_value.setText(format_count(meta.row_count))
        self._file_path_value.setText(meta.file_path)
        self._file_path_value.setToolTip(meta.file_path)
        self._file_summary_label.setText(
            f"{format_bytes(meta.file_size)} · {format_count(meta.row_count)} {t('rows')}"
        )

        if has_sheets:
            self._sheet_combo.blockSignals(True)
            self._sheet_combo.clear()
            self._sheet_combo.addItems(list(meta.sheets))
            self._sheet_combo.setCurrentText(meta.current_sheet)
            self._sheet_combo.blockSignals(False)

        for field_info in meta.schema:
            self._schema_list.addItem(f"{field_info.name}    {field_info.dtype}")

    def _render_result(self, state: SessionState):
        result = state.result
        if result is None:
            self._results_stack.setCurrentIndex(EMPTY_PAGE)
            self._rows_label.setText(t("no_results") if state.file_meta is not None else "")
        else:
            self._results_stack.setCurrentIndex(GRID_PAGE)
            shown = format_count(len(result.rows))
            if result.is_truncated:
                self._rows_label.setText(t("rows_of_total", count=shown, total=format_count(result.row_count)))
            else:
                self._rows_label.setText(t("rows_shown", count=shown))

        if state.last_query_duration_ms is None:
            self._time_label.setText("")
        else:
            self._time_label.setText(t("query_time", ms=format_duration(state.last_query_duration_ms)))

    @Slot(object)
    def _on_window_changed(self, window: RowWindow):
        if len(window) == 0:
            self._visible_rows_label.setText("")
            return
        self._visible_rows_label.setText(
            t("visible_rows", start=window.start + 1, end=window.end, total=format_count(self._grid.row_count))
        )

    # ==================== User actions ====================

    @Slot()
    def _open_file_dialog(self):
        patterns = " ".join(f"*.{ext}" for ext in SUPPORTED_EXTENSIONS)
        path, _ = QFileDialog.getOpenFileName(
            self, t("open_file"), "", f"{t('data_files')} ({patterns});;{t('all_files')} (*)"
        )
        if path:
            self._controller.load_file(path)

    @Slot(int)
    def _on_sheet_activated(self, index: int):
        name = self._sheet_combo.itemText(index)
        meta = self._controller.state.file_meta
        if meta is not None and name != meta.current_sheet:
            self._controller.select_sheet(name)

    @Slot()
    def _on_editor_changed(self):
        self._controller.set_query_text(self._editor.toPlainText())

    @Slot()
    def _run_query(self):
        if self._run_button.isEnabled():
            self._controller.run_query()

    @Slot()
    def _format_editor(self):
        text = self._editor.toPlainText()
        formatted = format_sql(text)
        if formatted != text:
            self._editor.setPlainText(formatted)

    def _export(self, export_format: str):
        meta = self._controller.state.file_meta
        stem = Path(meta.file_name).stem if meta is not None else "result"
        suffix = "Excel (*.xlsx)" if export_format == "xlsx" else "CSV (*.csv)"
        path, _ = QFileDialog.getSaveFileName(
            self, t("export_title"), f"{stem}_result.{export_format}", suffix
        )
        if path:
            self._controller.export_result(export_format, path)

    @Slot()
    def _toggle_theme(self):
        self._preferences.toggle_theme()

    @Slot()
    def _toggle_language(self):
        self._preferences.set_language(self._next_language())

    def _on_theme_changed(self, theme: str):
        app = QApplication.instance()
        if app is not None:
            apply_theme(app, theme)
        self.retranslate()

    def _on_language_changed(self, language: str):
        i18n_manager.set_language(language)
        # set_language notifies retranslate() only when the language changed
        self._language_button.setText(self._next_language_name())

    # ==================== Drag and drop ====================

    @Slot(bool)
    def _on_drop_affordance(self, active: bool):
        if active:
            self._drop_overlay.setGeometry(self.centralWidget().rect())
            self._drop_overlay.raise_()
            self._drop_overlay.show()
        else:
            self._drop_overlay.hide()

    def dragEnterEvent(self, event):
        if event.mimeData().hasUrls():
            event.acceptProposedAction()
            self._drop_zone.drag_entered()
        else:
            event.ignore()

    def dragMoveEvent(self, event):
        if event.mimeData().hasUrls():
            event.acceptProposedAction()

    def dragLeaveEvent(self, event):
        self._drop_zone.drag_cancelled()
        super().dragLeaveEvent(event)

    def dropEvent(self, event):
        paths = [url.toLocalFile() for url in event.mimeData().urls() if url.isLocalFile()]
        if paths:
            event.acceptProposedAction()
            self._drop_zone.files_dropped(paths)
        else:
            self._drop_zone.drag_cancelled()
            event.ignore()

    def resizeEvent(self, event):
        super().resizeEvent(event)
        if self._drop_overlay.isVisible():
            self._drop_overlay.setGeometry(self.centralWidget().rect())

    def closeEvent(self, event):
        i18n_manager.unregister_observer(self.retranslate)
        self._preferences.unregister_observer('theme', self._on_theme_changed)
        self._preferences.unregister_observer('language', self._on_language_changed)
        super().closeEvent(event)
