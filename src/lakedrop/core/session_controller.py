"""
Session Controller - owner of the session state.

Mediates every transition of SessionState and is the only component that
talks to the engine. Each transition publishes a new frozen SessionState
through the state_changed signal.

Requests of the same kind may overlap (a query started while the previous one
is still running, a new file dropped during a load). Every load, query and
sheet request carries a generation number; a response is applied only when
its generation is still the latest of its kind, otherwise it is dropped.
"""
import dataclasses
import logging
import time
from functools import partial
from typing import Callable, Dict, Optional

from PySide6.QtCore import QObject, Signal

from ..config.i18n import t
from ..constants import DEFAULT_SQL, EXPORT_FORMATS, MAX_RESULT_ROWS
from .engine_client import DataEngineClient
from .errors import (
    LakeDropError, ValidationError, NoActiveFileError,
)
from .models import ErrorInfo, FileMetadata, QueryResult, SessionState
from .notifier import LoggingNotifier, Notifier

logger = logging.getLogger(__name__)

LOAD = "load"
QUERY = "query"
SHEET = "sheet"


class SessionController(QObject):
    """
    Orchestrates file loads, queries, sheet switches and exports.

    Operations never raise: failures are recorded in SessionState.last_error,
    logged, and reported through the notifier. A failure leaves the previous
    file metadata and result untouched.

    Signals:
        state_changed(SessionState): Emitted after every state replacement
    """

    state_changed = Signal(object)

    def __init__(self, client: DataEngineClient, notifier: Optional[Notifier] = None,
                 parent: Optional[QObject] = None):
        super().__init__(parent)
        self._client = client
        self._notifier = notifier or LoggingNotifier()
        self._state = SessionState(query_text=DEFAULT_SQL)
        self._generations: Dict[str, int] = {LOAD: 0, QUERY: 0, SHEET: 0}

    @property
    def state(self) -> SessionState:
        """Latest published snapshot."""
        return self._state

    # ==================== State helpers ====================

    def _publish(self, **changes):
        if 'result' in changes:
            changes['result_version'] = self._state.result_version + 1
        self._state = dataclasses.replace(self._state, **changes)
        self.state_changed.emit(self._state)

    def _next_generation(self, kind: str) -> int:
        self._generations[kind] += 1
        return self._generations[kind]

    def _is_current(self, kind: str, generation: int) -> bool:
        if self._generations[kind] != generation:
            logger.debug(f"Dropping stale {kind} response (generation {generation}, "
                         f"latest {self._generations[kind]})")
            return False
        return True

    def _record_error(self, error: LakeDropError, **changes):
        logger.error(f"{type(error).__name__}: {error}")
        self._publish(last_error=ErrorInfo.from_exception(error), **changes)
        self._notifier.error(str(error))

    # ==================== Editor ====================

    def set_query_text(self, text: str):
        """Store the editor content (used by run_query() and exports)."""
        if text != self._state.query_text:
            self._publish(query_text=text)

    def dismiss_error(self):
        if self._state.last_error is not None:
            self._publish(last_error=None)

    # ==================== File loading ====================

    def load_file(self, path: str) -> bool:
        """
        Make `path` the active source, then run the default preview query.

        is_loading_file stays set until the preview query has completed.

        Returns:
            True if an engine request was issued
        """
        if not path or not path.strip():
            self._record_error(ValidationError(t("path_empty")))
            return False

        generation = self._next_generation(LOAD)
        logger.info(f"Loading file: {path}")
        self._publish(is_loading_file=True, last_error=None)
        self._client.scan_metadata(
            path,
            on_success=partial(self._on_file_scanned, generation),
            on_error=partial(self._on_load_failed, generation),
        )
        return True

    def _on_file_scanned(self, generation: int, meta: FileMetadata):
        if not self._is_current(LOAD, generation):
            return

        logger.info(f"Scanned {meta.file_name}: {meta.row_count:,} rows, {len(meta.schema)} columns")
        self._publish(
            file_meta=meta,
            query_text=DEFAULT_SQL,
            result=None,
            last_query_duration_ms=None,
        )
        self._notifier.success(t("file_loaded"))
        self.run_query(DEFAULT_SQL, on_finished=partial(self._finish_load, generation))

    def _on_load_failed(self, generation: int, error: LakeDropError):
        if not self._is_current(LOAD, generation):
            return
        self._record_error(error, is_loading_file=False)

    def _finish_load(self, generation: int):
        if self._generations[LOAD] == generation:
            self._publish(is_loading_file=False)

    # ==================== Queries ====================

    def run_query(self, text: Optional[str] = None,
                  on_finished: Optional[Callable[[], None]] = None) -> bool:
        """
        Execute `text` (default: the current query text) with the result cap.

        Args:
            text: Statement to run; None uses SessionState.query_text
            on_finished: Called once the request completes, whatever the outcome

        Returns:
            True if an engine request was issued
        """
        sql = self._state.query_text if text is None else text
        if not sql.strip():
            self._record_error(ValidationError(t("sql_empty")))
            if on_finished is not None:
                on_finished()
            return False

        generation = self._next_generation(QUERY)
        self._publish(is_running_query=True)
        started = time.perf_counter()
        self._client.execute(
            sql,
            MAX_RESULT_ROWS,
            on_success=partial(self._on_query_result, generation, started, on_finished),
            on_error=partial(self._on_query_failed, generation, on_finished),
        )
        return True

    def _on_query_result(self, generation: int, started: float,
                         on_finished: Optional[Callable[[], None]], result: QueryResult):
        if self._is_current(QUERY, generation):
            duration_ms = round((time.perf_counter() - started) * 1000)
            logger.info(f"Query returned {len(result.rows):,} of {result.row_count:,} rows "
                        f"in {duration_ms} ms")
            self._publish(
                result=result,
                last_query_duration_ms=duration_ms,
                is_running_query=False,
            )
        if on_finished is not None:
            on_finished()

    def _on_query_failed(self, generation: int, on_finished: Optional[Callable[[], None]],
                         error: LakeDropError):
        if self._is_current(QUERY, generation):
            self._record_error(error, is_running_query=False)
        if on_finished is not None:
            on_finished()

    # ==================== Sheets ====================

    def select_sheet(self, sheet_name: str) -> bool:
        """
        Switch the active workbook sheet.

        Clears the current result but does not run a query; the caller decides
        when to re-query.
        """
        if not sheet_name:
            self._record_error(ValidationError(t("sheet_empty")))
            return False

        generation = self._next_generation(SHEET)
        # A query started against the previous sheet must not land afterwards
        self._next_generation(QUERY)
        if self._state.is_running_query:
            self._publish(is_running_query=False)

        logger.info(f"Selecting sheet: {sheet_name}")
        self._client.select_sheet(
            sheet_name,
            on_success=partial(self._on_sheet_selected, generation),
            on_error=partial(self._on_sheet_failed, generation),
        )
        return True

    def _on_sheet_selected(self, generation: int, meta: FileMetadata):
        if not self._is_current(SHEET, generation):
            return
        self._publish(file_meta=meta, result=None, last_query_duration_ms=None)

    def _on_sheet_failed(self, generation: int, error: LakeDropError):
        if not self._is_current(SHEET, generation):
            return
        self._record_error(error)

    # ==================== Export ====================

    def export_result(self, export_format: str, destination_path: str) -> bool:
        """
        Export the current query text's full result to a file.

        Args:
            export_format: "csv" or "xlsx"
            destination_path: Output file path
        """
        if self._state.file_meta is None:
            self._record_error(NoActiveFileError(t("no_file")))
            return False
        if export_format not in EXPORT_FORMATS:
            self._record_error(ValidationError(t("export_format_invalid", format=export_format)))
            return False
        if not destination_path:
            self._record_error(ValidationError(t("path_empty")))
            return False

        logger.info(f"Exporting {export_format} to {destination_path}")
        self._client.export_query(
            self._state.query_text,
            destination_path,
            export_format,
            on_success=self._on_export_done,
            on_error=self._record_error,
        )
        return True

    def _on_export_done(self, _payload=None):
        self._notifier.success(t("export_success"))

    # ==================== Samples ====================

    def resolve_sample(self, name: str) -> bool:
        """Resolve a bundled sample and load it."""
        if not name:
            self._record_error(ValidationError(t("path_empty")))
            return False

        self._client.resolve_sample_path(
            name,
            on_success=self.load_file,
            on_error=self._record_error,
        )
        return True
