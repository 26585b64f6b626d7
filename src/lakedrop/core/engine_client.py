"""
Engine Client - request/response boundary to the data engine.

The engine itself is synchronous (it parses files and runs SQL). Each request
runs in an EngineRequestWorker thread; its outcome comes back to the GUI
thread through queued signals and is handed to the caller's callbacks.
"""
import itertools
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional, Tuple, Type

from PySide6.QtCore import QObject, QThread, Signal, Slot

from .errors import (
    LakeDropError, ScanError, QueryError, SheetError, ExportError,
    SampleResolutionError,
)
from .models import FileMetadata, QueryResult

logger = logging.getLogger(__name__)

SuccessCallback = Callable[[Any], None]
ErrorCallback = Callable[[LakeDropError], None]


class DataEngine(ABC):
    """
    Contract of the external engine.

    Implementations raise the matching LakeDropError subclass on failure;
    anything else they raise is wrapped by DataEngineClient.
    """

    @abstractmethod
    def scan_metadata(self, path: str) -> FileMetadata:
        """Open a file and make it the active source."""

    @abstractmethod
    def execute(self, sql: str, max_rows: int) -> QueryResult:
        """Run a statement against the active source."""

    @abstractmethod
    def select_sheet(self, sheet: str) -> FileMetadata:
        """Switch the active source to another workbook sheet."""

    @abstractmethod
    def export_query(self, sql: str, destination_path: str, export_format: str) -> None:
        """Run a statement without row cap and write its result to a file."""

    @abstractmethod
    def resolve_sample_path(self, name: str) -> str:
        """Return the on-disk path of a bundled sample file."""


class EngineRequestWorker(QThread):
    """
    Worker running one engine call.

    Signals:
        succeeded: Emitted with (request_id, payload) on success
        failed: Emitted with (request_id, error) on failure
    """

    succeeded = Signal(int, object)
    failed = Signal(int, object)

    def __init__(self, request_id: int, operation: str, call: Callable[[], Any],
                 error_type: Type[LakeDropError]):
        super().__init__()
        self.request_id = request_id
        self.operation = operation
        self._call = call
        self._error_type = error_type

    def run(self):
        try:
            payload = self._call()
        except LakeDropError as e:
            logger.warning(f"{self.operation} failed: {e}")
            self.failed.emit(self.request_id, e)
        except Exception as e:
            logger.exception(f"Unexpected engine error during {self.operation}")
            self.failed.emit(self.request_id, self._error_type(str(e)))
        else:
            self.succeeded.emit(self.request_id, payload)


class DataEngineClient(QObject):
    """
    Non-blocking access to a DataEngine.

    Every method returns immediately with a request id; exactly one of the
    callbacks is invoked later on the thread that owns this client.

    Args:
        engine: The engine implementation
        inline: Run requests synchronously on the calling thread
        parent: Parent QObject
    """

    def __init__(self, engine: DataEngine, inline: bool = False, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._engine = engine
        self._inline = inline
        self._ids = itertools.count(1)
        self._pending: Dict[int, Tuple[SuccessCallback, ErrorCallback]] = {}
        # Workers stay referenced until their thread has finished
        self._workers: Dict[int, EngineRequestWorker] = {}

    @property
    def engine(self) -> DataEngine:
        return self._engine

    @property
    def pending_count(self) -> int:
        """Number of requests issued and not answered yet."""
        return len(self._pending)

    # ==================== Engine commands ====================

    def scan_metadata(self, path: str, on_success: SuccessCallback, on_error: ErrorCallback) -> int:
        return self._submit("scan_metadata", lambda: self._engine.scan_metadata(path),
                            ScanError, on_success, on_error)

    def execute(self, sql: str, max_rows: int, on_success: SuccessCallback, on_error: ErrorCallback) -> int:
        return self._submit("execute", lambda: self._engine.execute(sql, max_rows),
                            QueryError, on_success, on_error)

    def select_sheet(self, sheet: str, on_success: SuccessCallback, on_error: ErrorCallback) -> int:
        return self._submit("select_sheet", lambda: self._engine.select_sheet(sheet),
                            SheetError, on_success, on_error)

    def export_query(self, sql: str, destination_path: str, export_format: str,
                     on_success: SuccessCallback, on_error: ErrorCallback) -> int:
        return self._submit(
            "export_query",
            lambda: self._engine.export_query(sql, destination_path, export_format),
            ExportError, on_success, on_error,
        )

    def resolve_sample_path(self, name: str, on_success: SuccessCallback, on_error: ErrorCallback) -> int:
        return self._submit("resolve_sample_path", lambda: self._engine.resolve_sample_path(name),
                            SampleResolutionError, on_success, on_error)

    # ==================== Dispatch ====================

    def _submit(self, operation: str, call: Callable[[], Any], error_type: Type[LakeDropError],
                on_success: SuccessCallback, on_error: ErrorCallback) -> int:
        request_id = next(self._ids)
        worker = EngineRequestWorker(request_id, operation, call, error_type)
        worker.succeeded.connect(self._on_succeeded)
        worker.failed.connect(self._on_failed)
        self._pending[request_id] = (on_success, on_error)

        logger.debug(f"Engine request #{request_id}: {operation}")
        if self._inline:
            worker.run()
        else:
            self._workers[request_id] = worker
            worker.finished.connect(self._on_worker_finished)
            worker.start()
        return request_id

    @Slot()
    def _on_worker_finished(self):
        worker = self.sender()
        if isinstance(worker, EngineRequestWorker):
            self._workers.pop(worker.request_id, None)
            worker.wait()

    @Slot(int, object)
    def _on_succeeded(self, request_id: int, payload: Any):
        callbacks = self._pending.pop(request_id, None)
        if callbacks is None:
            return
        on_success, _ = callbacks
        on_success(payload)

    @Slot(int, object)
    def _on_failed(self, request_id: int, error: LakeDropError):
        callbacks = self._pending.pop(request_id, None)
        if callbacks is None:
            return
        _, on_error = callbacks
        on_error(error)
