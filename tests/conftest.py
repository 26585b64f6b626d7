"""
Pytest configuration and fixtures for LakeDrop tests.
"""
import os
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

# Run Qt widget tests headless
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from lakedrop.core.engine_client import DataEngine
from lakedrop.core.models import ColumnInfo, FieldInfo, FileMetadata, QueryResult

# Qt Application fixture for tests that need QWidget
_qt_app = None


@pytest.fixture(scope="session")
def qapp():
    """Create a QApplication for tests that need Qt widgets."""
    global _qt_app
    from PySide6.QtWidgets import QApplication
    if _qt_app is None:
        _qt_app = QApplication.instance() or QApplication([])
    yield _qt_app


@pytest.fixture(autouse=True)
def isolated_app_home(tmp_path, monkeypatch):
    """Keep preferences and generated samples out of the real home directory."""
    home = tmp_path / "lakedrop_home"
    monkeypatch.setenv("LAKEDROP_HOME", str(home))
    yield home


@pytest.fixture(autouse=True)
def english():
    """Run every test with English messages."""
    from lakedrop.config.i18n import i18n_manager
    previous = i18n_manager.get_current_language()
    i18n_manager.set_language("en")
    yield
    i18n_manager.set_language(previous)


# ==================== Test doubles ====================

def make_meta(file_name: str = "sample.csv", row_count: int = 500,
              sheets: Tuple[str, ...] = (), active_sheet: Optional[str] = None) -> FileMetadata:
    return FileMetadata(
        file_name=file_name,
        file_path=f"/data/{file_name}",
        file_size=2048,
        row_count=row_count,
        schema=(FieldInfo("id", "int"), FieldInfo("name", "string")),
        sheets=sheets,
        active_sheet=active_sheet,
    )


def make_result(rows, names=("id", "name"), row_count: Optional[int] = None) -> QueryResult:
    rows = tuple(tuple(row) for row in rows)
    return QueryResult(
        columns=tuple(ColumnInfo(name, "str") for name in names),
        rows=rows,
        row_count=len(rows) if row_count is None else row_count,
    )


class FakeEngine(DataEngine):
    """
    Scripted DataEngine recording every call.

    Each attribute holds either a value to return or an exception to raise.
    """

    def __init__(self):
        self.calls: List[Tuple] = []
        self.metadata: Any = make_meta()
        self.result: Any = make_result([(1, "alpha"), (2, "bravo"), (3, "charlie")], row_count=500)
        self.sheet_metadata: Any = None
        self.export_outcome: Any = None
        self.samples: Dict[str, str] = {"sample.csv": "/samples/sample.csv"}

    @staticmethod
    def _outcome(value):
        if isinstance(value, Exception):
            raise value
        return value

    def scan_metadata(self, path: str) -> FileMetadata:
        self.calls.append(("scan_metadata", path))
        return self._outcome(self.metadata)

    def execute(self, sql: str, max_rows: int) -> QueryResult:
        self.calls.append(("execute", sql, max_rows))
        return self._outcome(self.result)

    def select_sheet(self, sheet: str) -> FileMetadata:
        self.calls.append(("select_sheet", sheet))
        return self._outcome(self.sheet_metadata)

    def export_query(self, sql: str, destination_path: str, export_format: str) -> None:
        self.calls.append(("export_query", sql, destination_path, export_format))
        return self._outcome(self.export_outcome)

    def resolve_sample_path(self, name: str) -> str:
        self.calls.append(("resolve_sample_path", name))
        if name not in self.samples:
            from lakedrop.core.errors import SampleResolutionError
            raise SampleResolutionError("Sample file not found")
        return self.samples[name]

    def calls_named(self, name: str) -> List[Tuple]:
        return [call for call in self.calls if call[0] == name]


class PendingRequest:
    """A request held by DeferredEngineClient until the test answers it."""

    def __init__(self, operation: str, args: Tuple, on_success: Callable, on_error: Callable):
        self.operation = operation
        self.args = args
        self._on_success = on_success
        self._on_error = on_error

    def succeed(self, payload=None):
        self._on_success(payload)

    def fail(self, error):
        self._on_error(error)


class DeferredEngineClient:
    """
    DataEngineClient stand-in whose responses are delivered by the test.

    Lets tests answer overlapping requests in any order.
    """

    def __init__(self):
        self.requests: List[PendingRequest] = []

    def _record(self, operation, *args, on_success, on_error) -> int:
        self.requests.append(PendingRequest(operation, args, on_success, on_error))
        return len(self.requests)

    def __getattr__(self, operation):
        if operation in ("scan_metadata", "execute", "select_sheet", "export_query", "resolve_sample_path"):
            return partial(self._record, operation)
        raise AttributeError(operation)

    def of(self, operation: str) -> List[PendingRequest]:
        return [request for request in self.requests if request.operation == operation]

    def last(self, operation: str) -> PendingRequest:
        return self.of(operation)[-1]


class RecordingNotifier:
    def __init__(self):
        self.successes: List[str] = []
        self.errors: List[str] = []

    def success(self, message: str) -> None:
        self.successes.append(message)

    def error(self, message: str) -> None:
        self.errors.append(message)


class RecordingClipboard:
    def __init__(self, broken: bool = False):
        self.texts: List[str] = []
        self.broken = broken

    def set_text(self, text: str) -> None:
        if self.broken:
            raise RuntimeError("clipboard unavailable")
        self.texts.append(text)

    @property
    def last(self) -> Optional[str]:
        return self.texts[-1] if self.texts else None


@pytest.fixture
def fake_engine():
    return FakeEngine()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def clipboard():
    return RecordingClipboard()


@pytest.fixture
def inline_controller(qapp, fake_engine, notifier):
    """SessionController over FakeEngine with synchronous requests."""
    from lakedrop.core.engine_client import DataEngineClient
    from lakedrop.core.session_controller import SessionController
    client = DataEngineClient(fake_engine, inline=True)
    return SessionController(client, notifier)


@pytest.fixture
def deferred_client():
    return DeferredEngineClient()


@pytest.fixture
def deferred_controller(qapp, deferred_client, notifier):
    """SessionController whose engine responses are released by the test."""
    from lakedrop.core.session_controller import SessionController
    return SessionController(deferred_client, notifier)
