import pytest
import sys
from pathlib import Path

# Add project root to sys.path
sys.path.append(str(Path(__file__).parent.parent))

import shutil
import tempfile
from datetime import datetime, timedelta, timezone
from api.models import JournalDocument
from orchestrator.entries import EntryManager
from settings.manager import SettingsManager

class InMemoryJournalStorage:
    """JournalStore fake. Keeps a serialized copy so callers never share objects with it."""

    def __init__(self, data: dict = None):
        self.data = data if data is not None else {"entries": []}
        self.fail_writes = False
        self.writes = 0

    def read(self) -> JournalDocument:
        return JournalDocument.from_json(self.data)

    def write(self, doc: JournalDocument) -> bool:
        if self.fail_writes:
            return False
        self.writes += 1
        self.data = doc.to_json()
        return True


class StepClock:
    """Deterministic clock that advances one second per call."""

    def __init__(self, start: datetime = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self) -> datetime:
        now = self.current
        self.current = self.current + timedelta(seconds=1)
        return now


@pytest.fixture(scope="function")
def test_dir():
    """Creates a temporary directory for test data."""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    shutil.rmtree(temp_dir)

@pytest.fixture
def memory_store():
    return InMemoryJournalStorage()

@pytest.fixture
def clock():
    return StepClock()

@pytest.fixture
def manager(memory_store, clock):
    return EntryManager(memory_store, clock=clock)

@pytest.fixture
def mock_settings(test_dir):
    """Returns a SettingsManager pointed at the temp dir and isolated from the real environment."""
    return SettingsManager(config_dir=test_dir, environ={"JOURNAL_DATA_DIR": test_dir})

@pytest.fixture
def api_client(manager, mock_settings):
    """Client over an app bound to the in-memory store."""
    from fastapi.testclient import TestClient
    from api.server import create_app
    return TestClient(create_app(entry_manager=manager, settings_mgr=mock_settings))

@pytest.fixture
def file_api_client(mock_settings):
    """Client over an app that bootstraps the file-backed store on startup."""
    from fastapi.testclient import TestClient
    from api.server import create_app
    with TestClient(create_app(settings_mgr=mock_settings)) as client:
        yield client
