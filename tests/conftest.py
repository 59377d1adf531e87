from datetime import date

import pytest

from ingest.orchestrator import IngestOrchestrator
from io_utils.readers import CsvUpload
from io_utils.store import MemoryStore


@pytest.fixture
def today():
    return date(2025, 5, 20)


@pytest.fixture
def make_upload():
    def _make(name, text):
        return CsvUpload(name=name, data=text.encode("utf-8"))
    return _make


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def orchestrator(store, today):
    return IngestOrchestrator(store, today=today)
