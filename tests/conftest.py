"""
pytest configuration for artifact_store tests.

Adds src directory to Python path for imports and provides shared fixtures.
"""

import io
import sys
from pathlib import Path
from typing import List, Tuple

import pytest

# Add src directory to Python path
src_dir = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_dir))

from artifact_store.gateway.memory import InMemoryGateway  # noqa: E402

BUCKET = "releases"

RELEASE_KEYS = {
    "rel/[db,1.2.0]linux.tgz": b"linux build of db 1.2.0",
    "rel/[db,1.2.0]windows.tgz": b"windows build of db 1.2.0",
    "rel/[db,2.0.0]linux.tgz": b"linux build of db 2.0.0",
}


class RecordingProgress:
    """Progress sink that records every call in order."""

    def __init__(self, output=None):
        self.output = output
        self.calls: List[Tuple[str, int]] = []
        self.total = 0
        self.completed = 0

    def set_total(self, total: int) -> None:
        self.total = total
        self.calls.append(("set_total", total))

    def start(self) -> None:
        self.calls.append(("start", 0))

    def add(self, count: int) -> None:
        self.completed += count
        self.calls.append(("add", count))

    def finish(self) -> None:
        self.calls.append(("finish", self.completed))

    @property
    def finished(self) -> bool:
        return bool(self.calls) and self.calls[-1][0] == "finish"


@pytest.fixture
def s3_settings():
    """Valid configuration mapping using the YAML key names."""
    return {
        "bucket": BUCKET,
        "access-key-id": "AKIATEST",
        "secret-access-key": "secret",
        "region-name": "us-east-1",
        "path": "rel",
    }


@pytest.fixture
def release_gateway():
    """In-memory gateway holding three db release files."""
    return InMemoryGateway({BUCKET: dict(RELEASE_KEYS)})


@pytest.fixture
def progress_writer():
    return io.StringIO()


@pytest.fixture
def recorded_progress():
    """Factory that hands out RecordingProgress sinks and keeps them for assertions."""
    sinks: List[RecordingProgress] = []

    def factory(output):
        sink = RecordingProgress(output)
        sinks.append(sink)
        return sink

    factory.sinks = sinks
    return factory
