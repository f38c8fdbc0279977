import tempfile
from pathlib import Path

import pytest

from cloudsettings.errors import StoreReadError, StoreWriteError
from cloudsettings.store import InMemoryVariableStore, StaticUserIdentity


class RecordingStore(InMemoryVariableStore):
    """In-memory store that counts calls and can be told to fail."""

    def __init__(self, variables=None):
        super().__init__(variables)
        self.reads = 0
        self.writes = 0
        self.fail_reads = 0  # number of upcoming reads that fail
        self.fail_writes = False

    def read_variable(self, key: str) -> str:
        self.reads += 1
        if self.fail_reads:
            self.fail_reads -= 1
            raise StoreReadError(key, "store unreachable")
        return super().read_variable(key)

    def write_variable(self, key: str, value: str) -> None:
        self.writes += 1
        if self.fail_writes:
            raise StoreWriteError(key, "store unreachable")
        super().write_variable(key, value)


@pytest.fixture
def store():
    """Create an empty recording store."""
    return RecordingStore()


@pytest.fixture
def identity():
    """Create a fixed user identity."""
    return StaticUserIdentity("U-alice")


@pytest.fixture
def temp_dir():
    """Create a temporary directory for file-based tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)
