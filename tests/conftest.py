import pytest

from pstbackup.memory import MemoryClient
from pstbackup.stores import PLACEHOLDER_STORE


@pytest.fixture
def client():
    """Profile with two real stores and a placeholder between them."""
    client = MemoryClient()
    client.add_store("Sales", {"Inbox": 10, "Sent": 5})
    client.add_store(PLACEHOLDER_STORE)
    client.add_store("Support", {"Inbox": 3, "Drafts": 1, "Sent": 2}, is_open=False)
    return client


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point config lookups at a file that doesn't exist."""
    monkeypatch.setenv("PSTBACKUP_CONFIG", str(tmp_path / "no-config.yaml"))
