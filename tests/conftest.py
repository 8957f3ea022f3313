"""
Shared fixtures: a throwaway SQLite file per test, the three stores on top of
it, forwarder doubles, and a TestClient for the full app.
"""

from typing import Any, Dict, Generator, List, Tuple

import pytest
from fastapi.testclient import TestClient

from callbridge.config import Settings
from callbridge.main import create_app
from callbridge.services.db import Database
from callbridge.services.directory import SubaccountDirectory
from callbridge.services.identity import IdentityStore
from callbridge.services.ledger import EventLedger

ADMIN_SECRET = "s3cret-admin-key"


# =============================================================================
# Forwarder doubles
# =============================================================================

class RecordingForwarder:
    """Stands in for GhlForwarder; remembers every delivery."""

    def __init__(self):
        self.calls: List[Tuple[str, Dict[str, Any]]] = []

    async def deliver(self, url: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append((url, payload))
        return {"status": 200, "ok": True, "url": url, "body": {}}


class FailingForwarder(RecordingForwarder):
    """GHL unreachable."""

    async def deliver(self, url: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append((url, payload))
        raise ConnectionError("GHL endpoint unreachable")


# =============================================================================
# Settings / persistence
# =============================================================================

@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        app_env="testing",
        log_level="WARNING",
        database_url=f"sqlite:///{tmp_path / 'callbridge-test.db'}",
        db_create_all=True,
        admin_secret=ADMIN_SECRET,
        ghl_forward_timeout=2.0,
        ghl_verify_ssl=False,
    )


@pytest.fixture
def database(test_settings: Settings) -> Generator[Database, None, None]:
    db = Database.from_settings(test_settings)
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def directory(database: Database) -> SubaccountDirectory:
    return SubaccountDirectory(database)


@pytest.fixture
def identities(database: Database) -> IdentityStore:
    return IdentityStore(database)


@pytest.fixture
def ledger(database: Database) -> EventLedger:
    return EventLedger(database)


@pytest.fixture
def subaccount(directory: SubaccountDirectory):
    """The tenant used throughout: loc1 on DID 15550001111."""
    return directory.upsert(
        name="Acme Dental",
        location_id="loc1",
        ghl_inbound_url="https://example/cb",
        did_number="+1 555-000-1111",
    )


# =============================================================================
# App / client
# =============================================================================

@pytest.fixture
def forwarder() -> RecordingForwarder:
    return RecordingForwarder()


@pytest.fixture
def failing_forwarder() -> FailingForwarder:
    return FailingForwarder()


@pytest.fixture
def app(test_settings: Settings, database: Database, forwarder: RecordingForwarder):
    return create_app(settings=test_settings, database=database, forwarder=forwarder)


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c


@pytest.fixture
def admin_headers() -> Dict[str, str]:
    return {"x-admin-key": ADMIN_SECRET}
