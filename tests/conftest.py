"""
Pytest configuration and fixtures.

The environment is set before the application is imported so that the
engine points at a throwaway SQLite file.
"""
import asyncio
import os
import tempfile
from pathlib import Path

_db_dir = tempfile.mkdtemp(prefix="catalog-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{Path(_db_dir) / 'test.db'}"
os.environ["JWT_SECRET"] = "test-secret-key-for-the-catalog-test-suite"
os.environ["JWT_RATE_LIMIT"] = "1000/minute"

import pytest
from fastapi.testclient import TestClient

from catalog.core.database.engine import drop_db
from catalog.features.users.auth import create_jwt_token
from catalog.features.users.models import Principal
from catalog.main import app


def bearer(principal: Principal) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_jwt_token(principal)}"}


@pytest.fixture(scope="function")
def client():
    """Test client with freshly created tables; tables are dropped afterwards."""
    with TestClient(app) as test_client:
        yield test_client
    asyncio.run(drop_db())


@pytest.fixture
def admin_headers():
    return bearer(Principal(id="u-admin", username="admin", roles=("admin",)))


@pytest.fixture
def ingestor_headers():
    return bearer(Principal(id="u-ingestor", username="ingestor", roles=("ingestor",)))


@pytest.fixture
def archivemanager_headers():
    return bearer(Principal(id="u-archive", username="archiver", roles=("archivemanager",)))


@pytest.fixture
def alice_headers():
    return bearer(Principal(id="u-alice", username="alice", roles=("user",), groups=frozenset({"p1234"})))


@pytest.fixture
def bob_headers():
    return bearer(Principal(id="u-bob", username="bob", roles=("user",), groups=frozenset({"p5678"})))


@pytest.fixture
def norole_headers():
    return bearer(Principal(id="u-guest", username="guest"))


def proposal_payload(proposal_id: str = "20240001", **overrides) -> dict:
    payload = {
        "proposal_id": proposal_id,
        "email": "pi@facility.org",
        "title": "Magnetic ordering in thin films",
        "abstract": "Neutron reflectometry on layered samples",
        "owner_group": "p1234",
        "access_groups": ["instrument-scientists"],
        "measurement_period_list": [
            {
                "instrument": "AMOR",
                "start": "2024-03-01T08:00:00Z",
                "end": "2024-03-03T08:00:00Z",
            }
        ],
    }
    payload.update(overrides)
    return payload


def dataset_payload(**overrides) -> dict:
    payload = {
        "type": "raw",
        "dataset_name": "Run 42",
        "description": "Reflectivity scan",
        "owner": "Alice",
        "contact_email": "alice@facility.org",
        "owner_group": "p1234",
        "source_folder": "/data/p1234/run42",
        "size": 2048,
        "number_of_files": 3,
        "creation_time": "2024-03-02T10:00:00Z",
    }
    payload.update(overrides)
    return payload
