"""
Shared pytest fixtures for the Pip-Boy server test suite.

This module provides fixtures that are automatically available to all test files:
- Temporary test databases (one per test function)
- Fresh service objects (bus, ledger, registry) with an event recorder
- Player and admin accounts with matching identities
- FastAPI TestClient instances and bearer-token headers

Fixtures are function-scoped so every test starts from an empty database and
a bus with no subscribers.
"""

import shutil
import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from pipboy_server.auth.identity import Identity
from pipboy_server.config import config, use_test_database
from pipboy_server.core.bus import BroadcastEvent
from pipboy_server.core.context import ServiceContext, build_context
from pipboy_server.db import catalog_repo
from pipboy_server.db.schema import init_database

# Import shared test constants
from tests.constants import TEST_JWT_SECRET
from tests.helpers import bearer, login, make_identity

# ============================================================================
# CONFIG FIXTURES
# ============================================================================


@pytest.fixture(autouse=True)
def fast_auth_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    """
    Pin auth settings for every test.

    bcrypt's minimum cost keeps account creation fast, and a fixed secret
    makes tokens reproducible regardless of the developer's environment.
    """
    monkeypatch.setattr(config.auth, "bcrypt_rounds", 4)
    monkeypatch.setattr(config.auth, "jwt_secret", TEST_JWT_SECRET)
    monkeypatch.setattr(config.auth, "token_ttl_minutes", 60)
    monkeypatch.delenv("PIPBOY_ADMIN_USER", raising=False)
    monkeypatch.delenv("PIPBOY_ADMIN_PASSWORD", raising=False)


# ============================================================================
# DATABASE FIXTURES
# ============================================================================


@pytest.fixture(scope="function")
def temp_db_path() -> Generator[Path, None, None]:
    """
    Create a temporary database file for testing.

    Uses the config system's ``use_test_database`` context manager so every
    repository call in the test goes to the temporary file.

    Yields:
        Path to temporary database file
    """
    temp_dir = tempfile.mkdtemp()
    temp_db = Path(temp_dir) / "test_pipboy.db"

    with use_test_database(temp_db):
        yield temp_db

    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture(scope="function")
def test_db(temp_db_path: Path) -> Generator[None, None, None]:
    """
    Initialize a test database with schema but no data.

    Neither the default catalog nor a bootstrap admin is created, so tests
    control every row.
    """
    init_database(skip_admin=True, seed=False)
    yield


@pytest.fixture(scope="function")
def seeded_db(temp_db_path: Path) -> Generator[None, None, None]:
    """Initialize a test database including the default catalog and quest."""
    init_database(skip_admin=True, seed=True)
    yield


# ============================================================================
# ACCOUNT FIXTURES
# ============================================================================


@pytest.fixture
def player(test_db) -> Identity:
    """A regular player account named ``nate``."""
    return make_identity("nate")


@pytest.fixture
def other_player(test_db) -> Identity:
    """A second player account named ``piper``."""
    return make_identity("piper")


@pytest.fixture
def admin(test_db) -> Identity:
    """A game-master account named ``overseer``."""
    return make_identity("overseer", is_admin=True)


# ============================================================================
# SERVICE FIXTURES
# ============================================================================


@pytest.fixture
def context(test_db) -> ServiceContext:
    """Fresh services over the test database."""
    return build_context()


@pytest.fixture
def events(context: ServiceContext) -> list[BroadcastEvent]:
    """Every event published on the context bus, in order."""
    received: list[BroadcastEvent] = []
    context.bus.subscribe(received.append)
    return received


@pytest.fixture
def stimpak(test_db):
    """A ``stimpak`` catalog entry."""
    item = catalog_repo.insert_item(
        "stimpak", "Stimpak", "Heals wounds.", "/api/placeholder/200/150"
    )
    assert item is not None
    return item


@pytest.fixture
def radaway(test_db):
    """A ``radaway`` catalog entry."""
    item = catalog_repo.insert_item(
        "radaway", "RadAway", "Flushes rads.", "/api/placeholder/200/150"
    )
    assert item is not None
    return item


# ============================================================================
# API FIXTURES
# ============================================================================


@pytest.fixture(scope="function")
def test_client(test_db, monkeypatch: pytest.MonkeyPatch) -> Generator[TestClient, None, None]:
    """
    Create a FastAPI TestClient for API endpoint testing.

    The client is entered as a context manager so the application lifespan
    runs (schema check, bus loop binding, viewer hub subscription). Default
    catalog seeding is switched off so tests start with an empty catalog.

    Example:
        def test_health(test_client):
            response = test_client.get("/api/health")
            assert response.status_code == 200
    """
    from pipboy_server.api.server import create_app

    monkeypatch.setattr(config.database, "seed_defaults", False)
    app = create_app()
    with TestClient(app) as client:
        yield client


@pytest.fixture
def player_headers(test_client: TestClient) -> dict[str, str]:
    """Auth headers for a player created through the login endpoint."""
    return bearer(login(test_client, "nate")["token"])


@pytest.fixture
def admin_headers(test_client: TestClient) -> dict[str, str]:
    """Auth headers for an admin account."""
    make_identity("overseer", is_admin=True)
    return bearer(login(test_client, "overseer")["token"])
