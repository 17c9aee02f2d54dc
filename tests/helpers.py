"""
Shared test helpers.

Plain functions (not fixtures) used by ``conftest.py`` and by tests that need
more accounts or tokens than the standard fixtures provide.
"""

from fastapi.testclient import TestClient

from pipboy_server.auth.identity import Identity
from pipboy_server.auth.passwords import hash_password
from pipboy_server.db import accounts_repo
from tests.constants import TEST_PASSWORD


def make_identity(username: str, *, is_admin: bool = False) -> Identity:
    """Create an account row and return its identity."""
    account = accounts_repo.create_account(
        username, hash_password(TEST_PASSWORD), is_admin=is_admin
    )
    assert account is not None
    return Identity.from_account(account)


def login(client: TestClient, username: str, password: str = TEST_PASSWORD) -> dict:
    """Log in through the API and return the response body."""
    response = client.post("/api/auth/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return response.json()


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
