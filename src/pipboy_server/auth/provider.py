"""Authentication provider.

Two operations back the request surface:

- ``resolve_or_create``: the login flow. An unseen username is provisioned on
  the spot as a non-admin account; a known username must present the right
  password.
- ``verify``: turns a bearer token into an ``Identity``.
"""

from __future__ import annotations

import logging

from pipboy_server.auth.identity import Identity
from pipboy_server.auth.passwords import hash_password, verify_password
from pipboy_server.auth.tokens import decode_token, issue_token
from pipboy_server.config import AuthSettings
from pipboy_server.db import accounts_repo
from pipboy_server.errors import BadRequest, Conflict, Unauthenticated

logger = logging.getLogger(__name__)


class AuthProvider:
    """Resolves credentials and tokens into identities."""

    def __init__(self, settings: AuthSettings | None = None) -> None:
        self._settings = settings

    @property
    def settings(self) -> AuthSettings:
        # Read through to the live config unless pinned, so tests that swap
        # config values are honoured.
        if self._settings is not None:
            return self._settings
        from pipboy_server.config import config

        return config.auth

    def _validate_credentials(self, username: str, password: str) -> str:
        username = (username or "").strip()
        settings = self.settings
        if not username or not password:
            raise BadRequest("Username and password required")
        if not settings.username_min_length <= len(username) <= settings.username_max_length:
            raise BadRequest(
                f"Username must be {settings.username_min_length}-"
                f"{settings.username_max_length} characters"
            )
        return username

    def resolve_or_create(self, username: str, password: str) -> Identity:
        """Return the identity for ``username``, creating the account on first use.

        Raises:
            BadRequest: Missing or malformed username/password.
            Unauthenticated: Known username with a wrong password.
        """
        username = self._validate_credentials(username, password)

        account = accounts_repo.get_account_by_username(username)
        if account is None:
            account = accounts_repo.create_account(username, hash_password(password))
            if account is not None:
                logger.info("Provisioned account %r (id=%s)", username, account.id)
                return Identity.from_account(account)
            # Lost a creation race against a concurrent first login; verify
            # against the row that won.
            account = accounts_repo.get_account_by_username(username)

        password_hash = account.password_hash if account else None
        if account is None or not verify_password(password, password_hash):
            logger.info("Rejected login for %r", username)
            raise Unauthenticated("Invalid password")
        return Identity.from_account(account)

    def issue_token(self, identity: Identity) -> tuple[str, int]:
        return issue_token(identity, self.settings)

    def login(self, username: str, password: str) -> tuple[Identity, str, int]:
        """Resolve-or-create and issue a token in one step."""
        identity = self.resolve_or_create(username, password)
        token, expires_in = self.issue_token(identity)
        return identity, token, expires_in

    def verify(self, token: str | None) -> Identity:
        """Verify a bearer token.

        Raises:
            Unauthenticated: Missing, malformed, tampered or expired token.
        """
        if not token:
            raise Unauthenticated("Access token required")
        return decode_token(token, self.settings)

    def ensure_admin(self, username: str, password: str) -> Identity:
        """Create ``username`` as an admin, or promote the existing account.

        Existing accounts keep their password; ``password`` is only used for
        new ones.
        """
        username = self._validate_credentials(username, password)
        account = accounts_repo.get_account_by_username(username)
        if account is None:
            account = accounts_repo.create_account(
                username, hash_password(password), is_admin=True
            )
        elif not account.is_admin:
            accounts_repo.set_admin(username, True)
            account = accounts_repo.get_account_by_username(username)
        if account is None:
            raise Conflict(f"Could not provision admin {username!r}")
        logger.info("Admin account ready: %r", username)
        return Identity.from_account(account)
