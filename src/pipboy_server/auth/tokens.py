"""JWT access tokens.

Tokens are HS256-signed with ``auth.jwt_secret`` and carry the account id as
``sub`` plus the username and admin flag, so verifying a request needs no
database round trip.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from pipboy_server.auth.identity import Identity
from pipboy_server.config import AuthSettings
from pipboy_server.errors import Unauthenticated

ISSUER = "pipboy-server"


def issue_token(identity: Identity, settings: AuthSettings) -> tuple[str, int]:
    """Create an access token for ``identity``.

    Returns:
        tuple[str, int]: The encoded JWT and its lifetime in seconds.
    """
    now = datetime.now(tz=UTC)
    expires_in = timedelta(minutes=settings.token_ttl_minutes)
    claims = {
        "iss": ISSUER,
        "sub": str(identity.account_id),
        "username": identity.username,
        "is_admin": identity.is_admin,
        "iat": int(now.timestamp()),
        "exp": int((now + expires_in).timestamp()),
    }
    token = jwt.encode(payload=claims, key=settings.jwt_secret, algorithm=settings.jwt_algorithm)
    return token, int(expires_in.total_seconds())


def decode_token(token: str, settings: AuthSettings) -> Identity:
    """Verify signature, expiry and issuer, and rebuild the ``Identity``.

    Raises:
        Unauthenticated: For any invalid, expired or malformed token.
    """
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            key=settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            issuer=ISSUER,
            options={"require": ["sub", "exp", "iat"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise Unauthenticated("Token expired") from exc
    except jwt.PyJWTError as exc:
        raise Unauthenticated("Invalid token") from exc

    try:
        account_id = int(payload["sub"])
    except (TypeError, ValueError) as exc:
        raise Unauthenticated("Invalid token subject") from exc
    username = payload.get("username")
    if not isinstance(username, str) or not username:
        raise Unauthenticated("Invalid token claims")
    return Identity(
        account_id=account_id,
        username=username,
        is_admin=bool(payload.get("is_admin", False)),
    )
