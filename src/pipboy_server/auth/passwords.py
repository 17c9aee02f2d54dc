"""bcrypt password hashing helpers."""

from __future__ import annotations

import bcrypt

# Used when the account does not exist so both paths pay for one bcrypt check.
_DUMMY_HASH = bcrypt.hashpw(b"pipboy-dummy-password", bcrypt.gensalt(rounds=4))


def hash_password(password: str, *, rounds: int | None = None) -> str:
    """Hash ``password`` with a fresh salt; cost comes from ``auth.bcrypt_rounds``."""
    if rounds is None:
        from pipboy_server.config import config

        rounds = config.auth.bcrypt_rounds
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    """Constant-time check of ``password`` against a stored hash.

    A missing hash still performs a comparison against a dummy hash and then
    reports failure.
    """
    if not password_hash:
        bcrypt.checkpw(password.encode("utf-8"), _DUMMY_HASH)
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash.
        return False
