"""Account repository operations for the SQLite backend."""

from __future__ import annotations

import sqlite3

from pipboy_server.db.connection import connection_scope
from pipboy_server.db.errors import raise_read_error, raise_write_error
from pipboy_server.db.types import Account

_ACCOUNT_COLUMNS = "id, username, password_hash, is_admin, created_at"


def create_account(username: str, password_hash: str, *, is_admin: bool = False) -> Account | None:
    """Insert an account row.

    Returns:
        The created ``Account``, or ``None`` when the username is taken.
    """
    try:
        with connection_scope(write=True) as conn:
            cursor = conn.cursor()
            cursor.execute(
                "INSERT INTO users (username, password_hash, is_admin) VALUES (?, ?, ?)",
                (username, password_hash, int(is_admin)),
            )
            cursor.execute(
                f"SELECT {_ACCOUNT_COLUMNS} FROM users WHERE id = ?", (cursor.lastrowid,)
            )
            row = cursor.fetchone()
        return Account.from_row(row)
    except sqlite3.IntegrityError:
        return None
    except Exception as exc:
        raise_write_error("accounts.create_account", exc, details=f"username={username!r}")


def get_account_by_username(username: str) -> Account | None:
    """Return the account for ``username`` or ``None`` if missing."""
    try:
        with connection_scope() as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT {_ACCOUNT_COLUMNS} FROM users WHERE username = ?", (username,))
            row = cursor.fetchone()
        return Account.from_row(row) if row else None
    except Exception as exc:
        raise_read_error("accounts.get_account_by_username", exc, details=f"username={username!r}")


def set_admin(username: str, is_admin: bool) -> bool:
    """Grant or revoke the admin flag. Returns ``False`` for unknown users."""
    try:
        with connection_scope(write=True) as conn:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE users SET is_admin = ? WHERE username = ?", (int(is_admin), username)
            )
            changed = cursor.rowcount > 0
        return changed
    except Exception as exc:
        raise_write_error("accounts.set_admin", exc, details=f"username={username!r}")


def count_accounts() -> int:
    try:
        with connection_scope() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) FROM users")
            return int(cursor.fetchone()[0])
    except Exception as exc:
        raise_read_error("accounts.count_accounts", exc)
