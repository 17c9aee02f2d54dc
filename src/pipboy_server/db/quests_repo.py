"""Quest repository operations for the SQLite backend."""

from __future__ import annotations

import sqlite3

from pipboy_server.db.connection import connection_scope
from pipboy_server.db.errors import raise_read_error, raise_write_error
from pipboy_server.db.types import Quest

_QUEST_COLUMNS = "id, quest_key, name, description, image_url, is_active, created_at"


def list_active_quests() -> list[Quest]:
    """Return active quests, newest first.

    ``created_at`` has one-second resolution, so ties fall back to row id.
    """
    try:
        with connection_scope() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                SELECT {_QUEST_COLUMNS} FROM quests
                WHERE is_active = 1
                ORDER BY created_at DESC, id DESC
                """
            )
            rows = cursor.fetchall()
        return [Quest.from_row(row) for row in rows]
    except Exception as exc:
        raise_read_error("quests.list_active_quests", exc)


def get_quest(quest_key: str) -> Quest | None:
    try:
        with connection_scope() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT {_QUEST_COLUMNS} FROM quests WHERE quest_key = ?", (quest_key,)
            )
            row = cursor.fetchone()
        return Quest.from_row(row) if row else None
    except Exception as exc:
        raise_read_error("quests.get_quest", exc, details=f"quest_key={quest_key!r}")


def insert_quest(
    quest_key: str, name: str, description: str, image_url: str, *, is_active: bool = True
) -> Quest | None:
    """Insert a quest. Returns ``None`` when ``quest_key`` already exists."""
    try:
        with connection_scope(write=True) as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO quests (quest_key, name, description, image_url, is_active)
                VALUES (?, ?, ?, ?, ?)
                """,
                (quest_key, name, description, image_url, int(is_active)),
            )
            cursor.execute(
                f"SELECT {_QUEST_COLUMNS} FROM quests WHERE id = ?", (cursor.lastrowid,)
            )
            row = cursor.fetchone()
        return Quest.from_row(row)
    except sqlite3.IntegrityError:
        return None
    except Exception as exc:
        raise_write_error("quests.insert_quest", exc, details=f"quest_key={quest_key!r}")


def delete_quest(quest_key: str) -> bool:
    """Hard-delete a quest. Returns ``False`` when it does not exist."""
    try:
        with connection_scope(write=True) as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM quests WHERE quest_key = ?", (quest_key,))
            deleted = cursor.rowcount > 0
        return deleted
    except Exception as exc:
        raise_write_error("quests.delete_quest", exc, details=f"quest_key={quest_key!r}")
