"""Catalog item repository operations for the SQLite backend."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass

from pipboy_server.db.connection import connection_scope
from pipboy_server.db.errors import raise_read_error, raise_write_error
from pipboy_server.db.types import CatalogItem

_ITEM_COLUMNS = "id, item_key, name, description, image_url, created_at"


@dataclass(slots=True)
class ItemDeletion:
    """Rows removed by ``delete_item``."""

    item_key: str
    inventory_lines: int
    storage_lines: int


def list_items() -> list[CatalogItem]:
    """Return every catalog item ordered by display name."""
    try:
        with connection_scope() as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT {_ITEM_COLUMNS} FROM items ORDER BY name, item_key")
            rows = cursor.fetchall()
        return [CatalogItem.from_row(row) for row in rows]
    except Exception as exc:
        raise_read_error("catalog.list_items", exc)


def get_item(item_key: str) -> CatalogItem | None:
    """Return the catalog item with ``item_key`` or ``None`` if missing."""
    try:
        with connection_scope() as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT {_ITEM_COLUMNS} FROM items WHERE item_key = ?", (item_key,))
            row = cursor.fetchone()
        return CatalogItem.from_row(row) if row else None
    except Exception as exc:
        raise_read_error("catalog.get_item", exc, details=f"item_key={item_key!r}")


def insert_item(item_key: str, name: str, description: str, image_url: str) -> CatalogItem | None:
    """Insert a catalog item.

    Returns:
        The created item, or ``None`` when ``item_key`` already exists.
    """
    try:
        with connection_scope(write=True) as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO items (item_key, name, description, image_url)
                VALUES (?, ?, ?, ?)
                """,
                (item_key, name, description, image_url),
            )
            cursor.execute(f"SELECT {_ITEM_COLUMNS} FROM items WHERE id = ?", (cursor.lastrowid,))
            row = cursor.fetchone()
        return CatalogItem.from_row(row)
    except sqlite3.IntegrityError:
        return None
    except Exception as exc:
        raise_write_error("catalog.insert_item", exc, details=f"item_key={item_key!r}")


def delete_item(item_key: str) -> ItemDeletion | None:
    """Delete a catalog item together with every line that references it.

    All three deletes run in one transaction, so no reader ever sees a line
    whose item is gone.

    Returns:
        Counts of removed rows, or ``None`` when the item does not exist (in
        which case nothing is deleted).
    """
    try:
        with connection_scope(immediate=True) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT 1 FROM items WHERE item_key = ?", (item_key,))
            if cursor.fetchone() is None:
                return None
            cursor.execute("DELETE FROM user_inventory WHERE item_key = ?", (item_key,))
            inventory_lines = cursor.rowcount
            cursor.execute("DELETE FROM party_storage WHERE item_key = ?", (item_key,))
            storage_lines = cursor.rowcount
            cursor.execute("DELETE FROM items WHERE item_key = ?", (item_key,))
        return ItemDeletion(
            item_key=item_key,
            inventory_lines=inventory_lines,
            storage_lines=storage_lines,
        )
    except Exception as exc:
        raise_write_error("catalog.delete_item", exc, details=f"item_key={item_key!r}")
