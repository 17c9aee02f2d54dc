"""Inventory and party-storage line repository for the SQLite backend.

Both tables hold ``(owner?, item_key, quantity)`` rows with ``quantity > 0``.
The two mutation primitives are:

- ``upsert_increment``: insert the line or add to its quantity in a single
  ``INSERT ... ON CONFLICT DO UPDATE`` statement. The update only applies
  while the total stays within ``MAX_LINE_QUANTITY``.
- ``conditional_decrement``: remove ``delta`` units only if the line holds at
  least that many. A line that would reach zero is deleted instead of being
  written, so a non-positive quantity is never persisted.

``conditional_decrement`` runs under ``BEGIN IMMEDIATE``: the write lock is
taken before the first statement, so concurrent removes against the same line
are serialized and at most one can consume the last unit.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass

from pipboy_server.db.connection import connection_scope
from pipboy_server.db.errors import raise_read_error, raise_write_error
from pipboy_server.db.schema import MAX_LINE_QUANTITY
from pipboy_server.db.types import Line


@dataclass(slots=True)
class Increment:
    """
    Outcome of ``upsert_increment``.

    Attributes:
        applied: True when the units were added.
        quantity: New quantity when applied; the unchanged current quantity
            when the total would have exceeded ``MAX_LINE_QUANTITY``.
    """

    applied: bool
    quantity: int


@dataclass(slots=True)
class Decrement:
    """
    Outcome of ``conditional_decrement``.

    Attributes:
        applied: True when the units were removed.
        quantity: Remaining quantity when applied (0 means the line was
            deleted); the unchanged current quantity (0 when absent) otherwise.
    """

    applied: bool
    quantity: int


@dataclass(frozen=True, slots=True)
class _LineTable:
    """Table name plus the key columns identifying one line."""

    name: str
    key_columns: tuple[str, ...]

    @property
    def where(self) -> str:
        return " AND ".join(f"{column} = ?" for column in self.key_columns)


INVENTORY = _LineTable("user_inventory", ("user_id", "item_key"))
STORAGE = _LineTable("party_storage", ("item_key",))


# ============================================================================
# GENERIC PRIMITIVES
# ============================================================================


def _current_quantity(cursor: sqlite3.Cursor, table: _LineTable, key: tuple) -> int:
    cursor.execute(f"SELECT quantity FROM {table.name} WHERE {table.where}", key)
    row = cursor.fetchone()
    return int(row[0]) if row else 0


def upsert_increment(table: _LineTable, key: tuple, delta: int) -> Increment | None:
    """Add ``delta`` units to a line, creating it when absent.

    ``delta`` must already be within ``1..MAX_LINE_QUANTITY``.

    Returns:
        The outcome, or ``None`` when a foreign key rejected the row
        (unknown item or account).
    """
    columns = ", ".join((*table.key_columns, "quantity"))
    placeholders = ", ".join("?" for _ in range(len(table.key_columns) + 1))
    conflict = ", ".join(table.key_columns)
    try:
        with connection_scope(immediate=True) as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                INSERT INTO {table.name} ({columns}) VALUES ({placeholders})
                ON CONFLICT({conflict}) DO UPDATE SET quantity = quantity + excluded.quantity
                WHERE quantity + excluded.quantity <= ?
                """,
                (*key, delta, MAX_LINE_QUANTITY),
            )
            applied = cursor.rowcount > 0
            quantity = _current_quantity(cursor, table, key)
        return Increment(applied=applied, quantity=quantity)
    except sqlite3.IntegrityError:
        return None
    except Exception as exc:
        raise_write_error(f"{table.name}.upsert_increment", exc, details=f"key={key!r}")


def conditional_decrement(table: _LineTable, key: tuple, delta: int) -> Decrement:
    """Remove ``delta`` units from a line only if it holds at least that many."""
    try:
        with connection_scope(immediate=True) as conn:
            cursor = conn.cursor()
            # Exactly used up: the line goes away rather than sitting at zero.
            cursor.execute(
                f"DELETE FROM {table.name} WHERE {table.where} AND quantity = ?",
                (*key, delta),
            )
            if cursor.rowcount > 0:
                return Decrement(applied=True, quantity=0)

            cursor.execute(
                f"""
                UPDATE {table.name} SET quantity = quantity - ?
                WHERE {table.where} AND quantity > ?
                """,
                (delta, *key, delta),
            )
            applied = cursor.rowcount > 0
            quantity = _current_quantity(cursor, table, key)
        return Decrement(applied=applied, quantity=quantity)
    except Exception as exc:
        raise_write_error(f"{table.name}.conditional_decrement", exc, details=f"key={key!r}")


# ============================================================================
# INVENTORY
# ============================================================================


def list_inventory(user_id: int) -> list[Line]:
    """Return one account's lines joined with catalog details, ordered by item name."""
    try:
        with connection_scope() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT ui.item_key, ui.quantity, i.name, i.description, i.image_url
                FROM user_inventory ui
                JOIN items i ON ui.item_key = i.item_key
                WHERE ui.user_id = ?
                ORDER BY i.name, ui.item_key
                """,
                (user_id,),
            )
            rows = cursor.fetchall()
        return [Line.from_row(row) for row in rows]
    except Exception as exc:
        raise_read_error("user_inventory.list_inventory", exc, details=f"user_id={user_id}")


def get_inventory_quantity(user_id: int, item_key: str) -> int:
    """Return the quantity held, 0 when the line is absent."""
    try:
        with connection_scope() as conn:
            return _current_quantity(conn.cursor(), INVENTORY, (user_id, item_key))
    except Exception as exc:
        raise_read_error(
            "user_inventory.get_inventory_quantity",
            exc,
            details=f"user_id={user_id} item_key={item_key!r}",
        )


def add_to_inventory(user_id: int, item_key: str, quantity: int) -> Increment | None:
    return upsert_increment(INVENTORY, (user_id, item_key), quantity)


def remove_from_inventory(user_id: int, item_key: str, quantity: int) -> Decrement:
    return conditional_decrement(INVENTORY, (user_id, item_key), quantity)


# ============================================================================
# PARTY STORAGE
# ============================================================================


def list_storage() -> list[Line]:
    """Return all party storage lines joined with catalog details, ordered by item name."""
    try:
        with connection_scope() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT ps.item_key, ps.quantity, i.name, i.description, i.image_url
                FROM party_storage ps
                JOIN items i ON ps.item_key = i.item_key
                ORDER BY i.name, ps.item_key
                """
            )
            rows = cursor.fetchall()
        return [Line.from_row(row) for row in rows]
    except Exception as exc:
        raise_read_error("party_storage.list_storage", exc)


def get_storage_quantity(item_key: str) -> int:
    """Return the quantity stored, 0 when the line is absent."""
    try:
        with connection_scope() as conn:
            return _current_quantity(conn.cursor(), STORAGE, (item_key,))
    except Exception as exc:
        raise_read_error(
            "party_storage.get_storage_quantity", exc, details=f"item_key={item_key!r}"
        )


def add_to_storage(item_key: str, quantity: int) -> Increment | None:
    return upsert_increment(STORAGE, (item_key,), quantity)


def remove_from_storage(item_key: str, quantity: int) -> Decrement:
    return conditional_decrement(STORAGE, (item_key,), quantity)
