"""Map marker repository operations for the SQLite backend."""

from __future__ import annotations

from pipboy_server.db.connection import connection_scope
from pipboy_server.db.errors import raise_read_error, raise_write_error
from pipboy_server.db.types import MapMarker


def list_markers() -> list[MapMarker]:
    """Return all markers in creation order."""
    try:
        with connection_scope() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT id, name, x, y, created_at FROM map_markers ORDER BY id")
            rows = cursor.fetchall()
        return [MapMarker.from_row(row) for row in rows]
    except Exception as exc:
        raise_read_error("markers.list_markers", exc)


def insert_marker(name: str, x: float, y: float) -> MapMarker:
    try:
        with connection_scope(write=True) as conn:
            cursor = conn.cursor()
            cursor.execute(
                "INSERT INTO map_markers (name, x, y) VALUES (?, ?, ?)", (name, x, y)
            )
            cursor.execute(
                "SELECT id, name, x, y, created_at FROM map_markers WHERE id = ?",
                (cursor.lastrowid,),
            )
            row = cursor.fetchone()
        return MapMarker.from_row(row)
    except Exception as exc:
        raise_write_error("markers.insert_marker", exc, details=f"name={name!r}")


def delete_marker(marker_id: int) -> bool:
    """Delete a marker. Returns ``False`` when it does not exist."""
    try:
        with connection_scope(write=True) as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM map_markers WHERE id = ?", (marker_id,))
            deleted = cursor.rowcount > 0
        return deleted
    except Exception as exc:
        raise_write_error("markers.delete_marker", exc, details=f"marker_id={marker_id}")
