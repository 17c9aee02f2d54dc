"""Record dataclasses returned by the repositories."""

from __future__ import annotations

import sqlite3
from dataclasses import asdict, dataclass
from typing import Any


@dataclass(slots=True)
class Account:
    """
    A user account.

    Attributes:
        id: Row id, used as the token subject.
        username: Unique display name.
        password_hash: bcrypt hash, never leaves the server.
        is_admin: Game-master flag.
        created_at: SQLite ``CURRENT_TIMESTAMP`` string.
    """

    id: int
    username: str
    password_hash: str
    is_admin: bool
    created_at: str | None = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> Account:
        return cls(
            id=int(row["id"]),
            username=row["username"],
            password_hash=row["password_hash"],
            is_admin=bool(row["is_admin"]),
            created_at=row["created_at"],
        )


@dataclass(slots=True)
class CatalogItem:
    id: int
    item_key: str
    name: str
    description: str
    image_url: str
    created_at: str | None = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> CatalogItem:
        return cls(
            id=int(row["id"]),
            item_key=row["item_key"],
            name=row["name"],
            description=row["description"],
            image_url=row["image_url"],
            created_at=row["created_at"],
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class Quest:
    id: int
    quest_key: str
    name: str
    description: str
    image_url: str
    is_active: bool
    created_at: str | None = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> Quest:
        return cls(
            id=int(row["id"]),
            quest_key=row["quest_key"],
            name=row["name"],
            description=row["description"],
            image_url=row["image_url"],
            is_active=bool(row["is_active"]),
            created_at=row["created_at"],
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class Line:
    """
    One inventory or party-storage line, joined with its catalog entry.

    ``quantity`` is always > 0 for persisted lines. Mutations that used up the
    whole line return a ``Line`` with ``quantity == 0`` to report the removal;
    such a line no longer exists in the database.
    """

    item_key: str
    quantity: int
    name: str | None = None
    description: str | None = None
    image_url: str | None = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> Line:
        return cls(
            item_key=row["item_key"],
            quantity=int(row["quantity"]),
            name=row["name"],
            description=row["description"],
            image_url=row["image_url"],
        )

    @property
    def removed(self) -> bool:
        return self.quantity <= 0


@dataclass(slots=True)
class MapMarker:
    id: int
    name: str
    x: float
    y: float
    created_at: str | None = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> MapMarker:
        return cls(
            id=int(row["id"]),
            name=row["name"],
            x=float(row["x"]),
            y=float(row["y"]),
            created_at=row["created_at"],
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
