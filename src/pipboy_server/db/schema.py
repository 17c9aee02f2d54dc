"""Schema creation and default content seeding for the SQLite backend.

The schema layer is kept apart from query code so table changes are reviewable
without wading through repository logic.

Line invariants are enforced by the schema as well as by the ledger:
a quantity CHECK bounded by ``MAX_LINE_QUANTITY`` on both line tables, one row
per (user, item) and per item, and ``ON DELETE CASCADE`` from ``items`` so no
line can outlive its catalog entry.
"""

from __future__ import annotations

import logging
import os

from pipboy_server.db.connection import connection_scope

logger = logging.getLogger(__name__)

# Upper bound for a single line. Keeps every sum well inside SQLite's 64-bit
# INTEGER range, so an increment can never spill over into a REAL.
MAX_LINE_QUANTITY = 1_000_000

DEFAULT_ITEM_IMAGE = "/api/placeholder/200/150"
DEFAULT_QUEST_IMAGE = "/api/placeholder/400/200"

DEFAULT_ITEMS: tuple[dict[str, str], ...] = (
    {
        "key": "stimpak",
        "name": "Stimpak",
        "description": "A medical item used to heal wounds and restore health points.",
    },
    {
        "key": "radaway",
        "name": "RadAway",
        "description": "Reduces radiation levels in the body.",
    },
    {
        "key": "nuka-cola",
        "name": "Nuka-Cola",
        "description": (
            "The famous pre-war soft drink. Restores some health and provides a small boost."
        ),
    },
    {
        "key": "10mm-pistol",
        "name": "10mm Pistol",
        "description": "A reliable sidearm commonly found throughout the wasteland.",
    },
    {
        "key": "leather-armor",
        "name": "Leather Armor",
        "description": "Basic protection made from tanned hide. Better than nothing.",
    },
)

DEFAULT_QUEST = {
    "key": "find-the-lost-vault",
    "name": "Find the Lost Vault",
    "description": (
        "Rumors speak of a hidden vault containing pre-war technology. Search the "
        "wasteland for clues to its location. The vault is said to be marked by a "
        "distinctive blue door with the number 111."
    ),
}

TABLE_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        username TEXT UNIQUE NOT NULL,
        password_hash TEXT NOT NULL,
        is_admin INTEGER NOT NULL DEFAULT 0 CHECK (is_admin IN (0, 1)),
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    f"""
    CREATE TABLE IF NOT EXISTS items (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        item_key TEXT UNIQUE NOT NULL,
        name TEXT NOT NULL,
        description TEXT NOT NULL,
        image_url TEXT NOT NULL DEFAULT '{DEFAULT_ITEM_IMAGE}',
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    f"""
    CREATE TABLE IF NOT EXISTS user_inventory (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL,
        item_key TEXT NOT NULL,
        quantity INTEGER NOT NULL CHECK (quantity > 0 AND quantity <= {MAX_LINE_QUANTITY}),
        FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE,
        FOREIGN KEY (item_key) REFERENCES items(item_key) ON DELETE CASCADE,
        UNIQUE (user_id, item_key)
    )
    """,
    f"""
    CREATE TABLE IF NOT EXISTS party_storage (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        item_key TEXT UNIQUE NOT NULL,
        quantity INTEGER NOT NULL CHECK (quantity > 0 AND quantity <= {MAX_LINE_QUANTITY}),
        FOREIGN KEY (item_key) REFERENCES items(item_key) ON DELETE CASCADE
    )
    """,
    f"""
    CREATE TABLE IF NOT EXISTS quests (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        quest_key TEXT UNIQUE NOT NULL,
        name TEXT NOT NULL,
        description TEXT NOT NULL,
        image_url TEXT NOT NULL DEFAULT '{DEFAULT_QUEST_IMAGE}',
        is_active INTEGER NOT NULL DEFAULT 1 CHECK (is_active IN (0, 1)),
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS map_markers (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        x REAL NOT NULL,
        y REAL NOT NULL,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
)

# The cascade-delete path filters lines by item_key; user_inventory's UNIQUE
# index leads with user_id and cannot serve it.
INDEX_STATEMENTS = (
    "CREATE INDEX IF NOT EXISTS idx_user_inventory_item_key ON user_inventory(item_key)",
    "CREATE INDEX IF NOT EXISTS idx_quests_active_created ON quests(is_active, created_at)",
)


def seed_defaults() -> None:
    """Insert the starter catalog and quest, leaving existing rows untouched."""
    with connection_scope(write=True) as conn:
        cursor = conn.cursor()
        for item in DEFAULT_ITEMS:
            cursor.execute(
                """
                INSERT OR IGNORE INTO items (item_key, name, description, image_url)
                VALUES (?, ?, ?, ?)
                """,
                (item["key"], item["name"], item["description"], DEFAULT_ITEM_IMAGE),
            )
        cursor.execute(
            """
            INSERT OR IGNORE INTO quests (quest_key, name, description, image_url)
            VALUES (?, ?, ?, ?)
            """,
            (
                DEFAULT_QUEST["key"],
                DEFAULT_QUEST["name"],
                DEFAULT_QUEST["description"],
                DEFAULT_QUEST_IMAGE,
            ),
        )


def _bootstrap_admin_from_env() -> None:
    """Create the game-master account from ``PIPBOY_ADMIN_USER``/``PIPBOY_ADMIN_PASSWORD``.

    Only runs against an empty ``users`` table.
    """
    from pipboy_server.auth.passwords import hash_password
    from pipboy_server.db import accounts_repo

    admin_user = os.environ.get("PIPBOY_ADMIN_USER")
    admin_password = os.environ.get("PIPBOY_ADMIN_PASSWORD")
    if not (admin_user and admin_password):
        return

    if accounts_repo.count_accounts() > 0:
        return
    account = accounts_repo.create_account(
        admin_user, hash_password(admin_password), is_admin=True
    )
    if account is None:
        return
    logger.info("Admin account %r created from environment", admin_user)


def init_database(*, skip_admin: bool = False, seed: bool | None = None) -> None:
    """Initialize the SQLite database schema.

    Behavior:
    - Creates required tables and indexes if missing.
    - Seeds the default catalog and quest when ``seed`` (or the
      ``database.seed_defaults`` setting) is true.
    - Optionally creates a bootstrap admin from environment variables.

    Args:
        skip_admin: When True, skip bootstrap admin creation.
        seed: Override the configured ``seed_defaults`` flag.
    """
    from pipboy_server.config import config

    with connection_scope(write=True) as conn:
        cursor = conn.cursor()
        for statement in TABLE_STATEMENTS:
            cursor.execute(statement)
        for statement in INDEX_STATEMENTS:
            cursor.execute(statement)

    if seed is None:
        seed = config.database.seed_defaults
    if seed:
        seed_defaults()

    if not skip_admin:
        _bootstrap_admin_from_env()

    logger.info("Database ready at %s", config.database.absolute_path)
