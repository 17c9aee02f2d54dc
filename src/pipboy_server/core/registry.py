"""
Catalog, quest and map registry.

Admin-only CRUD over the things that exist in the world. Item and quest keys
are derived from the submitted display name and never change afterwards;
two names that normalize to the same key are the same entry, so the second
create is a ``Conflict``.

Deleting a catalog item removes every inventory and party-storage line that
references it in the same transaction (see ``catalog_repo.delete_item``).

Each successful mutation publishes exactly one event on the bus.
"""

from __future__ import annotations

import logging

from pipboy_server.auth.identity import Identity
from pipboy_server.core.bus import NotificationBus
from pipboy_server.core.events import Events
from pipboy_server.core.keys import derive_key, require_text
from pipboy_server.core.permissions import Permission, require_permission
from pipboy_server.db import catalog_repo, markers_repo, quests_repo
from pipboy_server.db.schema import DEFAULT_ITEM_IMAGE, DEFAULT_QUEST_IMAGE
from pipboy_server.db.types import CatalogItem, MapMarker, Quest
from pipboy_server.errors import BadRequest, Conflict, NotFound

logger = logging.getLogger(__name__)


def _image_or_default(image_url: str | None, default: str) -> str:
    if image_url is None or not image_url.strip():
        return default
    return image_url.strip()


class Registry:
    """Catalog items, quests and map markers."""

    source = "registry"

    def __init__(self, bus: NotificationBus) -> None:
        self.bus = bus

    # =========================================================================
    # CATALOG
    # =========================================================================

    def list_items(self) -> list[CatalogItem]:
        return catalog_repo.list_items()

    def get_item(self, item_key: str) -> CatalogItem | None:
        return catalog_repo.get_item(item_key)

    def create_item(
        self,
        identity: Identity,
        name: str | None,
        description: str | None,
        image_url: str | None = None,
    ) -> CatalogItem:
        """
        Add an item to the catalog.

        Raises:
            Forbidden: Caller is not an admin.
            BadRequest: Name or description missing.
            Conflict: An item with the same derived key exists.
        """
        require_permission(identity, Permission.MANAGE_CATALOG)
        name = require_text(name, "Name")
        description = require_text(description, "Description")
        item_key = derive_key(name)

        item = catalog_repo.insert_item(
            item_key, name, description, _image_or_default(image_url, DEFAULT_ITEM_IMAGE)
        )
        if item is None:
            raise Conflict("Item already exists")

        logger.info("Item %r created by %s", item_key, identity.username)
        self.bus.publish(Events.ITEM_ADDED, {"item": item.to_dict()}, source=self.source)
        return item

    def delete_item(self, identity: Identity, item_key: str) -> catalog_repo.ItemDeletion:
        """
        Delete an item and every line that references it.

        Raises:
            Forbidden: Caller is not an admin.
            NotFound: No such item. Nothing is deleted.
        """
        require_permission(identity, Permission.MANAGE_CATALOG)
        deletion = catalog_repo.delete_item(item_key)
        if deletion is None:
            raise NotFound("Item not found")

        logger.info(
            "Item %r deleted by %s (%d inventory lines, %d storage lines)",
            item_key,
            identity.username,
            deletion.inventory_lines,
            deletion.storage_lines,
        )
        self.bus.publish(Events.ITEM_DELETED, {"itemKey": item_key}, source=self.source)
        return deletion

    # =========================================================================
    # QUESTS
    # =========================================================================

    def list_active_quests(self) -> list[Quest]:
        return quests_repo.list_active_quests()

    def create_quest(
        self,
        identity: Identity,
        name: str | None,
        description: str | None,
        image_url: str | None = None,
    ) -> Quest:
        """
        Add an active quest.

        Raises:
            Forbidden: Caller is not an admin.
            BadRequest: Name or description missing.
            Conflict: A quest with the same derived key exists.
        """
        require_permission(identity, Permission.MANAGE_QUESTS)
        name = require_text(name, "Name")
        description = require_text(description, "Description")
        quest_key = derive_key(name)

        quest = quests_repo.insert_quest(
            quest_key, name, description, _image_or_default(image_url, DEFAULT_QUEST_IMAGE)
        )
        if quest is None:
            raise Conflict("Quest already exists")

        logger.info("Quest %r created by %s", quest_key, identity.username)
        self.bus.publish(Events.QUEST_ADDED, {"quest": quest.to_dict()}, source=self.source)
        return quest

    def delete_quest(self, identity: Identity, quest_key: str) -> None:
        require_permission(identity, Permission.MANAGE_QUESTS)
        if not quests_repo.delete_quest(quest_key):
            raise NotFound("Quest not found")

        logger.info("Quest %r deleted by %s", quest_key, identity.username)
        self.bus.publish(Events.QUEST_DELETED, {"questKey": quest_key}, source=self.source)

    # =========================================================================
    # MAP
    # =========================================================================

    def list_markers(self) -> list[MapMarker]:
        return markers_repo.list_markers()

    def add_marker(self, identity: Identity, name: str | None, x: float, y: float) -> MapMarker:
        require_permission(identity, Permission.MANAGE_MAP)
        name = require_text(name, "Name")
        if isinstance(x, bool) or isinstance(y, bool) or not all(
            isinstance(v, (int, float)) for v in (x, y)
        ):
            raise BadRequest("Coordinates must be numbers")

        marker = markers_repo.insert_marker(name, float(x), float(y))
        logger.info("Marker %d (%r) added by %s", marker.id, name, identity.username)
        self.bus.publish(
            Events.MAP_UPDATED,
            {"action": "added", "marker": marker.to_dict()},
            source=self.source,
        )
        return marker

    def delete_marker(self, identity: Identity, marker_id: int) -> None:
        require_permission(identity, Permission.MANAGE_MAP)
        if not markers_repo.delete_marker(marker_id):
            raise NotFound("Marker not found")

        logger.info("Marker %d deleted by %s", marker_id, identity.username)
        self.bus.publish(
            Events.MAP_UPDATED,
            {"action": "deleted", "markerId": marker_id},
            source=self.source,
        )
