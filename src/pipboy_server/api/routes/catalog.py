"""Catalog item and quest endpoints.

Reads are open to any authenticated account; creates and deletes need an
admin token.
"""

from typing import Any

from fastapi import APIRouter

from pipboy_server.api.dependencies import IdentityDep
from pipboy_server.api.models import ItemCreate, MessageResponse, QuestCreate
from pipboy_server.core.context import ServiceContext
from pipboy_server.core.permissions import Permission, require_permission


def router(context: ServiceContext) -> APIRouter:
    """Build the catalog router (items and quests)."""
    api = APIRouter(prefix="/api")
    registry = context.registry

    # ========================================================================
    # ITEMS
    # ========================================================================

    @api.get("/items", tags=["items"])
    def list_items(identity: IdentityDep) -> list[dict[str, Any]]:
        require_permission(identity, Permission.VIEW_GAME)
        return [item.to_dict() for item in registry.list_items()]

    @api.post("/items", tags=["items"])
    def create_item(request: ItemCreate, identity: IdentityDep) -> dict[str, Any]:
        item = registry.create_item(
            identity, request.name, request.description, request.image_url
        )
        return item.to_dict()

    @api.delete("/items/{item_key}", response_model=MessageResponse, tags=["items"])
    def delete_item(item_key: str, identity: IdentityDep):
        """Delete an item along with every inventory and storage line holding it."""
        registry.delete_item(identity, item_key)
        return MessageResponse(message="Item deleted successfully")

    # ========================================================================
    # QUESTS
    # ========================================================================

    @api.get("/quests", tags=["quests"])
    def list_quests(identity: IdentityDep) -> list[dict[str, Any]]:
        """Active quests, newest first."""
        require_permission(identity, Permission.VIEW_GAME)
        return [quest.to_dict() for quest in registry.list_active_quests()]

    @api.post("/quests", tags=["quests"])
    def create_quest(request: QuestCreate, identity: IdentityDep) -> dict[str, Any]:
        quest = registry.create_quest(
            identity, request.name, request.description, request.image_url
        )
        return quest.to_dict()

    @api.delete("/quests/{quest_key}", response_model=MessageResponse, tags=["quests"])
    def delete_quest(quest_key: str, identity: IdentityDep):
        registry.delete_quest(identity, quest_key)
        return MessageResponse(message="Quest deleted successfully")

    return api
