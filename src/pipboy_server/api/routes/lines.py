"""Inventory and party-storage endpoints.

Inventory routes always act on the caller's own account. Party storage is
shared by everyone and every change is broadcast to viewers.

Removes take the quantity as a query parameter
(``DELETE /api/inventory/stimpak?quantity=2``); omitted means 1. Asking for
more than the line holds is a 409 and changes nothing.
"""

from fastapi import APIRouter, Query

from pipboy_server.api.dependencies import IdentityDep
from pipboy_server.api.models import LineResponse, QuantityRequest
from pipboy_server.core.context import ServiceContext


def router(context: ServiceContext) -> APIRouter:
    """Build the inventory and party storage router."""
    api = APIRouter(prefix="/api")
    ledger = context.ledger

    # ========================================================================
    # INVENTORY
    # ========================================================================

    @api.get("/inventory", tags=["inventory"])
    def get_inventory(identity: IdentityDep):
        return ledger.list_inventory(identity)

    @api.post("/inventory", response_model=LineResponse, tags=["inventory"])
    def add_to_inventory(request: QuantityRequest, identity: IdentityDep):
        line = ledger.add_to_inventory(identity, request.item_key, request.quantity)
        return LineResponse(
            message="Item added to inventory", item_key=line.item_key, quantity=line.quantity
        )

    @api.delete("/inventory/{item_key}", response_model=LineResponse, tags=["inventory"])
    def remove_from_inventory(
        item_key: str, identity: IdentityDep, quantity: int | None = Query(default=None)
    ):
        line = ledger.remove_from_inventory(identity, item_key, quantity)
        return LineResponse(
            message="Item removed from inventory", item_key=line.item_key, quantity=line.quantity
        )

    # ========================================================================
    # PARTY STORAGE
    # ========================================================================

    @api.get("/party-storage", tags=["party-storage"])
    def get_party_storage(identity: IdentityDep):
        return ledger.list_storage(identity)

    @api.post("/party-storage", response_model=LineResponse, tags=["party-storage"])
    def add_to_party_storage(request: QuantityRequest, identity: IdentityDep):
        line = ledger.add_to_storage(request.item_key, request.quantity, identity=identity)
        return LineResponse(
            message="Item added to party storage", item_key=line.item_key, quantity=line.quantity
        )

    @api.delete(
        "/party-storage/{item_key}", response_model=LineResponse, tags=["party-storage"]
    )
    def remove_from_party_storage(
        item_key: str, identity: IdentityDep, quantity: int | None = Query(default=None)
    ):
        line = ledger.remove_from_storage(item_key, quantity, identity=identity)
        return LineResponse(
            message="Item removed from party storage",
            item_key=line.item_key,
            quantity=line.quantity,
        )

    return api
