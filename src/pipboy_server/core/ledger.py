"""
Inventory and party-storage ledger.

The ledger owns the quantity rules for both kinds of line:

- quantities are always positive; a line that would reach zero is deleted,
- lines may only reference items that exist in the catalog,
- a remove is a hard precondition ("enough to remove"), never a clamp.

Add and remove are independent operations. Moving an item from an inventory
into party storage is two calls (remove here, add there), not an atomic
transfer, and totals across inventory and storage are not conserved.

Every check that can fail for business reasons runs before the mutation. The
mutation itself is one atomic repository call per line, so concurrent removes
against the same line cannot both consume the same units.

Party storage is shared: each successful storage mutation publishes one
``STORAGE_UPDATED`` event. Inventory is private to its owner and publishes
nothing.
"""

from __future__ import annotations

import logging

from pipboy_server.auth.identity import Identity
from pipboy_server.core.bus import NotificationBus
from pipboy_server.core.events import Events
from pipboy_server.core.keys import validate_quantity
from pipboy_server.core.permissions import Permission, require_permission
from pipboy_server.db import catalog_repo, lines_repo
from pipboy_server.db.schema import MAX_LINE_QUANTITY
from pipboy_server.db.types import Line
from pipboy_server.errors import BadRequest, InsufficientQuantity, NotFound, Unauthenticated

logger = logging.getLogger(__name__)


class Ledger:
    """Quantity operations over inventories and party storage."""

    source = "ledger"

    def __init__(self, bus: NotificationBus) -> None:
        self.bus = bus

    # =========================================================================
    # HELPERS
    # =========================================================================

    @staticmethod
    def _require_item_key(item_key: str | None) -> str:
        if item_key is None or not item_key.strip():
            raise BadRequest("Item key required")
        return item_key.strip()

    @staticmethod
    def _require_catalog_item(item_key: str) -> None:
        if catalog_repo.get_item(item_key) is None:
            raise NotFound(f"Item '{item_key}' not found")

    @staticmethod
    def _require_increment_applied(
        outcome: lines_repo.Increment, item_key: str, quantity: int
    ) -> None:
        if not outcome.applied:
            raise BadRequest(
                f"Adding {quantity} x '{item_key}' would exceed the limit of "
                f"{MAX_LINE_QUANTITY} (have {outcome.quantity})"
            )

    # =========================================================================
    # INVENTORY (private to the caller, no broadcast)
    # =========================================================================

    def list_inventory(self, identity: Identity) -> list[Line]:
        require_permission(identity, Permission.VIEW_GAME)
        return lines_repo.list_inventory(identity.account_id)

    def add_to_inventory(
        self, identity: Identity, item_key: str, quantity: int | None = None
    ) -> Line:
        """
        Add ``quantity`` units of an item to the caller's inventory.

        Creates the line when absent, otherwise increments it. Repeated calls
        accumulate.

        Raises:
            BadRequest: Missing key, quantity out of range, or the line would
                exceed ``MAX_LINE_QUANTITY``. State is unchanged.
            NotFound: The item is not in the catalog.
            Unauthenticated: The caller's account no longer exists.
        """
        require_permission(identity, Permission.MANAGE_INVENTORY)
        item_key = self._require_item_key(item_key)
        quantity = validate_quantity(quantity)
        self._require_catalog_item(item_key)

        outcome = lines_repo.add_to_inventory(identity.account_id, item_key, quantity)
        if outcome is None:
            # Foreign key rejected the row. With the item still in the catalog
            # the missing side is the account: the token outlived it.
            self._require_catalog_item(item_key)
            raise Unauthenticated("Account no longer exists")
        self._require_increment_applied(outcome, item_key, quantity)

        logger.info(
            "Inventory +%d %s for account %s (now %d)",
            quantity,
            item_key,
            identity.account_id,
            outcome.quantity,
        )
        return Line(item_key=item_key, quantity=outcome.quantity)

    def remove_from_inventory(
        self, identity: Identity, item_key: str, quantity: int | None = None
    ) -> Line:
        """
        Remove ``quantity`` units from the caller's inventory.

        The returned line has ``quantity == 0`` when it was used up and
        deleted.

        Raises:
            BadRequest: Missing key or non-positive quantity.
            InsufficientQuantity: The line is absent or holds fewer units.
                State is unchanged.
        """
        require_permission(identity, Permission.MANAGE_INVENTORY)
        item_key = self._require_item_key(item_key)
        quantity = validate_quantity(quantity)

        outcome = lines_repo.remove_from_inventory(identity.account_id, item_key, quantity)
        if not outcome.applied:
            logger.debug(
                "Inventory remove rejected: %s x%d for account %s (have %d)",
                item_key,
                quantity,
                identity.account_id,
                outcome.quantity,
            )
            raise InsufficientQuantity(item_key, quantity, outcome.quantity)

        logger.info(
            "Inventory -%d %s for account %s (now %d)",
            quantity,
            item_key,
            identity.account_id,
            outcome.quantity,
        )
        return Line(item_key=item_key, quantity=outcome.quantity)

    # =========================================================================
    # PARTY STORAGE (shared, broadcast on change)
    # =========================================================================

    def list_storage(self, identity: Identity | None = None) -> list[Line]:
        if identity is not None:
            require_permission(identity, Permission.VIEW_GAME)
        return lines_repo.list_storage()

    def _storage_updated(self, item_key: str, quantity: int, identity: Identity | None) -> None:
        detail = {"itemKey": item_key, "quantity": quantity}
        if identity is not None:
            detail["by"] = identity.username
        self.bus.publish(Events.STORAGE_UPDATED, detail, source=self.source)

    def add_to_storage(
        self, item_key: str, quantity: int | None = None, *, identity: Identity | None = None
    ) -> Line:
        """
        Add ``quantity`` units of an item to party storage.

        ``identity`` is optional so internal callers can stock storage; when
        given it must hold ``MANAGE_PARTY_STORAGE``.

        Raises:
            BadRequest: Missing key, quantity out of range, or the line would
                exceed ``MAX_LINE_QUANTITY``. State is unchanged.
            NotFound: The item is not in the catalog.
        """
        if identity is not None:
            require_permission(identity, Permission.MANAGE_PARTY_STORAGE)
        item_key = self._require_item_key(item_key)
        quantity = validate_quantity(quantity)
        self._require_catalog_item(item_key)

        outcome = lines_repo.add_to_storage(item_key, quantity)
        if outcome is None:
            raise NotFound(f"Item '{item_key}' not found")
        self._require_increment_applied(outcome, item_key, quantity)

        logger.info("Party storage +%d %s (now %d)", quantity, item_key, outcome.quantity)
        self._storage_updated(item_key, outcome.quantity, identity)
        return Line(item_key=item_key, quantity=outcome.quantity)

    def remove_from_storage(
        self, item_key: str, quantity: int | None = None, *, identity: Identity | None = None
    ) -> Line:
        """
        Remove ``quantity`` units from party storage.

        Raises:
            BadRequest: Missing key or non-positive quantity.
            InsufficientQuantity: Storage holds fewer units (or none).
        """
        if identity is not None:
            require_permission(identity, Permission.MANAGE_PARTY_STORAGE)
        item_key = self._require_item_key(item_key)
        quantity = validate_quantity(quantity)

        outcome = lines_repo.remove_from_storage(item_key, quantity)
        if not outcome.applied:
            logger.debug(
                "Party storage remove rejected: %s x%d (have %d)",
                item_key,
                quantity,
                outcome.quantity,
            )
            raise InsufficientQuantity(item_key, quantity, outcome.quantity)

        logger.info("Party storage -%d %s (now %d)", quantity, item_key, outcome.quantity)
        self._storage_updated(item_key, outcome.quantity, identity)
        return Line(item_key=item_key, quantity=outcome.quantity)
