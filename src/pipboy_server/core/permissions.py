"""
Role-based permission system.

Two roles exist:

    Player → Admin (game master)

Every authenticated account is a player and may read the shared game state,
manage its own inventory and move items in and out of party storage. Only the
game master may change what exists in the world: catalog items, quests and
map markers.

Permission Design:
- Each role has an explicit set of permissions (no inheritance)
- Services call ``require_permission(identity, ...)`` before mutating
- There is no permission to act on another account's inventory; inventory
  operations always target the caller
"""

from enum import Enum

from pipboy_server.auth.identity import Identity
from pipboy_server.errors import Forbidden

# ============================================================================
# ROLE DEFINITIONS
# ============================================================================


class Role(Enum):
    """
    Account roles, stored as the ``users.is_admin`` flag.

    Roles:
        PLAYER: Regular party member
        ADMIN: Game master
    """

    PLAYER = "player"
    ADMIN = "admin"


# ============================================================================
# PERMISSION DEFINITIONS
# ============================================================================


class Permission(Enum):
    """Specific actions that can be granted to roles."""

    # ========================================================================
    # PLAYER PERMISSIONS
    # ========================================================================
    VIEW_GAME = "view_game"  # Read catalog, party storage, quests and map
    MANAGE_INVENTORY = "manage_inventory"  # Add/remove in own inventory
    MANAGE_PARTY_STORAGE = "manage_party_storage"  # Add/remove in shared storage

    # ========================================================================
    # ADMIN PERMISSIONS
    # ========================================================================
    MANAGE_CATALOG = "manage_catalog"  # Create/delete catalog items
    MANAGE_QUESTS = "manage_quests"  # Create/delete quests
    MANAGE_MAP = "manage_map"  # Add/delete map markers


# ============================================================================
# ROLE-PERMISSION MAPPING
# ============================================================================

_PLAYER_PERMISSIONS = {
    Permission.VIEW_GAME,
    Permission.MANAGE_INVENTORY,
    Permission.MANAGE_PARTY_STORAGE,
}

ROLE_PERMISSIONS: dict[Role, set[Permission]] = {
    Role.PLAYER: set(_PLAYER_PERMISSIONS),
    # The game master also plays: player permissions are listed explicitly.
    Role.ADMIN: {
        *_PLAYER_PERMISSIONS,
        Permission.MANAGE_CATALOG,
        Permission.MANAGE_QUESTS,
        Permission.MANAGE_MAP,
    },
}


# ============================================================================
# PERMISSION CHECKING FUNCTIONS
# ============================================================================


def role_for(identity: Identity) -> Role:
    return Role.ADMIN if identity.is_admin else Role.PLAYER


def has_permission(identity: Identity, permission: Permission) -> bool:
    """
    Check if an identity's role grants a permission.

    Example:
        >>> has_permission(Identity(1, "gm", is_admin=True), Permission.MANAGE_QUESTS)
        True
        >>> has_permission(Identity(2, "nate"), Permission.MANAGE_CATALOG)
        False
    """
    return permission in ROLE_PERMISSIONS.get(role_for(identity), set())


def require_permission(identity: Identity, permission: Permission) -> None:
    """
    Raise ``Forbidden`` unless ``identity`` holds ``permission``.

    Raises:
        Forbidden: Authenticated caller lacking the permission.
    """
    if not has_permission(identity, permission):
        if permission in ROLE_PERMISSIONS[Role.ADMIN] - ROLE_PERMISSIONS[Role.PLAYER]:
            raise Forbidden("Admin privileges required")
        raise Forbidden(f"Insufficient permissions. Required: {permission.value}")
