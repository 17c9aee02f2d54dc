"""Tests for role-based permissions."""

import pytest

from pipboy_server.auth.identity import Identity
from pipboy_server.core.permissions import (
    ROLE_PERMISSIONS,
    Permission,
    Role,
    has_permission,
    require_permission,
    role_for,
)
from pipboy_server.errors import Forbidden

PLAYER = Identity(account_id=2, username="nate")
ADMIN = Identity(account_id=1, username="overseer", is_admin=True)


@pytest.mark.unit
def test_role_for():
    assert role_for(PLAYER) is Role.PLAYER
    assert role_for(ADMIN) is Role.ADMIN
    assert PLAYER.role == "player"
    assert ADMIN.role == "admin"


@pytest.mark.unit
def test_admin_holds_every_permission():
    assert ROLE_PERMISSIONS[Role.ADMIN] == set(Permission)


@pytest.mark.unit
@pytest.mark.parametrize(
    "permission",
    [Permission.VIEW_GAME, Permission.MANAGE_INVENTORY, Permission.MANAGE_PARTY_STORAGE],
)
def test_player_permissions(permission):
    assert has_permission(PLAYER, permission)
    require_permission(PLAYER, permission)


@pytest.mark.unit
@pytest.mark.parametrize(
    "permission",
    [Permission.MANAGE_CATALOG, Permission.MANAGE_QUESTS, Permission.MANAGE_MAP],
)
def test_player_cannot_manage_world(permission):
    assert not has_permission(PLAYER, permission)
    with pytest.raises(Forbidden, match="Admin privileges required"):
        require_permission(PLAYER, permission)
    require_permission(ADMIN, permission)
