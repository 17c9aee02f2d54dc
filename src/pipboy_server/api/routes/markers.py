"""Map marker endpoints."""

from typing import Any

from fastapi import APIRouter

from pipboy_server.api.dependencies import IdentityDep
from pipboy_server.api.models import MarkerCreate, MessageResponse
from pipboy_server.core.context import ServiceContext
from pipboy_server.core.permissions import Permission, require_permission


def router(context: ServiceContext) -> APIRouter:
    """Build the map router."""
    api = APIRouter(prefix="/api/map", tags=["map"])
    registry = context.registry

    @api.get("")
    def list_markers(identity: IdentityDep) -> list[dict[str, Any]]:
        require_permission(identity, Permission.VIEW_GAME)
        return [marker.to_dict() for marker in registry.list_markers()]

    @api.post("")
    def add_marker(request: MarkerCreate, identity: IdentityDep) -> dict[str, Any]:
        marker = registry.add_marker(identity, request.name, request.x, request.y)
        return marker.to_dict()

    @api.delete("/{marker_id}", response_model=MessageResponse)
    def delete_marker(marker_id: int, identity: IdentityDep):
        registry.delete_marker(identity, marker_id)
        return MessageResponse(message="Marker deleted successfully")

    return api
