"""Viewer WebSocket endpoint."""

from fastapi import APIRouter, WebSocket

from pipboy_server.api.hub import ViewerHub


def router(hub: ViewerHub) -> APIRouter:
    """Build the WebSocket router around the viewer hub."""
    api = APIRouter()

    @api.websocket("/ws")
    async def viewer_ws(websocket: WebSocket) -> None:
        """Stream every broadcast event to the client as JSON."""
        await hub.handle_connection(websocket)

    return api
