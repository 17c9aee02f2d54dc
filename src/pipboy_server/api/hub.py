"""WebSocket hub that forwards bus events to connected viewers."""

from __future__ import annotations

import asyncio
import logging

from fastapi import WebSocket
from fastapi.websockets import WebSocketDisconnect

from pipboy_server.core.bus import BroadcastEvent, NotificationBus, Unsubscribe

logger = logging.getLogger(__name__)


class ViewerHub:
    """
    Tracks connected viewers and pushes every published event to all of them.

    Viewers are passive: anything they send is read and ignored. A viewer
    whose send fails is closed and dropped; the others still receive the
    event. There is no history, so a viewer only sees events published while
    it is connected.
    """

    def __init__(self) -> None:
        self._connections: set[WebSocket] = set()
        self._lock = asyncio.Lock()
        self._unsubscribe: Unsubscribe | None = None

    def attach(self, bus: NotificationBus) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = bus.subscribe(self.broadcast)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    async def connect(self, websocket: WebSocket) -> None:
        # Only accepted sockets are registered; broadcast must never send on
        # a handshake that is still in flight.
        await websocket.accept()
        async with self._lock:
            self._connections.add(websocket)
        logger.info("Viewer connected (%d total)", len(self._connections))

    async def disconnect(self, websocket: WebSocket) -> None:
        async with self._lock:
            self._connections.discard(websocket)
        logger.info("Viewer disconnected (%d total)", len(self._connections))

    async def broadcast(self, event: BroadcastEvent) -> int:
        """Send ``event`` to every viewer. Returns the number of deliveries."""
        payload = event.to_message()
        async with self._lock:
            connections = list(self._connections)

        deliveries = 0
        for connection in connections:
            try:
                await connection.send_json(payload)
                deliveries += 1
            except (RuntimeError, WebSocketDisconnect) as exc:
                logger.warning("Failed to send %s to viewer: %s", event.type, exc)
                await self._safe_disconnect(connection)
        logger.debug("Broadcast %s to %d viewers", event.type, deliveries)
        return deliveries

    async def _safe_disconnect(self, websocket: WebSocket) -> None:
        try:
            await websocket.close()
        except RuntimeError:
            logger.debug("Ignored error while closing websocket", exc_info=True)
        finally:
            await self.disconnect(websocket)

    async def handle_connection(self, websocket: WebSocket) -> None:
        """Hold a viewer connection open until the client goes away."""
        await self.connect(websocket)
        try:
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            logger.debug("Viewer closed the connection")
        finally:
            await self.disconnect(websocket)
