"""
Tests for the WebSocket viewer hub, driven with in-memory sockets.

The sockets mimic Starlette's behavior of refusing to send before the
handshake has been accepted.
"""

import asyncio

import pytest

from pipboy_server.api.hub import ViewerHub
from pipboy_server.core.bus import NotificationBus
from pipboy_server.core.events import Events


class FakeViewer:
    """A socket whose handshake completes only when ``gate`` is set."""

    def __init__(self, gate: asyncio.Event | None = None, *, broken: bool = False) -> None:
        self.gate = gate
        self.broken = broken
        self.accepted = False
        self.closed = False
        self.sent: list[dict] = []

    async def accept(self) -> None:
        if self.gate is not None:
            await self.gate.wait()
        self.accepted = True

    async def send_json(self, payload: dict) -> None:
        if not self.accepted:
            raise RuntimeError('WebSocket is not connected. Need to call "accept" first.')
        if self.broken:
            raise RuntimeError("Cannot call send once a close message has been sent.")
        self.sent.append(payload)

    async def close(self) -> None:
        self.closed = True


@pytest.mark.unit
def test_broadcast_skips_viewer_still_in_handshake():
    bus = NotificationBus()
    event = bus.publish(Events.STORAGE_UPDATED, {"itemKey": "stimpak", "quantity": 1})

    async def scenario():
        hub = ViewerHub()
        viewer = FakeViewer(asyncio.Event())
        connecting = asyncio.create_task(hub.connect(viewer))
        await asyncio.sleep(0)

        during_handshake = await hub.broadcast(event)
        assert hub.connection_count == 0
        assert not viewer.closed

        viewer.gate.set()
        await connecting
        after_handshake = await hub.broadcast(event)
        return during_handshake, after_handshake, viewer

    during_handshake, after_handshake, viewer = asyncio.run(scenario())

    assert (during_handshake, after_handshake) == (0, 1)
    assert viewer.sent == [
        {"type": "STORAGE_UPDATED", "itemKey": "stimpak", "quantity": 1, "seq": 1}
    ]
    assert not viewer.closed


@pytest.mark.unit
def test_broken_viewer_is_dropped_and_others_still_receive():
    event = NotificationBus().publish(Events.MAP_UPDATED)

    async def scenario():
        hub = ViewerHub()
        healthy, broken = FakeViewer(), FakeViewer(broken=True)
        await hub.connect(healthy)
        await hub.connect(broken)

        deliveries = await hub.broadcast(event)
        return hub, deliveries, healthy, broken

    hub, deliveries, healthy, broken = asyncio.run(scenario())

    assert deliveries == 1
    assert healthy.sent == [{"type": "MAP_UPDATED", "seq": 1}]
    assert broken.closed
    assert hub.connection_count == 1
