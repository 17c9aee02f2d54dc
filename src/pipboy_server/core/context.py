"""Service context: the one place the core objects are wired together."""

from __future__ import annotations

from dataclasses import dataclass

from pipboy_server.auth.provider import AuthProvider
from pipboy_server.core.bus import NotificationBus
from pipboy_server.core.ledger import Ledger
from pipboy_server.core.registry import Registry


@dataclass
class ServiceContext:
    """
    Core services for one running application.

    Created once at start-up and attached to ``app.state.context``. Tests
    build their own so nothing leaks between them.
    """

    bus: NotificationBus
    auth: AuthProvider
    ledger: Ledger
    registry: Registry


def build_context(
    *, bus: NotificationBus | None = None, auth: AuthProvider | None = None
) -> ServiceContext:
    bus = bus or NotificationBus()
    return ServiceContext(
        bus=bus,
        auth=auth or AuthProvider(),
        ledger=Ledger(bus),
        registry=Registry(bus),
    )
