"""
Notification Bus

Fans out typed change events to every observer that is currently subscribed.
The ledger and registry publish here after a mutation has been committed;
the WebSocket viewer hub is the main subscriber.

=============================================================================
PRINCIPLES
=============================================================================

1. EVENTS ARE FACTS
   - An event is published only after the state change it describes has
     been committed. Nothing is published for a failed operation.

2. EVENTS ARE IMMUTABLE
   - ``BroadcastEvent`` is a frozen dataclass; handlers cannot alter it.

3. PUBLISH NEVER FAILS THE MUTATION
   - Sync handlers run inline; an exception in one is logged and the next
     handler still runs.
   - Async handlers are scheduled on the event loop and not awaited, so a
     slow viewer never delays the response to the caller. Their failures are
     logged when the task finishes.

4. NO PERSISTENCE, NO REPLAY
   - Observers that are not subscribed when an event is published never see
     it. The sequence number lets clients detect that they missed something.

=============================================================================
USAGE
=============================================================================

    bus = NotificationBus()

    unsubscribe = bus.subscribe(lambda event: print(event.to_message()))
    bus.publish(Events.STORAGE_UPDATED, {"itemKey": "stimpak", "quantity": 3})
    unsubscribe()

The bus is an ordinary object owned by the service context, not a module
global.
=============================================================================
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import threading
from collections.abc import Callable, Coroutine
from concurrent.futures import Future
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

logger = logging.getLogger(__name__)


# =============================================================================
# TYPE ALIASES
# =============================================================================

SyncHandler = Callable[["BroadcastEvent"], None]
AsyncHandler = Callable[["BroadcastEvent"], Coroutine[Any, Any, None]]
EventHandler = SyncHandler | AsyncHandler
Unsubscribe = Callable[[], None]

# Key under which catch-all subscribers are registered.
ALL_EVENTS = "*"


# =============================================================================
# EVENT
# =============================================================================


@dataclass(frozen=True)
class EventMetadata:
    """
    Metadata attached to every event.

    Attributes:
        timestamp: Unix epoch milliseconds (UTC) at publish time.
        source: Component that published the event ("ledger", "registry").
        sequence: Monotonically increasing per bus. The only reliable order.
    """

    timestamp: int
    source: str
    sequence: int

    @staticmethod
    def create(source: str, sequence: int) -> EventMetadata:
        now_ms = int(datetime.now(UTC).timestamp() * 1000)
        return EventMetadata(timestamp=now_ms, source=source, sequence=sequence)


@dataclass(frozen=True)
class BroadcastEvent:
    """
    A single published event.

    Attributes:
        type: One of ``Events`` (e.g. ``"ITEM_ADDED"``).
        detail: Event payload. Treat as read-only.
        _meta: Timestamp, source and sequence number.
    """

    type: str
    detail: dict = field(default_factory=dict)
    _meta: EventMetadata | None = field(default=None)

    def __str__(self) -> str:
        if self._meta:
            return (
                f"BroadcastEvent(type='{self.type}', "
                f"source='{self._meta.source}', "
                f"seq={self._meta.sequence})"
            )
        return f"BroadcastEvent(type='{self.type}')"

    @property
    def meta(self) -> EventMetadata | None:
        return self._meta

    def to_message(self) -> dict[str, Any]:
        """Wire form sent to viewers: ``{"type": ..., "seq": ..., **detail}``."""
        message: dict[str, Any] = {"type": self.type, **self.detail}
        if self._meta is not None:
            message["seq"] = self._meta.sequence
        return message


# =============================================================================
# BUS
# =============================================================================


class NotificationBus:
    """
    Fan-out broadcaster of ``BroadcastEvent`` objects.

    Thread Safety:
    - Request handlers may publish from worker threads. Sequence assignment
      and the handler registry are guarded by a lock; handlers are invoked
      outside it.
    - Async handlers published from a thread without a running loop are
      handed to the loop registered with ``bind_loop``.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = {}
        self._sequence: int = 0
        self._lock = threading.Lock()
        self._loop: asyncio.AbstractEventLoop | None = None
        # Strong references to scheduled handlers until they finish; the loop
        # itself only keeps weak ones.
        self._pending: set[asyncio.Task | Future] = set()

    # =========================================================================
    # PUBLISH
    # =========================================================================

    def publish(
        self, event_type: str, detail: dict[str, Any] | None = None, source: str = "core"
    ) -> BroadcastEvent:
        """
        Publish an event to every current subscriber.

        Returns once sync handlers have run and async handlers have been
        scheduled. Never raises because of a handler.

        Args:
            event_type: One of ``Events``.
            detail: Event payload. Defaults to an empty dict.
            source: Publishing component, for logs.

        Returns:
            The published event.
        """
        with self._lock:
            self._sequence += 1
            event = BroadcastEvent(
                type=event_type,
                detail=detail if detail is not None else {},
                _meta=EventMetadata.create(source, self._sequence),
            )
            handlers = [
                *self._handlers.get(event_type, ()),
                *self._handlers.get(ALL_EVENTS, ()),
            ]

        logger.debug("PUBLISH [%s]: %s from %s", event.meta.sequence, event.type, source)

        self._notify_handlers(event, handlers)
        return event

    def _notify_handlers(self, event: BroadcastEvent, handlers: list[EventHandler]) -> None:
        for handler in handlers:
            try:
                if inspect.iscoroutinefunction(handler):
                    self._schedule_async_handler(handler, event)
                else:
                    handler(event)
            except Exception as e:
                # The mutation is already committed; a failing observer must
                # not turn it into an error for the caller.
                logger.error(f"Handler error for '{event.type}': {e}", exc_info=True)

    def _schedule_async_handler(self, handler: AsyncHandler, event: BroadcastEvent) -> None:
        """
        Schedule an async handler without waiting for it.

        1. Called on the event loop thread: create a task.
        2. Called from a worker thread while a bound loop runs: submit it
           thread-safely to that loop.
        3. No loop at all (scripts, plain unit tests): run to completion.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is not None:
            self._track(loop.create_task(handler(event)), event)
        elif self._loop is not None and self._loop.is_running():
            self._track(asyncio.run_coroutine_threadsafe(handler(event), self._loop), event)
        else:
            asyncio.run(handler(event))

    def _track(self, pending: asyncio.Task | Future, event: BroadcastEvent) -> None:
        with self._lock:
            self._pending.add(pending)

        def _done(finished: asyncio.Task | Future) -> None:
            with self._lock:
                self._pending.discard(finished)
            if finished.cancelled():
                return
            exc = finished.exception()
            if exc is not None:
                logger.error(
                    f"Async handler error for '{event.type}': {exc}",
                    exc_info=(type(exc), exc, exc.__traceback__),
                )

        pending.add_done_callback(_done)

    def bind_loop(self, loop: asyncio.AbstractEventLoop | None) -> None:
        """Register the server's event loop for handlers published off-loop."""
        self._loop = loop

    # =========================================================================
    # SUBSCRIBE
    # =========================================================================

    def on(self, event_type: str, handler: EventHandler) -> Unsubscribe:
        """
        Subscribe to one event type (or ``ALL_EVENTS``).

        Returns:
            A function that removes this subscription.
        """
        with self._lock:
            self._handlers.setdefault(event_type, []).append(handler)

        def unsubscribe() -> None:
            with self._lock:
                try:
                    self._handlers.get(event_type, []).remove(handler)
                except ValueError:
                    # Handler already removed, ignore
                    pass

        return unsubscribe

    def subscribe(self, handler: EventHandler) -> Unsubscribe:
        """Subscribe to every event type."""
        return self.on(ALL_EVENTS, handler)

    # =========================================================================
    # INTROSPECTION
    # =========================================================================

    def get_sequence(self) -> int:
        """Return the last assigned sequence number (events published so far)."""
        return self._sequence

    def get_handler_count(self, event_type: str = ALL_EVENTS) -> int:
        return len(self._handlers.get(event_type, ()))

    def get_pending_count(self) -> int:
        """Return the number of async handlers scheduled but not yet finished."""
        with self._lock:
            return len(self._pending)
