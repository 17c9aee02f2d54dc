"""
Broadcast event types.

Every successful catalog, quest, party-storage or map mutation publishes
exactly one of these; inventory mutations publish none. Names are
``ENTITY_ACTION`` in upper snake case, and viewers receive them verbatim in
the ``type`` field of each WebSocket message.

    from pipboy_server.core.events import Events

    bus.publish(Events.ITEM_ADDED, {"item": item.to_dict()})
"""


class Events:
    """All broadcast event types."""

    ITEM_ADDED = "ITEM_ADDED"
    """Detail: {"item": {id, item_key, name, description, image_url, created_at}}"""

    ITEM_DELETED = "ITEM_DELETED"
    """Detail: {"itemKey": str}"""

    QUEST_ADDED = "QUEST_ADDED"
    """Detail: {"quest": {id, quest_key, name, description, image_url, is_active, created_at}}"""

    QUEST_DELETED = "QUEST_DELETED"
    """Detail: {"questKey": str}"""

    STORAGE_UPDATED = "STORAGE_UPDATED"
    """Detail: {"itemKey": str, "quantity": int}  # 0 when the line was removed"""

    MAP_UPDATED = "MAP_UPDATED"
    """Detail: {"action": "added" | "deleted", "marker"?: {...}, "markerId"?: int}"""


def get_all_event_types() -> list[str]:
    """Return every event type defined on ``Events``."""
    return [
        value
        for name, value in vars(Events).items()
        if not name.startswith("_") and isinstance(value, str)
    ]


def is_valid_event_type(event_type: str) -> bool:
    return event_type in get_all_event_types()
