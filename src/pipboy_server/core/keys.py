"""Catalog/quest key derivation and input validation helpers.

Keys identify items and quests for their whole lifetime, so derivation is a
pure function of the display name:

1. surrounding whitespace is stripped,
2. the name is lower-cased,
3. every run of whitespace becomes a single ``-``.

Punctuation is kept as-is: ``"Nuka-Cola"`` -> ``"nuka-cola"``,
``"10mm Pistol"`` -> ``"10mm-pistol"``, and ``"Stim Pak"`` and
``"stim   pak"`` both map to ``"stim-pak"``.
"""

from __future__ import annotations

import re

from pipboy_server.db.schema import MAX_LINE_QUANTITY
from pipboy_server.errors import BadRequest

KEY_SEPARATOR = "-"
DEFAULT_QUANTITY = 1

_WHITESPACE_RE = re.compile(r"\s+")


def derive_key(name: str) -> str:
    """Derive the stable key for a display name.

    Raises:
        ValueError: When the name is empty or whitespace only.
    """
    normalized = _WHITESPACE_RE.sub(KEY_SEPARATOR, name.strip().lower())
    if not normalized:
        raise ValueError("Cannot derive a key from an empty name")
    return normalized


def require_text(value: str | None, field_name: str) -> str:
    """Return ``value`` stripped, or raise ``BadRequest`` when blank."""
    if value is None or not value.strip():
        raise BadRequest(f"{field_name} required")
    return value.strip()


def validate_quantity(quantity: int | None) -> int:
    """Apply the default of 1 to a missing quantity and reject out-of-range ones.

    ``0`` is rejected rather than treated as missing. Anything above
    ``MAX_LINE_QUANTITY`` is rejected as well.
    """
    if quantity is None:
        return DEFAULT_QUANTITY
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise BadRequest("Quantity must be an integer")
    if quantity <= 0:
        raise BadRequest("Quantity must be greater than zero")
    if quantity > MAX_LINE_QUANTITY:
        raise BadRequest(f"Quantity must not exceed {MAX_LINE_QUANTITY}")
    return quantity
