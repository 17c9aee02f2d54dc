"""Service error taxonomy.

Every failure the core can report to a caller is a ``ServiceError`` subclass
carrying an HTTP status and a stable machine-readable code. The API layer
maps these to JSON responses in one place (``api/errors.py``), so services
raise them without knowing about HTTP.

    BadRequest            400  missing/invalid fields, non-positive quantity
    Unauthenticated       401  missing or invalid credential
    Forbidden             403  authenticated but lacking a permission
    NotFound              404  unknown item/quest/marker key
    Conflict              409  duplicate derived key on create
    InsufficientQuantity  409  remove exceeds what the line holds
    StorageFailure        500  persistence error, opaque to the caller
"""

from __future__ import annotations


class ServiceError(Exception):
    """Base class for failures returned to callers."""

    status_code: int = 500
    code: str = "SERVICE_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class BadRequest(ServiceError):
    status_code = 400
    code = "BAD_REQUEST"


class Unauthenticated(ServiceError):
    status_code = 401
    code = "UNAUTHENTICATED"


class Forbidden(ServiceError):
    status_code = 403
    code = "FORBIDDEN"


class NotFound(ServiceError):
    status_code = 404
    code = "NOT_FOUND"


class Conflict(ServiceError):
    status_code = 409
    code = "CONFLICT"


class InsufficientQuantity(ServiceError):
    """Raised when a remove asks for more than the line currently holds."""

    status_code = 409
    code = "INSUFFICIENT_QUANTITY"

    def __init__(self, item_key: str, requested: int, available: int) -> None:
        super().__init__(
            f"Not enough '{item_key}' to remove {requested} (available: {available})"
        )
        self.item_key = item_key
        self.requested = requested
        self.available = available


class StorageFailure(ServiceError):
    """Underlying persistence failure.

    The message may contain engine detail and is only ever logged; callers
    receive a generic failure indicator.
    """

    status_code = 500
    code = "STORAGE_FAILURE"
