"""
Pydantic models for API requests and responses.

Field names on the wire follow the browser client: request bodies use
``itemKey``/``imageUrl``, while catalog and quest records are returned with
their column names (``item_key``, ``image_url``) as the client already
expects. Models accept either form for aliased fields.

Pydantic only checks shape here. Semantic rules (blank names, non-positive
quantities) are enforced by the core services and surface as 400 responses.
"""

from pydantic import BaseModel, ConfigDict, Field

# ============================================================================
# REQUEST MODELS (Client → Server)
# ============================================================================


class LoginRequest(BaseModel):
    """
    Login request. An unseen username creates a new player account.

    Attributes:
        username: Account name (2-20 characters)
        password: Plain text password (checked against the bcrypt hash)
    """

    username: str | None = None
    password: str | None = None


class ItemCreate(BaseModel):
    """Admin request to add a catalog item. The key is derived from ``name``."""

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    description: str | None = None
    image_url: str | None = Field(default=None, alias="imageUrl")


class QuestCreate(BaseModel):
    """Admin request to add a quest. The key is derived from ``name``."""

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    description: str | None = None
    image_url: str | None = Field(default=None, alias="imageUrl")


class QuantityRequest(BaseModel):
    """
    Add units of an item to an inventory or party storage.

    Attributes:
        item_key: Catalog key (``itemKey`` on the wire)
        quantity: Units to add; omitted means 1
    """

    model_config = ConfigDict(populate_by_name=True)

    item_key: str | None = Field(default=None, alias="itemKey")
    quantity: int | None = None


class MarkerCreate(BaseModel):
    """Admin request to place a map marker."""

    name: str | None = None
    x: float
    y: float


# ============================================================================
# RESPONSE MODELS (Server → Client)
# ============================================================================


class UserInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    username: str
    is_admin: bool = Field(alias="isAdmin")


class LoginResponse(BaseModel):
    """
    Response from a successful login.

    Attributes:
        token: Bearer token for the ``Authorization`` header
        expires_in: Token lifetime in seconds
        user: The authenticated account
    """

    model_config = ConfigDict(populate_by_name=True)

    token: str
    expires_in: int = Field(alias="expiresIn")
    user: UserInfo


class LineResponse(BaseModel):
    """
    Result of an inventory or party-storage mutation.

    ``quantity`` is the new total; 0 means the line was removed.
    """

    model_config = ConfigDict(populate_by_name=True)

    message: str
    item_key: str = Field(alias="itemKey")
    quantity: int


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    status: str
    timestamp: str


class ErrorResponse(BaseModel):
    """Body of every service error response."""

    detail: str
    code: str
