"""Authentication: password hashing, bearer tokens and the identity provider."""

from pipboy_server.auth.identity import Identity
from pipboy_server.auth.provider import AuthProvider

__all__ = ["AuthProvider", "Identity"]
