"""FastAPI dependencies shared by the route modules."""

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from pipboy_server.auth.identity import Identity
from pipboy_server.core.context import ServiceContext

# auto_error=False so a missing header reaches AuthProvider.verify and comes
# back as our own 401 body rather than FastAPI's 403.
_bearer = HTTPBearer(auto_error=False)


def get_context(request: Request) -> ServiceContext:
    context = getattr(request.app.state, "context", None)
    if context is None:
        raise RuntimeError("Service context is not initialised")
    return context


def get_identity(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer)],
) -> Identity:
    """Resolve the caller from the ``Authorization: Bearer`` header."""
    token = credentials.credentials if credentials else None
    return get_context(request).auth.verify(token)


IdentityDep = Annotated[Identity, Depends(get_identity)]
