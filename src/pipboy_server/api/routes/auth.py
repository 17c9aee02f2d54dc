"""Login endpoint."""

from fastapi import APIRouter

from pipboy_server.api.models import LoginRequest, LoginResponse, UserInfo
from pipboy_server.core.context import ServiceContext


def router(context: ServiceContext) -> APIRouter:
    """Build the auth router."""
    api = APIRouter(prefix="/api/auth", tags=["auth"])

    @api.post("/login", response_model=LoginResponse)
    def login(request: LoginRequest):
        """
        Log in, creating the account if the username has never been seen.

        New accounts are always players. A known username with the wrong
        password gets 401.
        """
        identity, token, expires_in = context.auth.login(
            request.username or "", request.password or ""
        )
        return LoginResponse(
            token=token,
            expires_in=expires_in,
            user=UserInfo(
                id=identity.account_id,
                username=identity.username,
                is_admin=identity.is_admin,
            ),
        )

    return api
