"""Caller identity value object."""

from __future__ import annotations

from dataclasses import dataclass

from pipboy_server.db.types import Account


@dataclass(frozen=True, slots=True)
class Identity:
    """
    Who is making a request.

    Produced once per request by ``AuthProvider.verify`` and passed explicitly
    into every operation that needs authorization.

    Attributes:
        account_id: ``users.id`` of the caller.
        username: Display name at token issue time.
        is_admin: Game-master capability.
    """

    account_id: int
    username: str
    is_admin: bool = False

    @classmethod
    def from_account(cls, account: Account) -> Identity:
        return cls(account_id=account.id, username=account.username, is_admin=account.is_admin)

    @property
    def role(self) -> str:
        return "admin" if self.is_admin else "player"
