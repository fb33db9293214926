"""Contract between the user list controller and the user directory."""

from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .models import AddUser, User


class RepositoryError(RuntimeError):
    """Raised when a user directory operation does not succeed."""


class ApiError(RepositoryError):
    """Raised when the remote directory rejects a request."""

    def __init__(self, status_code: int, message: Optional[str] = None) -> None:
        self.status_code = status_code
        self.message = message or f"User directory request failed with status {status_code}"
        super().__init__(self.message)


class UserRepository(Protocol):
    """Asynchronous access to the user directory.

    Implementations raise :class:`RepositoryError` for every failure the
    caller should surface to the user; anything else is treated as a bug.
    """

    async def fetch_users(self) -> Sequence[User]:
        ...

    async def add_user(self, payload: AddUser) -> None:
        ...

    async def remove_user(self, user_id: int) -> None:
        ...


__all__ = ["ApiError", "RepositoryError", "UserRepository"]
