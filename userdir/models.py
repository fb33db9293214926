"""Domain models shared by the user directory service and its clients."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union


@dataclass(frozen=True)
class User:
    """Represents a user account stored in the directory."""

    id: int
    name: str
    email: str


@dataclass(frozen=True)
class AddUser:
    """Payload for creating a user; the directory assigns the identifier."""

    name: str
    email: str


@dataclass(frozen=True)
class Loading:
    """The user list is being fetched and has no content to show yet."""


@dataclass(frozen=True)
class ShowList:
    """The user list to render, in the order returned by the directory."""

    users: Tuple[User, ...] = ()


LOADING = Loading()

ListState = Union[Loading, ShowList]


__all__ = ["AddUser", "ListState", "Loading", "LOADING", "ShowList", "User"]
