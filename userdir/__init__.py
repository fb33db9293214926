"""Core package for the user directory console."""

from __future__ import annotations

from typing import Any

from .controller import UserListController
from .models import LOADING, AddUser, ListState, Loading, ShowList, User
from .observable import StateCell
from .repository import ApiError, RepositoryError, UserRepository


def create_app(*args: Any, **kwargs: Any):
    """Factory function that returns the user directory API application."""

    from .service import create_app as _create_app

    return _create_app(*args, **kwargs)


__all__ = [
    "AddUser",
    "ApiError",
    "ListState",
    "LOADING",
    "Loading",
    "RepositoryError",
    "ShowList",
    "StateCell",
    "User",
    "UserListController",
    "UserRepository",
    "create_app",
]
