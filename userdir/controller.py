"""Presentation state for the user list screen."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Coroutine, Optional, Set

from .models import LOADING, AddUser, ListState, ShowList
from .observable import StateCell
from .repository import RepositoryError, UserRepository

logger = logging.getLogger("userdir.controller")


class UserListController:
    """Load the user list and run add/remove mutations against a repository.

    The controller publishes two cells for a display layer to render:
    ``state`` holds either :data:`~userdir.models.LOADING` or a
    :class:`~userdir.models.ShowList`, and ``error`` holds the last
    repository failure until it is dismissed.

    Every command runs as its own task on the current event loop. Commands are
    neither serialized nor de-duplicated, so when several are in flight the
    one that resolves last determines what is shown.
    """

    def __init__(self, repository: UserRepository) -> None:
        self._repository = repository
        self._state: StateCell[ListState] = StateCell(LOADING)
        self._error: StateCell[Optional[RepositoryError]] = StateCell(None)
        self._tasks: Set[asyncio.Task] = set()
        self._closed = False
        self._launch(self._load_users(), name="initial-load")

    @property
    def state(self) -> StateCell[ListState]:
        return self._state

    @property
    def error(self) -> StateCell[Optional[RepositoryError]]:
        return self._error

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def refresh(self) -> None:
        self._ensure_open()
        logger.debug("Refreshing user list")
        self._state.set(LOADING)
        self._launch(self._load_users(), name="refresh")

    def add_user(self, payload: AddUser) -> None:
        self._ensure_open()
        logger.debug("Adding user %s <%s>", payload.name, payload.email)
        self._launch(self._add_user(payload), name="add-user")

    def remove_user(self, user_id: int) -> None:
        self._ensure_open()
        logger.debug("Removing user #%s", user_id)
        self._launch(self._remove_user(user_id), name="remove-user")

    def dismiss_error(self) -> None:
        self._error.set(None)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def close(self) -> None:
        """Cancel in-flight work; late results are discarded."""

        if self._closed:
            return
        self._closed = True
        for task in list(self._tasks):
            task.cancel()

    async def join(self) -> None:
        """Wait until every command issued so far has finished."""

        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    async def _add_user(self, payload: AddUser) -> None:
        try:
            await self._repository.add_user(payload)
        except RepositoryError as exc:
            logger.warning("Adding user %s failed: %s", payload.email, exc)
            self._publish_error(exc)
            return
        await self._load_users()

    async def _remove_user(self, user_id: int) -> None:
        try:
            await self._repository.remove_user(user_id)
        except RepositoryError as exc:
            logger.warning("Removing user #%s failed: %s", user_id, exc)
            self._publish_error(exc)
            return
        await self._load_users()

    async def _load_users(self) -> None:
        try:
            users = await self._repository.fetch_users()
        except RepositoryError as exc:
            logger.warning("Fetching users failed: %s", exc)
            self._publish_state(ShowList(()))
            self._publish_error(exc)
            return
        self._publish_state(ShowList(tuple(users)))

    def _publish_state(self, value: ListState) -> None:
        if not self._closed:
            self._state.set(value)

    def _publish_error(self, exc: RepositoryError) -> None:
        if not self._closed:
            self._error.set(exc)

    def _launch(self, coro: Coroutine[Any, Any, None], *, name: str) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coro.close()
            raise
        task = loop.create_task(coro, name=f"user-list:{name}")
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("User list task %s failed", task.get_name(), exc_info=exc)

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("User list controller has been closed")


__all__ = ["UserListController"]
