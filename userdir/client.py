"""HTTP-backed user repository for talking to the directory service."""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

import httpx

from .models import AddUser, User
from .repository import ApiError, RepositoryError

logger = logging.getLogger("userdir.client")


def _normalize_base_url(base_url: str) -> str:
    cleaned = (base_url or "").strip()
    if not cleaned:
        raise ValueError("User directory URL must not be empty")
    return cleaned.rstrip("/")


def _extract_error_message(payload: object, default: str) -> str:
    if isinstance(payload, dict):
        for key in ("message", "detail", "error"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    if isinstance(payload, str) and payload.strip():
        return payload.strip()
    return default


def _parse_user(item: object) -> User:
    if not isinstance(item, dict):
        raise RepositoryError("User directory returned an invalid user entry")
    try:
        return User(id=int(item["id"]), name=str(item["name"]), email=str(item["email"]))
    except (KeyError, TypeError, ValueError) as exc:
        raise RepositoryError("User directory response was missing required fields") from exc


class HttpUserRepository:
    """Fetch, add, and remove users through the directory's REST API."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = _normalize_base_url(base_url)
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def fetch_users(self) -> Tuple[User, ...]:
        response = await self._request("GET", "/users")
        try:
            data = response.json()
        except ValueError as exc:
            raise RepositoryError("User directory returned an invalid response") from exc

        if isinstance(data, dict):
            data = data.get("users")
        if not isinstance(data, list):
            raise RepositoryError("User directory returned an unexpected response payload")

        users: List[User] = [_parse_user(item) for item in data]
        return tuple(users)

    async def add_user(self, payload: AddUser) -> None:
        await self._request("POST", "/users", json={"name": payload.name, "email": payload.email})

    async def remove_user(self, user_id: int) -> None:
        await self._request("DELETE", f"/users/{int(user_id)}")

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpUserRepository":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def _request(self, method: str, path: str, **kwargs: object) -> httpx.Response:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.RequestError as exc:
            logger.warning("%s %s%s failed: %s", method, self._base_url, path, exc)
            raise RepositoryError(f"Failed to contact user directory: {exc}") from exc

        if response.status_code >= 400:
            default = f"User directory request failed with status {response.status_code}"
            try:
                parsed = response.json()
            except ValueError:
                parsed = response.text
            message = _extract_error_message(parsed, default)
            logger.info("%s %s returned %s: %s", method, path, response.status_code, message)
            raise ApiError(response.status_code, message)

        return response


__all__ = ["HttpUserRepository"]
