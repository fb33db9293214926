from __future__ import annotations

from pathlib import Path

import httpx
import pytest

from userdir.client import HttpUserRepository
from userdir.controller import UserListController
from userdir.database import Database
from userdir.models import AddUser, ShowList, User
from userdir.repository import ApiError, RepositoryError
from userdir.service import create_app


BASE_URL = "http://directory.test"


@pytest.fixture()
def database(tmp_path: Path) -> Database:
    db = Database(tmp_path / "userdir.sqlite3")
    db.initialize()
    return db


@pytest.fixture()
def transport(database: Database) -> httpx.ASGITransport:
    return httpx.ASGITransport(app=create_app(database=database))


@pytest.mark.anyio
async def test_fetch_users_returns_directory_contents(database: Database, transport) -> None:
    alice = database.create_user("Alice", "alice@example.com")
    bob = database.create_user("Bob", "bob@example.com")

    async with HttpUserRepository(BASE_URL, transport=transport) as repository:
        users = await repository.fetch_users()

    assert users == (alice, bob)


@pytest.mark.anyio
async def test_add_and_remove_user_round_trip(database: Database, transport) -> None:
    async with HttpUserRepository(BASE_URL + "/", transport=transport) as repository:
        await repository.add_user(AddUser("Carol", "Carol@Example.com"))
        users = await repository.fetch_users()
        assert [(user.name, user.email) for user in users] == [("Carol", "carol@example.com")]

        await repository.remove_user(users[0].id)
        assert await repository.fetch_users() == ()

    assert database.list_users() == []


@pytest.mark.anyio
async def test_duplicate_email_raises_api_error(database: Database, transport) -> None:
    database.create_user("Alice", "alice@example.com")

    async with HttpUserRepository(BASE_URL, transport=transport) as repository:
        with pytest.raises(ApiError) as excinfo:
            await repository.add_user(AddUser("Another Alice", "alice@example.com"))

    assert excinfo.value.status_code == 409
    assert excinfo.value.message == "A user with that email already exists"


@pytest.mark.anyio
async def test_removing_missing_user_raises_not_found(transport) -> None:
    async with HttpUserRepository(BASE_URL, transport=transport) as repository:
        with pytest.raises(ApiError) as excinfo:
            await repository.remove_user(404)

    assert excinfo.value.status_code == 404
    assert str(excinfo.value) == "User not found"


@pytest.mark.anyio
async def test_invalid_payload_uses_default_message(transport) -> None:
    async with HttpUserRepository(BASE_URL, transport=transport) as repository:
        with pytest.raises(ApiError) as excinfo:
            await repository.add_user(AddUser("", "not-an-email"))

    assert excinfo.value.status_code == 422
    assert "status 422" in excinfo.value.message


@pytest.mark.anyio
async def test_connection_failure_raises_repository_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with HttpUserRepository(BASE_URL, transport=httpx.MockTransport(handler)) as repository:
        with pytest.raises(RepositoryError) as excinfo:
            await repository.fetch_users()

    assert not isinstance(excinfo.value, ApiError)
    assert "Failed to contact user directory" in str(excinfo.value)


@pytest.mark.anyio
async def test_wrapped_user_listing_is_accepted() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/users"
        return httpx.Response(200, json={"users": [{"id": 7, "name": "Dana", "email": "dana@example.com"}]})

    async with HttpUserRepository(BASE_URL, transport=httpx.MockTransport(handler)) as repository:
        users = await repository.fetch_users()

    assert users == (User(id=7, name="Dana", email="dana@example.com"),)


@pytest.mark.anyio
@pytest.mark.parametrize(
    "payload",
    [{"unexpected": True}, [{"id": 1, "name": "No email"}], ["not-a-user"]],
)
async def test_malformed_listing_raises_repository_error(payload) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=payload)

    async with HttpUserRepository(BASE_URL, transport=httpx.MockTransport(handler)) as repository:
        with pytest.raises(RepositoryError):
            await repository.fetch_users()


@pytest.mark.anyio
async def test_server_error_detail_is_surfaced() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"message": "Some message"})

    async with HttpUserRepository(BASE_URL, transport=httpx.MockTransport(handler)) as repository:
        with pytest.raises(ApiError) as excinfo:
            await repository.fetch_users()

    assert excinfo.value.status_code == 500
    assert excinfo.value.message == "Some message"


@pytest.mark.anyio
async def test_controller_against_directory_service(database: Database, transport) -> None:
    alice = database.create_user("Alice", "alice@example.com")

    async with HttpUserRepository(BASE_URL, transport=transport) as repository:
        controller = UserListController(repository)
        await controller.join()
        assert controller.state.value == ShowList((alice,))

        controller.add_user(AddUser("Bob", "bob@example.com"))
        await controller.join()
        names = [user.name for user in controller.state.value.users]
        assert names == ["Alice", "Bob"]

        controller.add_user(AddUser("Bobby", "bob@example.com"))
        await controller.join()
        assert isinstance(controller.error.value, ApiError)
        assert controller.error.value.status_code == 409
        assert [user.name for user in controller.state.value.users] == ["Alice", "Bob"]

        controller.remove_user(alice.id)
        await controller.join()
        assert [user.name for user in controller.state.value.users] == ["Bob"]
        controller.close()


def test_empty_base_url_is_rejected() -> None:
    with pytest.raises(ValueError):
        HttpUserRepository("   ")
