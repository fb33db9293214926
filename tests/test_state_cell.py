from __future__ import annotations

import logging

import pytest

from userdir.observable import StateCell


def test_new_subscriber_receives_current_value_then_changes() -> None:
    cell = StateCell("initial")
    cell.set("second")
    seen: list[str] = []

    cell.subscribe(seen.append)
    cell.set("third")

    assert seen == ["second", "third"]
    assert cell.value == "third"


def test_equal_values_are_not_republished() -> None:
    cell = StateCell((1, 2))
    seen: list = []
    cell.subscribe(seen.append)

    cell.set((1, 2))
    cell.set((1, 2, 3))
    cell.set((1, 2, 3))

    assert seen == [(1, 2), (1, 2, 3)]


def test_unsubscribe_stops_delivery_and_is_idempotent() -> None:
    cell = StateCell(0)
    seen: list[int] = []
    unsubscribe = cell.subscribe(seen.append)

    unsubscribe()
    unsubscribe()
    cell.set(1)

    assert seen == [0]


def test_failing_listener_does_not_block_others(caplog: pytest.LogCaptureFixture) -> None:
    cell = StateCell(0)
    seen: list[int] = []

    def broken(value: int) -> None:
        if value:
            raise RuntimeError("render failed")

    cell.subscribe(broken)
    cell.subscribe(seen.append)

    with caplog.at_level(logging.ERROR, logger="userdir.observable"):
        cell.set(5)

    assert seen == [0, 5]
    assert "State listener" in caplog.text


@pytest.mark.anyio
async def test_stream_yields_current_value_and_updates() -> None:
    cell = StateCell("a")
    stream = cell.stream()

    assert await stream.__anext__() == "a"
    cell.set("b")
    cell.set("c")
    assert await stream.__anext__() == "b"
    assert await stream.__anext__() == "c"

    await stream.aclose()
    cell.set("d")
    assert cell.value == "d"
