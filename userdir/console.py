"""Text console that renders the user list and issues controller commands."""

from __future__ import annotations

from typing import Awaitable, Callable, Optional

import anyio

from .controller import UserListController
from .models import AddUser, ListState, Loading
from .repository import ApiError, RepositoryError

Prompt = Callable[[str], Awaitable[str]]
Writer = Callable[..., None]


def render_state(state: ListState) -> str:
    if isinstance(state, Loading):
        return "Loading users..."

    users = state.users
    if not users:
        return "No users are currently registered."

    lines = [
        f"{len(users)} user(s) found:",
        f"{'ID':>4}  {'Name':<24}  Email",
        "-" * 64,
    ]
    for user in users:
        lines.append(f"{user.id:>4}  {user.name:<24}  {user.email}")
    return "\n".join(lines)


def render_error(error: Optional[RepositoryError]) -> Optional[str]:
    if error is None:
        return None
    if isinstance(error, ApiError):
        return f"Error ({error.status_code}): {error.message} [choose 4 to dismiss]"
    return f"Error: {error} [choose 4 to dismiss]"


async def _read_line(text: str) -> str:
    return await anyio.to_thread.run_sync(input, text)


async def run_console(
    controller: UserListController,
    *,
    prompt: Optional[Prompt] = None,
    write: Writer = print,
) -> None:
    """Drive ``controller`` from an interactive menu until the user exits."""

    ask = prompt or _read_line

    def on_error(error: Optional[RepositoryError]) -> None:
        message = render_error(error)
        if message:
            write(message)

    unsubscribe_state = controller.state.subscribe(lambda state: write(render_state(state)))
    unsubscribe_error = controller.error.subscribe(on_error)
    try:
        await controller.join()
        while True:
            write()
            write("Select an option:")
            write("  1) Refresh user list")
            write("  2) Add a new user")
            write("  3) Remove a user")
            write("  4) Dismiss error")
            write("  5) Exit")

            try:
                choice = (await ask("Enter choice [1-5]: ")).strip()
            except EOFError:
                write("\nExiting user console.")
                return

            if choice == "1":
                controller.refresh()
            elif choice == "2":
                name = (await ask("Name: ")).strip()
                email = (await ask("Email address: ")).strip()
                if not name or not email:
                    write("User creation cancelled.")
                    continue
                controller.add_user(AddUser(name=name, email=email))
            elif choice == "3":
                raw_id = (await ask("User ID to remove: ")).strip()
                try:
                    user_id = int(raw_id)
                except ValueError:
                    write(f"'{raw_id}' is not a valid user ID.")
                    continue
                controller.remove_user(user_id)
            elif choice == "4":
                controller.dismiss_error()
            elif choice == "5":
                write("Goodbye!")
                return
            else:
                write("Invalid selection. Please choose a number from the menu.")
                continue

            await controller.join()
    finally:
        unsubscribe_state()
        unsubscribe_error()


__all__ = ["render_error", "render_state", "run_console"]
