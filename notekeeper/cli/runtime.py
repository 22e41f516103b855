"""
CLI Runtime Helpers.

Session lookup, controller construction, and error reporting shared by
the command groups.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import NoReturn

import typer
from rich.console import Console

from notekeeper.core.exceptions import ApplicationError, AuthError
from notekeeper.core.logging import get_logger, log_with_source
from notekeeper.notes.controller import NotesController
from notekeeper.notes.gateway import NotesGateway
from notekeeper.notes.session import SessionController, SessionStore

console = Console()
logger = get_logger(__name__)


def get_session_controller() -> SessionController:
    """Session controller backed by the configured session file."""
    return SessionController(SessionStore())


def fail(error: ApplicationError) -> NoReturn:
    """Print an application error and exit with status 1."""
    log_with_source(logger, "cli", "info", "Command failed", code=error.code)
    console.print(f"[red]Error: {error.message}[/red]")
    if isinstance(error, AuthError):
        console.print("[dim]Log in with: notekeeper auth login[/dim]")
    raise typer.Exit(1)


def check(controller: NotesController) -> None:
    """Exit if the last controller operation recorded an error."""
    if controller.error is not None:
        fail(controller.error)


@asynccontextmanager
async def notes_session(load: bool = True) -> AsyncIterator[NotesController]:
    """
    Controller for the logged-in user, with notes loaded.

    Exits with a login hint when there is no session.
    """
    sessions = get_session_controller()
    try:
        session = sessions.require()
    except AuthError as e:
        fail(e)

    gateway = NotesGateway(session)
    controller = NotesController(gateway, sessions)
    try:
        if load:
            await controller.load()
            check(controller)
        yield controller
    finally:
        controller.detach()
        await gateway.close()
