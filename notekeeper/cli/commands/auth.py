"""
Authentication Commands.

Log in, register, log out, and show who is logged in. The session is kept
in the session file configured in application.yaml.
"""

import asyncio

import typer
from rich.console import Console

from notekeeper.cli.runtime import fail, get_session_controller
from notekeeper.core.exceptions import ApplicationError
from notekeeper.notes.auth import AuthClient

app = typer.Typer(help="Authentication commands")
console = Console()


@app.command()
def login(
    email: str = typer.Option(..., "--email", "-e", prompt=True, help="Account email"),
    password: str = typer.Option(..., "--password", "-p", prompt=True, hide_input=True, help="Account password"),
) -> None:
    """
    Log in and remember the session.

    Examples:
        notekeeper auth login
        notekeeper auth login -e me@example.com
    """
    asyncio.run(_login(email, password))


async def _login(email: str, password: str) -> None:
    sessions = get_session_controller()
    try:
        async with AuthClient() as auth:
            session = await auth.login(email, password)
    except ApplicationError as e:
        fail(e)
    sessions.start(session)
    console.print(f"[green]✓ Logged in as {email}[/green]")


@app.command()
def register(
    email: str = typer.Option(..., "--email", "-e", prompt=True, help="Account email"),
    password: str = typer.Option(..., "--password", "-p", prompt=True, hide_input=True, help="Password"),
    confirm_password: str = typer.Option(
        ..., "--confirm-password", prompt="Confirm password", hide_input=True, help="Password again",
    ),
) -> None:
    """
    Create an account. Logs in directly when the server issues a token.

    Examples:
        notekeeper auth register -e me@example.com
    """
    asyncio.run(_register(email, password, confirm_password))


async def _register(email: str, password: str, confirm_password: str) -> None:
    sessions = get_session_controller()
    try:
        async with AuthClient() as auth:
            session = await auth.register(email, password, confirm_password)
    except ApplicationError as e:
        fail(e)

    console.print(f"[green]✓ Registered {email}[/green]")
    if session is not None:
        sessions.start(session)
        console.print("[dim]You are now logged in.[/dim]")
    else:
        console.print("[dim]Log in with: notekeeper auth login[/dim]")


@app.command()
def logout() -> None:
    """
    Forget the stored session.

    Examples:
        notekeeper auth logout
    """
    sessions = get_session_controller()
    if not sessions.is_authenticated:
        console.print("[dim]Not logged in.[/dim]")
        return
    sessions.logout()
    console.print("[green]✓ Logged out[/green]")


@app.command()
def status() -> None:
    """
    Show whether a session is stored, and for whom.

    Examples:
        notekeeper auth status
    """
    session = get_session_controller().session
    if session is None:
        console.print("[yellow]Not logged in.[/yellow]")
        raise typer.Exit(1)
    console.print(f"Logged in as [bold]{session.email or 'unknown'}[/bold] since {session.created_at}")
