"""
Notekeeper CLI.

Command-line client for the notes API.
Built with Typer for type-safe commands and Rich for formatted output.

Usage:
    notekeeper --help                                  # Show help

    # Authentication
    notekeeper auth login                              # Log in (prompts for email/password)
    notekeeper auth register                           # Create an account
    notekeeper auth status                             # Who is logged in
    notekeeper auth logout                             # Forget the session

    # Notes
    notekeeper notes list                              # All notes, newest first
    notekeeper notes list -s groceries                 # Search title and content
    notekeeper notes show 12                           # One note in full
    notekeeper notes create -t "Title" -c "Body"       # New note
    notekeeper notes edit 12 -c "New body"             # Change a note
    notekeeper notes delete 12                         # Delete (asks first)
    notekeeper notes share 12                          # Publish and print link
    notekeeper notes public <link-or-id>               # Read a shared note

    # Interactive mode
    notekeeper tui                                     # Full-screen terminal UI

Options:
    --verbose, -v     Enable verbose output
    --debug           Enable debug mode (detailed logging)
    --help            Show help message
"""

import structlog
import typer
from rich.console import Console

from notekeeper.cli.commands import auth_app, notes_app
from notekeeper.core.config import find_project_root
from notekeeper.core.logging import get_logger, setup_logging

app = typer.Typer(
    name="notekeeper",
    help="Notekeeper - personal notes from the terminal.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()
logger = get_logger(__name__)

# Register command groups
app.add_typer(auth_app, name="auth")
app.add_typer(notes_app, name="notes")


def _validate_project_root() -> None:
    """Validate that config/settings can be located."""
    try:
        find_project_root()
    except RuntimeError:
        console.print("[red]Error: .project_root not found. Run from the notekeeper directory.[/red]")
        raise typer.Exit(1)


@app.command()
def tui() -> None:
    """
    Start the full-screen terminal interface.

    Browse, search, edit, delete, and share notes interactively.
    """
    from notekeeper.tui.app import run_tui

    run_tui()


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output (INFO level logging)",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        help="Enable debug mode (DEBUG level logging)",
    ),
) -> None:
    """
    Notekeeper CLI.

    Log in, then list, search, create, edit, delete, and share notes.
    """
    _validate_project_root()

    if debug:
        log_level = "DEBUG"
    elif verbose:
        log_level = "INFO"
    else:
        log_level = "WARNING"

    # Always configured, so log records go to stderr and never into command output
    setup_logging(level=log_level, format_type="console")
    structlog.contextvars.bind_contextvars(source="cli")

    logger.debug("CLI invoked", extra={"log_level": log_level})


if __name__ == "__main__":
    app()
