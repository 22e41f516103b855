"""
CLI Commands.

Organized by domain/feature area.
"""

from notekeeper.cli.commands.auth import app as auth_app
from notekeeper.cli.commands.notes import app as notes_app

__all__ = [
    "auth_app",
    "notes_app",
]
