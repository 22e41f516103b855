"""
CLI Client Module.

Command-line client built with Typer for working with notes.

Architecture:
- CLI is a thin presentation layer
- All note state lives in NotesController (notekeeper.notes.controller)
- Calls the notes API via httpx
- One command per user interaction; the session file carries login across runs

Usage:
    notekeeper --help
    notekeeper auth login
    notekeeper notes list --search groceries
    notekeeper tui
"""
