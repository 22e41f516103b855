"""
Note Commands.

List, search, view, create, edit, delete, and share notes, and read a
note someone else shared.
"""

import asyncio
from typing import Optional

import typer
from rich.console import Console

from notekeeper.cli.render import note_panel, notes_table
from notekeeper.cli.runtime import check, fail, notes_session
from notekeeper.core.exceptions import ApplicationError
from notekeeper.notes.gateway import PublicNotesClient
from notekeeper.notes.schemas import Note
from notekeeper.notes.share import share_id_from_link
from notekeeper.notes.view_state import draft_of

app = typer.Typer(help="Note commands")
console = Console()


@app.command("list")
def list_notes(
    search: str = typer.Option("", "--search", "-s", help="Only notes whose title or content contains this text"),
) -> None:
    """
    List your notes, newest first.

    Examples:
        notekeeper notes list
        notekeeper notes list -s groceries
    """
    asyncio.run(_list(search))


async def _list(search: str) -> None:
    async with notes_session() as controller:
        notes = controller.set_query(search)
        if not notes:
            console.print("[dim]No notes found.[/dim]")
            return
        title = f"Notes matching '{search}'" if search else "Notes"
        console.print(notes_table(notes, title=title))


@app.command()
def show(note_id: int = typer.Argument(..., help="Note ID")) -> None:
    """
    Show one note in full.

    Examples:
        notekeeper notes show 12
    """
    asyncio.run(_show(note_id))


async def _show(note_id: int) -> None:
    async with notes_session() as controller:
        note = controller.select(note_id)
        check(controller)
        console.print(note_panel(note))


@app.command()
def create(
    title: str = typer.Option(..., "--title", "-t", prompt=True, help="Note title"),
    content: str = typer.Option(..., "--content", "-c", prompt=True, help="Note content"),
) -> None:
    """
    Create a new note.

    Examples:
        notekeeper notes create -t "Groceries" -c "milk, eggs"
    """
    asyncio.run(_create(title, content))


async def _create(title: str, content: str) -> None:
    async with notes_session() as controller:
        controller.start_create()
        controller.edit_draft(title, content)
        note = await controller.save()
        check(controller)
        console.print(f"[green]✓ Created note {note.id}[/green]")
        console.print(note_panel(note))


@app.command()
def edit(
    note_id: int = typer.Argument(..., help="Note ID"),
    title: Optional[str] = typer.Option(None, "--title", "-t", help="New title"),
    content: Optional[str] = typer.Option(None, "--content", "-c", help="New content"),
) -> None:
    """
    Change the title and/or content of a note.

    Fields not given keep their current value.

    Examples:
        notekeeper notes edit 12 -t "Weekend groceries"
    """
    if title is None and content is None:
        console.print("[yellow]Nothing to change. Pass --title and/or --content.[/yellow]")
        raise typer.Exit(1)
    asyncio.run(_edit(note_id, title, content))


async def _edit(note_id: int, title: str | None, content: str | None) -> None:
    async with notes_session() as controller:
        controller.select(note_id)
        check(controller)
        controller.start_edit()
        draft = draft_of(controller.state)
        controller.edit_draft(
            title if title is not None else draft.title,
            content if content is not None else draft.content,
        )
        note = await controller.save()
        check(controller)
        console.print(f"[green]✓ Updated note {note.id}[/green]")
        console.print(note_panel(note))


@app.command()
def delete(
    note_id: int = typer.Argument(..., help="Note ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
) -> None:
    """
    Delete a note (asks for confirmation).

    Examples:
        notekeeper notes delete 12
        notekeeper notes delete 12 --yes
    """
    asyncio.run(_delete(note_id, yes))


def _ask(note: Note) -> bool:
    return typer.confirm(f"Are you sure you want to delete '{note.title}'?")


async def _delete(note_id: int, yes: bool) -> None:
    async with notes_session() as controller:
        deleted = await controller.delete(note_id, confirm=True if yes else _ask)
        check(controller)
        if deleted:
            console.print(f"[green]✓ Deleted note {note_id}[/green]")
        else:
            console.print("[dim]Cancelled.[/dim]")


@app.command()
def share(note_id: int = typer.Argument(..., help="Note ID")) -> None:
    """
    Publish a note and print its share link.

    Anyone with the link can read the note without logging in.

    Examples:
        notekeeper notes share 12
    """
    asyncio.run(_share(note_id))


async def _share(note_id: int) -> None:
    async with notes_session() as controller:
        note = await controller.share(note_id)
        check(controller)
        console.print(f"[green]✓ Shared note {note.id}[/green]")
        console.print(f"Link: [bold]{note.share_link}[/bold]")


@app.command()
def public(link: str = typer.Argument(..., help="Share link or share id")) -> None:
    """
    Read a shared note. Does not require logging in.

    Examples:
        notekeeper notes public https://notes.example.com/shared/abc123
        notekeeper notes public abc123
    """
    asyncio.run(_public(link))


async def _public(link: str) -> None:
    try:
        share_id = share_id_from_link(link)
        async with PublicNotesClient() as client:
            note = await client.fetch_public(share_id)
    except ApplicationError as e:
        fail(e)
    console.print(note_panel(note))
