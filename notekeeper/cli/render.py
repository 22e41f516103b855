"""Rich renderables for notes."""

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from notekeeper.notes.schemas import Note


def _timestamp(note: Note) -> str:
    stamp = note.updated_at or note.created_at
    return stamp.strftime("%Y-%m-%d %H:%M") if stamp else "-"


def notes_table(notes: list[Note], title: str = "Notes") -> Table:
    table = Table(title=title, show_header=True)
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Title", style="bold")
    table.add_column("Preview")
    table.add_column("Updated", style="dim")
    table.add_column("Shared")

    for note in notes:
        table.add_row(
            str(note.id),
            escape(note.title),
            escape(note.preview),
            _timestamp(note),
            "[green]yes[/green]" if note.share_link else "-",
        )
    return table


def note_panel(note: Note) -> Panel:
    body = Text(note.content)
    footer = [f"Last updated: {_timestamp(note)}"]
    if note.share_link:
        footer.append(f"Share link: {note.share_link}")
    body.append("\n\n" + "\n".join(footer), style="dim")
    title = escape(note.title)
    if note.id is not None:
        title = f"{title} [dim](#{note.id})[/dim]"
    return Panel(body, title=title, title_align="left")
