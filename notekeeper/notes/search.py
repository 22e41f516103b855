"""
Note Search.

Incremental, case-insensitive filtering of the cached note list.
"""

from collections.abc import Iterable

from notekeeper.notes.schemas import Note


def matches(note: Note, query: str) -> bool:
    """True if query is a case-insensitive substring of the title or content."""
    needle = query.casefold()
    return needle in note.title.casefold() or needle in note.content.casefold()


def search_notes(notes: Iterable[Note], query: str) -> list[Note]:
    """
    Filter notes by query text, preserving order.

    An empty query returns every note. The input is never modified.
    """
    if not query:
        return list(notes)
    return [note for note in notes if matches(note, query)]
