"""
Note Cache.

In-memory mirror of the user's notes, ordered newest-first. The cache is
confirm-then-apply: it is only ever mutated with data the notes API has
already acknowledged, never speculatively.
"""

from typing import Protocol

from notekeeper.core.exceptions import ApplicationError
from notekeeper.core.logging import get_logger
from notekeeper.notes.schemas import Note

logger = get_logger(__name__)


def _keep_share_link(previous: Note | None, note: Note) -> Note:
    """Carry a known share link onto a server copy that omits it."""
    if previous is None or note.share_link is not None or previous.share_link is None:
        return note
    return note.with_share_link(previous.share_link)


class NoteSource(Protocol):
    """Anything that can list the user's notes (normally NotesGateway)."""

    async def list_notes(self) -> list[Note]: ...


class NoteCache:
    """
    Ordered collection of server-confirmed notes, keyed by id.

    Notes without an id are drafts and are never stored here.
    """

    def __init__(self) -> None:
        self._notes: list[Note] = []
        self.loaded = False
        self.error: str | None = None

    def __len__(self) -> int:
        return len(self._notes)

    def __contains__(self, note_id: object) -> bool:
        return any(note.id == note_id for note in self._notes)

    async def load(self, source: NoteSource) -> list[Note]:
        """
        Replace the cache with the server's current list, in server order.

        Share links already known for a note are kept when the listing
        omits them.

        On failure the previous contents are kept, the message is recorded
        in self.error, and the exception propagates.
        """
        try:
            notes = await source.list_notes()
        except ApplicationError as e:
            self.error = e.message
            logger.warning("Note cache load failed", extra={"error": e.message})
            raise

        previous = {note.id: note for note in self._notes}
        self._notes = [
            _keep_share_link(previous.get(note.id), note)
            for note in notes if note.id is not None
        ]
        self.loaded = True
        self.error = None
        logger.debug("Note cache loaded", extra={"count": len(self._notes)})
        return self.list()

    def list(self) -> list[Note]:
        """Return the notes in order. The returned list is a copy."""
        return list(self._notes)

    def get(self, note_id: int) -> Note | None:
        for note in self._notes:
            if note.id == note_id:
                return note
        return None

    def insert(self, note: Note) -> None:
        """
        Prepend a newly created note.

        Raises:
            ValueError: If the note has no server-assigned id
        """
        if note.id is None:
            raise ValueError("Only notes with a server-assigned id can be cached")
        self._notes = [note] + [n for n in self._notes if n.id != note.id]

    def replace(self, note_id: int, note: Note) -> bool:
        """
        Swap the entry for note_id in place. No-op if absent.

        A replacement without a share link inherits the existing one.
        """
        for index, existing in enumerate(self._notes):
            if existing.id == note_id:
                self._notes[index] = _keep_share_link(existing, note)
                return True
        return False

    def remove(self, note_id: int) -> bool:
        """Drop the entry for note_id. No-op if absent."""
        remaining = [note for note in self._notes if note.id != note_id]
        removed = len(remaining) != len(self._notes)
        self._notes = remaining
        return removed

    def clear(self) -> None:
        """Forget everything, as after logout."""
        self._notes = []
        self.loaded = False
        self.error = None
