"""
Share Link Manager.

Publishes a note through the notes API and records the returned link on
the cached note. The server decides whether a repeated share returns the
same link or a new one; whatever it returns is what gets stored.
"""

from typing import Protocol
from urllib.parse import urlsplit

from notekeeper.core.exceptions import ValidationError
from notekeeper.core.logging import get_logger
from notekeeper.notes.cache import NoteCache
from notekeeper.notes.schemas import Note

logger = get_logger(__name__)


class ShareGateway(Protocol):
    async def share_note(self, note_id: int) -> str: ...


def share_id_from_link(link: str) -> str:
    """
    Extract the public share id from a share link.

    Accepts a full URL (last path segment is the id) or a bare id.
    """
    path = urlsplit(link).path if "://" in link else link
    share_id = path.rstrip("/").rsplit("/", 1)[-1]
    if not share_id:
        raise ValidationError("Share link does not contain a share id")
    return share_id


class ShareLinkManager:
    """Requests share links and attaches them to cached notes."""

    def __init__(self, gateway: ShareGateway, cache: NoteCache) -> None:
        self._gateway = gateway
        self._cache = cache

    async def share(self, note: Note) -> Note:
        """
        Publish a note and record its link.

        Args:
            note: A saved note

        Returns:
            The note carrying its new share link

        Raises:
            ValidationError: If the note has never been saved
            ApplicationError: Whatever the gateway raised; nothing is changed
        """
        if note.id is None:
            raise ValidationError("Save the note before sharing it")

        link = await self._gateway.share_note(note.id)

        current = self._cache.get(note.id) or note
        shared = current.with_share_link(link)
        self._cache.replace(note.id, shared)
        logger.info("Share link attached", extra={"note_id": note.id})
        return shared
