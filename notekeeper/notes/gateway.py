"""
Notes Gateway.

Client-side contract for the remote notes service:

| Operation    | HTTP                                   |
|--------------|----------------------------------------|
| List         | GET    {notes_path}                    |
| Create       | POST   {notes_path}                    |
| Update       | PUT    {notes_path}/{id}               |
| Delete       | DELETE {notes_path}/{id}               |
| Share        | POST   {notes_path}/{id}/share         |
| Public fetch | GET    {notes_path}/public/{share_id}  |

Every authenticated call carries the bearer token of the Session passed in
at construction. Public fetch goes through PublicNotesClient, which holds
no credential and cannot write.
"""

from typing import Any

from notekeeper.core.config import get_app_config
from notekeeper.core.exceptions import FetchError
from notekeeper.core.logging import get_logger, log_with_source
from notekeeper.notes.client import APIClient, decode_json
from notekeeper.notes.schemas import Note, NoteDraft
from notekeeper.notes.session import Session

logger = get_logger(__name__)

SHARE_LINK_KEYS = ("shareLink", "shareId", "link")


def _notes_path(notes_path: str | None) -> str:
    if notes_path is not None:
        return notes_path.rstrip("/")
    return get_app_config().application.api.notes_path.rstrip("/")


def _parse_note(data: Any, operation: str) -> Note:
    if not isinstance(data, dict):
        raise FetchError(f"Failed to {operation}: unexpected response shape")
    try:
        return Note.model_validate(data)
    except ValueError as e:
        raise FetchError(f"Failed to {operation}: invalid note in response") from e


def _parse_share_link(data: Any) -> str:
    """Accept {"shareLink": ...}, {"shareId": ...}, {"link": ...} or a bare string."""
    if isinstance(data, str) and data:
        return data
    if isinstance(data, dict):
        for key in SHARE_LINK_KEYS:
            value = data.get(key)
            if isinstance(value, str) and value:
                return value
    raise FetchError("Failed to share note: no link in response")


class NotesGateway(APIClient):
    """
    Authenticated CRUD and share operations against the notes API.

    Usage:
        async with NotesGateway(session) as gateway:
            notes = await gateway.list_notes()
    """

    def __init__(
        self,
        session: Session,
        base_url: str | None = None,
        timeout: float | None = None,
        notes_path: str | None = None,
    ) -> None:
        super().__init__(
            base_url=base_url,
            timeout=timeout,
            headers={"Authorization": session.authorization},
        )
        self.session = session
        self.notes_path = _notes_path(notes_path)

    async def list_notes(self) -> list[Note]:
        """Fetch every note of the current user, in server order."""
        operation = "fetch notes"
        response = await self.read(self.notes_path, operation)
        data = decode_json(response, operation)
        if not isinstance(data, list):
            raise FetchError(f"Failed to {operation}: expected a list")
        notes = [_parse_note(item, operation) for item in data]
        log_with_source(logger, "gateway", "info", "Notes fetched", count=len(notes))
        return notes

    async def create_note(self, draft: NoteDraft) -> Note:
        """Create a note from a validated draft. Returns it with id and timestamps."""
        operation = "create note"
        response = await self.send("POST", self.notes_path, operation, json=draft.to_payload())
        note = _parse_note(decode_json(response, operation), operation)
        log_with_source(logger, "gateway", "info", "Note created", note_id=note.id)
        return note

    async def update_note(self, note_id: int, draft: NoteDraft) -> Note:
        """Replace the title and content of an existing note."""
        operation = "update note"
        response = await self.send(
            "PUT", f"{self.notes_path}/{note_id}", operation, json=draft.to_payload(),
        )
        note = _parse_note(decode_json(response, operation), operation)
        log_with_source(logger, "gateway", "info", "Note updated", note_id=note_id)
        return note

    async def delete_note(self, note_id: int) -> None:
        """Delete a note. Any 2xx counts as acknowledgement."""
        await self.send("DELETE", f"{self.notes_path}/{note_id}", "delete note")
        log_with_source(logger, "gateway", "info", "Note deleted", note_id=note_id)

    async def share_note(self, note_id: int) -> str:
        """Ask the server to publish a note. Returns the opaque share link."""
        operation = "share note"
        response = await self.send("POST", f"{self.notes_path}/{note_id}/share", operation)
        link = _parse_share_link(decode_json(response, operation))
        log_with_source(logger, "gateway", "info", "Note shared", note_id=note_id)
        return link


class PublicNotesClient(APIClient):
    """Unauthenticated, read-only access to a single shared note."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        notes_path: str | None = None,
    ) -> None:
        super().__init__(base_url=base_url, timeout=timeout)
        self.notes_path = _notes_path(notes_path)

    async def fetch_public(self, share_id: str) -> Note:
        """Fetch the note published under share_id."""
        operation = "load shared note"
        response = await self.read(f"{self.notes_path}/public/{share_id}", operation)
        return _parse_note(decode_json(response, operation), operation)
