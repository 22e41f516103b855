"""
Note Schemas.

Pydantic models for notes as exchanged with the notes API, and the draft
buffer used while a note is being composed or edited.

Wire names are camelCase (createdAt, updatedAt, shareLink); attributes are
snake_case. A link sent as shareId is read into share_link too. Both
models are frozen: holders get independent values and changes are
expressed with model_copy(update=...).
"""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from notekeeper.core.exceptions import ValidationError


class Note(BaseModel):
    """A user-owned note as returned by the notes API."""

    id: int | None = Field(default=None, description="Server-assigned identifier")
    title: str = Field(description="Note title")
    content: str = Field(description="Note body text")
    created_at: datetime | None = Field(
        default=None,
        alias="createdAt",
        description="Creation timestamp, set by the server",
    )
    updated_at: datetime | None = Field(
        default=None,
        alias="updatedAt",
        description="Last update timestamp, set by the server",
    )
    share_link: str | None = Field(
        default=None,
        alias="shareLink",
        validation_alias=AliasChoices("shareLink", "shareId", "share_link"),
        description="Public link, present once the note has been shared",
    )

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        extra="ignore",
    )

    def with_share_link(self, link: str) -> "Note":
        """Return a copy of this note carrying the given share link."""
        return self.model_copy(update={"share_link": link})

    @property
    def preview(self) -> str:
        """First line of content, shortened for list display."""
        first_line = self.content.strip().splitlines()[0] if self.content.strip() else ""
        return first_line if len(first_line) <= 100 else f"{first_line[:100]}..."


class NoteDraft(BaseModel):
    """In-progress form fields for a note being created or edited."""

    title: str = ""
    content: str = ""

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_note(cls, note: Note) -> "NoteDraft":
        """Seed a draft from an existing note's current fields."""
        return cls(title=note.title, content=note.content)

    def validated(self) -> "NoteDraft":
        """
        Trim both fields and check neither is empty.

        Returns:
            A new draft with trimmed title and content

        Raises:
            ValidationError: If title or content is empty after trimming
        """
        title = self.title.strip()
        content = self.content.strip()

        missing = [name for name, value in (("title", title), ("content", content)) if not value]
        if missing:
            raise ValidationError(
                "Please fill in both title and content",
                details={"missing_fields": missing},
            )

        return NoteDraft(title=title, content=content)

    def to_payload(self) -> dict[str, str]:
        """Request body for the create and update calls."""
        return {"title": self.title, "content": self.content}
