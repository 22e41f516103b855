"""
Notes Controller.

Composes the note cache, the view state machine, search, and sharing into
the operations a user interface calls. Presentation layers (CLI, TUI) hold
no note state of their own.

Rules enforced here:
    - Confirm-then-apply: the cache changes only after the notes API
      acknowledged the operation.
    - One round trip in flight per logical operation; duplicates are ignored.
    - Staleness: a result always updates the cache, but only moves the view
      if the user is still in the context that issued the call.
    - A NotFoundError from the server is authoritative: the note is dropped.
    - An AuthError ends the session and clears all note state.

Failures are never raised to the caller. They are recorded in ``error``
for display and the operation returns None (or False for delete).
"""

import inspect
from collections.abc import Awaitable, Callable

from notekeeper.core.exceptions import (
    ApplicationError,
    AuthError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from notekeeper.core.logging import get_logger
from notekeeper.notes.cache import NoteCache
from notekeeper.notes.gateway import NotesGateway
from notekeeper.notes.schemas import Note
from notekeeper.notes.search import search_notes
from notekeeper.notes.session import SessionController
from notekeeper.notes.share import ShareLinkManager
from notekeeper.notes.view_state import (
    Cancel,
    Creating,
    Deleted,
    EditDraft,
    Editing,
    Idle,
    NoteChanged,
    Saved,
    Select,
    StartCreate,
    StartEdit,
    ViewEvent,
    ViewState,
    selected_id,
    transition,
)

logger = get_logger(__name__)

# Events that keep the user in the same context for staleness purposes
_SAME_CONTEXT_EVENTS = (EditDraft, NoteChanged)

Confirm = bool | Callable[[Note], bool | Awaitable[bool]]


class NotesController:
    """
    Note management engine for one authenticated session.

    Usage:
        controller = NotesController(NotesGateway(session), sessions)
        await controller.load()
        controller.start_create()
        controller.edit_draft("Groceries", "milk, eggs")
        note = await controller.save()
        if note is None:
            show(controller.error)
    """

    def __init__(
        self,
        gateway: NotesGateway,
        sessions: SessionController | None = None,
    ) -> None:
        self.cache = NoteCache()
        self.state: ViewState = Idle()
        self.query = ""
        self.error: ApplicationError | None = None
        self.notice: str | None = None
        self.auth_required = False

        self._gateway = gateway
        self._shares = ShareLinkManager(gateway, self.cache)
        self._sessions = sessions
        self._generation = 0
        self._pending: set[str] = set()

        if sessions is not None:
            sessions.on_logout(self.reset)

    # =========================================================================
    # Read side
    # =========================================================================

    def visible_notes(self) -> list[Note]:
        """Cached notes filtered by the current query."""
        return search_notes(self.cache.list(), self.query)

    def set_query(self, query: str) -> list[Note]:
        self.query = query
        return self.visible_notes()

    @property
    def generation(self) -> int:
        """Changes whenever the user moves to a different view context."""
        return self._generation

    def is_pending(self, operation: str) -> bool:
        return operation in self._pending

    def clear_error(self) -> None:
        self.error = None

    # =========================================================================
    # View transitions
    # =========================================================================

    def select(self, note_id: int) -> Note | None:
        """Show a cached note, discarding any open draft."""
        note = self.cache.get(note_id)
        if note is None:
            self._fail(NotFoundError(f"Note {note_id} is not in your notes"))
            return None
        self._apply(Select(note))
        return note

    def start_create(self) -> bool:
        return self._try_apply(StartCreate())

    def start_edit(self) -> bool:
        return self._try_apply(StartEdit())

    def edit_draft(self, title: str, content: str) -> bool:
        return self._try_apply(EditDraft(title=title, content=content))

    def cancel(self) -> bool:
        return self._try_apply(Cancel())

    # =========================================================================
    # Gateway operations
    # =========================================================================

    async def load(self) -> list[Note] | None:
        """Replace the cache with the server's list."""
        if not self._begin("load"):
            return None
        try:
            notes = await self.cache.load(self._gateway)
        except ApplicationError as e:
            self._fail(e)
            return None
        finally:
            self._pending.discard("load")

        self.error = None
        self._reconcile_selection()
        return notes

    async def save(self) -> Note | None:
        """
        Persist the open draft: create in Creating, update in Editing.

        The draft is trimmed and validated locally first; an invalid draft
        never reaches the server and the form stays open.
        """
        state = self.state
        if not isinstance(state, (Creating, Editing)):
            self._fail(InvalidTransitionError("There is no open note to save"))
            return None

        try:
            draft = state.draft.validated()
        except ValidationError as e:
            self._fail(e)
            return None

        if not self._begin("save"):
            return None
        generation = self._generation
        try:
            if isinstance(state, Creating):
                note = await self._gateway.create_note(draft)
            else:
                note = await self._gateway.update_note(state.note.id, draft)
        except NotFoundError as e:
            if isinstance(state, Editing):
                self._drop(state.note.id)
            self._fail(e)
            return None
        except ApplicationError as e:
            self._fail(e)
            return None
        finally:
            self._pending.discard("save")

        if isinstance(state, Creating):
            self.cache.insert(note)
        else:
            if self.cache.replace(state.note.id, note):
                note = self.cache.get(state.note.id)

        if generation == self._generation:
            self._apply(Saved(note))
            self.error = None
        else:
            logger.info("Discarding stale save result for view", extra={"note_id": note.id})
        return note

    async def delete(self, note_id: int, confirm: Confirm) -> bool:
        """
        Delete a note after explicit confirmation.

        Args:
            note_id: Id of a cached note
            confirm: True/False, or a callable asked with the note (may be async)

        Returns:
            True if the server deleted the note
        """
        note = self.cache.get(note_id)
        if note is None:
            self._fail(NotFoundError(f"Note {note_id} is not in your notes"))
            return False

        key = f"delete:{note_id}"
        if self.is_pending(key):
            self.notice = "Delete already in progress"
            return False

        if not await self._confirmed(confirm, note):
            self.notice = "Delete cancelled"
            return False

        if not self._begin(key):
            return False
        try:
            await self._gateway.delete_note(note_id)
        except NotFoundError as e:
            self._drop(note_id)
            self._fail(e)
            return False
        except ApplicationError as e:
            self._fail(e)
            return False
        finally:
            self._pending.discard(key)

        self._drop(note_id)
        self.error = None
        self.notice = "Note deleted"
        return True

    async def share(self, note_id: int) -> Note | None:
        """Publish a note and attach the returned link."""
        note = self.cache.get(note_id)
        if note is None:
            self._fail(NotFoundError(f"Note {note_id} is not in your notes"))
            return None

        key = f"share:{note_id}"
        if not self._begin(key):
            return None
        try:
            shared = await self._shares.share(note)
        except NotFoundError as e:
            self._drop(note_id)
            self._fail(e)
            return None
        except ApplicationError as e:
            self._fail(e)
            return None
        finally:
            self._pending.discard(key)

        self._apply(NoteChanged(shared))
        self.error = None
        self.notice = "Share link created"
        return shared

    def detach(self) -> None:
        """Stop following the session. Call when discarding this controller."""
        if self._sessions is not None:
            self._sessions.remove_logout_callback(self.reset)

    def reset(self) -> None:
        """Drop all note state, as after logout."""
        self.cache.clear()
        self.state = Idle()
        self.query = ""
        self.notice = None
        self._generation += 1

    # =========================================================================
    # Internals
    # =========================================================================

    def _apply(self, event: ViewEvent) -> ViewState:
        new_state = transition(self.state, event)
        if new_state is not self.state and not isinstance(event, _SAME_CONTEXT_EVENTS):
            self._generation += 1
        self.state = new_state
        return new_state

    def _try_apply(self, event: ViewEvent) -> bool:
        try:
            self._apply(event)
        except InvalidTransitionError as e:
            self._fail(e)
            return False
        return True

    def _begin(self, key: str) -> bool:
        if key in self._pending:
            self.notice = "Still working on the previous request"
            logger.debug("Ignoring duplicate request", extra={"operation": key})
            return False
        self._pending.add(key)
        return True

    async def _confirmed(self, confirm: Confirm, note: Note) -> bool:
        if isinstance(confirm, bool):
            return confirm
        answer = confirm(note)
        if inspect.isawaitable(answer):
            answer = await answer
        return bool(answer)

    def _drop(self, note_id: int) -> None:
        self.cache.remove(note_id)
        self._apply(Deleted(note_id))

    def _reconcile_selection(self) -> None:
        """After a reload, refresh or clear the selected note."""
        note_id = selected_id(self.state)
        if note_id is None:
            return
        fresh = self.cache.get(note_id)
        if fresh is None:
            self._apply(Deleted(note_id))
        else:
            self._apply(NoteChanged(fresh))

    def _fail(self, error: ApplicationError) -> None:
        self.error = error
        self.notice = None
        logger.warning(
            "Notes operation failed",
            extra={"code": error.code, "error": error.message},
        )
        if isinstance(error, AuthError):
            self.auth_required = True
            if self._sessions is not None:
                self._sessions.expire()
            else:
                self.reset()
            self.error = error
