"""
View State Machine.

What the user is looking at is exactly one of:

    Idle                   nothing selected, no form open
    Viewing(note)          a cached note is selected, read-only
    Creating(draft)        a new note is being composed
    Editing(note, draft)   a selected note is being edited

Each state carries only the data valid in it. transition() is the only way
to move between states; it never touches the note cache; persisting a
draft is the controller's job, which reports the outcome back as a
Saved or Deleted event.

    Idle ──StartCreate──▶ Creating ──Saved──▶ Viewing ──StartEdit──▶ Editing
      ▲                      │                  ▲  ▲                    │
      └──────Cancel──────────┘                  │  └──Cancel / Saved────┘
                                     Select (from any state)
"""

from dataclasses import dataclass, field

from notekeeper.core.exceptions import InvalidTransitionError
from notekeeper.notes.schemas import Note, NoteDraft

# =============================================================================
# States
# =============================================================================


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Viewing:
    note: Note


@dataclass(frozen=True)
class Creating:
    draft: NoteDraft = field(default_factory=NoteDraft)


@dataclass(frozen=True)
class Editing:
    note: Note
    draft: NoteDraft


ViewState = Idle | Viewing | Creating | Editing


# =============================================================================
# Events
# =============================================================================


@dataclass(frozen=True)
class StartCreate:
    pass


@dataclass(frozen=True)
class StartEdit:
    pass


@dataclass(frozen=True)
class EditDraft:
    title: str
    content: str


@dataclass(frozen=True)
class Cancel:
    pass


@dataclass(frozen=True)
class Saved:
    note: Note


@dataclass(frozen=True)
class Deleted:
    note_id: int


@dataclass(frozen=True)
class Select:
    note: Note


@dataclass(frozen=True)
class NoteChanged:
    """A selected note changed on the server without a form (e.g. shared)."""

    note: Note


ViewEvent = StartCreate | StartEdit | EditDraft | Cancel | Saved | Deleted | Select | NoteChanged


# =============================================================================
# Queries
# =============================================================================


def selected_note(state: ViewState) -> Note | None:
    """The note currently selected, if any."""
    if isinstance(state, (Viewing, Editing)):
        return state.note
    return None


def selected_id(state: ViewState) -> int | None:
    note = selected_note(state)
    return note.id if note is not None else None


def draft_of(state: ViewState) -> NoteDraft | None:
    """The draft buffer, if a form is open."""
    if isinstance(state, (Creating, Editing)):
        return state.draft
    return None


def is_form_open(state: ViewState) -> bool:
    return isinstance(state, (Creating, Editing))


# =============================================================================
# Transition function
# =============================================================================


def _reject(state: ViewState, event: ViewEvent) -> InvalidTransitionError:
    return InvalidTransitionError(
        f"Cannot apply {type(event).__name__} while {type(state).__name__}"
    )


def transition(state: ViewState, event: ViewEvent) -> ViewState:
    """
    Compute the next view state.

    Args:
        state: Current view state
        event: What happened

    Returns:
        The next state (possibly the same object when nothing changes)

    Raises:
        InvalidTransitionError: If event is not permitted in state
    """
    if isinstance(event, Select):
        if event.note.id is None:
            raise InvalidTransitionError("Only saved notes can be selected")
        return Viewing(event.note)

    if isinstance(event, StartCreate):
        return Creating(NoteDraft())

    if isinstance(event, StartEdit):
        if isinstance(state, Viewing):
            return Editing(state.note, NoteDraft.from_note(state.note))
        raise _reject(state, event)

    if isinstance(event, EditDraft):
        draft = NoteDraft(title=event.title, content=event.content)
        if isinstance(state, Creating):
            return Creating(draft)
        if isinstance(state, Editing):
            return Editing(state.note, draft)
        raise _reject(state, event)

    if isinstance(event, Cancel):
        if isinstance(state, Editing):
            return Viewing(state.note)
        if isinstance(state, Creating):
            return Idle()
        raise _reject(state, event)

    if isinstance(event, Saved):
        if isinstance(state, Creating):
            return Viewing(event.note)
        if isinstance(state, Editing) and state.note.id == event.note.id:
            return Viewing(event.note)
        raise _reject(state, event)

    if isinstance(event, Deleted):
        if selected_id(state) == event.note_id:
            return Idle()
        return state

    if isinstance(event, NoteChanged):
        if isinstance(state, Viewing) and state.note.id == event.note.id:
            return Viewing(event.note)
        if isinstance(state, Editing) and state.note.id == event.note.id:
            return Editing(event.note, state.draft)
        return state

    raise _reject(state, event)
