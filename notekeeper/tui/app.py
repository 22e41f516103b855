"""
Notekeeper TUI.

Full-screen terminal interface over NotesController. The sidebar lists
(and searches) notes; the main pane shows the selected note or the
create/edit form, following the controller's view state. Every network
call runs in a worker so the interface stays responsive.

Usage:
    notekeeper tui
    python tui.py --debug
"""

from __future__ import annotations

import asyncio

from rich.markup import escape
from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import (
    Button,
    Footer,
    Header,
    Input,
    Label,
    ListItem,
    ListView,
    Static,
    TextArea,
)

from notekeeper.core.exceptions import ApplicationError
from notekeeper.core.logging import get_logger, log_with_source, setup_logging
from notekeeper.notes.auth import AuthClient
from notekeeper.notes.controller import NotesController
from notekeeper.notes.gateway import NotesGateway
from notekeeper.notes.schemas import Note
from notekeeper.notes.session import Session, SessionController, SessionStore
from notekeeper.notes.view_state import (
    Creating,
    ViewState,
    Viewing,
    draft_of,
    is_form_open,
    selected_id,
)

logger = get_logger(__name__)


class NoteItem(ListItem):
    """Sidebar entry for one note."""

    def __init__(self, note: Note) -> None:
        super().__init__(
            Label(f"[bold]{escape(note.title)}[/]\n[dim]{escape(note.preview)}[/]")
        )
        self.note_id = note.id


class LoginScreen(ModalScreen[Session]):
    """Email/password prompt. Dismisses with the new session."""

    def compose(self) -> ComposeResult:
        with Vertical(classes="dialog"):
            yield Label("[bold]Log in to Notekeeper[/]")
            yield Input(placeholder="Email", id="email")
            yield Input(placeholder="Password", password=True, id="password")
            yield Static("", id="login-error")
            with Horizontal(classes="dialog-buttons"):
                yield Button("Log in", variant="primary", id="login")
                yield Button("Quit", id="quit")

    @on(Button.Pressed, "#login")
    def on_login_pressed(self) -> None:
        self._submit()

    @on(Input.Submitted)
    def on_input_submitted(self) -> None:
        self._submit()

    @on(Button.Pressed, "#quit")
    def on_quit_pressed(self) -> None:
        self.app.exit()

    def _submit(self) -> None:
        email = self.query_one("#email", Input).value.strip()
        password = self.query_one("#password", Input).value
        self._login(email, password)

    @work(exclusive=True)
    async def _login(self, email: str, password: str) -> None:
        error_label = self.query_one("#login-error", Static)
        error_label.update("[dim]Logging in...[/]")
        try:
            async with AuthClient() as auth:
                session = await auth.login(email, password)
        except ApplicationError as e:
            error_label.update(f"[red]{escape(e.message)}[/]")
            return
        self.dismiss(session)


class ConfirmDeleteScreen(ModalScreen[bool]):
    """Scoped yes/no question asked before a note is deleted."""

    BINDINGS = [
        Binding("y", "answer(True)", "Yes"),
        Binding("n,escape", "answer(False)", "No"),
    ]

    def __init__(self, note: Note) -> None:
        super().__init__()
        self._note = note

    def compose(self) -> ComposeResult:
        with Vertical(classes="dialog"):
            yield Label(f"Delete [bold]{escape(self._note.title)}[/]? This cannot be undone.")
            with Horizontal(classes="dialog-buttons"):
                yield Button("Delete", variant="error", id="yes")
                yield Button("Cancel", id="no")

    @on(Button.Pressed, "#yes")
    def on_yes(self) -> None:
        self.dismiss(True)

    @on(Button.Pressed, "#no")
    def on_no(self) -> None:
        self.dismiss(False)

    def action_answer(self, answer: bool) -> None:
        self.dismiss(answer)


class NotesApp(App):
    """Terminal client for browsing and editing notes."""

    TITLE = "Notekeeper"
    SUB_TITLE = "Personal notes"

    CSS = """
    #main {
        height: 1fr;
    }

    #sidebar {
        width: 36;
        border: solid $primary;
    }

    #note-list {
        height: 1fr;
    }

    #detail {
        width: 1fr;
        border: solid $primary;
        padding: 0 1;
    }

    #viewer {
        height: 1fr;
    }

    #editor {
        display: none;
        height: 1fr;
    }

    #content {
        height: 1fr;
    }

    #editor-buttons, .dialog-buttons {
        height: auto;
        margin: 1 0 0 0;
    }

    #status {
        dock: bottom;
        height: 1;
        background: $surface;
        padding: 0 1;
    }

    LoginScreen, ConfirmDeleteScreen {
        align: center middle;
    }

    .dialog {
        width: 60;
        height: auto;
        border: thick $primary;
        background: $surface;
        padding: 1 2;
    }
    """

    BINDINGS = [
        Binding("n", "new_note", "New"),
        Binding("e", "edit_note", "Edit"),
        Binding("d", "delete_note", "Delete"),
        Binding("s", "share_note", "Share"),
        Binding("ctrl+s", "save", "Save", priority=True),
        Binding("escape", "cancel", "Cancel"),
        Binding("ctrl+r", "reload", "Reload"),
        Binding("ctrl+l", "logout", "Log out"),
        Binding("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, sessions: SessionController | None = None) -> None:
        super().__init__()
        self._sessions = sessions or SessionController(SessionStore())
        self._gateway: NotesGateway | None = None
        self._controller: NotesController | None = None
        self._seeded_generation: int | None = None
        self._list_lock = asyncio.Lock()

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main"):
            with Vertical(id="sidebar"):
                yield Input(placeholder="Search notes...", id="search")
                yield ListView(id="note-list")
            with Vertical(id="detail"):
                yield Static("", id="viewer")
                with Vertical(id="editor"):
                    yield Label("", id="editor-heading")
                    yield Input(placeholder="Title", id="title")
                    yield TextArea(id="content")
                    with Horizontal(id="editor-buttons"):
                        yield Button("Save", variant="success", id="save")
                        yield Button("Cancel", id="cancel")
        yield Static("", id="status")
        yield Footer()

    def on_mount(self) -> None:
        session = self._sessions.session
        if session is None:
            self._require_login()
        else:
            self._start(session)

    async def on_unmount(self) -> None:
        if self._gateway is not None:
            await self._gateway.close()

    # =========================================================================
    # Session
    # =========================================================================

    def _require_login(self) -> None:
        self.push_screen(LoginScreen(), callback=self._on_login)

    def _on_login(self, session: Session | None) -> None:
        if session is None:
            return
        self._sessions.start(session)
        self._start(session)

    def _start(self, session: Session) -> None:
        log_with_source(logger, "tui", "info", "Session opened", email=session.email)
        self._gateway = NotesGateway(session)
        self._controller = NotesController(self._gateway, self._sessions)
        self._seeded_generation = None
        self.sub_title = session.email or "Personal notes"
        self._load()

    async def _end_session(self) -> None:
        if self._gateway is not None:
            await self._gateway.close()
        if self._controller is not None:
            self._controller.detach()
        self._gateway = None
        self._controller = None
        await self.query_one("#note-list", ListView).clear()
        self.query_one("#viewer", Static).update("")
        self.query_one("#editor").display = False
        self.sub_title = "Personal notes"
        self._require_login()

    # =========================================================================
    # Rendering
    # =========================================================================

    async def _refresh_view(self) -> None:
        controller = self._controller
        if controller is None:
            return
        if controller.auth_required:
            self.notify(controller.error.message if controller.error else "Please log in again.", severity="error")
            await self._end_session()
            return

        state = controller.state
        await self._render_list(controller.visible_notes(), selected_id(state))

        form_open = is_form_open(state)
        self.query_one("#viewer", Static).display = not form_open
        self.query_one("#editor").display = form_open
        if form_open:
            if self._seeded_generation != controller.generation:
                self._seed_form(state)
                self._seeded_generation = controller.generation
        else:
            self._seeded_generation = None
            self.query_one("#viewer", Static).update(self._viewer_markup(state))

        self._render_status(controller)

    async def _render_list(self, notes: list[Note], current_id: int | None) -> None:
        list_view = self.query_one("#note-list", ListView)
        async with self._list_lock:
            await list_view.clear()
            if not notes:
                await list_view.append(ListItem(Label("[dim]No notes found.[/]")))
                return
            await list_view.extend([NoteItem(note) for note in notes])
            for index, note in enumerate(notes):
                if note.id == current_id:
                    list_view.index = index
                    break

    def _seed_form(self, state: ViewState) -> None:
        draft = draft_of(state)
        heading = "Create New Note" if isinstance(state, Creating) else "Edit Note"
        self.query_one("#editor-heading", Label).update(f"[bold]{heading}[/]")
        title = self.query_one("#title", Input)
        title.value = draft.title
        self.query_one("#content", TextArea).load_text(draft.content)
        title.focus()

    def _viewer_markup(self, state: ViewState) -> str:
        if not isinstance(state, Viewing):
            return (
                "[dim]No note selected. Choose one from the list "
                "or press [bold]n[/bold] to create a new one.[/]"
            )
        note = state.note
        lines = [f"[bold]{escape(note.title)}[/]"]
        if note.updated_at:
            lines.append(f"[dim]Last updated: {note.updated_at:%Y-%m-%d %H:%M}[/]")
        lines.append("")
        lines.append(escape(note.content))
        if note.share_link:
            lines.append("")
            lines.append(f"[green]Share link:[/] {escape(note.share_link)}")
        return "\n".join(lines)

    def _render_status(self, controller: NotesController) -> None:
        status = self.query_one("#status", Static)
        if controller.error is not None:
            status.update(f"[red]{escape(controller.error.message)}[/]")
        elif controller.notice:
            status.update(f"[green]{escape(controller.notice)}[/]")
        elif controller.cache.loaded:
            status.update(f"[dim]{len(controller.cache)} notes[/]")
        else:
            status.update("[dim]Loading notes...[/]")

    # =========================================================================
    # Widget events
    # =========================================================================

    @on(Input.Changed, "#search")
    async def on_search_changed(self, event: Input.Changed) -> None:
        if self._controller is None:
            return
        self._controller.set_query(event.value)
        await self._refresh_view()

    @on(ListView.Selected, "#note-list")
    async def on_note_selected(self, event: ListView.Selected) -> None:
        note_id = getattr(event.item, "note_id", None)
        if self._controller is None or note_id is None:
            return
        self._controller.clear_error()
        self._controller.select(note_id)
        await self._refresh_view()

    @on(Input.Changed, "#title")
    def on_title_changed(self) -> None:
        self._sync_draft()

    @on(TextArea.Changed, "#content")
    def on_content_changed(self) -> None:
        self._sync_draft()

    def _sync_draft(self) -> None:
        controller = self._controller
        if controller is None or not is_form_open(controller.state):
            return
        controller.edit_draft(
            self.query_one("#title", Input).value,
            self.query_one("#content", TextArea).text,
        )

    @on(Button.Pressed, "#save")
    def on_save_pressed(self) -> None:
        self.action_save()

    @on(Button.Pressed, "#cancel")
    async def on_cancel_pressed(self) -> None:
        await self.action_cancel()

    # =========================================================================
    # Actions
    # =========================================================================

    async def action_new_note(self) -> None:
        if self._controller is None:
            return
        self._controller.clear_error()
        self._controller.start_create()
        await self._refresh_view()

    async def action_edit_note(self) -> None:
        if self._controller is None:
            return
        self._controller.clear_error()
        self._controller.start_edit()
        await self._refresh_view()

    async def action_cancel(self) -> None:
        controller = self._controller
        if controller is None or not is_form_open(controller.state):
            return
        controller.cancel()
        await self._refresh_view()

    def action_save(self) -> None:
        if self._controller is None or not is_form_open(self._controller.state):
            return
        self._sync_draft()
        self._save()

    def action_delete_note(self) -> None:
        note_id = self._selected_note_id()
        if note_id is not None:
            self._delete(note_id)

    def action_share_note(self) -> None:
        note_id = self._selected_note_id()
        if note_id is not None:
            self._share(note_id)

    def action_reload(self) -> None:
        if self._controller is not None:
            self._load()

    async def action_logout(self) -> None:
        if self._controller is None:
            return
        self._sessions.logout()
        await self._end_session()

    def _selected_note_id(self) -> int | None:
        if self._controller is None:
            return None
        note_id = selected_id(self._controller.state)
        if note_id is None:
            self.notify("Select a note first.")
        return note_id

    # =========================================================================
    # Workers
    # =========================================================================

    @work
    async def _load(self) -> None:
        controller = self._controller
        if controller is None:
            return
        await self._refresh_view()
        await controller.load()
        await self._refresh_view()

    @work
    async def _save(self) -> None:
        controller = self._controller
        if controller is None:
            return
        note = await controller.save()
        if note is not None:
            self.notify(f"Saved '{note.title}'")
        await self._refresh_view()

    @work
    async def _delete(self, note_id: int) -> None:
        controller = self._controller
        if controller is None:
            return

        async def ask(note: Note) -> bool:
            return await self.push_screen_wait(ConfirmDeleteScreen(note))

        await controller.delete(note_id, confirm=ask)
        await self._refresh_view()

    @work
    async def _share(self, note_id: int) -> None:
        controller = self._controller
        if controller is None:
            return
        note = await controller.share(note_id)
        if note is not None and note.share_link:
            self.copy_to_clipboard(note.share_link)
            self.notify("Share link copied to clipboard")
        await self._refresh_view()


def run_tui(debug: bool = False) -> None:
    """Configure logging away from the screen and run the app."""
    setup_logging(level="DEBUG" if debug else None, enable_console=False)
    NotesApp().run()
