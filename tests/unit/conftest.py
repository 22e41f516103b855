"""
Unit Test Fixtures.

Fixtures for unit tests - the notes API is always mocked.
Unit tests should be fast and isolated, never touching the network.
"""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import pytest_asyncio

from notekeeper.notes.controller import NotesController
from notekeeper.notes.gateway import NotesGateway
from notekeeper.notes.schemas import Note
from notekeeper.notes.session import Session, SessionController, SessionStore


# =============================================================================
# Session Fixtures
# =============================================================================


@pytest.fixture
def session() -> Session:
    """A logged-in session."""
    return Session(token="test-token", email="me@example.com")


@pytest.fixture
def session_store(tmp_path: Path) -> SessionStore:
    """Session store writing into the test's temp directory."""
    return SessionStore(tmp_path / "session.json")


@pytest.fixture
def sessions(session_store: SessionStore, session: Session) -> SessionController:
    """Session controller with an active session."""
    controller = SessionController(session_store)
    controller.start(session)
    return controller


# =============================================================================
# Gateway Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_gateway(sample_notes: list[Note]) -> MagicMock:
    """
    Mock notes gateway for controller tests.

    list_notes returns sample_notes; the write operations must be given a
    return_value or side_effect by the test that uses them.

    Usage:
        async def test_create(mock_gateway, controller):
            mock_gateway.create_note.return_value = make_note(4)
    """
    gateway = MagicMock(spec=NotesGateway)
    gateway.list_notes = AsyncMock(return_value=list(sample_notes))
    gateway.create_note = AsyncMock()
    gateway.update_note = AsyncMock()
    gateway.delete_note = AsyncMock(return_value=None)
    gateway.share_note = AsyncMock()
    gateway.close = AsyncMock()
    return gateway


@pytest.fixture
def controller(mock_gateway: MagicMock, sessions: SessionController) -> NotesController:
    """Controller over the mock gateway, not yet loaded."""
    return NotesController(mock_gateway, sessions)


@pytest_asyncio.fixture
async def loaded_controller(controller: NotesController) -> NotesController:
    """Controller with sample_notes already loaded."""
    await controller.load()
    return controller


# =============================================================================
# HTTP Response Helpers
# =============================================================================


def make_response(
    status_code: int,
    json: object | None = None,
    method: str = "GET",
    url: str = "http://test:4000/api/notes",
    content: bytes | None = None,
) -> httpx.Response:
    """Build a real httpx.Response bound to a request."""
    request = httpx.Request(method, url)
    if content is not None:
        return httpx.Response(status_code, content=content, request=request)
    if json is None:
        return httpx.Response(status_code, request=request)
    return httpx.Response(status_code, json=json, request=request)


@pytest.fixture
def response_factory():
    """Expose make_response to tests as a fixture."""
    return make_response
