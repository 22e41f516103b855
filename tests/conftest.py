"""
Root Pytest Fixtures.

Shared fixtures available to all test types.

Tests run from the project root so that .project_root and
config/settings/*.yaml resolve exactly as they do for the CLI.
"""

from collections.abc import Callable, Generator
from datetime import datetime, timezone

import pytest

from notekeeper.core.config import get_app_config, get_settings
from notekeeper.notes.schemas import Note


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def fresh_config() -> Generator[None, None, None]:
    """
    Drop cached settings before and after a test.

    Use together with monkeypatch.setenv("NOTEKEEPER_...") so overrides
    are picked up and do not leak into other tests.
    """
    get_settings.cache_clear()
    get_app_config.cache_clear()
    yield
    get_settings.cache_clear()
    get_app_config.cache_clear()


# =============================================================================
# Note Fixtures
# =============================================================================


@pytest.fixture
def make_note() -> Callable[..., Note]:
    """
    Factory for server-confirmed notes.

    Usage:
        def test_something(make_note):
            note = make_note(3, title="Groceries")
    """

    def _make(
        note_id: int | None = 1,
        title: str | None = None,
        content: str | None = None,
        share_link: str | None = None,
    ) -> Note:
        stamp = datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)
        return Note(
            id=note_id,
            title=title if title is not None else f"Note {note_id}",
            content=content if content is not None else f"Content of note {note_id}",
            created_at=stamp,
            updated_at=stamp,
            share_link=share_link,
        )

    return _make


@pytest.fixture
def sample_notes(make_note: Callable[..., Note]) -> list[Note]:
    """Three notes in server order (newest first)."""
    return [
        make_note(3, title="Groceries", content="milk, eggs, bread"),
        make_note(2, title="Meeting notes", content="Discuss the Q3 roadmap"),
        make_note(1, title="Ideas", content="Write a CLI for my notes"),
    ]
