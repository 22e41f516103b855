"""
Session Management.

The bearer credential lives in an explicit Session object, created when the
user authenticates and destroyed at logout. It is threaded into the notes
gateway rather than read from ambient storage.

SessionStore persists the session as a JSON file so it survives between
runs. SessionController is the single place that creates, loads, and
forgets sessions, and that tells dependants to drop their state.
"""

import json
import os
from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from notekeeper.core.config import get_session_path
from notekeeper.core.exceptions import AuthError
from notekeeper.core.logging import get_logger, log_with_source

logger = get_logger(__name__)


@dataclass(frozen=True)
class Session:
    """An authenticated session. The token is never logged or displayed."""

    token: str
    email: str | None = None
    created_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
    )

    def __post_init__(self) -> None:
        if not self.token:
            raise AuthError("Session requires a non-empty token")

    def __repr__(self) -> str:
        return f"Session(email={self.email!r}, created_at={self.created_at!r})"

    @property
    def authorization(self) -> str:
        """Value for the Authorization header."""
        return f"Bearer {self.token}"


class SessionStore:
    """
    File-backed persistence for a single Session.

    The file is written with owner-only permissions. A corrupt or
    unreadable file is treated as no session.
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = path if path is not None else get_session_path()

    def load(self) -> Session | None:
        """Return the stored session, or None if there is none."""
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return Session(**data)
        except (OSError, ValueError, TypeError, AuthError) as e:
            log_with_source(
                logger, "session", "warning", "Ignoring unreadable session file",
                path=str(self.path), error=str(e),
            )
            return None

    def save(self, session: Session) -> None:
        """Persist the session, replacing any previous one."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(".tmp")
        tmp_path.unlink(missing_ok=True)
        # O_EXCL with 0600 so the token is never readable by others
        fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(json.dumps(asdict(session)))
        tmp_path.replace(self.path)

    def clear(self) -> None:
        """Remove the stored session if present."""
        self.path.unlink(missing_ok=True)


class SessionController:
    """
    Holds the current session and gates access to authenticated features.

    Callbacks registered with on_logout run whenever the session is
    forgotten, whether by explicit logout or because the server rejected
    the credential, so caches and view state can be cleared.

    Usage:
        sessions = SessionController(SessionStore())
        session = sessions.require()  # raises AuthError when logged out
    """

    def __init__(self, store: SessionStore) -> None:
        self._store = store
        self._session: Session | None = store.load()
        self._logout_callbacks: list[Callable[[], None]] = []

    @property
    def session(self) -> Session | None:
        """The current session, if authenticated."""
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    def require(self) -> Session:
        """
        Return the current session.

        Raises:
            AuthError: If no credential is held
        """
        if self._session is None:
            raise AuthError("Not logged in. Please log in first.")
        return self._session

    def start(self, session: Session) -> None:
        """Adopt a freshly issued session and persist it."""
        self._session = session
        self._store.save(session)
        log_with_source(logger, "session", "info", "Session started", email=session.email)

    def on_logout(self, callback: Callable[[], None]) -> None:
        """Register a callback run whenever the session is forgotten."""
        self._logout_callbacks.append(callback)

    def remove_logout_callback(self, callback: Callable[[], None]) -> None:
        """Unregister a callback added with on_logout. No-op if absent."""
        if callback in self._logout_callbacks:
            self._logout_callbacks.remove(callback)

    def logout(self) -> None:
        """Forget the session and clear dependants' state."""
        self._forget("logout")

    def expire(self) -> None:
        """Forget a session the server no longer accepts."""
        self._forget("expired")

    def _forget(self, reason: str) -> None:
        email = self._session.email if self._session else None
        self._session = None
        self._store.clear()
        for callback in list(self._logout_callbacks):
            callback()
        log_with_source(logger, "session", "info", "Session ended", reason=reason, email=email)
