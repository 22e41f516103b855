"""
Authentication Client.

Exchanges email and password for a bearer token and wraps it in a Session.
Only presence checks are done locally; credential rules belong to the server.
"""

import httpx

from notekeeper.core.config import get_app_config
from notekeeper.core.exceptions import AuthError, NotFoundError, ValidationError
from notekeeper.core.logging import get_logger, log_with_source
from notekeeper.notes.client import APIClient, decode_json
from notekeeper.notes.session import Session

logger = get_logger(__name__)


def _require_fields(**fields: str) -> None:
    missing = [name for name, value in fields.items() if not value]
    if missing:
        raise ValidationError(
            "Please fill in all fields",
            details={"missing_fields": missing},
        )


class AuthClient(APIClient):
    """
    Login and registration against the users API.

    Usage:
        async with AuthClient() as auth:
            session = await auth.login("me@example.com", "secret")
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        users_path: str | None = None,
    ) -> None:
        super().__init__(base_url=base_url, timeout=timeout)
        if users_path is None:
            users_path = get_app_config().application.api.users_path
        self.users_path = users_path.rstrip("/")

    async def login(self, email: str, password: str) -> Session:
        """
        Authenticate and return a new session.

        Raises:
            ValidationError: If email or password is empty
            AuthError: If the credentials are rejected or no token is returned
            NotFoundError: If no account exists for the email
        """
        _require_fields(email=email, password=password)

        try:
            response = await self.send(
                "POST", f"{self.users_path}/login", "log in",
                json={"email": email, "password": password},
            )
        except AuthError as e:
            raise AuthError("Invalid email or password") from e
        except NotFoundError as e:
            raise NotFoundError("User does not exist") from e

        session = self._session_from(response, email)
        if session is None:
            raise AuthError("No token received from server")

        log_with_source(logger, "session", "info", "Logged in", email=email)
        return session

    async def register(self, email: str, password: str, confirm_password: str) -> Session | None:
        """
        Create an account.

        Returns:
            A session when the server logs the new user in directly, else None

        Raises:
            ValidationError: If a field is empty or the passwords differ
        """
        _require_fields(email=email, password=password, confirm_password=confirm_password)
        if password != confirm_password:
            raise ValidationError(
                "Passwords do not match",
                details={"confirm_password": "Must match password"},
            )

        response = await self.send(
            "POST", f"{self.users_path}/register", "register",
            json={"email": email, "password": password},
        )

        log_with_source(logger, "session", "info", "Registered", email=email)
        return self._session_from(response, email)

    def _session_from(self, response: httpx.Response, email: str) -> Session | None:
        if not response.content:
            return None
        data = decode_json(response, "read token")
        token = data.get("token") if isinstance(data, dict) else None
        if not isinstance(token, str) or not token:
            return None
        return Session(token=token, email=email)
