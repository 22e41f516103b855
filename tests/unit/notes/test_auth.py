"""Unit tests for the authentication client."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from notekeeper.core.exceptions import AuthError, FetchError, NotFoundError, ValidationError
from notekeeper.notes.auth import AuthClient


@pytest.fixture
def auth() -> AuthClient:
    return AuthClient(base_url="http://test:4000", users_path="/api/users")


class TestLogin:
    """Tests for AuthClient.login."""

    @pytest.mark.asyncio
    async def test_login_returns_session(self, auth, response_factory) -> None:
        with patch.object(httpx.AsyncClient, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = response_factory(200, {"token": "abc"}, method="POST")

            session = await auth.login("me@example.com", "secret")

            assert session.token == "abc"
            assert session.email == "me@example.com"
            mock_request.assert_awaited_once_with(
                "POST", "/api/users/login",
                json={"email": "me@example.com", "password": "secret"},
            )
        await auth.close()

    @pytest.mark.asyncio
    async def test_empty_fields_rejected_locally(self, auth) -> None:
        with patch.object(httpx.AsyncClient, "request", new_callable=AsyncMock) as mock_request:
            with pytest.raises(ValidationError) as exc_info:
                await auth.login("", "secret")

            assert exc_info.value.message == "Please fill in all fields"
            assert exc_info.value.details["missing_fields"] == ["email"]
            mock_request.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_wrong_password(self, auth, response_factory) -> None:
        with patch.object(httpx.AsyncClient, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = response_factory(401, {}, method="POST")

            with pytest.raises(AuthError) as exc_info:
                await auth.login("me@example.com", "wrong")
            assert exc_info.value.message == "Invalid email or password"
        await auth.close()

    @pytest.mark.asyncio
    async def test_unknown_user(self, auth, response_factory) -> None:
        with patch.object(httpx.AsyncClient, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = response_factory(404, {}, method="POST")

            with pytest.raises(NotFoundError) as exc_info:
                await auth.login("nobody@example.com", "secret")
            assert exc_info.value.message == "User does not exist"
        await auth.close()

    @pytest.mark.asyncio
    async def test_missing_token(self, auth, response_factory) -> None:
        with patch.object(httpx.AsyncClient, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = response_factory(200, {"user": "me"}, method="POST")

            with pytest.raises(AuthError) as exc_info:
                await auth.login("me@example.com", "secret")
            assert exc_info.value.message == "No token received from server"
        await auth.close()

    @pytest.mark.asyncio
    async def test_server_down(self, auth) -> None:
        with patch.object(httpx.AsyncClient, "request", new_callable=AsyncMock) as mock_request:
            mock_request.side_effect = httpx.ConnectError("refused")

            with pytest.raises(FetchError):
                await auth.login("me@example.com", "secret")
        await auth.close()


class TestRegister:
    """Tests for AuthClient.register."""

    @pytest.mark.asyncio
    async def test_passwords_must_match(self, auth) -> None:
        with patch.object(httpx.AsyncClient, "request", new_callable=AsyncMock) as mock_request:
            with pytest.raises(ValidationError) as exc_info:
                await auth.register("me@example.com", "one", "two")

            assert exc_info.value.message == "Passwords do not match"
            mock_request.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_register_with_token_logs_in(self, auth, response_factory) -> None:
        with patch.object(httpx.AsyncClient, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = response_factory(201, {"token": "fresh"}, method="POST")

            session = await auth.register("me@example.com", "secret", "secret")

            assert session is not None
            assert session.token == "fresh"
            mock_request.assert_awaited_once_with(
                "POST", "/api/users/register",
                json={"email": "me@example.com", "password": "secret"},
            )
        await auth.close()

    @pytest.mark.asyncio
    async def test_register_without_token(self, auth, response_factory) -> None:
        with patch.object(httpx.AsyncClient, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = response_factory(201, method="POST")

            assert await auth.register("me@example.com", "secret", "secret") is None
        await auth.close()

    @pytest.mark.asyncio
    async def test_register_rejected_by_server(self, auth, response_factory) -> None:
        with patch.object(httpx.AsyncClient, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = response_factory(
                400, {"message": "Email already registered"}, method="POST",
            )

            with pytest.raises(ValidationError) as exc_info:
                await auth.register("me@example.com", "secret", "secret")
            assert exc_info.value.message == "Email already registered"
        await auth.close()
