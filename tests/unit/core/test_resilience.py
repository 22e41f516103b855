"""Unit tests for notekeeper.core.resilience."""

from unittest.mock import MagicMock, patch

import httpx
import pytest

from notekeeper.core.resilience import log_retry, read_retrying


class TestLogRetry:
    def test_emits_structured_event(self):
        """log_retry should emit a warning with retry metadata."""
        mock_state = MagicMock()
        mock_state.attempt_number = 2
        mock_state.fn.__name__ = "list_notes"
        mock_state.outcome_timestamp = 1000.5
        mock_state.start_time = 1000.0
        mock_state.outcome.failed = True
        mock_state.outcome.exception.return_value = httpx.ConnectError("fail")

        with patch("notekeeper.core.resilience.logger") as mock_logger:
            log_retry(mock_state)
            mock_logger.warning.assert_called_once()
            call_args = mock_logger.warning.call_args
            assert "list_notes" in call_args[0][0]
            assert call_args[1]["extra"]["resilience_event"] == "retry_attempt"
            assert call_args[1]["extra"]["attempt"] == 2
            assert call_args[1]["extra"]["duration_ms"] == 500

    def test_handles_no_outcome(self):
        """log_retry should not crash if outcome is None."""
        mock_state = MagicMock()
        mock_state.attempt_number = 1
        mock_state.fn = None
        mock_state.outcome_timestamp = None
        mock_state.start_time = None
        mock_state.outcome = None

        with patch("notekeeper.core.resilience.logger") as mock_logger:
            log_retry(mock_state)
            call_args = mock_logger.warning.call_args
            assert call_args[1]["extra"]["dependency"] == "unknown"
            assert call_args[1]["extra"]["duration_ms"] is None
            assert call_args[1]["extra"]["error"] is None

    def test_dependency_names_the_operation(self):
        """An explicit operation name should replace the missing function name."""
        mock_state = MagicMock()
        mock_state.attempt_number = 1
        mock_state.fn = None
        mock_state.outcome_timestamp = None
        mock_state.start_time = None
        mock_state.outcome = None

        with patch("notekeeper.core.resilience.logger") as mock_logger:
            log_retry(mock_state, dependency="fetch notes")
            call_args = mock_logger.warning.call_args
            assert call_args[0][0] == "Retrying fetch notes (attempt 1)"
            assert call_args[1]["extra"]["dependency"] == "fetch notes"


class TestReadRetrying:
    def test_uses_configured_attempts(self):
        """Unset arguments should come from application.yaml."""
        retrying = read_retrying()
        assert retrying.stop.max_attempt_number == 3

    def test_explicit_arguments_win(self):
        retrying = read_retrying(max_attempts=5, backoff_multiplier=0, backoff_max=0)
        assert retrying.stop.max_attempt_number == 5

    @pytest.mark.asyncio
    async def test_retries_transport_errors_then_succeeds(self):
        calls = []

        with patch("notekeeper.core.resilience.logger") as mock_logger:
            async for attempt in read_retrying(max_attempts=3, backoff_multiplier=0, backoff_max=0):
                with attempt:
                    calls.append(1)
                    if len(calls) < 3:
                        raise httpx.ConnectError("refused")

            assert len(calls) == 3
            assert mock_logger.warning.call_count == 2

    @pytest.mark.asyncio
    async def test_does_not_retry_other_errors(self):
        calls = []

        with pytest.raises(ValueError):
            async for attempt in read_retrying(max_attempts=3, backoff_multiplier=0, backoff_max=0):
                with attempt:
                    calls.append(1)
                    raise ValueError("bad payload")

        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_reraises_last_transport_error(self):
        with pytest.raises(httpx.ReadTimeout):
            async for attempt in read_retrying(max_attempts=2, backoff_multiplier=0, backoff_max=0):
                with attempt:
                    raise httpx.ReadTimeout("slow")

    @pytest.mark.asyncio
    async def test_retry_events_carry_operation_name(self):
        calls = []

        with patch("notekeeper.core.resilience.logger") as mock_logger:
            async for attempt in read_retrying(
                "fetch notes", max_attempts=2, backoff_multiplier=0, backoff_max=0,
            ):
                with attempt:
                    calls.append(1)
                    if len(calls) < 2:
                        raise httpx.ConnectError("refused")

            call_args = mock_logger.warning.call_args
            assert call_args[1]["extra"]["dependency"] == "fetch notes"
