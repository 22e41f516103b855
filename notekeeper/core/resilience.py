"""
Resilience Infrastructure.

Retry callback and the retry policy applied to idempotent notes API reads.
Writes (create, update, delete, share) are never retried: a retried write
could be applied twice by the server.

Usage:
    from notekeeper.core.resilience import read_retrying

    async for attempt in read_retrying("fetch notes"):
        with attempt:
            response = await client.get(url)

Retry events are logged with a standardized set of fields:

    jq 'select(.resilience_event != null)' logs/notekeeper.jsonl
"""

from functools import partial
from typing import Any

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from notekeeper.core.config import get_app_config
from notekeeper.core.logging import get_logger

logger = get_logger(__name__)


def log_retry(retry_state: Any, dependency: str | None = None) -> None:
    """Tenacity before_sleep callback that emits structured retry events.

    Args:
        retry_state: tenacity.RetryCallState instance
        dependency: Name of the retried operation. Falls back to the wrapped
            function name, which is absent when AsyncRetrying is iterated.
    """
    duration_ms = None
    if retry_state.outcome_timestamp and retry_state.start_time:
        duration_ms = round(
            (retry_state.outcome_timestamp - retry_state.start_time) * 1000
        )

    error = None
    if retry_state.outcome and retry_state.outcome.failed:
        error = str(retry_state.outcome.exception())

    fn_name = dependency or getattr(retry_state.fn, "__name__", "unknown")

    logger.warning(
        f"Retrying {fn_name} (attempt {retry_state.attempt_number})",
        extra={
            "resilience_event": "retry_attempt",
            "dependency": fn_name,
            "attempt": retry_state.attempt_number,
            "duration_ms": duration_ms,
            "error": error,
        },
    )


def read_retrying(
    operation: str | None = None,
    max_attempts: int | None = None,
    backoff_multiplier: float | None = None,
    backoff_max: float | None = None,
) -> AsyncRetrying:
    """Build the retry controller for idempotent reads.

    Retries only transport-level failures (connection refused, timeouts);
    HTTP error statuses are answers from the server and are not retried.
    Unset arguments are read from the retry section of application.yaml.
    The operation name labels the retry events in the log.

    Usage:
        async for attempt in read_retrying("fetch notes"):
            with attempt:
                response = await client.get(path)
    """
    if max_attempts is None or backoff_multiplier is None or backoff_max is None:
        retry_config = get_app_config().application.retry
        max_attempts = max_attempts if max_attempts is not None else retry_config.max_attempts
        backoff_multiplier = (
            backoff_multiplier if backoff_multiplier is not None
            else retry_config.backoff_multiplier
        )
        backoff_max = backoff_max if backoff_max is not None else retry_config.backoff_max

    return AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=backoff_multiplier, max=backoff_max),
        retry=retry_if_exception_type(httpx.TransportError),
        before_sleep=partial(log_retry, dependency=operation),
        reraise=True,
    )
