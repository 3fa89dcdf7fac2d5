"""Async utility functions for resilient tracker calls.

This module provides:
- Custom exceptions for the triage error taxonomy
- Retry decorators with exponential backoff
- Pacing between tracker writes
- Cooperative cancellation for batch runs
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import ParamSpec, TypeVar

import structlog
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

log = structlog.get_logger()

P = ParamSpec("P")
T = TypeVar("T")


# =============================================================================
# Custom Exceptions
# =============================================================================


class TriageError(Exception):
    """Base exception for all triage errors."""


class ConfigurationError(TriageError):
    """Fatal pre-batch problem: missing credential or malformed batch input."""


class AnalysisError(TriageError):
    """Scoring or classifying a single issue failed."""

    def __init__(self, message: str, issue_number: int | None = None) -> None:
        super().__init__(message)
        self.issue_number = issue_number


class MutationError(TriageError):
    """Applying a label change or posting a comment failed."""


class LabelNotFoundError(MutationError):
    """The label to remove is not on the issue. Treated as benign."""


# =============================================================================
# Retry Decorator
# =============================================================================


def _log_retry(retry_state: RetryCallState) -> None:
    """Log retry attempts for debugging."""
    if retry_state.outcome is None:
        return

    exception = retry_state.outcome.exception()
    if exception:
        log.warning(
            "retrying_operation",
            attempt=retry_state.attempt_number,
            exception_type=type(exception).__name__,
            exception_message=str(exception),
            wait_time=retry_state.next_action.sleep if retry_state.next_action else 0,
        )


def create_retry(
    retry_on: tuple[type[Exception], ...],
    max_attempts: int = 3,
    min_wait: float = 1.0,
    max_wait: float = 30.0,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Create a customized retry decorator.

    Args:
        retry_on: Transient exception types worth retrying.
        max_attempts: Maximum number of retry attempts.
        min_wait: Minimum wait time between retries (seconds).
        max_wait: Maximum wait time between retries (seconds).

    Returns:
        A retry decorator configured with the given parameters.
    """
    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=1, min=min_wait, max=max_wait),
        retry=retry_if_exception_type(retry_on),
        before_sleep=_log_retry,
        reraise=True,
    )


# =============================================================================
# Pacing
# =============================================================================


class FixedDelayPacer:
    """Sleeps a fixed delay between issues to stay under tracker rate limits.

    Example:
        pacer = FixedDelayPacer(0.1)
        for issue in issues:
            await handle(issue)
            await pacer.pause()
    """

    def __init__(self, delay: float = 0.1) -> None:
        if delay < 0:
            raise ValueError("Pacing delay cannot be negative")
        self._delay = delay

    @property
    def delay(self) -> float:
        """Return the configured delay in seconds."""
        return self._delay

    async def pause(self) -> None:
        """Wait before the next tracker interaction."""
        if self._delay > 0:
            await asyncio.sleep(self._delay)


# =============================================================================
# Cancellation Utilities
# =============================================================================


class CancellationToken:
    """Token for cooperative cancellation of a batch run.

    Example:
        token = CancellationToken()
        result = await orchestrator.run(issues, cancel_token=token)

        # From a signal handler
        token.cancel()
    """

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def is_cancelled(self) -> bool:
        """Check if cancellation has been requested."""
        return self._cancelled

    def cancel(self) -> None:
        """Request cancellation."""
        self._cancelled = True
