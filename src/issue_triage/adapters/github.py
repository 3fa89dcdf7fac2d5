"""GitHub issue tracker adapter using the gh CLI.

This module implements the IssueSource and MutationPort protocols for
GitHub using the SafeGHCli wrapper, which ensures secure subprocess
execution.

Security features:
- Repository and label names validated before use
- Secret redaction applied to comment bodies before posting
- Timeout enforcement on all operations
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, TypeVar

import structlog

from ..config.schema import GitHubConfig, RetryConfig
from ..models.issue import IssueRecord
from ..utils.async_helpers import (
    LabelNotFoundError,
    MutationError,
    TriageError,
    create_retry,
)
from ..utils.logging import LogEventNames
from ..utils.safe_subprocess import (
    AuthenticationError,
    CommandTimeoutError,
    GHCliError,
    NotFoundError,
    RateLimitError,
    SafeGHCli,
)
from ..utils.security import SecretRedactor, SecurityError

if TYPE_CHECKING:
    from ..utils.safe_subprocess import CommandResult

log = structlog.get_logger()

T = TypeVar("T")


class IssueFetchError(TriageError):
    """Raised when the issue batch cannot be retrieved."""


class GitHubTracker:
    """GitHub tracker implementing the IssueSource and MutationPort protocols.

    Transient failures (rate limits, timeouts) are retried with exponential
    backoff before being reported to the caller.

    Example:
        config = GitHubConfig(repo="owner/repo")
        tracker = GitHubTracker(config, token=token)

        issues = await tracker.list_issues(limit=50)
        await tracker.add_labels(issues[0].number, ["bug", "priority-high"])
    """

    def __init__(
        self,
        config: GitHubConfig,
        token: str | None = None,
        retry: RetryConfig | None = None,
        redactor: SecretRedactor | None = None,
    ) -> None:
        """Initialize the GitHub tracker.

        Args:
            config: GitHub-specific configuration.
            token: Token for gh. Falls back to config.token, then gh's own login.
            retry: Backoff settings for transient failures.
            redactor: Secret redactor for comment bodies. If None, creates default.
        """
        retry = retry or RetryConfig()
        self._config = config
        self._repo = config.repo
        self._redactor = redactor or SecretRedactor()
        self._gh = SafeGHCli(
            gh_path=config.gh_path,
            token=token or config.token,
            default_timeout=config.command_timeout,
        )
        self._retry = create_retry(
            max_attempts=retry.max_attempts,
            min_wait=retry.initial_delay,
            max_wait=retry.max_delay,
            retry_on=(RateLimitError, CommandTimeoutError),
        )

    @property
    def repo(self) -> str:
        """Repository this tracker operates on."""
        return self._repo

    async def _call(self, func: Callable[..., Awaitable[T]], *args: Any) -> T:
        """Run a gh operation with retries on transient failures."""

        @self._retry
        async def attempt() -> T:
            return await func(*args)

        return await attempt()

    def _parse_issue_json(self, data: dict[str, Any]) -> IssueRecord:
        """Parse issue JSON from gh CLI into an IssueRecord.

        Args:
            data: JSON data from gh CLI.

        Returns:
            IssueRecord instance.
        """
        labels_data = data.get("labels", [])
        if isinstance(labels_data, list):
            labels = tuple(
                label.get("name", "") if isinstance(label, dict) else str(label)
                for label in labels_data
            )
        else:
            labels = ()

        comments = data.get("comments", [])
        if isinstance(comments, list):
            comment_count = len(comments)
        elif isinstance(comments, int):
            comment_count = comments
        else:
            comment_count = 0

        return IssueRecord(
            number=int(data.get("number", 0)),
            title=data.get("title") or "",
            body=data.get("body") or "",
            labels=tuple(label for label in labels if label),
            comment_count=comment_count,
        )

    async def list_issues(self, limit: int = 100) -> list[IssueRecord]:
        """Fetch issues in the configured state.

        Args:
            limit: Maximum number of issues to return.

        Returns:
            Issues in the order gh lists them.

        Raises:
            IssueFetchError: If the issues cannot be retrieved.
        """
        try:
            result: CommandResult = await self._call(
                self._gh.list_issues, self._repo, self._config.state, limit
            )
            issues_data = result.json()
        except RateLimitError as e:
            log.warning(LogEventNames.RATE_LIMIT_HIT, repo=self._repo, operation="list_issues")
            raise IssueFetchError(f"Rate limit exceeded listing issues: {e}") from e
        except AuthenticationError as e:
            log.error("auth_error", repo=self._repo, error=str(e))
            raise IssueFetchError(f"Authentication failed: {e}") from e
        except (GHCliError, SecurityError) as e:
            log.error("list_issues_error", repo=self._repo, error=str(e))
            raise IssueFetchError(f"Failed to list issues: {e}") from e

        if not isinstance(issues_data, list):
            raise IssueFetchError(f"Unexpected gh output for {self._repo}: {type(issues_data)}")

        issues = [self._parse_issue_json(item) for item in issues_data]
        log.info("issues_fetched", repo=self._repo, count=len(issues), state=self._config.state)
        return issues

    async def add_labels(self, issue_number: int, labels: list[str]) -> None:
        """Add labels to an issue in one call.

        Raises:
            MutationError: If the labels could not be applied.
        """
        try:
            await self._call(self._gh.add_labels, self._repo, issue_number, labels)
        except RateLimitError as e:
            log.warning(LogEventNames.RATE_LIMIT_HIT, repo=self._repo, operation="add_labels")
            raise MutationError(f"Rate limit exceeded adding labels: {e}") from e
        except (GHCliError, SecurityError) as e:
            raise MutationError(f"Failed to add labels to #{issue_number}: {e}") from e

    async def remove_label(self, issue_number: int, label: str) -> None:
        """Remove one label from an issue.

        Raises:
            LabelNotFoundError: If gh reports the label as not found.
            MutationError: For any other failure.
        """
        try:
            await self._call(self._gh.remove_label, self._repo, issue_number, label)
        except NotFoundError as e:
            raise LabelNotFoundError(f"Label {label!r} not found on #{issue_number}") from e
        except RateLimitError as e:
            log.warning(LogEventNames.RATE_LIMIT_HIT, repo=self._repo, operation="remove_label")
            raise MutationError(f"Rate limit exceeded removing label: {e}") from e
        except (GHCliError, SecurityError) as e:
            raise MutationError(f"Failed to remove {label!r} from #{issue_number}: {e}") from e

    async def create_comment(self, issue_number: int, text: str) -> None:
        """Post a comment on an issue.

        Security: The comment body is redacted to remove secrets before
        being sent to GitHub.

        Raises:
            MutationError: If the comment could not be created.
        """
        try:
            body = self._redactor.redact(text)
        except Exception as e:
            log.error("redaction_failed", error=str(e))
            raise MutationError(f"Failed to redact comment for #{issue_number}: {e}") from e

        try:
            await self._call(self._gh.create_comment, self._repo, issue_number, body)
        except RateLimitError as e:
            log.warning(LogEventNames.RATE_LIMIT_HIT, repo=self._repo, operation="create_comment")
            raise MutationError(f"Rate limit exceeded posting comment: {e}") from e
        except (GHCliError, SecurityError) as e:
            raise MutationError(f"Failed to comment on #{issue_number}: {e}") from e
