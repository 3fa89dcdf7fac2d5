"""Abstract interfaces for the issue tracker collaborators."""

from typing import Protocol

from ..models.issue import IssueRecord


class IssueSource(Protocol):
    """Supplies the batch of issues to triage."""

    async def list_issues(self, limit: int = 100) -> list[IssueRecord]:
        """
        Fetch open issues.

        Args:
            limit: Maximum number of issues to return

        Returns:
            Issues in tracker order

        Raises:
            IssueFetchError: If the tracker cannot be read
        """
        ...


class MutationPort(Protocol):
    """Write operations against the tracker.

    Calls are best-effort: the orchestrator catches failures per issue,
    so implementations should raise rather than swallow.
    """

    async def add_labels(self, issue_number: int, labels: list[str]) -> None:
        """
        Add labels to an issue.

        Raises:
            MutationError: If the labels could not be applied
        """
        ...

    async def remove_label(self, issue_number: int, label: str) -> None:
        """
        Remove one label from an issue.

        Raises:
            LabelNotFoundError: If the issue does not carry the label
            MutationError: For any other failure
        """
        ...

    async def create_comment(self, issue_number: int, text: str) -> None:
        """
        Post a comment on an issue.

        Raises:
            MutationError: If the comment could not be created
        """
        ...


class PacingPolicy(Protocol):
    """Delay applied between issues to respect tracker rate limits."""

    async def pause(self) -> None:
        """Wait before the next issue is processed."""
        ...
