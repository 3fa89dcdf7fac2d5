"""Safe subprocess wrapper for gh CLI operations.

This module provides a secure wrapper around the GitHub CLI (gh) that:
- Never uses shell=True
- Validates repository and label names before execution
- Enforces timeouts on all operations
- Parses common error conditions into specific exceptions
"""

from __future__ import annotations

import asyncio
import json
import os
import shutil
import subprocess
from dataclasses import dataclass
from typing import Any

import structlog

from issue_triage.utils.security import SecurityError, validate_label_name, validate_repo_name

log = structlog.get_logger()


class GHCliError(Exception):
    """Base exception for gh CLI errors."""


class AuthenticationError(GHCliError):
    """Raised when gh CLI authentication fails."""


class RateLimitError(GHCliError):
    """Raised when GitHub rate limit is exceeded."""

    def __init__(self, message: str, retry_after: int | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class NotFoundError(GHCliError):
    """Raised when a resource is not found."""


class PermissionDeniedError(GHCliError):
    """Raised when permission is denied."""


class CommandTimeoutError(GHCliError):
    """Raised when a command times out."""


ISSUE_JSON_FIELDS = "number,title,body,labels,comments"


@dataclass
class CommandResult:
    """Result of a gh CLI command execution."""

    stdout: str
    stderr: str
    return_code: int
    command: list[str]

    @property
    def success(self) -> bool:
        """Return True if the command succeeded."""
        return self.return_code == 0

    def json(self) -> Any:
        """Parse stdout as JSON.

        Raises:
            ValueError: If stdout is not valid JSON.
        """
        return json.loads(self.stdout)


class SafeGHCli:
    """Safe wrapper for the gh operations a triage run needs.

    Example:
        gh = SafeGHCli(token=os.environ["GITHUB_TOKEN"])
        result = await gh.list_issues("owner/repo", limit=50)
        issues = result.json()
        await gh.add_labels("owner/repo", 12, ["bug", "priority-high"])
    """

    DEFAULT_TIMEOUT = 30

    def __init__(
        self,
        gh_path: str | None = None,
        token: str | None = None,
        default_timeout: int = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize the SafeGHCli wrapper.

        Args:
            gh_path: Path to the gh CLI binary. If None, uses PATH.
            token: Token exported to gh as GH_TOKEN. If None, gh's own login is used.
            default_timeout: Default timeout for commands in seconds.

        Raises:
            GHCliError: If gh CLI is not found.
        """
        resolved_path = gh_path or shutil.which("gh")
        if not resolved_path:
            raise GHCliError("gh CLI not found. Please install it from https://cli.github.com")

        self._gh_path: str = resolved_path
        self._token = token
        self._default_timeout = default_timeout

    def _validate_repo(self, repo: str) -> None:
        if not validate_repo_name(repo):
            log.warning("invalid_repo_name_rejected", repo=repo)
            raise SecurityError(f"Invalid repository name: {repo}")

    def _validate_labels(self, labels: list[str]) -> None:
        for label in labels:
            if not validate_label_name(label):
                log.warning("invalid_label_name_rejected", label=label)
                raise SecurityError(f"Invalid label name: {label!r}")

    def _build_env(self) -> dict[str, str] | None:
        if not self._token:
            return None
        return {**os.environ, "GH_TOKEN": self._token}

    def _parse_error(self, result: CommandResult) -> GHCliError:
        """Map a failed command result onto a specific error type."""
        combined = (result.stderr + result.stdout).lower()
        detail = result.stderr or result.stdout

        if "authentication" in combined or "not logged in" in combined:
            return AuthenticationError(f"Authentication failed: {detail}")

        if "rate limit" in combined:
            return RateLimitError(f"Rate limit exceeded: {detail}")

        if "not found" in combined or "could not resolve" in combined:
            return NotFoundError(f"Resource not found: {detail}")

        if "permission denied" in combined or "forbidden" in combined:
            return PermissionDeniedError(f"Permission denied: {detail}")

        return GHCliError(f"Command failed: {detail}")

    async def _run_command(
        self,
        args: list[str],
        timeout: int | None = None,
        check: bool = True,
    ) -> CommandResult:
        """Run a gh CLI command safely.

        Args:
            args: Command arguments (without 'gh' prefix).
            timeout: Timeout in seconds (uses default if None).
            check: If True, raise an exception on failure.

        Raises:
            CommandTimeoutError: If the command times out.
            GHCliError: If check=True and the command fails.
        """
        cmd = [self._gh_path, *args]
        effective_timeout = timeout or self._default_timeout
        env = self._build_env()

        log.debug("executing_gh_command", command=cmd[:4], timeout=effective_timeout)

        def run_sync() -> subprocess.CompletedProcess[str]:
            return subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=effective_timeout,
                shell=False,
                env=env,
            )

        try:
            proc = await asyncio.wait_for(
                asyncio.to_thread(run_sync),
                timeout=effective_timeout + 5,
            )
        except (subprocess.TimeoutExpired, TimeoutError) as e:
            log.error("command_timeout", command=cmd[:4], timeout=effective_timeout)
            raise CommandTimeoutError(
                f"Command timed out after {effective_timeout}s: {' '.join(cmd[:4])}"
            ) from e

        result = CommandResult(
            stdout=proc.stdout,
            stderr=proc.stderr,
            return_code=proc.returncode,
            command=cmd,
        )

        if check and not result.success:
            raise self._parse_error(result)

        return result

    async def list_issues(
        self,
        repo: str,
        state: str = "open",
        limit: int = 100,
    ) -> CommandResult:
        """List issues with the fields triage needs.

        Raises:
            SecurityError: If repo name is invalid.
            GHCliError: If the command fails.
        """
        self._validate_repo(repo)

        if state not in ("open", "closed", "all"):
            state = "open"
        limit = min(max(1, limit), 1000)

        args = [
            "issue",
            "list",
            "--repo",
            repo,
            "--state",
            state,
            "--limit",
            str(limit),
            "--json",
            ISSUE_JSON_FIELDS,
        ]
        return await self._run_command(args)

    async def add_labels(self, repo: str, number: int, labels: list[str]) -> CommandResult:
        """Add labels to an issue in one call."""
        self._validate_repo(repo)
        self._validate_labels(labels)

        args = ["issue", "edit", str(number), "--repo", repo]
        for label in labels:
            args.extend(["--add-label", label])
        return await self._run_command(args)

    async def remove_label(self, repo: str, number: int, label: str) -> CommandResult:
        """Remove a single label from an issue."""
        self._validate_repo(repo)
        self._validate_labels([label])

        args = ["issue", "edit", str(number), "--repo", repo, "--remove-label", label]
        return await self._run_command(args)

    async def create_comment(self, repo: str, number: int, body: str) -> CommandResult:
        """Post a comment on an issue."""
        self._validate_repo(repo)

        args = ["issue", "comment", str(number), "--repo", repo, "--body", body]
        return await self._run_command(args)
