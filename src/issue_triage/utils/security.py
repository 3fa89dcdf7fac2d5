"""Security utilities for secret redaction and input validation.

Everything the triage run writes back to the tracker (comments) or to logs
passes through :class:`SecretRedactor`. Redaction is fail-closed: if a pattern
fails, the operation raises instead of letting the text through.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from collections.abc import Sequence

log = structlog.get_logger()


class SecurityError(Exception):
    """Base exception for security-related errors."""


class RedactionError(SecurityError):
    """Raised when secret redaction fails."""


class ValidationError(SecurityError):
    """Raised when input validation fails."""


# owner/repo
REPO_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_.-]+/[a-zA-Z0-9_.-]+$")

# Label names go straight into gh argv; keep them printable and short
LABEL_NAME_PATTERN = re.compile(r"^[\w .:/+-]{1,50}$")

SHELL_METACHARACTERS = frozenset(
    [";", "|", "&", "`", "$", "(", ")", "{", "}", "<", ">", "\\", "\n", "\r", "\t", "\x00"]
)


class SecretRedactor:
    """Detects and redacts secrets from text.

    Usage:
        redactor = SecretRedactor()
        safe_text = redactor.redact(comment_body)

    Attributes:
        placeholder: The string to replace secrets with (default: "[REDACTED]").
    """

    DEFAULT_PATTERNS: tuple[tuple[str, str], ...] = (
        (
            r"(?i)(api[_-]?key|secret|token|password|credential)\s*[=:]\s*[\"']?[\w-]{16,}",
            "Generic secret",
        ),
        (r"ghp_[a-zA-Z0-9]{36}", "GitHub PAT"),
        (r"github_pat_[a-zA-Z0-9_]{22,}", "GitHub fine-grained PAT"),
        (r"gh[ousr]_[a-zA-Z0-9]{36}", "GitHub app/OAuth token"),
        (r"xox[baprs]-[\w-]+", "Slack token"),
        (r"sk-[a-zA-Z0-9]{48}", "OpenAI legacy API key"),
        (r"sk-ant-[\w-]{40,}", "Anthropic API key"),
        (r"AKIA[0-9A-Z]{16}", "AWS access key ID"),
        (
            r"(?i)(postgres(?:ql)?|mysql|mongodb(?:\+srv)?|redis|amqp)://[^:]+:[^@]+@[^\s]+",
            "Database connection string",
        ),
        (
            r"-----BEGIN (?:RSA |EC |DSA |OPENSSH )?PRIVATE KEY-----",
            "Private key header",
        ),
        (r"eyJ[a-zA-Z0-9_-]*\.eyJ[a-zA-Z0-9_-]*\.[a-zA-Z0-9_-]*", "JWT token"),
    )

    def __init__(
        self,
        placeholder: str = "[REDACTED]",
        custom_patterns: Sequence[tuple[str, str]] | None = None,
    ) -> None:
        """Initialize the SecretRedactor.

        Args:
            placeholder: String to replace detected secrets with.
            custom_patterns: Additional (pattern, name) tuples to detect.

        Raises:
            RedactionError: If any pattern fails to compile.
        """
        self.placeholder = placeholder
        self._pattern_names: dict[re.Pattern[str], str] = {}

        all_patterns = list(self.DEFAULT_PATTERNS)
        if custom_patterns:
            all_patterns.extend(custom_patterns)

        for pattern_str, name in all_patterns:
            try:
                self._pattern_names[re.compile(pattern_str)] = name
            except re.error as e:
                log.error("pattern_compilation_failed", pattern=pattern_str, error=str(e))
                raise RedactionError(f"Failed to compile secret pattern '{name}': {e}") from e

    @property
    def patterns(self) -> list[re.Pattern[str]]:
        """Return the list of compiled patterns."""
        return list(self._pattern_names)

    def redact(self, text: str) -> str:
        """Replace every detected secret in ``text`` with the placeholder.

        Raises:
            RedactionError: If redaction fails for any reason.
        """
        if not text:
            return text

        try:
            result = text
            for pattern in self._pattern_names:
                result = pattern.sub(self.placeholder, result)
            return result
        except Exception as e:
            log.error("redaction_failed", error=str(e))
            raise RedactionError(f"Redaction failed: {e}") from e


def validate_repo_name(repo: str) -> bool:
    """Validate that a repository name is safe (``owner/repo``).

    Args:
        repo: The repository name to validate.

    Returns:
        True if the repository name is valid, False otherwise.
    """
    if not repo:
        return False

    if any(char in repo for char in SHELL_METACHARACTERS):
        return False

    return bool(REPO_NAME_PATTERN.match(repo))


def validate_label_name(label: str) -> bool:
    """Validate a label name before it is passed to the tracker CLI."""
    if not label or label.startswith("-"):
        return False
    if any(char in label for char in SHELL_METACHARACTERS):
        return False
    return bool(LABEL_NAME_PATTERN.match(label))


def sanitize_for_logging(text: str) -> str:
    """Remove ANSI escape codes and control characters from text.

    Issue titles are user-supplied; this keeps them from forging log lines.
    """
    if not text:
        return text

    text = re.sub(r"\x1b\[[0-9;]*m", "", text)
    return re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]", "", text)

