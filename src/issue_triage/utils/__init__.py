"""Utility functions and helpers.

- async_helpers: Error taxonomy, retry, pacing, cancellation
- logging: Structured logging with secret sanitization
- safe_subprocess: Safe gh CLI execution
- security: Secret redaction, input validation
"""

from issue_triage.utils.async_helpers import (
    AnalysisError,
    CancellationToken,
    ConfigurationError,
    FixedDelayPacer,
    LabelNotFoundError,
    MutationError,
    TriageError,
    create_retry,
)
from issue_triage.utils.logging import (
    LogEventNames,
    LogFormat,
    LogLevel,
    bind_context,
    configure_logging,
    unbind_context,
)
from issue_triage.utils.security import (
    RedactionError,
    SecretRedactor,
    SecurityError,
    ValidationError,
)

__all__ = [
    # Errors
    "AnalysisError",
    "ConfigurationError",
    "LabelNotFoundError",
    "MutationError",
    "TriageError",
    # Async helpers
    "CancellationToken",
    "FixedDelayPacer",
    "create_retry",
    # Logging
    "LogEventNames",
    "LogFormat",
    "LogLevel",
    "bind_context",
    "configure_logging",
    "unbind_context",
    # Security
    "RedactionError",
    "SecretRedactor",
    "SecurityError",
    "ValidationError",
]
