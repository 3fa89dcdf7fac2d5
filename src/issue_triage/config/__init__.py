"""Configuration loading and validation."""

from .loader import load_config, require_credentials, resolve_token
from .schema import (
    FileLoggingConfig,
    GitHubConfig,
    LoggingConfig,
    ReportConfig,
    RetryConfig,
    TriageConfig,
    TriageSettings,
)

__all__ = [
    # Loader
    "load_config",
    "require_credentials",
    "resolve_token",
    # Root config
    "TriageSettings",
    # Sections
    "GitHubConfig",
    "TriageConfig",
    "ReportConfig",
    "LoggingConfig",
    "FileLoggingConfig",
    "RetryConfig",
]
