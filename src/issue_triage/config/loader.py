"""Configuration loader with YAML parsing and environment variable substitution."""

import os
import re
from pathlib import Path
from typing import Any

import yaml

from ..utils.async_helpers import ConfigurationError
from .schema import TriageSettings

# Credential lookup order when the config leaves github.token empty
TOKEN_ENV_VARS = ("GITHUB_TOKEN", "GH_TOKEN")


def substitute_env_vars(text: str) -> str:
    """
    Replace ${VAR_NAME} patterns with environment variable values.

    Args:
        text: Text containing ${VAR_NAME} patterns

    Returns:
        Text with environment variables substituted

    Raises:
        ValueError: If a referenced environment variable is not found
    """

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        value = os.environ.get(var_name)
        if value is None:
            raise ValueError(f"Environment variable {var_name} not found")
        return value

    return re.sub(r"\$\{([^}]+)\}", replacer, text)


def load_config(path: Path | None = None, **overrides: Any) -> TriageSettings:
    """
    Load configuration from a YAML file and/or ISSUE_TRIAGE_* variables.

    Args:
        path: Path to YAML configuration file. If None, only the
            environment (and ``overrides``) are used.
        **overrides: Top-level sections merged over the file contents,
            e.g. ``github={"repo": "owner/repo"}``.

    Returns:
        Validated TriageSettings instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If environment variables are missing or config is invalid
        ValidationError: If config doesn't match schema
    """
    config_dict: dict[str, Any] = {}

    if path is not None:
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with path.open() as f:
            raw_yaml = f.read()

        config_dict = yaml.safe_load(substitute_env_vars(raw_yaml)) or {}
        if not isinstance(config_dict, dict):
            raise ValueError(f"Configuration root must be a mapping: {path}")

    for section, values in overrides.items():
        if isinstance(values, dict):
            merged = dict(config_dict.get(section) or {})
            merged.update(values)
            config_dict[section] = merged
        else:
            config_dict[section] = values

    # Init kwargs win over ISSUE_TRIAGE_* variables
    config = TriageSettings(**config_dict)

    validate_config(config)

    return config


def resolve_token(config: TriageSettings) -> str | None:
    """Return the configured token, falling back to the usual env variables."""
    if config.github.token:
        return config.github.token
    for name in TOKEN_ENV_VARS:
        value = os.environ.get(name)
        if value:
            return value
    return None


def validate_config(config: TriageSettings) -> None:
    """
    Perform additional cross-field validation.

    Args:
        config: Configuration to validate

    Raises:
        ValueError: If settings contradict each other
    """
    if config.report.markdown_path is None and config.report.json_path is None:
        raise ValueError("At least one of report.markdown_path or report.json_path is required")

    if (
        config.report.markdown_path is not None
        and config.report.markdown_path == config.report.json_path
    ):
        raise ValueError("report.markdown_path and report.json_path must differ")


def require_credentials(config: TriageSettings) -> str:
    """
    Return the tracker credential or fail the run before any issue is touched.

    Raises:
        ConfigurationError: If no token is configured
    """
    token = resolve_token(config)
    if not token:
        raise ConfigurationError(
            "GitHub token is required: set github.token or GITHUB_TOKEN / GH_TOKEN"
        )
    return token
