"""Pydantic models for configuration schema."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GitHubConfig(BaseModel):
    """GitHub tracker configuration."""

    repo: str
    token: str | None = None
    gh_path: str | None = None
    state: Literal["open", "closed", "all"] = "open"
    command_timeout: int = Field(30, ge=5, le=300)

    @field_validator("repo")
    @classmethod
    def validate_repo(cls, v: str) -> str:
        """Validate repository name format."""
        from ..utils.security import validate_repo_name

        if not validate_repo_name(v):
            raise ValueError(f"Invalid repository format: {v}. Expected: owner/repo")
        return v

    @field_validator("token")
    @classmethod
    def empty_token_is_missing(cls, v: str | None) -> str | None:
        """Treat an empty token as not configured."""
        if v is not None and not v.strip():
            return None
        return v


class TriageConfig(BaseModel):
    """Triage behaviour switches."""

    # Only flags outcomes in the report; labels are applied regardless
    confidence_threshold: float = Field(0.7, ge=0.0, le=1.0)
    apply_labels: bool = False
    post_comments: bool = False
    pacing_delay: float = Field(0.1, ge=0.0, le=10.0, description="Seconds between issues")
    max_issues: int = Field(100, ge=1, le=1000)


class ReportConfig(BaseModel):
    """Report artifact locations."""

    markdown_path: Path | None = Path("triage-report-latest.md")
    json_path: Path | None = None


class FileLoggingConfig(BaseModel):
    """File logging configuration."""

    enabled: bool = False
    path: Path = Path("logs/issue-triage.log")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "console"] = "console"
    file: FileLoggingConfig = FileLoggingConfig()


class RetryConfig(BaseModel):
    """Retry configuration for transient tracker failures."""

    max_attempts: int = Field(3, ge=1, le=10)
    initial_delay: float = Field(1.0, ge=0.1, le=10.0)
    max_delay: float = Field(30.0, ge=1.0, le=300.0)


class TriageSettings(BaseSettings):
    """Root configuration for issue-triage."""

    github: GitHubConfig
    triage: TriageConfig = TriageConfig()
    report: ReportConfig = ReportConfig()
    logging: LoggingConfig = LoggingConfig()
    retry: RetryConfig = RetryConfig()

    model_config = SettingsConfigDict(
        env_prefix="ISSUE_TRIAGE_",
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )
