"""Entry point for running an issue triage batch.

This module provides the main entry point for issue-triage.
It handles:
- Configuration loading
- Logging setup with secret sanitization
- Tracker instantiation
- Running the batch and writing the report
- Signal handling for graceful cancellation
"""

from __future__ import annotations

import argparse
import asyncio
import json
import signal
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

from issue_triage._version import __version__

if TYPE_CHECKING:
    from issue_triage.core.report import TriageReport
    from issue_triage.utils.async_helpers import CancellationToken

log = structlog.get_logger()


def setup_logging(
    debug: bool = False,
    log_format: str = "console",
    file_path: Path | None = None,
    file_enabled: bool = False,
) -> None:
    """Configure structured logging with secret sanitization.

    Args:
        debug: Enable debug logging if True
        log_format: Output format ("json" or "console")
        file_path: Path to log file (if file logging enabled)
        file_enabled: Whether to enable file logging
    """
    from issue_triage.utils.logging import LogFormat, LogLevel, configure_logging

    level = LogLevel.DEBUG if debug else LogLevel.INFO
    fmt = LogFormat(log_format.lower()) if isinstance(log_format, str) else log_format

    configure_logging(
        level=level,
        log_format=fmt,
        file_path=file_path,
        file_enabled=file_enabled,
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed argument namespace
    """
    parser = argparse.ArgumentParser(
        prog="issue-triage",
        description="Issue Triage - Rule-based classification and labelling of tracker issues",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: environment only)",
    )

    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    parser.add_argument(
        "--format",
        choices=["json", "console"],
        default=None,
        help="Log output format (default: from config, else console)",
    )

    parser.add_argument(
        "--repo",
        help="Repository to triage (owner/repo), overrides github.repo",
    )

    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum number of issues to fetch, overrides triage.max_issues",
    )

    parser.add_argument(
        "--apply-labels",
        action="store_true",
        help="Write computed labels to the tracker",
    )

    parser.add_argument(
        "--post-comments",
        action="store_true",
        help="Post a triage comment on new issues",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Never write to the tracker, even if enabled in config",
    )

    parser.add_argument(
        "--report",
        type=Path,
        default=None,
        help="Markdown report path, overrides report.markdown_path",
    )

    return parser.parse_args(argv)


def _overrides_from_args(args: argparse.Namespace) -> dict[str, Any]:
    """Translate CLI flags into config section overrides."""
    overrides: dict[str, dict[str, Any]] = {}

    if args.repo:
        overrides.setdefault("github", {})["repo"] = args.repo
    if args.limit is not None:
        overrides.setdefault("triage", {})["max_issues"] = args.limit
    if args.apply_labels:
        overrides.setdefault("triage", {})["apply_labels"] = True
    if args.post_comments:
        overrides.setdefault("triage", {})["post_comments"] = True
    if args.dry_run:
        triage = overrides.setdefault("triage", {})
        triage["apply_labels"] = False
        triage["post_comments"] = False
    if args.report is not None:
        overrides.setdefault("report", {})["markdown_path"] = args.report
    if args.format is not None:
        overrides.setdefault("logging", {})["format"] = args.format
    if args.debug:
        overrides.setdefault("logging", {})["level"] = "DEBUG"

    return overrides


def _setup_signal_handlers(cancel_token: CancellationToken) -> None:
    """Cancel the batch cooperatively on SIGINT/SIGTERM."""
    loop = asyncio.get_running_loop()

    def handle_signal(sig: signal.Signals) -> None:
        log.info("received_signal", signal=sig.name)
        cancel_token.cancel()

    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(sig, handle_signal, sig)
        except (NotImplementedError, RuntimeError):
            # Not supported on this platform; Ctrl-C falls back to KeyboardInterrupt
            continue
        log.debug("signal_handler_registered", signal=sig.name)


def write_report(
    report: TriageReport, markdown_path: Path | None, json_path: Path | None
) -> None:
    """Write the report artifacts to disk."""
    from issue_triage.core.report import render_markdown
    from issue_triage.utils.logging import LogEventNames

    if markdown_path is not None:
        markdown_path.parent.mkdir(parents=True, exist_ok=True)
        markdown_path.write_text(render_markdown(report), encoding="utf-8")
        log.info(LogEventNames.REPORT_WRITTEN, path=str(markdown_path), format="markdown")

    if json_path is not None:
        json_path.parent.mkdir(parents=True, exist_ok=True)
        json_path.write_text(json.dumps(report.to_dict(), indent=2), encoding="utf-8")
        log.info(LogEventNames.REPORT_WRITTEN, path=str(json_path), format="json")


async def run_triage(args: argparse.Namespace) -> int:
    """Run one triage batch.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 when the batch completed, 1 on a fatal pre-batch error)
    """
    log.info(
        "starting_issue_triage",
        version=__version__,
        config_path=str(args.config) if args.config else None,
    )

    from issue_triage.adapters.github import GitHubTracker, IssueFetchError
    from issue_triage.config.loader import load_config, require_credentials
    from issue_triage.core.orchestrator import TriageOrchestrator
    from issue_triage.core.report import ReportGenerator
    from issue_triage.utils.async_helpers import (
        CancellationToken,
        ConfigurationError,
        FixedDelayPacer,
    )
    from issue_triage.utils.logging import configure_logging
    from issue_triage.utils.safe_subprocess import GHCliError

    try:
        config = load_config(args.config, **_overrides_from_args(args))
    except FileNotFoundError as e:
        log.error("configuration_file_not_found", path=str(args.config), error=str(e))
        return 1
    except ValueError as e:
        log.error("configuration_invalid", error=str(e))
        return 1

    # Reconfigure logging from config file settings
    configure_logging(
        level=config.logging.level,
        log_format=config.logging.format,
        file_path=config.logging.file.path if config.logging.file.enabled else None,
        file_enabled=config.logging.file.enabled,
    )
    log.info("configuration_loaded", repo=config.github.repo)

    try:
        token = require_credentials(config)
        tracker = GitHubTracker(config.github, token=token, retry=config.retry)
        issues = await tracker.list_issues(limit=config.triage.max_issues)
    except ConfigurationError as e:
        log.error("configuration_invalid", error=str(e))
        return 1
    except (IssueFetchError, GHCliError) as e:
        log.error("issue_fetch_failed", repo=config.github.repo, error=str(e))
        return 1

    orchestrator = TriageOrchestrator(
        config.triage,
        mutations=tracker,
        pacing=FixedDelayPacer(config.triage.pacing_delay),
    )

    cancel_token = CancellationToken()
    _setup_signal_handlers(cancel_token)

    try:
        batch = await orchestrator.run(issues, cancel_token=cancel_token)
    except ConfigurationError as e:
        log.error("configuration_invalid", error=str(e))
        return 1

    mode_label = "live" if orchestrator.writes_enabled else "dry-run"
    report = ReportGenerator(repository=config.github.repo, mode_label=mode_label).build(
        batch.outcomes, batch.metrics, attempted=batch.attempted
    )

    try:
        write_report(report, config.report.markdown_path, config.report.json_path)
    except OSError as e:
        log.error("report_write_failed", error=str(e))

    log.info(
        "triage_finished",
        cancelled=batch.cancelled,
        **batch.metrics.to_dict(),
    )
    if batch.metrics.errors > 0:
        log.warning(
            "manual_review_recommended",
            errors=batch.metrics.errors,
            failed_issues=batch.failed_issues,
        )

    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    # Setup logging with CLI options
    setup_logging(
        debug=args.debug,
        log_format=args.format or "console",
    )

    try:
        return asyncio.run(run_triage(args))
    except KeyboardInterrupt:
        log.info("shutting_down_gracefully")
        return 0


if __name__ == "__main__":
    sys.exit(main())
