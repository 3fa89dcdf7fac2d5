"""Rule-based issue triage engine."""

from issue_triage._version import __version__

__all__ = ["__version__"]
