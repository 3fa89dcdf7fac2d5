"""Protocol definitions for pluggable tracker collaborators."""

from .tracker import IssueSource, MutationPort, PacingPolicy

__all__ = ["IssueSource", "MutationPort", "PacingPolicy"]
