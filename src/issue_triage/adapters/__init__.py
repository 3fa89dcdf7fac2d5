"""Concrete implementations of the tracker interfaces."""

from .github import GitHubTracker, IssueFetchError

__all__ = [
    "GitHubTracker",
    "IssueFetchError",
]
