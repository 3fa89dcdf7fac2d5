"""Data models for tracker issues and label changes."""

from dataclasses import dataclass


@dataclass(frozen=True)
class IssueRecord:
    """An open issue as read from the tracker."""

    number: int
    title: str
    body: str
    labels: tuple[str, ...] = ()
    comment_count: int = 0

    def __post_init__(self) -> None:
        # Trackers occasionally hand back None for an empty body
        object.__setattr__(self, "title", self.title or "")
        object.__setattr__(self, "body", self.body or "")
        object.__setattr__(self, "labels", tuple(dict.fromkeys(self.labels)))

    def has_label(self, label: str) -> bool:
        """Check if the issue currently carries ``label``."""
        return label in self.labels


@dataclass(frozen=True)
class LabelDelta:
    """Minimal label change for one issue.

    ``to_add`` never contains a label the issue already has and
    ``to_remove`` only contains labels the issue currently has.
    """

    to_add: tuple[str, ...] = ()
    to_remove: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        """True when nothing needs to change."""
        return not self.to_add and not self.to_remove
