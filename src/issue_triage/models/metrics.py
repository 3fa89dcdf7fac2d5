"""Batch counters and per-issue processing results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .triage import TriageOutcome


@dataclass(frozen=True)
class Metrics:
    """Batch counters.

    Values are immutable; each issue yields its own delta which the
    orchestrator folds into the running total with :meth:`merge`.
    """

    processed: int = 0
    classified: int = 0
    labeled: int = 0
    errors: int = 0

    def merge(self, other: Metrics) -> Metrics:
        """Return the sum of two metric values."""
        return Metrics(
            processed=self.processed + other.processed,
            classified=self.classified + other.classified,
            labeled=self.labeled + other.labeled,
            errors=self.errors + other.errors,
        )

    def to_dict(self) -> dict[str, int]:
        """Convert to dictionary for JSON serialization."""
        return {
            "processed": self.processed,
            "classified": self.classified,
            "labeled": self.labeled,
            "errors": self.errors,
        }


@dataclass(frozen=True)
class IssueResult:
    """Result of running one issue through the pipeline."""

    issue_number: int
    outcome: TriageOutcome | None
    metrics: Metrics
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        """True if analysis produced an outcome."""
        return self.outcome is not None

    @classmethod
    def failed(cls, issue_number: int, error: str) -> IssueResult:
        """Result for an issue whose analysis raised."""
        return cls(
            issue_number=issue_number,
            outcome=None,
            metrics=Metrics(errors=1),
            error=error,
        )


@dataclass
class BatchResult:
    """Outcomes and totals of one orchestrator run."""

    outcomes: list[TriageOutcome] = field(default_factory=list)
    metrics: Metrics = field(default_factory=Metrics)
    failed_issues: list[int] = field(default_factory=list)
    cancelled: bool = False

    @property
    def attempted(self) -> int:
        """Issues the batch tried to process, failed ones included."""
        return len(self.outcomes) + len(self.failed_issues)

    def record(self, result: IssueResult) -> None:
        """Fold a per-issue result into the batch."""
        self.metrics = self.metrics.merge(result.metrics)
        if result.outcome is not None:
            self.outcomes.append(result.outcome)
        else:
            self.failed_issues.append(result.issue_number)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "metrics": self.metrics.to_dict(),
            "attempted": self.attempted,
            "outcomes": len(self.outcomes),
            "failed_issues": list(self.failed_issues),
            "cancelled": self.cancelled,
        }
