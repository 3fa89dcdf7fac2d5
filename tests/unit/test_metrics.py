"""Tests for batch metrics and per-issue results."""

import pytest

from issue_triage.models.issue import LabelDelta
from issue_triage.models.metrics import BatchResult, IssueResult, Metrics
from issue_triage.models.triage import (
    AssignmentSuggestion,
    Category,
    ClassificationResult,
    PriorityLevel,
    PriorityResult,
    TriageOutcome,
)


def make_outcome(number: int) -> TriageOutcome:
    """Build a minimal outcome."""
    return TriageOutcome(
        issue_number=number,
        title=f"Issue {number}",
        classification=ClassificationResult(Category.BUG, 0.8, 2),
        priority=PriorityResult(PriorityLevel.HIGH, 0.7),
        components=(),
        assignment=AssignmentSuggestion(("rust-team",), 0.8, "category:bug"),
        label_delta=LabelDelta(to_add=("bug",)),
    )


class TestMetrics:
    """Tests for the Metrics value."""

    def test_defaults_are_zero(self) -> None:
        """Test a fresh Metrics value."""
        assert Metrics().to_dict() == {"processed": 0, "classified": 0, "labeled": 0, "errors": 0}

    def test_merge(self) -> None:
        """Test merging adds field by field."""
        total = Metrics(processed=1, classified=1, labeled=1).merge(
            Metrics(processed=1, errors=2)
        )
        assert total == Metrics(processed=2, classified=1, labeled=1, errors=2)

    def test_merge_returns_new_value(self) -> None:
        """Test merge does not mutate either operand."""
        left = Metrics(processed=1)
        left.merge(Metrics(processed=1))
        assert left.processed == 1

    def test_frozen(self) -> None:
        """Test metrics cannot be mutated in place."""
        with pytest.raises(AttributeError):
            Metrics().processed = 3  # type: ignore[misc]


class TestIssueResult:
    """Tests for IssueResult."""

    def test_success(self) -> None:
        """Test a successful result."""
        result = IssueResult(7, make_outcome(7), Metrics(processed=1, classified=1))
        assert result.succeeded
        assert result.error is None

    def test_failed(self) -> None:
        """Test the failure constructor."""
        result = IssueResult.failed(7, "boom")
        assert not result.succeeded
        assert result.metrics == Metrics(errors=1)
        assert result.error == "boom"


class TestBatchResult:
    """Tests for BatchResult."""

    def test_record_folds_results(self) -> None:
        """Test outcomes, failures and metrics accumulate."""
        batch = BatchResult()
        batch.record(IssueResult(1, make_outcome(1), Metrics(processed=1, classified=1)))
        batch.record(IssueResult.failed(2, "boom"))
        batch.record(IssueResult(3, make_outcome(3), Metrics(processed=1, labeled=1)))

        assert [o.issue_number for o in batch.outcomes] == [1, 3]
        assert batch.failed_issues == [2]
        assert batch.attempted == 3
        assert batch.metrics == Metrics(processed=2, classified=1, labeled=1, errors=1)

    def test_to_dict(self) -> None:
        """Test the summary dictionary."""
        batch = BatchResult(cancelled=True)
        batch.record(IssueResult.failed(2, "boom"))

        assert batch.to_dict() == {
            "attempted": 1,
            "metrics": {"processed": 0, "classified": 0, "labeled": 0, "errors": 1},
            "outcomes": 0,
            "failed_issues": [2],
            "cancelled": True,
        }
