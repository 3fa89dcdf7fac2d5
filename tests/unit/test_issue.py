"""Tests for issue data models."""

from dataclasses import FrozenInstanceError

import pytest

from issue_triage.models.issue import IssueRecord, LabelDelta
from issue_triage.models.triage import (
    Category,
    ClassificationResult,
    PriorityLevel,
    PriorityResult,
)


class TestIssueRecord:
    """Test IssueRecord dataclass."""

    def test_create_issue(self):
        """Test creating an IssueRecord."""
        issue = IssueRecord(
            number=42,
            title="[BUG] Crash on startup",
            body="Traceback shows...",
            labels=("bug",),
            comment_count=1,
        )
        assert issue.number == 42
        assert issue.labels == ("bug",)
        assert issue.comment_count == 1

    def test_defaults(self):
        """Test optional fields default to empty."""
        issue = IssueRecord(number=1, title="t", body="b")
        assert issue.labels == ()
        assert issue.comment_count == 0

    def test_none_text_normalised(self):
        """Test None title and body become empty strings."""
        issue = IssueRecord(number=1, title=None, body=None)  # type: ignore[arg-type]
        assert issue.title == ""
        assert issue.body == ""

    def test_labels_deduplicated_in_order(self):
        """Test duplicate labels are collapsed."""
        issue = IssueRecord(number=1, title="t", body="b", labels=("bug", "ui", "bug"))
        assert issue.labels == ("bug", "ui")

    def test_has_label(self):
        """Test label lookup."""
        issue = IssueRecord(number=1, title="Title", body="Body", labels=("bug",))
        assert issue.has_label("bug")
        assert not issue.has_label("ui")

    def test_issue_is_frozen(self):
        """Test that IssueRecord is immutable."""
        issue = IssueRecord(number=1, title="t", body="b")
        with pytest.raises(FrozenInstanceError):
            issue.title = "changed"  # type: ignore[misc]


class TestLabelDelta:
    """Test LabelDelta dataclass."""

    def test_empty(self):
        """Test the empty delta."""
        assert LabelDelta().is_empty

    def test_not_empty(self):
        """Test deltas with work to do."""
        assert not LabelDelta(to_add=("bug",)).is_empty
        assert not LabelDelta(to_remove=("needs-triage",)).is_empty


class TestPriorityLevel:
    """Test PriorityLevel enum."""

    @pytest.mark.parametrize(
        "level,label",
        [
            (PriorityLevel.CRITICAL, "priority-critical"),
            (PriorityLevel.HIGH, "priority-high"),
            (PriorityLevel.MEDIUM, "priority-medium"),
            (PriorityLevel.LOW, "priority-low"),
            (PriorityLevel.NONE, None),
        ],
    )
    def test_label(self, level, label):
        """Test each level maps to its tracker label."""
        assert level.label == label

    def test_is_assigned(self):
        """Test NONE is the only unassigned level."""
        assert PriorityResult(PriorityLevel.LOW, 0.5).is_assigned
        assert not PriorityResult(PriorityLevel.NONE, 0.0).is_assigned


class TestClassificationResult:
    """Test ClassificationResult."""

    def test_unclassified(self):
        """Test the needs-triage fallback."""
        result = ClassificationResult.unclassified()
        assert result.category is Category.NEEDS_TRIAGE
        assert result.confidence == 0.0
        assert result.matches == 0
        assert not result.is_classified

    def test_classified(self):
        """Test a real category counts as classified."""
        assert ClassificationResult(Category.BUG, 0.7, 2).is_classified

    def test_category_values(self):
        """Test category string values."""
        assert Category.CI_CD == "ci_cd"
        assert Category.NEEDS_TRIAGE == "needs-triage"
