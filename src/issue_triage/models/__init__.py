"""Data models and transfer objects."""

from .issue import IssueRecord, LabelDelta
from .metrics import BatchResult, IssueResult, Metrics
from .triage import (
    AssignmentSuggestion,
    Category,
    ClassificationResult,
    PriorityLevel,
    PriorityResult,
    TriageOutcome,
)

__all__ = [
    # Issue models
    "IssueRecord",
    "LabelDelta",
    # Triage results
    "Category",
    "ClassificationResult",
    "PriorityLevel",
    "PriorityResult",
    "AssignmentSuggestion",
    "TriageOutcome",
    # Batch accounting
    "Metrics",
    "IssueResult",
    "BatchResult",
]
