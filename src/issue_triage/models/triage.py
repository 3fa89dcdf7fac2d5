"""Data models for per-issue triage results."""

from dataclasses import dataclass
from enum import StrEnum

from .issue import LabelDelta


class Category(StrEnum):
    """Classification outcome for an issue."""

    BUG = "bug"
    SECURITY = "security"
    PERFORMANCE = "performance"
    DEPENDENCIES = "dependencies"
    FEATURE = "feature"
    DOCUMENTATION = "documentation"
    CI_CD = "ci_cd"
    WASM = "wasm"
    NEEDS_TRIAGE = "needs-triage"


class PriorityLevel(StrEnum):
    """Urgency level. NONE means the existing priority must be left alone."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"

    @property
    def label(self) -> str | None:
        """Tracker label for this level, None for NONE."""
        if self is PriorityLevel.NONE:
            return None
        return f"priority-{self.value}"


@dataclass(frozen=True)
class ClassificationResult:
    """Best-scoring category for an issue."""

    category: Category
    confidence: float  # 0.0 to 1.0
    matches: int

    @property
    def is_classified(self) -> bool:
        """True unless the issue fell through to needs-triage."""
        return self.category is not Category.NEEDS_TRIAGE

    @classmethod
    def unclassified(cls) -> "ClassificationResult":
        """Result used when no category pattern matched."""
        return cls(category=Category.NEEDS_TRIAGE, confidence=0.0, matches=0)


@dataclass(frozen=True)
class PriorityResult:
    """Derived urgency with the factors that produced it."""

    level: PriorityLevel
    confidence: float  # 0.0 to 1.0
    factors: tuple[str, ...] = ()

    @property
    def is_assigned(self) -> bool:
        """True when a priority label should be applied."""
        return self.level is not PriorityLevel.NONE


@dataclass(frozen=True)
class AssignmentSuggestion:
    """Suggested owning teams, most preferred first."""

    teams: tuple[str, ...]
    confidence: float
    reason: str  # Which rule branch fired, e.g. "feature:wasm"
    escalated: bool = False


@dataclass(frozen=True)
class TriageOutcome:
    """Everything derived for one issue, ready for reporting."""

    issue_number: int
    title: str
    classification: ClassificationResult
    priority: PriorityResult
    components: tuple[str, ...]
    assignment: AssignmentSuggestion
    label_delta: LabelDelta
    meets_threshold: bool = False

    @property
    def category(self) -> Category:
        """Shortcut to the classified category."""
        return self.classification.category

    @property
    def confidence(self) -> float:
        """Shortcut to the classification confidence."""
        return self.classification.confidence
