"""Aggregate triage report.

The ReportGenerator folds a batch of TriageOutcomes and the batch Metrics
into a TriageReport, which can be serialized for machines with
:meth:`TriageReport.to_dict` or rendered for humans with
:func:`render_markdown`.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from issue_triage.models.metrics import Metrics
from issue_triage.models.triage import Category, PriorityLevel, TriageOutcome

# Order in which priority rows are listed
PRIORITY_ORDER: tuple[PriorityLevel, ...] = (
    PriorityLevel.CRITICAL,
    PriorityLevel.HIGH,
    PriorityLevel.MEDIUM,
    PriorityLevel.LOW,
)


def _ratio(numerator: int | float, denominator: int) -> float:
    return numerator / denominator if denominator else 0.0


@dataclass
class TriageReport:
    """Aggregated view of one triage run."""

    total: int
    attempted: int
    by_category: dict[str, int]
    by_priority: dict[str, int]
    by_component: dict[str, int]
    critical: list[TriageOutcome]
    security: list[TriageOutcome]
    mean_confidence: float
    classification_rate: float
    error_rate: float
    below_threshold: int
    with_assignments: int
    metrics: Metrics
    repository: str | None = None
    mode_label: str = "dry-run"
    generated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def needs_manual_review(self) -> bool:
        """True when some issues failed and should be looked at by hand."""
        return self.metrics.errors > 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "repository": self.repository,
            "mode": self.mode_label,
            "generated_at": self.generated_at.isoformat(),
            "total": self.total,
            "attempted": self.attempted,
            "by_category": dict(self.by_category),
            "by_priority": dict(self.by_priority),
            "by_component": dict(self.by_component),
            "critical": [_outcome_summary(o) for o in self.critical],
            "security": [_outcome_summary(o) for o in self.security],
            "mean_confidence": round(self.mean_confidence, 4),
            "classification_rate": round(self.classification_rate, 4),
            "error_rate": round(self.error_rate, 4),
            "below_threshold": self.below_threshold,
            "with_assignments": self.with_assignments,
            "metrics": self.metrics.to_dict(),
        }


def _outcome_summary(outcome: TriageOutcome) -> dict[str, Any]:
    return {
        "number": outcome.issue_number,
        "title": outcome.title,
        "category": outcome.category.value,
        "priority": outcome.priority.level.value,
        "confidence": round(outcome.confidence, 4),
        "teams": list(outcome.assignment.teams),
    }


class ReportGenerator:
    """Builds TriageReports from batch outcomes."""

    def __init__(self, repository: str | None = None, mode_label: str = "dry-run") -> None:
        self._repository = repository
        self._mode_label = mode_label

    def build(
        self,
        outcomes: Sequence[TriageOutcome],
        metrics: Metrics,
        attempted: int | None = None,
    ) -> TriageReport:
        """Aggregate outcomes and metrics.

        Args:
            outcomes: Outcomes of the issues whose analysis succeeded
            metrics: Folded batch metrics
            attempted: Issues the batch tried to process, failed ones
                included (defaults to the number of outcomes)

        Classification and error rates are relative to ``attempted`` and are
        0.0 for an empty batch.
        """
        total = len(outcomes)
        attempted = max(attempted or 0, total)

        by_category = Counter(o.category.value for o in outcomes)
        by_priority = Counter(
            o.priority.level.value for o in outcomes if o.priority.level is not PriorityLevel.NONE
        )
        by_component = Counter(c for o in outcomes for c in o.components)

        return TriageReport(
            total=total,
            attempted=attempted,
            by_category=dict(by_category.most_common()),
            by_priority={
                level.value: by_priority[level.value]
                for level in PRIORITY_ORDER
                if by_priority[level.value]
            },
            by_component=dict(by_component.most_common()),
            critical=[o for o in outcomes if o.priority.level is PriorityLevel.CRITICAL],
            security=[o for o in outcomes if o.category is Category.SECURITY],
            mean_confidence=_ratio(sum(o.confidence for o in outcomes), total),
            classification_rate=_ratio(metrics.classified, attempted),
            error_rate=_ratio(metrics.errors, attempted),
            below_threshold=sum(1 for o in outcomes if not o.meets_threshold),
            with_assignments=sum(1 for o in outcomes if o.assignment.teams),
            metrics=metrics,
            repository=self._repository,
            mode_label=self._mode_label,
        )


def _percent(value: float) -> str:
    return f"{value * 100:.1f}%"


def render_markdown(report: TriageReport) -> str:
    """Render a report as a Markdown document."""
    lines = [
        "# 🤖 Issue Triage Report",
        "",
        f"**Generated:** {report.generated_at.strftime('%Y-%m-%d %H:%M:%S UTC')}",
    ]
    if report.repository:
        lines.append(f"**Repository:** {report.repository}")
    lines.extend(
        [
            f"**Mode:** {report.mode_label}",
            "",
            "## 📊 Summary",
            "",
            f"- **Issues attempted:** {report.attempted}",
            f"- **Issues analysed:** {report.total}",
            f"- **Classified:** {report.metrics.classified} "
            f"({_percent(report.classification_rate)})",
            f"- **Labeled:** {report.metrics.labeled}",
            f"- **Errors:** {report.metrics.errors}",
            f"- **Mean confidence:** {_percent(report.mean_confidence)}",
            "",
            "## 🏷️ Classification Breakdown",
            "",
            "### By Type",
        ]
    )
    lines.extend(_count_rows(report.by_category))
    lines.extend(["", "### By Priority"])
    lines.extend(_count_rows(report.by_priority))
    lines.extend(["", "### By Component"])
    lines.extend(_count_rows(report.by_component))

    lines.extend(["", "## 🚨 High-Priority Issues", ""])
    if report.critical:
        for outcome in report.critical:
            teams = ", ".join(f"@{t}" for t in outcome.assignment.teams)
            lines.append(f"- #{outcome.issue_number}: {outcome.title} ({teams})")
    else:
        lines.append("No critical issues found.")

    lines.extend(["", "## 🔒 Security Alerts", ""])
    if report.security:
        for outcome in report.security:
            lines.append(
                f"- #{outcome.issue_number}: {outcome.title} "
                f"(confidence {_percent(outcome.confidence)})"
            )
    else:
        lines.append("No security issues found.")

    lines.extend(
        [
            "",
            "## ⚙️ System Performance",
            "",
            f"- **Classification rate:** {_percent(report.classification_rate)}",
            f"- **Error rate:** {_percent(report.error_rate)}",
            f"- **Below confidence threshold:** {report.below_threshold}",
            f"- **With team suggestions:** {report.with_assignments}",
            "",
            "## ✅ Recommended Actions",
            "",
        ]
    )
    lines.extend(_recommendations(report))
    lines.append("")

    return "\n".join(lines)


def _count_rows(counts: dict[str, int]) -> list[str]:
    if not counts:
        return ["- none"]
    return [f"- **{name}:** {count}" for name, count in counts.items()]


def _recommendations(report: TriageReport) -> list[str]:
    actions: list[str] = []
    if report.critical:
        actions.append(f"- Review {len(report.critical)} critical issue(s) immediately.")
    if report.security:
        actions.append(f"- Route {len(report.security)} security issue(s) to the security team.")
    if report.below_threshold:
        actions.append(
            f"- Double-check {report.below_threshold} low-confidence classification(s)."
        )
    if report.needs_manual_review:
        actions.append(
            f"- {report.metrics.errors} error(s) occurred during triage; "
            "review the affected issues manually."
        )
    if not actions:
        actions.append("- No action required.")
    return actions
