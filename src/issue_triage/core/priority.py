"""Priority determination from issue text and classification."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

import structlog

from issue_triage.core.catalog import compile_patterns
from issue_triage.models.triage import (
    Category,
    ClassificationResult,
    PriorityLevel,
    PriorityResult,
)

log = structlog.get_logger()

PRIORITY_LABEL_PREFIX = "priority-"


@dataclass(frozen=True)
class KeywordFamily:
    """A group of keywords that shifts the priority score when any one matches."""

    factor: str
    delta: float
    patterns: tuple[re.Pattern[str], ...]
    title_only: bool = False
    requires_category: Category | None = None

    def applies(self, title: str, text: str, category: Category) -> bool:
        """Check whether this family fires for the issue."""
        if self.requires_category is not None and category is not self.requires_category:
            return False
        haystack = title if self.title_only else text
        return any(pattern.search(haystack) for pattern in self.patterns)


DEFAULT_FAMILIES: tuple[KeywordFamily, ...] = (
    KeywordFamily(
        "urgent-keywords",
        0.8,
        compile_patterns(
            [
                r"\bcritical\b",
                r"\burgent\b",
                r"\bblock(ing|er)\b",
                r"\bemergency\b",
                r"production (is )?down",
            ]
        ),
    ),
    KeywordFamily(
        "high-priority-phase",
        0.7,
        compile_patterns([r"\[phase\s*3\]"]),
        title_only=True,
    ),
    KeywordFamily(
        "severe-bug",
        0.8,
        compile_patterns(
            [
                r"\bcrash",
                r"\bpanic",
                r"data loss",
                r"corrupt",
                r"segfault|segmentation fault",
                r"\bhang(s|ing)?\b",
            ]
        ),
        requires_category=Category.BUG,
    ),
    KeywordFamily(
        "minor-bug",
        -0.3,
        compile_patterns([r"\bminor\b", r"\bcosmetic\b", r"\btypo\b", r"edge case"]),
        requires_category=Category.BUG,
    ),
    KeywordFamily(
        "performance-impact",
        0.5,
        compile_patterns(
            [r"\bslow", r"memory leak", r"bottleneck", r"\bperformance\b", r"\blatency\b"]
        ),
    ),
    KeywordFamily(
        "user-impact",
        0.4,
        compile_patterns([r"\busers?\b", r"\bcustomers?\b", r"\bproduction\b", r"\bregression\b"]),
    ),
    KeywordFamily(
        "deferred",
        -0.3,
        compile_patterns([r"\broadmap\b", r"\bfuture\b", r"nice to have", r"low priority"]),
    ),
)


class PriorityEngine:
    """Derives an urgency level for an issue.

    Issues that already carry a ``priority-*`` label are never re-prioritised.
    Confident security classifications short-circuit to critical. Everything
    else is scored by additive keyword families and bucketed by threshold.
    """

    SECURITY_CONFIDENCE_THRESHOLD = 0.6
    SECURITY_CONFIDENCE = 0.95

    # Checked top to bottom; first threshold reached wins
    LEVEL_THRESHOLDS: tuple[tuple[float, PriorityLevel], ...] = (
        (0.8, PriorityLevel.CRITICAL),
        (0.6, PriorityLevel.HIGH),
        (0.3, PriorityLevel.MEDIUM),
    )

    def __init__(self, families: Iterable[KeywordFamily] | None = None) -> None:
        self._families = tuple(families) if families is not None else DEFAULT_FAMILIES

    @staticmethod
    def has_priority_label(labels: Iterable[str]) -> bool:
        """True if any label is a priority label."""
        return any(label.startswith(PRIORITY_LABEL_PREFIX) for label in labels)

    @classmethod
    def level_for(cls, score: float) -> PriorityLevel:
        """Map a clipped score onto a priority level."""
        for threshold, level in cls.LEVEL_THRESHOLDS:
            if score >= threshold:
                return level
        return PriorityLevel.LOW

    def determine_priority(
        self,
        title: str,
        body: str,
        current_labels: Iterable[str],
        classification: ClassificationResult,
    ) -> PriorityResult:
        """Compute the priority for one issue.

        Args:
            title: Issue title
            body: Issue body
            current_labels: Labels currently on the issue
            classification: Result of the classifier for the same issue

        Returns:
            PriorityResult; level NONE when a priority label already exists
        """
        if self.has_priority_label(current_labels):
            return PriorityResult(
                level=PriorityLevel.NONE,
                confidence=0.0,
                factors=("priority-already-assigned",),
            )

        if (
            classification.category is Category.SECURITY
            and classification.confidence > self.SECURITY_CONFIDENCE_THRESHOLD
        ):
            return PriorityResult(
                level=PriorityLevel.CRITICAL,
                confidence=self.SECURITY_CONFIDENCE,
                factors=("security-issue",),
            )

        lowered_title = (title or "").lower()
        text = f"{title or ''} {body or ''}".lower()

        score = 0.0
        factors: list[str] = []
        for family in self._families:
            if family.applies(lowered_title, text, classification.category):
                score += family.delta
                factors.append(family.factor)

        score = min(max(score, 0.0), 1.0)
        level = self.level_for(score)

        log.debug("priority_scored", score=score, level=level.value, factors=factors)

        return PriorityResult(level=level, confidence=score, factors=tuple(factors))
