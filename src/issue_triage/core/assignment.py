"""Team assignment suggestions.

Each category maps to an assignment rule. A rule is either a flat team list
(:class:`SimpleRule`) or an ordered set of text predicates
(:class:`ContextualRule`) evaluated top to bottom, first hit wins. Critical
issues are escalated to the leads team.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

import structlog

from issue_triage.models.triage import (
    AssignmentSuggestion,
    Category,
    PriorityLevel,
    PriorityResult,
)

log = structlog.get_logger()


@dataclass(frozen=True)
class SimpleRule:
    """Fixed team list with a fixed confidence."""

    teams: tuple[str, ...]
    confidence: float


@dataclass(frozen=True)
class ContextBranch:
    """One predicate of a contextual rule. ``pattern`` None means always."""

    name: str
    teams: tuple[str, ...]
    confidence: float
    pattern: re.Pattern[str] | None = None

    def matches(self, text: str) -> bool:
        """Check the branch predicate against lowercased issue text."""
        return self.pattern is None or bool(self.pattern.search(text))


@dataclass(frozen=True)
class ContextualRule:
    """Ordered branches; the default applies when no branch matches."""

    branches: tuple[ContextBranch, ...]
    default: ContextBranch

    def resolve(self, text: str) -> ContextBranch:
        """Return the first matching branch, else the default."""
        for branch in self.branches:
            if branch.matches(text):
                return branch
        return self.default


AssignmentRule = SimpleRule | ContextualRule


# Feature predicates run in this order: wasm, ci_cd, core, then default
FEATURE_RULE = ContextualRule(
    branches=(
        ContextBranch(
            "wasm",
            ("wasm-specialist", "rust-team"),
            0.85,
            re.compile(r"\bwasm\b|webassembly"),
        ),
        ContextBranch(
            "ci_cd",
            ("devops-team", "automation-engineers"),
            0.75,
            re.compile(r"\b(ci|cd)\b|pipeline"),
        ),
        ContextBranch(
            "core",
            ("core-developers", "rust-team"),
            0.7,
            re.compile(r"\bcore\b|\bengine\b"),
        ),
    ),
    default=ContextBranch("default", ("dev-team", "feature-team"), 0.5),
)

DEFAULT_RULES: tuple[tuple[Category, AssignmentRule], ...] = (
    (Category.SECURITY, SimpleRule(("security-team", "architecture-lead"), 0.9)),
    (Category.BUG, SimpleRule(("rust-team", "core-developers"), 0.8)),
    (Category.DEPENDENCIES, SimpleRule(("maintenance-team", "rust-team"), 0.7)),
    (Category.PERFORMANCE, SimpleRule(("performance-team", "optimization-experts"), 0.75)),
    (Category.FEATURE, FEATURE_RULE),
    (Category.DOCUMENTATION, SimpleRule(("docs-team", "technical-writers"), 0.7)),
    (Category.CI_CD, SimpleRule(("devops-team", "automation-engineers"), 0.8)),
)


class AssigneeResolver:
    """Suggests owning teams for a classified issue.

    Example:
        resolver = AssigneeResolver()
        suggestion = resolver.suggest_assignees(Category.FEATURE, title, body, priority)
        suggestion.teams   # ("wasm-specialist", "rust-team")
        suggestion.reason  # "feature:wasm"
    """

    FALLBACK_TEAMS: tuple[str, ...] = ("triage-team",)
    FALLBACK_CONFIDENCE = 0.3
    LEADS_TEAM = "leads"
    ESCALATION_BOOST = 0.1

    def __init__(
        self,
        rules: tuple[tuple[Category, AssignmentRule], ...] | None = None,
    ) -> None:
        self._rules = rules if rules is not None else DEFAULT_RULES

    def rule_for(self, category: Category) -> AssignmentRule | None:
        """Return the rule registered for ``category``, if any."""
        for rule_category, rule in self._rules:
            if rule_category is category:
                return rule
        return None

    def suggest_assignees(
        self,
        category: Category,
        title: str,
        body: str,
        priority: PriorityResult,
    ) -> AssignmentSuggestion:
        """Resolve teams for an issue and escalate critical ones."""
        rule = self.rule_for(category)
        text = f"{title or ''} {body or ''}".lower()

        if isinstance(rule, SimpleRule):
            teams, confidence = rule.teams, rule.confidence
            reason = f"category:{category.value}"
        elif isinstance(rule, ContextualRule):
            branch = rule.resolve(text)
            teams, confidence = branch.teams, branch.confidence
            reason = f"{category.value}:{branch.name}"
        else:
            teams, confidence = self.FALLBACK_TEAMS, self.FALLBACK_CONFIDENCE
            reason = "fallback"

        escalated = priority.level is PriorityLevel.CRITICAL
        if escalated:
            teams = (self.LEADS_TEAM, *(team for team in teams if team != self.LEADS_TEAM))
            confidence = min(confidence + self.ESCALATION_BOOST, 1.0)

        return AssignmentSuggestion(
            teams=teams,
            confidence=confidence,
            reason=reason,
            escalated=escalated,
        )
