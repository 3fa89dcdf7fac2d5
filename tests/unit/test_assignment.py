"""Tests for team assignment suggestions."""

from __future__ import annotations

import re

import pytest

from issue_triage.core.assignment import (
    DEFAULT_RULES,
    FEATURE_RULE,
    AssigneeResolver,
    ContextBranch,
    ContextualRule,
    SimpleRule,
)
from issue_triage.models.triage import Category, PriorityLevel, PriorityResult

LOW = PriorityResult(level=PriorityLevel.LOW, confidence=0.1)
CRITICAL = PriorityResult(level=PriorityLevel.CRITICAL, confidence=0.9)


class TestRules:
    """Test the rule variants."""

    def test_every_rule_is_a_known_variant(self) -> None:
        """Test the default table only holds simple or contextual rules."""
        for _, rule in DEFAULT_RULES:
            assert isinstance(rule, (SimpleRule, ContextualRule))

    def test_contextual_rule_first_match_wins(self) -> None:
        """Test branch evaluation order."""
        rule = ContextualRule(
            branches=(
                ContextBranch("a", ("team-a",), 0.9, re.compile("shared")),
                ContextBranch("b", ("team-b",), 0.8, re.compile("shared")),
            ),
            default=ContextBranch("default", ("team-d",), 0.1),
        )
        assert rule.resolve("shared text").name == "a"
        assert rule.resolve("other").name == "default"

    def test_feature_branch_order(self) -> None:
        """Test that wasm beats ci_cd and ci_cd beats core."""
        assert FEATURE_RULE.resolve("wasm ci core").name == "wasm"
        assert FEATURE_RULE.resolve("ci pipeline for core").name == "ci_cd"
        assert FEATURE_RULE.resolve("core engine rewrite").name == "core"
        assert FEATURE_RULE.resolve("dark mode").name == "default"


class TestAssigneeResolver:
    """Test AssigneeResolver."""

    def test_simple_rule(self) -> None:
        """Test a category with a flat team list."""
        suggestion = AssigneeResolver().suggest_assignees(Category.BUG, "Crash", "", LOW)
        assert suggestion.teams == ("rust-team", "core-developers")
        assert suggestion.confidence == 0.8
        assert suggestion.reason == "category:bug"
        assert not suggestion.escalated

    @pytest.mark.parametrize(
        ("title", "teams", "confidence", "reason"),
        [
            ("Add WebAssembly export", ("wasm-specialist", "rust-team"), 0.85, "feature:wasm"),
            (
                "Add CI caching",
                ("devops-team", "automation-engineers"),
                0.75,
                "feature:ci_cd",
            ),
            ("Faster core engine", ("core-developers", "rust-team"), 0.7, "feature:core"),
            ("Add dark mode", ("dev-team", "feature-team"), 0.5, "feature:default"),
        ],
    )
    def test_feature_context(
        self, title: str, teams: tuple[str, ...], confidence: float, reason: str
    ) -> None:
        """Test the contextual feature rule."""
        suggestion = AssigneeResolver().suggest_assignees(Category.FEATURE, title, "", LOW)
        assert suggestion.teams == teams
        assert suggestion.confidence == confidence
        assert suggestion.reason == reason

    def test_ci_inside_word_is_not_ci(self) -> None:
        """Test that 'ci' inside a word does not pick the ci_cd branch."""
        suggestion = AssigneeResolver().suggest_assignees(
            Category.FEATURE, "Add special characters", "", LOW
        )
        assert suggestion.reason == "feature:default"

    @pytest.mark.parametrize("category", [Category.WASM, Category.NEEDS_TRIAGE])
    def test_fallback(self, category: Category) -> None:
        """Test categories without a rule fall back to triage."""
        suggestion = AssigneeResolver().suggest_assignees(category, "x", "y", LOW)
        assert suggestion.teams == ("triage-team",)
        assert suggestion.confidence == 0.3
        assert suggestion.reason == "fallback"

    def test_critical_escalates_to_leads(self) -> None:
        """Test escalation prepends leads and boosts confidence."""
        suggestion = AssigneeResolver().suggest_assignees(
            Category.PERFORMANCE, "Slow", "", CRITICAL
        )
        assert suggestion.teams == ("leads", "performance-team", "optimization-experts")
        assert suggestion.confidence == pytest.approx(0.85)
        assert suggestion.escalated

    def test_escalation_confidence_capped(self) -> None:
        """Test the boost never pushes confidence past 1.0."""
        suggestion = AssigneeResolver().suggest_assignees(Category.SECURITY, "CVE", "", CRITICAL)
        assert suggestion.teams[0] == "leads"
        assert suggestion.confidence == pytest.approx(1.0)

    def test_leads_added_once(self) -> None:
        """Test leads is not duplicated if a rule already lists it."""
        rules = ((Category.BUG, SimpleRule(("leads", "rust-team"), 0.5)),)
        suggestion = AssigneeResolver(rules).suggest_assignees(Category.BUG, "", "", CRITICAL)
        assert suggestion.teams == ("leads", "rust-team")

    def test_fallback_escalates(self) -> None:
        """Test critical unassigned issues still reach leads."""
        suggestion = AssigneeResolver().suggest_assignees(Category.WASM, "", "", CRITICAL)
        assert suggestion.teams == ("leads", "triage-team")
        assert suggestion.confidence == pytest.approx(0.4)
        assert suggestion.reason == "fallback"

    def test_rule_for(self) -> None:
        """Test rule lookup."""
        resolver = AssigneeResolver()
        assert resolver.rule_for(Category.FEATURE) is FEATURE_RULE
        assert resolver.rule_for(Category.WASM) is None
