"""Tests for the priority engine."""

from __future__ import annotations

import pytest

from issue_triage.core.catalog import compile_patterns
from issue_triage.core.priority import KeywordFamily, PriorityEngine
from issue_triage.models.triage import Category, ClassificationResult, PriorityLevel


def classified(category: Category, confidence: float = 0.8) -> ClassificationResult:
    """Build a classification result for the engine."""
    return ClassificationResult(category=category, confidence=confidence, matches=1)


class TestExistingPriority:
    """Test that existing priority labels are respected."""

    def test_existing_label_short_circuits(self) -> None:
        """Test that a priority label wins over any content."""
        result = PriorityEngine().determine_priority(
            "Critical security vulnerability",
            "critical security vulnerability",
            ["priority-high"],
            classified(Category.SECURITY, 1.0),
        )
        assert result.level is PriorityLevel.NONE
        assert result.factors == ("priority-already-assigned",)
        assert not result.is_assigned

    def test_non_priority_labels_ignored(self) -> None:
        """Test that unrelated labels do not block prioritisation."""
        result = PriorityEngine().determine_priority(
            "urgent", "", ["bug", "high-priority"], classified(Category.BUG)
        )
        assert result.level is PriorityLevel.CRITICAL

    def test_has_priority_label(self) -> None:
        """Test the prefix check."""
        assert PriorityEngine.has_priority_label(["bug", "priority-low"])
        assert not PriorityEngine.has_priority_label(["bug", "low-priority"])
        assert not PriorityEngine.has_priority_label([])


class TestSecurityOverride:
    """Test the security short-circuit."""

    def test_confident_security_is_critical(self) -> None:
        """Test the override for confident security classifications."""
        result = PriorityEngine().determine_priority(
            "Update dependency to fix CVE-2024-1234",
            "security vulnerability in dependency, CVE disclosure",
            [],
            classified(Category.SECURITY, 1.0),
        )
        assert result.level is PriorityLevel.CRITICAL
        assert result.confidence == 0.95
        assert result.factors == ("security-issue",)

    def test_threshold_is_exclusive(self) -> None:
        """Test that exactly 0.6 security confidence falls back to scoring."""
        result = PriorityEngine().determine_priority(
            "security question", "", [], classified(Category.SECURITY, 0.6)
        )
        assert result.level is PriorityLevel.LOW
        assert "security-issue" not in result.factors


class TestKeywordScoring:
    """Test additive keyword families and level thresholds."""

    def test_bug_crash_is_critical(self) -> None:
        """Test the severe bug family."""
        result = PriorityEngine().determine_priority(
            "[BUG] Crash on startup",
            "the app crashes with a stacktrace when parsing config",
            [],
            classified(Category.BUG, 1.0),
        )
        assert result.level in (PriorityLevel.HIGH, PriorityLevel.CRITICAL)
        assert "severe-bug" in result.factors

    def test_severe_keywords_only_apply_to_bugs(self) -> None:
        """Test that severe-bug needs the bug category."""
        result = PriorityEngine().determine_priority(
            "Crash reporter feature", "", [], classified(Category.FEATURE)
        )
        assert "severe-bug" not in result.factors
        assert result.level is PriorityLevel.LOW

    def test_roadmap_is_low(self) -> None:
        """Test that deferral keywords pull priority down."""
        result = PriorityEngine().determine_priority(
            "[Roadmap] Add dark mode",
            "future enhancement, nice to have",
            [],
            classified(Category.FEATURE, 0.42),
        )
        assert result.level is PriorityLevel.LOW
        assert result.factors == ("deferred",)
        assert result.confidence == 0.0

    def test_phase_three_title_is_high(self) -> None:
        """Test the title-only phase family."""
        result = PriorityEngine().determine_priority(
            "[Phase 3] Implement exporter", "", [], classified(Category.FEATURE)
        )
        assert result.level is PriorityLevel.HIGH
        assert result.factors == ("high-priority-phase",)

    def test_phase_three_in_body_ignored(self) -> None:
        """Test that the phase marker only counts in the title."""
        result = PriorityEngine().determine_priority(
            "Implement exporter", "planned for [phase 3]", [], classified(Category.FEATURE)
        )
        assert "high-priority-phase" not in result.factors

    def test_user_impact_is_medium(self) -> None:
        """Test a single moderate family."""
        result = PriorityEngine().determine_priority(
            "Wrong colour shown to users", "", [], classified(Category.FEATURE)
        )
        assert result.level is PriorityLevel.MEDIUM
        assert result.confidence == pytest.approx(0.4)

    def test_families_accumulate_and_clip(self) -> None:
        """Test that deltas add up and are clipped to 1.0."""
        result = PriorityEngine().determine_priority(
            "Urgent: slow responses for customers",
            "",
            [],
            classified(Category.PERFORMANCE),
        )
        assert set(result.factors) == {"urgent-keywords", "performance-impact", "user-impact"}
        assert result.confidence == 1.0
        assert result.level is PriorityLevel.CRITICAL

    def test_minor_bug_lowers_score(self) -> None:
        """Test the negative minor bug family."""
        result = PriorityEngine().determine_priority(
            "Minor glitch for users", "", [], classified(Category.BUG)
        )
        assert set(result.factors) == {"minor-bug", "user-impact"}
        assert result.confidence == pytest.approx(0.1)
        assert result.level is PriorityLevel.LOW

    def test_nothing_matched_is_low(self) -> None:
        """Test the default level."""
        result = PriorityEngine().determine_priority(
            "Hello", "", [], ClassificationResult.unclassified()
        )
        assert result.level is PriorityLevel.LOW
        assert result.factors == ()

    @pytest.mark.parametrize(
        ("score", "level"),
        [
            (1.0, PriorityLevel.CRITICAL),
            (0.8, PriorityLevel.CRITICAL),
            (0.79, PriorityLevel.HIGH),
            (0.6, PriorityLevel.HIGH),
            (0.3, PriorityLevel.MEDIUM),
            (0.29, PriorityLevel.LOW),
            (0.0, PriorityLevel.LOW),
        ],
    )
    def test_level_thresholds(self, score: float, level: PriorityLevel) -> None:
        """Test the bucket boundaries."""
        assert PriorityEngine.level_for(score) is level

    def test_custom_families(self) -> None:
        """Test injecting a custom family set."""
        family = KeywordFamily("release-blocker", 0.65, compile_patterns([r"\brelease\b"]))
        result = PriorityEngine([family]).determine_priority(
            "Fix before release", "", [], classified(Category.BUG)
        )
        assert result.level is PriorityLevel.HIGH
        assert result.factors == ("release-blocker",)
