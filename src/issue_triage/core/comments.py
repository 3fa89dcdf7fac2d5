"""Markdown body for the triage comment posted on new issues."""

from __future__ import annotations

from issue_triage.models.triage import Category, PriorityLevel, TriageOutcome

CATEGORY_EMOJI: dict[Category, str] = {
    Category.BUG: "🐛",
    Category.SECURITY: "🔒",
    Category.PERFORMANCE: "📊",
    Category.DEPENDENCIES: "📦",
    Category.FEATURE: "✨",
    Category.DOCUMENTATION: "📝",
    Category.CI_CD: "🔄",
    Category.WASM: "⚙️",
    Category.NEEDS_TRIAGE: "🔍",
}

PRIORITY_EMOJI: dict[PriorityLevel, str] = {
    PriorityLevel.CRITICAL: "🔴",
    PriorityLevel.HIGH: "🟠",
    PriorityLevel.MEDIUM: "🟡",
    PriorityLevel.LOW: "🟢",
}


def confidence_bar(confidence: float, width: int = 10) -> str:
    """Render a confidence value as a fixed-width text bar."""
    filled = max(0, min(width, int(confidence * width)))
    return "█" * filled + "░" * (width - filled)


def render_triage_comment(outcome: TriageOutcome) -> str:
    """Build the comment summarising an issue's triage result."""
    classification = outcome.classification
    priority = outcome.priority

    if priority.is_assigned:
        priority_text = f"{PRIORITY_EMOJI.get(priority.level, '⚪')} `{priority.level.value}`"
    else:
        priority_text = "⚪ `already assigned`"

    components = ", ".join(f"`{c}`" for c in outcome.components) or "none detected"
    teams = ", ".join(f"@{team}" for team in outcome.assignment.teams)

    lines = [
        "## 🤖 Automated Issue Triage",
        "",
        "Thanks for opening this issue! It has been analysed by the triage bot.",
        "",
        "### 📊 Classification",
        f"- **Type:** {CATEGORY_EMOJI.get(classification.category, '❓')} "
        f"`{classification.category.value}`",
        f"- **Confidence:** `{confidence_bar(classification.confidence)}` "
        f"{classification.confidence * 100:.1f}%",
        f"- **Priority:** {priority_text}",
        f"- **Components:** {components}",
        "",
        "### 👥 Suggested Teams",
        teams,
    ]

    if outcome.label_delta.to_add:
        added = ", ".join(f"`{label}`" for label in outcome.label_delta.to_add)
        lines.extend(["", f"**Labels:** {added}"])

    lines.extend(
        [
            "",
            "---",
            "*If this classification looks wrong, comment with your reasoning and a "
            "maintainer will review it.*",
        ]
    )

    return "\n".join(lines)
