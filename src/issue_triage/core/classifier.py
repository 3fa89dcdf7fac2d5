"""Weighted pattern classifier.

Scores every catalog category against an issue's title and body and keeps the
best one. Per matched pattern a category earns a share of its weight:

    title pattern     0.4 x weight
    body pattern      0.3 x weight
    indicator pattern 0.2 x weight  (matched against title + body)

The sum is capped at 1.0. Scores are not normalised by pattern count, so a
category that declares more patterns can reach a higher score.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from issue_triage.core.catalog import DEFAULT_CATALOG, CategoryPatterns, PatternCatalog
from issue_triage.models.triage import Category, ClassificationResult

log = structlog.get_logger()


@dataclass(frozen=True)
class CategoryScore:
    """Score of a single category for one issue."""

    category: Category
    score: float
    matches: int


class Classifier:
    """Picks the best-matching category for an issue.

    Example:
        classifier = Classifier()
        result = classifier.classify("[BUG] Crash on startup", "panics on load")
        result.category  # Category.BUG
    """

    TITLE_FACTOR = 0.4
    BODY_FACTOR = 0.3
    INDICATOR_FACTOR = 0.2

    def __init__(self, catalog: PatternCatalog | None = None) -> None:
        self._catalog = catalog or DEFAULT_CATALOG

    @property
    def catalog(self) -> PatternCatalog:
        """Return the catalog in use."""
        return self._catalog

    def score(self, entry: CategoryPatterns, title: str, body: str) -> CategoryScore:
        """Score one catalog entry against the given text."""
        combined = f"{title} {body}"
        score = 0.0
        matches = 0

        for pattern in entry.title:
            if pattern.search(title):
                score += self.TITLE_FACTOR * entry.weight
                matches += 1

        for pattern in entry.body:
            if pattern.search(body):
                score += self.BODY_FACTOR * entry.weight
                matches += 1

        for pattern in entry.indicators:
            if pattern.search(combined):
                score += self.INDICATOR_FACTOR * entry.weight
                matches += 1

        return CategoryScore(category=entry.category, score=min(score, 1.0), matches=matches)

    def score_all(self, title: str, body: str) -> list[CategoryScore]:
        """Score every category, in catalog order."""
        return [self.score(entry, title or "", body or "") for entry in self._catalog]

    def classify(self, title: str, body: str) -> ClassificationResult:
        """Return the highest scoring category with at least one match.

        Ties go to the category declared first in the catalog. When nothing
        matches the result is ``needs-triage`` with zero confidence.
        """
        best: CategoryScore | None = None

        for candidate in self.score_all(title, body):
            if candidate.matches == 0:
                continue
            # Strict comparison keeps the earlier entry on ties
            if best is None or candidate.score > best.score:
                best = candidate

        if best is None:
            return ClassificationResult.unclassified()

        return ClassificationResult(
            category=best.category,
            confidence=best.score,
            matches=best.matches,
        )
