"""Static pattern catalog used by the classifier.

The catalog is an ordered tuple. Declaration order is part of its contract:
when two categories reach the same score, the one declared first wins.

Order: bug, security, performance, dependencies, feature, documentation,
ci_cd, wasm.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from issue_triage.models.triage import Category


def compile_patterns(patterns: Iterable[str]) -> tuple[re.Pattern[str], ...]:
    """Compile case-insensitive patterns, preserving order."""
    return tuple(re.compile(pattern, re.IGNORECASE) for pattern in patterns)


@dataclass(frozen=True)
class CategoryPatterns:
    """Patterns and weight for one category.

    Title patterns are matched against the title, body patterns against the
    body, and indicator patterns against title and body joined together.
    """

    category: Category
    weight: float
    title: tuple[re.Pattern[str], ...]
    body: tuple[re.Pattern[str], ...]
    indicators: tuple[re.Pattern[str], ...] = ()

    def __post_init__(self) -> None:
        if not 0.0 < self.weight <= 1.0:
            raise ValueError(f"Weight for {self.category} must be in (0, 1], got {self.weight}")

    @classmethod
    def build(
        cls,
        category: Category,
        weight: float,
        title: Iterable[str],
        body: Iterable[str],
        indicators: Iterable[str] = (),
    ) -> CategoryPatterns:
        """Build an entry from raw pattern strings."""
        return cls(
            category=category,
            weight=weight,
            title=compile_patterns(title),
            body=compile_patterns(body),
            indicators=compile_patterns(indicators),
        )


class PatternCatalog:
    """Ordered, read-only sequence of category pattern entries."""

    def __init__(self, entries: Iterable[CategoryPatterns]) -> None:
        self._entries = tuple(entries)

        seen: set[Category] = set()
        for entry in self._entries:
            if entry.category is Category.NEEDS_TRIAGE:
                raise ValueError("needs-triage is a sentinel and cannot have patterns")
            if entry.category in seen:
                raise ValueError(f"Duplicate catalog entry for {entry.category}")
            seen.add(entry.category)

    def __iter__(self) -> Iterator[CategoryPatterns]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def categories(self) -> tuple[Category, ...]:
        """Categories in declaration order."""
        return tuple(entry.category for entry in self._entries)

    def get(self, category: Category) -> CategoryPatterns | None:
        """Look up the entry for ``category``."""
        for entry in self._entries:
            if entry.category is category:
                return entry
        return None


DEFAULT_CATALOG = PatternCatalog(
    [
        CategoryPatterns.build(
            Category.BUG,
            0.8,
            title=[
                r"\[BUG\]",
                r"\bbug\b",
                r"\berror\b",
                r"\bbroken\b",
                r"\bfix(es|ed)?\b",
                r"\bcrash",
            ],
            body=[
                r"\berror",
                r"\bbroken\b",
                r"doesn'?t work",
                r"\bfail(s|ed|ing|ure)?\b",
                r"\bexception\b",
                r"\bcrash",
            ],
            indicators=[
                r"stack\s*trace|traceback",
                r"steps to reproduce",
                r"\bpanic(ked|s)?\b",
                r"expected behaviou?r",
            ],
        ),
        CategoryPatterns.build(
            Category.SECURITY,
            1.0,
            title=[r"security", r"vulnerab", r"\bCVE\b", r"exploit", r"unsafe"],
            body=[r"security", r"vulnerab", r"CVE-\d", r"exploit", r"unsafe", r"attack"],
            indicators=[
                r"CVE-\d{4}-\d{4,}",
                r"\bGHSA-",
                r"security advisory",
                r"\b(XSS|CSRF|RCE|SQL injection)\b",
            ],
        ),
        CategoryPatterns.build(
            Category.PERFORMANCE,
            0.7,
            title=[r"performance", r"\bslow", r"optimi[sz]", r"\bmemory\b", r"\bspeed"],
            body=[r"performance", r"\bslow", r"optimi[sz]", r"memory leak", r"bottleneck"],
            indicators=[r"benchmark", r"\blatency\b", r"\bCPU\b", r"\bprofil(e|er|ing)\b"],
        ),
        CategoryPatterns.build(
            Category.DEPENDENCIES,
            0.5,
            title=[r"dependenc", r"\bpackage", r"\bupdate", r"renovate", r"\bdeps\b"],
            body=[r"dependenc", r"\bpackage", r"\bupdate", r"\bversion\b", r"upgrade"],
            indicators=[
                r"\bbump(s|ed)?\b",
                r"dependabot",
                r"\bv?\d+\.\d+\.\d+\b",
                r"Cargo\.(toml|lock)|package(-lock)?\.json|requirements\.txt",
            ],
        ),
        CategoryPatterns.build(
            Category.FEATURE,
            0.6,
            title=[r"\[PHASE", r"feature", r"enhancement", r"\badd\b", r"implement"],
            body=[r"feature", r"enhancement", r"\bnew\b", r"implement", r"\badd\b"],
            indicators=[
                r"would be (nice|great|useful)",
                r"\bproposal\b",
                r"\buse case\b",
                r"\bsupport for\b",
            ],
        ),
        CategoryPatterns.build(
            Category.DOCUMENTATION,
            0.4,
            title=[r"\breport\b", r"analysis", r"\bdocs?\b", r"documentation", r"\bguide\b"],
            body=[r"\breport\b", r"analysis", r"documentation", r"readme", r"\bguide\b"],
            indicators=[r"\btypo\b", r"\btutorial\b", r"\bexamples?\b", r"\.md\b"],
        ),
        CategoryPatterns.build(
            Category.CI_CD,
            0.6,
            title=[r"\bCI\b", r"\bCD\b", r"pipeline", r"workflow", r"\bactions?\b", r"\bbuild\b"],
            body=[r"pipeline", r"workflow", r"github action", r"\bbuild\b", r"deploy"],
            indicators=[r"\.github/workflows", r"\brunners?\b", r"\bjobs? fail"],
        ),
        CategoryPatterns.build(
            Category.WASM,
            0.8,
            title=[r"\bWASM\b", r"WebAssembly"],
            body=[r"WebAssembly", r"\bwasm\b", r"web assembly"],
            indicators=[r"wasm-pack", r"wasm-bindgen", r"wasm32"],
        ),
    ]
)
