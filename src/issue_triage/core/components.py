"""Component tagging from issue text."""

from __future__ import annotations

import re
from collections.abc import Iterable

from issue_triage.core.catalog import compile_patterns

# Vocabulary order is the order tags are reported and labelled in
DEFAULT_COMPONENTS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("component-cli", (r"\bCLI\b", r"command line", r"\bterminal\b")),
    ("component-core", (r"\bcore\b", r"\bengine\b", r"\balgorithms?\b", r"\bdetection\b")),
    ("component-config", (r"\bconfig", r"\bsettings\b")),
    ("component-parsing", (r"\bpars(e|er|ers|ing)\b", r"\bADRs?\b", r"\bmarkdown\b")),
    ("component-drift", (r"\bdrift", r"\bdetection\b", r"\bdiff\b", r"\bcompare\b")),
    ("component-wasm", (r"\bWASM\b", r"WebAssembly")),
    (
        "component-github-action",
        (r"github actions?", r"\bworkflows?\b", r"\bCI\b", r"\bCD\b", r"\bpipelines?\b"),
    ),
    ("component-docs", (r"\bdocs\b", r"documentation", r"readme", r"\bguide\b")),
    ("component-tests", (r"\btests?\b", r"\btesting\b", r"\bspec\b", r"unit test")),
)


class ComponentDetector:
    """Tags the subsystems an issue refers to.

    A component is tagged as soon as one of its patterns matches; the
    remaining patterns for that component are not evaluated.
    """

    def __init__(
        self,
        components: Iterable[tuple[str, Iterable[str]]] | None = None,
    ) -> None:
        source = components if components is not None else DEFAULT_COMPONENTS
        self._components: tuple[tuple[str, tuple[re.Pattern[str], ...]], ...] = tuple(
            (name, compile_patterns(patterns)) for name, patterns in source
        )

    @property
    def vocabulary(self) -> tuple[str, ...]:
        """All component tags this detector can emit."""
        return tuple(name for name, _ in self._components)

    def detect(self, title: str, body: str) -> tuple[str, ...]:
        """Return the component tags referenced by the issue, in vocabulary order."""
        text = f"{title or ''} {body or ''}"
        tags: list[str] = []

        for name, patterns in self._components:
            for pattern in patterns:
                if pattern.search(text):
                    tags.append(name)
                    break

        return tuple(tags)
