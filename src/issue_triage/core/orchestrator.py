"""Batch triage orchestrator.

This module implements the TriageOrchestrator, which runs each issue of a
batch through the pipeline:
1. Classify, prioritise, tag components and suggest teams (pure analysis)
2. Compute the minimal label delta
3. Apply labels through the mutation port (if enabled)
4. Post a triage comment on new issues (if enabled)
5. Fold the per-issue result into the batch metrics

A failure on one issue never aborts the batch. Only configuration problems
detected before the first issue are fatal.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

import structlog

from issue_triage.config.schema import TriageConfig
from issue_triage.core.assignment import AssigneeResolver
from issue_triage.core.classifier import Classifier
from issue_triage.core.comments import render_triage_comment
from issue_triage.core.components import ComponentDetector
from issue_triage.core.priority import PriorityEngine
from issue_triage.models.issue import IssueRecord, LabelDelta
from issue_triage.models.metrics import BatchResult, IssueResult, Metrics
from issue_triage.models.triage import (
    Category,
    ClassificationResult,
    PriorityResult,
    TriageOutcome,
)
from issue_triage.utils.async_helpers import (
    AnalysisError,
    ConfigurationError,
    FixedDelayPacer,
    LabelNotFoundError,
)
from issue_triage.utils.logging import LogEventNames, bind_context, unbind_context
from issue_triage.utils.security import sanitize_for_logging

if TYPE_CHECKING:
    from issue_triage.interfaces.tracker import MutationPort, PacingPolicy
    from issue_triage.utils.async_helpers import CancellationToken

log = structlog.get_logger()

NEEDS_TRIAGE_LABEL = "needs-triage"

TYPE_LABELS: dict[Category, str] = {
    Category.BUG: "bug",
    Category.SECURITY: "security",
    Category.PERFORMANCE: "performance",
    Category.DEPENDENCIES: "dependencies",
    Category.FEATURE: "type-feature",
    Category.DOCUMENTATION: "documentation",
    Category.CI_CD: "ci-cd",
    Category.WASM: "component-wasm",
}

# New issues get a comment when the classifier is at least this sure
COMMENT_CONFIDENCE_FLOOR = 0.5


def compute_label_delta(
    current_labels: Iterable[str],
    classification: ClassificationResult,
    priority: PriorityResult,
    components: Iterable[str],
) -> LabelDelta:
    """Compute the smallest label change reflecting a triage result.

    Args:
        current_labels: Labels on the issue now
        classification: Classifier result
        priority: Priority result (NONE leaves priority labels alone)
        components: Detected component tags

    Returns:
        LabelDelta whose additions are absent from, and removals present in,
        ``current_labels``
    """
    current = set(current_labels)
    to_add: list[str] = []
    to_remove: list[str] = []

    def add(label: str) -> None:
        if label not in current and label not in to_add:
            to_add.append(label)

    type_label = TYPE_LABELS.get(classification.category)
    if classification.is_classified and type_label:
        add(type_label)
        if NEEDS_TRIAGE_LABEL in current:
            to_remove.append(NEEDS_TRIAGE_LABEL)

    priority_label = priority.level.label
    if priority_label and not PriorityEngine.has_priority_label(current):
        add(priority_label)

    for component in components:
        add(component)

    return LabelDelta(to_add=tuple(to_add), to_remove=tuple(to_remove))


class TriageOrchestrator:
    """Runs a batch of issues through analysis and (optionally) mutation.

    Responsibilities:
    - Run the four analysis steps for each issue
    - Compute and apply label deltas through the injected mutation port
    - Post triage comments on uncommented issues
    - Isolate per-issue failures and accumulate batch metrics
    - Pace tracker interactions and honour cooperative cancellation

    Example:
        orchestrator = TriageOrchestrator(config.triage, mutations=tracker)
        batch = await orchestrator.run(issues)
        batch.metrics.errors  # Per-issue failures, never raised
    """

    def __init__(
        self,
        config: TriageConfig | None = None,
        mutations: MutationPort | None = None,
        pacing: PacingPolicy | None = None,
        classifier: Classifier | None = None,
        priority_engine: PriorityEngine | None = None,
        component_detector: ComponentDetector | None = None,
        assignee_resolver: AssigneeResolver | None = None,
    ) -> None:
        """Initialize the TriageOrchestrator.

        Args:
            config: Triage switches and thresholds (defaults to dry run)
            mutations: Tracker write port; required when labels or comments are enabled
            pacing: Delay policy between issues (defaults to config.pacing_delay)
            classifier: Category classifier
            priority_engine: Priority engine
            component_detector: Component detector
            assignee_resolver: Team assignment resolver
        """
        self._config = config or TriageConfig()
        self._mutations = mutations
        self._pacing = pacing or FixedDelayPacer(self._config.pacing_delay)
        self._classifier = classifier or Classifier()
        self._priority = priority_engine or PriorityEngine()
        self._components = component_detector or ComponentDetector()
        self._assignees = assignee_resolver or AssigneeResolver()

    @property
    def config(self) -> TriageConfig:
        """Return the triage configuration."""
        return self._config

    @property
    def writes_enabled(self) -> bool:
        """True when the run will touch the tracker."""
        return self._config.apply_labels or self._config.post_comments

    def validate_batch(self, issues: Sequence[IssueRecord]) -> list[IssueRecord]:
        """Check the batch is a sequence of uniquely numbered IssueRecords.

        Raises:
            ConfigurationError: If it is not
        """
        if isinstance(issues, (str, bytes)) or not isinstance(issues, Sequence):
            raise ConfigurationError(f"Batch must be a sequence of issues, got {type(issues)}")

        seen: set[int] = set()
        for position, issue in enumerate(issues):
            if not isinstance(issue, IssueRecord):
                raise ConfigurationError(
                    f"Batch item {position} is {type(issue).__name__}, expected IssueRecord"
                )
            if issue.number in seen:
                raise ConfigurationError(f"Issue #{issue.number} appears twice in the batch")
            seen.add(issue.number)

        return list(issues)

    def analyze(self, issue: IssueRecord) -> TriageOutcome:
        """Run the pure analysis steps for one issue."""
        classification = self._classifier.classify(issue.title, issue.body)
        priority = self._priority.determine_priority(
            issue.title, issue.body, issue.labels, classification
        )
        components = self._components.detect(issue.title, issue.body)
        assignment = self._assignees.suggest_assignees(
            classification.category, issue.title, issue.body, priority
        )
        delta = compute_label_delta(issue.labels, classification, priority, components)

        return TriageOutcome(
            issue_number=issue.number,
            title=issue.title,
            classification=classification,
            priority=priority,
            components=components,
            assignment=assignment,
            label_delta=delta,
            meets_threshold=classification.confidence >= self._config.confidence_threshold,
        )

    async def analyze_batch(self, issues: Sequence[IssueRecord]) -> list[IssueResult]:
        """Analyze issues concurrently in worker threads without touching the tracker.

        Results come back in input order. An issue whose analysis raises
        yields a failed IssueResult; the other issues are unaffected.

        Raises:
            ConfigurationError: If the batch is malformed
        """
        batch = self.validate_batch(issues)

        outcomes = await asyncio.gather(
            *(asyncio.to_thread(self.analyze, issue) for issue in batch),
            return_exceptions=True,
        )

        results: list[IssueResult] = []
        for issue, outcome in zip(batch, outcomes, strict=True):
            if isinstance(outcome, Exception):
                error = AnalysisError(
                    f"Failed to analyze issue #{issue.number}: {outcome}", issue.number
                )
                log.error(
                    LogEventNames.ISSUE_ANALYSIS_FAILED,
                    issue_number=issue.number,
                    error=str(outcome),
                )
                results.append(IssueResult.failed(issue.number, str(error)))
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                results.append(
                    IssueResult(
                        issue_number=issue.number,
                        outcome=outcome,
                        metrics=Metrics(
                            processed=1,
                            classified=1 if outcome.classification.is_classified else 0,
                        ),
                    )
                )

        return results

    async def process_issue(self, issue: IssueRecord) -> IssueResult:
        """Run one issue through the full pipeline.

        Never raises for per-issue problems; they are reported in the
        returned IssueResult instead.

        Raises:
            ConfigurationError: If writes are enabled without a mutation port
        """
        mutations = self._require_mutations() if self.writes_enabled else None

        bind_context(issue_number=issue.number)
        try:
            try:
                outcome = self.analyze(issue)
            except Exception as e:
                error = AnalysisError(f"Failed to analyze issue #{issue.number}: {e}", issue.number)
                log.exception(LogEventNames.ISSUE_ANALYSIS_FAILED, error=str(e))
                return IssueResult.failed(issue.number, str(error))

            log.info(
                LogEventNames.ISSUE_ANALYZED,
                title=sanitize_for_logging(issue.title[:80]),
                category=outcome.category.value,
                confidence=round(outcome.confidence, 3),
                priority=outcome.priority.level.value,
                components=list(outcome.components),
                teams=list(outcome.assignment.teams),
                labels_to_add=list(outcome.label_delta.to_add),
                labels_to_remove=list(outcome.label_delta.to_remove),
            )

            labeled = 0
            errors = 0

            if mutations is not None and self._config.apply_labels:
                labeled, errors = await self._apply_label_delta(
                    mutations, issue, outcome.label_delta
                )

            if (
                mutations is not None
                and self._config.post_comments
                and self._should_comment(issue, outcome)
            ):
                if not await self._post_comment(mutations, issue, outcome):
                    errors += 1

            return IssueResult(
                issue_number=issue.number,
                outcome=outcome,
                metrics=Metrics(
                    processed=1,
                    classified=1 if outcome.classification.is_classified else 0,
                    labeled=labeled,
                    errors=errors,
                ),
            )
        finally:
            unbind_context("issue_number")

    async def run(
        self,
        issues: Sequence[IssueRecord],
        cancel_token: CancellationToken | None = None,
    ) -> BatchResult:
        """Triage a batch of issues sequentially.

        Args:
            issues: Issues to process, in order
            cancel_token: Checked before each issue; a cancelled run returns
                the issues handled so far

        Returns:
            BatchResult with outcomes and folded metrics

        Raises:
            ConfigurationError: If the batch cannot start
        """
        if self.writes_enabled:
            self._require_mutations()

        batch = self.validate_batch(issues)
        result = BatchResult()

        log.info(
            LogEventNames.BATCH_STARTED,
            issues=len(batch),
            apply_labels=self._config.apply_labels,
            post_comments=self._config.post_comments,
        )

        for index, issue in enumerate(batch):
            if cancel_token is not None and cancel_token.is_cancelled:
                result.cancelled = True
                log.warning(
                    LogEventNames.BATCH_CANCELLED,
                    processed=index,
                    remaining=len(batch) - index,
                )
                break

            if index > 0:
                await self._pacing.pause()

            result.record(await self.process_issue(issue))

        log.info(
            LogEventNames.BATCH_COMPLETED,
            cancelled=result.cancelled,
            **result.metrics.to_dict(),
        )
        return result

    def _require_mutations(self) -> MutationPort:
        """Return the mutation port, or fail when none was injected."""
        if self._mutations is None:
            raise ConfigurationError("Label or comment writes enabled but no mutation port given")
        return self._mutations

    def _should_comment(self, issue: IssueRecord, outcome: TriageOutcome) -> bool:
        """Only comment on issues nobody has replied to yet."""
        if issue.comment_count > 0:
            return False
        return bool(outcome.label_delta.to_add) or outcome.confidence > COMMENT_CONFIDENCE_FLOOR

    async def _apply_label_delta(
        self, mutations: MutationPort, issue: IssueRecord, delta: LabelDelta
    ) -> tuple[int, int]:
        """Apply a label delta. Returns (labeled, errors) for the metrics."""
        labeled = 0
        errors = 0

        if delta.to_add:
            try:
                await mutations.add_labels(issue.number, list(delta.to_add))
                labeled = 1
                log.info(LogEventNames.LABELS_ADDED, labels=list(delta.to_add))
            except Exception as e:
                errors += 1
                log.error(LogEventNames.LABELS_ADD_FAILED, labels=list(delta.to_add), error=str(e))

        for label in delta.to_remove:
            try:
                await mutations.remove_label(issue.number, label)
                log.info(LogEventNames.LABEL_REMOVED, label=label)
            except LabelNotFoundError as e:
                log.warning(LogEventNames.LABEL_ALREADY_ABSENT, label=label, error=str(e))
            except Exception as e:
                errors += 1
                log.error(LogEventNames.LABEL_REMOVE_FAILED, label=label, error=str(e))

        return labeled, errors

    async def _post_comment(
        self, mutations: MutationPort, issue: IssueRecord, outcome: TriageOutcome
    ) -> bool:
        """Post the triage comment. Returns False on failure."""
        try:
            await mutations.create_comment(issue.number, render_triage_comment(outcome))
        except Exception as e:
            log.error(LogEventNames.COMMENT_FAILED, error=str(e))
            return False

        log.info(LogEventNames.COMMENT_POSTED)
        return True
