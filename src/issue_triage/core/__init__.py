"""Core business logic components.

This module exports the main business logic classes:
- Classifier: Scores issue text against the category pattern catalog
- PriorityEngine: Derives an urgency level
- ComponentDetector: Tags referenced subsystems
- AssigneeResolver: Suggests owning teams
- TriageOrchestrator: Runs a batch through the pipeline
- ReportGenerator: Aggregates outcomes into a report
"""

from issue_triage.core.assignment import AssigneeResolver
from issue_triage.core.catalog import DEFAULT_CATALOG, PatternCatalog
from issue_triage.core.classifier import Classifier
from issue_triage.core.components import ComponentDetector
from issue_triage.core.orchestrator import TriageOrchestrator, compute_label_delta
from issue_triage.core.priority import PriorityEngine
from issue_triage.core.report import ReportGenerator, TriageReport, render_markdown

__all__ = [
    "DEFAULT_CATALOG",
    "AssigneeResolver",
    "Classifier",
    "ComponentDetector",
    "PatternCatalog",
    "PriorityEngine",
    "ReportGenerator",
    "TriageOrchestrator",
    "TriageReport",
    "compute_label_delta",
    "render_markdown",
]
