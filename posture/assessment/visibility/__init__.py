"""Visibility resolution and static dependency analysis."""

from posture.assessment.visibility.graph import (
    DependencyGraph,
    detect_cycles,
    format_cycle,
    suite_node,
)
from posture.assessment.visibility.resolver import (
    QuestionExplanation,
    SuiteExplanation,
    VisibilityDiagnostic,
    VisibilityResolver,
    VisibilityResult,
    resolve_visibility,
)

__all__ = [
    "DependencyGraph",
    "detect_cycles",
    "format_cycle",
    "suite_node",
    "QuestionExplanation",
    "SuiteExplanation",
    "VisibilityDiagnostic",
    "VisibilityResolver",
    "VisibilityResult",
    "resolve_visibility",
]
