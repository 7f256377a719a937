"""Gate evaluation: comparators, the all/any/none algebra, composites."""

from posture.assessment.gating.comparators import (
    COMPARATORS,
    NOT_APPLICABLE,
    ComparatorSpec,
    NotApplicable,
    get_comparator,
    is_known_comparator,
)
from posture.assessment.gating.composite import (
    CompositeCondition,
    ConditionLeaf,
    GateLeaf,
    PredicateCondition,
)
from posture.assessment.gating.evaluator import (
    ConditionEvaluator,
    EvaluationContext,
    GateDetails,
    GateEvaluation,
    evaluate_clauses,
    evaluate_condition,
    evaluate_gate,
    evaluate_gates,
)

__all__ = [
    "COMPARATORS",
    "NOT_APPLICABLE",
    "ComparatorSpec",
    "NotApplicable",
    "get_comparator",
    "is_known_comparator",
    "CompositeCondition",
    "ConditionLeaf",
    "GateLeaf",
    "PredicateCondition",
    "ConditionEvaluator",
    "EvaluationContext",
    "GateDetails",
    "GateEvaluation",
    "evaluate_clauses",
    "evaluate_condition",
    "evaluate_gate",
    "evaluate_gates",
]
