"""Composite conditions built on the gate algebra.

Achievement-style consumers need nested condition trees whose leaves are
either gate conditions or arbitrary checks over the context. They reuse
``evaluate_clauses`` so the all/any/none semantics stay identical to gates.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from posture.assessment.gating.evaluator import (
    ConditionEvaluator,
    EvaluationContext,
    GateEvaluation,
    evaluate_clauses,
    evaluate_condition,
    evaluate_gate,
)
from posture.assessment.models import Gate, GateCondition
from posture.observability.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ConditionLeaf:
    """Adapter exposing a single gate condition as a ``ConditionEvaluator``."""

    condition: GateCondition

    def evaluate(self, context: EvaluationContext) -> bool:
        return evaluate_condition(self.condition, context)


@dataclass(frozen=True)
class GateLeaf:
    """Adapter exposing a whole gate as a ``ConditionEvaluator``."""

    gate: Gate

    def evaluate(self, context: EvaluationContext) -> bool:
        return evaluate_gate(self.gate, context).passes


@dataclass(frozen=True)
class PredicateCondition:
    """A named check over the context; failures count as not satisfied."""

    name: str
    predicate: Callable[[EvaluationContext], bool]

    def evaluate(self, context: EvaluationContext) -> bool:
        try:
            return bool(self.predicate(context))
        except Exception as e:  # noqa: BLE001
            logger.warning("predicate_condition_error", condition=self.name, error=str(e))
            return False


@dataclass(frozen=True)
class CompositeCondition:
    """Recursive all/any/none tree over any condition evaluators."""

    all: Sequence[ConditionEvaluator] | None = None
    any: Sequence[ConditionEvaluator] | None = None
    none: Sequence[ConditionEvaluator] | None = None
    label: str = field(default="composite", compare=False)

    def explain(self, context: EvaluationContext) -> GateEvaluation:
        """Evaluate with per-clause details, as ``evaluate_gate`` does."""
        return evaluate_clauses(
            self.all,
            self.any,
            self.none,
            lambda item: item.evaluate(context),
        )

    def evaluate(self, context: EvaluationContext) -> bool:
        return self.explain(context).passes

    @classmethod
    def from_gate(cls, gate: Gate, label: str = "composite") -> "CompositeCondition":
        """Lift a declarative gate into a composite tree."""

        def leaves(conditions: list[GateCondition] | None) -> list[ConditionEvaluator] | None:
            if conditions is None:
                return None
            return [ConditionLeaf(condition) for condition in conditions]

        return cls(
            all=leaves(gate.all),
            any=leaves(gate.any),
            none=leaves(gate.none),
            label=label,
        )
