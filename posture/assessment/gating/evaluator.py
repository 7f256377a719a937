"""Gate evaluation.

Evaluation is pure and never raises for content problems: an unknown
comparator or a failing comparison resolves the single condition to
``False`` and is logged, so a bad rule hides one question instead of
halting the question flow.
"""

from collections.abc import Callable, Iterable, Mapping
from typing import Any, Protocol, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from posture.assessment.gating.comparators import get_comparator
from posture.assessment.models import Gate, GateCondition
from posture.observability.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class EvaluationContext(BaseModel):
    """Flat mapping of current answer and fact values keyed by id.

    Expired records are expected to be absent already; the facts store
    builds contexts that way.
    """

    model_config = ConfigDict(frozen=True)

    answers: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_mapping(cls, answers: Mapping[str, Any]) -> "EvaluationContext":
        return cls(answers=dict(answers))

    def lookup(self, key: str) -> Any:
        """Value stored under a key, or ``None`` when absent."""
        return self.answers.get(key)

    def with_values(self, **values: Any) -> "EvaluationContext":
        """Copy of this context with extra values layered on top."""
        return EvaluationContext(answers={**self.answers, **values})


class GateDetails(BaseModel):
    """Per-clause condition results in input order.

    A clause absent from the gate is absent here too. Diagnostics surfaces
    consume this verbatim, so its shape is part of the public contract.
    """

    all: list[bool] | None = None
    any: list[bool] | None = None
    none: list[bool] | None = None


class GateEvaluation(BaseModel):
    """Outcome of evaluating one gate.

    ``errors`` lists conditions that could not be evaluated (unknown
    comparator, failing comparison). Each counts as ``False`` in ``details``.
    """

    passes: bool
    details: GateDetails = Field(default_factory=GateDetails)
    errors: list[str] = Field(default_factory=list)


class ConditionEvaluator(Protocol):
    """Anything that can decide one condition against a context."""

    def evaluate(self, context: EvaluationContext) -> bool: ...


def evaluate_clauses(
    all_items: Iterable[T] | None,
    any_items: Iterable[T] | None,
    none_items: Iterable[T] | None,
    check: Callable[[T], bool],
) -> GateEvaluation:
    """Apply the all/any/none algebra to arbitrary condition items.

    ``passes`` is ``all-hold and any-holds and none-hold`` where every
    absent clause counts as satisfied. An empty ``any`` list, unlike an
    absent one, cannot be satisfied.
    """
    details = GateDetails()
    all_passes = any_passes = none_passes = True

    if all_items is not None:
        details.all = [check(item) for item in all_items]
        all_passes = all(details.all)

    if any_items is not None:
        details.any = [check(item) for item in any_items]
        any_passes = any(details.any)

    if none_items is not None:
        details.none = [check(item) for item in none_items]
        none_passes = not any(details.none)

    return GateEvaluation(passes=all_passes and any_passes and none_passes, details=details)


def evaluate_condition(
    condition: GateCondition,
    context: EvaluationContext,
    errors: list[str] | None = None,
) -> bool:
    """Evaluate a single leaf condition; never raises.

    Args:
        condition: The condition to decide
        context: Current answer and fact values
        errors: Collects a message for each condition that could not be
            evaluated, when given
    """
    comparator = get_comparator(condition.when)
    if comparator is None:
        logger.warning(
            "gate_unknown_comparator",
            comparator=condition.when,
            question_id=condition.question_id,
        )
        if errors is not None:
            errors.append(
                f"Unknown comparator {condition.when!r} on {condition.question_id}"
            )
        return False

    try:
        return comparator(context.lookup(condition.question_id), condition)
    except Exception as e:  # noqa: BLE001
        logger.warning(
            "gate_condition_error",
            comparator=condition.when,
            question_id=condition.question_id,
            error=str(e),
        )
        if errors is not None:
            errors.append(f"{condition.when} on {condition.question_id} failed: {e}")
        return False


def evaluate_gate(gate: Gate, context: EvaluationContext) -> GateEvaluation:
    """Evaluate a complete gate against the context."""
    errors: list[str] = []
    result = evaluate_clauses(
        gate.all,
        gate.any,
        gate.none,
        lambda condition: evaluate_condition(condition, context, errors),
    )
    result.errors = errors
    return result


def evaluate_gates(gates: Iterable[Gate], context: EvaluationContext) -> list[GateEvaluation]:
    """Evaluate several gates independently, preserving order."""
    return [evaluate_gate(gate, context) for gate in gates]
