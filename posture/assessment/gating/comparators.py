"""Comparator implementations for gate conditions.

Each comparator inspects the value stored under the condition's key and
either decides the condition or reports ``NotApplicable.NOT_APPLICABLE``
when the operand kinds do not fit it. Inapplicable comparisons resolve to
the comparator's fallback: ``False`` for every comparator except the
permissive negations ``not_in`` and ``not_contains``.

``contains`` is deliberately dual-mode: substring search when both operands
are strings, membership when the stored value is an array.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from posture.assessment.models import (
    Comparator,
    GateCondition,
    ValueKind,
    js_truthy,
    strict_equals,
    value_kind,
)


class NotApplicable(Enum):
    """Sentinel returned when operand kinds do not fit a comparator."""

    NOT_APPLICABLE = "not_applicable"


NOT_APPLICABLE = NotApplicable.NOT_APPLICABLE

ComparatorResult = bool | NotApplicable
ComparatorFn = Callable[[Any, GateCondition], ComparatorResult]


@dataclass(frozen=True)
class ComparatorSpec:
    """A comparator function and the result used when it does not apply."""

    fn: ComparatorFn
    fallback: bool = False

    def __call__(self, actual: Any, condition: GateCondition) -> bool:
        result = self.fn(actual, condition)
        if result is NOT_APPLICABLE:
            return self.fallback
        return result


def _equals(actual: Any, condition: GateCondition) -> ComparatorResult:
    return strict_equals(actual, condition.value)


def _not_equals(actual: Any, condition: GateCondition) -> ComparatorResult:
    return not strict_equals(actual, condition.value)


def _in(actual: Any, condition: GateCondition) -> ComparatorResult:
    if condition.values is None:
        return NOT_APPLICABLE
    return any(strict_equals(actual, candidate) for candidate in condition.values)


def _not_in(actual: Any, condition: GateCondition) -> ComparatorResult:
    # No values means no restriction
    if condition.values is None:
        return NOT_APPLICABLE
    return not any(strict_equals(actual, candidate) for candidate in condition.values)


def _contains(actual: Any, condition: GateCondition) -> ComparatorResult:
    kind = value_kind(actual)
    expected = condition.value
    if kind is ValueKind.STRING and value_kind(expected) is ValueKind.STRING:
        return expected in actual
    if kind is ValueKind.ARRAY and expected is not None:
        return any(strict_equals(item, expected) for item in actual)
    return NOT_APPLICABLE


def _not_contains(actual: Any, condition: GateCondition) -> ComparatorResult:
    result = _contains(actual, condition)
    if result is NOT_APPLICABLE:
        return NOT_APPLICABLE
    return not result


def _exists(actual: Any, condition: GateCondition) -> ComparatorResult:  # noqa: ARG001
    return value_kind(actual) is not ValueKind.ABSENT


def _not_exists(actual: Any, condition: GateCondition) -> ComparatorResult:  # noqa: ARG001
    return value_kind(actual) is ValueKind.ABSENT


def _truthy(actual: Any, condition: GateCondition) -> ComparatorResult:  # noqa: ARG001
    return js_truthy(actual)


def _falsy(actual: Any, condition: GateCondition) -> ComparatorResult:  # noqa: ARG001
    return not js_truthy(actual)


def _numeric(op: Callable[[float, float], bool]) -> ComparatorFn:
    """Build a numeric comparator; strings and booleans are never coerced."""

    def compare(actual: Any, condition: GateCondition) -> ComparatorResult:
        if value_kind(actual) is not ValueKind.NUMBER:
            return NOT_APPLICABLE
        if value_kind(condition.value) is not ValueKind.NUMBER:
            return NOT_APPLICABLE
        return op(actual, condition.value)

    return compare


COMPARATORS: dict[str, ComparatorSpec] = {
    Comparator.EQUALS.value: ComparatorSpec(_equals),
    Comparator.NOT_EQUALS.value: ComparatorSpec(_not_equals),
    Comparator.IN.value: ComparatorSpec(_in),
    Comparator.NOT_IN.value: ComparatorSpec(_not_in, fallback=True),
    Comparator.CONTAINS.value: ComparatorSpec(_contains),
    Comparator.NOT_CONTAINS.value: ComparatorSpec(_not_contains, fallback=True),
    Comparator.EXISTS.value: ComparatorSpec(_exists),
    Comparator.NOT_EXISTS.value: ComparatorSpec(_not_exists),
    Comparator.TRUTHY.value: ComparatorSpec(_truthy),
    Comparator.FALSY.value: ComparatorSpec(_falsy),
    Comparator.GREATER_THAN.value: ComparatorSpec(_numeric(lambda a, b: a > b)),
    Comparator.LESS_THAN.value: ComparatorSpec(_numeric(lambda a, b: a < b)),
    Comparator.GREATER_EQUAL.value: ComparatorSpec(_numeric(lambda a, b: a >= b)),
    Comparator.LESS_EQUAL.value: ComparatorSpec(_numeric(lambda a, b: a <= b)),
}


def get_comparator(name: str) -> ComparatorSpec | None:
    """Look up a comparator by its content name."""
    return COMPARATORS.get(name)


def is_known_comparator(name: str) -> bool:
    return name in COMPARATORS
