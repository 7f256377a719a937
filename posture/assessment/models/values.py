"""Fact value typing, tagging and JavaScript-compatible coercions.

Content was authored against loosely typed values, so equality and
truthiness here follow the rules those authors relied on: strict equality
without cross-type coercion, and truthiness where an empty list is truthy.
"""

import math
from typing import Any

from posture.assessment.models.enums import ValueKind

FactValue = bool | int | float | str | list[str]
AnswerValue = FactValue


def value_kind(value: Any) -> ValueKind:
    """Tag a runtime value with its kind."""
    if value is None:
        return ValueKind.ABSENT
    if isinstance(value, bool):
        return ValueKind.BOOL
    if isinstance(value, int | float):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, list | tuple):
        return ValueKind.ARRAY
    return ValueKind.OTHER


def strict_equals(left: Any, right: Any) -> bool:
    """Equality without coercion between kinds.

    Absent values never equal anything, including another absent value.
    ``True`` is not ``1``; ``1`` is ``1.0``; NaN is not equal to itself.
    Arrays compare element-wise under the same rules.
    """
    left_kind = value_kind(left)
    if left_kind is ValueKind.ABSENT or left_kind is not value_kind(right):
        return False
    if left_kind is ValueKind.ARRAY:
        return len(left) == len(right) and all(
            strict_equals(a, b) for a, b in zip(left, right)
        )
    return bool(left == right)


def js_truthy(value: Any) -> bool:
    """Truthiness as content authors expect it.

    ``None``, ``False``, ``0``, NaN and ``""`` are falsy. Everything else,
    including empty lists and mappings, is truthy.
    """
    kind = value_kind(value)
    if kind is ValueKind.ABSENT:
        return False
    if kind is ValueKind.BOOL:
        return bool(value)
    if kind is ValueKind.NUMBER:
        return value != 0 and not math.isnan(value)
    if kind is ValueKind.STRING:
        return value != ""
    return True
