"""Enums for the assessment domain."""

from enum import Enum


class Comparator(str, Enum):
    """Leaf predicates available to gate conditions.

    Content authors depend on the exact semantics of each comparator;
    see ``posture.assessment.gating.comparators``.
    """

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    IN = "in"
    NOT_IN = "not_in"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    EXISTS = "exists"
    NOT_EXISTS = "not_exists"
    TRUTHY = "truthy"
    FALSY = "falsy"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    GREATER_EQUAL = "greater_equal"
    LESS_EQUAL = "less_equal"


class Phase(str, Enum):
    """Assessment phase a question belongs to.

    Declaration order doubles as presentation order when priorities tie.
    """

    ONBOARDING = "onboarding"
    CORE = "core"
    DEEP_DIVE = "deep-dive"

    @property
    def rank(self) -> int:
        return _PHASE_RANK[self]


_PHASE_RANK = {Phase.ONBOARDING: 0, Phase.CORE: 1, Phase.DEEP_DIVE: 2}


class FactSource(str, Enum):
    """How a fact was established.

    - AUTO_DETECTION: written by an external detector (OS, browser)
    - USER_ANSWER: derived from the option a user selected
    - DERIVED: computed from other facts
    - MANUAL: set explicitly, e.g. from a diagnostics panel
    """

    AUTO_DETECTION = "auto-detection"
    USER_ANSWER = "user-answer"
    DERIVED = "derived"
    MANUAL = "manual"


class ValueKind(str, Enum):
    """Runtime tag of a fact or answer value.

    Comparators only compare values whose tags are compatible; ``bool`` is
    its own kind and never a number.
    """

    ABSENT = "absent"
    BOOL = "bool"
    NUMBER = "number"
    STRING = "string"
    ARRAY = "array"
    OTHER = "other"
