"""Assessment domain models.

Contains the Pydantic models shared by every engine component:
- Gates and gate conditions (declarative visibility rules)
- Questions, options, suites and the question bank (static content)
- Facts and answers (mutable session state records)
"""

from posture.assessment.models.base import Clock, is_past, utc_now
from posture.assessment.models.content import AnswerOption, Question, QuestionBank, Suite
from posture.assessment.models.enums import Comparator, FactSource, Phase, ValueKind
from posture.assessment.models.gate import CLAUSES, Clause, Gate, GateCondition
from posture.assessment.models.issues import ContentIssue, Severity, ValidationResult
from posture.assessment.models.records import Answer, Fact
from posture.assessment.models.values import (
    AnswerValue,
    FactValue,
    js_truthy,
    strict_equals,
    value_kind,
)

__all__ = [
    # Base helpers
    "Clock",
    "is_past",
    "utc_now",
    # Enums
    "Comparator",
    "FactSource",
    "Phase",
    "ValueKind",
    # Gates
    "CLAUSES",
    "Clause",
    "Gate",
    "GateCondition",
    # Content issues
    "ContentIssue",
    "Severity",
    "ValidationResult",
    # Content
    "AnswerOption",
    "Question",
    "QuestionBank",
    "Suite",
    # Records
    "Answer",
    "Fact",
    # Values
    "AnswerValue",
    "FactValue",
    "js_truthy",
    "strict_equals",
    "value_kind",
]
