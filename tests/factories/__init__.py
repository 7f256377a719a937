"""Test factories for creating test data."""

from tests.factories.assessment import (
    GateFactory,
    QuestionBankFactory,
    QuestionFactory,
    SuiteFactory,
    cond,
)

__all__ = [
    "GateFactory",
    "QuestionBankFactory",
    "QuestionFactory",
    "SuiteFactory",
    "cond",
]
