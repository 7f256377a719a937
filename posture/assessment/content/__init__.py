"""Question bank content: loading and integrity validation."""

from posture.assessment.content.loader import (
    load_question_bank,
    load_question_bank_file,
    translate_legacy_conditions,
)
from posture.assessment.content.validator import ContentValidator

__all__ = [
    "ContentValidator",
    "load_question_bank",
    "load_question_bank_file",
    "translate_legacy_conditions",
]
