"""Assessment engine: gates, facts, expiration and visibility.

Typical flow:

    bank = load_question_bank_file("content/questions.json")
    session = AssessmentSession(bank)
    session.inject_fact("os_detected", "windows")
    session.submit_answer("lock_screen", "yes")
    session.available_questions()
"""

from posture.assessment.content import ContentValidator, load_question_bank, load_question_bank_file
from posture.assessment.facts import FactsStore, StoreSnapshot
from posture.assessment.gating import EvaluationContext, GateEvaluation, evaluate_gate
from posture.assessment.session import AssessmentSession
from posture.assessment.visibility import VisibilityResolver, VisibilityResult, detect_cycles

__all__ = [
    "AssessmentSession",
    "ContentValidator",
    "EvaluationContext",
    "FactsStore",
    "GateEvaluation",
    "StoreSnapshot",
    "VisibilityResolver",
    "VisibilityResult",
    "detect_cycles",
    "evaluate_gate",
    "load_question_bank",
    "load_question_bank_file",
]
