"""Question and suite visibility resolution.

Given a question bank and the current context, decide which suites are
unlocked and which questions are visible, in presentation order:

1. A suite unlocks iff every gate in its ``gates`` list passes.
2. Candidates are the questions no suite owns plus members of unlocked
   suites.
3. A candidate is visible iff its own ``conditions`` gate passes.
4. Visible questions are ordered by priority (descending), then phase
   (onboarding, core, deep-dive), then declaration order.

Hiding questions that are already answered is a presentation policy
layered on top (see ``AssessmentSession``); the resolver only reports gate
satisfaction. Resolution is side-effect free and never raises: a gate that
cannot be evaluated (unknown comparator, failing comparison, unexpected
error) hides its question or locks its suite, and is reported as a
diagnostic.
"""

import time
from typing import Literal

from pydantic import BaseModel, Field

from posture.assessment.gating import EvaluationContext, GateEvaluation, evaluate_gate
from posture.assessment.models import (
    ContentIssue,
    Question,
    QuestionBank,
    Severity,
    Suite,
)
from posture.assessment.visibility.graph import detect_cycles, format_cycle
from posture.exceptions import ContentIntegrityError
from posture.observability.logging import get_logger

logger = get_logger(__name__)


class VisibilityDiagnostic(BaseModel):
    """A recovered problem encountered while resolving visibility."""

    subject_id: str
    kind: Literal["question", "suite"]
    message: str


class VisibilityResult(BaseModel):
    """Ordered visible question ids and unlocked suites for one context."""

    visible_question_ids: list[str] = Field(default_factory=list)
    unlocked_suite_ids: list[str] = Field(default_factory=list)
    diagnostics: list[VisibilityDiagnostic] = Field(default_factory=list)

    def is_visible(self, question_id: str) -> bool:
        return question_id in self.visible_question_ids

    def is_unlocked(self, suite_id: str) -> bool:
        return suite_id in self.unlocked_suite_ids


class SuiteExplanation(BaseModel):
    suite_id: str
    unlocked: bool
    gates: list[GateEvaluation] = Field(default_factory=list)


class QuestionExplanation(BaseModel):
    """Why a question is or is not visible, for diagnostics panels."""

    question_id: str
    known: bool
    visible: bool = False
    suite: SuiteExplanation | None = None
    conditions: GateEvaluation | None = None
    error: str | None = None


class VisibilityResolver:
    """Resolve visibility for one question bank.

    Dependency cycles are content errors: they are detected once, when the
    resolver is built, and raised as ``ContentIntegrityError`` before any
    evaluation can run.
    """

    def __init__(self, bank: QuestionBank, *, validate: bool = True) -> None:
        """Initialize the resolver.

        Args:
            bank: Question bank to resolve against
            validate: Run static cycle detection over the bank's gates
        """
        self._bank = bank

        if validate:
            cycles = detect_cycles(bank)
            if cycles:
                issues = [
                    ContentIssue(
                        severity=Severity.ERROR,
                        code="DEPENDENCY_CYCLE",
                        message=format_cycle(cycle),
                        location=cycle[0],
                    )
                    for cycle in cycles
                ]
                logger.error("content_dependency_cycles", cycles=[format_cycle(c) for c in cycles])
                raise ContentIntegrityError(
                    "Dependency cycles detected:\n" + "\n".join(i.message for i in issues),
                    issues=issues,
                )

    @property
    def bank(self) -> QuestionBank:
        return self._bank

    def _suite_unlocked(
        self,
        suite: Suite,
        context: EvaluationContext,
        diagnostics: list[VisibilityDiagnostic],
    ) -> bool:
        try:
            results = [evaluate_gate(gate, context) for gate in suite.gates]
        except Exception as e:  # noqa: BLE001
            logger.warning("suite_gate_error", suite_id=suite.id, error=str(e))
            diagnostics.append(
                VisibilityDiagnostic(subject_id=suite.id, kind="suite", message=str(e))
            )
            return False

        errors = [error for result in results for error in result.errors]
        if errors:
            logger.warning("suite_gate_malformed", suite_id=suite.id, errors=errors)
            diagnostics.extend(
                VisibilityDiagnostic(subject_id=suite.id, kind="suite", message=error)
                for error in errors
            )
            return False
        return all(result.passes for result in results)

    def _question_passes(
        self,
        question: Question,
        context: EvaluationContext,
        diagnostics: list[VisibilityDiagnostic],
    ) -> bool:
        try:
            result = evaluate_gate(question.conditions, context)
        except Exception as e:  # noqa: BLE001
            logger.warning("question_gate_error", question_id=question.id, error=str(e))
            diagnostics.append(
                VisibilityDiagnostic(subject_id=question.id, kind="question", message=str(e))
            )
            return False

        if result.errors:
            logger.warning("question_gate_malformed", question_id=question.id, errors=result.errors)
            diagnostics.extend(
                VisibilityDiagnostic(subject_id=question.id, kind="question", message=error)
                for error in result.errors
            )
            return False
        return result.passes

    def _sort_key(self, question: Question) -> tuple[int, int, int]:
        return (
            -question.priority,
            question.phase.rank,
            self._bank.declaration_index(question.id),
        )

    def unlocked_suites(self, context: EvaluationContext) -> list[Suite]:
        """Suites whose gates all pass, by priority then declaration order."""
        return self._unlocked_suites(context, [])

    def _unlocked_suites(
        self,
        context: EvaluationContext,
        diagnostics: list[VisibilityDiagnostic],
    ) -> list[Suite]:
        unlocked = [
            suite
            for suite in self._bank.suites
            if self._suite_unlocked(suite, context, diagnostics)
        ]
        # Stable sort keeps declaration order among equal priorities
        unlocked.sort(key=lambda suite: -suite.priority)
        return unlocked

    def resolve(self, context: EvaluationContext) -> VisibilityResult:
        """Compute visible questions and unlocked suites for a context."""
        start_time = time.perf_counter()
        diagnostics: list[VisibilityDiagnostic] = []

        unlocked = self._unlocked_suites(context, diagnostics)

        candidate_ids: dict[str, None] = dict.fromkeys(self._bank.base_question_ids)
        for suite in unlocked:
            for question_id in suite.question_ids:
                candidate_ids.setdefault(question_id, None)

        visible: list[Question] = []
        for question_id in candidate_ids:
            question = self._bank.get_question(question_id)
            if question is None:
                diagnostics.append(
                    VisibilityDiagnostic(
                        subject_id=question_id,
                        kind="question",
                        message=f"Suite member {question_id} is not defined in the bank",
                    )
                )
                continue
            if self._question_passes(question, context, diagnostics):
                visible.append(question)

        visible.sort(key=self._sort_key)

        result = VisibilityResult(
            visible_question_ids=[q.id for q in visible],
            unlocked_suite_ids=[s.id for s in unlocked],
            diagnostics=diagnostics,
        )

        logger.debug(
            "visibility_resolved",
            visible=len(result.visible_question_ids),
            unlocked_suites=len(result.unlocked_suite_ids),
            diagnostics=len(diagnostics),
            elapsed_ms=(time.perf_counter() - start_time) * 1000,
        )
        return result

    def explain(self, question_id: str, context: EvaluationContext) -> QuestionExplanation:
        """Explain one question's visibility with per-gate details."""
        question = self._bank.get_question(question_id)
        if question is None:
            return QuestionExplanation(question_id=question_id, known=False)

        suite_explanation: SuiteExplanation | None = None
        suite_id = self._bank.suite_for(question_id)
        suite = self._bank.get_suite(suite_id) if suite_id else None

        try:
            if suite is not None:
                gate_results = [evaluate_gate(gate, context) for gate in suite.gates]
                suite_explanation = SuiteExplanation(
                    suite_id=suite.id,
                    unlocked=all(r.passes and not r.errors for r in gate_results),
                    gates=gate_results,
                )
            conditions = evaluate_gate(question.conditions, context)
        except Exception as e:  # noqa: BLE001
            logger.warning("question_explain_error", question_id=question_id, error=str(e))
            return QuestionExplanation(
                question_id=question_id,
                known=True,
                suite=suite_explanation,
                error=str(e),
            )

        in_pool = suite_explanation is None or suite_explanation.unlocked
        return QuestionExplanation(
            question_id=question_id,
            known=True,
            visible=in_pool and conditions.passes and not conditions.errors,
            suite=suite_explanation,
            conditions=conditions,
        )


def resolve_visibility(bank: QuestionBank, context: EvaluationContext) -> VisibilityResult:
    """One-shot resolution without building a reusable resolver.

    Skips cycle detection; validate content up front with
    ``ContentValidator`` or use ``VisibilityResolver`` directly.
    """
    return VisibilityResolver(bank, validate=False).resolve(context)
