"""Unit tests for VisibilityResolver."""

import pytest

from posture.assessment.gating import EvaluationContext
from posture.assessment.models import Gate, Phase
from posture.assessment.visibility import VisibilityResolver, resolve_visibility
from posture.assessment.visibility import resolver as resolver_module
from posture.exceptions import ContentIntegrityError
from tests.factories import GateFactory, QuestionBankFactory, QuestionFactory, SuiteFactory, cond


def ctx(**values) -> EvaluationContext:
    return EvaluationContext(answers=values)


@pytest.fixture
def advanced_bank():
    """Bank where ``advanced_2fa`` sits in a suite needing two yes answers."""
    return QuestionBankFactory.create(
        questions=[
            QuestionFactory.create(id="lock_screen"),
            QuestionFactory.create(id="browser_passwords"),
            QuestionFactory.create(id="advanced_2fa"),
        ],
        suites=[
            SuiteFactory.create(
                id="advanced",
                gates=[
                    Gate(
                        all=[
                            cond("lock_screen", "equals", "yes"),
                            cond("browser_passwords", "equals", "yes"),
                        ]
                    )
                ],
                question_ids=["advanced_2fa"],
            )
        ],
    )


class TestSuiteUnlock:
    """Tests for suite unlocking."""

    def test_locked_without_answers(self, advanced_bank) -> None:
        """With no answers the suite stays locked and its members hidden."""
        result = VisibilityResolver(advanced_bank).resolve(ctx())
        assert result.is_unlocked("advanced") is False
        assert result.is_visible("advanced_2fa") is False
        assert result.visible_question_ids == ["lock_screen", "browser_passwords"]

    def test_locked_with_one_answer(self, advanced_bank) -> None:
        """One of two required answers is not enough."""
        result = VisibilityResolver(advanced_bank).resolve(ctx(lock_screen="yes"))
        assert result.is_unlocked("advanced") is False
        assert result.is_visible("advanced_2fa") is False

    def test_unlocked_with_both_answers(self, advanced_bank) -> None:
        """Both answers unlock the suite and reveal its member."""
        result = VisibilityResolver(advanced_bank).resolve(
            ctx(lock_screen="yes", browser_passwords="yes")
        )
        assert result.unlocked_suite_ids == ["advanced"]
        assert result.is_visible("advanced_2fa") is True

    def test_every_gate_must_pass(self) -> None:
        """A suite with several gates needs all of them."""
        bank = QuestionBankFactory.browser_suite()
        resolver = VisibilityResolver(bank)
        assert resolver.resolve(ctx(browser_detected="chrome")).is_unlocked("browser_deep") is False
        assert resolver.resolve(
            ctx(browser_detected="chrome", browser_updates="automatic")
        ).is_unlocked("browser_deep")

    def test_suite_without_gates_is_unlocked(self) -> None:
        """An empty gates list leaves the suite always unlocked."""
        bank = QuestionBankFactory.create(
            questions=[QuestionFactory.create(id="m")],
            suites=[SuiteFactory.create(id="open", question_ids=["m"])],
        )
        result = VisibilityResolver(bank).resolve(ctx())
        assert result.unlocked_suite_ids == ["open"]
        assert result.visible_question_ids == ["m"]

    def test_unlocked_suites_ordered_by_priority(self) -> None:
        """Unlocked suites are ordered by priority, then declaration order."""
        bank = QuestionBankFactory.create(
            suites=[
                SuiteFactory.create(id="low"),
                SuiteFactory.create(id="high", priority=5),
                SuiteFactory.create(id="low2"),
            ]
        )
        resolver = VisibilityResolver(bank)
        assert [s.id for s in resolver.unlocked_suites(ctx())] == ["high", "low", "low2"]

    def test_member_conditions_still_apply(self) -> None:
        """A member of an unlocked suite also needs its own gate to pass."""
        bank = QuestionBankFactory.create(
            questions=[
                QuestionFactory.create(id="m", conditions=GateFactory.equals("os_detected", "windows")),
            ],
            suites=[SuiteFactory.create(id="open", question_ids=["m"])],
        )
        resolver = VisibilityResolver(bank)
        assert resolver.resolve(ctx(os_detected="macos")).is_visible("m") is False
        assert resolver.resolve(ctx(os_detected="windows")).is_visible("m") is True


class TestOrdering:
    """Tests for visible question ordering."""

    def test_priority_then_phase_then_declaration(self) -> None:
        """Priority descends, phases run onboarding to deep-dive, ties keep declaration order."""
        bank = QuestionBankFactory.create(
            questions=[
                QuestionFactory.create(id="deep", phase=Phase.DEEP_DIVE),
                QuestionFactory.create(id="core_a"),
                QuestionFactory.create(id="onboard", phase=Phase.ONBOARDING),
                QuestionFactory.create(id="core_b"),
                QuestionFactory.create(id="urgent", priority=10, phase=Phase.DEEP_DIVE),
            ]
        )
        result = VisibilityResolver(bank).resolve(ctx())
        assert result.visible_question_ids == ["urgent", "onboard", "core_a", "core_b", "deep"]


class TestResolveProperties:
    """Tests for resolution guarantees."""

    def test_resolution_is_idempotent(self, advanced_bank) -> None:
        """Re-resolving the same snapshot gives the same result."""
        resolver = VisibilityResolver(advanced_bank)
        context = ctx(lock_screen="yes", browser_passwords="yes")
        assert resolver.resolve(context) == resolver.resolve(context)

    def test_added_fact_only_adds_dependent_questions(self) -> None:
        """A new fact reveals its dependents and leaves the rest untouched."""
        bank = QuestionBankFactory.create(
            questions=[
                QuestionFactory.create(id="general"),
                QuestionFactory.create(id="win_only", conditions=GateFactory.equals("os_detected", "windows")),
                QuestionFactory.create(id="mac_only", conditions=GateFactory.equals("os_detected", "macos")),
                QuestionFactory.create(id="has_vpn", conditions=Gate(all=[cond("vpn", "truthy")])),
            ]
        )
        resolver = VisibilityResolver(bank)
        before = set(resolver.resolve(ctx(vpn=True)).visible_question_ids)
        after = set(resolver.resolve(ctx(vpn=True, os_detected="windows")).visible_question_ids)
        assert before <= after
        assert after - before == {"win_only"}

    def test_answered_questions_remain_visible(self, advanced_bank) -> None:
        """The resolver reports gate satisfaction regardless of answers."""
        result = VisibilityResolver(advanced_bank).resolve(ctx(lock_screen="yes"))
        assert result.is_visible("lock_screen") is True

    def test_one_shot_helper(self, advanced_bank) -> None:
        """resolve_visibility matches a resolver built by hand."""
        context = ctx(lock_screen="yes")
        assert resolve_visibility(advanced_bank, context) == VisibilityResolver(advanced_bank).resolve(
            context
        )


class TestFailureHandling:
    """Tests for recovered failures and integrity errors."""

    def test_cycle_raises_at_construction(self) -> None:
        """Cyclic content is rejected before any evaluation."""
        bank = QuestionBankFactory.create(
            questions=[
                QuestionFactory.create(id="a", conditions=GateFactory.equals("b", "yes")),
                QuestionFactory.create(id="b", conditions=GateFactory.equals("a", "yes")),
            ]
        )
        with pytest.raises(ContentIntegrityError) as exc_info:
            VisibilityResolver(bank)
        assert [issue.code for issue in exc_info.value.issues] == ["DEPENDENCY_CYCLE"]
        assert "a → b → a" in exc_info.value.message

    def test_cycle_check_can_be_skipped(self) -> None:
        """validate=False builds a resolver for cyclic content; the cycle stays hidden."""
        bank = QuestionBankFactory.create(
            questions=[
                QuestionFactory.create(id="a", conditions=GateFactory.equals("b", "yes")),
                QuestionFactory.create(id="b", conditions=GateFactory.equals("a", "yes")),
            ]
        )
        assert VisibilityResolver(bank, validate=False).resolve(ctx()).visible_question_ids == []

    def test_gate_error_hides_only_that_question(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """An exception in one question's gate becomes a diagnostic."""
        broken = Gate(all=[cond("boom", "exists")])
        bank = QuestionBankFactory.create(
            questions=[
                QuestionFactory.create(id="ok"),
                QuestionFactory.create(id="bad", conditions=broken),
            ]
        )
        real_evaluate = resolver_module.evaluate_gate

        def flaky(gate, context):
            if gate == broken:
                raise RuntimeError("malformed gate")
            return real_evaluate(gate, context)

        monkeypatch.setattr(resolver_module, "evaluate_gate", flaky)
        result = VisibilityResolver(bank).resolve(ctx(boom=True))

        assert result.visible_question_ids == ["ok"]
        assert len(result.diagnostics) == 1
        assert result.diagnostics[0].subject_id == "bad"
        assert result.diagnostics[0].kind == "question"
        assert result.diagnostics[0].message == "malformed gate"

    def test_suite_gate_error_locks_suite(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """An exception in a suite gate keeps that suite locked."""
        bank = QuestionBankFactory.browser_suite()

        def explode(gate, context):
            raise ValueError("bad suite gate")

        monkeypatch.setattr(resolver_module, "evaluate_gate", explode)
        result = VisibilityResolver(bank).resolve(ctx())

        assert result.unlocked_suite_ids == []
        assert {(d.subject_id, d.kind) for d in result.diagnostics} >= {("browser_deep", "suite")}

    def test_undefined_suite_member_reported(self) -> None:
        """A suite member missing from the bank is skipped with a diagnostic."""
        bank = QuestionBankFactory.create(
            suites=[SuiteFactory.create(id="open", question_ids=["ghost"])],
        )
        result = VisibilityResolver(bank).resolve(ctx())
        assert result.visible_question_ids == []
        assert result.diagnostics[0].subject_id == "ghost"


class TestExplain:
    """Tests for per-question explanations."""

    def test_unknown_question(self, advanced_bank) -> None:
        explanation = VisibilityResolver(advanced_bank).explain("nope", ctx())
        assert explanation.known is False
        assert explanation.visible is False

    def test_locked_suite_member(self, advanced_bank) -> None:
        """Explanations carry the suite gate details."""
        explanation = VisibilityResolver(advanced_bank).explain("advanced_2fa", ctx(lock_screen="yes"))
        assert explanation.visible is False
        assert explanation.suite.suite_id == "advanced"
        assert explanation.suite.unlocked is False
        assert explanation.suite.gates[0].details.all == [True, False]
        assert explanation.conditions.passes is True

    def test_visible_base_question(self, advanced_bank) -> None:
        explanation = VisibilityResolver(advanced_bank).explain("lock_screen", ctx())
        assert explanation.visible is True
        assert explanation.suite is None


class TestMalformedContent:
    """Tests for gates with conditions the evaluator cannot decide."""

    def test_unknown_comparator_hides_question_with_diagnostic(self) -> None:
        """A misspelled comparator hides its question and is reported."""
        bank = QuestionBankFactory.create(
            questions=[
                QuestionFactory.create(id="ok"),
                QuestionFactory.create(id="bad", conditions=Gate(all=[cond("x", "equalz", 1)])),
            ]
        )
        result = VisibilityResolver(bank).resolve(ctx(x=1))

        assert result.visible_question_ids == ["ok"]
        assert len(result.diagnostics) == 1
        assert result.diagnostics[0].subject_id == "bad"
        assert result.diagnostics[0].kind == "question"
        assert "equalz" in result.diagnostics[0].message

    def test_unknown_comparator_in_any_still_hides(self) -> None:
        """A malformed condition hides the question even when a sibling passes."""
        bank = QuestionBankFactory.create(
            questions=[
                QuestionFactory.create(
                    id="bad",
                    conditions=Gate(any=[cond("x", "equalz", 1), cond("x", "exists")]),
                ),
            ]
        )
        result = VisibilityResolver(bank).resolve(ctx(x=1))
        assert result.visible_question_ids == []
        assert [d.subject_id for d in result.diagnostics] == ["bad"]

    def test_unknown_comparator_locks_suite(self) -> None:
        """A malformed suite gate keeps the suite locked and is reported."""
        bank = QuestionBankFactory.create(
            questions=[QuestionFactory.create(id="member")],
            suites=[
                SuiteFactory.create(
                    id="s",
                    gates=[Gate(all=[cond("os_detected", "is", "windows")])],
                    question_ids=["member"],
                )
            ],
        )
        result = VisibilityResolver(bank).resolve(ctx(os_detected="windows"))

        assert result.unlocked_suite_ids == []
        assert result.visible_question_ids == []
        assert [(d.subject_id, d.kind) for d in result.diagnostics] == [("s", "suite")]

    def test_explain_reports_malformed_conditions(self) -> None:
        bank = QuestionBankFactory.create(
            questions=[QuestionFactory.create(id="bad", conditions=Gate(none=[cond("x", "equalz", 1)]))]
        )
        explanation = VisibilityResolver(bank).explain("bad", ctx(x=1))
        assert explanation.visible is False
        assert explanation.conditions.errors == ["Unknown comparator 'equalz' on x"]
