"""Content validation for question banks.

Catches integrity problems before runtime: duplicate ids, suites pointing
at undefined questions, malformed conditions and dependency cycles. The
evaluator tolerates all of these, silently hiding questions, so this pass
is what turns them into visible build failures.
"""

from collections import Counter

from posture.assessment.gating import is_known_comparator
from posture.assessment.models import (
    Comparator,
    ContentIssue,
    Gate,
    Question,
    QuestionBank,
    Severity,
    ValidationResult,
)
from posture.assessment.visibility.graph import detect_cycles, format_cycle

_MEMBERSHIP_COMPARATORS = {Comparator.IN.value, Comparator.NOT_IN.value}
_NUMERIC_COMPARATORS = {
    Comparator.GREATER_THAN.value,
    Comparator.LESS_THAN.value,
    Comparator.GREATER_EQUAL.value,
    Comparator.LESS_EQUAL.value,
}


class ContentValidator:
    """Validate question banks for structural and dependency integrity."""

    def validate(self, bank: QuestionBank) -> ValidationResult:
        """Validate a question bank.

        Args:
            bank: The bank to check

        Returns:
            ValidationResult; ``valid`` is False when any ERROR was found
        """
        issues: list[ContentIssue] = []
        issues.extend(self._check_duplicate_ids(bank))
        issues.extend(self._check_suites(bank))
        for question in bank.questions:
            issues.extend(self._check_gate(question.conditions, f"{question.id}.conditions"))
            issues.extend(self._check_options(question))
        for suite in bank.suites:
            for index, gate in enumerate(suite.gates):
                issues.extend(self._check_gate(gate, f"suite:{suite.id}.gates[{index}]"))
        issues.extend(self._check_cycles(bank))

        return ValidationResult(
            valid=not any(issue.severity == Severity.ERROR for issue in issues),
            issues=issues,
        )

    def _check_duplicate_ids(self, bank: QuestionBank) -> list[ContentIssue]:
        issues = []
        question_counts = Counter(q.id for q in bank.questions)
        for question_id, count in question_counts.items():
            if count > 1:
                issues.append(
                    ContentIssue(
                        severity=Severity.ERROR,
                        code="DUPLICATE_QUESTION_ID",
                        message=f"Duplicate question ID: {question_id} ({count} definitions)",
                        location=question_id,
                    )
                )

        suite_counts = Counter(s.id for s in bank.suites)
        for suite_id, count in suite_counts.items():
            if count > 1:
                issues.append(
                    ContentIssue(
                        severity=Severity.ERROR,
                        code="DUPLICATE_SUITE_ID",
                        message=f"Duplicate suite ID: {suite_id} ({count} definitions)",
                        location=f"suite:{suite_id}",
                    )
                )
        return issues

    def _check_suites(self, bank: QuestionBank) -> list[ContentIssue]:
        issues = []
        owners: dict[str, str] = {}
        for suite in bank.suites:
            location = f"suite:{suite.id}"
            if not suite.gates:
                issues.append(
                    ContentIssue(
                        severity=Severity.WARNING,
                        code="SUITE_WITHOUT_GATES",
                        message=f"Suite {suite.id} has no unlock gates and is always unlocked",
                        location=location,
                    )
                )
            if not suite.question_ids:
                issues.append(
                    ContentIssue(
                        severity=Severity.WARNING,
                        code="EMPTY_SUITE",
                        message=f"Suite {suite.id} has no member questions",
                        location=location,
                    )
                )
            for member_id in suite.question_ids:
                if bank.get_question(member_id) is None:
                    issues.append(
                        ContentIssue(
                            severity=Severity.ERROR,
                            code="UNKNOWN_SUITE_MEMBER",
                            message=f"Suite {suite.id} references unknown question: {member_id}",
                            location=location,
                        )
                    )
                owner = owners.setdefault(member_id, suite.id)
                if owner != suite.id:
                    issues.append(
                        ContentIssue(
                            severity=Severity.ERROR,
                            code="SHARED_SUITE_MEMBER",
                            message=f"Question {member_id} belongs to suites {owner} and {suite.id}",
                            location=location,
                        )
                    )
        return issues

    def _check_gate(self, gate: Gate, location: str) -> list[ContentIssue]:
        issues = []
        for clause, condition in gate.iter_conditions():
            where = f"{location}.{clause}.{condition.question_id}"
            if not is_known_comparator(condition.when):
                issues.append(
                    ContentIssue(
                        severity=Severity.ERROR,
                        code="UNKNOWN_COMPARATOR",
                        message=f"Unknown comparator {condition.when!r}",
                        location=where,
                    )
                )
            elif condition.when in _MEMBERSHIP_COMPARATORS and condition.values is None:
                issues.append(
                    ContentIssue(
                        severity=Severity.WARNING,
                        code="MISSING_VALUES",
                        message=f"{condition.when} without values never restricts as intended",
                        location=where,
                    )
                )
            elif condition.when in _NUMERIC_COMPARATORS and (
                isinstance(condition.value, bool)
                or not isinstance(condition.value, int | float)
            ):
                issues.append(
                    ContentIssue(
                        severity=Severity.WARNING,
                        code="NON_NUMERIC_OPERAND",
                        message=f"{condition.when} compares against non-number {condition.value!r}",
                        location=where,
                    )
                )
        if gate.any is not None and not gate.any:
            issues.append(
                ContentIssue(
                    severity=Severity.WARNING,
                    code="EMPTY_ANY_CLAUSE",
                    message="An empty any clause can never pass",
                    location=location,
                )
            )
        return issues

    def _check_options(self, question: Question) -> list[ContentIssue]:
        counts = Counter(option.id for option in question.options)
        return [
            ContentIssue(
                severity=Severity.ERROR,
                code="DUPLICATE_OPTION_ID",
                message=f"Question {question.id} repeats option id {option_id}",
                location=question.id,
            )
            for option_id, count in counts.items()
            if count > 1
        ]

    def _check_cycles(self, bank: QuestionBank) -> list[ContentIssue]:
        return [
            ContentIssue(
                severity=Severity.ERROR,
                code="DEPENDENCY_CYCLE",
                message=format_cycle(cycle),
                location=cycle[0],
            )
            for cycle in detect_cycles(bank)
        ]
