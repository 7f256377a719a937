"""Assessment session: the single owner of mutable answer and fact state.

The session ties the pieces together: an external caller submits an
answer, the facts store commits it with its derived facts, and the
resolver re-evaluates the whole bank against the refreshed context.
Re-resolving a fixed snapshot is idempotent, so a session restored from a
snapshot resumes exactly where it left off.
"""

from datetime import datetime
from typing import Any

from posture.assessment.expiration import ExpirationPolicy, ExpiredAnswer, ExpiringAnswer
from posture.assessment.facts import FactsStore
from posture.assessment.gating import EvaluationContext
from posture.assessment.models import Clock, FactSource, Fact, Question, QuestionBank, utc_now
from posture.assessment.visibility import (
    QuestionExplanation,
    VisibilityResolver,
    VisibilityResult,
)
from posture.config import Settings, get_settings
from posture.exceptions import UnknownOptionError, UnknownQuestionError
from posture.observability.logging import get_logger

logger = get_logger(__name__)


class AssessmentSession:
    """One user's run through a question bank."""

    def __init__(
        self,
        bank: QuestionBank,
        *,
        store: FactsStore | None = None,
        clock: Clock = utc_now,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the session.

        Args:
            bank: Question bank to assess against
            store: Existing store to resume; a fresh one is created otherwise
            clock: Time source, injectable for tests
            settings: Engine settings; the loaded configuration when omitted
        """
        self._settings = settings or get_settings()
        engine = self._settings.engine

        self._bank = bank
        self._clock = clock
        self._resolver = VisibilityResolver(bank, validate=engine.validate_content)
        self._store = store or FactsStore(
            clock=clock,
            expiration_policy=ExpirationPolicy(default_days=engine.default_expiration_days),
            default_confidence=engine.default_fact_confidence,
        )

    @property
    def bank(self) -> QuestionBank:
        return self._bank

    @property
    def store(self) -> FactsStore:
        return self._store

    @property
    def settings(self) -> Settings:
        return self._settings

    def context(self, now: datetime | None = None) -> EvaluationContext:
        return self._store.build_context(now or self._clock())

    def inject_fact(self, key: str, value: Any, **meta: Any) -> Fact:
        """Record a fact from an external detector (OS, browser, ...)."""
        meta.setdefault("source", FactSource.AUTO_DETECTION)
        return self._store.inject_fact(key, value, **meta)

    def resolve(self, now: datetime | None = None) -> VisibilityResult:
        """Gate satisfaction for the whole bank, answered questions included."""
        return self._resolver.resolve(self.context(now))

    def available_questions(self, now: datetime | None = None) -> list[str]:
        """Visible questions still needing an answer, in presentation order.

        Questions whose answers have expired count as unanswered again.
        """
        current = now or self._clock()
        answered = self._store.valid_answer_ids(current)
        return [
            question_id
            for question_id in self.resolve(current).visible_question_ids
            if question_id not in answered
        ]

    def next_question(self, now: datetime | None = None) -> Question | None:
        """The first available question, or None when the run is complete."""
        available = self.available_questions(now)
        if not available:
            return None
        return self._bank.get_question(available[0])

    def submit_answer(
        self,
        question_id: str,
        option_id: str,
        now: datetime | None = None,
    ) -> VisibilityResult:
        """Record the chosen option and return the refreshed visibility.

        Raises:
            UnknownQuestionError: If the bank has no such question
            UnknownOptionError: If the question offers no such option
        """
        question = self._bank.get_question(question_id)
        if question is None:
            raise UnknownQuestionError(question_id)
        option = question.get_option(option_id)
        if option is None:
            raise UnknownOptionError(question_id, option_id)

        current = now or self._clock()
        self._store.record_answer(
            question_id,
            option.id,
            facts=option.facts,
            option_id=option.id,
            points=option.points,
            now=current,
        )
        return self.resolve(current)

    def explain(self, question_id: str, now: datetime | None = None) -> QuestionExplanation:
        return self._resolver.explain(question_id, self.context(now))

    def expiring_answers(
        self,
        within_days: int | None = None,
        now: datetime | None = None,
    ) -> list[ExpiringAnswer]:
        if within_days is None:
            within_days = self._settings.engine.expiring_within_days
        return self._store.get_expiring_answers(within_days, now or self._clock())

    def expired_answers(self, now: datetime | None = None) -> list[ExpiredAnswer]:
        return self._store.get_expired_answers(now or self._clock())

    def total_points(self, now: datetime | None = None) -> int:
        """Points from answers that are still valid."""
        current = now or self._clock()
        return sum(
            answer.points_earned
            for answer in self._store.get_answers().values()
            if not answer.is_expired(current)
        )

    def reset(self) -> None:
        self._store.reset()
        logger.info("assessment_session_reset", questions=len(self._bank.questions))
