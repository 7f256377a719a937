"""Session-owned store of answers and facts.

One assessment session owns one store. Facts arrive from external
detectors through ``inject_fact`` or from answers through
``record_answer``; an answer and every fact its option establishes are
committed together, so a reader never observes half of a submission.
"""

import re
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from posture.assessment.expiration import (
    ExpirationPolicy,
    ExpiredAnswer,
    ExpiringAnswer,
    get_expired_answers,
    get_expiring_answers,
)
from posture.assessment.gating import EvaluationContext
from posture.assessment.models import (
    Answer,
    Clock,
    Fact,
    FactSource,
    strict_equals,
    utc_now,
)
from posture.observability.logging import get_logger

logger = get_logger(__name__)

DEFAULT_INJECTED_CONFIDENCE = 0.95
ANSWER_FACT_CONFIDENCE = 1.0

_DEVICE_TOKENS = frozenset({"device", "os", "browser"})
_KEY_SEPARATORS = re.compile(r"[._\-]")


def infer_category(key: str) -> str:
    """Default category for a fact key: device-ish keys are ``device``."""
    tokens = set(_KEY_SEPARATORS.split(key.lower()))
    return "device" if tokens & _DEVICE_TOKENS else "behavior"


class StoreSnapshot(BaseModel):
    """Persisted shape of a store: question id -> Answer, key -> Fact."""

    answers: dict[str, Answer] = Field(default_factory=dict)
    facts: dict[str, Fact] = Field(default_factory=dict)


class FactsStore:
    """Answers and facts for a single assessment session."""

    def __init__(
        self,
        *,
        clock: Clock = utc_now,
        expiration_policy: ExpirationPolicy | None = None,
        default_confidence: float = DEFAULT_INJECTED_CONFIDENCE,
    ) -> None:
        """Initialize empty storage.

        Args:
            clock: Time source used whenever a caller omits ``now``
            expiration_policy: Policy table for answer expiry
            default_confidence: Confidence for injected facts lacking one
        """
        self._clock = clock
        self._expiration_policy = expiration_policy or ExpirationPolicy()
        self._default_confidence = default_confidence
        self._facts: dict[str, Fact] = {}
        self._answers: dict[str, Answer] = {}

    def _now(self, now: datetime | None) -> datetime:
        return now if now is not None else self._clock()

    # Fact operations
    def inject_fact(
        self,
        key: str,
        value: Any,
        *,
        source: FactSource = FactSource.AUTO_DETECTION,
        confidence: float | None = None,
        category: str | None = None,
        expires_at: datetime | None = None,
        established_by: str | None = None,
        now: datetime | None = None,
    ) -> Fact:
        """Write a fact, replacing any existing record under the key."""
        fact = Fact(
            key=key,
            value=value,
            confidence=self._default_confidence if confidence is None else confidence,
            source=source,
            established_at=self._now(now),
            expires_at=expires_at,
            category=category or infer_category(key),
            established_by=established_by,
        )
        self._facts = {**self._facts, key: fact}

        logger.debug("fact_injected", key=key, source=source.value, category=fact.category)
        return fact

    def get_fact(self, key: str) -> Fact | None:
        """Get a fact record by key, expired or not."""
        return self._facts.get(key)

    def has_fact_value(self, key: str, value: Any) -> bool:
        """Whether the stored fact strictly equals ``value``.

        Expiry is not considered; callers that care must check it.
        """
        fact = self._facts.get(key)
        return fact is not None and strict_equals(fact.value, value)

    def get_facts(
        self,
        *,
        category: str | None = None,
        only_valid: bool = False,
        min_confidence: float | None = None,
        now: datetime | None = None,
    ) -> dict[str, Fact]:
        """Get facts keyed by fact key, optionally filtered."""
        current = self._now(now)
        results: dict[str, Fact] = {}
        for key, fact in self._facts.items():
            if category is not None and fact.category != category:
                continue
            if only_valid and fact.is_expired(current):
                continue
            if min_confidence is not None and fact.confidence < min_confidence:
                continue
            results[key] = fact
        return results

    def clear_fact(self, key: str) -> bool:
        """Remove a fact so it can be re-established; returns whether it existed."""
        if key not in self._facts:
            return False
        self._facts = {k: v for k, v in self._facts.items() if k != key}
        return True

    # Answer operations
    def record_answer(
        self,
        question_id: str,
        value: Any,
        *,
        facts: Mapping[str, Any] | None = None,
        option_id: str | None = None,
        points: int = 0,
        now: datetime | None = None,
    ) -> Answer:
        """Record an answer and the facts it establishes in one commit.

        The answer's expiry comes from the expiration policy; derived facts
        share it, so a stale answer and its facts disappear together.
        """
        current = self._now(now)
        expiration = self._expiration_policy.calculate(question_id, value, current)

        answer = Answer(
            question_id=question_id,
            value=value,
            option_id=option_id,
            timestamp=current,
            points_earned=points,
            expires_at=expiration.expires_at,
            expiration_reason=expiration.reason,
        )
        derived = {
            key: Fact(
                key=key,
                value=fact_value,
                confidence=ANSWER_FACT_CONFIDENCE,
                source=FactSource.USER_ANSWER,
                established_at=current,
                expires_at=expiration.expires_at,
                category=infer_category(key),
                established_by=question_id,
            )
            for key, fact_value in (facts or {}).items()
        }

        # Build both maps fully before swapping them in
        new_answers = {**self._answers, question_id: answer}
        new_facts = {**self._facts, **derived}
        self._answers, self._facts = new_answers, new_facts

        logger.info(
            "answer_recorded",
            question_id=question_id,
            option_id=option_id,
            facts_written=len(derived),
            expires_at=expiration.expires_at.isoformat() if expiration.expires_at else None,
        )
        return answer

    def get_answer(self, question_id: str) -> Answer | None:
        return self._answers.get(question_id)

    def get_answers(self) -> dict[str, Answer]:
        return dict(self._answers)

    def valid_answer_ids(self, now: datetime | None = None) -> set[str]:
        """Ids of questions whose answers have not expired."""
        current = self._now(now)
        return {qid for qid, answer in self._answers.items() if not answer.is_expired(current)}

    # Expiration queries
    def is_answer_expired(self, question_id: str, now: datetime | None = None) -> bool:
        answer = self._answers.get(question_id)
        return answer is not None and answer.is_expired(self._now(now))

    def get_expiring_answers(
        self,
        within_days: int = 7,
        now: datetime | None = None,
    ) -> list[ExpiringAnswer]:
        return get_expiring_answers(self._answers, within_days, self._now(now))

    def get_expired_answers(self, now: datetime | None = None) -> list[ExpiredAnswer]:
        return get_expired_answers(self._answers, self._now(now))

    # Evaluation context
    def build_context(self, now: datetime | None = None) -> EvaluationContext:
        """Flat context of valid answer values overlaid with valid fact values.

        Expired answers and facts are left out, so gates see them as absent
        and the questions that produced them can surface again.
        """
        current = self._now(now)
        values: dict[str, Any] = {
            qid: answer.value
            for qid, answer in self._answers.items()
            if not answer.is_expired(current)
        }
        values.update(
            {key: fact.value for key, fact in self._facts.items() if not fact.is_expired(current)}
        )
        return EvaluationContext(answers=values)

    # Persistence shape
    def snapshot(self) -> StoreSnapshot:
        return StoreSnapshot(answers=dict(self._answers), facts=dict(self._facts))

    @classmethod
    def from_snapshot(
        cls,
        snapshot: StoreSnapshot | Mapping[str, Any],
        **kwargs: Any,
    ) -> "FactsStore":
        """Restore a store from a snapshot or its JSON-compatible form."""
        if not isinstance(snapshot, StoreSnapshot):
            snapshot = StoreSnapshot.model_validate(snapshot)
        store = cls(**kwargs)
        store._answers = dict(snapshot.answers)
        store._facts = dict(snapshot.facts)
        return store

    def reset(self) -> None:
        """Drop every answer and fact."""
        self._answers = {}
        self._facts = {}
        logger.info("facts_store_reset")
