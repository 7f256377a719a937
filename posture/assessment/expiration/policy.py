"""Answer expiration policy and read queries.

Answers about security practices go stale: a weekly scan habit needs
re-checking within a week, a missing backup within days, a mature practice
within half a year. The policy is a static table keyed by question id and
answer value; anything unmatched falls back to a default review period.

Expiry is always recomputed from ``now`` against stored deadlines; nothing
here schedules timers or mutates answers.
"""

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from pydantic import BaseModel

from posture.assessment.models import Answer, is_past, strict_equals, utc_now

DEFAULT_EXPIRATION_DAYS = 90
DEFAULT_REASON = "Security practice review"

_SECONDS_PER_DAY = 86400


class ExpirationRule(BaseModel):
    """When an answer goes stale and why."""

    expires_at: datetime | None
    reason: str | None = None


class ExpiringAnswer(BaseModel):
    question_id: str
    expires_at: datetime
    reason: str | None = None
    days_until_expiry: int


class ExpiredAnswer(BaseModel):
    question_id: str
    expired_days: int
    reason: str | None = None


@dataclass(frozen=True)
class Offset:
    """A day offset (``None`` for never) with a reminder reason."""

    days: int | None
    reason: str | None = None


@dataclass(frozen=True)
class QuestionPolicy:
    """Per-value offsets for one question plus its own fallback."""

    by_value: Sequence[tuple[Any, Offset]]
    fallback: Offset

    def offset_for(self, value: Any) -> Offset:
        for candidate, offset in self.by_value:
            if strict_equals(value, candidate):
                return offset
        return self.fallback


_CHECK_UPDATES = "Check for updates"
_CHECK_BROWSER = "Check browser updates"

EXPIRATION_POLICIES: dict[str, QuestionPolicy] = {
    "virus_scan_recent": QuestionPolicy(
        by_value=(
            ("daily", Offset(7, "Daily scan due")),
            ("weekly", Offset(7, "Weekly scan due")),
            ("monthly", Offset(30, "Monthly scan due")),
            ("quarterly", Offset(90, "Quarterly scan due")),
            ("never", Offset(7, "Scan overdue - immediate action needed")),
        ),
        fallback=Offset(None),
    ),
    "software_updates": QuestionPolicy(
        by_value=(
            ("automatic", Offset(None)),
            ("weekly", Offset(7, _CHECK_UPDATES)),
            ("monthly", Offset(30, _CHECK_UPDATES)),
            ("rarely", Offset(14, "Updates overdue - check now")),
        ),
        fallback=Offset(30, _CHECK_UPDATES),
    ),
    "browser_updates": QuestionPolicy(
        by_value=(
            ("automatic", Offset(None)),
            ("manual_prompt", Offset(14, _CHECK_BROWSER)),
            ("manual_check", Offset(30, _CHECK_BROWSER)),
        ),
        fallback=Offset(30, _CHECK_BROWSER),
    ),
    "password_strength": QuestionPolicy(
        by_value=(
            ("weak", Offset(7, "Upgrade weak passwords")),
            ("mixed", Offset(90, "Review password strength")),
            ("strong", Offset(180, "Password strength review")),
            ("unique", Offset(180, "Password strength review")),
        ),
        fallback=Offset(90, "Review passwords"),
    ),
    "data_backup": QuestionPolicy(
        by_value=(
            ("automatic_cloud", Offset(30, "Verify backup is working")),
            ("automatic_local", Offset(30, "Verify backup is working")),
            ("manual_regular", Offset(7, "Time for manual backup")),
            ("manual_occasional", Offset(30, "Backup recommended")),
            ("none", Offset(3, "Critical: Set up backup immediately")),
        ),
        fallback=Offset(14, "Check backup status"),
    ),
    "two_factor_auth": QuestionPolicy(
        by_value=(
            ("yes", Offset(180, "Review 2FA setup")),
            (True, Offset(180, "Review 2FA setup")),
        ),
        fallback=Offset(7, "Set up 2FA for better security"),
    ),
    "wifi_security": QuestionPolicy(
        by_value=(
            ("wpa3", Offset(180, "Review WiFi security")),
            ("wpa2", Offset(180, "Review WiFi security")),
            ("wep", Offset(7, "Upgrade insecure WiFi encryption")),
            ("none", Offset(1, "Critical: Secure your WiFi immediately")),
        ),
        fallback=Offset(90, "Check WiFi security"),
    ),
    "phishing_awareness": QuestionPolicy(
        by_value=(
            ("high", Offset(180, "Refresh security awareness")),
            ("medium", Offset(90, "Security awareness review")),
            ("low", Offset(30, "Security training recommended")),
        ),
        fallback=Offset(90, "Review security awareness"),
    ),
}


def _ceil_days(delta: timedelta) -> int:
    return math.ceil(delta.total_seconds() / _SECONDS_PER_DAY)


@dataclass
class ExpirationPolicy:
    """Stateless lookup from (question id, answer value) to an expiry."""

    policies: Mapping[str, QuestionPolicy] = field(default_factory=lambda: EXPIRATION_POLICIES)
    default_days: int = DEFAULT_EXPIRATION_DAYS
    default_reason: str = DEFAULT_REASON

    def calculate(
        self,
        question_id: str,
        value: Any,
        now: datetime | None = None,
    ) -> ExpirationRule:
        """Compute when an answer recorded at ``now`` goes stale."""
        now = now or utc_now()
        policy = self.policies.get(question_id)
        offset = (
            policy.offset_for(value)
            if policy is not None
            else Offset(self.default_days, self.default_reason)
        )
        if offset.days is None:
            return ExpirationRule(expires_at=None, reason=offset.reason)
        return ExpirationRule(expires_at=now + timedelta(days=offset.days), reason=offset.reason)


_default_policy = ExpirationPolicy()


def calculate_answer_expiration(
    question_id: str,
    value: Any,
    now: datetime | None = None,
) -> ExpirationRule:
    """Expiration for an answer under the built-in policy table."""
    return _default_policy.calculate(question_id, value, now)


def is_answer_expired(answer: Answer, now: datetime | None = None) -> bool:
    """Whether the answer's deadline has strictly passed."""
    return is_past(answer.expires_at, now or utc_now())


def get_expiring_answers(
    answers: Mapping[str, Answer],
    within_days: int = 7,
    now: datetime | None = None,
) -> list[ExpiringAnswer]:
    """Answers whose deadline falls on or before ``now + within_days``.

    Already-expired answers are included with a non-positive
    ``days_until_expiry``. Sorted soonest first.
    """
    now = now or utc_now()
    threshold = now + timedelta(days=within_days)

    results = [
        ExpiringAnswer(
            question_id=question_id,
            expires_at=answer.expires_at,
            reason=answer.expiration_reason,
            days_until_expiry=_ceil_days(answer.expires_at - now),
        )
        for question_id, answer in answers.items()
        if answer.expires_at is not None and answer.expires_at <= threshold
    ]
    results.sort(key=lambda item: item.expires_at)
    return results


def get_expired_answers(
    answers: Mapping[str, Answer],
    now: datetime | None = None,
) -> list[ExpiredAnswer]:
    """Answers past their deadline, most overdue first."""
    now = now or utc_now()

    results = [
        ExpiredAnswer(
            question_id=question_id,
            expired_days=_ceil_days(now - answer.expires_at),
            reason=answer.expiration_reason,
        )
        for question_id, answer in answers.items()
        if answer.expires_at is not None and is_past(answer.expires_at, now)
    ]
    results.sort(key=lambda item: item.expired_days, reverse=True)
    return results


def format_expiration_date(date: datetime, now: datetime | None = None) -> str:
    """Human-readable distance to a deadline."""
    now = now or utc_now()
    diff_days = _ceil_days(date - now)

    if diff_days < 0:
        return f"Expired {abs(diff_days)} days ago"
    if diff_days == 0:
        return "Expires today"
    if diff_days == 1:
        return "Expires tomorrow"
    if diff_days <= 7:
        return f"Expires in {diff_days} days"
    return date.date().isoformat()
