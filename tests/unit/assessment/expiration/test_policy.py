"""Unit tests for answer expiration policy and queries."""

from datetime import datetime, timedelta

from posture.assessment.expiration import (
    ExpirationPolicy,
    Offset,
    QuestionPolicy,
    calculate_answer_expiration,
    format_expiration_date,
    get_expired_answers,
    get_expiring_answers,
    is_answer_expired,
)
from posture.assessment.models import Answer


def make_answer(question_id: str, expires_at: datetime | None, reason: str | None = None) -> Answer:
    return Answer(question_id=question_id, value="x", expires_at=expires_at, expiration_reason=reason)


class TestCalculateAnswerExpiration:
    """Tests for the built-in policy table."""

    def test_automatic_updates_never_expire(self, now: datetime) -> None:
        """Automatic software updates need no review."""
        rule = calculate_answer_expiration("software_updates", "automatic", now)
        assert rule.expires_at is None

    def test_value_specific_offset(self, now: datetime) -> None:
        """A matched value uses its own offset and reason."""
        rule = calculate_answer_expiration("data_backup", "none", now)
        assert rule.expires_at == now + timedelta(days=3)
        assert rule.reason == "Critical: Set up backup immediately"

    def test_question_fallback(self, now: datetime) -> None:
        """An unmatched value uses the question's fallback."""
        rule = calculate_answer_expiration("password_strength", "unknown", now)
        assert rule.expires_at == now + timedelta(days=90)
        assert rule.reason == "Review passwords"

    def test_unlisted_question_uses_default(self, now: datetime) -> None:
        """Questions without a policy expire after 90 days."""
        rule = calculate_answer_expiration("screen_lock", "yes", now)
        assert rule.expires_at == now + timedelta(days=90)
        assert rule.reason == "Security practice review"

    def test_two_factor_boolean_answer(self, now: datetime) -> None:
        """Boolean and string yes answers share the long review period."""
        assert calculate_answer_expiration("two_factor_auth", True, now).expires_at == now + timedelta(
            days=180
        )
        assert calculate_answer_expiration("two_factor_auth", "no", now).expires_at == now + timedelta(
            days=7
        )

    def test_open_wifi_expires_next_day(self, now: datetime) -> None:
        """An unsecured network is re-checked after a day."""
        rule = calculate_answer_expiration("wifi_security", "none", now)
        assert rule.expires_at == now + timedelta(days=1)

    def test_unmatched_virus_scan_never_expires(self, now: datetime) -> None:
        """Virus scan answers outside the table carry no deadline."""
        assert calculate_answer_expiration("virus_scan_recent", "sometimes", now).expires_at is None


class TestExpirationPolicy:
    """Tests for custom ExpirationPolicy instances."""

    def test_custom_default_days(self, now: datetime) -> None:
        """The default review period is configurable."""
        policy = ExpirationPolicy(policies={}, default_days=30)
        assert policy.calculate("anything", "x", now).expires_at == now + timedelta(days=30)

    def test_custom_table(self, now: datetime) -> None:
        """Custom tables match values strictly."""
        policy = ExpirationPolicy(
            policies={"q": QuestionPolicy(by_value=((1, Offset(2, "two")),), fallback=Offset(None))}
        )
        assert policy.calculate("q", 1, now).expires_at == now + timedelta(days=2)
        assert policy.calculate("q", True, now).expires_at is None


class TestIsAnswerExpired:
    """Tests for is_answer_expired."""

    def test_boundary_is_not_expired(self, now: datetime) -> None:
        """An answer whose deadline equals now is still valid."""
        assert is_answer_expired(make_answer("q", now), now) is False

    def test_past_deadline_is_expired(self, now: datetime) -> None:
        """One second past the deadline is expired."""
        assert is_answer_expired(make_answer("q", now), now + timedelta(seconds=1)) is True

    def test_no_deadline_never_expires(self, now: datetime) -> None:
        """Answers without a deadline never expire."""
        assert is_answer_expired(make_answer("q", None), now + timedelta(days=10_000)) is False


class TestExpiringAndExpired:
    """Tests for the expiring and expired queries."""

    def test_expiring_within_window_sorted(self, now: datetime) -> None:
        """Answers due inside the window are listed soonest first."""
        answers = {
            "a": make_answer("a", now + timedelta(days=5), "five"),
            "b": make_answer("b", now + timedelta(days=2), "two"),
            "c": make_answer("c", now + timedelta(days=30)),
            "d": make_answer("d", None),
        }
        expiring = get_expiring_answers(answers, within_days=7, now=now)
        assert [e.question_id for e in expiring] == ["b", "a"]
        assert [e.days_until_expiry for e in expiring] == [2, 5]
        assert expiring[0].reason == "two"

    def test_partial_days_round_up(self, now: datetime) -> None:
        """Fractional days until expiry round up."""
        answers = {"a": make_answer("a", now + timedelta(hours=30))}
        assert get_expiring_answers(answers, 7, now)[0].days_until_expiry == 2

    def test_expiring_includes_already_expired(self, now: datetime) -> None:
        """Already-expired answers are part of the expiring list."""
        answers = {"a": make_answer("a", now - timedelta(days=2))}
        expiring = get_expiring_answers(answers, 7, now)
        assert [e.question_id for e in expiring] == ["a"]
        assert expiring[0].days_until_expiry == -2

    def test_expired_most_overdue_first(self, now: datetime) -> None:
        """Expired answers are ordered by how overdue they are."""
        answers = {
            "a": make_answer("a", now - timedelta(days=1)),
            "b": make_answer("b", now - timedelta(days=10)),
            "c": make_answer("c", now),
            "d": make_answer("d", None),
        }
        expired = get_expired_answers(answers, now)
        assert [e.question_id for e in expired] == ["b", "a"]
        assert [e.expired_days for e in expired] == [10, 1]

    def test_queries_do_not_mutate(self, now: datetime) -> None:
        """Expiration queries leave answers untouched."""
        answers = {"a": make_answer("a", now - timedelta(days=1))}
        snapshot = dict(answers)
        get_expired_answers(answers, now)
        get_expiring_answers(answers, 7, now)
        assert answers == snapshot


class TestFormatExpirationDate:
    """Tests for format_expiration_date."""

    def test_expired(self, now: datetime) -> None:
        assert format_expiration_date(now - timedelta(days=3), now) == "Expired 3 days ago"

    def test_today(self, now: datetime) -> None:
        assert format_expiration_date(now, now) == "Expires today"

    def test_tomorrow(self, now: datetime) -> None:
        assert format_expiration_date(now + timedelta(hours=20), now) == "Expires tomorrow"

    def test_within_a_week(self, now: datetime) -> None:
        assert format_expiration_date(now + timedelta(days=6), now) == "Expires in 6 days"

    def test_far_future_is_iso_date(self, now: datetime) -> None:
        """Dates beyond a week render as an ISO date."""
        assert format_expiration_date(now + timedelta(days=30), now) == "2024-07-01"
