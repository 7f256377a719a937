"""Answer expiration: policy table and pure read queries."""

from posture.assessment.expiration.policy import (
    DEFAULT_EXPIRATION_DAYS,
    EXPIRATION_POLICIES,
    ExpirationPolicy,
    ExpirationRule,
    ExpiredAnswer,
    ExpiringAnswer,
    Offset,
    QuestionPolicy,
    calculate_answer_expiration,
    format_expiration_date,
    get_expired_answers,
    get_expiring_answers,
    is_answer_expired,
)

__all__ = [
    "DEFAULT_EXPIRATION_DAYS",
    "EXPIRATION_POLICIES",
    "ExpirationPolicy",
    "ExpirationRule",
    "ExpiredAnswer",
    "ExpiringAnswer",
    "Offset",
    "QuestionPolicy",
    "calculate_answer_expiration",
    "format_expiration_date",
    "get_expired_answers",
    "get_expiring_answers",
    "is_answer_expired",
]
