"""Base helpers shared by assessment models."""

from collections.abc import Callable
from datetime import UTC, datetime

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


def is_past(expires_at: datetime | None, now: datetime) -> bool:
    """Whether a deadline has passed.

    The comparison is strict: a record whose deadline equals ``now`` is
    still valid. Records without a deadline never expire.
    """
    if expires_at is None:
        return False
    return now > expires_at
