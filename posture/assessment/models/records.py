"""Fact and answer records owned by the facts store."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from posture.assessment.models.base import is_past, utc_now
from posture.assessment.models.enums import FactSource
from posture.assessment.models.values import AnswerValue, FactValue


class Fact(BaseModel):
    """A valued, timestamped, optionally expiring piece of state.

    Facts are keyed uniquely; writing a key again replaces the record.
    An expired fact is treated as absent by gate evaluation even though
    the record remains until refreshed or cleared.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    key: str = Field(..., min_length=1)
    value: FactValue
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)
    source: FactSource = FactSource.MANUAL
    established_at: datetime = Field(default_factory=utc_now)
    expires_at: datetime | None = None
    category: str = "behavior"
    established_by: str | None = Field(
        default=None,
        description="Question that produced the fact, when derived from an answer",
    )

    def is_expired(self, now: datetime) -> bool:
        return is_past(self.expires_at, now)


class Answer(BaseModel):
    """The recorded response to one question."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    question_id: str = Field(..., min_length=1)
    value: AnswerValue
    option_id: str | None = None
    timestamp: datetime = Field(default_factory=utc_now)
    points_earned: int = 0
    expires_at: datetime | None = None
    expiration_reason: str | None = None

    def is_expired(self, now: datetime) -> bool:
        return is_past(self.expires_at, now)
